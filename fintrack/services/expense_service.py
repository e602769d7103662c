from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from fintrack.core.exceptions import NotFoundError, ValidationError
from fintrack.models import ExpenseCreateRequest, ExpenseResponse, ExpenseSummary, ExpenseUpdateRequest
from fintrack.models.base import utcnow
from fintrack.repositories import CategoryRepository, ExpenseRepository

CATEGORY_REQUIRED = "category or cat_id is required"


def month_window(year: int, month: int) -> tuple[datetime, datetime]:
    """Return ``[start, end)`` of a calendar month in UTC."""
    if not 1 <= month <= 12:
        raise ValidationError("month must be between 1 and 12")
    start = datetime(year, month, 1, tzinfo=timezone.utc)
    if month == 12:
        end = datetime(year + 1, 1, 1, tzinfo=timezone.utc)
    else:
        end = datetime(year, month + 1, 1, tzinfo=timezone.utc)
    return start, end


class ExpenseService:
    def __init__(
        self,
        repo: ExpenseRepository | None = None,
        category_repo: CategoryRepository | None = None,
    ) -> None:
        self.repo = repo or ExpenseRepository()
        self.category_repo = category_repo or CategoryRepository()

    async def _resolve_category(self, owner_id: str, category_id: str) -> str:
        """Return the owner's category name, or fail when the id is not one of theirs."""
        category = await self.category_repo.get(category_id, owner_id)
        if not category:
            raise ValidationError("unknown category")
        return category.name

    async def list(self, owner_id: str) -> List[ExpenseResponse]:
        return await self.repo.list(owner_id)

    async def create(self, owner_id: str, payload: ExpenseCreateRequest) -> ExpenseResponse:
        fields: Dict[str, Any] = payload.model_dump(exclude={"user_id"})
        if fields.get("amount") is None or fields["amount"] <= 0:
            raise ValidationError("amount must be positive")
        if payload.category_id:
            name = await self._resolve_category(owner_id, payload.category_id)
            fields["category"] = fields.get("category") or name
        elif not (payload.category or "").strip():
            raise ValidationError(CATEGORY_REQUIRED)
        return await self.repo.create(owner_id, fields)

    async def update(self, expense_id: str, owner_id: str, patch: ExpenseUpdateRequest) -> ExpenseResponse:
        changes = patch.model_dump(exclude_unset=True)
        if "amount" in changes and (changes["amount"] is None or changes["amount"] <= 0):
            raise ValidationError("amount must be positive")
        if changes.get("category_id"):
            name = await self._resolve_category(owner_id, changes["category_id"])
            if not changes.get("category"):
                changes["category"] = name
        if "date" in changes and changes["date"] is None:
            raise ValidationError("date cannot be cleared")
        if {"category", "category_id"} <= changes.keys() and not changes["category"] and not changes["category_id"]:
            raise ValidationError(CATEGORY_REQUIRED)

        expense = await self.repo.update(expense_id, owner_id, changes)
        if not expense:
            # The write also misses when it would leave the expense with no category.
            if await self.repo.get(expense_id, owner_id) is None:
                raise NotFoundError("expense not found")
            raise ValidationError(CATEGORY_REQUIRED)
        return expense

    async def delete(self, expense_id: str, owner_id: str) -> None:
        if not await self.repo.delete(expense_id, owner_id):
            raise NotFoundError("expense not found")

    async def summary(self, owner_id: str, year: Optional[int] = None, month: Optional[int] = None) -> ExpenseSummary:
        """All-time totals per category plus the total and per-day series for one month (the current month by default)."""
        now = utcnow()
        year = year or now.year
        month = month or now.month
        start, end = month_window(year, month)

        by_category = await self.repo.category_totals(owner_id)
        in_month = await self.repo.category_totals(owner_id, start=start, end=end)
        by_day = await self.repo.daily_totals(owner_id, start, end)
        return ExpenseSummary(
            total=round(sum(t.total for t in by_category), 2),
            count=sum(t.count for t in by_category),
            year=year,
            month=month,
            month_total=round(sum(t.total for t in in_month), 2),
            month_count=sum(t.count for t in in_month),
            by_category=by_category,
            by_day=by_day,
        )
