"""In-memory stand-ins for the FinTrack repositories.

They keep the same contracts as the motor-backed repositories: owner-scoped
lookups, ``DuplicateKeyError`` on unique-index collisions and None when a
bounded goal write would break ``current_amount <= target_amount`` or an
expense patch would leave no category reference. Amounts are ``Decimal``.
"""

from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict, List, Optional

import pytest
from bson import ObjectId
from pymongo.errors import DuplicateKeyError

from fintrack.models import (
    GOAL_STATUS_COMPLETED,
    GOAL_STATUS_IN_PROGRESS,
    CategoryResponse,
    CategoryTotal,
    DailyTotal,
    ExpenseResponse,
    GoalResponse,
)
from fintrack.models.user import User


def _now() -> datetime:
    return datetime.now(timezone.utc)


class FakeUserRepository:
    def __init__(self):
        self.users: Dict[str, User] = {}

    async def get_by_email(self, email: str) -> Optional[User]:
        return next((u for u in self.users.values() if u.email == email), None)

    async def get_by_id(self, user_id: str) -> Optional[User]:
        return self.users.get(user_id)

    async def create_user(self, email: str, username: str, password_hash: str) -> User:
        if any(u.email == email for u in self.users.values()):
            raise DuplicateKeyError("E11000 duplicate key error: users.email")
        user = User(
            id=str(ObjectId()),
            email=email,
            username=username,
            password_hash=password_hash,
            created_at=_now(),
        )
        self.users[user.id] = user
        return user

    async def update_username(self, user_id: str, username: str) -> Optional[User]:
        user = self.users.get(user_id)
        if user is None:
            return None
        user.username = username
        return user


class FakeCategoryRepository:
    def __init__(self):
        self.items: Dict[str, CategoryResponse] = {}

    async def list(self, owner_id: str) -> List[CategoryResponse]:
        return sorted((c for c in self.items.values() if c.user_id == owner_id), key=lambda c: c.name)

    async def get(self, category_id: str, owner_id: str) -> Optional[CategoryResponse]:
        category = self.items.get(category_id)
        if category is None or category.user_id != owner_id:
            return None
        return category

    async def find_by_name(self, owner_id: str, name: str) -> Optional[CategoryResponse]:
        return next((c for c in self.items.values() if c.user_id == owner_id and c.name == name), None)

    async def create(self, owner_id: str, name: str, desc: Optional[str] = None) -> CategoryResponse:
        if await self.find_by_name(owner_id, name):
            raise DuplicateKeyError("E11000 duplicate key error: categories.user_id_1_name_1")
        category = CategoryResponse(id=str(ObjectId()), user_id=owner_id, name=name, desc=desc, created_at=_now())
        self.items[category.id] = category
        return category

    async def delete(self, category_id: str, owner_id: str) -> bool:
        if await self.get(category_id, owner_id) is None:
            return False
        del self.items[category_id]
        return True


class FakeExpenseRepository:
    def __init__(self):
        self.items: Dict[str, ExpenseResponse] = {}

    async def list(self, owner_id: str) -> List[ExpenseResponse]:
        owned = [e for e in self.items.values() if e.user_id == owner_id]
        return sorted(owned, key=lambda e: e.date, reverse=True)

    async def get(self, expense_id: str, owner_id: str) -> Optional[ExpenseResponse]:
        expense = self.items.get(expense_id)
        if expense is None or expense.user_id != owner_id:
            return None
        return expense

    async def create(self, owner_id: str, fields: Dict[str, Any]) -> ExpenseResponse:
        now = _now()
        expense = ExpenseResponse(
            id=str(ObjectId()),
            user_id=owner_id,
            amount=fields["amount"],
            category=fields.get("category"),
            category_id=fields.get("category_id"),
            description=fields.get("description"),
            date=fields.get("date") or now,
            created_at=now,
        )
        self.items[expense.id] = expense
        return expense

    async def update(self, expense_id: str, owner_id: str, changes: Dict[str, Any]) -> Optional[ExpenseResponse]:
        expense = await self.get(expense_id, owner_id)
        if expense is None:
            return None
        updated = expense.model_copy(update=changes)
        if not updated.category and not updated.category_id:
            return None
        self.items[expense_id] = updated
        return updated

    async def delete(self, expense_id: str, owner_id: str) -> bool:
        if await self.get(expense_id, owner_id) is None:
            return False
        del self.items[expense_id]
        return True

    async def category_totals(self, owner_id: str, start=None, end=None) -> List[CategoryTotal]:
        totals: Dict[Optional[str], CategoryTotal] = {}
        for expense in self.items.values():
            if expense.user_id != owner_id:
                continue
            if start is not None and expense.date < start:
                continue
            if end is not None and expense.date >= end:
                continue
            row = totals.setdefault(expense.category, CategoryTotal(category=expense.category, total=Decimal("0"), count=0))
            row.total += expense.amount
            row.count += 1
        return sorted(totals.values(), key=lambda t: -t.total)

    async def daily_totals(self, owner_id: str, start: datetime, end: datetime) -> List[DailyTotal]:
        totals: Dict[str, DailyTotal] = {}
        for expense in self.items.values():
            if expense.user_id != owner_id or not start <= expense.date < end:
                continue
            day = expense.date.astimezone(timezone.utc).strftime("%Y-%m-%d")
            row = totals.setdefault(day, DailyTotal(day=day, total=Decimal("0"), count=0))
            row.total += expense.amount
            row.count += 1
        return [totals[day] for day in sorted(totals)]


class FakeGoalRepository:
    def __init__(self):
        self.docs: Dict[str, Dict[str, Any]] = {}

    @staticmethod
    def _to_model(doc: Dict[str, Any]) -> GoalResponse:
        completed = doc["current_amount"] >= doc["target_amount"]
        return GoalResponse(
            **doc,
            completed=completed,
            status=GOAL_STATUS_COMPLETED if completed else GOAL_STATUS_IN_PROGRESS,
        )

    def _owned(self, goal_id: str, owner_id: str) -> Optional[Dict[str, Any]]:
        doc = self.docs.get(goal_id)
        if doc is None or doc["user_id"] != owner_id:
            return None
        return doc

    async def list(self, owner_id: str) -> List[GoalResponse]:
        owned = [d for d in self.docs.values() if d["user_id"] == owner_id]
        owned.sort(key=lambda d: (d["is_pinned"], d["created_at"]), reverse=True)
        return [self._to_model(d) for d in owned]

    async def get(self, goal_id: str, owner_id: str) -> Optional[GoalResponse]:
        doc = self._owned(goal_id, owner_id)
        return self._to_model(doc) if doc else None

    async def create(self, owner_id: str, fields: Dict[str, Any]) -> GoalResponse:
        doc = {
            "id": str(ObjectId()),
            "user_id": owner_id,
            "title": fields["title"],
            "description": fields.get("description"),
            "target_amount": fields["target_amount"],
            "current_amount": fields.get("current_amount") or Decimal("0"),
            "deadline": fields.get("deadline"),
            "is_pinned": bool(fields.get("is_pinned", False)),
            "created_at": _now(),
        }
        self.docs[doc["id"]] = doc
        return self._to_model(doc)

    async def update(self, goal_id: str, owner_id: str, changes: Dict[str, Any]) -> Optional[GoalResponse]:
        doc = self._owned(goal_id, owner_id)
        if doc is None:
            return None
        merged = {**doc, **changes}
        if merged["current_amount"] > merged["target_amount"]:
            return None
        doc.update(changes)
        return self._to_model(doc)

    async def add_progress(self, goal_id: str, owner_id: str, delta: Decimal) -> Optional[GoalResponse]:
        doc = self._owned(goal_id, owner_id)
        if doc is None or doc["current_amount"] + delta > doc["target_amount"]:
            return None
        doc["current_amount"] += delta
        return self._to_model(doc)

    async def toggle_pin(self, goal_id: str, owner_id: str) -> Optional[GoalResponse]:
        doc = self._owned(goal_id, owner_id)
        if doc is None:
            return None
        doc["is_pinned"] = not doc["is_pinned"]
        return self._to_model(doc)

    async def delete(self, goal_id: str, owner_id: str) -> bool:
        if self._owned(goal_id, owner_id) is None:
            return False
        del self.docs[goal_id]
        return True


@pytest.fixture
def user_repo() -> FakeUserRepository:
    return FakeUserRepository()


@pytest.fixture
def category_repo() -> FakeCategoryRepository:
    return FakeCategoryRepository()


@pytest.fixture
def expense_repo() -> FakeExpenseRepository:
    return FakeExpenseRepository()


@pytest.fixture
def goal_repo() -> FakeGoalRepository:
    return FakeGoalRepository()
