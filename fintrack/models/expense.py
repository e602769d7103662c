"""Expense request/response models."""

from datetime import datetime
from typing import List, Optional

from pydantic import AliasChoices, Field, field_validator, model_validator

from .base import ApiModel, Money, NonBlankStr, RequestModel, as_utc_datetime

_CATEGORY_ID_ALIASES = AliasChoices("category_id", "categoryId", "cat_id", "catId")


class ExpenseCreateRequest(RequestModel):
    """Request model for recording an expense.

    At least one of ``category`` (free-text label) or ``category_id`` (one of
    the caller's categories, also accepted as ``cat_id``) is required.
    """

    user_id: Optional[str] = Field(None, description="Owner id; must match the authenticated caller")
    amount: Money = Field(..., gt=0, description="Amount spent")
    category: Optional[NonBlankStr] = Field(None, description="Free-text category label")
    category_id: Optional[str] = Field(None, validation_alias=_CATEGORY_ID_ALIASES)
    description: Optional[str] = None
    date: Optional[datetime] = Field(None, description="Spending date; defaults to now")

    @field_validator("date", mode="before")
    @classmethod
    def _normalize_date(cls, value):
        return as_utc_datetime(value)

    @model_validator(mode="after")
    def _require_category(self) -> "ExpenseCreateRequest":
        if not self.category and not self.category_id:
            raise ValueError("category or cat_id is required")
        return self


class ExpenseUpdateRequest(RequestModel):
    """Partial update; only the fields present are changed.

    ``category`` and ``category_id`` may be cleared one at a time, but the
    expense must keep at least one of them.
    """

    amount: Optional[Money] = Field(None, gt=0)
    category: Optional[NonBlankStr] = None
    category_id: Optional[str] = Field(None, validation_alias=_CATEGORY_ID_ALIASES)
    description: Optional[str] = None
    date: Optional[datetime] = None

    @field_validator("date", mode="before")
    @classmethod
    def _normalize_date(cls, value):
        return as_utc_datetime(value)

    @model_validator(mode="after")
    def _keep_category(self) -> "ExpenseUpdateRequest":
        fields = self.model_fields_set
        if {"category", "category_id"} <= fields and not self.category and not self.category_id:
            raise ValueError("category or cat_id is required")
        return self


class ExpenseResponse(ApiModel):
    id: str
    user_id: str
    amount: Money
    category: Optional[str] = None
    category_id: Optional[str] = None
    description: Optional[str] = None
    date: datetime
    created_at: datetime


class CategoryTotal(ApiModel):
    category: Optional[str] = None
    total: Money
    count: int


class DailyTotal(ApiModel):
    """Spending on one UTC calendar day."""

    day: str = Field(..., description="YYYY-MM-DD")
    total: Money
    count: int


class ExpenseSummary(ApiModel):
    """Spending totals for the dashboard: all-time plus the selected month, broken down per day."""

    total: Money
    count: int
    year: int
    month: int
    month_total: Money
    month_count: int
    by_category: List[CategoryTotal] = Field(default_factory=list)
    by_day: List[DailyTotal] = Field(default_factory=list)
