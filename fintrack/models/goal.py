"""Goal request/response models."""

from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from pydantic import Field, model_validator

from .base import ApiModel, Money, NonBlankStr, RequestModel

GOAL_STATUS_COMPLETED = "completed"
GOAL_STATUS_IN_PROGRESS = "in_progress"


class GoalCreateRequest(RequestModel):
    user_id: Optional[str] = Field(None, description="Owner id; must match the authenticated caller")
    title: NonBlankStr
    description: Optional[str] = None
    target_amount: Money = Field(..., gt=0)
    current_amount: Money = Field(Decimal("0"), ge=0)
    deadline: Optional[date] = None
    is_pinned: bool = False

    @model_validator(mode="after")
    def _within_target(self) -> "GoalCreateRequest":
        if self.current_amount > self.target_amount:
            raise ValueError("current amount exceeds target")
        return self


class GoalUpdateRequest(RequestModel):
    """Partial update. When both amounts are given they must satisfy current <= target."""

    title: Optional[NonBlankStr] = None
    description: Optional[str] = None
    target_amount: Optional[Money] = Field(None, gt=0)
    current_amount: Optional[Money] = Field(None, ge=0)
    deadline: Optional[date] = None
    is_pinned: Optional[bool] = None

    @model_validator(mode="after")
    def _within_target(self) -> "GoalUpdateRequest":
        if (
            self.current_amount is not None
            and self.target_amount is not None
            and self.current_amount > self.target_amount
        ):
            raise ValueError("current amount exceeds target")
        return self


class GoalProgressRequest(RequestModel):
    amount: Money


class GoalResponse(ApiModel):
    id: str
    user_id: str
    title: str
    description: Optional[str] = None
    target_amount: Money
    current_amount: Money
    deadline: Optional[date] = None
    is_pinned: bool = False
    completed: bool
    status: str
    created_at: datetime
