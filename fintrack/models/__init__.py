from .auth import (
    LoginPayload,
    LoginResponse,
    ProfileDetail,
    ProfileUpdatePayload,
    ProfileUpdateResponse,
    RegisterPayload,
    UserProfile,
)
from .category import CategoryCreateRequest, CategoryResponse
from .expense import (
    CategoryTotal,
    DailyTotal,
    ExpenseCreateRequest,
    ExpenseResponse,
    ExpenseSummary,
    ExpenseUpdateRequest,
)
from .goal import (
    GOAL_STATUS_COMPLETED,
    GOAL_STATUS_IN_PROGRESS,
    GoalCreateRequest,
    GoalProgressRequest,
    GoalResponse,
    GoalUpdateRequest,
)
from .user import User

__all__ = [
    "LoginPayload",
    "LoginResponse",
    "ProfileDetail",
    "ProfileUpdatePayload",
    "ProfileUpdateResponse",
    "RegisterPayload",
    "UserProfile",
    "CategoryCreateRequest",
    "CategoryResponse",
    "CategoryTotal",
    "DailyTotal",
    "ExpenseCreateRequest",
    "ExpenseResponse",
    "ExpenseSummary",
    "ExpenseUpdateRequest",
    "GOAL_STATUS_COMPLETED",
    "GOAL_STATUS_IN_PROGRESS",
    "GoalCreateRequest",
    "GoalProgressRequest",
    "GoalResponse",
    "GoalUpdateRequest",
    "User",
]
