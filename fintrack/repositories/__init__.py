from .category_repository import CategoryRepository
from .expense_repository import ExpenseRepository
from .goal_repository import GoalRepository
from .user_repository import UserRepository

__all__ = [
    "CategoryRepository",
    "ExpenseRepository",
    "GoalRepository",
    "UserRepository",
]
