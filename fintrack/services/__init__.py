from .account_service import AccountService
from .category_service import CategoryService
from .expense_service import ExpenseService
from .goal_service import GoalService

__all__ = ["AccountService", "CategoryService", "ExpenseService", "GoalService"]
