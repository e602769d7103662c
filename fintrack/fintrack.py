"""FinTrack Service - personal finance tracker backend (accounts, categories, expenses, goals)."""

from typing import List, Optional

from fastapi import Depends, Query
from fastapi.middleware.cors import CORSMiddleware

from fintrack.core import ValidationError, get_fintrack_config
from fintrack.core.auth_middleware import IdentityMiddleware
from fintrack.core.request_logging import RequestLoggingMiddleware
from fintrack.core.service import Service, current_user_id
from fintrack.core.types import Scope
from fintrack.db import close_db, initialize_db
from fintrack.models import (
    # Auth
    LoginPayload,
    LoginResponse,
    ProfileDetail,
    ProfileUpdatePayload,
    ProfileUpdateResponse,
    RegisterPayload,
    UserProfile,
    # Categories
    CategoryCreateRequest,
    CategoryResponse,
    # Expenses
    ExpenseCreateRequest,
    ExpenseResponse,
    ExpenseSummary,
    ExpenseUpdateRequest,
    # Goals
    GoalCreateRequest,
    GoalProgressRequest,
    GoalResponse,
    GoalUpdateRequest,
)
from fintrack.repositories import CategoryRepository, ExpenseRepository, GoalRepository, UserRepository
from fintrack.services import AccountService, CategoryService, ExpenseService, GoalService


def _as_origin_list(origins) -> List[str]:
    # FINTRACK__CORS_ORIGINS may be a JSON list or a comma-separated string
    if isinstance(origins, str):
        return [o.strip() for o in origins.split(",") if o.strip()]
    return list(origins)


def _check_owner(claimed: Optional[str], caller_id: str) -> None:
    """A client-supplied owner id must match the token's user."""
    if claimed is not None and claimed != caller_id:
        raise ValidationError("userId does not match the authenticated user")


class FinTrackService(Service):
    """FinTrack service exposing auth and per-user finance records over HTTP."""

    def __init__(
        self,
        *,
        url: str | None = None,
        enable_db: bool = True,
        **kwargs,
    ):
        """Initialize FinTrackService.

        Args:
            url: Bind URL; defaults to FINTRACK__URL.
            enable_db: Connect to MongoDB and create indexes at startup.
        """
        self._config = get_fintrack_config()
        cfg = self._config.FINTRACK

        if url is None:
            url = cfg.URL

        kwargs.setdefault("log_dir", cfg.LOG_DIR)
        kwargs.setdefault("log_level", cfg.LOG_LEVEL)
        kwargs.setdefault("log_json", cfg.LOG_JSON)

        super().__init__(
            url=url,
            name="FinTrack",
            summary="FinTrack Backend Service",
            description="Accounts, categories, expenses and savings goals",
            **kwargs,
        )

        self.db_enabled = enable_db

        # Repositories
        self._user_repo: Optional[UserRepository] = None
        self._category_repo: Optional[CategoryRepository] = None
        self._expense_repo: Optional[ExpenseRepository] = None
        self._goal_repo: Optional[GoalRepository] = None

        # Middleware (last added runs first)
        self.app.add_middleware(IdentityMiddleware, logger=self.logger)
        self.app.add_middleware(
            CORSMiddleware,
            allow_origins=_as_origin_list(cfg.CORS_ORIGINS),
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )
        self.app.add_middleware(
            RequestLoggingMiddleware,
            service_name=self.name,
            add_request_id_header=True,
            logger=self.logger,
        )

        # Register endpoints
        self._register_auth_endpoints()
        self._register_profile_endpoints()
        self._register_category_endpoints()
        self._register_expense_endpoints()
        self._register_goal_endpoints()
        self.add_endpoint("/health", self.health, methods=["GET"])

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    async def startup(self) -> None:
        """Connect to MongoDB and create indexes; any failure aborts startup."""
        if not self.db_enabled:
            return
        try:
            await initialize_db()
        except Exception:
            self.logger.exception("Database initialization failed", mongo_db=self._config.FINTRACK.MONGO_DB)
            raise
        self.logger.info("Database initialized", mongo_db=self._config.FINTRACK.MONGO_DB)

    async def shutdown_cleanup(self) -> None:
        if self.db_enabled:
            close_db()

    # -------------------------------------------------------------------------
    # Lazy repo accessors (created during request handling, inside live loop)
    # -------------------------------------------------------------------------

    @property
    def user_repo(self) -> UserRepository:
        if self._user_repo is None:
            self._user_repo = UserRepository()
        return self._user_repo

    @property
    def category_repo(self) -> CategoryRepository:
        if self._category_repo is None:
            self._category_repo = CategoryRepository()
        return self._category_repo

    @property
    def expense_repo(self) -> ExpenseRepository:
        if self._expense_repo is None:
            self._expense_repo = ExpenseRepository()
        return self._expense_repo

    @property
    def goal_repo(self) -> GoalRepository:
        if self._goal_repo is None:
            self._goal_repo = GoalRepository()
        return self._goal_repo

    @property
    def accounts(self) -> AccountService:
        return AccountService(self.user_repo)

    @property
    def categories(self) -> CategoryService:
        return CategoryService(self.category_repo)

    @property
    def expenses(self) -> ExpenseService:
        return ExpenseService(self.expense_repo, self.category_repo)

    @property
    def goals(self) -> GoalService:
        return GoalService(self.goal_repo)

    # -------------------------------------------------------------------------
    # Endpoint registration
    # -------------------------------------------------------------------------

    def _register_auth_endpoints(self) -> None:
        self.add_endpoint("/signup", self.signup, methods=["POST"])
        self.add_endpoint("/login", self.login, methods=["POST"])

    def _register_profile_endpoints(self) -> None:
        self.add_endpoint("/api/profiles/{id}", self.get_profile, methods=["GET"], scope=Scope.AUTHENTICATED)
        self.add_endpoint("/api/profiles/{id}", self.update_profile, methods=["PUT"], scope=Scope.AUTHENTICATED)

    def _register_category_endpoints(self) -> None:
        self.add_endpoint("/api/categories", self.list_categories, methods=["GET"], scope=Scope.AUTHENTICATED)
        self.add_endpoint("/api/categories", self.create_category, methods=["POST"], scope=Scope.AUTHENTICATED)
        self.add_endpoint(
            "/api/categories/{id}", self.delete_category, methods=["DELETE"], scope=Scope.AUTHENTICATED
        )

    def _register_expense_endpoints(self) -> None:
        self.add_endpoint("/api/expenses", self.list_expenses, methods=["GET"], scope=Scope.AUTHENTICATED)
        self.add_endpoint("/api/expenses", self.create_expense, methods=["POST"], scope=Scope.AUTHENTICATED)
        self.add_endpoint(
            "/api/expenses/summary", self.expense_summary, methods=["GET"], scope=Scope.AUTHENTICATED
        )
        self.add_endpoint("/api/expenses/{id}", self.update_expense, methods=["PUT"], scope=Scope.AUTHENTICATED)
        self.add_endpoint("/api/expenses/{id}", self.delete_expense, methods=["DELETE"], scope=Scope.AUTHENTICATED)

    def _register_goal_endpoints(self) -> None:
        self.add_endpoint("/api/goals", self.list_goals, methods=["GET"], scope=Scope.AUTHENTICATED)
        self.add_endpoint("/api/goals", self.create_goal, methods=["POST"], scope=Scope.AUTHENTICATED)
        self.add_endpoint("/api/goals/{id}", self.update_goal, methods=["PUT"], scope=Scope.AUTHENTICATED)
        self.add_endpoint("/api/goals/{id}", self.delete_goal, methods=["DELETE"], scope=Scope.AUTHENTICATED)
        self.add_endpoint(
            "/api/goals/{id}/progress", self.add_goal_progress, methods=["POST"], scope=Scope.AUTHENTICATED
        )
        self.add_endpoint("/api/goals/{id}/pin", self.toggle_goal_pin, methods=["POST"], scope=Scope.AUTHENTICATED)

    # -------------------------------------------------------------------------
    # Auth handlers
    # -------------------------------------------------------------------------

    async def signup(self, payload: RegisterPayload) -> UserProfile:
        return await self.accounts.register(payload.email, payload.username, payload.password)

    async def login(self, payload: LoginPayload) -> LoginResponse:
        return await self.accounts.authenticate(payload.email, payload.password)

    async def get_profile(self, id: str, caller_id: str = Depends(current_user_id)) -> ProfileDetail:
        return await self.accounts.get_profile(id, caller_id)

    async def update_profile(
        self,
        id: str,
        payload: ProfileUpdatePayload,
        caller_id: str = Depends(current_user_id),
    ) -> ProfileUpdateResponse:
        return await self.accounts.update_profile(id, caller_id, payload.username)

    # -------------------------------------------------------------------------
    # Category handlers
    # -------------------------------------------------------------------------

    async def list_categories(
        self,
        user_id: Optional[str] = Query(None, alias="userId"),
        caller_id: str = Depends(current_user_id),
    ) -> List[CategoryResponse]:
        _check_owner(user_id, caller_id)
        return await self.categories.list(caller_id)

    async def create_category(
        self,
        payload: CategoryCreateRequest,
        caller_id: str = Depends(current_user_id),
    ) -> CategoryResponse:
        _check_owner(payload.user_id, caller_id)
        return await self.categories.create(caller_id, payload.name, payload.desc)

    async def delete_category(self, id: str, caller_id: str = Depends(current_user_id)) -> None:
        await self.categories.delete(id, caller_id)

    # -------------------------------------------------------------------------
    # Expense handlers
    # -------------------------------------------------------------------------

    async def list_expenses(
        self,
        user_id: Optional[str] = Query(None, alias="userId"),
        caller_id: str = Depends(current_user_id),
    ) -> List[ExpenseResponse]:
        _check_owner(user_id, caller_id)
        return await self.expenses.list(caller_id)

    async def expense_summary(
        self,
        year: Optional[int] = Query(None, ge=1970, le=9999),
        month: Optional[int] = Query(None, ge=1, le=12),
        caller_id: str = Depends(current_user_id),
    ) -> ExpenseSummary:
        return await self.expenses.summary(caller_id, year=year, month=month)

    async def create_expense(
        self,
        payload: ExpenseCreateRequest,
        caller_id: str = Depends(current_user_id),
    ) -> ExpenseResponse:
        _check_owner(payload.user_id, caller_id)
        return await self.expenses.create(caller_id, payload)

    async def update_expense(
        self,
        id: str,
        payload: ExpenseUpdateRequest,
        caller_id: str = Depends(current_user_id),
    ) -> ExpenseResponse:
        return await self.expenses.update(id, caller_id, payload)

    async def delete_expense(self, id: str, caller_id: str = Depends(current_user_id)) -> None:
        await self.expenses.delete(id, caller_id)

    # -------------------------------------------------------------------------
    # Goal handlers
    # -------------------------------------------------------------------------

    async def list_goals(
        self,
        user_id: Optional[str] = Query(None, alias="userId"),
        caller_id: str = Depends(current_user_id),
    ) -> List[GoalResponse]:
        _check_owner(user_id, caller_id)
        return await self.goals.list(caller_id)

    async def create_goal(
        self,
        payload: GoalCreateRequest,
        caller_id: str = Depends(current_user_id),
    ) -> GoalResponse:
        _check_owner(payload.user_id, caller_id)
        return await self.goals.create(caller_id, payload)

    async def update_goal(
        self,
        id: str,
        payload: GoalUpdateRequest,
        caller_id: str = Depends(current_user_id),
    ) -> GoalResponse:
        return await self.goals.update(id, caller_id, payload)

    async def add_goal_progress(
        self,
        id: str,
        payload: GoalProgressRequest,
        caller_id: str = Depends(current_user_id),
    ) -> GoalResponse:
        return await self.goals.add_progress(id, caller_id, payload.amount)

    async def toggle_goal_pin(self, id: str, caller_id: str = Depends(current_user_id)) -> GoalResponse:
        return await self.goals.toggle_pin(id, caller_id)

    async def delete_goal(self, id: str, caller_id: str = Depends(current_user_id)) -> None:
        await self.goals.delete(id, caller_id)

    # -------------------------------------------------------------------------
    # Health
    # -------------------------------------------------------------------------

    async def health(self) -> bool:
        return True
