from decimal import Decimal
from typing import List

import structlog

from fintrack.core.exceptions import NotFoundError, ValidationError
from fintrack.models import GoalCreateRequest, GoalResponse, GoalUpdateRequest
from fintrack.models.base import as_decimal
from fintrack.repositories import GoalRepository

logger = structlog.get_logger(__name__)

EXCEEDS_TARGET = "exceeds target"


class GoalService:
    def __init__(self, repo: GoalRepository | None = None) -> None:
        self.repo = repo or GoalRepository()

    async def _not_found_or_exceeds(self, goal_id: str, owner_id: str) -> ValidationError | NotFoundError:
        # A bounded write matched nothing: either the goal is gone or the bound held it back.
        if await self.repo.get(goal_id, owner_id) is None:
            return NotFoundError("goal not found")
        return ValidationError(EXCEEDS_TARGET)

    async def list(self, owner_id: str) -> List[GoalResponse]:
        return await self.repo.list(owner_id)

    async def create(self, owner_id: str, payload: GoalCreateRequest) -> GoalResponse:
        if payload.current_amount > payload.target_amount:
            raise ValidationError(EXCEEDS_TARGET)
        return await self.repo.create(owner_id, payload.model_dump(exclude={"user_id"}))

    async def update(self, goal_id: str, owner_id: str, patch: GoalUpdateRequest) -> GoalResponse:
        changes = patch.model_dump(exclude_unset=True)
        for required in ("title", "target_amount", "current_amount", "is_pinned"):
            if required in changes and changes[required] is None:
                raise ValidationError(f"{required} cannot be cleared")

        goal = await self.repo.update(goal_id, owner_id, changes)
        if goal is None:
            raise await self._not_found_or_exceeds(goal_id, owner_id)
        return goal

    async def add_progress(self, goal_id: str, owner_id: str, delta: Decimal | float) -> GoalResponse:
        """Add ``delta`` to the saved amount in one conditional write; never clamps."""
        if delta is None or delta <= 0:
            raise ValidationError("amount must be positive")
        delta = as_decimal(delta)

        goal = await self.repo.add_progress(goal_id, owner_id, delta)
        if goal is None:
            error = await self._not_found_or_exceeds(goal_id, owner_id)
            logger.info("Goal progress rejected", goal_id=goal_id, reason=error.message)
            raise error
        return goal

    async def toggle_pin(self, goal_id: str, owner_id: str) -> GoalResponse:
        goal = await self.repo.toggle_pin(goal_id, owner_id)
        if goal is None:
            raise NotFoundError("goal not found")
        return goal

    async def delete(self, goal_id: str, owner_id: str) -> None:
        if not await self.repo.delete(goal_id, owner_id):
            raise NotFoundError("goal not found")
