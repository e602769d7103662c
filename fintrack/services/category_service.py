from typing import List, Optional

import structlog
from pymongo.errors import DuplicateKeyError

from fintrack.core.exceptions import ConflictError, NotFoundError, ValidationError
from fintrack.models import CategoryResponse
from fintrack.repositories import CategoryRepository

logger = structlog.get_logger(__name__)

DUPLICATE_CATEGORY = "similar category name found"


def normalize_category_name(name: str | None) -> str:
    return (name or "").strip().lower()


class CategoryService:
    def __init__(self, repo: CategoryRepository | None = None) -> None:
        self.repo = repo or CategoryRepository()

    async def list(self, owner_id: str) -> List[CategoryResponse]:
        return await self.repo.list(owner_id)

    async def create(self, owner_id: str, name: str, desc: Optional[str] = None) -> CategoryResponse:
        """Create a category under its normalized name.

        The lookup gives the friendly error; the (user_id, name) unique index
        catches concurrent duplicates and is reported the same way.
        """
        normalized = normalize_category_name(name)
        if not normalized:
            raise ValidationError("category name is required")

        if await self.repo.find_by_name(owner_id, normalized):
            raise ConflictError(DUPLICATE_CATEGORY)
        try:
            return await self.repo.create(owner_id, normalized, desc)
        except DuplicateKeyError:
            logger.info("Category insert hit unique index", owner_id=owner_id)
            raise ConflictError(DUPLICATE_CATEGORY)

    async def delete(self, category_id: str, owner_id: str) -> None:
        if not await self.repo.delete(category_id, owner_id):
            raise NotFoundError("category not found")
