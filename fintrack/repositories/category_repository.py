from typing import List, Optional

from fintrack.core.constants import CATEGORIES_COLLECTION
from fintrack.models import CategoryResponse
from fintrack.models.base import utcnow

from .base_repository import MongoRepository, to_object_id


class CategoryRepository(MongoRepository):
    collection_name = CATEGORIES_COLLECTION

    @staticmethod
    def _to_model(doc: dict) -> CategoryResponse:
        return CategoryResponse(
            id=str(doc["_id"]),
            user_id=doc["user_id"],
            name=doc["name"],
            desc=doc.get("desc"),
            created_at=doc["created_at"],
        )

    async def list(self, owner_id: str) -> List[CategoryResponse]:
        cursor = self._collection().find({"user_id": owner_id}).sort("name", 1)
        return await self._collect(cursor, self._to_model)

    async def get(self, category_id: str, owner_id: str) -> Optional[CategoryResponse]:
        oid = to_object_id(category_id)
        if oid is None:
            return None
        doc = await self._collection().find_one({"_id": oid, "user_id": owner_id})
        if not doc:
            return None
        return self._to_model(doc)

    async def find_by_name(self, owner_id: str, name: str) -> Optional[CategoryResponse]:
        doc = await self._collection().find_one({"user_id": owner_id, "name": name})
        if not doc:
            return None
        return self._to_model(doc)

    async def create(self, owner_id: str, name: str, desc: Optional[str] = None) -> CategoryResponse:
        """Insert a category. Raises ``DuplicateKeyError`` on a (user_id, name) collision."""
        data = {"user_id": owner_id, "name": name, "desc": desc, "created_at": utcnow()}
        result = await self._collection().insert_one(data)
        data["_id"] = result.inserted_id
        return self._to_model(data)

    async def delete(self, category_id: str, owner_id: str) -> bool:
        oid = to_object_id(category_id)
        if oid is None:
            return False
        result = await self._collection().delete_one({"_id": oid, "user_id": owner_id})
        return result.deleted_count == 1
