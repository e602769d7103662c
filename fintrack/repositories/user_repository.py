from typing import Optional

from pymongo import ReturnDocument

from fintrack.core.constants import USERS_COLLECTION
from fintrack.models.base import utcnow
from fintrack.models.user import User

from .base_repository import MongoRepository, to_object_id


class UserRepository(MongoRepository):
    collection_name = USERS_COLLECTION

    @staticmethod
    def _to_model(doc: dict) -> User:
        return User(
            id=str(doc["_id"]),
            email=doc["email"],
            username=doc["username"],
            password_hash=doc["password_hash"],
            created_at=doc["created_at"],
        )

    async def get_by_email(self, email: str) -> Optional[User]:
        doc = await self._collection().find_one({"email": email})
        if not doc:
            return None
        return self._to_model(doc)

    async def get_by_id(self, user_id: str) -> Optional[User]:
        oid = to_object_id(user_id)
        if oid is None:
            return None
        doc = await self._collection().find_one({"_id": oid})
        if not doc:
            return None
        return self._to_model(doc)

    async def create_user(self, email: str, username: str, password_hash: str) -> User:
        """Insert a user. Raises ``DuplicateKeyError`` when the email is taken."""
        data = {
            "email": email,
            "username": username,
            "password_hash": password_hash,
            "created_at": utcnow(),
        }
        result = await self._collection().insert_one(data)
        data["_id"] = result.inserted_id
        return self._to_model(data)

    async def update_username(self, user_id: str, username: str) -> Optional[User]:
        oid = to_object_id(user_id)
        if oid is None:
            return None
        doc = await self._collection().find_one_and_update(
            {"_id": oid},
            {"$set": {"username": username}},
            return_document=ReturnDocument.AFTER,
        )
        if not doc:
            return None
        return self._to_model(doc)
