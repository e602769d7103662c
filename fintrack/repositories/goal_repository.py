from datetime import date, datetime, time, timezone
from decimal import Decimal
from typing import Any, Dict, List, Optional

from pymongo import ReturnDocument

from fintrack.core.constants import GOALS_COLLECTION
from fintrack.models import GOAL_STATUS_COMPLETED, GOAL_STATUS_IN_PROGRESS, GoalResponse
from fintrack.models.base import as_decimal, to_decimal128, utcnow

from .base_repository import MongoRepository, to_object_id


def _deadline_to_store(value: Optional[date]) -> Optional[datetime]:
    # BSON has no date-only type
    if value is None:
        return None
    return datetime.combine(value, time.min, tzinfo=timezone.utc)


def _deadline_from_store(value: Optional[datetime]) -> Optional[date]:
    if value is None:
        return None
    return value.date()


class GoalRepository(MongoRepository):
    """Goals collection.

    Every write that changes an amount carries the ``current_amount <= target_amount``
    bound in its filter, so a write that would break it matches nothing and
    returns None instead of being applied.
    """

    collection_name = GOALS_COLLECTION

    @staticmethod
    def _to_model(doc: dict) -> GoalResponse:
        current = as_decimal(doc.get("current_amount", 0))
        target = as_decimal(doc["target_amount"])
        completed = current >= target
        return GoalResponse(
            id=str(doc["_id"]),
            user_id=doc["user_id"],
            title=doc["title"],
            description=doc.get("description"),
            target_amount=target,
            current_amount=current,
            deadline=_deadline_from_store(doc.get("deadline")),
            is_pinned=doc.get("is_pinned", False),
            completed=completed,
            status=GOAL_STATUS_COMPLETED if completed else GOAL_STATUS_IN_PROGRESS,
            created_at=doc["created_at"],
        )

    async def list(self, owner_id: str) -> List[GoalResponse]:
        cursor = self._collection().find({"user_id": owner_id}).sort(
            [("is_pinned", -1), ("created_at", -1), ("_id", -1)]
        )
        return await self._collect(cursor, self._to_model)

    async def get(self, goal_id: str, owner_id: str) -> Optional[GoalResponse]:
        oid = to_object_id(goal_id)
        if oid is None:
            return None
        doc = await self._collection().find_one({"_id": oid, "user_id": owner_id})
        if not doc:
            return None
        return self._to_model(doc)

    async def create(self, owner_id: str, fields: Dict[str, Any]) -> GoalResponse:
        data = {
            "user_id": owner_id,
            "title": fields["title"],
            "description": fields.get("description"),
            "target_amount": to_decimal128(fields["target_amount"]),
            "current_amount": to_decimal128(fields.get("current_amount") or 0),
            "deadline": _deadline_to_store(fields.get("deadline")),
            "is_pinned": bool(fields.get("is_pinned", False)),
            "created_at": utcnow(),
        }
        result = await self._collection().insert_one(data)
        data["_id"] = result.inserted_id
        return self._to_model(data)

    async def update(self, goal_id: str, owner_id: str, changes: Dict[str, Any]) -> Optional[GoalResponse]:
        """Apply ``changes``; returns None when the goal is missing, foreign, or the bound would break."""
        oid = to_object_id(goal_id)
        if oid is None:
            return None
        if not changes:
            return await self.get(goal_id, owner_id)

        changes = dict(changes)
        if "deadline" in changes:
            changes["deadline"] = _deadline_to_store(changes["deadline"])
        for amount in ("target_amount", "current_amount"):
            if changes.get(amount) is not None:
                changes[amount] = to_decimal128(changes[amount])

        query: Dict[str, Any] = {"_id": oid, "user_id": owner_id}
        target = changes.get("target_amount")
        current = changes.get("current_amount")
        if target is not None and current is None:
            query["current_amount"] = {"$lte": target}
        elif current is not None and target is None:
            query["target_amount"] = {"$gte": current}

        doc = await self._collection().find_one_and_update(
            query,
            {"$set": changes},
            return_document=ReturnDocument.AFTER,
        )
        if not doc:
            return None
        return self._to_model(doc)

    async def add_progress(self, goal_id: str, owner_id: str, delta: Decimal) -> Optional[GoalResponse]:
        """Atomically add ``delta`` to the saved amount if the result stays within target."""
        oid = to_object_id(goal_id)
        if oid is None:
            return None
        step = to_decimal128(delta)
        doc = await self._collection().find_one_and_update(
            {
                "_id": oid,
                "user_id": owner_id,
                "$expr": {"$lte": [{"$add": ["$current_amount", step]}, "$target_amount"]},
            },
            {"$inc": {"current_amount": step}},
            return_document=ReturnDocument.AFTER,
        )
        if not doc:
            return None
        return self._to_model(doc)

    async def toggle_pin(self, goal_id: str, owner_id: str) -> Optional[GoalResponse]:
        oid = to_object_id(goal_id)
        if oid is None:
            return None
        doc = await self._collection().find_one_and_update(
            {"_id": oid, "user_id": owner_id},
            [{"$set": {"is_pinned": {"$not": ["$is_pinned"]}}}],
            return_document=ReturnDocument.AFTER,
        )
        if not doc:
            return None
        return self._to_model(doc)

    async def delete(self, goal_id: str, owner_id: str) -> bool:
        oid = to_object_id(goal_id)
        if oid is None:
            return False
        result = await self._collection().delete_one({"_id": oid, "user_id": owner_id})
        return result.deleted_count == 1
