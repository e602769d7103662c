from datetime import datetime
from typing import Any, Dict, List, Optional

from pymongo import ReturnDocument

from fintrack.core.constants import EXPENSES_COLLECTION
from fintrack.models import CategoryTotal, DailyTotal, ExpenseResponse
from fintrack.models.base import as_decimal, to_decimal128, utcnow

from .base_repository import MongoRepository, to_object_id


class ExpenseRepository(MongoRepository):
    collection_name = EXPENSES_COLLECTION

    @staticmethod
    def _to_model(doc: dict) -> ExpenseResponse:
        return ExpenseResponse(
            id=str(doc["_id"]),
            user_id=doc["user_id"],
            amount=as_decimal(doc["amount"]),
            category=doc.get("category"),
            category_id=doc.get("category_id"),
            description=doc.get("description"),
            date=doc["date"],
            created_at=doc["created_at"],
        )

    async def list(self, owner_id: str) -> List[ExpenseResponse]:
        cursor = self._collection().find({"user_id": owner_id}).sort([("date", -1), ("_id", -1)])
        return await self._collect(cursor, self._to_model)

    async def get(self, expense_id: str, owner_id: str) -> Optional[ExpenseResponse]:
        oid = to_object_id(expense_id)
        if oid is None:
            return None
        doc = await self._collection().find_one({"_id": oid, "user_id": owner_id})
        if not doc:
            return None
        return self._to_model(doc)

    async def create(self, owner_id: str, fields: Dict[str, Any]) -> ExpenseResponse:
        now = utcnow()
        data = {
            "user_id": owner_id,
            "amount": to_decimal128(fields["amount"]),
            "category": fields.get("category"),
            "category_id": fields.get("category_id"),
            "description": fields.get("description"),
            "date": fields.get("date") or now,
            "created_at": now,
        }
        result = await self._collection().insert_one(data)
        data["_id"] = result.inserted_id
        return self._to_model(data)

    async def update(self, expense_id: str, owner_id: str, changes: Dict[str, Any]) -> Optional[ExpenseResponse]:
        """Apply ``changes``; returns None when the expense is missing, foreign, or would lose its category.

        Clearing one of ``category`` / ``category_id`` only matches when the
        stored document still carries the other one.
        """
        oid = to_object_id(expense_id)
        if oid is None:
            return None
        if not changes:
            return await self.get(expense_id, owner_id)

        changes = dict(changes)
        if changes.get("amount") is not None:
            changes["amount"] = to_decimal128(changes["amount"])

        query: Dict[str, Any] = {"_id": oid, "user_id": owner_id}
        for cleared, other in (("category", "category_id"), ("category_id", "category")):
            if cleared in changes and not changes[cleared] and not changes.get(other):
                query[other] = {"$nin": [None, ""]}

        doc = await self._collection().find_one_and_update(
            query,
            {"$set": changes},
            return_document=ReturnDocument.AFTER,
        )
        if not doc:
            return None
        return self._to_model(doc)

    async def delete(self, expense_id: str, owner_id: str) -> bool:
        oid = to_object_id(expense_id)
        if oid is None:
            return False
        result = await self._collection().delete_one({"_id": oid, "user_id": owner_id})
        return result.deleted_count == 1

    async def category_totals(
        self,
        owner_id: str,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> List[CategoryTotal]:
        """Sum amounts per category label, optionally within ``[start, end)``."""
        match: Dict[str, Any] = {"user_id": owner_id}
        if start is not None or end is not None:
            window: Dict[str, Any] = {}
            if start is not None:
                window["$gte"] = start
            if end is not None:
                window["$lt"] = end
            match["date"] = window

        pipeline = [
            {"$match": match},
            {"$group": {"_id": "$category", "total": {"$sum": "$amount"}, "count": {"$sum": 1}}},
            {"$sort": {"total": -1, "_id": 1}},
        ]
        totals: List[CategoryTotal] = []
        async for row in self._collection().aggregate(pipeline):
            totals.append(CategoryTotal(category=row["_id"], total=as_decimal(row["total"]), count=row["count"]))
        return totals

    async def daily_totals(self, owner_id: str, start: datetime, end: datetime) -> List[DailyTotal]:
        """Sum amounts per UTC calendar day within ``[start, end)``, oldest day first."""
        pipeline = [
            {"$match": {"user_id": owner_id, "date": {"$gte": start, "$lt": end}}},
            {
                "$group": {
                    "_id": {"$dateToString": {"format": "%Y-%m-%d", "date": "$date"}},
                    "total": {"$sum": "$amount"},
                    "count": {"$sum": 1},
                }
            },
            {"$sort": {"_id": 1}},
        ]
        totals: List[DailyTotal] = []
        async for row in self._collection().aggregate(pipeline):
            totals.append(DailyTotal(day=row["_id"], total=as_decimal(row["total"]), count=row["count"]))
        return totals
