from typing import Any, List, Optional

from bson import ObjectId
from bson.errors import InvalidId

from fintrack.db import get_db


def to_object_id(value: str) -> Optional[ObjectId]:
    """Parse a record id; malformed ids resolve to None so callers report not-found."""
    try:
        return ObjectId(value)
    except (InvalidId, TypeError):
        return None


class MongoRepository:
    """Shared collection access for FinTrack repositories.

    The database is resolved lazily so repositories can be constructed before
    the client exists; pass ``db`` to bind an explicit database instead.
    """

    collection_name: str = ""

    def __init__(self, db: Any = None) -> None:
        self._db = db

    def _collection(self):
        db = self._db if self._db is not None else get_db()
        return db[self.collection_name]

    @staticmethod
    async def _collect(cursor, to_model) -> List[Any]:
        items: List[Any] = []
        async for doc in cursor:
            items.append(to_model(doc))
        return items
