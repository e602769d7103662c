"""MongoDB index management for FinTrack."""

from typing import TYPE_CHECKING

from .constants import CATEGORIES_COLLECTION, EXPENSES_COLLECTION, GOALS_COLLECTION, USERS_COLLECTION

if TYPE_CHECKING:
    from motor.motor_asyncio import AsyncIOMotorDatabase


async def ensure_indexes(db: "AsyncIOMotorDatabase") -> None:
    """
    Create required indexes on MongoDB collections.

    The unique indexes back the duplicate-email and duplicate-category rules,
    so this must run before the service accepts requests.
    """
    # Users collection
    await db[USERS_COLLECTION].create_index("email", unique=True)

    # Categories collection (names are stored normalized)
    await db[CATEGORIES_COLLECTION].create_index([("user_id", 1), ("name", 1)], unique=True)

    # Expenses collection
    await db[EXPENSES_COLLECTION].create_index([("user_id", 1), ("date", -1)])
    await db[EXPENSES_COLLECTION].create_index([("user_id", 1), ("category", 1)])

    # Goals collection
    await db[GOALS_COLLECTION].create_index([("user_id", 1), ("is_pinned", -1), ("created_at", -1)])
