"""Database access for FinTrack using motor.

A single ``AsyncIOMotorClient`` is created lazily from the FINTRACK settings and
shared by every repository. ``initialize_db`` verifies connectivity and creates
indexes; it is called from the service lifespan.
"""

from typing import Optional

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase

from fintrack.core import get_fintrack_config
from fintrack.core.indexes import ensure_indexes

_client: Optional[AsyncIOMotorClient] = None


def get_client() -> AsyncIOMotorClient:
    """Get the global motor client, creating it on first call (no I/O happens here)."""
    global _client
    if _client is None:
        cfg = get_fintrack_config().FINTRACK
        _client = AsyncIOMotorClient(cfg.MONGO_URI, tz_aware=True)
    return _client


def get_db() -> AsyncIOMotorDatabase:
    """Get the configured FinTrack database."""
    cfg = get_fintrack_config().FINTRACK
    return get_client()[cfg.MONGO_DB]


async def initialize_db() -> AsyncIOMotorDatabase:
    """
    Ping the server and create indexes.

    Raises:
        pymongo.errors.PyMongoError: If the store is unreachable or index creation fails.
    """
    db = get_db()
    await db.command("ping")
    await ensure_indexes(db)
    return db


def close_db() -> None:
    """Close the global client."""
    global _client
    if _client is not None:
        _client.close()
        _client = None


def reset_db() -> None:
    """Drop the cached client without closing it. Useful for testing."""
    global _client
    _client = None
