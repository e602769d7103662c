from typing import Generator, List, Optional

import pytest
from fastapi.testclient import TestClient
from pymongo import MongoClient
from pymongo.errors import PyMongoError

from fintrack.core import reset_fintrack_config
from fintrack.db import reset_db
from fintrack.fintrack import FinTrackService

TEST_MONGO_URI = "mongodb://localhost:27018"
TEST_DB_NAME = "fintrack_test"
TEST_COLLECTIONS: List[str] = ["users", "categories", "expenses", "goals"]


def _get_test_client() -> Optional[MongoClient]:
    """Return a client for the test MongoDB, or None if it is not reachable."""
    client = MongoClient(TEST_MONGO_URI, serverSelectionTimeoutMS=2000)
    try:
        client.admin.command("ping")
    except PyMongoError:
        client.close()
        return None
    return client


def _wipe_test_collections(client: MongoClient) -> None:
    db = client[TEST_DB_NAME]
    existing = set(db.list_collection_names())
    for name in TEST_COLLECTIONS:
        if name in existing:
            db[name].delete_many({})


@pytest.fixture(scope="session")
def mongo() -> Generator[MongoClient, None, None]:
    client = _get_test_client()
    if client is None:
        pytest.skip(f"MongoDB not reachable on {TEST_MONGO_URI}")
    yield client
    client.close()


@pytest.fixture(autouse=True)
def _fintrack_test_env(monkeypatch, mongo):
    """Point FinTrack at the test database and start every test from empty collections."""
    monkeypatch.setenv("FINTRACK__MONGO_URI", TEST_MONGO_URI)
    monkeypatch.setenv("FINTRACK__MONGO_DB", TEST_DB_NAME)
    reset_fintrack_config()
    reset_db()

    _wipe_test_collections(mongo)
    yield
    _wipe_test_collections(mongo)
    reset_db()


@pytest.fixture
def client(tmp_path) -> Generator[TestClient, None, None]:
    """In-process client; entering it runs startup (connect + ensure_indexes)."""
    service = FinTrackService(log_dir=str(tmp_path))
    with TestClient(service.app) as test_client:
        yield test_client
