import logging

import pytest

from fintrack.core import reset_fintrack_config


def by_slow_marker(item):
    # Sort unit tests first, then slow unit tests, then integration tests
    is_slow = 0 if item.get_closest_marker("slow") is None else 1
    is_integration = 1 if "integration" in str(item.fspath) else 0
    return (is_integration, is_slow)


def pytest_addoption(parser):
    parser.addoption("--slow-last", action="store_true", default=False)


def pytest_collection_modifyitems(items, config):
    if config.getoption("--slow-last"):
        items.sort(key=by_slow_marker)


@pytest.fixture(autouse=True)
def configure_logging_for_tests(caplog):
    """Let caplog capture FinTrack log records.

    FinTrack loggers propagate to the root logger so that caplog sees them.
    """
    caplog.set_level(logging.DEBUG)

    root_logger = logging.getLogger()
    original_level = root_logger.level
    root_logger.setLevel(logging.DEBUG)

    fintrack_logger = logging.getLogger("fintrack")
    original_propagate = fintrack_logger.propagate
    fintrack_logger.propagate = True

    yield

    root_logger.setLevel(original_level)
    fintrack_logger.propagate = original_propagate


@pytest.fixture(autouse=True)
def _fresh_config():
    """Each test sees configuration loaded from its own environment."""
    reset_fintrack_config()
    yield
    reset_fintrack_config()
