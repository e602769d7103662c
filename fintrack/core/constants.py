"""Shared constants for FinTrack."""

from typing import FrozenSet

# Token settings
DEFAULT_JWT_EXPIRES_IN = 86400  # 24 hours
DEFAULT_JWT_ALGORITHM = "HS256"

# Paths excluded from request logging
UNLOGGED_PATHS: FrozenSet[str] = frozenset({"/favicon.ico", "/docs", "/redoc", "/openapi.json"})

# Collection names
USERS_COLLECTION = "users"
CATEGORIES_COLLECTION = "categories"
EXPENSES_COLLECTION = "expenses"
GOALS_COLLECTION = "goals"

REQUEST_ID_HEADER = "X-Request-ID"
