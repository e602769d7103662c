from fintrack.core.exceptions import (
    AuthError,
    ConflictError,
    FinTrackError,
    NotFoundError,
    ServerError,
    ValidationError,
)
from fintrack.core.settings import FinTrackSettings, get_fintrack_config, reset_fintrack_config

__all__ = [
    "AuthError",
    "ConflictError",
    "FinTrackError",
    "FinTrackSettings",
    "NotFoundError",
    "ServerError",
    "ValidationError",
    "get_fintrack_config",
    "reset_fintrack_config",
]
