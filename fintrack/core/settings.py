"""Configuration for the FinTrack service.

Environment variables use the FINTRACK__ prefix (e.g. FINTRACK__MONGO_URI=mongodb://mongo:27017).
"""

from typing import List, Optional

from pydantic import BaseModel, Field, SecretStr

from .config import Config
from .constants import DEFAULT_JWT_ALGORITHM, DEFAULT_JWT_EXPIRES_IN


class FinTrackSettings(BaseModel):
    """FinTrack service configuration settings."""

    # Service URL
    URL: str = "http://localhost:8080"

    # Database
    MONGO_URI: str = "mongodb://localhost:27017"
    MONGO_DB: str = "fintrack"

    # Auth / JWT
    JWT_SECRET: SecretStr = SecretStr("dev-secret-key")
    JWT_ALGORITHM: str = DEFAULT_JWT_ALGORITHM
    JWT_EXPIRES_IN: int = DEFAULT_JWT_EXPIRES_IN  # seconds

    # CORS
    CORS_ORIGINS: List[str] = Field(default_factory=lambda: ["http://localhost:5173"])

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_DIR: str = "~/.cache/fintrack/logs"
    LOG_JSON: bool = True


_config: Optional[Config] = None


def get_fintrack_config() -> Config:
    """Get the FinTrack configuration singleton.

    Configuration is loaded once and cached. Supports environment variable
    overrides using the FINTRACK__ prefix.

    Examples:
        ```bash
        export FINTRACK__URL=http://0.0.0.0:8081
        export FINTRACK__JWT_SECRET=$(openssl rand -hex 32)
        ```

        ```python
        config = get_fintrack_config()
        print(config.FINTRACK.MONGO_DB)  # fintrack
        ```

    Returns:
        Config instance with a FINTRACK section containing all settings.
    """
    global _config
    if _config is None:
        _config = Config.load(defaults={"FINTRACK": FinTrackSettings()})
    return _config


def reset_fintrack_config() -> None:
    """Reset the config cache. Useful for testing."""
    global _config
    _config = None
