from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel


class Scope(str, Enum):
    """Whether an endpoint requires a resolved caller identity."""

    PUBLIC = "public"
    AUTHENTICATED = "authenticated"


class Envelope(BaseModel):
    """Uniform response body for every endpoint."""

    success: bool
    data: Any = None
    error: Optional[str] = None
