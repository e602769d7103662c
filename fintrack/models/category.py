"""Category request/response models."""

from datetime import datetime
from typing import Optional

from pydantic import Field

from .base import ApiModel, RequestModel


class CategoryCreateRequest(RequestModel):
    """Request model for creating a category.

    ``user_id`` is optional; when given it must match the caller.
    """

    user_id: Optional[str] = Field(None, description="Owner id; must match the authenticated caller")
    name: str = Field(..., min_length=1, description="Category name (normalized to trimmed lower case)")
    desc: Optional[str] = Field(None, description="Optional description")


class CategoryResponse(ApiModel):
    id: str
    user_id: str
    name: str
    desc: Optional[str] = None
    created_at: datetime
