"""Pydantic schemas for analytics endpoints."""
from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict


class AnalyticsBookmarkInfo(BaseModel):
    """The bookmark fields a dashboard needs to break events down."""

    model_config = ConfigDict(from_attributes=True)

    category_id: UUID | None
    status: str


class AnalyticsEventResponse(BaseModel):
    """
    Schema for one analytics event.

    ``bookmark`` is None once the bookmark has been deleted.
    """

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    bookmark_id: UUID
    action: str
    created_at: datetime
    bookmark: AnalyticsBookmarkInfo | None = None
