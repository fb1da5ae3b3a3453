"""Pydantic schemas for URL metadata previews."""
from pydantic import BaseModel


class UrlMetadata(BaseModel):
    """Prefill values for the bookmark form. All fields are best effort."""

    url: str
    title: str | None = None
    description: str | None = None
    thumbnail_url: str | None = None
    video_id: str | None = None
    error: str | None = None
