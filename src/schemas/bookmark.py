"""Pydantic schemas for bookmark endpoints."""
from datetime import datetime
from typing import TYPE_CHECKING
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from models.bookmark import MAX_RATING, MIN_RATING, BookmarkStatus
from schemas.category import CategoryResponse
from schemas.tag import TagInput, TagResponse
from schemas.validators import (
    validate_bookmark_url,
    validate_description_length,
    validate_notes_length,
    validate_title,
)

if TYPE_CHECKING:
    from models.bookmark import Bookmark


class BookmarkCreate(BaseModel):
    """Schema for creating a new bookmark."""

    url: str
    title: str
    description: str | None = None
    thumbnail_url: str | None = None
    category_id: UUID | None = None
    rating: int = Field(default=0, ge=MIN_RATING, le=MAX_RATING)
    status: BookmarkStatus = BookmarkStatus.UNWATCHED
    notes: str | None = None
    tags: list[TagInput] = []

    @field_validator("url")
    @classmethod
    def check_url(cls, v: str) -> str:
        """Accept http(s) URLs only, stored as typed."""
        return validate_bookmark_url(v)

    @field_validator("title")
    @classmethod
    def check_title(cls, v: str) -> str:
        """Title is required and length-limited."""
        return validate_title(v)

    @field_validator("description")
    @classmethod
    def check_description_length(cls, v: str | None) -> str | None:
        """Validate description length."""
        return validate_description_length(v)

    @field_validator("notes")
    @classmethod
    def check_notes_length(cls, v: str | None) -> str | None:
        """Validate notes length."""
        return validate_notes_length(v)

    @field_validator("tags", mode="before")
    @classmethod
    def default_tags(cls, v: list | None) -> list:
        """Treat null as no tags."""
        return [] if v is None else v


class BookmarkUpdate(BaseModel):
    """
    Schema for updating a bookmark.

    Only fields that are explicitly set are written. ``tags`` left unset keeps the
    current links; ``tags: []`` removes them all.
    """

    url: str | None = None
    title: str | None = None
    description: str | None = None
    thumbnail_url: str | None = None
    category_id: UUID | None = None
    rating: int | None = Field(default=None, ge=MIN_RATING, le=MAX_RATING)
    status: BookmarkStatus | None = None
    notes: str | None = None
    tags: list[TagInput] | None = None

    @field_validator("url", "title", "rating", "status", mode="before")
    @classmethod
    def reject_null(cls, v: object) -> object:
        """Required columns can be changed but not cleared."""
        if v is None:
            raise ValueError("Field cannot be null")
        return v

    @field_validator("url")
    @classmethod
    def check_url(cls, v: str | None) -> str | None:
        """Accept http(s) URLs only, stored as typed."""
        return None if v is None else validate_bookmark_url(v)

    @field_validator("title")
    @classmethod
    def check_title(cls, v: str | None) -> str | None:
        """Title stays required and length-limited."""
        return None if v is None else validate_title(v)

    @field_validator("description")
    @classmethod
    def check_description_length(cls, v: str | None) -> str | None:
        """Validate description length."""
        return validate_description_length(v)

    @field_validator("notes")
    @classmethod
    def check_notes_length(cls, v: str | None) -> str | None:
        """Validate notes length."""
        return validate_notes_length(v)


class BookmarkSummaryUpdate(BaseModel):
    """Schema for saving an AI summary onto a bookmark."""

    summary: str = Field(..., min_length=1)


class BulkBookmarkIds(BaseModel):
    """Schema for operations on a set of bookmarks."""

    ids: list[UUID] = Field(..., min_length=1)


class BulkStatusUpdate(BulkBookmarkIds):
    """
    Schema for bulk status changes.

    status is a plain string here; the store validates it so an unknown value is
    reported the same way from every caller.
    """

    status: str


class BookmarkResponse(BaseModel):
    """Schema for a bookmark with its category and tags resolved."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    user_id: UUID
    url: str
    title: str
    description: str | None
    thumbnail_url: str | None
    category_id: UUID | None
    category: CategoryResponse | None = None
    rating: int
    status: BookmarkStatus
    notes: str | None
    ai_summary: str | None
    created_at: datetime
    updated_at: datetime
    tags: list[TagResponse] = []

    @classmethod
    def from_model(cls, bookmark: "Bookmark") -> "BookmarkResponse":
        """Build a response from an ORM bookmark with its category and tags loaded."""
        tags = [TagResponse.model_validate(tag) for tag in bookmark.tag_objects]
        return cls.model_validate(bookmark).model_copy(update={"tags": tags})


class BookmarkDeleteResult(BaseModel):
    """Schema for delete results."""

    deleted_ids: list[UUID]


class BulkStatusResult(BaseModel):
    """Schema for bulk status update results."""

    updated_ids: list[UUID]
    status: BookmarkStatus
