"""Pydantic schemas for tag endpoints."""
from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from schemas.validators import MAX_TAG_NAME_LENGTH, normalize_tag_name


class TagInput(BaseModel):
    """
    A tag as submitted with a bookmark form.

    ``id`` is either a real tag id, a client placeholder starting with ``temp-``,
    or missing; the latter two are resolved by name.
    """

    id: str | None = None
    name: str = Field(..., min_length=1, max_length=MAX_TAG_NAME_LENGTH)

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v: object) -> str | None:
        """Accept UUID instances as well as strings."""
        if v is None:
            return None
        return str(v)

    @field_validator("name")
    @classmethod
    def normalize_name(cls, v: str) -> str:
        """Strip whitespace around the name."""
        return normalize_tag_name(v)


class TagCreate(BaseModel):
    """Schema for creating a tag."""

    name: str = Field(..., min_length=1, max_length=MAX_TAG_NAME_LENGTH)

    @field_validator("name")
    @classmethod
    def normalize_name(cls, v: str) -> str:
        """Strip whitespace around the name."""
        return normalize_tag_name(v)


class TagUpdate(TagCreate):
    """Schema for renaming a tag."""


class TagResponse(BaseModel):
    """Schema for a tag."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    created_at: datetime
