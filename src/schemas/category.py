"""Pydantic schemas for category endpoints."""
from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from models.category import DEFAULT_CATEGORY_COLOR

HEX_COLOR_PATTERN = r"^#[0-9A-Fa-f]{6}$"


class CategoryCreate(BaseModel):
    """Schema for creating a category."""

    name: str = Field(..., min_length=1, max_length=100)
    color: str = Field(default=DEFAULT_CATEGORY_COLOR, pattern=HEX_COLOR_PATTERN)
    icon: str | None = Field(default=None, max_length=100)

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        """Reject names that are only whitespace."""
        stripped = v.strip()
        if not stripped:
            raise ValueError("Category name is required")
        return stripped


class CategoryUpdate(BaseModel):
    """Schema for updating a category. Only fields that are set are written."""

    name: str | None = Field(default=None, min_length=1, max_length=100)
    color: str | None = Field(default=None, pattern=HEX_COLOR_PATTERN)
    icon: str | None = Field(default=None, max_length=100)

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str | None) -> str | None:
        """Reject names that are only whitespace."""
        if v is None:
            raise ValueError("Category name cannot be null")
        stripped = v.strip()
        if not stripped:
            raise ValueError("Category name is required")
        return stripped


class CategoryResponse(BaseModel):
    """Schema for a category."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    color: str
    icon: str | None
    created_at: datetime
    updated_at: datetime
