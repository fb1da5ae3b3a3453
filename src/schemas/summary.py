"""Pydantic schemas for AI summary endpoints."""
from pydantic import BaseModel, ConfigDict, Field

from models.user_settings import SmartSelectorPreference
from schemas.bookmark import BookmarkResponse
from schemas.straico import WordUsage


class SummaryRequest(BaseModel):
    """
    Options for generating a summary.

    Without ``model_id`` or ``smart_selector`` the user's saved preference is used.
    """

    model_config = ConfigDict(protected_namespaces=())

    model_id: str | None = None
    smart_selector: SmartSelectorPreference | None = None
    custom_prompt: str | None = Field(default=None, max_length=4000)
    temperature: float = Field(default=0.7, ge=0.0, le=2.0)
    max_tokens: int = Field(default=500, ge=1, le=8000)
    save: bool = True


class SummaryResponse(BaseModel):
    """A generated summary plus usage, and the bookmark when it was saved."""

    summary: str
    model: str | None = None
    provider: str | None = None
    words: WordUsage
    price: float | None = None
    selector_justification: str | None = None
    bookmark: BookmarkResponse | None = None
