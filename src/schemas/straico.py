"""Typed views of Straico API responses."""
from typing import Any

from pydantic import BaseModel


class StraicoUser(BaseModel):
    """Account info returned by ``GET /v0/user``."""

    first_name: str | None = None
    last_name: str | None = None
    coins: float | None = None
    plan: str | None = None


class ModelInfo(BaseModel):
    """A chat model from ``GET /v0/models`` normalized for display."""

    id: str
    name: str
    provider: str
    pricing: str | None = None
    max_tokens: int | None = None


class DetailedModelInfo(BaseModel):
    """A model from ``GET /v1/models`` with its descriptive metadata."""

    id: str
    name: str
    provider: str
    description: str | None = None
    pros: list[str] = []
    cons: list[str] = []
    applications: list[str] = []
    word_limit: int | None = None
    pricing: dict[str, Any] | None = None


class DetailedModels(BaseModel):
    """Chat and image models, as ``GET /v1/models`` groups them."""

    chat: list[DetailedModelInfo] = []
    image: list[DetailedModelInfo] = []


class WordUsage(BaseModel):
    """Words consumed by a completion."""

    input: int = 0
    output: int = 0
    total: int = 0


class CompletionResult(BaseModel):
    """The useful parts of a ``POST /v0/prompt/completion`` response."""

    content: str
    model: str | None = None
    provider: str | None = None
    words: WordUsage = WordUsage()
    price: float | None = None
    selector_justification: str | None = None


class SystemStatus(BaseModel):
    """Connectivity check: account info and model count, each failure captured."""

    user: StraicoUser | None = None
    model_count: int | None = None
    user_error: str | None = None
    models_error: str | None = None
