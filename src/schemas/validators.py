"""Shared field validators used by the request schemas."""
from pydantic import HttpUrl, TypeAdapter, ValidationError

from core.config import get_settings

TEMP_TAG_ID_PREFIX = "temp-"
MAX_TAG_NAME_LENGTH = 100

_http_url = TypeAdapter(HttpUrl)


def validate_bookmark_url(url: str) -> str:
    """
    Check that a bookmark URL is an absolute http(s) address.

    Only surrounding whitespace is removed. The URL is otherwise kept exactly as
    typed: no trailing slash is added and internationalized hosts stay unencoded.

    Raises:
        ValueError: If the URL is not a valid http or https URL.
    """
    stripped = url.strip()
    try:
        _http_url.validate_python(stripped)
    except ValidationError as e:
        raise ValueError("URL must be a valid http or https address") from e
    return stripped


def validate_title(title: str) -> str:
    """Strip a title and reject blank or over-long values."""
    stripped = title.strip()
    if not stripped:
        raise ValueError("Title is required")
    settings = get_settings()
    if len(stripped) > settings.max_title_length:
        raise ValueError(
            f"Title exceeds maximum length of {settings.max_title_length:,} characters "
            f"(got {len(stripped):,} characters).",
        )
    return stripped


def validate_description_length(description: str | None) -> str | None:
    """Validate that description doesn't exceed maximum length."""
    settings = get_settings()
    if description is not None and len(description) > settings.max_description_length:
        max_len = settings.max_description_length
        raise ValueError(
            f"Description exceeds maximum length of {max_len:,} characters "
            f"(got {len(description):,} characters).",
        )
    return description


def validate_notes_length(notes: str | None) -> str | None:
    """Validate that notes don't exceed maximum length."""
    settings = get_settings()
    if notes is not None and len(notes) > settings.max_notes_length:
        raise ValueError(
            f"Notes exceed maximum length of {settings.max_notes_length:,} characters "
            f"(got {len(notes):,} characters).",
        )
    return notes


def normalize_tag_name(name: str) -> str:
    """
    Strip surrounding whitespace from a tag name, keeping its display casing.

    Raises:
        ValueError: If the name is empty or too long.
    """
    stripped = name.strip()
    if not stripped:
        raise ValueError("Tag name cannot be empty")
    if len(stripped) > MAX_TAG_NAME_LENGTH:
        raise ValueError(f"Tag name exceeds maximum length of {MAX_TAG_NAME_LENGTH} characters")
    return stripped


def is_temporary_tag_id(tag_id: str | None) -> bool:
    """True for ids the client invented for tags that were never persisted."""
    return not tag_id or tag_id.startswith(TEMP_TAG_ID_PREFIX)
