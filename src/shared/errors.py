"""
Shared error taxonomy.

Errors are classified once, where they enter the application (the bookmark store's
operation boundary, or the Straico HTTP client). Everything downstream switches on
ErrorKind instead of inspecting message text.
"""
from dataclasses import dataclass
from enum import StrEnum
from typing import Any

import httpx


class ErrorKind(StrEnum):
    """Semantic category of a failed operation."""

    VALIDATION = "validation"      # 400/422 or rejected before any remote call
    AUTH = "auth"                  # 401/403 - missing, invalid or expired credentials
    NOT_FOUND = "not_found"        # 404 or not owned by the caller
    CONFLICT = "conflict"          # unique constraint violated
    RATE_LIMITED = "rate_limited"  # 429
    SERVER = "server"              # 5xx, database errors, unexpected responses
    NETWORK = "network"            # could not reach the remote service


@dataclass
class ParsedApiError:
    """Parsed API error with semantic kind and a user-facing message."""

    kind: ErrorKind
    message: str
    status_code: int | None = None


STRAICO_NETWORK_MESSAGE = (
    "Network error: Unable to connect to Straico API. "
    "Please check your internet connection."
)


def parse_straico_error(response: httpx.Response) -> ParsedApiError:  # noqa: PLR0911
    """
    Map a non-2xx Straico response to an error kind and message.

    Args:
        response: The HTTP response with an error status.

    Returns:
        ParsedApiError with kind, message and the original status code.
    """
    status = response.status_code
    detail = extract_error_message(response)

    if status == 400:
        return ParsedApiError(ErrorKind.VALIDATION, f"Invalid request: {detail}", status)
    if status == 401:
        return ParsedApiError(
            ErrorKind.AUTH,
            "Invalid or expired API key. Please check your Straico API key in Settings.",
            status,
        )
    if status == 403:
        return ParsedApiError(
            ErrorKind.AUTH,
            f"Access forbidden: {detail}. Please check your API key permissions.",
            status,
        )
    if status == 404:
        return ParsedApiError(ErrorKind.NOT_FOUND, f"Resource not found: {detail}", status)
    if status == 422:
        return ParsedApiError(ErrorKind.VALIDATION, f"Invalid request: {detail}", status)
    if status == 429:
        return ParsedApiError(
            ErrorKind.RATE_LIMITED,
            "Rate limit exceeded. Please wait a moment before trying again.",
            status,
        )
    if status >= 500:
        return ParsedApiError(
            ErrorKind.SERVER,
            f"Straico server error: {detail}. Please try again later.",
            status,
        )
    return ParsedApiError(ErrorKind.SERVER, f"API error ({status}): {detail}", status)


def extract_error_message(response: httpx.Response) -> str:
    """
    Pull the most specific message out of an error body.

    Straico puts it in ``message`` (sometimes ``error``); some proxies return plain
    text.
    """
    try:
        body: Any = response.json()
    except ValueError:
        return response.text.strip() or response.reason_phrase or "Unknown error"
    if isinstance(body, dict):
        for key in ("message", "error", "detail"):
            value = body.get(key)
            if isinstance(value, str) and value:
                return value
            if isinstance(value, dict) and isinstance(value.get("message"), str):
                return value["message"]
    return response.reason_phrase or "Unknown error"
