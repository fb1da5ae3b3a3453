"""Translate store results and gateway errors into HTTP responses."""
from typing import TypeVar

from fastapi import HTTPException, status

from services.results import StoreResult
from services.straico_client import StraicoApiError
from shared.errors import ErrorKind

T = TypeVar("T")

STATUS_BY_KIND: dict[ErrorKind, int] = {
    ErrorKind.VALIDATION: status.HTTP_422_UNPROCESSABLE_ENTITY,
    ErrorKind.AUTH: status.HTTP_401_UNAUTHORIZED,
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.CONFLICT: status.HTTP_409_CONFLICT,
    ErrorKind.RATE_LIMITED: status.HTTP_429_TOO_MANY_REQUESTS,
    ErrorKind.NETWORK: status.HTTP_502_BAD_GATEWAY,
    ErrorKind.SERVER: status.HTTP_500_INTERNAL_SERVER_ERROR,
}

# A rejected Straico key is the user's configuration problem, not their session:
# 403 keeps clients from treating it as "signed out".
GATEWAY_STATUS_BY_KIND: dict[ErrorKind, int] = {
    **STATUS_BY_KIND,
    ErrorKind.AUTH: status.HTTP_403_FORBIDDEN,
    ErrorKind.SERVER: status.HTTP_502_BAD_GATEWAY,
}


def error_detail(kind: ErrorKind, message: str) -> dict[str, str]:
    """Error body shape shared by every endpoint: clients switch on ``kind``."""
    return {"kind": kind.value, "message": message}


def unwrap(result: StoreResult[T]) -> T | None:
    """
    Return a successful result's data, or raise the matching HTTPException.

    Raises:
        HTTPException: With the status for the result's ErrorKind.
    """
    if result.success:
        return result.data
    kind = result.kind or ErrorKind.SERVER
    raise HTTPException(
        status_code=STATUS_BY_KIND[kind],
        detail=error_detail(kind, result.error or "Request failed"),
    )


def gateway_http_error(error: StraicoApiError) -> HTTPException:
    """HTTPException for a failed Straico call."""
    return HTTPException(
        status_code=GATEWAY_STATUS_BY_KIND[error.kind],
        detail=error_detail(error.kind, error.message),
    )
