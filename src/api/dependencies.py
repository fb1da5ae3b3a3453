"""FastAPI dependencies for injection."""
from fastapi import Depends, HTTPException, Request, status

from api.helpers.results import error_detail
from core.auth import Identity, get_current_identity
from core.config import get_settings
from db.session import get_async_session
from services.bookmark_store import BookmarkStore
from services.store_registry import StoreRegistry
from services.straico_client import StraicoClient
from shared.errors import ErrorKind

__all__ = [
    "get_async_session",
    "get_bookmark_store",
    "get_current_identity",
    "get_settings",
    "get_store_registry",
    "get_straico_client",
]


def get_store_registry(request: Request) -> StoreRegistry:
    """The registry created in the application lifespan."""
    return request.app.state.store_registry


def get_straico_client(request: Request) -> StraicoClient:
    """The Straico client created in the application lifespan."""
    return request.app.state.straico_client


async def get_bookmark_store(
    identity: Identity = Depends(get_current_identity),
    registry: StoreRegistry = Depends(get_store_registry),
) -> BookmarkStore:
    """
    The caller's BookmarkStore, loaded on first use in this session.

    Raises:
        HTTPException: 503 if the initial load fails.
    """
    store = registry.get(identity.user_id)
    if not store.loaded:
        result = await store.load()
        if not result.success:
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail=error_detail(result.kind or ErrorKind.SERVER, result.error or ""),
            )
    return store
