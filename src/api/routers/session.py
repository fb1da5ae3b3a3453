"""Session endpoints: store state, reload and sign-out."""
from fastapi import APIRouter, Depends, status
from pydantic import BaseModel

from api.dependencies import (
    get_bookmark_store,
    get_current_identity,
    get_store_registry,
)
from api.helpers import unwrap
from core.auth import Identity
from services.bookmark_store import BookmarkStore
from services.store_registry import StoreRegistry

router = APIRouter(prefix="/session", tags=["session"])


class SessionState(BaseModel):
    """Loading state and collection sizes of the caller's store."""

    loaded: bool
    loading: bool
    error: str | None
    bookmark_count: int
    category_count: int
    tag_count: int


def _state(store: BookmarkStore) -> SessionState:
    return SessionState(
        loaded=store.loaded,
        loading=store.loading,
        error=store.error,
        bookmark_count=len(store.bookmarks),
        category_count=len(store.categories),
        tag_count=len(store.tags),
    )


@router.get("/", response_model=SessionState)
async def get_session_state(
    store: BookmarkStore = Depends(get_bookmark_store),
) -> SessionState:
    """Get the caller's store state, loading it on first access."""
    return _state(store)


@router.post("/reload", response_model=SessionState)
async def reload_session(
    store: BookmarkStore = Depends(get_bookmark_store),
) -> SessionState:
    """Re-fetch bookmarks, categories and tags from the database."""
    unwrap(await store.load())
    return _state(store)


@router.post("/sign-out", status_code=status.HTTP_204_NO_CONTENT)
async def sign_out(
    identity: Identity = Depends(get_current_identity),
    registry: StoreRegistry = Depends(get_store_registry),
) -> None:
    """
    Dispose the caller's store.

    Collections are cleared immediately; the next request loads a fresh store.
    """
    await registry.sign_out(identity.user_id)
