"""Bookmark endpoints, served from the caller's BookmarkStore."""
import logging
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import get_async_session, get_bookmark_store, get_straico_client
from api.helpers import error_detail, gateway_http_error, unwrap
from models.bookmark import BookmarkStatus
from schemas.bookmark import (
    BookmarkCreate,
    BookmarkDeleteResult,
    BookmarkResponse,
    BookmarkSummaryUpdate,
    BookmarkUpdate,
    BulkBookmarkIds,
    BulkStatusResult,
    BulkStatusUpdate,
)
from schemas.summary import SummaryRequest, SummaryResponse
from services import summary_service
from services.bookmark_store import BookmarkStore
from services.straico_client import StraicoApiError, StraicoClient
from shared.errors import ErrorKind

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/bookmarks", tags=["bookmarks"])


def _get_or_404(store: BookmarkStore, bookmark_id: UUID) -> BookmarkResponse:
    bookmark = store.get_bookmark(bookmark_id)
    if bookmark is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=error_detail(ErrorKind.NOT_FOUND, f"Bookmark '{bookmark_id}' not found"),
        )
    return bookmark


@router.get("/", response_model=list[BookmarkResponse])
async def list_bookmarks(
    store: BookmarkStore = Depends(get_bookmark_store),
) -> list[BookmarkResponse]:
    """List the caller's bookmarks, newest first, with category and tags."""
    return list(store.bookmarks)


@router.get("/{bookmark_id}", response_model=BookmarkResponse)
async def get_bookmark(
    bookmark_id: UUID,
    store: BookmarkStore = Depends(get_bookmark_store),
) -> BookmarkResponse:
    """Get a single bookmark."""
    return _get_or_404(store, bookmark_id)


@router.post("/", response_model=BookmarkResponse, status_code=status.HTTP_201_CREATED)
async def create_bookmark(
    data: BookmarkCreate,
    store: BookmarkStore = Depends(get_bookmark_store),
) -> BookmarkResponse:
    """
    Create a bookmark.

    Tags with a ``temp-`` or missing id are matched to existing tags by name
    (case-insensitive) or created.
    """
    return unwrap(await store.add_bookmark(data))


@router.patch("/{bookmark_id}", response_model=BookmarkResponse)
async def update_bookmark(
    bookmark_id: UUID,
    data: BookmarkUpdate,
    store: BookmarkStore = Depends(get_bookmark_store),
) -> BookmarkResponse:
    """
    Update a bookmark.

    Sending ``tags`` replaces the bookmark's tags; omitting it keeps them.
    """
    return unwrap(await store.update_bookmark(bookmark_id, data))


@router.delete("/{bookmark_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_bookmark(
    bookmark_id: UUID,
    store: BookmarkStore = Depends(get_bookmark_store),
) -> None:
    """Delete a bookmark."""
    unwrap(await store.delete_bookmark(bookmark_id))


@router.post("/bulk-delete", response_model=BookmarkDeleteResult)
async def delete_bookmarks(
    data: BulkBookmarkIds,
    store: BookmarkStore = Depends(get_bookmark_store),
) -> BookmarkDeleteResult:
    """Delete many bookmarks at once. Unknown ids are ignored."""
    deleted = unwrap(await store.delete_multiple_bookmarks(data.ids))
    return BookmarkDeleteResult(deleted_ids=deleted or [])


@router.post("/bulk-status", response_model=BulkStatusResult)
async def update_bookmark_status(
    data: BulkStatusUpdate,
    store: BookmarkStore = Depends(get_bookmark_store),
) -> BulkStatusResult:
    """Set the status of many bookmarks at once."""
    updated = unwrap(await store.update_multiple_bookmark_status(data.ids, data.status))
    return BulkStatusResult(updated_ids=updated or [], status=BookmarkStatus(data.status))


@router.put("/{bookmark_id}/summary", response_model=BookmarkResponse)
async def save_summary(
    bookmark_id: UUID,
    data: BookmarkSummaryUpdate,
    store: BookmarkStore = Depends(get_bookmark_store),
) -> BookmarkResponse:
    """Save (or replace) a bookmark's AI summary."""
    unwrap(await store.update_bookmark_summary(bookmark_id, data.summary))
    return _get_or_404(store, bookmark_id)


@router.post("/{bookmark_id}/summary/generate", response_model=SummaryResponse)
async def generate_summary(
    bookmark_id: UUID,
    options: SummaryRequest,
    store: BookmarkStore = Depends(get_bookmark_store),
    client: StraicoClient = Depends(get_straico_client),
    db: AsyncSession = Depends(get_async_session),
) -> SummaryResponse:
    """
    Generate a summary of the bookmark's URL with the caller's Straico key.

    With ``save`` (the default) the summary is stored on the bookmark.
    Returns 403 when the Straico key is missing or rejected.
    """
    bookmark = _get_or_404(store, bookmark_id)
    try:
        completion = await summary_service.generate_summary(
            db, client, store.user_id, bookmark, options,
        )
    except StraicoApiError as e:
        raise gateway_http_error(e) from e

    saved = None
    if options.save:
        saved = unwrap(await store.update_bookmark_summary(bookmark_id, completion.content))

    return SummaryResponse(
        summary=completion.content,
        model=completion.model,
        provider=completion.provider,
        words=completion.words,
        price=completion.price,
        selector_justification=completion.selector_justification,
        bookmark=saved,
    )
