"""Tag management endpoints."""
from uuid import UUID

from fastapi import APIRouter, Depends, status

from api.dependencies import get_bookmark_store
from api.helpers import unwrap
from schemas.tag import TagCreate, TagResponse, TagUpdate
from services.bookmark_store import BookmarkStore

router = APIRouter(prefix="/tags", tags=["tags"])


@router.get("/", response_model=list[TagResponse])
async def list_tags(
    store: BookmarkStore = Depends(get_bookmark_store),
) -> list[TagResponse]:
    """List the caller's tags by name."""
    return list(store.tags)


@router.post("/", response_model=TagResponse, status_code=status.HTTP_201_CREATED)
async def create_tag(
    data: TagCreate,
    store: BookmarkStore = Depends(get_bookmark_store),
) -> TagResponse:
    """
    Create a tag.

    If a tag with the same name (ignoring case) exists, it is returned instead.
    """
    return unwrap(await store.add_tag(data))


@router.patch("/{tag_id}", response_model=TagResponse)
async def rename_tag(
    tag_id: UUID,
    data: TagUpdate,
    store: BookmarkStore = Depends(get_bookmark_store),
) -> TagResponse:
    """
    Rename a tag.

    Returns 404 if the tag doesn't exist.
    Returns 409 if another tag already has the new name.
    """
    return unwrap(await store.update_tag(tag_id, data))


@router.delete("/{tag_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_tag(
    tag_id: UUID,
    store: BookmarkStore = Depends(get_bookmark_store),
) -> None:
    """Delete a tag and remove it from every bookmark."""
    unwrap(await store.delete_tag(tag_id))
