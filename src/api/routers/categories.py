"""Category management endpoints."""
from uuid import UUID

from fastapi import APIRouter, Depends, status

from api.dependencies import get_bookmark_store
from api.helpers import unwrap
from schemas.category import CategoryCreate, CategoryResponse, CategoryUpdate
from services.bookmark_store import BookmarkStore

router = APIRouter(prefix="/categories", tags=["categories"])


@router.get("/", response_model=list[CategoryResponse])
async def list_categories(
    store: BookmarkStore = Depends(get_bookmark_store),
) -> list[CategoryResponse]:
    """List the caller's categories by name."""
    return list(store.categories)


@router.post("/", response_model=CategoryResponse, status_code=status.HTTP_201_CREATED)
async def create_category(
    data: CategoryCreate,
    store: BookmarkStore = Depends(get_bookmark_store),
) -> CategoryResponse:
    """Create a category. Color defaults to #3B82F6."""
    return unwrap(await store.add_category(data))


@router.patch("/{category_id}", response_model=CategoryResponse)
async def update_category(
    category_id: UUID,
    data: CategoryUpdate,
    store: BookmarkStore = Depends(get_bookmark_store),
) -> CategoryResponse:
    """Update a category's name, color or icon."""
    return unwrap(await store.update_category(category_id, data))


@router.delete("/{category_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_category(
    category_id: UUID,
    store: BookmarkStore = Depends(get_bookmark_store),
) -> None:
    """
    Delete a category.

    Bookmarks in the category are kept and become uncategorized.
    """
    unwrap(await store.delete_category(category_id))
