"""Service layer for category operations."""
from uuid import UUID

from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from models.base import utc_now
from models.bookmark import Bookmark
from models.category import Category
from schemas.category import CategoryCreate, CategoryUpdate
from services.exceptions import NotFoundError


class CategoryNotFoundError(NotFoundError):
    """Raised when a category is not found or belongs to another user."""

    def __init__(self, category_id: UUID) -> None:
        self.category_id = category_id
        super().__init__(f"Category '{category_id}' not found")


async def get_category(
    db: AsyncSession, user_id: UUID, category_id: UUID,
) -> Category | None:
    """Get a category by id, scoped to user."""
    result = await db.execute(
        select(Category).where(Category.id == category_id, Category.user_id == user_id),
    )
    return result.scalar_one_or_none()


async def ensure_category_owned(db: AsyncSession, user_id: UUID, category_id: UUID) -> None:
    """
    Check that a category exists for the user before a bookmark references it.

    Raises:
        CategoryNotFoundError: If the category doesn't exist or isn't the user's.
    """
    if await get_category(db, user_id, category_id) is None:
        raise CategoryNotFoundError(category_id)


async def list_categories(db: AsyncSession, user_id: UUID) -> list[Category]:
    """Get all categories for a user, ordered by name."""
    result = await db.execute(
        select(Category)
        .where(Category.user_id == user_id)
        .order_by(func.lower(Category.name), Category.id),
    )
    return list(result.scalars())


async def create_category(
    db: AsyncSession, user_id: UUID, data: CategoryCreate,
) -> Category:
    """Create a category."""
    category = Category(user_id=user_id, **data.model_dump())
    db.add(category)
    await db.flush()
    return category


async def update_category(
    db: AsyncSession,
    user_id: UUID,
    category_id: UUID,
    data: CategoryUpdate,
) -> Category:
    """
    Update the fields of a category that were explicitly set.

    Raises:
        CategoryNotFoundError: If the category doesn't exist.
    """
    category = await get_category(db, user_id, category_id)
    if category is None:
        raise CategoryNotFoundError(category_id)

    for field, value in data.model_dump(exclude_unset=True).items():
        setattr(category, field, value)
    category.updated_at = utc_now()
    await db.flush()
    return category


async def delete_category(db: AsyncSession, user_id: UUID, category_id: UUID) -> int:
    """
    Delete a category, leaving its bookmarks uncategorized.

    Bookmarks are detached first so no reference to the category survives even
    where the database doesn't enforce ``ON DELETE SET NULL``.

    Returns:
        Number of bookmarks that were detached.

    Raises:
        CategoryNotFoundError: If the category doesn't exist.
    """
    category = await get_category(db, user_id, category_id)
    if category is None:
        raise CategoryNotFoundError(category_id)

    detached = await db.execute(
        update(Bookmark)
        .where(Bookmark.user_id == user_id, Bookmark.category_id == category_id)
        .values(category_id=None)
        .execution_options(synchronize_session=False),
    )
    await db.execute(
        delete(Category).where(Category.id == category_id, Category.user_id == user_id),
    )
    return detached.rowcount
