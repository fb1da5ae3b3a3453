"""Bookmark service with CRUD operations and tag reconciliation."""
import logging
from collections.abc import Sequence
from uuid import UUID

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from models.base import utc_now
from models.bookmark import Bookmark, BookmarkStatus
from schemas.bookmark import BookmarkCreate, BookmarkUpdate
from services.category_service import ensure_category_owned
from services.exceptions import NotFoundError
from services.tag_service import resolve_tags

logger = logging.getLogger(__name__)


class BookmarkNotFoundError(NotFoundError):
    """Raised when a bookmark is not found or belongs to another user."""

    def __init__(self, bookmark_id: UUID) -> None:
        self.bookmark_id = bookmark_id
        super().__init__(f"Bookmark '{bookmark_id}' not found")


async def get_bookmark(
    db: AsyncSession,
    user_id: UUID,
    bookmark_id: UUID,
) -> Bookmark | None:
    """
    Get a bookmark by ID, scoped to user, with category and tags loaded.

    Args:
        db: Database session.
        user_id: User ID to scope the bookmark.
        bookmark_id: ID of the bookmark to retrieve.

    Returns:
        The bookmark if found, None otherwise.
    """
    result = await db.execute(
        select(Bookmark)
        .options(selectinload(Bookmark.category), selectinload(Bookmark.tag_objects))
        .where(Bookmark.id == bookmark_id, Bookmark.user_id == user_id)
        .execution_options(populate_existing=True),
    )
    return result.scalar_one_or_none()


async def list_bookmarks(db: AsyncSession, user_id: UUID) -> list[Bookmark]:
    """
    Get all bookmarks for a user with their category, newest first.

    Tags are not loaded here; see tag_service.get_tags_for_bookmarks.
    """
    result = await db.execute(
        select(Bookmark)
        .options(selectinload(Bookmark.category))
        .where(Bookmark.user_id == user_id)
        .order_by(Bookmark.created_at.desc(), Bookmark.id.desc()),
    )
    return list(result.scalars())


async def create_bookmark(
    db: AsyncSession,
    user_id: UUID,
    data: BookmarkCreate,
) -> Bookmark:
    """
    Create a bookmark and link its tags.

    Args:
        db: Database session.
        user_id: User ID to create the bookmark for.
        data: Bookmark creation data.

    Returns:
        The created bookmark with category and tags loaded.

    Raises:
        CategoryNotFoundError: If category_id isn't one of the user's categories.
        TagNotFoundError: If a submitted tag id isn't one of the user's tags.

    Note:
        Does not commit. The row and its tag links succeed or fail together in
        the caller's transaction.
    """
    if data.category_id is not None:
        await ensure_category_owned(db, user_id, data.category_id)

    tag_objects = await resolve_tags(db, user_id, data.tags)
    bookmark = Bookmark(
        user_id=user_id,
        url=data.url,
        title=data.title,
        description=data.description,
        thumbnail_url=data.thumbnail_url,
        category_id=data.category_id,
        rating=data.rating,
        status=data.status.value,
        notes=data.notes,
    )
    bookmark.tag_objects = tag_objects
    db.add(bookmark)
    await db.flush()

    loaded = await get_bookmark(db, user_id, bookmark.id)
    if loaded is None:  # pragma: no cover - just inserted in this transaction
        raise BookmarkNotFoundError(bookmark.id)
    return loaded


async def update_bookmark(
    db: AsyncSession,
    user_id: UUID,
    bookmark_id: UUID,
    data: BookmarkUpdate,
) -> Bookmark:
    """
    Update a bookmark.

    Every explicitly set field is written and updated_at is refreshed. When
    ``tags`` is set the bookmark's links are replaced wholesale by the resolved
    set; when it is unset the links are left alone.

    Raises:
        BookmarkNotFoundError: If the bookmark doesn't exist.
        CategoryNotFoundError: If category_id isn't one of the user's categories.
        TagNotFoundError: If a submitted tag id isn't one of the user's tags.
    """
    bookmark = await get_bookmark(db, user_id, bookmark_id)
    if bookmark is None:
        raise BookmarkNotFoundError(bookmark_id)

    update_data = data.model_dump(exclude_unset=True, exclude={"tags"})

    if "status" in update_data:
        update_data["status"] = BookmarkStatus(update_data["status"]).value
    if update_data.get("category_id") is not None:
        await ensure_category_owned(db, user_id, update_data["category_id"])

    for field, value in update_data.items():
        setattr(bookmark, field, value)

    if "tags" in data.model_fields_set and data.tags is not None:
        bookmark.tag_objects = await resolve_tags(db, user_id, data.tags)

    bookmark.updated_at = utc_now()
    await db.flush()

    loaded = await get_bookmark(db, user_id, bookmark_id)
    if loaded is None:  # pragma: no cover - updated in this transaction
        raise BookmarkNotFoundError(bookmark_id)
    return loaded


async def get_owned_bookmark_ids(
    db: AsyncSession,
    user_id: UUID,
    bookmark_ids: Sequence[UUID],
) -> list[UUID]:
    """Return the subset of ``bookmark_ids`` that exist and belong to the user."""
    if not bookmark_ids:
        return []
    result = await db.execute(
        select(Bookmark.id).where(
            Bookmark.user_id == user_id,
            Bookmark.id.in_(list(bookmark_ids)),
        ),
    )
    owned = set(result.scalars())
    # Keep caller order, drop duplicates
    return [bookmark_id for bookmark_id in dict.fromkeys(bookmark_ids) if bookmark_id in owned]


async def delete_bookmarks(
    db: AsyncSession,
    user_id: UUID,
    bookmark_ids: Sequence[UUID],
) -> None:
    """
    Delete bookmarks set-wise in one statement.

    Tag links go with them through the junction table's ON DELETE CASCADE.
    """
    if not bookmark_ids:
        return
    await db.execute(
        delete(Bookmark)
        .where(Bookmark.user_id == user_id, Bookmark.id.in_(list(bookmark_ids)))
        .execution_options(synchronize_session=False),
    )


async def update_status(
    db: AsyncSession,
    user_id: UUID,
    bookmark_ids: Sequence[UUID],
    status: BookmarkStatus,
) -> list[UUID]:
    """
    Set the status of many bookmarks in one UPDATE.

    Returns:
        IDs of the bookmarks that were actually updated.
    """
    if not bookmark_ids:
        return []
    result = await db.execute(
        update(Bookmark)
        .where(Bookmark.user_id == user_id, Bookmark.id.in_(list(bookmark_ids)))
        .values(status=status.value, updated_at=utc_now())
        .returning(Bookmark.id)
        .execution_options(synchronize_session=False),
    )
    return list(result.scalars())


async def update_summary(
    db: AsyncSession,
    user_id: UUID,
    bookmark_id: UUID,
    summary: str,
) -> None:
    """
    Write only the AI summary (and updated_at) of a bookmark.

    Raises:
        BookmarkNotFoundError: If the bookmark doesn't exist.
    """
    result = await db.execute(
        update(Bookmark)
        .where(Bookmark.id == bookmark_id, Bookmark.user_id == user_id)
        .values(ai_summary=summary, updated_at=utc_now())
        .returning(Bookmark.id)
        .execution_options(synchronize_session=False),
    )
    if result.scalar_one_or_none() is None:
        raise BookmarkNotFoundError(bookmark_id)
