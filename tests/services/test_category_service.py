"""Tests for category service layer functionality."""
from uuid import UUID

import pytest
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from uuid6 import uuid7

from models.bookmark import Bookmark
from schemas.category import CategoryCreate, CategoryUpdate
from services.category_service import (
    CategoryNotFoundError,
    create_category,
    delete_category,
    ensure_category_owned,
    get_category,
    list_categories,
    update_category,
)


async def test__create_category__persists_fields(
    db_session: AsyncSession, user_id: UUID,
) -> None:
    """Name, color and icon are stored for the user."""
    category = await create_category(
        db_session, user_id, CategoryCreate(name="Videos", color="#FF0000", icon="film"),
    )

    fetched = await get_category(db_session, user_id, category.id)
    assert fetched is not None
    assert (fetched.name, fetched.color, fetched.icon) == ("Videos", "#FF0000", "film")


async def test__get_category__other_user_returns_none(
    db_session: AsyncSession, user_id: UUID, other_user_id: UUID,
) -> None:
    """Categories are only visible to their owner."""
    category = await create_category(db_session, user_id, CategoryCreate(name="Mine"))

    assert await get_category(db_session, other_user_id, category.id) is None
    with pytest.raises(CategoryNotFoundError):
        await ensure_category_owned(db_session, other_user_id, category.id)


async def test__list_categories__sorted_by_name(
    db_session: AsyncSession, user_id: UUID,
) -> None:
    """Categories come back alphabetically, ignoring case."""
    for name in ["podcasts", "Articles", "Videos"]:
        await create_category(db_session, user_id, CategoryCreate(name=name))

    categories = await list_categories(db_session, user_id)

    assert [c.name for c in categories] == ["Articles", "podcasts", "Videos"]


async def test__update_category__only_changes_set_fields(
    db_session: AsyncSession, user_id: UUID,
) -> None:
    """Fields left out of the update keep their values."""
    category = await create_category(
        db_session, user_id, CategoryCreate(name="Videos", color="#00FF00", icon="film"),
    )

    updated = await update_category(
        db_session, user_id, category.id, CategoryUpdate(color="#0000FF"),
    )

    assert updated.name == "Videos"
    assert updated.color == "#0000FF"
    assert updated.icon == "film"


async def test__update_category__can_clear_icon(
    db_session: AsyncSession, user_id: UUID,
) -> None:
    """An explicit null icon removes it."""
    category = await create_category(
        db_session, user_id, CategoryCreate(name="Videos", icon="film"),
    )

    updated = await update_category(
        db_session, user_id, category.id, CategoryUpdate(icon=None),
    )

    assert updated.icon is None


async def test__update_category__missing_raises(
    db_session: AsyncSession, user_id: UUID,
) -> None:
    """Updating an unknown category is not found."""
    with pytest.raises(CategoryNotFoundError):
        await update_category(db_session, user_id, uuid7(), CategoryUpdate(name="x"))


async def test__delete_category__detaches_bookmarks(
    db_session: AsyncSession, user_id: UUID,
) -> None:
    """Bookmarks in the category are kept with no category; the count is returned."""
    category = await create_category(db_session, user_id, CategoryCreate(name="Videos"))
    for i in range(2):
        db_session.add(
            Bookmark(
                user_id=user_id,
                url=f"https://example.com/{i}",
                title=f"Video {i}",
                category_id=category.id,
            ),
        )
    await db_session.flush()

    detached = await delete_category(db_session, user_id, category.id)

    assert detached == 2
    assert await get_category(db_session, user_id, category.id) is None
    result = await db_session.execute(
        select(Bookmark.category_id).where(Bookmark.user_id == user_id),
    )
    assert result.scalars().all() == [None, None]


async def test__delete_category__other_users_category_raises(
    db_session: AsyncSession, user_id: UUID, other_user_id: UUID,
) -> None:
    """A user can't delete someone else's category."""
    category = await create_category(db_session, other_user_id, CategoryCreate(name="Theirs"))

    with pytest.raises(CategoryNotFoundError):
        await delete_category(db_session, user_id, category.id)
