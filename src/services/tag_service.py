"""Service layer for tag operations and bookmark tag reconciliation."""
import logging
from collections.abc import Sequence
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from models.tag import Tag, bookmark_tags, tag_name_key
from schemas.tag import TagCreate, TagInput, TagResponse, TagUpdate
from schemas.validators import is_temporary_tag_id
from services.exceptions import ConflictError, InvalidInputError, NotFoundError

logger = logging.getLogger(__name__)


class TagNotFoundError(NotFoundError):
    """Raised when a tag is not found or belongs to another user."""

    def __init__(self, tag_id: UUID | str) -> None:
        self.tag_id = tag_id
        super().__init__(f"Tag '{tag_id}' not found")


class TagAlreadyExistsError(ConflictError):
    """Raised when trying to rename a tag to a name that already exists."""

    def __init__(self, tag_name: str) -> None:
        self.tag_name = tag_name
        super().__init__(f"Tag '{tag_name}' already exists")


def parse_tag_id(tag_id: str) -> UUID:
    """
    Parse a persisted tag id.

    Raises:
        InvalidInputError: If the id is neither a UUID nor a temporary id.
    """
    try:
        return UUID(tag_id)
    except ValueError as e:
        raise InvalidInputError(f"Invalid tag id: '{tag_id}'") from e


async def get_tag(db: AsyncSession, user_id: UUID, tag_id: UUID) -> Tag | None:
    """Get a tag by id, scoped to user."""
    result = await db.execute(
        select(Tag).where(Tag.id == tag_id, Tag.user_id == user_id),
    )
    return result.scalar_one_or_none()


async def get_tag_by_name(db: AsyncSession, user_id: UUID, name: str) -> Tag | None:
    """
    Get a tag by name for a user, ignoring case.

    Args:
        db: Database session.
        user_id: User ID to scope the tag.
        name: Name of the tag to find (any casing).

    Returns:
        The Tag if found, None otherwise.
    """
    result = await db.execute(
        select(Tag).where(
            Tag.user_id == user_id,
            Tag.name_key == tag_name_key(name),
        ),
    )
    return result.scalar_one_or_none()


async def get_or_create_tags(
    db: AsyncSession,
    user_id: UUID,
    tag_names: Sequence[str],
) -> list[Tag]:
    """
    Get existing tags or create new ones, matching names case-insensitively.

    Names that differ only by case collapse to one tag; a newly created tag keeps
    the casing of its first occurrence.

    Args:
        db: Database session.
        user_id: User ID to scope tags.
        tag_names: Tag names to get or create (already stripped).

    Returns:
        Tags in first-occurrence order, one per distinct case-folded name.
    """
    wanted: dict[str, str] = {}
    for name in tag_names:
        wanted.setdefault(tag_name_key(name), name)
    if not wanted:
        return []

    result = await db.execute(
        select(Tag).where(
            Tag.user_id == user_id,
            Tag.name_key.in_(list(wanted)),
        ),
    )
    existing = {tag.name_key: tag for tag in result.scalars()}

    tags = []
    for key, display_name in wanted.items():
        tag = existing.get(key)
        if tag is None:
            tag = Tag(user_id=user_id, name=display_name)
            db.add(tag)
        tags.append(tag)

    await db.flush()
    return tags


async def resolve_tags(
    db: AsyncSession,
    user_id: UUID,
    tag_inputs: Sequence[TagInput],
) -> list[Tag]:
    """
    Resolve submitted tags to persisted Tag rows.

    Tags carrying a real id are used as-is once ownership is confirmed. Tags with a
    temporary (``temp-...``) or missing id are looked up by name, case-insensitively,
    and created when no match exists. The result contains each tag at most once.

    Args:
        db: Database session.
        user_id: User ID to scope tags.
        tag_inputs: Tags as submitted with the bookmark.

    Returns:
        Persisted tags, in submission order.

    Raises:
        TagNotFoundError: If a real id doesn't exist or belongs to another user.
        InvalidInputError: If an id is neither a UUID nor a temporary id.
    """
    known_ids: list[UUID] = []
    names: list[str] = []
    for tag_input in tag_inputs:
        if is_temporary_tag_id(tag_input.id):
            names.append(tag_input.name)
        else:
            known_ids.append(parse_tag_id(tag_input.id))

    by_id: dict[UUID, Tag] = {}
    if known_ids:
        result = await db.execute(
            select(Tag).where(Tag.user_id == user_id, Tag.id.in_(known_ids)),
        )
        by_id = {tag.id: tag for tag in result.scalars()}
        missing = [tag_id for tag_id in known_ids if tag_id not in by_id]
        if missing:
            raise TagNotFoundError(missing[0])

    created_or_found = {
        tag.name_key: tag for tag in await get_or_create_tags(db, user_id, names)
    }

    resolved: list[Tag] = []
    seen: set[UUID] = set()
    for tag_input in tag_inputs:
        if is_temporary_tag_id(tag_input.id):
            tag = created_or_found[tag_name_key(tag_input.name)]
        else:
            tag = by_id[UUID(tag_input.id)]
        if tag.id not in seen:
            seen.add(tag.id)
            resolved.append(tag)
    return resolved


async def list_tags(db: AsyncSession, user_id: UUID) -> list[Tag]:
    """Get all tags for a user, ordered by name."""
    result = await db.execute(
        select(Tag).where(Tag.user_id == user_id).order_by(Tag.name_key, Tag.id),
    )
    return list(result.scalars())


async def get_tags_for_bookmarks(
    db: AsyncSession,
    user_id: UUID,
    bookmark_ids: Sequence[UUID],
) -> dict[UUID, list[TagResponse]]:
    """
    Load the tags of many bookmarks in one query.

    Returns:
        Mapping of bookmark id to its tags ordered by name. Bookmarks without
        tags are absent from the mapping.
    """
    if not bookmark_ids:
        return {}
    result = await db.execute(
        select(bookmark_tags.c.bookmark_id, Tag)
        .join(Tag, Tag.id == bookmark_tags.c.tag_id)
        .where(
            Tag.user_id == user_id,
            bookmark_tags.c.bookmark_id.in_(list(bookmark_ids)),
        )
        .order_by(Tag.name_key),
    )
    tags_by_bookmark: dict[UUID, list[TagResponse]] = {}
    for bookmark_id, tag in result.all():
        tags_by_bookmark.setdefault(bookmark_id, []).append(TagResponse.model_validate(tag))
    return tags_by_bookmark


async def create_tag(db: AsyncSession, user_id: UUID, data: TagCreate) -> Tag:
    """
    Create a tag, or return the existing one with the same name (any casing).

    Returns:
        The new or existing Tag.
    """
    existing = await get_tag_by_name(db, user_id, data.name)
    if existing is not None:
        return existing
    tag = Tag(user_id=user_id, name=data.name)
    db.add(tag)
    try:
        await db.flush()
    except IntegrityError as e:
        # Lost a race against a concurrent create of the same name
        raise TagAlreadyExistsError(data.name) from e
    return tag


async def update_tag(
    db: AsyncSession,
    user_id: UUID,
    tag_id: UUID,
    data: TagUpdate,
) -> Tag:
    """
    Rename a tag.

    Renaming to a different casing of the same name is allowed.

    Raises:
        TagNotFoundError: If the tag doesn't exist.
        TagAlreadyExistsError: If another tag already has the new name.
    """
    tag = await get_tag(db, user_id, tag_id)
    if tag is None:
        raise TagNotFoundError(tag_id)

    existing = await get_tag_by_name(db, user_id, data.name)
    if existing is not None and existing.id != tag.id:
        raise TagAlreadyExistsError(data.name)

    tag.name = data.name
    try:
        await db.flush()
    except IntegrityError as e:
        raise TagAlreadyExistsError(data.name) from e
    return tag


async def delete_tag(db: AsyncSession, user_id: UUID, tag_id: UUID) -> None:
    """
    Delete a tag and unlink it from every bookmark.

    Link rows are removed explicitly before the tag so the outcome doesn't depend
    on the database enforcing the junction table's cascade.

    Raises:
        TagNotFoundError: If the tag doesn't exist.
    """
    tag = await get_tag(db, user_id, tag_id)
    if tag is None:
        raise TagNotFoundError(tag_id)

    unlinked = await db.execute(
        delete(bookmark_tags).where(bookmark_tags.c.tag_id == tag_id),
    )
    await db.execute(delete(Tag).where(Tag.id == tag_id, Tag.user_id == user_id))
    logger.debug("Deleted tag %s (unlinked from %s bookmarks)", tag_id, unlinked.rowcount)
