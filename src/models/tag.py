"""Tag model for storing user tags."""
from datetime import datetime
from typing import TYPE_CHECKING
from uuid import UUID

from sqlalchemy import Column, DateTime, ForeignKey, Index, String, Table, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates

from models.base import Base, UUIDv7Mixin, utc_now

if TYPE_CHECKING:
    from models.bookmark import Bookmark


def tag_name_key(name: str) -> str:
    """
    Comparison key for tag names.

    Unicode case folding, so "Ärger" and "ärger" (or "Straße" and "STRASSE")
    are the same tag whatever the database's own lower() does.
    """
    return name.strip().casefold()


# Junction table for many-to-many relationship between bookmarks and tags
bookmark_tags = Table(
    "bookmark_tags",
    Base.metadata,
    Column(
        "bookmark_id",
        Uuid,
        ForeignKey("bookmarks.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column(
        "tag_id",
        Uuid,
        ForeignKey("tags.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    # Index for lookups by tag (composite PK already indexes bookmark_id first)
    Index("ix_bookmark_tags_tag_id", "tag_id"),
)


class Tag(Base, UUIDv7Mixin):
    """
    Tag model - user-defined labels attached to bookmarks.

    Names keep the casing the user typed for display. ``name_key`` holds the
    case-folded name and is unique per user, so matching ignores case for any
    script, not just ASCII.
    """

    __tablename__ = "tags"
    __table_args__ = (
        # Two concurrent "create tag News/news" requests can't both win
        Index("uq_tags_user_id_name_key", "user_id", "name_key", unique=True),
    )

    # id provided by UUIDv7Mixin
    user_id: Mapped[UUID] = mapped_column(Uuid, nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    # Set from name; folding can lengthen a name (e.g. "ß" to "ss")
    name_key: Mapped[str] = mapped_column(String(300), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        nullable=False,
    )

    bookmarks: Mapped[list["Bookmark"]] = relationship(
        secondary=bookmark_tags,
        back_populates="tag_objects",
    )

    @validates("name")
    def _set_name_key(self, key: str, name: str) -> str:
        self.name_key = tag_name_key(name)
        return name
