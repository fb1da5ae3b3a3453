"""Category model for grouping bookmarks."""
from typing import TYPE_CHECKING
from uuid import UUID

from sqlalchemy import String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from models.base import Base, TimestampMixin, UUIDv7Mixin

if TYPE_CHECKING:
    from models.bookmark import Bookmark

DEFAULT_CATEGORY_COLOR = "#3B82F6"


class Category(Base, UUIDv7Mixin, TimestampMixin):
    """Category model - a single-valued grouping label for bookmarks."""

    __tablename__ = "categories"

    user_id: Mapped[UUID] = mapped_column(Uuid, nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    color: Mapped[str] = mapped_column(
        String(20), nullable=False, default=DEFAULT_CATEGORY_COLOR,
    )
    icon: Mapped[str | None] = mapped_column(String(100), nullable=True)

    # passive_deletes: the FK's ON DELETE SET NULL does the work, don't load children
    bookmarks: Mapped[list["Bookmark"]] = relationship(
        back_populates="category",
        passive_deletes=True,
    )
