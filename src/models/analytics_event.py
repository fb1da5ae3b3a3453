"""AnalyticsEvent model - append-only log of user actions on bookmarks."""
from datetime import datetime
from enum import StrEnum
from uuid import UUID

from sqlalchemy import DateTime, Index, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from models.base import Base, UUIDv7Mixin, utc_now


class AnalyticsAction(StrEnum):
    """Fixed action labels. Status changes use status_action()."""

    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    GENERATE_SUMMARY = "generate_summary"


def status_action(status: str) -> str:
    """Action label recorded when a bookmark's status is bulk-updated."""
    return f"update_status_{status}"


class AnalyticsEvent(Base, UUIDv7Mixin):
    """
    One user action against one bookmark, used for dashboard reporting only.

    bookmark_id deliberately has no foreign key: ``delete`` events are written for
    bookmarks that are about to disappear, and must outlive them.
    """

    __tablename__ = "analytics_events"
    __table_args__ = (
        Index("ix_analytics_events_user_created", "user_id", "created_at"),
    )

    user_id: Mapped[UUID] = mapped_column(Uuid, nullable=False)
    bookmark_id: Mapped[UUID] = mapped_column(Uuid, nullable=False, index=True)
    action: Mapped[str] = mapped_column(String(50), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        nullable=False,
    )
