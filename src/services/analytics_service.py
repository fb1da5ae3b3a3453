"""
Analytics event log: best-effort writes and the dashboard listing.

Writes never run inside the caller's transaction. AnalyticsRecorder schedules each
batch as its own asyncio task with its own session, so a failed or slow event
insert can neither block nor roll back the bookmark mutation it describes.
"""
import asyncio
import logging
from collections.abc import Sequence
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from models.analytics_event import AnalyticsEvent
from models.bookmark import Bookmark
from schemas.analytics import AnalyticsBookmarkInfo, AnalyticsEventResponse

logger = logging.getLogger(__name__)


async def record_events(
    db: AsyncSession,
    user_id: UUID,
    bookmark_ids: Sequence[UUID],
    action: str,
) -> None:
    """Insert one event per bookmark id. Does not commit."""
    db.add_all(
        AnalyticsEvent(user_id=user_id, bookmark_id=bookmark_id, action=action)
        for bookmark_id in bookmark_ids
    )
    await db.flush()


async def list_events(db: AsyncSession, user_id: UUID) -> list[AnalyticsEventResponse]:
    """
    Get a user's events newest first, each with its bookmark's category and status.

    Events for deleted bookmarks are included with ``bookmark=None``.
    """
    result = await db.execute(
        select(AnalyticsEvent, Bookmark.id, Bookmark.category_id, Bookmark.status)
        .outerjoin(
            Bookmark,
            (Bookmark.id == AnalyticsEvent.bookmark_id) & (Bookmark.user_id == user_id),
        )
        .where(AnalyticsEvent.user_id == user_id)
        .order_by(AnalyticsEvent.created_at.desc(), AnalyticsEvent.id.desc()),
    )
    events = []
    for event, bookmark_id, category_id, status in result.all():
        bookmark = (
            AnalyticsBookmarkInfo(category_id=category_id, status=status)
            if bookmark_id is not None
            else None
        )
        events.append(
            AnalyticsEventResponse(
                id=event.id,
                bookmark_id=event.bookmark_id,
                action=event.action,
                created_at=event.created_at,
                bookmark=bookmark,
            ),
        )
    return events


class AnalyticsRecorder:
    """
    Fire-and-forget dispatcher for analytics writes.

    ``dispatch`` returns immediately. Failures are logged at WARNING and go no
    further. ``drain`` waits for everything dispatched so far, which shutdown and
    tests use.
    """

    def __init__(self, session_factory: async_sessionmaker) -> None:
        self._session_factory = session_factory
        self._pending: set[asyncio.Task] = set()
        self._closed = False

    @property
    def pending_count(self) -> int:
        """Number of writes that haven't finished yet."""
        return len(self._pending)

    def dispatch(
        self,
        user_id: UUID,
        bookmark_ids: Sequence[UUID],
        action: str,
    ) -> asyncio.Task | None:
        """
        Schedule one event per bookmark id without waiting for it.

        Returns:
            The scheduled task, or None when there is nothing to record or the
            recorder is closed.
        """
        if self._closed:
            logger.warning("Analytics recorder closed; dropping '%s' events", action)
            return None
        ids = list(bookmark_ids)
        if not ids:
            return None
        task = asyncio.create_task(
            self._write(user_id, ids, action),
            name=f"analytics:{action}",
        )
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def _write(self, user_id: UUID, bookmark_ids: list[UUID], action: str) -> None:
        try:
            async with self._session_factory() as db, db.begin():
                await self.write_events(db, user_id, bookmark_ids, action)
        except Exception:
            logger.warning(
                "Failed to record %d '%s' analytics event(s) for user %s",
                len(bookmark_ids),
                action,
                user_id,
                exc_info=True,
            )

    async def write_events(
        self,
        db: AsyncSession,
        user_id: UUID,
        bookmark_ids: Sequence[UUID],
        action: str,
    ) -> None:
        """Persist the events. Separate from _write so tests can force a failure."""
        await record_events(db, user_id, bookmark_ids, action)

    async def drain(self) -> None:
        """Wait for every dispatched write to finish."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    async def close(self) -> None:
        """Stop accepting new events and wait for pending ones."""
        self._closed = True
        await self.drain()
