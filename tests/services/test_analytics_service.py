"""Tests for the analytics event log and its fire-and-forget recorder."""
import logging
from typing import Any
from uuid import UUID

import pytest
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from uuid6 import uuid7

from models.analytics_event import AnalyticsAction, AnalyticsEvent, status_action
from models.bookmark import Bookmark
from services.analytics_service import AnalyticsRecorder, list_events, record_events


async def count_events(session_factory: async_sessionmaker) -> int:
    """Count analytics rows from a fresh session."""
    async with session_factory() as db:
        return await db.scalar(select(func.count()).select_from(AnalyticsEvent))


# =============================================================================
# record_events / list_events
# =============================================================================


async def test__status_action__builds_label() -> None:
    """Status changes are recorded as update_status_<status>."""
    assert status_action("watched") == "update_status_watched"


async def test__record_events__one_row_per_bookmark(
    db_session: AsyncSession, user_id: UUID,
) -> None:
    """Each bookmark id gets its own event."""
    ids = [uuid7(), uuid7(), uuid7()]

    await record_events(db_session, user_id, ids, AnalyticsAction.DELETE)

    events = await list_events(db_session, user_id)
    assert sorted(e.bookmark_id for e in events) == sorted(ids)
    assert {e.action for e in events} == {"delete"}


async def test__list_events__joins_existing_bookmarks(
    db_session: AsyncSession, user_id: UUID,
) -> None:
    """Events for live bookmarks carry category and status; deleted ones carry None."""
    bookmark = Bookmark(
        user_id=user_id, url="https://example.com/x", title="X", status="watching",
    )
    db_session.add(bookmark)
    await db_session.flush()
    gone = uuid7()

    await record_events(db_session, user_id, [gone], AnalyticsAction.DELETE)
    await record_events(db_session, user_id, [bookmark.id], AnalyticsAction.UPDATE)

    events = await list_events(db_session, user_id)

    assert [e.action for e in events] == ["update", "delete"]
    assert events[0].bookmark.status == "watching"
    assert events[0].bookmark.category_id is None
    assert events[1].bookmark is None


async def test__list_events__scoped_to_user(
    db_session: AsyncSession, user_id: UUID, other_user_id: UUID,
) -> None:
    """Users only see their own events."""
    await record_events(db_session, other_user_id, [uuid7()], AnalyticsAction.CREATE)

    assert await list_events(db_session, user_id) == []


# =============================================================================
# AnalyticsRecorder
# =============================================================================


async def test__dispatch__writes_in_background(
    analytics: AnalyticsRecorder, session_factory: async_sessionmaker, user_id: UUID,
) -> None:
    """dispatch returns a task; the rows exist once it has finished."""
    task = analytics.dispatch(user_id, [uuid7(), uuid7()], AnalyticsAction.CREATE)

    assert task is not None
    await task
    assert await count_events(session_factory) == 2
    assert analytics.pending_count == 0


async def test__dispatch__nothing_to_record(analytics: AnalyticsRecorder, user_id: UUID) -> None:
    """An empty id list schedules nothing."""
    assert analytics.dispatch(user_id, [], AnalyticsAction.DELETE) is None
    assert analytics.pending_count == 0


async def test__dispatch__after_close_is_dropped(
    session_factory: async_sessionmaker, user_id: UUID, caplog: pytest.LogCaptureFixture,
) -> None:
    """A closed recorder drops new events with a warning."""
    recorder = AnalyticsRecorder(session_factory)
    await recorder.close()

    with caplog.at_level(logging.WARNING, logger="services.analytics_service"):
        task = recorder.dispatch(user_id, [uuid7()], AnalyticsAction.CREATE)

    assert task is None
    assert "dropping 'create' events" in caplog.text
    assert await count_events(session_factory) == 0


async def test__dispatch__failure_is_logged_not_raised(
    session_factory: async_sessionmaker, user_id: UUID, caplog: pytest.LogCaptureFixture,
) -> None:
    """A failing write completes its task quietly and logs a warning."""

    class BrokenRecorder(AnalyticsRecorder):
        async def write_events(self, *args: Any, **kwargs: Any) -> None:
            raise RuntimeError("insert failed")

    recorder = BrokenRecorder(session_factory)

    with caplog.at_level(logging.WARNING, logger="services.analytics_service"):
        task = recorder.dispatch(user_id, [uuid7()], status_action("watched"))
        await recorder.drain()

    assert task.exception() is None
    assert "Failed to record 1 'update_status_watched' analytics event(s)" in caplog.text
    assert await count_events(session_factory) == 0


async def test__drain__waits_for_every_dispatch(
    analytics: AnalyticsRecorder, session_factory: async_sessionmaker, user_id: UUID,
) -> None:
    """drain() returns once all dispatched writes are done."""
    for _ in range(5):
        analytics.dispatch(user_id, [uuid7()], AnalyticsAction.UPDATE)

    await analytics.drain()

    assert analytics.pending_count == 0
    assert await count_events(session_factory) == 5
