"""
Per-user bookmark store.

BookmarkStore is the single source of truth, for one signed-in user, for that
user's bookmarks, categories and tags. It owns three in-memory collections that
mirror the database and are rebuilt from it (never patched) after every mutation.

Every public operation:

- validates its input before touching the database,
- runs its writes in one transaction, so a bookmark row and its tag links commit
  or roll back together,
- dispatches analytics through AnalyticsRecorder without awaiting it,
- refreshes the collections it affected,
- returns a StoreResult instead of raising.

Operations are not serialized against each other. Two overlapping edits of the
same bookmark both succeed and the last one to commit wins.
"""
import asyncio
import logging
from collections.abc import Awaitable, Callable, Mapping, Sequence
from typing import Any, TypeVar
from uuid import UUID

from pydantic import ValidationError
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import async_sessionmaker

from models.analytics_event import AnalyticsAction, status_action
from models.bookmark import BookmarkStatus
from schemas.analytics import AnalyticsEventResponse
from schemas.bookmark import BookmarkCreate, BookmarkResponse, BookmarkUpdate
from schemas.category import CategoryCreate, CategoryResponse, CategoryUpdate
from schemas.tag import TagCreate, TagResponse, TagUpdate
from services import analytics_service, bookmark_service, category_service, tag_service
from services.analytics_service import AnalyticsRecorder
from services.bookmark_service import BookmarkNotFoundError
from services.exceptions import InvalidInputError, StoreError
from services.results import StoreResult
from shared.errors import ErrorKind

logger = logging.getLogger(__name__)

T = TypeVar("T")

LOAD_FAILED_MESSAGE = "Failed to load your data. Please try again."
DATABASE_ERROR_MESSAGE = "A database error occurred. Please try again."
CONFLICT_MESSAGE = "This change conflicts with existing data."
UNEXPECTED_ERROR_MESSAGE = "Something went wrong. Please try again."

BookmarkInput = BookmarkCreate | Mapping[str, Any]
BookmarkChanges = BookmarkUpdate | Mapping[str, Any]


def format_validation_error(error: ValidationError) -> str:
    """Flatten pydantic errors into a 'field: message' string."""
    messages = []
    for err in error.errors():
        loc = ".".join(str(part) for part in err.get("loc", ())) or "input"
        messages.append(f"{loc}: {err.get('msg', 'invalid')}")
    return "; ".join(messages) or "Invalid input"


class BookmarkStore:
    """
    Bookmarks, categories and tags of one user, kept in sync with the database.

    Construct one per authenticated session (see StoreRegistry), call ``load()``
    once, and ``dispose()`` on sign-out.
    """

    def __init__(
        self,
        user_id: UUID,
        session_factory: async_sessionmaker,
        analytics: AnalyticsRecorder,
    ) -> None:
        self.user_id = user_id
        self._session_factory = session_factory
        self._analytics = analytics
        self.bookmarks: tuple[BookmarkResponse, ...] = ()
        self.categories: tuple[CategoryResponse, ...] = ()
        self.tags: tuple[TagResponse, ...] = ()
        self.loading = False
        self.loaded = False
        self.error: str | None = None
        # Refreshes can overlap; a result is applied only if no later-started
        # query for the same collection has been applied already.
        self._refresh_seq = 0
        self._applied_seq = dict.fromkeys(("bookmarks", "categories", "tags"), 0)

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    async def load(self) -> StoreResult[None]:
        """Fetch bookmarks, categories and tags in parallel and mark the store loaded."""
        async def run() -> None:
            await asyncio.gather(
                self._fetch_bookmarks(),
                self._fetch_categories(),
                self._fetch_tags(),
            )
            self.loaded = True

        self.loading = True
        self.error = None
        try:
            result = await self._execute("load", run)
        finally:
            self.loading = False
        if not result.success:
            self.error = LOAD_FAILED_MESSAGE
            return StoreResult.fail(result.kind or ErrorKind.SERVER, LOAD_FAILED_MESSAGE)
        return result

    def reset(self) -> None:
        """Clear every collection so nothing is visible to the next user."""
        self.bookmarks = ()
        self.categories = ()
        self.tags = ()
        self.loaded = False
        self.loading = False
        self.error = None
        # Drop results of queries still in flight
        self._applied_seq = dict.fromkeys(self._applied_seq, self._refresh_seq)

    async def dispose(self) -> None:
        """Reset and wait for this session's analytics writes to land."""
        self.reset()
        await self._analytics.drain()

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    async def fetch_bookmarks(self) -> StoreResult[tuple[BookmarkResponse, ...]]:
        """Reload bookmarks. Only the primary bookmark query can fail this."""
        return await self._execute("fetch bookmarks", self._fetch_bookmarks)

    async def fetch_categories(self) -> StoreResult[tuple[CategoryResponse, ...]]:
        """Reload categories."""
        return await self._execute("fetch categories", self._fetch_categories)

    async def fetch_tags(self) -> StoreResult[tuple[TagResponse, ...]]:
        """Reload tags."""
        return await self._execute("fetch tags", self._fetch_tags)

    async def fetch_analytics(self) -> StoreResult[list[AnalyticsEventResponse]]:
        """Events newest first with minimal bookmark fields; no aggregation."""
        async def run() -> list[AnalyticsEventResponse]:
            async with self._session_factory() as db:
                return await analytics_service.list_events(db, self.user_id)

        return await self._execute("fetch analytics", run)

    def get_bookmark(self, bookmark_id: UUID) -> BookmarkResponse | None:
        """Look up a bookmark in the loaded collection."""
        return next((b for b in self.bookmarks if b.id == bookmark_id), None)

    # -------------------------------------------------------------------------
    # Bookmarks
    # -------------------------------------------------------------------------

    async def add_bookmark(self, data: BookmarkInput) -> StoreResult[BookmarkResponse]:
        """Create a bookmark with its tags; refreshes bookmarks and tags."""
        async def run() -> BookmarkResponse:
            payload = BookmarkCreate.model_validate(data)
            async with self._session_factory() as db, db.begin():
                bookmark = await bookmark_service.create_bookmark(db, self.user_id, payload)
                created = BookmarkResponse.from_model(bookmark)
            self._analytics.dispatch(self.user_id, [created.id], AnalyticsAction.CREATE)
            await self._refresh(bookmarks=True, tags=True)
            return self.get_bookmark(created.id) or created

        return await self._execute("add bookmark", run)

    async def update_bookmark(
        self, bookmark_id: UUID, data: BookmarkChanges,
    ) -> StoreResult[BookmarkResponse]:
        """Update a bookmark, replacing its tags when given; refreshes bookmarks and tags."""
        async def run() -> BookmarkResponse:
            payload = BookmarkUpdate.model_validate(data)
            async with self._session_factory() as db, db.begin():
                bookmark = await bookmark_service.update_bookmark(
                    db, self.user_id, bookmark_id, payload,
                )
                updated = BookmarkResponse.from_model(bookmark)
            self._analytics.dispatch(self.user_id, [bookmark_id], AnalyticsAction.UPDATE)
            await self._refresh(bookmarks=True, tags=True)
            return self.get_bookmark(bookmark_id) or updated

        return await self._execute("update bookmark", run)

    async def delete_bookmark(self, bookmark_id: UUID) -> StoreResult[list[UUID]]:
        """Delete one bookmark; refreshes bookmarks."""
        async def run() -> list[UUID]:
            deleted = await self._delete_bookmarks([bookmark_id])
            if not deleted:
                raise BookmarkNotFoundError(bookmark_id)
            return deleted

        return await self._execute("delete bookmark", run)

    async def delete_multiple_bookmarks(
        self, bookmark_ids: Sequence[UUID],
    ) -> StoreResult[list[UUID]]:
        """
        Delete many bookmarks in one statement; refreshes bookmarks.

        IDs that don't exist are ignored. Result data is the list actually deleted.
        """
        async def run() -> list[UUID]:
            if not bookmark_ids:
                raise InvalidInputError("No bookmarks selected")
            return await self._delete_bookmarks(bookmark_ids)

        return await self._execute("delete bookmarks", run)

    async def update_multiple_bookmark_status(
        self, bookmark_ids: Sequence[UUID], status: str,
    ) -> StoreResult[list[UUID]]:
        """
        Set the status of many bookmarks; refreshes bookmarks.

        A status outside unwatched/watching/watched is rejected before any
        database call. Result data is the list of ids actually updated.
        """
        async def run() -> list[UUID]:
            try:
                new_status = BookmarkStatus(status)
            except ValueError as e:
                allowed = ", ".join(s.value for s in BookmarkStatus)
                raise InvalidInputError(
                    f"Invalid status '{status}'. Must be one of: {allowed}",
                ) from e
            if not bookmark_ids:
                raise InvalidInputError("No bookmarks selected")
            async with self._session_factory() as db, db.begin():
                updated = await bookmark_service.update_status(
                    db, self.user_id, bookmark_ids, new_status,
                )
            self._analytics.dispatch(self.user_id, updated, status_action(new_status.value))
            await self._refresh(bookmarks=True)
            return updated

        return await self._execute("update bookmark status", run)

    async def update_bookmark_summary(
        self, bookmark_id: UUID, summary: str,
    ) -> StoreResult[BookmarkResponse | None]:
        """Save an AI summary onto a bookmark; refreshes bookmarks."""
        async def run() -> BookmarkResponse | None:
            if not summary or not summary.strip():
                raise InvalidInputError("Summary cannot be empty")
            async with self._session_factory() as db, db.begin():
                await bookmark_service.update_summary(db, self.user_id, bookmark_id, summary)
            self._analytics.dispatch(
                self.user_id, [bookmark_id], AnalyticsAction.GENERATE_SUMMARY,
            )
            await self._refresh(bookmarks=True)
            return self.get_bookmark(bookmark_id)

        return await self._execute("update bookmark summary", run)

    # -------------------------------------------------------------------------
    # Categories
    # -------------------------------------------------------------------------

    async def add_category(
        self, data: CategoryCreate | Mapping[str, Any],
    ) -> StoreResult[CategoryResponse]:
        """Create a category; refreshes categories."""
        async def run() -> CategoryResponse:
            payload = CategoryCreate.model_validate(data)
            async with self._session_factory() as db, db.begin():
                category = await category_service.create_category(db, self.user_id, payload)
                created = CategoryResponse.model_validate(category)
            await self._refresh(categories=True)
            return created

        return await self._execute("add category", run)

    async def update_category(
        self, category_id: UUID, data: CategoryUpdate | Mapping[str, Any],
    ) -> StoreResult[CategoryResponse]:
        """Update a category; refreshes categories and bookmarks (joined data changes)."""
        async def run() -> CategoryResponse:
            payload = CategoryUpdate.model_validate(data)
            async with self._session_factory() as db, db.begin():
                category = await category_service.update_category(
                    db, self.user_id, category_id, payload,
                )
                updated = CategoryResponse.model_validate(category)
            await self._refresh(categories=True, bookmarks=True)
            return updated

        return await self._execute("update category", run)

    async def delete_category(self, category_id: UUID) -> StoreResult[None]:
        """Delete a category, uncategorizing its bookmarks; refreshes categories and bookmarks."""
        async def run() -> None:
            async with self._session_factory() as db, db.begin():
                detached = await category_service.delete_category(
                    db, self.user_id, category_id,
                )
            logger.info(
                "Deleted category %s for user %s (%d bookmarks uncategorized)",
                category_id,
                self.user_id,
                detached,
            )
            await self._refresh(categories=True, bookmarks=True)

        return await self._execute("delete category", run)

    # -------------------------------------------------------------------------
    # Tags
    # -------------------------------------------------------------------------

    async def add_tag(self, data: TagCreate | Mapping[str, Any]) -> StoreResult[TagResponse]:
        """Create a tag (or return the same-named one); refreshes tags."""
        async def run() -> TagResponse:
            payload = TagCreate.model_validate(data)
            async with self._session_factory() as db, db.begin():
                tag = await tag_service.create_tag(db, self.user_id, payload)
                created = TagResponse.model_validate(tag)
            await self._refresh(tags=True)
            return created

        return await self._execute("add tag", run)

    async def update_tag(
        self, tag_id: UUID, data: TagUpdate | Mapping[str, Any],
    ) -> StoreResult[TagResponse]:
        """Rename a tag; refreshes tags and bookmarks."""
        async def run() -> TagResponse:
            payload = TagUpdate.model_validate(data)
            async with self._session_factory() as db, db.begin():
                tag = await tag_service.update_tag(db, self.user_id, tag_id, payload)
                updated = TagResponse.model_validate(tag)
            await self._refresh(tags=True, bookmarks=True)
            return updated

        return await self._execute("update tag", run)

    async def delete_tag(self, tag_id: UUID) -> StoreResult[None]:
        """Delete a tag and its links; refreshes tags and bookmarks."""
        async def run() -> None:
            async with self._session_factory() as db, db.begin():
                await tag_service.delete_tag(db, self.user_id, tag_id)
            await self._refresh(tags=True, bookmarks=True)

        return await self._execute("delete tag", run)

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    async def _execute(
        self, operation: str, call: Callable[[], Awaitable[T]],
    ) -> StoreResult[T]:
        """Run one operation, converting every failure into a StoreResult."""
        try:
            return StoreResult.ok(await call())
        except StoreError as e:
            logger.info("%s failed for user %s: %s", operation, self.user_id, e)
            return StoreResult.fail(e.kind, str(e))
        except ValidationError as e:
            return StoreResult.fail(ErrorKind.VALIDATION, format_validation_error(e))
        except IntegrityError:
            logger.warning(
                "%s hit an integrity error for user %s", operation, self.user_id,
                exc_info=True,
            )
            return StoreResult.fail(ErrorKind.CONFLICT, CONFLICT_MESSAGE)
        except SQLAlchemyError:
            logger.exception("%s failed for user %s", operation, self.user_id)
            return StoreResult.fail(ErrorKind.SERVER, DATABASE_ERROR_MESSAGE)
        except Exception:
            logger.exception("Unexpected error in %s for user %s", operation, self.user_id)
            return StoreResult.fail(ErrorKind.SERVER, UNEXPECTED_ERROR_MESSAGE)

    async def _delete_bookmarks(self, bookmark_ids: Sequence[UUID]) -> list[UUID]:
        async with self._session_factory() as db, db.begin():
            owned = await bookmark_service.get_owned_bookmark_ids(
                db, self.user_id, bookmark_ids,
            )
            if owned:
                # Recorded before the delete statement; the log has no FK to bookmarks
                self._analytics.dispatch(self.user_id, owned, AnalyticsAction.DELETE)
                await bookmark_service.delete_bookmarks(db, self.user_id, owned)
        if owned:
            await self._refresh(bookmarks=True)
        return owned

    async def _refresh(
        self,
        *,
        bookmarks: bool = False,
        categories: bool = False,
        tags: bool = False,
    ) -> None:
        """
        Rebuild the requested collections from the database, in parallel.

        A failed refresh never fails the mutation that triggered it; the store
        keeps its previous collections and records the error.
        """
        steps = []
        if bookmarks:
            steps.append(self._fetch_bookmarks())
        if categories:
            steps.append(self._fetch_categories())
        if tags:
            steps.append(self._fetch_tags())
        self.loading = True
        try:
            await asyncio.gather(*steps)
            self.error = None
        except SQLAlchemyError:
            logger.exception("Refresh failed for user %s", self.user_id)
            self.error = LOAD_FAILED_MESSAGE
        finally:
            self.loading = False

    async def _fetch_bookmarks(self) -> tuple[BookmarkResponse, ...]:
        return await self._fetch("bookmarks", self._query_bookmarks)

    async def _fetch_categories(self) -> tuple[CategoryResponse, ...]:
        return await self._fetch("categories", self._query_categories)

    async def _fetch_tags(self) -> tuple[TagResponse, ...]:
        return await self._fetch("tags", self._query_tags)

    async def _fetch(
        self,
        collection: str,
        query: Callable[[], Awaitable[tuple[Any, ...]]],
    ) -> tuple[Any, ...]:
        """
        Run ``query`` and store its rows as ``collection``.

        Each call takes a sequence number before querying. When two refreshes
        overlap, the one that started later wins even if it finishes first, so a
        slow query can't overwrite a newer snapshot with an older one.
        """
        self._refresh_seq += 1
        seq = self._refresh_seq
        rows = await query()
        if seq > self._applied_seq[collection]:
            self._applied_seq[collection] = seq
            setattr(self, collection, rows)
        else:
            logger.debug(
                "Discarding stale %s refresh for user %s", collection, self.user_id,
            )
        return getattr(self, collection)

    async def _query_bookmarks(self) -> tuple[BookmarkResponse, ...]:
        async with self._session_factory() as db:
            rows = await bookmark_service.list_bookmarks(db, self.user_id)
            bookmarks = [BookmarkResponse.model_validate(row) for row in rows]

        # Tags come from a second session so a failure there can't poison the
        # primary query; bookmarks then show without tags rather than vanish.
        try:
            async with self._session_factory() as db:
                tags_by_bookmark = await tag_service.get_tags_for_bookmarks(
                    db, self.user_id, [b.id for b in bookmarks],
                )
        except SQLAlchemyError:
            logger.warning(
                "Failed to load bookmark tags for user %s; showing bookmarks without tags",
                self.user_id,
                exc_info=True,
            )
            tags_by_bookmark = {}

        return tuple(
            b.model_copy(update={"tags": tags_by_bookmark.get(b.id, [])})
            for b in bookmarks
        )

    async def _query_categories(self) -> tuple[CategoryResponse, ...]:
        async with self._session_factory() as db:
            rows = await category_service.list_categories(db, self.user_id)
            return tuple(CategoryResponse.model_validate(row) for row in rows)

    async def _query_tags(self) -> tuple[TagResponse, ...]:
        async with self._session_factory() as db:
            rows = await tag_service.list_tags(db, self.user_id)
            return tuple(TagResponse.model_validate(row) for row in rows)
