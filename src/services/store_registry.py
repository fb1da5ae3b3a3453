"""One BookmarkStore per signed-in user, created on demand and disposed on sign-out."""
import asyncio
import logging
import time
from collections.abc import Callable
from uuid import UUID

from sqlalchemy.ext.asyncio import async_sessionmaker

from services.analytics_service import AnalyticsRecorder
from services.bookmark_store import BookmarkStore

logger = logging.getLogger(__name__)


class StoreRegistry:
    """
    Holds the live BookmarkStore of each authenticated user.

    The registry is created once in the application lifespan and reached through
    the ``get_bookmark_store`` dependency; nothing else constructs stores.

    Stores live in this process's memory. Run the API as a single worker process:
    a second worker would keep its own copy of each store, and a mutation served
    by one worker would not show in the other's collections until that store
    reloads.

    Stores not used for ``idle_timeout`` seconds are disposed by ``evict_idle()``
    (run periodically by ``run_eviction()``); the user's next request builds and
    loads a fresh one.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker,
        analytics: AnalyticsRecorder,
        idle_timeout: float = 1800.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._session_factory = session_factory
        self.analytics = analytics
        self.idle_timeout = idle_timeout
        self._clock = clock
        self._stores: dict[UUID, BookmarkStore] = {}
        self._last_used: dict[UUID, float] = {}

    def __contains__(self, user_id: UUID) -> bool:
        return user_id in self._stores

    def __len__(self) -> int:
        return len(self._stores)

    def get(self, user_id: UUID) -> BookmarkStore:
        """Return the user's store, creating an unloaded one on first use."""
        store = self._stores.get(user_id)
        if store is None:
            store = BookmarkStore(user_id, self._session_factory, self.analytics)
            self._stores[user_id] = store
            logger.debug("Created bookmark store for user %s", user_id)
        self._last_used[user_id] = self._clock()
        return store

    async def sign_out(self, user_id: UUID) -> bool:
        """
        Dispose and forget the user's store.

        Returns:
            True if the user had a live store.
        """
        store = self._stores.pop(user_id, None)
        self._last_used.pop(user_id, None)
        if store is None:
            return False
        await store.dispose()
        return True

    async def evict_idle(self) -> list[UUID]:
        """
        Dispose every store unused for longer than ``idle_timeout``.

        Returns:
            The users whose stores were evicted.
        """
        cutoff = self._clock() - self.idle_timeout
        idle = [user_id for user_id, used in self._last_used.items() if used < cutoff]
        for user_id in idle:
            store = self._stores.pop(user_id)
            del self._last_used[user_id]
            store.reset()
        if idle:
            logger.info("Evicted %d idle bookmark store(s)", len(idle))
            await self.analytics.drain()
        return idle

    async def run_eviction(self, interval: float) -> None:
        """Call ``evict_idle()`` every ``interval`` seconds until cancelled."""
        while True:
            await asyncio.sleep(interval)
            try:
                await self.evict_idle()
            except Exception:
                logger.exception("Idle store eviction failed")

    async def close(self) -> None:
        """Dispose every store and flush pending analytics (application shutdown)."""
        stores = list(self._stores.values())
        self._stores.clear()
        self._last_used.clear()
        for store in stores:
            store.reset()
        await self.analytics.close()
