"""Shared fixtures for API tests."""
from collections.abc import AsyncGenerator, Awaitable, Callable, Generator
from uuid import UUID

import pytest
import respx
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from api.dependencies import get_store_registry, get_straico_client
from api.main import app
from core.config import get_settings
from db.session import get_async_session
from services.analytics_service import AnalyticsRecorder
from services.store_registry import StoreRegistry
from services.straico_client import StraicoClient

STRAICO_URL = "https://api.straico.com"


@pytest.fixture
def dev_user_id() -> UUID:
    """The identity every request runs as (dev mode is on for the test run)."""
    return get_settings().dev_user_id


@pytest.fixture
async def registry(
    session_factory: async_sessionmaker, analytics: AnalyticsRecorder,
) -> AsyncGenerator[StoreRegistry]:
    """Store registry over the test database."""
    store_registry = StoreRegistry(session_factory, analytics)
    yield store_registry
    await store_registry.close()


@pytest.fixture
async def straico_client() -> AsyncGenerator[StraicoClient]:
    """Straico client whose requests are answered by ``straico_mock``."""
    http_client = StraicoClient.create_http_client(base_url=STRAICO_URL, timeout=5)
    yield StraicoClient(http_client)
    await http_client.aclose()


@pytest.fixture
def straico_mock() -> Generator[respx.MockRouter]:
    """Routes for the Straico API; tests add the ones they need."""
    with respx.mock(base_url=STRAICO_URL, assert_all_called=False) as mock:
        yield mock


@pytest.fixture
async def client(
    session_factory: async_sessionmaker,
    registry: StoreRegistry,
    straico_client: StraicoClient,
) -> AsyncGenerator[AsyncClient]:
    """
    Create a test client wired to the test database.

    The lifespan doesn't run under ASGITransport, so the objects it would create
    are supplied as dependency overrides.
    """
    get_settings.cache_clear()

    async def override_get_async_session() -> AsyncGenerator[AsyncSession]:
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_async_session] = override_get_async_session
    app.dependency_overrides[get_store_registry] = lambda: registry
    app.dependency_overrides[get_straico_client] = lambda: straico_client

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture
def make_bookmark(client: AsyncClient) -> Callable[..., Awaitable[dict]]:
    """POST a bookmark through the API and return the created body."""

    async def _make(**fields: object) -> dict:
        payload = {"url": "https://example.com/article", "title": "Article", **fields}
        response = await client.post("/bookmarks/", json=payload)
        assert response.status_code == 201, response.text
        return response.json()

    return _make
