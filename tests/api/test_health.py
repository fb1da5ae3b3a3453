"""Tests for the health check endpoint."""
from typing import Any

import pytest
from httpx import AsyncClient
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from services.store_registry import StoreRegistry


async def test_health_endpoint_returns_healthy_status(client: AsyncClient) -> None:
    """The endpoint answers 200 and reports the database as reachable."""
    response = await client.get("/health")

    assert response.status_code == 200
    assert response.json() == {
        "status": "healthy",
        "database": "healthy",
        "active_stores": 0,
        "pending_analytics": 0,
    }


async def test_health_endpoint_counts_live_stores(
    client: AsyncClient, registry: StoreRegistry,
) -> None:
    """A signed-in user's store shows up in the count."""
    await client.get("/bookmarks/")

    response = await client.get("/health")

    assert response.json()["active_stores"] == len(registry) == 1


async def test_health_endpoint_degraded_when_database_fails(
    client: AsyncClient, monkeypatch: pytest.MonkeyPatch,
) -> None:
    """A failing database is reported, not raised."""
    async def fail(*args: Any, **kwargs: Any) -> Any:
        raise OperationalError("SELECT 1", {}, Exception("unreachable"))

    monkeypatch.setattr(AsyncSession, "execute", fail)

    response = await client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "degraded"
    assert response.json()["database"] == "unhealthy"


async def test_health_endpoint_sets_security_headers(client: AsyncClient) -> None:
    """Every response carries the security headers."""
    response = await client.get("/health")

    assert response.headers["X-Content-Type-Options"] == "nosniff"
    assert response.headers["X-Frame-Options"] == "DENY"
    assert "max-age=31536000" in response.headers["Strict-Transport-Security"]
