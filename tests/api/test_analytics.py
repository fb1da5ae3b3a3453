"""Tests for the analytics endpoint."""
from collections.abc import Awaitable, Callable

from httpx import AsyncClient

from services.store_registry import StoreRegistry


async def test_list_events_empty(client: AsyncClient) -> None:
    """A new user has no events."""
    response = await client.get("/analytics/")

    assert response.status_code == 200
    assert response.json() == []


async def test_list_events_after_changes(
    client: AsyncClient,
    registry: StoreRegistry,
    make_bookmark: Callable[..., Awaitable[dict]],
) -> None:
    """Mutations leave events carrying the bookmark's category and status."""
    category = (await client.post("/categories/", json={"name": "Videos"})).json()
    kept = await make_bookmark(url="https://example.com/kept", category_id=category["id"])
    await registry.analytics.drain()
    await client.post("/bookmarks/bulk-status", json={"ids": [kept["id"]], "status": "watched"})
    await registry.analytics.drain()
    removed = await make_bookmark(url="https://example.com/removed")
    await registry.analytics.drain()
    await client.delete(f"/bookmarks/{removed['id']}")
    await registry.analytics.drain()

    response = await client.get("/analytics/")

    assert response.status_code == 200
    events = response.json()
    assert sorted((e["bookmark_id"], e["action"]) for e in events) == sorted(
        [
            (kept["id"], "create"),
            (kept["id"], "update_status_watched"),
            (removed["id"], "create"),
            (removed["id"], "delete"),
        ],
    )
    for event in events:
        if event["bookmark_id"] == kept["id"]:
            assert event["bookmark"] == {"category_id": category["id"], "status": "watched"}
        else:
            assert event["bookmark"] is None
