"""Tests for tag endpoints."""
from collections.abc import Awaitable, Callable

from httpx import AsyncClient

FAKE_UUID = "00000000-0000-7000-8000-00000000dead"


async def test_create_tag_returns_existing_match(client: AsyncClient) -> None:
    """Creating a tag that exists (ignoring case) returns the existing one."""
    first = await client.post("/tags/", json={"name": "Python"})
    second = await client.post("/tags/", json={"name": "python"})

    assert first.status_code == 201
    assert second.status_code == 201
    assert second.json()["id"] == first.json()["id"]
    assert second.json()["name"] == "Python"
    assert len((await client.get("/tags/")).json()) == 1


async def test_create_tag_blank_name(client: AsyncClient) -> None:
    """Whitespace-only names are rejected."""
    response = await client.post("/tags/", json={"name": "   "})
    assert response.status_code == 422


async def test_rename_tag_updates_bookmarks(
    client: AsyncClient, make_bookmark: Callable[..., Awaitable[dict]],
) -> None:
    """Renamed tags show the new name on linked bookmarks."""
    bookmark = await make_bookmark(tags=[{"name": "py"}])
    tag_id = bookmark["tags"][0]["id"]

    response = await client.patch(f"/tags/{tag_id}", json={"name": "Python"})

    assert response.status_code == 200
    assert response.json()["name"] == "Python"
    refreshed = (await client.get(f"/bookmarks/{bookmark['id']}")).json()
    assert [t["name"] for t in refreshed["tags"]] == ["Python"]


async def test_rename_tag_conflict(client: AsyncClient) -> None:
    """Renaming onto another tag's name is 409."""
    await client.post("/tags/", json={"name": "python"})
    other = (await client.post("/tags/", json={"name": "rust"})).json()

    response = await client.patch(f"/tags/{other['id']}", json={"name": "PYTHON"})

    assert response.status_code == 409
    assert response.json()["detail"]["kind"] == "conflict"


async def test_rename_tag_not_found(client: AsyncClient) -> None:
    """Unknown tags are 404."""
    response = await client.patch(f"/tags/{FAKE_UUID}", json={"name": "x"})
    assert response.status_code == 404


async def test_delete_tag_unlinks_bookmarks(
    client: AsyncClient, make_bookmark: Callable[..., Awaitable[dict]],
) -> None:
    """The tag disappears from every bookmark; bookmarks are kept."""
    bookmark = await make_bookmark(tags=[{"name": "old"}, {"name": "keep"}])
    old_id = next(t["id"] for t in bookmark["tags"] if t["name"] == "old")

    response = await client.delete(f"/tags/{old_id}")

    assert response.status_code == 204
    refreshed = (await client.get(f"/bookmarks/{bookmark['id']}")).json()
    assert [t["name"] for t in refreshed["tags"]] == ["keep"]
    assert [t["name"] for t in (await client.get("/tags/")).json()] == ["keep"]
