"""Tests for the library endpoints against an in-memory library."""

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from photo_sync.main import app
from photo_sync.services.errors import ServerError, UnauthorizedError
from photo_sync.services.library import set_library


@pytest_asyncio.fixture
async def client(library):
    """Test client bound to the fixture library."""
    set_library(library)
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac
    set_library(None)


@pytest.mark.asyncio
async def test_feed_reload_and_get(client: AsyncClient):
    response = await client.post("/v1/feed/reload")
    assert response.status_code == 200
    data = response.json()
    assert len(data["photos"]) == 30
    assert data["isLoading"] is False
    assert data["errorMessage"] is None
    assert data["outcome"] == "remote"

    response = await client.get("/v1/feed")
    assert len(response.json()["photos"]) == 30


@pytest.mark.asyncio
async def test_feed_reload_reports_degraded_state(client: AsyncClient, remote, network_down):
    remote.fail_always = network_down

    response = await client.post("/v1/feed/reload")

    assert response.status_code == 200
    data = response.json()
    assert data["photos"] == []
    assert data["outcome"] == "empty"
    assert data["errorMessage"]


@pytest.mark.asyncio
async def test_feed_clear_refetches(client: AsyncClient, remote):
    await client.post("/v1/feed/reload")

    response = await client.post("/v1/feed/clear")

    assert response.status_code == 200
    assert len(response.json()["photos"]) == 20
    assert ("random", 20) in remote.calls


@pytest.mark.asyncio
async def test_topics_and_topic_photos(client: AsyncClient):
    response = await client.post("/v1/topics/reload")
    assert response.status_code == 200
    topics = response.json()["topics"]
    assert len(topics) == 6

    topic_id = topics[0]["id"]
    response = await client.get(f"/v1/topics/{topic_id}/photos")
    assert response.status_code == 200
    data = response.json()
    assert data["topicId"] == topic_id
    assert len(data["photos"]) == 10
    assert all(p["id"].startswith(f"{topic_id}_") for p in data["photos"])
    assert data["currentPage"] == 0
    assert data["canLoadMore"] is True


@pytest.mark.asyncio
async def test_unknown_topic_is_404(client: AsyncClient):
    response = await client.get("/v1/topics/missing/photos")

    assert response.status_code == 404
    assert response.json()["detail"]["error"]["code"] == "TOPIC_NOT_FOUND"


@pytest.mark.asyncio
async def test_load_more_hits_page_ceiling(client: AsyncClient, remote):
    await client.post("/v1/topics/reload")

    for page in (1, 2, 3):
        response = await client.post("/v1/topics/topic-0/photos/more")
        assert response.status_code == 200
        assert response.json()["currentPage"] == page

    response = await client.post("/v1/topics/topic-0/photos/more")

    assert response.status_code == 409
    error = response.json()["detail"]["error"]
    assert error["code"] == "PAGE_LIMIT_REACHED"
    assert error["detail"]["limit"] == 3
    assert remote.count("topic_photos") == 3


@pytest.mark.asyncio
async def test_toggle_favorite_and_quota(client: AsyncClient):
    photos = (await client.post("/v1/feed/reload")).json()["photos"]

    for photo in photos[:8]:
        response = await client.post("/v1/favorites/toggle", json={"kind": "feed", "id": photo["id"]})
        assert response.status_code == 200
        assert response.json()["photo"]["favorite"] is True

    favorites = (await client.get("/v1/favorites")).json()
    assert favorites["count"] == 8
    assert favorites["limit"] == 8
    assert favorites["limitReached"] is True

    response = await client.post("/v1/favorites/toggle", json={"kind": "feed", "id": photos[8]["id"]})
    assert response.status_code == 403
    assert response.json()["detail"]["error"]["code"] == "FAVORITE_QUOTA_EXCEEDED"


@pytest.mark.asyncio
async def test_toggle_unknown_photo_is_404(client: AsyncClient):
    response = await client.post("/v1/favorites/toggle", json={"kind": "topic", "id": "nature_missing"})

    assert response.status_code == 404
    assert response.json()["detail"]["error"]["code"] == "PHOTO_NOT_FOUND"


@pytest.mark.asyncio
async def test_unfavorite_all(client: AsyncClient):
    photos = (await client.post("/v1/feed/reload")).json()["photos"]
    await client.post("/v1/favorites/toggle", json={"kind": "feed", "id": photos[0]["id"]})

    response = await client.delete("/v1/favorites")

    assert response.status_code == 200
    assert response.json()["count"] == 0


@pytest.mark.asyncio
async def test_account_privilege_lifts_limits(client: AsyncClient):
    assert (await client.get("/v1/account")).json() == {"privileged": False}

    response = await client.put("/v1/account", json={"privileged": True})
    assert response.json() == {"privileged": True}

    favorites = (await client.get("/v1/favorites")).json()
    assert favorites["limit"] is None
    assert favorites["limitReached"] is False


@pytest.mark.asyncio
async def test_cache_size_and_clear(client: AsyncClient):
    await client.post("/v1/feed/reload")

    info = (await client.get("/v1/cache")).json()
    assert info["sizeBytes"] > 0
    assert info["size"].endswith(" MB")

    cleared = (await client.delete("/v1/cache")).json()
    assert cleared["removed"] == 1
    assert cleared["sizeBytes"] == 0


@pytest.mark.asyncio
async def test_retryable_sync_error_escaping_a_route_is_502(client: AsyncClient, library, monkeypatch):
    async def failing_load_feed():
        raise ServerError("upstream unavailable", status_code=503)

    monkeypatch.setattr(library.engine, "load_feed", failing_load_feed)

    response = await client.post("/v1/feed/reload")

    assert response.status_code == 502
    assert response.json()["error"]["code"] == "SERVER_ERROR"


@pytest.mark.asyncio
async def test_non_retryable_sync_error_escaping_a_route_is_400(client: AsyncClient, library, monkeypatch):
    async def failing_load_feed():
        raise UnauthorizedError("bad key")

    monkeypatch.setattr(library.engine, "load_feed", failing_load_feed)

    response = await client.post("/v1/feed/reload")

    assert response.status_code == 400
    assert response.json()["error"]["code"] == UnauthorizedError.code
