"""Tests for Unsplash response decoding and error mapping."""

import httpx
import pytest

from photo_sync.services.errors import (
    DecodingError,
    InvalidRequestError,
    NetworkError,
    ServerError,
    UnauthorizedError,
)
from photo_sync.services.unsplash_client import UnsplashClient


def _photo_payload(photo_id: str) -> dict:
    base = f"https://images.unsplash.com/{photo_id}"
    return {
        "id": photo_id,
        "width": 4000,
        "height": 3000,
        "urls": {
            "raw": base,
            "full": f"{base}?q=85",
            "regular": f"{base}?w=1080",
            "small": f"{base}?w=400",
            "thumb": f"{base}?w=200",
        },
        "user": {"id": "u1", "name": "Ansel Adams", "username": "ansel", "bio": None},
        "liked_by_user": False,
    }


def _client(handler) -> UnsplashClient:
    return UnsplashClient(
        access_key="test-key",
        base_url="https://api.example.com",
        http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
    )


@pytest.mark.asyncio
async def test_fetch_random_photos_sends_auth_and_decodes():
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=[_photo_payload("a"), _photo_payload("b")])

    client = _client(handler)
    photos = await client.fetch_random_photos(2)
    await client.close()

    assert [p.id for p in photos] == ["a", "b"]
    assert photos[0].kind == "feed"
    assert photos[0].favorite is None
    assert seen[0].url.path == "/photos/random"
    assert seen[0].url.params["count"] == "2"
    assert seen[0].headers["Authorization"] == "Client-ID test-key"
    assert seen[0].headers["Accept-Version"] == "v1"


@pytest.mark.asyncio
async def test_fetch_topic_photos_builds_composite_ids():
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/topics/nature/photos"
        assert request.url.params["page"] == "2"
        return httpx.Response(200, json=[_photo_payload("x1")])

    client = _client(handler)
    photos = await client.fetch_topic_photos("nature", page=2, per_page=10)

    assert photos[0].id == "nature_x1"
    assert photos[0].topic_id == "nature"
    assert photos[0].photo_id == "x1"


@pytest.mark.asyncio
async def test_fetch_topics_decodes_topic_list():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            200,
            json=[{"id": "bo8jQKTaE0Y", "slug": "wallpapers", "description": None, "total_photos": 10}],
        )

    topics = await _client(handler).fetch_topics(6)

    assert topics[0].slug == "wallpapers"
    assert topics[0].description is None


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("status", "error_type"),
    [(401, UnauthorizedError), (403, UnauthorizedError), (500, ServerError), (503, ServerError)],
)
async def test_http_status_mapping(status, error_type):
    client = _client(lambda request: httpx.Response(status, json={"errors": ["nope"]}))

    with pytest.raises(error_type) as exc_info:
        await client.fetch_random_photos(1)

    assert exc_info.value.retryable is (error_type is ServerError)


@pytest.mark.asyncio
async def test_transport_error_maps_to_retryable_network_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(NetworkError) as exc_info:
        await _client(handler).fetch_topics(6)

    assert exc_info.value.retryable is True


@pytest.mark.asyncio
async def test_malformed_body_maps_to_decoding_error():
    with pytest.raises(DecodingError):
        await _client(lambda request: httpx.Response(200, text="<html>")).fetch_topics(6)

    with pytest.raises(DecodingError):
        await _client(lambda request: httpx.Response(200, json=[{"id": "missing-urls"}])).fetch_random_photos(1)


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("topic_id", "page", "per_page"),
    [("", 1, 10), ("a/b", 1, 10), ("nature", 0, 10), ("nature", 1, 31)],
)
async def test_invalid_arguments_rejected_before_request(topic_id, page, per_page):
    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError("no request expected")

    with pytest.raises(InvalidRequestError):
        await _client(handler).fetch_topic_photos(topic_id, page, per_page)


@pytest.mark.asyncio
async def test_missing_access_key_is_unauthorized():
    client = UnsplashClient(
        access_key="",
        http_client=httpx.AsyncClient(transport=httpx.MockTransport(lambda r: httpx.Response(200, json=[]))),
    )

    with pytest.raises(UnauthorizedError):
        await client.fetch_random_photos(1)
