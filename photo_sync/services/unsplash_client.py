"""Unsplash client: the remote source for the feed and topic collections.

Endpoints used:
- GET /photos/random?count=N          → feed photos
- GET /topics?per_page=N              → topics
- GET /topics/{id}/photos?page&per_page → photos of one topic

Every call is an idempotent read. Failures are raised as the sync-core error
taxonomy so the sync engine can decide what to retry:
- transport failures → NetworkError (retryable)
- 401/403 → UnauthorizedError
- other non-2xx → ServerError (retryable)
- malformed body → DecodingError
- bad arguments → InvalidRequestError
"""

import logging
from typing import Any, Protocol

import httpx
from pydantic import BaseModel, TypeAdapter, ValidationError

from photo_sync.schemas.photo import FeedPhoto, PhotoUrls, PhotoUser, Topic, TopicPhoto
from photo_sync.services.errors import (
    DecodingError,
    InvalidRequestError,
    NetworkError,
    ServerError,
    UnauthorizedError,
)
from photo_sync.settings import get_settings

logger = logging.getLogger("uvicorn.error")

# Unsplash caps count/per_page at 30
MAX_PAGE_SIZE = 30


class RemoteSource(Protocol):
    """Capabilities the sync core needs from a remote photo source."""

    async def fetch_random_photos(self, count: int) -> list[FeedPhoto]: ...

    async def fetch_topics(self, per_page: int) -> list[Topic]: ...

    async def fetch_topic_photos(self, topic_id: str, page: int, per_page: int) -> list[TopicPhoto]: ...


class _RemotePhoto(BaseModel):
    """Photo payload as returned by the API (extra fields ignored)."""

    id: str
    urls: PhotoUrls
    user: PhotoUser


_FEED_ADAPTER = TypeAdapter(list[FeedPhoto])
_TOPIC_ADAPTER = TypeAdapter(list[Topic])
_PHOTO_ADAPTER = TypeAdapter(list[_RemotePhoto])


class UnsplashClient:
    """Async client for the Unsplash REST API."""

    BASE_URL = "https://api.unsplash.com"

    def __init__(
        self,
        access_key: str | None = None,
        base_url: str | None = None,
        http_client: httpx.AsyncClient | None = None,
    ):
        """Initialize client with access key.

        Args:
            access_key: Unsplash access key (defaults to settings).
            base_url: API root (defaults to settings, then BASE_URL).
            http_client: Pre-built client (tests inject a MockTransport).
        """
        settings = get_settings()
        self.access_key = access_key if access_key is not None else settings.unsplash_access_key
        self.base_url = (base_url or settings.unsplash_base_url or self.BASE_URL).rstrip("/")
        self.timeout = settings.http_timeout_seconds
        self._http_client = http_client

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(timeout=self.timeout)
        return self._http_client

    async def close(self) -> None:
        """Close HTTP client."""
        if self._http_client:
            await self._http_client.aclose()
            self._http_client = None

    async def fetch_random_photos(self, count: int) -> list[FeedPhoto]:
        """Fetch `count` random photos for the feed."""
        self._check_page_size("count", count)
        data = await self._get_json("/photos/random", {"count": count})
        photos = self._decode(_FEED_ADAPTER, data, what="random photos")
        logger.info(f"Unsplash returned {len(photos)} random photos")
        return photos

    async def fetch_topics(self, per_page: int) -> list[Topic]:
        """Fetch the first page of topics."""
        self._check_page_size("per_page", per_page)
        data = await self._get_json("/topics", {"per_page": per_page})
        topics = self._decode(_TOPIC_ADAPTER, data, what="topics")
        logger.info(f"Unsplash returned {len(topics)} topics")
        return topics

    async def fetch_topic_photos(self, topic_id: str, page: int = 1, per_page: int = 10) -> list[TopicPhoto]:
        """Fetch one page of photos for a topic.

        Records come back keyed by the composite "{topic_id}_{photo_id}" id.
        """
        if not topic_id or "/" in topic_id:
            raise InvalidRequestError(f"Invalid topic id: {topic_id!r}")
        if page < 1:
            raise InvalidRequestError(f"Invalid page: {page}")
        self._check_page_size("per_page", per_page)

        data = await self._get_json(
            f"/topics/{topic_id}/photos",
            {"page": page, "per_page": per_page},
        )
        remote = self._decode(_PHOTO_ADAPTER, data, what=f"photos for topic {topic_id}")
        logger.info(f"Unsplash returned {len(remote)} photos for topic={topic_id}, page={page}")
        return [
            TopicPhoto(
                id=TopicPhoto.composite_id(topic_id, photo.id),
                topic_id=topic_id,
                photo_id=photo.id,
                urls=photo.urls,
                user=photo.user,
            )
            for photo in remote
        ]

    def _check_page_size(self, name: str, value: int) -> None:
        if not 1 <= value <= MAX_PAGE_SIZE:
            raise InvalidRequestError(f"{name} must be between 1 and {MAX_PAGE_SIZE}, got {value}")

    async def _get_json(self, path: str, params: dict[str, Any]) -> Any:
        """GET a JSON document, mapping failures onto the error taxonomy."""
        if not self.access_key:
            logger.warning("Unsplash access key not configured")
            raise UnauthorizedError("Unsplash access key not configured")

        url = f"{self.base_url}{path}"
        headers = {
            "Authorization": f"Client-ID {self.access_key}",
            "Accept-Version": "v1",
        }

        client = await self._get_client()
        try:
            response = await client.get(url, params=params, headers=headers)
        except httpx.InvalidURL as e:
            raise InvalidRequestError(f"Invalid URL {url}: {e}") from e
        except httpx.TransportError as e:
            logger.warning(f"Unsplash request to {path} failed: {e!r}")
            raise NetworkError(f"Request to {path} failed: {e}") from e

        if response.status_code in (401, 403):
            raise UnauthorizedError(f"Unsplash rejected credentials ({response.status_code})")
        if not response.is_success:
            logger.warning(f"Unsplash returned {response.status_code} for {path}")
            raise ServerError(
                f"Unsplash returned {response.status_code} for {path}",
                status_code=response.status_code,
            )

        try:
            return response.json()
        except ValueError as e:
            raise DecodingError(f"Response from {path} is not JSON: {e}") from e

    def _decode(self, adapter: TypeAdapter[Any], data: Any, what: str) -> Any:
        try:
            return adapter.validate_python(data)
        except ValidationError as e:
            logger.warning(f"Failed to decode {what}: {e.error_count()} errors")
            raise DecodingError(f"Malformed {what}: {e}") from e


# Singleton client instance
_client: UnsplashClient | None = None


def get_unsplash_client() -> UnsplashClient:
    """Get Unsplash client singleton."""
    global _client
    if _client is None:
        _client = UnsplashClient()
    return _client
