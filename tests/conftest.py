"""Shared fixtures: in-memory SQLite store, scripted remote source, snapshot dir."""

from collections.abc import AsyncIterator

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

import photo_sync.models  # noqa: F401
from photo_sync.schemas.photo import FeedPhoto, PhotoUrls, PhotoUser, Topic, TopicPhoto
from photo_sync.services.account import Account
from photo_sync.services.errors import NetworkError, PhotoSyncError
from photo_sync.services.library import PhotoLibrary
from photo_sync.settings import Settings
from photo_sync.stores.database import Base
from photo_sync.stores.local_store import LocalStore
from photo_sync.stores.snapshot import SnapshotCache


def make_urls(photo_id: str) -> PhotoUrls:
    base = f"https://images.example.com/{photo_id}"
    return PhotoUrls(
        raw=f"{base}?raw",
        full=f"{base}?full",
        regular=f"{base}?regular",
        small=f"{base}?small",
        thumb=f"{base}?thumb",
    )


def make_user(name: str = "Ansel") -> PhotoUser:
    return PhotoUser(id=f"user-{name.lower()}", name=name, username=name.lower())


def make_feed_photo(photo_id: str, favorite: bool | None = None) -> FeedPhoto:
    return FeedPhoto(id=photo_id, urls=make_urls(photo_id), user=make_user(), favorite=favorite)


def make_topic(topic_id: str, slug: str | None = None) -> Topic:
    return Topic(id=topic_id, slug=slug or topic_id, description=f"All about {topic_id}")


def make_topic_photo(topic_id: str, photo_id: str, favorite: bool | None = None) -> TopicPhoto:
    return TopicPhoto(
        id=TopicPhoto.composite_id(topic_id, photo_id),
        topic_id=topic_id,
        photo_id=photo_id,
        urls=make_urls(photo_id),
        user=make_user(),
        favorite=favorite,
    )


class FakeRemote:
    """Remote source that records calls and can be scripted to fail.

    `failures` holds errors raised (in order) before calls start succeeding;
    `fail_always` makes every call raise it.
    """

    def __init__(self) -> None:
        self.calls: list[tuple] = []
        self.failures: list[PhotoSyncError] = []
        self.fail_always: PhotoSyncError | None = None
        self.topics = [make_topic(f"topic-{i}") for i in range(6)]
        self.topic_photo_ids: dict[str, list[str]] = {}

    def _maybe_fail(self) -> None:
        if self.fail_always is not None:
            raise self.fail_always
        if self.failures:
            raise self.failures.pop(0)

    async def fetch_random_photos(self, count: int) -> list[FeedPhoto]:
        self.calls.append(("random", count))
        self._maybe_fail()
        offset = len([c for c in self.calls if c[0] == "random"]) * 100
        return [make_feed_photo(f"p{offset + i:04d}") for i in range(count)]

    async def fetch_topics(self, per_page: int) -> list[Topic]:
        self.calls.append(("topics", per_page))
        self._maybe_fail()
        return [t.model_copy() for t in self.topics[:per_page]]

    async def fetch_topic_photos(self, topic_id: str, page: int, per_page: int) -> list[TopicPhoto]:
        self.calls.append(("topic_photos", topic_id, page, per_page))
        self._maybe_fail()
        ids = self.topic_photo_ids.get(topic_id)
        if ids is None:
            ids = [f"{(page - 1) * per_page + i:03d}" for i in range(per_page)]
        else:
            ids = ids[(page - 1) * per_page : page * per_page]
        return [make_topic_photo(topic_id, photo_id) for photo_id in ids]

    def count(self, name: str) -> int:
        return len([c for c in self.calls if c[0] == name])


class RecordingSleep:
    """Stand-in for asyncio.sleep that records requested delays."""

    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        snapshot_dir=tmp_path / "snapshots",
        max_retries=3,
        retry_delay_seconds=3.0,
        max_free_favorites=8,
        max_free_pages=3,
    )


@pytest_asyncio.fixture
async def store() -> AsyncIterator[LocalStore]:
    """LocalStore on an in-memory SQLite database."""
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", poolclass=StaticPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    session_factory = async_sessionmaker(engine, expire_on_commit=False)
    local_store = LocalStore(session_factory())
    yield local_store
    await local_store.close()
    await engine.dispose()


@pytest.fixture
def remote() -> FakeRemote:
    return FakeRemote()


@pytest.fixture
def snapshots(settings: Settings) -> SnapshotCache:
    return SnapshotCache(settings.snapshot_dir)


@pytest.fixture
def sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def account() -> Account:
    return Account(privileged=False)


@pytest.fixture
def library(store, remote, snapshots, settings, account, sleep) -> PhotoLibrary:
    return PhotoLibrary(
        store=store,
        remote=remote,
        snapshots=snapshots,
        settings=settings,
        account=account,
        sleep=sleep,
    )


@pytest.fixture
def network_down() -> NetworkError:
    return NetworkError("connection refused")
