"""Sync engine: local-first loading of the feed and topic collections.

Flow per collection (feed, topics):
1. Query the local store; a non-empty result is adopted and we stop
   (local data is never overridden by a remote re-fetch unless cleared)
2. Otherwise request a batch from the remote source (30 photos / 6 topics)
3. On success: upsert into the store, append to memory, commit, save snapshot
4. On a transient failure (NetworkError, ServerError): retry up to
   max_retries times with a constant delay between attempts
5. After exhaustion: set a user-facing message and load the last snapshot

load_feed() and load_topics() never raise. Failure is visible only through
error_message and the LoadOutcome they return.

State (photos, topics, per-topic photo lists, is_loading, error_message) is owned by
the engine. Readers get copies; collaborators mutate through the command
methods at the bottom of the class.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from enum import Enum
from typing import TypeVar

from sqlalchemy.exc import SQLAlchemyError

from photo_sync.schemas.photo import FeedPhoto, Photo, RecordKind, Topic, TopicPhoto
from photo_sync.services.errors import NotFoundError, PhotoSyncError, StoreError
from photo_sync.services.unsplash_client import RemoteSource
from photo_sync.settings import Settings, get_settings
from photo_sync.stores.local_store import LocalStore
from photo_sync.stores.snapshot import SnapshotCache

logger = logging.getLogger("uvicorn.error")

T = TypeVar("T")

FEED_LOAD_FAILED = "Could not load photos. Check your network connection and try again."
TOPICS_LOAD_FAILED = "Could not load topics. Check your network connection and try again."


class LoadOutcome(Enum):
    """Terminal state of the last load of a collection."""

    LOCAL = "local"  # served from the local store
    REMOTE = "remote"  # fetched from the remote source
    SNAPSHOT = "snapshot"  # degraded: last-known-good snapshot
    EMPTY = "empty"  # degraded: nothing available


class SyncEngine:
    """Owns the in-memory collections and keeps them in sync with the store."""

    def __init__(
        self,
        store: LocalStore,
        remote: RemoteSource,
        snapshots: SnapshotCache,
        settings: Settings | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        settings = settings or get_settings()
        self._store = store
        self._remote = remote
        self._snapshots = snapshots
        self._sleep = sleep

        self.feed_batch_size = settings.feed_batch_size
        self.topics_per_page = settings.topics_per_page
        self.topic_photos_per_page = settings.topic_photos_per_page
        self.clear_refetch_count = settings.clear_refetch_count
        self.max_retries = settings.max_retries
        self.retry_delay = settings.retry_delay_seconds

        self._photos: list[FeedPhoto] = []
        self._topics: list[Topic] = []
        self._topic_photos: dict[str, list[TopicPhoto]] = {}
        self._loading_ops = 0
        self.error_message: str | None = None
        self.last_outcome: dict[RecordKind, LoadOutcome] = {}

    # ============================================================
    # Read-only views
    # ============================================================

    @property
    def photos(self) -> list[FeedPhoto]:
        return [p.model_copy(deep=True) for p in self._photos]

    @property
    def topics(self) -> list[Topic]:
        return [t.model_copy(deep=True) for t in self._topics]

    @property
    def is_loading(self) -> bool:
        return self._loading_ops > 0

    def photos_for_topic(self, topic_id: str) -> list[TopicPhoto]:
        return [p.model_copy(deep=True) for p in self._topic_photos.get(topic_id, [])]

    def find_topic(self, topic_id: str) -> Topic | None:
        for topic in self._topics:
            if topic.id == topic_id or topic.slug == topic_id:
                return topic.model_copy(deep=True)
        return None

    # ============================================================
    # Feed
    # ============================================================

    async def load_feed(self) -> LoadOutcome:
        """Load the feed: local store, then remote with retry, then snapshot."""
        self._loading_ops += 1
        self.error_message = None
        try:
            local = await self._fetch_local(RecordKind.FEED)
            if local:
                self._photos = local
                logger.info(f"Feed served from local store ({len(local)} photos)")
                return self._finish(RecordKind.FEED, LoadOutcome.LOCAL)

            try:
                fetched = await self._with_retry(
                    lambda: self._remote.fetch_random_photos(self.feed_batch_size),
                    what="feed",
                )
                await self._adopt_feed(fetched)
            except PhotoSyncError as e:
                logger.warning(f"Feed load failed ({e.code}): {e}")
                return self._fall_back(RecordKind.FEED, FEED_LOAD_FAILED)
            except Exception:
                logger.exception("Unexpected error while loading feed")
                return self._fall_back(RecordKind.FEED, FEED_LOAD_FAILED)

            return self._finish(RecordKind.FEED, LoadOutcome.REMOTE)
        finally:
            self._loading_ops -= 1

    async def clear_all_photos(self) -> None:
        """Delete all feed photos and topics, then re-fetch to repopulate.

        The re-fetch is a single attempt per collection; failures are
        recorded in error_message.
        """
        self._loading_ops += 1
        try:
            try:
                await self._store.delete_all(RecordKind.FEED)
                await self._store.delete_all(RecordKind.TOPIC)
                await self._store.commit()
            except (StoreError, SQLAlchemyError) as e:
                logger.error(f"Failed to clear local photos: {e}")
                self.error_message = f"Failed to clear photos: {e}"
                return

            self._photos = []
            self._topics = []
            logger.info("All feed photos and topics cleared")

            try:
                fetched = await self._remote.fetch_random_photos(self.clear_refetch_count)
                await self._adopt_feed(fetched)
                self.last_outcome[RecordKind.FEED] = LoadOutcome.REMOTE
            except (PhotoSyncError, SQLAlchemyError) as e:
                logger.warning(f"Feed re-fetch after clear failed: {e}")
                self.error_message = FEED_LOAD_FAILED
                self.last_outcome[RecordKind.FEED] = LoadOutcome.EMPTY

            try:
                fetched_topics = await self._remote.fetch_topics(self.topics_per_page)
                await self._adopt_topics(fetched_topics)
                self.last_outcome[RecordKind.TOPIC] = LoadOutcome.REMOTE
            except (PhotoSyncError, SQLAlchemyError) as e:
                logger.warning(f"Topic re-fetch after clear failed: {e}")
                self.error_message = self.error_message or TOPICS_LOAD_FAILED
                self.last_outcome[RecordKind.TOPIC] = LoadOutcome.EMPTY
        finally:
            self._loading_ops -= 1

    async def _adopt_feed(self, fetched: list[FeedPhoto]) -> None:
        """Upsert fetched photos (keeping favorite state), commit, then expose them."""
        adopted: list[FeedPhoto] = []
        for photo in fetched:
            existing = await self._store.get(RecordKind.FEED, photo.id)
            if existing is not None:
                photo = photo.model_copy(update={"favorite": existing.favorite})
            await self._store.insert_or_replace(photo)
            adopted.append(photo)
        await self._store.commit()

        known = {p.id: i for i, p in enumerate(self._photos)}
        for photo in adopted:
            if photo.id in known:
                self._photos[known[photo.id]] = photo
            else:
                known[photo.id] = len(self._photos)
                self._photos.append(photo)

        logger.info(f"Saved {len(adopted)} feed photos to local store")
        self._save_snapshot(RecordKind.FEED, self._photos)

    # ============================================================
    # Topics
    # ============================================================

    async def load_topics(self) -> LoadOutcome:
        """Load topics: local store, then remote with retry, then snapshot."""
        self._loading_ops += 1
        try:
            local = await self._fetch_local(RecordKind.TOPIC)
            if local:
                self._topics = local
                logger.info(f"Topics served from local store ({len(local)} topics)")
                return self._finish(RecordKind.TOPIC, LoadOutcome.LOCAL)

            try:
                fetched = await self._with_retry(
                    lambda: self._remote.fetch_topics(self.topics_per_page),
                    what="topics",
                )
                await self._adopt_topics(fetched)
            except PhotoSyncError as e:
                logger.warning(f"Topics load failed ({e.code}): {e}")
                return self._fall_back(RecordKind.TOPIC, TOPICS_LOAD_FAILED)
            except Exception:
                logger.exception("Unexpected error while loading topics")
                return self._fall_back(RecordKind.TOPIC, TOPICS_LOAD_FAILED)

            return self._finish(RecordKind.TOPIC, LoadOutcome.REMOTE)
        finally:
            self._loading_ops -= 1

    async def load_topics_if_needed(self) -> LoadOutcome | None:
        """Load topics only while the in-memory list is empty."""
        if self._topics:
            logger.info("Topic list already populated, skipping load")
            return None
        return await self.load_topics()

    async def _adopt_topics(self, fetched: list[Topic]) -> None:
        """Replace the topic list wholesale with a fresh fetch."""
        adopted: list[Topic] = []
        for topic in fetched:
            existing = await self._store.get(RecordKind.TOPIC, topic.id)
            if existing is not None and topic.favorite is None:
                topic = topic.model_copy(update={"favorite": existing.favorite})
            await self._store.insert_or_replace(topic)
            adopted.append(topic)
        await self._store.commit()

        self._topics = adopted
        logger.info(f"Saved {len(adopted)} topics to local store")
        self._save_snapshot(RecordKind.TOPIC, self._topics)

    # ============================================================
    # Topic photos
    # ============================================================

    async def fetch_topic_photos(
        self,
        topic: Topic | str,
        page: int = 1,
        page_size: int | None = None,
    ) -> list[TopicPhoto]:
        """Load one page of a topic's photos, local store first.

        If the store already holds page * page_size records for the topic they
        are served without a remote call. Otherwise the page is fetched,
        reconciled by composite id and appended to the topic's list.

        Returns:
            The topic's in-memory list after the load (errors leave it unchanged).
        """
        topic_id = topic.id if isinstance(topic, Topic) else topic
        page_size = page_size or self.topic_photos_per_page
        needed = page * page_size

        try:
            local = await self._store.fetch(
                RecordKind.TOPIC_PHOTO,
                id_prefix=TopicPhoto.id_prefix(topic_id),
                limit=needed,
            )
            if len(local) >= needed:
                logger.info(f"Topic {topic_id} page {page} served from local store")
                self.append_topic_photos(topic_id, local)
                return self.photos_for_topic(topic_id)

            logger.info(f"Topic {topic_id} has {len(local)} local photos, fetching page {page}")
            fetched = await self._remote.fetch_topic_photos(topic_id, page, page_size)
            stored = await self.store_topic_photos(fetched)
            self.append_topic_photos(topic_id, stored)
        except PhotoSyncError as e:
            logger.warning(f"Fetching photos for topic {topic_id} failed ({e.code}): {e}")
            self.error_message = f"Failed to fetch or save topic photos: {e}"
        except SQLAlchemyError as e:
            logger.exception(f"Local store error for topic {topic_id}")
            self.error_message = f"Failed to fetch or save topic photos: {e}"

        return self.photos_for_topic(topic_id)

    # ============================================================
    # Commands for collaborators
    # ============================================================

    async def store_topic_photos(self, fetched: list[TopicPhoto]) -> list[TopicPhoto]:
        """Reconcile fetched topic photos against the store and commit.

        Existing composite ids get fresh urls/user with favorite preserved;
        new ids are created with favorite=False.
        """
        stored: list[TopicPhoto] = []
        for photo in fetched:
            existing = await self._store.get(RecordKind.TOPIC_PHOTO, photo.id)
            if existing is not None:
                record = existing.model_copy(update={"urls": photo.urls, "user": photo.user})
            else:
                record = photo.model_copy(update={"favorite": False})
            await self._store.insert_or_replace(record)
            stored.append(record)
        await self._store.commit()
        logger.info(f"Saved {len(stored)} topic photos to local store")
        return stored

    def append_topic_photos(self, topic_id: str, photos: list[TopicPhoto]) -> None:
        """Append to a topic's list; ids already present are refreshed in place."""
        current = self._topic_photos.setdefault(topic_id, [])
        known = {p.id: i for i, p in enumerate(current)}
        for photo in photos:
            if photo.id in known:
                current[known[photo.id]] = photo
            else:
                known[photo.id] = len(current)
                current.append(photo)

    async def resolve_photo(self, photo: Photo) -> Photo:
        """Return the engine's current copy of a photo.

        Looks in memory first, then in the store; unknown photos are returned
        as given.
        """
        if isinstance(photo, FeedPhoto):
            for owned in self._photos:
                if owned.id == photo.id:
                    return owned.model_copy(deep=True)
            stored = await self._store.get(RecordKind.FEED, photo.id)
        else:
            for photos in self._topic_photos.values():
                for owned in photos:
                    if owned.id == photo.id:
                        return owned.model_copy(deep=True)
            stored = await self._store.get(RecordKind.TOPIC_PHOTO, photo.id)
        return stored if stored is not None else photo.model_copy(deep=True)

    async def find_photo(self, kind: RecordKind, photo_id: str) -> Photo | None:
        """Look up a photo by kind and id, in memory first, then in the store."""
        if kind is RecordKind.FEED:
            found: Photo | None = next((p for p in self._photos if p.id == photo_id), None)
        elif kind is RecordKind.TOPIC_PHOTO:
            found = next(
                (p for photos in self._topic_photos.values() for p in photos if p.id == photo_id),
                None,
            )
        else:
            raise ValueError(f"{kind.value} is not a photo kind")

        if found is not None:
            return found.model_copy(deep=True)
        return await self._store.get(kind, photo_id)

    async def persist_favorites(self, photos: list[Photo], favorite: bool) -> None:
        """Set the favorite flag on photos, commit once, then mirror it in memory.

        Only records already in the local store are written. Photos known only
        from a snapshot change in memory, so a degraded feed never becomes the
        durable local copy.
        """
        skipped = 0
        for photo in photos:
            kind = RecordKind.FEED if isinstance(photo, FeedPhoto) else RecordKind.TOPIC_PHOTO
            if await self._store.get(kind, photo.id) is None:
                skipped += 1
                continue
            await self._store.insert_or_replace(photo.model_copy(update={"favorite": favorite}))
        await self._store.commit()
        if skipped:
            logger.info(f"{skipped} photos not in local store, favorite={favorite} kept in memory only")

        changed_feed = {p.id for p in photos if isinstance(p, FeedPhoto)}
        changed_topic = {p.id for p in photos if isinstance(p, TopicPhoto)}
        for i, owned in enumerate(self._photos):
            if owned.id in changed_feed:
                self._photos[i] = owned.model_copy(update={"favorite": favorite})
        for topic_list in self._topic_photos.values():
            for i, owned in enumerate(topic_list):
                if owned.id in changed_topic:
                    topic_list[i] = owned.model_copy(update={"favorite": favorite})

    def report_error(self, message: str) -> None:
        self.error_message = message

    # ============================================================
    # Internals
    # ============================================================

    async def _with_retry(self, operation: Callable[[], Awaitable[T]], what: str) -> T:
        """Run a remote call with a bounded retry loop and constant delay.

        Only retryable errors are retried; the last error is re-raised after
        1 + max_retries attempts.
        """
        attempt = 0
        while True:
            attempt += 1
            try:
                return await operation()
            except PhotoSyncError as e:
                if not e.retryable or attempt > self.max_retries:
                    raise
                logger.warning(
                    f"Remote {what} attempt {attempt} failed ({e.code}), "
                    f"retrying in {self.retry_delay:g}s"
                )
                await self._sleep(self.retry_delay)

    async def _fetch_local(self, kind: RecordKind) -> list:
        try:
            return await self._store.fetch(kind)
        except SQLAlchemyError as e:
            logger.error(f"Reading {kind.value} from local store failed: {e}")
            return []

    def _fall_back(self, kind: RecordKind, message: str) -> LoadOutcome:
        self.error_message = message
        try:
            records = self._snapshots.load_required(kind)
        except NotFoundError as e:
            logger.warning(f"{e} ({e.code}), collection left empty")
            return self._finish(kind, LoadOutcome.EMPTY)

        if kind is RecordKind.FEED:
            self._photos = list(records)
        else:
            self._topics = list(records)
        logger.warning(f"Serving {len(records)} {kind.value} records from snapshot")
        return self._finish(kind, LoadOutcome.SNAPSHOT)

    def _save_snapshot(self, kind: RecordKind, records: list) -> None:
        try:
            self._snapshots.save(kind, records)
        except OSError as e:
            logger.warning(f"Failed to save {kind.value} snapshot: {e}")

    def _finish(self, kind: RecordKind, outcome: LoadOutcome) -> LoadOutcome:
        self.last_outcome[kind] = outcome
        return outcome
