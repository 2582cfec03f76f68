"""Pagination controller for topic photo lists.

- current_page tracks, per topic, the highest page loaded through
  load_more_topic_photos (in memory only)
- Non-privileged accounts stop at max_free_pages (3); further requests are
  no-ops that never reach the remote source
- is_loading_more is a single in-flight guard shared by all topics
"""

import logging

from sqlalchemy.exc import SQLAlchemyError

from photo_sync.schemas.photo import Topic, TopicPhoto
from photo_sync.services.account import Account
from photo_sync.services.errors import PhotoSyncError
from photo_sync.services.sync_engine import SyncEngine
from photo_sync.services.unsplash_client import RemoteSource
from photo_sync.settings import Settings, get_settings

logger = logging.getLogger("uvicorn.error")


class PaginationController:
    """Loads further pages of topic photos within the free-tier ceiling."""

    def __init__(
        self,
        engine: SyncEngine,
        remote: RemoteSource,
        account: Account,
        settings: Settings | None = None,
    ):
        settings = settings or get_settings()
        self._engine = engine
        self._remote = remote
        self._account = account
        self.max_free_pages = settings.max_free_pages
        self.page_size = settings.topic_photos_per_page
        self._current_page: dict[str, int] = {}
        self.is_loading_more = False

    def current_page(self, topic: Topic | str) -> int:
        return self._current_page.get(_topic_id(topic), 0)

    def can_load_more_pages(self, topic: Topic | str) -> bool:
        if self._account.privileged:
            return True
        return self.current_page(topic) < self.max_free_pages

    async def load_more_topic_photos(self, topic: Topic | str) -> list[TopicPhoto]:
        """Load the next page of a topic.

        Returns:
            Photos added by this call; empty when the call was a no-op or failed.
        """
        topic_id = _topic_id(topic)
        if self.is_loading_more:
            logger.info(f"Load more for topic {topic_id} skipped: a load is already in flight")
            return []
        if not self.can_load_more_pages(topic_id):
            logger.info(f"Load more for topic {topic_id} skipped: page limit {self.max_free_pages} reached")
            return []

        self.is_loading_more = True
        next_page = self.current_page(topic_id) + 1
        try:
            fetched = await self._remote.fetch_topic_photos(topic_id, next_page, self.page_size)
            # Same composite-id reconciliation as SyncEngine.fetch_topic_photos
            stored = await self._engine.store_topic_photos(fetched)
            self._engine.append_topic_photos(topic_id, stored)
            self._current_page[topic_id] = next_page
            logger.info(f"Loaded page {next_page} of topic {topic_id} ({len(stored)} photos)")
            return [p.model_copy(deep=True) for p in stored]
        except (PhotoSyncError, SQLAlchemyError) as e:
            logger.warning(f"Loading page {next_page} of topic {topic_id} failed: {e}")
            self._engine.report_error(f"Error while loading more photos: {e}")
            return []
        finally:
            self.is_loading_more = False


def _topic_id(topic: Topic | str) -> str:
    return topic.id if isinstance(topic, Topic) else topic
