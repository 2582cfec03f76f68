"""Favorite manager: toggling, quota, and the derived favorites view.

Rules:
- Non-privileged accounts hold at most max_free_favorites (8) favorites;
  favoriting beyond that is rejected without any mutation
- The favorites view is never maintained incrementally: every mutation ends
  with a full recompute from the local store (favorite == True in both the
  feed and topic-photo tables)
- Toggling works on the Photo union, so feed photos and topic photos share one
  code path
"""

import logging

from photo_sync.schemas.photo import FeedPhoto, Photo, RecordKind, TopicPhoto
from photo_sync.services.account import Account
from photo_sync.services.errors import QuotaExceededError
from photo_sync.services.sync_engine import SyncEngine
from photo_sync.settings import Settings, get_settings
from photo_sync.stores.local_store import LocalStore

logger = logging.getLogger("uvicorn.error")


class FavoriteManager:
    """Owns favorite status across feed photos and topic photos."""

    def __init__(
        self,
        engine: SyncEngine,
        store: LocalStore,
        account: Account,
        settings: Settings | None = None,
    ):
        settings = settings or get_settings()
        self._engine = engine
        self._store = store
        self._account = account
        self.max_free_favorites = settings.max_free_favorites
        self._favorites: list[Photo] = []

    @property
    def favorite_photos(self) -> list[Photo]:
        return [p.model_copy(deep=True) for p in self._favorites]

    @property
    def favorites_count(self) -> int:
        return len(self._favorites)

    def has_reached_favorite_limit(self) -> bool:
        return not self._account.privileged and self.favorites_count >= self.max_free_favorites

    async def toggle_favorite(self, photo: Photo) -> Photo:
        """Flip a photo's favorite flag.

        Returns:
            The photo with its new favorite state.

        Raises:
            QuotaExceededError: Favoriting would exceed the free-tier quota.
                Nothing is mutated or persisted in that case.
        """
        current = await self._engine.resolve_photo(photo)

        if not current.is_favorite and not self._account.privileged:
            # Quota is checked against the store, never a stale view
            await self.refresh_favorites()

        if not current.is_favorite and self.has_reached_favorite_limit():
            error = QuotaExceededError(self.max_free_favorites)
            self._engine.report_error(str(error))
            logger.info(f"Favorite rejected for {current.id}: quota of {self.max_free_favorites} reached")
            raise error

        new_state = not current.is_favorite
        await self._engine.persist_favorites([current], new_state)
        logger.info(f"{current.kind} photo {current.id} favorite={new_state}")

        await self.refresh_favorites()
        return current.model_copy(update={"favorite": new_state})

    async def unfavorite_all_photos(self) -> None:
        """Clear the favorite flag on every feed photo and every stored topic photo."""
        feed: list[Photo] = list(self._engine.photos)
        stored_topic_photos: list[Photo] = list(await self._store.fetch(RecordKind.TOPIC_PHOTO))

        await self._engine.persist_favorites(feed + stored_topic_photos, False)
        logger.info(
            f"Unfavorited {len(feed)} feed photos and {len(stored_topic_photos)} topic photos"
        )
        await self.refresh_favorites()

    async def refresh_favorites(self) -> list[Photo]:
        """Recompute the favorites view from the local store."""
        feed: list[FeedPhoto] = await self._store.fetch(RecordKind.FEED, favorite=True)
        topic: list[TopicPhoto] = await self._store.fetch(RecordKind.TOPIC_PHOTO, favorite=True)
        self._favorites = [*feed, *topic]
        logger.info(f"Favorites loaded: {len(feed)} feed photos, {len(topic)} topic photos")
        return self.favorite_photos
