"""Photo library: wires the sync engine, favorites and pagination together.

All components share one asyncio event loop, which is the single execution
context for core state. Remote calls and retry delays are awaits, so other
operations (e.g. a favorite toggle) run while a retry is pending.

Startup sequence:
1. load_feed() (local-first, remote with retry, snapshot fallback)
2. load_topics_if_needed()
3. refresh_favorites()
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable

from photo_sync.services.account import Account
from photo_sync.services.favorites import FavoriteManager
from photo_sync.services.pagination import PaginationController
from photo_sync.services.sync_engine import SyncEngine
from photo_sync.services.unsplash_client import RemoteSource, UnsplashClient, get_unsplash_client
from photo_sync.settings import Settings, get_settings
from photo_sync.stores.local_store import LocalStore
from photo_sync.stores.snapshot import SnapshotCache

logger = logging.getLogger("uvicorn.error")


class PhotoLibrary:
    """Facade over the four core components."""

    def __init__(
        self,
        store: LocalStore,
        remote: RemoteSource,
        snapshots: SnapshotCache,
        settings: Settings | None = None,
        account: Account | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        settings = settings or get_settings()
        self.store = store
        self.remote = remote
        self.snapshots = snapshots
        self.account = account or Account(privileged=settings.privileged_default)

        self.engine = SyncEngine(store, remote, snapshots, settings=settings, sleep=sleep)
        self.favorites = FavoriteManager(self.engine, store, self.account, settings=settings)
        self.pagination = PaginationController(self.engine, remote, self.account, settings=settings)

    async def startup(self) -> None:
        feed_outcome = await self.engine.load_feed()
        topics_outcome = await self.engine.load_topics_if_needed()
        await self.favorites.refresh_favorites()
        logger.info(
            f"Library ready: feed={feed_outcome.value}, "
            f"topics={topics_outcome.value if topics_outcome else 'cached'}, "
            f"favorites={self.favorites.favorites_count}"
        )

    def set_privileged(self, privileged: bool) -> None:
        self.account.privileged = privileged
        logger.info(f"Account privileged={privileged}")

    async def clear_all_photos(self) -> None:
        """Clear feed photos and topics, re-fetch, then recompute favorites."""
        await self.engine.clear_all_photos()
        await self.favorites.refresh_favorites()

    async def close(self) -> None:
        await self.store.close()
        if isinstance(self.remote, UnsplashClient):
            await self.remote.close()


# Library instance (initialized on startup)
_library: PhotoLibrary | None = None


def init_library(settings: Settings | None = None) -> PhotoLibrary:
    """Build the library on the initialized database and the Unsplash client."""
    global _library
    settings = settings or get_settings()
    _library = PhotoLibrary(
        store=LocalStore.open(),
        remote=get_unsplash_client(),
        snapshots=SnapshotCache(settings.snapshot_dir),
        settings=settings,
    )
    return _library


def set_library(library: PhotoLibrary | None) -> None:
    """Install a library instance (tests)."""
    global _library
    _library = library


def get_library() -> PhotoLibrary:
    """Get library instance."""
    if _library is None:
        raise RuntimeError("Library not initialized. Call init_library() first.")
    return _library


async def close_library() -> None:
    global _library
    if _library is not None:
        await _library.close()
        _library = None
