#!/usr/bin/env python3
"""One-off library sync (same startup as the API lifespan, without the server).

Behavior:
- Open the local store and create tables if missing
- Run the library startup sequence: load_feed, load_topics_if_needed, refresh_favorites
- Optionally page through SYNC_TOPICS with load_more (free-tier ceiling applies)
- Print a summary for logs

Run:
  python -m scripts.sync_library

Optional env vars:
  SYNC_TOPICS="nature,travel"
  SYNC_CLEAR=1   # clear feed photos and topics first
  SYNC_MAX_PAGES=10   # per-topic page cap (privileged accounts have no ceiling)
"""

import asyncio
import os
import sys


# Ensure imports work when executed as a script/module
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from photo_sync.schemas.photo import RecordKind, Topic  # noqa: E402
from photo_sync.services.library import PhotoLibrary, close_library, init_library  # noqa: E402
from photo_sync.settings import get_settings  # noqa: E402
from photo_sync.stores.database import close_db, create_tables, init_db, ping_db  # noqa: E402


def _parse_csv_env(name: str, default: list[str]) -> list[str]:
    raw = os.getenv(name, "")
    if not raw.strip():
        return default
    return [p.strip() for p in raw.split(",") if p.strip()]


async def load_topic_pages(library: PhotoLibrary, topic: Topic, max_pages: int) -> int:
    """Load up to max_pages further pages of a topic; returns pages loaded.

    Stops early at the free-tier ceiling or when a page adds nothing.
    """
    loaded = 0
    while loaded < max_pages and library.pagination.can_load_more_pages(topic):
        added = await library.pagination.load_more_topic_photos(topic)
        if not added:
            break
        loaded += 1
    return loaded


async def main() -> None:
    settings = get_settings()
    await init_db()
    await ping_db()
    await create_tables()

    try:
        library = init_library(settings)
        if os.getenv("SYNC_CLEAR", "").strip() in {"1", "true", "yes"}:
            await library.clear_all_photos()
        await library.startup()

        max_pages = int(os.getenv("SYNC_MAX_PAGES", "10"))
        topics: dict[str, dict] = {}
        for topic_id in _parse_csv_env("SYNC_TOPICS", []):
            topic = library.engine.find_topic(topic_id)
            if topic is None:
                topics[topic_id] = {"error": "unknown topic"}
                continue
            await library.engine.fetch_topic_photos(topic)
            await load_topic_pages(library, topic, max_pages)
            topics[topic_id] = {
                "pages": library.pagination.current_page(topic),
                "photos": len(library.engine.photos_for_topic(topic.id)),
            }

        print(
            {
                "ok": library.engine.error_message is None,
                "feed": {
                    "photos": len(library.engine.photos),
                    "outcome": library.engine.last_outcome[RecordKind.FEED].value,
                },
                "topics": {
                    "count": len(library.engine.topics),
                    "loaded": topics,
                },
                "favorites": library.favorites.favorites_count,
                "snapshot_size": library.snapshots.describe_size(),
                "error": library.engine.error_message,
            }
        )
    finally:
        await close_library()
        await close_db()


if __name__ == "__main__":
    asyncio.run(main())
