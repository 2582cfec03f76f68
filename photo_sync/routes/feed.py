"""Feed endpoints.

GET  /v1/feed        - Current feed state
POST /v1/feed/reload - Run the local-first load (retry + snapshot fallback)
POST /v1/feed/clear  - Delete all feed photos and topics, then re-fetch

Routers are thin: call the library for business logic.
"""

from fastapi import APIRouter, Depends

from photo_sync.schemas import FeedResponse
from photo_sync.schemas.photo import RecordKind
from photo_sync.services.library import PhotoLibrary, get_library

router = APIRouter()


def _feed_state(library: PhotoLibrary) -> FeedResponse:
    engine = library.engine
    outcome = engine.last_outcome.get(RecordKind.FEED)
    return FeedResponse(
        photos=engine.photos,
        is_loading=engine.is_loading,
        error_message=engine.error_message,
        outcome=outcome.value if outcome else None,
    )


@router.get("", response_model=FeedResponse)
async def get_feed(library: PhotoLibrary = Depends(get_library)) -> FeedResponse:
    """Get the feed as currently materialized."""
    return _feed_state(library)


@router.post("/reload", response_model=FeedResponse)
async def reload_feed(library: PhotoLibrary = Depends(get_library)) -> FeedResponse:
    """Load the feed. Never fails: degraded results carry errorMessage."""
    await library.engine.load_feed()
    return _feed_state(library)


@router.post("/clear", response_model=FeedResponse)
async def clear_feed(library: PhotoLibrary = Depends(get_library)) -> FeedResponse:
    """Clear all feed photos and topics and repopulate from the remote source."""
    await library.clear_all_photos()
    return _feed_state(library)
