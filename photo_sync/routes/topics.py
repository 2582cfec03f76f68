"""Topic endpoints.

GET  /v1/topics                      - Topic list
POST /v1/topics/reload               - Load topics if the list is empty
GET  /v1/topics/{topicId}/photos     - Load a page of a topic (local-first)
POST /v1/topics/{topicId}/photos/more - Load the next page (free-tier ceiling)
"""

from fastapi import APIRouter, Depends, HTTPException, Path, Query

from photo_sync.schemas import TopicPhotosResponse, TopicsResponse, error_detail
from photo_sync.schemas.photo import RecordKind, Topic
from photo_sync.services.errors import PageLimitReachedError
from photo_sync.services.library import PhotoLibrary, get_library

router = APIRouter()

TOPIC_ID_PATH = Path(
    description="Topic id or slug",
    min_length=1,
    max_length=200,
    pattern=r"^[a-zA-Z0-9_-]+$",
)


def _topics_state(library: PhotoLibrary) -> TopicsResponse:
    engine = library.engine
    outcome = engine.last_outcome.get(RecordKind.TOPIC)
    return TopicsResponse(
        topics=engine.topics,
        is_loading=engine.is_loading,
        error_message=engine.error_message,
        outcome=outcome.value if outcome else None,
    )


def _topic_photos_state(library: PhotoLibrary, topic: Topic) -> TopicPhotosResponse:
    return TopicPhotosResponse(
        topic_id=topic.id,
        photos=library.engine.photos_for_topic(topic.id),
        current_page=library.pagination.current_page(topic),
        can_load_more=library.pagination.can_load_more_pages(topic),
        error_message=library.engine.error_message,
    )


def _require_topic(library: PhotoLibrary, topic_id: str) -> Topic:
    topic = library.engine.find_topic(topic_id)
    if topic is None:
        raise HTTPException(
            status_code=404,
            detail=error_detail("TOPIC_NOT_FOUND", f"Topic {topic_id} not found", {"topic_id": topic_id}),
        )
    return topic


@router.get("", response_model=TopicsResponse)
async def get_topics(library: PhotoLibrary = Depends(get_library)) -> TopicsResponse:
    """Get the topic list as currently materialized."""
    return _topics_state(library)


@router.post("/reload", response_model=TopicsResponse)
async def reload_topics(library: PhotoLibrary = Depends(get_library)) -> TopicsResponse:
    """Load topics when the list is empty (local-first, retry, snapshot)."""
    await library.engine.load_topics_if_needed()
    return _topics_state(library)


@router.get("/{topic_id}/photos", response_model=TopicPhotosResponse)
async def get_topic_photos(
    topic_id: str = TOPIC_ID_PATH,
    page: int = Query(default=1, ge=1, le=100),
    per_page: int = Query(default=10, alias="perPage", ge=1, le=30),
    library: PhotoLibrary = Depends(get_library),
) -> TopicPhotosResponse:
    """Load one page of a topic's photos and return everything loaded so far."""
    topic = _require_topic(library, topic_id)
    await library.engine.fetch_topic_photos(topic, page=page, page_size=per_page)
    return _topic_photos_state(library, topic)


@router.post("/{topic_id}/photos/more", response_model=TopicPhotosResponse)
async def load_more_topic_photos(
    topic_id: str = TOPIC_ID_PATH,
    library: PhotoLibrary = Depends(get_library),
) -> TopicPhotosResponse:
    """Load the next page of a topic.

    Raises:
        HTTPException 409: Free-tier page ceiling reached.
    """
    topic = _require_topic(library, topic_id)
    if not library.pagination.can_load_more_pages(topic):
        error = PageLimitReachedError(topic.id, library.pagination.max_free_pages)
        raise HTTPException(
            status_code=409,
            detail=error_detail(error.code, str(error), {"topic_id": topic.id, "limit": error.limit}),
        )

    await library.pagination.load_more_topic_photos(topic)
    return _topic_photos_state(library, topic)
