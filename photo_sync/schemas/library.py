"""Schemas for the library endpoints (/v1/feed, /v1/topics, /v1/favorites, ...)."""

from typing import Literal

from pydantic import BaseModel, Field

from photo_sync.schemas.photo import FeedPhoto, Photo, Topic, TopicPhoto


class FeedResponse(BaseModel):
    """Current feed state."""

    photos: list[FeedPhoto]
    is_loading: bool = Field(alias="isLoading")
    error_message: str | None = Field(alias="errorMessage", default=None)
    outcome: str | None = None

    model_config = {"populate_by_name": True}


class TopicsResponse(BaseModel):
    """Current topic list."""

    topics: list[Topic]
    is_loading: bool = Field(alias="isLoading")
    error_message: str | None = Field(alias="errorMessage", default=None)
    outcome: str | None = None

    model_config = {"populate_by_name": True}


class TopicPhotosResponse(BaseModel):
    """Photos loaded so far for one topic."""

    topic_id: str = Field(alias="topicId")
    photos: list[TopicPhoto]
    current_page: int = Field(alias="currentPage", ge=0)
    can_load_more: bool = Field(alias="canLoadMore")
    error_message: str | None = Field(alias="errorMessage", default=None)

    model_config = {"populate_by_name": True}


class FavoritesResponse(BaseModel):
    """Derived favorites view."""

    photos: list[Photo]
    count: int = Field(ge=0)
    limit: int | None = None  # None for privileged accounts
    limit_reached: bool = Field(alias="limitReached")

    model_config = {"populate_by_name": True}


class ToggleFavoriteRequest(BaseModel):
    """Identifies the photo to toggle."""

    kind: Literal["feed", "topic"]
    id: str = Field(min_length=1, max_length=400)


class ToggleFavoriteResponse(BaseModel):
    photo: Photo
    favorites: FavoritesResponse


class AccountState(BaseModel):
    privileged: bool


class CacheInfo(BaseModel):
    """Snapshot cache usage."""

    size_bytes: int = Field(alias="sizeBytes", ge=0)
    size: str
    removed: int | None = None

    model_config = {"populate_by_name": True}
