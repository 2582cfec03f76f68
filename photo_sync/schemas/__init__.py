"""Pydantic schemas: domain records and API request/response models."""

from photo_sync.schemas.common import ErrorDetail, ErrorResponse, error_detail
from photo_sync.schemas.library import (
    AccountState,
    CacheInfo,
    FavoritesResponse,
    FeedResponse,
    ToggleFavoriteRequest,
    ToggleFavoriteResponse,
    TopicPhotosResponse,
    TopicsResponse,
)
from photo_sync.schemas.photo import (
    FeedPhoto,
    Photo,
    PhotoUrls,
    PhotoUser,
    RecordKind,
    Topic,
    TopicPhoto,
)

__all__ = [
    "ErrorDetail",
    "ErrorResponse",
    "error_detail",
    "AccountState",
    "CacheInfo",
    "FavoritesResponse",
    "FeedResponse",
    "ToggleFavoriteRequest",
    "ToggleFavoriteResponse",
    "TopicPhotosResponse",
    "TopicsResponse",
    "FeedPhoto",
    "Photo",
    "PhotoUrls",
    "PhotoUser",
    "RecordKind",
    "Topic",
    "TopicPhoto",
]
