"""API routes."""

from fastapi import APIRouter

from photo_sync.routes import account, favorites, feed, topics

api_router = APIRouter()

# Feed (random photos)
api_router.include_router(feed.router, prefix="/v1/feed", tags=["feed"])

# Topics and topic photos (pagination)
api_router.include_router(topics.router, prefix="/v1/topics", tags=["topics"])

# Favorites
api_router.include_router(favorites.router, prefix="/v1/favorites", tags=["favorites"])

# Account privilege flag and snapshot cache
api_router.include_router(account.router, prefix="/v1", tags=["account"])
