"""Favorite endpoints.

GET    /v1/favorites        - Derived favorites view
POST   /v1/favorites/toggle - Toggle one photo (quota enforced)
DELETE /v1/favorites        - Unfavorite everything
"""

from fastapi import APIRouter, Depends, HTTPException

from photo_sync.schemas import (
    FavoritesResponse,
    ToggleFavoriteRequest,
    ToggleFavoriteResponse,
    error_detail,
)
from photo_sync.schemas.photo import RecordKind
from photo_sync.services.errors import QuotaExceededError
from photo_sync.services.library import PhotoLibrary, get_library

router = APIRouter()

_KINDS = {"feed": RecordKind.FEED, "topic": RecordKind.TOPIC_PHOTO}


def _favorites_state(library: PhotoLibrary) -> FavoritesResponse:
    favorites = library.favorites
    return FavoritesResponse(
        photos=favorites.favorite_photos,
        count=favorites.favorites_count,
        limit=None if library.account.privileged else favorites.max_free_favorites,
        limit_reached=favorites.has_reached_favorite_limit(),
    )


@router.get("", response_model=FavoritesResponse)
async def get_favorites(library: PhotoLibrary = Depends(get_library)) -> FavoritesResponse:
    """Recompute and return the favorites view."""
    await library.favorites.refresh_favorites()
    return _favorites_state(library)


@router.post("/toggle", response_model=ToggleFavoriteResponse)
async def toggle_favorite(
    request: ToggleFavoriteRequest,
    library: PhotoLibrary = Depends(get_library),
) -> ToggleFavoriteResponse:
    """Toggle favorite status of a feed photo or topic photo.

    Raises:
        HTTPException 404: Photo unknown to memory and the local store.
        HTTPException 403: Favorite quota reached for a free account.
    """
    photo = await library.engine.find_photo(_KINDS[request.kind], request.id)
    if photo is None:
        raise HTTPException(
            status_code=404,
            detail=error_detail(
                "PHOTO_NOT_FOUND",
                f"Photo {request.id} not found",
                {"kind": request.kind, "id": request.id},
            ),
        )

    try:
        updated = await library.favorites.toggle_favorite(photo)
    except QuotaExceededError as e:
        raise HTTPException(
            status_code=403,
            detail=error_detail(e.code, str(e), {"limit": e.limit}),
        ) from e

    return ToggleFavoriteResponse(photo=updated, favorites=_favorites_state(library))


@router.delete("", response_model=FavoritesResponse)
async def unfavorite_all(library: PhotoLibrary = Depends(get_library)) -> FavoritesResponse:
    """Clear every favorite."""
    await library.favorites.unfavorite_all_photos()
    return _favorites_state(library)
