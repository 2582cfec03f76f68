"""Account and cache endpoints.

GET/PUT /v1/account - Privilege flag (set by the external purchase flow)
GET     /v1/cache   - Snapshot cache size
DELETE  /v1/cache   - Remove all snapshot files
"""

from fastapi import APIRouter, Depends

from photo_sync.schemas import AccountState, CacheInfo
from photo_sync.services.library import PhotoLibrary, get_library

router = APIRouter()


@router.get("/account", response_model=AccountState)
async def get_account(library: PhotoLibrary = Depends(get_library)) -> AccountState:
    return AccountState(privileged=library.account.privileged)


@router.put("/account", response_model=AccountState)
async def update_account(
    state: AccountState,
    library: PhotoLibrary = Depends(get_library),
) -> AccountState:
    library.set_privileged(state.privileged)
    return AccountState(privileged=library.account.privileged)


@router.get("/cache", response_model=CacheInfo)
async def get_cache_info(library: PhotoLibrary = Depends(get_library)) -> CacheInfo:
    return CacheInfo(
        size_bytes=library.snapshots.size_bytes(),
        size=library.snapshots.describe_size(),
    )


@router.delete("/cache", response_model=CacheInfo)
async def clear_cache(library: PhotoLibrary = Depends(get_library)) -> CacheInfo:
    removed = library.snapshots.clear()
    return CacheInfo(
        size_bytes=library.snapshots.size_bytes(),
        size=library.snapshots.describe_size(),
        removed=removed,
    )
