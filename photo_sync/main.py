"""FastAPI application entry point.

Photo Sync API - offline-first photo feed, topics and favorites.
"""

import asyncio
from contextlib import asynccontextmanager
from collections.abc import AsyncGenerator
import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from photo_sync.routes import api_router
from photo_sync.services.errors import PhotoSyncError
from photo_sync.services.library import close_library, init_library
from photo_sync.settings import get_settings
from photo_sync.stores.database import close_db, create_tables, init_db, ping_db

logger = logging.getLogger("uvicorn.error")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager.

    Opens the local store, builds the library and starts the initial
    feed/topics load in the background so the app accepts requests at once.
    """
    # Startup
    settings = get_settings()

    await init_db()
    await ping_db()
    await create_tables()
    logger.info("Local store ready")

    library = init_library(settings)
    startup_task = asyncio.create_task(library.startup())

    yield

    # Shutdown
    if not startup_task.done():
        startup_task.cancel()
    await asyncio.gather(startup_task, return_exceptions=True)
    await close_library()
    await close_db()


def create_app() -> FastAPI:
    """Create and configure FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Offline-first photo feed, topics and favorites API",
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(PhotoSyncError)
    async def photo_sync_exception_handler(request: Request, exc: PhotoSyncError) -> JSONResponse:
        """Domain errors that escaped a route, in the structured error format."""
        return JSONResponse(
            status_code=502 if exc.retryable else 400,
            content={
                "error": {
                    "code": exc.code,
                    "message": exc.user_message,
                    "detail": str(exc) if settings.debug else None,
                }
            },
        )

    # Exception handler for structured error format
    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Global exception handler returning structured error format."""
        logger.exception(f"Unhandled error on {request.url.path}")
        return JSONResponse(
            status_code=500,
            content={
                "error": {
                    "code": "INTERNAL_ERROR",
                    "message": str(exc) if settings.debug else "Internal server error",
                    "detail": None,
                }
            },
        )

    # Health check endpoint
    @app.get("/health", tags=["health"])
    async def health_check() -> dict[str, bool]:
        """Health check endpoint."""
        return {"ok": True}

    # Include API routes
    app.include_router(api_router)

    return app


# Application instance
app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "photo_sync.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )
