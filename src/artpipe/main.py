"""FastAPI application entry point."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from artpipe.api.routes import router
from artpipe.config import get_settings
from artpipe.imaging.pool import ProcessingPool

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan: initialize on startup, clean up on shutdown."""
    settings = get_settings()
    app.state.settings = settings

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    logger.info(
        "Starting ArtPipe (max_concurrent=%s, parallel_profiles=%s, reject_over_budget=%s)",
        settings.max_concurrent,
        settings.parallel_profiles,
        settings.reject_over_budget,
    )
    for profile in (settings.thumbnail_profile(), settings.full_image_profile()):
        logger.info(
            "Profile %s: max_dimension=%spx, max_bytes=%sB, qualities=%s",
            profile.name,
            profile.max_dimension,
            profile.max_bytes,
            profile.quality_ladder(),
        )

    processing_pool = ProcessingPool(settings)
    app.state.processing_pool = processing_pool

    logger.info("ArtPipe ready")
    yield

    logger.info("Shutting down ArtPipe")
    processing_pool.shutdown()
    logger.info("ArtPipe shutdown complete")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    application = FastAPI(
        title="ArtPipe",
        description="Derives size-budgeted JPEG thumbnails and display images from uploads",
        version="0.1.0",
        lifespan=lifespan,
    )

    application.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )

    application.include_router(router)
    return application


app = create_app()


def run() -> None:
    """Serve the application with uvicorn using the configured host and port."""
    settings = get_settings()
    uvicorn.run("artpipe.main:app", host=settings.host, port=settings.port)


if __name__ == "__main__":
    run()
