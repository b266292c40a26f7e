"""API route definitions."""

from __future__ import annotations

import base64
import functools
import logging
from typing import TYPE_CHECKING

from fastapi import APIRouter, Depends, HTTPException, Request, UploadFile, status

from artpipe.api.middleware import get_settings_from_request, read_upload_capped, verify_api_key
from artpipe.api.schemas import (
    ArtifactOut,
    ErrorResponse,
    HealthResponse,
    ProcessImageResponse,
    ProfileInfo,
    ProfilesResponse,
)
from artpipe.imaging.encoder import JPEG_CONTENT_TYPE
from artpipe.imaging.errors import DecodeError, EncodeError
from artpipe.imaging.pipeline import process_image

if TYPE_CHECKING:
    from artpipe.imaging.encoder import EncodedArtifact
    from artpipe.imaging.pipeline import ProcessedImage
    from artpipe.imaging.pool import ProcessingPool
    from artpipe.imaging.profiles import OutputProfile

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1", dependencies=[Depends(verify_api_key)])


def _get_processing_pool(request: Request) -> ProcessingPool:
    pool: ProcessingPool = request.app.state.processing_pool
    return pool


def _artifact_out(artifact: EncodedArtifact) -> ArtifactOut:
    return ArtifactOut(
        width=artifact.width,
        height=artifact.height,
        size=artifact.size,
        quality=artifact.quality,
        within_budget=artifact.within_budget,
        data=base64.b64encode(artifact.data).decode("ascii"),
    )


def _budget_warnings(result: ProcessedImage, profiles: tuple[OutputProfile, OutputProfile]) -> list[str]:
    warnings: list[str] = []
    for artifact, profile in zip((result.thumbnail, result.full_image), profiles, strict=True):
        if not artifact.within_budget:
            warnings.append(
                f"{profile.name} is {artifact.size} bytes at quality {artifact.quality}, "
                f"over the {profile.max_bytes} byte budget"
            )
    return warnings


@router.post(
    "/images",
    response_model=ProcessImageResponse,
    responses={
        status.HTTP_400_BAD_REQUEST: {"model": ErrorResponse},
        status.HTTP_413_REQUEST_ENTITY_TOO_LARGE: {"model": ErrorResponse},
        status.HTTP_422_UNPROCESSABLE_ENTITY: {"model": ErrorResponse},
        status.HTTP_503_SERVICE_UNAVAILABLE: {"model": ErrorResponse},
    },
    summary="Derive thumbnail and display JPEGs from an upload",
)
async def upload_image(request: Request, image: UploadFile) -> ProcessImageResponse:
    """Decode an uploaded image and return its size-budgeted JPEG derivatives."""
    settings = get_settings_from_request(request)
    pool = _get_processing_pool(request)
    payload = await read_upload_capped(image, settings.max_upload_bytes)
    profiles = (settings.thumbnail_profile(), settings.full_image_profile())

    job = functools.partial(
        process_image,
        payload,
        *profiles,
        executor=pool.profile_executor,
        max_pixels=settings.max_image_pixels,
    )
    try:
        result = await pool.run(job)
    except TimeoutError:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Image processing is busy, retry later",
        ) from None
    except DecodeError as exc:
        logger.info("Rejected upload %r: %s", image.filename, exc)
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"Invalid image: {exc}",
        ) from exc
    except EncodeError as exc:
        logger.error("Encoding failed for upload %r: %s", image.filename, exc)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Image processing failed",
        ) from exc

    warnings = _budget_warnings(result, profiles)
    for warning in warnings:
        logger.warning("Upload %r: %s", image.filename, warning)
    if warnings and settings.reject_over_budget:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="Image cannot be compressed within the size limit: " + "; ".join(warnings),
        )

    return ProcessImageResponse(
        content_type=JPEG_CONTENT_TYPE,
        original_mime=image.content_type,
        source_format=result.source_format.value,
        source_width=result.source_width,
        source_height=result.source_height,
        thumbnail=_artifact_out(result.thumbnail),
        full_image=_artifact_out(result.full_image),
        warnings=warnings,
    )


@router.get(
    "/profiles",
    response_model=ProfilesResponse,
    summary="List output profiles",
)
async def list_profiles(request: Request) -> ProfilesResponse:
    """Return the configured thumbnail and full image constraints."""
    settings = get_settings_from_request(request)
    profiles = [
        ProfileInfo(
            name=profile.name,
            max_dimension=profile.max_dimension,
            max_bytes=profile.max_bytes,
            quality_ladder=profile.quality_ladder(),
        )
        for profile in (settings.thumbnail_profile(), settings.full_image_profile())
    ]
    return ProfilesResponse(profiles=profiles, reject_over_budget=settings.reject_over_budget)


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health check",
)
async def health(request: Request) -> HealthResponse:
    """Return service health status."""
    pool = _get_processing_pool(request)
    return HealthResponse(
        status="ok",
        active_jobs=pool.active_count,
        queue_depth=pool.queue_depth,
    )
