"""Pydantic request/response schemas for the ArtPipe API."""

from __future__ import annotations

from pydantic import BaseModel, Field


class ArtifactOut(BaseModel):
    """One derived JPEG artifact."""

    width: int
    height: int
    size: int = Field(description="Encoded size in bytes")
    quality: int = Field(description="JPEG quality the artifact was encoded at")
    within_budget: bool = Field(description="Whether the artifact met its byte budget")
    data: str = Field(description="Base64-encoded JPEG bytes")


class ProcessImageResponse(BaseModel):
    """Response for the image processing endpoint."""

    content_type: str = Field(default="image/jpeg", description="Content type of both artifacts")
    original_mime: str | None = Field(default=None, description="MIME type declared by the client (metadata only)")
    source_format: str = Field(description="Format detected from the uploaded bytes")
    source_width: int
    source_height: int
    thumbnail: ArtifactOut
    full_image: ArtifactOut
    warnings: list[str] = Field(default_factory=list)


class ProfileInfo(BaseModel):
    """A configured output profile."""

    name: str
    max_dimension: int
    max_bytes: int
    quality_ladder: list[int]


class ProfilesResponse(BaseModel):
    """Response for the profiles listing endpoint."""

    profiles: list[ProfileInfo]
    reject_over_budget: bool


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = "ok"
    active_jobs: int
    queue_depth: int


class ErrorResponse(BaseModel):
    """Standard error response."""

    detail: str
