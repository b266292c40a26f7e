"""Environment-based configuration for ArtPipe."""

from __future__ import annotations

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from artpipe.imaging.profiles import OutputProfile


class Settings(BaseSettings):
    """Application settings loaded from ARTPIPE_* environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="ARTPIPE_",
        case_sensitive=False,
    )

    # Server
    host: str = "0.0.0.0"  # noqa: S104
    port: int = 8080

    # Authentication (None = disabled)
    api_key: str | None = None

    # Input limits
    max_upload_bytes: int = Field(default=10 * 1024 * 1024, ge=1)
    max_image_pixels: int = Field(default=40_000_000, ge=1)

    # Thumbnail profile
    thumb_max_dimension: int = Field(default=200, ge=1)
    thumb_max_bytes: int = Field(default=64 * 1024, ge=1)

    # Full image profile
    image_max_dimension: int = Field(default=400, ge=1)
    image_max_bytes: int = Field(default=200 * 1024, ge=1)

    # Quality ladder shared by both profiles
    quality_ceiling: int = Field(default=90, ge=0, le=100)
    quality_floor: int = Field(default=40, ge=0, le=100)
    quality_step: int = Field(default=10, ge=1)

    # Reject uploads whose artifacts miss their byte budget at the quality floor
    reject_over_budget: bool = False

    # Concurrency
    max_concurrent: int = Field(default=2, ge=1)
    parallel_profiles: bool = False

    @model_validator(mode="after")
    def _check_quality_range(self) -> Settings:
        if self.quality_floor > self.quality_ceiling:
            raise ValueError("quality_floor must not exceed quality_ceiling")
        return self

    def thumbnail_profile(self) -> OutputProfile:
        return OutputProfile(
            name="thumbnail",
            max_dimension=self.thumb_max_dimension,
            max_bytes=self.thumb_max_bytes,
            quality_ceiling=self.quality_ceiling,
            quality_floor=self.quality_floor,
            quality_step=self.quality_step,
        )

    def full_image_profile(self) -> OutputProfile:
        return OutputProfile(
            name="full_image",
            max_dimension=self.image_max_dimension,
            max_bytes=self.image_max_bytes,
            quality_ceiling=self.quality_ceiling,
            quality_floor=self.quality_floor,
            quality_step=self.quality_step,
        )


def get_settings() -> Settings:
    """Create and return application settings."""
    return Settings()
