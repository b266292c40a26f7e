"""Orchestrator: decode once, then render the thumbnail and full image."""

from __future__ import annotations

from concurrent.futures import wait
from dataclasses import dataclass
from typing import TYPE_CHECKING, BinaryIO

from artpipe.imaging.decoder import ImageFormat, SourceImage, decode_image
from artpipe.imaging.encoder import EncodedArtifact, encode_within_budget
from artpipe.imaging.profiles import FULL_IMAGE, THUMBNAIL, OutputProfile
from artpipe.imaging.resampler import resample

if TYPE_CHECKING:
    from concurrent.futures import Executor


@dataclass(frozen=True)
class ProcessedImage:
    """Both derived artifacts for one upload."""

    thumbnail: EncodedArtifact
    full_image: EncodedArtifact
    source_format: ImageFormat
    source_width: int
    source_height: int

    @property
    def within_budget(self) -> bool:
        return self.thumbnail.within_budget and self.full_image.within_budget


def render_profile(source: SourceImage, profile: OutputProfile) -> EncodedArtifact:
    """Resample ``source`` for ``profile`` and encode it under the profile's budget."""
    return encode_within_budget(resample(source, profile.max_dimension), profile)


def process_image(
    source: bytes | BinaryIO,
    thumbnail: OutputProfile = THUMBNAIL,
    full_image: OutputProfile = FULL_IMAGE,
    *,
    executor: Executor | None = None,
    max_pixels: int | None = None,
) -> ProcessedImage:
    """Produce the thumbnail and full-size JPEG artifacts for an upload.

    An over-budget artifact does not stop the other profile; callers check
    ``within_budget`` on the result. When ``executor`` is given the two
    profiles render concurrently against the shared, read-only source.

    Raises:
        DecodeError: If the upload cannot be decoded. No artifacts are built.
        EncodeError: If the JPEG encoder rejects a resampled buffer.
    """
    decoded = decode_image(source, max_pixels=max_pixels)

    if executor is None:
        thumb_artifact = render_profile(decoded, thumbnail)
        full_artifact = render_profile(decoded, full_image)
    else:
        futures = [executor.submit(render_profile, decoded, profile) for profile in (thumbnail, full_image)]
        wait(futures)
        failures = [exc for future in futures if (exc := future.exception()) is not None]
        if failures:
            raise failures[0]
        thumb_artifact, full_artifact = (future.result() for future in futures)

    return ProcessedImage(
        thumbnail=thumb_artifact,
        full_image=full_artifact,
        source_format=decoded.format,
        source_width=decoded.width,
        source_height=decoded.height,
    )
