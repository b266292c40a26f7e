"""Resampler: fit a decoded image inside a square bounding box."""

from __future__ import annotations

from typing import TYPE_CHECKING

from PIL import Image

if TYPE_CHECKING:
    from artpipe.imaging.decoder import SourceImage


def scaled_dimensions(width: int, height: int, max_dimension: int) -> tuple[int, int]:
    """Compute the target size for fitting ``width`` x ``height`` into ``max_dimension``.

    Images already within bounds keep their size; there is no upscaling.
    Otherwise the longer side becomes ``max_dimension`` and the shorter side
    is scaled by the same ratio, rounded to the nearest pixel (minimum 1).
    """
    if width < 1 or height < 1:
        raise ValueError(f"Image dimensions must be positive, got {width}x{height}")
    if max_dimension < 1:
        raise ValueError(f"max_dimension must be positive, got {max_dimension}")

    if width <= max_dimension and height <= max_dimension:
        return width, height

    if width >= height:
        return max_dimension, max(1, round(height * max_dimension / width))
    return max(1, round(width * max_dimension / height)), max_dimension


def resample(source: SourceImage, max_dimension: int) -> Image.Image:
    """Return a new RGB image of ``source`` scaled to fit ``max_dimension``.

    Uses bilinear interpolation. The source buffer is copied first and never
    modified, so concurrent callers may share one SourceImage.
    """
    target = scaled_dimensions(source.width, source.height, max_dimension)
    image = Image.fromarray(source.pixels.copy())
    if target == image.size:
        return image
    return image.resize(target, Image.Resampling.BILINEAR)
