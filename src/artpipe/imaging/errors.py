"""Exception types raised by the image pipeline."""

from __future__ import annotations


class ImageProcessingError(Exception):
    """Base class for pipeline failures."""


class DecodeError(ImageProcessingError):
    """The input is not a supported, intact raster image.

    Fatal to the whole pipeline: no artifacts are produced.
    """


class EncodeError(ImageProcessingError):
    """The JPEG encoder could not serialize a pixel buffer at all.

    Unrelated to the byte budget; an over-budget result is reported through
    ``EncodedArtifact.within_budget`` instead.
    """
