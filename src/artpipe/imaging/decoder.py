"""Decoder: turn uploaded bytes into an immutable RGB pixel buffer.

The container format is detected from the leading magic bytes only. Whatever
MIME type the client declared is metadata and never consulted here.
"""

from __future__ import annotations

import io
import logging
from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING, BinaryIO

import numpy as np
from PIL import Image

from artpipe.imaging.errors import DecodeError

if TYPE_CHECKING:
    from numpy.typing import NDArray

logger = logging.getLogger(__name__)


class ImageFormat(StrEnum):
    JPEG = "JPEG"
    PNG = "PNG"
    GIF = "GIF"
    UNKNOWN = "UNKNOWN"


_SIGNATURES: tuple[tuple[bytes, ImageFormat], ...] = (
    (b"\xff\xd8\xff", ImageFormat.JPEG),
    (b"\x89PNG\r\n\x1a\n", ImageFormat.PNG),
    (b"GIF87a", ImageFormat.GIF),
    (b"GIF89a", ImageFormat.GIF),
)

# Pillow opens 16-bit grayscale PNGs in one of these modes.
_WIDE_GRAYSCALE_MODES = frozenset({"I", "I;16", "I;16B", "I;16L"})


@dataclass(frozen=True)
class SourceImage:
    """A decoded upload.

    ``pixels`` is an HxWx3 RGB uint8 array with the writeable flag cleared;
    every later stage copies before transforming it.
    """

    pixels: NDArray[np.uint8]
    format: ImageFormat

    @property
    def width(self) -> int:
        return int(self.pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self.pixels.shape[0])

    @property
    def size(self) -> tuple[int, int]:
        return self.width, self.height


def detect_format(header: bytes) -> ImageFormat:
    """Identify the container format from the first bytes of a file."""
    for signature, image_format in _SIGNATURES:
        if header.startswith(signature):
            return image_format
    return ImageFormat.UNKNOWN


def decode_image(source: bytes | BinaryIO, max_pixels: int | None = None) -> SourceImage:
    """Decode an uploaded JPEG, PNG or GIF into a SourceImage.

    Only the first frame of an animated GIF is kept. Alpha is dropped.

    Args:
        source: Raw file bytes or a readable binary stream. The caller is
            responsible for capping how much the stream can yield.
        max_pixels: Optional ceiling on width * height, checked before the
            pixel data is decompressed.

    Raises:
        DecodeError: If the data is not a supported format, is truncated or
            corrupt, exceeds ``max_pixels``, or has a zero dimension.
    """
    data = source if isinstance(source, bytes | bytearray) else source.read()
    image_format = detect_format(bytes(data[:8]))
    if image_format is ImageFormat.UNKNOWN:
        raise DecodeError("Unrecognized image format (expected JPEG, PNG or GIF)")

    try:
        with Image.open(io.BytesIO(data), formats=[image_format.value]) as image:
            width, height = image.size
            if max_pixels is not None and width * height > max_pixels:
                raise DecodeError(f"Image has {width * height} pixels, limit is {max_pixels}")
            image.seek(0)
            image.load()
            pixels = _to_rgb_array(image)
    except DecodeError:
        raise
    except Image.DecompressionBombError as exc:
        raise DecodeError(str(exc)) from exc
    except (OSError, ValueError, SyntaxError, EOFError) as exc:
        raise DecodeError(f"Failed to decode {image_format.value} image: {exc}") from exc

    pixels.setflags(write=False)
    logger.debug("Decoded %s image %dx%d", image_format.value, pixels.shape[1], pixels.shape[0])
    return SourceImage(pixels=pixels, format=image_format)


def _to_rgb_array(image: Image.Image) -> NDArray[np.uint8]:
    if image.mode in _WIDE_GRAYSCALE_MODES:
        wide = np.asarray(image, dtype=np.uint32)
        narrow = np.clip(wide >> 8, 0, 255).astype(np.uint8)
        return np.ascontiguousarray(np.stack([narrow, narrow, narrow], axis=-1))
    return np.array(image.convert("RGB"), dtype=np.uint8)
