"""Budgeted encoder: JPEG-encode an image under a byte ceiling.

Qualities are tried from a fixed descending ladder instead of a binary search:
JPEG size is not strictly monotonic in quality, and a short ladder caps the
worst case at a handful of encode passes.
"""

from __future__ import annotations

import io
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from artpipe.imaging.errors import EncodeError

if TYPE_CHECKING:
    from PIL import Image

    from artpipe.imaging.profiles import OutputProfile

logger = logging.getLogger(__name__)

JPEG_CONTENT_TYPE = "image/jpeg"


@dataclass(frozen=True)
class EncodedArtifact:
    """One derived JPEG and whether it met its byte budget."""

    data: bytes
    within_budget: bool
    quality: int
    width: int
    height: int

    @property
    def size(self) -> int:
        return len(self.data)


def encode_jpeg(image: Image.Image, quality: int) -> bytes:
    """Encode ``image`` as baseline JPEG at ``quality``.

    Raises:
        EncodeError: If the encoder cannot serialize the image (e.g. RGBA or
            16-bit modes).
    """
    buffer = io.BytesIO()
    try:
        image.save(buffer, format="JPEG", quality=quality)
    except (OSError, ValueError, KeyError) as exc:
        raise EncodeError(f"Cannot encode {image.mode} image as JPEG: {exc}") from exc
    return buffer.getvalue()


def encode_within_budget(image: Image.Image, profile: OutputProfile) -> EncodedArtifact:
    """Encode at the highest ladder quality whose output fits ``profile.max_bytes``.

    If nothing fits, the floor-quality encoding is returned with
    ``within_budget=False``. Exceeding the budget never raises.
    """
    width, height = image.size
    data = b""
    quality = profile.quality_floor
    for quality in profile.quality_ladder():
        data = encode_jpeg(image, quality)
        if len(data) <= profile.max_bytes:
            logger.debug("%s: %d bytes at quality %d", profile.name, len(data), quality)
            return EncodedArtifact(data=data, within_budget=True, quality=quality, width=width, height=height)

    logger.debug(
        "%s: %d bytes at floor quality %d exceeds %d byte budget",
        profile.name,
        len(data),
        quality,
        profile.max_bytes,
    )
    return EncodedArtifact(data=data, within_budget=False, quality=quality, width=width, height=height)
