"""Tests for target-size computation and bilinear resampling."""

from __future__ import annotations

import numpy as np
import pytest

from artpipe.imaging.decoder import ImageFormat, SourceImage
from artpipe.imaging.resampler import resample, scaled_dimensions


def _source(width: int, height: int, seed: int = 1) -> SourceImage:
    rng = np.random.default_rng(seed)
    pixels = rng.integers(0, 256, size=(height, width, 3), dtype=np.uint8)
    pixels.setflags(write=False)
    return SourceImage(pixels=pixels, format=ImageFormat.PNG)


class TestScaledDimensions:
    @pytest.mark.parametrize(
        ("width", "height", "max_dimension", "expected"),
        [
            (4000, 3000, 200, (200, 150)),
            (3000, 4000, 200, (150, 200)),
            (1000, 1000, 400, (400, 400)),
            (401, 400, 400, (400, 399)),
            (10, 10, 400, (10, 10)),
            (400, 250, 400, (400, 250)),
            (1000, 1, 100, (100, 1)),
            (1, 1000, 100, (1, 100)),
        ],
    )
    def test_known_sizes(self, width: int, height: int, max_dimension: int, expected: tuple[int, int]) -> None:
        assert scaled_dimensions(width, height, max_dimension) == expected

    @pytest.mark.parametrize("max_dimension", [1, 7, 200, 400])
    @pytest.mark.parametrize(("width", "height"), [(1, 1), (3, 1000), (999, 1000), (4000, 3000), (640, 481)])
    def test_bounds_and_aspect_ratio(self, width: int, height: int, max_dimension: int) -> None:
        out_w, out_h = scaled_dimensions(width, height, max_dimension)

        assert 1 <= max(out_w, out_h) <= max_dimension
        if max(width, height) <= max_dimension:
            assert (out_w, out_h) == (width, height)
        elif width >= height:
            assert abs(out_h - height * out_w / width) <= 1
        else:
            assert abs(out_w - width * out_h / height) <= 1

    @pytest.mark.parametrize(("width", "height", "max_dimension"), [(0, 10, 10), (10, 0, 10), (10, 10, 0)])
    def test_non_positive_rejected(self, width: int, height: int, max_dimension: int) -> None:
        with pytest.raises(ValueError):
            scaled_dimensions(width, height, max_dimension)


class TestResample:
    def test_downscales_to_fit(self) -> None:
        image = resample(_source(300, 150), 100)
        assert image.size == (100, 50)
        assert image.mode == "RGB"

    def test_small_image_passes_through_unchanged(self) -> None:
        source = _source(10, 10)
        image = resample(source, 400)
        assert image.size == (10, 10)
        assert np.array_equal(np.asarray(image), source.pixels)

    def test_is_deterministic(self) -> None:
        source = _source(257, 131)
        assert resample(source, 64).tobytes() == resample(source, 64).tobytes()

    def test_source_is_left_untouched(self) -> None:
        source = _source(120, 80)
        before = source.pixels.copy()

        image = resample(source, 400)
        image.putpixel((0, 0), (0, 0, 0))
        resample(source, 30)

        assert np.array_equal(source.pixels, before)
