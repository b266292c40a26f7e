"""Tests for the quality ladder, output profiles and budgeted JPEG encoding."""

from __future__ import annotations

import io

import numpy as np
import pytest
from PIL import Image

from artpipe.imaging.encoder import encode_jpeg, encode_within_budget
from artpipe.imaging.errors import EncodeError
from artpipe.imaging.profiles import FULL_IMAGE, THUMBNAIL, OutputProfile, quality_ladder

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _noise(width: int, height: int, seed: int = 2) -> Image.Image:
    rng = np.random.default_rng(seed)
    return Image.fromarray(rng.integers(0, 256, size=(height, width, 3), dtype=np.uint8))


def _gradient(width: int, height: int) -> Image.Image:
    x = np.linspace(0, 255, width, dtype=np.float64)
    y = np.linspace(0, 255, height, dtype=np.float64)
    red = np.tile(x, (height, 1))
    green = np.tile(y[:, None], (1, width))
    blue = (red + green) / 2
    return Image.fromarray(np.stack([red, green, blue], axis=-1).astype(np.uint8))


def _profile(**overrides: object) -> OutputProfile:
    defaults: dict[str, object] = {"name": "test", "max_dimension": 400, "max_bytes": 200 * 1024}
    defaults.update(overrides)
    return OutputProfile(**defaults)  # type: ignore[arg-type]


# ---------------------------------------------------------------------------
# Quality ladder and profiles
# ---------------------------------------------------------------------------


class TestQualityLadder:
    def test_default_ladder(self) -> None:
        assert quality_ladder(90, 40, 10) == [90, 80, 70, 60, 50, 40]

    def test_floor_always_last(self) -> None:
        assert quality_ladder(90, 45, 20) == [90, 70, 50, 45]

    def test_single_rung(self) -> None:
        assert quality_ladder(75, 75, 10) == [75]

    def test_invalid_arguments(self) -> None:
        with pytest.raises(ValueError):
            quality_ladder(90, 40, 0)
        with pytest.raises(ValueError):
            quality_ladder(40, 90, 10)


class TestOutputProfile:
    def test_standard_profiles(self) -> None:
        assert (THUMBNAIL.max_dimension, THUMBNAIL.max_bytes) == (200, 65536)
        assert (FULL_IMAGE.max_dimension, FULL_IMAGE.max_bytes) == (400, 204800)
        assert THUMBNAIL.quality_ladder() == [90, 80, 70, 60, 50, 40]

    @pytest.mark.parametrize(
        "overrides",
        [
            {"max_dimension": 0},
            {"max_bytes": 0},
            {"quality_floor": -1},
            {"quality_ceiling": 101},
            {"quality_floor": 80, "quality_ceiling": 70},
            {"quality_step": 0},
        ],
    )
    def test_invalid_profiles_rejected(self, overrides: dict[str, object]) -> None:
        with pytest.raises(ValueError):
            _profile(**overrides)

    def test_profiles_are_immutable(self) -> None:
        with pytest.raises(AttributeError):
            THUMBNAIL.max_bytes = 1  # type: ignore[misc]


# ---------------------------------------------------------------------------
# Encoding
# ---------------------------------------------------------------------------


class TestEncodeJpeg:
    def test_produces_valid_jpeg(self) -> None:
        data = encode_jpeg(_gradient(64, 48), 80)
        assert data[:2] == b"\xff\xd8"
        assert data[-2:] == b"\xff\xd9"
        with Image.open(io.BytesIO(data)) as decoded:
            assert decoded.format == "JPEG"
            assert decoded.size == (64, 48)

    def test_lower_quality_is_smaller_for_noise(self) -> None:
        image = _noise(128, 128)
        assert len(encode_jpeg(image, 40)) < len(encode_jpeg(image, 90))

    def test_unencodable_mode_raises(self) -> None:
        with pytest.raises(EncodeError, match="RGBA"):
            encode_jpeg(Image.new("RGBA", (8, 8)), 90)


class TestEncodeWithinBudget:
    def test_small_image_fits_at_ceiling(self) -> None:
        artifact = encode_within_budget(_gradient(100, 80), _profile())

        assert artifact.within_budget is True
        assert artifact.quality == 90
        assert (artifact.width, artifact.height) == (100, 80)
        assert artifact.size <= 200 * 1024

    def test_over_budget_returns_floor_encoding(self) -> None:
        image = _noise(200, 200)
        profile = _profile(max_bytes=500)

        artifact = encode_within_budget(image, profile)

        assert artifact.within_budget is False
        assert artifact.quality == profile.quality_floor
        assert artifact.data == encode_jpeg(image, profile.quality_floor)
        assert artifact.size > profile.max_bytes

    def test_returns_highest_fitting_quality(self) -> None:
        image = _noise(160, 120)
        ladder = [90, 80, 70, 60, 50, 40]
        sizes = {quality: len(encode_jpeg(image, quality)) for quality in ladder}
        budget = sizes[70]
        expected = next(quality for quality in ladder if sizes[quality] <= budget)

        artifact = encode_within_budget(image, _profile(max_bytes=budget))

        assert artifact.within_budget is True
        assert artifact.quality == expected
        assert artifact.size <= budget

    def test_budget_law(self) -> None:
        image = _noise(96, 96)
        for budget in (1_000, 4_000, 8_000, 16_000, 64_000):
            artifact = encode_within_budget(image, _profile(max_bytes=budget))
            if artifact.within_budget:
                assert artifact.size <= budget
            else:
                assert artifact.data == encode_jpeg(image, 40)

    def test_custom_ladder_floor_used(self) -> None:
        profile = _profile(max_bytes=1, quality_ceiling=95, quality_floor=33, quality_step=25)
        artifact = encode_within_budget(_gradient(32, 32), profile)
        assert artifact.within_budget is False
        assert artifact.quality == 33

    def test_encode_error_propagates(self) -> None:
        with pytest.raises(EncodeError):
            encode_within_budget(Image.new("RGBA", (8, 8)), _profile())
