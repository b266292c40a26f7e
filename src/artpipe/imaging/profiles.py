"""Output profiles: the dimension and byte budgets for each derived image."""

from __future__ import annotations

from dataclasses import dataclass

DEFAULT_QUALITY_CEILING = 90
DEFAULT_QUALITY_FLOOR = 40
DEFAULT_QUALITY_STEP = 10


@dataclass(frozen=True)
class OutputProfile:
    """Constraints for one derived JPEG artifact."""

    name: str
    max_dimension: int
    max_bytes: int
    quality_ceiling: int = DEFAULT_QUALITY_CEILING
    quality_floor: int = DEFAULT_QUALITY_FLOOR
    quality_step: int = DEFAULT_QUALITY_STEP

    def __post_init__(self) -> None:
        if self.max_dimension < 1:
            raise ValueError(f"max_dimension must be positive, got {self.max_dimension}")
        if self.max_bytes < 1:
            raise ValueError(f"max_bytes must be positive, got {self.max_bytes}")
        for label, quality in (("quality_floor", self.quality_floor), ("quality_ceiling", self.quality_ceiling)):
            if not 0 <= quality <= 100:
                raise ValueError(f"{label} must be within [0, 100], got {quality}")
        if self.quality_floor > self.quality_ceiling:
            raise ValueError(
                f"quality_floor ({self.quality_floor}) exceeds quality_ceiling ({self.quality_ceiling})"
            )
        if self.quality_step < 1:
            raise ValueError(f"quality_step must be positive, got {self.quality_step}")

    def quality_ladder(self) -> list[int]:
        """Candidate qualities, highest first, always ending at the floor."""
        return quality_ladder(self.quality_ceiling, self.quality_floor, self.quality_step)


def quality_ladder(ceiling: int, floor: int, step: int) -> list[int]:
    """Return the descending sequence of JPEG qualities to try.

    >>> quality_ladder(90, 40, 10)
    [90, 80, 70, 60, 50, 40]
    >>> quality_ladder(90, 45, 20)
    [90, 70, 50, 45]
    """
    if step < 1:
        raise ValueError(f"step must be positive, got {step}")
    if floor > ceiling:
        raise ValueError(f"floor ({floor}) exceeds ceiling ({ceiling})")
    ladder = list(range(ceiling, floor - 1, -step))
    if ladder[-1] != floor:
        ladder.append(floor)
    return ladder


THUMBNAIL = OutputProfile(name="thumbnail", max_dimension=200, max_bytes=64 * 1024)
FULL_IMAGE = OutputProfile(name="full_image", max_dimension=400, max_bytes=200 * 1024)
