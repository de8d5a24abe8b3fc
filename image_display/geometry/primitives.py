"""Size and position value types, in pixels and in image-relative coordinates.

Relative coordinates are fractions in [0, 1] of a base size in pixels that is
only known later (typically the fitted image size), which lets one region
definition be reapplied to any resolution of the same image.
"""

from __future__ import annotations

from dataclasses import dataclass

# Floor applied to dimensions before any division.
SAFE_DIMENSION = 1.0


def _clamp(v: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, v))


@dataclass(frozen=True, slots=True)
class SizeInPixels:
    """Width/height in pixels. Negative values are raised to 0.

    ``unknown`` marks a size that has not been measured yet.
    """

    width: float = 0.0
    height: float = 0.0
    unknown: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "width", max(float(self.width), 0.0))
        object.__setattr__(self, "height", max(float(self.height), 0.0))

    @property
    def ratio(self) -> float:
        return safe_ratio(self)

    def scaled(self, factor: float) -> SizeInPixels:
        if self.unknown:
            return UNKNOWN_SIZE
        return SizeInPixels(self.width * factor, self.height * factor)

    def to_relative(self, base: SizeInPixels) -> SizeInRelativeCoord:
        if base.unknown:
            return SizeInRelativeCoord()
        return SizeInRelativeCoord(self.width / safe_width(base), self.height / safe_height(base))

    def __str__(self) -> str:
        if self.unknown:
            return "{unknown}"
        return f"{{width={self.width:.3f}px, height={self.height:.3f}px}}"


UNKNOWN_SIZE = SizeInPixels(unknown=True)


@dataclass(frozen=True, slots=True)
class PositionInPixels:
    """Pixel position. May be negative when used as an offset or origin."""

    x: float = 0.0
    y: float = 0.0

    def to_relative(self, base: SizeInPixels) -> PositionInRelativeCoord:
        if base.unknown:
            return PositionInRelativeCoord()
        return PositionInRelativeCoord(self.x / safe_width(base), self.y / safe_height(base))

    def __str__(self) -> str:
        return f"{{x={self.x:.3f}px, y={self.y:.3f}px}}"


@dataclass(frozen=True, slots=True)
class SizeInRelativeCoord:
    """Width/height as fractions (0..1) of a base size in pixels."""

    width: float = 0.0
    height: float = 0.0

    def __post_init__(self) -> None:
        object.__setattr__(self, "width", _clamp(float(self.width), 0.0, 1.0))
        object.__setattr__(self, "height", _clamp(float(self.height), 0.0, 1.0))

    def to_pixels(self, base: SizeInPixels) -> SizeInPixels:
        if base.unknown:
            return SizeInPixels(0.0, 0.0)
        return SizeInPixels(self.width * base.width, self.height * base.height)

    def __str__(self) -> str:
        return f"{{width={self.width:.3f}, height={self.height:.3f}}}"


@dataclass(frozen=True, slots=True)
class PositionInRelativeCoord:
    """Position as fractions (0..1) of a base size in pixels."""

    x: float = 0.0
    y: float = 0.0

    def __post_init__(self) -> None:
        object.__setattr__(self, "x", _clamp(float(self.x), 0.0, 1.0))
        object.__setattr__(self, "y", _clamp(float(self.y), 0.0, 1.0))

    def to_pixels(self, base: SizeInPixels) -> PositionInPixels:
        if base.unknown:
            return PositionInPixels(0.0, 0.0)
        return PositionInPixels(self.x * base.width, self.y * base.height)

    def __str__(self) -> str:
        return f"{{x={self.x:.3f}, y={self.y:.3f}}}"


def safe_width(size: SizeInPixels) -> float:
    """Width floored at 1, so it is always safe to divide by it."""
    return max(size.width, SAFE_DIMENSION)


def safe_height(size: SizeInPixels) -> float:
    """Height floored at 1, so it is always safe to divide by it."""
    return max(size.height, SAFE_DIMENSION)


def safe_ratio(size: SizeInPixels) -> float:
    return safe_width(size) / safe_height(size)


def ratio_diff_factor(a: SizeInPixels, b: SizeInPixels) -> float:
    """Return the factor >= 1 by which one aspect ratio must be multiplied to give the other."""
    first = safe_ratio(a)
    second = safe_ratio(b)
    return first / second if first >= second else second / first
