"""Pan/zoom transformation that makes a region fill its container.

All sizes here are in pixels. The image is first fitted into the container
("contain" fit, anchored top-left), then scaled around ``origin`` by
``factor`` and translated by ``-origin``, then clipped by the two insets.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from .primitives import (
    UNKNOWN_SIZE,
    PositionInPixels,
    SizeInPixels,
    safe_height,
    safe_ratio,
    safe_width,
)
from .regions import RectangleImageRegion


@dataclass(frozen=True, slots=True)
class Transformation:
    origin: PositionInPixels
    factor: float

    # Amount of the fitted image hidden on each side, in unscaled pixels.
    inset_clip_from_top_left: SizeInPixels
    inset_clip_from_bottom_right: SizeInPixels

    def visible_rect(self, container_size: SizeInPixels) -> tuple[float, float, float, float]:
        """Return (left, top, width, height) of the fitted image left by the clip."""
        left = self.inset_clip_from_top_left.width
        top = self.inset_clip_from_top_left.height
        width = container_size.width - left - self.inset_clip_from_bottom_right.width
        height = container_size.height - top - self.inset_clip_from_bottom_right.height
        return left, top, max(width, 0.0), max(height, 0.0)


@dataclass(frozen=True, slots=True)
class FittedImage:
    size: SizeInPixels
    bottom_right_margin: SizeInPixels
    factor: float = 1.0


def fit_contain(container_size: SizeInPixels, natural_size: SizeInPixels) -> FittedImage:
    """Fit the natural image into the container, keeping its ratio, anchored top-left."""
    if container_size.unknown or natural_size.unknown:
        return FittedImage(UNKNOWN_SIZE, UNKNOWN_SIZE, 1.0)

    if safe_ratio(container_size) < safe_ratio(natural_size):
        # The image is flatter than the container: widths match, the margin
        # is at the bottom.
        factor = safe_width(container_size) / safe_width(natural_size)
    else:
        factor = safe_height(container_size) / safe_height(natural_size)

    fitted = natural_size.scaled(factor)
    margin = SizeInPixels(
        container_size.width - fitted.width,
        container_size.height - fitted.height,
    )
    return FittedImage(fitted, margin, factor)


@dataclass(frozen=True, slots=True)
class Measurement:
    """Sizes observed in one layout pass. Replaced wholesale, never patched."""

    container_size: SizeInPixels = UNKNOWN_SIZE
    natural_size: SizeInPixels = UNKNOWN_SIZE
    fitted: FittedImage = field(init=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "fitted", fit_contain(self.container_size, self.natural_size))

    @property
    def is_complete(self) -> bool:
        return not (self.container_size.unknown or self.fitted.size.unknown)


def solve_transform(
    region: RectangleImageRegion,
    container_size: SizeInPixels,
    fitted_image_size: SizeInPixels,
    bottom_right_margin: SizeInPixels | None = None,
) -> Transformation:
    """Compute the scale, origin and clip that center ``region`` in the container.

    The region is zoomed so that it fills the container along one axis and is
    centered along the other. If centering would pan past an image edge (blank
    margin), the zoom is reduced so that the image edge meets the container
    edge, and the other axis is middle-cropped instead.
    """
    margin = bottom_right_margin or SizeInPixels(0.0, 0.0)

    position, size = region.pixel_bounding_box(fitted_image_size)
    region_w = safe_width(size)
    region_h = safe_height(size)
    container_w = safe_width(container_size)
    container_h = safe_height(container_size)
    image_w = fitted_image_size.width
    image_h = fitted_image_size.height

    region_x_from_right = image_w - region_w - position.x
    region_y_from_bottom = image_h - region_h - position.y

    x_offset = 0.0
    y_offset = 0.0
    if safe_ratio(container_size) < region_w / region_h:
        # The region is flatter than the container: match widths, then center
        # vertically. y_offset is how much image shows above the region.
        #
        #   +----------------------+  <-
        #   | image around region  |   | y_offset
        #   +----------------------+  <-
        #   | region               |
        #   +----------------------+
        #   | image around region  |
        #   +----------------------+
        scale = container_w / region_w
        y_offset = (container_h / scale - region_h) / 2

        if y_offset > position.y or y_offset > region_y_from_bottom:
            # Not enough image above or below the region: zoom less.
            y_offset = max(min(position.y, region_y_from_bottom), 0.0)
            # From y_offset == (container_h / scale - region_h) / 2
            scale = container_h / (y_offset * 2 + region_h)
            x_offset = (container_w / scale - region_w) / 2
    else:
        # Same as above with the X and Y axes swapped.
        scale = container_h / region_h
        x_offset = (container_w / scale - region_w) / 2

        if x_offset > position.x or x_offset > region_x_from_right:
            x_offset = max(min(position.x, region_x_from_right), 0.0)
            scale = container_w / (x_offset * 2 + region_w)
            y_offset = (container_h / scale - region_h) / 2

    origin = PositionInPixels(position.x - x_offset, position.y - y_offset)
    return Transformation(
        origin=origin,
        factor=scale,
        inset_clip_from_top_left=SizeInPixels(origin.x, origin.y),
        inset_clip_from_bottom_right=SizeInPixels(
            region_x_from_right - x_offset + margin.width,
            region_y_from_bottom - y_offset + margin.height,
        ),
    )
