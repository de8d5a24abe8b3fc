"""Image regions and parsing of externally supplied region descriptors.

Descriptors arrive untyped (decoded JSON), so every field is optional and may
be a number or a string. Parsing never raises: a descriptor that can't be
used becomes an *unknown* region, which callers drop.
"""

from __future__ import annotations

import json
import logging
import math
import re
import uuid
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any, TypedDict

from image_display.logger import get_logger

from .primitives import (
    PositionInPixels,
    PositionInRelativeCoord,
    SizeInPixels,
    SizeInRelativeCoord,
)

_logger = get_logger("regions")

ORIGINAL_IMAGE_REGION_ID = "__orig__"

_LEADING_NUMBER = re.compile(r"^\s*[-+]?(?:inf(?:inity)?|(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?)", re.IGNORECASE)


class RegionDescriptor(TypedDict, total=False):
    id: str
    shape: str  # only "rectangle" is supported
    unit: str  # "relative" or "pixel"
    imageWidth: float | str  # required when unit is "pixel"
    imageHeight: float | str  # required when unit is "pixel"
    x: float | str
    y: float | str
    width: float | str
    height: float | str


@dataclass(frozen=True, slots=True)
class RectangleImageRegion:
    """Rectangular region of interest, in coordinates relative to the image."""

    id: str = ""
    position: PositionInRelativeCoord = field(default_factory=PositionInRelativeCoord)
    size: SizeInRelativeCoord = field(default_factory=SizeInRelativeCoord)
    unknown: bool = False

    shape = "rectangle"

    def bounding_box(self) -> tuple[PositionInRelativeCoord, SizeInRelativeCoord]:
        return self.position, self.size

    def pixel_bounding_box(self, base: SizeInPixels) -> tuple[PositionInPixels, SizeInPixels]:
        return self.position.to_pixels(base), self.size.to_pixels(base)

    def __str__(self) -> str:
        return f"{self.shape} {self.id!r} position={self.position} size={self.size}"


# Special region representing the entire original image.
ORIGINAL_IMAGE_REGION = RectangleImageRegion(
    ORIGINAL_IMAGE_REGION_ID,
    PositionInRelativeCoord(0.0, 0.0),
    SizeInRelativeCoord(1.0, 1.0),
)

UNKNOWN_REGION = RectangleImageRegion(unknown=True)


def parse_number(value: Any) -> float:
    """Parse the leading number of ``value`` (``"12.5px"`` gives 12.5).

    Returns NaN when there is no number, including for booleans.
    """
    if value is None or isinstance(value, bool):
        return math.nan
    if isinstance(value, (int, float)):
        try:
            return float(value)
        except OverflowError:
            # JSON integer literals have no size limit
            return math.inf if value > 0 else -math.inf
    m = _LEADING_NUMBER.match(str(value))
    if not m:
        return math.nan
    try:
        return float(m.group(0))
    except ValueError:
        return math.nan


def _lower(value: Any) -> str | None:
    if value is None or value == "":
        return None
    return str(value).lower()


def _infer_unit(values: Mapping[str, Any]) -> str | None:
    unit = _lower(values.get("unit"))
    if unit:
        return unit
    has_w = bool(values.get("imageWidth"))
    has_h = bool(values.get("imageHeight"))
    if has_w and has_h:
        return "pixel"
    if not has_w and not has_h:
        return "relative"
    return None


def _parse_rectangle(values: Mapping[str, Any], log: logging.Logger | logging.LoggerAdapter) -> RectangleImageRegion:
    region_id = values.get("id")

    unit = _infer_unit(values)
    if unit not in ("relative", "pixel"):
        log.debug("Region %s has unknown unit %s, skipping.", region_id, unit)
        return UNKNOWN_REGION

    base = SizeInPixels(1.0, 1.0)
    if unit == "pixel":
        if values.get("imageWidth") is None or values.get("imageHeight") is None:
            log.warning("Region %s has missing imageWidth or imageHeight, skipping.", region_id)
            return UNKNOWN_REGION
        image_w = parse_number(values.get("imageWidth"))
        image_h = parse_number(values.get("imageHeight"))
        if not (math.isfinite(image_w) and math.isfinite(image_h)):
            log.warning("Region %s has non-numeric imageWidth or imageHeight, skipping.", region_id)
            return UNKNOWN_REGION
        base = SizeInPixels(image_w, image_h)

    raw = [values.get(k) for k in ("x", "y", "width", "height")]
    if any(v is None for v in raw):
        log.warning("Region %s has missing x, y, width or height, skipping.", region_id)
        return UNKNOWN_REGION

    x, y, width, height = (parse_number(v) for v in raw)
    if not all(math.isfinite(v) for v in (x, y, width, height)):
        log.warning("Region %s has non-numeric or infinite x, y, width or height, skipping.", region_id)
        return UNKNOWN_REGION

    if x < 0 or y < 0 or width <= 0 or height <= 0:
        log.warning("Region %s has negative/zero x, y, width or height, skipping.", region_id)
        return UNKNOWN_REGION

    if unit == "relative":
        position = PositionInRelativeCoord(x, y)
        size = SizeInRelativeCoord(width, height)
    else:
        position = PositionInPixels(x, y).to_relative(base)
        size = SizeInPixels(width, height).to_relative(base)

    # Keep the region inside the image.
    size = SizeInRelativeCoord(
        min(size.width, 1.0 - position.x),
        min(size.height, 1.0 - position.y),
    )
    if size.width <= 0 or size.height <= 0:
        log.warning("Region %s lies outside of the image, skipping.", region_id)
        return UNKNOWN_REGION

    if region_id is None or region_id == "":
        region_id = str(uuid.uuid4())
    return RectangleImageRegion(str(region_id), position, size)


ShapeParser = Callable[[Mapping[str, Any], Any], RectangleImageRegion]

# Maps the lower-cased `shape` tag to its parser.
SHAPE_PARSERS: dict[str, ShapeParser] = {
    "rectangle": _parse_rectangle,
}


def normalize_region(
    values: Mapping[str, Any] | Any,
    logger: logging.Logger | logging.LoggerAdapter | None = None,
) -> RectangleImageRegion:
    """Turn a raw region descriptor into a region in relative coordinates.

    An absent shape means "rectangle". Returns a region flagged ``unknown``
    when the descriptor can't be used; the reason is logged.
    """
    log = logger or _logger
    if not isinstance(values, Mapping):
        log.warning("Region descriptor is not an object: %r, skipping.", values)
        return UNKNOWN_REGION
    shape = _lower(values.get("shape")) or "rectangle"
    parser = SHAPE_PARSERS.get(shape)
    if parser is None:
        log.debug("Region %s has unknown shape %s, skipping.", values.get("id"), shape)
        return UNKNOWN_REGION
    return parser(values, log)


def parse_regions(
    raw: str | Iterable[Any] | None,
    logger: logging.Logger | logging.LoggerAdapter | None = None,
) -> list[RectangleImageRegion]:
    """Parse a region list (JSON text or already decoded) into valid regions.

    Invalid entries are skipped; an invalid list gives an empty result.
    """
    log = logger or _logger
    log.debug("Populating rectangle image regions...")

    items: Any = raw
    if raw is None or raw == "":
        items = []
    elif isinstance(raw, (str, bytes)):
        try:
            items = json.loads(raw)
        except ValueError:
            items = None
    elif isinstance(raw, Iterable) and not isinstance(raw, Mapping):
        items = list(raw)
    if not isinstance(items, (list, tuple)):
        log.warning("Invalid image regions: %r", raw)
        items = []

    regions: list[RectangleImageRegion] = []
    for item in items:
        if not isinstance(item, Mapping):
            log.warning("Region descriptor is not an object: %r, skipping.", item)
            continue
        region = normalize_region(item, log)
        if region.unknown:
            continue
        log.debug(
            "Rectangle region found: id=%s, position=%s, size=%s",
            region.id,
            region.position,
            region.size,
        )
        regions.append(region)

    if not regions:
        log.debug("No rectangle image region found")
    return regions


def find_region(regions: Iterable[RectangleImageRegion], region_id: str | None) -> RectangleImageRegion | None:
    if not region_id:
        return None
    if region_id == ORIGINAL_IMAGE_REGION_ID:
        return ORIGINAL_IMAGE_REGION
    for region in regions:
        if region.id == region_id and not region.unknown:
            return region
    return None
