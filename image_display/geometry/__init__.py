"""Region-fit geometry: public API.

Important: keep this package free of Qt imports so it can be used (and
tested) headless. The Qt side lives in `image_display.ui_canvas`.
"""

from .primitives import (
    UNKNOWN_SIZE,
    PositionInPixels,
    PositionInRelativeCoord,
    SizeInPixels,
    SizeInRelativeCoord,
    ratio_diff_factor,
    safe_height,
    safe_ratio,
    safe_width,
)
from .regions import (
    ORIGINAL_IMAGE_REGION,
    ORIGINAL_IMAGE_REGION_ID,
    SHAPE_PARSERS,
    RectangleImageRegion,
    RegionDescriptor,
    find_region,
    normalize_region,
    parse_number,
    parse_regions,
)
from .selector import DEFAULT_SEARCH_THRESHOLD, select_best_region
from .transform import FittedImage, Measurement, Transformation, fit_contain, solve_transform

__all__ = [
    "DEFAULT_SEARCH_THRESHOLD",
    "ORIGINAL_IMAGE_REGION",
    "ORIGINAL_IMAGE_REGION_ID",
    "SHAPE_PARSERS",
    "UNKNOWN_SIZE",
    "FittedImage",
    "Measurement",
    "PositionInPixels",
    "PositionInRelativeCoord",
    "RectangleImageRegion",
    "RegionDescriptor",
    "SizeInPixels",
    "SizeInRelativeCoord",
    "Transformation",
    "find_region",
    "fit_contain",
    "normalize_region",
    "parse_number",
    "parse_regions",
    "ratio_diff_factor",
    "safe_height",
    "safe_ratio",
    "safe_width",
    "select_best_region",
    "solve_transform",
]
