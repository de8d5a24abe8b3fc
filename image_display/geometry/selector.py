from __future__ import annotations

import logging
from collections.abc import Iterable

from image_display.logger import get_logger

from .primitives import SizeInPixels, ratio_diff_factor
from .regions import ORIGINAL_IMAGE_REGION, RectangleImageRegion, find_region

_logger = get_logger("selector")

# Below this ratio difference between container and image, cropping isn't worth it.
DEFAULT_SEARCH_THRESHOLD = 1.1


def select_best_region(
    container_size: SizeInPixels,
    fitted_image_size: SizeInPixels,
    regions: Iterable[RectangleImageRegion],
    forced_id: str | None = None,
    threshold: float = DEFAULT_SEARCH_THRESHOLD,
    logger: logging.Logger | logging.LoggerAdapter | None = None,
) -> RectangleImageRegion:
    """Return the region to pan and zoom on for the given container size.

    A ``forced_id`` naming a known region (or the original image) wins
    unconditionally. Otherwise the region whose aspect ratio is closest to the
    container's is picked, falling back to the original image.
    """
    log = logger or _logger
    regions = list(regions)

    if forced_id:
        forced = find_region(regions, forced_id)
        if forced is not None:
            log.debug("Selected region (forced): %s", forced.id)
            return forced
        log.debug("Forced region %s not found, selecting automatically", forced_id)

    best = ORIGINAL_IMAGE_REGION
    smallest_diff = ratio_diff_factor(container_size, fitted_image_size)

    # Only worth looking for a region if the container and image ratios differ enough.
    if smallest_diff > threshold:
        for region in regions:
            if region.unknown:
                continue
            diff = ratio_diff_factor(container_size, region.size.to_pixels(fitted_image_size))
            if diff < smallest_diff:
                smallest_diff = diff
                best = region

    log.debug("Selected region: %s", best.id)
    return best
