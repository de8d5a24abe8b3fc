from __future__ import annotations

from collections.abc import Callable, Iterable
from typing import Any

from .geometry import (
    DEFAULT_SEARCH_THRESHOLD,
    UNKNOWN_SIZE,
    Measurement,
    RectangleImageRegion,
    SizeInPixels,
    Transformation,
    parse_regions,
    select_best_region,
    solve_transform,
)
from .logger import ElementLoggerAdapter, get_logger

_logger = get_logger("controller")


class RegionDisplayController:
    """Keeps the inputs of one displayed image and recomputes its transformation.

    The owner (a widget, or a headless caller) feeds it the region list, the
    forced region id and size observations. Every input change goes through
    `recompute()`, which does nothing until both the container and the image
    sizes are known. A deferred recompute drops the previous result and calls
    `on_transformation(None, None)`.
    """

    def __init__(
        self,
        natural_size: SizeInPixels | None = None,
        *,
        threshold: float = DEFAULT_SEARCH_THRESHOLD,
        element_id: str = "",
        on_transformation: Callable[[Transformation | None, RectangleImageRegion | None], None] | None = None,
    ):
        self.log = ElementLoggerAdapter(_logger, element_id)
        self.threshold = float(threshold)
        self.on_transformation = on_transformation
        self.regions: list[RectangleImageRegion] = []
        self.forced_region_id: str | None = None
        self.measurement = Measurement(UNKNOWN_SIZE, natural_size or UNKNOWN_SIZE)
        self.transformation: Transformation | None = None
        self.selected_region: RectangleImageRegion | None = None

    @property
    def element_id(self) -> str:
        return self.log.element_id

    def set_element_id(self, element_id: str) -> None:
        self.log.set_element_id(element_id)

    def set_regions(self, raw: str | Iterable[Any] | None) -> Transformation | None:
        self.regions = parse_regions(raw, self.log)
        return self.recompute()

    def set_forced_region_id(self, region_id: str | None) -> Transformation | None:
        self.forced_region_id = region_id or None
        return self.recompute()

    def set_natural_size(self, natural_size: SizeInPixels) -> Transformation | None:
        if natural_size == self.measurement.natural_size:
            return self.transformation
        self.measurement = Measurement(self.measurement.container_size, natural_size)
        self.log.debug("Natural image size: %s", natural_size)
        return self.recompute()

    def observe_size(self, container_size: SizeInPixels) -> bool:
        """Record a container size observation. Returns True if it changed."""
        if container_size == self.measurement.container_size:
            return False
        self.measurement = Measurement(container_size, self.measurement.natural_size)
        self.log.debug("Element size: %s", container_size)
        self.log.debug("Fitted image size: %s", self.measurement.fitted.size)
        self.log.debug("Fitted image margin: %s", self.measurement.fitted.bottom_right_margin)
        self.recompute()
        return True

    def recompute(self) -> Transformation | None:
        self.log.debug("Panning and zooming to best fitting region...")
        m = self.measurement
        if not m.is_complete:
            self.log.debug("Element or fitted image size unknown, deferring.")
            if self.transformation is not None:
                # The previous result belongs to another image or size.
                self.transformation = None
                self.selected_region = None
                if self.on_transformation is not None:
                    self.on_transformation(None, None)
            return None

        region = select_best_region(
            m.container_size,
            m.fitted.size,
            self.regions,
            self.forced_region_id,
            self.threshold,
            logger=self.log,
        )
        transformation = solve_transform(
            region,
            m.container_size,
            m.fitted.size,
            m.fitted.bottom_right_margin,
        )
        self.selected_region = region
        self.transformation = transformation
        self.log.debug(
            "Transformation: origin=%s factor=%.3f clip=%s/%s",
            transformation.origin,
            transformation.factor,
            transformation.inset_clip_from_top_left,
            transformation.inset_clip_from_bottom_right,
        )
        if self.on_transformation is not None:
            self.on_transformation(transformation, region)
        return transformation
