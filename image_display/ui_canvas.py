import contextlib
import logging
from collections.abc import Iterable
from typing import Any

from PySide6.QtCore import QPointF, QRectF, Qt, QTimer
from PySide6.QtGui import QColor, QPainter, QPen, QPixmap, QTransform
from PySide6.QtWidgets import QFrame, QGraphicsItem, QGraphicsPixmapItem, QGraphicsRectItem, QGraphicsScene, QGraphicsView

from .controller import RegionDisplayController
from .geometry import (
    DEFAULT_SEARCH_THRESHOLD,
    UNKNOWN_SIZE,
    RectangleImageRegion,
    SizeInPixels,
    Transformation,
)
from .logger import get_logger

_logger = get_logger("ui_canvas")

# Period of the size observer, on top of resize events.
DEFAULT_SIZE_POLL_MS = 200

LABEL_OFFSET = QPointF(4, 14)
REGION_OUTLINE_COLOR = QColor(255, 200, 0)
SELECTED_OUTLINE_COLOR = QColor(0, 220, 120)


def to_qtransform(transformation: Transformation, fit_factor: float = 1.0) -> QTransform:
    """Map natural image pixels to view pixels.

    The image is first fitted (``fit_factor``), then scaled by the
    transformation factor around its origin and moved so that the origin
    lands on the view's top-left corner: ``view = factor * (fit * p - origin)``.
    """
    f = transformation.factor
    return QTransform(
        f * fit_factor,
        0.0,
        0.0,
        f * fit_factor,
        -f * transformation.origin.x,
        -f * transformation.origin.y,
    )


class RegionImageView(QGraphicsView):
    """Shows a pixmap zoomed on its best fitting region for the current view size."""

    def __init__(self, parent=None, *, poll_interval_ms: int = DEFAULT_SIZE_POLL_MS, threshold: float = DEFAULT_SEARCH_THRESHOLD):
        super().__init__(parent)
        self._scene = QGraphicsScene(self)
        self.setScene(self._scene)

        # Clipping parent: carries the transform, clips the pixmap to the region.
        self._clip_item = QGraphicsRectItem()
        self._clip_item.setFlag(QGraphicsItem.GraphicsItemFlag.ItemClipsChildrenToShape, True)
        self._clip_item.setPen(Qt.PenStyle.NoPen)
        self._clip_item.setBrush(Qt.BrushStyle.NoBrush)
        self._scene.addItem(self._clip_item)
        self._pix_item = QGraphicsPixmapItem(self._clip_item)
        self._pix_item.setTransformationMode(Qt.TransformationMode.SmoothTransformation)

        try:
            self.setFrameShape(QFrame.NoFrame)
            self.setFrameShadow(QFrame.Plain)
            self.setLineWidth(0)
            self.setViewportMargins(0, 0, 0, 0)
            self.setStyleSheet("QGraphicsView { border: none; }")
        except Exception:
            pass
        self.setRenderHint(QPainter.SmoothPixmapTransform, True)
        self.setHorizontalScrollBarPolicy(Qt.ScrollBarAlwaysOff)
        self.setVerticalScrollBarPolicy(Qt.ScrollBarAlwaysOff)
        self.setAlignment(Qt.AlignLeft | Qt.AlignTop)
        self.setDragMode(QGraphicsView.NoDrag)

        self.controller = RegionDisplayController(
            threshold=threshold,
            on_transformation=self._apply_transformation,
        )

        self._size_timer = QTimer(self)
        self._size_timer.timeout.connect(self._observe_size)
        self.set_size_poll_interval(poll_interval_ms)

    # ---- inputs ----
    def set_pixmap(self, pixmap: QPixmap) -> None:
        self._pix_item.setPixmap(pixmap)
        self._pix_item.setOffset(0, 0)
        if pixmap.isNull():
            natural = UNKNOWN_SIZE
        else:
            natural = SizeInPixels(pixmap.width(), pixmap.height())
        if natural == self.controller.measurement.natural_size:
            # Same size, different content (e.g. another srcset candidate)
            self.controller.recompute()
        else:
            self.controller.set_natural_size(natural)
        self._observe_size()

    def set_regions(self, raw: str | Iterable[Any] | None) -> None:
        self.controller.set_regions(raw)

    def set_region_id(self, region_id: str | None) -> None:
        self.controller.set_forced_region_id(region_id)

    def set_element_id(self, element_id: str) -> None:
        self.controller.set_element_id(element_id)

    def set_background_color(self, color: QColor) -> None:
        self.setBackgroundBrush(color)

    def set_size_poll_interval(self, ms: int) -> None:
        """Poll the viewport size every ``ms`` milliseconds; 0 relies on resize events only."""
        ms = max(0, int(ms))
        if ms == 0:
            self._size_timer.stop()
            return
        self._size_timer.setInterval(ms)
        self._size_timer.start()

    # ---- read-only state ----
    @property
    def transformation(self) -> Transformation | None:
        return self.controller.transformation

    @property
    def selected_region(self) -> RectangleImageRegion | None:
        return self.controller.selected_region

    def viewport_size(self) -> SizeInPixels:
        vp = self.viewport()
        return SizeInPixels(vp.width(), vp.height())

    def clip_rect(self) -> QRectF:
        """Visible part of the image, in natural pixels."""
        return self._clip_item.rect()

    def item_transform(self) -> QTransform:
        return self._clip_item.transform()

    # ---- size observation ----
    def _observe_size(self) -> None:
        size = self.viewport_size()
        with contextlib.suppress(Exception):
            self._scene.setSceneRect(QRectF(0, 0, size.width, size.height))
        self.controller.observe_size(size)

    def resizeEvent(self, event):
        super().resizeEvent(event)
        self._observe_size()

    # ---- rendering ----
    def _apply_transformation(self, transformation: Transformation | None, region: RectangleImageRegion | None) -> None:
        if transformation is None:
            self._clip_item.setRect(QRectF())
            self._clip_item.setTransform(QTransform())
            with contextlib.suppress(Exception):
                self.viewport().update()
            return
        measurement = self.controller.measurement
        fit = measurement.fitted.factor
        if fit <= 0:
            _logger.debug("fit factor not positive, skipping: %s", fit)
            return
        left, top, width, height = transformation.visible_rect(measurement.container_size)
        self._clip_item.setRect(QRectF(left / fit, top / fit, width / fit, height / fit))
        self._clip_item.setTransform(to_qtransform(transformation, fit))
        with contextlib.suppress(Exception):
            self.viewport().update()

    def drawForeground(self, painter, rect):
        try:
            debug_enabled = logging.getLogger("image_display").isEnabledFor(logging.DEBUG)
        except Exception:
            debug_enabled = False
        if not debug_enabled or self._pix_item.pixmap().isNull():
            return
        natural = self.controller.measurement.natural_size
        selected = self.controller.selected_region
        painter.save()
        try:
            painter.setBrush(Qt.BrushStyle.NoBrush)
            for region in self.controller.regions:
                is_selected = selected is not None and region.id == selected.id
                pen = QPen(SELECTED_OUTLINE_COLOR if is_selected else REGION_OUTLINE_COLOR)
                pen.setWidth(2)
                pen.setCosmetic(True)
                painter.setPen(pen)
                pos, size = region.pixel_bounding_box(natural)
                scene_rect = self._clip_item.mapRectToScene(QRectF(pos.x, pos.y, size.width, size.height))
                painter.drawRect(scene_rect)
                painter.drawText(scene_rect.topLeft() + LABEL_OFFSET, region.id)
        except Exception as ex:
            _logger.debug("debug overlay failed: %s", ex)
        finally:
            painter.restore()
