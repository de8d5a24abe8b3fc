import argparse
import json
import math
import os
import sys
from pathlib import Path
from typing import Any

from PySide6.QtGui import QImageReader, QPixmap
from PySide6.QtWidgets import QApplication

from image_display.controller import RegionDisplayController
from image_display.geometry import RectangleImageRegion, SizeInPixels, Transformation
from image_display.logger import get_logger, setup_logger
from image_display.settings_manager import SettingsManager

# --- CLI logging options -----------------------------------------------------
# Qt rejects unknown options, so our logging options are parsed first, turned
# into environment variables (IMAGE_DISPLAY_LOG_LEVEL, IMAGE_DISPLAY_LOG_CATS)
# and removed from the argument list.


def _apply_cli_logging_options(argv: list[str]) -> list[str]:
    parser = argparse.ArgumentParser(add_help=False)
    parser.add_argument("--log-level", help="Set log level")
    parser.add_argument("--log-cats", help="Set log categories")
    args, remaining = parser.parse_known_args(argv[1:])
    if args.log_level:
        os.environ["IMAGE_DISPLAY_LOG_LEVEL"] = args.log_level
    if args.log_cats:
        os.environ["IMAGE_DISPLAY_LOG_CATS"] = args.log_cats
    return [argv[0], *remaining]


logger = get_logger("main")
_BASE_DIR = Path(getattr(sys, "_MEIPASS", Path(__file__).resolve().parent))


def parse_size(text: str) -> SizeInPixels:
    """Parse ``"WIDTHxHEIGHT"`` into a pixel size."""
    parts = (text or "").lower().split("x")
    if len(parts) != 2:
        raise ValueError(f"invalid size {text!r}, expected WIDTHxHEIGHT")
    width, height = (float(p) for p in parts)
    if not (math.isfinite(width) and math.isfinite(height)):
        raise ValueError(f"invalid size {text!r}, width and height must be finite")
    if width <= 0 or height <= 0:
        raise ValueError(f"invalid size {text!r}, width and height must be positive")
    return SizeInPixels(width, height)


def read_regions_arg(value: str | None) -> str | None:
    """Return region JSON from ``value``: a path to a JSON file, or inline JSON."""
    if not value:
        return None
    path = Path(value)
    try:
        if path.is_file():
            return path.read_text(encoding="utf-8")
    except OSError as e:
        logger.error("failed to read regions file %s: %s", value, e)
        return None
    return value


def image_size(path: str) -> SizeInPixels | None:
    reader = QImageReader(path)
    size = reader.size()
    if size.width() > 0 and size.height() > 0:
        return SizeInPixels(size.width(), size.height())
    logger.debug("cannot read image size of %s: %s", path, reader.errorString())
    return None


def transformation_to_dict(transformation: Transformation, region: RectangleImageRegion | None) -> dict[str, Any]:
    tl = transformation.inset_clip_from_top_left
    br = transformation.inset_clip_from_bottom_right
    return {
        "region": region.id if region is not None else None,
        "origin": {"x": transformation.origin.x, "y": transformation.origin.y},
        "factor": transformation.factor,
        "insetClipFromTopLeft": {"width": tl.width, "height": tl.height},
        "insetClipFromBottomRight": {"width": br.width, "height": br.height},
    }


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="image-display",
        description="Display an image zoomed on its best fitting region of interest.",
    )
    parser.add_argument("image", help="Image file to display")
    parser.add_argument("--regions", help="Region list: JSON file path or inline JSON")
    parser.add_argument("--region-id", help="Force this region id (__orig__ for the whole image)")
    parser.add_argument("--id", default="", help="Element id used as log prefix")
    parser.add_argument("--size", help="Container size WIDTHxHEIGHT")
    parser.add_argument("--print-transform", action="store_true", help="Print the transformation as JSON and exit")
    parser.add_argument("--settings", help="Settings file (JSON)")
    return parser


def print_transform(args: argparse.Namespace, settings: SettingsManager) -> int:
    natural = image_size(args.image)
    if natural is None:
        logger.error("cannot read image: %s", args.image)
        return 2
    try:
        container = parse_size(args.size or "")
    except ValueError as e:
        logger.error("%s", e)
        return 2

    controller = RegionDisplayController(
        natural,
        threshold=settings.region_search_threshold,
        element_id=args.id,
    )
    controller.set_regions(read_regions_arg(args.regions))
    controller.set_forced_region_id(args.region_id)
    controller.observe_size(container)
    transformation = controller.transformation
    if transformation is None:
        logger.error("no transformation could be computed")
        return 2
    print(json.dumps(transformation_to_dict(transformation, controller.selected_region), indent=2))
    return 0


def run(argv: list[str] | None = None) -> int:
    """Application entrypoint (packaging-friendly)."""
    if argv is None:
        argv = sys.argv
    argv = _apply_cli_logging_options(list(argv))
    args = _build_parser().parse_args(argv[1:])

    settings_path = args.settings or (_BASE_DIR / "settings.json").as_posix()
    settings = SettingsManager(settings_path)
    level = settings.log_level
    if level is not None:
        setup_logger(level)
    else:
        setup_logger()

    if args.print_transform:
        return print_transform(args, settings)

    from image_display.ui_canvas import RegionImageView

    app = QApplication.instance() or QApplication(argv)
    view = RegionImageView(
        poll_interval_ms=settings.size_observer_period_ms,
        threshold=settings.region_search_threshold,
    )
    view.set_element_id(args.id)
    view.set_background_color(settings.determine_background())
    view.set_regions(read_regions_arg(args.regions))
    view.set_region_id(args.region_id)

    pixmap = QPixmap(args.image)
    if pixmap.isNull():
        logger.error("cannot load image: %s", args.image)
        return 2
    view.set_pixmap(pixmap)
    view.setWindowTitle(f"Image Display - {os.path.basename(args.image)}")

    if args.size:
        try:
            size = parse_size(args.size)
            view.resize(int(size.width), int(size.height))
        except ValueError as e:
            logger.warning("%s", e)
            view.resize(800, 600)
    else:
        view.resize(800, 600)
    view.show()
    return app.exec()


if __name__ == "__main__":
    sys.exit(run())
