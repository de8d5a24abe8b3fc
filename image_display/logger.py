import logging
import os
import sys
from typing import Any

_ENV_LEVEL = "IMAGE_DISPLAY_LOG_LEVEL"
_ENV_CATS = "IMAGE_DISPLAY_LOG_CATS"


def parse_log_level(text: str | None) -> int | None:
    """Map a host-style log level name to a `logging` level.

    Accepts the loose names element attributes tend to carry ("trace",
    "notice", "warn", "err", "fatal"...). Returns None for anything else,
    meaning logging is off.
    """
    level = (text or "").strip().lower()
    if level in ("debug", "trace", "notice"):
        return logging.DEBUG
    if level == "info":
        return logging.INFO
    if level.startswith("warn"):
        return logging.WARNING
    if level.startswith("err"):
        return logging.ERROR
    if level in ("fatal", "critical"):
        return logging.CRITICAL
    return None


def setup_logger(level: int = logging.WARNING, name: str = "image_display") -> logging.Logger:
    """Create or update the project logger.

    - Respects env overrides IMAGE_DISPLAY_LOG_LEVEL/IMAGE_DISPLAY_LOG_CATS on every call
      (so late CLI parsing can still take effect).
    - Ensures there is exactly one stderr StreamHandler on the base logger and updates
      its formatter/filters instead of bailing out early.
    """
    logger = logging.getLogger(name)

    env_level = parse_log_level(os.getenv(_ENV_LEVEL))
    if env_level is not None:
        level = env_level
    logger.setLevel(level)

    stream_handler: logging.StreamHandler | None = None
    for h in list(logger.handlers):
        if isinstance(h, logging.StreamHandler) and getattr(h, "stream", None) is sys.stderr:
            stream_handler = h
            break

    if stream_handler is None:
        # Drop handlers bound to a stale stderr (e.g. replaced by a test harness)
        for h in list(logger.handlers):
            if isinstance(h, logging.StreamHandler) and getattr(h, "_image_display_handler", False):
                logger.removeHandler(h)
        stream_handler = logging.StreamHandler(stream=sys.stderr)
        stream_handler._image_display_handler = True  # type: ignore[attr-defined]
        logger.addHandler(stream_handler)

    fmt = logging.Formatter(
        fmt="[%(asctime)s] %(levelname)s: %(message)s",
        datefmt="%H:%M:%S",
    )
    stream_handler.setFormatter(fmt)

    stream_handler.filters.clear()
    cats = (os.getenv(_ENV_CATS) or "").strip()
    if cats:
        allowed = {c.strip() for c in cats.split(",") if c.strip()}

        class _CategoryFilter(logging.Filter):
            def filter(self, record: logging.LogRecord) -> bool:
                # record.name like: image_display.controller, image_display.regions
                parts = (record.name or "").split(".")
                suffix = parts[-1] if parts else record.name
                return suffix in allowed

        stream_handler.addFilter(_CategoryFilter())

    logger.propagate = False
    return logger


def get_logger(name: str | None = None) -> logging.Logger:
    base = logging.getLogger("image_display")
    if not base.handlers:
        base = setup_logger()
    return base if not name else base.getChild(name)


class ElementLoggerAdapter(logging.LoggerAdapter):
    """Prefix messages with ``[element_id]`` so several views can share one log."""

    def __init__(self, logger: logging.Logger, element_id: str = ""):
        super().__init__(logger, {"element_id": element_id})

    @property
    def element_id(self) -> str:
        return str((self.extra or {}).get("element_id") or "")

    def set_element_id(self, element_id: str) -> None:
        self.extra = {"element_id": element_id or ""}

    def process(self, msg: Any, kwargs: Any) -> tuple[Any, Any]:
        element_id = self.element_id
        if element_id:
            return f"[{element_id}] {msg}", kwargs
        return msg, kwargs
