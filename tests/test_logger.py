import logging
import sys

import pytest

from image_display import logger as id_logger


def _stderr_handlers(base):
    return [
        h
        for h in base.handlers
        if isinstance(h, logging.StreamHandler) and getattr(h, "stream", None) is sys.stderr
    ]


def test_setup_logger_idempotent_handlers(monkeypatch):
    """Calling setup_logger() repeatedly should leave exactly one stderr StreamHandler."""
    monkeypatch.delenv("IMAGE_DISPLAY_LOG_LEVEL", raising=False)
    base = id_logger.setup_logger(level=logging.DEBUG)
    _ = id_logger.setup_logger(level=logging.DEBUG)
    assert len(_stderr_handlers(base)) == 1
    assert base.propagate is False


def test_setup_logger_follows_replaced_stderr(monkeypatch):
    """If stderr is replaced between calls, the old handler is swapped, not duplicated."""
    base = id_logger.setup_logger()

    class DummyStderr:
        def write(self, s):
            return len(s)

        def flush(self):
            pass

    monkeypatch.setattr(sys, "stderr", DummyStderr())
    _ = id_logger.setup_logger()
    own = [h for h in base.handlers if getattr(h, "_image_display_handler", False)]
    assert len(own) == 1
    assert own[0].stream is sys.stderr


def test_env_level_overrides_argument(monkeypatch):
    monkeypatch.setenv("IMAGE_DISPLAY_LOG_LEVEL", "debug")
    base = id_logger.setup_logger(level=logging.ERROR)
    assert base.level == logging.DEBUG
    monkeypatch.delenv("IMAGE_DISPLAY_LOG_LEVEL")
    base = id_logger.setup_logger(level=logging.ERROR)
    assert base.level == logging.ERROR


def test_category_filter(monkeypatch):
    monkeypatch.setenv("IMAGE_DISPLAY_LOG_CATS", "regions, selector")
    base = id_logger.setup_logger()
    handler = _stderr_handlers(base)[0]

    def record(name):
        return logging.LogRecord(name, logging.WARNING, __file__, 1, "msg", None, None)

    assert handler.filter(record("image_display.regions"))
    assert not handler.filter(record("image_display.controller"))

    monkeypatch.delenv("IMAGE_DISPLAY_LOG_CATS")
    id_logger.setup_logger()
    assert handler.filter(record("image_display.controller"))


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("debug", logging.DEBUG),
        ("TRACE", logging.DEBUG),
        ("notice", logging.DEBUG),
        ("info", logging.INFO),
        ("warn", logging.WARNING),
        ("warning", logging.WARNING),
        ("err", logging.ERROR),
        ("error", logging.ERROR),
        ("fatal", logging.CRITICAL),
        ("off", None),
        ("", None),
        (None, None),
    ],
)
def test_parse_log_level(text, expected):
    assert id_logger.parse_log_level(text) == expected


def test_get_logger_returns_child():
    child = id_logger.get_logger("regions")
    assert child.name == "image_display.regions"
    assert id_logger.get_logger() is logging.getLogger("image_display")


def test_element_logger_adapter_prefix():
    adapter = id_logger.ElementLoggerAdapter(id_logger.get_logger("controller"), "img-1")
    assert adapter.process("Selected region: a", {}) == ("[img-1] Selected region: a", {})
    adapter.set_element_id("")
    assert adapter.process("x", {}) == ("x", {})
