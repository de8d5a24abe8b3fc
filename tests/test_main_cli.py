import json
import os
from pathlib import Path

import pytest

from PySide6.QtGui import QImage

from image_display import main as cli
from image_display.geometry import SizeInPixels

REGIONS = [{"id": "sq", "x": 50, "y": 0, "width": 100, "height": 100, "imageWidth": 200, "imageHeight": 100}]


@pytest.fixture
def image_file(tmp_path: Path) -> str:
    img = QImage(200, 100, QImage.Format.Format_RGB32)
    img.fill(0xFF808080)
    path = tmp_path / "wide.png"
    assert img.save(str(path))
    return str(path)


@pytest.fixture
def settings_file(tmp_path: Path) -> str:
    return str(tmp_path / "settings.json")


def test_print_transform(image_file, settings_file, capsys):
    rc = cli.run(
        [
            "image-display",
            image_file,
            "--regions",
            json.dumps(REGIONS),
            "--size",
            "100x100",
            "--print-transform",
            "--settings",
            settings_file,
        ]
    )
    assert rc == 0
    data = json.loads(capsys.readouterr().out)
    assert data["region"] == "sq"
    assert data["factor"] == pytest.approx(2.0)
    assert data["origin"] == pytest.approx({"x": 25, "y": 0})
    assert data["insetClipFromTopLeft"] == pytest.approx({"width": 25, "height": 0})
    assert data["insetClipFromBottomRight"] == pytest.approx({"width": 25, "height": 50})


def test_print_transform_regions_file_and_forced_id(image_file, settings_file, tmp_path, capsys):
    regions_path = tmp_path / "regions.json"
    regions_path.write_text(json.dumps(REGIONS), encoding="utf-8")
    rc = cli.run(
        [
            "image-display",
            image_file,
            "--regions",
            str(regions_path),
            "--region-id",
            "__orig__",
            "--size",
            "100x100",
            "--print-transform",
            "--settings",
            settings_file,
        ]
    )
    assert rc == 0
    data = json.loads(capsys.readouterr().out)
    assert data["region"] == "__orig__"


def test_print_transform_errors(image_file, settings_file, tmp_path):
    missing = str(tmp_path / "missing.png")
    base = ["--print-transform", "--settings", settings_file]
    assert cli.run(["image-display", missing, "--size", "100x100", *base]) == 2
    assert cli.run(["image-display", image_file, "--size", "100", *base]) == 2
    assert cli.run(["image-display", image_file, *base]) == 2


def test_parse_size():
    assert cli.parse_size("640x480") == SizeInPixels(640, 480)
    assert cli.parse_size("10X20") == SizeInPixels(10, 20)
    for bad in ("", "640", "0x10", "ax1", "1x2x3"):
        with pytest.raises(ValueError):
            cli.parse_size(bad)


def test_read_regions_arg(tmp_path: Path):
    assert cli.read_regions_arg(None) is None
    assert cli.read_regions_arg("[]") == "[]"
    path = tmp_path / "r.json"
    path.write_text('[{"id": "a"}]', encoding="utf-8")
    assert cli.read_regions_arg(str(path)) == '[{"id": "a"}]'


def test_cli_logging_options_become_env(monkeypatch):
    monkeypatch.setenv("IMAGE_DISPLAY_LOG_LEVEL", "")
    monkeypatch.setenv("IMAGE_DISPLAY_LOG_CATS", "")
    rest = cli._apply_cli_logging_options(["prog", "--log-level", "debug", "img.png", "--log-cats", "regions"])
    assert rest == ["prog", "img.png"]
    assert os.environ["IMAGE_DISPLAY_LOG_LEVEL"] == "debug"
    assert os.environ["IMAGE_DISPLAY_LOG_CATS"] == "regions"


@pytest.mark.parametrize("text", ["nanx5", "5xnan", "infx5", "5xinfinity"])
def test_parse_size_rejects_non_finite(text):
    with pytest.raises(ValueError):
        cli.parse_size(text)


def test_print_transform_rejects_nan_size(image_file, settings_file, capsys):
    rc = cli.run(["image-display", image_file, "--size", "nanx5", "--print-transform", "--settings", settings_file])
    assert rc == 2
    assert capsys.readouterr().out == ""
