"""Tests for crop profiles and their JSON persistence."""
import json
import logging
import os

import pytest

import scancrop
from scancrop.config import DEFAULT_SETTINGS_PATH, CropSettings, load_crop_settings, save_crop_settings
from scancrop.logging_config import setup_logging


def test_defaults_match_shipped_profile():
    assert os.path.exists(DEFAULT_SETTINGS_PATH)
    package_dir = os.path.dirname(os.path.abspath(scancrop.__file__))
    assert os.path.commonpath([package_dir, DEFAULT_SETTINGS_PATH]) == package_dir
    assert load_crop_settings() == CropSettings()


def test_round_trip_through_json(tmp_path):
    settings = CropSettings(inner_scale=0.1, azimuth_gates_deg=[(350.0, 10.0)], default_axis=(0.0, 1.0, 0.0))
    path = tmp_path / "profile.json"

    save_crop_settings(settings, str(path))

    assert json.loads(path.read_text(encoding="utf-8"))["azimuth_gates_deg"] == [[350.0, 10.0]]
    assert load_crop_settings(str(path)) == settings


def test_missing_keys_keep_defaults(tmp_path):
    path = tmp_path / "partial.json"
    path.write_text(json.dumps({"cone_degrees": 25}), encoding="utf-8")

    settings = load_crop_settings(str(path))

    assert settings.cone_degrees == 25
    assert settings.outer_scale == CropSettings().outer_scale


@pytest.mark.parametrize(
    "data, message",
    [
        ({"inner_radius": 0.2}, "Unknown crop settings"),
        ({"azimuth_gates_deg": [[1.0, 2.0, 3.0]]}, "pair"),
        ({"default_axis": [0.0, 1.0]}, "three components"),
    ],
)
def test_invalid_profiles_are_rejected(data, message):
    with pytest.raises(ValueError, match=message):
        CropSettings.from_dict(data)


def test_profile_file_must_hold_an_object(tmp_path):
    path = tmp_path / "list.json"
    path.write_text("[1, 2, 3]", encoding="utf-8")
    with pytest.raises(ValueError):
        load_crop_settings(str(path))


def test_setup_logging_replaces_handlers(tmp_path):
    log_file = tmp_path / "crop.log"
    setup_logging(level=logging.DEBUG, log_file=str(log_file))
    setup_logging(level=logging.DEBUG, log_file=str(log_file))

    logger = logging.getLogger("scancrop")
    try:
        assert len(logger.handlers) == 2
        assert logger.level == logging.DEBUG
        logging.getLogger("scancrop.test").debug("hello")
        for handler in logger.handlers:
            handler.flush()
        assert "hello" in log_file.read_text(encoding="utf-8")
    finally:
        for handler in list(logger.handlers):
            handler.close()
            logger.removeHandler(handler)
        logger.setLevel(logging.NOTSET)
