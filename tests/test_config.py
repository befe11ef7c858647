"""Unit tests for settings and config loaders."""

import json
from pathlib import Path

import pydantic
import pytest

from ecg_leadbox import ConfigLoader, Settings


def test_defaults():
    settings = Settings()
    assert settings.service.url(settings.service.convert_path) == "http://127.0.0.1:5000/api/convert"
    assert settings.service.url(settings.service.analyze_path) == "http://127.0.0.1:5000/api/analyze"
    assert settings.service.timeout == 30.0
    assert settings.pixels_per_mv == 20
    assert settings.preview.max_points == 400
    assert settings.preview.baseline == 20.0
    assert settings.image.max_bytes == 10 * 1024 * 1024
    assert settings.image.min_box_size == 40


def test_base_url_is_normalized():
    settings = Settings(service={"base_url": "https://ecg.example.org/"})
    assert settings.service.url("/api/convert") == "https://ecg.example.org/api/convert"


def test_invalid_values():
    with pytest.raises(pydantic.ValidationError, match="at least 5"):
        Settings(pixels_per_mv=4)
    with pytest.raises(pydantic.ValidationError):
        Settings(service={"base_url": "127.0.0.1:5000"})
    with pytest.raises(pydantic.ValidationError):
        Settings(service={"timeout": 0})
    with pytest.raises(pydantic.ValidationError):
        Settings(preview={"max_points": 0})


def test_from_json(tmp_path: Path):
    path = tmp_path / "leadbox.json"
    path.write_text(json.dumps({"pixels_per_mv": 25, "preview": {"max_points": 800}}))

    settings = ConfigLoader.from_json(path)
    assert settings.pixels_per_mv == 25
    assert settings.preview.max_points == 800
    assert settings.preview.baseline == 20.0


def test_from_toml(tmp_path: Path):
    path = tmp_path / "leadbox.toml"
    path.write_text('pixels_per_mv = 10\n\n[service]\nbase_url = "https://ecg.example.org"\ntimeout = 60\n')

    settings = ConfigLoader.from_toml(path)
    assert settings.pixels_per_mv == 10
    assert settings.service.base_url == "https://ecg.example.org"
    assert settings.service.timeout == 60


def test_from_file_with_overrides(tmp_path: Path):
    path = tmp_path / "leadbox.toml"
    path.write_text('[service]\nbase_url = "https://ecg.example.org"\ntimeout = 60\n')

    settings = ConfigLoader.from_file(path, overrides={"service": {"timeout": 5}})
    assert settings.service.base_url == "https://ecg.example.org"
    assert settings.service.timeout == 5


def test_from_file_unsupported(tmp_path: Path):
    path = tmp_path / "leadbox.yaml"
    path.write_text("pixels_per_mv: 20\n")
    with pytest.raises(ValueError, match="Unsupported config file format"):
        ConfigLoader.from_file(path)


def test_from_file_invalid_content(tmp_path: Path):
    path = tmp_path / "leadbox.json"
    path.write_text(json.dumps({"pixels_per_mv": 2}))
    with pytest.raises(pydantic.ValidationError):
        ConfigLoader.from_file(path)


if __name__ == "__main__":
    pytest.main([__file__])
