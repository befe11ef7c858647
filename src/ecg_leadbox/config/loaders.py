"""Settings loaders for JSON and TOML files."""

import json
import tomllib
from collections.abc import Callable
from pathlib import Path
from typing import Any

from .._logging import logger
from .models import Settings


def _read_json(path: Path) -> dict[str, Any]:
    with path.open("r", encoding="utf-8") as f:
        return json.load(f)


def _read_toml(path: Path) -> dict[str, Any]:
    with path.open("rb") as f:
        return tomllib.load(f)


_READERS: dict[str, Callable[[Path], dict[str, Any]]] = {
    ".json": _read_json,
    ".toml": _read_toml,
}


def _merge(base: dict[str, Any], overrides: dict[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in overrides.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


class ConfigLoader:
    """Load :class:`Settings` from configuration files.

    A TOML file for a remote deployment might look like::

        pixels_per_mv = 25

        [service]
        base_url = "https://ecg.example.org"
        timeout = 60

        [preview]
        max_points = 800

    Examples:
        settings = ConfigLoader.from_file("leadbox.toml")
        settings = ConfigLoader.from_file("leadbox.json", overrides={"service": {"timeout": 5}})
    """

    @staticmethod
    def from_json(path: str | Path) -> Settings:
        """Load settings from a JSON file.

        Raises:
            FileNotFoundError: If file does not exist
            json.JSONDecodeError: If file is not valid JSON
            pydantic.ValidationError: If the content doesn't match the Settings schema
        """
        return Settings(**_read_json(Path(path)))

    @staticmethod
    def from_toml(path: str | Path) -> Settings:
        """Load settings from a TOML file.

        Raises:
            FileNotFoundError: If file does not exist
            tomllib.TOMLDecodeError: If file is not valid TOML
            pydantic.ValidationError: If the content doesn't match the Settings schema
        """
        return Settings(**_read_toml(Path(path)))

    @staticmethod
    def from_file(path: str | Path, overrides: dict[str, Any] | None = None) -> Settings:
        """Load settings from a .json or .toml file.

        Args:
            path: Path to the configuration file
            overrides: Nested values applied on top of the file content

        Raises:
            ValueError: If the file extension is not .json or .toml
        """
        path = Path(path)
        reader = _READERS.get(path.suffix)
        if reader is None:
            raise ValueError(
                f"Unsupported config file format: {path.suffix}. "
                f"Supported formats: {sorted(_READERS)}."
            )

        data = reader(path)
        if overrides:
            data = _merge(data, overrides)
        logger.debug(f"Loaded settings from {path}")
        return Settings(**data)
