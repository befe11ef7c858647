"""Configuration system for ecg-leadbox."""

from .loaders import ConfigLoader
from .models import ImageSettings, PreviewSettings, ServiceSettings, Settings

__all__ = [
    "ConfigLoader",
    "ImageSettings",
    "PreviewSettings",
    "ServiceSettings",
    "Settings",
]
