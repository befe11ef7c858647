"""Pydantic models for configuration."""

import pydantic
from pydantic import BaseModel, Field

from ..constants import (
    DEFAULT_BASELINE,
    DEFAULT_NOTE,
    DEFAULT_PREVIEW_POINTS,
    DEFAULT_SCALE_FACTOR,
    MAX_IMAGE_BYTES,
    MIN_BOX_SIZE,
    MIN_SCALE_FACTOR,
    NEXT_BOX_OFFSET,
)


class ServiceSettings(BaseModel):
    """Location of the conversion and analysis services.

    Attributes:
        base_url: Scheme, host and port shared by both services
        convert_path: Path of the conversion endpoint
        analyze_path: Path of the analysis endpoint
        timeout: Request timeout in seconds
    """

    base_url: str = "http://127.0.0.1:5000"
    convert_path: str = "/api/convert"
    analyze_path: str = "/api/analyze"
    timeout: float = Field(default=30.0, gt=0)

    @pydantic.field_validator("base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        if not v.startswith(("http://", "https://")):
            raise ValueError(f"base_url must start with http:// or https://, got '{v}'")
        return v.rstrip("/")

    def url(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"


class PreviewSettings(BaseModel):
    """Waveform preview layout.

    Attributes:
        max_points: Number of samples drawn per lead
        baseline: Vertical position of 0 mV in preview pixels
    """

    max_points: int = Field(default=DEFAULT_PREVIEW_POINTS, ge=1)
    baseline: float = DEFAULT_BASELINE


class ImageSettings(BaseModel):
    """Source image limits and selection box defaults.

    Attributes:
        max_bytes: Largest accepted encoded image
        min_box_size: Lower bound for the initial selection box sides
        next_box_offset: Shift of the suggested box after each capture
    """

    max_bytes: int = Field(default=MAX_IMAGE_BYTES, gt=0)
    min_box_size: int = Field(default=MIN_BOX_SIZE, ge=1)
    next_box_offset: tuple[float, float] = NEXT_BOX_OFFSET


class Settings(BaseModel):
    """Complete settings for a digitization workflow.

    Args:
        service: Conversion and analysis service endpoints
        preview: Waveform preview layout
        image: Image intake and selection defaults
        pixels_per_mv: Default scale factor, at least 5
        note: Free-text note attached to every conversion request

    Examples:
        # Default settings (local services, 20 px/mV)
        settings = Settings()

        # Remote services
        settings = Settings(service={"base_url": "https://ecg.example.org"})
    """

    service: ServiceSettings = Field(default_factory=ServiceSettings)
    preview: PreviewSettings = Field(default_factory=PreviewSettings)
    image: ImageSettings = Field(default_factory=ImageSettings)
    pixels_per_mv: float = DEFAULT_SCALE_FACTOR
    note: str = DEFAULT_NOTE

    @pydantic.field_validator("pixels_per_mv")
    @classmethod
    def validate_pixels_per_mv(cls, v: float) -> float:
        if v < MIN_SCALE_FACTOR:
            raise ValueError(f"pixels_per_mv must be at least {MIN_SCALE_FACTOR}, got {v}")
        return v
