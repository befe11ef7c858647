"""Source image intake.

Only the image header is read, to learn the intrinsic size and format. The
encoded bytes are forwarded to the conversion service untouched.
"""

import base64
import hashlib
from io import BytesIO
from pathlib import Path

from PIL import Image, UnidentifiedImageError
from pydantic import BaseModel, ConfigDict, Field

from ._logging import logger
from .constants import MAX_IMAGE_BYTES
from .exceptions import ValidationError
from .types import Size

NOT_AN_IMAGE = "Please upload an image file (png, jpg, jpeg)"


class SourceImage(BaseModel):
    """An encoded ECG image with its intrinsic pixel size.

    Attributes:
        data: Encoded image bytes as uploaded
        filename: Original file name, reported as ``source_file``
        format: Pillow format name, e.g. ``PNG`` or ``JPEG``
        width: Intrinsic width in pixels
        height: Intrinsic height in pixels
    """

    model_config = ConfigDict(frozen=True)

    data: bytes = Field(repr=False)
    filename: str = ""
    format: str
    width: int = Field(gt=0)
    height: int = Field(gt=0)

    @classmethod
    def from_bytes(cls, data: bytes, filename: str = "", max_bytes: int = MAX_IMAGE_BYTES) -> "SourceImage":
        """Create a SourceImage from encoded bytes.

        Args:
            data: Encoded image file content
            filename: Name reported to the conversion service
            max_bytes: Upper limit on the encoded size

        Raises:
            ValidationError: If the data is too large or not a readable image
        """
        if len(data) > max_bytes:
            raise ValidationError(f"File too large. Max {max_bytes // (1024 * 1024)}MB.")

        try:
            with Image.open(BytesIO(data)) as img:
                width, height = img.size
                fmt = img.format
        except (UnidentifiedImageError, Image.DecompressionBombError, OSError) as e:
            raise ValidationError(NOT_AN_IMAGE) from e

        if not fmt:
            raise ValidationError(NOT_AN_IMAGE)

        logger.info(f"Loaded {fmt} image '{filename}' ({width}x{height} px, {len(data)} bytes)")
        return cls(data=data, filename=filename, format=fmt, width=width, height=height)

    @classmethod
    def from_path(cls, path: str | Path, max_bytes: int = MAX_IMAGE_BYTES) -> "SourceImage":
        """Read an image file from disk.

        Raises:
            FileNotFoundError: If the file does not exist
            ValidationError: If the file is too large or not a readable image
        """
        path = Path(path)
        if path.stat().st_size > max_bytes:
            raise ValidationError(f"File too large. Max {max_bytes // (1024 * 1024)}MB.")
        return cls.from_bytes(path.read_bytes(), filename=path.name, max_bytes=max_bytes)

    @property
    def size(self) -> Size:
        return (self.width, self.height)

    @property
    def mime_type(self) -> str:
        return Image.MIME.get(self.format, f"image/{self.format.lower()}")

    @property
    def digest(self) -> str:
        """SHA-256 of the encoded bytes."""
        return hashlib.sha256(self.data).hexdigest()

    def data_url(self) -> str:
        """Return the image as a ``data:`` URL with base64 content."""
        encoded = base64.b64encode(self.data).decode("ascii")
        return f"data:{self.mime_type};base64,{encoded}"
