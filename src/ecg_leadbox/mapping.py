"""Conversion between display coordinates and original image pixel coordinates.

The operator draws on a rendered copy of the image whose size may differ from
the intrinsic size. A ratio ``r = display_size / image_size`` per axis relates
the two spaces::

    x1 = round(x / r_x)          y1 = round(y / r_y)
    x2 = round((x + w) / r_x)    y2 = round((y + h) / r_y)

Rounding is half-up. Results are clamped to the image, and a box collapsed by
rounding or clamping is grown by one pixel at its far edge.
"""

import math

from .constants import INITIAL_BOX_ORIGIN, MIN_BOX_SIZE, NEXT_BOX_OFFSET
from .exceptions import ValidationError
from .models import DisplayRect, LeadBoundary
from .types import Ratio, Size


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def _clamp(value: int, upper: int) -> int:
    return min(max(value, 0), upper)


def normalize_ratio(ratio: Ratio | float) -> Ratio:
    """Return ``(r_x, r_y)`` for a uniform or per-axis ratio.

    Raises:
        ValidationError: If any component is not a positive finite number
    """
    if isinstance(ratio, (int, float)):
        r_x = r_y = float(ratio)
    else:
        r_x, r_y = (float(r) for r in ratio)
    if not (math.isfinite(r_x) and math.isfinite(r_y)) or r_x <= 0 or r_y <= 0:
        raise ValidationError(f"Display ratio must be positive, got ({r_x}, {r_y})")
    return r_x, r_y


def display_ratio(display_size: Size, image_size: Size) -> Ratio:
    """Ratio between the rendered size and the intrinsic size of an image.

    Args:
        display_size: (width, height) of the rendered image
        image_size: (width, height) of the original image

    Returns:
        (r_x, r_y) with ``r = display / original`` per axis
    """
    (dw, dh), (w, h) = display_size, image_size
    if w <= 0 or h <= 0:
        raise ValidationError(f"Image size must be positive, got {image_size}")
    return normalize_ratio((dw / w, dh / h))


def _map_axis(start: float, extent: float, r: float, limit: int, axis: str) -> tuple[int, int]:
    lo, hi = start / r, (start + extent) / r
    if hi <= 0 or lo >= limit:
        raise ValidationError(f"Selection lies outside the image along {axis} (image {axis}-extent is {limit} px)")

    v1 = _clamp(_round_half_up(lo), limit)
    v2 = _clamp(_round_half_up(hi), limit)
    if v2 <= v1:
        v2 = v1 + 1
        if v2 > limit:
            raise ValidationError(f"Selection collapses to zero {axis}-extent at the image edge")
    return v1, v2


def map_to_image(rect: DisplayRect, ratio: Ratio | float, image_size: Size, lead_name: str) -> LeadBoundary:
    """Map a display-space selection to a lead boundary in image pixel space.

    Args:
        rect: Selection in display coordinates
        ratio: Display-to-image ratio, uniform or ``(r_x, r_y)``
        image_size: (width, height) of the original image
        lead_name: Canonical lead name to label the boundary with

    Returns:
        LeadBoundary with ``0 <= x1 < x2 <= W`` and ``0 <= y1 < y2 <= H``

    Raises:
        ValidationError: If the selection is empty or not finite, lies outside the image,
            or cannot be kept at least one pixel wide and high

    Examples:
        >>> map_to_image(DisplayRect(x=10, y=10, w=40, h=40), 1.0, (800, 600), "I")
        LeadBoundary(lead_name='I', x1=10, y1=10, x2=50, y2=50)
    """
    if not all(math.isfinite(v) for v in (rect.x, rect.y, rect.w, rect.h)):
        raise ValidationError(f"Selection coordinates must be finite, got ({rect.x}, {rect.y}, {rect.w}, {rect.h})")
    if rect.w <= 0 or rect.h <= 0:
        raise ValidationError("Selection is empty. Drag to size the box before setting the lead.")

    r_x, r_y = normalize_ratio(ratio)
    width, height = image_size
    x1, x2 = _map_axis(rect.x, rect.w, r_x, width, "x")
    y1, y2 = _map_axis(rect.y, rect.h, r_y, height, "y")
    return LeadBoundary(lead_name=lead_name, x1=x1, y1=y1, x2=x2, y2=y2)


def map_to_display(boundary: LeadBoundary, ratio: Ratio | float) -> DisplayRect:
    """Scale an image-space boundary back into display coordinates."""
    r_x, r_y = normalize_ratio(ratio)
    return DisplayRect(
        x=boundary.x1 * r_x,
        y=boundary.y1 * r_y,
        w=boundary.width * r_x,
        h=boundary.height * r_y,
    )


def default_selection(display_size: Size, min_size: int = MIN_BOX_SIZE) -> DisplayRect:
    """Initial selection box for a freshly rendered image.

    The box is a quarter of the width and a third of the height (one cell of a
    4x3 lead grid), but never smaller than ``min_size``.

    Examples:
        >>> default_selection((800, 600))
        DisplayRect(x=10.0, y=10.0, w=200.0, h=200.0)
    """
    width, height = display_size
    x, y = INITIAL_BOX_ORIGIN
    return DisplayRect(x=x, y=y, w=max(min_size, width // 4), h=max(min_size, height // 3))


def next_selection(rect: DisplayRect, offset: tuple[float, float] = NEXT_BOX_OFFSET) -> DisplayRect:
    """Suggested selection after a capture: the previous box, shifted."""
    dx, dy = offset
    return rect.model_copy(update={"x": rect.x + dx, "y": rect.y + dy})
