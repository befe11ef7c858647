"""Scaled waveform previews of digitized leads.

Point ``i`` of a preview is ``(i, baseline - samples[i] * scale_factor)``, so a
positive amplitude is drawn above the baseline in screen coordinates. Points
are computed on iteration and never cached. A preview made with other scale
or baseline values is a new preview.
"""

import math
from collections.abc import Iterator

import numpy as np

from .constants import DEFAULT_BASELINE, DEFAULT_PREVIEW_POINTS
from .models import DigitizedLead
from .types import Point, Samples


class PreviewPoints:
    """Lazy, finite, restartable sequence of preview points.

    Each iteration reads the samples again and yields at most ``max_points``
    points. The samples are never modified.
    """

    def __init__(self, samples: Samples, scale_factor: float, baseline: float, max_points: int):
        self._samples = samples
        self.scale_factor = scale_factor
        self.baseline = baseline
        self.max_points = max_points

    def __len__(self) -> int:
        return min(len(self._samples), self.max_points)

    def __iter__(self) -> Iterator[Point]:
        for i in range(len(self)):
            yield i, self.baseline - float(self._samples[i]) * self.scale_factor

    def __repr__(self) -> str:
        return (
            f"PreviewPoints(n={len(self)}, scale_factor={self.scale_factor}, "
            f"baseline={self.baseline})"
        )

    def to_array(self) -> np.ndarray:
        """Return the points as an array of shape (n_points, 2)."""
        n = len(self)
        values = np.asarray(self._samples[:n], dtype=float)
        return np.column_stack([np.arange(n, dtype=float), self.baseline - values * self.scale_factor])

    def polyline(self, precision: int = 2) -> str:
        """Format the points as an SVG polyline ``points`` attribute."""
        return " ".join(f"{x},{y:.{precision}f}" for x, y in self)


def render_preview(
    samples: Samples,
    scale_factor: float,
    baseline: float = DEFAULT_BASELINE,
    max_points: int = DEFAULT_PREVIEW_POINTS,
) -> PreviewPoints:
    """Create a preview of one lead's samples.

    Args:
        samples: Millivolt samples
        scale_factor: Pixels per millivolt, must be positive
        baseline: Vertical position of 0 mV
        max_points: Upper bound on the number of points, independent of the sample count

    Returns:
        PreviewPoints over the first ``min(len(samples), max_points)`` samples

    Raises:
        ValueError: If scale_factor is not positive or max_points is negative

    Examples:
        >>> list(render_preview([0.0, 0.5, -0.25], scale_factor=20, baseline=20))
        [(0, 20.0), (1, 10.0), (2, 25.0)]
    """
    if not (math.isfinite(scale_factor) and scale_factor > 0):
        raise ValueError(f"scale_factor must be positive, got {scale_factor}")
    if max_points < 0:
        raise ValueError(f"max_points must be non-negative, got {max_points}")
    return PreviewPoints(samples, float(scale_factor), float(baseline), int(max_points))


def summarize_lead(lead: DigitizedLead, n_first: int = 5) -> str:
    """One-line description of a digitized lead.

    Examples:
        >>> summarize_lead(DigitizedLead(name="II", samples=[0.1, 0.25]))
        '2 samples, first: 0.100, 0.250 mV'
    """
    if not lead.samples:
        return "no data"
    first = ", ".join(f"{v:.3f}" for v in lead.samples[:n_first])
    return f"{len(lead.samples)} samples, first: {first} mV"
