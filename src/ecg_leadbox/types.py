"""Type aliases shared across modules."""

from collections.abc import Sequence
from typing import Annotated, TypeAlias

import numpy as np
import numpy.typing as npt

# Millivolt samples of one lead, either a plain sequence or a 1-D array
Samples: TypeAlias = Sequence[float] | Annotated[npt.NDArray[np.floating], "Shape: (n_samples,)"]

# (x, y) in preview space
Point: TypeAlias = tuple[int, float]

# (width, height) in pixels
Size: TypeAlias = tuple[int, int]

# (r_x, r_y) = display size / original image size
Ratio: TypeAlias = tuple[float, float]
