"""
Core type definitions for the parabola Hough transform.

This module defines semantic type aliases used throughout the codebase
to provide clear interfaces and better type safety.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any, Union

import numpy as np
import numpy.typing as npt

# =============================================================================
# Array Types
# =============================================================================

FloatArray = npt.NDArray[np.floating[Any]]  # General floating-point arrays
IntArray = npt.NDArray[np.int_]  # General integer arrays
BoolArray = npt.NDArray[np.bool_]
UInt8Array = npt.NDArray[np.uint8]  # General uint8 arrays
AnyArray = npt.NDArray[Any]  # Generic arrays when dtype is mixed/unknown

GrayImage = npt.NDArray[np.float32]  # Shape: (H, W) - single channel image

# =============================================================================
# Parameter space
# =============================================================================

# One value per registered axis, in registration order.
ParamVector = tuple[float, ...]
ParamValues = Union[Sequence[float], FloatArray]

# An (x, y) point. Coordinates are arrays when a shape is evaluated over
# many t values at once.
Scalar = Union[float, np.floating[Any]]
Coordinate = Union[Scalar, FloatArray]
Point = tuple[Coordinate, Coordinate]
