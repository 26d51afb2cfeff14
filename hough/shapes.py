"""
Parametric curve families that can be searched by the Hough transform.

A shape maps a curve coordinate `t` and a positional parameter vector to a 2-D
point. Parameter positions are shared with the axis registration order of the
engine, so each shape declares its ordering in `param_names`.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

import numpy as np

from hough.errors import ParameterMismatchError
from hough.hough_types import BoolArray, Coordinate, ParamValues, Point


class Shape(ABC):
    """Base class for parametric curves."""

    @property
    @abstractmethod
    def param_names(self) -> tuple[str, ...]:
        """Names of the expected parameters, in positional order."""
        pass

    @abstractmethod
    def calculate(
        self, t: Coordinate, params: ParamValues
    ) -> tuple[Point, bool | BoolArray]:
        """
        Evaluate the curve at `t`.

        Args:
            t: Curve coordinate, either a scalar or a 1-D array of samples.
            params: Parameter vector ordered as in `param_names`.

        Returns:
            Tuple of ((x, y), in_range). When `t` is an array, x, y and
            in_range may be arrays of the same length.
        """
        pass

    @abstractmethod
    def compute_fixed_point(self, params: ParamValues) -> Point:
        """Reference point of the curve that does not depend on `t`."""
        pass

    @property
    def num_params(self) -> int:
        return len(self.param_names)

    def check_params(self, num_params: int) -> None:
        if num_params != self.num_params:
            raise ParameterMismatchError(
                f"{type(self).__name__} expects {self.num_params} parameters "
                f"{self.param_names}, but {num_params} axes are registered",
                title="Parameter mismatch",
            )


class StandardFormParabola(Shape):
    """y = a * t^2 + b * t + c, with x = t."""

    INDEX_A = 0
    INDEX_B = 1
    INDEX_C = 2

    @property
    def param_names(self) -> tuple[str, ...]:
        return ("a", "b", "c")

    def calculate(self, t, params):
        a, b, c = params[self.INDEX_A], params[self.INDEX_B], params[self.INDEX_C]
        return (t, a * t * t + b * t + c), True

    def compute_fixed_point(self, params):
        # Vertex; a == 0 gives a non-finite point.
        a, b = params[self.INDEX_A], params[self.INDEX_B]
        x = np.divide(-b, 2.0 * a)
        (_, y), _ = self.calculate(x, params)
        return x, y


class VertexFormParabola(Shape):
    """y = a * (t - h)^2 + k, with x = t."""

    INDEX_A = 0
    INDEX_H = 1
    INDEX_K = 2

    @property
    def param_names(self) -> tuple[str, ...]:
        return ("a", "h", "k")

    def calculate(self, t, params):
        a, h, k = params[self.INDEX_A], params[self.INDEX_H], params[self.INDEX_K]
        return (t, a * (t - h) * (t - h) + k), True

    def compute_fixed_point(self, params):
        return params[self.INDEX_H], params[self.INDEX_K]


class RotatedShape(Shape):
    """Adds a rotation parameter to another shape.

    Points of the wrapped shape are rotated by `params[theta_index]` radians
    around the wrapped shape's fixed point. The wrapped shape is held by
    reference and shared with the caller.
    """

    def __init__(self, shape: Shape, theta_index: int) -> None:
        if theta_index < shape.num_params:
            raise ValueError(
                f"theta_index {theta_index} collides with parameters "
                f"{shape.param_names}"
            )
        self.unrotated = shape
        self.theta_index = theta_index

    @property
    def param_names(self) -> tuple[str, ...]:
        names = list(self.unrotated.param_names)
        names.extend(f"unused_{i}" for i in range(len(names), self.theta_index))
        names.append("theta")
        return tuple(names)

    def calculate(self, t, params):
        (x, y), in_range = self.unrotated.calculate(t, params)
        cx, cy = self.unrotated.compute_fixed_point(params)
        theta = params[self.theta_index]
        sin_theta, cos_theta = np.sin(theta), np.cos(theta)
        dx = x - cx
        dy = y - cy
        # Offsets from the unrotated point, so theta == 0 leaves it untouched.
        rx = x + dx * (cos_theta - 1.0) - dy * sin_theta
        ry = y + dx * sin_theta + dy * (cos_theta - 1.0)
        return (rx, ry), in_range

    def compute_fixed_point(self, params):
        return self.unrotated.compute_fixed_point(params)
