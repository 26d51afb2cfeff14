"""
Builders for the discretized value sequences that populate parameter axes.
"""

from __future__ import annotations

from collections.abc import Sequence

import numpy as np

from hough.hough_types import AnyArray


def incremental(min_value: float, max_value: float, step: float) -> list[float]:
    """Values from `min_value` up to `max_value` in increments of `step`.

    The values are built by repeated floating-point addition, so the endpoint
    can be dropped through accumulated rounding error. For example
    `incremental(0, 1, 0.3)` gives four values and stops short of 1.0. Use
    `scaled_incremental` when the exact number of steps matters.
    """
    if step <= 0:
        raise ValueError(f"step must be positive, got {step}")
    values = []
    x = float(min_value)
    while x <= max_value:
        values.append(x)
        x += step
    return values


def steps(min_value: int, step: int, count: int) -> list[int]:
    return [min_value + step * i for i in range(count)]


def scaled(values: Sequence[int], scalar: float) -> list[float]:
    return [v * scalar for v in values]


def scaled_incremental(
    min_value: int, step: int, count: int, scalar: float
) -> list[float]:
    """Integer grid `steps(min_value, step, count)` mapped onto a real domain.

    Stepping in integers keeps exactly `count` values, e.g.
    `scaled_incremental(-5, 1, 11, 0.01)` covers [-0.05, 0.05] in 0.01 steps.
    """
    return scaled(steps(min_value, step, count), scalar)


def make_range_from_image(image: AnyArray) -> list[float]:
    """One t value per image column: 0, 1, ..., width - 1."""
    width = np.asarray(image).shape[1]
    return [float(x) for x in range(width)]
