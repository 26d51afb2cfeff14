"""
Predicates restricting which pixel coordinates may vote in the accumulator.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

import numpy as np

from hough.hough_types import AnyArray, BoolArray, IntArray


class Mask(ABC):
    """Base class for vote masks."""

    @abstractmethod
    def can_vote(self, x: int, y: int) -> bool:
        """Whether the pixel at column `x`, row `y` may contribute a vote."""
        pass

    def can_vote_many(self, xs: IntArray, ys: IntArray) -> BoolArray:
        return np.array(
            [self.can_vote(int(x), int(y)) for x, y in zip(xs, ys)], dtype=bool
        )


class RegionMask(Mask):
    """Half-open rectangle [left, right) x [top, bottom) of pixel coordinates."""

    def __init__(self, left: int, top: int, right: int, bottom: int) -> None:
        self.left = left
        self.top = top
        self.right = right
        self.bottom = bottom

    def can_vote(self, x: int, y: int) -> bool:
        return self.left <= x < self.right and self.top <= y < self.bottom

    def can_vote_many(self, xs, ys):
        xs, ys = np.asarray(xs), np.asarray(ys)
        return (
            (xs >= self.left) & (xs < self.right) & (ys >= self.top) & (ys < self.bottom)
        )

    def intersect(self, other: RegionMask) -> RegionMask:
        return RegionMask(
            left=max(self.left, other.left),
            top=max(self.top, other.top),
            right=min(self.right, other.right),
            bottom=min(self.bottom, other.bottom),
        )


class DefaultMask(RegionMask):
    """Accepts every pixel of a `num_rows` x `num_cols` image."""

    def __init__(self, num_rows: int, num_cols: int) -> None:
        super().__init__(left=0, top=0, right=num_cols, bottom=num_rows)
        self.num_rows = num_rows
        self.num_cols = num_cols

    @classmethod
    def for_image(cls, image: AnyArray) -> DefaultMask:
        num_rows, num_cols = np.asarray(image).shape[:2]
        return cls(num_rows, num_cols)


class ArrayMask(Mask):
    """Pixels where a 2-D array is nonzero may vote."""

    def __init__(self, mask: AnyArray) -> None:
        self.mask = np.asarray(mask) != 0
        if self.mask.ndim != 2:
            raise ValueError(f"mask must be 2-D, got shape {self.mask.shape}")

    def can_vote(self, x: int, y: int) -> bool:
        num_rows, num_cols = self.mask.shape
        if not (0 <= x < num_cols and 0 <= y < num_rows):
            return False
        return bool(self.mask[y, x])

    def can_vote_many(self, xs, ys):
        xs, ys = np.asarray(xs, dtype=np.int64), np.asarray(ys, dtype=np.int64)
        num_rows, num_cols = self.mask.shape
        inside = (xs >= 0) & (xs < num_cols) & (ys >= 0) & (ys < num_rows)
        result = np.zeros(xs.shape, dtype=bool)
        result[inside] = self.mask[ys[inside], xs[inside]]
        return result
