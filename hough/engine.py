"""
Generalized Hough transform over a discretized parameter space.

Every combination of registered parameter values is scored by sampling the
image along the curve it describes. The accumulator holds one score per
combination; candidates are the highest scoring cells.
"""

from __future__ import annotations

import logging
import math
import os
import time
from collections.abc import Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING

import numpy as np

from hough import debug_plots, images
from hough.errors import PreconditionError
from hough.hough_types import (
    AnyArray,
    BoolArray,
    FloatArray,
    GrayImage,
    IntArray,
    ParamValues,
    ParamVector,
)
from hough.masks import DefaultMask, Mask
from hough.param_range import make_range_from_image
from hough.shapes import Shape

if TYPE_CHECKING:
    from hough.settings import HoughSettings

LOGGER = logging.getLogger(__name__)

# Points outside the range of a signed 32-bit int come from degenerate
# parameter combinations and never vote.
MIN_INT = -(2**31)
MAX_INT = 2**31 - 1


@dataclass(frozen=True)
class Candidate:
    """A detected curve: one parameter value per axis, and its score."""

    params: ParamVector
    indices: tuple[int, ...]
    score: float


def advance_indices(
    axis_lengths: Sequence[int], indices: Sequence[int]
) -> tuple[int, ...] | None:
    """Step a mixed-radix counter over the parameter space.

    The last axis changes fastest; overflow carries into the previous axis.
    Returns the next index vector, or None on the step that would overflow the
    first axis. Starting from all zeros, this visits each combination exactly
    once, in the same order as `itertools.product` over the axes.
    """
    next_indices = list(indices)
    for i in range(len(axis_lengths) - 1, -1, -1):
        next_indices[i] += 1
        if next_indices[i] < axis_lengths[i]:
            return tuple(next_indices)
        next_indices[i] = 0
    return None


def inside_int_limits(values: FloatArray) -> BoolArray:
    # NaN fails both comparisons.
    return (values >= MIN_INT) & (values <= MAX_INT)


def round_half_away_from_zero(values: FloatArray) -> IntArray:
    return (np.sign(values) * np.floor(np.abs(values) + 0.5)).astype(np.int64)


class HoughTransform:
    """Brute-force voting search for parametric curves.

    Register one axis per shape parameter with `add_param_range`, in the order
    given by the shape's `param_names`, then call `compute` (or `accumulate`
    followed by `gather_candidates`).

    An instance can be reused for successive images, but not from several
    threads at once.
    """

    def __init__(
        self,
        max_candidates: int = 1,
        normalized: bool = False,
        debug: bool = False,
        debug_dir: str | None = None,
        mask: Mask | None = None,
    ) -> None:
        self._param_ranges: list[FloatArray] = []
        self._mask = mask
        self.max_candidates = max_candidates
        self.normalized = normalized
        self.debug = debug
        self.debug_dir = debug_dir

        # Results of the most recent accumulation pass.
        self.accumulator: FloatArray | None = None
        self.vote_counts: IntArray | None = None
        self.normalized_accumulator: FloatArray | None = None

    @classmethod
    def from_settings(cls, settings: HoughSettings) -> HoughTransform:
        return cls(
            max_candidates=settings.max_candidates,
            normalized=settings.normalized,
            debug=settings.debug,
            debug_dir=settings.debug_dir or None,
        )

    @property
    def max_candidates(self) -> int:
        return self._max_candidates

    @max_candidates.setter
    def max_candidates(self, value: int) -> None:
        if value < 1:
            raise PreconditionError(f"max_candidates must be at least 1, got {value}")
        self._max_candidates = int(value)

    # Parameter space

    def add_param_range(self, values: ParamValues) -> None:
        """Register the next parameter axis."""
        axis = np.array(values, dtype=np.float64)
        if axis.ndim != 1:
            raise ValueError(f"parameter range must be 1-D, got shape {axis.shape}")
        self._param_ranges.append(axis)

    def clear_param_ranges(self) -> None:
        self._param_ranges = []

    @property
    def param_ranges(self) -> list[FloatArray]:
        return list(self._param_ranges)

    @property
    def num_params(self) -> int:
        return len(self._param_ranges)

    @property
    def axis_lengths(self) -> tuple[int, ...]:
        return tuple(len(axis) for axis in self._param_ranges)

    @property
    def cardinality(self) -> int:
        return math.prod(self.axis_lengths) if self._param_ranges else 0

    def param_values(self, indices: Sequence[int]) -> ParamVector:
        return tuple(
            float(axis[i]) for axis, i in zip(self._param_ranges, indices)
        )

    def _check_param_space(self) -> None:
        if not self._param_ranges:
            raise PreconditionError(
                "No parameter ranges registered", title="Empty parameter space"
            )
        for i, length in enumerate(self.axis_lengths):
            if length == 0:
                raise PreconditionError(
                    f"Parameter range {i} is empty", title="Empty parameter space"
                )

    # Mask

    @property
    def mask(self) -> Mask | None:
        return self._mask

    def set_mask(self, mask: Mask) -> None:
        self._mask = mask

    def clear_mask(self) -> None:
        self._mask = None

    # Voting

    def _voting_points(
        self, shape: Shape, params: ParamVector, ts: FloatArray, mask: Mask
    ) -> tuple[FloatArray, FloatArray]:
        """Fractional coordinates of the curve points allowed to vote."""
        (xs, ys), in_range = shape.calculate(ts, params)
        xs = np.broadcast_to(np.asarray(xs, dtype=np.float64), ts.shape)
        ys = np.broadcast_to(np.asarray(ys, dtype=np.float64), ts.shape)
        keep = (
            np.broadcast_to(np.asarray(in_range, dtype=bool), ts.shape)
            & inside_int_limits(xs)
            & inside_int_limits(ys)
        )
        xs, ys = xs[keep], ys[keep]
        if len(xs) == 0:
            return xs, ys
        allowed = mask.can_vote_many(
            round_half_away_from_zero(xs), round_half_away_from_zero(ys)
        )
        return xs[allowed], ys[allowed]

    def accumulate(
        self,
        image: images.PILImage | AnyArray,
        shape: Shape,
        t_range: Sequence[float] | FloatArray,
    ) -> FloatArray:
        """Score every parameter combination against `image`.

        Each point of the curve, for each t in `t_range`, adds the bilinearly
        interpolated pixel value under it to the combination's cell. Points
        that are out of range, non-finite, or rejected by the mask are
        skipped. Without a mask, votes are limited to the image bounds.

        Returns:
            The accumulator, of shape `axis_lengths`.
        """
        self._check_param_space()
        shape.check_params(self.num_params)

        pixels: GrayImage = images.as_gray_array(image)
        ts = np.asarray(t_range, dtype=np.float64).ravel()
        mask = self._mask if self._mask is not None else DefaultMask.for_image(pixels)

        sizes = self.axis_lengths
        accumulator = np.zeros(sizes, dtype=np.float64)
        vote_counts = np.zeros(sizes, dtype=np.int64) if self.normalized else None
        normalized_accumulator = (
            np.zeros(sizes, dtype=np.float64) if self.normalized else None
        )

        if self.debug:
            LOGGER.debug(
                f"transforming in space of cardinality {self.cardinality} "
                f"with {len(ts)} samples per curve"
            )
        start = time.perf_counter()

        indices: tuple[int, ...] | None = (0,) * len(sizes)
        # Degenerate parameters (e.g. a zero curvature vertex) produce
        # non-finite points, which are skipped.
        with np.errstate(all="ignore"):
            while indices is not None:
                params = self.param_values(indices)
                xs, ys = self._voting_points(shape, params, ts, mask)
                if len(xs) > 0:
                    values = images.sample_bilinear(pixels, xs, ys)
                    accumulator[indices] += float(np.sum(values))
                    if vote_counts is not None and normalized_accumulator is not None:
                        vote_counts[indices] += len(values)
                        normalized_accumulator[indices] = (
                            accumulator[indices] / vote_counts[indices]
                        )
                indices = advance_indices(sizes, indices)

        if self.debug:
            LOGGER.debug(
                f"{time.perf_counter() - start:.3f} seconds to compute transform"
            )

        self.accumulator = accumulator
        self.vote_counts = vote_counts
        self.normalized_accumulator = normalized_accumulator
        return accumulator

    # Candidate extraction

    def gather_scored_candidates(self) -> list[Candidate]:
        """Highest scoring cells of the last accumulation, best first.

        Takes the maximum cell `max_candidates` times, zeroing that cell only
        (not its neighbors) after each pick. Ties go to the cell visited first
        in enumeration order. Once no remaining cell scores above zero, the
        picks fall on the first zero cell in enumeration order, which may
        repeat an earlier candidate. Exactly `max_candidates` vectors are
        returned.

        In normalized mode cells are ranked by their mean vote instead of the
        sum.
        """
        if self.accumulator is None:
            raise PreconditionError("No accumulation to gather candidates from")
        if self.normalized and self.normalized_accumulator is not None:
            scores = self.normalized_accumulator.copy()
        else:
            scores = self.accumulator.copy()

        candidates: list[Candidate] = []
        for _ in range(self.max_candidates):
            # argmax returns the first maximum in C order, which is also the
            # enumeration order of advance_indices.
            flat_index = int(np.argmax(scores))
            index = tuple(
                int(i) for i in np.unravel_index(flat_index, scores.shape)
            )
            score = float(scores[index])
            candidates.append(
                Candidate(params=self.param_values(index), indices=index, score=score)
            )
            if self.debug:
                LOGGER.debug(f"max accumulation at index {index} = {score}")
            scores[index] = 0.0

        if self.debug_dir:
            self._save_debug_images(self.debug_dir, self.accumulator, candidates)
        return candidates

    def gather_candidates(self) -> list[ParamVector]:
        return [candidate.params for candidate in self.gather_scored_candidates()]

    def _save_debug_images(
        self, debug_dir: str, accumulator: FloatArray, candidates: list[Candidate]
    ) -> None:
        LOGGER.info(f"logging to debug dir {debug_dir}")
        projection = debug_plots.accumulator_projection(accumulator)
        debug_plots.save_image(
            os.path.join(debug_dir, "accumulator.png"),
            debug_plots.to_uint8(projection),
        )
        debug_plots.save_scores(
            os.path.join(debug_dir, "candidates.json"), candidates
        )

    # Convenience

    def compute(
        self,
        image: images.PILImage | AnyArray,
        shape: Shape,
        t_range: Sequence[float] | FloatArray | None = None,
    ) -> list[ParamVector]:
        """Accumulate and return up to `max_candidates` parameter vectors.

        Without `t_range`, the curve is sampled once per image column.
        """
        pixels = images.as_gray_array(image)
        if t_range is None:
            t_range = make_range_from_image(pixels)
        self.accumulate(pixels, shape, t_range)
        return self.gather_candidates()

    def compute_best(
        self,
        image: images.PILImage | AnyArray,
        shape: Shape,
        t_range: Sequence[float] | FloatArray | None = None,
    ) -> ParamVector:
        return self.compute(image, shape, t_range)[0]
