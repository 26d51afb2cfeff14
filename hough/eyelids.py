"""
Eyelid boundary detection with two rotated vertex-form parabolas.

The upper eyelid is searched in the rows above the iris center and the lower
eyelid in the rows below it. Both use the edge weights of the image, so the
strongest response lies along the boundary between eye and skin.
"""

from __future__ import annotations

import logging
import math
import os
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any, ClassVar

import numpy as np

from hough import debug_plots, images
from hough.engine import HoughTransform
from hough.hough_types import AnyArray, FloatArray, ParamVector
from hough.masks import DefaultMask, RegionMask
from hough.settings import HoughSettings
from hough.shapes import RotatedShape, Shape, VertexFormParabola

LOGGER = logging.getLogger(__name__)

# Parameter order of an eyelid: [a, h, k, theta].
INDEX_A = VertexFormParabola.INDEX_A
INDEX_H = VertexFormParabola.INDEX_H
INDEX_K = VertexFormParabola.INDEX_K
INDEX_THETA = 3

# Direction from the iris center towards each eyelid, in image rows.
UPPER = -1
LOWER = 1


def eyelid_shape() -> Shape:
    return RotatedShape(VertexFormParabola(), INDEX_THETA)


@dataclass
class DualParabolaEyelidsLocation:
    """Upper and lower eyelid parabolas, each as [a, h, k, theta]."""

    TYPE: ClassVar[str] = "dual_parabola"

    upper: ParamVector
    lower: ParamVector

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.TYPE,
            "upper_eyelid": [float(v) for v in self.upper],
            "lower_eyelid": [float(v) for v in self.lower],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> DualParabolaEyelidsLocation:
        if data.get("type") != cls.TYPE:
            raise ValueError(f"Not a {cls.TYPE} eyelids location: {data.get('type')}")
        upper = tuple(float(v) for v in data["upper_eyelid"])
        lower = tuple(float(v) for v in data["lower_eyelid"])
        for name, params in (("upper_eyelid", upper), ("lower_eyelid", lower)):
            if len(params) != 4:
                raise ValueError(f"{name} needs 4 parameters, got {len(params)}")
        return cls(upper=upper, lower=lower)

    def upper_points(self, t_range: Sequence[float]) -> FloatArray:
        return images.curve_points(eyelid_shape(), self.upper, t_range)

    def lower_points(self, t_range: Sequence[float]) -> FloatArray:
        return images.curve_points(eyelid_shape(), self.lower, t_range)


def eyelid_t_range(
    iris_center_x: float, iris_radius: float, num_cols: int, t_extent: float
) -> list[float]:
    lo = max(0, math.floor(iris_center_x - t_extent * iris_radius))
    hi = min(num_cols - 1, math.ceil(iris_center_x + t_extent * iris_radius))
    return [float(x) for x in range(lo, hi + 1)]


def eyelid_search_mask(
    num_rows: int, num_cols: int, iris_center_y: float, direction: int
) -> RegionMask:
    center_row = int(round(iris_center_y))
    if direction == UPPER:
        region = RegionMask(left=0, top=0, right=num_cols, bottom=center_row)
    else:
        region = RegionMask(left=0, top=center_row + 1, right=num_cols, bottom=num_rows)
    return DefaultMask(num_rows, num_cols).intersect(region)


def configure_eyelid_transform(
    iris_center: tuple[float, float],
    iris_radius: float,
    direction: int,
    settings: HoughSettings,
) -> HoughTransform:
    """Hough transform with axes [a, h, k, theta] scaled to the iris.

    Engine flags come from `settings`; only the best curve is gathered.
    """
    cx, cy = iris_center
    config = settings.eyelid_finder
    transform = HoughTransform.from_settings(settings)
    transform.max_candidates = 1
    # An upper eyelid opens downwards in image coordinates (a > 0) and a
    # lower eyelid upwards (a < 0).
    transform.add_param_range(
        [-direction * c / iris_radius for c in config.curvature.values()]
    )
    transform.add_param_range([cx + v * iris_radius for v in config.vertex_x.values()])
    transform.add_param_range(
        [cy + direction * v * iris_radius for v in config.vertex_y.values()]
    )
    transform.add_param_range(config.rotation.values())
    return transform


def find_eyelid(
    edge_weights: AnyArray,
    iris_center: tuple[float, float],
    iris_radius: float,
    direction: int,
    settings: HoughSettings,
    debug_dir: str | None = None,
) -> ParamVector:
    num_rows, num_cols = edge_weights.shape
    transform = configure_eyelid_transform(
        iris_center, iris_radius, direction, settings
    )
    transform.debug_dir = debug_dir
    transform.set_mask(eyelid_search_mask(num_rows, num_cols, iris_center[1], direction))
    t_range = eyelid_t_range(
        iris_center[0], iris_radius, num_cols, settings.eyelid_finder.t_extent
    )
    return transform.compute_best(edge_weights, eyelid_shape(), t_range)


def find_eyelids(
    image: images.PILImage | AnyArray,
    iris_center: tuple[float, float],
    iris_radius: float,
    settings: HoughSettings | None = None,
    debug_dir: str | None = None,
) -> DualParabolaEyelidsLocation:
    """Locate both eyelids of an eye image given the iris circle.

    Search grids come from `settings.eyelid_finder`. Debug images go to
    `debug_dir`, or to `settings.debug_dir` when that is not given.
    """
    if iris_radius <= 0:
        raise ValueError(f"iris_radius must be positive, got {iris_radius}")
    if settings is None:
        settings = HoughSettings()
    debug_dir = debug_dir or settings.debug_dir or None

    edge_weights = images.vertical_edge_weights(image)
    upper = find_eyelid(
        edge_weights,
        iris_center,
        iris_radius,
        UPPER,
        settings,
        debug_dir=os.path.join(debug_dir, "upper") if debug_dir else None,
    )
    lower = find_eyelid(
        edge_weights,
        iris_center,
        iris_radius,
        LOWER,
        settings,
        debug_dir=os.path.join(debug_dir, "lower") if debug_dir else None,
    )
    LOGGER.debug(f"eyelids: upper {upper}, lower {lower}")

    location = DualParabolaEyelidsLocation(upper=upper, lower=lower)
    if debug_dir:
        t_extent = settings.eyelid_finder.t_extent
        t_range = eyelid_t_range(
            iris_center[0], iris_radius, edge_weights.shape[1], t_extent
        )
        overlay = images.as_gray_array(image)
        debug_plots.save_image(
            os.path.join(debug_dir, "eyelids.png"),
            debug_plots.annotate_curves(
                np.clip(overlay, 0, 255), eyelid_shape(), [upper, lower], t_range
            ),
        )
    return location
