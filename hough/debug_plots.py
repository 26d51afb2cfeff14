from __future__ import annotations

import json
import os
from collections.abc import Sequence
from pathlib import Path
from typing import TYPE_CHECKING

import cv2
import numpy as np
from PIL import Image

from hough.hough_types import AnyArray, FloatArray, ParamValues, UInt8Array
from hough.images import curve_points
from hough.shapes import Shape

if TYPE_CHECKING:
    from hough.engine import Candidate

# Utils to save debugging images.

CURVE_COLORS = [
    (255, 0, 0),
    (0, 255, 0),
    (0, 0, 255),
    (255, 0, 255),
    (255, 255, 0),
    (0, 255, 255),
]


def accumulator_projection(accumulator: FloatArray) -> FloatArray:
    """Max projection of an N-D accumulator onto its first two axes."""
    accumulator = np.asarray(accumulator)
    if accumulator.ndim == 1:
        return accumulator[np.newaxis, :]
    if accumulator.ndim == 2:
        return accumulator
    return np.max(accumulator, axis=tuple(range(2, accumulator.ndim)))


def to_uint8(values: FloatArray) -> UInt8Array:
    values = np.asarray(values, dtype=np.float64)
    lo, hi = np.min(values), np.max(values)
    if hi <= lo:
        return np.zeros(values.shape, dtype=np.uint8)
    return np.round(255.0 * (values - lo) / (hi - lo)).astype(np.uint8)


def annotate_curves(
    img: AnyArray | Image.Image,
    shape: Shape,
    candidates: Sequence[ParamValues],
    t_range: Sequence[float],
) -> AnyArray:
    """Overlay candidate curves, best first, in distinct colors."""
    if isinstance(img, Image.Image):
        img = np.array(img.convert("RGB"))
    img = np.asarray(img)
    if img.ndim == 2:
        img = cv2.cvtColor(img.astype(np.uint8), cv2.COLOR_GRAY2RGB)
    else:
        img = img.astype(np.uint8).copy()
    for params, color in zip(candidates, CURVE_COLORS):
        points = curve_points(shape, params, t_range)
        if len(points) > 1:
            cv2.polylines(
                img,
                [np.round(points).astype(np.int32).reshape(-1, 1, 2)],
                False,
                color,
                1,
            )
    return img


def save_image(file_path: str, img: AnyArray | Image.Image) -> None:
    dir = os.path.dirname(file_path)
    pd = Path(dir).expanduser()
    if not pd.exists():
        pd.mkdir(parents=True)

    if not isinstance(img, Image.Image):
        img = Image.fromarray(img)
    if img.mode == "F":
        # PNG supports greyscale images with 8-bit int pixels.
        img = img.convert("L")

    img.save(file_path)


def save_scores(file_path: str, candidates: Sequence[Candidate]) -> None:
    Path(os.path.dirname(file_path)).expanduser().mkdir(parents=True, exist_ok=True)
    with open(file_path, "w") as f:
        json.dump(
            [
                {"params": list(c.params), "indices": list(c.indices), "score": c.score}
                for c in candidates
            ],
            f,
            indent=2,
        )
