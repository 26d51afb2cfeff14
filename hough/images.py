"""
Image utilities for loading, converting and sampling grayscale images.
"""

from __future__ import annotations

from collections.abc import Sequence

import cv2
import numpy as np
import PIL.Image
from PIL import Image
from scipy import ndimage

from hough.errors import ImageLoadError
from hough.hough_types import AnyArray, FloatArray, GrayImage, ParamValues, UInt8Array
from hough.shapes import Shape

# Semantic type aliases
PILImage = PIL.Image.Image  # PIL/Pillow images

INTERPOLATION_ORDER = 1  # Bilinear, for ndimage.map_coordinates
EDGE_PIXELS_TO_ZERO = 2  # Zero out edge pixels where gradients aren't well-defined


def load_image(filepath: str) -> PILImage:
    try:
        image = Image.open(filepath)
        image.load()
    except OSError as e:
        raise ImageLoadError(f"Could not load {filepath}: {e}", title="Load error")
    return image


def as_gray_array(image: PILImage | AnyArray) -> GrayImage:
    """Convert a PIL image or a 2-D/3-D array to a float32 grayscale array."""
    if isinstance(image, Image.Image):
        if image.mode not in ("L", "F", "I", "I;16"):
            image = image.convert("L")
        image = np.array(image)
    pixels = np.asarray(image)
    if pixels.ndim == 3 and pixels.shape[2] == 1:
        pixels = pixels[:, :, 0]
    elif pixels.ndim == 3:
        code = cv2.COLOR_RGBA2GRAY if pixels.shape[2] == 4 else cv2.COLOR_RGB2GRAY
        pixels = cv2.cvtColor(pixels.astype(np.float32), code)
    if pixels.ndim != 2:
        raise ValueError(f"Expected a 2-D image, got shape {pixels.shape}")
    return pixels.astype(np.float32)


def sample_bilinear(image: GrayImage, xs: FloatArray, ys: FloatArray) -> FloatArray:
    """Sample `image` at fractional (x, y) coordinates with bilinear interpolation.

    Coordinates beyond the border take the value of the nearest border pixel.
    """
    xs = np.atleast_1d(np.asarray(xs, dtype=np.float64))
    ys = np.atleast_1d(np.asarray(ys, dtype=np.float64))
    return ndimage.map_coordinates(
        image, [ys, xs], order=INTERPOLATION_ORDER, mode="nearest"
    )


def vertical_edge_weights(image: PILImage | AnyArray) -> GrayImage:
    """Edge weights for roughly horizontal boundaries, normalized to [0, 1].

    Uses a vertical gradient filter, then a square root to favor long coherent
    edges over small areas with a high response.
    """
    gray = as_gray_array(image)
    filter = np.array(
        [[-1, -2, -1], [-1, -2, -1], [1, 2, 1], [1, 2, 1]], dtype=np.float32
    )
    edge_weights = np.sqrt(np.abs(cv2.filter2D(gray, -1, filter)))
    edge_weights[:EDGE_PIXELS_TO_ZERO, :] = 0.0
    edge_weights[-EDGE_PIXELS_TO_ZERO:, :] = 0.0
    edge_weights[:, :EDGE_PIXELS_TO_ZERO] = 0.0
    edge_weights[:, -EDGE_PIXELS_TO_ZERO:] = 0.0
    max_weight = np.max(edge_weights)
    if max_weight > 0:
        edge_weights /= max_weight
    return edge_weights


def curve_points(
    shape: Shape, params: ParamValues, t_range: Sequence[float]
) -> FloatArray:
    """Points of a shape over `t_range` as an (n, 2) array, in-range only."""
    ts = np.asarray(t_range, dtype=np.float64)
    (xs, ys), in_range = shape.calculate(ts, params)
    xs = np.broadcast_to(xs, ts.shape)
    ys = np.broadcast_to(ys, ts.shape)
    keep = np.broadcast_to(in_range, ts.shape) & np.isfinite(xs) & np.isfinite(ys)
    return np.stack([xs[keep], ys[keep]], axis=-1)


def render_curve(
    image: AnyArray,
    shape: Shape,
    params: ParamValues,
    t_range: Sequence[float],
    color: int | tuple[int, ...] = 255,
    thickness: int = 1,
) -> UInt8Array:
    """Draw a shape onto a copy of `image` as a polyline."""
    img = np.array(image, dtype=np.uint8)
    points = curve_points(shape, params, t_range)
    if len(points) > 1:
        cv2.polylines(
            img,
            [np.round(points).astype(np.int32).reshape(-1, 1, 2)],
            False,
            color,  # type: ignore
            thickness,
        )
    return img
