"""
Detection command implementations for CLI.
"""

from __future__ import annotations

import json
import logging
import os

from cli.utils import get_image_files
from hough import images, param_range
from hough.engine import HoughTransform
from hough.errors import HoughError
from hough.eyelids import find_eyelids
from hough.settings import HoughSettings
from hough.shapes import StandardFormParabola


def _debug_dir_for(debug_dir: str | None, image_name: str) -> str | None:
    if not debug_dir:
        return None
    return os.path.join(debug_dir, os.path.splitext(image_name)[0])


def cmd_curve(
    paths: list[str],
    a_range: tuple[float, float, float],
    b_range: tuple[float, float, float],
    c_range: tuple[float, float, float],
    settings: HoughSettings,
    debug_dir: str | None = None,
) -> int:
    """Detect standard-form parabolas y = a t^2 + b t + c in images."""
    logger = logging.getLogger(__name__)
    logger.info(f"Starting curve detection on {len(paths)} path(s)")

    try:
        image_files = get_image_files(paths)
    except HoughError as e:
        print(f"Error: {e}")
        return 1

    if not image_files:
        print("No image files found")
        return 0

    shape = StandardFormParabola()
    error_count = 0
    for image_path in image_files:
        try:
            logger.info(f"Processing image: {image_path}")
            transform = HoughTransform.from_settings(settings)
            transform.debug_dir = _debug_dir_for(
                debug_dir or settings.debug_dir, image_path.name
            )
            for min_value, max_value, step in (a_range, b_range, c_range):
                transform.add_param_range(
                    param_range.incremental(min_value, max_value, step)
                )
            image = images.load_image(str(image_path))
            candidates = transform.compute(image, shape)
            print(
                json.dumps(
                    {
                        "image": str(image_path),
                        "params": list(shape.param_names),
                        "candidates": [list(c) for c in candidates],
                    }
                )
            )
        except (HoughError, ValueError) as e:
            print(f"  Error processing {image_path}: {e}")
            error_count += 1

    return 0 if error_count == 0 else 1


def cmd_eyelids(
    paths: list[str],
    iris_center: tuple[float, float],
    iris_radius: float,
    settings: HoughSettings,
    debug_dir: str | None = None,
) -> int:
    """Locate upper and lower eyelids around a known iris circle."""
    logger = logging.getLogger(__name__)
    logger.info(f"Starting eyelid detection on {len(paths)} path(s)")

    try:
        image_files = get_image_files(paths)
    except HoughError as e:
        print(f"Error: {e}")
        return 1

    if not image_files:
        print("No image files found")
        return 0

    error_count = 0
    for image_path in image_files:
        try:
            logger.info(f"Processing image: {image_path}")
            image = images.load_image(str(image_path))
            location = find_eyelids(
                image,
                iris_center,
                iris_radius,
                settings=settings,
                debug_dir=_debug_dir_for(
                    debug_dir or settings.debug_dir, image_path.name
                ),
            )
            print(json.dumps({"image": str(image_path), **location.to_dict()}))
        except (HoughError, ValueError) as e:
            print(f"  Error processing {image_path}: {e}")
            error_count += 1

    return 0 if error_count == 0 else 1
