"""
Shared utilities for CLI commands.
"""

from __future__ import annotations

from pathlib import Path

from hough.errors import ImageLoadError

IMAGE_EXTENSIONS = {".jpg", ".jpeg", ".png", ".tiff", ".tif", ".bmp", ".pgm"}


def get_image_files(paths: list[str]) -> list[Path]:
    """Get list of image files from input paths (files or directories).

    Raises ImageLoadError if a path does not exist.
    """
    image_files = []

    for path_str in paths:
        path = Path(path_str)
        if path.is_file():
            if path.suffix.lower() in IMAGE_EXTENSIONS:
                image_files.append(path)
            else:
                print(f"Warning: {path} is not a supported image file")
        elif path.is_dir():
            for ext in IMAGE_EXTENSIONS:
                image_files.extend(path.glob(f"*{ext}"))
                image_files.extend(path.glob(f"*{ext.upper()}"))
        else:
            raise ImageLoadError(f"Path not found: {path}", title="Path error")

    return sorted(set(image_files))
