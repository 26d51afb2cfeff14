from __future__ import annotations

import json
import logging
import math
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Optional

from hough import param_range

LOGGER = logging.getLogger(__name__)

DEFAULT_SETTINGS_FILE = Path.home() / ".parabola_hough_settings.json"


@dataclass
class AxisGrid:
    """Integer grid `min, min + step, ...` of `count` values, times `scale`."""

    min: int
    step: int
    count: int
    scale: float

    def values(self) -> list[float]:
        return param_range.scaled_incremental(
            self.min, self.step, self.count, self.scale
        )

    @classmethod
    def from_dict(cls, data: dict[str, Any], default: AxisGrid) -> AxisGrid:
        return cls(
            min=int(data.get("min", default.min)),
            step=int(data.get("step", default.step)),
            count=int(data.get("count", default.count)),
            scale=float(data.get("scale", default.scale)),
        )


def _default_curvature() -> AxisGrid:
    # Curvature times the iris radius.
    return AxisGrid(min=1, step=1, count=8, scale=0.1)


def _default_vertex_x() -> AxisGrid:
    # Offset from the iris center, in iris radii.
    return AxisGrid(min=-4, step=1, count=9, scale=0.1)


def _default_vertex_y() -> AxisGrid:
    # Distance from the iris center towards the eyelid, in iris radii.
    return AxisGrid(min=2, step=1, count=11, scale=0.1)


def _default_rotation() -> AxisGrid:
    return AxisGrid(min=-2, step=1, count=5, scale=math.pi / 36)


@dataclass
class EyelidFinderConfig:
    """Search grids for the dual parabola eyelid finder."""

    curvature: AxisGrid = field(default_factory=_default_curvature)
    vertex_x: AxisGrid = field(default_factory=_default_vertex_x)
    vertex_y: AxisGrid = field(default_factory=_default_vertex_y)
    rotation: AxisGrid = field(default_factory=_default_rotation)
    # Eyelid curves are sampled over the iris center +/- t_extent radii.
    t_extent: float = 1.5

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> EyelidFinderConfig:
        return cls(
            curvature=AxisGrid.from_dict(
                data.get("curvature", {}), _default_curvature()
            ),
            vertex_x=AxisGrid.from_dict(data.get("vertex_x", {}), _default_vertex_x()),
            vertex_y=AxisGrid.from_dict(data.get("vertex_y", {}), _default_vertex_y()),
            rotation=AxisGrid.from_dict(data.get("rotation", {}), _default_rotation()),
            t_extent=float(data.get("t_extent", 1.5)),
        )


@dataclass
class HoughSettings:
    """Engine and eyelid finder settings."""

    max_candidates: int = 1
    normalized: bool = False
    debug: bool = False
    debug_dir: str = ""
    eyelid_finder: EyelidFinderConfig = field(default_factory=EyelidFinderConfig)

    def __setattr__(self, name: str, value: Any) -> None:
        """Override setattr to prevent setting non-existent attributes."""
        if not hasattr(self, name) and name not in self.__dataclass_fields__:
            raise AttributeError(f"Setting '{name}' does not exist")
        super().__setattr__(name, value)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> HoughSettings:
        """Create HoughSettings from dictionary, handling missing or invalid keys."""
        return cls(
            max_candidates=int(data.get("max_candidates", 1)),
            normalized=bool(data.get("normalized", False)),
            debug=bool(data.get("debug", False)),
            debug_dir=str(data.get("debug_dir", "")),
            eyelid_finder=EyelidFinderConfig.from_dict(data.get("eyelid_finder", {})),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert HoughSettings to dictionary for JSON serialization."""
        return asdict(self)

    @classmethod
    def load_from_file(cls, file_path: Optional[str] = None) -> HoughSettings:
        """Load settings from JSON file."""
        if file_path is None:
            file_path_obj = DEFAULT_SETTINGS_FILE
        else:
            file_path_obj = Path(file_path)

        if file_path_obj.exists():
            try:
                with open(file_path_obj) as f:
                    data = json.load(f)
                return cls.from_dict(data)
            except (OSError, json.JSONDecodeError):
                LOGGER.warning(f"Could not read settings from {file_path_obj}")
                return cls()
        return cls()

    def save_to_file(self, file_path: Optional[str] = None) -> None:
        """Save settings to JSON file."""
        if file_path is None:
            file_path_obj = DEFAULT_SETTINGS_FILE
        else:
            file_path_obj = Path(file_path)

        try:
            with open(file_path_obj, "w") as f:
                json.dump(self.to_dict(), f, indent=2)
        except OSError:
            LOGGER.warning(f"Could not save settings to {file_path_obj}")
