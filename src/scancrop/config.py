"""
Configuration & Path Management
===============================
This module serves as the central registry for asset paths and the crop profile.

Why is this file needed?
------------------------
1. Profile: `CropSettings` holds every dimensionless value of the crop region
   (scales of the bounding radius, percentages, degrees). The absolute
   thresholds are derived from it per geometry.
2. Persistence: profiles can be saved to and loaded from JSON.
3. Deployment: It handles the logic required by PyInstaller (sys._MEIPASS) to
   find the bundled default profile when the app is frozen.

Exports:
    ASSETS_PATH (str): Absolute path to the assets directory.
    DEFAULT_SETTINGS_PATH (str): Absolute path to the default crop profile.
"""
from __future__ import annotations

import json
import logging
import os
import sys
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, List, Tuple

logger = logging.getLogger(__name__)


def get_resource_path(relative_path: str) -> str:
    """
    Get absolute path to resource, works for dev and for PyInstaller.
    """
    if hasattr(sys, '_MEIPASS'):
        # PyInstaller temp folder
        base_path: str = getattr(sys, '_MEIPASS')
        return os.path.join(base_path, relative_path)

    # Installed or development mode: resolve relative to the package
    # config.py is in scancrop/, assets ship in scancrop/assets/
    package_root: Path = Path(__file__).parent
    return os.path.join(str(package_root), relative_path)


# Global Constants
ASSETS_PATH: str = get_resource_path("assets")
DEFAULT_SETTINGS_PATH: str = os.path.join(ASSETS_PATH, "crop_default.json")


@dataclass
class CropSettings:
    """
    Dimensionless crop profile. Scales multiply the bounding-sphere radius,
    percentages are of the radius, angles are in degrees (0-360 convention for gates).
    """
    inner_scale: float = 0.21
    outer_scale: float = 0.29
    depth_min_scale: float = 0.16
    depth_max_scale: float = 0.28
    edge_factor: float = 0.80
    aspect_max: float = 7.0
    cone_degrees: float = 16.0
    y_keep_min_pct: float = 3.0
    y_keep_max_pct: float = 13.0
    azimuth_gates_deg: List[Tuple[float, float]] = field(
        default_factory=lambda: [(209.0, 222.0), (191.0, 240.0)]
    )
    cut_y_min_pct: float = 14.0
    cut_y_max_pct: float = 100.0
    default_axis: Tuple[float, float, float] = (0.0, 0.0, 1.0)
    reference_direction: Tuple[float, float, float] = (1.0, 0.0, 0.0)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["azimuth_gates_deg"] = [list(pair) for pair in self.azimuth_gates_deg]
        data["default_axis"] = list(self.default_axis)
        data["reference_direction"] = list(self.reference_direction)
        return data

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> CropSettings:
        known = {f.name for f in fields(CropSettings)}
        unknown = set(data) - known
        if unknown:
            raise ValueError(f"Unknown crop settings: {', '.join(sorted(unknown))}")

        values = dict(data)
        if "azimuth_gates_deg" in values:
            gates = []
            for pair in values["azimuth_gates_deg"]:
                if len(pair) != 2:
                    raise ValueError(f"Azimuth gate must be a (min, max) pair, got {pair!r}.")
                gates.append((float(pair[0]), float(pair[1])))
            values["azimuth_gates_deg"] = gates
        for key in ("default_axis", "reference_direction"):
            if key in values:
                vec = tuple(float(v) for v in values[key])
                if len(vec) != 3:
                    raise ValueError(f"'{key}' must have three components, got {values[key]!r}.")
                values[key] = vec
        return CropSettings(**values)


def load_crop_settings(path: str = DEFAULT_SETTINGS_PATH) -> CropSettings:
    """Read a crop profile from JSON. Missing keys keep their defaults."""
    logger.info(f"Loading crop settings from: {path}")
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise ValueError(f"Crop settings file must contain a JSON object: {path}")
    return CropSettings.from_dict(data)


def save_crop_settings(settings: CropSettings, path: str) -> None:
    with open(path, "w", encoding="utf-8") as f:
        json.dump(settings.to_dict(), f, indent=2)
    logger.info(f"Crop settings saved to: {path}")
