"""
Crop Parameters
===============
Absolute thresholds of the crop region, derived from a bounding-sphere radius
and the dimensionless values held in `CropSettings`.

Scaling everything by the radius keeps the region definition independent of
the size (and units) of the scanned geometry.

Classes:
    AzimuthGate: One excluded angular interval (may wrap through +-pi).
    GateSet: A list of gates plus the vertical window where they apply.
    CropParameters: All absolute thresholds for one crop run.
"""
from __future__ import annotations

from dataclasses import dataclass, field
import logging
import math
from typing import Iterable, Tuple, TYPE_CHECKING

import numpy as np

from scancrop.model.geometry_utils import angle_in_range, deg2rad, deg360_to_signed_rad

if TYPE_CHECKING:
    import numpy.typing as npt
    from scancrop.config import CropSettings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AzimuthGate:
    """Excluded azimuth interval in signed radians. min > max means it wraps through +-pi."""
    min_angle: float
    max_angle: float

    @classmethod
    def from_degrees(cls, min_deg: float, max_deg: float) -> AzimuthGate:
        return cls(deg360_to_signed_rad(min_deg), deg360_to_signed_rad(max_deg))

    def contains(self, azimuth: npt.NDArray[np.float64]) -> npt.NDArray[np.bool_]:
        return angle_in_range(azimuth, self.min_angle, self.max_angle)


@dataclass(frozen=True)
class GateSet:
    """
    Azimuth gates evaluated only for vertices whose y lies in [y_min, y_max].
    """
    gates: Tuple[AzimuthGate, ...] = ()
    y_min: float = -math.inf
    y_max: float = math.inf

    def rejects(
        self,
        azimuth: npt.NDArray[np.float64],
        y: npt.NDArray[np.float64],
    ) -> npt.NDArray[np.bool_]:
        """Boolean mask of vertices excluded by this gate set."""
        azimuth = np.asarray(azimuth, dtype=np.float64)
        hit = np.zeros(azimuth.shape, dtype=bool)
        if not self.gates:
            return hit
        for gate in self.gates:
            hit |= gate.contains(azimuth)
        in_window = (y >= self.y_min) & (y <= self.y_max)
        return hit & in_window


def gate_set_from_degrees(
    pairs: Iterable[Tuple[float, float]],
    y_min: float,
    y_max: float,
) -> GateSet:
    """Build a GateSet from (min_deg, max_deg) pairs in the 0-360 convention."""
    gates = tuple(AzimuthGate.from_degrees(lo, hi) for lo, hi in pairs)
    return GateSet(gates=gates, y_min=y_min, y_max=y_max)


@dataclass(frozen=True)
class CropParameters:
    """
    Absolute thresholds of the crop region.

    Radii, depths and y-bounds are in model units relative to the crop center.
    A direction passes the cone test when its dot product with the axis is
    >= cos_theta_max. `edge_max` and `aspect_max` only apply to triangles.
    """
    r_min: float = 0.0
    r_max: float = math.inf
    d_min: float = -math.inf
    d_max: float = math.inf
    y_keep_min: float = -math.inf
    y_keep_max: float = math.inf
    cos_theta_max: float = -math.inf
    edge_max: float = math.inf
    aspect_max: float = math.inf
    gate_sets: Tuple[GateSet, ...] = field(default_factory=tuple)

    @property
    def is_degenerate(self) -> bool:
        """True when some range is inverted or out of bounds, so the region fails closed."""
        return (
            self.r_min > self.r_max
            or self.d_min > self.d_max
            or self.y_keep_min > self.y_keep_max
            or self.cos_theta_max > 1.0
            or self.edge_max < 0.0
            or self.aspect_max < 1.0
        )

    @classmethod
    def derive(cls, radius: float, settings: CropSettings) -> CropParameters:
        """
        Scale the dimensionless settings by the bounding-sphere radius.

        Args:
            radius: Bounding-sphere radius of the input geometry.
            settings: Scales, percentages and degrees of the crop profile.

        Returns:
            The absolute CropParameters. Inverted pairs are kept as they are
            and make the region empty.
        """
        gates = gate_set_from_degrees(
            settings.azimuth_gates_deg,
            y_min=radius * settings.cut_y_min_pct / 100,
            y_max=radius * settings.cut_y_max_pct / 100,
        )
        params = cls(
            r_min=radius * settings.inner_scale,
            r_max=radius * settings.outer_scale,
            d_min=radius * settings.depth_min_scale,
            d_max=radius * settings.depth_max_scale,
            y_keep_min=radius * settings.y_keep_min_pct / 100,
            y_keep_max=radius * settings.y_keep_max_pct / 100,
            cos_theta_max=math.cos(deg2rad(settings.cone_degrees)),
            edge_max=radius * settings.edge_factor,
            aspect_max=settings.aspect_max,
            gate_sets=(gates,),
        )
        logger.debug(
            f"Derived crop parameters for R={radius:.4g}: "
            f"r=[{params.r_min:.4g}, {params.r_max:.4g}], d=[{params.d_min:.4g}, {params.d_max:.4g}], "
            f"y=[{params.y_keep_min:.4g}, {params.y_keep_max:.4g}], cos={params.cos_theta_max:.4f}, "
            f"edge_max={params.edge_max:.4g}, gates={len(gates.gates)}"
        )
        return params
