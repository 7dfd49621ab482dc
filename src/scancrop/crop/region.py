"""
Region Predicate
================
Composite per-vertex test of the crop region.

For an offset `p` from the crop center, with unit direction `n`:
    1. radial:    |p|^2 in [r_min^2, r_max^2]
    2. depth:     p . axis in [d_min, d_max]
    3. vertical:  p.y in [y_keep_min, y_keep_max]
    4. cone:      n . axis >= cos_theta_max
    5. gates:     rejected if p.y is inside a gate window and the azimuth of n
                  falls in one of that window's gates.

A vertex passes when 1-4 hold and 5 does not reject it.
All tests are evaluated on whole arrays, one row per candidate.
"""
from __future__ import annotations

import logging
from typing import Iterable, Optional, TYPE_CHECKING

import numpy as np

from scancrop.crop.axis import AzimuthFrame
from scancrop.crop.parameters import CropParameters, GateSet
from scancrop.model.geometry_primitives import Vector
from scancrop.model.geometry_utils import safe_normalize_rows

if TYPE_CHECKING:
    import numpy.typing as npt

logger = logging.getLogger(__name__)


class RegionPredicate:
    def __init__(self, params: CropParameters, axis: Vector, frame: AzimuthFrame) -> None:
        self.params = params
        self.axis = axis
        self.frame = frame

    def __repr__(self) -> str:
        return f"RegionPredicate(axis={self.axis}, params={self.params})"

    def core_mask(self, offsets: npt.NDArray[np.float64]) -> npt.NDArray[np.bool_]:
        """Tests 1-4 (radial, depth, vertical keep, cone) for (N, 3) center-relative offsets."""
        p = self.params
        offsets = np.asarray(offsets, dtype=np.float64).reshape(-1, 3)
        axis = self.axis.to_array()

        dist_sq = np.einsum("ij,ij->i", offsets, offsets)
        mask = (dist_sq >= p.r_min * p.r_min) & (dist_sq <= p.r_max * p.r_max)

        depth = offsets @ axis
        mask &= (depth >= p.d_min) & (depth <= p.d_max)

        y = offsets[:, 1]
        mask &= (y >= p.y_keep_min) & (y <= p.y_keep_max)

        directions = safe_normalize_rows(offsets)
        mask &= (directions @ axis) >= p.cos_theta_max
        return mask

    def gate_rejection_mask(
        self,
        offsets: npt.NDArray[np.float64],
        gate_sets: Optional[Iterable[GateSet]] = None,
    ) -> npt.NDArray[np.bool_]:
        """
        Test 5: True where a vertex falls inside an azimuth gate of its window.

        Args:
            offsets: (N, 3) center-relative positions.
            gate_sets: Gate sets to evaluate. Defaults to the parameters' own.
        """
        offsets = np.asarray(offsets, dtype=np.float64).reshape(-1, 3)
        gate_sets = tuple(self.params.gate_sets if gate_sets is None else gate_sets)
        rejected = np.zeros(len(offsets), dtype=bool)
        if not any(gs.gates for gs in gate_sets):
            return rejected

        azimuth = self.frame.azimuth(safe_normalize_rows(offsets))
        y = offsets[:, 1]
        for gate_set in gate_sets:
            rejected |= gate_set.rejects(azimuth, y)
        return rejected

    def vertex_mask(
        self,
        offsets: npt.NDArray[np.float64],
        extra_gate_sets: Iterable[GateSet] = (),
    ) -> npt.NDArray[np.bool_]:
        """
        Full predicate (tests 1-5) for (N, 3) center-relative offsets.

        `extra_gate_sets` are layered on top of the parameters' own gate sets.
        """
        mask = self.core_mask(offsets)
        gate_sets = tuple(self.params.gate_sets) + tuple(extra_gate_sets)
        if mask.any():
            mask &= ~self.gate_rejection_mask(offsets, gate_sets)
        return mask

    def contains(self, offset: Vector) -> bool:
        """Scalar convenience wrapper around `vertex_mask` for a single offset."""
        return bool(self.vertex_mask(offset.to_array().reshape(1, 3))[0])
