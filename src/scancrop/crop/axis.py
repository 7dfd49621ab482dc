"""
Symmetry Axis and Azimuth Frame
===============================
Estimates the principal direction of a scan and builds the 2D angular frame
used to measure azimuth around it.

The axis is the normalized mean of unit offsets from the center, taken over
points inside a radial band. For a roughly radially symmetric surface this
points at the middle of the band without needing a PCA.
"""
from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import TYPE_CHECKING

import numpy as np

from scancrop.model.geometry_primitives import Vector
from scancrop.model.geometry_utils import safe_normalize_rows

if TYPE_CHECKING:
    import numpy.typing as npt

logger = logging.getLogger(__name__)

WORLD_UP = Vector(0.0, 1.0, 0.0)
WORLD_RIGHT = Vector(1.0, 0.0, 0.0)
DEFAULT_AXIS = Vector(0.0, 0.0, 1.0)

# Squared length below which a projected reference counts as parallel to the axis
DEGENERATE_LENGTH_SQ = 1e-8


def estimate_axis(
    positions: npt.NDArray[np.float64],
    center: Vector,
    r_min: float,
    r_max: float,
    default_axis: Vector = DEFAULT_AXIS,
) -> Vector:
    """
    Estimate a unit symmetry axis from a point set.

    Args:
        positions: (N, 3) vertex positions.
        center: Center the offsets are measured from.
        r_min: Inner radius of the sampling band.
        r_max: Outer radius of the sampling band.
        default_axis: Returned unchanged when no point qualifies or the
            offsets cancel out.

    Returns:
        The estimated unit axis, or `default_axis`.
    """
    offsets = np.asarray(positions, dtype=np.float64).reshape(-1, 3) - center.to_array()
    dist_sq = np.einsum("ij,ij->i", offsets, offsets)
    in_band = (dist_sq >= r_min * r_min) & (dist_sq <= r_max * r_max)
    count = int(np.count_nonzero(in_band))

    if count == 0:
        logger.warning(
            f"No points in radial band [{r_min:.4g}, {r_max:.4g}], using default axis {default_axis}."
        )
        return default_axis

    total = Vector.from_array(safe_normalize_rows(offsets[in_band]).sum(axis=0))
    if total.length_sq <= 0.0:
        logger.warning("Band offsets cancel out, using default axis.")
        return default_axis

    axis = total.normalize()
    logger.debug(f"Estimated axis {axis} from {count} points.")
    return axis


@dataclass(frozen=True)
class AzimuthFrame:
    """Unit vectors u, w orthogonal to the axis and to each other (axis, u, w right-handed)."""
    u: Vector
    w: Vector

    def azimuth(self, directions: npt.NDArray[np.float64]) -> npt.NDArray[np.float64]:
        """Azimuth of each (N, 3) direction, atan2(n.w, n.u) in (-pi, pi]."""
        directions = np.asarray(directions, dtype=np.float64).reshape(-1, 3)
        return np.arctan2(directions @ self.w.to_array(), directions @ self.u.to_array())


def _project_off_axis(direction: Vector, axis: Vector) -> Vector:
    return direction - axis * direction.dot(axis)


def azimuth_basis(
    axis: Vector,
    reference: Vector,
    fallback_up: Vector = WORLD_UP,
    fallback_right: Vector = WORLD_RIGHT,
) -> AzimuthFrame:
    """
    Build the azimuth frame around `axis`.

    `reference` (typically the viewer's right direction) is projected onto the
    plane perpendicular to the axis. If that projection is degenerate,
    `fallback_up` and then `fallback_right` are tried.

    Raises:
        ValueError: If every candidate is parallel to the axis.
    """
    for label, candidate in (("reference", reference), ("up", fallback_up), ("right", fallback_right)):
        u = _project_off_axis(candidate.normalize(), axis)
        if u.length_sq >= DEGENERATE_LENGTH_SQ:
            if label != "reference":
                logger.debug(f"Reference direction parallel to axis, using fallback '{label}'.")
            u = u.normalize()
            w = axis.cross(u).normalize()
            return AzimuthFrame(u=u, w=w)

    raise ValueError(f"Cannot build an azimuth frame: all directions are parallel to axis {axis}.")
