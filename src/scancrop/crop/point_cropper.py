"""
Point Cropper
=============
Keeps the points of a scan that lie inside the region.

Point clouds get one extra fixed gate set on top of the configured ones:
between 0.14 R and R above the center (R = radius of the input bounding
sphere) the azimuth intervals 209-222 and 191-240 degrees are removed.
"""
from __future__ import annotations

import logging
from typing import Iterable, Optional

from scancrop.crop.parameters import GateSet, gate_set_from_degrees
from scancrop.crop.region import RegionPredicate
from scancrop.model.geometry_primitives import GeometryBuffer, PrimitiveKind, Vector

logger = logging.getLogger(__name__)

POINT_CLOUD_GATES_DEG = ((209.0, 222.0), (191.0, 240.0))
POINT_CLOUD_WINDOW = (0.14, 1.0)


def point_cloud_gate_set(radius: float) -> GateSet:
    """Fixed point-cloud gate set anchored to the input bounding-sphere radius."""
    lo, hi = POINT_CLOUD_WINDOW
    return gate_set_from_degrees(POINT_CLOUD_GATES_DEG, y_min=radius * lo, y_max=radius * hi)


def crop_points(
    geometry: GeometryBuffer,
    center: Vector,
    predicate: RegionPredicate,
    bounding_radius: Optional[float] = None,
    extra_gate_sets: Optional[Iterable[GateSet]] = None,
) -> GeometryBuffer:
    """
    Crop a point cloud to the region described by `predicate`.

    Args:
        geometry: Point buffer.
        center: Crop center; the predicate sees positions relative to it.
        predicate: Region test applied to every point.
        bounding_radius: Radius of the input bounding sphere. Computed from
            `geometry` when omitted; zero falls back to 1.0.
        extra_gate_sets: Gate sets layered on top of the predicate's own.
            Defaults to the fixed point-cloud gate set.

    Returns:
        A new point buffer with the kept points in input order.

    Raises:
        ValueError: If the buffer is empty.
    """
    if geometry.vertex_count == 0:
        raise ValueError("Cannot crop an empty point cloud: geometry has no vertices.")

    if extra_gate_sets is None:
        if bounding_radius is None:
            bounding_radius = geometry.compute_bounding_sphere().radius
        extra_gate_sets = (point_cloud_gate_set(bounding_radius or 1.0),)

    offsets = geometry.positions - center.to_array()
    mask = predicate.vertex_mask(offsets, extra_gate_sets=extra_gate_sets)

    logger.info(f"Point crop kept {int(mask.sum())} of {geometry.vertex_count} points.")

    if not mask.any():
        return geometry.empty_like()
    colors = geometry.colors[mask].copy() if geometry.has_colors else None
    return GeometryBuffer(geometry.positions[mask].copy(), colors=colors, kind=PrimitiveKind.POINTS)
