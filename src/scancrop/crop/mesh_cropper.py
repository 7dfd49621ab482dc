"""
Mesh Cropper
============
Keeps the triangles of a scan whose three corners all lie inside the region,
then drops long or sliver-shaped triangles.

Triangle quality is measured on the unit directions of the corners (as seen
from the crop center), not on the raw positions. The longest of the three
direction-space edges must not exceed `edge_max`, and the ratio longest /
shortest must not exceed `aspect_max`. A zero-length shortest edge skips the
ratio test.
"""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import numpy as np

from scancrop.model.geometry_primitives import GeometryBuffer, Vector
from scancrop.model.geometry_utils import safe_normalize_rows

if TYPE_CHECKING:
    import numpy.typing as npt
    from scancrop.crop.region import RegionPredicate

logger = logging.getLogger(__name__)


def triangle_quality_mask(
    directions: npt.NDArray[np.float64],
    edge_max: float,
    aspect_max: float,
) -> npt.NDArray[np.bool_]:
    """
    Edge-length and aspect-ratio filter.

    Args:
        directions: (T, 3, 3) unit directions of the corners of T triangles.
        edge_max: Maximum allowed edge length.
        aspect_max: Maximum allowed longest/shortest edge ratio.

    Returns:
        (T,) boolean mask of triangles passing both bounds.
    """
    a, b, c = directions[:, 0], directions[:, 1], directions[:, 2]
    edges = np.stack(
        (
            np.linalg.norm(a - b, axis=1),
            np.linalg.norm(b - c, axis=1),
            np.linalg.norm(c - a, axis=1),
        ),
        axis=1,
    )
    e_max = edges.max(axis=1)
    e_min = edges.min(axis=1)

    keep = e_max <= edge_max

    # Ratio only where the shortest edge is non-zero
    ratio = np.divide(e_max, e_min, out=np.zeros_like(e_max), where=e_min > 0.0)
    keep &= ~((e_min > 0.0) & (ratio > aspect_max))
    return keep


def crop_mesh(
    geometry: GeometryBuffer,
    center: Vector,
    predicate: RegionPredicate,
) -> GeometryBuffer:
    """
    Crop a triangle mesh to the region described by `predicate`.

    Indexed input is expanded into a triangle soup first. Kept triangles are
    copied with their original positions (and colors) in input order.

    Args:
        geometry: Triangle buffer, indexed or soup.
        center: Crop center; the predicate sees positions relative to it.
        predicate: Region test applied to every corner.

    Returns:
        A new non-indexed triangle soup.

    Raises:
        ValueError: If the buffer has no triangles or no vertices.
    """
    if not geometry.has_faces:
        raise ValueError("crop_mesh needs triangle geometry, got a point buffer.")
    if geometry.vertex_count == 0:
        raise ValueError("Cannot crop an empty mesh: geometry has no vertices.")

    soup = geometry.to_non_indexed()
    offsets = soup.positions - center.to_array()

    vertex_ok = predicate.vertex_mask(offsets)
    triangle_ok = vertex_ok.reshape(-1, 3).all(axis=1)

    if triangle_ok.any():
        candidates = np.flatnonzero(triangle_ok)
        directions = safe_normalize_rows(offsets).reshape(-1, 3, 3)[candidates]
        params = predicate.params
        triangle_ok[candidates] = triangle_quality_mask(directions, params.edge_max, params.aspect_max)

    kept = int(np.count_nonzero(triangle_ok))
    logger.info(f"Mesh crop kept {kept} of {soup.triangle_count} triangles.")

    if kept == 0:
        return soup.empty_like()
    return soup.select(np.repeat(triangle_ok, 3))
