from __future__ import annotations

from typing import TYPE_CHECKING, Union

from math import pi
import numpy as np

if TYPE_CHECKING:
    from numpy import typing as npt

from scancrop.model.geometry_primitives import GeometryBuffer

AngleLike = Union[float, "npt.NDArray[np.float64]"]


def deg2rad(degrees: float) -> float:
    return degrees * pi / 180


def normalize_angle(angle: AngleLike) -> AngleLike:
    """
    Wrap an angle (or array of angles) into (-pi, pi].

    Uses atan2(sin, cos) so multiples of 2*pi need no branching.
    """
    result = np.arctan2(np.sin(angle), np.cos(angle))
    if np.ndim(result) == 0:
        return float(result)
    return result


def angle_in_range(angle: AngleLike, min_angle: float, max_angle: float) -> Union[bool, npt.NDArray[np.bool_]]:
    """
    Check whether `angle` lies inside the closed interval [min_angle, max_angle].

    All three inputs are normalized first. If min_angle > max_angle the interval
    wraps through the +-pi seam, so it contains everything >= min_angle OR <= max_angle.

    Args:
        angle: Scalar angle or array of angles in radians.
        min_angle: Interval start in radians.
        max_angle: Interval end in radians.

    Returns:
        A bool for scalar input, otherwise a boolean array of the same shape.
    """
    aa = np.arctan2(np.sin(angle), np.cos(angle))
    amin = normalize_angle(min_angle)
    amax = normalize_angle(max_angle)

    if amin <= amax:
        inside = (aa >= amin) & (aa <= amax)
    else:
        inside = (aa >= amin) | (aa <= amax)

    if np.ndim(inside) == 0:
        return bool(inside)
    return inside


def deg360_to_signed_rad(degrees: float) -> float:
    """
    Convert degrees to a signed radian in the same range `normalize_angle` returns.
    350 -> -10 degrees, 180 stays 180.
    """
    x = degrees % 360.0
    if x > 180.0:
        x -= 360.0
    return deg2rad(x)


def safe_normalize_rows(vectors: npt.NDArray[np.float64]) -> npt.NDArray[np.float64]:
    """Normalize each row of an (N, 3) array; zero-length rows stay zero."""
    lengths = np.linalg.norm(vectors, axis=1, keepdims=True)
    out = np.zeros_like(vectors, dtype=np.float64)
    np.divide(vectors, lengths, out=out, where=lengths > 0.0)
    return out


def compute_vertex_normals(geometry: GeometryBuffer) -> npt.NDArray[np.float64]:
    """
    Per-vertex normals for a triangle buffer.

    For a triangle soup every corner gets its face normal (flat shading).
    For an indexed buffer face normals are accumulated per shared vertex
    and normalized (smooth shading).

    Returns:
        (N, 3) array of unit normals, zero rows for degenerate triangles.
    """
    if not geometry.has_faces:
        raise ValueError("Vertex normals need triangle connectivity.")

    pos = geometry.positions
    if geometry.index is not None:
        tri = geometry.index.reshape(-1, 3)
    else:
        tri = np.arange(geometry.vertex_count).reshape(-1, 3)

    a, b, c = pos[tri[:, 0]], pos[tri[:, 1]], pos[tri[:, 2]]
    face_normals = np.cross(c - b, a - b)

    normals = np.zeros_like(pos)
    for corner in range(3):
        np.add.at(normals, tri[:, corner], face_normals)

    return safe_normalize_rows(normals)
