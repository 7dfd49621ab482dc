"""
Geometric Primitives for Scan Geometry.
"""
from __future__ import annotations
from dataclasses import dataclass
from enum import StrEnum
from typing import Any, Mapping, Optional, TYPE_CHECKING
import numpy as np
import math

if TYPE_CHECKING:
    import numpy.typing as npt


@dataclass(frozen=True)
class Vector:
    """
    A vector in 3D space representing direction and magnitude.
    """
    x: float
    y: float
    z: float = 0.0

    def __add__(self, other: Vector) -> Vector:
        return Vector(self.x + other.x, self.y + other.y, self.z + other.z)

    def __sub__(self, other: Vector) -> Vector:
        return Vector(self.x - other.x, self.y - other.y, self.z - other.z)

    def __mul__(self, scalar: float) -> Vector:
        return Vector(self.x * scalar, self.y * scalar, self.z * scalar)

    def __truediv__(self, scalar: float) -> Vector:
        if scalar == 0.0: raise ZeroDivisionError
        return Vector(self.x / scalar, self.y / scalar, self.z / scalar)

    def __neg__(self) -> Vector:
        return Vector(-self.x, -self.y, -self.z)

    @property
    def magnitude(self) -> float:
        return math.sqrt(self.length_sq)

    @property
    def length_sq(self) -> float:
        return self.x**2 + self.y**2 + self.z**2

    def normalize(self) -> Vector:
        mag = self.magnitude
        if mag == 0.0: return Vector(0.0, 0.0, 0.0)
        return self / mag

    def dot(self, other: Vector) -> float:
        return self.x * other.x + self.y * other.y + self.z * other.z

    def cross(self, other: Vector) -> Vector:
        return Vector(
            self.y * other.z - self.z * other.y,
            self.z * other.x - self.x * other.z,
            self.x * other.y - self.y * other.x
        )

    def to_array(self) -> npt.NDArray[np.float64]:
        return np.array([self.x, self.y, self.z])

    @classmethod
    def from_array(cls, values: npt.ArrayLike) -> Vector:
        x, y, z = np.asarray(values, dtype=np.float64).reshape(3)
        return cls(float(x), float(y), float(z))


@dataclass(frozen=True)
class BoundingSphere:
    """Center and radius enclosing every vertex of a buffer."""
    center: Vector
    radius: float

    def __post_init__(self) -> None:
        if self.radius < 0.0:
            raise ValueError(f"Bounding sphere radius must be non-negative, got {self.radius}.")


class PrimitiveKind(StrEnum):
    POINTS = "points"
    TRIANGLES = "triangles"


class GeometryBuffer:
    """
    Vertex positions with optional per-vertex colors and triangle connectivity.

    Positions and colors are (N, 3) float arrays indexed identically. For
    TRIANGLES without an index the buffer is a triangle soup: every three
    consecutive vertices form one triangle.

    Args:
        positions: (N, 3) vertex positions in model units.
        colors: Optional (N, 3) per-vertex color channels.
        index: Optional flat list of vertex indices, three per triangle.
        kind: POINTS or TRIANGLES. Inferred from `index` when omitted.

    Raises:
        ValueError: If the arrays do not have the documented shapes.
    """

    def __init__(
        self,
        positions: npt.ArrayLike,
        colors: Optional[npt.ArrayLike] = None,
        index: Optional[npt.ArrayLike] = None,
        kind: Optional[PrimitiveKind] = None,
    ) -> None:
        pos = np.asarray(positions, dtype=np.float64)
        if pos.size == 0:
            pos = pos.reshape(0, 3)
        if pos.ndim != 2 or pos.shape[1] != 3:
            raise ValueError(f"Expected positions of shape (N, 3), got {pos.shape}.")

        col = None
        if colors is not None:
            col = np.asarray(colors, dtype=np.float64)
            if col.size == 0:
                col = col.reshape(0, 3)
            if col.ndim != 2 or col.shape[1] != 3:
                raise ValueError(f"Expected colors of shape (N, 3), got {col.shape}.")
            if len(col) != len(pos):
                raise ValueError(
                    f"Color count ({len(col)}) does not match position count ({len(pos)})."
                )

        idx = None
        if index is not None:
            idx = np.asarray(index).reshape(-1)
            if idx.size and not np.issubdtype(idx.dtype, np.integer):
                raise ValueError(f"Index must contain integers, got dtype {idx.dtype}.")
            idx = idx.astype(np.int64)
            if len(idx) % 3 != 0:
                raise ValueError(f"Index length ({len(idx)}) is not a multiple of 3.")
            if idx.size and (idx.min() < 0 or idx.max() >= len(pos)):
                raise ValueError(
                    f"Index references vertices outside [0, {len(pos) - 1}]."
                )

        if kind is None:
            kind = PrimitiveKind.TRIANGLES if idx is not None else PrimitiveKind.POINTS
        kind = PrimitiveKind(kind)

        if kind == PrimitiveKind.POINTS and idx is not None:
            raise ValueError("A point buffer cannot carry a triangle index.")
        if kind == PrimitiveKind.TRIANGLES and idx is None and len(pos) % 3 != 0:
            raise ValueError(
                f"Triangle soup vertex count ({len(pos)}) is not a multiple of 3."
            )

        self.positions = pos
        self.colors = col
        self.index = idx
        self.kind = kind

    def __repr__(self) -> str:
        return (
            f"GeometryBuffer(kind={self.kind.value}, vertices={self.vertex_count}, "
            f"colors={self.has_colors}, indexed={self.is_indexed})"
        )

    @classmethod
    def from_attributes(cls, attributes: Mapping[str, Any]) -> GeometryBuffer:
        """
        Build a buffer from a decoded attribute mapping.

        Expects a "position" entry, and optionally "color" and "index".
        Flat arrays are reshaped to (N, 3).
        """
        if "position" not in attributes or attributes["position"] is None:
            raise ValueError("Geometry is missing the 'position' attribute.")

        positions = np.asarray(attributes["position"], dtype=np.float64).reshape(-1, 3)
        colors = attributes.get("color")
        if colors is not None:
            colors = np.asarray(colors, dtype=np.float64).reshape(-1, 3)
        index = attributes.get("index")
        if index is not None and len(index) == 0:
            index = None
        return cls(positions, colors=colors, index=index)

    @property
    def vertex_count(self) -> int:
        return len(self.positions)

    @property
    def has_colors(self) -> bool:
        return self.colors is not None

    @property
    def is_indexed(self) -> bool:
        return self.index is not None

    @property
    def has_faces(self) -> bool:
        return self.kind == PrimitiveKind.TRIANGLES

    @property
    def triangle_count(self) -> int:
        if not self.has_faces:
            return 0
        if self.index is not None:
            return len(self.index) // 3
        return self.vertex_count // 3

    def to_non_indexed(self) -> GeometryBuffer:
        """
        Expand indexed triangles into a triangle soup.
        Colors are expanded alongside positions. Non-indexed buffers are returned as-is.
        """
        if self.index is None:
            return self
        colors = self.colors[self.index] if self.colors is not None else None
        return GeometryBuffer(
            self.positions[self.index],
            colors=colors,
            kind=PrimitiveKind.TRIANGLES,
        )

    def empty_like(self) -> GeometryBuffer:
        """Non-indexed buffer of the same kind with no vertices, keeping the color layout."""
        colors = np.empty((0, 3)) if self.colors is not None else None
        return GeometryBuffer(np.empty((0, 3)), colors=colors, kind=self.kind)

    def select(self, mask: npt.NDArray[np.bool_]) -> GeometryBuffer:
        """Return a new non-indexed buffer holding copies of the masked vertices."""
        if self.index is not None:
            raise ValueError("Cannot select vertices of an indexed buffer, de-index first.")
        mask = np.asarray(mask, dtype=bool)
        if mask.shape != (self.vertex_count,):
            raise ValueError(
                f"Mask shape {mask.shape} does not match vertex count {self.vertex_count}."
            )
        colors = self.colors[mask].copy() if self.colors is not None else None
        return GeometryBuffer(self.positions[mask].copy(), colors=colors, kind=self.kind)

    def compute_bounding_sphere(self) -> BoundingSphere:
        """
        Sphere centered on the axis-aligned bounding box, with radius reaching
        the farthest vertex.
        """
        if self.vertex_count == 0:
            return BoundingSphere(center=Vector(0.0, 0.0, 0.0), radius=0.0)
        lo = self.positions.min(axis=0)
        hi = self.positions.max(axis=0)
        center = 0.5 * (lo + hi)
        dist_sq = np.sum((self.positions - center) ** 2, axis=1)
        return BoundingSphere(
            center=Vector.from_array(center),
            radius=float(np.sqrt(dist_sq.max())),
        )
