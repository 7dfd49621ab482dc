import math

import numpy as np
import pytest

from scancrop.crop.axis import AzimuthFrame, azimuth_basis
from scancrop.model.geometry_primitives import GeometryBuffer, PrimitiveKind, Vector


def uv_hemisphere(radius: float = 1.0, n_lat: int = 8, n_lon: int = 16):
    """Indexed hemisphere (z >= 0) as (positions, index)."""
    theta = np.linspace(0.0, math.pi / 2, n_lat + 1)
    phi = np.linspace(0.0, 2.0 * math.pi, n_lon, endpoint=False)
    t, p = np.meshgrid(theta, phi, indexing="ij")
    positions = radius * np.stack(
        (np.sin(t) * np.cos(p), np.sin(t) * np.sin(p), np.cos(t)), axis=-1
    ).reshape(-1, 3)

    faces = []
    for i in range(n_lat):
        for j in range(n_lon):
            a = i * n_lon + j
            b = i * n_lon + (j + 1) % n_lon
            c = (i + 1) * n_lon + j
            d = (i + 1) * n_lon + (j + 1) % n_lon
            faces.extend((a, c, b, b, c, d))
    return positions, np.array(faces, dtype=np.int64)


@pytest.fixture
def cube_points() -> GeometryBuffer:
    corners = np.array(
        [[x, y, z] for x in (-1.0, 1.0) for y in (-1.0, 1.0) for z in (-1.0, 1.0)]
    )
    colors = np.linspace(0.0, 1.0, 24).reshape(8, 3)
    return GeometryBuffer(corners, colors=colors)


@pytest.fixture
def hemisphere_mesh() -> GeometryBuffer:
    positions, index = uv_hemisphere()
    colors = np.abs(positions)
    return GeometryBuffer(positions, colors=colors, index=index)


@pytest.fixture
def random_cloud() -> GeometryBuffer:
    rng = np.random.default_rng(7)
    positions = rng.uniform(-1.0, 1.0, size=(600, 3))
    colors = rng.uniform(0.0, 1.0, size=(600, 3))
    return GeometryBuffer(positions, colors=colors)


@pytest.fixture
def random_soup() -> GeometryBuffer:
    rng = np.random.default_rng(11)
    centers = rng.uniform(-1.0, 1.0, size=(300, 1, 3))
    jitter = rng.normal(scale=0.08, size=(300, 3, 3))
    positions = (centers + jitter).reshape(-1, 3)
    return GeometryBuffer(positions, kind=PrimitiveKind.TRIANGLES)


@pytest.fixture
def z_axis() -> Vector:
    return Vector(0.0, 0.0, 1.0)


@pytest.fixture
def z_frame(z_axis) -> AzimuthFrame:
    return azimuth_basis(z_axis, Vector(1.0, 0.0, 0.0))
