"""Tests for point-cloud cropping."""
import math

import numpy as np
import pytest
from numpy.testing import assert_array_equal

from scancrop.crop.axis import azimuth_basis
from scancrop.crop.parameters import CropParameters
from scancrop.crop.point_cropper import crop_points, point_cloud_gate_set
from scancrop.crop.region import RegionPredicate
from scancrop.model.geometry_primitives import GeometryBuffer, PrimitiveKind, Vector
from scancrop.model.geometry_utils import deg2rad

ORIGIN = Vector(0.0, 0.0, 0.0)


def test_cube_is_kept_whole(cube_points, z_axis, z_frame):
    params = CropParameters(r_min=0.0, r_max=2.0, cos_theta_max=-1.0)
    predicate = RegionPredicate(params, z_axis, z_frame)

    out = crop_points(cube_points, ORIGIN, predicate, extra_gate_sets=())

    assert out.kind == PrimitiveKind.POINTS
    assert_array_equal(out.positions, cube_points.positions)
    assert_array_equal(out.colors, cube_points.colors)


def test_points_outside_band_are_dropped_in_order(z_axis, z_frame):
    positions = np.array([[0.2, 0.0, 0.0], [0.0, 2.0, 0.0], [0.0, 0.0, 0.7], [0.0, -0.9, 0.0]])
    cloud = GeometryBuffer(positions, colors=np.eye(4, 3))
    predicate = RegionPredicate(CropParameters(r_min=0.5, r_max=1.0), z_axis, z_frame)

    out = crop_points(cloud, ORIGIN, predicate, extra_gate_sets=())

    assert_array_equal(out.positions, positions[[2, 3]])
    assert_array_equal(out.colors, np.eye(4, 3)[[2, 3]])


def _direction_at(frame, degrees: float) -> np.ndarray:
    a = deg2rad(degrees)
    return (frame.u * math.cos(a) + frame.w * math.sin(a)).to_array()


def test_fixed_point_cloud_gate():
    axis = Vector(0.0, 0.0, 1.0)
    # u = -x, w = -y, so the gated azimuths lie at positive y
    frame = azimuth_basis(axis, Vector(-1.0, 0.0, 0.0))
    gated = 0.9 * _direction_at(frame, 215)
    below_window = gated * np.array([1.0, -1.0, 1.0])
    open_azimuth = 0.9 * _direction_at(frame, 325)
    assert gated[1] > 0.14 and open_azimuth[1] > 0.14 and below_window[1] < 0.0

    cloud = GeometryBuffer(np.array([gated, below_window, open_azimuth]))
    predicate = RegionPredicate(CropParameters(), axis, frame)

    out = crop_points(cloud, ORIGIN, predicate, bounding_radius=1.0)

    assert_array_equal(out.positions, cloud.positions[1:])


def test_fixed_gate_window_follows_input_radius():
    gate_set = point_cloud_gate_set(2.0)
    assert gate_set.y_min == pytest.approx(0.28)
    assert gate_set.y_max == pytest.approx(2.0)
    assert len(gate_set.gates) == 2


def test_fixed_gate_radius_defaults_to_input_sphere(random_cloud, z_axis):
    frame = azimuth_basis(z_axis, Vector(-1.0, 0.0, 0.0))
    predicate = RegionPredicate(CropParameters(), z_axis, frame)
    radius = random_cloud.compute_bounding_sphere().radius

    implicit = crop_points(random_cloud, ORIGIN, predicate)
    explicit = crop_points(random_cloud, ORIGIN, predicate, bounding_radius=radius)

    assert implicit.vertex_count < random_cloud.vertex_count
    assert_array_equal(implicit.positions, explicit.positions)


def test_no_op_parameters_return_input(random_cloud, z_axis, z_frame):
    predicate = RegionPredicate(CropParameters(), z_axis, z_frame)
    out = crop_points(random_cloud, ORIGIN, predicate, extra_gate_sets=())
    assert_array_equal(out.positions, random_cloud.positions)
    assert_array_equal(out.colors, random_cloud.colors)
    assert out.positions is not random_cloud.positions


def test_kept_points_satisfy_the_region(random_cloud, z_axis, z_frame):
    params = CropParameters(
        r_min=0.2, r_max=1.1, d_min=-0.3, d_max=0.9, y_keep_min=-0.7, y_keep_max=0.9, cos_theta_max=0.2
    )
    predicate = RegionPredicate(params, z_axis, z_frame)
    extra = (point_cloud_gate_set(1.0),)

    out = crop_points(random_cloud, ORIGIN, predicate, extra_gate_sets=extra)

    assert 0 < out.vertex_count < random_cloud.vertex_count
    assert predicate.vertex_mask(out.positions, extra_gate_sets=extra).all()


BASE = dict(r_min=0.3, r_max=1.0, d_min=-0.5, d_max=0.8, y_keep_min=-0.6, y_keep_max=0.6, cos_theta_max=0.0)


@pytest.mark.parametrize(
    "change",
    [
        {"r_max": 1.4},
        {"r_min": 0.1},
        {"d_max": 1.2},
        {"d_min": -0.9},
        {"y_keep_max": 0.9},
        {"y_keep_min": -0.9},
        {"cos_theta_max": -0.5},
    ],
)
def test_widening_never_drops_points(change, random_cloud, z_axis, z_frame):
    narrow = RegionPredicate(CropParameters(**BASE), z_axis, z_frame)
    wide = RegionPredicate(CropParameters(**{**BASE, **change}), z_axis, z_frame)
    assert crop_points(random_cloud, ORIGIN, wide).vertex_count >= \
        crop_points(random_cloud, ORIGIN, narrow).vertex_count


def test_empty_cloud_fails_fast(z_axis, z_frame):
    predicate = RegionPredicate(CropParameters(), z_axis, z_frame)
    with pytest.raises(ValueError, match="no vertices"):
        crop_points(GeometryBuffer(np.empty((0, 3))), ORIGIN, predicate)


def test_nothing_kept_gives_empty_cloud_with_colors(cube_points, z_axis, z_frame):
    predicate = RegionPredicate(CropParameters(r_max=0.5), z_axis, z_frame)
    out = crop_points(cube_points, ORIGIN, predicate, extra_gate_sets=())
    assert out.kind == PrimitiveKind.POINTS
    assert out.positions.shape == (0, 3)
    assert out.colors.shape == (0, 3)
