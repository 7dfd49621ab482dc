"""
Crop Pipeline
=============
Runs the whole crop for one decoded geometry.

Data flow:
    geometry -> bounding sphere -> axis estimate -> azimuth frame
             -> CropParameters -> RegionPredicate -> mesh or point cropper

Everything is derived from the input bounding sphere, so the same profile
works for scans of any size.
"""
from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Optional

from scancrop.config import CropSettings
from scancrop.crop.axis import AzimuthFrame, azimuth_basis, estimate_axis
from scancrop.crop.mesh_cropper import crop_mesh
from scancrop.crop.parameters import CropParameters
from scancrop.crop.point_cropper import crop_points
from scancrop.crop.region import RegionPredicate
from scancrop.model.geometry_primitives import BoundingSphere, GeometryBuffer, Vector

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CropResult:
    """Cropped geometry together with the intermediate values that produced it."""
    geometry: GeometryBuffer
    bounding_sphere: BoundingSphere
    axis: Vector
    frame: AzimuthFrame
    parameters: CropParameters


def crop_geometry(
    geometry: GeometryBuffer,
    settings: Optional[CropSettings] = None,
    reference_direction: Optional[Vector] = None,
) -> CropResult:
    """
    Crop a mesh or point cloud to the region described by `settings`.

    Args:
        geometry: Decoded input. Triangle buffers go through the mesh cropper,
            point buffers through the point cropper.
        settings: Dimensionless crop profile. Defaults to `CropSettings()`.
        reference_direction: Seeds the azimuth frame (e.g. the viewer's right
            vector). Defaults to `settings.reference_direction`.

    Returns:
        A CropResult holding the new geometry.

    Raises:
        ValueError: If the geometry has no vertices.
    """
    settings = settings or CropSettings()
    if geometry.vertex_count == 0:
        raise ValueError("Cannot crop geometry without vertices.")

    source = geometry.to_non_indexed() if geometry.has_faces else geometry
    sphere = geometry.compute_bounding_sphere()
    logger.info(f"Cropping {geometry!r}, bounding radius {sphere.radius:.4g}.")

    params = CropParameters.derive(sphere.radius, settings)
    if params.is_degenerate:
        logger.warning("Crop parameter ranges are inverted, the region rejects everything.")

    axis = estimate_axis(
        source.positions,
        sphere.center,
        params.r_min,
        params.r_max,
        default_axis=Vector(*settings.default_axis),
    )
    if reference_direction is None:
        reference_direction = Vector(*settings.reference_direction)
    frame = azimuth_basis(axis, reference_direction)

    predicate = RegionPredicate(params, axis, frame)
    if geometry.has_faces:
        cropped = crop_mesh(source, sphere.center, predicate)
    else:
        cropped = crop_points(source, sphere.center, predicate, bounding_radius=sphere.radius)

    return CropResult(
        geometry=cropped,
        bounding_sphere=sphere,
        axis=axis,
        frame=frame,
        parameters=params,
    )
