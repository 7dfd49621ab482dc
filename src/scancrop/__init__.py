"""
Spatial region crop for 3D scans (triangle meshes and point clouds).
"""
from scancrop.config import CropSettings, load_crop_settings, save_crop_settings
from scancrop.crop.axis import AzimuthFrame, azimuth_basis, estimate_axis
from scancrop.crop.mesh_cropper import crop_mesh
from scancrop.crop.parameters import AzimuthGate, CropParameters, GateSet
from scancrop.crop.pipeline import CropResult, crop_geometry
from scancrop.crop.point_cropper import crop_points
from scancrop.crop.region import RegionPredicate
from scancrop.model.geometry_primitives import BoundingSphere, GeometryBuffer, PrimitiveKind, Vector

__all__ = [
    "AzimuthFrame",
    "AzimuthGate",
    "BoundingSphere",
    "CropParameters",
    "CropResult",
    "CropSettings",
    "GateSet",
    "GeometryBuffer",
    "PrimitiveKind",
    "RegionPredicate",
    "Vector",
    "azimuth_basis",
    "crop_geometry",
    "crop_mesh",
    "crop_points",
    "estimate_axis",
    "load_crop_settings",
    "save_crop_settings",
]
