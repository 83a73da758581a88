"""Geometry preparation shared by the surface and track decoders."""
from .prepare import bounding_box, center_and_scale, face_normals, unroll_faces, vertex_normals

__all__ = [
    'bounding_box',
    'center_and_scale',
    'face_normals',
    'unroll_faces',
    'vertex_normals',
]
