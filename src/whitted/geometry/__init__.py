"""Geometry module for shape primitives.

Components:
    sphere: Sphere with nearest-hit intersection and spherical texture coordinates
    plane: One-sided infinite plane with planar texture coordinates

All intersection routines are Taichi functions and return (hit, distance).
"""

from .plane import Plane, intersect_plane, make_plane, plane_normal, plane_texture_coords
from .sphere import Sphere, intersect_sphere, make_sphere, sphere_normal, sphere_texture_coords

__all__ = [
    "Sphere",
    "intersect_sphere",
    "make_sphere",
    "sphere_normal",
    "sphere_texture_coords",
    "Plane",
    "intersect_plane",
    "make_plane",
    "plane_normal",
    "plane_texture_coords",
]
