"""Infinite plane primitive with one-sided ray-plane intersection.

A plane is defined by:
- origin: Any point on the plane
- normal: Unit vector pointing *into* the surface

The stored normal faces away from the viewer, so a ray meets the plane only
when it travels along the normal (normal . direction > epsilon). Rays from
behind, and rays nearly parallel to the plane, miss. The shading normal is the
negated stored normal.

Texture coordinates come from an orthonormal in-plane basis built by crossing
the normal with the z axis (or the y axis when the normal is parallel to z).

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from src.whitted.geometry.plane import Plane, intersect_plane
    >>> # Floor below a y-down camera:
    >>> # Plane(origin=vec3(0, 2.5, 0), normal=vec3(0, 1, 0))
"""

import taichi as ti
import taichi.math as tm

from src.whitted.core.ray import vec3

# Minimum normal . direction for a ray to count as hitting the front side
PARALLEL_EPSILON = 1e-6


@ti.dataclass
class Plane:
    """An infinite one-sided plane.

    Attributes:
        origin: A point on the plane (vec3).
        normal: Unit normal pointing into the surface (vec3).
    """

    origin: vec3
    normal: vec3


@ti.func
def intersect_plane(ray_origin: vec3, ray_direction: vec3, plane: Plane):
    """Test for ray-plane intersection.

    Solves (origin + t * direction - plane.origin) . normal = 0 for t.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The unit direction of the ray.
        plane: The plane to test.

    Returns:
        A tuple (hit, distance). hit is 1 when denom > PARALLEL_EPSILON and
        the crossing lies at a non-negative distance.
    """
    denom = tm.dot(plane.normal, ray_direction)

    hit = 0
    distance = 0.0

    if denom > PARALLEL_EPSILON:
        t = tm.dot(plane.origin - ray_origin, plane.normal) / denom
        if t >= 0.0:
            hit = 1
            distance = t

    return hit, distance


@ti.func
def plane_normal(plane: Plane) -> vec3:
    """Outward shading normal: the negated stored normal."""
    return -plane.normal


@ti.func
def plane_texture_coords(plane: Plane, hit_point: vec3):
    """Project a point on the plane onto the plane's in-plane basis.

    Returns:
        A tuple (u, v) of unbounded planar coordinates.
    """
    x_axis = tm.cross(plane.normal, vec3(0.0, 0.0, 1.0))
    if tm.length(x_axis) == 0.0:
        x_axis = tm.cross(plane.normal, vec3(0.0, 1.0, 0.0))
    y_axis = tm.cross(plane.normal, x_axis)

    hit_vec = hit_point - plane.origin
    return tm.dot(hit_vec, x_axis), tm.dot(hit_vec, y_axis)


@ti.func
def make_plane(origin: vec3, normal: vec3) -> Plane:
    """Create a plane from a point and an inward unit normal."""
    return Plane(origin=origin, normal=normal)
