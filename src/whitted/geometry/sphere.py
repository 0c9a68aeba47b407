"""Sphere primitive: ray-sphere intersection, normals and texture mapping.

The intersection uses the geometric (projection) form rather than the
quadratic formula:

    l   = center - ray_origin
    adj = l . direction             (projection of l onto the ray)
    d2  = l . l - adj^2             (squared distance from center to the ray)

If d2 > radius^2 the ray misses. Otherwise the two crossings are at
adj -/+ sqrt(radius^2 - d2). A camera inside the sphere sees only the far
crossing, so exactly one negative root still yields a hit.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from src.whitted.geometry.sphere import Sphere, intersect_sphere
    >>> # Use intersect_sphere within a Taichi kernel
"""

import taichi as ti
import taichi.math as tm

from src.whitted.core.ray import vec3


@ti.dataclass
class Sphere:
    """A sphere defined by center point and radius.

    Attributes:
        center: The center point of the sphere (vec3).
        radius: The radius of the sphere (positive float).
    """

    center: vec3
    radius: ti.f64


@ti.func
def intersect_sphere(ray_origin: vec3, ray_direction: vec3, sphere: Sphere):
    """Test for ray-sphere intersection.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The unit direction of the ray.
        sphere: The sphere to test.

    Returns:
        A tuple (hit, distance). hit is 1 when the ray meets the sphere at a
        non-negative distance; distance is then the nearest such crossing.
    """
    l = sphere.center - ray_origin
    adj = tm.dot(l, ray_direction)
    d2 = tm.dot(l, l) - adj * adj
    radius2 = sphere.radius * sphere.radius

    hit = 0
    distance = 0.0

    if d2 <= radius2:
        inside = ti.sqrt(radius2 - d2)
        t0 = adj - inside
        t1 = adj + inside

        if t0 >= 0.0 and t1 >= 0.0:
            hit = 1
            distance = tm.min(t0, t1)
        elif t0 >= 0.0:
            hit = 1
            distance = t0
        elif t1 >= 0.0:
            # Origin inside the sphere
            hit = 1
            distance = t1

    return hit, distance


@ti.func
def sphere_normal(sphere: Sphere, hit_point: vec3) -> vec3:
    """Outward unit normal at a point on the sphere."""
    return tm.normalize(hit_point - sphere.center)


@ti.func
def sphere_texture_coords(sphere: Sphere, hit_point: vec3):
    """Map a point on the sphere to spherical texture coordinates.

    Longitude comes from atan2(z, x) and colatitude from acos(y / r), both
    normalized to [0, 1].

    Returns:
        A tuple (u, v).
    """
    hit_vec = hit_point - sphere.center
    u = (1.0 + ti.atan2(hit_vec.z, hit_vec.x) / tm.pi) * 0.5
    v = ti.acos(tm.clamp(hit_vec.y / sphere.radius, -1.0, 1.0)) / tm.pi
    return u, v


@ti.func
def make_sphere(center: vec3, radius: ti.f64) -> Sphere:
    """Create a sphere from center and radius."""
    return Sphere(center=center, radius=radius)
