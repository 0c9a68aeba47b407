"""Scene-level primitive storage and nearest-hit queries.

Primitives live in one ordered table with a kind tag per entry, so spheres and
planes share a single index space and the nearest-hit query visits them in
insertion order. Each entry stores:

    - kind: PrimitiveKind.SPHERE or PrimitiveKind.PLANE
    - position: sphere center or plane origin
    - normal: plane normal pointing into the surface (unused by spheres)
    - radius: sphere radius (unused by planes)
    - material_id: index into the material table

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from src.whitted.scene.intersection import add_sphere, add_plane, trace_ray
    >>> add_sphere((0.0, 0.0, -5.0), 1.0, material_id=0)
    >>> trace_ray((0.0, 0.0, 0.0), (0.0, 0.0, -1.0))
    (0, 4.0)
"""

from enum import IntEnum

import taichi as ti
import taichi.math as tm

from src.whitted.core.ray import vec3
from src.whitted.geometry.plane import (
    Plane,
    intersect_plane,
    plane_normal,
    plane_texture_coords,
)
from src.whitted.geometry.sphere import (
    Sphere,
    intersect_sphere,
    sphere_normal,
    sphere_texture_coords,
)


class PrimitiveKind(IntEnum):
    """Tag for the closed set of primitive variants."""

    SPHERE = 0
    PLANE = 1


@ti.dataclass
class SceneHitRecord:
    """Nearest intersection of a ray with the scene.

    Attributes:
        hit: 1 if any primitive was hit, 0 otherwise.
        distance: Distance along the ray to the hit. Only valid if hit == 1.
        primitive: Index of the hit primitive. -1 on a miss.
    """

    hit: ti.i32
    distance: ti.f64
    primitive: ti.i32


# Maximum number of primitives supported in the scene
MAX_PRIMITIVES = 1024

# Primitive storage: Structure of Arrays layout
primitive_kinds = ti.field(dtype=ti.i32, shape=MAX_PRIMITIVES)
primitive_positions = ti.Vector.field(3, dtype=ti.f64, shape=MAX_PRIMITIVES)
primitive_normals = ti.Vector.field(3, dtype=ti.f64, shape=MAX_PRIMITIVES)
primitive_radii = ti.field(dtype=ti.f64, shape=MAX_PRIMITIVES)
primitive_material_ids = ti.field(dtype=ti.i32, shape=MAX_PRIMITIVES)
num_primitives = ti.field(dtype=ti.i32, shape=())


def clear_scene() -> None:
    """Remove all primitives from the scene."""
    num_primitives[None] = 0


def _add_primitive(
    kind: PrimitiveKind,
    position: tuple[float, float, float],
    normal: tuple[float, float, float],
    radius: float,
    material_id: int,
) -> int:
    idx = num_primitives[None]
    if idx >= MAX_PRIMITIVES:
        raise RuntimeError(f"Maximum number of primitives ({MAX_PRIMITIVES}) exceeded")
    primitive_kinds[idx] = int(kind)
    primitive_positions[idx] = [position[0], position[1], position[2]]
    primitive_normals[idx] = [normal[0], normal[1], normal[2]]
    primitive_radii[idx] = radius
    primitive_material_ids[idx] = material_id
    num_primitives[None] = idx + 1
    return idx


def add_sphere(center: tuple[float, float, float], radius: float, material_id: int = 0) -> int:
    """Add a sphere to the scene.

    Args:
        center: The center point of the sphere.
        radius: The radius of the sphere (should be positive).
        material_id: The material ID to associate with this sphere.

    Returns:
        The index of the added primitive.

    Raises:
        RuntimeError: If the maximum number of primitives is exceeded.
    """
    return _add_primitive(PrimitiveKind.SPHERE, center, (0.0, 0.0, 0.0), radius, material_id)


def add_plane(
    origin: tuple[float, float, float],
    normal: tuple[float, float, float],
    material_id: int = 0,
) -> int:
    """Add a one-sided plane to the scene.

    Args:
        origin: A point on the plane.
        normal: Unit normal pointing into the surface, away from the viewer.
        material_id: The material ID to associate with this plane.

    Returns:
        The index of the added primitive.

    Raises:
        RuntimeError: If the maximum number of primitives is exceeded.
    """
    return _add_primitive(PrimitiveKind.PLANE, origin, normal, 0.0, material_id)


def get_primitive_count() -> int:
    """Get the number of primitives in the scene."""
    return int(num_primitives[None])


# =============================================================================
# Per-primitive dispatch
# =============================================================================


@ti.func
def _sphere_at(i: ti.i32) -> Sphere:
    return Sphere(center=primitive_positions[i], radius=primitive_radii[i])


@ti.func
def _plane_at(i: ti.i32) -> Plane:
    return Plane(origin=primitive_positions[i], normal=primitive_normals[i])


@ti.func
def intersect_primitive(i: ti.i32, ray_origin: vec3, ray_direction: vec3):
    """Intersect a ray with primitive i.

    Returns:
        A tuple (hit, distance).
    """
    hit = 0
    distance = 0.0
    if primitive_kinds[i] == int(PrimitiveKind.SPHERE):
        hit, distance = intersect_sphere(ray_origin, ray_direction, _sphere_at(i))
    elif primitive_kinds[i] == int(PrimitiveKind.PLANE):
        hit, distance = intersect_plane(ray_origin, ray_direction, _plane_at(i))
    return hit, distance


@ti.func
def surface_normal(i: ti.i32, hit_point: vec3) -> vec3:
    """Outward unit shading normal of primitive i at a hit point."""
    normal = vec3(0.0, 0.0, 0.0)
    if primitive_kinds[i] == int(PrimitiveKind.SPHERE):
        normal = sphere_normal(_sphere_at(i), hit_point)
    elif primitive_kinds[i] == int(PrimitiveKind.PLANE):
        normal = tm.normalize(plane_normal(_plane_at(i)))
    return normal


@ti.func
def texture_coords(i: ti.i32, hit_point: vec3):
    """Texture coordinates (u, v) of primitive i at a hit point."""
    u = 0.0
    v = 0.0
    if primitive_kinds[i] == int(PrimitiveKind.SPHERE):
        u, v = sphere_texture_coords(_sphere_at(i), hit_point)
    elif primitive_kinds[i] == int(PrimitiveKind.PLANE):
        u, v = plane_texture_coords(_plane_at(i), hit_point)
    return u, v


@ti.func
def get_material_id(i: ti.i32) -> ti.i32:
    return primitive_material_ids[i]


# =============================================================================
# Scene queries
# =============================================================================


@ti.func
def trace(ray_origin: vec3, ray_direction: vec3) -> SceneHitRecord:
    """Find the nearest primitive along a ray.

    Every primitive is tested in table order. Misses and NaN distances are
    discarded, and a later primitive replaces the current best only when it
    is strictly nearer, so ties go to the first primitive.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The unit direction of the ray.

    Returns:
        A SceneHitRecord for the nearest hit, or a miss record.
    """
    closest_hit = 0
    closest_distance = 0.0
    closest_primitive = -1

    for i in range(num_primitives[None]):
        hit, distance = intersect_primitive(i, ray_origin, ray_direction)
        if hit == 1 and not tm.isnan(distance):
            if closest_hit == 0 or distance < closest_distance:
                closest_hit = 1
                closest_distance = distance
                closest_primitive = i

    return SceneHitRecord(hit=closest_hit, distance=closest_distance, primitive=closest_primitive)


@ti.kernel
def _trace_kernel(origin: vec3, direction: vec3) -> vec3:
    rec = trace(origin, direction)
    return vec3(ti.cast(rec.hit, ti.f64), ti.cast(rec.primitive, ti.f64), rec.distance)


def trace_ray(
    origin: tuple[float, float, float],
    direction: tuple[float, float, float],
) -> tuple[int, float] | None:
    """Run the nearest-hit query for a single ray from Python.

    Args:
        origin: Ray origin.
        direction: Ray direction (should be unit length).

    Returns:
        (primitive_index, distance) of the nearest hit, or None on a miss.
    """
    result = _trace_kernel(vec3(*origin), vec3(*direction))
    if result[0] < 0.5:
        return None
    return int(round(result[1])), float(result[2])
