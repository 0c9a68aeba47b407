"""Ray data structure, vector utilities and ray transforms.

This module provides the Ray dataclass, the vector helpers used throughout the
tracer, and the secondary-ray constructions used by the shading engine:
reflection, Snell's-law refraction, self-intersection bias, and the two
reflectance models (full Fresnel and Schlick's approximation).

All math is double precision. The module defines its own ``vec3`` type so the
precision does not depend on the ``default_fp`` passed to ``ti.init``.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from src.whitted.core.ray import Ray, ray_at, vec3
    >>> # Within a Taichi kernel:
    >>> # ray = Ray(origin=vec3(0.0, 0.0, 0.0), direction=vec3(0.0, 0.0, -1.0))
    >>> # point = ray_at(ray, 5.0)
"""

from enum import IntEnum

import taichi as ti
import taichi.math as tm

# Double precision 3-vector used for points, directions and colors
vec3 = ti.types.vector(3, ti.f64)


class ReflectanceModel(IntEnum):
    """Reflectance model used to split energy at refractive boundaries.

    FRESNEL is the primary model. SCHLICK is the cheaper approximation and is
    selected once per render through the scene settings.
    """

    FRESNEL = 0
    SCHLICK = 1


@ti.dataclass
class Ray:
    """A ray with an origin point and a unit direction.

    Attributes:
        origin: The starting point of the ray (vec3).
        direction: The direction of the ray (vec3). Expected to be unit length.
    """

    origin: vec3
    direction: vec3


@ti.func
def ray_at(ray: Ray, t: ti.f64) -> vec3:
    """Compute the point along the ray at distance t.

    Args:
        ray: The ray to evaluate.
        t: The distance along the ray.

    Returns:
        The point ray.origin + t * ray.direction.
    """
    return ray.origin + t * ray.direction


@ti.func
def make_ray(origin: vec3, direction: vec3) -> Ray:
    """Create a ray from origin and direction."""
    return Ray(origin=origin, direction=direction)


# =============================================================================
# Vector Utility Functions
# =============================================================================


@ti.func
def length(v: vec3) -> ti.f64:
    """Compute the Euclidean length of a vector."""
    return tm.length(v)


@ti.func
def length_squared(v: vec3) -> ti.f64:
    """Compute the squared length of a vector.

    Cheaper than length() when only comparing magnitudes.
    """
    return tm.dot(v, v)


@ti.func
def normalize(v: vec3) -> vec3:
    """Normalize a vector to unit length.

    A zero-length input yields NaN components. Callers must avoid it.
    """
    return v / tm.length(v)


@ti.func
def dot(a: vec3, b: vec3) -> ti.f64:
    """Compute the dot product a . b."""
    return tm.dot(a, b)


@ti.func
def cross(a: vec3, b: vec3) -> vec3:
    """Compute the cross product a x b."""
    return tm.cross(a, b)


# =============================================================================
# Secondary Ray Construction
# =============================================================================


@ti.func
def offset_origin(point: vec3, normal: vec3, bias: ti.f64) -> vec3:
    """Push a hit point off the surface along the normal.

    Args:
        point: The intersection point.
        normal: The outward shading normal (unit length).
        bias: Offset distance. Negative values push into the surface.

    Returns:
        The biased origin point + normal * bias.
    """
    return point + normal * bias


@ti.func
def reflect(incident: vec3, normal: vec3) -> vec3:
    """Reflect an incident direction about a normal.

    Args:
        incident: The incoming direction (pointing toward the surface).
        normal: The surface normal (unit length).

    Returns:
        incident - 2 * (incident . normal) * normal.
    """
    return incident - 2.0 * tm.dot(incident, normal) * normal


@ti.func
def reflect_ray(direction: vec3, hit_point: vec3, normal: vec3, bias: ti.f64):
    """Build the mirror-reflected ray leaving a hit point.

    The origin is offset along the normal on the side the ray arrived from,
    so internal reflections inside a refractive sphere stay inside it.

    Args:
        direction: The incoming ray direction.
        hit_point: The intersection point.
        normal: The outward shading normal at the hit point.
        bias: Self-intersection offset along the normal.

    Returns:
        A tuple (origin, direction) of the reflected ray.
    """
    side = normal
    if tm.dot(direction, normal) > 0.0:
        side = -normal
    return offset_origin(hit_point, side, bias), reflect(direction, normal)


@ti.func
def incidence_terms(direction: vec3, normal: vec3, index: ti.f64):
    """Compute the cosine of incidence and the media indices for a boundary.

    The side of the surface the ray arrives from is decided by the sign of
    -normal . direction. A negative value means the ray is leaving the
    medium, so the cosine is negated and the indices are swapped.

    Args:
        direction: The incoming ray direction (unit length).
        normal: The outward surface normal (unit length).
        index: Refractive index of the medium behind the surface.

    Returns:
        A tuple (cos_i, n1, n2) with cos_i >= 0, n1 the index of the medium
        the ray travels in and n2 the index of the medium it enters.
    """
    cos_i = -tm.dot(direction, normal)
    n1 = 1.0
    n2 = index
    if cos_i < 0.0:
        cos_i = -cos_i
        n1 = index
        n2 = 1.0
    return cos_i, n1, n2


@ti.func
def refract_ray(
    direction: vec3,
    hit_point: vec3,
    normal: vec3,
    index: ti.f64,
    bias: ti.f64,
):
    """Build the refracted ray through a boundary using Snell's law.

    When the ray is leaving the medium the normal is flipped and the index
    ratio swapped. The transmitted direction is assembled from a component
    along the flipped normal scaled by cos(theta_t) and an in-plane tangent
    component scaled by sin(theta_t). The new origin is biased against the
    (possibly flipped) normal so the ray starts on the far side.

    Args:
        direction: The incoming ray direction (unit length).
        hit_point: The intersection point.
        normal: The outward shading normal (unit length).
        index: Refractive index of the material (> 1).
        bias: Self-intersection offset.

    Returns:
        A tuple (ok, origin, direction). ok is 0 on total internal reflection,
        in which case origin and direction are meaningless.
    """
    n = normal
    cos_i = -tm.dot(normal, direction)
    n1 = 1.0
    n2 = index
    if cos_i < 0.0:
        # Leaving the medium
        n = -normal
        n1 = index
        n2 = 1.0
        cos_i = -cos_i

    sin_i = ti.sqrt(tm.max(0.0, 1.0 - cos_i * cos_i))
    sin_t = n1 / n2 * sin_i

    ok = 0
    origin = hit_point
    refracted = vec3(0.0, 0.0, 0.0)

    if sin_t * sin_t <= 1.0:
        ok = 1
        cos_t = ti.sqrt(1.0 - sin_t * sin_t)
        inward = -n
        tangent = direction - inward * cos_i
        tangent_length = tm.length(tangent)
        refracted = inward * cos_t
        # Normal incidence has no tangent component
        if tangent_length > 1e-12:
            refracted += tangent / tangent_length * sin_t
        origin = offset_origin(hit_point, n, -bias)

    return ok, origin, refracted


# =============================================================================
# Reflectance
# =============================================================================


@ti.func
def fresnel_reflectance(cos_i: ti.f64, n1: ti.f64, n2: ti.f64) -> ti.f64:
    """Compute the effective reflection coefficient from the Fresnel equations.

    Averages the s- and p-polarised reflectances for unpolarised light.
    Returns 1.0 past the critical angle (total internal reflection).

    Args:
        cos_i: Cosine of the incidence angle (>= 0).
        n1: Index of the medium the ray travels in.
        n2: Index of the medium the ray enters.

    Returns:
        The reflectance R in [0, 1].
    """
    sin_i = ti.sqrt(tm.max(0.0, 1.0 - cos_i * cos_i))
    sin_t = n1 / n2 * sin_i

    result = 1.0
    if ti.abs(sin_t) <= 1.0:
        cos_t = ti.sqrt(1.0 - sin_t * sin_t)
        r_s = (n1 * cos_i - n2 * cos_t) / (n1 * cos_i + n2 * cos_t)
        r_p = (n1 * cos_t - n2 * cos_i) / (n1 * cos_t + n2 * cos_i)
        result = 0.5 * (r_s * r_s + r_p * r_p)
    return result


@ti.func
def schlick_reflectance(cos_i: ti.f64, n1: ti.f64, n2: ti.f64) -> ti.f64:
    """Compute reflectance with Schlick's approximation.

    R(theta) = R0 + (1 - R0) * (1 - cos(theta))^5, R0 = ((n1 - n2) / (n1 + n2))^2

    Args:
        cos_i: Cosine of the incidence angle (>= 0).
        n1: Index of the medium the ray travels in.
        n2: Index of the medium the ray enters.

    Returns:
        The approximate reflectance.
    """
    r0 = (n1 - n2) / (n1 + n2)
    r0 = r0 * r0
    return r0 + (1.0 - r0) * ((1.0 - cos_i) ** 5)


@ti.func
def reflectance(model: ti.i32, direction: vec3, normal: vec3, index: ti.f64) -> ti.f64:
    """Evaluate the configured reflectance model for a refractive hit.

    Args:
        model: A ReflectanceModel value.
        direction: The incoming ray direction.
        normal: The outward shading normal.
        index: Refractive index of the material.

    Returns:
        The fraction of energy reflected at the boundary.
    """
    cos_i, n1, n2 = incidence_terms(direction, normal, index)
    result = 0.0
    if model == int(ReflectanceModel.SCHLICK):
        result = schlick_reflectance(cos_i, n1, n2)
    else:
        result = fresnel_reflectance(cos_i, n1, n2)
    return result
