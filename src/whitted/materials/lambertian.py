"""Lambertian diffuse reflection.

The Lambertian BRDF is constant over all directions:

    f_r = albedo / pi

A light arriving from direction l at a surface with normal n contributes

    object_color * light_color * (n . l) * intensity * albedo / pi

The cosine is used as computed. It is not clamped to zero, so a light behind
the surface subtracts from the sum. The accumulated diffuse term is clamped
to [0, 1] once all lights are summed.
"""

import taichi as ti
import taichi.math as tm

from src.whitted.core.ray import vec3


@ti.func
def eval_lambertian(albedo: ti.f64) -> ti.f64:
    """Evaluate the Lambertian BRDF: albedo / pi."""
    return albedo / tm.pi


@ti.func
def lambert_contribution(
    object_color: vec3,
    light_color: vec3,
    normal: vec3,
    direction_to_light: vec3,
    intensity: ti.f64,
    albedo: ti.f64,
) -> vec3:
    """Diffuse color contributed by a single light.

    Args:
        object_color: Surface color at the hit point.
        light_color: Color of the light.
        normal: Outward shading normal (unit length).
        direction_to_light: Unit direction from the hit point to the light.
        intensity: Light intensity reaching the point (0 when shadowed).
        albedo: Diffuse reflectance of the material.

    Returns:
        The unclamped RGB contribution.
    """
    light_power = tm.dot(normal, direction_to_light) * intensity
    return object_color * light_color * light_power * eval_lambertian(albedo)
