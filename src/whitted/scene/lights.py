"""Light sources: directional and spherical (point) lights.

Lights are stored in an ordered table with a kind tag per entry:

    - Directional: a direction the light travels in, plus color and intensity.
      No falloff; occluded by any primitive along the shadow ray.
    - Spherical: a position, plus color and intensity. Intensity falls off as
      1 / (4 * pi * d^2); occluded only by primitives nearer than the light.

light_sample resolves a light for a given hit point into the direction
toward it, the distance to it and its unshadowed intensity. Shadow testing
itself lives in the tracing engine.
"""

import math
from dataclasses import dataclass
from enum import IntEnum

import taichi as ti
import taichi.math as tm

from src.whitted.core.color import Color, as_rgb
from src.whitted.core.ray import vec3


class LightKind(IntEnum):
    """Tag for the closed set of light variants."""

    DIRECTIONAL = 0
    SPHERICAL = 1


@dataclass(frozen=True)
class DirectionalLight:
    """Light arriving from infinitely far away along a fixed direction.

    Attributes:
        direction: Direction the light travels in. Normalized on upload.
        color: Light color.
        intensity: Light intensity (non-negative).
    """

    direction: tuple[float, float, float]
    color: Color | tuple[float, float, float]
    intensity: float


@dataclass(frozen=True)
class SphericalLight:
    """Point light radiating equally in all directions.

    Attributes:
        position: Light position in world space.
        color: Light color.
        intensity: Total emitted intensity (non-negative).
    """

    position: tuple[float, float, float]
    color: Color | tuple[float, float, float]
    intensity: float


Light = DirectionalLight | SphericalLight


# Maximum number of lights in the scene
MAX_LIGHTS = 64

light_kinds = ti.field(dtype=ti.i32, shape=MAX_LIGHTS)
light_vectors = ti.Vector.field(3, dtype=ti.f64, shape=MAX_LIGHTS)  # direction or position
light_colors = ti.Vector.field(3, dtype=ti.f64, shape=MAX_LIGHTS)
light_intensities = ti.field(dtype=ti.f64, shape=MAX_LIGHTS)
num_lights = ti.field(dtype=ti.i32, shape=())


def clear_lights() -> None:
    """Remove all lights from the scene."""
    num_lights[None] = 0


def validate_light(light: Light) -> None:
    """Check a light before it is written to the table.

    Raises:
        ValueError: If the intensity is negative, a directional light has a
            zero-length direction, or the light type is unknown.
    """
    if not isinstance(light, (DirectionalLight, SphericalLight)):
        raise ValueError(f"Unknown light: {light!r}")
    if light.intensity < 0.0:
        raise ValueError(f"Light intensity = {light.intensity} must not be negative")
    if isinstance(light, DirectionalLight) and not any(c != 0.0 for c in light.direction):
        raise ValueError("Directional light direction must not be zero-length")


def add_light(light: Light) -> int:
    """Validate a light and add it to the light table.

    Directional light directions are normalized before upload.

    Returns:
        The index of the added light.

    Raises:
        ValueError: If the light is invalid.
        RuntimeError: If the maximum number of lights is exceeded.
    """
    validate_light(light)

    if isinstance(light, DirectionalLight):
        kind = LightKind.DIRECTIONAL
        norm = math.sqrt(sum(c * c for c in light.direction))
        vector = [c / norm for c in light.direction]
    else:
        kind = LightKind.SPHERICAL
        vector = [float(c) for c in light.position]

    idx = num_lights[None]
    if idx >= MAX_LIGHTS:
        raise RuntimeError(f"Maximum number of lights ({MAX_LIGHTS}) exceeded")

    light_kinds[idx] = int(kind)
    light_vectors[idx] = vector
    light_colors[idx] = list(as_rgb(light.color))
    light_intensities[idx] = light.intensity
    num_lights[None] = idx + 1
    return idx


def get_light_count() -> int:
    """Get the number of lights in the scene."""
    return int(num_lights[None])


@ti.func
def get_light_color(i: ti.i32) -> vec3:
    return light_colors[i]


@ti.func
def light_sample(i: ti.i32, hit_point: vec3):
    """Resolve light i as seen from a hit point.

    Args:
        i: Light index.
        hit_point: The shaded point.

    Returns:
        A tuple (kind, direction_to_light, distance_squared, intensity).
        distance_squared is 0 for directional lights. intensity is the
        unshadowed intensity arriving at the point.
    """
    kind = light_kinds[i]
    direction_to_light = -light_vectors[i]
    distance_squared = 0.0
    intensity = light_intensities[i]

    if kind == int(LightKind.SPHERICAL):
        to_light = light_vectors[i] - hit_point
        distance_squared = tm.dot(to_light, to_light)
        direction_to_light = tm.normalize(to_light)
        intensity = light_intensities[i] / (4.0 * tm.pi * distance_squared)

    return kind, direction_to_light, distance_squared, intensity
