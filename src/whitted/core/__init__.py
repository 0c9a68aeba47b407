"""Core rendering module.

Components:
    ray: Ray data structure, vector utilities, secondary rays and reflectance
    color: Host-side colors and raster conversion
    tracer: Shading engine and render target
    renderer: Band-by-band rendering with progress reporting
"""

from .color import (
    BLACK,
    DARK_BLUE,
    DARK_ORANGE,
    LIGHT_BLUE,
    LIGHT_GREEN,
    MAGENTA,
    RED,
    WHITE,
    YELLOW,
    Color,
    as_rgb,
    clamp_color,
    image_to_rgba8,
)
from .ray import (
    Ray,
    ReflectanceModel,
    cross,
    dot,
    fresnel_reflectance,
    length,
    length_squared,
    make_ray,
    normalize,
    offset_origin,
    ray_at,
    reflect,
    reflect_ray,
    reflectance,
    refract_ray,
    schlick_reflectance,
    vec3,
)

# Note: tracer and renderer are NOT imported here. They declare the render
# target fields and pull in the scene tables. Import them directly:
#   from src.whitted.core.renderer import Renderer

__all__ = [
    # Ray
    "Ray",
    "ReflectanceModel",
    "ray_at",
    "make_ray",
    "vec3",
    "length",
    "length_squared",
    "normalize",
    "dot",
    "cross",
    "offset_origin",
    "reflect",
    "reflect_ray",
    "refract_ray",
    "fresnel_reflectance",
    "schlick_reflectance",
    "reflectance",
    # Color
    "Color",
    "as_rgb",
    "clamp_color",
    "image_to_rgba8",
    "WHITE",
    "BLACK",
    "YELLOW",
    "DARK_ORANGE",
    "RED",
    "LIGHT_GREEN",
    "MAGENTA",
    "DARK_BLUE",
    "LIGHT_BLUE",
]
