"""Materials module.

Components:
    texture: Packed RGBA8 texture pool with wrapped nearest-texel lookup
    surface: Diffusive, reflective and refractive surface descriptions
    material: Material table (coloration, albedo, surface)
    lambertian: Lambertian diffuse term

A material's color is either solid or sampled from a texture at the hit
point's texture coordinates. Its surface decides how energy is split between
the diffuse term, the reflected ray and the refracted ray.
"""

from .lambertian import eval_lambertian, lambert_contribution
from .material import (
    MAX_MATERIALS,
    Coloration,
    ColorationKind,
    Material,
    SolidColor,
    Texture,
    add_material,
    clear_materials,
    get_albedo,
    get_material_count,
    get_surface,
    material_color,
    validate_material,
)
from .surface import (
    Diffusive,
    Reflective,
    Refractive,
    Surface,
    SurfaceKind,
    surface_kind,
    surface_weights,
    validate_surface,
)
from .texture import (
    MAX_TEXTURES,
    add_texture,
    checkerboard_texture,
    clear_textures,
    get_texture_count,
    get_texture_size,
    load_texture,
    sample_texture,
)

__all__ = [
    # Lambertian
    "eval_lambertian",
    "lambert_contribution",
    # Material table
    "Material",
    "SolidColor",
    "Texture",
    "Coloration",
    "ColorationKind",
    "MAX_MATERIALS",
    "add_material",
    "clear_materials",
    "get_material_count",
    "validate_material",
    "get_albedo",
    "get_surface",
    "material_color",
    # Surfaces
    "Diffusive",
    "Reflective",
    "Refractive",
    "Surface",
    "SurfaceKind",
    "surface_kind",
    "surface_weights",
    "validate_surface",
    # Textures
    "MAX_TEXTURES",
    "add_texture",
    "checkerboard_texture",
    "clear_textures",
    "get_texture_count",
    "get_texture_size",
    "load_texture",
    "sample_texture",
]
