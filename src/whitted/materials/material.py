"""Material model and material table.

A material combines three things:
    - coloration: a solid color or a tiled texture lookup
    - albedo: diffuse reflectance used by the Lambertian term
    - surface: diffusive, reflective or refractive behaviour

Host code describes materials with small frozen dataclasses (SolidColor,
Texture, and the surface variants from surface.py). add_material validates a
Material and writes it into the Structure-of-Arrays table below, where kernels
read it by material ID.

Example:
    >>> from src.whitted.core.color import MAGENTA
    >>> from src.whitted.materials.material import Material, SolidColor, add_material
    >>> from src.whitted.materials.surface import Reflective
    >>> mat_id = add_material(Material(SolidColor(MAGENTA), 0.8, Reflective(0.3)))
"""

from dataclasses import dataclass, field
from enum import IntEnum

import taichi as ti

from src.whitted.core.color import Color, as_rgb
from src.whitted.core.ray import vec3
from src.whitted.materials.surface import (
    Diffusive,
    Reflective,
    Refractive,
    Surface,
    surface_kind,
    validate_surface,
)
from src.whitted.materials.texture import get_texture_count, sample_texture


class ColorationKind(IntEnum):
    """Tag for the closed set of coloration variants."""

    SOLID = 0
    TEXTURE = 1


@dataclass(frozen=True)
class SolidColor:
    """A flat color.

    Attributes:
        color: The surface color as a Color or (R, G, B) tuple.
    """

    color: Color | tuple[float, float, float]


@dataclass(frozen=True)
class Texture:
    """A tiled texture lookup.

    Attributes:
        texture_id: ID returned by add_texture.
        scale: Tiling scale applied to texture coordinates.
        offset: Offset added to texture coordinates after scaling.
    """

    texture_id: int
    scale: float = 1.0
    offset: float = 0.0


Coloration = SolidColor | Texture


@dataclass(frozen=True)
class Material:
    """Surface appearance and optical behaviour of a primitive.

    Attributes:
        coloration: Solid color or texture.
        albedo: Diffuse reflectance in (0, 1].
        surface: Diffusive, Reflective or Refractive.
    """

    coloration: Coloration
    albedo: float
    surface: Surface = field(default_factory=Diffusive)


# Maximum number of materials in the scene
MAX_MATERIALS = 256

# Coloration
material_coloration_kinds = ti.field(dtype=ti.i32, shape=MAX_MATERIALS)
material_colors = ti.Vector.field(3, dtype=ti.f64, shape=MAX_MATERIALS)
material_texture_ids = ti.field(dtype=ti.i32, shape=MAX_MATERIALS)
material_texture_scales = ti.field(dtype=ti.f64, shape=MAX_MATERIALS)
material_texture_offsets = ti.field(dtype=ti.f64, shape=MAX_MATERIALS)

# Albedo and surface
material_albedos = ti.field(dtype=ti.f64, shape=MAX_MATERIALS)
material_surface_kinds = ti.field(dtype=ti.i32, shape=MAX_MATERIALS)
material_reflectivities = ti.field(dtype=ti.f64, shape=MAX_MATERIALS)
material_transparencies = ti.field(dtype=ti.f64, shape=MAX_MATERIALS)
material_indices = ti.field(dtype=ti.f64, shape=MAX_MATERIALS)

num_materials = ti.field(dtype=ti.i32, shape=())


def clear_materials() -> None:
    """Remove all materials from the table."""
    num_materials[None] = 0


def validate_material(material: Material) -> None:
    """Check a material before it is written to the table.

    Raises:
        ValueError: If the albedo is outside (0, 1], the surface parameters
            are invalid, the texture ID is unknown, or the texture scale is
            negative.
    """
    if not 0.0 < material.albedo <= 1.0:
        raise ValueError(f"Albedo = {material.albedo} is outside (0, 1]")

    coloration = material.coloration
    if isinstance(coloration, Texture):
        if not 0 <= coloration.texture_id < get_texture_count():
            raise ValueError(f"Invalid texture_id: {coloration.texture_id}")
        if coloration.scale < 0.0:
            raise ValueError(f"Texture scale = {coloration.scale} must not be negative")
    elif not isinstance(coloration, SolidColor):
        raise ValueError(f"Unknown coloration: {coloration!r}")

    validate_surface(material.surface)


def add_material(material: Material) -> int:
    """Validate a material and add it to the material table.

    Args:
        material: The material to add.

    Returns:
        The material ID.

    Raises:
        ValueError: If the material is invalid.
        RuntimeError: If the maximum number of materials is exceeded.
    """
    validate_material(material)

    idx = num_materials[None]
    if idx >= MAX_MATERIALS:
        raise RuntimeError(f"Maximum number of materials ({MAX_MATERIALS}) exceeded")

    coloration = material.coloration
    if isinstance(coloration, Texture):
        material_coloration_kinds[idx] = int(ColorationKind.TEXTURE)
        material_colors[idx] = [0.0, 0.0, 0.0]
        material_texture_ids[idx] = coloration.texture_id
        material_texture_scales[idx] = coloration.scale
        material_texture_offsets[idx] = coloration.offset
    else:
        material_coloration_kinds[idx] = int(ColorationKind.SOLID)
        material_colors[idx] = list(as_rgb(coloration.color))
        material_texture_ids[idx] = -1
        material_texture_scales[idx] = 1.0
        material_texture_offsets[idx] = 0.0

    surface = material.surface
    material_albedos[idx] = material.albedo
    material_surface_kinds[idx] = int(surface_kind(surface))
    material_reflectivities[idx] = surface.reflectivity if isinstance(surface, Reflective) else 0.0
    material_transparencies[idx] = surface.transparency if isinstance(surface, Refractive) else 0.0
    material_indices[idx] = surface.index if isinstance(surface, Refractive) else 1.0

    num_materials[None] = idx + 1
    return idx


def get_material_count() -> int:
    """Get the number of materials in the table."""
    return int(num_materials[None])


# =============================================================================
# Kernel-side accessors
# =============================================================================


@ti.func
def get_albedo(material_id: ti.i32) -> ti.f64:
    return material_albedos[material_id]


@ti.func
def get_surface(material_id: ti.i32):
    """Get the surface parameters of a material.

    Returns:
        A tuple (kind, reflectivity, transparency, index).
    """
    return (
        material_surface_kinds[material_id],
        material_reflectivities[material_id],
        material_transparencies[material_id],
        material_indices[material_id],
    )


@ti.func
def material_color(material_id: ti.i32, u: ti.f64, v: ti.f64) -> vec3:
    """Resolve the surface color of a material at texture coordinates (u, v).

    Solid materials ignore the coordinates.
    """
    color = material_colors[material_id]
    if material_coloration_kinds[material_id] == int(ColorationKind.TEXTURE):
        color = sample_texture(
            material_texture_ids[material_id],
            u,
            v,
            material_texture_scales[material_id],
            material_texture_offsets[material_id],
        )
    return color
