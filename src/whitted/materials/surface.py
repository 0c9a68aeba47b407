"""Surface optical behaviour: diffusive, reflective and refractive.

A surface decides how the color at a hit is assembled from three parts: the
local diffuse term, the color seen along the mirror direction, and the color
seen through the surface. Every surface kind is a fixed linear blend of those
parts:

    Diffusive:   diffuse
    Reflective:  diffuse * (1 - r) + reflected * r
    Refractive:  diffuse * (1 - t) + (reflected * R + refracted * (1 - R)) * t

where r is the reflectivity, t the transparency and R the boundary
reflectance (Fresnel or Schlick). surface_weights returns the three blend
coefficients so the tracing engine can push child rays with their weights
instead of recursing.
"""

from dataclasses import dataclass
from enum import IntEnum

import taichi as ti


class SurfaceKind(IntEnum):
    """Tag for the closed set of surface variants."""

    DIFFUSIVE = 0
    REFLECTIVE = 1
    REFRACTIVE = 2


@dataclass(frozen=True)
class Diffusive:
    """Matte surface: only the diffuse term contributes."""


@dataclass(frozen=True)
class Reflective:
    """Partially mirrored surface.

    Attributes:
        reflectivity: Fraction of the color taken from the mirror direction,
            in [0, 1].
    """

    reflectivity: float


@dataclass(frozen=True)
class Refractive:
    """Transparent surface bending light by Snell's law.

    Attributes:
        transparency: Fraction of the color taken from reflection plus
            transmission, in [0, 1].
        index: Refractive index of the material (> 1.0).
    """

    transparency: float
    index: float


Surface = Diffusive | Reflective | Refractive


def surface_kind(surface: Surface) -> SurfaceKind:
    """Get the tag for a surface variant."""
    if isinstance(surface, Diffusive):
        return SurfaceKind.DIFFUSIVE
    if isinstance(surface, Reflective):
        return SurfaceKind.REFLECTIVE
    if isinstance(surface, Refractive):
        return SurfaceKind.REFRACTIVE
    raise ValueError(f"Unknown surface: {surface!r}")


def validate_surface(surface: Surface) -> None:
    """Check surface parameters.

    Raises:
        ValueError: If reflectivity or transparency is outside [0, 1], or the
            refractive index is not greater than 1.0.
    """
    if isinstance(surface, Reflective):
        if not 0.0 <= surface.reflectivity <= 1.0:
            raise ValueError(f"Reflectivity = {surface.reflectivity} is outside [0, 1]")
    elif isinstance(surface, Refractive):
        if not 0.0 <= surface.transparency <= 1.0:
            raise ValueError(f"Transparency = {surface.transparency} is outside [0, 1]")
        if surface.index <= 1.0:
            raise ValueError(
                f"Refractive index = {surface.index} must be greater than 1.0"
            )
    else:
        surface_kind(surface)


@ti.func
def surface_weights(
    kind: ti.i32,
    reflectivity: ti.f64,
    transparency: ti.f64,
    reflectance: ti.f64,
):
    """Blend coefficients of the diffuse, reflected and refracted colors.

    Args:
        kind: A SurfaceKind value.
        reflectivity: Reflectivity of a reflective surface.
        transparency: Transparency of a refractive surface.
        reflectance: Boundary reflectance R of a refractive surface.

    Returns:
        A tuple (diffuse_weight, reflected_weight, refracted_weight).
    """
    diffuse_weight = 1.0
    reflected_weight = 0.0
    refracted_weight = 0.0

    if kind == int(SurfaceKind.REFLECTIVE):
        diffuse_weight = 1.0 - reflectivity
        reflected_weight = reflectivity
    elif kind == int(SurfaceKind.REFRACTIVE):
        diffuse_weight = 1.0 - transparency
        reflected_weight = transparency * reflectance
        refracted_weight = transparency * (1.0 - reflectance)

    return diffuse_weight, reflected_weight, refracted_weight
