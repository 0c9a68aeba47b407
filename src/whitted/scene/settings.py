"""Render settings shared by the camera and the tracing engine.

RenderSettings is the host-side configuration of a render. apply_settings
validates it and copies the values the kernels need into scalar Taichi
fields, so constants such as the shadow bias are per-scene data rather
than module globals.
"""

from dataclasses import dataclass

import taichi as ti

from src.whitted.core.ray import ReflectanceModel

# Compile-time ceiling on recursion depth (sizes the tracer's work stack)
MAX_RECURSION_DEPTH = 8

# Default self-intersection offset along the surface normal
DEFAULT_SHADOW_BIAS = 1e-6


@dataclass
class RenderSettings:
    """Configuration for a single render.

    Attributes:
        width: Image width in pixels.
        height: Image height in pixels.
        fov: Field of view in degrees. Stored but not applied: primary rays
            always span a fixed ~90 degree frame.
        max_recursion_depth: Number of ray levels traced per pixel. 0 renders
            black, 1 shades primary hits without secondary rays.
        shadow_bias: Offset applied to shadow, reflection and refraction ray
            origins to avoid self-intersection.
        reflectance_model: Reflectance used at refractive boundaries.
    """

    width: int
    height: int
    fov: float = 90.0
    max_recursion_depth: int = 5
    shadow_bias: float = DEFAULT_SHADOW_BIAS
    reflectance_model: ReflectanceModel = ReflectanceModel.FRESNEL

    def validate(self) -> None:
        """Check the settings.

        Raises:
            ValueError: If the image size is not positive, the recursion
                depth is outside [0, MAX_RECURSION_DEPTH], or the shadow bias
                is negative.
        """
        if self.width <= 0 or self.height <= 0:
            raise ValueError(
                f"Image dimensions must be positive, got {self.width}x{self.height}"
            )
        if not 0 <= self.max_recursion_depth <= MAX_RECURSION_DEPTH:
            raise ValueError(
                f"max_recursion_depth = {self.max_recursion_depth} is outside "
                f"[0, {MAX_RECURSION_DEPTH}]"
            )
        if self.shadow_bias < 0.0:
            raise ValueError(f"shadow_bias = {self.shadow_bias} must not be negative")


_max_recursion_depth = ti.field(dtype=ti.i32, shape=())
_shadow_bias = ti.field(dtype=ti.f64, shape=())
_reflectance_model = ti.field(dtype=ti.i32, shape=())


def apply_settings(settings: RenderSettings) -> None:
    """Validate settings and upload the kernel-visible values.

    Raises:
        ValueError: If the settings are invalid.
    """
    settings.validate()
    _max_recursion_depth[None] = settings.max_recursion_depth
    _shadow_bias[None] = settings.shadow_bias
    _reflectance_model[None] = int(settings.reflectance_model)


def reset_settings() -> None:
    """Restore default kernel-visible settings."""
    _max_recursion_depth[None] = RenderSettings.max_recursion_depth
    _shadow_bias[None] = DEFAULT_SHADOW_BIAS
    _reflectance_model[None] = int(ReflectanceModel.FRESNEL)


@ti.func
def get_max_recursion_depth() -> ti.i32:
    return _max_recursion_depth[None]


@ti.func
def get_shadow_bias() -> ti.f64:
    return _shadow_bias[None]


@ti.func
def get_reflectance_model() -> ti.i32:
    return _reflectance_model[None]
