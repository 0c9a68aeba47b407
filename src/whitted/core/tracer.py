"""Whitted-style tracing engine: shadows, Lambertian shading and recursion.

This module implements the shading core. For every hit it computes a direct
diffuse term from all lights (with shadow rays), then blends it with the
colors seen along the reflected and refracted rays according to the surface:

    Diffusive:   diffuse
    Reflective:  diffuse * (1 - r) + cast(reflected) * r
    Refractive:  diffuse * (1 - t) + (cast(reflected) * R + cast(refracted) * (1 - R)) * t

Recursion stops when the depth reaches the scene's max_recursion_depth; a ray
at that depth, or a ray that escapes the scene, contributes black.

Taichi functions cannot recurse, so cast_ray evaluates the same recursion
tree with an explicit work stack. Each entry is a ray together with the
product of blend weights on the path leading to it and its depth. Since every
blend is linear in the child colors, summing weight * diffuse_weight * diffuse
over all visited hits reproduces the recursive result exactly. Depth-first
order keeps at most one pending sibling per level, so a stack of
MAX_RECURSION_DEPTH + 2 entries never overflows.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from src.whitted.core.tracer import setup_render_target, render_image
    >>> from src.whitted.scene.manager import SceneManager
    >>> scene = SceneManager()
    >>> # ... add materials, primitives, lights, then scene.configure(settings)
    >>> setup_render_target(800, 600)
    >>> render_image()
"""

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

from src.whitted.camera.pinhole import get_image_size, get_primary_ray
from src.whitted.core.color import clamp_color, image_to_rgba8
from src.whitted.core.ray import offset_origin, reflect_ray, reflectance, refract_ray, vec3
from src.whitted.materials.lambertian import lambert_contribution
from src.whitted.materials.material import get_albedo, get_surface, material_color
from src.whitted.materials.surface import SurfaceKind, surface_weights
from src.whitted.scene.intersection import (
    get_material_id,
    surface_normal,
    texture_coords,
    trace,
)
from src.whitted.scene.lights import LightKind, get_light_color, light_sample, num_lights
from src.whitted.scene.settings import (
    MAX_RECURSION_DEPTH,
    get_max_recursion_depth,
    get_reflectance_model,
    get_shadow_bias,
)

# Work stack capacity for cast_ray
STACK_SIZE = MAX_RECURSION_DEPTH + 2

# =============================================================================
# Direct Lighting
# =============================================================================


@ti.func
def shade_diffuse(primitive: ti.i32, hit_point: vec3, normal: vec3) -> vec3:
    """Compute the clamped Lambertian term at a hit from all lights.

    A shadow ray is cast from the biased hit point toward each light.
    Directional lights are blocked by any hit; spherical lights only by a
    hit nearer than the light itself.

    Args:
        primitive: Index of the hit primitive.
        hit_point: The intersection point.
        normal: Outward unit shading normal at the hit.

    Returns:
        The diffuse color, clamped to [0, 1].
    """
    material_id = get_material_id(primitive)
    u, v = texture_coords(primitive, hit_point)
    object_color = material_color(material_id, u, v)
    albedo = get_albedo(material_id)
    shadow_origin = offset_origin(hit_point, normal, get_shadow_bias())

    color = vec3(0.0, 0.0, 0.0)
    for i in range(num_lights[None]):
        kind, direction_to_light, distance_squared, intensity = light_sample(i, hit_point)
        shadow = trace(shadow_origin, direction_to_light)
        if shadow.hit == 1:
            if kind == int(LightKind.DIRECTIONAL):
                intensity = 0.0
            elif shadow.distance < ti.sqrt(distance_squared):
                intensity = 0.0
        color += lambert_contribution(
            object_color,
            get_light_color(i),
            normal,
            direction_to_light,
            intensity,
            albedo,
        )

    return clamp_color(color)


# =============================================================================
# Ray Casting
# =============================================================================


@ti.func
def cast_ray(origin: vec3, direction: vec3, depth: ti.i32) -> vec3:
    """Compute the color seen along a ray.

    Args:
        origin: Ray origin.
        direction: Unit ray direction.
        depth: Recursion depth of this ray (0 for primary rays).

    Returns:
        The unclamped color. Exactly black when depth has reached the
        scene's max_recursion_depth or the ray hits nothing.
    """
    max_depth = get_max_recursion_depth()
    bias = get_shadow_bias()
    model = get_reflectance_model()

    color = vec3(0.0, 0.0, 0.0)

    stack_origins = ti.Matrix.zero(ti.f64, STACK_SIZE, 3)
    stack_directions = ti.Matrix.zero(ti.f64, STACK_SIZE, 3)
    stack_weights = ti.Vector.zero(ti.f64, STACK_SIZE)
    stack_depths = ti.Vector.zero(ti.i32, STACK_SIZE)
    top = 0

    if depth < max_depth:
        for k in ti.static(range(3)):
            stack_origins[0, k] = origin[k]
            stack_directions[0, k] = direction[k]
        stack_weights[0] = 1.0
        stack_depths[0] = depth
        top = 1

    while top > 0:
        top -= 1
        ray_origin = vec3(stack_origins[top, 0], stack_origins[top, 1], stack_origins[top, 2])
        ray_direction = vec3(
            stack_directions[top, 0], stack_directions[top, 1], stack_directions[top, 2]
        )
        weight = stack_weights[top]
        ray_depth = stack_depths[top]

        rec = trace(ray_origin, ray_direction)
        if rec.hit == 1:
            hit_point = ray_origin + ray_direction * rec.distance
            normal = surface_normal(rec.primitive, hit_point)
            diffuse = shade_diffuse(rec.primitive, hit_point, normal)

            kind, reflectivity, transparency, index = get_surface(get_material_id(rec.primitive))
            boundary_reflectance = 0.0
            if kind == int(SurfaceKind.REFRACTIVE):
                boundary_reflectance = reflectance(model, ray_direction, normal, index)
            diffuse_weight, reflected_weight, refracted_weight = surface_weights(
                kind, reflectivity, transparency, boundary_reflectance
            )

            color += weight * diffuse_weight * diffuse

            # Children at max_depth would contribute black
            if ray_depth + 1 < max_depth:
                if reflected_weight != 0.0 and top < STACK_SIZE:
                    child_origin, child_direction = reflect_ray(
                        ray_direction, hit_point, normal, bias
                    )
                    for k in ti.static(range(3)):
                        stack_origins[top, k] = child_origin[k]
                        stack_directions[top, k] = child_direction[k]
                    stack_weights[top] = weight * reflected_weight
                    stack_depths[top] = ray_depth + 1
                    top += 1

                if refracted_weight != 0.0 and top < STACK_SIZE:
                    ok, child_origin, child_direction = refract_ray(
                        ray_direction, hit_point, normal, index, bias
                    )
                    # Total internal reflection leaves the refracted color black
                    if ok == 1:
                        for k in ti.static(range(3)):
                            stack_origins[top, k] = child_origin[k]
                            stack_directions[top, k] = child_direction[k]
                        stack_weights[top] = weight * refracted_weight
                        stack_depths[top] = ray_depth + 1
                        top += 1

    return color


@ti.kernel
def _cast_ray_kernel(origin: vec3, direction: vec3, depth: ti.i32) -> vec3:
    return cast_ray(origin, direction, depth)


@ti.kernel
def _shade_diffuse_kernel(origin: vec3, direction: vec3) -> vec3:
    color = vec3(0.0, 0.0, 0.0)
    rec = trace(origin, direction)
    if rec.hit == 1:
        hit_point = origin + direction * rec.distance
        color = shade_diffuse(rec.primitive, hit_point, surface_normal(rec.primitive, hit_point))
    return color


def trace_color(
    origin: tuple[float, float, float],
    direction: tuple[float, float, float],
    depth: int = 0,
) -> tuple[float, float, float]:
    """Cast a single ray from Python and return its color.

    Args:
        origin: Ray origin.
        direction: Ray direction (normalized here).
        depth: Starting recursion depth.

    Returns:
        Tuple of (R, G, B), unclamped.
    """
    d = np.asarray(direction, dtype=np.float64)
    d = d / np.linalg.norm(d)
    color = _cast_ray_kernel(vec3(*origin), vec3(*d), depth)
    return (float(color[0]), float(color[1]), float(color[2]))


def shade_diffuse_at(
    origin: tuple[float, float, float],
    direction: tuple[float, float, float],
) -> tuple[float, float, float]:
    """Return only the diffuse term at the first hit along a ray.

    Returns black when the ray misses.
    """
    d = np.asarray(direction, dtype=np.float64)
    d = d / np.linalg.norm(d)
    color = _shade_diffuse_kernel(vec3(*origin), vec3(*d))
    return (float(color[0]), float(color[1]), float(color[2]))


# =============================================================================
# Render Target (Image Buffer)
# =============================================================================

# Maximum supported image dimensions (preallocated to avoid kernel recompilation)
MAX_IMAGE_WIDTH = 1600
MAX_IMAGE_HEIGHT = 1200

_image_width = ti.field(dtype=ti.i32, shape=())
_image_height = ti.field(dtype=ti.i32, shape=())

# Color buffer indexed [x, y]
_color_buffer = ti.Vector.field(3, dtype=ti.f32, shape=(MAX_IMAGE_WIDTH, MAX_IMAGE_HEIGHT))

_render_target_initialized = ti.field(dtype=ti.i32, shape=())


def setup_render_target(width: int, height: int) -> None:
    """Initialize the render target.

    Args:
        width: Image width in pixels (max MAX_IMAGE_WIDTH).
        height: Image height in pixels (max MAX_IMAGE_HEIGHT).

    Raises:
        ValueError: If dimensions are not positive or exceed the maximum.
    """
    if width <= 0 or height <= 0:
        raise ValueError(f"Image dimensions must be positive, got {width}x{height}")
    if width > MAX_IMAGE_WIDTH or height > MAX_IMAGE_HEIGHT:
        raise ValueError(
            f"Image dimensions ({width}x{height}) exceed maximum supported "
            f"({MAX_IMAGE_WIDTH}x{MAX_IMAGE_HEIGHT})"
        )

    _image_width[None] = width
    _image_height[None] = height
    _render_target_initialized[None] = 1
    clear_render_target()


def clear_render_target() -> None:
    """Clear the color buffer to black."""
    _color_buffer.fill(0.0)


def release_render_target() -> None:
    """Mark the render target as not set up."""
    _render_target_initialized[None] = 0


def get_image_dimensions() -> tuple[int, int]:
    """Get the current render target dimensions as (width, height)."""
    return int(_image_width[None]), int(_image_height[None])


def _check_render_target_initialized() -> None:
    if _render_target_initialized[None] == 0:
        raise RuntimeError("Render target not set up. Call setup_render_target() first.")


def _check_camera_matches_target() -> None:
    camera_size = get_image_size()
    target_size = get_image_dimensions()
    if camera_size != target_size:
        raise ValueError(
            f"Camera is configured for {camera_size[0]}x{camera_size[1]} but the render "
            f"target is {target_size[0]}x{target_size[1]}"
        )


@ti.kernel
def _render_rows(row_start: ti.i32, row_end: ti.i32, width: ti.i32):
    """Render rows [row_start, row_end) of the image.

    Every pixel is independent, so the outer loop runs in parallel and each
    iteration writes only its own buffer cell.
    """
    for x, y in ti.ndrange(width, (row_start, row_end)):
        ray = get_primary_ray(x, y)
        color = cast_ray(ray.origin, ray.direction, 0)
        _color_buffer[x, y] = ti.cast(color, ti.f32)


@ti.kernel
def _render_single_pixel(pixel_x: ti.i32, pixel_y: ti.i32) -> vec3:
    ray = get_primary_ray(pixel_x, pixel_y)
    return cast_ray(ray.origin, ray.direction, 0)


def render_rows(row_start: int, row_end: int) -> None:
    """Render a band of rows into the color buffer.

    Raises:
        RuntimeError: If the render target has not been set up.
        ValueError: If the camera size differs from the render target size.
    """
    _check_render_target_initialized()
    _check_camera_matches_target()
    width, height = get_image_dimensions()
    row_start = max(0, row_start)
    row_end = min(height, row_end)
    if row_start < row_end:
        _render_rows(row_start, row_end, width)


def render_image() -> None:
    """Render the whole image into the color buffer.

    Raises:
        RuntimeError: If the render target has not been set up.
        ValueError: If the camera size differs from the render target size.
    """
    _, height = get_image_dimensions()
    render_rows(0, height)


def render_pixel(pixel_x: int, pixel_y: int) -> tuple[float, float, float]:
    """Render a single pixel and return its unclamped color.

    Raises:
        RuntimeError: If the render target has not been set up.
        ValueError: If the camera size differs from the render target size.
    """
    _check_render_target_initialized()
    _check_camera_matches_target()
    color = _render_single_pixel(pixel_x, pixel_y)
    return (float(color[0]), float(color[1]), float(color[2]))


def get_image_numpy() -> npt.NDArray[np.float32]:
    """Get the rendered image as a float array of shape (height, width, 3).

    Values are not clamped. Row y of the result is pixel row y.

    Raises:
        RuntimeError: If the render target has not been set up.
    """
    _check_render_target_initialized()
    width, height = get_image_dimensions()
    full_image = _color_buffer.to_numpy()
    image = full_image[:width, :height, :]
    # (width, height, 3) -> (height, width, 3)
    return np.ascontiguousarray(np.transpose(image, (1, 0, 2))).astype(np.float32)


def get_image_rgba() -> npt.NDArray[np.uint8]:
    """Get the rendered image as an opaque 8-bit RGBA raster.

    Raises:
        RuntimeError: If the render target has not been set up.
    """
    return image_to_rgba8(get_image_numpy())
