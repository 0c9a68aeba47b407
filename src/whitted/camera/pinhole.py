"""Pinhole camera model for primary ray generation.

The camera sits at the world origin looking down -z with no orientation
transform. Pixel (x, y) maps to a point on a sensor at z = -1:

    sensor_x = (2 * (x + 0.5) / width - 1) * aspect_ratio
    sensor_y =  2 * (y + 0.5) / height - 1

and the primary ray direction is normalize(sensor_x, sensor_y, -1). The field
of view is stored with the camera but not applied as an angular scale, so the
framing is a fixed ~90 degrees vertically regardless of the configured value.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from src.whitted.camera.pinhole import PinholeCamera, setup_camera, get_primary_ray
    >>> setup_camera(PinholeCamera(width=800, height=600, fov=90.0))
    >>> # Within a Taichi kernel:
    >>> # ray = get_primary_ray(x, y)
"""

from dataclasses import dataclass

import taichi as ti
import taichi.math as tm

from src.whitted.core.ray import Ray, make_ray, vec3

# =============================================================================
# Camera Data Structures
# =============================================================================


@dataclass
class PinholeCamera:
    """Configuration for the fixed pinhole camera.

    Attributes:
        width: Image width in pixels.
        height: Image height in pixels.
        fov: Field of view in degrees (stored, not applied).
    """

    width: int
    height: int
    fov: float = 90.0

    @property
    def aspect_ratio(self) -> float:
        """Width divided by height."""
        return self.width / self.height


# =============================================================================
# Taichi Fields for Camera State
# =============================================================================

_image_width = ti.field(dtype=ti.i32, shape=())
_image_height = ti.field(dtype=ti.i32, shape=())
_fov = ti.field(dtype=ti.f64, shape=())


def setup_camera(camera: PinholeCamera) -> None:
    """Upload camera state for ray generation.

    Args:
        camera: Camera configuration.

    Raises:
        ValueError: If the image dimensions are not positive.
    """
    if camera.width <= 0 or camera.height <= 0:
        raise ValueError(
            f"Image dimensions must be positive, got {camera.width}x{camera.height}"
        )
    _image_width[None] = camera.width
    _image_height[None] = camera.height
    _fov[None] = camera.fov


# =============================================================================
# Ray Generation
# =============================================================================


@ti.func
def sensor_direction(x: ti.f64, y: ti.f64, width: ti.f64, height: ti.f64) -> vec3:
    """Unit direction through continuous sensor position (x, y).

    Pixel centers are at integer coordinates plus 0.5, so callers pass the
    integer pixel index and this function adds the half-pixel offset.
    """
    aspect_ratio = width / height
    sensor_x = (2.0 * (x + 0.5) / width - 1.0) * aspect_ratio
    sensor_y = 2.0 * (y + 0.5) / height - 1.0
    return tm.normalize(vec3(sensor_x, sensor_y, -1.0))


@ti.func
def get_primary_ray(pixel_x: ti.i32, pixel_y: ti.i32) -> Ray:
    """Generate the primary ray through the center of pixel (x, y).

    Args:
        pixel_x: Pixel column (0 = left).
        pixel_y: Pixel row in the output raster.

    Returns:
        A Ray from the world origin through the pixel center.
    """
    direction = sensor_direction(
        ti.cast(pixel_x, ti.f64),
        ti.cast(pixel_y, ti.f64),
        ti.cast(_image_width[None], ti.f64),
        ti.cast(_image_height[None], ti.f64),
    )
    return make_ray(vec3(0.0, 0.0, 0.0), direction)


@ti.kernel
def _primary_direction_kernel(pixel_x: ti.i32, pixel_y: ti.i32) -> vec3:
    return get_primary_ray(pixel_x, pixel_y).direction


def primary_ray_direction(pixel_x: int, pixel_y: int) -> tuple[float, float, float]:
    """Get the primary ray direction for a pixel from Python."""
    d = _primary_direction_kernel(pixel_x, pixel_y)
    return (float(d[0]), float(d[1]), float(d[2]))


def get_image_size() -> tuple[int, int]:
    """Get the configured image size as (width, height).

    Returns (0, 0) if setup_camera has not been called.
    """
    return int(_image_width[None]), int(_image_height[None])


def get_camera_info() -> dict[str, float]:
    """Get current camera state for debugging.

    Returns:
        Dictionary with width, height, aspect_ratio and fov.
    """
    width, height = get_image_size()
    camera = PinholeCamera(width, height, float(_fov[None]))
    return {
        "width": width,
        "height": height,
        "aspect_ratio": camera.aspect_ratio if height > 0 else 0.0,
        "fov": camera.fov,
    }
