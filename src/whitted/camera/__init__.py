"""Camera module.

The pinhole camera sits at the world origin looking down -z. Pixel rows map
to +y, so world +y points down the image.
"""

from .pinhole import (
    PinholeCamera,
    get_camera_info,
    get_image_size,
    get_primary_ray,
    primary_ray_direction,
    setup_camera,
)

__all__ = [
    "PinholeCamera",
    "setup_camera",
    "get_primary_ray",
    "primary_ray_direction",
    "get_camera_info",
    "get_image_size",
]
