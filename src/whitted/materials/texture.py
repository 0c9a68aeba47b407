"""Texture storage and tiled texture lookup.

Textures are pre-decoded RGBA8 images. They are packed row-major into a single
texel pool so that any number of differently sized textures can live in one
Taichi field:

    texel(texture, x, y) = texture_texels[texture_offsets[texture] + y * width + x]

where x is the column and y the row of the source image.

Lookup maps a texture coordinate through ``coord * scale + offset``, scales it
by the texture size, and wraps the result with a floor modulo so negative
coordinates tile seamlessly.

Decoding image files is done on the host with Pillow (see load_texture).

Example:
    >>> import numpy as np
    >>> from src.whitted.materials.texture import add_texture, checkerboard_texture
    >>> texture_id = add_texture(checkerboard_texture(64, 64, cells=8))
"""

import logging
from pathlib import Path

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm
from PIL import Image as PILImage

from src.whitted.core.color import rgba8_to_color
from src.whitted.core.ray import vec3

logger = logging.getLogger(__name__)

# Maximum number of textures in the scene
MAX_TEXTURES = 16

# Total texel budget shared by all textures (16 MiB of RGBA8)
MAX_TEXELS = 4 * 1024 * 1024

# Packed texel pool and per-texture layout
texture_texels = ti.Vector.field(4, dtype=ti.u8, shape=MAX_TEXELS)
texture_offsets = ti.field(dtype=ti.i32, shape=MAX_TEXTURES)
texture_widths = ti.field(dtype=ti.i32, shape=MAX_TEXTURES)
texture_heights = ti.field(dtype=ti.i32, shape=MAX_TEXTURES)
num_textures = ti.field(dtype=ti.i32, shape=())
num_texels = ti.field(dtype=ti.i32, shape=())


def clear_textures() -> None:
    """Remove all textures from the pool."""
    num_textures[None] = 0
    num_texels[None] = 0


@ti.kernel
def _upload_texels(pixels: ti.types.ndarray(), offset: ti.i32, width: ti.i32, height: ti.i32):
    for y, x in ti.ndrange(height, width):
        texture_texels[offset + y * width + x] = ti.Vector(
            [pixels[y, x, 0], pixels[y, x, 1], pixels[y, x, 2], pixels[y, x, 3]], dt=ti.u8
        )


def add_texture(pixels: npt.NDArray[np.uint8]) -> int:
    """Upload a decoded RGBA8 image into the texel pool.

    Args:
        pixels: Array of shape (height, width, 4) with dtype uint8. Row 0 is
            the top of the image.

    Returns:
        The texture ID to reference from a material.

    Raises:
        ValueError: If the array is not a non-empty (H, W, 4) uint8 image.
        RuntimeError: If the texture count or texel budget is exceeded.
    """
    if pixels.ndim != 3 or pixels.shape[2] != 4:
        raise ValueError(f"Texture must have shape (height, width, 4), got {pixels.shape}")
    if pixels.dtype != np.uint8:
        raise ValueError(f"Texture must have dtype uint8, got {pixels.dtype}")

    height, width = int(pixels.shape[0]), int(pixels.shape[1])
    if width == 0 or height == 0:
        raise ValueError(f"Texture must not be empty, got {width}x{height}")

    idx = num_textures[None]
    if idx >= MAX_TEXTURES:
        raise RuntimeError(f"Maximum number of textures ({MAX_TEXTURES}) exceeded")

    offset = num_texels[None]
    if offset + width * height > MAX_TEXELS:
        raise RuntimeError(
            f"Texture of {width}x{height} does not fit in the texel pool "
            f"({MAX_TEXELS - offset} texels left)"
        )

    _upload_texels(np.ascontiguousarray(pixels), offset, width, height)
    texture_offsets[idx] = offset
    texture_widths[idx] = width
    texture_heights[idx] = height
    num_texels[None] = offset + width * height
    num_textures[None] = idx + 1

    logger.debug("Uploaded texture %d (%dx%d) at texel offset %d", idx, width, height, offset)
    return idx


def get_texture_count() -> int:
    """Get the number of textures in the pool."""
    return int(num_textures[None])


def get_texture_size(texture_id: int) -> tuple[int, int]:
    """Get the (width, height) of a texture."""
    return int(texture_widths[texture_id]), int(texture_heights[texture_id])


def load_texture(path: str | Path) -> npt.NDArray[np.uint8]:
    """Decode an image file into an RGBA8 array suitable for add_texture.

    Errors from Pillow (missing file, unknown format) propagate unchanged;
    texture loading happens before any rendering starts.

    Args:
        path: Image file path.

    Returns:
        Array of shape (height, width, 4) with dtype uint8.
    """
    with PILImage.open(path) as image:
        return np.asarray(image.convert("RGBA"), dtype=np.uint8).copy()


def checkerboard_texture(
    width: int,
    height: int,
    cells: int = 8,
    dark: tuple[int, int, int] = (30, 30, 30),
    light: tuple[int, int, int] = (230, 230, 230),
) -> npt.NDArray[np.uint8]:
    """Generate a checkerboard RGBA8 texture.

    Args:
        width: Texture width in pixels.
        height: Texture height in pixels.
        cells: Number of checker cells along each axis.
        dark: RGB of the dark cells.
        light: RGB of the light cells.

    Returns:
        Array of shape (height, width, 4) with dtype uint8.
    """
    ys, xs = np.mgrid[0:height, 0:width]
    parity = ((xs * cells // width) + (ys * cells // height)) % 2
    pixels = np.empty((height, width, 4), dtype=np.uint8)
    pixels[..., :3] = np.where(parity[..., None] == 0, dark, light)
    pixels[..., 3] = 255
    return pixels


# =============================================================================
# Kernel-side lookup
# =============================================================================


@ti.func
def wrap_coordinate(value: ti.f64, bound: ti.i32) -> ti.i32:
    """Wrap a normalized coordinate into a texel index in [0, bound).

    The coordinate is scaled by bound, floored toward negative infinity and
    reduced with a floor modulo.
    """
    index = ti.cast(tm.floor(value * ti.cast(bound, ti.f64)), ti.i32) % bound
    if index < 0:
        index += bound
    return index


@ti.func
def sample_texture(texture_id: ti.i32, u: ti.f64, v: ti.f64, scale: ti.f64, offset: ti.f64) -> vec3:
    """Look up the color of a tiled texture at texture coordinates (u, v).

    Args:
        texture_id: The texture to sample.
        u: Horizontal texture coordinate.
        v: Vertical texture coordinate.
        scale: Tiling scale applied to both coordinates.
        offset: Offset added to both coordinates after scaling.

    Returns:
        The texel color as floats in [0, 1].
    """
    width = texture_widths[texture_id]
    height = texture_heights[texture_id]
    x = wrap_coordinate(u * scale + offset, width)
    y = wrap_coordinate(v * scale + offset, height)
    return rgba8_to_color(texture_texels[texture_offsets[texture_id] + y * width + x])
