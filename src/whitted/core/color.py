"""RGB color value type and pixel conversion helpers.

Colors are linear RGB float triples. Intermediate values may leave [0, 1]
(and may go negative); clamping happens only when a color is turned into a
pixel, and once per hit on the accumulated diffuse term.

Three layers are provided:
    - Color: an immutable host-side value used when building scenes.
    - clamp_color / rgba8_to_color: Taichi functions used inside kernels.
    - image_to_rgba8: NumPy conversion of a float image to an 8-bit RGBA raster.
"""

from dataclasses import dataclass

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

from src.whitted.core.ray import vec3

# Scale between unit floats and 8-bit channels
CHANNEL_MAX = 255.0


@dataclass(frozen=True)
class Color:
    """An RGB color with float channels.

    Supports component-wise addition, color x color and color x scalar
    multiplication, clamping, and 8-bit conversion.

    Attributes:
        red: Red channel.
        green: Green channel.
        blue: Blue channel.
    """

    red: float
    green: float
    blue: float

    def __add__(self, other: "Color") -> "Color":
        return Color(self.red + other.red, self.green + other.green, self.blue + other.blue)

    def __mul__(self, other: "Color | float") -> "Color":
        if isinstance(other, Color):
            return Color(self.red * other.red, self.green * other.green, self.blue * other.blue)
        return Color(self.red * other, self.green * other, self.blue * other)

    __rmul__ = __mul__

    def clamp(self) -> "Color":
        """Clamp every channel into [0, 1]."""
        return Color(
            min(max(self.red, 0.0), 1.0),
            min(max(self.green, 0.0), 1.0),
            min(max(self.blue, 0.0), 1.0),
        )

    def to_rgba(self) -> tuple[int, int, int, int]:
        """Convert to an opaque 8-bit RGBA pixel.

        Channels are clamped, scaled by 255 and truncated toward zero.
        """
        c = self.clamp()
        return (
            int(CHANNEL_MAX * c.red),
            int(CHANNEL_MAX * c.green),
            int(CHANNEL_MAX * c.blue),
            int(CHANNEL_MAX),
        )

    @classmethod
    def from_rgba(cls, rgba: tuple[int, ...]) -> "Color":
        """Build a color from an 8-bit pixel, ignoring alpha."""
        return cls(rgba[0] / CHANNEL_MAX, rgba[1] / CHANNEL_MAX, rgba[2] / CHANNEL_MAX)

    def as_tuple(self) -> tuple[float, float, float]:
        return (self.red, self.green, self.blue)


WHITE = Color(1.0, 1.0, 1.0)
BLACK = Color(0.0, 0.0, 0.0)
YELLOW = Color(1.0, 1.0, 0.0)
DARK_ORANGE = Color(1.0, 0.6, 0.0)
RED = Color(1.0, 0.0, 0.0)
LIGHT_GREEN = Color(0.4, 1.0, 0.4)
MAGENTA = Color(0.8, 0.1, 0.8)
DARK_BLUE = Color(0.4, 0.4, 0.8)
LIGHT_BLUE = Color(0.6, 0.9, 1.0)


def as_rgb(color: Color | tuple[float, float, float]) -> tuple[float, float, float]:
    """Accept either a Color or a plain (r, g, b) tuple."""
    if isinstance(color, Color):
        return color.as_tuple()
    return (float(color[0]), float(color[1]), float(color[2]))


# =============================================================================
# Kernel-side helpers
# =============================================================================


@ti.func
def clamp_color(c: vec3) -> vec3:
    """Clamp every channel of a color into [0, 1]."""
    return tm.clamp(c, 0.0, 1.0)


@ti.func
def rgba8_to_color(px) -> vec3:
    """Convert an 8-bit RGBA texel to a float color, dropping alpha."""
    return vec3(
        ti.cast(px[0], ti.f64) / CHANNEL_MAX,
        ti.cast(px[1], ti.f64) / CHANNEL_MAX,
        ti.cast(px[2], ti.f64) / CHANNEL_MAX,
    )


# =============================================================================
# Raster conversion
# =============================================================================


def image_to_rgba8(image: npt.NDArray[np.floating]) -> npt.NDArray[np.uint8]:
    """Convert a float RGB image to an opaque 8-bit RGBA raster.

    NaN channels (from degenerate geometry) become 0. Values are clamped to
    [0, 1], scaled by 255 and truncated toward zero.

    Args:
        image: Array of shape (H, W, 3).

    Returns:
        Array of shape (H, W, 4) with dtype uint8 and alpha 255.
    """
    rgb = np.nan_to_num(image.astype(np.float64), nan=0.0)
    rgb = np.clip(rgb, 0.0, 1.0)
    height, width = rgb.shape[:2]
    rgba = np.empty((height, width, 4), dtype=np.uint8)
    rgba[..., :3] = (rgb * CHANNEL_MAX).astype(np.uint8)
    rgba[..., 3] = int(CHANNEL_MAX)
    return rgba
