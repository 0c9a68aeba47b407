"""Image export utilities for rendered images.

Rendered images are written as 8-bit RGBA PNG files via Pillow. The default
output name follows the pattern "<tag>=<YYYY-MM-DD>=<HH-MM-SS>=<label>.png"
so repeated renders never overwrite each other.

Example:
    >>> from src.whitted.preview.export import save_png, timestamped_filename
    >>> from src.whitted.core.renderer import Renderer
    >>>
    >>> renderer = Renderer(800, 600)
    >>> renderer.render()
    >>> save_png(renderer, timestamped_filename("render", "demo"))
"""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage

from src.whitted.core.color import image_to_rgba8

if TYPE_CHECKING:
    from src.whitted.core.renderer import Renderer

logger = logging.getLogger(__name__)


def timestamped_filename(tag: str, label: str, now: datetime | None = None) -> str:
    """Build an output file name carrying the render time.

    Args:
        tag: Leading tag, e.g. "render".
        label: Trailing label, e.g. the scene name.
        now: Timestamp to use. Defaults to the current local time.

    Returns:
        A name of the form "<tag>=<YYYY-MM-DD>=<HH-MM-SS>=<label>.png".
    """
    if now is None:
        now = datetime.now()
    return f"{tag}={now:%Y-%m-%d}={now:%H-%M-%S}={label}.png"


def to_rgba8(image: npt.NDArray[np.generic]) -> npt.NDArray[np.uint8]:
    """Normalize an image array to opaque RGBA8.

    Float arrays of shape (H, W, 3) are clamped and converted with truncation.
    uint8 arrays of shape (H, W, 4) pass through unchanged.

    Raises:
        ValueError: If the array has any other shape or dtype.
    """
    if image.dtype == np.uint8 and image.ndim == 3 and image.shape[2] == 4:
        return image
    if np.issubdtype(image.dtype, np.floating) and image.ndim == 3 and image.shape[2] == 3:
        return image_to_rgba8(image)
    raise ValueError(
        f"Expected a float (H, W, 3) or uint8 (H, W, 4) image, got {image.dtype} {image.shape}"
    )


def save_png(
    source: Renderer | npt.NDArray[np.generic],
    filepath: str | Path,
) -> Path:
    """Save a rendered image as an 8-bit RGBA PNG file.

    Args:
        source: A Renderer, a float image of shape (H, W, 3), or an RGBA8
            raster of shape (H, W, 4).
        filepath: Output file path (should end in .png).

    Returns:
        The path written.
    """
    if isinstance(source, np.ndarray):
        pixels = to_rgba8(source)
    else:
        pixels = source.get_image_rgba()

    path = Path(filepath)
    PILImage.fromarray(np.ascontiguousarray(pixels)).save(path)
    logger.info("Saved %dx%d image to %s", pixels.shape[1], pixels.shape[0], path)
    return path

