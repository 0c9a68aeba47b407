"""Band-by-band renderer for the Whitted tracer.

This module provides a convenient wrapper around the core tracer that supports:
- Rendering the image in bands of rows
- Progress callbacks for CLI or UI updates
- Conversion of the float image to an 8-bit RGBA raster

The Renderer class encapsulates the render target state and provides a clean
interface for one-shot and incremental rendering.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from src.whitted.core.renderer import Renderer
    >>> from src.whitted.scene.demo import create_demo_scene
    >>>
    >>> scene, settings = create_demo_scene()
    >>> renderer = Renderer(settings.width, settings.height)
    >>> renderer.render()
    >>> pixels = renderer.get_image_rgba()
"""

import logging
import time
from collections.abc import Callable, Generator
from pathlib import Path

import numpy as np
import numpy.typing as npt

from src.whitted.core.tracer import (
    clear_render_target,
    get_image_numpy,
    get_image_rgba,
    render_rows,
    setup_render_target,
)

logger = logging.getLogger(__name__)

# Type alias for progress callback
# Callback receives (rows_done, total_rows)
ProgressCallback = Callable[[int, int], None]


class Renderer:
    """Renders the configured scene into an image buffer.

    The renderer maintains its own width/height and delegates to the global
    tracer buffers (which are Taichi fields). The scene and camera must be
    configured before rendering.

    Attributes:
        width: Image width in pixels.
        height: Image height in pixels.
    """

    def __init__(self, width: int, height: int) -> None:
        """Initialize the renderer.

        Args:
            width: Image width in pixels.
            height: Image height in pixels.

        Raises:
            ValueError: If dimensions are not positive or exceed the maximum.
        """
        self._width = width
        self._height = height
        self._rows_done = 0
        setup_render_target(width, height)

    @property
    def width(self) -> int:
        """Get the image width."""
        return self._width

    @property
    def height(self) -> int:
        """Get the image height."""
        return self._height

    @property
    def rows_done(self) -> int:
        """Number of rows rendered since the last reset."""
        return self._rows_done

    @property
    def is_complete(self) -> bool:
        return self._rows_done >= self._height

    def reset(self) -> None:
        """Clear the image buffer without changing the dimensions."""
        clear_render_target()
        self._rows_done = 0

    def resize(self, width: int, height: int) -> None:
        """Resize the render target and clear it.

        Raises:
            ValueError: If dimensions are not positive or exceed the maximum.
        """
        setup_render_target(width, height)
        self._width = width
        self._height = height
        self._rows_done = 0

    def render(
        self,
        rows_per_batch: int | None = None,
        callback: ProgressCallback | None = None,
    ) -> None:
        """Render the whole image.

        Args:
            rows_per_batch: Number of rows to render before each callback.
                None renders the image in a single batch.
            callback: Optional callback called after each batch with
                (rows_done, total_rows).

        Example:
            >>> def progress(done, total):
            ...     print(f"Progress: {done}/{total} rows")
            >>> renderer.render(rows_per_batch=50, callback=progress)
        """
        for rows_done, total in self.render_rows(rows_per_batch):
            if callback is not None:
                callback(rows_done, total)

    def render_rows(
        self,
        rows_per_batch: int | None = None,
    ) -> Generator[tuple[int, int], None, None]:
        """Render the image band by band, yielding progress after each band.

        This is a generator-based alternative to render() with callbacks.

        Args:
            rows_per_batch: Number of rows per band. None renders everything
                in one band.

        Yields:
            Tuple of (rows_done, total_rows).

        Raises:
            ValueError: If rows_per_batch is not positive, or the scene was
                configured for a different image size than the renderer.
        """
        if rows_per_batch is None:
            rows_per_batch = self._height
        if rows_per_batch <= 0:
            raise ValueError(f"rows_per_batch must be positive, got {rows_per_batch}")

        self.reset()
        start = time.perf_counter()
        while self._rows_done < self._height:
            row_end = min(self._rows_done + rows_per_batch, self._height)
            render_rows(self._rows_done, row_end)
            logger.debug("Rendered rows %d-%d", self._rows_done, row_end - 1)
            self._rows_done = row_end
            yield (self._rows_done, self._height)

        logger.info(
            "Rendered %dx%d image in %.2fs",
            self._width,
            self._height,
            time.perf_counter() - start,
        )

    def get_image_numpy(self) -> npt.NDArray[np.float32]:
        """Get the rendered image as unclamped floats of shape (height, width, 3)."""
        return get_image_numpy()

    def get_image_rgba(self) -> npt.NDArray[np.uint8]:
        """Get the rendered image as opaque RGBA8 of shape (height, width, 4).

        Channels are clamped to [0, 1], scaled by 255 and truncated.
        """
        return get_image_rgba()

    def save_image(self, filepath: str | Path) -> None:
        """Save the rendered image as a PNG file.

        Args:
            filepath: Path to save the image (e.g., "output.png").
        """
        from src.whitted.preview.export import save_png

        save_png(self, filepath)

    def __repr__(self) -> str:
        """Return a string representation of the renderer state."""
        return (
            f"Renderer(width={self.width}, height={self.height}, "
            f"rows_done={self.rows_done})"
        )
