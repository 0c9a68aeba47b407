"""Output utilities for rendered images.

Example:
    >>> from src.whitted.preview import save_png, timestamped_filename
    >>> from src.whitted.core.renderer import Renderer
    >>>
    >>> renderer = Renderer(800, 600)
    >>> renderer.render()
    >>> save_png(renderer, timestamped_filename("render", "demo"))
"""

from src.whitted.preview.export import save_png, timestamped_filename, to_rgba8

__all__ = [
    "save_png",
    "timestamped_filename",
    "to_rgba8",
]
