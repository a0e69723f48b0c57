"""Camera module for primary ray generation.

The pinhole camera sits at the origin looking down -z; a Viewport sets the
resolution and field of view, and get_ray() builds the ray through a pixel
inside Taichi kernels.
"""

from .pinhole import Viewport, ViewportProjection, get_ray, pixel_direction, setup_viewport

__all__ = [
    "Viewport",
    "ViewportProjection",
    "setup_viewport",
    "pixel_direction",
    "get_ray",
]
