"""Output utilities for rendered buffers."""

from .export import buffer_to_image, compute_rmse, load_png, save_png

__all__ = [
    "buffer_to_image",
    "save_png",
    "load_png",
    "compute_rmse",
]
