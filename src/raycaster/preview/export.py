"""Image export utilities for rendered pixel buffers.

Rendered frames are flat RGBA byte buffers (4 bytes per pixel, row-major).
This module reshapes them into images, writes PNG files and compares
buffers numerically.

Supported formats:
    - PNG (8-bit RGBA via Pillow)

Example:
    >>> from raycaster.preview.export import save_png
    >>> pixels = rasterizer.render(viewport)
    >>> save_png(pixels, viewport.width, viewport.height, "frame.png")
"""

from __future__ import annotations

from pathlib import Path

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage

CHANNELS = 4


def buffer_to_image(
    pixels: npt.ArrayLike,
    width: int,
    height: int,
) -> npt.NDArray[np.uint8]:
    """Reshape a flat RGBA buffer into an image array.

    Args:
        pixels: Flat RGBA bytes (array, bytes or bytearray).
        width: Image width in pixels.
        height: Image height in pixels.

    Returns:
        Image array of shape (height, width, 4) with dtype uint8.

    Raises:
        ValueError: If the buffer size does not match width * height * 4.
    """
    if isinstance(pixels, (bytes, bytearray, memoryview)):
        array = np.frombuffer(pixels, dtype=np.uint8)
    else:
        array = np.asarray(pixels, dtype=np.uint8).reshape(-1)

    expected = width * height * CHANNELS
    if array.size != expected:
        raise ValueError(
            f"Buffer holds {array.size} bytes, expected {expected} for {width}x{height} RGBA"
        )
    return array.reshape(height, width, CHANNELS)


def save_png(
    pixels: npt.ArrayLike,
    width: int,
    height: int,
    filepath: str | Path,
) -> Path:
    """Save a flat RGBA buffer as a PNG file.

    Args:
        pixels: Flat RGBA bytes.
        width: Image width in pixels.
        height: Image height in pixels.
        filepath: Output file path (should end in .png).

    Returns:
        The path written.
    """
    image = buffer_to_image(pixels, width, height)
    path = Path(filepath)
    PILImage.fromarray(image).save(path)
    return path


def load_png(filepath: str | Path) -> npt.NDArray[np.uint8]:
    """Load a PNG file as a flat RGBA buffer."""
    with PILImage.open(filepath) as img:
        return np.asarray(img.convert("RGBA"), dtype=np.uint8).reshape(-1)


def compute_rmse(
    image_a: npt.ArrayLike,
    image_b: npt.ArrayLike,
) -> float:
    """Compute root mean squared error between two buffers or images.

    Args:
        image_a: First buffer.
        image_b: Second buffer (must have the same shape as image_a).

    Returns:
        RMSE value in byte units (lower is more similar).

    Raises:
        ValueError: If shapes don't match.
    """
    a = np.asarray(image_a)
    b = np.asarray(image_b)
    if a.shape != b.shape:
        raise ValueError(f"Image shapes must match: {a.shape} vs {b.shape}")

    diff = a.astype(np.float64) - b.astype(np.float64)
    return float(np.sqrt(np.mean(diff**2)))
