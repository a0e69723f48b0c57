"""Tracer configuration.

A TracerConfig is handed to the Scene and the Rasterizer when they are
constructed. Values are read once at construction and baked into the
compiled kernels, so a config never changes under a running trace.
"""

import math
from dataclasses import dataclass
from enum import IntEnum

from raycaster.core.vector import DEFAULT_TOLERANCE


class ShadeMode(IntEnum):
    """How hit pixels are colored.

    LAMBERTIAN is the regular output. NORMAL and FLAT are debug views:
    NORMAL maps the surface normal into color space and FLAT paints every
    hit solid red.
    """

    LAMBERTIAN = 0
    NORMAL = 1
    FLAT = 2


# Default point light position in world space
DEFAULT_LIGHT_POSITION = (10.0, 10.0, 10.0)

# Preallocated storage limits
DEFAULT_MAX_SHAPES = 1024
DEFAULT_MAX_IMAGE_WIDTH = 2048
DEFAULT_MAX_IMAGE_HEIGHT = 2048


@dataclass(frozen=True)
class TracerConfig:
    """Configuration shared by the scene and the rasterizer.

    Attributes:
        tolerance: Epsilon for every equality, parallel and tangency test.
        light_position: World-space position of the single point light.
        clamp_n_dot_l: Clamp the diffuse cosine term to >= 0.
        shade_mode: Pixel coloring mode (see ShadeMode).
        max_shapes: Capacity of the scene's shape storage.
        max_image_width: Largest viewport width the rasterizer accepts.
        max_image_height: Largest viewport height the rasterizer accepts.
    """

    tolerance: float = DEFAULT_TOLERANCE
    light_position: tuple[float, float, float] = DEFAULT_LIGHT_POSITION
    clamp_n_dot_l: bool = True
    shade_mode: ShadeMode = ShadeMode.LAMBERTIAN
    max_shapes: int = DEFAULT_MAX_SHAPES
    max_image_width: int = DEFAULT_MAX_IMAGE_WIDTH
    max_image_height: int = DEFAULT_MAX_IMAGE_HEIGHT

    def __post_init__(self) -> None:
        if not (self.tolerance > 0.0 and math.isfinite(self.tolerance)):
            raise ValueError(f"Tolerance must be a positive finite number, got {self.tolerance}")
        if len(self.light_position) != 3:
            raise ValueError(f"Light position must have 3 components, got {self.light_position}")
        if self.max_shapes < 1:
            raise ValueError(f"max_shapes must be at least 1, got {self.max_shapes}")
        if self.max_image_width < 1 or self.max_image_height < 1:
            raise ValueError(
                f"Maximum image size must be positive, got "
                f"{self.max_image_width}x{self.max_image_height}"
            )
        # Accept plain ints for the mode
        object.__setattr__(self, "shade_mode", ShadeMode(self.shade_mode))
