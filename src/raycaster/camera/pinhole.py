"""Pinhole camera ray generation through a viewport.

The camera sits at the world origin looking down -z. A Viewport gives the
image resolution, the clip-plane extents and a horizontal field of view; the
vertical field of view follows from the aspect ratio:

    fov_x = radians(fov)
    fov_y = (height / width) * fov_x
    x_inc = tan(fov_x) / width
    y_inc = tan(fov_y) / height

Pixel (i, j), with j counting rows from the top, gets the ray direction

    (-right / 2 + i * x_inc,  top / 2 - j * y_inc,  -1)

The projection constants are computed once on the Python side by
setup_viewport(); get_ray() turns them into rays inside kernels.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from raycaster.camera.pinhole import Viewport, setup_viewport
    >>> viewport = Viewport(width=320, height=240, top=1.0, bottom=-1.0,
    ...                     left=-1.0, right=1.0, near=1.0, far=100.0, fov=45.0)
    >>> projection = setup_viewport(viewport)
"""

import math
from dataclasses import dataclass

import taichi as ti

from raycaster.core.ray import Ray, make_ray
from raycaster.core.vector import vec4

# =============================================================================
# Viewport Data Structures
# =============================================================================


@dataclass(frozen=True)
class Viewport:
    """The image plane and camera parameters of one frame.

    Attributes:
        width: Image width in pixels.
        height: Image height in pixels.
        top: Top clip-plane extent.
        bottom: Bottom clip-plane extent (carried, not used by the mapping).
        left: Left clip-plane extent (carried, not used by the mapping).
        right: Right clip-plane extent.
        near: Near plane distance (carried, not used by the mapping).
        far: Far plane distance (carried, not used by the mapping).
        fov: Horizontal field of view in degrees.

    Raises:
        ValueError: If width or height is below one pixel, or a float
            parameter is not finite.
    """

    width: int
    height: int
    top: float
    bottom: float
    left: float
    right: float
    near: float
    far: float
    fov: float

    def __post_init__(self) -> None:
        if int(self.width) != self.width or int(self.height) != self.height:
            raise ValueError(f"Viewport size must be integral, got {self.width}x{self.height}")
        if self.width < 1 or self.height < 1:
            raise ValueError(f"Viewport size must be positive, got {self.width}x{self.height}")
        object.__setattr__(self, "width", int(self.width))
        object.__setattr__(self, "height", int(self.height))
        for name in ("top", "bottom", "left", "right", "near", "far", "fov"):
            value = float(getattr(self, name))
            if not math.isfinite(value):
                raise ValueError(f"Viewport {name} must be finite, got {value}")
            object.__setattr__(self, name, value)


@dataclass(frozen=True)
class ViewportProjection:
    """Precomputed constants mapping pixels to ray directions.

    Attributes:
        fov_x: Horizontal field of view in radians.
        fov_y: Vertical field of view in radians.
        x_inc: Horizontal step between pixel columns.
        y_inc: Vertical step between pixel rows.
        half_x: Half of the right extent.
        half_y: Half of the top extent.
    """

    fov_x: float
    fov_y: float
    x_inc: float
    y_inc: float
    half_x: float
    half_y: float


# =============================================================================
# Projection Setup (Python-side, once per frame)
# =============================================================================


def setup_viewport(viewport: Viewport) -> ViewportProjection:
    """Compute the pixel-to-ray mapping for a viewport.

    Args:
        viewport: The frame's viewport.

    Returns:
        The projection constants consumed by get_ray().
    """
    fov_x = math.radians(viewport.fov)
    fov_y = (viewport.height / viewport.width) * fov_x
    return ViewportProjection(
        fov_x=fov_x,
        fov_y=fov_y,
        x_inc=math.tan(fov_x) / viewport.width,
        y_inc=math.tan(fov_y) / viewport.height,
        half_x=viewport.right * 0.5,
        half_y=viewport.top * 0.5,
    )


def pixel_direction(projection: ViewportProjection, i: int, j: int) -> tuple[float, float, float]:
    """Python-side direction of the ray through pixel (i, j).

    Useful for casting the same ray as the render kernel with
    Scene.query_ray().
    """
    return (
        -projection.half_x + i * projection.x_inc,
        projection.half_y - j * projection.y_inc,
        -1.0,
    )


# =============================================================================
# Ray Generation (Taichi-compatible)
# =============================================================================


@ti.func
def get_ray(
    i: ti.i32,
    j: ti.i32,
    half_x: ti.f32,
    half_y: ti.f32,
    x_inc: ti.f32,
    y_inc: ti.f32,
) -> Ray:
    """Generate the ray through pixel (i, j).

    Args:
        i: Pixel column (0 = left).
        j: Pixel row (0 = top).
        half_x: Half of the viewport's right extent.
        half_y: Half of the viewport's top extent.
        x_inc: Horizontal step per column.
        y_inc: Vertical step per row.

    Returns:
        A ray from the world origin with direction (x, y, -1). The direction
        is left unnormalized.
    """
    x = -half_x + ti.cast(i, ti.f32) * x_inc
    y = half_y - ti.cast(j, ti.f32) * y_inc
    return make_ray(vec4(0.0), vec4(x, y, -1.0, 0.0))
