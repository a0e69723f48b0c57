"""Rasterizer: one primary ray per pixel with local shading.

For every pixel the rasterizer builds the camera ray, finds the nearest hit
in the scene and writes the shaded color as RGBA bytes. Pixels whose ray hits
nothing keep the cleared value (0, 0, 0, 0). There are no secondary rays.

The output buffer is row-major with 4 bytes per pixel, so pixel (i, j) lives
at byte offset (i + j * width) * 4.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from raycaster.camera.pinhole import Viewport
    >>> from raycaster.core.integrator import Rasterizer
    >>> from raycaster.scene.manager import Scene
    >>>
    >>> scene = Scene()
    >>> scene.add_sphere(center=(0, 0, -5), radius=1.0)
    >>> rasterizer = Rasterizer(scene)
    >>> pixels = rasterizer.render(Viewport(64, 64, 1, -1, -1, 1, 1, 100, 45))
"""

import logging
import time

import numpy as np
import numpy.typing as npt
import taichi as ti

from raycaster.camera.pinhole import Viewport, get_ray, setup_viewport
from raycaster.core.config import ShadeMode, TracerConfig
from raycaster.core.vector import vec3
from raycaster.geometry.collision import CollisionRecord
from raycaster.materials.lambertian import (
    FLAT_COLOR,
    shade_lambertian,
    shade_normal,
    to_rgba8,
)
from raycaster.scene.manager import Scene

logger = logging.getLogger(__name__)

# Bytes per pixel in the output buffer
CHANNELS = 4


@ti.data_oriented
class Rasterizer:
    """Renders a Scene into an RGBA byte buffer.

    The pixel buffer is preallocated to the configured maximum image size
    to avoid kernel recompilation; each render uses its top-left corner.

    Attributes:
        scene: The scene being rendered.
        config: The TracerConfig (the scene's own config by default).
    """

    def __init__(self, scene: Scene, config: TracerConfig | None = None) -> None:
        self.scene = scene
        self.config = config if config is not None else scene.config

        # Compile-time constants inside the kernel
        self._shade_mode = int(self.config.shade_mode)
        self._clamp_n_dot_l = 1 if self.config.clamp_n_dot_l else 0

        self._light_position = ti.Vector.field(4, dtype=ti.f32, shape=())
        lx, ly, lz = self.config.light_position
        self._light_position[None] = [lx, ly, lz, 0.0]

        self._pixels = ti.Vector.field(
            CHANNELS,
            dtype=ti.u8,
            shape=(self.config.max_image_height, self.config.max_image_width),
        )

    @ti.func
    def _shade(self, record: CollisionRecord, ambient: vec3, diffuse: vec3) -> vec3:
        color = vec3(0.0)
        if ti.static(self._shade_mode == int(ShadeMode.NORMAL)):
            color = shade_normal(record.normal)
        elif ti.static(self._shade_mode == int(ShadeMode.FLAT)):
            color = vec3(FLAT_COLOR[0], FLAT_COLOR[1], FLAT_COLOR[2])
        else:
            color = shade_lambertian(
                ambient,
                diffuse,
                record.point,
                record.normal,
                self._light_position[None],
                self._clamp_n_dot_l,
            )
        return color

    @ti.kernel
    def _clear_kernel(self, width: ti.i32, height: ti.i32):
        for j, i in ti.ndrange(height, width):
            self._pixels[j, i] = ti.Vector([0, 0, 0, 0], dt=ti.u8)

    @ti.kernel
    def _copy_kernel(
        self, width: ti.i32, height: ti.i32, out: ti.types.ndarray(dtype=ti.u8, ndim=3)
    ):
        for j, i in ti.ndrange(height, width):
            for c in ti.static(range(CHANNELS)):
                out[j, i, c] = self._pixels[j, i][c]

    def _frame_to_numpy(self, width: int, height: int) -> npt.NDArray[np.uint8]:
        # Only the frame region leaves the device
        frame = np.empty((height, width, CHANNELS), dtype=np.uint8)
        self._copy_kernel(width, height, frame)
        return frame.reshape(-1)

    @ti.kernel
    def _trace_kernel(
        self,
        width: ti.i32,
        height: ti.i32,
        half_x: ti.f32,
        half_y: ti.f32,
        x_inc: ti.f32,
        y_inc: ti.f32,
    ):
        for j, i in ti.ndrange(height, width):
            ray = get_ray(i, j, half_x, half_y, x_inc, y_inc)
            record, index = self.scene.cast(ray)
            if index >= 0:
                ambient, diffuse = self.scene.material_at(index)
                self._pixels[j, i] = to_rgba8(self._shade(record, ambient, diffuse))

    def render(self, viewport: Viewport) -> npt.NDArray[np.uint8]:
        """Render the scene through a viewport.

        Args:
            viewport: The frame to render.

        Returns:
            A flat uint8 array of length width * height * 4 holding RGBA
            pixels in row-major order.

        Raises:
            ValueError: If the viewport exceeds the configured maximum size.
        """
        width, height = viewport.width, viewport.height
        if width > self.config.max_image_width or height > self.config.max_image_height:
            raise ValueError(
                f"Image dimensions ({width}x{height}) exceed maximum supported "
                f"({self.config.max_image_width}x{self.config.max_image_height})"
            )

        projection = setup_viewport(viewport)
        start_time = time.perf_counter()

        self._clear_kernel(width, height)
        self._trace_kernel(
            width,
            height,
            projection.half_x,
            projection.half_y,
            projection.x_inc,
            projection.y_inc,
        )
        pixels = self._frame_to_numpy(width, height)

        logger.info(
            "Rendered %dx%d frame over %d shapes in %.3fs",
            width,
            height,
            self.scene.shape_count(),
            time.perf_counter() - start_time,
        )
        return np.ascontiguousarray(pixels, dtype=np.uint8)
