"""Tests for the Rasterizer.

The 3x3 viewport below is set up so that x_inc = y_inc = 1/3 and the
center pixel (1, 1) looks straight down -z.
"""

import math

import numpy as np
import pytest

FOV = 45.0
THIRD = math.tan(math.radians(FOV)) / 3.0


def _viewport(width=3, height=3):
    from raycaster.camera.pinhole import Viewport

    return Viewport(
        width=width,
        height=height,
        top=2.0 * THIRD,
        bottom=-2.0 * THIRD,
        left=-2.0 * THIRD,
        right=2.0 * THIRD,
        near=1.0,
        far=100.0,
        fov=FOV,
    )


def _pixel(buffer, width, i, j):
    offset = (i + j * width) * 4
    return buffer[offset : offset + 4].tolist()


@pytest.fixture
def grey_material():
    from raycaster.materials.lambertian import Material

    return Material(ambient=(0.1, 0.1, 0.1), diffuse=(0.5, 0.5, 0.5))


def _render(shade_mode=None, material=None, shapes=("sphere",), viewport=None):
    from raycaster.core.config import TracerConfig
    from raycaster.core.integrator import Rasterizer
    from raycaster.scene.manager import Scene

    kwargs = {"max_image_width": 64, "max_image_height": 64}
    if shade_mode is not None:
        kwargs["shade_mode"] = shade_mode
    scene = Scene(TracerConfig(**kwargs))
    for shape in shapes:
        if shape == "sphere":
            if material is None:
                scene.add_sphere(center=(0, 0, -5), radius=1.0)
            else:
                scene.add_sphere(center=(0, 0, -5), radius=1.0, material=material)
    rasterizer = Rasterizer(scene)
    return rasterizer.render(viewport if viewport is not None else _viewport())


class TestRender:
    """Tests for Rasterizer.render."""

    def test_buffer_layout(self):
        """Test the buffer is flat u8 with four bytes per pixel."""
        pixels = _render(shapes=(), viewport=_viewport(width=5, height=2))
        assert pixels.dtype == np.uint8
        assert pixels.shape == (5 * 2 * 4,)

    def test_empty_scene_is_transparent(self):
        """Test an empty scene renders all zeros."""
        pixels = _render(shapes=())
        assert not pixels.any()

    def test_lit_center_pixel(self, grey_material):
        """The center ray hits (0, 0, -4) with normal +z."""
        pixels = _render(material=grey_material)
        n_dot_l = 14.0 / math.sqrt(396.0)
        expected = round((0.1 + 0.5 * n_dot_l) * 255)
        r, g, b, a = _pixel(pixels, 3, 1, 1)
        assert abs(r - expected) <= 1
        assert r == g == b
        assert a == 255

    def test_missed_pixels_are_cleared(self, grey_material):
        """Test corner pixels that miss the sphere stay transparent."""
        pixels = _render(material=grey_material)
        for i, j in [(0, 0), (2, 0), (0, 2), (2, 2)]:
            assert _pixel(pixels, 3, i, j) == [0, 0, 0, 0]

    def test_flat_mode(self):
        """Test flat mode paints hits solid red."""
        from raycaster.core.config import ShadeMode

        pixels = _render(shade_mode=ShadeMode.FLAT)
        assert _pixel(pixels, 3, 1, 1) == [255, 0, 0, 255]

    def test_normal_mode(self):
        """Test normal mode colors a +z normal as (0.5, 0.5, 1)."""
        from raycaster.core.config import ShadeMode

        pixels = _render(shade_mode=ShadeMode.NORMAL)
        # Normal (0, 0, 1) maps to (0.5, 0.5, 1.0)
        r, g, b, a = _pixel(pixels, 3, 1, 1)
        assert r in (127, 128)
        assert g in (127, 128)
        assert b == 255
        assert a == 255

    def test_renders_reflect_scene_changes(self):
        """Test each render sees shapes added and cleared since the last one."""
        from raycaster.core.config import TracerConfig
        from raycaster.core.integrator import Rasterizer
        from raycaster.scene.manager import Scene

        scene = Scene(TracerConfig(max_image_width=8, max_image_height=8))
        rasterizer = Rasterizer(scene)
        assert not rasterizer.render(_viewport()).any()

        scene.add_sphere(center=(0, 0, -5), radius=1.0)
        assert _pixel(rasterizer.render(_viewport()), 3, 1, 1)[3] == 255

        scene.clear()
        assert not rasterizer.render(_viewport()).any()

    def test_smaller_frame_after_larger(self):
        """Only the requested region is cleared and returned on each render."""
        from raycaster.core.config import TracerConfig
        from raycaster.core.integrator import Rasterizer
        from raycaster.scene.manager import Scene

        scene = Scene(TracerConfig(max_image_width=16, max_image_height=16))
        scene.add_sphere(center=(0, 0, -2), radius=1.5)
        rasterizer = Rasterizer(scene)
        large = rasterizer.render(_viewport(width=9, height=9))
        assert large.shape == (9 * 9 * 4,)
        assert large[3::4].all()

        scene.clear()
        small = rasterizer.render(_viewport())
        assert small.shape == (3 * 3 * 4,)
        assert not small.any()

    def test_viewport_too_large(self):
        """Test a viewport above the configured maximum is rejected."""
        from raycaster.core.config import TracerConfig
        from raycaster.core.integrator import Rasterizer
        from raycaster.scene.manager import Scene

        rasterizer = Rasterizer(Scene(TracerConfig(max_image_width=2, max_image_height=2)))
        with pytest.raises(ValueError, match="exceed maximum"):
            rasterizer.render(_viewport())
