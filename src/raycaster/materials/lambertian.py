"""Lambertian material and local shading.

Shading uses a single point light and no shadow rays:

    dir_to_light = normalize(light - P)
    color = ambient + diffuse * dot(N, dir_to_light)

Colors are linear RGB with every channel in [0, 1]; they are converted to
bytes only when a pixel is written.

Example:
    >>> from raycaster.materials.lambertian import Material
    >>> red = Material(ambient=(0.1, 0.0, 0.0), diffuse=(0.9, 0.1, 0.1))
"""

import math
from dataclasses import dataclass

import taichi as ti
import taichi.math as tm

from raycaster.core.vector import dot, normalize, subtract, vec3, vec4

Color = tuple[float, float, float]

# Color used by the flat debug shading mode
FLAT_COLOR = (1.0, 0.0, 0.0)


def _validate_color(name: str, color: Color) -> None:
    if len(color) != 3:
        raise ValueError(f"{name} color must have 3 channels, got {len(color)}")
    for i, component in enumerate(color):
        if not math.isfinite(component) or component < 0.0 or component > 1.0:
            raise ValueError(f"{name} color channel {i} = {component} is outside [0, 1].")


@dataclass(frozen=True)
class Material:
    """Ambient and diffuse colors of a surface.

    Attributes:
        ambient: Constant color term (RGB, each channel in [0, 1]).
        diffuse: Color scaled by the cosine to the light (RGB, [0, 1]).

    Raises:
        ValueError: If a channel is outside [0, 1].
    """

    ambient: Color = (0.1, 0.1, 0.1)
    diffuse: Color = (0.8, 0.2, 0.2)

    def __post_init__(self) -> None:
        object.__setattr__(self, "ambient", tuple(float(c) for c in self.ambient))
        object.__setattr__(self, "diffuse", tuple(float(c) for c in self.diffuse))
        _validate_color("Ambient", self.ambient)
        _validate_color("Diffuse", self.diffuse)


DEFAULT_MATERIAL = Material()


@ti.func
def shade_lambertian(
    ambient: vec3,
    diffuse: vec3,
    point: vec4,
    normal: vec4,
    light_position: vec4,
    clamp_n_dot_l: ti.i32,
) -> vec3:
    """Compute the Lambertian color of a surface point.

    Args:
        ambient: Ambient color of the material.
        diffuse: Diffuse color of the material.
        point: The hit point.
        normal: The unit surface normal at the hit point.
        light_position: World-space position of the point light.
        clamp_n_dot_l: If nonzero, negative cosines are clamped to 0.
            Otherwise surfaces facing away from the light are darkened by
            the raw dot product.

    Returns:
        The unclamped linear color.
    """
    dir_to_light = normalize(subtract(light_position, point))
    n_dot_l = dot(normal, dir_to_light)
    if clamp_n_dot_l != 0:
        n_dot_l = ti.max(n_dot_l, 0.0)
    return ambient + diffuse * n_dot_l


@ti.func
def shade_normal(normal: vec4) -> vec3:
    """Debug color mapping each normal component from [-1, 1] to [0, 1]."""
    return (vec3(normal.x, normal.y, normal.z) + 1.0) * 0.5


@ti.func
def to_rgba8(color: vec3):
    """Convert a linear color to an opaque RGBA byte vector.

    Each channel is scaled to [0, 255], rounded and clamped.
    """
    c = tm.clamp(ti.round(color * 255.0), 0.0, 255.0)
    return ti.cast(vec4(c.x, c.y, c.z, 255.0), ti.u8)
