"""Material colors and local shading."""

from .lambertian import (
    DEFAULT_MATERIAL,
    FLAT_COLOR,
    Material,
    shade_lambertian,
    shade_normal,
    to_rgba8,
)

__all__ = [
    "Material",
    "DEFAULT_MATERIAL",
    "FLAT_COLOR",
    "shade_lambertian",
    "shade_normal",
    "to_rgba8",
]
