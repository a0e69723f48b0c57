"""Core rendering module.

Components:
    vector: 4-component vector algebra on Taichi vectors
    ray: Ray data structure
    config: TracerConfig and shading modes
    integrator: The per-pixel rasterizer

All per-pixel work runs inside Taichi kernels.
"""

from .config import ShadeMode, TracerConfig
from .ray import Ray, make_ray, ray_at
from .vector import (
    DEFAULT_TOLERANCE,
    add,
    cross,
    divide,
    dot,
    equal,
    equal_number,
    magnitude,
    multiply,
    normalize,
    projection,
    scale,
    subtract,
    vec3,
    vec4,
)

# Note: integrator is NOT imported here to avoid circular imports.
# Import Rasterizer from raycaster.core.integrator when needed.

__all__ = [
    "Ray",
    "make_ray",
    "ray_at",
    "ShadeMode",
    "TracerConfig",
    "DEFAULT_TOLERANCE",
    "vec3",
    "vec4",
    "add",
    "subtract",
    "scale",
    "multiply",
    "divide",
    "dot",
    "cross",
    "magnitude",
    "normalize",
    "projection",
    "equal",
    "equal_number",
]
