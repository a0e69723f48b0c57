"""Ray data structure for the tracing kernels.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> origin = ti.math.vec4(0.0, 0.0, 0.0, 0.0)
    >>> direction = ti.math.vec4(0.0, 0.0, -1.0, 0.0)
    >>> ray = Ray(origin=origin, direction=direction)
    >>> point = ray_at(ray, 5.0)  # Point 5 units along the ray
"""

import taichi as ti

from raycaster.core.vector import add, scale, vec4


@ti.dataclass
class Ray:
    """A ray with an origin point and direction vector.

    Attributes:
        origin: The starting point of the ray (vec4, w = 0).
        direction: The direction vector of the ray (vec4, w = 0). It does not
            have to be normalized; intersection routines return parameters in
            units of this vector's length.
    """

    origin: vec4
    direction: vec4


@ti.func
def ray_at(ray: Ray, t: ti.f32) -> vec4:
    """Compute the point ray.origin + ray.direction * t."""
    return add(ray.origin, scale(ray.direction, t))


@ti.func
def make_ray(origin: vec4, direction: vec4) -> Ray:
    """Create a ray from origin and direction inside a kernel."""
    return Ray(origin=origin, direction=direction)
