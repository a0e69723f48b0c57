"""Sphere primitive with geometric ray-sphere intersection.

The intersection uses the geometric method rather than the quadratic
formula: the sphere center is projected onto the ray to find the point of
closest approach P, and the half-chord length

    h = sqrt(r^2 - |P - center|^2)

gives the entry and exit points around P. The cases are split on whether the
center lies behind the ray origin and whether the origin is inside the
sphere.

Distances are measured along the unit direction and converted back into a
ray parameter, so ray_at(ray, t) is the hit point for normalized and
unnormalized directions alike.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from raycaster.geometry.sphere import Sphere, intersect_ray_sphere
    >>> sphere = Sphere(center=ti.math.vec4(0, 0, -5, 0), radius=1.0)
    >>> # Use intersect_ray_sphere(ray, sphere, tolerance) within a Taichi kernel
"""

import taichi as ti

from raycaster.core.ray import Ray, ray_at
from raycaster.core.vector import (
    add,
    dot,
    equal_number,
    magnitude,
    normalize,
    projection,
    subtract,
    vec4,
)
from raycaster.geometry.collision import NO_INTERSECTION, CollisionRecord


@ti.dataclass
class Sphere:
    """A sphere defined by center point and radius.

    Attributes:
        center: The center point of the sphere (vec4, w = 0).
        radius: The radius of the sphere (positive float).
    """

    center: vec4
    radius: ti.f32


@ti.func
def make_sphere(center: vec4, radius: ti.f32) -> Sphere:
    """Create a sphere inside a kernel."""
    return Sphere(center=center, radius=radius)


@ti.func
def _half_chord(closest: vec4, sphere: Sphere) -> ti.f32:
    """Half the chord length through the point of closest approach.

    The radicand is clamped at zero; rounding can push it slightly negative
    for grazing rays.
    """
    dist = magnitude(subtract(closest, sphere.center))
    return ti.sqrt(ti.max(sphere.radius * sphere.radius - dist * dist, 0.0))


@ti.func
def intersect_ray_sphere(ray: Ray, sphere: Sphere, tolerance: ti.f32) -> CollisionRecord:
    """Intersect a ray with a sphere.

    Cases, with L = center - origin:

    - Center behind the origin (dot(L, dir) < 0):
        - |L| > r: the sphere is behind the ray, no intersection.
        - |L| = r within tolerance: the origin sits on the surface, hit at
          t = 0 with normal normalize(origin - center).
        - otherwise the origin is inside and the ray leaves through the exit
          point at distance | |P - origin| - h |.
    - Center ahead of (or beside) the origin:
        - |center - P| > r: the ray passes outside, no intersection.
        - origin outside (|L| > r): near point at |P - origin| - h.
        - origin inside: exit point at |P - origin| + h.

    Args:
        ray: The ray to test. A zero-length direction never hits.
        sphere: The sphere to test against.
        tolerance: Epsilon for the on-surface test.

    Returns:
        A CollisionRecord with t = NO_INTERSECTION on a miss. On a hit the
        normal points outward from the center.
    """
    t = NO_INTERSECTION
    point = vec4(0.0)
    normal = vec4(0.0)

    dir_length = magnitude(ray.direction)

    if dir_length > 0.0:
        unit_dir = normalize(ray.direction)
        to_center = subtract(sphere.center, ray.origin)
        center_dist = magnitude(to_center)
        # Closest approach of the ray's line to the center
        closest = add(ray.origin, projection(to_center, unit_dir))

        distance = -1.0
        on_surface = 0

        if dot(to_center, unit_dir) < 0.0:
            # Sphere center is behind the ray origin
            if center_dist <= sphere.radius:
                if equal_number(center_dist, sphere.radius, tolerance):
                    on_surface = 1
                else:
                    along = magnitude(subtract(closest, ray.origin))
                    distance = ti.abs(along - _half_chord(closest, sphere))
        else:
            if magnitude(subtract(sphere.center, closest)) <= sphere.radius:
                along = magnitude(subtract(closest, ray.origin))
                half_chord = _half_chord(closest, sphere)
                if center_dist > sphere.radius:
                    distance = ti.max(along - half_chord, 0.0)
                else:
                    distance = along + half_chord

        if on_surface == 1:
            t = 0.0
            point = ray.origin
            normal = normalize(subtract(ray.origin, sphere.center))
        elif distance >= 0.0:
            t = distance / dir_length
            point = ray_at(ray, t)
            normal = normalize(subtract(point, sphere.center))

    return CollisionRecord(t=t, point=point, normal=normal)
