"""Triangle primitive with Moller-Trumbore ray-triangle intersection.

The Moller-Trumbore method solves

    origin + t * dir = a + u * (b - a) + v * (c - a)

for (t, u, v) with Cramer's rule, using scalar triple products expressed as
dot and cross products. The hit is accepted when the barycentric coordinates
lie inside the triangle (u >= 0, v >= 0, u + v <= 1) and t > 0.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from raycaster.geometry.triangle import make_triangle, intersect_ray_triangle
    >>> # Inside a Taichi kernel:
    >>> # tri = make_triangle(a, b, c)
    >>> # record = intersect_ray_triangle(ray, tri, 1e-4)
"""

import taichi as ti

from raycaster.core.ray import Ray, ray_at
from raycaster.core.vector import cross, dot, normalize, scale, subtract, vec4
from raycaster.geometry.collision import NO_INTERSECTION, CollisionRecord


@ti.dataclass
class Triangle:
    """A triangle defined by three vertices.

    Attributes:
        a: First vertex (vec4, w = 0).
        b: Second vertex.
        c: Third vertex.
        normal: Unit normal normalize(cross(a - b, a - c)). Use
            make_triangle() so it is always consistent with the vertices.
    """

    a: vec4
    b: vec4
    c: vec4
    normal: vec4


@ti.func
def triangle_normal(a: vec4, b: vec4, c: vec4) -> vec4:
    """Compute the unit normal of the triangle (a, b, c)."""
    return normalize(cross(subtract(a, b), subtract(a, c)))


@ti.func
def make_triangle(a: vec4, b: vec4, c: vec4) -> Triangle:
    """Create a triangle inside a kernel, computing its normal once."""
    return Triangle(a=a, b=b, c=c, normal=triangle_normal(a, b, c))


@ti.func
def intersect_ray_triangle(ray: Ray, tri: Triangle, tolerance: ti.f32) -> CollisionRecord:
    """Intersect a ray with a triangle using the Moller-Trumbore method.

    Args:
        ray: The ray to test (direction need not be normalized).
        tri: The triangle to test against.
        tolerance: Determinants with magnitude below this are treated as a
            ray parallel to the triangle plane.

    Returns:
        A CollisionRecord with t = NO_INTERSECTION on a miss. On a hit the
        triangle normal is oriented to face the incoming ray.
    """
    t = NO_INTERSECTION
    point = vec4(0.0)
    normal = vec4(0.0)

    edge1 = subtract(tri.b, tri.a)
    edge2 = subtract(tri.c, tri.a)

    p = cross(ray.direction, edge2)
    det = dot(edge1, p)

    # Parallel rays never hit
    if ti.abs(det) >= tolerance:
        f = 1.0 / det
        s = subtract(ray.origin, tri.a)
        u = f * dot(s, p)

        if u >= 0.0 and u <= 1.0:
            q = cross(s, edge1)
            v = f * dot(ray.direction, q)

            if v >= 0.0 and u + v <= 1.0:
                candidate = f * dot(edge2, q)

                # Hits behind the origin are invalid
                if candidate > 0.0:
                    t = candidate
                    point = ray_at(ray, t)
                    normal = tri.normal
                    if dot(ray.direction, normal) > 0.0:
                        normal = scale(normal, -1.0)

    return CollisionRecord(t=t, point=point, normal=normal)
