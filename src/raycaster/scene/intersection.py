"""Shape dispatch for scene-level intersection testing.

Scene storage is kind-agnostic: every shape occupies one ShapeRecord slot
tagged with its ShapeKind. intersect() is the single place that branches on
that tag and forwards to the sphere or triangle routine.
"""

import taichi as ti

from raycaster.core.ray import Ray
from raycaster.core.vector import vec4
from raycaster.geometry.collision import CollisionRecord, make_miss_record
from raycaster.geometry.shapes import ShapeKind
from raycaster.geometry.sphere import Sphere, intersect_ray_sphere
from raycaster.geometry.triangle import Triangle, intersect_ray_triangle

# Kind tags as plain ints for use inside kernels
KIND_SPHERE = int(ShapeKind.SPHERE)
KIND_TRIANGLE = int(ShapeKind.TRIANGLE)


@ti.dataclass
class ShapeRecord:
    """Kind-tagged geometry of one scene shape.

    Attributes:
        kind: ShapeKind tag.
        a: Sphere center, or the first triangle vertex.
        b: Second triangle vertex (unused for spheres).
        c: Third triangle vertex (unused for spheres).
        radius: Sphere radius (unused for triangles).
        normal: Precomputed triangle normal (unused for spheres).
    """

    kind: ti.i32
    a: vec4
    b: vec4
    c: vec4
    radius: ti.f32
    normal: vec4


@ti.func
def intersect(ray: Ray, shape: ShapeRecord, tolerance: ti.f32) -> CollisionRecord:
    """Intersect a ray with any scene shape.

    Args:
        ray: The ray to test.
        shape: The tagged shape geometry.
        tolerance: Epsilon forwarded to the primitive routine.

    Returns:
        The primitive's CollisionRecord, or a miss record for an unknown
        kind tag.
    """
    record = make_miss_record()
    if shape.kind == KIND_SPHERE:
        record = intersect_ray_sphere(ray, Sphere(center=shape.a, radius=shape.radius), tolerance)
    elif shape.kind == KIND_TRIANGLE:
        tri = Triangle(a=shape.a, b=shape.b, c=shape.c, normal=shape.normal)
        record = intersect_ray_triangle(ray, tri, tolerance)
    return record
