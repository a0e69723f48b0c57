"""Geometry module for shape primitives and ray intersection.

Shapes:
    sphere: Geometric ray-sphere intersection
    triangle: Moller-Trumbore ray-triangle intersection
    shapes: Host-side SphereShape / TriangleShape descriptions

Every intersection returns a CollisionRecord; a miss carries
t = NO_INTERSECTION.
"""

from .collision import NO_INTERSECTION, CollisionRecord, is_hit, make_miss_record
from .shapes import Point, Shape, ShapeKind, SphereShape, TriangleShape, as_point
from .sphere import Sphere, intersect_ray_sphere, make_sphere
from .triangle import Triangle, intersect_ray_triangle, make_triangle, triangle_normal

__all__ = [
    "NO_INTERSECTION",
    "CollisionRecord",
    "make_miss_record",
    "is_hit",
    "Sphere",
    "make_sphere",
    "intersect_ray_sphere",
    "Triangle",
    "make_triangle",
    "triangle_normal",
    "intersect_ray_triangle",
    "Point",
    "Shape",
    "ShapeKind",
    "SphereShape",
    "TriangleShape",
    "as_point",
]
