"""Host-side shape descriptions.

A Shape is either a SphereShape or a TriangleShape. Each carries an explicit
`kind` tag, the scene-assigned `shape_id` and a Material. Shapes are frozen:
a triangle's normal is computed once from its vertices and never goes stale.

Every shape reports its geometry in the same layout,

    (vertex_a, vertex_b, vertex_c, radius, normal)

which is what the scene writes into its Taichi fields. For a sphere the
center is stored as vertex_a; unused slots are zero.
"""

import math
from dataclasses import dataclass, field
from enum import IntEnum
from typing import ClassVar, Union

import numpy as np

from raycaster.materials.lambertian import DEFAULT_MATERIAL, Material

Point = tuple[float, float, float]
Geometry = tuple[Point, Point, Point, float, Point]

_ORIGIN: Point = (0.0, 0.0, 0.0)


class ShapeKind(IntEnum):
    """Discriminant of the Shape union, stored per shape in the scene."""

    SPHERE = 0
    TRIANGLE = 1


def as_point(name: str, value) -> Point:
    point = tuple(float(c) for c in value)
    if len(point) != 3:
        raise ValueError(f"{name} must have 3 coordinates, got {len(point)}")
    if not all(math.isfinite(c) for c in point):
        raise ValueError(f"{name} has a non-finite coordinate: {point}")
    return point


@dataclass(frozen=True)
class SphereShape:
    """A sphere in the scene.

    Raises:
        ValueError: If the radius is not a positive finite number.
    """

    kind: ClassVar[ShapeKind] = ShapeKind.SPHERE

    shape_id: int
    center: Point
    radius: float
    material: Material = DEFAULT_MATERIAL

    def __post_init__(self) -> None:
        object.__setattr__(self, "center", as_point("Sphere center", self.center))
        radius = float(self.radius)
        if not (math.isfinite(radius) and radius > 0.0):
            raise ValueError(f"Sphere radius must be positive, got {self.radius}")
        object.__setattr__(self, "radius", radius)

    def geometry(self) -> Geometry:
        return (self.center, _ORIGIN, _ORIGIN, self.radius, _ORIGIN)


@dataclass(frozen=True)
class TriangleShape:
    """A triangle in the scene.

    The unit normal normalize(cross(a - b, a - c)) is derived at
    construction.

    Raises:
        ValueError: If the triangle has zero area.
    """

    kind: ClassVar[ShapeKind] = ShapeKind.TRIANGLE

    shape_id: int
    a: Point
    b: Point
    c: Point
    material: Material = DEFAULT_MATERIAL
    normal: Point = field(init=False)

    def __post_init__(self) -> None:
        a = as_point("Triangle vertex a", self.a)
        b = as_point("Triangle vertex b", self.b)
        c = as_point("Triangle vertex c", self.c)
        object.__setattr__(self, "a", a)
        object.__setattr__(self, "b", b)
        object.__setattr__(self, "c", c)

        va = np.array(a, dtype=np.float64)
        n = np.cross(va - np.array(b), va - np.array(c))
        length = float(np.linalg.norm(n))
        if length == 0.0:
            raise ValueError(f"Triangle {a}, {b}, {c} is degenerate (zero area)")
        object.__setattr__(self, "normal", tuple(float(x) for x in n / length))

    def geometry(self) -> Geometry:
        return (self.a, self.b, self.c, 0.0, self.normal)


Shape = Union[SphereShape, TriangleShape]
