"""Collision records shared by every intersection routine.

A miss is encoded with t = NO_INTERSECTION, the largest finite float32, so
the nearest of several records is found with a plain `<` comparison.
"""

import numpy as np
import taichi as ti

from raycaster.core.vector import vec4

# Sentinel hit parameter meaning "no intersection"
NO_INTERSECTION = float(np.finfo(np.float32).max)


@ti.dataclass
class CollisionRecord:
    """Result of a ray-primitive intersection test.

    Attributes:
        t: Hit parameter along the ray, or NO_INTERSECTION on a miss.
        point: The hit point (zero vector on a miss).
        normal: The unit surface normal at the hit point (zero vector on a
            miss).
    """

    t: ti.f32
    point: vec4
    normal: vec4


@ti.func
def make_miss_record() -> CollisionRecord:
    """Create a CollisionRecord indicating no intersection."""
    return CollisionRecord(t=NO_INTERSECTION, point=vec4(0.0), normal=vec4(0.0))


@ti.func
def is_hit(record: CollisionRecord) -> ti.i32:
    """Return 1 if the record holds an intersection, 0 otherwise."""
    return record.t < NO_INTERSECTION
