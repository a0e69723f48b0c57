"""Scene management module.

Components:
    manager: Scene container, shape id allocation and nearest-hit queries
    intersection: Kind-tagged shape records and intersection dispatch
"""

from .intersection import ShapeRecord, intersect
from .manager import RayHit, Scene, ShapeIdAllocator

__all__ = [
    "Scene",
    "ShapeIdAllocator",
    "RayHit",
    "ShapeRecord",
    "intersect",
]
