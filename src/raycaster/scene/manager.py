"""Scene storage and nearest-hit queries.

The Scene keeps shapes in insertion order in preallocated Taichi fields,
one kind-tagged slot per shape, and answers nearest-hit queries by scanning
every slot. It also owns the allocator that hands out shape ids.

The Scene maintains:
- Structure-of-Arrays Taichi fields for geometry and material colors
- A Python-side list of the Shape objects, in the same order
- A ShapeIdAllocator whose ids are never reused, even after clear()

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from raycaster.scene.manager import Scene
    >>> scene = Scene()
    >>> scene.add_sphere(center=(0, 0, -5), radius=1.0)
    >>> scene.cast_ray((0, 0, 0), (0, 0, -1))
    (4.0, 0)
"""

import logging
from dataclasses import dataclass

import taichi as ti

from raycaster.core.config import TracerConfig
from raycaster.core.ray import Ray, make_ray
from raycaster.core.vector import vec4
from raycaster.geometry.collision import make_miss_record
from raycaster.geometry.shapes import Point, Shape, SphereShape, TriangleShape, as_point
from raycaster.materials.lambertian import DEFAULT_MATERIAL, Material
from raycaster.scene.intersection import ShapeRecord, intersect

logger = logging.getLogger(__name__)


class ShapeIdAllocator:
    """Hands out unique, monotonically increasing shape ids.

    Explicitly requested ids are honored as long as they were never issued
    before. The automatic counter always continues above the highest id
    issued so far, so ids below it that were never used are not handed out.
    """

    def __init__(self, start: int = 0) -> None:
        self._next = start
        self._issued: set[int] = set()

    def peek(self) -> int:
        """Return the id allocate() would issue next, without issuing it."""
        return self._next

    def allocate(self) -> int:
        """Issue the next free id."""
        return self.reserve(self.peek())

    def reserve(self, shape_id: int) -> int:
        """Issue a specific id.

        Raises:
            ValueError: If the id was already issued.
        """
        shape_id = int(shape_id)
        if shape_id in self._issued:
            raise ValueError(f"Shape id {shape_id} is already in use")
        self._issued.add(shape_id)
        if shape_id >= self._next:
            self._next = shape_id + 1
        return shape_id

    def is_issued(self, shape_id: int) -> bool:
        return shape_id in self._issued


@dataclass(frozen=True)
class RayHit:
    """Result of a single nearest-hit query.

    Attributes:
        t: Hit parameter, NO_INTERSECTION when nothing was hit.
        index: Insertion index of the hit shape, -1 when nothing was hit.
        point: The hit point.
        normal: The surface normal at the hit point.
        shape_id: Id of the hit shape, None when nothing was hit.
    """

    t: float
    index: int
    point: Point
    normal: Point
    shape_id: int | None

    @property
    def hit(self) -> bool:
        return self.index >= 0


@ti.data_oriented
class Scene:
    """An insertion-ordered collection of shapes.

    Attributes:
        config: The TracerConfig the scene was built with.
        shapes: The shapes in insertion order.

    Note:
        Taichi must be initialized before a Scene is constructed. The scene
        must not be mutated while a render over it is running.
    """

    def __init__(self, config: TracerConfig | None = None) -> None:
        self.config = config if config is not None else TracerConfig()
        self.shapes: list[Shape] = []
        self._ids = ShapeIdAllocator()
        # Compile-time constant inside the kernels
        self._tolerance = float(self.config.tolerance)

        n = self.config.max_shapes
        self._kinds = ti.field(dtype=ti.i32, shape=n)
        self._vertex_a = ti.Vector.field(4, dtype=ti.f32, shape=n)
        self._vertex_b = ti.Vector.field(4, dtype=ti.f32, shape=n)
        self._vertex_c = ti.Vector.field(4, dtype=ti.f32, shape=n)
        self._radii = ti.field(dtype=ti.f32, shape=n)
        self._normals = ti.Vector.field(4, dtype=ti.f32, shape=n)
        self._ambient = ti.Vector.field(3, dtype=ti.f32, shape=n)
        self._diffuse = ti.Vector.field(3, dtype=ti.f32, shape=n)
        self._num_shapes = ti.field(dtype=ti.i32, shape=())

        # Single-ray query results
        self._query_t = ti.field(dtype=ti.f32, shape=())
        self._query_index = ti.field(dtype=ti.i32, shape=())
        self._query_point = ti.Vector.field(4, dtype=ti.f32, shape=())
        self._query_normal = ti.Vector.field(4, dtype=ti.f32, shape=())

    # =========================================================================
    # Population
    # =========================================================================

    @property
    def max_shapes(self) -> int:
        return self.config.max_shapes

    def shape_count(self) -> int:
        """Get the number of shapes in the scene."""
        return int(self._num_shapes[None])

    def add_shape(self, shape: Shape) -> int:
        """Append a shape to the scene.

        Args:
            shape: A SphereShape or TriangleShape. Its id must not have been
                issued by this scene before.

        Returns:
            The insertion index of the shape.

        Raises:
            RuntimeError: If the scene is full.
            ValueError: If the shape id is already in use.
        """
        idx = self.shape_count()
        if idx >= self.max_shapes:
            raise RuntimeError(f"Maximum number of shapes ({self.max_shapes}) exceeded")
        self._ids.reserve(shape.shape_id)

        a, b, c, radius, normal = shape.geometry()
        self._kinds[idx] = int(shape.kind)
        self._vertex_a[idx] = [a[0], a[1], a[2], 0.0]
        self._vertex_b[idx] = [b[0], b[1], b[2], 0.0]
        self._vertex_c[idx] = [c[0], c[1], c[2], 0.0]
        self._radii[idx] = radius
        self._normals[idx] = [normal[0], normal[1], normal[2], 0.0]
        self._ambient[idx] = list(shape.material.ambient)
        self._diffuse[idx] = list(shape.material.diffuse)
        self._num_shapes[None] = idx + 1
        self.shapes.append(shape)

        logger.debug("Added %s %d at index %d", shape.kind.name.lower(), shape.shape_id, idx)
        return idx

    def add_sphere(
        self,
        center: Point,
        radius: float,
        material: Material = DEFAULT_MATERIAL,
        shape_id: int | None = None,
    ) -> SphereShape:
        """Create a sphere and append it to the scene.

        Args:
            center: The center of the sphere.
            radius: The radius (must be positive).
            material: Surface material.
            shape_id: Explicit id; allocated automatically when None.

        Returns:
            The created SphereShape.
        """
        if shape_id is None:
            shape_id = self._ids.peek()
        sphere = SphereShape(shape_id=shape_id, center=center, radius=radius, material=material)
        self.add_shape(sphere)
        return sphere

    def add_triangle(
        self,
        a: Point,
        b: Point,
        c: Point,
        material: Material = DEFAULT_MATERIAL,
        shape_id: int | None = None,
    ) -> TriangleShape:
        """Create a triangle and append it to the scene.

        Returns:
            The created TriangleShape.
        """
        if shape_id is None:
            shape_id = self._ids.peek()
        tri = TriangleShape(shape_id=shape_id, a=a, b=b, c=c, material=material)
        self.add_shape(tri)
        return tri

    def clear(self) -> None:
        """Remove every shape. Issued shape ids stay reserved."""
        self._num_shapes[None] = 0
        self.shapes.clear()
        logger.debug("Scene cleared")

    # =========================================================================
    # Kernel-side access
    # =========================================================================

    @ti.func
    def shape_at(self, index: ti.i32) -> ShapeRecord:
        """Get the tagged geometry of the shape at an insertion index."""
        return ShapeRecord(
            kind=self._kinds[index],
            a=self._vertex_a[index],
            b=self._vertex_b[index],
            c=self._vertex_c[index],
            radius=self._radii[index],
            normal=self._normals[index],
        )

    @ti.func
    def material_at(self, index: ti.i32):
        """Get the (ambient, diffuse) colors of the shape at an index."""
        return self._ambient[index], self._diffuse[index]

    @ti.func
    def cast(self, ray: Ray):
        """Find the nearest intersection of a ray with the scene.

        Shapes are scanned in insertion order and a record replaces the
        current nearest only if its t is strictly smaller, so ties keep the
        earliest shape. The scan is a plain loop: call this from inside a
        kernel loop, never as a kernel's outermost loop.

        Returns:
            A tuple (record, index) where index is -1 if nothing was hit.
        """
        nearest = make_miss_record()
        nearest_index = -1
        for k in range(self._num_shapes[None]):
            record = intersect(ray, self.shape_at(k), self._tolerance)
            if record.t < nearest.t:
                nearest = record
                nearest_index = k
        return nearest, nearest_index

    @ti.kernel
    def _query_kernel(
        self,
        ox: ti.f32,
        oy: ti.f32,
        oz: ti.f32,
        dx: ti.f32,
        dy: ti.f32,
        dz: ti.f32,
    ):
        # Single iteration so the shape scan inside cast() stays serial
        for _ in range(1):
            ray = make_ray(vec4(ox, oy, oz, 0.0), vec4(dx, dy, dz, 0.0))
            record, index = self.cast(ray)
            self._query_t[None] = record.t
            self._query_index[None] = index
            self._query_point[None] = record.point
            self._query_normal[None] = record.normal

    # =========================================================================
    # Python-side queries
    # =========================================================================

    def query_ray(self, origin: Point, direction: Point) -> RayHit:
        """Cast a single ray against the scene.

        Args:
            origin: Ray origin.
            direction: Ray direction (need not be normalized).

        Returns:
            A RayHit describing the nearest intersection or the miss.
        """
        o = as_point("Ray origin", origin)
        d = as_point("Ray direction", direction)
        self._query_kernel(o[0], o[1], o[2], d[0], d[1], d[2])

        index = int(self._query_index[None])
        p = self._query_point[None]
        n = self._query_normal[None]
        return RayHit(
            t=float(self._query_t[None]),
            index=index,
            point=(float(p[0]), float(p[1]), float(p[2])),
            normal=(float(n[0]), float(n[1]), float(n[2])),
            shape_id=self.shapes[index].shape_id if index >= 0 else None,
        )

    def cast_ray(self, origin: Point, direction: Point) -> tuple[float, int]:
        """Cast a single ray and return (t, index); index is -1 on a miss."""
        hit = self.query_ray(origin, direction)
        return hit.t, hit.index
