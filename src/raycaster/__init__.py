"""Taichi-based ray tracing core.

This package renders scenes of spheres and triangles with one primary ray per
pixel and local Lambertian shading, and answers single-ray collision queries.

Subpackages:
    core: Vectors, rays, configuration and the rasterizer
    geometry: Shape descriptions and ray-shape intersection
    materials: Material colors and the Lambertian shading model
    scene: Shape storage and nearest-hit queries
    camera: Viewport and pinhole ray generation
    preview: PNG export of rendered buffers
    protocol: Wire messages and the message-driven worker
"""

__version__ = "0.1.0"
