"""Homogeneous vector math for ray tracing kernels.

Vectors carry four components (x, y, z, w). The w component defaults to 0 and
is only read by magnitude() and normalize(); every other operation works on
x, y and z and returns w = 0. All functions are Taichi functions and return
new vectors, so they can be called from any kernel.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from raycaster.core.vector import cross, normalize, vec4
    >>> # Inside a Taichi kernel:
    >>> # n = normalize(cross(vec4(1.0, 0.0, 0.0, 0.0), vec4(0.0, 1.0, 0.0, 0.0)))
"""

import taichi as ti
import taichi.math as tm

# Type aliases using Taichi's math module
vec4 = tm.vec4
vec3 = tm.vec3

# Tolerance used when none is configured
DEFAULT_TOLERANCE = 1e-4


@ti.func
def add(v0: vec4, v1: vec4) -> vec4:
    """Component-wise sum of two vectors (w is dropped)."""
    return vec4(v0.x + v1.x, v0.y + v1.y, v0.z + v1.z, 0.0)


@ti.func
def subtract(v0: vec4, v1: vec4) -> vec4:
    """Component-wise difference v0 - v1 (w is dropped)."""
    return vec4(v0.x - v1.x, v0.y - v1.y, v0.z - v1.z, 0.0)


@ti.func
def scale(v: vec4, s: ti.f32) -> vec4:
    """Scale a vector by a scalar (w is dropped)."""
    return vec4(v.x * s, v.y * s, v.z * s, 0.0)


@ti.func
def multiply(v0: vec4, v1: vec4) -> vec4:
    """Component-wise product of two vectors (w is dropped)."""
    return vec4(v0.x * v1.x, v0.y * v1.y, v0.z * v1.z, 0.0)


@ti.func
def divide(v0: vec4, v1: vec4) -> vec4:
    """Component-wise quotient v0 / v1 (w is dropped)."""
    return vec4(v0.x / v1.x, v0.y / v1.y, v0.z / v1.z, 0.0)


@ti.func
def dot(v0: vec4, v1: vec4) -> ti.f32:
    """Dot product over the x, y and z components."""
    return v0.x * v1.x + v0.y * v1.y + v0.z * v1.z


@ti.func
def cross(v0: vec4, v1: vec4) -> vec4:
    """Cross product of the x, y, z parts. The result has w = 0."""
    return vec4(
        v0.y * v1.z - v0.z * v1.y,
        v0.z * v1.x - v0.x * v1.z,
        v0.x * v1.y - v0.y * v1.x,
        0.0,
    )


@ti.func
def magnitude(v: vec4) -> ti.f32:
    """Length of the vector including the homogeneous component."""
    return ti.sqrt(v.x * v.x + v.y * v.y + v.z * v.z + v.w * v.w)


@ti.func
def normalize(v: vec4) -> vec4:
    """Normalize a vector to unit length.

    All four components are divided by the magnitude. A zero-length vector
    is divided by 1 instead, so it comes back unchanged rather than NaN.

    Args:
        v: The input vector.

    Returns:
        A unit vector in the direction of v, or v itself if it is zero.
    """
    mag = magnitude(v)
    divisor = ti.select(mag == 0.0, 1.0, mag)
    return v / divisor


@ti.func
def projection(v1: vec4, v2: vec4) -> vec4:
    """Project v1 onto v2.

    Computes v2 * (dot(v1, v2) / dot(v2, v2)). Projecting onto the zero
    vector yields the zero vector.
    """
    denom = dot(v2, v2)
    result = vec4(0.0)
    if denom != 0.0:
        result = scale(v2, dot(v1, v2) / denom)
    return result


@ti.func
def equal(v0: vec4, v1: vec4, tolerance: ti.f32) -> ti.i32:
    """Check whether every component differs by less than the tolerance.

    Returns:
        1 if |v0 - v1| < tolerance for x, y, z and w, 0 otherwise.
    """
    return (
        ti.abs(v0.x - v1.x) < tolerance
        and ti.abs(v0.y - v1.y) < tolerance
        and ti.abs(v0.z - v1.z) < tolerance
        and ti.abs(v0.w - v1.w) < tolerance
    )


@ti.func
def equal_number(n0: ti.f32, n1: ti.f32, tolerance: ti.f32) -> ti.i32:
    """Scalar form of equal()."""
    return ti.abs(n0 - n1) < tolerance
