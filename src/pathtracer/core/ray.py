"""Ray data structure, vector utilities and explicit random sampling.

This module provides the Ray dataclass and the small set of vector helpers the
path tracer needs inside Taichi kernels. Random sampling does not use the global
``ti.random`` stream: every sampling function takes an integer RNG state and
returns the advanced state, so that a render is reproducible for a fixed seed
no matter how Taichi schedules pixels across threads.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.pathtracer.core.ray import Ray, ray_at, vec3
    >>> ray = Ray(origin=vec3(0.0, 0.0, 0.0), direction=vec3(0.0, 0.0, -1.0))
    >>> # point = ray_at(ray, 5.0) inside a kernel
"""

import taichi as ti
import taichi.math as tm

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3

# Components smaller than this (in absolute value) count as zero
NEAR_ZERO_EPSILON = 1e-8


@ti.dataclass
class Ray:
    """A ray with an origin point and direction vector.

    Attributes:
        origin: The starting point of the ray (vec3).
        direction: The direction vector of the ray (vec3). It is not required
            to be normalized.
    """

    origin: vec3
    direction: vec3


@ti.func
def ray_at(ray: Ray, t: ti.f32) -> vec3:
    """Compute the point origin + t * direction along the ray."""
    return ray.origin + t * ray.direction


@ti.func
def make_ray(origin: vec3, direction: vec3) -> Ray:
    """Create a ray from origin and direction inside a kernel."""
    return Ray(origin=origin, direction=direction)


# =============================================================================
# Vector Utility Functions
# =============================================================================


@ti.func
def length_squared(v: vec3) -> ti.f32:
    """Compute the squared length of a vector."""
    return tm.dot(v, v)


@ti.func
def reflect(incident: vec3, normal: vec3) -> vec3:
    """Reflect an incident vector about a normal.

    Args:
        incident: The incoming direction vector (pointing toward the surface).
        normal: The surface normal (should be normalized).

    Returns:
        The reflected direction vector I - 2(I . N)N.
    """
    return incident - 2.0 * tm.dot(incident, normal) * normal


@ti.func
def near_zero(v: vec3) -> ti.i32:
    """Check if a vector is near zero in all components.

    The same absolute-value test is applied to each of the three axes.

    Returns:
        1 if all components are near zero, 0 otherwise.
    """
    s = NEAR_ZERO_EPSILON
    return ti.abs(v.x) <= s and ti.abs(v.y) <= s and ti.abs(v.z) <= s


@ti.pyfunc
def fit_range(x, imin, imax, omin, omax):
    """Linearly remap ``x`` from [imin, imax] into [omin, omax].

    No clamping is applied, so values outside the input range map outside the
    output range. Callable both from Python (scalars or NumPy arrays) and from
    Taichi kernels.

    Args:
        x: The value to remap.
        imin: Lower bound of the input range.
        imax: Upper bound of the input range (must differ from imin).
        omin: Lower bound of the output range.
        omax: Upper bound of the output range.

    Returns:
        (omax - omin) * (x - imin) / (imax - imin) + omin
    """
    return (omax - omin) * (x - imin) / (imax - imin) + omin


# =============================================================================
# Explicit Random Number Generation
# =============================================================================

# Numerical Recipes LCG constants (32-bit, wrapping)
_LCG_MULTIPLIER = 1664525
_LCG_INCREMENT = 1013904223

# 2^-24: maps the top 24 bits of the state into [0, 1)
_INV_2_24 = 1.0 / 16777216.0


@ti.func
def _wang_hash(value: ti.u32) -> ti.u32:
    """Scramble a 32-bit integer with Thomas Wang's hash."""
    h = value
    h = (h ^ ti.u32(61)) ^ (h >> 16)
    h *= ti.u32(9)
    h = h ^ (h >> 4)
    h *= ti.u32(0x27D4EB2D)
    h = h ^ (h >> 15)
    return h


@ti.func
def rng_init(seed: ti.i32, pixel_index: ti.i32, sample_index: ti.i32) -> ti.u32:
    """Derive an independent RNG state for one sample of one pixel.

    Args:
        seed: The per-render seed.
        pixel_index: Flat index of the pixel in the image.
        sample_index: Index of the sample within the pixel.

    Returns:
        A scrambled 32-bit state, never zero.
    """
    state = _wang_hash(ti.cast(seed, ti.u32))
    state = _wang_hash(state ^ ti.cast(pixel_index, ti.u32))
    state = _wang_hash(state ^ ti.cast(sample_index, ti.u32))
    if state == ti.u32(0):
        state = ti.u32(1)
    return state


@ti.func
def rng_next(state: ti.u32):
    """Advance the RNG and draw a uniform float in [0, 1).

    Returns:
        A tuple (value, new_state).
    """
    new_state = state * ti.u32(_LCG_MULTIPLIER) + ti.u32(_LCG_INCREMENT)
    value = ti.cast(new_state >> 8, ti.f32) * _INV_2_24
    return value, new_state


@ti.func
def random_in_unit_sphere(state: ti.u32):
    """Generate a random point inside the unit sphere.

    Uses rejection sampling: components are drawn uniformly in [-1, 1) until
    the point's squared length is below 1.

    Returns:
        A tuple (point, new_state).
    """
    rng = state
    p = vec3(0.0, 0.0, 0.0)
    found = False
    # Rejection sampling loop
    for _ in range(100):  # Max iterations to avoid infinite loops
        if not found:
            x, rng = rng_next(rng)
            y, rng = rng_next(rng)
            z, rng = rng_next(rng)
            p = vec3(x * 2.0 - 1.0, y * 2.0 - 1.0, z * 2.0 - 1.0)
            if length_squared(p) < 1.0:
                found = True
    if not found:
        # Out of draws: the center is always inside
        p = vec3(0.0, 0.0, 0.0)
    return p, rng


@ti.func
def random_in_hemisphere(normal: vec3, state: ti.u32):
    """Generate a random point in the unit sphere on the same side as normal.

    A unit-sphere sample is flipped when its dot product with the normal is
    not positive.

    Returns:
        A tuple (point, new_state).
    """
    in_unit_sphere, rng = random_in_unit_sphere(state)
    result = in_unit_sphere
    if tm.dot(in_unit_sphere, normal) <= 0.0:
        result = -in_unit_sphere
    return result, rng
