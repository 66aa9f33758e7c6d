"""Core rendering module.

Components:
    ray: Ray data structure, vector utilities and explicit random sampling
    integrator: The render driver (ray_color, render, trace_ray)

All compute-intensive operations use Taichi kernels.
"""

from .ray import (
    Ray,
    fit_range,
    length_squared,
    make_ray,
    near_zero,
    random_in_hemisphere,
    random_in_unit_sphere,
    ray_at,
    reflect,
    rng_init,
    rng_next,
    vec3,
)

# Note: integrator is NOT imported here; it declares Taichi fields and pulls in
# the scene and camera modules. Import it directly from src.pathtracer.core.integrator.

__all__ = [
    "Ray",
    "ray_at",
    "make_ray",
    "vec3",
    "length_squared",
    "reflect",
    "near_zero",
    "fit_range",
    "rng_init",
    "rng_next",
    "random_in_unit_sphere",
    "random_in_hemisphere",
]
