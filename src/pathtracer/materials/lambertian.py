"""Lambertian (ideal diffuse) material implementation.

A Lambertian surface scatters every incoming ray into a random direction in
the hemisphere around the surface normal and tints it by its albedo. It never
absorbs a ray outright.

The scattered direction is a point drawn uniformly inside the unit sphere and
flipped into the normal's hemisphere. If that offset degenerates to (almost)
the zero vector, the normal itself is used so the outgoing ray always has a
usable direction.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.pathtracer.materials.lambertian import Lambertian, scatter_lambertian
    >>> red = Lambertian(albedo=(0.7, 0.3, 0.3))
    >>> # Use within a Taichi kernel:
    >>> # did_scatter, attenuation, scattered, rng = scatter_lambertian(
    >>> #     albedo, ray_in, record, rng
    >>> # )
"""

from dataclasses import dataclass
from typing import ClassVar

import taichi as ti
import taichi.math as tm

from src.pathtracer.core.ray import Ray, make_ray, near_zero, random_in_hemisphere
from src.pathtracer.geometry.sphere import HitRecord
from src.pathtracer.materials.material import MaterialType, validate_albedo

# Type alias for 3D vectors
vec3 = tm.vec3


@dataclass(frozen=True)
class Lambertian:
    """Lambertian (ideal diffuse) material properties.

    Attributes:
        albedo: The diffuse reflectance color (RGB, each component in [0, 1]).
    """

    albedo: tuple[float, float, float]

    kind: ClassVar[MaterialType] = MaterialType.LAMBERTIAN

    def __post_init__(self) -> None:
        object.__setattr__(self, "albedo", validate_albedo(self.albedo))

    def as_record(self) -> tuple[MaterialType, tuple[float, float, float], float]:
        """Return (kind, albedo, roughness) for the material arena."""
        return self.kind, self.albedo, 0.0


@ti.func
def diffuse_direction(offset: vec3, normal: vec3) -> vec3:
    """Return ``offset``, or ``normal`` when the offset is (almost) zero."""
    direction = offset
    if near_zero(offset):
        direction = normal
    return direction


@ti.func
def scatter_lambertian(albedo: vec3, ray_in: Ray, record: HitRecord, state: ti.u32):
    """Scatter a ray off a Lambertian surface.

    Args:
        albedo: The diffuse reflectance color (RGB).
        ray_in: The incoming ray (unused; diffuse scattering is view independent).
        record: The hit record at the surface.
        state: The RNG state.

    Returns:
        A tuple of (did_scatter, attenuation, scattered, new_state) where
        did_scatter is always 1 and attenuation equals the albedo.
    """
    offset, rng = random_in_hemisphere(record.normal, state)
    target = record.point + diffuse_direction(offset, record.normal)
    scattered = make_ray(record.point, target - record.point)

    return 1, albedo, scattered, rng
