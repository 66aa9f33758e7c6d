"""Metallic (specular reflective) material implementation.

This module implements the metallic material, which models specular reflection
with optional roughness (fuzziness). Perfect metals (roughness=0) produce
mirror-like reflections, while rougher metals scatter reflected rays within a
sphere around the mirror direction.

The reflection formula is:
    R = I - 2(I . N)N

where I is the incident direction and N is the surface normal. The normalized
reflection is offset by roughness times a random point in the unit sphere.
Offsets that push the direction below the surface absorb the ray.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.pathtracer.materials.metallic import Metallic
    >>> gold = Metallic(albedo=(0.8, 0.6, 0.2), roughness=1.0)
"""

from dataclasses import dataclass
from typing import ClassVar

import taichi as ti
import taichi.math as tm

from src.pathtracer.core.ray import Ray, make_ray, random_in_unit_sphere, reflect
from src.pathtracer.geometry.sphere import HitRecord
from src.pathtracer.materials.material import MaterialType, validate_albedo

# Type alias for 3D vectors
vec3 = tm.vec3


@dataclass(frozen=True)
class Metallic:
    """Metallic (specular reflective) material properties.

    Attributes:
        albedo: The reflective color (RGB, each component in [0, 1]).
            Represents the color tint of reflected light.
        roughness: The surface roughness/fuzziness in [0, 1].
            0 = perfect mirror, 1 = maximum fuzziness.
    """

    albedo: tuple[float, float, float]
    roughness: float = 0.0

    kind: ClassVar[MaterialType] = MaterialType.METALLIC

    def __post_init__(self) -> None:
        object.__setattr__(self, "albedo", validate_albedo(self.albedo))
        if not 0.0 <= self.roughness <= 1.0:
            raise ValueError(
                f"Roughness = {self.roughness} is outside [0, 1]. "
                "Roughness must be between 0 (perfect mirror) and 1 (maximum fuzz)."
            )
        object.__setattr__(self, "roughness", float(self.roughness))

    def as_record(self) -> tuple[MaterialType, tuple[float, float, float], float]:
        """Return (kind, albedo, roughness) for the material arena."""
        return self.kind, self.albedo, self.roughness


@ti.func
def scatter_metallic(
    albedo: vec3,
    roughness: ti.f32,
    ray_in: Ray,
    record: HitRecord,
    state: ti.u32,
):
    """Scatter a ray off a metallic surface.

    Args:
        albedo: The reflective color (RGB).
        roughness: The surface roughness in [0, 1]. 0 = perfect mirror.
        ray_in: The incoming ray. Its direction need not be normalized.
        record: The hit record at the surface.
        state: The RNG state.

    Returns:
        A tuple of (did_scatter, attenuation, scattered, new_state) where:
        - did_scatter: 1 if the ray leaves above the surface, 0 if absorbed.
        - attenuation: The color attenuation (equals albedo for metals).
        - scattered: The outgoing ray starting at the hit point.
    """
    reflected = tm.normalize(reflect(ray_in.direction, record.normal))

    fuzz, rng = random_in_unit_sphere(state)
    direction = reflected + roughness * fuzz
    scattered = make_ray(record.point, direction)

    did_scatter = 0
    if tm.dot(direction, record.normal) > 0.0:
        did_scatter = 1

    return did_scatter, albedo, scattered, rng
