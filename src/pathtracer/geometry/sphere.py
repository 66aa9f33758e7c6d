"""Sphere primitive and ray-sphere intersection.

This module provides the Python-side Sphere description used to build scenes
and the Taichi intersection routine used by the path tracer.

The intersection solves the half-b form of the ray-sphere quadratic:
    a*t^2 + 2*h*t + c = 0

where:
    a = dot(direction, direction)
    h = dot(direction, origin - center)
    c = dot(origin - center, origin - center) - radius^2

The nearer root is tried first and the farther one only if the nearer root
lies outside the accepted interval [t_min, t_max].

Example:
    >>> from src.pathtracer.geometry.sphere import Sphere
    >>> from src.pathtracer.materials.lambertian import Lambertian
    >>> ground = Sphere(radius=100.0, center=(0.0, -100.5, -1.0),
    ...                 material=Lambertian((0.8, 0.8, 0.1)))
"""

import math
from dataclasses import dataclass
from typing import TYPE_CHECKING

import taichi as ti
import taichi.math as tm

from src.pathtracer.core.ray import Ray, ray_at

if TYPE_CHECKING:
    from src.pathtracer.materials.material import Material
    from src.pathtracer.scene.scene import SceneHit

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3


@dataclass(frozen=True)
class Sphere:
    """A sphere primitive with a shared material.

    Attributes:
        radius: The radius of the sphere (strictly positive).
        center: The center point of the sphere (x, y, z).
        material: The surface material. The same material instance may be
            referenced by any number of spheres.
    """

    radius: float
    center: tuple[float, float, float]
    material: "Material"

    def __post_init__(self) -> None:
        if not math.isfinite(self.radius) or self.radius <= 0.0:
            raise ValueError(f"Sphere radius must be positive, got {self.radius}")
        if len(self.center) != 3:
            raise ValueError(f"Sphere center must have 3 components, got {self.center}")

    def hit(
        self,
        origin: tuple[float, float, float],
        direction: tuple[float, float, float],
        t_min: float,
        t_max: float,
    ) -> "SceneHit | None":
        """Intersect a ray with this sphere alone.

        Returns:
            The hit, or None if the ray misses within [t_min, t_max].
        """
        from src.pathtracer.scene.scene import Scene

        return Scene([self]).hit(origin, direction, t_min, t_max)


@ti.dataclass
class HitRecord:
    """Record of a ray-primitive intersection.

    Attributes:
        hit: Whether the ray intersected the primitive (1 if hit, 0 if miss).
        t: The parameter value along the ray where intersection occurred.
        point: The 3D point where the ray intersected the surface.
        normal: The unit surface normal, oriented against the incoming ray.
        front_face: 1 if the ray hit the outside of the surface, 0 otherwise.
            Not used by the current materials.
        material_id: Arena handle of the struck primitive's material.
            Filled in by the scene; -1 for a bare sphere test.
    """

    hit: ti.i32
    t: ti.f32
    point: vec3
    normal: vec3
    front_face: ti.i32
    material_id: ti.i32


@ti.func
def hit_sphere(
    ray: Ray,
    center: vec3,
    radius: ti.f32,
    t_min: ti.f32,
    t_max: ti.f32,
) -> HitRecord:
    """Test for ray-sphere intersection.

    Args:
        ray: The ray to test. Its direction need not be normalized.
        center: The center of the sphere.
        radius: The radius of the sphere.
        t_min: Smallest accepted t (inclusive).
        t_max: Largest accepted t (inclusive).

    Returns:
        A HitRecord; check its ``hit`` field to determine if a hit occurred.
    """
    oc = ray.origin - center

    a = tm.dot(ray.direction, ray.direction)
    half_b = tm.dot(oc, ray.direction)
    c = tm.dot(oc, oc) - radius * radius

    discriminant = half_b * half_b - a * c

    # Initialize result fields (Taichi requires outer-scope declaration)
    did_hit = 0
    hit_t = 0.0
    hit_point = vec3(0.0, 0.0, 0.0)
    hit_normal = vec3(0.0, 0.0, 0.0)
    is_front_face = 0

    if discriminant >= 0.0:
        sqrt_d = ti.sqrt(discriminant)

        # Nearest root first
        t = (-half_b - sqrt_d) / a
        valid = t >= t_min and t <= t_max

        if not valid:
            t = (-half_b + sqrt_d) / a
            valid = t >= t_min and t <= t_max

        if valid:
            did_hit = 1
            hit_t = t
            hit_point = ray_at(ray, t)

            outward_normal = (hit_point - center) / radius

            # Front face: ray direction and outward normal point in opposite directions
            if tm.dot(ray.direction, outward_normal) < 0.0:
                is_front_face = 1
                hit_normal = outward_normal
            else:
                is_front_face = 0
                hit_normal = -outward_normal

    return HitRecord(
        hit=did_hit,
        t=hit_t,
        point=hit_point,
        normal=hit_normal,
        front_face=is_front_face,
        material_id=-1,
    )
