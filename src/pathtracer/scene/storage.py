"""GPU-side sphere storage and closest-hit scene intersection.

Spheres are stored in Taichi fields (Structure of Arrays) for efficient access
inside kernels. Each sphere carries the arena handle of its material, see
``src.pathtracer.materials.material``.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.pathtracer.scene.storage import add_sphere, clear_spheres
    >>> clear_spheres()
    >>> add_sphere((0.0, 0.0, -1.0), 0.5, material_id=0)
    0
    >>> # Use intersect_scene within a Taichi kernel
"""

import taichi as ti
import taichi.math as tm

from src.pathtracer.config import MAX_SPHERES
from src.pathtracer.core.ray import Ray
from src.pathtracer.geometry.sphere import HitRecord, hit_sphere

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3

# Sphere storage: Structure of Arrays layout for GPU efficiency
sphere_centers = ti.Vector.field(3, dtype=ti.f32, shape=MAX_SPHERES)
sphere_radii = ti.field(dtype=ti.f32, shape=MAX_SPHERES)
sphere_material_ids = ti.field(dtype=ti.i32, shape=MAX_SPHERES)
num_spheres = ti.field(dtype=ti.i32, shape=())


def clear_spheres() -> None:
    """Clear all spheres from the scene storage.

    Resets the sphere count to zero. The actual field data is not cleared but
    will be overwritten when new spheres are added.
    """
    num_spheres[None] = 0


def add_sphere(
    center: tuple[float, float, float],
    radius: float,
    material_id: int = 0,
) -> int:
    """Add a sphere to the scene storage.

    Args:
        center: The center point of the sphere.
        radius: The radius of the sphere.
        material_id: The material arena handle for this sphere.

    Returns:
        The index of the added sphere.

    Raises:
        RuntimeError: If the maximum number of spheres is exceeded.
    """
    idx = num_spheres[None]
    if idx >= MAX_SPHERES:
        raise RuntimeError(f"Maximum number of spheres ({MAX_SPHERES}) exceeded")
    sphere_centers[idx] = vec3(center[0], center[1], center[2])
    sphere_radii[idx] = radius
    sphere_material_ids[idx] = material_id
    num_spheres[None] = idx + 1
    return idx


def get_sphere_count() -> int:
    """Get the number of spheres in the scene storage."""
    return int(num_spheres[None])


@ti.func
def intersect_scene(ray: Ray, t_min: ti.f32, t_max: ti.f32) -> HitRecord:
    """Find the closest intersection of a ray with all stored spheres.

    Spheres are tested in insertion order and the accepted interval is narrowed
    to the closest hit found so far. A later sphere replaces the current hit only
    when it is strictly closer, so the first sphere wins exact ties.

    Args:
        ray: The ray to test.
        t_min: Smallest accepted t (inclusive).
        t_max: Largest accepted t (inclusive).

    Returns:
        A HitRecord with the material handle of the struck sphere; check its
        ``hit`` field to determine if any sphere was hit.
    """
    closest = HitRecord(
        hit=0,
        t=0.0,
        point=vec3(0.0, 0.0, 0.0),
        normal=vec3(0.0, 0.0, 0.0),
        front_face=0,
        material_id=-1,
    )
    closest_t = t_max

    for i in range(num_spheres[None]):
        rec = hit_sphere(ray, sphere_centers[i], sphere_radii[i], t_min, closest_t)
        # Strict comparison keeps the first sphere on exact ties
        if rec.hit == 1 and (closest.hit == 0 or rec.t < closest_t):
            closest_t = rec.t
            closest = rec
            closest.material_id = sphere_material_ids[i]

    return closest
