"""Material kinds, parameter validation and the GPU material arena.

Materials are shared by any number of spheres. On the GPU side they live in a
single arena of Taichi fields indexed by a small integer handle; every sphere
stores the handle of its material, and the path tracer dispatches on the
MaterialType stored at that handle.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.pathtracer.materials.lambertian import Lambertian
    >>> from src.pathtracer.materials.material import add_material, clear_materials
    >>> clear_materials()
    >>> handle = add_material(Lambertian((0.5, 0.5, 0.5)))
"""

from enum import IntEnum
from typing import TYPE_CHECKING, Union

import taichi as ti
import taichi.math as tm

from src.pathtracer.config import MAX_MATERIALS

if TYPE_CHECKING:
    from src.pathtracer.materials.lambertian import Lambertian
    from src.pathtracer.materials.metallic import Metallic

    Material = Union[Lambertian, Metallic]

# Type alias for 3D vectors
vec3 = tm.vec3


class MaterialType(IntEnum):
    """Enumeration of supported material types.

    Used for material dispatch in the path tracer to determine which
    scattering function to call.
    """

    LAMBERTIAN = 0
    METALLIC = 1


def validate_albedo(albedo: tuple[float, float, float]) -> tuple[float, float, float]:
    """Check an albedo for energy conservation and return it as floats.

    Raises:
        ValueError: If the albedo does not have 3 components or any component
            is outside [0, 1].
    """
    if len(albedo) != 3:
        raise ValueError(f"Albedo must have 3 components, got {len(albedo)}")
    for i, component in enumerate(albedo):
        if not 0.0 <= component <= 1.0:
            raise ValueError(
                f"Albedo component {i} = {component} is outside [0, 1]. "
                "This would violate energy conservation."
            )
    return (float(albedo[0]), float(albedo[1]), float(albedo[2]))


# =============================================================================
# Material Arena (GPU-side storage)
# =============================================================================

material_kinds = ti.field(dtype=ti.i32, shape=MAX_MATERIALS)
material_albedos = ti.Vector.field(3, dtype=ti.f32, shape=MAX_MATERIALS)
material_roughnesses = ti.field(dtype=ti.f32, shape=MAX_MATERIALS)
num_materials = ti.field(dtype=ti.i32, shape=())


def clear_materials() -> None:
    """Clear the material arena.

    Resets the material count to zero. Existing data in the fields will be
    overwritten when new materials are added.
    """
    num_materials[None] = 0


def add_material(material: "Material") -> int:
    """Append a material to the arena.

    Args:
        material: A Lambertian or Metallic instance.

    Returns:
        The arena handle of the added material.

    Raises:
        RuntimeError: If the maximum number of materials is exceeded.
    """
    idx = num_materials[None]
    if idx >= MAX_MATERIALS:
        raise RuntimeError(f"Maximum number of materials ({MAX_MATERIALS}) exceeded")

    kind, albedo, roughness = material.as_record()
    material_kinds[idx] = int(kind)
    material_albedos[idx] = vec3(albedo[0], albedo[1], albedo[2])
    material_roughnesses[idx] = roughness
    num_materials[None] = idx + 1
    return idx


def get_material_count() -> int:
    """Get the number of materials in the arena."""
    return int(num_materials[None])


@ti.func
def get_material_kind(material_id: ti.i32) -> ti.i32:
    """Get the MaterialType for an arena handle.

    Returns:
        The material type as an integer, or -1 for an invalid handle.
    """
    result = -1
    if 0 <= material_id < num_materials[None]:
        result = material_kinds[material_id]
    return result


@ti.func
def get_material_albedo(material_id: ti.i32) -> vec3:
    """Get the albedo stored at an arena handle."""
    return material_albedos[material_id]


@ti.func
def get_material_roughness(material_id: ti.i32) -> ti.f32:
    """Get the roughness stored at an arena handle (0 for Lambertian)."""
    return material_roughnesses[material_id]
