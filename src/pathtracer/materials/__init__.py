"""Materials module.

Components:
    material: Material kinds, validation and the GPU material arena
    lambertian: Ideal diffuse reflection
    metallic: Specular reflection with optional roughness

Every scatter function shares one contract: given the incoming ray, the hit
record and an RNG state it returns (did_scatter, attenuation, scattered, rng).
"""

from .lambertian import Lambertian, scatter_lambertian
from .material import (
    MaterialType,
    add_material,
    clear_materials,
    get_material_albedo,
    get_material_count,
    get_material_kind,
    get_material_roughness,
    validate_albedo,
)
from .metallic import Metallic, scatter_metallic

__all__ = [
    # Kinds and arena
    "MaterialType",
    "validate_albedo",
    "add_material",
    "clear_materials",
    "get_material_count",
    "get_material_kind",
    "get_material_albedo",
    "get_material_roughness",
    # Lambertian
    "Lambertian",
    "scatter_lambertian",
    # Metallic
    "Metallic",
    "scatter_metallic",
]
