"""Scene module.

Components:
    scene: Python-side Scene aggregate and SceneHit
    storage: Sphere storage in Taichi fields and closest-hit intersection
    demo: Ready-made demo scenes

Scene data is uploaded to GPU-friendly Structure-of-Arrays fields before each
render; materials are referenced by small integer arena handles.
"""

from .demo import MaterialSceneParams, create_material_scene, create_two_sphere_scene
from .scene import Scene, SceneHit
from .storage import (
    add_sphere,
    clear_spheres,
    get_sphere_count,
    intersect_scene,
)

__all__ = [
    "Scene",
    "SceneHit",
    "add_sphere",
    "clear_spheres",
    "get_sphere_count",
    "intersect_scene",
    "MaterialSceneParams",
    "create_material_scene",
    "create_two_sphere_scene",
]
