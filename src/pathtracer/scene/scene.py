"""Python-side scene description.

A Scene is an ordered collection of spheres. Materials may be shared between
spheres; on upload they are interned into the material arena by identity, so
every distinct material object gets exactly one handle.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.pathtracer.geometry.sphere import Sphere
    >>> from src.pathtracer.materials.lambertian import Lambertian
    >>> from src.pathtracer.scene.scene import Scene
    >>> grey = Lambertian((0.5, 0.5, 0.5))
    >>> scene = Scene()
    >>> scene.add(Sphere(0.5, (0.0, 0.0, -1.0), grey))
    >>> hit = scene.hit((0.0, 0.0, 0.0), (0.0, 0.0, -1.0), 0.001, float("inf"))
    >>> round(hit.t, 3)
    0.5
"""

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Iterable, Optional

import taichi as ti
import taichi.math as tm

from src.pathtracer.config import MAX_SPHERES
from src.pathtracer.core.ray import Ray
from src.pathtracer.geometry.sphere import Sphere
from src.pathtracer.materials.material import add_material, clear_materials
from src.pathtracer.scene.storage import add_sphere, clear_spheres, intersect_scene

if TYPE_CHECKING:
    from src.pathtracer.materials.material import Material

logger = logging.getLogger(__name__)

vec3 = tm.vec3


@dataclass(frozen=True)
class SceneHit:
    """A ray-scene intersection returned to Python callers.

    Attributes:
        t: Ray parameter of the hit.
        point: World-space hit point.
        normal: Unit normal, oriented against the incoming ray.
        front_face: True if the ray struck the outside of the sphere.
        material: The material object of the struck sphere.
    """

    t: float
    point: tuple[float, float, float]
    normal: tuple[float, float, float]
    front_face: bool
    material: "Material"


class Scene:
    """An ordered collection of spheres."""

    def __init__(self, spheres: Optional[Iterable[Sphere]] = None) -> None:
        self._spheres: list[Sphere] = []
        for sphere in spheres or ():
            self.add(sphere)

    def add(self, sphere: Sphere) -> None:
        """Append a sphere to the scene.

        Raises:
            RuntimeError: If the scene already holds the maximum number of spheres.
        """
        if len(self._spheres) >= MAX_SPHERES:
            raise RuntimeError(f"Maximum number of spheres ({MAX_SPHERES}) exceeded")
        self._spheres.append(sphere)

    @property
    def spheres(self) -> tuple[Sphere, ...]:
        """The spheres in insertion order."""
        return tuple(self._spheres)

    @property
    def materials(self) -> list["Material"]:
        """Distinct materials in arena order (first use wins)."""
        materials: list["Material"] = []
        seen: set[int] = set()
        for sphere in self._spheres:
            if id(sphere.material) not in seen:
                seen.add(id(sphere.material))
                materials.append(sphere.material)
        return materials

    def __len__(self) -> int:
        return len(self._spheres)

    def is_empty(self) -> bool:
        return not self._spheres

    def upload(self) -> list["Material"]:
        """Write spheres and materials into the Taichi scene fields.

        Returns:
            The material arena: the list index of each material is its handle.
        """
        clear_spheres()
        clear_materials()

        materials = self.materials
        handles = {id(material): add_material(material) for material in materials}
        for sphere in self._spheres:
            add_sphere(sphere.center, sphere.radius, handles[id(sphere.material)])

        logger.debug(
            "Uploaded scene: %d spheres, %d materials", len(self._spheres), len(materials)
        )
        return materials

    def hit(
        self,
        origin: tuple[float, float, float],
        direction: tuple[float, float, float],
        t_min: float,
        t_max: float,
    ) -> Optional[SceneHit]:
        """Find the closest sphere hit by a ray.

        Returns:
            The closest hit with t in [t_min, t_max], or None on a miss.
        """
        materials = self.upload()
        _query_scene(
            vec3(origin[0], origin[1], origin[2]),
            vec3(direction[0], direction[1], direction[2]),
            t_min,
            t_max,
        )

        if _query_hit[None] == 0:
            return None

        point = _query_point[None]
        normal = _query_normal[None]
        return SceneHit(
            t=float(_query_t[None]),
            point=(float(point[0]), float(point[1]), float(point[2])),
            normal=(float(normal[0]), float(normal[1]), float(normal[2])),
            front_face=bool(_query_front_face[None]),
            material=materials[_query_material_id[None]],
        )


# Single-ray query results
_query_hit = ti.field(dtype=ti.i32, shape=())
_query_t = ti.field(dtype=ti.f32, shape=())
_query_point = ti.Vector.field(3, dtype=ti.f32, shape=())
_query_normal = ti.Vector.field(3, dtype=ti.f32, shape=())
_query_front_face = ti.field(dtype=ti.i32, shape=())
_query_material_id = ti.field(dtype=ti.i32, shape=())


@ti.kernel
def _query_scene(origin: vec3, direction: vec3, t_min: ti.f32, t_max: ti.f32):
    for _ in range(1):
        rec = intersect_scene(Ray(origin=origin, direction=direction), t_min, t_max)
        _query_hit[None] = rec.hit
        _query_t[None] = rec.t
        _query_point[None] = rec.point
        _query_normal[None] = rec.normal
        _query_front_face[None] = rec.front_face
        _query_material_id[None] = rec.material_id
