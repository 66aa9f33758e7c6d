"""Ready-made demo scenes.

The material scene is the standard four-sphere setup: a large yellowish ground
sphere, a diffuse sphere in the center flanked by a smooth-ish metal sphere on
the left and a fully rough gold-colored metal sphere on the right.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.pathtracer.scene.demo import create_material_scene
    >>> from src.pathtracer.camera.camera import setup_camera
    >>>
    >>> scene, camera = create_material_scene(aspect_ratio=1.0)
    >>> setup_camera(camera)
"""

from dataclasses import dataclass

from src.pathtracer.camera.camera import Camera
from src.pathtracer.geometry.sphere import Sphere
from src.pathtracer.materials.lambertian import Lambertian
from src.pathtracer.materials.metallic import Metallic
from src.pathtracer.scene.scene import Scene

# All demo spheres sit on this depth plane
SPHERES_Z = -1.0


@dataclass
class MaterialSceneParams:
    """Parameters for customizing the material demo scene.

    Attributes:
        ground_color: Albedo of the ground sphere.
        center_color: Albedo of the center diffuse sphere.
        left_color: Albedo of the left metal sphere.
        left_roughness: Roughness of the left metal sphere.
        right_color: Albedo of the right metal sphere.
        right_roughness: Roughness of the right metal sphere.
    """

    ground_color: tuple[float, float, float] = (0.8, 0.8, 0.1)
    center_color: tuple[float, float, float] = (0.7, 0.3, 0.3)
    left_color: tuple[float, float, float] = (0.8, 0.8, 0.8)
    left_roughness: float = 0.3
    right_color: tuple[float, float, float] = (0.8, 0.6, 0.2)
    right_roughness: float = 1.0


def create_material_scene(
    aspect_ratio: float = 1.0,
    params: MaterialSceneParams | None = None,
) -> tuple[Scene, Camera]:
    """Create the four-sphere material demo scene.

    Args:
        aspect_ratio: Image width divided by height, used for the camera.
        params: Optional material overrides.

    Returns:
        A tuple of (scene, camera).
    """
    if params is None:
        params = MaterialSceneParams()

    mat_ground = Lambertian(params.ground_color)
    mat_center = Lambertian(params.center_color)
    mat_left = Metallic(params.left_color, params.left_roughness)
    mat_right = Metallic(params.right_color, params.right_roughness)

    scene = Scene()
    scene.add(Sphere(100.0, (0.0, -100.5, SPHERES_Z), mat_ground))
    scene.add(Sphere(0.5, (0.0, 0.0, SPHERES_Z), mat_center))
    scene.add(Sphere(0.5, (-1.0, 0.0, SPHERES_Z), mat_left))
    scene.add(Sphere(0.5, (1.0, 0.0, SPHERES_Z), mat_right))

    return scene, Camera.from_aspect_ratio(aspect_ratio)


def create_two_sphere_scene(aspect_ratio: float = 1.0) -> tuple[Scene, Camera]:
    """Create a diffuse sphere resting on a diffuse ground sphere.

    Both spheres share a single grey material.
    """
    grey = Lambertian((0.5, 0.5, 0.5))

    scene = Scene()
    scene.add(Sphere(100.0, (0.0, -100.5, SPHERES_Z), grey))
    scene.add(Sphere(0.5, (0.0, 0.0, SPHERES_Z), grey))

    return scene, Camera.from_aspect_ratio(aspect_ratio)
