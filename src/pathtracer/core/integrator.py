"""Path tracing integrator.

This module implements the render driver: for every pixel it averages a number
of jittered camera samples, each traced through the scene by ``ray_color``.

``ray_color`` follows a path until it escapes into the sky, is absorbed by a
material, or runs out of bounces. Every bounce multiplies the path throughput
by the material's attenuation; an escaping path picks up the sky gradient
scaled by that throughput, while absorbed and exhausted paths are black.

Randomness is explicit: each (pixel, sample) pair gets its own RNG state
derived from the render seed, so a render is fully reproducible.

The output is a flat linear buffer of 4 floats (R, G, B, A) per pixel. The
first row of the buffer is the top row of the image.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.pathtracer.core.integrator import render
    >>> from src.pathtracer.scene.demo import create_material_scene
    >>>
    >>> scene, camera = create_material_scene(aspect_ratio=1.0)
    >>> buffer = render(64, 64, 8, 5, scene, camera, seed=1)
    >>> buffer.shape
    (16384,)
"""

import logging
import time
from typing import Optional

import numpy as np
import taichi as ti
import taichi.math as tm

from src.pathtracer.camera.camera import Camera, get_ray_at_coords, setup_camera
from src.pathtracer.config import RAY_T_MIN, InvalidRenderConfigError, RenderSettings
from src.pathtracer.core.ray import Ray, fit_range, rng_init, rng_next
from src.pathtracer.geometry.sphere import HitRecord
from src.pathtracer.materials.lambertian import scatter_lambertian
from src.pathtracer.materials.material import (
    MaterialType,
    get_material_albedo,
    get_material_kind,
    get_material_roughness,
)
from src.pathtracer.materials.metallic import scatter_metallic
from src.pathtracer.scene.scene import Scene
from src.pathtracer.scene.storage import intersect_scene

logger = logging.getLogger(__name__)

# Type alias for 3D vectors
vec3 = tm.vec3

# =============================================================================
# Rendering Constants
# =============================================================================

# Sky gradient endpoints: straight down is white, straight up is sky blue
SKY_WHITE = vec3(1.0, 1.0, 1.0)
SKY_BLUE = vec3(0.5, 0.7, 1.0)

# Primaries of the initial test gradient (ACEScg)
_GRADIENT_RED = np.array([1.0, 0.0, 0.0], dtype=np.float32)
_GRADIENT_GREEN = np.array([0.0, 1.0, 0.0], dtype=np.float32)
_GRADIENT_BLUE = np.array([0.0, 0.0, 1.0], dtype=np.float32)


# =============================================================================
# Background
# =============================================================================


@ti.func
def _sky_color(direction: vec3) -> vec3:
    """Vertical white-to-blue gradient by the y component of the unit direction."""
    unit_direction = tm.normalize(direction)
    t = 0.5 * (unit_direction.y + 1.0)
    return tm.mix(SKY_WHITE, SKY_BLUE, t)


def background_color(direction: tuple[float, float, float]) -> tuple[float, float, float]:
    """Color seen by a ray that escapes the scene.

    Args:
        direction: Ray direction (need not be normalized, must not be zero).

    Returns:
        The sky gradient color as (R, G, B).
    """
    unit_direction = np.asarray(direction, dtype=np.float64)
    unit_direction = unit_direction / np.linalg.norm(unit_direction)
    t = 0.5 * (unit_direction[1] + 1.0)
    color = (1.0 - t) * SKY_WHITE.to_numpy() + t * SKY_BLUE.to_numpy()
    return (float(color[0]), float(color[1]), float(color[2]))


# =============================================================================
# Material Dispatch
# =============================================================================


@ti.func
def _scatter_material(material_id: ti.i32, ray_in: Ray, record: HitRecord, state: ti.u32):
    """Dispatch to the scattering function of the struck material.

    Args:
        material_id: Arena handle of the material.
        ray_in: The incoming ray.
        record: The hit record at the surface.
        state: The RNG state.

    Returns:
        A tuple of (did_scatter, attenuation, scattered, new_state). Unknown
        material kinds absorb the ray.
    """
    kind = get_material_kind(material_id)

    # Default values
    did_scatter = 0
    attenuation = vec3(0.0, 0.0, 0.0)
    scattered = Ray(origin=record.point, direction=record.normal)
    rng = state

    if kind == int(MaterialType.LAMBERTIAN):
        albedo = get_material_albedo(material_id)
        did_scatter, attenuation, scattered, rng = scatter_lambertian(
            albedo, ray_in, record, rng
        )

    elif kind == int(MaterialType.METALLIC):
        albedo = get_material_albedo(material_id)
        roughness = get_material_roughness(material_id)
        did_scatter, attenuation, scattered, rng = scatter_metallic(
            albedo, roughness, ray_in, record, rng
        )

    return did_scatter, attenuation, scattered, rng


# =============================================================================
# Path Tracing Core
# =============================================================================


@ti.func
def ray_color(ray: Ray, max_depth: ti.i32, state: ti.u32):
    """Estimate the color carried back along a ray.

    Args:
        ray: The ray to trace.
        max_depth: Remaining number of bounces. 0 or less yields black.
        state: The RNG state.

    Returns:
        A tuple (color, new_state).

    Note:
        Kernel asserts only run under ``ti.init(debug=True)``, so depth is
        bounded by the loop itself and negative depths are rejected in Python
        by ``render`` and ``trace_ray``.
    """
    color = vec3(0.0, 0.0, 0.0)
    throughput = vec3(1.0, 1.0, 1.0)
    current = ray
    rng = state

    # Active flag for path continuation
    active = 1

    for _ in range(max_depth):
        if active == 1:
            record = intersect_scene(current, RAY_T_MIN, tm.inf)

            if record.hit == 0:
                # Ray escaped
                color = throughput * _sky_color(current.direction)
                active = 0
            else:
                did_scatter, attenuation, scattered, rng = _scatter_material(
                    record.material_id, current, record, rng
                )

                if did_scatter == 0:
                    # Absorbed
                    active = 0
                else:
                    throughput *= attenuation
                    current = scattered

    # Still active here means the bounce budget ran out: black
    return color, rng


# =============================================================================
# Rendering Kernels
# =============================================================================


@ti.kernel
def _render_kernel(
    width: ti.i32,
    height: ti.i32,
    samples_per_pixel: ti.i32,
    max_depth: ti.i32,
    seed: ti.i32,
    output: ti.types.ndarray(dtype=ti.f32, ndim=1),
):
    """Render every pixel into ``output`` (RGBA, top row first)."""
    for row, x in ti.ndrange(height, width):
        # Rows are emitted top to bottom
        y = height - 1 - row
        pixel_index = row * width + x

        pixel_color = vec3(0.0, 0.0, 0.0)
        for s in range(samples_per_pixel):
            rng = rng_init(seed, pixel_index, s)
            jitter_x, rng = rng_next(rng)
            jitter_y, rng = rng_next(rng)

            u = fit_range(ti.cast(x, ti.f32) + jitter_x, 0.0, ti.cast(width, ti.f32), 0.0, 1.0)
            v = fit_range(ti.cast(y, ti.f32) + jitter_y, 0.0, ti.cast(height, ti.f32), 0.0, 1.0)

            sample_color, rng = ray_color(get_ray_at_coords(u, v), max_depth, rng)
            pixel_color += sample_color

        pixel_color /= ti.cast(samples_per_pixel, ti.f32)

        base = pixel_index * 4
        output[base + 0] = pixel_color.x
        output[base + 1] = pixel_color.y
        output[base + 2] = pixel_color.z
        output[base + 3] = 1.0


# Single-ray trace result
_trace_result = ti.Vector.field(3, dtype=ti.f32, shape=())


@ti.kernel
def _trace_kernel(origin: vec3, direction: vec3, max_depth: ti.i32, seed: ti.i32):
    for _ in range(1):
        rng = rng_init(seed, 0, 0)
        color, rng = ray_color(Ray(origin=origin, direction=direction), max_depth, rng)
        _trace_result[None] = color


# =============================================================================
# Public Rendering API
# =============================================================================


def _check_scene_and_camera(scene: Optional[Scene], camera: Optional[Camera]) -> None:
    if scene is None or scene.is_empty():
        raise InvalidRenderConfigError("Cannot render an empty scene")
    if camera is None:
        raise InvalidRenderConfigError("A camera is required to render")


def render(
    width: int,
    height: int,
    samples_per_pixel: int,
    max_depth: int,
    scene: Scene,
    camera: Camera,
    *,
    seed: int = 0,
) -> np.ndarray:
    """Render a scene into a linear RGBA buffer.

    Args:
        width: Image width in pixels.
        height: Image height in pixels.
        samples_per_pixel: Number of jittered samples averaged per pixel.
        max_depth: Maximum number of bounces per path.
        scene: The scene to render.
        camera: The camera to render from.
        seed: Seed for the per-sample random number streams.

    Returns:
        A float32 array of length width * height * 4, first row on top.

    Raises:
        InvalidRenderConfigError: If a dimension or the sample count is not
            positive, max_depth is negative, the scene is empty or the camera
            is missing.
    """
    settings = RenderSettings(
        width=width,
        height=height,
        samples_per_pixel=samples_per_pixel,
        max_depth=max_depth,
        seed=seed,
    )
    return render_with_settings(settings, scene, camera)


def render_with_settings(
    settings: RenderSettings,
    scene: Scene,
    camera: Camera,
) -> np.ndarray:
    """Render a scene with the parameters held in ``settings``.

    See ``render`` for the returned buffer layout and raised errors.
    """
    settings.validate()
    _check_scene_and_camera(scene, camera)

    scene.upload()
    setup_camera(camera)

    output = np.zeros(settings.width * settings.height * 4, dtype=np.float32)

    logger.info(
        "Started rendering %dx%d using %d rays per pixel, max depth %d",
        settings.width,
        settings.height,
        settings.samples_per_pixel,
        settings.max_depth,
    )
    start_time = time.perf_counter()

    _render_kernel(
        settings.width,
        settings.height,
        settings.samples_per_pixel,
        settings.max_depth,
        settings.seed,
        output,
    )
    ti.sync()

    elapsed = time.perf_counter() - start_time
    logger.info("Finished rendering in %.2f seconds", elapsed)

    return output


def trace_ray(
    scene: Scene,
    origin: tuple[float, float, float],
    direction: tuple[float, float, float],
    max_depth: int,
    *,
    seed: int = 0,
) -> tuple[float, float, float]:
    """Trace a single ray through a scene.

    Args:
        scene: The scene to trace against. May be empty (sky only).
        origin: Ray origin.
        direction: Ray direction (need not be normalized).
        max_depth: Maximum number of bounces. 0 yields black.
        seed: Seed for the ray's random number stream.

    Returns:
        The estimated color as (R, G, B).

    Raises:
        InvalidRenderConfigError: If max_depth is negative.
    """
    if max_depth < 0:
        raise InvalidRenderConfigError(f"max_depth must not be negative, got {max_depth}")

    scene.upload()
    _trace_kernel(
        vec3(origin[0], origin[1], origin[2]),
        vec3(direction[0], direction[1], direction[2]),
        max_depth,
        seed,
    )
    color = _trace_result[None]
    return (float(color[0]), float(color[1]), float(color[2]))


def render_background_gradient(width: int, height: int) -> np.ndarray:
    """Render the red/green/blue ACEScg test gradient.

    Horizontally red blends into green, vertically (bottom to top) red blends
    into blue, and the two blends are mixed half and half. Shown before the
    first render.

    Returns:
        A float32 RGBA buffer of length width * height * 4, first row on top.

    Raises:
        InvalidRenderConfigError: If width or height is not positive.
    """
    if width <= 0 or height <= 0:
        raise InvalidRenderConfigError(
            f"Image dimensions must be positive, got {width}x{height}"
        )

    u = fit_range(np.arange(width, dtype=np.float32), 0.0, float(width), 0.0, 1.0)
    v = fit_range(np.arange(height - 1, -1, -1, dtype=np.float32), 0.0, float(height), 0.0, 1.0)

    # Shape (1, W, 3) and (H, 1, 3) so they broadcast to (H, W, 3)
    h_blended = _GRADIENT_RED + u[None, :, None] * (_GRADIENT_GREEN - _GRADIENT_RED)
    v_blended = _GRADIENT_RED + v[:, None, None] * (_GRADIENT_BLUE - _GRADIENT_RED)
    rgb = 0.5 * (h_blended + v_blended)

    rgba = np.ones((height, width, 4), dtype=np.float32)
    rgba[..., :3] = rgb
    return rgba.reshape(-1)
