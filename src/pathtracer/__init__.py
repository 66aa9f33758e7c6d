"""Taichi-based recursive path tracer.

This package renders scenes of spheres with diffuse and metallic materials
into linear HDR buffers and converts them into 8-bit display images:
- Closest-hit ray/sphere intersection
- Lambertian and metallic scattering with explicit, seedable random streams
- Perceptual tone mapping from ACEScg to sRGB
- OpenEXR and PNG export

Subpackages:
    core: Rays, random sampling and the render driver
    geometry: Sphere primitive and intersection
    materials: Material kinds, parameters and scattering
    scene: Scene description, GPU storage and demo scenes
    camera: Axis-aligned perspective camera
    preview: Color pipeline, export and the interactive viewer
"""

__version__ = "0.1.0"
