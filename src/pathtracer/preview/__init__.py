"""Preview module for output and visualization.

Components:
    display: Color pipeline (tone mapping, ACEScg to sRGB, quantization) and
        Matplotlib preview
    export: OpenEXR and PNG export
    application: Message-driven viewer state
    interactive: Taichi GGUI-based interactive preview window

Example:
    >>> from src.pathtracer.preview import convert_to_display, save_exr, show_preview
    >>>
    >>> display = convert_to_display(linear_buffer)
    >>> show_preview(display, 256, 256)
    >>> save_exr(linear_buffer, 256, 256, "renders/sample_file.exr")

The application state and the GGUI window declare Taichi fields, so import
them from their modules after ti.init():
    >>> from src.pathtracer.preview.application import ApplicationState
    >>> from src.pathtracer.preview.interactive import InteractivePreview
"""

from src.pathtracer.preview.display import (
    PerceptualTonemapperParams,
    ToneMapMethod,
    convert_to_display,
    display_buffer_to_image,
    process_image_for_display,
    show_preview,
    tone_map_exposure,
    tone_map_perceptual,
    tone_map_reinhard,
)
from src.pathtracer.preview.export import (
    ImageExportError,
    save_exr,
    save_png,
    split_channels,
)

__all__ = [
    # Color pipeline
    "convert_to_display",
    "display_buffer_to_image",
    "process_image_for_display",
    "tone_map_perceptual",
    "tone_map_reinhard",
    "tone_map_exposure",
    "PerceptualTonemapperParams",
    "ToneMapMethod",
    "show_preview",
    # Export
    "save_exr",
    "save_png",
    "split_channels",
    "ImageExportError",
]
