"""Message-driven application state for the interactive viewer.

The viewer reacts to three messages: render the scene, change the output file
name, and save the current render. ``ApplicationState.update`` applies one
message and is independent of any windowing toolkit, so the same state object
backs the GGUI window and the tests.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.pathtracer.preview.application import (
    ...     ApplicationMessage, ApplicationState
    ... )
    >>> state = ApplicationState()
    >>> state.update(ApplicationMessage.FILE_NAME_CHANGED, "spheres")
    >>> state.file_name_with_ext
    'spheres.exr'
    >>> state.update(ApplicationMessage.RENDER_PRESSED)
    >>> path = state.update(ApplicationMessage.SAVE_PRESSED)
"""

from __future__ import annotations

import logging
from enum import Enum, auto
from pathlib import Path
from typing import Any, Callable

import numpy as np
import numpy.typing as npt

from src.pathtracer.camera.camera import Camera
from src.pathtracer.config import OUTPUT_DIR, ExportMetadata, RenderSettings
from src.pathtracer.core.integrator import render_background_gradient, render_with_settings
from src.pathtracer.preview.display import convert_to_display
from src.pathtracer.preview.export import save_exr
from src.pathtracer.scene.demo import create_material_scene
from src.pathtracer.scene.scene import Scene

logger = logging.getLogger(__name__)

# File name shown before the user types one
DEFAULT_FILE_NAME = "sample_file"

# Builds (scene, camera) for a given aspect ratio
SceneFactory = Callable[[float], "tuple[Scene, Camera]"]


class ApplicationMessage(Enum):
    """Messages the viewer can send to the application state."""

    RENDER_PRESSED = auto()
    SAVE_PRESSED = auto()
    FILE_NAME_CHANGED = auto()


class ApplicationState:
    """State of the interactive viewer.

    Attributes:
        settings: Render parameters.
        output_dir: Directory that saved images are written into.
        file_name: File name without extension.
        render_buffer: Linear RGBA buffer currently shown.
        display_buffer: 8-bit RGBA buffer for the window.
        has_render: True once a scene render replaced the initial gradient.
    """

    def __init__(
        self,
        settings: RenderSettings | None = None,
        *,
        output_dir: str | Path | None = None,
        scene_factory: SceneFactory = create_material_scene,
        metadata: ExportMetadata | None = None,
    ) -> None:
        self.settings = settings if settings is not None else RenderSettings.from_env()
        self.settings.validate()
        self.output_dir = Path(output_dir) if output_dir is not None else OUTPUT_DIR
        self.file_name = DEFAULT_FILE_NAME
        self._scene_factory = scene_factory
        self._metadata = metadata

        # Initial display is the test gradient
        self.render_buffer: npt.NDArray[np.float32] = render_background_gradient(
            self.settings.width, self.settings.height
        )
        self.display_buffer: npt.NDArray[np.uint8] = convert_to_display(self.render_buffer)
        self.has_render = False

    @property
    def file_name_with_ext(self) -> str:
        return f"{self.file_name}.exr"

    @property
    def output_path(self) -> Path:
        """Where the next save writes to."""
        return self.output_dir / self.file_name_with_ext

    def update(self, message: ApplicationMessage, payload: Any = None) -> Path | None:
        """Apply a message to the state.

        Args:
            message: The message to apply.
            payload: The new file name for FILE_NAME_CHANGED, unused otherwise.

        Returns:
            The written path for SAVE_PRESSED, None for other messages.

        Raises:
            ValueError: If FILE_NAME_CHANGED carries an empty or non-string name
                or one with path components, or the message is unknown.
            ImageExportError: If saving fails.
        """
        if message is ApplicationMessage.RENDER_PRESSED:
            self._render()
            return None

        if message is ApplicationMessage.FILE_NAME_CHANGED:
            if not isinstance(payload, str) or not payload.strip():
                raise ValueError(f"File name must be a non-empty string, got {payload!r}")
            name = payload.strip()
            if name in (".", "..") or "/" in name or "\\" in name:
                raise ValueError(f"File name must not contain a path, got {payload!r}")
            self.file_name = name
            logger.info("New file name: %s", self.file_name_with_ext)
            return None

        if message is ApplicationMessage.SAVE_PRESSED:
            logger.info("Saving %s to disk..", self.file_name_with_ext)
            return save_exr(
                self.render_buffer,
                self.settings.width,
                self.settings.height,
                self.output_path,
                self._metadata,
            )

        raise ValueError(f"Unknown message: {message!r}")

    def _render(self) -> None:
        scene, camera = self._scene_factory(self.settings.aspect_ratio)
        self.render_buffer = render_with_settings(self.settings, scene, camera)
        self.display_buffer = convert_to_display(self.render_buffer)
        self.has_render = True
