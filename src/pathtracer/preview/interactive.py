"""Interactive preview window using Taichi GGUI.

The window shows the display buffer of an ApplicationState and turns button
presses into application messages:

    - "Render" sends RENDER_PRESSED
    - "Save EXR" sends SAVE_PRESSED

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.pathtracer.preview.application import ApplicationState
    >>> from src.pathtracer.preview.interactive import InteractivePreview
    >>>
    >>> preview = InteractivePreview(ApplicationState())
    >>> preview.run()  # Blocks until the window is closed
"""

from __future__ import annotations

import logging
import os
import sys
from typing import TYPE_CHECKING

import numpy as np
import taichi as ti

from src.pathtracer.preview.application import ApplicationMessage
from src.pathtracer.preview.display import display_buffer_to_image
from src.pathtracer.preview.export import ImageExportError

if TYPE_CHECKING:
    import numpy.typing as npt

    from src.pathtracer.preview.application import ApplicationState

logger = logging.getLogger(__name__)


def display_buffer_to_field_layout(
    display_buffer: npt.NDArray[np.uint8],
    width: int,
    height: int,
) -> npt.NDArray[np.float32]:
    """Convert a flat RGBA display buffer into a (width, height, 3) float array.

    Taichi fields use (x, y) indexing with the origin at the bottom-left, while
    the display buffer stores the top row first, so the image is flipped and
    transposed.
    """
    image = display_buffer_to_image(display_buffer, width, height)
    rgb = image[..., :3].astype(np.float32) / 255.0
    return np.ascontiguousarray(np.transpose(np.flipud(rgb), (1, 0, 2)))


class InteractivePreview:
    """Interactive preview window using Taichi GGUI.

    Attributes:
        state: The application state shown and updated by the window.
        width: Window width in pixels.
        height: Window height in pixels.
        display_image: Taichi field storing the display image (RGB float).
    """

    def __init__(
        self,
        state: ApplicationState,
        *,
        title: str = "Let's Trace Some Rays",
    ) -> None:
        self.state = state
        self.width = state.settings.width
        self.height = state.settings.height
        self._title = title
        self._status = "Ready"

        # Opened on first use so the state can be driven headless
        self._window: ti.ui.Window | None = None

        self.display_image = ti.Vector.field(3, dtype=ti.f32, shape=(self.width, self.height))
        self.refresh()

    @property
    def window(self) -> ti.ui.Window:
        """The GGUI window, opened on first access."""
        if self._window is None:
            self._window = ti.ui.Window(
                name=self._title, res=(self.width, self.height), vsync=True
            )
        return self._window

    @property
    def status(self) -> str:
        """Last status line shown in the control panel."""
        return self._status

    def refresh(self) -> None:
        """Copy the state's display buffer into the display field."""
        self.display_image.from_numpy(
            display_buffer_to_field_layout(self.state.display_buffer, self.width, self.height)
        )

    def send(self, message: ApplicationMessage) -> None:
        """Apply a message to the state and refresh the display.

        Export failures are reported in the status line instead of closing the
        window.
        """
        try:
            result = self.state.update(message)
        except ImageExportError as exc:
            logger.error("Export failed: %s", exc)
            self._status = f"Save failed: {exc}"
            return

        if message is ApplicationMessage.RENDER_PRESSED:
            self._status = "Rendered"
        elif message is ApplicationMessage.SAVE_PRESSED:
            self._status = f"Saved {result}"
        self.refresh()

    def show_frame(self) -> None:
        """Draw the controls and present one frame."""
        window = self.window
        self._draw_controls(window.get_gui())
        window.get_canvas().set_image(self.display_image)
        window.show()

    def run(self) -> None:
        """Present frames until the window is closed."""
        while self.window.running:
            self.show_frame()

    def close(self) -> None:
        if self._window is not None:
            self._window.running = False

    def _draw_controls(self, gui) -> None:
        with gui.sub_window("Controls", 0.02, 0.02, 0.4, 0.2) as panel:
            if panel.button("Render"):
                self.send(ApplicationMessage.RENDER_PRESSED)
            panel.text(f"File: {self.state.output_path}")
            if panel.button("Save EXR"):
                self.send(ApplicationMessage.SAVE_PRESSED)
            panel.text(self._status)


def has_display() -> bool:
    """Whether a window can be opened in this session.

    Windows always counts as having a display. macOS does unless the session
    is a plain SSH login without X forwarding. Elsewhere an X11 or Wayland
    display must be set.
    """
    if os.name == "nt":
        return True

    x_display = os.environ.get("DISPLAY")
    if sys.platform == "darwin":
        return not (os.environ.get("SSH_CONNECTION") and not x_display)

    return bool(x_display or os.environ.get("WAYLAND_DISPLAY"))
