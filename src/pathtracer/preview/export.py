"""Image export utilities for rendered images.

This module provides functions for saving render buffers to files.

Supported formats:
    - EXR (32-bit float scene-referred RGB via OpenEXR)
    - PNG (8-bit display-referred RGBA via Pillow)

Files are written to a temporary file next to the destination and moved into
place once complete, so a failed export never leaves a partial file behind.

Example:
    >>> from src.pathtracer.preview.export import save_exr, save_png
    >>>
    >>> save_exr(linear_buffer, 256, 256, "renders/sample_file.exr")
    >>> save_png(display_buffer, 256, 256, "renders/sample_file.png")
"""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path
from typing import Callable

import numpy as np
import numpy.typing as npt
import OpenEXR
from PIL import Image as PILImage

from src.pathtracer.config import ExportMetadata
from src.pathtracer.preview.display import display_buffer_to_image

logger = logging.getLogger(__name__)


class ImageExportError(OSError):
    """Raised when an image cannot be written."""


def split_channels(
    buffer: npt.NDArray[np.float32],
) -> tuple[npt.NDArray[np.float32], npt.NDArray[np.float32], npt.NDArray[np.float32]]:
    """Split a flat RGBA buffer into flat R, G and B arrays.

    Raises:
        ValueError: If the buffer length is not a multiple of 4.
    """
    values = np.asarray(buffer, dtype=np.float32).reshape(-1)
    if values.size % 4 != 0:
        raise ValueError(
            f"Buffer length must be a multiple of 4 (RGBA), got {values.size}"
        )
    pixels = values.reshape(-1, 4)
    return (
        np.ascontiguousarray(pixels[:, 0]),
        np.ascontiguousarray(pixels[:, 1]),
        np.ascontiguousarray(pixels[:, 2]),
    )


def _write_atomic(path: Path, write: Callable[[str], None]) -> Path:
    """Run ``write`` on a temporary file, then move it to ``path``."""
    path = Path(path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{path.stem}-", suffix=path.suffix, dir=path.parent
        )
        os.close(fd)
    except OSError as exc:
        raise ImageExportError(f"Cannot prepare {path}: {exc}") from exc

    try:
        write(tmp_name)
        os.replace(tmp_name, path)
    except (OSError, RuntimeError, TypeError, ValueError) as exc:
        raise ImageExportError(f"Failed to write {path}: {exc}") from exc
    finally:
        if os.path.exists(tmp_name):
            os.remove(tmp_name)

    return path


def save_exr(
    buffer: npt.NDArray[np.float32],
    width: int,
    height: int,
    path: str | os.PathLike[str],
    metadata: ExportMetadata | None = None,
) -> Path:
    """Save a linear RGBA buffer as an OpenEXR image.

    The R, G and B channels are stored as 32-bit floats with ZIP compression.
    Alpha is dropped. The metadata is stored as string header attributes.

    Args:
        buffer: Flat float RGBA buffer, first row on top.
        width: Image width in pixels.
        height: Image height in pixels.
        path: Destination file. Missing parent directories are created.
        metadata: Comments, owner and software attributes.

    Returns:
        The written path.

    Raises:
        ValueError: If the buffer does not hold width * height pixels.
        ImageExportError: If the file cannot be written.
    """
    if metadata is None:
        metadata = ExportMetadata()

    expected = width * height * 4
    if np.asarray(buffer).size != expected:
        raise ValueError(
            f"Buffer of {np.asarray(buffer).size} values does not match "
            f"{width}x{height} RGBA ({expected} values)"
        )

    red, green, blue = split_channels(buffer)
    channels = {
        "R": red.reshape(height, width),
        "G": green.reshape(height, width),
        "B": blue.reshape(height, width),
    }
    header = {
        "compression": OpenEXR.ZIP_COMPRESSION,
        "type": OpenEXR.scanlineimage,
        "comments": metadata.comments,
        "owner": metadata.owner,
        "software": metadata.software,
    }

    def write(tmp_name: str) -> None:
        with OpenEXR.File(header, channels) as exr_file:
            exr_file.write(tmp_name)

    written = _write_atomic(Path(path), write)
    logger.info("Saved EXR image to %s", written)
    return written


def save_png(
    display_buffer: npt.NDArray[np.uint8],
    width: int,
    height: int,
    path: str | os.PathLike[str],
) -> Path:
    """Save an 8-bit RGBA display buffer as a PNG file.

    Args:
        display_buffer: Flat uint8 RGBA buffer, first row on top.
        width: Image width in pixels.
        height: Image height in pixels.
        path: Destination file. Missing parent directories are created.

    Returns:
        The written path.

    Raises:
        ValueError: If the buffer does not hold width * height pixels.
        ImageExportError: If the file cannot be written.
    """
    image = display_buffer_to_image(
        np.asarray(display_buffer, dtype=np.uint8), width, height
    )
    pil_image = PILImage.fromarray(np.ascontiguousarray(image))

    def write(tmp_name: str) -> None:
        pil_image.save(tmp_name, format="PNG")

    written = _write_atomic(Path(path), write)
    logger.info("Saved PNG image to %s", written)
    return written
