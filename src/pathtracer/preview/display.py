"""Color pipeline and Matplotlib-based preview display.

This module converts the linear, scene-referred render buffer into an 8-bit
display buffer and shows display buffers with Matplotlib.

The pipeline for beauty (non data) passes is:
    1. Tone mapping in the ACEScg working space (perceptual by default)
    2. ACEScg to linear sRGB primaries, clamped to [0, 1]
    3. sRGB transfer function encoding
    4. Quantization to 8 bits by rounding

Data passes (normals and other utility buffers already in [0, 1]) skip steps
1 to 3. Alpha is never tone mapped; it is clamped and quantized like the data
pass.

Example:
    >>> from src.pathtracer.preview.display import convert_to_display, show_preview
    >>>
    >>> display = convert_to_display(linear_buffer)
    >>> show_preview(display, 256, 256)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

import numpy as np
import numpy.typing as npt

# Type alias for tone mapping options
ToneMapMethod = Literal["perceptual", "reinhard", "exposure", "none"]

# ACEScg (AP1, D60) to linear sRGB (Rec.709, D65) primaries, Bradford adapted
ACESCG_TO_LINEAR_SRGB = np.array(
    [
        [1.70505, -0.62179, -0.08326],
        [-0.13026, 1.14080, -0.01055],
        [-0.02400, -0.12897, 1.15297],
    ],
    dtype=np.float32,
)


@dataclass(frozen=True)
class PerceptualTonemapperParams:
    """Parameters of the perceptual tone curve.

    The curve is ``x^a / (x^(a*d) * b + c)`` with ``a`` the contrast and ``d``
    the shoulder. ``b`` and ``c`` are solved so that ``mid_in`` maps to
    ``mid_out`` and ``hdr_max`` maps to 1.

    Attributes:
        contrast: Toe steepness.
        shoulder: Shoulder strength (1 = no shoulder compression).
        hdr_max: Scene value that maps to display white.
        mid_in: Scene-referred middle grey.
        mid_out: Display-referred middle grey.
    """

    contrast: float = 1.6
    shoulder: float = 0.977
    hdr_max: float = 8.0
    mid_in: float = 0.18
    mid_out: float = 0.267

    def curve_coefficients(self) -> tuple[float, float]:
        """Return the (b, c) coefficients of the tone curve."""
        a = self.contrast
        d = self.shoulder
        mid_a = self.mid_in**a
        mid_ad = self.mid_in ** (a * d)
        max_a = self.hdr_max**a
        max_ad = self.hdr_max ** (a * d)

        denominator = (max_ad - mid_ad) * self.mid_out
        b = (-mid_a + max_a * self.mid_out) / denominator
        c = (max_ad * mid_a - max_a * mid_ad * self.mid_out) / denominator
        return b, c


def tone_map_perceptual(
    image: npt.NDArray[np.float32],
    params: PerceptualTonemapperParams | None = None,
) -> npt.NDArray[np.float32]:
    """Apply the perceptual tone curve to each channel.

    Args:
        image: Linear HDR ACEScg values, any shape.
        params: Curve parameters. Defaults to PerceptualTonemapperParams().

    Returns:
        Tone mapped values; 0 stays 0 and hdr_max maps to 1.
    """
    if params is None:
        params = PerceptualTonemapperParams()
    b, c = params.curve_coefficients()
    a = params.contrast
    d = params.shoulder

    x = np.maximum(image.astype(np.float64), 0.0)
    result = np.power(x, a) / (np.power(x, a * d) * b + c)

    return result.astype(np.float32)


def tone_map_reinhard(
    image: npt.NDArray[np.float32],
) -> npt.NDArray[np.float32]:
    """Apply Reinhard tone mapping: L / (1 + L).

    Simple global tone mapping operator that compresses HDR values
    into the displayable [0, 1] range.
    """
    # Ensure non-negative values
    image = np.maximum(image, 0.0)

    # Reinhard: c / (1 + c)
    result = image / (1.0 + image)

    return result.astype(np.float32)


def tone_map_exposure(
    image: npt.NDArray[np.float32],
    exposure: float = 1.0,
) -> npt.NDArray[np.float32]:
    """Apply exposure-based tone mapping: 1 - exp(-c * exposure).

    Args:
        image: Linear HDR image values.
        exposure: Exposure value (default 1.0). Higher values brighten the image.
    """
    # Ensure non-negative values
    image = np.maximum(image, 0.0)

    # Exposure: 1 - exp(-c * exposure)
    result = 1.0 - np.exp(-image * exposure)

    return result.astype(np.float32)


def acescg_to_linear_srgb(rgb: npt.NDArray[np.float32]) -> npt.NDArray[np.float32]:
    """Convert an (..., 3) array from ACEScg to linear sRGB primaries."""
    return (rgb @ ACESCG_TO_LINEAR_SRGB.T).astype(np.float32)


def srgb_encode(linear: npt.NDArray[np.float32]) -> npt.NDArray[np.float32]:
    """Apply the piecewise sRGB transfer function to values in [0, 1]."""
    linear = np.clip(linear, 0.0, 1.0)
    encoded = np.where(
        linear <= 0.0031308,
        linear * 12.92,
        1.055 * np.power(linear, 1.0 / 2.4) - 0.055,
    )
    return encoded.astype(np.float32)


def quantize(values: npt.NDArray[np.float32]) -> npt.NDArray[np.uint8]:
    """Clamp to [0, 1] and round to 8-bit integers."""
    return np.rint(np.clip(values, 0.0, 1.0) * 255.0).astype(np.uint8)


def process_image_for_display(
    image: npt.NDArray[np.float32],
    tone_map: ToneMapMethod = "perceptual",
    exposure: float = 1.0,
    params: PerceptualTonemapperParams | None = None,
) -> npt.NDArray[np.float32]:
    """Process ACEScg RGB values for display.

    Args:
        image: Linear HDR ACEScg array of shape (..., 3).
        tone_map: Tone mapping method.
        exposure: Exposure value for exposure tone mapping (default 1.0).
        params: Parameters for perceptual tone mapping.

    Returns:
        sRGB encoded values in [0, 1].

    Raises:
        ValueError: If the tone mapping method is unknown.
    """
    if tone_map == "perceptual":
        result = tone_map_perceptual(image, params)
    elif tone_map == "reinhard":
        result = tone_map_reinhard(image)
    elif tone_map == "exposure":
        result = tone_map_exposure(image, exposure)
    elif tone_map == "none":
        result = image.astype(np.float32)
    else:
        raise ValueError(f"Unknown tone mapping method: {tone_map}")

    result = np.clip(acescg_to_linear_srgb(result), 0.0, 1.0)
    return srgb_encode(result)


def convert_to_display(
    linear_buffer: npt.NDArray[np.float32],
    is_data_pass: bool = False,
    *,
    tone_map: ToneMapMethod = "perceptual",
    params: PerceptualTonemapperParams | None = None,
    exposure: float = 1.0,
) -> npt.NDArray[np.uint8]:
    """Convert a flat linear RGBA buffer into a flat 8-bit RGBA buffer.

    Args:
        linear_buffer: Scene-referred values, 4 floats per pixel.
        is_data_pass: If True, values are scaled straight to 0..255 without
            any tone mapping or color management.
        tone_map: Tone mapping method for beauty passes.
        params: Parameters for perceptual tone mapping.
        exposure: Exposure value for exposure tone mapping.

    Returns:
        uint8 array of the same length as the input.

    Raises:
        ValueError: If the buffer length is not a multiple of 4 or the tone
            mapping method is unknown.
    """
    linear = np.asarray(linear_buffer, dtype=np.float32).reshape(-1)
    if linear.size % 4 != 0:
        raise ValueError(
            f"Buffer length must be a multiple of 4 (RGBA), got {linear.size}"
        )

    pixels = linear.reshape(-1, 4)

    if is_data_pass:
        return quantize(pixels).reshape(-1)

    display = np.empty(pixels.shape, dtype=np.uint8)
    display[:, :3] = quantize(
        process_image_for_display(
            pixels[:, :3], tone_map=tone_map, exposure=exposure, params=params
        )
    )
    display[:, 3] = quantize(pixels[:, 3])

    return display.reshape(-1)


def display_buffer_to_image(
    display_buffer: npt.NDArray[np.uint8],
    width: int,
    height: int,
) -> npt.NDArray[np.uint8]:
    """View a flat RGBA buffer as an (height, width, 4) image, top row first.

    Raises:
        ValueError: If the buffer does not hold width * height pixels.
    """
    buffer = np.asarray(display_buffer)
    expected = width * height * 4
    if buffer.size != expected:
        raise ValueError(
            f"Buffer of {buffer.size} values does not match {width}x{height} RGBA "
            f"({expected} values)"
        )
    return buffer.reshape(height, width, 4)


def show_preview(
    display_buffer: npt.NDArray[np.uint8],
    width: int,
    height: int,
    *,
    title: str | None = None,
    figsize: tuple[float, float] = (8, 8),
    block: bool = True,
) -> None:
    """Display an 8-bit RGBA buffer as a Matplotlib figure.

    Args:
        display_buffer: Flat uint8 RGBA buffer, first row on top.
        width: Image width in pixels.
        height: Image height in pixels.
        title: Custom title (default shows the resolution).
        figsize: Figure size in inches (width, height).
        block: Whether to block execution until figure is closed.
    """
    import matplotlib.pyplot as plt

    image = display_buffer_to_image(display_buffer, width, height)

    fig, ax = plt.subplots(1, 1, figsize=figsize)

    ax.imshow(image)
    ax.axis("off")
    ax.set_title(title if title is not None else f"Render Preview - {width}x{height}")

    plt.tight_layout()
    plt.show(block=block)
