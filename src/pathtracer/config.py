"""Configuration for the path tracer.

Render defaults are plain constants. ``RenderSettings.from_env()`` overrides
them from ``PATHTRACER_*`` environment variables and reports malformed values
as ``InvalidRenderConfigError``, so importing this module never fails on a bad
environment.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional

# Ray parameter below which intersections are ignored (shadow acne guard)
RAY_T_MIN = 0.001

# GPU-side storage capacity
MAX_SPHERES = 1024
MAX_MATERIALS = 1024

# Render settings (overridable through RenderSettings.from_env)
WIDTH = 256
HEIGHT = 256
SAMPLES_PER_PIXEL = 32
MAX_DEPTH = 5
SEED = 0

# Paths
OUTPUT_DIR = Path(os.getenv("PATHTRACER_OUTPUT_DIR", "renders"))

# Logging settings
LOG_LEVEL = os.getenv("PATHTRACER_LOG_LEVEL", "INFO")
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Export metadata
SOFTWARE_NAME = "pathtracer"


class InvalidRenderConfigError(ValueError):
    """Raised when render parameters are rejected before any work is done."""


@dataclass
class RenderSettings:
    """Parameters of a single render.

    Attributes:
        width: Image width in pixels.
        height: Image height in pixels.
        samples_per_pixel: Number of jittered samples averaged per pixel.
        max_depth: Maximum number of bounces per path. 0 renders black.
        seed: Seed for the per-sample random number streams.
    """

    width: int = WIDTH
    height: int = HEIGHT
    samples_per_pixel: int = SAMPLES_PER_PIXEL
    max_depth: int = MAX_DEPTH
    seed: int = SEED

    @property
    def aspect_ratio(self) -> float:
        """Width divided by height."""
        return self.width / self.height

    def validate(self) -> None:
        """Check that the settings describe a renderable image.

        Raises:
            InvalidRenderConfigError: If width, height or samples_per_pixel is
                not positive, or max_depth is negative.
        """
        if self.width <= 0 or self.height <= 0:
            raise InvalidRenderConfigError(
                f"Image dimensions must be positive, got {self.width}x{self.height}"
            )
        if self.samples_per_pixel <= 0:
            raise InvalidRenderConfigError(
                f"samples_per_pixel must be positive, got {self.samples_per_pixel}"
            )
        if self.max_depth < 0:
            raise InvalidRenderConfigError(
                f"max_depth must not be negative, got {self.max_depth}"
            )

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "RenderSettings":
        """Build settings from ``PATHTRACER_*`` variables.

        Args:
            environ: Mapping to read from. Defaults to ``os.environ``.

        Raises:
            InvalidRenderConfigError: If a variable is not an integer.
        """
        if environ is None:
            environ = os.environ

        def read(name: str, default: int) -> int:
            raw = environ.get(name)
            if raw is None:
                return default
            try:
                return int(raw)
            except ValueError as exc:
                raise InvalidRenderConfigError(
                    f"{name} must be an integer, got {raw!r}"
                ) from exc

        return cls(
            width=read("PATHTRACER_WIDTH", WIDTH),
            height=read("PATHTRACER_HEIGHT", HEIGHT),
            samples_per_pixel=read("PATHTRACER_SAMPLES", SAMPLES_PER_PIXEL),
            max_depth=read("PATHTRACER_MAX_DEPTH", MAX_DEPTH),
            seed=read("PATHTRACER_SEED", SEED),
        )


@dataclass(frozen=True)
class ExportMetadata:
    """String attributes written into exported OpenEXR headers."""

    comments: str = ""
    owner: str = field(default_factory=lambda: os.getenv("USER", ""))
    software: str = SOFTWARE_NAME


__all__ = [
    "RAY_T_MIN",
    "MAX_SPHERES",
    "MAX_MATERIALS",
    "WIDTH",
    "HEIGHT",
    "SAMPLES_PER_PIXEL",
    "MAX_DEPTH",
    "SEED",
    "OUTPUT_DIR",
    "LOG_LEVEL",
    "LOG_FORMAT",
    "SOFTWARE_NAME",
    "InvalidRenderConfigError",
    "RenderSettings",
    "ExportMetadata",
]
