"""Tests for render configuration and logging setup."""

import logging
import os
import subprocess
import sys
from pathlib import Path

import pytest

from src.pathtracer.config import (
    HEIGHT,
    MAX_DEPTH,
    SAMPLES_PER_PIXEL,
    SEED,
    SOFTWARE_NAME,
    WIDTH,
    ExportMetadata,
    InvalidRenderConfigError,
    RenderSettings,
)
from src.pathtracer.logging_config import PACKAGE_LOGGER, get_logger, setup_logging


class TestRenderSettings:
    """Tests for RenderSettings."""

    def test_aspect_ratio(self):
        assert RenderSettings(width=200, height=100).aspect_ratio == 2.0

    def test_from_env_defaults(self):
        settings = RenderSettings.from_env({})
        assert settings == RenderSettings(
            width=256, height=256, samples_per_pixel=32, max_depth=5, seed=0
        )

    def test_from_env_overrides(self):
        settings = RenderSettings.from_env(
            {
                "PATHTRACER_WIDTH": "320",
                "PATHTRACER_HEIGHT": "180",
                "PATHTRACER_SAMPLES": "4",
                "PATHTRACER_MAX_DEPTH": "2",
                "PATHTRACER_SEED": "9",
            }
        )
        assert settings.width == 320
        assert settings.height == 180
        assert settings.samples_per_pixel == 4
        assert settings.max_depth == 2
        assert settings.seed == 9

    def test_from_env_non_integer_raises(self):
        with pytest.raises(InvalidRenderConfigError, match="PATHTRACER_SAMPLES"):
            RenderSettings.from_env({"PATHTRACER_SAMPLES": "many"})

    def test_from_env_defaults_match_module_constants(self):
        settings = RenderSettings.from_env({})
        assert settings == RenderSettings(
            width=WIDTH,
            height=HEIGHT,
            samples_per_pixel=SAMPLES_PER_PIXEL,
            max_depth=MAX_DEPTH,
            seed=SEED,
        )

    def test_from_env_bad_width_raises(self):
        with pytest.raises(InvalidRenderConfigError, match="PATHTRACER_WIDTH"):
            RenderSettings.from_env({"PATHTRACER_WIDTH": "wide"})

    def test_zero_depth_is_valid(self):
        RenderSettings(width=1, height=1, samples_per_pixel=1, max_depth=0).validate()

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"width": 0},
            {"height": -5},
            {"samples_per_pixel": 0},
            {"max_depth": -1},
        ],
    )
    def test_validate_rejects(self, kwargs):
        with pytest.raises(InvalidRenderConfigError):
            RenderSettings(**kwargs).validate()

    def test_error_is_value_error(self):
        assert issubclass(InvalidRenderConfigError, ValueError)


class TestConfigImport:
    """Tests for importing the config module under a malformed environment."""

    def test_import_survives_bad_variable(self):
        """Test a non-numeric variable only fails once from_env reads it."""
        project_root = Path(__file__).resolve().parent.parent
        env = dict(os.environ, PATHTRACER_WIDTH="wide")
        code = (
            "from src.pathtracer.config import InvalidRenderConfigError, RenderSettings\n"
            "try:\n"
            "    RenderSettings.from_env()\n"
            "except InvalidRenderConfigError:\n"
            "    print('rejected')\n"
        )

        result = subprocess.run(
            [sys.executable, "-c", code],
            cwd=project_root,
            env=env,
            capture_output=True,
            text=True,
            timeout=60,
        )

        assert result.returncode == 0, result.stderr
        assert result.stdout.strip() == "rejected"


class TestExportMetadata:
    """Tests for ExportMetadata."""

    def test_defaults(self, monkeypatch):
        monkeypatch.setenv("USER", "someone")
        metadata = ExportMetadata()

        assert metadata.comments == ""
        assert metadata.owner == "someone"
        assert metadata.software == SOFTWARE_NAME


class TestLogging:
    """Tests for setup_logging."""

    def test_setup_is_idempotent(self):
        logger = setup_logging("DEBUG")
        handlers = len(logger.handlers)

        again = setup_logging("WARNING")

        assert again is logger
        assert len(again.handlers) == handlers
        assert again.level == logging.WARNING

    def test_module_loggers_propagate_to_package(self):
        package_logger = setup_logging("INFO")
        logger = get_logger("src.pathtracer.core.integrator")

        ancestors = []
        current = logger.parent
        while current is not None:
            ancestors.append(current)
            current = current.parent

        assert package_logger in ancestors
        assert package_logger.name == PACKAGE_LOGGER
