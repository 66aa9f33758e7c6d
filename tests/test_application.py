"""Tests for the message-driven application state.

Tests cover:
- Initial gradient display
- File name changes
- Render and save messages
"""

import numpy as np
import pytest


@pytest.fixture
def small_settings():
    from src.pathtracer.config import RenderSettings

    return RenderSettings(width=8, height=6, samples_per_pixel=2, max_depth=3, seed=1)


class TestInitialState:
    """Tests for a freshly created ApplicationState."""

    def test_starts_with_gradient(self, small_settings, tmp_path):
        from src.pathtracer.core.integrator import render_background_gradient
        from src.pathtracer.preview.application import DEFAULT_FILE_NAME, ApplicationState

        state = ApplicationState(small_settings, output_dir=tmp_path)

        assert not state.has_render
        assert state.file_name == DEFAULT_FILE_NAME
        assert np.array_equal(state.render_buffer, render_background_gradient(8, 6))
        assert state.display_buffer.dtype == np.uint8
        assert state.display_buffer.shape == (8 * 6 * 4,)

    def test_invalid_settings_rejected(self, tmp_path):
        from src.pathtracer.config import InvalidRenderConfigError, RenderSettings
        from src.pathtracer.preview.application import ApplicationState

        with pytest.raises(InvalidRenderConfigError):
            ApplicationState(RenderSettings(width=0), output_dir=tmp_path)


class TestFileName:
    """Tests for FILE_NAME_CHANGED."""

    def test_file_name_gets_exr_extension(self, small_settings, tmp_path):
        from src.pathtracer.preview.application import ApplicationMessage, ApplicationState

        state = ApplicationState(small_settings, output_dir=tmp_path)
        result = state.update(ApplicationMessage.FILE_NAME_CHANGED, "  spheres ")

        assert result is None
        assert state.file_name_with_ext == "spheres.exr"
        assert state.output_path == tmp_path / "spheres.exr"

    @pytest.mark.parametrize("payload", ["", "   ", None, 42])
    def test_invalid_file_name_rejected(self, small_settings, tmp_path, payload):
        from src.pathtracer.preview.application import (
            DEFAULT_FILE_NAME,
            ApplicationMessage,
            ApplicationState,
        )

        state = ApplicationState(small_settings, output_dir=tmp_path)
        with pytest.raises(ValueError):
            state.update(ApplicationMessage.FILE_NAME_CHANGED, payload)

        assert state.file_name == DEFAULT_FILE_NAME

    @pytest.mark.parametrize("payload", ["../escape", "sub/dir", "a\\b", "..", "."])
    def test_path_components_rejected(self, small_settings, tmp_path, payload):
        """Test names that would leave the output directory are refused."""
        from src.pathtracer.preview.application import (
            DEFAULT_FILE_NAME,
            ApplicationMessage,
            ApplicationState,
        )

        state = ApplicationState(small_settings, output_dir=tmp_path)
        with pytest.raises(ValueError):
            state.update(ApplicationMessage.FILE_NAME_CHANGED, payload)

        assert state.file_name == DEFAULT_FILE_NAME
        assert state.output_path.parent == tmp_path


class TestRenderAndSave:
    """Tests for RENDER_PRESSED and SAVE_PRESSED."""

    def test_render_replaces_gradient(self, small_settings, tmp_path):
        from src.pathtracer.preview.application import ApplicationMessage, ApplicationState

        state = ApplicationState(small_settings, output_dir=tmp_path)
        gradient = state.render_buffer.copy()

        state.update(ApplicationMessage.RENDER_PRESSED)

        assert state.has_render
        assert state.render_buffer.shape == gradient.shape
        assert not np.array_equal(state.render_buffer, gradient)

    def test_render_uses_scene_factory(self, small_settings, tmp_path):
        from src.pathtracer.preview.application import ApplicationMessage, ApplicationState
        from src.pathtracer.scene.demo import create_two_sphere_scene

        aspect_ratios = []

        def factory(aspect_ratio):
            aspect_ratios.append(aspect_ratio)
            return create_two_sphere_scene(aspect_ratio)

        state = ApplicationState(small_settings, output_dir=tmp_path, scene_factory=factory)
        state.update(ApplicationMessage.RENDER_PRESSED)

        assert aspect_ratios == [pytest.approx(8 / 6)]

    def test_save_writes_exr(self, small_settings, tmp_path):
        from src.pathtracer.preview.application import ApplicationMessage, ApplicationState

        state = ApplicationState(small_settings, output_dir=tmp_path / "out")
        state.update(ApplicationMessage.FILE_NAME_CHANGED, "gradient")
        path = state.update(ApplicationMessage.SAVE_PRESSED)

        assert path == tmp_path / "out" / "gradient.exr"
        assert path.exists()

    def test_unknown_message_rejected(self, small_settings, tmp_path):
        from src.pathtracer.preview.application import ApplicationState

        state = ApplicationState(small_settings, output_dir=tmp_path)
        with pytest.raises(ValueError):
            state.update("RENDER_PRESSED")
