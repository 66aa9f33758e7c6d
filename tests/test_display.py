"""Tests for the HDR to 8-bit display pipeline.

Tests cover:
- Perceptual tone curve anchor points
- Buffer conversion for beauty and data passes
- Alpha handling
- Error cases
"""

import numpy as np
import pytest

from src.pathtracer.preview.display import (
    ACESCG_TO_LINEAR_SRGB,
    PerceptualTonemapperParams,
    convert_to_display,
    display_buffer_to_image,
    process_image_for_display,
    quantize,
    srgb_encode,
    tone_map_exposure,
    tone_map_perceptual,
    tone_map_reinhard,
)


class TestPerceptualToneCurve:
    """Tests for the perceptual tone curve."""

    def test_default_coefficients(self):
        b, c = PerceptualTonemapperParams().curve_coefficients()
        assert b == pytest.approx(1.073, abs=1e-3)
        assert c == pytest.approx(0.1675, abs=1e-3)

    def test_zero_maps_to_zero(self):
        result = tone_map_perceptual(np.array([0.0], dtype=np.float32))
        assert result[0] == pytest.approx(0.0)

    def test_hdr_max_maps_to_one(self):
        params = PerceptualTonemapperParams()
        result = tone_map_perceptual(np.array([params.hdr_max], dtype=np.float32), params)
        assert result[0] == pytest.approx(1.0, abs=1e-5)

    def test_mid_grey_anchor(self):
        params = PerceptualTonemapperParams()
        result = tone_map_perceptual(np.array([params.mid_in], dtype=np.float32), params)
        assert result[0] == pytest.approx(params.mid_out, abs=1e-5)

    def test_monotonic(self):
        values = np.linspace(0.0, 8.0, 200, dtype=np.float32)
        result = tone_map_perceptual(values)
        assert np.all(np.diff(result) >= 0.0)

    def test_negative_values_clamped(self):
        result = tone_map_perceptual(np.array([-1.0], dtype=np.float32))
        assert result[0] == pytest.approx(0.0)


class TestSimpleToneMaps:
    """Tests for the Reinhard and exposure operators."""

    def test_reinhard(self):
        result = tone_map_reinhard(np.array([0.0, 1.0, 3.0], dtype=np.float32))
        assert np.allclose(result, [0.0, 0.5, 0.75])

    def test_exposure(self):
        result = tone_map_exposure(np.array([0.0, 1.0], dtype=np.float32), exposure=2.0)
        assert np.allclose(result, [0.0, 1.0 - np.exp(-2.0)])


class TestColorManagement:
    """Tests for the primaries conversion and transfer function."""

    def test_matrix_preserves_white(self):
        white = ACESCG_TO_LINEAR_SRGB @ np.ones(3, dtype=np.float32)
        assert np.allclose(white, 1.0, atol=1e-4)

    def test_srgb_encode_segments(self):
        encoded = srgb_encode(np.array([0.0, 0.002, 1.0], dtype=np.float32))
        assert encoded[0] == pytest.approx(0.0)
        assert encoded[1] == pytest.approx(0.002 * 12.92)
        assert encoded[2] == pytest.approx(1.0, abs=1e-6)

    def test_quantize_rounds_and_clamps(self):
        result = quantize(np.array([-0.5, 0.0, 0.5, 1.0, 2.0], dtype=np.float32))
        assert result.dtype == np.uint8
        assert list(result) == [0, 0, 128, 255, 255]

    def test_unknown_method_raises(self):
        with pytest.raises(ValueError, match="Unknown tone mapping"):
            process_image_for_display(np.zeros((1, 3), dtype=np.float32), tone_map="bogus")


class TestConvertToDisplay:
    """Tests for convert_to_display."""

    def test_black_stays_black_with_opaque_alpha(self):
        linear = np.tile(np.array([0.0, 0.0, 0.0, 1.0], dtype=np.float32), 4)
        display = convert_to_display(linear)

        assert display.dtype == np.uint8
        assert display.shape == linear.shape
        pixels = display.reshape(-1, 4)
        assert np.all(pixels[:, :3] == 0)
        assert np.all(pixels[:, 3] == 255)

    def test_brighter_input_never_darker(self):
        levels = np.linspace(0.0, 10.0, 50, dtype=np.float32)
        linear = np.stack(
            [levels, levels, levels, np.ones_like(levels)], axis=1
        ).reshape(-1)

        pixels = convert_to_display(linear).reshape(-1, 4)
        assert np.all(np.diff(pixels[:, 0].astype(int)) >= 0)
        assert pixels[-1, 0] == 255

    def test_data_pass_skips_tone_mapping(self):
        linear = np.array([0.0, 0.5, 1.0, 1.0, 2.0, -1.0, 0.25, 0.0], dtype=np.float32)
        display = convert_to_display(linear, is_data_pass=True)
        assert list(display) == [0, 128, 255, 255, 255, 0, 64, 0]

    def test_alpha_not_tone_mapped(self):
        linear = np.array([0.5, 0.5, 0.5, 0.5], dtype=np.float32)
        display = convert_to_display(linear)
        assert display[3] == 128

    def test_length_must_be_multiple_of_four(self):
        with pytest.raises(ValueError, match="multiple of 4"):
            convert_to_display(np.zeros(6, dtype=np.float32))


class TestDisplayBufferToImage:
    """Tests for display_buffer_to_image."""

    def test_reshape_top_row_first(self):
        buffer = np.arange(2 * 3 * 4, dtype=np.uint8)
        image = display_buffer_to_image(buffer, 3, 2)

        assert image.shape == (2, 3, 4)
        assert list(image[0, 0]) == [0, 1, 2, 3]
        assert list(image[1, 0]) == [12, 13, 14, 15]

    def test_size_mismatch_raises(self):
        with pytest.raises(ValueError):
            display_buffer_to_image(np.zeros(10, dtype=np.uint8), 2, 2)
