"""Tests for tone mapping and display encoding."""

import numpy as np
import pytest


class TestGammaEncode:
    """Tests for gamma_encode."""

    def test_reference_values(self):
        from lumen.preview.tonemap import gamma_encode

        encoded = gamma_encode(np.array([0.0, 0.5, 1.0]))
        assert encoded[0] == 0.0
        assert encoded[1] == pytest.approx(0.5 ** (1.0 / 2.2) * 255.0, rel=1e-6)
        assert encoded[2] == pytest.approx(255.0)

    def test_clamps_out_of_range(self):
        from lumen.preview.tonemap import gamma_encode

        encoded = gamma_encode(np.array([-3.0, 2.0, 1e9]))
        np.testing.assert_array_equal(encoded, [0.0, 255.0, 255.0])

    def test_monotonic_below_saturation(self):
        from lumen.preview.tonemap import gamma_encode

        radiance = np.linspace(0.0, 1.0, 257)
        encoded = gamma_encode(radiance)
        assert np.all(np.diff(encoded) > 0.0)

    def test_linear_gamma(self):
        from lumen.preview.tonemap import gamma_encode

        assert gamma_encode(np.array([0.25]), gamma=1.0)[0] == pytest.approx(63.75)

    @pytest.mark.parametrize("gamma", [0.0, -2.2])
    def test_rejects_non_positive_gamma(self, gamma):
        from lumen.preview.tonemap import gamma_encode

        with pytest.raises(ValueError):
            gamma_encode(np.zeros(3), gamma=gamma)


class TestEightBit:
    """Tests for to_rgb8 and to_rgba8."""

    def test_half_radiance_is_186(self):
        from lumen.preview.tonemap import to_rgba8

        pixels = to_rgba8(np.full((2, 3, 3), 0.5, dtype=np.float32))
        assert pixels.shape == (2, 3, 4)
        assert pixels.dtype == np.uint8
        np.testing.assert_array_equal(pixels[1, 2], [186, 186, 186, 255])

    def test_alpha_is_opaque(self, rng):
        from lumen.preview.tonemap import to_rgba8

        pixels = to_rgba8(rng.random((4, 5, 3), dtype=np.float32) * 2.0)
        assert np.all(pixels[..., 3] == 255)

    def test_black_and_saturated(self):
        from lumen.preview.tonemap import to_rgb8

        radiance = np.array([[[0.0, 1.0, 7.0]]], dtype=np.float32)
        np.testing.assert_array_equal(to_rgb8(radiance)[0, 0], [0, 255, 255])

    def test_rejects_wrong_channel_count(self):
        from lumen.preview.tonemap import to_rgba8

        with pytest.raises(ValueError):
            to_rgba8(np.zeros((2, 2, 4), dtype=np.float32))
        with pytest.raises(ValueError):
            to_rgba8(np.zeros((2, 2), dtype=np.float32))


class TestToneMapping:
    """Tests for the optional tone curves."""

    def test_reinhard(self):
        from lumen.preview.tonemap import tone_map_reinhard

        result = tone_map_reinhard(np.array([0.0, 1.0, 3.0, -1.0]))
        np.testing.assert_allclose(result, [0.0, 0.5, 0.75, 0.0])
        assert result.dtype == np.float32

    def test_exposure(self):
        from lumen.preview.tonemap import tone_map_exposure

        result = tone_map_exposure(np.array([0.0, 1.0]), exposure=2.0)
        np.testing.assert_allclose(result, [0.0, 1.0 - np.exp(-2.0)], rtol=1e-6)

    def test_apply_tone_map(self):
        from lumen.preview.tonemap import apply_tone_map

        image = np.full((1, 1, 3), 4.0, dtype=np.float32)
        assert apply_tone_map(image, "none") is image
        np.testing.assert_allclose(apply_tone_map(image, "reinhard"), 0.8)
        with pytest.raises(ValueError, match="Unknown tone mapping"):
            apply_tone_map(image, "filmic")

    def test_process_image_for_display_range(self, rng):
        from lumen.preview.tonemap import process_image_for_display

        image = rng.random((4, 4, 3), dtype=np.float32) * 5.0
        for method in ("none", "reinhard", "exposure"):
            display = process_image_for_display(image, tone_map=method)
            assert display.min() >= 0.0
            assert display.max() <= 1.0
