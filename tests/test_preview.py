"""Tests for the preview sinks and image export.

Tests cover:
- PNG export of linear images
- The PNG and Matplotlib frame sinks
- RMSE comparison
- The interactive preview's display buffer (no window is opened)
"""

import numpy as np
import pytest


class TestPngExport:
    """Tests for PNG export."""

    def test_save_png_from_array(self, tmp_path):
        from PIL import Image

        from lumen.preview.export import save_png_from_array

        image = np.full((6, 8, 3), 0.5, dtype=np.float32)
        path = tmp_path / "half.png"
        save_png_from_array(image, path)

        with Image.open(path) as saved:
            assert saved.mode == "RGB"
            assert saved.size == (8, 6)
            assert saved.getpixel((0, 0)) == (186, 186, 186)

    def test_png_sink(self, tmp_path):
        from PIL import Image

        from lumen.preview.export import PngSink
        from lumen.preview.sink import FrameSink

        path = tmp_path / "sink.png"
        sink = PngSink(path)
        assert isinstance(sink, FrameSink)
        assert sink.last_sample_count is None

        image = np.zeros((4, 5, 3), dtype=np.float32)
        image[0, 0] = (1.0, 0.0, 0.0)
        sink.present(image, 12)

        assert sink.last_sample_count == 12
        with Image.open(path) as saved:
            pixels = np.asarray(saved)
        assert pixels.shape == (4, 5, 3)
        assert tuple(pixels[0, 0]) == (255, 0, 0)
        assert tuple(pixels[3, 4]) == (0, 0, 0)

    def test_png_sink_overwrites(self, tmp_path):
        from PIL import Image

        from lumen.preview.export import PngSink

        path = tmp_path / "latest.png"
        sink = PngSink(path)
        sink.present(np.zeros((2, 2, 3), dtype=np.float32), 1)
        sink.present(np.ones((2, 2, 3), dtype=np.float32), 2)
        with Image.open(path) as saved:
            assert saved.getpixel((1, 1)) == (255, 255, 255)

    def test_save_png_uses_renderer_mean(self, tmp_path):
        from PIL import Image

        from lumen.core.progressive import ProgressiveRenderer, RenderConfig
        from lumen.preview.export import save_png
        from lumen.scene import Scene, create_cornell_box_scene

        shapes, camera_config = create_cornell_box_scene()
        renderer = ProgressiveRenderer(
            Scene(shapes), camera_config, RenderConfig(width=8, height=6, seed=2)
        )
        renderer.render(2)

        path = tmp_path / "render.png"
        save_png(renderer, path, tone_map="reinhard")
        with Image.open(path) as saved:
            assert saved.size == (8, 6)


class TestComputeRmse:
    """Tests for compute_rmse."""

    def test_identical_images(self, rng):
        from lumen.preview.export import compute_rmse

        image = rng.random((4, 4, 3))
        assert compute_rmse(image, image) == 0.0

    def test_constant_offset(self):
        from lumen.preview.export import compute_rmse

        a = np.zeros((3, 3, 3), dtype=np.float32)
        assert compute_rmse(a, a + 0.5) == pytest.approx(0.5)

    def test_shape_mismatch(self):
        from lumen.preview.export import compute_rmse

        with pytest.raises(ValueError):
            compute_rmse(np.zeros((2, 2, 3)), np.zeros((2, 3, 3)))


class TestMatplotlibSink:
    """Tests for the Matplotlib sink, drawn off-screen."""

    @pytest.fixture(autouse=True)
    def agg_backend(self):
        import matplotlib

        matplotlib.use("Agg")

    def test_present_draws_image(self):
        from lumen.preview.display import MatplotlibSink

        sink = MatplotlibSink(show=False)
        image = np.full((6, 8, 3), 0.5, dtype=np.float32)
        sink.present(image, 3)
        try:
            assert sink.figure is not None
            drawn = sink._artist.get_array()
            assert drawn.shape == (6, 8, 3)
            assert float(drawn[0, 0, 0]) == pytest.approx(0.5 ** (1.0 / 2.2), rel=1e-5)
            assert sink._axes.get_title() == "Render Preview - 3 SPP"

            # The figure is reused on the next present
            figure = sink.figure
            sink.present(image * 2.0, 4)
            assert sink.figure is figure
            assert sink._axes.get_title() == "Render Preview - 4 SPP"
        finally:
            sink.close()
        assert sink.figure is None

    def test_title(self):
        from lumen.preview.display import MatplotlibSink

        assert MatplotlibSink(tone_map="reinhard").title_for(10) == "Render Preview - 10 SPP (reinhard)"
        assert MatplotlibSink(title="Box").title_for(10) == "Box"


class TestInteractivePreview:
    """Tests for the interactive preview's display buffer."""

    def test_update_image_layout(self):
        from lumen.preview.interactive import InteractivePreview

        preview = InteractivePreview(4, 3)
        image = np.zeros((3, 4, 3), dtype=np.float32)
        image[0, 0] = (0.25, 0.5, 0.75)
        preview.update_image(image)

        # Top-left of the image is (0, height - 1) in the field
        np.testing.assert_allclose(preview.display_image.to_numpy()[0, 2], (0.25, 0.5, 0.75))

    def test_update_image_rejects_wrong_shape(self):
        from lumen.preview.interactive import InteractivePreview

        preview = InteractivePreview(4, 3)
        with pytest.raises(ValueError):
            preview.update_image(np.zeros((4, 3, 3), dtype=np.float32))

    def test_present_records_sample_count(self):
        from lumen.preview.interactive import InteractivePreview
        from lumen.preview.sink import FrameSink

        preview = InteractivePreview(4, 3)
        assert isinstance(preview, FrameSink)
        assert preview.sample_count == 0
        preview.present(np.ones((3, 4, 3), dtype=np.float32), 7)
        assert preview.sample_count == 7
        np.testing.assert_allclose(preview.display_image.to_numpy(), 1.0)

    def test_set_params_marks_change(self):
        from lumen.preview.interactive import InteractivePreview
        from lumen.scene import CornellBoxParams

        preview = InteractivePreview(4, 3)
        assert not preview._params_changed()
        preview.set_params(CornellBoxParams(light_emission=(5.0, 5.0, 5.0)))
        assert preview._params_changed()
        assert preview.renderer is None

    def test_param_change_reuses_renderer(self):
        from lumen.core.progressive import RenderConfig
        from lumen.preview.interactive import InteractivePreview
        from lumen.scene import CornellBoxParams

        preview = InteractivePreview(8, 6)
        config = RenderConfig(width=8, height=6, seed=1)
        preview._rebuild_renderer(config, 1, False)
        renderer = preview.renderer
        renderer.step()
        assert renderer.sample_count == 1

        preview.set_params(CornellBoxParams(light_emission=(5.0, 5.0, 5.0)))
        assert preview._params_changed()
        preview._rebuild_renderer(config, 1, False)

        assert preview.renderer is renderer
        assert not preview._params_changed()
        assert renderer.sample_count == 0
        light = renderer.scene.query((0.0, 2.5, 0.0), (0.0, 1.0, 0.0))
        assert light.material.emission == (5.0, 5.0, 5.0)
