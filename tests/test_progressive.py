"""Tests for the progressive renderer.

This module tests:
- Construction, reset and resize
- Sample accumulation in batches
- Progress callbacks and the generator interface
- 8-bit conversion and saving through the renderer

Note: Imports are done inside test methods to avoid Taichi initialization issues.
"""

import numpy as np
import pytest


def _setup_scene():
    from src.spheretrace.camera.pinhole import setup_camera
    from src.spheretrace.scene.presets import create_default_scene

    _, camera = create_default_scene()
    setup_camera(camera)


class TestProgressiveRendererBasics:
    """Tests for construction and state."""

    def test_initial_state(self):
        """A new renderer has its size and no samples."""
        from src.spheretrace.core.progressive import ProgressiveRenderer

        renderer = ProgressiveRenderer(32, 24)
        assert renderer.width == 32
        assert renderer.height == 24
        assert renderer.pixel_count == 32 * 24
        assert renderer.sample_count == 0
        assert repr(renderer) == "ProgressiveRenderer(width=32, height=24, samples=0)"

    def test_invalid_size(self):
        """Invalid dimensions raise ValueError."""
        from src.spheretrace.core.progressive import ProgressiveRenderer

        with pytest.raises(ValueError):
            ProgressiveRenderer(0, 16)

    def test_reset(self):
        """reset clears accumulated samples."""
        from src.spheretrace.core.progressive import ProgressiveRenderer

        _setup_scene()
        renderer = ProgressiveRenderer(8, 8)
        renderer.render(3)
        assert renderer.sample_count == 3
        renderer.reset()
        assert renderer.sample_count == 0
        assert renderer.get_image_numpy().max() == 0.0

    def test_resize(self):
        """resize changes the image shape and clears samples."""
        from src.spheretrace.core.progressive import ProgressiveRenderer

        _setup_scene()
        renderer = ProgressiveRenderer(8, 8)
        renderer.render(1)
        renderer.resize(10, 6)
        assert renderer.sample_count == 0
        renderer.render(1)
        assert renderer.get_image_numpy().shape == (6, 10, 3)

    def test_failed_resize_keeps_size(self):
        """An invalid resize leaves the renderer unchanged."""
        from src.spheretrace.core.progressive import ProgressiveRenderer

        renderer = ProgressiveRenderer(8, 8)
        with pytest.raises(ValueError):
            renderer.resize(8, 100000)
        assert (renderer.width, renderer.height) == (8, 8)


class TestProgressiveRendering:
    """Tests for batched rendering and progress reporting."""

    def test_callback_per_batch(self):
        """The callback fires after each batch with running totals."""
        from src.spheretrace.core.progressive import ProgressiveRenderer

        _setup_scene()
        renderer = ProgressiveRenderer(8, 8)
        calls = []
        renderer.render(7, batch_size=3, callback=lambda c, t: calls.append((c, t)))

        assert calls == [(3, 7), (6, 7), (7, 7)]
        assert renderer.sample_count == 7

    def test_continues_accumulation(self):
        """Targets are relative to the samples already accumulated."""
        from src.spheretrace.core.progressive import ProgressiveRenderer

        _setup_scene()
        renderer = ProgressiveRenderer(8, 8)
        renderer.render(2)
        progress = list(renderer.render_progressive(2, batch_size=1))
        assert progress == [(3, 4), (4, 4)]

    def test_zero_samples_is_noop(self):
        """Rendering zero samples yields nothing."""
        from src.spheretrace.core.progressive import ProgressiveRenderer

        renderer = ProgressiveRenderer(8, 8)
        assert list(renderer.render_progressive(0)) == []
        assert renderer.sample_count == 0

    def test_invalid_batch_size(self):
        """batch_size must be positive."""
        from src.spheretrace.core.progressive import ProgressiveRenderer

        renderer = ProgressiveRenderer(8, 8)
        with pytest.raises(ValueError, match="batch_size"):
            renderer.render(4, batch_size=0)


class TestProgressiveOutput:
    """Tests for image access and saving."""

    def test_uint8_image(self):
        """get_image_uint8 converts with floor(v * 255)."""
        from src.spheretrace.core.progressive import ProgressiveRenderer

        _setup_scene()
        renderer = ProgressiveRenderer(16, 16)
        renderer.render(2)

        image = renderer.get_image_numpy()
        image_u8 = renderer.get_image_uint8()
        assert image_u8.dtype == np.uint8
        assert image_u8.shape == (16, 16, 3)
        expected = np.floor(np.clip(image.astype(np.float64), 0.0, 1.0) * 255).astype(np.uint8)
        np.testing.assert_array_equal(image_u8, expected)

    def test_save_ppm(self, tmp_path):
        """save_image writes a PPM with the renderer's size."""
        from src.spheretrace.core.progressive import ProgressiveRenderer

        _setup_scene()
        renderer = ProgressiveRenderer(6, 4)
        renderer.render(1)

        path = tmp_path / "out.ppm"
        renderer.save_image(str(path))
        lines = path.read_text().splitlines()
        assert lines[:3] == ["P3", "6 4", "255"]
        assert len(lines) == 3 + 6 * 4
