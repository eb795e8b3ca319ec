"""Tests for the preview module.

This module tests the preview/export functionality including:
- PNG export of frame buffers
- Reading reference images and frame RMSE
"""

import numpy as np
import pytest
from PIL import Image as PILImage

from phong_tracer.core.render import FrameBuffer, render_scene
from phong_tracer.core.vector import DiscreteColor


class TestSavePng:
    """Test PNG export."""

    def test_save_png_creates_file(self, tmp_path):
        """Test that save_png creates a readable RGB image."""
        from phong_tracer.preview.export import save_png

        frame = FrameBuffer(5, 3)
        path = tmp_path / "frame.png"
        save_png(frame, path)

        assert path.exists()
        with PILImage.open(path) as img:
            assert img.size == (5, 3)
            assert img.mode == "RGB"

    def test_save_png_preserves_pixels(self, tmp_path):
        """Test that pixel values and orientation survive export."""
        from phong_tracer.preview.export import save_png

        frame = FrameBuffer(4, 2)
        frame.put_pixel(0, 0, DiscreteColor(255, 0, 0))
        frame.put_pixel(3, 1, DiscreteColor(0, 0, 255))
        path = tmp_path / "frame.png"
        save_png(frame, path)

        with PILImage.open(path) as img:
            assert img.getpixel((0, 0)) == (255, 0, 0)
            assert img.getpixel((3, 1)) == (0, 0, 255)
            assert img.getpixel((1, 0)) == (0, 0, 0)

    def test_rendered_frame_export(self, tmp_path, white_floor_scene):
        """Test exporting a rendered frame."""
        from phong_tracer.preview.export import save_png

        frame, _ = render_scene(white_floor_scene, 4, 6)
        path = tmp_path / "floor.png"
        save_png(frame, path)

        loaded = np.asarray(PILImage.open(path))
        assert np.array_equal(loaded, frame.pixels)

    def test_load_png_matches_saved_frame(self, tmp_path, white_floor_scene):
        """Test a saved frame reads back as the same (H, W, 3) array."""
        from phong_tracer.preview.export import load_png, save_png

        frame, _ = render_scene(white_floor_scene, 4, 6)
        path = tmp_path / "floor.png"
        save_png(frame, path)

        loaded = load_png(path)
        assert loaded.shape == (6, 4, 3)
        assert loaded.dtype == np.uint8
        assert np.array_equal(loaded, frame.pixels)

    def test_load_png_converts_to_rgb(self, tmp_path):
        """Test that grayscale images are read as RGB."""
        from phong_tracer.preview.export import load_png

        path = tmp_path / "gray.png"
        PILImage.new("L", (3, 2), 128).save(path)
        assert np.all(load_png(path) == 128)
        assert load_png(path).shape == (2, 3, 3)


class TestFrameRmse:
    """Test frame comparison."""

    def test_identical_frames(self, white_floor_scene):
        """Test that a frame compared with itself has zero RMSE."""
        from phong_tracer.preview.export import frame_rmse

        frame, _ = render_scene(white_floor_scene, 4, 6)
        assert frame_rmse(frame, frame) == 0.0

    def test_frame_against_saved_reference(self, tmp_path, white_floor_scene):
        """Test comparing a frame with a PNG written from a darker frame."""
        from phong_tracer.preview.export import frame_rmse, load_png, save_png

        frame, _ = render_scene(white_floor_scene, 4, 6)
        save_png(FrameBuffer(4, 6), tmp_path / "black.png")

        # 8 of 24 pixels are (51, 51, 51)
        expected = np.sqrt(51.0**2 * 8 / 24)
        assert abs(frame_rmse(frame, load_png(tmp_path / "black.png")) - expected) < 1e-9

    def test_uint8_does_not_wrap(self):
        """Test that differences are computed without uint8 overflow."""
        from phong_tracer.preview.export import frame_rmse

        a = np.full((2, 2, 3), 10, dtype=np.uint8)
        b = np.full((2, 2, 3), 20, dtype=np.uint8)
        assert abs(frame_rmse(a, b) - 10.0) < 1e-9

    def test_size_mismatch_raises(self):
        """Test that frames of different sizes are rejected."""
        from phong_tracer.preview.export import frame_rmse

        with pytest.raises(ValueError, match="sizes differ"):
            frame_rmse(FrameBuffer(4, 6), FrameBuffer(6, 4))
