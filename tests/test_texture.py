"""Tests for texture upload, wrapping and sampling."""

import numpy as np
import pytest
import taichi as ti
from PIL import Image as PILImage


def _gradient_texture(width=4, height=2):
    """Texture whose red channel encodes x and green channel encodes y."""
    pixels = np.zeros((height, width, 4), dtype=np.uint8)
    for y in range(height):
        for x in range(width):
            pixels[y, x] = (x * 50, (y * 100) % 256, 7, 255)
    return pixels


def _sample(texture_id, u, v, scale=1.0, offset=0.0):
    from src.whitted.core.ray import vec3
    from src.whitted.materials.texture import sample_texture

    result = ti.field(dtype=vec3, shape=())

    @ti.kernel
    def test_kernel(tid: ti.i32, uu: ti.f64, vv: ti.f64, s: ti.f64, o: ti.f64):
        result[None] = sample_texture(tid, uu, vv, s, o)

    test_kernel(texture_id, u, v, scale, offset)
    c = result[None]
    return (round(c[0] * 255), round(c[1] * 255), round(c[2] * 255))


class TestAddTexture:
    """Test texture upload and validation."""

    def test_add_returns_sequential_ids(self):
        from src.whitted.materials.texture import add_texture, get_texture_count, get_texture_size

        first = add_texture(_gradient_texture())
        second = add_texture(_gradient_texture(3, 5))

        assert (first, second) == (0, 1)
        assert get_texture_count() == 2
        assert get_texture_size(1) == (3, 5)

    def test_rejects_wrong_shape(self):
        from src.whitted.materials.texture import add_texture

        with pytest.raises(ValueError, match="shape"):
            add_texture(np.zeros((4, 4, 3), dtype=np.uint8))

    def test_rejects_wrong_dtype(self):
        from src.whitted.materials.texture import add_texture

        with pytest.raises(ValueError, match="dtype"):
            add_texture(np.zeros((4, 4, 4), dtype=np.float32))

    def test_rejects_empty(self):
        from src.whitted.materials.texture import add_texture

        with pytest.raises(ValueError, match="empty"):
            add_texture(np.zeros((0, 4, 4), dtype=np.uint8))

    def test_capacity(self):
        from src.whitted.materials.texture import MAX_TEXTURES, add_texture

        tiny = np.zeros((1, 1, 4), dtype=np.uint8)
        for _ in range(MAX_TEXTURES):
            add_texture(tiny)
        with pytest.raises(RuntimeError, match="Maximum number of textures"):
            add_texture(tiny)


class TestSampleTexture:
    """Test tiled lookup with wrapping."""

    def test_sample_texel(self):
        from src.whitted.materials.texture import add_texture

        tid = add_texture(_gradient_texture())
        # u = 0.6 -> x = floor(2.4) = 2, v = 0.75 -> y = floor(1.5) = 1
        assert _sample(tid, 0.6, 0.75) == (100, 100, 7)

    def test_wraps_above_one(self):
        from src.whitted.materials.texture import add_texture

        tid = add_texture(_gradient_texture())
        assert _sample(tid, 1.6, 1.75) == _sample(tid, 0.6, 0.75)

    def test_wraps_negative_coordinates(self):
        from src.whitted.materials.texture import add_texture

        tid = add_texture(_gradient_texture())
        # u = -0.1 -> floor(-0.4) = -1 -> x = 3; v = -0.25 -> floor(-0.5) = -1 -> y = 1
        assert _sample(tid, -0.1, -0.25) == (150, 100, 7)

    def test_scale_and_offset(self):
        from src.whitted.materials.texture import add_texture

        tid = add_texture(_gradient_texture())
        # 0.1 * 2 + 0.3 = 0.5 -> x = 2, y = 1
        assert _sample(tid, 0.1, 0.1, scale=2.0, offset=0.3) == (100, 100, 7)

    def test_scale_zero_samples_offset(self):
        from src.whitted.materials.texture import add_texture

        tid = add_texture(_gradient_texture())
        assert _sample(tid, 0.9, 0.9, scale=0.0, offset=0.0) == (0, 0, 7)


class TestTextureHelpers:
    """Test checkerboard generation and file loading."""

    def test_checkerboard(self):
        from src.whitted.materials.texture import checkerboard_texture

        pixels = checkerboard_texture(8, 8, cells=2, dark=(0, 0, 0), light=(255, 255, 255))
        assert pixels.shape == (8, 8, 4)
        assert pixels.dtype == np.uint8
        assert tuple(pixels[0, 0]) == (0, 0, 0, 255)
        assert tuple(pixels[0, 4]) == (255, 255, 255, 255)
        assert tuple(pixels[4, 4]) == (0, 0, 0, 255)

    def test_load_texture(self, tmp_path):
        from src.whitted.materials.texture import load_texture

        path = tmp_path / "tex.png"
        PILImage.new("RGB", (3, 2), (10, 20, 30)).save(path)

        pixels = load_texture(path)
        assert pixels.shape == (2, 3, 4)
        assert tuple(pixels[1, 2]) == (10, 20, 30, 255)

    def test_load_missing_file_fails(self, tmp_path):
        from src.whitted.materials.texture import load_texture

        with pytest.raises(FileNotFoundError):
            load_texture(tmp_path / "missing.png")
