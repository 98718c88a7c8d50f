"""Shared pytest fixtures for PixelSleuth tests."""

import io

import numpy as np
import pytest
from PIL import Image

from pixelsleuth import Detector, PixelBuffer


# ---------------------------------------------------------------------------
# Pixel buffer fixtures
# ---------------------------------------------------------------------------


def make_buffer(rgb: np.ndarray) -> PixelBuffer:
    return PixelBuffer.from_array(rgb.astype(np.uint8))


def solid_rgb(w: int = 64, h: int = 64, color=(128, 128, 128)) -> np.ndarray:
    return np.tile(np.array(color, dtype=np.uint8), (h, w, 1))


def gradient_rgb(w: int = 128, h: int = 128) -> np.ndarray:
    """Smooth diagonal colour gradient."""
    x = np.linspace(0, 255, w)
    y = np.linspace(0, 255, h)
    r = np.tile(x, (h, 1))
    g = np.tile(y[:, None], (1, w))
    b = 255 - r
    return np.dstack([r, g, b]).round().astype(np.uint8)


def noise_rgb(w: int = 128, h: int = 128, seed: int = 7) -> np.ndarray:
    rng = np.random.default_rng(seed)
    return rng.integers(0, 256, (h, w, 3), dtype=np.uint8)


def checkerboard_rgb(size: int = 512) -> np.ndarray:
    """One-pixel checkerboard: all energy at DC and the Nyquist frequency."""
    yy, xx = np.indices((size, size))
    plane = ((xx + yy) % 2 * 255).astype(np.uint8)
    return np.dstack([plane, plane, plane])


def encode(rgb: np.ndarray, fmt: str = "PNG", **kwargs) -> bytes:
    buf = io.BytesIO()
    Image.fromarray(rgb.astype(np.uint8)).save(buf, format=fmt, **kwargs)
    return buf.getvalue()


@pytest.fixture()
def solid_buffer():
    """Uniform 64x64 grey image."""
    return make_buffer(solid_rgb())


@pytest.fixture()
def gradient_buffer():
    return make_buffer(gradient_rgb())


@pytest.fixture()
def noise_buffer():
    return make_buffer(noise_rgb())


@pytest.fixture()
def checkerboard_buffer():
    return make_buffer(checkerboard_rgb())


@pytest.fixture()
def sample_png_bytes():
    """Gradient image saved as PNG (no EXIF)."""
    return encode(gradient_rgb(96, 80))


@pytest.fixture()
def sample_jpeg_bytes():
    """Noisy gradient saved as JPEG."""
    rng = np.random.default_rng(3)
    rgb = gradient_rgb(96, 80).astype(np.int16) + rng.integers(-6, 7, (80, 96, 3))
    return encode(np.clip(rgb, 0, 255), "JPEG", quality=90)


@pytest.fixture()
def detector():
    """Fresh sequential Detector."""
    return Detector()
