"""Pixel source and raster helpers shared by the analysis modules.

Decoding and lossy re-encoding are delegated to Pillow; every module
works on numpy views of the immutable :class:`PixelBuffer`.
"""
import io
import logging
from typing import Callable

import numpy as np
from PIL import Image, UnidentifiedImageError

from .errors import DecodeFailure
from .types import PixelBuffer, RasterImage

logger = logging.getLogger(__name__)

# Signature of a lossy re-encoder: (buffer, quality in (0, 1]) -> decoded buffer
Encoder = Callable[[PixelBuffer, float], PixelBuffer]


def decode_image(data: bytes) -> PixelBuffer:
    """Decode raw file bytes into an RGBA pixel buffer.

    Raises:
        DecodeFailure: the bytes are empty, truncated or not an image.
    """
    if not data:
        raise DecodeFailure("Empty image data")
    try:
        with Image.open(io.BytesIO(data)) as img:
            rgba = np.array(img.convert("RGBA"), dtype=np.uint8)
    except (UnidentifiedImageError, OSError, ValueError, SyntaxError, EOFError) as e:
        logger.error(f"Failed to decode image data: {e}")
        raise DecodeFailure(f"Invalid image data: {e}") from e
    return PixelBuffer.from_array(rgba)


def jpeg_reencode(buffer: PixelBuffer, quality: float = 0.90) -> PixelBuffer:
    """Round-trip ``buffer`` through the JPEG codec and decode it again."""
    original = Image.fromarray(np.ascontiguousarray(buffer.rgb))
    out = io.BytesIO()
    original.save(out, "JPEG", quality=int(round(quality * 100)))
    out.seek(0)
    with Image.open(out) as recompressed:
        rgb = np.array(recompressed.convert("RGB"), dtype=np.uint8)
    return PixelBuffer.from_array(rgb)


def to_uint8(values: np.ndarray) -> np.ndarray:
    """Round half-to-even and saturate into [0, 255]."""
    arr = np.nan_to_num(np.asarray(values, dtype=np.float64), nan=0.0)
    return np.clip(np.rint(arr), 0, 255).astype(np.uint8)


def gray_raster(values: np.ndarray) -> RasterImage:
    """Opaque grayscale raster from a 2-D array of byte-range values."""
    plane = to_uint8(values)
    alpha = np.full(plane.shape, 255, dtype=np.uint8)
    return RasterImage.from_array(np.dstack([plane, plane, plane, alpha]))


def block_origins(length: int, size: int) -> range:
    """Block offsets ``0, size, 2*size, ...`` strictly below ``length - size``."""
    return range(0, max(0, length - size), size)


def clamp_score(score: float) -> float:
    return float(min(1.0, max(0.0, score)))
