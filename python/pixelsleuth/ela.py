"""Error Level Analysis (ELA).

The image is re-encoded at a fixed JPEG quality and compared against
itself. Camera photos carry an uneven compression history, so the error
varies across the frame; synthetic or over-clean images produce error
that is flat, low, or uniform across regions.
"""
import logging
from typing import Dict, Optional

import numpy as np

from .config import ElaConfig
from .imaging import Encoder, clamp_score, jpeg_reencode
from .types import ModuleResult, PixelBuffer, RasterImage

logger = logging.getLogger(__name__)


def amplified_difference(original: PixelBuffer, recompressed: PixelBuffer, gain: int) -> np.ndarray:
    """Per-channel |original - recompressed| * gain, saturated to bytes."""
    diff = np.abs(original.rgb.astype(np.int32) - recompressed.rgb.astype(np.int32))
    return np.minimum(diff * gain, 255).astype(np.uint8)


def ela_statistics(amplified: np.ndarray) -> Dict[str, float]:
    """Global and 2x2-regional statistics of the amplified difference."""
    per_pixel = amplified.astype(np.float64).mean(axis=2)
    mean = float(per_pixel.mean())
    variance = float(np.mean(per_pixel ** 2) - mean ** 2)

    h, w = per_pixel.shape
    rh, rw = h // 2, w // 2
    region_means = []
    for ry in range(2):
        for rx in range(2):
            region = per_pixel[ry * rh:(ry + 1) * rh, rx * rw:(rx + 1) * rw]
            region_means.append(float(region.mean()) if region.size else 0.0)
    region_variance = float(np.var(region_means))

    cv = float(np.sqrt(max(variance, 0.0)) / mean) if mean > 0 else 0.0
    return {
        "mean": mean,
        "variance": variance,
        "region_variance": region_variance,
        "coefficient_of_variation": cv,
    }


def ela_score(stats: Dict[str, float], config: ElaConfig) -> float:
    score = 0.0

    # Too consistent across regions
    if stats["region_variance"] < config.region_variance_low:
        score += config.region_variance_penalty

    for bound, penalty in config.mean_bands:
        if stats["mean"] < bound:
            score += penalty
            break

    variance = stats["variance"]
    for bound, penalty in config.variance_bands:
        if variance < bound:
            score += penalty
            break
    else:
        if variance > config.variance_high:
            score += config.variance_high_bonus

    cv = stats["coefficient_of_variation"]
    lo, hi = config.cv_natural_range
    if cv < config.cv_low:
        score += config.cv_low_penalty
    elif lo < cv < hi:
        score += config.cv_natural_bonus

    return clamp_score(score)


def analyze_ela(
    buffer: PixelBuffer,
    config: Optional[ElaConfig] = None,
    encoder: Optional[Encoder] = None,
    visualize: bool = True,
) -> ModuleResult:
    """Run ELA against ``buffer``.

    Args:
        buffer: Decoded source image.
        config: Thresholds; defaults to :class:`ElaConfig`.
        encoder: Lossy round-trip, defaults to :func:`jpeg_reencode`.
        visualize: Build the amplified difference raster.
    """
    config = config or ElaConfig()
    encoder = encoder or jpeg_reencode

    recompressed = encoder(buffer, config.quality)
    if (recompressed.width, recompressed.height) != (buffer.width, buffer.height):
        raise ValueError("Re-encoded image has different dimensions")

    amplified = amplified_difference(buffer, recompressed, config.amplification)
    stats = ela_statistics(amplified)
    score = ela_score(stats, config)
    logger.debug("ELA mean=%.2f variance=%.2f score=%.2f", stats["mean"], stats["variance"], score)

    visualization = None
    if visualize:
        alpha = np.full(amplified.shape[:2] + (1,), 255, dtype=np.uint8)
        visualization = RasterImage.from_array(np.concatenate([amplified, alpha], axis=2))

    return ModuleResult(name="ela", score=score, diagnostics=stats, visualization=visualization)
