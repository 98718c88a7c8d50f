"""Color distribution analysis.

Histogram shape, saturation and clipping statistics over the whole
frame. Generated images tend toward smooth histograms with few distinct
peaks, extreme saturation, and heavy highlight or shadow clipping.
"""
import logging
from typing import Dict, Optional

import numpy as np

from .config import ColorConfig
from .imaging import clamp_score, to_uint8
from .types import ModuleResult, PixelBuffer, RasterImage

logger = logging.getLogger(__name__)


def channel_histograms(buffer: PixelBuffer) -> Dict[str, np.ndarray]:
    """256-bin histograms for R, G, B and HSV saturation, plus raw saturation."""
    rgb = buffer.rgb.reshape(-1, 3)
    hists = {
        name: np.bincount(rgb[:, i], minlength=256)
        for i, name in enumerate(("r", "g", "b"))
    }

    hi = rgb.max(axis=1).astype(np.float64)
    lo = rgb.min(axis=1).astype(np.float64)
    saturation = np.divide((hi - lo) * 255, hi, out=np.zeros_like(hi), where=hi > 0)
    hists["s"] = np.bincount(np.floor(saturation).astype(np.int64), minlength=256)
    hists["saturation"] = saturation
    return hists


def count_peaks(hist: np.ndarray, total_pixels: int, config: ColorConfig) -> int:
    """Bins exceeding both neighbours by ``peak_ratio`` and a minimum share of pixels."""
    h = hist.astype(np.float64)
    center = h[1:-1]
    is_peak = (
        (center > h[:-2] * config.peak_ratio)
        & (center > h[2:] * config.peak_ratio)
        & (center > total_pixels * config.peak_min_fraction)
    )
    return int(is_peak.sum())


def smooth_windows(hist: np.ndarray, config: ColorConfig) -> int:
    """Count 3-bin windows whose variance is tiny relative to their mean."""
    start, stop = config.smooth_bins
    h = hist.astype(np.float64)
    windows = np.stack([h[start - 1:stop - 1], h[start:stop], h[start + 1:stop + 1]])
    means = windows.mean(axis=0)
    variances = windows.var(axis=0)
    smooth = (variances < means * config.smooth_variance_fraction) & (means > config.smooth_min_mean)
    return int(smooth.sum())


def histogram_chart(r: np.ndarray, g: np.ndarray, b: np.ndarray, config: ColorConfig) -> RasterImage:
    """Overlaid RGB histogram bars on black, each blended at 50%."""
    height = config.chart_height
    canvas = np.zeros((height, 256, 3), dtype=np.float64)

    max_val = max(r.max(), g.max(), b.max())
    rows = np.arange(height)[:, None]
    for channel, hist in enumerate((r, g, b)):
        bar = hist / max_val * config.chart_bar_height if max_val > 0 else np.zeros(256)
        top = np.rint(config.chart_baseline - bar)
        mask = (rows >= top[None, :]) & (rows < config.chart_baseline)
        color = np.zeros(3)
        color[channel] = 255.0
        canvas[mask] = canvas[mask] * 0.5 + color * 0.5

    alpha = np.full((height, 256, 1), 255, dtype=np.uint8)
    return RasterImage.from_array(np.concatenate([to_uint8(canvas), alpha], axis=2))


def color_score(stats: Dict[str, float], total_pixels: int, config: ColorConfig) -> float:
    score = 0.0

    if stats["peak_count"] < config.min_peaks:
        score += config.min_peaks_penalty

    saturation = stats["avg_saturation"]
    if saturation > config.saturation_high:
        score += config.saturation_high_penalty
    elif saturation < config.saturation_low:
        score += config.saturation_low_penalty

    if stats["clipping_ratio"] > config.clipping_threshold:
        score += config.clipping_penalty

    if stats["histogram_variance"] < total_pixels * config.histogram_variance_fraction:
        score += config.histogram_variance_penalty

    if stats["smooth_windows"] > config.smooth_window_limit:
        score += config.smooth_window_penalty

    return clamp_score(score)


def analyze_color(
    buffer: PixelBuffer,
    config: Optional[ColorConfig] = None,
    visualize: bool = True,
) -> ModuleResult:
    """Histogram, saturation and clipping analysis of ``buffer``."""
    config = config or ColorConfig()
    total_pixels = buffer.width * buffer.height

    hists = channel_histograms(buffer)
    r, g, b = hists["r"], hists["g"], hists["b"]

    rgb = buffer.rgb.reshape(-1, 3)
    clipped = np.all(rgb >= config.clip_high, axis=1) | np.all(rgb <= config.clip_low, axis=1)

    stats = {
        "avg_saturation": float(hists["saturation"].mean()),
        "clipping_ratio": float(clipped.sum() / total_pixels),
        "peak_count": float(sum(count_peaks(h, total_pixels, config) for h in (r, g, b))),
        "histogram_variance": float(np.mean([np.var(h.astype(np.float64)) for h in (r, g, b)])),
        # Smoothness is judged on the red histogram
        "smooth_windows": float(smooth_windows(r, config)),
    }
    score = color_score(stats, total_pixels, config)
    logger.debug(
        "Color saturation=%.1f clipping=%.3f peaks=%d score=%.2f",
        stats["avg_saturation"], stats["clipping_ratio"], stats["peak_count"], score,
    )

    visualization = histogram_chart(r, g, b, config) if visualize else None
    return ModuleResult(name="color", score=score, diagnostics=stats, visualization=visualization)
