"""Frequency-domain analysis via a 2-D discrete Fourier transform.

Diffusion and GAN outputs tend to have either an over-smoothed spectrum
(energy concentrated near DC) or periodic upsampling artifacts that show
up as symmetric peaks, regular grids, or energy at the Nyquist corners.
"""
import logging
from typing import Dict, Optional, Tuple

import cv2
import numpy as np
from scipy import fft as sp_fft

from .config import FrequencyConfig
from .imaging import clamp_score, gray_raster
from .types import ModuleResult, PixelBuffer

logger = logging.getLogger(__name__)


def log_magnitude_spectrum(gray: np.ndarray) -> np.ndarray:
    """Centered log(1 + |F|) of a square grayscale plane.

    The transform is separable: a 1-D FFT over every row, then over
    every column of the result.
    """
    rows = sp_fft.fft(gray.astype(np.complex128), axis=1)
    spectrum = sp_fft.fft(rows, axis=0)
    return np.fft.fftshift(np.log(np.abs(spectrum) + 1))


def _resize_gray(buffer: PixelBuffer, size: int) -> np.ndarray:
    gray = buffer.grayscale()
    if gray.shape != (size, size):
        gray = cv2.resize(gray, (size, size), interpolation=cv2.INTER_LINEAR)
    return gray


def band_energies(magnitude: np.ndarray, config: FrequencyConfig) -> Tuple[float, float, float, float]:
    """(total, low, mid, high) log-magnitude sums by radius from center."""
    size = magnitude.shape[0]
    center = size / 2
    y, x = np.ogrid[:size, :size]
    dist = np.sqrt((x - center) ** 2 + (y - center) ** 2)

    low_mask = dist <= size * config.low_radius_fraction
    mid_mask = ~low_mask & (dist <= size * config.mid_radius_fraction)
    high_mask = ~(low_mask | mid_mask)

    return (
        float(magnitude.sum()),
        float(magnitude[low_mask].sum()),
        float(magnitude[mid_mask].sum()),
        float(magnitude[high_mask].sum()),
    )


def find_peaks(magnitude: np.ndarray, config: FrequencyConfig) -> np.ndarray:
    """Row-major (x, y) coordinates of strong non-DC spectral peaks."""
    size = magnitude.shape[0]
    center = size / 2
    y, x = np.ogrid[:size, :size]
    dist = np.sqrt((x - center) ** 2 + (y - center) ** 2)
    mask = (dist > config.dc_exclusion_radius) & (magnitude > magnitude.max() * config.peak_fraction)
    ys, xs = np.nonzero(mask)
    return np.stack([xs, ys], axis=1).astype(np.float64)


def count_grid_patterns(peaks: np.ndarray, center: float, config: FrequencyConfig) -> int:
    """Count peak pairs that are point-symmetric or sit on a 90-degree grid.

    A pair satisfying both tests is counted twice.
    """
    if len(peaks) < 2:
        return 0

    offsets = peaks - center
    radii = np.hypot(offsets[:, 0], offsets[:, 1])
    angles = np.arctan2(offsets[:, 1], offsets[:, 0])
    quarter = np.pi / 2

    count = 0
    for i in range(len(offsets) - 1):
        dx, dy = offsets[i]
        rest = offsets[i + 1:]

        symmetric = (np.abs(dx + rest[:, 0]) < config.symmetry_tolerance) & \
                    (np.abs(dy + rest[:, 1]) < config.symmetry_tolerance)

        same_radius = np.abs(radii[i] - radii[i + 1:]) < radii[i] * config.spacing_tolerance
        folded = np.mod(np.abs(angles[i] - angles[i + 1:]), quarter)
        aligned = (folded < config.angle_tolerance) | (folded > quarter - config.angle_tolerance)

        count += int(symmetric.sum()) + int((same_radius & aligned).sum())
    return count


def corner_energy(magnitude: np.ndarray, config: FrequencyConfig) -> float:
    size = magnitude.shape[0]
    cs = int(size * config.corner_fraction)
    if cs == 0:
        return 0.0
    return float(
        magnitude[:cs, :cs].sum() + magnitude[:cs, -cs:].sum()
        + magnitude[-cs:, :cs].sum() + magnitude[-cs:, -cs:].sum()
    )


def frequency_score(stats: Dict[str, float], config: FrequencyConfig) -> float:
    score = 0.0

    low = stats["low_freq_ratio"]
    # An all-zero spectrum has no band distribution to judge
    empty = low + stats["mid_freq_ratio"] + stats["high_freq_ratio"] == 0
    if low > config.low_ratio_high:
        score += config.low_ratio_high_penalty  # over-smoothed
    elif low < config.low_ratio_low and not empty:
        score += config.low_ratio_low_penalty

    if stats["high_freq_ratio"] > config.high_ratio_threshold:
        score += config.high_ratio_penalty

    patterns = stats["grid_pattern_count"]
    if patterns > config.grid_pattern_many:
        score += config.grid_pattern_many_penalty
    elif patterns > 0:
        score += config.grid_pattern_some_penalty

    # Checkerboard artifacts sit at the Nyquist corners
    if stats["corner_ratio"] > config.corner_ratio_threshold:
        score += config.corner_penalty

    return clamp_score(score)


def analyze_frequency(
    buffer: PixelBuffer,
    config: Optional[FrequencyConfig] = None,
    visualize: bool = True,
) -> ModuleResult:
    """Spectral analysis of a grayscale, resized copy of ``buffer``."""
    config = config or FrequencyConfig()
    size = config.size

    magnitude = log_magnitude_spectrum(_resize_gray(buffer, size))

    total, low, mid, high = band_energies(magnitude, config)
    peaks = find_peaks(magnitude, config)

    def ratio(energy: float) -> float:
        return energy / total if total > 0 else 0.0

    stats = {
        "low_freq_ratio": ratio(low),
        "mid_freq_ratio": ratio(mid),
        "high_freq_ratio": ratio(high),
        "peak_count": float(len(peaks)),
        "grid_pattern_count": float(count_grid_patterns(peaks, size / 2, config)),
        "corner_ratio": ratio(corner_energy(magnitude, config)),
    }
    score = frequency_score(stats, config)
    logger.debug(
        "FFT low=%.3f high=%.3f peaks=%d patterns=%d score=%.2f",
        stats["low_freq_ratio"], stats["high_freq_ratio"],
        len(peaks), stats["grid_pattern_count"], score,
    )

    visualization = None
    if visualize:
        max_mag = magnitude.max()
        normalized = magnitude / max_mag * 255 if max_mag > 0 else np.zeros_like(magnitude)
        visualization = gray_raster(normalized)

    return ModuleResult(name="fft", score=score, diagnostics=stats, visualization=visualization)
