"""Sensor-noise analysis in flat image regions.

Camera sensors leave a small, irregular noise floor in flat areas.
Generated images are often too clean there, or carry noise that is too
uniform or periodic.
"""
import logging
from typing import Dict, List, Optional, Tuple

import cv2
import numpy as np

from .config import NoiseConfig
from .imaging import block_origins, clamp_score, to_uint8
from .types import ModuleResult, PixelBuffer, RasterImage

logger = logging.getLogger(__name__)

LAPLACIAN_8 = np.array([[1, 1, 1], [1, -8, 1], [1, 1, 1]], dtype=np.float64)


def find_flat_blocks(rgb: np.ndarray, config: NoiseConfig) -> List[Tuple[int, int, float]]:
    """(y, x, variance) of every low-variance block, in row-major order.

    Block variance is the mean over pixels of the summed squared RGB
    deviations from the block's channel means.
    """
    h, w = rgb.shape[:2]
    size = config.block_size
    flat = []
    for y in block_origins(h, size):
        for x in block_origins(w, size):
            block = rgb[y:y + size, x:x + size].astype(np.float64)
            dev = block - block.mean(axis=(0, 1))
            variance = float((dev ** 2).sum(axis=2).mean())
            if variance < config.flat_variance:
                flat.append((y, x, variance))
    return flat


def noise_samples(red: np.ndarray, blocks: List[Tuple[int, int, float]], size: int) -> np.ndarray:
    """Mean of horizontal and vertical red-channel steps inside each block."""
    samples = []
    for y, x, _ in blocks:
        block = red[y:y + size, x:x + size].astype(np.float64)
        base = block[:-1, :-1]
        horizontal = np.abs(base - block[:-1, 1:])
        vertical = np.abs(base - block[1:, :-1])
        samples.append(((horizontal + vertical) / 2).ravel())
    if not samples:
        return np.zeros(0)
    return np.concatenate(samples)


def count_periodic(samples: np.ndarray, config: NoiseConfig) -> int:
    """Windows that nearly repeat in the window immediately after them."""
    p = config.pattern_size
    n = len(samples)
    if n <= 2 * p:
        return 0
    close = (np.abs(samples[:-p] - samples[p:]) < config.pattern_tolerance).astype(np.int32)
    # matches[i] = number of close samples in window starting at i
    cumulative = np.concatenate([[0], np.cumsum(close)])
    matches = cumulative[p:] - cumulative[:-p]
    return int((matches[:n - 2 * p] >= p - 1).sum())


def laplacian_map(rgb: np.ndarray, gain: int) -> RasterImage:
    """Amplified 8-neighbour Laplacian per channel; border pixels stay transparent."""
    h, w = rgb.shape[:2]
    out = np.zeros((h, w, 4), dtype=np.uint8)
    if h >= 3 and w >= 3:
        response = cv2.filter2D(rgb.astype(np.float64), -1, LAPLACIAN_8)
        out[1:-1, 1:-1, :3] = to_uint8(np.abs(response[1:-1, 1:-1]) * gain)
        out[1:-1, 1:-1, 3] = 255
    return RasterImage.from_array(out)


def noise_score(stats: Dict[str, float], config: NoiseConfig) -> float:
    score = 0.0

    avg = stats["avg_noise"]
    if avg < config.clean_threshold:
        score += config.clean_penalty  # no sensor noise
    elif avg > config.noisy_threshold:
        score += config.noisy_penalty

    cv = stats["coefficient_of_variation"]
    if cv < config.cv_low:
        score += config.cv_low_penalty
    elif cv > config.cv_high:
        score += config.cv_high_penalty

    if stats["periodic_ratio"] > config.periodic_ratio:
        score += config.periodic_penalty

    if stats["very_flat_ratio"] > config.very_flat_ratio:
        score += config.very_flat_penalty

    return clamp_score(score)


def analyze_noise(
    buffer: PixelBuffer,
    config: Optional[NoiseConfig] = None,
    visualize: bool = True,
) -> ModuleResult:
    """Noise-floor statistics of ``buffer``'s flat regions."""
    config = config or NoiseConfig()
    rgb = buffer.rgb

    flat = find_flat_blocks(rgb, config)
    samples = noise_samples(rgb[:, :, 0], flat[:config.max_flat_blocks], config.block_size)

    avg_noise = float(samples.mean()) if samples.size else 0.0
    noise_var = float(np.mean((samples - avg_noise) ** 2)) if samples.size else 0.0
    cv = float(np.sqrt(noise_var) / avg_noise) if avg_noise > 0 else 0.0

    periodic = count_periodic(samples, config)
    very_flat = sum(1 for _, _, v in flat if v < config.very_flat_variance)

    stats = {
        "avg_noise": avg_noise,
        "noise_consistency": 1 - cv,
        "coefficient_of_variation": cv,
        "flat_regions": float(len(flat)),
        "periodic_ratio": periodic / samples.size if samples.size else 0.0,
        "very_flat_ratio": very_flat / len(flat) if flat else 0.0,
    }
    score = noise_score(stats, config)
    logger.debug(
        "Noise avg=%.2f cv=%.2f flat=%d score=%.2f",
        avg_noise, cv, len(flat), score,
    )

    visualization = laplacian_map(rgb, config.visualization_gain) if visualize else None
    return ModuleResult(name="noise", score=score, diagnostics=stats, visualization=visualization)
