"""Texture analysis with local binary patterns (LBP).

Natural texture produces a rich spread of LBP codes. Generated textures
tend toward few dominant patterns, low entropy, tiles that repeat across
the frame, and large regions of near-constant codes.
"""
import logging
from typing import Dict, Optional

import numpy as np

from .config import TextureConfig
from .imaging import block_origins, clamp_score, gray_raster
from .types import ModuleResult, PixelBuffer

logger = logging.getLogger(__name__)

# Bit order: top-left, top, top-right, right, bottom-right, bottom, bottom-left, left
LBP_OFFSETS = [(-1, -1), (-1, 0), (-1, 1), (0, 1), (1, 1), (1, 0), (1, -1), (0, -1)]


def local_binary_pattern(gray: np.ndarray) -> np.ndarray:
    """8-neighbour LBP code per interior pixel; border codes are 0."""
    h, w = gray.shape
    codes = np.zeros((h, w), dtype=np.int64)
    if h < 3 or w < 3:
        return codes

    center = gray[1:-1, 1:-1]
    inner = np.zeros(center.shape, dtype=np.int64)
    for bit, (dy, dx) in enumerate(LBP_OFFSETS):
        neighbor = gray[1 + dy:h - 1 + dy, 1 + dx:w - 1 + dx]
        inner |= (neighbor >= center).astype(np.int64) << bit
    codes[1:-1, 1:-1] = inner
    return codes


def repetition_ratio(codes: np.ndarray, config: TextureConfig) -> float:
    """Share of block pairs, over all pairs, whose LBP histograms nearly coincide.

    Adjacent blocks are never compared but still count in the denominator.
    """
    h, w = codes.shape
    size = config.block_size
    origins = [(y, x) for y in block_origins(h, size) for x in block_origins(w, size)]
    n = len(origins)
    if n < 2:
        return 0.0

    hists = np.stack([
        np.bincount(codes[y:y + size, x:x + size].ravel(), minlength=256)
        for y, x in origins
    ])
    coords = np.array(origins)
    limit = size * size * config.similarity_fraction

    repetitive = 0
    for i in range(n - 1):
        delta = np.abs(coords[i + 1:] - coords[i])
        distant = ~((delta[:, 0] <= size) & (delta[:, 1] <= size))
        if not distant.any():
            continue
        intersection = np.minimum(hists[i], hists[i + 1:][distant]).sum(axis=1)
        repetitive += int((intersection > limit).sum())

    return repetitive / (n * (n - 1) / 2)


def smooth_region_ratio(codes: np.ndarray, config: TextureConfig) -> float:
    h, w = codes.shape
    size = config.region_size
    total = (w // size) * (h // size)
    if total == 0:
        return 0.0

    smooth = 0
    for y in block_origins(h, size):
        for x in block_origins(w, size):
            if codes[y:y + size, x:x + size].astype(np.float64).var() < config.region_variance:
                smooth += 1
    return smooth / total


def normalized_entropy(hist: np.ndarray) -> float:
    total = hist.sum()
    if total == 0:
        return 0.0
    p = hist[hist > 0] / total
    return float(-(p * np.log2(p)).sum() / np.log2(256))


def texture_score(stats: Dict[str, float], config: TextureConfig) -> float:
    score = 0.0

    # Not enough texture variety
    if stats["distinct_patterns"] < config.min_patterns:
        score += config.min_patterns_penalty

    if stats["dominance_ratio"] > config.dominance_ratio:
        score += config.dominance_penalty

    if stats["repetition_score"] > config.repetition_ratio:
        score += config.repetition_penalty

    if stats["smooth_ratio"] > config.smooth_ratio:
        score += config.smooth_penalty

    if stats["texture_complexity"] < config.entropy_low:
        score += config.entropy_penalty

    return clamp_score(score)


def analyze_texture(
    buffer: PixelBuffer,
    config: Optional[TextureConfig] = None,
    visualize: bool = True,
) -> ModuleResult:
    """LBP texture statistics of ``buffer``."""
    config = config or TextureConfig()
    codes = local_binary_pattern(buffer.grayscale())

    interior = codes[1:-1, 1:-1]
    hist = np.bincount(interior.ravel(), minlength=256)
    total = int(hist.sum())

    stats = {
        "texture_complexity": normalized_entropy(hist),
        "repetition_score": repetition_ratio(codes, config),
        "distinct_patterns": float((hist > 0).sum()),
        "dominance_ratio": float(hist.max() / total) if total else 0.0,
        "smooth_ratio": smooth_region_ratio(codes, config),
    }
    score = texture_score(stats, config)
    logger.debug(
        "Texture entropy=%.3f repetition=%.3f patterns=%d score=%.2f",
        stats["texture_complexity"], stats["repetition_score"], stats["distinct_patterns"], score,
    )

    visualization = gray_raster(codes) if visualize else None
    return ModuleResult(name="texture", score=score, diagnostics=stats, visualization=visualization)
