"""Edge analysis with Sobel gradients.

Generated images often show crisp, overly coherent edges next to large
"plastic" areas with almost no edges at all.
"""
import logging
from typing import Dict, Optional, Tuple

import cv2
import numpy as np

from .config import EdgeConfig
from .imaging import block_origins, clamp_score, gray_raster
from .types import ModuleResult, PixelBuffer

logger = logging.getLogger(__name__)

NEIGHBOR_OFFSETS = [(dy, dx) for dy in (-1, 0, 1) for dx in (-1, 0, 1) if (dy, dx) != (0, 0)]


def sobel_field(gray: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """Gradient magnitude and orientation; border pixels are zero."""
    magnitude = np.zeros_like(gray, dtype=np.float64)
    angle = np.zeros_like(gray, dtype=np.float64)
    if min(gray.shape) < 3:
        return magnitude, angle

    grad_x = cv2.Sobel(gray, cv2.CV_64F, 1, 0, ksize=3)
    grad_y = cv2.Sobel(gray, cv2.CV_64F, 0, 1, ksize=3)
    inner = (slice(1, -1), slice(1, -1))
    magnitude[inner] = np.sqrt(grad_x[inner] ** 2 + grad_y[inner] ** 2)
    angle[inner] = np.arctan2(grad_y[inner], grad_x[inner])
    return magnitude, angle


def count_coherent(magnitude: np.ndarray, angle: np.ndarray, config: EdgeConfig) -> int:
    """Interior edge pixels whose orientation agrees with most of their 8 neighbours."""
    h, w = magnitude.shape
    if h < 3 or w < 3:
        return 0

    is_edge = magnitude > config.edge_threshold
    center_edge = is_edge[1:-1, 1:-1]
    center_angle = angle[1:-1, 1:-1]

    similar = np.zeros(center_edge.shape, dtype=np.int32)
    for dy, dx in NEIGHBOR_OFFSETS:
        window = (slice(1 + dy, h - 1 + dy), slice(1 + dx, w - 1 + dx))
        diff = np.abs(angle[window] - center_angle)
        agrees = (diff < config.angle_tolerance) | (diff > np.pi - config.angle_tolerance)
        similar += (is_edge[window] & agrees).astype(np.int32)

    return int((center_edge & (similar > config.coherent_neighbors)).sum())


def smooth_block_ratio(magnitude: np.ndarray, config: EdgeConfig) -> float:
    h, w = magnitude.shape
    size = config.block_size
    total = (w // size) * (h // size)
    if total == 0:
        return 0.0

    is_edge = magnitude > config.edge_threshold
    smooth = 0
    for y in block_origins(h, size):
        for x in block_origins(w, size):
            if is_edge[y:y + size, x:x + size].sum() < config.block_min_edges:
                smooth += 1
    return smooth / total


def edge_score(stats: Dict[str, float], config: EdgeConfig) -> float:
    score = 0.0

    # Unnaturally sharp edges
    if stats["strong_edge_ratio"] > config.strong_ratio:
        score += config.strong_penalty

    if stats["edge_variance"] < config.variance_low:
        score += config.variance_penalty

    if stats["coherence_ratio"] > config.coherence_ratio:
        score += config.coherence_penalty

    if stats["smooth_ratio"] > config.smooth_ratio:
        score += config.smooth_penalty

    return clamp_score(score)


def analyze_edges(
    buffer: PixelBuffer,
    config: Optional[EdgeConfig] = None,
    visualize: bool = True,
) -> ModuleResult:
    """Sobel edge statistics of ``buffer``."""
    config = config or EdgeConfig()
    magnitude, angle = sobel_field(buffer.grayscale())
    n = magnitude.size

    strong = int((magnitude > config.strong_threshold).sum())
    edge_pixels = int((magnitude > config.edge_threshold).sum())
    coherent = count_coherent(magnitude, angle, config)

    stats = {
        "avg_edge_strength": float(magnitude.mean()),
        "edge_ratio": edge_pixels / n,
        "strong_edge_ratio": strong / n,
        "edge_variance": float(magnitude.var()),
        "coherence_ratio": coherent / edge_pixels if edge_pixels else 0.0,
        "smooth_ratio": smooth_block_ratio(magnitude, config),
    }
    score = edge_score(stats, config)
    logger.debug(
        "Edges strength=%.2f ratio=%.3f coherence=%.3f score=%.2f",
        stats["avg_edge_strength"], stats["edge_ratio"], stats["coherence_ratio"], score,
    )

    visualization = None
    if visualize:
        max_edge = magnitude.max()
        visualization = gray_raster(magnitude / max_edge * 255 if max_edge > 0 else magnitude)

    return ModuleResult(name="edge", score=score, diagnostics=stats, visualization=visualization)
