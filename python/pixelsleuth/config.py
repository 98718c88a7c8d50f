"""Tunable thresholds for every analysis module and the aggregator.

The defaults are the hand-tuned values the detector ships with. Each
config is frozen; derive variants with :func:`dataclasses.replace`.
"""
from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import Dict, Tuple


@dataclass(frozen=True)
class MetadataConfig:
    no_metadata_penalty: float = 0.3
    suspicious_software: Tuple[str, ...] = (
        "Adobe Photoshop", "GIMP", "Stable Diffusion", "Midjourney",
    )
    software_penalty: float = 0.4
    generation_markers: Tuple[str, ...] = ("steps:", "seed:", "cfg:")
    generation_penalty: float = 0.8
    ai_resolutions: Tuple[Tuple[int, int], ...] = (
        (512, 512), (1024, 1024), (512, 768), (768, 512),
        (1024, 1792), (1792, 1024),
    )
    resolution_penalty: float = 0.2
    square_min_side: int = 256
    square_penalty: float = 0.1


@dataclass(frozen=True)
class ElaConfig:
    quality: float = 0.90
    amplification: int = 20
    region_variance_low: float = 50.0
    region_variance_penalty: float = 0.3
    # (upper bound, penalty) checked in order, first match wins
    mean_bands: Tuple[Tuple[float, float], ...] = ((10.0, 0.9), (20.0, 0.6), (35.0, 0.3))
    variance_bands: Tuple[Tuple[float, float], ...] = ((100.0, 0.6), (300.0, 0.4))
    variance_high: float = 1200.0
    variance_high_bonus: float = -0.3
    cv_low: float = 0.3
    cv_low_penalty: float = 0.4
    cv_natural_range: Tuple[float, float] = (0.5, 1.5)
    cv_natural_bonus: float = -0.2


@dataclass(frozen=True)
class FrequencyConfig:
    size: int = 512
    low_radius_fraction: float = 1 / 8
    mid_radius_fraction: float = 1 / 4
    peak_fraction: float = 0.7
    dc_exclusion_radius: float = 5.0
    symmetry_tolerance: float = 5.0
    spacing_tolerance: float = 0.1
    angle_tolerance: float = 0.2
    corner_fraction: float = 1 / 16
    low_ratio_high: float = 0.95
    low_ratio_high_penalty: float = 0.5
    low_ratio_low: float = 0.7
    low_ratio_low_penalty: float = 0.2
    high_ratio_threshold: float = 0.15
    high_ratio_penalty: float = 0.4
    grid_pattern_many: int = 3
    grid_pattern_many_penalty: float = 0.5
    grid_pattern_some_penalty: float = 0.2
    corner_ratio_threshold: float = 0.05
    corner_penalty: float = 0.4


@dataclass(frozen=True)
class ColorConfig:
    peak_ratio: float = 1.5
    peak_min_fraction: float = 0.02
    min_peaks: int = 10
    min_peaks_penalty: float = 0.3
    saturation_high: float = 180.0
    saturation_high_penalty: float = 0.4
    saturation_low: float = 30.0
    saturation_low_penalty: float = 0.2
    clip_high: int = 250
    clip_low: int = 5
    clipping_threshold: float = 0.15
    clipping_penalty: float = 0.3
    histogram_variance_fraction: float = 0.5
    histogram_variance_penalty: float = 0.2
    smooth_bins: Tuple[int, int] = (10, 246)
    smooth_variance_fraction: float = 0.1
    smooth_min_mean: float = 10.0
    smooth_window_limit: int = 50
    smooth_window_penalty: float = 0.3
    chart_height: int = 150
    chart_bar_height: int = 140
    chart_baseline: int = 145


@dataclass(frozen=True)
class EdgeConfig:
    edge_threshold: float = 50.0
    strong_threshold: float = 150.0
    strong_ratio: float = 0.15
    strong_penalty: float = 0.4
    variance_low: float = 1000.0
    variance_penalty: float = 0.3
    angle_tolerance: float = 0.5
    coherent_neighbors: int = 6
    coherence_ratio: float = 0.6
    coherence_penalty: float = 0.3
    block_size: int = 20
    block_min_edges: int = 5
    smooth_ratio: float = 0.4
    smooth_penalty: float = 0.3


@dataclass(frozen=True)
class NoiseConfig:
    block_size: int = 8
    flat_variance: float = 100.0
    max_flat_blocks: int = 50
    clean_threshold: float = 1.5
    clean_penalty: float = 0.5
    noisy_threshold: float = 15.0
    noisy_penalty: float = 0.2
    cv_low: float = 0.3
    cv_low_penalty: float = 0.3
    cv_high: float = 2.0
    cv_high_penalty: float = 0.2
    pattern_size: int = 4
    pattern_tolerance: float = 2.0
    periodic_ratio: float = 0.1
    periodic_penalty: float = 0.4
    very_flat_variance: float = 5.0
    very_flat_ratio: float = 0.3
    very_flat_penalty: float = 0.3
    visualization_gain: int = 5


@dataclass(frozen=True)
class TextureConfig:
    min_patterns: int = 80
    min_patterns_penalty: float = 0.4
    dominance_ratio: float = 0.3
    dominance_penalty: float = 0.3
    block_size: int = 32
    similarity_fraction: float = 0.8
    repetition_ratio: float = 0.05
    repetition_penalty: float = 0.4
    region_size: int = 16
    region_variance: float = 500.0
    smooth_ratio: float = 0.4
    smooth_penalty: float = 0.3
    entropy_low: float = 0.4
    entropy_penalty: float = 0.3


@dataclass(frozen=True)
class AggregatorWeights:
    """Base weight of each module in the overall score. Must sum to 1."""
    metadata: float = 0.10
    ela: float = 0.20
    fft: float = 0.15
    color: float = 0.15
    edge: float = 0.15
    noise: float = 0.15
    texture: float = 0.10

    def __post_init__(self):
        values = self.as_dict().values()
        if any(v < 0 for v in values):
            raise ValueError("Module weights must be non-negative")
        if abs(sum(values) - 1.0) > 1e-6:
            raise ValueError(f"Module weights must sum to 1.0, got {sum(values):.6f}")

    def as_dict(self) -> Dict[str, float]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


@dataclass(frozen=True)
class AggregatorConfig:
    weights: AggregatorWeights = field(default_factory=AggregatorWeights)
    confidence_boost: float = 0.5
    agreement_band: float = 0.3
    agreement_weight: float = 0.6
    confidence_weight: float = 0.4
    likely_ai_threshold: float = 0.65
    suspicious_threshold: float = 0.40
    min_confidence: float = 0.3


@dataclass(frozen=True)
class DetectorConfig:
    """Everything the pipeline needs, one section per module."""
    metadata: MetadataConfig = field(default_factory=MetadataConfig)
    ela: ElaConfig = field(default_factory=ElaConfig)
    fft: FrequencyConfig = field(default_factory=FrequencyConfig)
    color: ColorConfig = field(default_factory=ColorConfig)
    edge: EdgeConfig = field(default_factory=EdgeConfig)
    noise: NoiseConfig = field(default_factory=NoiseConfig)
    texture: TextureConfig = field(default_factory=TextureConfig)
    aggregator: AggregatorConfig = field(default_factory=AggregatorConfig)
    max_workers: int = 1
