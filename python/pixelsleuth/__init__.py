"""
PixelSleuth - Python Implementation

Heuristic detection of synthetically generated images.
Seven independent forensic analyses, one confidence-weighted verdict.
"""

from .detector import Detector
from .aggregate import Aggregate, Aggregator
from .config import (
    AggregatorConfig,
    AggregatorWeights,
    ColorConfig,
    DetectorConfig,
    EdgeConfig,
    ElaConfig,
    FrequencyConfig,
    MetadataConfig,
    NoiseConfig,
    TextureConfig,
)
from .errors import AnalysisError, DecodeFailure, RenderingFailure
from .imaging import decode_image, jpeg_reencode
from .types import (
    AnalysisResult,
    ModuleResult,
    PixelBuffer,
    RasterImage,
    Verdict,
)

__version__ = "0.1.0"
__all__ = [
    "Detector",
    "Aggregate",
    "Aggregator",
    "AggregatorConfig",
    "AggregatorWeights",
    "ColorConfig",
    "DetectorConfig",
    "EdgeConfig",
    "ElaConfig",
    "FrequencyConfig",
    "MetadataConfig",
    "NoiseConfig",
    "TextureConfig",
    "AnalysisError",
    "DecodeFailure",
    "RenderingFailure",
    "decode_image",
    "jpeg_reencode",
    "AnalysisResult",
    "ModuleResult",
    "PixelBuffer",
    "RasterImage",
    "Verdict",
]
