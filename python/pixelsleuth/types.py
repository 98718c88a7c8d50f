"""Type definitions for PixelSleuth."""
from __future__ import annotations

import io
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

import numpy as np
from PIL import Image

# ITU-R BT.601 luma weights
GRAY_WEIGHTS = np.array([0.299, 0.587, 0.114])


def _as_rgba(array: np.ndarray) -> np.ndarray:
    """Return an owned, read-only (h, w, 4) uint8 copy of ``array``."""
    arr = np.asarray(array)
    if arr.dtype != np.uint8:
        raise ValueError(f"Expected uint8 samples, got {arr.dtype}")
    if arr.ndim != 3 or arr.shape[2] not in (3, 4):
        raise ValueError(f"Expected (height, width, 3|4) samples, got {arr.shape}")
    if arr.shape[0] == 0 or arr.shape[1] == 0:
        raise ValueError("Image dimensions must be positive")

    if arr.shape[2] == 3:
        alpha = np.full(arr.shape[:2] + (1,), 255, dtype=np.uint8)
        rgba = np.concatenate([arr, alpha], axis=2)
    else:
        rgba = arr.copy()
    rgba.setflags(write=False)
    return rgba


def _from_interleaved(width: int, height: int, data: bytes) -> np.ndarray:
    if width <= 0 or height <= 0:
        raise ValueError("Image dimensions must be positive")
    expected = width * height * 4
    if len(data) != expected:
        raise ValueError(
            f"Sample length {len(data)} does not match {width}x{height} RGBA ({expected})"
        )
    return np.frombuffer(bytes(data), dtype=np.uint8).reshape(height, width, 4)


def _same_samples(a, b) -> bool:
    return (a.width, a.height) == (b.width, b.height) and np.array_equal(a.samples, b.samples)


@dataclass(frozen=True)
class PixelBuffer:
    """Decoded image: ``height x width`` RGBA samples, never mutated."""
    width: int
    height: int
    samples: np.ndarray = field(repr=False, compare=False)

    def __eq__(self, other):
        if not isinstance(other, self.__class__):
            return NotImplemented
        return _same_samples(self, other)

    @classmethod
    def from_array(cls, array: np.ndarray) -> "PixelBuffer":
        rgba = _as_rgba(array)
        return cls(width=rgba.shape[1], height=rgba.shape[0], samples=rgba)

    @classmethod
    def from_bytes(cls, width: int, height: int, data: bytes) -> "PixelBuffer":
        return cls.from_array(_from_interleaved(width, height, data))

    @property
    def rgb(self) -> np.ndarray:
        return self.samples[:, :, :3]

    def grayscale(self) -> np.ndarray:
        """Float64 luma plane."""
        return self.rgb.astype(np.float64) @ GRAY_WEIGHTS

    def to_bytes(self) -> bytes:
        return self.samples.tobytes()


@dataclass(frozen=True)
class RasterImage:
    """Visualization raster owned by a single module result."""
    width: int
    height: int
    samples: np.ndarray = field(repr=False, compare=False)

    def __eq__(self, other):
        if not isinstance(other, self.__class__):
            return NotImplemented
        return _same_samples(self, other)

    @classmethod
    def from_array(cls, array: np.ndarray) -> "RasterImage":
        rgba = _as_rgba(array)
        return cls(width=rgba.shape[1], height=rgba.shape[0], samples=rgba)

    @classmethod
    def from_bytes(cls, width: int, height: int, data: bytes) -> "RasterImage":
        return cls.from_array(_from_interleaved(width, height, data))

    def to_bytes(self) -> bytes:
        """Interleaved RGBA bytes, row-major."""
        return self.samples.tobytes()

    def to_pil(self) -> Image.Image:
        return Image.fromarray(np.ascontiguousarray(self.samples))

    def to_png(self) -> bytes:
        buf = io.BytesIO()
        self.to_pil().save(buf, format="PNG")
        return buf.getvalue()


class Verdict(Enum):
    """Three-level classification of an analyzed image."""
    LIKELY_REAL = "Likely Real"
    SUSPICIOUS = "Suspicious"
    LIKELY_AI = "Likely AI"


@dataclass(frozen=True)
class ModuleResult:
    """Output of one analysis module."""
    name: str
    score: float
    diagnostics: Dict[str, float] = field(default_factory=dict)
    visualization: Optional[RasterImage] = None
    notes: List[str] = field(default_factory=list)

    def __post_init__(self):
        if not 0.0 <= self.score <= 1.0:
            raise ValueError(f"{self.name} score {self.score} outside [0, 1]")


MODULE_NAMES = ("metadata", "ela", "fft", "color", "edge", "noise", "texture")


@dataclass(frozen=True)
class AnalysisResult:
    """Complete analysis of one image."""
    file_name: str
    file_size: int
    mime_type: str
    width: int
    height: int
    metadata: ModuleResult
    ela: ModuleResult
    fft: ModuleResult
    color: ModuleResult
    edge: ModuleResult
    noise: ModuleResult
    texture: ModuleResult
    overall_score: float
    confidence: float
    verdict: Verdict

    @property
    def modules(self) -> Dict[str, ModuleResult]:
        return {name: getattr(self, name) for name in MODULE_NAMES}

    def to_dict(self) -> Dict[str, Any]:
        """JSON-friendly summary without pixel data."""
        return {
            "file_name": self.file_name,
            "file_size": self.file_size,
            "mime_type": self.mime_type,
            "dimensions": {"width": self.width, "height": self.height},
            "overall_score": self.overall_score,
            "confidence": self.confidence,
            "verdict": self.verdict.value,
            "modules": {
                name: {
                    "score": result.score,
                    "diagnostics": dict(result.diagnostics),
                    "notes": list(result.notes),
                }
                for name, result in self.modules.items()
            },
        }
