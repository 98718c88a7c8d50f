"""Tests for the end-to-end detection pipeline."""

import json

import numpy as np
import pytest

from pixelsleuth import (
    DecodeFailure,
    Detector,
    DetectorConfig,
    PixelBuffer,
    RenderingFailure,
    Verdict,
)
from pixelsleuth.types import MODULE_NAMES


def _broken_encoder(buffer, quality):
    raise RuntimeError("codec exploded")


class TestAnalyze:
    def test_png_file(self, detector, sample_png_bytes):
        result = detector.analyze(sample_png_bytes, "gradient.png", "image/png")
        assert (result.width, result.height) == (96, 80)
        assert result.file_name == "gradient.png"
        assert result.file_size == len(sample_png_bytes)
        assert list(result.modules) == list(MODULE_NAMES)
        assert 0.0 <= result.overall_score <= 1.0
        assert 0.0 <= result.confidence <= 1.0
        assert isinstance(result.verdict, Verdict)

    def test_deterministic(self, detector, sample_jpeg_bytes):
        a = detector.analyze(sample_jpeg_bytes)
        b = Detector().analyze(sample_jpeg_bytes)
        assert a == b
        for name in MODULE_NAMES:
            va, vb = a.modules[name].visualization, b.modules[name].visualization
            if va is None:
                assert vb is None
            else:
                assert va.to_bytes() == vb.to_bytes()

    def test_parallel_matches_sequential(self, sample_jpeg_bytes):
        sequential = Detector(max_workers=1).analyze(sample_jpeg_bytes)
        parallel = Detector(max_workers=4).analyze(sample_jpeg_bytes)
        assert parallel.overall_score == sequential.overall_score
        assert parallel.verdict is sequential.verdict
        assert parallel == sequential
        for name in MODULE_NAMES:
            assert parallel.modules[name].score == sequential.modules[name].score

    def test_workers_from_config(self, sample_png_bytes):
        detector = Detector(DetectorConfig(max_workers=3))
        assert detector._max_workers == 3
        assert detector.analyze(sample_png_bytes).width == 96

    def test_invalid_bytes(self, detector):
        with pytest.raises(DecodeFailure):
            detector.analyze(b"definitely not an image")

    def test_json_serializable(self, detector, sample_png_bytes):
        payload = json.dumps(detector.analyze(sample_png_bytes).to_dict())
        assert "verdict" in payload


class TestAnalyzeBuffer:
    def test_flat_image_flagged(self, detector, solid_buffer):
        result = detector.analyze_buffer(solid_buffer)
        assert result.noise.score == 1.0
        assert result.texture.score == 1.0
        assert result.overall_score > 0.65
        assert result.verdict is Verdict.LIKELY_AI

    def test_input_left_untouched(self, detector, noise_buffer):
        before = noise_buffer.to_bytes()
        detector.analyze_buffer(noise_buffer)
        assert noise_buffer.to_bytes() == before

    def test_tiny_image(self, detector):
        buffer = PixelBuffer.from_array(np.full((2, 2, 3), 200, dtype=np.uint8))
        result = detector.analyze_buffer(buffer)
        assert (result.width, result.height) == (2, 2)

    def test_every_module_visualizes_except_metadata(self, detector, gradient_buffer):
        result = detector.analyze_buffer(gradient_buffer)
        assert result.metadata.visualization is None
        for name in MODULE_NAMES[1:]:
            assert result.modules[name].visualization is not None


class TestFailures:
    @pytest.mark.parametrize("workers", [1, 4])
    def test_module_failure_aborts(self, solid_buffer, workers):
        detector = Detector(max_workers=workers, encoder=_broken_encoder)
        with pytest.raises(RenderingFailure) as exc:
            detector.analyze_buffer(solid_buffer)
        assert exc.value.module == "ela"
        assert "codec exploded" in str(exc.value)

    def test_analysis_errors_pass_through(self, solid_buffer):
        def encoder(buffer, quality):
            raise DecodeFailure("re-encoded stream unreadable")

        with pytest.raises(DecodeFailure):
            Detector(encoder=encoder).analyze_buffer(solid_buffer)
