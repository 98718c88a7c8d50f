"""Tests for the frequency-domain analyzer."""

import numpy as np
import pytest

from pixelsleuth.config import FrequencyConfig
from pixelsleuth.frequency import (
    analyze_frequency,
    band_energies,
    count_grid_patterns,
    find_peaks,
    frequency_score,
    log_magnitude_spectrum,
)

from conftest import make_buffer, solid_rgb


def _stats(**overrides):
    stats = {
        "low_freq_ratio": 0.8,
        "mid_freq_ratio": 0.15,
        "high_freq_ratio": 0.05,
        "peak_count": 0.0,
        "grid_pattern_count": 0.0,
        "corner_ratio": 0.0,
    }
    stats.update(overrides)
    return stats


class TestSpectrum:
    def test_constant_plane_has_only_dc(self):
        magnitude = log_magnitude_spectrum(np.ones((4, 4)))
        assert magnitude[2, 2] == pytest.approx(np.log(17.0))
        others = np.delete(magnitude.ravel(), 2 * 4 + 2)
        assert np.allclose(others, 0.0)

    def test_band_energies_partition_total(self):
        rng = np.random.default_rng(1)
        magnitude = rng.random((64, 64))
        total, low, mid, high = band_energies(magnitude, FrequencyConfig())
        assert low + mid + high == pytest.approx(total)
        assert low > 0 and mid > 0 and high > 0

    def test_find_peaks_excludes_dc(self):
        magnitude = np.zeros((32, 32))
        magnitude[16, 16] = 10.0
        magnitude[16, 26] = 9.0
        peaks = find_peaks(magnitude, FrequencyConfig())
        assert peaks.tolist() == [[26.0, 16.0]]


class TestGridPatterns:
    def test_symmetric_pair_counts_twice(self):
        peaks = np.array([[266.0, 256.0], [246.0, 256.0]])
        assert count_grid_patterns(peaks, 256.0, FrequencyConfig()) == 2

    def test_single_peak(self):
        assert count_grid_patterns(np.array([[300.0, 256.0]]), 256.0, FrequencyConfig()) == 0

    def test_unrelated_peaks(self):
        peaks = np.array([[266.0, 256.0], [256.0, 293.0]])
        assert count_grid_patterns(peaks, 256.0, FrequencyConfig()) == 0


class TestScore:
    def test_natural_spectrum(self):
        assert frequency_score(_stats(), FrequencyConfig()) == 0.0

    def test_over_smoothed(self):
        assert frequency_score(_stats(low_freq_ratio=0.97), FrequencyConfig()) == pytest.approx(0.5)

    def test_flat_spectrum(self):
        stats = _stats(low_freq_ratio=0.5, high_freq_ratio=0.3)
        assert frequency_score(stats, FrequencyConfig()) == pytest.approx(0.6)

    @pytest.mark.parametrize("patterns,expected", [(1, 0.2), (3, 0.2), (4, 0.5)])
    def test_grid_patterns(self, patterns, expected):
        stats = _stats(grid_pattern_count=float(patterns))
        assert frequency_score(stats, FrequencyConfig()) == pytest.approx(expected)

    def test_empty_spectrum_is_not_penalized(self):
        stats = _stats(low_freq_ratio=0.0, mid_freq_ratio=0.0, high_freq_ratio=0.0)
        assert frequency_score(stats, FrequencyConfig()) == 0.0

    def test_corner_energy(self):
        assert frequency_score(_stats(corner_ratio=0.06), FrequencyConfig()) == pytest.approx(0.4)


class TestAnalyzeFrequency:
    def test_solid_image_is_over_smoothed(self, solid_buffer):
        result = analyze_frequency(solid_buffer)
        assert result.name == "fft"
        assert result.diagnostics["low_freq_ratio"] > 0.95
        assert result.diagnostics["peak_count"] == 0
        assert result.score == pytest.approx(0.5)

    def test_black_image(self):
        result = analyze_frequency(make_buffer(solid_rgb(color=(0, 0, 0))))
        assert result.diagnostics["low_freq_ratio"] == 0.0
        assert result.diagnostics["corner_ratio"] == 0.0
        assert result.score == 0.0
        assert not result.visualization.samples[:, :, :3].any()

    def test_checkerboard_energy_in_corners(self, checkerboard_buffer):
        result = analyze_frequency(checkerboard_buffer)
        assert result.diagnostics["corner_ratio"] > 0.05
        assert result.score == 1.0

    def test_ratios_sum_to_one(self, noise_buffer):
        d = analyze_frequency(noise_buffer).diagnostics
        total = d["low_freq_ratio"] + d["mid_freq_ratio"] + d["high_freq_ratio"]
        assert total == pytest.approx(1.0)

    def test_visualization_is_square(self, gradient_buffer):
        vis = analyze_frequency(gradient_buffer).visualization
        assert (vis.width, vis.height) == (512, 512)
        assert vis.samples[:, :, :3].max() == 255

    def test_smaller_working_size(self, gradient_buffer):
        result = analyze_frequency(gradient_buffer, config=FrequencyConfig(size=64))
        assert (result.visualization.width, result.visualization.height) == (64, 64)
