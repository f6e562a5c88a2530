"""
Tests for core/noise/envelope.py — pure numeric stages.

No pipeline, no engine: each stage is exercised in isolation with small
hand-checked arrays.
"""

from __future__ import annotations

import numpy as np
import pytest

from core.noise.envelope import (
    apply_curve,
    count_windows,
    global_peak,
    map_thresholds,
    normalize_peaks,
    window_edges,
    window_peaks,
)

# ---------------------------------------------------------------------------
# Chunking
# ---------------------------------------------------------------------------


class TestCountWindows:
    def test_exact_multiple(self) -> None:
        assert count_windows(1.0, 100) == 10

    def test_partial_tail_is_dropped(self) -> None:
        assert count_windows(1.05, 100) == 10

    def test_shorter_than_one_interval(self) -> None:
        assert count_windows(0.5, 1000) == 0

    def test_zero_duration(self) -> None:
        assert count_windows(0.0, 100) == 0

    def test_one_ms_windows(self) -> None:
        assert count_windows(2.0, 1) == 2000

    def test_non_positive_interval_raises(self) -> None:
        with pytest.raises(ValueError, match="interval_ms must be positive"):
            count_windows(1.0, 0)


class TestWindowEdges:
    def test_first_window_at_44100(self) -> None:
        starts, ends = window_edges(10, interval_ms=100, sample_rate=44100, sample_count=441000)
        assert (starts[0], ends[0]) == (0, 4410)

    def test_fractional_boundaries_floor(self) -> None:
        # 1 ms at 44.1 kHz is 44.1 samples: boundaries 0, 44, 88, 132
        starts, _ = window_edges(4, interval_ms=1, sample_rate=44100, sample_count=1000)
        assert starts.tolist() == [0, 44, 88, 132]

    def test_end_clamped_to_buffer(self) -> None:
        starts, ends = window_edges(10, interval_ms=100, sample_rate=1000, sample_count=950)
        assert (starts[9], ends[9]) == (900, 950)

    def test_window_past_buffer_is_empty(self) -> None:
        starts, ends = window_edges(10, interval_ms=100, sample_rate=1000, sample_count=850)
        assert ends[9] <= starts[9]

    def test_windows_are_contiguous(self) -> None:
        starts, ends = window_edges(25, interval_ms=7, sample_rate=22050, sample_count=10**6)
        assert len(starts) == len(ends) == 25
        assert starts[0] == 0
        assert ends[:-1].tolist() == starts[1:].tolist()

    def test_long_recording_boundaries_are_exact(self) -> None:
        # 1000 s of 1 ms windows at 192 kHz stays in integer arithmetic
        n = 10**6
        starts, _ = window_edges(n, interval_ms=1, sample_rate=192000, sample_count=10**12)
        assert int(starts[-1]) == (n - 1) * 192

    def test_zero_windows(self) -> None:
        starts, ends = window_edges(0, interval_ms=100, sample_rate=1000, sample_count=50)
        assert starts.size == 0
        assert ends.size == 0


# ---------------------------------------------------------------------------
# Peaks + normalization
# ---------------------------------------------------------------------------


class TestPeaks:
    def test_window_peaks_use_magnitudes(self) -> None:
        magnitudes = np.abs(np.array([0.1, -0.7, 0.3, -0.2]))
        peaks = window_peaks(magnitudes, np.array([0, 2]), np.array([2, 4]))
        np.testing.assert_allclose(peaks, [0.7, 0.3])

    def test_empty_tail_window_peak_is_zero(self) -> None:
        magnitudes = np.ones(10)
        peaks = window_peaks(magnitudes, np.array([5, 10, 12]), np.array([10, 10, 10]))
        assert peaks.tolist() == [1.0, 0.0, 0.0]

    def test_last_window_does_not_read_past_its_end(self) -> None:
        magnitudes = np.array([0.1, 0.2, 0.3, 0.9])
        peaks = window_peaks(magnitudes, np.array([0, 1]), np.array([1, 3]))
        np.testing.assert_allclose(peaks, [0.1, 0.3])

    def test_block_starting_mid_buffer(self) -> None:
        magnitudes = np.array([0.9, 0.1, 0.4, 0.2, 0.6, 0.8])
        peaks = window_peaks(magnitudes, np.array([2, 4]), np.array([4, 5]))
        np.testing.assert_allclose(peaks, [0.4, 0.6])

    def test_zero_width_windows_between_filled_ones(self) -> None:
        # 1 ms windows at 500 Hz: every other window has no samples
        magnitudes = np.array([0.5, 0.25, 1.0])
        starts, ends = window_edges(6, interval_ms=1, sample_rate=500, sample_count=3)
        peaks = window_peaks(magnitudes, starts, ends)
        assert peaks.tolist() == [0.0, 0.5, 0.0, 0.25, 0.0, 1.0]

    def test_all_empty_windows(self) -> None:
        peaks = window_peaks(np.ones(4), np.array([4, 4]), np.array([4, 4]))
        assert peaks.tolist() == [0.0, 0.0]

    def test_matches_slice_max(self) -> None:
        rng = np.random.default_rng(3)
        magnitudes = np.abs(rng.normal(0, 0.3, 4410))
        starts, ends = window_edges(100, interval_ms=1, sample_rate=44100, sample_count=4410)
        expected = [magnitudes[s:e].max() for s, e in zip(starts, ends)]
        np.testing.assert_array_equal(window_peaks(magnitudes, starts, ends), expected)

    def test_global_peak(self) -> None:
        assert global_peak(np.abs(np.array([0.2, -0.9, 0.5]))) == pytest.approx(0.9)

    def test_global_peak_of_empty_buffer(self) -> None:
        assert global_peak(np.array([])) == 0.0

    def test_normalize_divides_by_global_peak(self) -> None:
        out = normalize_peaks(np.array([0.5, 0.25, 0.0]), 0.5)
        assert out.tolist() == [1.0, 0.5, 0.0]

    def test_normalize_silence_is_zero_not_nan(self) -> None:
        out = normalize_peaks(np.array([0.0, 0.0]), 0.0)
        assert out.tolist() == [0.0, 0.0]
        assert not np.isnan(out).any()


# ---------------------------------------------------------------------------
# Threshold remap
# ---------------------------------------------------------------------------


class TestMapThresholds:
    def test_below_floor_maps_to_zero(self) -> None:
        assert map_thresholds(np.array([0.1]), 0.2, 0.8).tolist() == [0.0]

    def test_above_ceiling_maps_to_one(self) -> None:
        assert map_thresholds(np.array([0.9]), 0.2, 0.8).tolist() == [1.0]

    def test_midpoint_interpolates(self) -> None:
        out = map_thresholds(np.array([0.5]), 0.2, 0.8)
        assert out[0] == pytest.approx(0.5)

    def test_values_on_the_thresholds(self) -> None:
        out = map_thresholds(np.array([0.2, 0.8]), 0.2, 0.8)
        assert out.tolist() == [0.0, 1.0]

    def test_full_range_is_identity(self) -> None:
        values = np.array([0.0, 0.3, 0.6, 1.0])
        np.testing.assert_allclose(map_thresholds(values, 0.0, 1.0), values)

    def test_output_within_unit_interval(self) -> None:
        values = np.linspace(0.0, 1.0, 101)
        out = map_thresholds(values, 0.33, 0.71)
        assert out.min() >= 0.0
        assert out.max() <= 1.0

    def test_inverted_thresholds_step_at_floor(self) -> None:
        out = map_thresholds(np.array([0.3, 0.5, 0.6, 0.7]), 0.6, 0.4)
        assert out.tolist() == [0.0, 0.0, 1.0, 1.0]

    def test_equal_thresholds_step_at_floor(self) -> None:
        out = map_thresholds(np.array([0.49, 0.5, 0.51]), 0.5, 0.5)
        assert out.tolist() == [0.0, 1.0, 1.0]

    def test_degenerate_never_produces_nan(self) -> None:
        out = map_thresholds(np.linspace(0.0, 1.0, 11), 0.5, 0.5)
        assert not np.isnan(out).any()


# ---------------------------------------------------------------------------
# Curve
# ---------------------------------------------------------------------------


class TestApplyCurve:
    def test_strength_one_is_identity(self) -> None:
        values = np.array([0.0, 0.123, 0.5, 0.999, 1.0])
        assert apply_curve(values, 1.0).tolist() == values.tolist()

    def test_strength_two_is_square_root(self) -> None:
        out = apply_curve(np.array([0.25, 0.81]), 2.0)
        np.testing.assert_allclose(out, [0.5, 0.9])

    def test_strength_below_one_pulls_down(self) -> None:
        out = apply_curve(np.array([0.5]), 0.5)
        assert out[0] == pytest.approx(0.25)

    @pytest.mark.parametrize("strength", [0.1, 1.0, 3.7, 10.0])
    def test_fixed_points(self, strength: float) -> None:
        assert apply_curve(np.array([0.0, 1.0]), strength).tolist() == [0.0, 1.0]

    @pytest.mark.parametrize("strength", [0.0, -2.0, float("nan"), float("inf")])
    def test_invalid_strength_raises(self, strength: float) -> None:
        with pytest.raises(ValueError, match="curve_strength must be positive"):
            apply_curve(np.array([0.5]), strength)
