"""Tests for infrastructure/metrics.py — Prometheus counter recording.

Verifies that:
- record_recompute() splits committed and superseded runs
- only committed runs feed the latency histogram and window counter
- record_decode_failure() uses the reason label
- get_metrics_response() exposes every family in text format
- LatencyTimer measures elapsed time correctly

Counters are cumulative within the module registry and cannot be reset,
so every assertion compares a before/after delta.
"""

from __future__ import annotations

import time

import pytest

from infrastructure import metrics as metrics_module

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _sample(name: str, **labels: str) -> float:
    value = metrics_module._REGISTRY.get_sample_value(name, labels or None)
    return value or 0.0


# ---------------------------------------------------------------------------
# record_recompute
# ---------------------------------------------------------------------------


class TestRecordRecompute:
    def test_committed_increments_outcome(self) -> None:
        before = _sample("noise_recompute_total", outcome="committed")
        metrics_module.record_recompute(outcome="committed", latency_seconds=0.01, windows=5)
        assert _sample("noise_recompute_total", outcome="committed") == before + 1

    def test_committed_observes_latency(self) -> None:
        before = _sample("noise_recompute_latency_seconds_count")
        metrics_module.record_recompute(outcome="committed", latency_seconds=0.02, windows=1)
        assert _sample("noise_recompute_latency_seconds_count") == before + 1

    def test_committed_adds_windows(self) -> None:
        before = _sample("noise_windows_processed_total")
        metrics_module.record_recompute(outcome="committed", windows=120)
        assert _sample("noise_windows_processed_total") == before + 120

    def test_superseded_skips_latency_and_windows(self) -> None:
        latency_before = _sample("noise_recompute_latency_seconds_count")
        windows_before = _sample("noise_windows_processed_total")
        superseded_before = _sample("noise_recompute_total", outcome="superseded")

        metrics_module.record_recompute(outcome="superseded", latency_seconds=1.0, windows=50)

        assert _sample("noise_recompute_total", outcome="superseded") == superseded_before + 1
        assert _sample("noise_recompute_latency_seconds_count") == latency_before
        assert _sample("noise_windows_processed_total") == windows_before

    def test_burst_accumulates(self) -> None:
        before = _sample("noise_recompute_total", outcome="superseded")
        for _ in range(25):
            metrics_module.record_recompute(outcome="superseded")
        assert _sample("noise_recompute_total", outcome="superseded") == before + 25


# ---------------------------------------------------------------------------
# record_decode_failure
# ---------------------------------------------------------------------------


class TestRecordDecodeFailure:
    @pytest.mark.parametrize("reason", ["not_found", "unsupported", "decode_error"])
    def test_reason_label(self, reason: str) -> None:
        before = _sample("noise_decode_failures_total", reason=reason)
        metrics_module.record_decode_failure(reason)
        assert _sample("noise_decode_failures_total", reason=reason) == before + 1


# ---------------------------------------------------------------------------
# Exposition
# ---------------------------------------------------------------------------


class TestMetricsResponse:
    def test_returns_text_format(self) -> None:
        metrics_module.record_recompute(outcome="committed", windows=1)
        body, content_type = metrics_module.get_metrics_response()
        assert content_type.startswith("text/plain")
        assert b"noise_recompute_total" in body
        assert b"noise_recompute_latency_seconds" in body
        assert b"noise_windows_processed_total" in body


# ---------------------------------------------------------------------------
# LatencyTimer
# ---------------------------------------------------------------------------


class TestLatencyTimer:
    def test_measures_elapsed(self) -> None:
        with metrics_module.LatencyTimer() as t:
            time.sleep(0.01)
        assert t.elapsed >= 0.01

    def test_elapsed_zero_before_exit(self) -> None:
        t = metrics_module.LatencyTimer()
        assert t.elapsed == 0.0
