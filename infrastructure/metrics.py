"""Prometheus metrics for the noise envelope service.

Exposes recompute behaviour in metrics so dashboards show how often slider
bursts are coalesced, not just generic HTTP stats.

Metrics:
    noise_recompute_total              Counter by outcome (committed/superseded)
    noise_recompute_latency_seconds    Histogram of committed pipeline runs
    noise_windows_processed_total      Windows reduced by committed runs
    noise_decode_failures_total        Inputs the decoder rejected, by reason

Usage::

    from infrastructure.metrics import (
        record_recompute,
        record_decode_failure,
    )
"""

from __future__ import annotations

import logging
import time

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    Histogram,
    generate_latest,
)

logger = logging.getLogger(__name__)

_REGISTRY = CollectorRegistry()

recompute_total = Counter(
    "noise_recompute_total",
    "Pipeline runs by outcome",
    ["outcome"],
    registry=_REGISTRY,
)

recompute_latency_seconds = Histogram(
    "noise_recompute_latency_seconds",
    "Wall-clock time of committed pipeline runs in seconds",
    buckets=[0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0],
    registry=_REGISTRY,
)

windows_processed_total = Counter(
    "noise_windows_processed_total",
    "Windows reduced by committed pipeline runs",
    registry=_REGISTRY,
)

decode_failures_total = Counter(
    "noise_decode_failures_total",
    "Audio inputs rejected by the decoder",
    ["reason"],
    registry=_REGISTRY,
)

logger.debug("Prometheus metrics registry initialized")


# ---------------------------------------------------------------------------
# Public helpers
# ---------------------------------------------------------------------------


def record_recompute(
    *,
    outcome: str,
    latency_seconds: float = 0.0,
    windows: int = 0,
) -> None:
    """Record a finished pipeline run.

    Args:
        outcome: "committed" or "superseded".
        latency_seconds: Wall-clock time of the run. Only observed for
            committed runs; a superseded run's timing says nothing useful.
        windows: Number of values the run produced (committed runs only).
    """
    recompute_total.labels(outcome=outcome).inc()
    if outcome == "committed":
        recompute_latency_seconds.observe(latency_seconds)
        windows_processed_total.inc(windows)


def record_decode_failure(reason: str) -> None:
    """Increment decoder failure counter.

    Args:
        reason: "not_found", "unsupported" or "decode_error".
    """
    decode_failures_total.labels(reason=reason).inc()


def get_metrics_response() -> tuple[bytes, str]:
    """Generate Prometheus text exposition format.

    Returns:
        Tuple of (body_bytes, content_type_string).
    """
    return generate_latest(_REGISTRY), CONTENT_TYPE_LATEST


class LatencyTimer:
    """Context manager for measuring latency.

    Usage::

        with LatencyTimer() as t:
            result = run_pipeline(waveform, config)
        record_recompute(outcome="committed", latency_seconds=t.elapsed)
    """

    def __init__(self) -> None:
        """Initialize timer."""
        self._start: float = 0.0
        self.elapsed: float = 0.0

    def __enter__(self) -> LatencyTimer:
        """Start timing."""
        self._start = time.perf_counter()
        return self

    def __exit__(self, *_: object) -> None:
        """Stop timing and record elapsed."""
        self.elapsed = time.perf_counter() - self._start
