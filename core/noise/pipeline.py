"""
core/noise/pipeline.py — Synchronous noise envelope pipeline.

run_pipeline() wires the pure stages of core/noise/envelope.py together:

    Waveform
        │
        ├─ count_windows / window_edges     chunk boundaries
        ├─ window_peaks (per block)         progress + cancellation checkpoint
        ├─ global_peak                      one full pass, shared by all windows
        ├─ normalize_peaks
        ├─ map_thresholds
        ├─ apply_curve
        └─ compute_balance
            ↓
    NoiseResult

The run is a single synchronous pass over an immutable waveform. The caller
may observe it through two hooks:

    on_progress(fraction)   called after every block of windows with
                            (i + 1) / n for the block's last window i;
                            an empty run reports 1.0 once
    should_cancel()         polled before every block; returning True
                            aborts the run with PipelineCancelled

Windows are reduced in at most PROGRESS_STEPS blocks, so a run with
n <= PROGRESS_STEPS windows reports after every window and a longer run
reports at most PROGRESS_STEPS times. No logging happens inside the loop.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Callable

import numpy as np

from core.config import NoiseConfig
from core.noise.balance import compute_balance
from core.noise.envelope import (
    apply_curve,
    count_windows,
    global_peak,
    map_thresholds,
    normalize_peaks,
    window_edges,
    window_peaks,
)
from core.noise.types import NoiseResult, Waveform

logger = logging.getLogger(__name__)

# Upper bound on progress reports and cancellation checks per run
PROGRESS_STEPS: int = 100

ProgressCallback = Callable[[float], None]
CancelCheck = Callable[[], bool]


class PipelineCancelled(Exception):
    """Raised when should_cancel() asks a run to stop.

    This is NOT a failure — it means a newer request superseded the run.
    The engine catches it and discards the partial work.

    Args:
        processed: Windows completed before the run stopped.
        total: Windows the run would have produced.
    """

    def __init__(self, processed: int, total: int) -> None:
        """Initialize with how far the run got."""
        self.processed = processed
        self.total = total
        super().__init__(f"Pipeline cancelled after {processed}/{total} windows")


def run_pipeline(
    waveform: Waveform,
    config: NoiseConfig,
    *,
    on_progress: ProgressCallback | None = None,
    should_cancel: CancelCheck | None = None,
) -> NoiseResult:
    """Convert a waveform into a noise sequence and its balance.

    Args:
        waveform:      Single-channel decoded audio. Not modified.
        config:        Validated pipeline parameters.
        on_progress:   Optional callback receiving the completed fraction
                       (0 < f <= 1), non-decreasing, ending at 1.0.
        should_cancel: Optional predicate polled once per block.

    Returns:
        NoiseResult with one value per window and the balance metric.

    Raises:
        PipelineCancelled: If should_cancel() returned True mid-run.
    """
    total = count_windows(waveform.duration_sec, config.interval_ms)

    if total < 1:
        logger.debug(
            "Waveform shorter than one %d ms window (%.3fs) — empty sequence",
            config.interval_ms,
            waveform.duration_sec,
        )
        if on_progress is not None:
            on_progress(1.0)
        return _build_result((), waveform, config)

    magnitudes = np.abs(waveform.samples)
    starts, ends = window_edges(
        total,
        interval_ms=config.interval_ms,
        sample_rate=waveform.sample_rate,
        sample_count=waveform.sample_count,
    )
    peaks = np.zeros(total, dtype=np.float64)

    block = max(1, math.ceil(total / PROGRESS_STEPS))
    for first in range(0, total, block):
        if should_cancel is not None and should_cancel():
            raise PipelineCancelled(first, total)
        last = min(first + block, total)
        peaks[first:last] = window_peaks(magnitudes, starts[first:last], ends[first:last])
        if on_progress is not None:
            on_progress(last / total)

    peak = global_peak(magnitudes)
    if peak > 0.0:
        normalized = normalize_peaks(peaks, peak)
        mapped = map_thresholds(normalized, config.lower_threshold, config.upper_threshold)
        shaped = apply_curve(mapped, config.curve_strength)
    else:
        # Silence: every downstream stage is defined as 0
        shaped = np.zeros(total, dtype=np.float64)

    return _build_result(tuple(float(v) for v in shaped), waveform, config)


def _build_result(
    values: tuple[float, ...],
    waveform: Waveform,
    config: NoiseConfig,
) -> NoiseResult:
    return NoiseResult(
        values=values,
        balance=compute_balance(values),
        interval_ms=config.interval_ms,
        duration_sec=waveform.duration_sec,
        sample_rate=waveform.sample_rate,
    )
