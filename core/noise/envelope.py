"""
core/noise/envelope.py — Pure numeric stages of the noise envelope.

Every function here is pure numpy: it takes arrays or scalars and returns
new arrays or scalars. Nothing reads files, logs, or reports progress —
sequencing, progress and cancellation live in core/noise/pipeline.py.

Stages, in pipeline order:

    count_windows / window_edges   chunk boundaries from interval_ms + sample_rate
    window_peaks                   peak |amplitude| inside each window
    global_peak                    peak |amplitude| over the whole waveform
    normalize_peaks                window peaks / global peak (0 for silence)
    map_thresholds                 floor/ceiling remap into [0, 1]
    apply_curve                    v ** (1 / curve_strength)

Window boundary arithmetic:
    start_i = floor(i * interval_ms * sample_rate / 1000)
    end_i   = min(floor((i + 1) * interval_ms * sample_rate / 1000), n_samples)

    All three factors are integers, so the boundaries are computed with
    integer floor division and are exact for any sample rate.
"""

from __future__ import annotations

import math

import numpy as np

MS_PER_SECOND: int = 1000


# ---------------------------------------------------------------------------
# Chunking
# ---------------------------------------------------------------------------


def count_windows(duration_sec: float, interval_ms: int) -> int:
    """Number of output values: ``floor(duration_sec * 1000 / interval_ms)``.

    A partial trailing interval does not produce a value. Returns 0 (never
    negative) when the waveform is shorter than one interval.
    """
    if interval_ms <= 0:
        raise ValueError(f"interval_ms must be positive, got {interval_ms}")
    return max(0, math.floor(duration_sec * MS_PER_SECOND / interval_ms))


def window_edges(
    window_count: int,
    *,
    interval_ms: int,
    sample_rate: int,
    sample_count: int,
) -> tuple[np.ndarray, np.ndarray]:
    """Half-open sample spans ``[starts[i], ends[i])`` of every window.

    Windows are contiguous and non-overlapping. ``ends`` is clamped to the
    buffer, so a tail window running past it has ``end <= start`` and is
    empty.
    """
    boundaries = np.arange(window_count + 1, dtype=np.int64) * (interval_ms * sample_rate)
    boundaries //= MS_PER_SECOND
    starts = boundaries[:-1]
    ends = np.minimum(boundaries[1:], sample_count)
    return starts, ends


# ---------------------------------------------------------------------------
# Peak extraction + normalization
# ---------------------------------------------------------------------------


def window_peaks(magnitudes: np.ndarray, starts: np.ndarray, ends: np.ndarray) -> np.ndarray:
    """Peak of ``magnitudes[start:end]`` for each span; 0.0 for an empty span.

    Args:
        magnitudes: Absolute sample values (``np.abs(samples)``), computed once
                    by the caller and shared by every window.
        starts:     Span starts, non-decreasing, as produced by window_edges().
        ends:       Span ends; consecutive spans must be contiguous.
    """
    starts = np.asarray(starts, dtype=np.int64)
    ends = np.asarray(ends, dtype=np.int64)
    peaks = np.zeros(starts.shape[0], dtype=np.float64)

    filled = ends > starts
    if not filled.any():
        return peaks

    # Contiguous non-empty spans tile [first, last) exactly, so reduceat over
    # that slice reduces each span and nothing else.
    offsets = starts[filled]
    first = int(offsets[0])
    last = int(ends[filled][-1])
    peaks[filled] = np.maximum.reduceat(magnitudes[first:last], offsets - first)
    return peaks


def global_peak(magnitudes: np.ndarray) -> float:
    """Peak absolute amplitude over the whole buffer; 0.0 for an empty buffer."""
    if magnitudes.size == 0:
        return 0.0
    return float(magnitudes.max())


def normalize_peaks(peaks: np.ndarray, peak: float) -> np.ndarray:
    """Divide each window peak by the global peak.

    Silence (``peak == 0``) yields zeros instead of NaN.
    """
    peaks = np.asarray(peaks, dtype=np.float64)
    if peak <= 0.0:
        return np.zeros_like(peaks)
    return peaks / peak


# ---------------------------------------------------------------------------
# Threshold remap + curve
# ---------------------------------------------------------------------------


def map_thresholds(values: np.ndarray, lower: float, upper: float) -> np.ndarray:
    """Remap normalized values through a floor/ceiling pair into [0, 1].

    Regular regime (``lower < upper``)::

        v <= lower          -> 0
        v >= upper          -> 1
        otherwise           -> (v - lower) / (upper - lower)

    Degenerate regime (``lower >= upper``): there is no ramp to interpolate
    along, so the mapping becomes a step at the floor — ``1`` when
    ``v >= lower``, else ``0``.
    """
    values = np.asarray(values, dtype=np.float64)
    if lower >= upper:
        return np.where(values >= lower, 1.0, 0.0)

    ramp = (values - lower) / (upper - lower)
    return np.where(values <= lower, 0.0, np.where(values >= upper, 1.0, ramp))


def apply_curve(values: np.ndarray, curve_strength: float) -> np.ndarray:
    """Reweight values around the midpoint: ``v ** (1 / curve_strength)``.

    curve_strength > 1 pulls mid-range values towards 1, < 1 towards 0,
    and 1 leaves them unchanged. 0 and 1 are fixed points.

    Raises:
        ValueError: If curve_strength is not a positive finite number.
    """
    if not math.isfinite(curve_strength) or curve_strength <= 0.0:
        raise ValueError(f"curve_strength must be positive, got {curve_strength}")
    values = np.asarray(values, dtype=np.float64)
    if curve_strength == 1.0:
        return values.copy()
    return np.power(values, 1.0 / curve_strength)
