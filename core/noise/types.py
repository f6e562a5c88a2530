"""
core/noise/types.py — Frozen data types for the noise envelope pipeline.

All types are frozen dataclasses — immutable value objects that can be
safely handed between the engine thread and the caller.

Design principles:
    - No I/O, no side effects.
    - `Waveform.samples` is a read-only float64 array; a new Waveform is built
      for every decoded input rather than mutating the buffer in place.
    - `NoiseResult.values` is a tuple (immutable sequence) for hashability.
    - `BalanceSummary.label` is computed to avoid duplicate storage.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np


@dataclass(frozen=True, eq=False)
class Waveform:
    """Single-channel decoded audio.

    Invariants:
        samples.ndim == 1, dtype float64, values in [-1, 1]
        sample_rate is a positive int
        duration_sec >= 0
    """

    samples: np.ndarray
    """Amplitude buffer for channel 0. Read-only."""

    sample_rate: int
    """Sample rate in Hz."""

    duration_sec: float
    """Duration in seconds as reported by the decoder."""

    def __post_init__(self) -> None:
        if isinstance(self.sample_rate, bool) or not isinstance(self.sample_rate, int):
            raise ValueError(f"sample_rate must be an integer, got {self.sample_rate!r}")
        if self.sample_rate <= 0:
            raise ValueError(f"sample_rate must be positive, got {self.sample_rate}")
        if self.duration_sec < 0:
            raise ValueError(f"duration_sec must be non-negative, got {self.duration_sec}")
        samples = np.asarray(self.samples, dtype=np.float64)
        if samples.ndim != 1:
            raise ValueError(f"samples must be one-dimensional, got shape {samples.shape}")
        if samples is self.samples:
            samples = samples.copy()
        samples.flags.writeable = False
        object.__setattr__(self, "samples", samples)

    @classmethod
    def from_samples(cls, samples: np.ndarray | list[float], sample_rate: int) -> Waveform:
        """Build a Waveform whose duration is derived from the sample count."""
        arr = np.asarray(samples, dtype=np.float64)
        return cls(samples=arr, sample_rate=int(sample_rate), duration_sec=len(arr) / sample_rate)

    @property
    def sample_count(self) -> int:
        return int(self.samples.shape[0])


@dataclass(frozen=True)
class NoiseResult:
    """Output of one pipeline run.

    Invariants:
        every value in [0.0, 1.0]
        len(values) == floor(duration_sec * 1000 / interval_ms)
        -50.0 <= balance <= 50.0
    """

    values: tuple[float, ...]
    """Noise intensity per window, in window order."""

    balance: float
    """Percentage of values above 0.5, minus 50. 0.0 for an empty sequence."""

    interval_ms: int
    """Window width the sequence was computed with."""

    duration_sec: float
    """Duration of the source waveform in seconds."""

    sample_rate: int
    """Sample rate of the source waveform in Hz."""

    @property
    def window_count(self) -> int:
        return len(self.values)

    def to_list(self) -> list[float]:
        """Values as a plain list, ready for JSON serialization."""
        return list(self.values)


@dataclass(frozen=True)
class BalanceSummary:
    """Human-facing description of a balance value.

    Invariants:
        -100.0 <= clamped <= 100.0
        magnitude == abs(clamped)
        direction in {"above", "below"}
        band in {"balanced", "mild", "strong", "extreme"}
    """

    balance: float
    clamped: float
    direction: str
    magnitude: float
    band: str

    @property
    def label(self) -> str:
        """e.g. '12.5% of datapoints are above 0.5'."""
        return f"{self.magnitude:.1f}% of datapoints are {self.direction} 0.5"
