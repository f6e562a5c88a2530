"""
Shared fixtures for the test suite.

Centralizes synthetic waveforms so individual test files don't need to
repeat sample-buffer boilerplate. Every waveform here is built in memory —
no test decodes a real audio file.
"""

import numpy as np
import pytest

from core.config import NoiseConfig
from core.noise.types import Waveform

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

TEST_SAMPLE_RATE: int = 1000
"""1 kHz keeps window arithmetic readable: 1 ms == 1 sample."""

LINEAR = NoiseConfig(lower_threshold=0.0, upper_threshold=1.0, curve_strength=1.0)
"""Pass-through configuration: output equals the normalized window peaks."""


# ---------------------------------------------------------------------------
# Waveform factories
# ---------------------------------------------------------------------------


def make_square(seconds: float = 1.0, amplitude: float = 1.0, sr: int = TEST_SAMPLE_RATE) -> Waveform:
    """Alternating +amplitude / -amplitude samples — every window peaks at amplitude."""
    n = int(round(seconds * sr))
    samples = np.where(np.arange(n) % 2 == 0, amplitude, -amplitude).astype(np.float64)
    return Waveform.from_samples(samples, sr)


def make_silence(seconds: float = 1.0, sr: int = TEST_SAMPLE_RATE) -> Waveform:
    """All-zero buffer."""
    return Waveform.from_samples(np.zeros(int(round(seconds * sr))), sr)


def make_steps(levels: list[float], window_samples: int = 100, sr: int = TEST_SAMPLE_RATE) -> Waveform:
    """One constant-magnitude block per level, sign alternating inside each block.

    With the default 100 ms interval at 1 kHz, block i is exactly window i,
    so window i's peak is abs(levels[i]).
    """
    blocks = []
    for level in levels:
        block = np.full(window_samples, level, dtype=np.float64)
        block[1::2] *= -1.0
        blocks.append(block)
    return Waveform.from_samples(np.concatenate(blocks), sr)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def square_waveform() -> Waveform:
    return make_square()


@pytest.fixture()
def silent_waveform() -> Waveform:
    return make_silence()


@pytest.fixture()
def ramp_waveform() -> Waveform:
    """Ten windows with peaks 0.1, 0.2, ..., 1.0."""
    return make_steps([round(0.1 * i, 1) for i in range(1, 11)])
