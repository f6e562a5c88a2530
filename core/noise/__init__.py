"""
core/noise — Pure noise envelope module.

Turns a decoded single-channel waveform into a bounded sequence of noise
intensity values plus a balance metric. All functions are pure: they take
(Waveform, NoiseConfig) or numpy arrays and return new values. No file I/O —
decoding lives in ingestion/audio_loader.py, coalesced recomputation in
ingestion/noise_engine.py.

Public API:
    Types:     Waveform, NoiseResult, BalanceSummary
    Pipeline:  run_pipeline, PipelineCancelled
    Balance:   compute_balance, summarize_balance
"""

from core.noise.balance import compute_balance, summarize_balance
from core.noise.pipeline import PipelineCancelled, run_pipeline
from core.noise.types import BalanceSummary, NoiseResult, Waveform

__all__ = [
    "Waveform",
    "NoiseResult",
    "BalanceSummary",
    "run_pipeline",
    "PipelineCancelled",
    "compute_balance",
    "summarize_balance",
]
