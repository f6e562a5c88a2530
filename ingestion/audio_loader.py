"""
ingestion/audio_loader.py — File I/O boundary for audio decoding.

This is the ONLY module in the noise pipeline that decodes audio.
Everything downstream (core/noise/) takes a pre-decoded Waveform — never
file paths or encoded bytes.

Only the first channel is analyzed: multi-channel files are loaded with
mono=False and channel 0 is kept as-is (no down-mixing).

Usage:
    from ingestion.audio_loader import load_waveform, load_waveform_bytes
    waveform = load_waveform("/path/to/take.wav")
    waveform = load_waveform_bytes(upload.file.read(), filename=upload.filename)
"""

from __future__ import annotations

import io
import logging
from pathlib import Path
from typing import Any

import numpy as np

from core.noise.types import Waveform

logger = logging.getLogger(__name__)

# Supported audio file extensions (must be loadable by librosa / soundfile)
AUDIO_EXTENSIONS: frozenset[str] = frozenset(
    {".mp3", ".wav", ".flac", ".aiff", ".aif", ".ogg", ".m4a", ".opus", ".webm"}
)


def load_waveform(
    path: str | Path,
    *,
    duration: float | None = None,
) -> Waveform:
    """Decode an audio file into a single-channel Waveform.

    This is the I/O boundary — the only function in the pipeline that
    touches the filesystem.

    Args:
        path: Absolute or relative path to an audio file.
              Supported formats: see AUDIO_EXTENSIONS.
        duration: Maximum seconds to decode. None decodes the whole file.

    Returns:
        Waveform at the file's native sample rate, channel 0 only.

    Raises:
        FileNotFoundError: File does not exist at the given path.
        ValueError: File extension is not a supported audio format.
        RuntimeError: librosa/soundfile could not decode the file
                      (corrupted, truncated, DRM-protected, etc.).
    """
    file_path = Path(path)

    if not file_path.exists():
        raise FileNotFoundError(f"Audio file not found: {file_path}")

    _check_extension(file_path.name)
    return _decode(file_path, label=file_path.name, duration=duration)


def load_waveform_bytes(
    data: bytes,
    *,
    filename: str = "recording.wav",
    duration: float | None = None,
) -> Waveform:
    """Decode an in-memory upload or finished recording into a Waveform.

    Args:
        data: Encoded audio bytes exactly as uploaded or recorded.
        filename: Original file name; only its extension is checked.
        duration: Maximum seconds to decode. None decodes everything.

    Raises:
        ValueError: Empty payload or unsupported extension.
        RuntimeError: The bytes could not be decoded.
    """
    if not data:
        raise ValueError("No audio data provided")

    _check_extension(filename)
    return _decode(io.BytesIO(data), label=filename, duration=duration)


def _check_extension(name: str) -> None:
    suffix = Path(name).suffix.lower()
    if suffix not in AUDIO_EXTENSIONS:
        raise ValueError(
            f"Unsupported audio format {suffix!r}. Supported: {sorted(AUDIO_EXTENSIONS)}"
        )


def _decode(source: Any, *, label: str, duration: float | None) -> Waveform:
    import librosa  # deferred to allow testing without audio backend

    try:
        y, sr = librosa.load(
            source,
            sr=None,
            mono=False,
            duration=duration,
            offset=0.0,
        )
    except Exception as exc:
        raise RuntimeError(f"Failed to decode audio file {label!r}: {exc}") from exc

    samples = np.asarray(y, dtype=np.float64)
    if samples.ndim > 1:
        samples = samples[0]

    sample_rate = int(sr)
    if sample_rate <= 0:
        raise RuntimeError(f"Failed to decode audio file {label!r}: invalid sample rate {sr}")

    waveform = Waveform.from_samples(samples, sample_rate)
    logger.info(
        "Decoded %r: %d samples @ %d Hz (%.2fs)",
        label,
        waveform.sample_count,
        sample_rate,
        waveform.duration_sec,
    )
    return waveform
