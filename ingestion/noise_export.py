"""
ingestion/noise_export.py — Output artifacts for a finished noise sequence.

Two artifacts leave the system:

    audio_noise_data.json   the sequence as a flat JSON array of floats
    recorded_audio.wav      the original recording, byte-for-byte

The JSON string returned by to_json() is also what a UI copies to the
clipboard. Nothing here transcodes audio.
"""

from __future__ import annotations

import json
import logging
import os
from collections.abc import Sequence
from pathlib import Path

logger = logging.getLogger(__name__)

DEFAULT_JSON_FILENAME = "audio_noise_data.json"
DEFAULT_AUDIO_FILENAME = "recorded_audio.wav"


def to_json(values: Sequence[float]) -> str:
    """Serialize a noise sequence as a JSON array, e.g. ``[0.0,0.25,1.0]``.

    Raises:
        ValueError: If a value is NaN or infinite (not representable in JSON).
    """
    return json.dumps([float(v) for v in values], separators=(",", ":"), allow_nan=False)


def save_json(values: Sequence[float], path: str | Path | None = None) -> Path:
    """Write the sequence to ``path`` (a file or a directory).

    A directory (an existing one, or a path ending in a separator), or None
    for the working directory, receives ``audio_noise_data.json``. Missing
    directories are created.

    Returns:
        The file that was written.
    """
    target = _resolve_target(path, DEFAULT_JSON_FILENAME)
    target.write_text(to_json(values), encoding="utf-8")
    logger.info("Wrote %d noise values to %s", len(values), target)
    return target


def save_source_audio(
    data: bytes,
    path: str | Path | None = None,
    *,
    filename: str = DEFAULT_AUDIO_FILENAME,
) -> Path:
    """Re-expose the original uploaded/recorded audio unmodified.

    A directory (as for save_json), or None for the working directory,
    receives ``filename``.

    Raises:
        ValueError: If there is no audio to save.
    """
    if not data:
        raise ValueError("No recorded audio to save")
    target = _resolve_target(path, filename)
    target.write_bytes(data)
    logger.info("Wrote %d bytes of source audio to %s", len(data), target)
    return target


def _resolve_target(path: str | Path | None, default_name: str) -> Path:
    if path is None:
        return Path.cwd() / default_name
    target = Path(path)
    # Path() drops a trailing separator, so "out/" must be checked on the raw string
    if target.is_dir() or _names_directory(path):
        target.mkdir(parents=True, exist_ok=True)
        return target / default_name
    target.parent.mkdir(parents=True, exist_ok=True)
    return target


def _names_directory(path: str | Path) -> bool:
    separators = tuple(sep for sep in (os.sep, os.altsep, "/") if sep)
    return isinstance(path, str) and path.endswith(separators)
