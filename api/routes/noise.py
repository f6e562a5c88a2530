"""
api/routes/noise.py — Audio to noise sequence endpoints.

Endpoints:
    POST /noise/convert   — Convert an audio file on the server filesystem
    POST /noise/upload    — Convert an uploaded file or browser recording
    GET  /noise/defaults  — Default parameters and floor slider position

Each request gets its own NoiseEngine: HTTP calls are independent, so there
is nothing to coalesce across them. The engine still provides decoding,
validation, metrics and the commit path.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, File, Form, HTTPException, UploadFile

from api.schemas.noise import (
    NoiseConfigFields,
    NoiseConvertRequest,
    NoiseConvertResponse,
    NoiseDefaultsResponse,
)
from core.config import DEFAULT_CONFIG, NoiseConfig, lower_threshold_to_slider
from core.noise.balance import summarize_balance
from core.noise.types import NoiseResult
from ingestion.noise_engine import NoiseEngine

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/noise", tags=["noise"])


def _to_response(result: NoiseResult) -> NoiseConvertResponse:
    summary = summarize_balance(result.balance)
    return NoiseConvertResponse(
        values=result.to_list(),
        balance=result.balance,
        balance_label=summary.label,
        balance_band=summary.band,
        window_count=result.window_count,
        interval_ms=result.interval_ms,
        duration_sec=result.duration_sec,
        sample_rate=result.sample_rate,
    )


def _build_config(fields: NoiseConfigFields) -> NoiseConfig:
    try:
        return fields.to_config()
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc


# ---------------------------------------------------------------------------
# POST /noise/convert
# ---------------------------------------------------------------------------


@router.post("/convert", response_model=NoiseConvertResponse)
def convert(request: NoiseConvertRequest) -> NoiseConvertResponse:
    """Convert the audio file at `file_path` into a noise sequence.

    Args:
        request: NoiseConvertRequest with file_path and pipeline parameters.

    Returns:
        NoiseConvertResponse with the sequence, balance and source metadata.

    Raises:
        422: File not found, unsupported format, undecodable audio, or
             invalid parameters.
    """
    engine = NoiseEngine(_build_config(request))
    try:
        result = engine.load_file(request.file_path, duration=request.duration)
    except (FileNotFoundError, ValueError) as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    except RuntimeError as exc:
        logger.error("Noise conversion failed: %s", exc)
        raise HTTPException(status_code=422, detail=str(exc)) from exc

    if result is None:
        raise HTTPException(status_code=500, detail="Noise conversion was superseded")
    return _to_response(result)


# ---------------------------------------------------------------------------
# POST /noise/upload
# ---------------------------------------------------------------------------


@router.post("/upload", response_model=NoiseConvertResponse)
def upload(
    file: UploadFile = File(...),
    interval_ms: int = Form(DEFAULT_CONFIG.interval_ms),
    lower_threshold: float = Form(DEFAULT_CONFIG.lower_threshold),
    upper_threshold: float = Form(DEFAULT_CONFIG.upper_threshold),
    curve_strength: float = Form(DEFAULT_CONFIG.curve_strength),
) -> NoiseConvertResponse:
    """Convert an uploaded audio file (or finished recording) into a noise sequence.

    Raises:
        422: Empty upload, unsupported format, undecodable audio, or
             invalid parameters.
    """
    try:
        fields = NoiseConfigFields(
            interval_ms=interval_ms,
            lower_threshold=lower_threshold,
            upper_threshold=upper_threshold,
            curve_strength=curve_strength,
        )
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc

    engine = NoiseEngine(_build_config(fields))
    data = file.file.read()
    try:
        result = engine.load_bytes(data, filename=file.filename or "recording.wav")
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    except RuntimeError as exc:
        logger.error("Noise conversion failed for upload %r: %s", file.filename, exc)
        raise HTTPException(status_code=422, detail=str(exc)) from exc

    if result is None:
        raise HTTPException(status_code=500, detail="Noise conversion was superseded")
    return _to_response(result)


# ---------------------------------------------------------------------------
# GET /noise/defaults
# ---------------------------------------------------------------------------


@router.get("/defaults", response_model=NoiseDefaultsResponse)
def defaults() -> NoiseDefaultsResponse:
    """Return the default parameters a client should initialise its controls with."""
    return NoiseDefaultsResponse(
        config=NoiseConfigFields(),
        lower_threshold_slider=lower_threshold_to_slider(DEFAULT_CONFIG.lower_threshold),
    )
