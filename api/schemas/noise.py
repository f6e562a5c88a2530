"""
api/schemas/noise.py — Pydantic request/response schemas for noise endpoints.

Covers:
    /noise/convert   — NoiseConvertRequest / NoiseConvertResponse
    /noise/upload    — multipart form fields (NoiseConfigFields) / NoiseConvertResponse
    /noise/defaults  — NoiseDefaultsResponse
"""

from pydantic import BaseModel, Field

from core.config import (
    DEFAULT_CONFIG,
    MAX_CURVE_STRENGTH,
    MAX_INTERVAL_MS,
    MIN_CURVE_STRENGTH,
    MIN_INTERVAL_MS,
    NoiseConfig,
)

# ---------------------------------------------------------------------------
# Shared sub-schemas
# ---------------------------------------------------------------------------


class NoiseConfigFields(BaseModel):
    """The four pipeline parameters, with the same bounds as NoiseConfig."""

    interval_ms: int = Field(
        default=DEFAULT_CONFIG.interval_ms,
        ge=MIN_INTERVAL_MS,
        le=MAX_INTERVAL_MS,
        description="Window width in milliseconds. Smaller = finer time resolution.",
    )
    lower_threshold: float = Field(
        default=DEFAULT_CONFIG.lower_threshold,
        ge=0.0,
        le=1.0,
        description="Floor: normalized peaks at or below it map to 0.",
    )
    upper_threshold: float = Field(
        default=DEFAULT_CONFIG.upper_threshold,
        ge=0.0,
        le=1.0,
        description="Ceiling: normalized peaks at or above it map to 1.",
    )
    curve_strength: float = Field(
        default=DEFAULT_CONFIG.curve_strength,
        ge=MIN_CURVE_STRENGTH,
        le=MAX_CURVE_STRENGTH,
        description="Exponent shaping; each value v becomes v ** (1 / curve_strength).",
    )

    def to_config(self) -> NoiseConfig:
        return NoiseConfig(
            interval_ms=self.interval_ms,
            lower_threshold=self.lower_threshold,
            upper_threshold=self.upper_threshold,
            curve_strength=self.curve_strength,
        )


# ---------------------------------------------------------------------------
# /noise/convert
# ---------------------------------------------------------------------------


class NoiseConvertRequest(NoiseConfigFields):
    """Request body for POST /noise/convert."""

    file_path: str = Field(
        ...,
        description="Absolute path to audio file on the server filesystem.",
    )
    duration: float | None = Field(
        default=None,
        gt=0.0,
        description="Maximum seconds to decode. Omit to decode the whole file.",
    )


class NoiseConvertResponse(BaseModel):
    """Response body for POST /noise/convert and POST /noise/upload."""

    values: list[float]
    balance: float
    balance_label: str
    balance_band: str
    window_count: int
    interval_ms: int
    duration_sec: float
    sample_rate: int


# ---------------------------------------------------------------------------
# /noise/defaults
# ---------------------------------------------------------------------------


class NoiseDefaultsResponse(BaseModel):
    """Response body for GET /noise/defaults."""

    config: NoiseConfigFields
    lower_threshold_slider: float = Field(
        ...,
        ge=0.0,
        le=1.0,
        description="Position of the default floor on the logarithmic slider.",
    )
