"""
Configuration dataclasses for the noise envelope pipeline.

These immutable config objects decouple parameter passing from function signatures,
making it easier to define standard configurations and reuse them across runs.
"""

import math
from dataclasses import dataclass

# Parameter bounds, mirrored by the HTTP schemas and CLI help text.
MIN_INTERVAL_MS: int = 1
MAX_INTERVAL_MS: int = 1000
MIN_CURVE_STRENGTH: float = 0.1
MAX_CURVE_STRENGTH: float = 10.0

# Logarithmic floor slider spans 10^-5 .. 10^0
LOG_SLIDER_DECADES: int = 5
MIN_SLIDER_THRESHOLD: float = 10.0**-LOG_SLIDER_DECADES


@dataclass(frozen=True)
class NoiseConfig:
    """
    Configuration for converting a waveform into a noise sequence.

    Immutable configuration object that can be reused across multiple
    run_pipeline() calls. A new instance is built whenever the user moves
    a control; the engine never mutates one in place.

    Attributes:
        interval_ms: Window width in milliseconds (1–1000). Smaller values
            give finer time resolution and longer sequences. Defaults to 100.
        lower_threshold: Floor in normalized amplitude (0–1). Values at or
            below it map to 0. Defaults to 1e-5, the bottom of the
            logarithmic floor slider.
        upper_threshold: Ceiling in normalized amplitude (0–1). Values at or
            above it map to 1. Defaults to 1.0.
        curve_strength: Exponent shaping (0.1 <= s <= 10). Each value v becomes
            v ** (1 / s); 1.0 is the identity. Defaults to 2.0.

    Example:
        >>> config = NoiseConfig(interval_ms=50, curve_strength=1.0)
        >>> result = run_pipeline(waveform, config)
    """

    interval_ms: int = 100
    lower_threshold: float = MIN_SLIDER_THRESHOLD
    upper_threshold: float = 1.0
    curve_strength: float = 2.0

    def __post_init__(self) -> None:
        """Validate configuration parameters."""
        if isinstance(self.interval_ms, bool) or not isinstance(self.interval_ms, int):
            raise ValueError(f"interval_ms must be an integer, got {self.interval_ms!r}")
        if not MIN_INTERVAL_MS <= self.interval_ms <= MAX_INTERVAL_MS:
            raise ValueError(
                f"interval_ms must be between {MIN_INTERVAL_MS} and {MAX_INTERVAL_MS}, "
                f"got {self.interval_ms}"
            )
        for name in ("lower_threshold", "upper_threshold", "curve_strength"):
            value = getattr(self, name)
            if not math.isfinite(value):
                raise ValueError(f"{name} must be finite, got {value}")
        if not 0.0 <= self.lower_threshold <= 1.0:
            raise ValueError(f"lower_threshold must be within [0, 1], got {self.lower_threshold}")
        if not 0.0 <= self.upper_threshold <= 1.0:
            raise ValueError(f"upper_threshold must be within [0, 1], got {self.upper_threshold}")
        if self.curve_strength <= 0.0:
            raise ValueError(f"curve_strength must be positive, got {self.curve_strength}")
        if self.curve_strength < MIN_CURVE_STRENGTH:
            raise ValueError(
                f"curve_strength must be at least {MIN_CURVE_STRENGTH}, got {self.curve_strength}"
            )
        if self.curve_strength > MAX_CURVE_STRENGTH:
            raise ValueError(
                f"curve_strength must be at most {MAX_CURVE_STRENGTH}, got {self.curve_strength}"
            )

    @property
    def is_degenerate(self) -> bool:
        """True when the floor is not below the ceiling (step-function regime)."""
        return self.lower_threshold >= self.upper_threshold


def lower_threshold_to_slider(threshold: float) -> float:
    """Map a floor value onto the 0–1 logarithmic slider position.

    ``position = (log10(threshold) + 5) / 5``. Thresholds below 1e-5
    (including 0) pin the slider to its left edge.
    """
    if threshold <= MIN_SLIDER_THRESHOLD:
        return 0.0
    position = (math.log10(threshold) + LOG_SLIDER_DECADES) / LOG_SLIDER_DECADES
    return min(position, 1.0)


def slider_to_lower_threshold(position: float) -> float:
    """Inverse of lower_threshold_to_slider: ``10 ** (position * 5 - 5)``.

    Raises:
        ValueError: If position is outside [0, 1].
    """
    if not 0.0 <= position <= 1.0:
        raise ValueError(f"slider position must be within [0, 1], got {position}")
    return 10.0 ** (position * LOG_SLIDER_DECADES - LOG_SLIDER_DECADES)


# Pre-defined configurations for common use cases

DEFAULT_CONFIG = NoiseConfig()
"""Default configuration: 100 ms windows, floor 1e-5, ceiling 1.0, curve 2.0."""

FINE_CONFIG = NoiseConfig(interval_ms=10)
"""10 ms windows for detailed control signals."""

COARSE_CONFIG = NoiseConfig(interval_ms=500)
"""Half-second windows for a quick overview of long recordings."""

LINEAR_CONFIG = NoiseConfig(lower_threshold=0.0, upper_threshold=1.0, curve_strength=1.0)
"""No remapping: output equals the normalized window peaks."""
