"""
core/noise/balance.py — Balance metric over a finished noise sequence.

balance = (share of values above the 0.5 midpoint, in percent) - 50

    +50  every window is above the midpoint
      0  even split (or no data)
    -50  no window is above the midpoint

summarize_balance() turns the number into the banded description shown
next to the chart.
"""

from __future__ import annotations

from collections.abc import Sequence

from core.noise.types import BalanceSummary

MIDPOINT: float = 0.5

# |balance| above which each band starts
_BANDS: tuple[tuple[float, str], ...] = (
    (45.0, "extreme"),
    (30.0, "strong"),
    (15.0, "mild"),
)


def compute_balance(values: Sequence[float]) -> float:
    """Signed deviation, in percentage points, from a 50/50 split around 0.5.

    Values exactly equal to 0.5 count as "not above". An empty sequence has
    no skew and returns 0.0.
    """
    n = len(values)
    if n == 0:
        return 0.0
    above = sum(1 for v in values if v > MIDPOINT)
    return (above / n) * 100.0 - 50.0


def summarize_balance(balance: float) -> BalanceSummary:
    """Describe a balance value for display.

    The value is clamped to [-100, 100] before banding. Zero reads as
    "below", matching the indicator it replaces.
    """
    clamped = min(max(balance, -100.0), 100.0)
    magnitude = abs(clamped)

    band = "balanced"
    for limit, name in _BANDS:
        if magnitude > limit:
            band = name
            break

    return BalanceSummary(
        balance=balance,
        clamped=clamped,
        direction="above" if clamped > 0 else "below",
        magnitude=magnitude,
        band=band,
    )
