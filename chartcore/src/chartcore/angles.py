"""Angle normalization and angular distance."""

from __future__ import annotations

import math


def require_finite(value: float, name: str = "angle") -> float:
    """Reject NaN and infinities before they reach the angle math."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"{name} must be a real number, got {type(value).__name__}")
    if not math.isfinite(value):
        raise ValueError(f"{name} must be finite, got {value!r}")
    return float(value)


def normalize(degrees: float) -> float:
    """Reduce any finite degree measure to the range [0, 360).

    Uses floor modulo, so negative inputs wrap to positive results:
    -370 -> 350, 400 -> 40, 360 -> 0.
    """
    result = require_finite(degrees, "degrees") % 360.0
    # Tiny negative inputs round up to exactly 360.0
    if result >= 360.0:
        return 0.0
    return result


def separation(lon1: float, lon2: float) -> float:
    """Shortest angular distance between two longitudes, in [0, 180].

    Symmetric bit for bit: separation(a, b) == separation(b, a).
    """
    raw = abs(normalize(lon1) - normalize(lon2))
    return min(raw, 360.0 - raw)
