"""Transit duration labels and presentation phases.

``label_duration`` maps a whole number of days to exactly one of
``"{n}-year"``, ``"{n}-month"``, ``"{n}-week"`` or ``"{n}-day"``. The rules
are evaluated in a fixed order and the month rule only fires when the
rounded month count is at least 2. Everything between 14 and 44 days is
therefore expressed in weeks, and neither "0-month" nor "1-month" can be
produced.

``transit_phase`` is a separate styling concern with looser guarantees.
"""

from __future__ import annotations

import math

from skyloom.schemas.transits import TransitSpan

DAYS_PER_YEAR = 365
DAYS_PER_MONTH = 30
DAYS_PER_WEEK = 7
WEEK_THRESHOLD_DAYS = 14

# Presentation bands: the first/last 15% of a transit, capped at two weeks
PHASE_FRACTION = 0.15
PHASE_CAP_DAYS = 14


def round_half_up(value: float) -> int:
    """Round a non-negative value with halves going up (2.5 -> 3)."""
    return math.floor(value + 0.5)


def _require_days(value: int, name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{name} must be an integer, got {type(value).__name__}")
    if value < 0:
        raise ValueError(f"{name} must be >= 0, got {value}")
    return value


def label_duration(total_days: int) -> str:
    """Human-scale label for a span of whole days.

    14 -> "2-week", 13 -> "13-day", 30 -> "4-week", 45 -> "2-month",
    365 -> "1-year". Zero days is labelled "0-day".
    """
    days = _require_days(total_days, "total_days")

    years = round_half_up(days / DAYS_PER_YEAR)
    if years >= 1:
        return f"{years}-year"

    months = round_half_up(days / DAYS_PER_MONTH)
    if months >= 2:
        return f"{months}-month"

    if days >= WEEK_THRESHOLD_DAYS:
        return f"{round_half_up(days / DAYS_PER_WEEK)}-week"

    return f"{days}-day"


def transit_phase(total_days: int, remaining_days: int) -> str:
    """Classify where a transit stands: 'beginning', 'active' or 'ending'.

    Ending wins over beginning for very short transits where both bands
    overlap.
    """
    total = _require_days(total_days, "total_days")
    remaining = _require_days(remaining_days, "remaining_days")
    if remaining > total:
        raise ValueError(f"remaining_days {remaining} exceeds total_days {total}")

    band = min(total * PHASE_FRACTION, PHASE_CAP_DAYS)
    elapsed = total - remaining
    if remaining <= band:
        return "ending"
    if elapsed <= band:
        return "beginning"
    return "active"


def transit_span(total_days: int, remaining_days: int) -> TransitSpan:
    """Build a labelled span; the label describes the remaining time."""
    phase = transit_phase(total_days, remaining_days)
    return TransitSpan(
        total_days=total_days,
        remaining_days=remaining_days,
        label=label_duration(remaining_days),
        phase=phase,
    )


def estimate_transit_days(
    orb: float,
    residual: float,
    daily_motion: float,
    applying: bool,
) -> tuple[int, int]:
    """Estimate (total_days, remaining_days) of a transit aspect.

    A transit is in effect while the moving body crosses the full orb on
    both sides of exact: ``2 * orb / daily_motion`` days. An applying aspect
    still has the approach plus the whole separating half ahead of it; a
    separating one only has what is left of the separating half.
    """
    if daily_motion <= 0:
        raise ValueError(f"daily_motion must be > 0, got {daily_motion}")
    if orb < 0 or residual < 0:
        raise ValueError("orb and residual must be >= 0")

    total = round_half_up(2 * orb / daily_motion)
    if applying:
        remaining = round_half_up((residual + orb) / daily_motion)
    else:
        remaining = round_half_up(max(orb - residual, 0.0) / daily_motion)
    return total, min(remaining, total)
