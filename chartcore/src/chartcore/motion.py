"""Apparent motion: direct vs. retrograde, and stations."""

from __future__ import annotations

import logging

from skyloom.schemas.positions import AngularPosition, CelestialBody, MotionState, StationEvent

from chartcore.angles import normalize
from chartcore.bodies import longitude_to_sign, parse_body

logger = logging.getLogger(__name__)

# The Sun and Moon never appear to move backwards
NEVER_RETROGRADE = {CelestialBody.SUN, CelestialBody.MOON}


def classify_motion(current: float, previous: float) -> MotionState:
    """Classify the motion from ``previous`` to ``current`` longitude.

    The forward delta is taken modulo 360, so a forward crossing of 0°
    (359 -> 1) is a 2° forward move and a backward crossing (1 -> 359) is a
    358° forward move, i.e. retrograde. A delta of exactly 0 (stationary)
    and exactly 180 are both direct: the predicate is strictly ``> 180``.
    """
    forward = normalize(normalize(current) - normalize(previous))
    return MotionState(is_retrograde=forward > 180.0, forward_motion=forward)


def motion_between(current: AngularPosition, previous: AngularPosition) -> MotionState:
    """Classify motion between two samples of the same body."""
    if current.body != previous.body:
        raise ValueError(
            f"Samples belong to different bodies: {current.body.value} vs {previous.body.value}"
        )
    if current.sampled_at <= previous.sampled_at:
        raise ValueError(
            f"Current sample ({current.sampled_at.isoformat()}) must be later than "
            f"previous sample ({previous.sampled_at.isoformat()})"
        )
    return classify_motion(current.longitude, previous.longitude)


def detect_station(
    body: str | CelestialBody,
    current: float,
    previous: float,
    before_previous: float,
) -> StationEvent | None:
    """Detect a change of direction across three consecutive daily samples.

    Returns a ``station_retrograde`` event when the body moves backwards now
    but moved forwards the day before, ``station_direct`` for the reverse,
    and ``None`` otherwise.
    """
    body = parse_body(body)
    if body in NEVER_RETROGRADE:
        return None

    now = classify_motion(current, previous)
    before = classify_motion(previous, before_previous)
    if now.is_retrograde == before.is_retrograde:
        return None

    event_type = "station_retrograde" if now.is_retrograde else "station_direct"
    longitude = normalize(current)
    sign, _ = longitude_to_sign(longitude)
    logger.debug("%s %s in %s at %.4f", body.value, event_type, sign, longitude)
    return StationEvent(type=event_type, body=body, sign=sign, longitude=longitude)
