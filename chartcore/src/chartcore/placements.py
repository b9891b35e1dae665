"""Birth-chart placements: sign, degree/minute, house and retrograde flag."""

from __future__ import annotations

import logging
import math
from collections.abc import Mapping, Sequence

from skyloom.schemas.positions import CelestialBody, Placement, StationEvent

from chartcore.angles import normalize
from chartcore.bodies import longitude_to_sign, parse_body
from chartcore.motion import classify_motion, detect_station

logger = logging.getLogger(__name__)

# Chart points that have no motion of their own
FIXED_POINTS = {CelestialBody.ASCENDANT, CelestialBody.MIDHEAVEN}


def find_house(longitude: float, cusps: Sequence[float]) -> int:
    """Determine which house a longitude falls in given 12 house cusps."""
    if len(cusps) != 12:
        raise ValueError(f"Expected 12 house cusps, got {len(cusps)}")
    longitude = normalize(longitude)
    norm_cusps = [normalize(c) for c in cusps]
    for i in range(12):
        cusp_start = norm_cusps[i]
        cusp_end = norm_cusps[(i + 1) % 12]
        if cusp_start <= cusp_end:
            if cusp_start <= longitude < cusp_end:
                return i + 1
        else:
            # Wraps around 0 degrees
            if longitude >= cusp_start or longitude < cusp_end:
                return i + 1
    # Degenerate cusps (all equal)
    return 1


def degree_and_minute(degree_in_sign: float) -> tuple[int, int]:
    """Split a degree within a sign into whole degrees and arc minutes."""
    whole = math.floor(degree_in_sign)
    minute = math.floor((degree_in_sign - whole) * 60)
    # 29.99999 can round to 60 minutes
    return whole, min(minute, 59)


def build_placement(
    body: str | CelestialBody,
    current: float,
    previous: float | None = None,
    cusps: Sequence[float] | None = None,
) -> Placement:
    """Build a placement record from today's and yesterday's longitude.

    Without a previous sample the body is reported direct.
    """
    body = parse_body(body)
    longitude = normalize(current)
    retrograde = False
    if previous is not None and body not in FIXED_POINTS:
        retrograde = classify_motion(longitude, previous).is_retrograde

    sign, degree_in_sign = longitude_to_sign(longitude)
    degree, minute = degree_and_minute(degree_in_sign)
    return Placement(
        body=body,
        sign=sign,
        degree=degree,
        minute=minute,
        ecliptic_longitude=longitude,
        retrograde=retrograde,
        house=find_house(longitude, cusps) if cusps else None,
    )


def build_chart(
    samples: Mapping[str | CelestialBody, Sequence[float]],
    cusps: Sequence[float] | None = None,
) -> tuple[list[Placement], list[StationEvent]]:
    """Build placements for every body in ``samples``.

    Each value lists longitudes newest first: ``[today]``,
    ``[today, yesterday]`` or ``[today, yesterday, day_before]``. Three
    samples also allow station detection.

    Returns (placements in body order, station events).
    """
    placements: list[Placement] = []
    stations: list[StationEvent] = []
    body_order = list(CelestialBody)

    parsed = {parse_body(name): list(series) for name, series in samples.items()}
    for body in sorted(parsed, key=body_order.index):
        series = parsed[body]
        if not series:
            raise ValueError(f"No longitude samples for {body.value}")
        previous = series[1] if len(series) > 1 else None
        placements.append(build_placement(body, series[0], previous, cusps))

        if len(series) > 2 and body not in FIXED_POINTS:
            station = detect_station(body, series[0], series[1], series[2])
            if station is not None:
                stations.append(station)

    logger.debug("Built %d placements, %d stations", len(placements), len(stations))
    return placements, stations
