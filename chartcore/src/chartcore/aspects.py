"""Aspect detection and orb calculations."""

from __future__ import annotations

import logging
from collections.abc import Mapping

from skyloom.schemas.aspects import (
    AspectNature,
    AspectRelationship,
    AspectType,
    ChartAspect,
    TransitAspect,
)
from skyloom.schemas.positions import CelestialBody

from chartcore.angles import normalize, require_finite, separation
from chartcore.bodies import ASPECT_BODIES, DAILY_MOTION, orb_modifier, parse_body
from chartcore.durations import estimate_transit_days, transit_span

logger = logging.getLogger(__name__)

# Canonical order: earlier entries win ties on residual
ASPECT_ORDER: tuple[AspectType, ...] = (
    AspectType.CONJUNCTION,
    AspectType.OPPOSITION,
    AspectType.TRINE,
    AspectType.SQUARE,
    AspectType.SEXTILE,
)

IDEAL_ANGLES: dict[AspectType, float] = {
    AspectType.CONJUNCTION: 0.0,
    AspectType.OPPOSITION: 180.0,
    AspectType.TRINE: 120.0,
    AspectType.SQUARE: 90.0,
    AspectType.SEXTILE: 60.0,
}

DEFAULT_ORBS: dict[AspectType, float] = {
    AspectType.CONJUNCTION: 10.0,
    AspectType.OPPOSITION: 10.0,
    AspectType.TRINE: 8.0,
    AspectType.SQUARE: 8.0,
    AspectType.SEXTILE: 6.0,
}

NATURES: dict[AspectType, AspectNature] = {
    AspectType.CONJUNCTION: AspectNature.INTENSE,
    AspectType.OPPOSITION: AspectNature.CHALLENGING,
    AspectType.SQUARE: AspectNature.CHALLENGING,
    AspectType.TRINE: AspectNature.HARMONIOUS,
    AspectType.SEXTILE: AspectNature.HARMONIOUS,
}

# Natal points skipped for transit-to-natal aspects
TRANSIT_EXCLUDED_NATAL = {
    CelestialBody.NORTH_NODE,
    CelestialBody.SOUTH_NODE,
    CelestialBody.CHIRON,
    CelestialBody.LILITH,
}


def resolve_orbs(orbs: Mapping[AspectType | str, float] | None = None) -> dict[AspectType, float]:
    """Merge a (possibly partial) orb table over the defaults."""
    table = dict(DEFAULT_ORBS)
    for name, orb in (orbs or {}).items():
        aspect_type = AspectType(name)
        orb = require_finite(orb, f"orb for {aspect_type.value}")
        if orb < 0:
            raise ValueError(f"orb for {aspect_type.value} must be >= 0, got {orb}")
        table[aspect_type] = orb
    return table


def orb_table(
    body1: CelestialBody,
    body2: CelestialBody,
    base: Mapping[AspectType | str, float] | None = None,
    factor: float = 1.0,
) -> dict[AspectType, float]:
    """Orbs for a body pair: base orbs scaled by both bodies' modifiers."""
    scale = orb_modifier(body1, body2) * factor
    return {aspect_type: orb * scale for aspect_type, orb in resolve_orbs(base).items()}


def compute_aspect(
    lon1: float,
    lon2: float,
    orbs: Mapping[AspectType | str, float] | None = None,
) -> AspectRelationship | None:
    """Classify the aspect two longitudes form, if any.

    The candidate with the smallest residual from its ideal angle wins; ties
    go to the type listed first in ``ASPECT_ORDER``. Returns ``None`` when no
    aspect is within orb.
    """
    table = resolve_orbs(orbs)
    sep = separation(lon1, lon2)

    best: AspectRelationship | None = None
    for aspect_type in ASPECT_ORDER:
        residual = abs(sep - IDEAL_ANGLES[aspect_type])
        orb = table[aspect_type]
        if residual > orb:
            continue
        if best is None or residual < best.residual:
            best = AspectRelationship(
                aspect_type=aspect_type,
                separation=sep,
                orb_used=orb,
                residual=residual,
                nature=NATURES[aspect_type],
            )
    return best


def is_applying(
    lon1: float, lon2: float, speed1: float, speed2: float, aspect_angle: float
) -> bool:
    """Determine if an aspect is applying (getting tighter) or separating."""
    orb_now = abs(separation(lon1, lon2) - aspect_angle)

    # Project positions forward slightly
    lon1_future = normalize(lon1 + speed1 * 0.1)
    lon2_future = normalize(lon2 + speed2 * 0.1)
    orb_future = abs(separation(lon1_future, lon2_future) - aspect_angle)

    return orb_future < orb_now


def _as_body_map(positions: Mapping[str | CelestialBody, float]) -> dict[CelestialBody, float]:
    return {parse_body(name): require_finite(lon, f"{name} longitude") for name, lon in positions.items()}


def find_chart_aspects(
    positions: Mapping[str | CelestialBody, float],
    speeds: Mapping[str | CelestialBody, float] | None = None,
    orbs: Mapping[AspectType | str, float] | None = None,
) -> list[ChartAspect]:
    """Find all aspects between bodies of a single chart.

    Args:
        positions: body -> ecliptic longitude
        speeds: Optional body -> speed in degrees/day, used for applying/separating
        orbs: Optional base orb overrides, scaled per body pair

    Returns:
        Aspects sorted by residual (tightest first).
    """
    lons = _as_body_map(positions)
    body_speeds = {parse_body(name): speed for name, speed in (speeds or {}).items()}
    bodies = [b for b in ASPECT_BODIES if b in lons]

    found: list[ChartAspect] = []
    for i, body1 in enumerate(bodies):
        for body2 in bodies[i + 1:]:
            relationship = compute_aspect(lons[body1], lons[body2], orb_table(body1, body2, orbs))
            if relationship is None:
                continue
            applying = False
            if body_speeds:
                applying = is_applying(
                    lons[body1],
                    lons[body2],
                    body_speeds.get(body1, 0.0),
                    body_speeds.get(body2, 0.0),
                    IDEAL_ANGLES[relationship.aspect_type],
                )
            found.append(
                ChartAspect(body1=body1, body2=body2, relationship=relationship, applying=applying)
            )

    found.sort(key=lambda a: a.relationship.residual)
    return found


def find_transit_aspects(
    transits: Mapping[str | CelestialBody, float],
    natal: Mapping[str | CelestialBody, float],
    orb_factor: float = 0.8,
) -> list[TransitAspect]:
    """Find aspects between current transits and natal placements.

    Uses tighter orbs (multiplied by ``orb_factor``) for transit-to-natal,
    and sizes each transit window from the transiting body's mean motion.
    """
    transit_lons = _as_body_map(transits)
    natal_lons = _as_body_map(natal)

    found: list[TransitAspect] = []
    for transit_body, t_lon in transit_lons.items():
        daily_motion = DAILY_MOTION.get(transit_body)
        if daily_motion is None:
            logger.debug("No mean motion for %s, skipping as transit", transit_body.value)
            continue
        for natal_body, n_lon in natal_lons.items():
            if natal_body in TRANSIT_EXCLUDED_NATAL:
                continue
            orbs = orb_table(transit_body, natal_body, factor=orb_factor)
            relationship = compute_aspect(t_lon, n_lon, orbs)
            if relationship is None:
                continue
            ideal = IDEAL_ANGLES[relationship.aspect_type]
            applying = is_applying(t_lon, n_lon, daily_motion, 0.0, ideal)
            total, remaining = estimate_transit_days(
                relationship.orb_used, relationship.residual, daily_motion, applying
            )
            found.append(
                TransitAspect(
                    transit_body=transit_body,
                    natal_body=natal_body,
                    relationship=relationship,
                    applying=applying,
                    span=transit_span(total, remaining),
                )
            )

    found.sort(key=lambda a: a.relationship.residual)
    return found
