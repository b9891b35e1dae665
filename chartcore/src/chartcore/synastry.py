"""Synastry: aspects and balances between two charts."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping

from skyloom.schemas.aspects import (
    AspectNature,
    AspectType,
    BalanceCount,
    ElementBalance,
    ModalityBalance,
    SynastryAspect,
    SynastryReport,
)
from skyloom.schemas.positions import CelestialBody, Placement

from chartcore.angles import require_finite
from chartcore.aspects import compute_aspect, resolve_orbs
from chartcore.bodies import (
    ELEMENTS,
    MODALITIES,
    SYNASTRY_BODIES,
    longitude_to_sign,
    parse_body,
    sign_element,
    sign_modality,
)
from chartcore.durations import round_half_up

logger = logging.getLogger(__name__)

ChartInput = Mapping[str | CelestialBody, float] | Iterable[Placement]

# Relative importance of each body in relationship comparisons (max 10)
BODY_WEIGHTS: dict[CelestialBody, float] = {
    CelestialBody.SUN: 10.0,
    CelestialBody.MOON: 10.0,
    CelestialBody.VENUS: 8.0,
    CelestialBody.MARS: 8.0,
    CelestialBody.ASCENDANT: 8.0,
    CelestialBody.MERCURY: 6.0,
    CelestialBody.JUPITER: 5.0,
    CelestialBody.SATURN: 5.0,
    CelestialBody.URANUS: 3.0,
    CelestialBody.NEPTUNE: 3.0,
    CelestialBody.PLUTO: 3.0,
}

COMPLEMENTARY_ELEMENTS = {frozenset({"fire", "air"}), frozenset({"earth", "water"})}

BASE_SCORE = 50.0
MAX_ASPECT_SWING = 35.0
ASPECT_POINTS = 8.0
ELEMENT_POINTS = {"complementary": 10.0, "similar": 5.0, "challenging": -10.0}
MODALITY_POINTS = {"complementary": 5.0, "similar": 3.0, "challenging": -5.0}


def _longitudes(chart: ChartInput) -> dict[CelestialBody, float]:
    if isinstance(chart, Mapping):
        return {
            parse_body(name): require_finite(lon, f"{name} longitude")
            for name, lon in chart.items()
        }
    return {p.body: p.ecliptic_longitude for p in chart}


def pair_weight(body1: CelestialBody, body2: CelestialBody) -> float:
    """Importance of a body pair, in (0, 1]."""
    return (BODY_WEIGHTS.get(body1, 3.0) + BODY_WEIGHTS.get(body2, 3.0)) / 20.0


def synastry_aspects(
    chart1: ChartInput,
    chart2: ChartInput,
    orbs: Mapping[AspectType | str, float] | None = None,
) -> list[SynastryAspect]:
    """Aspects between person 1's and person 2's bodies, heaviest first.

    Only ``SYNASTRY_BODIES`` take part. Weight combines the pair's importance
    with how exact the aspect is, on a 0-100 scale.
    """
    lons1 = _longitudes(chart1)
    lons2 = _longitudes(chart2)
    table = resolve_orbs(orbs)

    found: list[SynastryAspect] = []
    for body1 in SYNASTRY_BODIES:
        if body1 not in lons1:
            continue
        for body2 in SYNASTRY_BODIES:
            if body2 not in lons2:
                continue
            relationship = compute_aspect(lons1[body1], lons2[body2], table)
            if relationship is None:
                continue
            exactness = 1.0
            if relationship.orb_used > 0:
                exactness = 1.0 - relationship.residual / relationship.orb_used
            weight = round(100.0 * pair_weight(body1, body2) * exactness, 2)
            found.append(
                SynastryAspect(
                    person1_body=body1,
                    person2_body=body2,
                    person1_sign=longitude_to_sign(lons1[body1])[0],
                    person2_sign=longitude_to_sign(lons2[body2])[0],
                    relationship=relationship,
                    weight=min(max(weight, 0.0), 100.0),
                )
            )

    found.sort(key=lambda a: (-a.weight, a.relationship.residual))
    return found


def _dominant(counts: dict[str, int], order: list[str]) -> str | None:
    best = max(counts.values(), default=0)
    if best == 0:
        return None
    return next(name for name in order if counts[name] == best)


def _count_by(
    lons: dict[CelestialBody, float], classify, categories: list[str]
) -> dict[str, int]:
    counts = dict.fromkeys(categories, 0)
    for body in SYNASTRY_BODIES:
        if body in lons:
            counts[classify(longitude_to_sign(lons[body])[0])] += 1
    return counts


def element_balance(chart1: ChartInput, chart2: ChartInput) -> ElementBalance:
    """Count fire/earth/air/water placements for both people.

    The verdict compares each person's dominant element: the same element is
    'similar', fire/air or earth/water is 'complementary', anything else
    'challenging'.
    """
    counts1 = _count_by(_longitudes(chart1), sign_element, ELEMENTS)
    counts2 = _count_by(_longitudes(chart2), sign_element, ELEMENTS)

    dom1 = _dominant(counts1, ELEMENTS)
    dom2 = _dominant(counts2, ELEMENTS)
    if dom1 is None or dom2 is None or dom1 == dom2:
        verdict = "similar"
    elif frozenset({dom1, dom2}) in COMPLEMENTARY_ELEMENTS:
        verdict = "complementary"
    else:
        verdict = "challenging"

    fields = {
        name: BalanceCount(
            person1=counts1[name], person2=counts2[name], combined=counts1[name] + counts2[name]
        )
        for name in ELEMENTS
    }
    return ElementBalance(**fields, compatibility=verdict)


def modality_balance(chart1: ChartInput, chart2: ChartInput) -> ModalityBalance:
    """Count cardinal/fixed/mutable placements for both people."""
    counts1 = _count_by(_longitudes(chart1), sign_modality, MODALITIES)
    counts2 = _count_by(_longitudes(chart2), sign_modality, MODALITIES)

    dom1 = _dominant(counts1, MODALITIES)
    dom2 = _dominant(counts2, MODALITIES)
    if dom1 is None or dom2 is None or dom1 == dom2:
        verdict = "similar"
    else:
        verdict = "complementary"

    fields = {
        name: BalanceCount(
            person1=counts1[name], person2=counts2[name], combined=counts1[name] + counts2[name]
        )
        for name in MODALITIES
    }
    return ModalityBalance(**fields, compatibility=verdict)


def compatibility_score(
    aspects: list[SynastryAspect],
    elements: ElementBalance,
    modalities: ModalityBalance,
) -> int:
    """Overall compatibility on a 0-100 scale.

    Harmonious aspects add, challenging ones subtract, conjunctions add half
    as much; the aspect contribution is capped at +/-35 points.
    """
    swing = 0.0
    for aspect in aspects:
        points = ASPECT_POINTS * aspect.weight / 100.0
        nature = aspect.relationship.nature
        if nature == AspectNature.HARMONIOUS:
            swing += points
        elif nature == AspectNature.CHALLENGING:
            swing -= points
        else:
            swing += points / 2
    swing = max(-MAX_ASPECT_SWING, min(MAX_ASPECT_SWING, swing))

    score = BASE_SCORE + swing
    score += ELEMENT_POINTS.get(elements.compatibility, 0.0)
    score += MODALITY_POINTS.get(modalities.compatibility, 0.0)
    return int(min(100, max(0, round_half_up(score))))


def compare_charts(
    chart1: ChartInput,
    chart2: ChartInput,
    orbs: Mapping[AspectType | str, float] | None = None,
) -> SynastryReport:
    """Full synastry comparison of two charts."""
    # Iterables of placements may be single-use
    lons1 = _longitudes(chart1)
    lons2 = _longitudes(chart2)

    aspects = synastry_aspects(lons1, lons2, orbs)
    elements = element_balance(lons1, lons2)
    modalities = modality_balance(lons1, lons2)
    score = compatibility_score(aspects, elements, modalities)
    logger.debug("Synastry: %d aspects, score %d", len(aspects), score)
    return SynastryReport(
        aspects=aspects,
        element_balance=elements,
        modality_balance=modalities,
        score=score,
    )
