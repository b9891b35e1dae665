"""Tests for synastry comparisons."""

from chartcore.placements import build_placement
from chartcore.synastry import (
    compare_charts,
    compatibility_score,
    element_balance,
    modality_balance,
    pair_weight,
    synastry_aspects,
)
from skyloom.schemas.aspects import (
    AspectNature,
    AspectRelationship,
    AspectType,
    BalanceCount,
    ElementBalance,
    ModalityBalance,
    SynastryAspect,
)
from skyloom.schemas.positions import CelestialBody


def _aspect(aspect_type: AspectType, nature: AspectNature, weight: float = 100.0) -> SynastryAspect:
    return SynastryAspect(
        person1_body=CelestialBody.SUN,
        person2_body=CelestialBody.MOON,
        person1_sign="Aries",
        person2_sign="Leo",
        relationship=AspectRelationship(
            aspect_type=aspect_type, separation=120.0, orb_used=8.0, residual=1.0, nature=nature
        ),
        weight=weight,
    )


def _neutral_modality() -> ModalityBalance:
    return ModalityBalance(
        cardinal=BalanceCount(person1=7, person2=7, combined=14),
        fixed=BalanceCount(person1=7, person2=7, combined=14),
        mutable=BalanceCount(person1=6, person2=6, combined=12),
        compatibility="similar",
    )


class TestSynastryAspects:
    def test_conjunction(self):
        aspects = synastry_aspects({"sun": 15.0}, {"moon": 17.0})
        assert len(aspects) == 1
        aspect = aspects[0]
        assert aspect.relationship.aspect_type == AspectType.CONJUNCTION
        assert aspect.person1_body == CelestialBody.SUN
        assert aspect.person2_body == CelestialBody.MOON
        assert aspect.person1_sign == "Aries"
        assert abs(aspect.relationship.residual - 2.0) < 0.1

    def test_opposition_is_challenging(self):
        aspects = synastry_aspects({"venus": 10.0}, {"mars": 192.0})
        opposition = next(a for a in aspects if a.relationship.aspect_type == AspectType.OPPOSITION)
        assert opposition.relationship.is_harmonious is False

    def test_trine_and_sextile_are_harmonious(self):
        trine = synastry_aspects({"sun": 15.0}, {"moon": 135.0})[0]
        assert trine.relationship.aspect_type == AspectType.TRINE
        assert trine.relationship.is_harmonious is True
        sextile = synastry_aspects({"venus": 15.0}, {"mars": 75.0})[0]
        assert sextile.relationship.aspect_type == AspectType.SEXTILE

    def test_no_aspect_outside_orb(self):
        assert synastry_aspects({"sun": 15.0}, {"moon": 60.0}) == []

    def test_sorted_by_weight(self):
        chart1 = {"sun": 15.0, "mercury": 20.0}
        chart2 = {"moon": 17.0, "saturn": 22.0}
        aspects = synastry_aspects(chart1, chart2)
        weights = [a.weight for a in aspects]
        assert weights == sorted(weights, reverse=True)
        top = aspects[0]
        assert (top.person1_body, top.person2_body) == (CelestialBody.SUN, CelestialBody.MOON)

    def test_only_synastry_bodies(self):
        aspects = synastry_aspects({"sun": 15.0, "midheaven": 270.0}, {"moon": 17.0, "chiron": 270.0})
        assert all(a.person1_body != CelestialBody.MIDHEAVEN for a in aspects)
        assert all(a.person2_body != CelestialBody.CHIRON for a in aspects)

    def test_weight_rewards_exactness(self):
        exact = synastry_aspects({"sun": 15.0}, {"moon": 15.0})[0]
        loose = synastry_aspects({"sun": 15.0}, {"moon": 24.0})[0]
        assert exact.weight == 100.0
        assert loose.weight < exact.weight

    def test_pair_weight(self):
        assert pair_weight(CelestialBody.SUN, CelestialBody.MOON) == 1.0
        assert pair_weight(CelestialBody.MERCURY, CelestialBody.SATURN) < 1.0


class TestBalances:
    def test_element_counts(self):
        balance = element_balance({"sun": 15.0, "moon": 135.0}, {"venus": 255.0})
        assert balance.fire.person1 == 2
        assert balance.fire.person2 == 1
        assert balance.fire.combined == 3

    def test_complementary_elements(self):
        chart1 = {"sun": 15.0, "moon": 135.0, "venus": 255.0}
        chart2 = {"sun": 75.0, "moon": 195.0, "venus": 315.0}
        assert element_balance(chart1, chart2).compatibility == "complementary"

    def test_similar_elements(self):
        chart1 = {"sun": 15.0, "moon": 135.0}
        chart2 = {"sun": 20.0, "moon": 260.0}
        assert element_balance(chart1, chart2).compatibility == "similar"

    def test_challenging_elements(self):
        chart1 = {"sun": 15.0, "moon": 135.0}
        chart2 = {"sun": 105.0, "moon": 225.0}
        assert element_balance(chart1, chart2).compatibility == "challenging"

    def test_modality_counts(self):
        balance = modality_balance({"sun": 15.0, "moon": 105.0}, {"venus": 195.0})
        assert balance.cardinal.person1 == 2
        assert balance.cardinal.person2 == 1

        balance = modality_balance({"sun": 45.0}, {"moon": 135.0})
        assert balance.fixed.person1 == 1
        assert balance.fixed.person2 == 1


class TestCompatibilityScore:
    def test_score_in_range(self):
        elements = ElementBalance(compatibility="similar")
        score = compatibility_score(
            [_aspect(AspectType.CONJUNCTION, AspectNature.INTENSE)] * 20, elements, _neutral_modality()
        )
        assert 0 <= score <= 100

    def test_harmonious_beats_challenging(self):
        elements = ElementBalance(compatibility="similar")
        harmonious = compatibility_score(
            [_aspect(AspectType.TRINE, AspectNature.HARMONIOUS)], elements, _neutral_modality()
        )
        challenging = compatibility_score(
            [_aspect(AspectType.SQUARE, AspectNature.CHALLENGING)], elements, _neutral_modality()
        )
        assert harmonious > challenging

    def test_complementary_elements_beat_challenging(self):
        complementary = compatibility_score(
            [], ElementBalance(compatibility="complementary"), _neutral_modality()
        )
        challenging = compatibility_score(
            [], ElementBalance(compatibility="challenging"), _neutral_modality()
        )
        assert complementary > challenging

    def test_swing_is_capped(self):
        many = [_aspect(AspectType.TRINE, AspectNature.HARMONIOUS)] * 50
        score = compatibility_score(many, ElementBalance(compatibility="similar"), _neutral_modality())
        # 50 base + 35 cap + 5 similar elements + 3 similar modalities
        assert score == 93


def test_compare_charts_accepts_placements():
    chart1 = [build_placement("sun", 15.0), build_placement("moon", 135.0)]
    chart2 = [build_placement("sun", 75.0), build_placement("moon", 195.0)]

    report = compare_charts(iter(chart1), iter(chart2))

    assert report.element_balance.compatibility == "complementary"
    assert 0 <= report.score <= 100
    assert report.aspects
    types = {a.relationship.aspect_type for a in report.aspects}
    assert AspectType.SEXTILE in types
