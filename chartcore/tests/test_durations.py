"""Tests for transit duration labels and phases."""

import re

import pytest
from chartcore.durations import (
    estimate_transit_days,
    label_duration,
    round_half_up,
    transit_phase,
    transit_span,
)

LABEL_PATTERN = re.compile(r"^[1-9]\d*-(year|month|week|day)$")


@pytest.mark.parametrize(
    ("days", "label"),
    [
        (1, "1-day"),
        (13, "13-day"),
        (14, "2-week"),
        (21, "3-week"),
        (30, "4-week"),
        (44, "6-week"),
        (45, "2-month"),
        (60, "2-month"),
        (75, "3-month"),
        (182, "6-month"),
        (183, "1-year"),
        (365, "1-year"),
        (730, "2-year"),
    ],
)
def test_label_duration(days, label):
    assert label_duration(days) == label


def test_zero_days():
    assert label_duration(0) == "0-day"


def test_no_zero_or_one_month_labels():
    for days in range(1, 45):
        label = label_duration(days)
        assert not label.startswith("0-month"), days
        assert not label.startswith("1-month"), days


def test_labels_match_output_pattern():
    for days in range(1, 2000):
        assert LABEL_PATTERN.match(label_duration(days)), days


def test_label_rejects_bad_input():
    with pytest.raises(ValueError):
        label_duration(-1)
    with pytest.raises(ValueError):
        label_duration(1.5)
    with pytest.raises(ValueError):
        label_duration(True)


def test_round_half_up():
    assert round_half_up(2.5) == 3
    assert round_half_up(1.5) == 2
    assert round_half_up(0.49) == 0


class TestTransitPhase:
    def test_beginning(self):
        assert transit_phase(100, 100) == "beginning"
        assert transit_phase(10, 9) == "beginning"

    def test_active(self):
        assert transit_phase(100, 50) == "active"

    def test_ending(self):
        assert transit_phase(100, 10) == "ending"
        assert transit_phase(10, 1) == "ending"
        assert transit_phase(0, 0) == "ending"

    def test_band_is_capped_for_long_transits(self):
        # 15% of 1000 days is 150, but the band stops at 14 days
        assert transit_phase(1000, 20) == "active"
        assert transit_phase(1000, 14) == "ending"
        assert transit_phase(1000, 985) == "active"

    def test_rejects_remaining_over_total(self):
        with pytest.raises(ValueError):
            transit_phase(10, 11)


def test_transit_span_labels_remaining_time():
    span = transit_span(30, 20)
    assert span.total_days == 30
    assert span.remaining_days == 20
    assert span.label == "3-week"
    assert span.phase == "active"


def test_estimate_transit_days():
    assert estimate_transit_days(8.0, 2.0, 1.0, applying=True) == (16, 10)
    assert estimate_transit_days(8.0, 2.0, 1.0, applying=False) == (16, 6)
    assert estimate_transit_days(8.0, 8.0, 1.0, applying=False) == (16, 0)


def test_estimate_transit_days_rejects_bad_motion():
    with pytest.raises(ValueError):
        estimate_transit_days(8.0, 2.0, 0.0, applying=True)
