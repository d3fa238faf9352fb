import random

import pytest

from app.core.exceptions import ConfigurationError
from app.services.slot_enumerator import (
    CandidateSlot,
    enumerate_candidate_slots,
    normalize_working_days,
    shuffled_candidate_slots,
)


def test_enumerates_cartesian_product_of_days_and_periods():
    candidates = enumerate_candidate_slots([1, 2], ["p1", "p2", "p3"])

    assert len(candidates) == 6
    assert candidates[0] == CandidateSlot(day=1, period_id="p1")
    assert {candidate.day for candidate in candidates} == {1, 2}


def test_duplicate_days_are_collapsed():
    assert normalize_working_days([5, 1, 5, 2]) == [5, 1, 2]


def test_out_of_range_day_is_rejected():
    with pytest.raises(ConfigurationError):
        normalize_working_days([1, 7])


def test_empty_working_days_is_a_configuration_error():
    with pytest.raises(ConfigurationError, match="No working days"):
        enumerate_candidate_slots([], ["p1"])


def test_empty_periods_is_a_configuration_error():
    with pytest.raises(ConfigurationError, match="No active lesson periods configured"):
        enumerate_candidate_slots([1, 2, 3], [])


def test_shuffle_keeps_every_candidate():
    ordered = enumerate_candidate_slots([1, 2, 3, 4, 5], ["p1", "p2"])
    shuffled = shuffled_candidate_slots([1, 2, 3, 4, 5], ["p1", "p2"], random.Random(7))

    assert sorted(shuffled, key=lambda item: (item.day, item.period_id)) == ordered


def test_seeded_shuffle_is_reproducible():
    first = shuffled_candidate_slots([0, 1, 2, 3, 4, 5, 6], ["p1", "p2", "p3"], random.Random(42))
    second = shuffled_candidate_slots([0, 1, 2, 3, 4, 5, 6], ["p1", "p2", "p3"], random.Random(42))

    assert first == second
