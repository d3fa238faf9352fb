from __future__ import annotations

import random
from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from app.core.exceptions import ConfigurationError


@dataclass(frozen=True)
class CandidateSlot:
    day: int
    period_id: str


def normalize_working_days(working_days: Iterable[int]) -> list[int]:
    days: list[int] = []
    for value in working_days:
        day = int(value)
        if day < 0 or day > 6:
            raise ConfigurationError(
                f"Invalid working day {value}; expected 0 (Sunday) to 6 (Saturday)",
            )
        if day not in days:
            days.append(day)
    return days


def enumerate_candidate_slots(working_days: Iterable[int], period_ids: Sequence[str]) -> list[CandidateSlot]:
    days = normalize_working_days(working_days)
    if not days:
        raise ConfigurationError("No working days configured for this term")
    if not period_ids:
        raise ConfigurationError("No active lesson periods configured")
    return [CandidateSlot(day=day, period_id=period_id) for day in days for period_id in period_ids]


def shuffled_candidate_slots(
    working_days: Iterable[int],
    period_ids: Sequence[str],
    rng: random.Random | None = None,
) -> list[CandidateSlot]:
    candidates = enumerate_candidate_slots(working_days, period_ids)
    # random.Random() seeds itself from os.urandom, so each call gets a fresh order.
    (rng or random.Random()).shuffle(candidates)
    return candidates
