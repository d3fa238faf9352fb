from __future__ import annotations

import logging
import random
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from time import perf_counter

from app.core.exceptions import ConfigurationError, SchedulerError
from app.services.conflict_index import ConflictIndex
from app.services.slot_enumerator import (
    CandidateSlot,
    enumerate_candidate_slots,
    normalize_working_days,
    shuffled_candidate_slots,
)

logger = logging.getLogger(__name__)

MIN_SESSIONS_PER_WEEK = 1
MAX_SESSIONS_PER_WEEK = 5


@dataclass(frozen=True)
class AssignmentRequest:
    """One trainer-subject-class assignment that needs weekly sessions."""

    assignment_id: str
    trainer_id: str
    class_id: str
    subject_id: str
    trainer_name: str = ""
    class_code: str = ""
    subject_code: str = ""
    subject_name: str = ""


@dataclass(frozen=True)
class PlannedSlot:
    assignment_id: str
    class_id: str
    subject_id: str
    trainer_id: str
    room_id: str
    lesson_period_id: str
    day_of_week: int
    status: str = "scheduled"
    is_online_session: bool = False


@dataclass(frozen=True)
class SkippedAssignment:
    assignment_id: str
    subject_code: str
    subject_name: str
    class_code: str
    trainer_name: str
    scheduled: int
    requested: int
    reason: str


@dataclass
class SchedulingResult:
    slots: list[PlannedSlot] = field(default_factory=list)
    skipped: list[SkippedAssignment] = field(default_factory=list)
    processed: int = 0

    @property
    def fully_scheduled(self) -> int:
        return self.processed - len(self.skipped)

    def stats(self) -> dict[str, int]:
        return {
            "slots_created": len(self.slots),
            "trainer_assignments_processed": self.processed,
            "assignments_fully_scheduled": self.fully_scheduled,
            "assignments_partially_scheduled": len(self.skipped),
            "trainers_assigned": len({slot.trainer_id for slot in self.slots}),
            "rooms_used": len({slot.room_id for slot in self.slots}),
            "subjects_scheduled": len({slot.subject_id for slot in self.slots}),
        }


def validate_sessions_per_week(value: int) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise SchedulerError("sessions_per_week must be an integer")
    if value < MIN_SESSIONS_PER_WEEK or value > MAX_SESSIONS_PER_WEEK:
        raise SchedulerError(
            f"sessions_per_week must be between {MIN_SESSIONS_PER_WEEK} and {MAX_SESSIONS_PER_WEEK}",
            details={"sessions_per_week": value},
        )
    return value


class GreedyScheduler:
    """Randomized first-fit placement of weekly sessions.

    Each assignment gets its own shuffled view of the (day, period) space and
    is placed in two passes: the first prefers a new day for every session
    while enough distinct days remain, the second packs whatever is left
    onto any free cell. Accepted slots are never revoked, so assignments
    processed early can starve later ones of scarce rooms. Shortfalls are
    returned as ``SkippedAssignment`` records rather than raised.
    """

    def __init__(
        self,
        *,
        working_days: Iterable[int],
        period_ids: Sequence[str],
        room_ids: Sequence[str],
        sessions_per_week: int,
        rng: random.Random | None = None,
        index: ConflictIndex | None = None,
    ) -> None:
        self.working_days = normalize_working_days(working_days)
        self.period_ids = list(period_ids)
        self.room_ids = list(room_ids)
        self.sessions_per_week = validate_sessions_per_week(sessions_per_week)
        self.random = rng or random.Random()
        self.index = index if index is not None else ConflictIndex()

        if not self.room_ids:
            raise ConfigurationError("No active rooms available")
        # Fails fast on an empty day or period set before any placement happens.
        enumerate_candidate_slots(self.working_days, self.period_ids)

    @property
    def distinct_day_target(self) -> int:
        return min(self.sessions_per_week, len(self.working_days))

    def run(self, requests: Iterable[AssignmentRequest]) -> SchedulingResult:
        started = perf_counter()
        result = SchedulingResult()
        for request in requests:
            result.processed += 1
            placed = self._schedule_assignment(request)
            result.slots.extend(placed)
            if len(placed) < self.sessions_per_week:
                result.skipped.append(self._skipped(request, len(placed)))

        stats = result.stats()
        logger.info(
            "Greedy scheduling finished | assignments=%s slots=%s partial=%s rooms=%s elapsed_ms=%.1f",
            stats["trainer_assignments_processed"],
            stats["slots_created"],
            stats["assignments_partially_scheduled"],
            stats["rooms_used"],
            (perf_counter() - started) * 1000,
        )
        return result

    def _schedule_assignment(self, request: AssignmentRequest) -> list[PlannedSlot]:
        candidates = shuffled_candidate_slots(self.working_days, self.period_ids, self.random)
        placed: list[PlannedSlot] = []
        used_days: set[int] = set()

        # Pass 1: spread across distinct days while variety is still reachable.
        for candidate in candidates:
            if len(placed) >= self.sessions_per_week:
                break
            if candidate.day in used_days and len(used_days) < self.distinct_day_target:
                continue
            slot = self._place(request, candidate)
            if slot is None:
                continue
            placed.append(slot)
            used_days.add(candidate.day)

        # Pass 2: pack the remainder onto any free cell.
        if len(placed) < self.sessions_per_week:
            for candidate in candidates:
                if len(placed) >= self.sessions_per_week:
                    break
                slot = self._place(request, candidate)
                if slot is None:
                    continue
                placed.append(slot)

        return placed

    def _place(self, request: AssignmentRequest, candidate: CandidateSlot) -> PlannedSlot | None:
        free_rooms = self.index.available_rooms(
            candidate.day,
            candidate.period_id,
            self.room_ids,
            request.trainer_id,
            request.class_id,
        )
        if not free_rooms:
            return None
        room_id = self.random.choice(free_rooms)
        self.index.mark_used(candidate.day, candidate.period_id, room_id, request.trainer_id, request.class_id)
        return PlannedSlot(
            assignment_id=request.assignment_id,
            class_id=request.class_id,
            subject_id=request.subject_id,
            trainer_id=request.trainer_id,
            room_id=room_id,
            lesson_period_id=candidate.period_id,
            day_of_week=candidate.day,
        )

    def _skipped(self, request: AssignmentRequest, scheduled: int) -> SkippedAssignment:
        return SkippedAssignment(
            assignment_id=request.assignment_id,
            subject_code=request.subject_code,
            subject_name=request.subject_name,
            class_code=request.class_code,
            trainer_name=request.trainer_name,
            scheduled=scheduled,
            requested=self.sessions_per_week,
            reason=f"Only {scheduled}/{self.sessions_per_week} sessions scheduled (no available slots)",
        )
