from __future__ import annotations

from collections.abc import Iterable
from typing import Protocol


class PlacedSlot(Protocol):
    day_of_week: int
    lesson_period_id: str
    room_id: str
    trainer_id: str
    class_id: str


class ConflictIndex:
    """Run-scoped record of which (day, period, resource) cells are taken.

    One instance belongs to a single generation run; it is never shared
    between requests. Room, trainer and class keys live in separate
    namespaces so ids from different tables cannot collide.
    """

    def __init__(self) -> None:
        self._used: set[tuple[str, int, str, str]] = set()

    @classmethod
    def from_slots(cls, slots: Iterable[PlacedSlot]) -> ConflictIndex:
        index = cls()
        for slot in slots:
            index.mark_used(
                slot.day_of_week,
                slot.lesson_period_id,
                slot.room_id,
                slot.trainer_id,
                slot.class_id,
            )
        return index

    def is_available(self, day: int, period_id: str, room_id: str, trainer_id: str, class_id: str) -> bool:
        return (
            ("room", day, period_id, room_id) not in self._used
            and ("trainer", day, period_id, trainer_id) not in self._used
            and ("class", day, period_id, class_id) not in self._used
        )

    def mark_used(self, day: int, period_id: str, room_id: str, trainer_id: str, class_id: str) -> None:
        self._used.add(("room", day, period_id, room_id))
        self._used.add(("trainer", day, period_id, trainer_id))
        self._used.add(("class", day, period_id, class_id))

    def available_rooms(
        self,
        day: int,
        period_id: str,
        room_ids: Iterable[str],
        trainer_id: str,
        class_id: str,
    ) -> list[str]:
        return [
            room_id
            for room_id in room_ids
            if self.is_available(day, period_id, room_id, trainer_id, class_id)
        ]

    def __len__(self) -> int:
        return len(self._used)
