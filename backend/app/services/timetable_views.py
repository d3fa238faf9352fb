from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime, timedelta

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.core.config import get_settings
from app.models.class_group import ClassGroup
from app.models.lesson_period import LessonPeriod
from app.models.room import Room
from app.models.subject import Subject
from app.models.term import Term
from app.models.timetable_slot import SlotStatus, TimetableSlot
from app.models.user import User
from app.schemas.common import DAY_NAMES, parse_time_to_minutes
from app.schemas.timetable import (
    CheckInWindow,
    SlotPeriod,
    SlotRef,
    TimetableSlotOut,
    TrainerTodayEntry,
    TrainerTodayOut,
)


def _lookup(db: Session, model, ids: set[str]) -> dict:
    if not ids:
        return {}
    return {item.id: item for item in db.execute(select(model).where(model.id.in_(ids))).scalars()}


def day_index(moment: datetime) -> int:
    # Python counts Monday as 0; stored days count Sunday as 0.
    return (moment.weekday() + 1) % 7


def serialize_slots(db: Session, slots: Sequence[TimetableSlot]) -> list[TimetableSlotOut]:
    classes = _lookup(db, ClassGroup, {slot.class_id for slot in slots})
    subjects = _lookup(db, Subject, {slot.subject_id for slot in slots})
    trainers = _lookup(db, User, {slot.trainer_id for slot in slots})
    rooms = _lookup(db, Room, {slot.room_id for slot in slots})
    periods = _lookup(db, LessonPeriod, {slot.lesson_period_id for slot in slots})

    serialized: list[TimetableSlotOut] = []
    for slot in slots:
        class_group = classes.get(slot.class_id)
        subject = subjects.get(slot.subject_id)
        trainer = trainers.get(slot.trainer_id)
        room = rooms.get(slot.room_id)
        period = periods.get(slot.lesson_period_id)
        serialized.append(
            TimetableSlotOut(
                id=slot.id,
                term_id=slot.term_id,
                class_id=slot.class_id,
                subject_id=slot.subject_id,
                trainer_id=slot.trainer_id,
                room_id=slot.room_id,
                lesson_period_id=slot.lesson_period_id,
                day_of_week=slot.day_of_week,
                status=slot.status,
                is_online_session=slot.is_online_session,
                class_group=SlotRef(id=class_group.id, name=class_group.name, code=class_group.code)
                if class_group
                else None,
                subject=SlotRef(id=subject.id, name=subject.name, code=subject.code) if subject else None,
                trainer=SlotRef(id=trainer.id, name=trainer.name) if trainer else None,
                room=SlotRef(id=room.id, name=room.name) if room else None,
                lesson_period=SlotPeriod(
                    id=period.id,
                    name=period.name,
                    start_time=period.start_time,
                    end_time=period.end_time,
                    duration=period.duration,
                )
                if period
                else None,
                can_be_online=bool(subject and subject.can_be_online),
            )
        )
    return serialized


def sort_slots(db: Session, slots: Sequence[TimetableSlot]) -> list[TimetableSlot]:
    periods = _lookup(db, LessonPeriod, {slot.lesson_period_id for slot in slots})
    return sorted(
        slots,
        key=lambda slot: (
            slot.day_of_week,
            periods[slot.lesson_period_id].start_time if slot.lesson_period_id in periods else "99:99",
        ),
    )


def find_active_term(db: Session, on_date) -> Term | None:
    return db.execute(
        select(Term)
        .where(Term.is_active.is_(True), Term.start_date <= on_date, Term.end_date >= on_date)
        .order_by(Term.start_date.desc())
    ).scalars().first()


def check_in_window(start_time: str, now: datetime) -> CheckInWindow:
    settings = get_settings()
    minutes = parse_time_to_minutes(start_time)
    class_start = now.replace(hour=minutes // 60, minute=minutes % 60, second=0, microsecond=0)
    notify_from = class_start - timedelta(minutes=settings.checkin_notify_minutes_before)
    grace_end = class_start + timedelta(minutes=settings.checkin_grace_minutes_after)
    return CheckInWindow(
        class_start_time=class_start,
        notify_from=notify_from,
        grace_period_end=grace_end,
        should_notify=notify_from <= now < class_start,
        is_grace_period_active=class_start <= now <= grace_end,
        has_passed_grace_period=now > grace_end,
    )


def trainer_today(db: Session, trainer_id: str, *, now: datetime | None = None) -> TrainerTodayOut:
    """Today's sessions for one trainer with their check-in windows."""
    now = now or datetime.now()
    today = now.date()
    weekday = day_index(now)
    base = TrainerTodayOut(
        date=today.isoformat(),
        day_of_week=weekday,
        day_name=DAY_NAMES[weekday],
        trainer_id=trainer_id,
    )

    term = find_active_term(db, today)
    if term is None:
        base.message = "No active term found"
        return base
    base.term_id = term.id
    if today.isoformat() in (term.holidays or []):
        base.message = "Today is a holiday for this term"
        return base
    if weekday not in (term.working_days or []):
        base.message = "Today is not a working day for this term"
        return base

    slots = list(
        db.execute(
            select(TimetableSlot).where(
                TimetableSlot.trainer_id == trainer_id,
                TimetableSlot.term_id == term.id,
                TimetableSlot.day_of_week == weekday,
                TimetableSlot.status != SlotStatus.cancelled,
            )
        ).scalars()
    )
    for slot_out in serialize_slots(db, sort_slots(db, slots)):
        if slot_out.lesson_period is None:
            continue
        base.sessions.append(
            TrainerTodayEntry(slot=slot_out, timing=check_in_window(slot_out.lesson_period.start_time, now))
        )
    return base
