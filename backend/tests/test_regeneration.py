from datetime import date, timedelta

import pytest

from app.core.exceptions import RegenerationWindowError, TimetableExistsError
from app.models.term import Term
from app.models.timetable_slot import TimetableSlot
from app.services.regeneration import RegenerationGuard

TERM_START = date(2026, 9, 7)


def add_slot(db_session, seeded, *, term_id=None, day=1):
    slot = TimetableSlot(
        term_id=term_id or seeded.term.id,
        class_id=seeded.classes[0].id,
        subject_id=seeded.subjects[0].id,
        trainer_id=seeded.trainers[0].id,
        room_id=seeded.rooms[0].id,
        lesson_period_id=seeded.periods[0].id,
        day_of_week=day,
    )
    db_session.add(slot)
    db_session.commit()
    return slot


def test_first_generation_needs_no_regenerate_flag(db_session, seed_term):
    seeded = seed_term(start_date=TERM_START)
    guard = RegenerationGuard(db_session, seeded.term, today=TERM_START + timedelta(days=60))

    assert guard.authorize(False) == 0
    assert guard.authorize(True) == 0


def test_existing_timetable_without_regenerate_is_rejected(db_session, seed_term):
    seeded = seed_term(start_date=TERM_START)
    add_slot(db_session, seeded)
    guard = RegenerationGuard(db_session, seeded.term, today=TERM_START)

    with pytest.raises(TimetableExistsError) as exc_info:
        guard.authorize(False)
    assert exc_info.value.status_code == 409
    assert "Use regenerate option" in exc_info.value.message


def test_regeneration_allowed_on_the_last_day_of_the_window(db_session, seed_term):
    seeded = seed_term(start_date=TERM_START)
    add_slot(db_session, seeded)
    guard = RegenerationGuard(db_session, seeded.term, window_days=14, today=TERM_START + timedelta(days=14))

    assert guard.days_since_start() == 14
    assert guard.can_regenerate() is True
    assert guard.authorize(True) == 1


def test_regeneration_rejected_after_the_window_without_deleting(db_session, seed_term):
    seeded = seed_term(start_date=TERM_START)
    add_slot(db_session, seeded)
    guard = RegenerationGuard(db_session, seeded.term, window_days=14, today=TERM_START + timedelta(days=15))

    for _ in range(2):
        with pytest.raises(RegenerationWindowError) as exc_info:
            guard.authorize(True)
        assert exc_info.value.status_code == 403
        assert exc_info.value.message == "Cannot regenerate: More than 2 weeks since term start"
        assert guard.existing_slot_count() == 1


def test_repeated_rejection_leaves_state_unchanged(db_session, seed_term):
    seeded = seed_term(start_date=TERM_START)
    add_slot(db_session, seeded, day=1)
    add_slot(db_session, seeded, day=2)
    guard = RegenerationGuard(db_session, seeded.term, today=TERM_START)

    for _ in range(3):
        with pytest.raises(TimetableExistsError):
            guard.authorize(False)
    assert guard.existing_slot_count() == 2


def test_purge_only_touches_the_guarded_term(db_session, seed_term):
    seeded = seed_term(start_date=TERM_START)
    other = Term(
        name="Other term",
        start_date=TERM_START,
        end_date=TERM_START + timedelta(days=90),
        working_days=[1, 2, 3, 4, 5],
        holidays=[],
    )
    db_session.add(other)
    db_session.commit()
    add_slot(db_session, seeded, day=1)
    add_slot(db_session, seeded, day=2)
    add_slot(db_session, seeded, term_id=other.id, day=1)

    guard = RegenerationGuard(db_session, seeded.term, today=TERM_START)
    assert guard.purge() == 2
    db_session.commit()

    assert guard.existing_slot_count() == 0
    assert RegenerationGuard(db_session, other, today=TERM_START).existing_slot_count() == 1
