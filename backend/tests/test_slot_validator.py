import pytest

from app.core.exceptions import SlotConflictError, SlotValidationError
from app.models.subject import Subject
from app.models.timetable_slot import TimetableSlot
from app.services.slot_validator import SlotProposal, find_conflicting_slot, validate_slot_placement


@pytest.fixture()
def booked(db_session, seed_term):
    seeded = seed_term(rooms=2, classes=2, subjects=2, online_subjects=(1,))
    slot = TimetableSlot(
        term_id=seeded.term.id,
        class_id=seeded.classes[0].id,
        subject_id=seeded.subjects[0].id,
        trainer_id=seeded.trainers[0].id,
        room_id=seeded.rooms[0].id,
        lesson_period_id=seeded.periods[0].id,
        day_of_week=1,
    )
    db_session.add(slot)
    db_session.commit()
    seeded.slot = slot
    return seeded


def proposal(seeded, *, class_index, subject_index, room_index, day=1, period_index=0, online=False):
    return SlotProposal(
        term_id=seeded.term.id,
        class_id=seeded.classes[class_index].id,
        subject_id=seeded.subjects[subject_index].id,
        trainer_id=seeded.trainers[subject_index].id,
        room_id=seeded.rooms[room_index].id,
        lesson_period_id=seeded.periods[period_index].id,
        day_of_week=day,
        is_online_session=online,
    )


def test_occupied_room_is_rejected_naming_room_subject_and_class(db_session, booked):
    with pytest.raises(SlotConflictError) as exc_info:
        validate_slot_placement(db_session, proposal(booked, class_index=1, subject_index=1, room_index=0))

    error = exc_info.value
    assert error.status_code == 409
    assert error.message == "Room Room 1 is already booked for Subject 1 (Class 1) at this time"
    assert error.details["resource"] == "room"
    assert error.details["conflicting_slot_id"] == booked.slot.id


def test_busy_trainer_is_rejected(db_session, booked):
    with pytest.raises(SlotConflictError) as exc_info:
        validate_slot_placement(db_session, proposal(booked, class_index=1, subject_index=0, room_index=1))

    assert exc_info.value.message == "Trainer Trainer 1 is already scheduled for Subject 1 (Class 1) at this time"
    assert exc_info.value.details["resource"] == "trainer"


def test_busy_class_is_rejected(db_session, booked):
    with pytest.raises(SlotConflictError) as exc_info:
        validate_slot_placement(db_session, proposal(booked, class_index=0, subject_index=1, room_index=1))

    assert exc_info.value.message == "Class Class 1 already has Subject 1 at this time"
    assert exc_info.value.details["resource"] == "class"


def test_room_conflict_is_reported_before_trainer_conflict(db_session, booked):
    clash = find_conflicting_slot(db_session, proposal(booked, class_index=1, subject_index=0, room_index=0))

    assert clash is not None
    assert clash[0] == "room"


def test_free_cell_passes(db_session, booked):
    validate_slot_placement(db_session, proposal(booked, class_index=1, subject_index=1, room_index=0, day=2))
    validate_slot_placement(
        db_session, proposal(booked, class_index=1, subject_index=1, room_index=0, period_index=1)
    )


def test_slot_does_not_conflict_with_itself_on_update(db_session, booked):
    same_cell = proposal(booked, class_index=0, subject_index=0, room_index=0)

    with pytest.raises(SlotConflictError):
        validate_slot_placement(db_session, same_cell)
    validate_slot_placement(db_session, same_cell, exclude_slot_id=booked.slot.id)


def test_online_session_requires_subject_support(db_session, booked):
    with pytest.raises(SlotValidationError) as exc_info:
        validate_slot_placement(
            db_session, proposal(booked, class_index=1, subject_index=0, room_index=1, day=3, online=True)
        )
    assert exc_info.value.status_code == 400
    assert exc_info.value.message == "Subject cannot be online"

    validate_slot_placement(
        db_session, proposal(booked, class_index=1, subject_index=1, room_index=1, day=3, online=True)
    )


def test_subject_must_be_attached_to_class_for_the_term(db_session, booked):
    stray = Subject(code="STRAY", name="Stray Subject")
    db_session.add(stray)
    db_session.commit()

    unattached = SlotProposal(
        term_id=booked.term.id,
        class_id=booked.classes[0].id,
        subject_id=stray.id,
        trainer_id=booked.trainers[0].id,
        room_id=booked.rooms[1].id,
        lesson_period_id=booked.periods[1].id,
        day_of_week=4,
    )
    with pytest.raises(SlotValidationError, match="Subject not assigned to class for this term"):
        validate_slot_placement(db_session, unattached)
