from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from app.core.exceptions import SlotConflictError, SlotValidationError
from app.db.base import Base
from app.models.class_group import ClassGroup
from app.models.curriculum import ClassSubject
from app.models.room import Room
from app.models.subject import Subject
from app.models.timetable_slot import TimetableSlot
from app.models.user import User


@dataclass(frozen=True)
class SlotProposal:
    term_id: str
    class_id: str
    subject_id: str
    trainer_id: str
    room_id: str
    lesson_period_id: str
    day_of_week: int
    is_online_session: bool = False


def _name(db: Session, model: type[Base], entity_id: str) -> str:
    record = db.get(model, entity_id)
    return record.name if record is not None else entity_id


def class_subject_exists(db: Session, *, class_id: str, subject_id: str, term_id: str) -> bool:
    return (
        db.execute(
            select(ClassSubject.id).where(
                ClassSubject.class_id == class_id,
                ClassSubject.subject_id == subject_id,
                ClassSubject.term_id == term_id,
            )
        ).first()
        is not None
    )


def ensure_online_allowed(subject: Subject | None, is_online_session: bool) -> None:
    if not is_online_session:
        return
    if subject is None or not subject.can_be_online:
        label = f"{subject.name} ({subject.code})" if subject is not None else "Subject"
        raise SlotValidationError(
            "Subject cannot be online",
            details={"reason": f"{label} is not configured to allow online sessions"},
        )


def find_conflicting_slot(
    db: Session,
    proposal: SlotProposal,
    *,
    exclude_slot_id: str | None = None,
) -> tuple[str, TimetableSlot] | None:
    """Return the first clashing persisted slot as ``(resource, slot)``.

    Room clashes win over trainer clashes, which win over class clashes.
    """
    statement = select(TimetableSlot).where(
        TimetableSlot.term_id == proposal.term_id,
        TimetableSlot.day_of_week == proposal.day_of_week,
        TimetableSlot.lesson_period_id == proposal.lesson_period_id,
        or_(
            TimetableSlot.room_id == proposal.room_id,
            TimetableSlot.trainer_id == proposal.trainer_id,
            TimetableSlot.class_id == proposal.class_id,
        ),
    )
    if exclude_slot_id is not None:
        statement = statement.where(TimetableSlot.id != exclude_slot_id)
    clashes = list(db.execute(statement).scalars())

    for resource, attribute in (("room", "room_id"), ("trainer", "trainer_id"), ("class", "class_id")):
        for slot in clashes:
            if getattr(slot, attribute) == getattr(proposal, attribute):
                return resource, slot
    return None


def _conflict_message(db: Session, resource: str, slot: TimetableSlot) -> str:
    subject_name = _name(db, Subject, slot.subject_id)
    class_name = _name(db, ClassGroup, slot.class_id)
    if resource == "room":
        return f"Room {_name(db, Room, slot.room_id)} is already booked for {subject_name} ({class_name}) at this time"
    if resource == "trainer":
        return (
            f"Trainer {_name(db, User, slot.trainer_id)} is already scheduled for "
            f"{subject_name} ({class_name}) at this time"
        )
    return f"Class {class_name} already has {subject_name} at this time"


def validate_slot_placement(
    db: Session,
    proposal: SlotProposal,
    *,
    exclude_slot_id: str | None = None,
) -> None:
    """Point-check one slot against the term's persisted slots.

    Raises ``SlotValidationError`` for a missing class-subject link or a
    disallowed online session, and ``SlotConflictError`` naming the blocking
    slot when the room, trainer or class is already taken.
    """
    if not class_subject_exists(
        db,
        class_id=proposal.class_id,
        subject_id=proposal.subject_id,
        term_id=proposal.term_id,
    ):
        raise SlotValidationError(
            "Subject not assigned to class for this term",
            details={
                "class_id": proposal.class_id,
                "subject_id": proposal.subject_id,
                "term_id": proposal.term_id,
            },
        )

    ensure_online_allowed(db.get(Subject, proposal.subject_id), proposal.is_online_session)

    clash = find_conflicting_slot(db, proposal, exclude_slot_id=exclude_slot_id)
    if clash is None:
        return
    resource, slot = clash
    raise SlotConflictError(
        _conflict_message(db, resource, slot),
        details={
            "resource": resource,
            "conflicting_slot_id": slot.id,
            "subject": _name(db, Subject, slot.subject_id),
            "class": _name(db, ClassGroup, slot.class_id),
        },
    )
