import logging
import uuid

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.api.deps import can_manage_timetable, get_current_user, get_db, require_timetable_manager
from app.core.exceptions import ResourceNotFoundError, SlotConflictError, SlotValidationError
from app.models.class_group import ClassGroup
from app.models.lesson_period import LessonPeriod
from app.models.room import Room
from app.models.subject import Subject
from app.models.term import Term, TermClass
from app.models.timetable_slot import SlotStatus, TimetableSlot
from app.models.user import User
from app.schemas.timetable import (
    TimetableSlotCreate,
    TimetableSlotOut,
    TimetableSlotPatch,
    TimetableSlotReschedule,
    TrainerTodayOut,
)
from app.services.audit import log_activity
from app.services.slot_validator import SlotProposal, ensure_online_allowed, validate_slot_placement
from app.services.timetable_views import serialize_slots, sort_slots, trainer_today

router = APIRouter()
logger = logging.getLogger(__name__)

PLACEMENT_FIELDS = ("day_of_week", "lesson_period_id", "room_id")


def _get_slot_or_404(db: Session, slot_id: str) -> TimetableSlot:
    slot = db.get(TimetableSlot, slot_id)
    if slot is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Timetable slot not found")
    return slot


def _ensure_can_view(slot: TimetableSlot, user: User) -> None:
    if slot.trainer_id != user.id and not can_manage_timetable(user):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Insufficient permissions")


def _ensure_class_in_term(db: Session, *, term_id: str, class_id: str) -> None:
    if db.get(Term, term_id) is None:
        raise ResourceNotFoundError("Term", term_id)
    assigned = db.execute(
        select(TermClass.id).where(TermClass.term_id == term_id, TermClass.class_id == class_id)
    ).first()
    if assigned is None:
        raise SlotValidationError(
            "Class not assigned to this term",
            details={"class_id": class_id, "term_id": term_id},
        )


def _ensure_references(db: Session, *, room_id: str, lesson_period_id: str, trainer_id: str) -> None:
    if db.get(Room, room_id) is None:
        raise ResourceNotFoundError("Room", room_id)
    if db.get(LessonPeriod, lesson_period_id) is None:
        raise ResourceNotFoundError("LessonPeriod", lesson_period_id)
    if db.get(User, trainer_id) is None:
        raise ResourceNotFoundError("Trainer", trainer_id)


def _commit_slot(db: Session, slot: TimetableSlot) -> None:
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        logger.warning("Slot write lost a race | slot_id=%s", slot.id)
        raise SlotConflictError(
            "Slot conflicts with an existing booking",
            details={"day_of_week": slot.day_of_week, "lesson_period_id": slot.lesson_period_id},
        ) from exc
    db.refresh(slot)


def _slot_snapshot(slot: TimetableSlot) -> dict:
    return {
        "class_id": slot.class_id,
        "subject_id": slot.subject_id,
        "trainer_id": slot.trainer_id,
        "room_id": slot.room_id,
        "lesson_period_id": slot.lesson_period_id,
        "day_of_week": slot.day_of_week,
        "status": slot.status.value,
        "is_online_session": slot.is_online_session,
    }


@router.get("", response_model=list[TimetableSlotOut])
def list_slots(
    term_id: str | None = Query(default=None, max_length=36),
    trainer_id: str | None = Query(default=None, max_length=36),
    day_of_week: int | None = Query(default=None, ge=0, le=6),
    class_id: str | None = Query(default=None, max_length=36),
    subject_id: str | None = Query(default=None, max_length=36),
    room_id: str | None = Query(default=None, max_length=36),
    is_online_session: bool | None = Query(default=None),
    department: str | None = Query(default=None, max_length=200),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> list[TimetableSlotOut]:
    statement = select(TimetableSlot)
    if not can_manage_timetable(current_user):
        statement = statement.where(TimetableSlot.trainer_id == current_user.id)
    if term_id:
        statement = statement.where(TimetableSlot.term_id == term_id)
    if trainer_id:
        statement = statement.where(TimetableSlot.trainer_id == trainer_id)
    if day_of_week is not None:
        statement = statement.where(TimetableSlot.day_of_week == day_of_week)
    if class_id:
        statement = statement.where(TimetableSlot.class_id == class_id)
    if subject_id:
        statement = statement.where(TimetableSlot.subject_id == subject_id)
    if room_id:
        statement = statement.where(TimetableSlot.room_id == room_id)
    if is_online_session is not None:
        statement = statement.where(TimetableSlot.is_online_session.is_(is_online_session))
    if department:
        department_classes = select(ClassGroup.id).where(ClassGroup.department == department)
        statement = statement.where(TimetableSlot.class_id.in_(department_classes))

    slots = list(db.execute(statement).scalars())
    return serialize_slots(db, sort_slots(db, slots))


@router.post("", response_model=TimetableSlotOut, status_code=status.HTTP_201_CREATED)
def create_slot(
    payload: TimetableSlotCreate,
    current_user: User = Depends(require_timetable_manager),
    db: Session = Depends(get_db),
) -> TimetableSlotOut:
    _ensure_class_in_term(db, term_id=payload.term_id, class_id=payload.class_id)
    _ensure_references(
        db, room_id=payload.room_id, lesson_period_id=payload.lesson_period_id, trainer_id=payload.trainer_id
    )

    proposal = SlotProposal(
        term_id=payload.term_id,
        class_id=payload.class_id,
        subject_id=payload.subject_id,
        trainer_id=payload.trainer_id,
        room_id=payload.room_id,
        lesson_period_id=payload.lesson_period_id,
        day_of_week=payload.day_of_week,
        is_online_session=payload.is_online_session,
    )
    validate_slot_placement(db, proposal)

    slot = TimetableSlot(id=str(uuid.uuid4()), **payload.model_dump())
    db.add(slot)
    log_activity(
        db,
        user=current_user,
        action="timetable_slot.create",
        entity_type="timetable_slot",
        entity_id=slot.id,
        details=_slot_snapshot(slot),
    )
    _commit_slot(db, slot)
    logger.info("Timetable slot created | slot_id=%s term_id=%s", slot.id, slot.term_id)
    return serialize_slots(db, [slot])[0]


@router.get("/trainer/{trainer_id}/today", response_model=TrainerTodayOut)
def get_trainer_today(
    trainer_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> TrainerTodayOut:
    if trainer_id != current_user.id and not can_manage_timetable(current_user):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Insufficient permissions")
    return trainer_today(db, trainer_id)


@router.get("/{slot_id}", response_model=TimetableSlotOut)
def get_slot(
    slot_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> TimetableSlotOut:
    slot = _get_slot_or_404(db, slot_id)
    _ensure_can_view(slot, current_user)
    return serialize_slots(db, [slot])[0]


@router.put("/{slot_id}", response_model=TimetableSlotOut)
def reschedule_slot(
    slot_id: str,
    payload: TimetableSlotReschedule,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> TimetableSlotOut:
    slot = _get_slot_or_404(db, slot_id)
    _ensure_can_view(slot, current_user)

    data = payload.model_dump(exclude_unset=True, exclude_none=True)
    if not can_manage_timetable(current_user) and data.get("trainer_id", slot.trainer_id) != slot.trainer_id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Trainers cannot reassign their slot to another trainer",
        )

    merged = {**_slot_snapshot(slot), "term_id": slot.term_id, **data}
    if merged["term_id"] != slot.term_id or merged["class_id"] != slot.class_id:
        _ensure_class_in_term(db, term_id=merged["term_id"], class_id=merged["class_id"])
    _ensure_references(
        db, room_id=merged["room_id"], lesson_period_id=merged["lesson_period_id"], trainer_id=merged["trainer_id"]
    )
    validate_slot_placement(
        db,
        SlotProposal(
            term_id=merged["term_id"],
            class_id=merged["class_id"],
            subject_id=merged["subject_id"],
            trainer_id=merged["trainer_id"],
            room_id=merged["room_id"],
            lesson_period_id=merged["lesson_period_id"],
            day_of_week=merged["day_of_week"],
            is_online_session=slot.is_online_session,
        ),
        exclude_slot_id=slot.id,
    )

    before = _slot_snapshot(slot)
    moved = any(field in data and data[field] != getattr(slot, field) for field in PLACEMENT_FIELDS)
    for key, value in data.items():
        setattr(slot, key, value)
    if moved and "status" not in data:
        slot.status = SlotStatus.rescheduled

    log_activity(
        db,
        user=current_user,
        action="timetable_slot.update",
        entity_type="timetable_slot",
        entity_id=slot.id,
        details={"before": before, "after": _slot_snapshot(slot)},
    )
    _commit_slot(db, slot)
    logger.info("Timetable slot rescheduled | slot_id=%s user_id=%s", slot.id, current_user.id)
    return serialize_slots(db, [slot])[0]


@router.patch("/{slot_id}", response_model=TimetableSlotOut)
def patch_slot(
    slot_id: str,
    payload: TimetableSlotPatch,
    current_user: User = Depends(require_timetable_manager),
    db: Session = Depends(get_db),
) -> TimetableSlotOut:
    slot = _get_slot_or_404(db, slot_id)
    data = payload.model_dump(exclude_unset=True, exclude_none=True)
    if data.get("is_online_session"):
        ensure_online_allowed(db.get(Subject, slot.subject_id), True)

    before = _slot_snapshot(slot)
    for key, value in data.items():
        setattr(slot, key, value)
    if data:
        log_activity(
            db,
            user=current_user,
            action="timetable_slot.update",
            entity_type="timetable_slot",
            entity_id=slot.id,
            details={"before": before, "after": _slot_snapshot(slot)},
        )
    _commit_slot(db, slot)
    return serialize_slots(db, [slot])[0]


@router.delete("/{slot_id}")
def delete_slot(
    slot_id: str,
    current_user: User = Depends(require_timetable_manager),
    db: Session = Depends(get_db),
) -> dict:
    slot = _get_slot_or_404(db, slot_id)
    log_activity(
        db,
        user=current_user,
        action="timetable_slot.delete",
        entity_type="timetable_slot",
        entity_id=slot.id,
        details=_slot_snapshot(slot),
    )
    db.delete(slot)
    db.commit()
    logger.info("Timetable slot deleted | slot_id=%s user_id=%s", slot_id, current_user.id)
    return {"success": True}
