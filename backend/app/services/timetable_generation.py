from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from datetime import date

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.config import get_settings
from app.core.exceptions import ConfigurationError, ResourceNotFoundError
from app.models.class_group import ClassGroup
from app.models.curriculum import ClassSubject, TrainerSubjectAssignment
from app.models.lesson_period import LessonPeriod
from app.models.room import Room
from app.models.subject import Subject
from app.models.term import Term, TermClass
from app.models.timetable_slot import SlotStatus, TimetableSlot
from app.models.user import User
from app.schemas.generator import (
    GenerateTimetableRequest,
    GenerateTimetableResponse,
    GenerationStats,
    PreflightClass,
    PreflightExistingTimetable,
    PreflightReport,
    PreflightSubject,
    PreflightTermInfo,
    PreflightTrainer,
    SkippedAssignmentOut,
)
from app.services.audit import log_activity
from app.services.greedy_scheduler import AssignmentRequest, GreedyScheduler
from app.services.regeneration import RegenerationGuard

logger = logging.getLogger(__name__)

NO_CLASSES_MESSAGE = "No active classes assigned to this term"
NO_ASSIGNMENTS_MESSAGE = "No trainer assignments found. Trainers must select their subjects first."
NO_ROOMS_MESSAGE = "No active rooms available"
NO_PERIODS_MESSAGE = "No active lesson periods configured"


@dataclass
class GenerationInputs:
    term: Term
    classes: dict[str, ClassGroup] = field(default_factory=dict)
    class_subjects: dict[str, ClassSubject] = field(default_factory=dict)
    subjects: dict[str, Subject] = field(default_factory=dict)
    assignments: list[TrainerSubjectAssignment] = field(default_factory=list)
    trainers: dict[str, User] = field(default_factory=dict)
    rooms: list[Room] = field(default_factory=list)
    periods: list[LessonPeriod] = field(default_factory=list)

    @property
    def working_days(self) -> list[int]:
        return list(self.term.working_days or get_settings().default_working_days)


def load_term(db: Session, term_id: str) -> Term:
    term = db.get(Term, term_id)
    if term is None:
        raise ResourceNotFoundError("Term", term_id)
    return term


def load_generation_inputs(db: Session, term: Term) -> GenerationInputs:
    inputs = GenerationInputs(term=term)

    class_ids = list(db.execute(select(TermClass.class_id).where(TermClass.term_id == term.id)).scalars())
    if class_ids:
        inputs.classes = {
            item.id: item
            for item in db.execute(
                select(ClassGroup).where(ClassGroup.id.in_(class_ids), ClassGroup.is_active.is_(True))
            ).scalars()
        }

    if inputs.classes:
        inputs.class_subjects = {
            item.id: item
            for item in db.execute(
                select(ClassSubject).where(
                    ClassSubject.term_id == term.id,
                    ClassSubject.class_id.in_(list(inputs.classes)),
                )
            ).scalars()
        }

    if inputs.class_subjects:
        inputs.assignments = list(
            db.execute(
                select(TrainerSubjectAssignment)
                .where(
                    TrainerSubjectAssignment.term_id == term.id,
                    TrainerSubjectAssignment.is_active.is_(True),
                    TrainerSubjectAssignment.class_subject_id.in_(list(inputs.class_subjects)),
                )
                .order_by(TrainerSubjectAssignment.created_at, TrainerSubjectAssignment.id)
            ).scalars()
        )
        subject_ids = {item.subject_id for item in inputs.class_subjects.values()}
        inputs.subjects = {
            item.id: item for item in db.execute(select(Subject).where(Subject.id.in_(subject_ids))).scalars()
        }

    trainer_ids = {item.trainer_id for item in inputs.assignments}
    if trainer_ids:
        inputs.trainers = {
            item.id: item for item in db.execute(select(User).where(User.id.in_(trainer_ids))).scalars()
        }

    inputs.rooms = list(db.execute(select(Room).where(Room.is_active.is_(True)).order_by(Room.name)).scalars())
    inputs.periods = list(
        db.execute(
            select(LessonPeriod).where(LessonPeriod.is_active.is_(True)).order_by(LessonPeriod.start_time)
        ).scalars()
    )
    return inputs


def build_assignment_requests(inputs: GenerationInputs) -> list[AssignmentRequest]:
    requests: list[AssignmentRequest] = []
    for assignment in inputs.assignments:
        class_subject = inputs.class_subjects[assignment.class_subject_id]
        subject = inputs.subjects.get(class_subject.subject_id)
        class_group = inputs.classes[class_subject.class_id]
        trainer = inputs.trainers.get(assignment.trainer_id)
        requests.append(
            AssignmentRequest(
                assignment_id=assignment.id,
                trainer_id=assignment.trainer_id,
                class_id=class_group.id,
                subject_id=class_subject.subject_id,
                trainer_name=trainer.name if trainer is not None else assignment.trainer_id,
                class_code=class_group.code,
                subject_code=subject.code if subject is not None else class_subject.subject_id,
                subject_name=subject.name if subject is not None else class_subject.subject_id,
            )
        )
    return requests


def ensure_generation_ready(inputs: GenerationInputs) -> None:
    if not inputs.classes:
        raise ConfigurationError(NO_CLASSES_MESSAGE, details={"term_id": inputs.term.id})
    if not inputs.assignments:
        raise ConfigurationError(NO_ASSIGNMENTS_MESSAGE, details={"term_id": inputs.term.id})
    if not inputs.rooms:
        raise ConfigurationError(NO_ROOMS_MESSAGE)
    if not inputs.periods:
        raise ConfigurationError(NO_PERIODS_MESSAGE)


def generate_timetable(
    db: Session,
    payload: GenerateTimetableRequest,
    *,
    user: User | None = None,
    rng: random.Random | None = None,
    today: date | None = None,
) -> GenerateTimetableResponse:
    """Build and persist a term timetable in one transaction.

    Every precondition and policy check runs before the first write. The
    purge of old slots (when regenerating) and the batch insert of new ones
    commit together, so a storage failure leaves the previous timetable
    intact.
    """
    settings = get_settings()
    term = load_term(db, payload.term_id)

    guard = RegenerationGuard(db, term, window_days=settings.regeneration_window_days, today=today)
    guard.authorize(payload.regenerate)

    inputs = load_generation_inputs(db, term)
    ensure_generation_ready(inputs)

    scheduler = GreedyScheduler(
        working_days=inputs.working_days,
        period_ids=[period.id for period in inputs.periods],
        room_ids=[room.id for room in inputs.rooms],
        sessions_per_week=payload.sessions_per_week,
        rng=rng,
    )
    result = scheduler.run(build_assignment_requests(inputs))

    removed = 0
    try:
        if payload.regenerate:
            removed = guard.purge()
        db.add_all(
            TimetableSlot(
                term_id=term.id,
                class_id=slot.class_id,
                subject_id=slot.subject_id,
                trainer_id=slot.trainer_id,
                room_id=slot.room_id,
                lesson_period_id=slot.lesson_period_id,
                day_of_week=slot.day_of_week,
                status=SlotStatus(slot.status),
                is_online_session=slot.is_online_session,
            )
            for slot in result.slots
        )
        log_activity(
            db,
            user=user,
            action="timetable.generate",
            entity_type="term",
            entity_id=term.id,
            details={
                "sessions_per_week": payload.sessions_per_week,
                "min_classes_per_day": payload.min_classes_per_day,
                "regenerate": payload.regenerate,
                "slots_created": len(result.slots),
                "slots_removed": removed,
                "skipped": len(result.skipped),
            },
        )
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Timetable persistence failed | term_id=%s", term.id)
        raise

    logger.info(
        "Timetable generated | term_id=%s slots=%s removed=%s skipped=%s",
        term.id,
        len(result.slots),
        removed,
        len(result.skipped),
    )

    skipped = [
        SkippedAssignmentOut(
            trainer_assignment_id=item.assignment_id,
            subject_code=item.subject_code,
            subject_name=item.subject_name,
            class_code=item.class_code,
            trainer_name=item.trainer_name,
            scheduled=item.scheduled,
            requested=item.requested,
            reason=item.reason,
        )
        for item in result.skipped
    ]
    return GenerateTimetableResponse(
        message=(
            f"Successfully generated timetable for {term.name}. All slots created as physical classes - "
            "admins can toggle specific slots to online as needed."
        ),
        stats=GenerationStats(**result.stats(), slots_removed=removed),
        skipped_assignments=skipped or None,
    )


def build_preflight_report(db: Session, term_id: str, *, today: date | None = None) -> PreflightReport:
    settings = get_settings()
    term = load_term(db, term_id)
    inputs = load_generation_inputs(db, term)
    guard = RegenerationGuard(db, term, window_days=settings.regeneration_window_days, today=today)

    assigned_by_class_subject: dict[str, TrainerSubjectAssignment] = {}
    for assignment in inputs.assignments:
        assigned_by_class_subject.setdefault(assignment.class_subject_id, assignment)

    with_trainer: list[PreflightSubject] = []
    without_trainer: list[PreflightSubject] = []
    for class_subject in inputs.class_subjects.values():
        subject = inputs.subjects.get(class_subject.subject_id)
        class_group = inputs.classes[class_subject.class_id]
        assignment = assigned_by_class_subject.get(class_subject.id)
        trainer = inputs.trainers.get(assignment.trainer_id) if assignment is not None else None
        entry = PreflightSubject(
            class_subject_id=class_subject.id,
            subject_id=class_subject.subject_id,
            subject_code=subject.code if subject is not None else "",
            subject_name=subject.name if subject is not None else "",
            class_id=class_group.id,
            class_code=class_group.code,
            credit_hours=subject.credit_hours if subject is not None else 0,
            trainer_assignment_id=assignment.id if assignment is not None else None,
            trainer_id=assignment.trainer_id if assignment is not None else None,
            trainer_name=trainer.name if trainer is not None else None,
        )
        (with_trainer if assignment is not None else without_trainer).append(entry)

    subject_counts: dict[str, int] = {}
    for assignment in inputs.assignments:
        subject_counts[assignment.trainer_id] = subject_counts.get(assignment.trainer_id, 0) + 1
    trainers = [
        PreflightTrainer(
            id=trainer_id,
            name=inputs.trainers[trainer_id].name if trainer_id in inputs.trainers else trainer_id,
            department=inputs.trainers[trainer_id].department if trainer_id in inputs.trainers else None,
            subjects_count=count,
        )
        for trainer_id, count in subject_counts.items()
    ]

    existing = guard.existing_slot_count()
    days_since_start = guard.days_since_start()
    can_regenerate = guard.can_regenerate()
    working_days = inputs.working_days

    errors: list[str] = []
    warnings: list[str] = []
    if not inputs.classes:
        errors.append(NO_CLASSES_MESSAGE)
    if not inputs.class_subjects:
        errors.append("No subjects assigned to classes for this term. Admin must attach subjects to classes first.")
    if without_trainer:
        errors.append(
            f"{len(without_trainer)} subject(s) have no trainer assigned. "
            "Trainers must select their subjects before generating."
        )
    if not inputs.rooms:
        errors.append("No active rooms available. Add rooms before generating.")
    if not inputs.periods:
        errors.append("No lesson periods configured. Add lesson periods before generating.")
    if not trainers and inputs.class_subjects:
        errors.append("No trainers have selected subjects for this term.")
    if existing > 0 and not can_regenerate:
        errors.append(
            f"Cannot regenerate: Term started {days_since_start} days ago "
            f"(limit is {settings.regeneration_window_days} days)."
        )

    if len(inputs.rooms) < len(trainers):
        warnings.append(f"Only {len(inputs.rooms)} room(s) for {len(trainers)} trainer(s). Some sessions may conflict.")
    if len(inputs.periods) < 4:
        warnings.append(
            f"Only {len(inputs.periods)} lesson period(s). Consider adding more for flexible scheduling."
        )
    slots_per_week = len(working_days) * len(inputs.periods)
    for trainer in trainers:
        if trainer.subjects_count > slots_per_week:
            warnings.append(
                f"{trainer.name} has {trainer.subjects_count} subjects but only {slots_per_week} slots/week available."
            )

    return PreflightReport(
        passed=not errors,
        term_info=PreflightTermInfo(
            id=term.id,
            name=term.name,
            start_date=term.start_date.isoformat(),
            end_date=term.end_date.isoformat(),
            working_days=working_days,
            days_count=len(working_days),
        ),
        classes=[
            PreflightClass(id=item.id, name=item.name, code=item.code, department=item.department)
            for item in inputs.classes.values()
        ],
        subjects_with_trainer=with_trainer,
        subjects_without_trainer=without_trainer,
        trainers=trainers,
        rooms_count=len(inputs.rooms),
        lesson_periods_count=len(inputs.periods),
        existing_timetable=PreflightExistingTimetable(
            exists=existing > 0,
            slots_count=existing,
            can_regenerate=can_regenerate,
            days_since_term_start=days_since_start,
        ),
        errors=errors,
        warnings=warnings,
    )
