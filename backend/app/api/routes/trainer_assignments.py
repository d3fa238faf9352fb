import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.api.deps import can_manage_timetable, get_current_user, get_db
from app.models.curriculum import ClassSubject, TrainerSubjectAssignment
from app.models.user import User, UserRole
from app.schemas.academic import TrainerAssignmentCreate, TrainerAssignmentOut

router = APIRouter()
logger = logging.getLogger(__name__)


def _resolve_trainer(db: Session, payload: TrainerAssignmentCreate, current_user: User) -> User:
    """Trainers select subjects for themselves; managers may assign anyone."""
    trainer_id = payload.trainer_id or current_user.id
    if trainer_id != current_user.id and not can_manage_timetable(current_user):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Trainers can only select subjects for themselves")

    trainer = db.get(User, trainer_id)
    if trainer is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Trainer not found")
    if trainer.role != UserRole.trainer:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Assigned user must be a trainer")
    return trainer


@router.get("/", response_model=list[TrainerAssignmentOut])
def list_trainer_assignments(
    term_id: str | None = Query(default=None, max_length=36),
    trainer_id: str | None = Query(default=None, max_length=36),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> list[TrainerAssignmentOut]:
    statement = select(TrainerSubjectAssignment).order_by(TrainerSubjectAssignment.created_at)
    if not can_manage_timetable(current_user):
        statement = statement.where(TrainerSubjectAssignment.trainer_id == current_user.id)
    if term_id:
        statement = statement.where(TrainerSubjectAssignment.term_id == term_id)
    if trainer_id:
        statement = statement.where(TrainerSubjectAssignment.trainer_id == trainer_id)
    return list(db.execute(statement).scalars())


@router.post("/", response_model=TrainerAssignmentOut, status_code=status.HTTP_201_CREATED)
def create_trainer_assignment(
    payload: TrainerAssignmentCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> TrainerAssignmentOut:
    trainer = _resolve_trainer(db, payload, current_user)
    class_subject = db.get(ClassSubject, payload.class_subject_id)
    if class_subject is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Class subject not found")

    existing = db.execute(
        select(TrainerSubjectAssignment).where(
            TrainerSubjectAssignment.trainer_id == trainer.id,
            TrainerSubjectAssignment.class_subject_id == class_subject.id,
        )
    ).scalar_one_or_none()
    if existing:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Trainer already assigned to this subject")

    assignment = TrainerSubjectAssignment(
        trainer_id=trainer.id,
        class_subject_id=class_subject.id,
        term_id=class_subject.term_id,
    )
    db.add(assignment)
    db.commit()
    db.refresh(assignment)
    logger.info(
        "Trainer assignment created | assignment_id=%s trainer_id=%s class_subject_id=%s",
        assignment.id,
        trainer.id,
        class_subject.id,
    )
    return assignment


@router.delete("/{assignment_id}")
def delete_trainer_assignment(
    assignment_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict:
    assignment = db.get(TrainerSubjectAssignment, assignment_id)
    if assignment is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Trainer assignment not found")
    if assignment.trainer_id != current_user.id and not can_manage_timetable(current_user):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Insufficient permissions")
    db.delete(assignment)
    db.commit()
    return {"success": True}
