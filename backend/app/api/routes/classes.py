import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from app.api.deps import get_current_user, get_db, require_timetable_manager
from app.models.class_group import ClassGroup
from app.models.curriculum import ClassSubject, TrainerSubjectAssignment
from app.models.subject import Subject
from app.models.term import Term
from app.models.user import User
from app.schemas.academic import (
    ClassGroupCreate,
    ClassGroupOut,
    ClassGroupUpdate,
    ClassSubjectCreate,
    ClassSubjectOut,
)

router = APIRouter()
logger = logging.getLogger(__name__)


def _get_class_or_404(db: Session, class_id: str) -> ClassGroup:
    class_group = db.get(ClassGroup, class_id)
    if class_group is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Class not found")
    return class_group


@router.get("/", response_model=list[ClassGroupOut])
def list_classes(
    department: str | None = Query(default=None, max_length=200),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> list[ClassGroupOut]:
    statement = select(ClassGroup).order_by(ClassGroup.code)
    if department:
        statement = statement.where(ClassGroup.department == department)
    return list(db.execute(statement).scalars())


@router.post("/", response_model=ClassGroupOut, status_code=status.HTTP_201_CREATED)
def create_class(
    payload: ClassGroupCreate,
    current_user: User = Depends(require_timetable_manager),
    db: Session = Depends(get_db),
) -> ClassGroupOut:
    existing = db.execute(select(ClassGroup).where(ClassGroup.code == payload.code)).scalar_one_or_none()
    if existing:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Class code already exists")
    class_group = ClassGroup(**payload.model_dump())
    db.add(class_group)
    db.commit()
    db.refresh(class_group)
    return class_group


@router.put("/{class_id}", response_model=ClassGroupOut)
def update_class(
    class_id: str,
    payload: ClassGroupUpdate,
    current_user: User = Depends(require_timetable_manager),
    db: Session = Depends(get_db),
) -> ClassGroupOut:
    class_group = _get_class_or_404(db, class_id)
    for key, value in payload.model_dump(exclude_unset=True).items():
        setattr(class_group, key, value)
    db.commit()
    db.refresh(class_group)
    return class_group


@router.delete("/{class_id}")
def delete_class(
    class_id: str,
    current_user: User = Depends(require_timetable_manager),
    db: Session = Depends(get_db),
) -> dict:
    class_group = _get_class_or_404(db, class_id)
    db.delete(class_group)
    db.commit()
    return {"success": True}


@router.get("/{class_id}/subjects", response_model=list[ClassSubjectOut])
def list_class_subjects(
    class_id: str,
    term_id: str | None = Query(default=None, max_length=36),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> list[ClassSubjectOut]:
    _get_class_or_404(db, class_id)
    statement = select(ClassSubject).where(ClassSubject.class_id == class_id)
    if term_id:
        statement = statement.where(ClassSubject.term_id == term_id)
    return list(db.execute(statement).scalars())


@router.post("/{class_id}/subjects", response_model=ClassSubjectOut, status_code=status.HTTP_201_CREATED)
def attach_class_subject(
    class_id: str,
    payload: ClassSubjectCreate,
    current_user: User = Depends(require_timetable_manager),
    db: Session = Depends(get_db),
) -> ClassSubjectOut:
    _get_class_or_404(db, class_id)
    if db.get(Subject, payload.subject_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Subject not found")
    if db.get(Term, payload.term_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Term not found")

    existing = db.execute(
        select(ClassSubject).where(
            ClassSubject.class_id == class_id,
            ClassSubject.subject_id == payload.subject_id,
            ClassSubject.term_id == payload.term_id,
        )
    ).scalar_one_or_none()
    if existing:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Subject already assigned to class for this term")

    class_subject = ClassSubject(class_id=class_id, subject_id=payload.subject_id, term_id=payload.term_id)
    db.add(class_subject)
    db.commit()
    db.refresh(class_subject)
    logger.info(
        "Subject attached to class | class_id=%s subject_id=%s term_id=%s",
        class_id,
        payload.subject_id,
        payload.term_id,
    )
    return class_subject


@router.delete("/{class_id}/subjects/{class_subject_id}")
def detach_class_subject(
    class_id: str,
    class_subject_id: str,
    current_user: User = Depends(require_timetable_manager),
    db: Session = Depends(get_db),
) -> dict:
    class_subject = db.get(ClassSubject, class_subject_id)
    if class_subject is None or class_subject.class_id != class_id:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Class subject not found")
    db.execute(delete(TrainerSubjectAssignment).where(TrainerSubjectAssignment.class_subject_id == class_subject_id))
    db.delete(class_subject)
    db.commit()
    return {"success": True}
