from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.api.deps import get_current_user, get_db, require_timetable_manager
from app.models.lesson_period import LessonPeriod
from app.models.user import User
from app.schemas.common import parse_time_to_minutes
from app.schemas.lesson_period import LessonPeriodCreate, LessonPeriodOut, LessonPeriodUpdate

router = APIRouter()


def _duration(start_time: str, end_time: str) -> int:
    duration = parse_time_to_minutes(end_time) - parse_time_to_minutes(start_time)
    if duration <= 0:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="end_time must be after start_time")
    return duration


@router.get("/", response_model=list[LessonPeriodOut])
def list_lesson_periods(
    active_only: bool = False,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> list[LessonPeriodOut]:
    statement = select(LessonPeriod).order_by(LessonPeriod.start_time)
    if active_only:
        statement = statement.where(LessonPeriod.is_active.is_(True))
    return list(db.execute(statement).scalars())


@router.post("/", response_model=LessonPeriodOut, status_code=status.HTTP_201_CREATED)
def create_lesson_period(
    payload: LessonPeriodCreate,
    current_user: User = Depends(require_timetable_manager),
    db: Session = Depends(get_db),
) -> LessonPeriodOut:
    period = LessonPeriod(**payload.model_dump(), duration=_duration(payload.start_time, payload.end_time))
    db.add(period)
    db.commit()
    db.refresh(period)
    return period


@router.put("/{period_id}", response_model=LessonPeriodOut)
def update_lesson_period(
    period_id: str,
    payload: LessonPeriodUpdate,
    current_user: User = Depends(require_timetable_manager),
    db: Session = Depends(get_db),
) -> LessonPeriodOut:
    period = db.get(LessonPeriod, period_id)
    if period is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Lesson period not found")

    data = payload.model_dump(exclude_unset=True, exclude_none=True)
    for key, value in data.items():
        setattr(period, key, value)
    period.duration = _duration(period.start_time, period.end_time)
    db.commit()
    db.refresh(period)
    return period


@router.delete("/{period_id}")
def delete_lesson_period(
    period_id: str,
    current_user: User = Depends(require_timetable_manager),
    db: Session = Depends(get_db),
) -> dict:
    period = db.get(LessonPeriod, period_id)
    if period is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Lesson period not found")
    db.delete(period)
    db.commit()
    return {"success": True}
