import logging

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.api.deps import get_db, require_timetable_manager
from app.models.user import User
from app.schemas.generator import GenerateTimetableRequest, GenerateTimetableResponse, PreflightReport
from app.services.timetable_generation import build_preflight_report, generate_timetable

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/timetable/generate", response_model=GenerateTimetableResponse, status_code=status.HTTP_201_CREATED)
def generate(
    payload: GenerateTimetableRequest,
    current_user: User = Depends(require_timetable_manager),
    db: Session = Depends(get_db),
) -> GenerateTimetableResponse:
    logger.info(
        "Timetable generation requested | term_id=%s sessions_per_week=%s regenerate=%s user_id=%s",
        payload.term_id,
        payload.sessions_per_week,
        payload.regenerate,
        current_user.id,
    )
    return generate_timetable(db, payload, user=current_user)


@router.get("/timetable/generate/pre-flight", response_model=PreflightReport)
def pre_flight(
    term_id: str = Query(min_length=1, max_length=36),
    current_user: User = Depends(require_timetable_manager),
    db: Session = Depends(get_db),
) -> PreflightReport:
    return build_preflight_report(db, term_id)
