from datetime import date
import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select, update
from sqlalchemy.orm import Session

from app.api.deps import get_current_user, get_db, require_timetable_manager
from app.models.class_group import ClassGroup
from app.models.term import Term, TermClass
from app.models.user import User
from app.schemas.academic import ClassGroupOut, TermClassAssign, TermCreate, TermOut, TermUpdate

router = APIRouter()
logger = logging.getLogger(__name__)


def _get_term_or_404(db: Session, term_id: str) -> Term:
    term = db.get(Term, term_id)
    if term is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Term not found")
    return term


def _deactivate_other_terms(db: Session, term_id: str) -> None:
    db.execute(update(Term).where(Term.id != term_id).values(is_active=False))


def _holidays_to_json(holidays: list[date]) -> list[str]:
    return sorted({item.isoformat() for item in holidays})


@router.get("/", response_model=list[TermOut])
def list_terms(current_user: User = Depends(get_current_user), db: Session = Depends(get_db)) -> list[TermOut]:
    return list(db.execute(select(Term).order_by(Term.start_date.desc())).scalars())


@router.get("/active", response_model=TermOut)
def get_active_term(current_user: User = Depends(get_current_user), db: Session = Depends(get_db)) -> TermOut:
    term = db.execute(
        select(Term).where(Term.is_active.is_(True)).order_by(Term.start_date.desc())
    ).scalars().first()
    if term is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No active term found")
    return term


@router.post("/", response_model=TermOut, status_code=status.HTTP_201_CREATED)
def create_term(
    payload: TermCreate,
    current_user: User = Depends(require_timetable_manager),
    db: Session = Depends(get_db),
) -> TermOut:
    data = payload.model_dump()
    data["holidays"] = _holidays_to_json(payload.holidays)
    term = Term(**data)
    db.add(term)
    db.flush()
    if term.is_active:
        _deactivate_other_terms(db, term.id)
    db.commit()
    db.refresh(term)
    logger.info("Term created | term_id=%s name=%s active=%s", term.id, term.name, term.is_active)
    return term


@router.put("/{term_id}", response_model=TermOut)
def update_term(
    term_id: str,
    payload: TermUpdate,
    current_user: User = Depends(require_timetable_manager),
    db: Session = Depends(get_db),
) -> TermOut:
    term = _get_term_or_404(db, term_id)
    data = payload.model_dump(exclude_unset=True, exclude_none=True)
    if "holidays" in data:
        data["holidays"] = _holidays_to_json(payload.holidays or [])

    start_date = data.get("start_date", term.start_date)
    end_date = data.get("end_date", term.end_date)
    if end_date <= start_date:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="end_date must be after start_date")

    for key, value in data.items():
        setattr(term, key, value)
    if data.get("is_active"):
        _deactivate_other_terms(db, term.id)
    db.commit()
    db.refresh(term)
    return term


@router.delete("/{term_id}")
def delete_term(
    term_id: str,
    current_user: User = Depends(require_timetable_manager),
    db: Session = Depends(get_db),
) -> dict:
    term = _get_term_or_404(db, term_id)
    db.delete(term)
    db.commit()
    return {"success": True}


@router.get("/{term_id}/classes", response_model=list[ClassGroupOut])
def list_term_classes(
    term_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> list[ClassGroupOut]:
    _get_term_or_404(db, term_id)
    class_ids = select(TermClass.class_id).where(TermClass.term_id == term_id)
    return list(db.execute(select(ClassGroup).where(ClassGroup.id.in_(class_ids)).order_by(ClassGroup.code)).scalars())


@router.post("/{term_id}/classes", response_model=list[ClassGroupOut], status_code=status.HTTP_201_CREATED)
def assign_term_classes(
    term_id: str,
    payload: TermClassAssign,
    current_user: User = Depends(require_timetable_manager),
    db: Session = Depends(get_db),
) -> list[ClassGroupOut]:
    _get_term_or_404(db, term_id)
    requested = list(dict.fromkeys(payload.class_ids))
    found = set(db.execute(select(ClassGroup.id).where(ClassGroup.id.in_(requested))).scalars())
    missing = [class_id for class_id in requested if class_id not in found]
    if missing:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Classes not found: {', '.join(missing)}")

    already = set(db.execute(select(TermClass.class_id).where(TermClass.term_id == term_id)).scalars())
    for class_id in requested:
        if class_id not in already:
            db.add(TermClass(term_id=term_id, class_id=class_id))
    db.commit()
    logger.info("Classes assigned to term | term_id=%s added=%s", term_id, len(set(requested) - already))
    return list_term_classes(term_id, current_user=current_user, db=db)
