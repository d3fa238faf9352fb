import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.api.deps import get_db, require_roles
from app.models.user import User, UserRole
from app.schemas.user import TimetableAdminUpdate, UserOut
from app.services.audit import log_activity

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/", response_model=list[UserOut])
def list_users(
    role: UserRole | None = Query(default=None),
    current_user: User = Depends(require_roles(UserRole.admin)),
    db: Session = Depends(get_db),
) -> list[UserOut]:
    statement = select(User).order_by(User.name)
    if role is not None:
        statement = statement.where(User.role == role)
    return list(db.execute(statement).scalars())


@router.put("/{user_id}/timetable-admin", response_model=UserOut)
def set_timetable_admin(
    user_id: str,
    payload: TimetableAdminUpdate,
    current_user: User = Depends(require_roles(UserRole.admin)),
    db: Session = Depends(get_db),
) -> UserOut:
    user = db.get(User, user_id)
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")

    user.has_timetable_admin = payload.has_timetable_admin
    log_activity(
        db,
        user=current_user,
        action="user.timetable_admin",
        entity_type="user",
        entity_id=user.id,
        details={"has_timetable_admin": payload.has_timetable_admin},
    )
    db.commit()
    db.refresh(user)
    logger.info(
        "Timetable admin flag changed | user_id=%s enabled=%s by=%s",
        user.id,
        user.has_timetable_admin,
        current_user.id,
    )
    return user
