"""Seed a demo term with catalog data, trainer selections and a generated timetable.

Run:
  PYTHONPATH=backend python scripts/seed_demo_data.py
"""

from __future__ import annotations

import os
from datetime import date, timedelta

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.core.exceptions import AppError
from app.core.security import get_password_hash
from app.db.session import SessionLocal
from app.models.class_group import ClassGroup
from app.models.curriculum import ClassSubject, TrainerSubjectAssignment
from app.models.lesson_period import LessonPeriod
from app.models.room import Room, RoomType
from app.models.subject import Subject
from app.models.term import Term, TermClass
from app.models.user import User, UserRole
from app.schemas.generator import GenerateTimetableRequest
from app.services.timetable_generation import generate_timetable

DEFAULT_PASSWORD = os.getenv("DEMO_PASSWORD", "DemoPass123!")
DEPARTMENT = "ICT"

DEMO_USERS = [
    ("Demo Admin", "admin.demo@example.com", UserRole.admin),
    ("Demo Trainer One", "trainer1.demo@example.com", UserRole.trainer),
    ("Demo Trainer Two", "trainer2.demo@example.com", UserRole.trainer),
]
ROOMS = [("Room 101", 30, RoomType.classroom), ("Room 102", 30, RoomType.classroom), ("Lab A", 20, RoomType.lab)]
PERIODS = [("Morning", "08:00", "10:00"), ("Midday", "10:30", "12:30"), ("Afternoon", "14:00", "16:00")]
SUBJECTS = [("NET101", "Networking Basics", True), ("WEB110", "Web Development", False)]
CLASSES = [("ICT-A", "ICT Level 5 A"), ("ICT-B", "ICT Level 5 B")]


def _minutes(value: str) -> int:
    hours, minutes = value.split(":")
    return int(hours) * 60 + int(minutes)


def _upsert_user(session: Session, name: str, email: str, role: UserRole) -> User:
    user = session.execute(select(User).where(User.email == email)).scalar_one_or_none()
    if user is None:
        user = User(name=name, email=email, role=role, department=DEPARTMENT)
        session.add(user)
    user.hashed_password = get_password_hash(DEFAULT_PASSWORD)
    user.is_active = True
    return user


def _get_or_create(session: Session, model, lookup: dict, **values):
    instance = session.execute(select(model).filter_by(**lookup)).scalar_one_or_none()
    if instance is None:
        instance = model(**lookup, **values)
        session.add(instance)
        session.flush()
    return instance


def _seed(session: Session) -> tuple[Term, dict[str, User]]:
    users = {email: _upsert_user(session, name, email, role) for name, email, role in DEMO_USERS}
    session.flush()

    for name, capacity, room_type in ROOMS:
        _get_or_create(session, Room, {"name": name}, capacity=capacity, room_type=room_type)
    for name, start, end in PERIODS:
        _get_or_create(
            session,
            LessonPeriod,
            {"start_time": start},
            name=name,
            end_time=end,
            duration=_minutes(end) - _minutes(start),
        )
    subjects = [
        _get_or_create(session, Subject, {"code": code}, name=name, department=DEPARTMENT, can_be_online=online)
        for code, name, online in SUBJECTS
    ]
    classes = [
        _get_or_create(session, ClassGroup, {"code": code}, name=name, department=DEPARTMENT)
        for code, name in CLASSES
    ]

    monday = date.today() - timedelta(days=date.today().weekday())
    term = _get_or_create(
        session,
        Term,
        {"name": "Demo Term"},
        start_date=monday,
        end_date=monday + timedelta(weeks=14),
        working_days=[1, 2, 3, 4, 5],
        holidays=[],
    )
    term.is_active = True
    for other in session.execute(select(Term).where(Term.id != term.id, Term.is_active.is_(True))).scalars():
        other.is_active = False

    trainers = [user for user in users.values() if user.role == UserRole.trainer]
    for class_group in classes:
        _get_or_create(session, TermClass, {"term_id": term.id, "class_id": class_group.id})
        for trainer, subject in zip(trainers, subjects):
            class_subject = _get_or_create(
                session,
                ClassSubject,
                {"class_id": class_group.id, "subject_id": subject.id, "term_id": term.id},
            )
            _get_or_create(
                session,
                TrainerSubjectAssignment,
                {"trainer_id": trainer.id, "class_subject_id": class_subject.id},
                term_id=term.id,
            )
    session.commit()
    return term, users


def main() -> None:
    with SessionLocal() as session:
        term, users = _seed(session)
        admin = users[DEMO_USERS[0][1]]
        payload = GenerateTimetableRequest(
            term_id=term.id, sessions_per_week=2, min_classes_per_day=1, regenerate=True
        )
        try:
            result = generate_timetable(session, payload, user=admin)
        except AppError as exc:
            print(f"Timetable generation skipped: {exc.message}")
        else:
            print(result.message)
            print(f"  slots created: {result.stats.slots_created}")

    print("\nDemo accounts ready:")
    for name, email, role in DEMO_USERS:
        print(f"  - {name}: {email} | role={role.value}")
    print(f"\nPassword for all demo accounts: {DEFAULT_PASSWORD}")


if __name__ == "__main__":
    main()
