import os
from datetime import date, timedelta
from types import SimpleNamespace

# Settings are cached on first import; point the app engine at SQLite before that happens.
os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite://")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from app.api.deps import get_db  # noqa: E402
from app.db.base import Base  # noqa: E402
from app.main import app  # noqa: E402
from app.models.class_group import ClassGroup  # noqa: E402
from app.models.curriculum import ClassSubject, TrainerSubjectAssignment  # noqa: E402
from app.models.lesson_period import LessonPeriod  # noqa: E402
from app.models.room import Room  # noqa: E402
from app.models.subject import Subject  # noqa: E402
from app.models.term import Term, TermClass  # noqa: E402
from app.models.user import User, UserRole  # noqa: E402
from app.schemas.common import parse_time_to_minutes  # noqa: E402


@pytest.fixture()
def session_factory():
    engine = create_engine(
        "sqlite+pysqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture()
def db_session(session_factory):
    db = session_factory()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture()
def seed_term(db_session):
    """Build a term with classes, subjects, trainers, rooms and periods.

    Returns a namespace of the created rows; every class gets every subject
    and trainer ``i`` teaches subject ``i`` to every class.
    """

    def _seed(
        *,
        working_days=(1, 2, 3, 4, 5),
        periods=(("08:00", "09:00"), ("09:00", "10:00")),
        rooms=1,
        classes=1,
        subjects=1,
        start_date=None,
        online_subjects=(),
    ):
        term = Term(
            name="Term 1",
            start_date=start_date or date.today(),
            end_date=(start_date or date.today()) + timedelta(days=120),
            working_days=list(working_days),
            holidays=[],
            is_active=True,
        )
        db_session.add(term)
        db_session.flush()

        room_rows = [Room(name=f"Room {index + 1}") for index in range(rooms)]
        period_rows = [
            LessonPeriod(
                name=f"Period {index + 1}",
                start_time=start,
                end_time=end,
                duration=parse_time_to_minutes(end) - parse_time_to_minutes(start),
            )
            for index, (start, end) in enumerate(periods)
        ]
        class_rows = [ClassGroup(code=f"CLS{index + 1}", name=f"Class {index + 1}") for index in range(classes)]
        subject_rows = [
            Subject(code=f"SUB{index + 1}", name=f"Subject {index + 1}", can_be_online=index in online_subjects)
            for index in range(subjects)
        ]
        trainer_rows = [
            User(
                name=f"Trainer {index + 1}",
                email=f"trainer{index + 1}@example.com",
                hashed_password="not-a-real-hash",
                role=UserRole.trainer,
            )
            for index in range(subjects)
        ]
        db_session.add_all(room_rows + period_rows + class_rows + subject_rows + trainer_rows)
        db_session.flush()

        class_subjects = []
        assignments = []
        for class_group in class_rows:
            db_session.add(TermClass(term_id=term.id, class_id=class_group.id))
            for subject, trainer in zip(subject_rows, trainer_rows):
                class_subject = ClassSubject(class_id=class_group.id, subject_id=subject.id, term_id=term.id)
                db_session.add(class_subject)
                db_session.flush()
                class_subjects.append(class_subject)
                assignment = TrainerSubjectAssignment(
                    trainer_id=trainer.id,
                    class_subject_id=class_subject.id,
                    term_id=term.id,
                )
                db_session.add(assignment)
                assignments.append(assignment)
        db_session.commit()

        return SimpleNamespace(
            term=term,
            rooms=room_rows,
            periods=period_rows,
            classes=class_rows,
            subjects=subject_rows,
            trainers=trainer_rows,
            class_subjects=class_subjects,
            assignments=assignments,
        )

    return _seed


@pytest.fixture()
def client(session_factory):
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()
