from __future__ import annotations

import logging

from sqlalchemy import inspect, text

from app import models  # noqa: F401
from app.db.base import Base
from app.db.session import engine

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS: dict[str, set[str]] = {
    "users": {"id", "email", "role", "has_timetable_admin"},
    "terms": {"id", "start_date", "end_date", "working_days", "holidays"},
    "lesson_periods": {"id", "start_time", "end_time", "duration"},
    "trainer_subject_assignments": {"id", "trainer_id", "class_subject_id", "term_id", "is_active"},
    "timetable_slots": {
        "id",
        "term_id",
        "class_id",
        "subject_id",
        "trainer_id",
        "room_id",
        "lesson_period_id",
        "day_of_week",
        "status",
        "is_online_session",
    },
}


def _add_boolean_column(table_name: str, column_name: str) -> None:
    with engine.begin() as connection:
        inspector = inspect(connection)
        if table_name not in set(inspector.get_table_names()):
            return
        column_names = {item["name"] for item in inspector.get_columns(table_name)}
        if column_name in column_names:
            return
        connection.execute(
            text(f"ALTER TABLE {table_name} ADD COLUMN {column_name} BOOLEAN NOT NULL DEFAULT FALSE")
        )
        logger.info("Schema patched | table=%s column=%s", table_name, column_name)


def _ensure_users_timetable_admin_column() -> None:
    _add_boolean_column("users", "has_timetable_admin")


def _ensure_slots_online_session_column() -> None:
    _add_boolean_column("timetable_slots", "is_online_session")


def _ensure_terms_holidays_column() -> None:
    with engine.begin() as connection:
        inspector = inspect(connection)
        if "terms" not in set(inspector.get_table_names()):
            return
        column_names = {item["name"] for item in inspector.get_columns("terms")}
        if "holidays" in column_names:
            return

        if connection.dialect.name == "postgresql":
            connection.execute(text("ALTER TABLE terms ADD COLUMN holidays JSONB NOT NULL DEFAULT '[]'::jsonb"))
            return
        connection.execute(text("ALTER TABLE terms ADD COLUMN holidays JSON NOT NULL DEFAULT '[]'"))


def _assert_required_columns() -> None:
    with engine.begin() as connection:
        inspector = inspect(connection)
        table_names = set(inspector.get_table_names())
        missing_tables = [name for name in REQUIRED_COLUMNS if name not in table_names]
        if missing_tables:
            raise RuntimeError(f"Missing required tables: {', '.join(sorted(missing_tables))}")

        missing_columns: list[str] = []
        for table_name, required in REQUIRED_COLUMNS.items():
            existing = {item["name"] for item in inspector.get_columns(table_name)}
            for column_name in sorted(required - existing):
                missing_columns.append(f"{table_name}.{column_name}")
        if missing_columns:
            raise RuntimeError(f"Missing required columns: {', '.join(missing_columns)}")


def ensure_runtime_schema_compatibility() -> None:
    try:
        # Tables first, then additive patches for databases created by older releases.
        Base.metadata.create_all(bind=engine)
        _ensure_users_timetable_admin_column()
        _ensure_slots_online_session_column()
        _ensure_terms_holidays_column()
        _assert_required_columns()
    except Exception as exc:  # pragma: no cover - runtime environment dependent
        logger.exception("Runtime schema compatibility bootstrap failed")
        raise RuntimeError("Runtime schema compatibility bootstrap failed") from exc
