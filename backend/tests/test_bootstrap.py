import pytest
from sqlalchemy import create_engine, inspect, text
from sqlalchemy.pool import StaticPool

from app.db import bootstrap


def _raise_error(message: str):
    raise RuntimeError(message)


def test_runtime_schema_bootstrap_raises_on_validation_failure(monkeypatch):
    monkeypatch.setattr(bootstrap.Base.metadata, "create_all", lambda bind: None)
    monkeypatch.setattr(bootstrap, "_ensure_users_timetable_admin_column", lambda: None)
    monkeypatch.setattr(bootstrap, "_ensure_slots_online_session_column", lambda: None)
    monkeypatch.setattr(bootstrap, "_ensure_terms_holidays_column", lambda: None)
    monkeypatch.setattr(
        bootstrap,
        "_assert_required_columns",
        lambda: _raise_error("missing required schema"),
    )

    with pytest.raises(RuntimeError, match="Runtime schema compatibility bootstrap failed"):
        bootstrap.ensure_runtime_schema_compatibility()


def test_legacy_tables_gain_missing_columns(monkeypatch):
    engine = create_engine(
        "sqlite+pysqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    with engine.begin() as connection:
        connection.execute(
            text(
                "CREATE TABLE users (id VARCHAR(36) PRIMARY KEY, name VARCHAR(200), email VARCHAR(255), "
                "hashed_password VARCHAR(255), role VARCHAR(20), department VARCHAR(200), is_active BOOLEAN)"
            )
        )
        connection.execute(
            text(
                "CREATE TABLE terms (id VARCHAR(36) PRIMARY KEY, name VARCHAR(100), start_date DATE, "
                "end_date DATE, working_days JSON, is_active BOOLEAN)"
            )
        )
    monkeypatch.setattr(bootstrap, "engine", engine)

    bootstrap.ensure_runtime_schema_compatibility()

    inspector = inspect(engine)
    assert "has_timetable_admin" in {column["name"] for column in inspector.get_columns("users")}
    assert "holidays" in {column["name"] for column in inspector.get_columns("terms")}
    assert "timetable_slots" in inspector.get_table_names()
