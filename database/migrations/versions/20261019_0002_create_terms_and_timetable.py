"""create terms, curriculum and timetable slots

Revision ID: 20261019_0002
Revises: 20261019_0001
Create Date: 2026-10-19 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

revision = "20261019_0002"
down_revision = "20261019_0001"
branch_labels = None
depends_on = None


slot_status_enum = sa.Enum("scheduled", "rescheduled", "cancelled", "completed", name="slot_status")


def upgrade() -> None:
    op.create_table(
        "terms",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=False),
        sa.Column("working_days", sa.JSON(), nullable=False),
        sa.Column("holidays", sa.JSON(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )

    op.create_table(
        "term_classes",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("term_id", sa.String(length=36), nullable=False),
        sa.Column("class_id", sa.String(length=36), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint("term_id", "class_id", name="uq_term_classes_term_class"),
    )
    op.create_index("ix_term_classes_term_id", "term_classes", ["term_id"], unique=False)
    op.create_index("ix_term_classes_class_id", "term_classes", ["class_id"], unique=False)

    op.create_table(
        "class_subjects",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("class_id", sa.String(length=36), nullable=False),
        sa.Column("subject_id", sa.String(length=36), nullable=False),
        sa.Column("term_id", sa.String(length=36), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint("class_id", "subject_id", "term_id", name="uq_class_subjects_class_subject_term"),
    )
    op.create_index("ix_class_subjects_class_id", "class_subjects", ["class_id"], unique=False)
    op.create_index("ix_class_subjects_subject_id", "class_subjects", ["subject_id"], unique=False)
    op.create_index("ix_class_subjects_term_id", "class_subjects", ["term_id"], unique=False)

    op.create_table(
        "trainer_subject_assignments",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("trainer_id", sa.String(length=36), nullable=False),
        sa.Column("class_subject_id", sa.String(length=36), nullable=False),
        sa.Column("term_id", sa.String(length=36), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.UniqueConstraint(
            "trainer_id", "class_subject_id", name="uq_trainer_assignments_trainer_class_subject"
        ),
    )
    op.create_index(
        "ix_trainer_subject_assignments_trainer_id", "trainer_subject_assignments", ["trainer_id"], unique=False
    )
    op.create_index(
        "ix_trainer_subject_assignments_class_subject_id",
        "trainer_subject_assignments",
        ["class_subject_id"],
        unique=False,
    )
    op.create_index(
        "ix_trainer_subject_assignments_term_id", "trainer_subject_assignments", ["term_id"], unique=False
    )

    op.create_table(
        "timetable_slots",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("term_id", sa.String(length=36), nullable=False),
        sa.Column("class_id", sa.String(length=36), nullable=False),
        sa.Column("subject_id", sa.String(length=36), nullable=False),
        sa.Column("trainer_id", sa.String(length=36), nullable=False),
        sa.Column("room_id", sa.String(length=36), nullable=False),
        sa.Column("lesson_period_id", sa.String(length=36), nullable=False),
        sa.Column("day_of_week", sa.Integer(), nullable=False),
        sa.Column("status", slot_status_enum, nullable=False, server_default="scheduled"),
        sa.Column("is_online_session", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.UniqueConstraint("term_id", "day_of_week", "lesson_period_id", "room_id", name="uq_timetable_slots_room"),
        sa.UniqueConstraint(
            "term_id", "day_of_week", "lesson_period_id", "trainer_id", name="uq_timetable_slots_trainer"
        ),
        sa.UniqueConstraint(
            "term_id", "day_of_week", "lesson_period_id", "class_id", name="uq_timetable_slots_class"
        ),
    )
    op.create_index("ix_timetable_slots_term_id", "timetable_slots", ["term_id"], unique=False)
    op.create_index("ix_timetable_slots_class_id", "timetable_slots", ["class_id"], unique=False)
    op.create_index("ix_timetable_slots_subject_id", "timetable_slots", ["subject_id"], unique=False)
    op.create_index("ix_timetable_slots_trainer_id", "timetable_slots", ["trainer_id"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_timetable_slots_trainer_id", table_name="timetable_slots")
    op.drop_index("ix_timetable_slots_subject_id", table_name="timetable_slots")
    op.drop_index("ix_timetable_slots_class_id", table_name="timetable_slots")
    op.drop_index("ix_timetable_slots_term_id", table_name="timetable_slots")
    op.drop_table("timetable_slots")
    op.drop_index("ix_trainer_subject_assignments_term_id", table_name="trainer_subject_assignments")
    op.drop_index("ix_trainer_subject_assignments_class_subject_id", table_name="trainer_subject_assignments")
    op.drop_index("ix_trainer_subject_assignments_trainer_id", table_name="trainer_subject_assignments")
    op.drop_table("trainer_subject_assignments")
    op.drop_index("ix_class_subjects_term_id", table_name="class_subjects")
    op.drop_index("ix_class_subjects_subject_id", table_name="class_subjects")
    op.drop_index("ix_class_subjects_class_id", table_name="class_subjects")
    op.drop_table("class_subjects")
    op.drop_index("ix_term_classes_class_id", table_name="term_classes")
    op.drop_index("ix_term_classes_term_id", table_name="term_classes")
    op.drop_table("term_classes")
    op.drop_table("terms")
    slot_status_enum.drop(op.get_bind(), checkfirst=True)
