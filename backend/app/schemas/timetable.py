from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from app.models.timetable_slot import SlotStatus
from app.schemas.common import validate_day_index


class TimetableSlotCreate(BaseModel):
    term_id: str = Field(min_length=1, max_length=36)
    class_id: str = Field(min_length=1, max_length=36)
    subject_id: str = Field(min_length=1, max_length=36)
    trainer_id: str = Field(min_length=1, max_length=36)
    room_id: str = Field(min_length=1, max_length=36)
    lesson_period_id: str = Field(min_length=1, max_length=36)
    day_of_week: int
    status: SlotStatus = SlotStatus.scheduled
    is_online_session: bool = False

    @field_validator("day_of_week")
    @classmethod
    def validate_day(cls, value: int) -> int:
        return validate_day_index(value)


class TimetableSlotReschedule(BaseModel):
    term_id: str | None = Field(default=None, min_length=1, max_length=36)
    class_id: str | None = Field(default=None, min_length=1, max_length=36)
    subject_id: str | None = Field(default=None, min_length=1, max_length=36)
    trainer_id: str | None = Field(default=None, min_length=1, max_length=36)
    room_id: str | None = Field(default=None, min_length=1, max_length=36)
    lesson_period_id: str | None = Field(default=None, min_length=1, max_length=36)
    day_of_week: int | None = None
    status: SlotStatus | None = None

    @field_validator("day_of_week")
    @classmethod
    def validate_day(cls, value: int | None) -> int | None:
        if value is None:
            return None
        return validate_day_index(value)


class TimetableSlotPatch(BaseModel):
    is_online_session: bool | None = None
    status: SlotStatus | None = None


class SlotRef(BaseModel):
    id: str
    name: str
    code: str | None = None


class SlotPeriod(BaseModel):
    id: str
    name: str
    start_time: str
    end_time: str
    duration: int


class TimetableSlotOut(BaseModel):
    id: str
    term_id: str
    class_id: str
    subject_id: str
    trainer_id: str
    room_id: str
    lesson_period_id: str
    day_of_week: int
    status: SlotStatus
    is_online_session: bool
    class_group: SlotRef | None = None
    subject: SlotRef | None = None
    trainer: SlotRef | None = None
    room: SlotRef | None = None
    lesson_period: SlotPeriod | None = None
    can_be_online: bool = False


class CheckInWindow(BaseModel):
    class_start_time: datetime
    notify_from: datetime
    grace_period_end: datetime
    should_notify: bool
    is_grace_period_active: bool
    has_passed_grace_period: bool


class TrainerTodayEntry(BaseModel):
    slot: TimetableSlotOut
    timing: CheckInWindow


class TrainerTodayOut(BaseModel):
    date: str
    day_of_week: int
    day_name: str
    trainer_id: str
    term_id: str | None = None
    message: str | None = None
    sessions: list[TrainerTodayEntry] = Field(default_factory=list)
