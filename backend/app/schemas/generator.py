from __future__ import annotations

from pydantic import BaseModel, Field


class GenerateTimetableRequest(BaseModel):
    term_id: str = Field(min_length=1, max_length=36)
    sessions_per_week: int = Field(ge=1, le=5)
    # Validated but not used by placement.
    min_classes_per_day: int = Field(ge=1)
    regenerate: bool = False


class GenerationStats(BaseModel):
    slots_created: int
    trainer_assignments_processed: int
    assignments_fully_scheduled: int
    assignments_partially_scheduled: int
    trainers_assigned: int
    rooms_used: int
    subjects_scheduled: int
    slots_removed: int = 0


class SkippedAssignmentOut(BaseModel):
    trainer_assignment_id: str
    subject_code: str
    subject_name: str
    class_code: str
    trainer_name: str
    scheduled: int
    requested: int
    reason: str


class GenerateTimetableResponse(BaseModel):
    success: bool = True
    message: str
    stats: GenerationStats
    skipped_assignments: list[SkippedAssignmentOut] | None = None


class PreflightTermInfo(BaseModel):
    id: str
    name: str
    start_date: str
    end_date: str
    working_days: list[int]
    days_count: int


class PreflightClass(BaseModel):
    id: str
    name: str
    code: str
    department: str | None = None


class PreflightSubject(BaseModel):
    class_subject_id: str
    subject_id: str
    subject_code: str
    subject_name: str
    class_id: str
    class_code: str
    credit_hours: int
    trainer_assignment_id: str | None = None
    trainer_id: str | None = None
    trainer_name: str | None = None


class PreflightTrainer(BaseModel):
    id: str
    name: str
    department: str | None = None
    subjects_count: int


class PreflightExistingTimetable(BaseModel):
    exists: bool
    slots_count: int
    can_regenerate: bool
    days_since_term_start: int


class PreflightReport(BaseModel):
    passed: bool
    term_info: PreflightTermInfo
    classes: list[PreflightClass]
    subjects_with_trainer: list[PreflightSubject]
    subjects_without_trainer: list[PreflightSubject]
    trainers: list[PreflightTrainer]
    rooms_count: int
    lesson_periods_count: int
    existing_timetable: PreflightExistingTimetable
    errors: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)
