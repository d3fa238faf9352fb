from __future__ import annotations

from datetime import date

from pydantic import BaseModel, Field, field_validator, model_validator


def _normalize_code(value: str) -> str:
    code = value.strip().upper()
    if not code:
        raise ValueError("Code cannot be empty")
    return code


class SubjectBase(BaseModel):
    code: str = Field(min_length=1, max_length=50)
    name: str = Field(min_length=1, max_length=200)
    department: str | None = Field(default=None, max_length=200)
    credit_hours: int = Field(default=3, ge=0, le=40)
    can_be_online: bool = False

    @field_validator("code")
    @classmethod
    def normalize_code(cls, value: str) -> str:
        return _normalize_code(value)


class SubjectCreate(SubjectBase):
    pass


class SubjectUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=200)
    department: str | None = Field(default=None, max_length=200)
    credit_hours: int | None = Field(default=None, ge=0, le=40)
    can_be_online: bool | None = None


class SubjectOut(SubjectBase):
    id: str

    model_config = {"from_attributes": True}


class ClassGroupBase(BaseModel):
    code: str = Field(min_length=1, max_length=50)
    name: str = Field(min_length=1, max_length=200)
    department: str | None = Field(default=None, max_length=200)
    is_active: bool = True

    @field_validator("code")
    @classmethod
    def normalize_code(cls, value: str) -> str:
        return _normalize_code(value)


class ClassGroupCreate(ClassGroupBase):
    pass


class ClassGroupUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=200)
    department: str | None = Field(default=None, max_length=200)
    is_active: bool | None = None


class ClassGroupOut(ClassGroupBase):
    id: str

    model_config = {"from_attributes": True}


class ClassSubjectCreate(BaseModel):
    subject_id: str = Field(min_length=1, max_length=36)
    term_id: str = Field(min_length=1, max_length=36)


class ClassSubjectOut(BaseModel):
    id: str
    class_id: str
    subject_id: str
    term_id: str

    model_config = {"from_attributes": True}


class TermBase(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    start_date: date
    end_date: date
    working_days: list[int] = Field(default_factory=lambda: [1, 2, 3, 4, 5], min_length=1, max_length=7)
    holidays: list[date] = Field(default_factory=list, max_length=366)
    is_active: bool = False

    @field_validator("working_days")
    @classmethod
    def validate_working_days(cls, value: list[int]) -> list[int]:
        if any(day < 0 or day > 6 for day in value):
            raise ValueError("Working days must be between 0 (Sunday) and 6 (Saturday)")
        return sorted(set(value))

    @model_validator(mode="after")
    def validate_dates(self) -> "TermBase":
        if self.end_date <= self.start_date:
            raise ValueError("end_date must be after start_date")
        for holiday in self.holidays:
            if holiday < self.start_date or holiday > self.end_date:
                raise ValueError("Holidays must fall within the term dates")
        return self


class TermCreate(TermBase):
    pass


class TermUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=100)
    start_date: date | None = None
    end_date: date | None = None
    working_days: list[int] | None = Field(default=None, min_length=1, max_length=7)
    holidays: list[date] | None = Field(default=None, max_length=366)
    is_active: bool | None = None

    @field_validator("working_days")
    @classmethod
    def validate_working_days(cls, value: list[int] | None) -> list[int] | None:
        if value is None:
            return None
        if any(day < 0 or day > 6 for day in value):
            raise ValueError("Working days must be between 0 (Sunday) and 6 (Saturday)")
        return sorted(set(value))


class TermOut(TermBase):
    id: str

    model_config = {"from_attributes": True}


class TermClassAssign(BaseModel):
    class_ids: list[str] = Field(min_length=1, max_length=500)


class TrainerAssignmentCreate(BaseModel):
    class_subject_id: str = Field(min_length=1, max_length=36)
    trainer_id: str | None = Field(default=None, min_length=1, max_length=36)


class TrainerAssignmentOut(BaseModel):
    id: str
    trainer_id: str
    class_subject_id: str
    term_id: str
    is_active: bool

    model_config = {"from_attributes": True}
