from pydantic import BaseModel, Field, field_validator, model_validator

from app.schemas.common import TIME_PATTERN, parse_time_to_minutes


class LessonPeriodBase(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    start_time: str
    end_time: str
    is_active: bool = True

    @field_validator("start_time", "end_time")
    @classmethod
    def validate_time_format(cls, value: str) -> str:
        if not TIME_PATTERN.match(value):
            raise ValueError("Time must be in HH:MM 24-hour format")
        return value

    @model_validator(mode="after")
    def validate_order(self) -> "LessonPeriodBase":
        if parse_time_to_minutes(self.end_time) <= parse_time_to_minutes(self.start_time):
            raise ValueError("end_time must be after start_time")
        return self


class LessonPeriodCreate(LessonPeriodBase):
    pass


class LessonPeriodUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=100)
    start_time: str | None = None
    end_time: str | None = None
    is_active: bool | None = None

    @field_validator("start_time", "end_time")
    @classmethod
    def validate_time_format(cls, value: str | None) -> str | None:
        if value is not None and not TIME_PATTERN.match(value):
            raise ValueError("Time must be in HH:MM 24-hour format")
        return value


class LessonPeriodOut(LessonPeriodBase):
    id: str
    duration: int

    model_config = {"from_attributes": True}
