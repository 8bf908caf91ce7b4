from pydantic import BaseModel, Field

from sukuu.models.timetable import DayOfWeek
from sukuu.schemas.common import OptionalText

# Time fields are parsed by the conflict service, which reports bad values
# as 400 field errors.


class SchoolPeriodCreate(BaseModel):
    name: str = Field(min_length=1, max_length=50)
    start_time: str = Field(max_length=16)
    end_time: str = Field(max_length=16)
    sort_order: int = Field(ge=0)
    is_break: bool = False


class SchoolPeriodUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=50)
    start_time: str | None = Field(default=None, max_length=16)
    end_time: str | None = Field(default=None, max_length=16)
    sort_order: int | None = Field(default=None, ge=0)
    is_break: bool | None = None


class SchoolPeriodOut(BaseModel):
    id: str
    school_id: str
    name: str
    start_time: str
    end_time: str
    sort_order: int
    is_break: bool

    model_config = {"from_attributes": True}


class TimetableSlotCreate(BaseModel):
    class_id: str = Field(min_length=1, max_length=36)
    subject_id: str = Field(min_length=1, max_length=36)
    teacher_id: str = Field(min_length=1, max_length=36)
    day_of_week: DayOfWeek
    start_time: str = Field(max_length=16)
    end_time: str = Field(max_length=16)
    room: OptionalText = Field(default=None, max_length=50)


class TimetableSlotUpdate(BaseModel):
    """Day and times are fixed once a slot exists; only who/what/where can change."""

    subject_id: str | None = Field(default=None, min_length=1, max_length=36)
    teacher_id: str | None = Field(default=None, min_length=1, max_length=36)
    room: OptionalText = Field(default=None, max_length=50)


class TimetableSlotOut(BaseModel):
    id: str
    school_id: str
    class_id: str
    subject_id: str
    teacher_id: str
    day_of_week: DayOfWeek
    start_time: str
    end_time: str
    room: str | None

    model_config = {"from_attributes": True}
