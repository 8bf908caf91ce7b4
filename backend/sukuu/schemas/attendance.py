from datetime import date

from pydantic import BaseModel, Field

from sukuu.models.assessment import TermPeriod
from sukuu.models.attendance import AttendanceStatus
from sukuu.schemas.common import ACADEMIC_YEAR_PATTERN, OptionalText


class AttendanceRecordIn(BaseModel):
    student_id: str = Field(min_length=1, max_length=36)
    status: AttendanceStatus
    remarks: OptionalText = Field(default=None, max_length=255)


class DailyAttendanceBatch(BaseModel):
    class_id: str = Field(min_length=1, max_length=36)
    attendance_date: date
    academic_year: str = Field(pattern=ACADEMIC_YEAR_PATTERN)
    term: TermPeriod
    records: list[AttendanceRecordIn] = Field(min_length=1)


class StudentAttendanceOut(BaseModel):
    id: str
    student_id: str
    class_id: str
    attendance_date: date
    academic_year: str
    term: TermPeriod
    status: AttendanceStatus
    remarks: str | None
    recorded_by_id: str | None

    model_config = {"from_attributes": True}
