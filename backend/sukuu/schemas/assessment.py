from datetime import date

from pydantic import BaseModel, Field

from sukuu.models.assessment import TermPeriod
from sukuu.schemas.common import ACADEMIC_YEAR_PATTERN, OptionalNumber, OptionalText


class AssessmentCreate(BaseModel):
    name: str = Field(min_length=3, max_length=150)
    class_id: str = Field(min_length=1, max_length=36)
    subject_id: str = Field(min_length=1, max_length=36)
    academic_year: str = Field(pattern=ACADEMIC_YEAR_PATTERN)
    term: TermPeriod
    max_marks: float = Field(gt=0, le=1000)
    assessment_date: date
    description: OptionalText = Field(default=None, max_length=500)


class AssessmentUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=3, max_length=150)
    class_id: str | None = Field(default=None, min_length=1, max_length=36)
    subject_id: str | None = Field(default=None, min_length=1, max_length=36)
    academic_year: str | None = Field(default=None, pattern=ACADEMIC_YEAR_PATTERN)
    term: TermPeriod | None = None
    max_marks: float | None = Field(default=None, gt=0, le=1000)
    assessment_date: date | None = None
    description: OptionalText = Field(default=None, max_length=500)


class AssessmentOut(BaseModel):
    id: str
    school_id: str
    class_id: str
    subject_id: str
    name: str
    academic_year: str
    term: TermPeriod
    max_marks: float
    assessment_date: date
    description: str | None
    created_by_user_id: str | None

    model_config = {"from_attributes": True}


class StudentMarkEntry(BaseModel):
    student_id: str = Field(min_length=1, max_length=36)
    # Blank means "not marked yet"; the upper bound is the assessment's max_marks.
    marks_obtained: OptionalNumber = Field(default=None, ge=0)
    remarks: OptionalText = Field(default=None, max_length=500)


class StudentMarksBatch(BaseModel):
    marks: list[StudentMarkEntry] = Field(min_length=1)


class StudentMarkOut(BaseModel):
    id: str
    assessment_id: str
    student_id: str
    marks_obtained: float | None
    remarks: str | None
    recorded_by_id: str | None

    model_config = {"from_attributes": True}
