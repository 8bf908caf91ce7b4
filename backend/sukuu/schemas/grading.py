from pydantic import BaseModel, Field

from sukuu.schemas.common import OptionalNumber, OptionalText

# Percent bounds accept numbers or numeric strings; the conflict service
# parses and range-checks them.
PercentValue = float | str


class GradeScaleCreate(BaseModel):
    name: str = Field(min_length=3, max_length=100)
    description: OptionalText = Field(default=None, max_length=500)
    is_active: bool = False


class GradeScaleUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=3, max_length=100)
    description: OptionalText = Field(default=None, max_length=500)
    is_active: bool | None = None


class GradeScaleOut(BaseModel):
    id: str
    school_id: str
    name: str
    description: str | None
    is_active: bool
    entry_count: int = 0

    model_config = {"from_attributes": True}


class GradeScaleEntryCreate(BaseModel):
    min_percentage: PercentValue
    max_percentage: PercentValue
    grade_letter: str = Field(min_length=1, max_length=10)
    grade_point: OptionalNumber = Field(default=None, ge=0, le=10)
    remark: OptionalText = Field(default=None, max_length=100)


class GradeScaleEntryUpdate(BaseModel):
    min_percentage: PercentValue | None = None
    max_percentage: PercentValue | None = None
    grade_letter: str | None = Field(default=None, min_length=1, max_length=10)
    grade_point: OptionalNumber = Field(default=None, ge=0, le=10)
    remark: OptionalText = Field(default=None, max_length=100)


class GradeScaleEntryOut(BaseModel):
    id: str
    grade_scale_id: str
    min_percentage: float
    max_percentage: float
    grade_letter: str
    grade_point: float | None
    remark: str | None

    model_config = {"from_attributes": True}


class GradeScaleDetailOut(GradeScaleOut):
    entries: list[GradeScaleEntryOut] = Field(default_factory=list)
