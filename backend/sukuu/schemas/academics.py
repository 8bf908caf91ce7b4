from pydantic import BaseModel, EmailStr, Field, field_validator

from sukuu.schemas.common import ACADEMIC_YEAR_PATTERN, OptionalText


class ClassCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    section: OptionalText = Field(default=None, max_length=50)
    academic_year: str = Field(pattern=ACADEMIC_YEAR_PATTERN)
    homeroom_teacher_id: OptionalText = None


class ClassUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=100)
    section: OptionalText = Field(default=None, max_length=50)
    homeroom_teacher_id: OptionalText = None


class ClassOut(BaseModel):
    id: str
    school_id: str
    name: str
    section: str | None
    academic_year: str
    homeroom_teacher_id: str | None

    model_config = {"from_attributes": True}


class SubjectCreate(BaseModel):
    name: str = Field(min_length=2, max_length=100)
    code: OptionalText = Field(default=None, max_length=20)
    description: OptionalText = Field(default=None, max_length=500)

    @field_validator("code")
    @classmethod
    def normalize_code(cls, value: str | None) -> str | None:
        return value.upper() if value else value


class SubjectUpdate(SubjectCreate):
    name: str | None = Field(default=None, min_length=2, max_length=100)


class SubjectOut(BaseModel):
    id: str
    school_id: str
    name: str
    code: str | None
    description: str | None

    model_config = {"from_attributes": True}


class TeacherCreate(BaseModel):
    first_name: str = Field(min_length=2, max_length=50)
    last_name: str = Field(min_length=2, max_length=50)
    email: EmailStr
    staff_id: OptionalText = Field(default=None, max_length=50)
    phone_number: OptionalText = Field(default=None, max_length=20)
    qualifications: OptionalText = Field(default=None, max_length=500)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        return value.strip().lower()


class TeacherUpdate(BaseModel):
    first_name: str | None = Field(default=None, min_length=2, max_length=50)
    last_name: str | None = Field(default=None, min_length=2, max_length=50)
    email: EmailStr | None = None
    staff_id: OptionalText = Field(default=None, max_length=50)
    phone_number: OptionalText = Field(default=None, max_length=20)
    qualifications: OptionalText = Field(default=None, max_length=500)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str | None) -> str | None:
        return value.strip().lower() if value else value


class TeacherOut(BaseModel):
    id: str
    school_id: str
    first_name: str
    last_name: str
    email: str
    staff_id: str | None
    phone_number: str | None
    qualifications: str | None

    model_config = {"from_attributes": True}


class ClassSubjectAssignmentCreate(BaseModel):
    subject_id: str = Field(min_length=1, max_length=36)
    teacher_id: OptionalText = None


class ClassSubjectAssignmentUpdate(BaseModel):
    teacher_id: OptionalText = None


class ClassSubjectAssignmentOut(BaseModel):
    id: str
    class_id: str
    subject_id: str
    teacher_id: str | None
    academic_year: str

    model_config = {"from_attributes": True}
