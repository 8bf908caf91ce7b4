from datetime import date

from pydantic import BaseModel, Field, field_validator

from sukuu.models.student import Gender
from sukuu.schemas.common import OptionalText


def _not_in_future(value: date | None) -> date | None:
    if value is not None and value > date.today():
        raise ValueError("Date of birth cannot be in the future.")
    return value


class StudentCreate(BaseModel):
    student_id_number: str = Field(min_length=1, max_length=50)
    first_name: str = Field(min_length=2, max_length=50)
    middle_name: OptionalText = Field(default=None, max_length=50)
    last_name: str = Field(min_length=2, max_length=50)
    date_of_birth: date
    gender: Gender
    enrollment_date: date
    current_class_id: OptionalText = None
    address: OptionalText = Field(default=None, max_length=255)
    city: OptionalText = Field(default=None, max_length=50)
    state_or_region: OptionalText = Field(default=None, max_length=50)
    country: OptionalText = Field(default=None, max_length=50)
    postal_code: OptionalText = Field(default=None, max_length=20)
    emergency_contact_name: OptionalText = Field(default=None, max_length=100)
    emergency_contact_phone: OptionalText = Field(default=None, max_length=20)
    blood_group: OptionalText = Field(default=None, max_length=5)
    allergies: OptionalText = Field(default=None, max_length=500)
    medical_notes: OptionalText = Field(default=None, max_length=1000)

    check_birth_date = field_validator("date_of_birth")(_not_in_future)


class StudentUpdate(BaseModel):
    student_id_number: str | None = Field(default=None, min_length=1, max_length=50)
    first_name: str | None = Field(default=None, min_length=2, max_length=50)
    middle_name: OptionalText = Field(default=None, max_length=50)
    last_name: str | None = Field(default=None, min_length=2, max_length=50)
    date_of_birth: date | None = None
    gender: Gender | None = None
    enrollment_date: date | None = None
    current_class_id: OptionalText = None
    address: OptionalText = Field(default=None, max_length=255)
    city: OptionalText = Field(default=None, max_length=50)
    state_or_region: OptionalText = Field(default=None, max_length=50)
    country: OptionalText = Field(default=None, max_length=50)
    postal_code: OptionalText = Field(default=None, max_length=20)
    emergency_contact_name: OptionalText = Field(default=None, max_length=100)
    emergency_contact_phone: OptionalText = Field(default=None, max_length=20)
    blood_group: OptionalText = Field(default=None, max_length=5)
    allergies: OptionalText = Field(default=None, max_length=500)
    medical_notes: OptionalText = Field(default=None, max_length=1000)
    is_active: bool | None = None

    check_birth_date = field_validator("date_of_birth")(_not_in_future)


class StudentOut(BaseModel):
    id: str
    school_id: str
    student_id_number: str
    first_name: str
    middle_name: str | None
    last_name: str
    date_of_birth: date
    gender: Gender
    enrollment_date: date
    current_class_id: str | None
    address: str | None
    city: str | None
    state_or_region: str | None
    country: str | None
    postal_code: str | None
    emergency_contact_name: str | None
    emergency_contact_phone: str | None
    blood_group: str | None
    allergies: str | None
    medical_notes: str | None
    is_active: bool

    model_config = {"from_attributes": True}


class StudentBasicOut(BaseModel):
    id: str
    student_id_number: str
    first_name: str
    last_name: str

    model_config = {"from_attributes": True}
