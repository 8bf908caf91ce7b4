from pydantic import BaseModel, EmailStr, Field, field_validator

from sukuu.schemas.common import ACADEMIC_YEAR_PATTERN, OptionalText
from sukuu.schemas.user import UserOut


class SchoolBase(BaseModel):
    name: str = Field(min_length=3, max_length=100)
    school_email: EmailStr
    phone_number: OptionalText = Field(default=None, min_length=10, max_length=20)
    address: OptionalText = Field(default=None, max_length=255)
    city: OptionalText = Field(default=None, max_length=50)
    country: OptionalText = Field(default=None, max_length=50)
    website: OptionalText = Field(default=None, max_length=255)
    current_academic_year: str = Field(pattern=ACADEMIC_YEAR_PATTERN)
    currency: str = Field(min_length=3, max_length=3)
    timezone: str = Field(min_length=3, max_length=64)

    @field_validator("school_email")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        return value.strip().lower()

    @field_validator("currency")
    @classmethod
    def normalize_currency(cls, value: str) -> str:
        return value.strip().upper()


class SchoolCreate(SchoolBase):
    pass


class SchoolUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=3, max_length=100)
    school_email: EmailStr | None = None
    phone_number: OptionalText = Field(default=None, min_length=10, max_length=20)
    address: OptionalText = Field(default=None, max_length=255)
    city: OptionalText = Field(default=None, max_length=50)
    country: OptionalText = Field(default=None, max_length=50)
    website: OptionalText = Field(default=None, max_length=255)
    current_academic_year: str | None = Field(default=None, pattern=ACADEMIC_YEAR_PATTERN)
    currency: str | None = Field(default=None, min_length=3, max_length=3)
    timezone: str | None = Field(default=None, min_length=3, max_length=64)
    is_active: bool | None = None

    @field_validator("school_email")
    @classmethod
    def normalize_email(cls, value: str | None) -> str | None:
        return value.strip().lower() if value else value


class SchoolOut(SchoolBase):
    id: str
    is_active: bool

    model_config = {"from_attributes": True}


class SchoolAdminCreate(BaseModel):
    first_name: str = Field(min_length=2, max_length=50)
    last_name: str = Field(min_length=2, max_length=50)
    email: EmailStr
    password: str = Field(min_length=8, max_length=128)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        return value.strip().lower()


class SchoolAdminOut(BaseModel):
    id: str
    school_id: str
    user: UserOut
