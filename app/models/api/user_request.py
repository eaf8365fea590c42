# app/models/api/user_request.py
import re

from pydantic import BaseModel, EmailStr, Field, field_validator, model_validator

ALLOWED_DEPARTMENTS = (
    "IT",
    "HR",
    "Finance",
    "Marketing",
    "Sales",
    "Operations",
    "Legal",
    "R&D",
    "Customer Service",
    "Administration",
)

NAME_PATTERN = re.compile(r"^[a-zA-Z\s\-'\.]+$")
PHONE_PATTERN = re.compile(r"^[\+]?[1-9][\d\-\s\(\)\.]+$")
DEPARTMENT_PATTERN = re.compile(r"^[a-zA-Z\s\-&]+$")
POSITION_PATTERN = re.compile(r"^[a-zA-Z\s\-&\.]+$")

_ALLOWED_LOWER = {d.lower() for d in ALLOWED_DEPARTMENTS}


def _check_text(value: str | None, label: str, pattern: re.Pattern, allowed: str) -> str | None:
    if value is None:
        return value
    if not value.strip():
        raise ValueError(f"{label} cannot be empty or contain only whitespace")
    if not pattern.match(value):
        raise ValueError(f"{label} can only contain {allowed}")
    return value


def _check_name(value: str | None, label: str) -> str | None:
    return _check_text(
        value, label, NAME_PATTERN, "letters, spaces, hyphens, apostrophes, and periods"
    )


def _check_department(value: str | None) -> str | None:
    value = _check_text(
        value, "Department", DEPARTMENT_PATTERN, "letters, spaces, hyphens, and ampersands"
    )
    if value is not None and value.strip().lower() not in _ALLOWED_LOWER:
        raise ValueError(f"Department must be one of the following: {', '.join(ALLOWED_DEPARTMENTS)}")
    return value


def _check_position(value: str | None) -> str | None:
    return _check_text(
        value,
        "Position",
        POSITION_PATTERN,
        "letters, spaces, hyphens, ampersands, and periods",
    )


def _check_phone(value: str | None) -> str | None:
    if value is None or value == "":
        return value
    if not PHONE_PATTERN.match(value):
        raise ValueError("Please provide a valid phone number format")
    return value


class CreateUserRequest(BaseModel):
    """Request body for POST /api/users"""

    first_name: str = Field(..., min_length=2, max_length=100)
    last_name: str = Field(..., min_length=2, max_length=100)
    email: EmailStr = Field(..., max_length=255)
    phone_number: str | None = Field(None, max_length=20)
    department: str = Field(..., min_length=2, max_length=100)
    position: str = Field(..., min_length=2, max_length=100)

    @field_validator("first_name")
    @classmethod
    def validate_first_name(cls, v):
        return _check_name(v, "First name")

    @field_validator("last_name")
    @classmethod
    def validate_last_name(cls, v):
        return _check_name(v, "Last name")

    @field_validator("phone_number")
    @classmethod
    def validate_phone_number(cls, v):
        return _check_phone(v)

    @field_validator("department")
    @classmethod
    def validate_department(cls, v):
        return _check_department(v)

    @field_validator("position")
    @classmethod
    def validate_position(cls, v):
        return _check_position(v)


class UpdateUserRequest(BaseModel):
    """
    Request body for PUT /api/users/{id}.

    Partial update: omitted fields are left unchanged. At least one field
    must be supplied.
    """

    first_name: str | None = Field(None, min_length=2, max_length=100)
    last_name: str | None = Field(None, min_length=2, max_length=100)
    email: EmailStr | None = Field(None, max_length=255)
    phone_number: str | None = Field(None, max_length=20)
    department: str | None = Field(None, min_length=2, max_length=100)
    position: str | None = Field(None, min_length=2, max_length=100)
    is_active: bool | None = None

    @field_validator("first_name")
    @classmethod
    def validate_first_name(cls, v):
        return _check_name(v, "First name")

    @field_validator("last_name")
    @classmethod
    def validate_last_name(cls, v):
        return _check_name(v, "Last name")

    @field_validator("phone_number")
    @classmethod
    def validate_phone_number(cls, v):
        return _check_phone(v)

    @field_validator("department")
    @classmethod
    def validate_department(cls, v):
        return _check_department(v)

    @field_validator("position")
    @classmethod
    def validate_position(cls, v):
        return _check_position(v)

    @model_validator(mode="after")
    def require_at_least_one_field(self):
        text_fields = (
            self.first_name,
            self.last_name,
            self.email,
            self.phone_number,
            self.department,
            self.position,
        )
        if all(not (v and v.strip()) for v in text_fields) and self.is_active is None:
            # An explicit phone_number (even empty) clears the number
            if "phone_number" not in self.model_fields_set:
                raise ValueError("At least one field must be provided for update")
        return self
