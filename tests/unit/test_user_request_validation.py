import pytest
from pydantic import ValidationError

from app.models.api.user_request import CreateUserRequest, UpdateUserRequest

VALID = {
    "first_name": "Jane",
    "last_name": "Smith",
    "email": "jane@company.com",
    "phone_number": "+1-555-0124",
    "department": "HR",
    "position": "HR Manager",
}


def _errors(exc: ValidationError) -> str:
    return " ".join(e["msg"] for e in exc.errors())


def test_valid_create_request():
    request = CreateUserRequest(**VALID)

    assert request.email == "jane@company.com"


@pytest.mark.parametrize(
    "field, value, message",
    [
        ("first_name", "J", "at least 2"),
        ("first_name", "J4ne", "First name can only contain"),
        ("last_name", "   ", "Last name cannot be empty"),
        ("email", "not-an-email", "email"),
        ("phone_number", "0123", "valid phone number"),
        ("department", "Engineering", "Department must be one of"),
        ("department", "IT!", "Department can only contain"),
        ("position", "Dev #1", "Position can only contain"),
        ("position", "x" * 101, "at most 100"),
    ],
)
def test_invalid_create_request(field, value, message):
    with pytest.raises(ValidationError) as exc_info:
        CreateUserRequest(**{**VALID, field: value})

    assert message in _errors(exc_info.value)


def test_department_check_is_case_insensitive():
    assert CreateUserRequest(**{**VALID, "department": "customer service"})


def test_missing_required_fields():
    with pytest.raises(ValidationError) as exc_info:
        CreateUserRequest(email="jane@company.com")

    missing = {e["loc"][0] for e in exc_info.value.errors()}
    assert missing == {"first_name", "last_name", "department", "position"}


def test_update_requires_at_least_one_field():
    with pytest.raises(ValidationError) as exc_info:
        UpdateUserRequest()

    assert "At least one field must be provided for update" in _errors(exc_info.value)


@pytest.mark.parametrize(
    "payload",
    [
        {"position": "Lead"},
        {"is_active": False},
        {"phone_number": ""},
        {"email": "new@company.com"},
    ],
)
def test_update_accepts_any_single_field(payload):
    request = UpdateUserRequest(**payload)

    assert request.model_fields_set == set(payload)
