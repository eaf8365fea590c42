"""
Input sanitization applied to validated request bodies before they reach
UserService.

Validation (app.models.api.user_request) rejects bad input; sanitization
normalizes good input: trims, strips control characters, collapses
whitespace, filters character classes and fixes casing.
"""

from __future__ import annotations

import re

from app.models.api.user_request import ALLOWED_DEPARTMENTS, CreateUserRequest, UpdateUserRequest
from app.models.domain.user_domain import NewUserFields, UserFieldChanges

_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0B\x0C\x0E-\x1F\x7F]")
_WHITESPACE = re.compile(r"\s+")
_NAME_DISALLOWED = re.compile(r"[^a-zA-Z\s\-'\.]+")
_PHONE_DISALLOWED = re.compile(r"[^\d\s\-\(\)\.+]")
_DEPARTMENT_DISALLOWED = re.compile(r"[^a-zA-Z\s\-&\.]+")

_CANONICAL_DEPARTMENTS = {d.lower(): d for d in ALLOWED_DEPARTMENTS}


def sanitize_string(value: str | None) -> str:
    """Trim, drop control characters and collapse runs of whitespace."""
    if not value:
        return ""
    sanitized = _CONTROL_CHARS.sub("", value.strip())
    return _WHITESPACE.sub(" ", sanitized)


def sanitize_name(name: str | None) -> str:
    """Keep letters, spaces, hyphens, apostrophes and periods; capitalize."""
    sanitized = _NAME_DISALLOWED.sub("", sanitize_string(name)).strip()
    if not sanitized:
        return ""
    return sanitized[0].upper() + sanitized[1:].lower()


def sanitize_email(email: str | None) -> str:
    if not email:
        return ""
    return _CONTROL_CHARS.sub("", email.strip().lower())


def sanitize_phone_number(phone_number: str | None) -> str:
    """Keep digits, spaces, hyphens, parentheses, periods and plus signs."""
    return _PHONE_DISALLOWED.sub("", sanitize_string(phone_number)).strip()


def sanitize_department_or_position(text: str | None) -> str:
    """Filter characters and title-case each word; known departments keep their spelling."""
    sanitized = _DEPARTMENT_DISALLOWED.sub("", sanitize_string(text))
    words = sanitized.split()
    if not words:
        return ""

    joined = " ".join(words)
    canonical = _CANONICAL_DEPARTMENTS.get(joined.lower())
    if canonical:
        return canonical
    return " ".join(word[0].upper() + word[1:].lower() for word in words)


def sanitize_new_user(request: CreateUserRequest) -> NewUserFields:
    return NewUserFields(
        first_name=sanitize_name(request.first_name),
        last_name=sanitize_name(request.last_name),
        email=sanitize_email(request.email),
        phone_number=sanitize_phone_number(request.phone_number) or None,
        department=sanitize_department_or_position(request.department),
        position=sanitize_department_or_position(request.position),
    )


def sanitize_user_changes(request: UpdateUserRequest) -> UserFieldChanges:
    """Sanitize only the fields the caller actually sent."""
    sanitizers = {
        "first_name": sanitize_name,
        "last_name": sanitize_name,
        "email": sanitize_email,
        "department": sanitize_department_or_position,
        "position": sanitize_department_or_position,
    }

    changes = {}
    for name, value in request.model_dump(exclude_unset=True).items():
        if name == "phone_number":
            changes[name] = sanitize_phone_number(value) or None
        elif name in sanitizers:
            if value is None:
                continue
            changes[name] = sanitizers[name](value)
        else:
            changes[name] = value

    return UserFieldChanges(**changes)
