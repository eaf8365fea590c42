# app/models/api/error_response.py
from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, Field


class ErrorTypes:
    VALIDATION_ERROR = "validation-error"
    NOT_FOUND = "not-found"
    UNAUTHORIZED = "unauthorized"
    FORBIDDEN = "forbidden"
    CONFLICT = "conflict"
    INTERNAL_SERVER_ERROR = "internal-server-error"
    BAD_REQUEST = "bad-request"


STATUS_TYPES = {
    400: (ErrorTypes.BAD_REQUEST, "Bad Request"),
    401: (ErrorTypes.UNAUTHORIZED, "Unauthorized"),
    403: (ErrorTypes.FORBIDDEN, "Forbidden"),
    404: (ErrorTypes.NOT_FOUND, "Resource Not Found"),
    409: (ErrorTypes.CONFLICT, "Conflict"),
    500: (ErrorTypes.INTERNAL_SERVER_ERROR, "Internal Server Error"),
}


class ErrorResponse(BaseModel):
    """Uniform error body for every non-2xx response."""

    type: str
    title: str
    status: int
    detail: str
    instance: str = ""
    trace_id: str | None = None
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))
    extensions: dict[str, Any] = Field(default_factory=dict)


class ValidationErrorResponse(ErrorResponse):
    errors: dict[str, list[str]] = Field(default_factory=dict)
