"""
Error handling - every non-2xx response leaves the API as an ErrorResponse body.

Two layers:
- register_exception_handlers(app): FastAPI exception handlers for
  HTTPException, request validation errors, InvalidInputError and
  PermissionError. These run inside the router stack.
- ErrorHandlingMiddleware: catches anything else that escapes the app,
  logs it and answers 500. Exception type and stack trace are only exposed
  in development.

The exception message is stored on request.state.error_message so the audit
middleware can record it.
"""

import traceback
from http import HTTPStatus

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware

from app.config import settings
from app.infrastructure.observability.logging import get_logger
from app.models.api.error_response import (
    STATUS_TYPES,
    ErrorResponse,
    ErrorTypes,
    ValidationErrorResponse,
)
from app.services.users import InvalidInputError

logger = get_logger(__name__)

GENERIC_SERVER_ERROR = "An error occurred while processing your request."


def _type_and_title(status_code: int) -> tuple[str, str]:
    if status_code in STATUS_TYPES:
        return STATUS_TYPES[status_code]
    try:
        title = HTTPStatus(status_code).phrase
    except ValueError:
        title = "Error"
    error_type = ErrorTypes.BAD_REQUEST if status_code < 500 else ErrorTypes.INTERNAL_SERVER_ERROR
    return error_type, title


def build_error_response(
    request: Request,
    status_code: int,
    detail: str,
    extensions: dict | None = None,
    headers: dict | None = None,
) -> JSONResponse:
    error_type, title = _type_and_title(status_code)
    body = ErrorResponse(
        type=error_type,
        title=title,
        status=status_code,
        detail=detail,
        instance=request.url.path,
        trace_id=getattr(request.state, "request_id", None),
        extensions=extensions or {},
    )
    return JSONResponse(
        status_code=status_code,
        content=body.model_dump(mode="json"),
        headers=headers,
    )


def _validation_errors(exc: RequestValidationError) -> dict[str, list[str]]:
    errors: dict[str, list[str]] = {}
    for error in exc.errors():
        loc = [str(part) for part in error.get("loc", ())]
        field = ".".join(loc[1:]) if len(loc) > 1 else (loc[0] if loc else "request")
        message = str(error.get("msg", "Invalid value"))
        # pydantic prefixes messages raised from validators
        message = message.removeprefix("Value error, ")
        errors.setdefault(field, []).append(message)
    return errors


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    detail = exc.detail if isinstance(exc.detail, str) else str(exc.detail)
    if exc.status_code >= 500:
        request.state.error_message = detail
    return build_error_response(
        request, exc.status_code, detail, headers=getattr(exc, "headers", None)
    )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    errors = _validation_errors(exc)
    logger.info("Request validation failed", path=request.url.path, fields=sorted(errors))

    body = ValidationErrorResponse(
        type=ErrorTypes.VALIDATION_ERROR,
        title="Validation Error",
        status=400,
        detail="One or more validation errors occurred.",
        instance=request.url.path,
        trace_id=getattr(request.state, "request_id", None),
        errors=errors,
    )
    return JSONResponse(status_code=400, content=body.model_dump(mode="json"))


async def invalid_input_handler(request: Request, exc: InvalidInputError) -> JSONResponse:
    return build_error_response(request, 400, str(exc))


async def permission_error_handler(request: Request, exc: PermissionError) -> JSONResponse:
    logger.warning("Access denied", path=request.url.path, error=str(exc))
    return build_error_response(request, 403, "Access denied")


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(InvalidInputError, invalid_input_handler)
    app.add_exception_handler(PermissionError, permission_error_handler)


class ErrorHandlingMiddleware(BaseHTTPMiddleware):
    """Convert unhandled exceptions into 500 ErrorResponse bodies."""

    async def dispatch(self, request: Request, call_next):
        try:
            return await call_next(request)
        except Exception as exc:
            request.state.error_message = str(exc)
            logger.error(
                "Unhandled exception",
                method=request.method,
                path=request.url.path,
                error=str(exc),
                error_type=type(exc).__name__,
                exc_info=True,
            )

            if settings.is_development():
                detail = str(exc) or GENERIC_SERVER_ERROR
                extensions = {
                    "exception_type": type(exc).__name__,
                    "stack_trace": traceback.format_exc(),
                }
            else:
                detail = GENERIC_SERVER_ERROR
                extensions = {}

            return build_error_response(request, 500, detail, extensions=extensions)
