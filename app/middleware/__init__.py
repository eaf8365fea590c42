"""
Middleware components for request processing.

This package contains middleware for:
- Request context (request ID, IP address, user agent)
- Error handling (uniform ErrorResponse bodies)
- Audit logging (one audit entry per request)
"""

from app.middleware.audit_logging import AuditLoggingMiddleware
from app.middleware.error_handling import ErrorHandlingMiddleware, register_exception_handlers
from app.middleware.request_context import RequestContextMiddleware

__all__ = [
    "RequestContextMiddleware",
    "ErrorHandlingMiddleware",
    "AuditLoggingMiddleware",
    "register_exception_handlers",
]
