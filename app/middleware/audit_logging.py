"""
AuditLogging Middleware - one audit entry per HTTP request.

Captures method, path, query string, client IP, user agent, caller identity
(request.state.user_id / user_email, set by auth_dependency), status code,
timing and optionally headers and bodies, then hands the AuditEntry to the
AuditLogger.

Behavior is driven by settings.get_audit_config():
- excluded_paths: path prefixes that are never audited (health probes, docs)
- sensitive_headers: header values replaced with "[REDACTED]"
- log_request_body / log_response_body: capture bodies, truncated to
  max_body_log_size characters
"""

import time

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from app.config import settings
from app.infrastructure.audit.audit_logger import AuditEntry, AuditLogger, audit_logger
from app.middleware.request_context import extract_client_ip

REDACTED = "[REDACTED]"
TRUNCATED_SUFFIX = "... [TRUNCATED]"

_BODY_METHODS = {"POST", "PUT", "PATCH"}


def truncate_body(body: str, max_size: int) -> str:
    if len(body) <= max_size:
        return body
    return body[:max_size] + TRUNCATED_SUFFIX


def redact_headers(headers, sensitive: set[str]) -> dict[str, str]:
    return {
        name: (REDACTED if name.lower() in sensitive else value) for name, value in headers.items()
    }


class AuditLoggingMiddleware(BaseHTTPMiddleware):
    """Write an AuditEntry for every request outside the excluded paths."""

    def __init__(self, app, config: dict | None = None, audit: AuditLogger | None = None):
        super().__init__(app)
        self.config = config or settings.get_audit_config()
        self.audit_logger = audit or audit_logger

    def _is_excluded(self, path: str) -> bool:
        return any(path.startswith(prefix) for prefix in self.config["excluded_paths"])

    async def dispatch(self, request: Request, call_next):
        if self._is_excluded(request.url.path):
            return await call_next(request)

        start = time.perf_counter()
        max_size = self.config["max_body_log_size"]

        entry = AuditEntry(
            request_id=getattr(request.state, "request_id", None) or "",
            method=request.method,
            path=request.url.path,
            query_string=request.url.query or None,
            user_agent=request.headers.get("user-agent"),
            client_ip_address=getattr(request.state, "ip_address", None)
            or extract_client_ip(request),
        )

        if self.config["log_headers"]:
            entry.headers = redact_headers(request.headers, self.config["sensitive_headers"])

        if self.config["log_request_body"] and request.method in _BODY_METHODS:
            raw = await request.body()
            if raw:
                entry.request_body = truncate_body(raw.decode("utf-8", errors="replace"), max_size)

        try:
            response = await call_next(request)
        except Exception as exc:
            entry.status_code = 500
            entry.error_message = str(exc)
            entry.response_time_ms = round((time.perf_counter() - start) * 1000, 2)
            self._attach_identity(request, entry)
            await self.audit_logger.log_request_entry(entry)
            raise

        if self.config["log_response_body"]:
            body = b"".join([chunk async for chunk in response.body_iterator])
            entry.response_body = truncate_body(body.decode("utf-8", errors="replace"), max_size)
            entry.response_size_bytes = len(body)
            response = Response(
                content=body,
                status_code=response.status_code,
                headers=dict(response.headers),
                media_type=response.media_type,
            )
        else:
            content_length = response.headers.get("content-length")
            if content_length and content_length.isdigit():
                entry.response_size_bytes = int(content_length)

        entry.status_code = response.status_code
        entry.response_time_ms = round((time.perf_counter() - start) * 1000, 2)
        entry.error_message = getattr(request.state, "error_message", None)
        self._attach_identity(request, entry)

        await self.audit_logger.log_request_entry(entry)
        return response

    @staticmethod
    def _attach_identity(request: Request, entry: AuditEntry) -> None:
        entry.user_id = getattr(request.state, "user_id", None)
        entry.user_email = getattr(request.state, "user_email", None)
