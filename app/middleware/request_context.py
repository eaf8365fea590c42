"""
RequestContext Middleware - Adds request tracking to all requests.

This middleware automatically adds the following to every request:
- request_id: Unique ID for request tracing
- ip_address: Client IP address
- user_agent: Client user agent string

These values are stored in request.state and can be accessed by:
- Audit logging
- Error responses (trace_id)
- Request debugging

The request id is also bound to the structlog context, so every log line
written while the request is in flight carries it.

Usage:
    In endpoints:
        request.state.request_id
        request.state.ip_address
        request.state.user_agent
"""

import time
import uuid

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from app.infrastructure.observability.logging import (
    bind_request_context,
    clear_request_context,
    get_logger,
    log_request,
)

logger = get_logger(__name__)


def extract_client_ip(request: Request) -> str | None:
    """
    Client IP: first X-Forwarded-For hop, then X-Real-IP, then the peer address.
    """
    forwarded_for = request.headers.get("x-forwarded-for")
    if forwarded_for:
        # X-Forwarded-For format: "client, proxy1, proxy2"
        first = forwarded_for.split(",")[0].strip()
        if first:
            return first

    real_ip = request.headers.get("x-real-ip")
    if real_ip and real_ip.strip():
        return real_ip.strip()

    return request.client.host if request.client else None


class RequestContextMiddleware(BaseHTTPMiddleware):
    """
    Add request context to all incoming requests.

    Adds to request.state:
    - request_id: UUID for tracing this request
    - ip_address: Client IP address
    - user_agent: Client user agent string

    Also adds X-Request-ID header to responses for client-side tracing.

    Request.state Namespace Convention:
    - request_id, ip_address, user_agent: Set by RequestContextMiddleware
    - user_id, user_email: Set by auth_dependency
    - Do not add other attributes without updating this documentation
    """

    async def dispatch(self, request: Request, call_next):
        request_id = str(uuid.uuid4())
        request.state.request_id = request_id
        request.state.ip_address = extract_client_ip(request)
        request.state.user_agent = request.headers.get("user-agent")

        clear_request_context()
        bind_request_context(request_id=request_id)

        logger.debug(
            "Request started",
            method=request.method,
            path=request.url.path,
            ip_address=request.state.ip_address,
            user_agent=request.state.user_agent,
        )

        start_time = time.time()
        try:
            response = await call_next(request)
            log_request(
                method=request.method,
                path=request.url.path,
                status_code=response.status_code,
                duration_ms=round((time.time() - start_time) * 1000, 2),
                user_id=getattr(request.state, "user_id", None),
            )
        finally:
            clear_request_context()

        response.headers["X-Request-ID"] = request_id
        return response
