"""
Audit Helper Utilities - One-line audit logging for endpoints.

Usage:
    from app.utils.audit_helpers import audit_record_change

    # In your endpoint
    await audit_record_change(
        request=request,
        action="user_updated",
        record_id=user_id,
        changes={"department": "HR"},
    )

Request context (IP, user-agent, request ID) and the caller id are read from
request.state, where RequestContextMiddleware and auth_dependency put them.
"""

from typing import Any

from fastapi import Request

from app.infrastructure.audit.audit_logger import audit_logger


async def audit_record_change(
    request: Request,
    action: str,
    record_id: int,
    changes: dict[str, Any] | None = None,
    resource_type: str = "user",
) -> bool:
    """
    One-line helper for auditing record modifications (create, update, delete).

    Args:
        request: FastAPI Request object
        action: Action performed (e.g., "user_created", "user_deleted")
        record_id: Id of the record that changed
        changes: Fields that were written (values as stored)
        resource_type: Type of resource modified

    Returns:
        True if logged successfully
    """
    state = request.state
    return await audit_logger.log(
        user_id=getattr(state, "user_id", None),
        action=action,
        resource_type=resource_type,
        resource_id=str(record_id),
        ip_address=getattr(state, "ip_address", None),
        user_agent=getattr(state, "user_agent", None),
        request_id=getattr(state, "request_id", None),
        metadata={"changes": changes} if changes else None,
    )
