"""
AuditLogger - Centralized audit trail for the employee records API.

Two kinds of entries are recorded:
- Request entries: one per HTTP request, written by AuditLoggingMiddleware
- Record changes: create/update/delete of a user record, written by routes
  through app.utils.audit_helpers

Usage:
    from app.infrastructure.audit import audit_logger

    await audit_logger.log(
        user_id="1",
        action="user_updated",
        resource_type="user",
        resource_id="42",
        ip_address="192.168.1.1",
        request_id="req-abc123",
        metadata={"changes": {"department": "HR"}},
    )

Entries go to every registered sink. The default sink writes structured
logs; extra sinks (a database writer, a test collector) are added with
add_sink(). Audit logging never fails the request: a sink error is logged
and the remaining sinks still run.
"""

from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, Field

from app.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)


class AuditEntry(BaseModel):
    """One audited HTTP request."""

    request_id: str
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))
    method: str
    path: str
    query_string: str | None = None
    user_agent: str | None = None
    client_ip_address: str | None = None
    user_id: str | None = None
    user_email: str | None = None
    status_code: int = 0
    response_time_ms: float = 0.0
    response_size_bytes: int | None = None
    request_body: str | None = None
    response_body: str | None = None
    error_message: str | None = None
    headers: dict[str, str] = Field(default_factory=dict)


AuditSink = Callable[[str, dict[str, Any]], None]


def _structured_log_sink(kind: str, payload: dict[str, Any]) -> None:
    if kind == "request":
        status_code = payload.get("status_code", 0)
        if status_code >= 500 or payload.get("error_message"):
            logger.error("Audit request", **payload)
        elif status_code >= 400:
            logger.warning("Audit request", **payload)
        else:
            logger.info("Audit request", **payload)
    else:
        logger.info("Audit event", **payload)


class AuditLogger:
    """
    Centralized audit logging service.

    Thread-safe: sinks are called synchronously and hold no shared state
    here beyond the sink list, which is only changed at setup time.
    """

    def __init__(self, sinks: list[AuditSink] | None = None):
        self._sinks: list[AuditSink] = list(sinks) if sinks is not None else [_structured_log_sink]

    def add_sink(self, sink: AuditSink) -> None:
        self._sinks.append(sink)

    def remove_sink(self, sink: AuditSink) -> None:
        if sink in self._sinks:
            self._sinks.remove(sink)

    def _emit(self, kind: str, payload: dict[str, Any]) -> bool:
        ok = True
        for sink in list(self._sinks):
            try:
                sink(kind, payload)
            except Exception as e:
                # CRITICAL: NEVER fail the request due to audit logging failure
                logger.error(
                    "Failed to write audit entry",
                    error=str(e),
                    error_type=type(e).__name__,
                    audit_kind=kind,
                    request_id=payload.get("request_id"),
                )
                ok = False
        return ok

    async def log_request_entry(self, entry: AuditEntry) -> bool:
        """
        Record one audited request.

        Returns:
            True if every sink accepted the entry, False otherwise (never raises)
        """
        payload = entry.model_dump(mode="json", exclude_none=True)
        return self._emit("request", payload)

    async def log(
        self,
        user_id: str | None,
        action: str,
        resource_type: str | None = None,
        resource_id: str | None = None,
        ip_address: str | None = None,
        user_agent: str | None = None,
        request_id: str | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> bool:
        """
        Log an audit event (e.g. a record change).

        Args:
            user_id: Caller who performed the action
            action: Action name (e.g., "user_created", "user_deleted")
            resource_type: Type of resource (e.g., "user")
            resource_id: Specific resource ID
            ip_address: Client IP address
            user_agent: Client user agent string
            request_id: Request correlation ID for tracing
            metadata: Additional context (JSON-serializable dict)

        Returns:
            True if logged successfully, False if failed (never raises)
        """
        payload = {
            "audit_action": action,
            "user_id": user_id,
            "resource_type": resource_type,
            "resource_id": resource_id,
            "ip_address": ip_address,
            "user_agent": user_agent,
            "request_id": request_id,
            "timestamp": datetime.now(UTC).isoformat(),
        }
        if metadata:
            payload["metadata"] = metadata
        return self._emit("event", {k: v for k, v in payload.items() if v is not None})


# Global singleton instance
audit_logger = AuditLogger()
