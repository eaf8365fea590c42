"""
Audit logging infrastructure.

Request-level and record-change audit entries for the employee records API.
"""

from app.infrastructure.audit.audit_logger import AuditEntry, AuditLogger, audit_logger

__all__ = ["AuditEntry", "AuditLogger", "audit_logger"]
