"""Audit logging for tool invocations."""

from okta_admin_mcp.audit.models import AuditError, AuditRecord
from okta_admin_mcp.audit.recorder import AuditRecorder

__all__ = ["AuditError", "AuditRecord", "AuditRecorder"]
