"""Audit logging package."""

from finledger.audit.logger import AuditLogger, log_event, set_log_level

__all__ = ["AuditLogger", "log_event", "set_log_level"]
