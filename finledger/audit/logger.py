"""
Audit Logger

DESIGN DECISION: Every significant action in the system is logged.
This provides:
1. Traceability of logins, registrations and ledger writes
2. Debugging capability when persistence fails
3. A recent-activity feed for the admin view

The audit logger:
- Is synchronous, since every ledger operation it observes is synchronous
- Never raises into the caller's flow
- Never receives secrets (builders take emails and ids only)
"""

import logging
from collections import deque
from typing import Optional

import structlog

from finledger.models.audit import AuditEvent, AuditSeverity


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


def set_log_level(level: str) -> None:
    """Set the level of every finledger logger."""
    logging.getLogger("finledger").setLevel(level.upper())


class AuditLogger:
    """
    Central audit logging service.

    Logs events both to:
    1. Structured local log (structlog, JSON lines)
    2. A bounded in-memory history for recent_events()
    """

    def __init__(self, history_size: int = 500):
        """
        Initialize audit logger.

        Args:
            history_size: How many events to keep in memory.
                          0 disables the history.
        """
        self._history: deque[AuditEvent] = deque(maxlen=history_size)
        self._logger = structlog.get_logger("finledger.audit")

    def log(self, event: AuditEvent) -> None:
        """Log an audit event locally and remember it."""
        log_dict = event.to_log_dict()

        if event.severity in (AuditSeverity.ERROR, AuditSeverity.CRITICAL):
            self._logger.error("audit_event", **log_dict)
        elif event.severity == AuditSeverity.WARNING:
            self._logger.warning("audit_event", **log_dict)
        elif event.severity == AuditSeverity.DEBUG:
            self._logger.debug("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        self._history.append(event)

    def recent_events(self, limit: int = 100) -> list[AuditEvent]:
        """Most recent events, newest first."""
        if limit <= 0:
            return []
        return list(reversed(self._history))[:limit]

    def events_for_actor(self, actor_id: str) -> list[AuditEvent]:
        """Events triggered by one account, oldest first."""
        return [event for event in self._history if event.actor_id == actor_id]


def log_event(audit_logger: Optional[AuditLogger], event: AuditEvent) -> None:
    """Log event if an audit logger is configured."""
    if audit_logger is not None:
        audit_logger.log(event)
