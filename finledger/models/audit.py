"""
Audit Models for finledger

Every significant action in the system is recorded as an AuditEvent:
logins, registrations, session restores, ledger writes and persistence
failures.

DESIGN DECISION: Audit events are append-only and never carry secrets.
Account secrets are not part of any builder signature.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


DESCRIPTION_MAX_LENGTH = 500


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _clip(text: str, limit: int = 120) -> str:
    """Shorten caller-supplied text embedded in a description."""
    if len(text) <= limit:
        return text
    return text[:limit - 3] + "..."


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Sessions
    LOGIN_SUCCEEDED = "login_succeeded"
    LOGIN_FAILED = "login_failed"
    REGISTRATION_SUCCEEDED = "registration_succeeded"
    REGISTRATION_FAILED = "registration_failed"
    SESSION_RESTORED = "session_restored"
    SESSION_DISCARDED = "session_discarded"
    LOGGED_OUT = "logged_out"

    # Ledger
    LEDGER_SEEDED = "ledger_seeded"
    LEDGER_LOADED = "ledger_loaded"
    LEDGER_RESET = "ledger_reset"
    TRANSACTION_ADDED = "transaction_added"
    TRANSACTION_REJECTED = "transaction_rejected"

    # System events
    PERSISTENCE_FAILED = "persistence_failed"
    SYSTEM_ERROR = "system_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of our audit trail.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=_utcnow,
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType
    severity: AuditSeverity = AuditSeverity.INFO

    # Context - what entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'session', 'transaction', 'ledger')"
    )
    entity_id: Optional[str] = None
    actor_id: Optional[str] = Field(
        default=None,
        description="Account id of the session that triggered the event"
    )
    correlation_id: Optional[UUID] = None

    description: str = Field(..., max_length=DESCRIPTION_MAX_LENGTH)
    details: dict[str, Any] = Field(default_factory=dict)

    error_message: Optional[str] = None
    is_user_action: bool = False

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "actor_id": self.actor_id,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.login_failed(email)
        event = AuditEventBuilder.transaction_added(transaction_id, owner_id, ...)
    """

    @staticmethod
    def login_succeeded(account_id: str, email: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LOGIN_SUCCEEDED,
            entity_type="session",
            entity_id=account_id,
            actor_id=account_id,
            description=f"Login succeeded for {_clip(email)}",
            details={"email": email},
            is_user_action=True,
        )

    @staticmethod
    def login_failed(email: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LOGIN_FAILED,
            severity=AuditSeverity.WARNING,
            entity_type="session",
            description=f"Login failed for {_clip(email)}",
            details={"email": email},
            is_user_action=True,
        )

    @staticmethod
    def registration_succeeded(account_id: str, email: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.REGISTRATION_SUCCEEDED,
            entity_type="account",
            entity_id=account_id,
            actor_id=account_id,
            description=f"Account registered for {_clip(email)}",
            details={"email": email},
            is_user_action=True,
        )

    @staticmethod
    def registration_failed(email: str, reason: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.REGISTRATION_FAILED,
            severity=AuditSeverity.WARNING,
            entity_type="account",
            description=f"Registration failed for {_clip(email)}",
            details={"email": email, "reason": reason},
            is_user_action=True,
        )

    @staticmethod
    def session_restored(account_id: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SESSION_RESTORED,
            entity_type="session",
            entity_id=account_id,
            actor_id=account_id,
            description="Persisted session adopted without re-validation",
        )

    @staticmethod
    def session_discarded(error_message: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SESSION_DISCARDED,
            severity=AuditSeverity.WARNING,
            entity_type="session",
            description="Persisted session was unreadable and has been discarded",
            error_message=error_message,
        )

    @staticmethod
    def logged_out(account_id: Optional[str]) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LOGGED_OUT,
            entity_type="session",
            entity_id=account_id,
            actor_id=account_id,
            description="Session cleared",
            is_user_action=True,
        )

    @staticmethod
    def ledger_seeded(count: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LEDGER_SEEDED,
            entity_type="ledger",
            description=f"No persisted ledger found; installed {count} seed transactions",
            details={"transaction_count": count},
        )

    @staticmethod
    def ledger_loaded(count: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LEDGER_LOADED,
            severity=AuditSeverity.DEBUG,
            entity_type="ledger",
            description=f"Loaded {count} persisted transactions",
            details={"transaction_count": count},
        )

    @staticmethod
    def ledger_reset(count: int, actor_id: Optional[str]) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LEDGER_RESET,
            severity=AuditSeverity.WARNING,
            entity_type="ledger",
            actor_id=actor_id,
            description=f"Ledger reset to {count} transactions",
            details={"transaction_count": count},
        )

    @staticmethod
    def transaction_added(
        transaction_id: str,
        owner_id: str,
        amount: float,
        transaction_type: str,
        category: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTION_ADDED,
            entity_type="transaction",
            entity_id=transaction_id,
            actor_id=owner_id,
            description=f"{transaction_type.capitalize()} of {amount:,} added to {_clip(category)}",
            details={
                "amount": amount,
                "type": transaction_type,
                "category": category,
            },
            is_user_action=True,
        )

    @staticmethod
    def transaction_rejected(
        owner_id: Optional[str],
        reason: str,
        details: Optional[dict] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTION_REJECTED,
            severity=AuditSeverity.WARNING,
            entity_type="transaction",
            actor_id=owner_id,
            description=f"Transaction rejected: {reason}",
            details=details or {},
            is_user_action=True,
        )

    @staticmethod
    def persistence_failed(key: str, error_message: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PERSISTENCE_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type="storage",
            entity_id=key,
            description=f"Could not persist '{key}'",
            error_message=error_message,
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"System error: {error_type}",
            error_message=error_message,
            details=details or {},
        )
