"""Audit sink notifications - compliance traceability for case decisions.

The engine notifies a sink of every status change and every denied access.
Delivery is fire-and-forget: a failing sink is logged and never changes the
outcome of the decision or the write that triggered it.

Security guidelines:
- Use IDs, never beneficiary names, document filenames or notes
- `reason` is internal detail; it is never returned to the caller
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Protocol
from uuid import UUID

from legalaid.core.config import settings
from legalaid.core.errors import AccessDecision
from legalaid.core.principal import Principal
from legalaid.core.structured_logging import build_log_context


logger = logging.getLogger(__name__)


class AuditEventType(str, Enum):
    """Events the engine reports to the audit sink."""

    CASE_CREATED = "case_created"
    CASE_STATUS_CHANGED = "case_status_changed"
    CASE_LAWYER_ASSIGNED = "case_lawyer_assigned"
    CASE_DELETED = "case_deleted"
    ACCESS_DENIED = "access_denied"


@dataclass(frozen=True)
class AuditEvent:
    event_type: AuditEventType
    actor_user_id: UUID | None
    actor_kind: str | None
    target_type: str
    target_id: UUID | None
    details: dict[str, Any] = field(default_factory=dict)
    occurred_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class AuditSink(Protocol):
    def record(self, event: AuditEvent) -> None:
        """Persist or forward an audit event."""


class LoggingAuditSink:
    """Default sink: writes one structured log line per event."""

    def __init__(self, logger_name: str | None = None):
        self._logger = logging.getLogger(logger_name or settings.AUDIT_SINK_LOGGER)

    def record(self, event: AuditEvent) -> None:
        self._logger.info(
            "audit %s",
            event.event_type.value,
            extra={
                "audit_event": event.event_type.value,
                "actor_user_id": str(event.actor_user_id) if event.actor_user_id else None,
                "actor_kind": event.actor_kind,
                "target_type": event.target_type,
                "target_id": str(event.target_id) if event.target_id else None,
                "details": event.details,
            },
        )


class NullAuditSink:
    """Discards events. Pass explicitly to opt out of auditing."""

    def record(self, event: AuditEvent) -> None:
        return None


def get_default_sink() -> AuditSink:
    """Sink used whenever a caller does not supply one."""
    return LoggingAuditSink()


def notify(sink: AuditSink | None, event: AuditEvent) -> None:
    """Deliver an event to the sink (the default sink when None). Never raises."""
    if sink is None:
        sink = get_default_sink()
    try:
        sink.record(event)
    except Exception:
        logger.exception(
            "Audit sink failed",
            extra=build_log_context(
                user_id=event.actor_user_id,
                action=event.event_type.value,
            ),
        )


def notify_denied(
    sink: AuditSink | None,
    principal: Principal,
    decision: AccessDecision,
    *,
    target_type: str,
    target_id: UUID | None,
    action: str,
) -> None:
    """Report a denied decision (no-op when AUDIT_LOG_DENIALS is off)."""
    if decision.allowed or not settings.AUDIT_LOG_DENIALS:
        return
    notify(
        sink,
        AuditEvent(
            event_type=AuditEventType.ACCESS_DENIED,
            actor_user_id=principal.user_id,
            actor_kind=principal.actor_kind,
            target_type=target_type,
            target_id=target_id,
            details={
                "action": action,
                "denial": decision.denial.value if decision.denial else None,
                "reason": decision.reason,
            },
        ),
    )


def notify_status_changed(
    sink: AuditSink | None,
    principal: Principal,
    case_id: UUID,
    from_status: str | None,
    to_status: str,
) -> None:
    notify(
        sink,
        AuditEvent(
            event_type=AuditEventType.CASE_STATUS_CHANGED,
            actor_user_id=principal.user_id,
            actor_kind=principal.actor_kind,
            target_type="case",
            target_id=case_id,
            details={"from_status": from_status, "to_status": to_status},
        ),
    )
