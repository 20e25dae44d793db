"""Case lifecycle service (read scoping + status changes + assignment + timeline).

Every mutation decides against the row read in the same session and writes
with a conditional UPDATE on the status it decided against. If another
request moved the case in between, zero rows match and StatusConflictError
is raised instead of silently applying a change checked against a stale
status.
"""

import logging
from datetime import datetime, timezone
from enum import Enum
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from legalaid.core import status_graph
from legalaid.core.case_access import (
    check_assign_lawyer,
    check_case_create,
    check_case_delete,
    check_case_list,
    check_case_view,
    check_status_change,
)
from legalaid.core.errors import (
    AccessDecision,
    InvalidTransitionError,
    StatusConflictError,
    raise_for_decision,
)
from legalaid.core.principal import Principal
from legalaid.core.structured_logging import build_log_context
from legalaid.db.enums import (
    AdminStatus,
    LegacyStatus,
    OperatingStatus,
    Role,
    TimelineEventType,
    UserType,
)
from legalaid.db.models import Beneficiary, Case, CaseTimelineEvent, User
from legalaid.schemas.case import CaseCreate
from legalaid.services import audit_service, scoping_service


logger = logging.getLogger(__name__)

# Statuses from which an assignment moves the case to `assigned`
_ASSIGNABLE_STATUSES = frozenset(
    {AdminStatus.ACCEPTED_PENDING_ASSIGNMENT.value, LegacyStatus.ACCEPTED.value}
)


def _enforce(
    decision: AccessDecision,
    principal: Principal,
    *,
    action: str,
    case_id: UUID | None,
    audit_sink: audit_service.AuditSink | None,
) -> None:
    """Log + audit a denial, then raise its typed error."""
    if decision.allowed:
        return
    logger.info(
        "Case access denied: %s",
        decision.denial.value if decision.denial else "denied",
        extra=build_log_context(
            user_id=principal.user_id,
            actor_kind=principal.actor_kind,
            case_id=case_id,
            action=action,
        ),
    )
    audit_service.notify_denied(
        audit_sink,
        principal,
        decision,
        target_type="case",
        target_id=case_id,
        action=action,
    )
    raise_for_decision(decision)


def _add_timeline_event(
    db: Session,
    case_id: UUID,
    event_type: TimelineEventType,
    actor_user_id: UUID | None,
    from_status: str | None = None,
    to_status: str | None = None,
    note: str | None = None,
) -> CaseTimelineEvent:
    event = CaseTimelineEvent(
        case_id=case_id,
        event_type=event_type.value,
        from_status=from_status,
        to_status=to_status,
        note=note,
        actor_user_id=actor_user_id,
        created_at=datetime.now(timezone.utc),
    )
    db.add(event)
    return event


def _conditional_update(db: Session, case: Case, from_status: str, values: dict) -> None:
    """
    UPDATE cases SET ... WHERE id = :id AND status = :from_status.

    Raises:
        StatusConflictError: status no longer matches what was decided against
    """
    result = db.execute(
        update(Case)
        .where(Case.id == case.id, Case.status == from_status)
        .values(**values)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        actual = db.execute(select(Case.status).where(Case.id == case.id)).scalar_one_or_none()
        db.rollback()
        logger.warning(
            "Case status conflict",
            extra=build_log_context(case_id=case.id, action="status_update"),
        )
        raise StatusConflictError(expected=from_status, actual=actual)
    db.refresh(case)


# =============================================================================
# Reads
# =============================================================================


def get_case(db: Session, case_id: UUID, *, for_update: bool = False) -> Case | None:
    """Load a case, optionally locking the row (no-op on SQLite)."""
    stmt = select(Case).where(Case.id == case_id).execution_options(populate_existing=True)
    if for_update:
        stmt = stmt.with_for_update()
    return db.execute(stmt).scalar_one_or_none()


def get_case_for_principal(
    db: Session,
    principal: Principal,
    case_id: UUID,
    *,
    for_update: bool = False,
    audit_sink: audit_service.AuditSink | None = None,
) -> Case:
    """
    Fetch a case the principal may view.

    Raises:
        NotFoundError: missing, or owned by another beneficiary
        ForbiddenError: principal cannot view cases
    """
    case = get_case(db, case_id, for_update=for_update)
    _enforce(
        check_case_view(principal, case),
        principal,
        action="view_case",
        case_id=case_id,
        audit_sink=audit_sink,
    )
    return case


def list_cases(
    db: Session,
    principal: Principal,
    status: str | None = None,
    *,
    audit_sink: audit_service.AuditSink | None = None,
) -> list[Case]:
    """List cases with scoping pushed into the query."""
    _enforce(
        check_case_list(principal),
        principal,
        action="list_cases",
        case_id=None,
        audit_sink=audit_sink,
    )
    return scoping_service.list_cases_visible_to(db, principal, status=status)


def list_timeline(
    db: Session,
    principal: Principal,
    case_id: UUID,
    *,
    audit_sink: audit_service.AuditSink | None = None,
) -> list[CaseTimelineEvent]:
    case = get_case_for_principal(db, principal, case_id, audit_sink=audit_sink)
    return list(
        db.execute(
            select(CaseTimelineEvent)
            .where(CaseTimelineEvent.case_id == case.id)
            .order_by(CaseTimelineEvent.created_at.asc())
        )
        .scalars()
        .all()
    )


# =============================================================================
# Mutations
# =============================================================================


def create_case(
    db: Session,
    principal: Principal,
    data: CaseCreate,
    *,
    audit_sink: audit_service.AuditSink | None = None,
) -> Case:
    """
    Create a case in the initial status.

    Raises:
        ForbiddenError: principal cannot create cases
        ValueError: beneficiary does not exist
    """
    _enforce(check_case_create(principal), principal, action="create_case", case_id=None, audit_sink=audit_sink)

    if db.get(Beneficiary, data.beneficiary_id) is None:
        raise ValueError("Beneficiary not found")

    case = Case(
        beneficiary_id=data.beneficiary_id,
        title=data.title,
        case_type=data.case_type,
        internal_notes=data.internal_notes,
        status=status_graph.INITIAL_STATUS,
        created_by_user_id=principal.user_id,
    )
    db.add(case)
    db.flush()
    _add_timeline_event(
        db,
        case.id,
        TimelineEventType.CASE_CREATED,
        principal.user_id,
        to_status=case.status,
    )
    db.commit()
    db.refresh(case)

    audit_service.notify(
        audit_sink,
        audit_service.AuditEvent(
            event_type=audit_service.AuditEventType.CASE_CREATED,
            actor_user_id=principal.user_id,
            actor_kind=principal.actor_kind,
            target_type="case",
            target_id=case.id,
        ),
    )
    return case


def change_status(
    db: Session,
    principal: Principal,
    case: Case,
    to_status: Enum | str,
    note: str | None = None,
    *,
    audit_sink: audit_service.AuditSink | None = None,
    event_type: TimelineEventType = TimelineEventType.STATUS_CHANGED,
) -> Case:
    """
    Move a case along the status graph.

    `case` must be the row the caller read in this session; the write only
    applies if the stored status still equals `case.status`.

    Raises:
        NotFoundError: beneficiary probing a case they do not own
        ForbiddenError: wrong actor for the target status
        InvalidTransitionError: edge not in the graph
        StatusConflictError: status changed since it was read
    """
    target = to_status.value if hasattr(to_status, "value") else to_status
    case_id = case.id if case is not None else None
    _enforce(
        check_status_change(principal, case, target),
        principal,
        action="change_status",
        case_id=case_id,
        audit_sink=audit_sink,
    )

    from_status = case.status
    now = datetime.now(timezone.utc)
    values: dict = {"status": target, "updated_at": now}
    if target == AdminStatus.ACCEPTED_PENDING_ASSIGNMENT.value:
        values["accepted_by_user_id"] = principal.user_id
        values["accepted_at"] = now
    elif target == OperatingStatus.COMPLETED.value:
        values["completed_at"] = now
    elif target == AdminStatus.CLOSED_ADMIN.value:
        values["closed_at"] = now

    _conditional_update(db, case, from_status, values)
    _add_timeline_event(
        db,
        case.id,
        event_type,
        principal.user_id,
        from_status=from_status,
        to_status=target,
        note=note,
    )
    db.commit()

    logger.info(
        "Case status changed %s -> %s",
        from_status,
        target,
        extra=build_log_context(
            user_id=principal.user_id,
            actor_kind=principal.actor_kind,
            case_id=case.id,
            action="change_status",
        ),
    )
    audit_service.notify_status_changed(audit_sink, principal, case.id, from_status, target)
    return case


def approve_case(
    db: Session,
    principal: Principal,
    case: Case,
    *,
    audit_sink: audit_service.AuditSink | None = None,
) -> Case:
    """Admin acceptance: pending review -> accepted, awaiting assignment."""
    return change_status(
        db,
        principal,
        case,
        AdminStatus.ACCEPTED_PENDING_ASSIGNMENT,
        audit_sink=audit_sink,
        event_type=TimelineEventType.APPROVED,
    )


def reject_case(
    db: Session,
    principal: Principal,
    case: Case,
    reason: str | None = None,
    *,
    audit_sink: audit_service.AuditSink | None = None,
) -> Case:
    return change_status(
        db,
        principal,
        case,
        AdminStatus.REJECTED,
        note=reason,
        audit_sink=audit_sink,
        event_type=TimelineEventType.REJECTED,
    )


def _is_lawyer_user(user: User | None) -> bool:
    return (
        user is not None
        and user.is_active
        and user.user_type == UserType.STAFF.value
        and user.role == Role.LAWYER.value
    )


def _assignment_target_status(current: str | None) -> str:
    """
    Status a case ends up in after (re)assignment.

    - awaiting assignment -> assigned
    - already assigned / in-flight casework -> unchanged (reassignment)
    - anything else (pending review, terminal, legacy-dead) -> invalid
    """
    if current in _ASSIGNABLE_STATUSES:
        return AdminStatus.ASSIGNED.value
    if current == AdminStatus.ASSIGNED.value or current == LegacyStatus.ON_HOLD.value:
        return current
    if status_graph.is_operating_status(current) and not status_graph.is_terminal_status(current):
        return current
    raise InvalidTransitionError(f"cannot assign a lawyer in status {current!r}")


def assign_lawyer(
    db: Session,
    principal: Principal,
    case: Case,
    lawyer_user_id: UUID,
    *,
    audit_sink: audit_service.AuditSink | None = None,
) -> Case:
    """
    Assign (or reassign) the lawyer on a case. Admins only.

    Raises:
        ForbiddenError / NotFoundError: not allowed to assign
        ValueError: target user is not an active staff lawyer
        InvalidTransitionError: case is not in an assignable status
        StatusConflictError: status changed since it was read
    """
    case_id = case.id if case is not None else None
    _enforce(
        check_assign_lawyer(principal, case),
        principal,
        action="assign_lawyer",
        case_id=case_id,
        audit_sink=audit_sink,
    )

    lawyer = db.get(User, lawyer_user_id)
    if not _is_lawyer_user(lawyer):
        raise ValueError("Invalid lawyer")

    from_status = case.status
    target = _assignment_target_status(from_status)

    _conditional_update(
        db,
        case,
        from_status,
        {
            "assigned_lawyer_id": lawyer.id,
            "status": target,
            "updated_at": datetime.now(timezone.utc),
        },
    )
    _add_timeline_event(
        db,
        case.id,
        TimelineEventType.LAWYER_ASSIGNED,
        principal.user_id,
        from_status=from_status,
        to_status=target,
        note=str(lawyer.id),
    )
    db.commit()

    audit_service.notify(
        audit_sink,
        audit_service.AuditEvent(
            event_type=audit_service.AuditEventType.CASE_LAWYER_ASSIGNED,
            actor_user_id=principal.user_id,
            actor_kind=principal.actor_kind,
            target_type="case",
            target_id=case.id,
            details={"lawyer_user_id": str(lawyer.id), "from_status": from_status, "to_status": target},
        ),
    )
    if from_status != target:
        audit_service.notify_status_changed(audit_sink, principal, case.id, from_status, target)
    return case


def delete_case(
    db: Session,
    principal: Principal,
    case: Case,
    *,
    audit_sink: audit_service.AuditSink | None = None,
) -> None:
    """Hard-delete a case (staff capability, not governed by the status graph)."""
    case_id = case.id if case is not None else None
    _enforce(
        check_case_delete(principal, case),
        principal,
        action="delete_case",
        case_id=case_id,
        audit_sink=audit_sink,
    )
    db.delete(case)
    db.commit()
    audit_service.notify(
        audit_sink,
        audit_service.AuditEvent(
            event_type=audit_service.AuditEventType.CASE_DELETED,
            actor_user_id=principal.user_id,
            actor_kind=principal.actor_kind,
            target_type="case",
            target_id=case_id,
        ),
    )
