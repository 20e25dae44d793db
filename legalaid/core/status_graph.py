"""Case status graph.

Admin statuses (intake, acceptance, assignment, closure) and operating
statuses (in-flight casework) share the single `cases.status` column but are
governed by different actors. `can_transition` only answers whether an edge
exists; who may walk it is decided by `legalaid.core.case_access`.

    pending_review -> accepted_pending_assignment -> assigned
        -> in_progress <-> awaiting_documents / awaiting_hearing / awaiting_judgment
        -> completed | closed_admin

Terminal: rejected, completed, closed_admin, cancelled.
"""

from __future__ import annotations

from enum import Enum
from types import MappingProxyType
from typing import Mapping

from legalaid.db.enums import AdminStatus, LegacyStatus, OperatingStatus


class StatusGraphError(Exception):
    """Raised at import when the transition table is inconsistent."""

    pass


ADMIN_STATUSES: frozenset[str] = frozenset(s.value for s in AdminStatus)
OPERATING_STATUSES: frozenset[str] = frozenset(s.value for s in OperatingStatus)
LEGACY_STATUSES: frozenset[str] = frozenset(s.value for s in LegacyStatus)
KNOWN_STATUSES: frozenset[str] = ADMIN_STATUSES | OPERATING_STATUSES | LEGACY_STATUSES

INITIAL_STATUS = AdminStatus.PENDING_REVIEW.value

TERMINAL_STATUSES: frozenset[str] = frozenset(
    {
        AdminStatus.REJECTED.value,
        AdminStatus.CLOSED_ADMIN.value,
        OperatingStatus.COMPLETED.value,
        LegacyStatus.CANCELLED.value,
    }
)

_A = AdminStatus
_O = OperatingStatus
_L = LegacyStatus

_TRANSITION_TABLE: dict[Enum, tuple[Enum, ...]] = {
    # Legacy intake flow
    _L.PENDING_ADMIN_REVIEW: (_L.ACCEPTED, _A.ACCEPTED_PENDING_ASSIGNMENT, _A.REJECTED, _L.CANCELLED),
    _L.ACCEPTED: (_A.ASSIGNED, _L.CANCELLED, _L.ON_HOLD),
    _L.ON_HOLD: (_O.IN_PROGRESS, _L.CANCELLED),
    # Administrative
    _A.PENDING_REVIEW: (_A.ACCEPTED_PENDING_ASSIGNMENT, _A.REJECTED, _A.CLOSED_ADMIN),
    _A.ACCEPTED_PENDING_ASSIGNMENT: (_A.ASSIGNED, _A.CLOSED_ADMIN),
    _A.ASSIGNED: (
        _O.IN_PROGRESS,
        _O.AWAITING_DOCUMENTS,
        _O.AWAITING_HEARING,
        _O.AWAITING_JUDGMENT,
        _O.COMPLETED,
        _A.CLOSED_ADMIN,
    ),
    # Operating
    _O.IN_PROGRESS: (
        _O.AWAITING_DOCUMENTS,
        _O.AWAITING_HEARING,
        _O.AWAITING_JUDGMENT,
        _O.COMPLETED,
        _A.CLOSED_ADMIN,
    ),
    _O.AWAITING_DOCUMENTS: (
        _O.IN_PROGRESS,
        _O.AWAITING_HEARING,
        _O.AWAITING_JUDGMENT,
        _O.COMPLETED,
        _A.CLOSED_ADMIN,
    ),
    _O.AWAITING_HEARING: (
        _O.IN_PROGRESS,
        _O.AWAITING_DOCUMENTS,
        _O.AWAITING_JUDGMENT,
        _O.COMPLETED,
        _A.CLOSED_ADMIN,
    ),
    _O.AWAITING_JUDGMENT: (_O.IN_PROGRESS, _O.COMPLETED, _A.CLOSED_ADMIN),
    # Terminal
    _A.REJECTED: (),
    _A.CLOSED_ADMIN: (),
    _O.COMPLETED: (),
    _L.CANCELLED: (),
}


def _build_transitions(table: dict[Enum, tuple[Enum, ...]]) -> Mapping[str, frozenset[str]]:
    """Freeze the hand-authored table and check it against the vertex sets."""
    frozen: dict[str, frozenset[str]] = {}
    for source, targets in table.items():
        frozen[source.value] = frozenset(t.value for t in targets)

    missing = (ADMIN_STATUSES | OPERATING_STATUSES) - frozen.keys()
    if missing:
        raise StatusGraphError(f"Statuses missing from transition table: {sorted(missing)}")

    for source, targets in frozen.items():
        unknown = targets - KNOWN_STATUSES
        if unknown:
            raise StatusGraphError(f"Unknown targets from {source}: {sorted(unknown)}")
        if source in TERMINAL_STATUSES and targets:
            raise StatusGraphError(f"Terminal status {source} has outgoing edges")

    return MappingProxyType(frozen)


TRANSITIONS: Mapping[str, frozenset[str]] = _build_transitions(_TRANSITION_TABLE)


def _value(status: Enum | str | None) -> str | None:
    return status.value if hasattr(status, "value") else status


def is_admin_status(status: Enum | str | None) -> bool:
    return _value(status) in ADMIN_STATUSES


def is_operating_status(status: Enum | str | None) -> bool:
    return _value(status) in OPERATING_STATUSES


def is_legacy_status(status: Enum | str | None) -> bool:
    return _value(status) in LEGACY_STATUSES


def is_known_status(status: Enum | str | None) -> bool:
    """Valid as stored data (includes legacy values)."""
    return _value(status) in KNOWN_STATUSES


def is_terminal_status(status: Enum | str | None) -> bool:
    return _value(status) in TERMINAL_STATUSES


def allowed_transitions(status: Enum | str | None) -> frozenset[str]:
    """Outgoing edges for `status`; empty for terminal, legacy-dead or unknown values."""
    return TRANSITIONS.get(_value(status), frozenset())


def can_transition(from_status: Enum | str | None, to_status: Enum | str | None) -> bool:
    """True iff `to_status` is in the adjacency list of `from_status`."""
    return _value(to_status) in allowed_transitions(from_status)
