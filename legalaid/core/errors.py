"""Authorization decisions and the error taxonomy.

Policy checks return an `AccessDecision` instead of raising, so callers can
map every denial deterministically. Services convert a denial into one of the
typed `AuthorizationError` subclasses with `raise_for_decision`, and routers
turn those into HTTP responses with `http_exception_for`.

Unauthenticated requests never reach this layer (handled upstream, 401).
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from fastapi import HTTPException, status


class Denial(str, Enum):
    """Why a decision was denied."""

    FORBIDDEN = "forbidden"  # principal known, capability absent
    NOT_FOUND = "not_found"  # absent, or masked to hide existence from a beneficiary
    INVALID_TRANSITION = "invalid_transition"  # edge not in the status graph


@dataclass(frozen=True)
class AccessDecision:
    """Result of a policy check. Truthy when allowed."""

    allowed: bool
    denial: Denial | None = None
    reason: str | None = None  # internal detail for logs/audit, never shown to users

    def __bool__(self) -> bool:
        return self.allowed

    @classmethod
    def deny(cls, denial: Denial, reason: str | None = None) -> "AccessDecision":
        return cls(allowed=False, denial=denial, reason=reason)

    @classmethod
    def forbidden(cls, reason: str | None = None) -> "AccessDecision":
        return cls.deny(Denial.FORBIDDEN, reason)

    @classmethod
    def not_found(cls, reason: str | None = None) -> "AccessDecision":
        return cls.deny(Denial.NOT_FOUND, reason)

    @classmethod
    def invalid_transition(cls, reason: str | None = None) -> "AccessDecision":
        return cls.deny(Denial.INVALID_TRANSITION, reason)


ALLOW = AccessDecision(allowed=True)


# =============================================================================
# Exceptions
# =============================================================================


class AuthorizationError(Exception):
    """Base exception for engine denials."""

    denial: Denial = Denial.FORBIDDEN

    def __init__(self, reason: str | None = None):
        self.reason = reason
        super().__init__(reason or self.denial.value)


class ForbiddenError(AuthorizationError):
    """Principal recognized but lacks the capability."""

    denial = Denial.FORBIDDEN


class NotFoundError(AuthorizationError):
    """Resource absent, or not owned by the requesting beneficiary."""

    denial = Denial.NOT_FOUND


class InvalidTransitionError(AuthorizationError):
    """Requested status edge is not in the graph."""

    denial = Denial.INVALID_TRANSITION


class StatusConflictError(Exception):
    """Raised when the case status changed between read and conditional write."""

    def __init__(self, expected: str, actual: str | None):
        self.expected = expected
        self.actual = actual
        super().__init__(f"Status conflict: expected {expected}, got {actual}")


_ERRORS_BY_DENIAL: dict[Denial, type[AuthorizationError]] = {
    Denial.FORBIDDEN: ForbiddenError,
    Denial.NOT_FOUND: NotFoundError,
    Denial.INVALID_TRANSITION: InvalidTransitionError,
}


def raise_for_decision(decision: AccessDecision) -> None:
    """
    Raise the typed error matching a denied decision.

    Raises:
        ForbiddenError / NotFoundError / InvalidTransitionError
    """
    if decision.allowed:
        return
    error_cls = _ERRORS_BY_DENIAL.get(decision.denial, ForbiddenError)
    raise error_cls(decision.reason)


# =============================================================================
# HTTP mapping
# =============================================================================

FORBIDDEN_DETAIL = "You don't have permission to perform this action"
NOT_FOUND_DETAIL = "Not found"
INVALID_TRANSITION_DETAIL = "Invalid status transition"
STATUS_CONFLICT_DETAIL = "Case status changed; reload and retry"


def http_exception_for(error: AuthorizationError | StatusConflictError) -> HTTPException:
    """
    Map an engine error to an HTTPException.

    Reasons are never echoed: a masked NOT_FOUND must read exactly like a
    genuinely missing resource.
    """
    if isinstance(error, StatusConflictError):
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=STATUS_CONFLICT_DETAIL)
    if isinstance(error, NotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=NOT_FOUND_DETAIL)
    if isinstance(error, InvalidTransitionError):
        return HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail=INVALID_TRANSITION_DETAIL
        )
    return HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=FORBIDDEN_DETAIL)
