"""Case access control - centralized permission checks for case operations.

Access rules:
- Staff with a recognized role can see every case (finer staff scoping such
  as "only my assigned cases" is a UI convenience, not a boundary)
- Beneficiaries can only see cases they own; anything else is reported as
  NOT_FOUND so a probe cannot tell "not yours" from "does not exist"
- Admin statuses are set by admins, operating statuses by the assigned lawyer

Every check returns an AccessDecision; the `can_*` helpers are boolean
shortcuts for filtering and templates.
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING

from legalaid.core import roles, status_graph
from legalaid.core.errors import ALLOW, AccessDecision
from legalaid.core.principal import BeneficiaryPrincipal, Principal
from legalaid.db.enums import AdminStatus

if TYPE_CHECKING:
    from legalaid.db.models import Case


def check_case_list(principal: Principal) -> AccessDecision:
    """
    Check if principal may list cases at all.

    Row scoping for beneficiaries is pushed into the query by
    `legalaid.services.scoping_service`, never applied here.
    """
    if roles.can_view_cases(principal):
        return ALLOW
    return AccessDecision.forbidden("principal cannot view cases")


def check_case_view(principal: Principal, case: Case | None) -> AccessDecision:
    """
    Check if principal can view this case.

    Access rules:
    - Missing case: NOT_FOUND for everyone
    - Staff (known role): always allowed
    - Beneficiary: owner only, otherwise NOT_FOUND (existence is hidden)
    - Anonymous: FORBIDDEN
    """
    if case is None:
        return AccessDecision.not_found("case does not exist")

    if roles.is_staff(principal):
        return ALLOW

    if isinstance(principal, BeneficiaryPrincipal):
        if case.beneficiary_id is not None and case.beneficiary_id == principal.beneficiary_id:
            return ALLOW
        return AccessDecision.not_found("case owned by another beneficiary")

    return AccessDecision.forbidden("principal cannot view cases")


def can_view_case(principal: Principal, case: Case | None) -> bool:
    """Non-raising boolean version of check_case_view."""
    return check_case_view(principal, case).allowed


def check_case_create(principal: Principal) -> AccessDecision:
    if roles.can_create_case(principal):
        return ALLOW
    return AccessDecision.forbidden("principal cannot create cases")


def _is_assigned_lawyer(principal: Principal, case: Case) -> bool:
    return (
        roles.is_lawyer(principal)
        and case.assigned_lawyer_id is not None
        and case.assigned_lawyer_id == principal.user_id
    )


def check_status_change(
    principal: Principal,
    case: Case | None,
    to_status: Enum | str,
) -> AccessDecision:
    """
    Check if principal may move `case` to `to_status`.

    Order matters for the reported denial:
    1. View check (beneficiary probes stay NOT_FOUND)
    2. Target must be an admin or operating status (INVALID_TRANSITION)
    3. Actor check (FORBIDDEN): admin targets need an admin, operating
       targets need the lawyer assigned to this case
    4. Edge must exist in the status graph (INVALID_TRANSITION)
    5. `assigned` requires a lawyer on the case (INVALID_TRANSITION)
    """
    view = check_case_view(principal, case)
    if not view:
        return view

    target = to_status.value if hasattr(to_status, "value") else to_status

    if status_graph.is_admin_status(target):
        if not roles.is_admin(principal):
            return AccessDecision.forbidden("admin status requires an admin")
    elif status_graph.is_operating_status(target):
        if not _is_assigned_lawyer(principal, case):
            return AccessDecision.forbidden("operating status requires the assigned lawyer")
    else:
        return AccessDecision.invalid_transition(f"{target!r} is not a settable status")

    if not status_graph.can_transition(case.status, target):
        return AccessDecision.invalid_transition(f"no edge {case.status} -> {target}")

    if target == AdminStatus.ASSIGNED.value and case.assigned_lawyer_id is None:
        return AccessDecision.invalid_transition("cannot set assigned without a lawyer")

    return ALLOW


def can_change_case_status(
    principal: Principal,
    case: Case | None,
    to_status: Enum | str,
) -> bool:
    return check_status_change(principal, case, to_status).allowed


def check_assign_lawyer(principal: Principal, case: Case | None) -> AccessDecision:
    """Admins only. Beneficiary probes on foreign cases stay NOT_FOUND."""
    view = check_case_view(principal, case)
    if not view:
        return view
    if roles.can_assign_lawyer(principal):
        return ALLOW
    return AccessDecision.forbidden("only admins can assign lawyers")


def check_case_delete(principal: Principal, case: Case | None) -> AccessDecision:
    """Deletion is a staff capability outside the status graph."""
    view = check_case_view(principal, case)
    if not view:
        return view
    if roles.can_delete_case(principal):
        return ALLOW
    return AccessDecision.forbidden("principal cannot delete cases")
