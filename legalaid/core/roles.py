"""Role-derived capabilities.

Pure predicates over a resolved principal. Nothing here raises: an anonymous
principal (or any unknown role) simply gets False everywhere.
"""

from legalaid.core.errors import ALLOW, AccessDecision
from legalaid.core.principal import BeneficiaryPrincipal, Principal, StaffPrincipal
from legalaid.db.enums import (
    ROLES_ADMIN,
    ROLES_CAN_ASSIGN_LAWYER,
    ROLES_CAN_CREATE_CASE,
    ROLES_CAN_DELETE_CASE,
    ROLES_CAN_MANAGE_USERS,
    ROLES_CAN_VIEW_REPORTS,
    STAFF_ROLES,
    Role,
)


def _staff_role(principal: Principal) -> Role | None:
    if isinstance(principal, StaffPrincipal) and principal.role in STAFF_ROLES:
        return principal.role
    return None


def is_staff(principal: Principal) -> bool:
    """Staff with a recognized role."""
    return _staff_role(principal) is not None


def is_admin(principal: Principal) -> bool:
    return _staff_role(principal) in ROLES_ADMIN


def is_lawyer(principal: Principal) -> bool:
    return _staff_role(principal) == Role.LAWYER


def is_beneficiary(principal: Principal) -> bool:
    return isinstance(principal, BeneficiaryPrincipal)


def can_view_cases(principal: Principal) -> bool:
    """Any resolved principal. Beneficiaries are scoped to their own cases elsewhere."""
    return is_staff(principal) or is_beneficiary(principal)


def can_create_case(principal: Principal) -> bool:
    """Staff only; beneficiaries submit intake requests instead."""
    return _staff_role(principal) in ROLES_CAN_CREATE_CASE


def can_assign_lawyer(principal: Principal) -> bool:
    return _staff_role(principal) in ROLES_CAN_ASSIGN_LAWYER


def can_delete_case(principal: Principal) -> bool:
    return _staff_role(principal) in ROLES_CAN_DELETE_CASE


def can_manage_users(principal: Principal) -> bool:
    return _staff_role(principal) in ROLES_CAN_MANAGE_USERS


def can_view_reports(principal: Principal) -> bool:
    return _staff_role(principal) in ROLES_CAN_VIEW_REPORTS


# Capabilities outside beneficiary-owned resources: a beneficiary gets a plain
# FORBIDDEN here, never a masked NOT_FOUND, since there is no existence to hide.

def check_manage_users(principal: Principal) -> AccessDecision:
    if can_manage_users(principal):
        return ALLOW
    return AccessDecision.forbidden("principal cannot manage users")


def check_view_reports(principal: Principal) -> AccessDecision:
    if can_view_reports(principal):
        return ALLOW
    return AccessDecision.forbidden("principal cannot view reports")
