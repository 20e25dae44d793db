"""Principal resolution and role capability tests."""

import uuid
from types import SimpleNamespace

import pytest

from legalaid.core import roles
from legalaid.core.principal import (
    ANONYMOUS,
    AnonymousPrincipal,
    BeneficiaryPrincipal,
    StaffPrincipal,
    principal_for_user,
    resolve_principal,
)
from legalaid.db.enums import STAFF_ROLES, Role, UserType


# =============================================================================
# resolve_principal
# =============================================================================


@pytest.mark.parametrize("role", sorted(STAFF_ROLES, key=lambda r: r.value))
def test_staff_roles_resolve_to_staff(role):
    user_id = uuid.uuid4()
    principal = resolve_principal(user_id, UserType.STAFF, role.value)
    assert principal == StaffPrincipal(user_id=user_id, role=role)
    assert principal.actor_kind == "staff"


def test_beneficiary_by_user_type_or_role():
    user_id = uuid.uuid4()
    beneficiary_id = uuid.uuid4()
    by_type = resolve_principal(user_id, "beneficiary", None, beneficiary_id)
    by_role = resolve_principal(user_id, None, "beneficiary", beneficiary_id)
    assert by_type == by_role == BeneficiaryPrincipal(user_id, beneficiary_id)


def test_beneficiary_role_wins_over_staff_user_type():
    principal = resolve_principal(uuid.uuid4(), "staff", "beneficiary", uuid.uuid4())
    assert isinstance(principal, BeneficiaryPrincipal)


def test_beneficiary_without_record_is_anonymous():
    principal = resolve_principal(uuid.uuid4(), "beneficiary", "beneficiary", None)
    assert isinstance(principal, AnonymousPrincipal)
    assert not roles.is_beneficiary(principal)
    assert not roles.can_view_cases(principal)


@pytest.mark.parametrize("role", [None, "", "janitor", "SUPER_ADMIN"])
def test_unknown_role_fails_closed(role):
    principal = resolve_principal(uuid.uuid4(), "staff", role)
    assert isinstance(principal, AnonymousPrincipal)
    assert not roles.can_view_cases(principal)


def test_no_user_is_anonymous():
    assert resolve_principal(None, "staff", "admin") is ANONYMOUS


def test_inactive_user_is_anonymous():
    user = SimpleNamespace(id=uuid.uuid4(), user_type="staff", role="admin", is_active=False)
    assert principal_for_user(user) is ANONYMOUS


# =============================================================================
# Capabilities
# =============================================================================


def _staff(role: Role) -> StaffPrincipal:
    return StaffPrincipal(user_id=uuid.uuid4(), role=role)


def test_admin_capabilities():
    for role in (Role.ADMIN, Role.SUPER_ADMIN):
        principal = _staff(role)
        assert roles.is_admin(principal)
        assert roles.can_assign_lawyer(principal)
        assert roles.can_manage_users(principal)
        assert roles.can_view_reports(principal)


def test_lawyer_capabilities():
    principal = _staff(Role.LAWYER)
    assert roles.is_lawyer(principal)
    assert roles.can_create_case(principal)
    assert roles.can_delete_case(principal)
    assert not roles.is_admin(principal)
    assert not roles.can_assign_lawyer(principal)
    assert not roles.can_view_reports(principal)


def test_read_only_staff():
    for role in (Role.VIEWER, Role.EXPERT):
        principal = _staff(role)
        assert roles.can_view_cases(principal)
        assert not roles.can_create_case(principal)
        assert not roles.can_delete_case(principal)


def test_intake_officer_can_create_but_not_delete():
    principal = _staff(Role.INTAKE_OFFICER)
    assert roles.can_create_case(principal)
    assert not roles.can_delete_case(principal)


def test_beneficiary_has_no_staff_capability():
    principal = BeneficiaryPrincipal(user_id=uuid.uuid4(), beneficiary_id=uuid.uuid4())
    assert roles.is_beneficiary(principal)
    assert roles.can_view_cases(principal)
    assert not roles.is_staff(principal)
    assert not roles.can_create_case(principal)
    assert not roles.can_manage_users(principal)
    assert not roles.can_view_reports(principal)


def test_anonymous_has_nothing():
    checks = [
        roles.is_staff,
        roles.is_admin,
        roles.is_lawyer,
        roles.is_beneficiary,
        roles.can_view_cases,
        roles.can_create_case,
        roles.can_assign_lawyer,
        roles.can_delete_case,
        roles.can_manage_users,
        roles.can_view_reports,
    ]
    for check in checks:
        assert check(ANONYMOUS) is False


def test_settings_and_reports_are_plain_forbidden():
    from legalaid.core.errors import Denial

    beneficiary = BeneficiaryPrincipal(user_id=uuid.uuid4(), beneficiary_id=uuid.uuid4())
    for principal in (beneficiary, _staff(Role.LAWYER), ANONYMOUS):
        assert roles.check_view_reports(principal).denial == Denial.FORBIDDEN
        assert roles.check_manage_users(principal).denial == Denial.FORBIDDEN
    assert roles.check_view_reports(_staff(Role.ADMIN))
    assert roles.check_manage_users(_staff(Role.SUPER_ADMIN))
