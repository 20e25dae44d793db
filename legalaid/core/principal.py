"""Authenticated principal for a request.

A user row may carry both `user_type` (staff|beneficiary) and a granular
`role`. The overlap is resolved exactly once, here, into one of three
variants; policy checks only ever look at the variant and never re-derive it
from raw user fields.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union
from uuid import UUID

from legalaid.db.enums import STAFF_ROLES, Role, UserType


@dataclass(frozen=True)
class StaffPrincipal:
    """Staff member with one known staff role."""

    user_id: UUID
    role: Role

    actor_kind = UserType.STAFF.value
    beneficiary_id = None


@dataclass(frozen=True)
class BeneficiaryPrincipal:
    """Portal user acting as exactly one beneficiary record."""

    user_id: UUID
    beneficiary_id: UUID

    actor_kind = UserType.BENEFICIARY.value
    role = Role.BENEFICIARY


@dataclass(frozen=True)
class AnonymousPrincipal:
    """No usable identity. Granted no capability."""

    user_id: UUID | None = None

    actor_kind = None
    role = None
    beneficiary_id = None


Principal = Union[StaffPrincipal, BeneficiaryPrincipal, AnonymousPrincipal]

ANONYMOUS = AnonymousPrincipal()


def _coerce_role(role: Role | str | None) -> Role | None:
    if role is None:
        return None
    if isinstance(role, Role):
        return role
    if Role.has_value(role):
        return Role(role)
    return None


def resolve_principal(
    user_id: UUID | None,
    user_type: UserType | str | None = None,
    role: Role | str | None = None,
    beneficiary_id: UUID | None = None,
) -> Principal:
    """
    Collapse stored user fields into a principal.

    Rules:
    - user_type "beneficiary" or role "beneficiary" -> beneficiary, provided
      the linked beneficiary record is known; otherwise anonymous
    - a known staff role -> staff
    - anything else -> anonymous (fail closed)

    A portal account with no linked beneficiary record is therefore not a
    beneficiary here (`roles.is_beneficiary` is False), even though its
    stored `user_type` says otherwise. Without a beneficiary id there is no
    ownership to scope by, so it gets no capability at all.
    """
    if user_id is None:
        return ANONYMOUS

    type_str = user_type.value if hasattr(user_type, "value") else user_type
    resolved_role = _coerce_role(role)

    if type_str == UserType.BENEFICIARY.value or resolved_role == Role.BENEFICIARY:
        if beneficiary_id is None:
            return AnonymousPrincipal(user_id=user_id)
        return BeneficiaryPrincipal(user_id=user_id, beneficiary_id=beneficiary_id)

    if resolved_role in STAFF_ROLES:
        return StaffPrincipal(user_id=user_id, role=resolved_role)

    return AnonymousPrincipal(user_id=user_id)


def principal_for_user(user, beneficiary_id: UUID | None = None) -> Principal:
    """Resolve a principal from a `User` row (and its beneficiary link, if any)."""
    if user is None or not user.is_active:
        return ANONYMOUS
    return resolve_principal(
        user_id=user.id,
        user_type=user.user_type,
        role=user.role,
        beneficiary_id=beneficiary_id,
    )
