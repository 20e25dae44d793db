"""Scoped queries - access predicates pushed down into SQL.

Every "list mine" query filters in the WHERE clause. Nothing here loads a
full table and discards rows afterwards: a forgotten filter must surface as
an empty result, never as a leak.

Predicates:
- scope_clause_for_beneficiary: cases a principal may list
- document_scope_clause: binary-model documents a principal may see
- library_scope_clause: tiered-model library documents a principal may see
"""

import logging
from uuid import UUID

from sqlalchemy import and_, false, or_, select, true
from sqlalchemy.orm import Session
from sqlalchemy.sql.elements import ColumnElement

from legalaid.core import roles
from legalaid.core.case_access import check_case_view
from legalaid.core.errors import raise_for_decision
from legalaid.core.principal import BeneficiaryPrincipal, Principal
from legalaid.core.structured_logging import build_log_context
from legalaid.db.enums import LibraryVisibility
from legalaid.db.models import Case, Document, LibraryDocument
from legalaid.services import audit_service


logger = logging.getLogger(__name__)


# =============================================================================
# Predicates
# =============================================================================


def scope_clause_for_beneficiary(principal: Principal) -> ColumnElement[bool]:
    """
    Build the WHERE clause for listing cases.

    - Staff (known role): no restriction
    - Beneficiary: own cases only
    - Anonymous: nothing
    """
    if roles.is_staff(principal):
        return true()
    if isinstance(principal, BeneficiaryPrincipal):
        return Case.beneficiary_id == principal.beneficiary_id
    return false()


def _owned_case_ids(beneficiary_id: UUID):
    return select(Case.id).where(Case.beneficiary_id == beneficiary_id)


def document_scope_clause(principal: Principal) -> ColumnElement[bool]:
    """
    Build the WHERE clause for binary-model documents.

    Beneficiaries see public documents linked to them directly or through a
    case they own.
    """
    if roles.is_staff(principal):
        return true()
    if isinstance(principal, BeneficiaryPrincipal):
        return and_(
            Document.is_public.is_(True),
            or_(
                Document.beneficiary_id == principal.beneficiary_id,
                Document.case_id.in_(_owned_case_ids(principal.beneficiary_id)),
            ),
        )
    return false()


def library_scope_clause(principal: Principal) -> ColumnElement[bool]:
    """
    Build the WHERE clause for library documents.

    Staff see every tier. Beneficiaries see non-archived `beneficiary` tier
    entries linked to them directly or through a case they own.
    """
    if roles.is_staff(principal):
        return true()
    if isinstance(principal, BeneficiaryPrincipal):
        return and_(
            LibraryDocument.visibility == LibraryVisibility.BENEFICIARY.value,
            LibraryDocument.is_archived.is_(False),
            or_(
                LibraryDocument.beneficiary_id == principal.beneficiary_id,
                LibraryDocument.case_id.in_(_owned_case_ids(principal.beneficiary_id)),
            ),
        )
    return false()


# =============================================================================
# Queries
# =============================================================================


def list_cases_for_beneficiary(db: Session, beneficiary_id: UUID) -> list[Case]:
    """Cases owned by one beneficiary (served by idx_cases_beneficiary)."""
    stmt = (
        select(Case)
        .where(Case.beneficiary_id == beneficiary_id)
        .order_by(Case.created_at.desc())
    )
    return list(db.execute(stmt).scalars().all())


def list_cases_visible_to(
    db: Session,
    principal: Principal,
    status: str | None = None,
) -> list[Case]:
    """List cases with the principal's scope applied in SQL."""
    stmt = select(Case).where(scope_clause_for_beneficiary(principal))
    if status:
        stmt = stmt.where(Case.status == status)
    stmt = stmt.order_by(Case.created_at.desc())
    return list(db.execute(stmt).scalars().all())


def list_documents_visible_to(
    db: Session,
    principal: Principal,
    case_id: UUID | None = None,
    *,
    audit_sink: audit_service.AuditSink | None = None,
) -> list[Document]:
    """
    List binary-model documents visible to principal, optionally for one case.

    When `case_id` is given the case must be viewable first: a beneficiary
    asking for another beneficiary's case gets NotFoundError, exactly as if
    the case did not exist.

    Raises:
        NotFoundError / ForbiddenError: case not viewable
    """
    stmt = select(Document).where(document_scope_clause(principal))

    if case_id is not None:
        case = db.get(Case, case_id)
        decision = check_case_view(principal, case)
        if not decision:
            logger.info(
                "Document listing denied",
                extra=build_log_context(
                    user_id=principal.user_id,
                    actor_kind=principal.actor_kind,
                    case_id=case_id,
                    action="list_documents",
                ),
            )
            audit_service.notify_denied(
                audit_sink,
                principal,
                decision,
                target_type="case",
                target_id=case_id,
                action="list_documents",
            )
            raise_for_decision(decision)
        stmt = stmt.where(Document.case_id == case_id)

    stmt = stmt.order_by(Document.created_at.desc())
    return list(db.execute(stmt).scalars().all())


def list_library_documents_visible_to(
    db: Session,
    principal: Principal,
    visibility: LibraryVisibility | None = None,
    include_archived: bool = False,
) -> list[LibraryDocument]:
    """List library documents with the principal's scope applied in SQL."""
    stmt = select(LibraryDocument).where(library_scope_clause(principal))
    if visibility is not None:
        stmt = stmt.where(LibraryDocument.visibility == visibility.value)
    if not include_archived:
        stmt = stmt.where(LibraryDocument.is_archived.is_(False))
    stmt = stmt.order_by(LibraryDocument.created_at.desc())
    return list(db.execute(stmt).scalars().all())
