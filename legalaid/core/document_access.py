"""Document visibility policy.

Two visibility models coexist:

- Binary (`Document.is_public`): case documents, task, judicial-service and
  power-of-attorney attachments. Set by the uploader: share with the client
  or not.
- Tiered (`LibraryDocument.visibility`): document-library entries classified
  internal / case_team / beneficiary.

Each document row exposes `visibility_model`, a tagged union of the two, and
`is_document_visible` dispatches on it so callers never need to know which
model applies.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Union
from uuid import UUID

from legalaid.core import roles
from legalaid.core.errors import ALLOW, AccessDecision
from legalaid.core.principal import BeneficiaryPrincipal, Principal
from legalaid.db.enums import (
    ROLES_ADMIN,
    ROLES_CAN_UPLOAD_CASE_DOCUMENTS,
    AttachmentKind,
    LibraryVisibility,
)

if TYPE_CHECKING:
    from legalaid.db.models import Case, Document, LibraryDocument


@dataclass(frozen=True)
class BinaryVisibility:
    is_public: bool


@dataclass(frozen=True)
class TieredVisibility:
    tier: LibraryVisibility


Visibility = Union[BinaryVisibility, TieredVisibility]


def _linked_beneficiary_ids(
    document: Document | LibraryDocument,
    case: Case | None,
) -> set[UUID]:
    """Beneficiaries a document is linked to, directly or through its case."""
    linked: set[UUID] = set()
    if document.beneficiary_id is not None:
        linked.add(document.beneficiary_id)

    if document.case_id is None:
        # Not attached to a case: a caller-supplied snapshot links nothing
        case = None
    elif case is None:
        case = getattr(document, "case", None)
    elif case.id != document.case_id:
        case = None

    if case is not None and case.beneficiary_id is not None:
        linked.add(case.beneficiary_id)
    return linked


def _is_linked_to(principal: BeneficiaryPrincipal, document, case) -> bool:
    return principal.beneficiary_id in _linked_beneficiary_ids(document, case)


def _binary_visible(principal: Principal, visibility: BinaryVisibility, document, case) -> bool:
    if roles.is_staff(principal):
        return True
    if isinstance(principal, BeneficiaryPrincipal):
        return visibility.is_public and _is_linked_to(principal, document, case)
    return False


def _tiered_visible(principal: Principal, visibility: TieredVisibility, document, case) -> bool:
    if roles.is_staff(principal):
        # case_team has no finer team concept yet: any staff member qualifies
        return True
    if isinstance(principal, BeneficiaryPrincipal):
        if visibility.tier != LibraryVisibility.BENEFICIARY:
            return False
        if getattr(document, "is_archived", False):
            return False
        return _is_linked_to(principal, document, case)
    return False


def is_document_visible(
    principal: Principal,
    document: Document | LibraryDocument | None,
    case: Case | None = None,
) -> bool:
    """
    Decide whether `document` is visible to `principal`.

    Args:
        principal: Resolved principal
        document: A Document or LibraryDocument row
        case: Snapshot of the document's case, if the caller already holds
            it; otherwise the loaded `document.case` relationship is used

    Beneficiaries never see private (`is_public=False`) or `internal`
    documents, whatever the ownership linkage.
    """
    if document is None:
        return False

    visibility = document.visibility_model
    if isinstance(visibility, BinaryVisibility):
        return _binary_visible(principal, visibility, document, case)
    if isinstance(visibility, TieredVisibility):
        return _tiered_visible(principal, visibility, document, case)
    return False


def check_document_view(
    principal: Principal,
    document: Document | LibraryDocument | None,
    case: Case | None = None,
) -> AccessDecision:
    """Decision form of is_document_visible; hidden documents read as NOT_FOUND to beneficiaries."""
    if document is None:
        return AccessDecision.not_found("document does not exist")
    if is_document_visible(principal, document, case):
        return ALLOW
    if isinstance(principal, BeneficiaryPrincipal):
        return AccessDecision.not_found("document not visible to beneficiary")
    return AccessDecision.forbidden("principal cannot view documents")


# =============================================================================
# Upload rules
# =============================================================================

# Staff default when the uploader does not choose
_STAFF_DEFAULT_IS_PUBLIC: dict[AttachmentKind, bool] = {
    AttachmentKind.CASE: False,
    AttachmentKind.POWER_OF_ATTORNEY: False,
    AttachmentKind.TASK: True,
    AttachmentKind.JUDICIAL_SERVICE: True,
    AttachmentKind.BENEFICIARY: True,
}


def default_is_public(
    principal: Principal,
    kind: AttachmentKind | str,
    requested: bool | None = None,
) -> bool:
    """
    Resolve `is_public` for a new binary-model upload.

    Beneficiary uploads are always public (the uploader can see them);
    staff may choose, falling back to the per-kind default.
    """
    if isinstance(principal, BeneficiaryPrincipal):
        return True
    if requested is not None:
        return requested
    return _STAFF_DEFAULT_IS_PUBLIC.get(AttachmentKind(kind), False)


def check_case_document_upload(principal: Principal, case: Case | None) -> AccessDecision:
    """
    Check if principal may attach documents to a case.

    - Beneficiary: own case only (otherwise NOT_FOUND)
    - Admins: any case
    - Lawyers: only the case they are assigned to
    """
    if case is None:
        return AccessDecision.not_found("case does not exist")

    if isinstance(principal, BeneficiaryPrincipal):
        if case.beneficiary_id == principal.beneficiary_id:
            return ALLOW
        return AccessDecision.not_found("case owned by another beneficiary")

    if not roles.is_staff(principal) or principal.role not in ROLES_CAN_UPLOAD_CASE_DOCUMENTS:
        return AccessDecision.forbidden("principal cannot upload case documents")

    if principal.role in ROLES_ADMIN:
        return ALLOW
    if case.assigned_lawyer_id is not None and case.assigned_lawyer_id == principal.user_id:
        return ALLOW
    return AccessDecision.forbidden("lawyer is not assigned to this case")
