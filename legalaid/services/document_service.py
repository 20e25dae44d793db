"""Document service - visibility-checked reads and case attachments."""

import logging
from uuid import UUID

from sqlalchemy.orm import Session

from legalaid.core.document_access import (
    check_case_document_upload,
    check_document_view,
    default_is_public,
)
from legalaid.core.errors import AccessDecision, raise_for_decision
from legalaid.core.principal import BeneficiaryPrincipal, Principal
from legalaid.core.structured_logging import build_log_context
from legalaid.db.enums import LibraryVisibility
from legalaid.db.models import Case, Document, LibraryDocument
from legalaid.schemas.document import CaseDocumentsCreate
from legalaid.services import audit_service, scoping_service


logger = logging.getLogger(__name__)


def _deny(
    decision: AccessDecision,
    principal: Principal,
    *,
    action: str,
    target_type: str,
    target_id: UUID | None,
    audit_sink: audit_service.AuditSink | None,
) -> None:
    logger.info(
        "Document access denied",
        extra=build_log_context(
            user_id=principal.user_id,
            actor_kind=principal.actor_kind,
            document_id=target_id if target_type == "document" else None,
            case_id=target_id if target_type == "case" else None,
            action=action,
        ),
    )
    audit_service.notify_denied(
        audit_sink,
        principal,
        decision,
        target_type=target_type,
        target_id=target_id,
        action=action,
    )
    raise_for_decision(decision)


def list_case_documents(
    db: Session,
    principal: Principal,
    case_id: UUID,
    *,
    audit_sink: audit_service.AuditSink | None = None,
) -> list[Document]:
    """
    Documents of one case visible to principal.

    Raises:
        NotFoundError: case missing, or owned by another beneficiary
        ForbiddenError: principal cannot view cases
    """
    return scoping_service.list_documents_visible_to(
        db, principal, case_id=case_id, audit_sink=audit_sink
    )


def list_my_documents(
    db: Session,
    principal: Principal,
    *,
    audit_sink: audit_service.AuditSink | None = None,
) -> list[Document]:
    """
    Portal aggregate: every public document linked to the beneficiary,
    directly or through any case they own.

    Raises:
        ForbiddenError: principal is not a beneficiary
    """
    if not isinstance(principal, BeneficiaryPrincipal):
        _deny(
            AccessDecision.forbidden("document aggregate is for beneficiaries only"),
            principal,
            action="list_my_documents",
            target_type="document",
            target_id=None,
            audit_sink=audit_sink,
        )
    return scoping_service.list_documents_visible_to(db, principal, audit_sink=audit_sink)


def list_library_documents(
    db: Session,
    principal: Principal,
    visibility: LibraryVisibility | None = None,
    include_archived: bool = False,
) -> list[LibraryDocument]:
    return scoping_service.list_library_documents_visible_to(
        db, principal, visibility=visibility, include_archived=include_archived
    )


def get_document_for_principal(
    db: Session,
    principal: Principal,
    document_id: UUID,
    *,
    audit_sink: audit_service.AuditSink | None = None,
) -> Document:
    """
    Fetch one binary-model document.

    Raises:
        NotFoundError: missing, or hidden from the requesting beneficiary
        ForbiddenError: principal cannot view documents
    """
    document = db.get(Document, document_id)
    decision = check_document_view(principal, document)
    if not decision:
        _deny(
            decision,
            principal,
            action="view_document",
            target_type="document",
            target_id=document_id,
            audit_sink=audit_sink,
        )
    return document


def get_library_document_for_principal(
    db: Session,
    principal: Principal,
    document_id: UUID,
    *,
    audit_sink: audit_service.AuditSink | None = None,
) -> LibraryDocument:
    document = db.get(LibraryDocument, document_id)
    decision = check_document_view(principal, document)
    if not decision:
        _deny(
            decision,
            principal,
            action="view_library_document",
            target_type="document",
            target_id=document_id,
            audit_sink=audit_sink,
        )
    return document


def attach_case_documents(
    db: Session,
    principal: Principal,
    case_id: UUID,
    payload: CaseDocumentsCreate,
    *,
    audit_sink: audit_service.AuditSink | None = None,
) -> list[Document]:
    """
    Record already-stored files as documents of a case.

    Beneficiary uploads are always public. Staff uploads use the requested
    flag, or the default for the attachment kind.

    Raises:
        NotFoundError: case missing, or owned by another beneficiary
        ForbiddenError: principal cannot upload to this case
    """
    case = db.get(Case, case_id)
    decision = check_case_document_upload(principal, case)
    if not decision:
        _deny(
            decision,
            principal,
            action="upload_document",
            target_type="case",
            target_id=case_id,
            audit_sink=audit_sink,
        )

    is_public = default_is_public(principal, payload.attachment_kind, payload.is_public)
    documents = [
        Document(
            case_id=case.id,
            beneficiary_id=case.beneficiary_id,
            uploaded_by_user_id=principal.user_id,
            attachment_kind=payload.attachment_kind.value,
            is_public=is_public,
            filename=item.filename,
            storage_key=item.storage_key,
            content_type=item.content_type,
            file_size=item.file_size,
        )
        for item in payload.documents
    ]
    db.add_all(documents)
    db.commit()
    for document in documents:
        db.refresh(document)

    logger.info(
        "Attached %d document(s)",
        len(documents),
        extra=build_log_context(
            user_id=principal.user_id,
            actor_kind=principal.actor_kind,
            case_id=case.id,
            action="upload_document",
        ),
    )
    return documents
