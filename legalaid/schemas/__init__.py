"""Pydantic schemas for request/response models."""

from legalaid.schemas.case import (
    BeneficiaryCaseRead,
    CaseAssignLawyer,
    CaseCreate,
    CaseRead,
    CaseReject,
    CaseStatusUpdate,
    CaseTimelineEventRead,
    serialize_case_for,
)
from legalaid.schemas.document import (
    CaseDocumentsCreate,
    DocumentRead,
    LibraryDocumentRead,
    UploadedFileMetadata,
)
