"""Pydantic schemas for documents and library entries."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from legalaid.db.enums import AttachmentKind, LibraryVisibility


class UploadedFileMetadata(BaseModel):
    """Metadata of a file already stored by the upload collaborator."""

    filename: str = Field(..., min_length=1, max_length=255)
    storage_key: str = Field(..., min_length=1, max_length=512)
    content_type: str = Field(..., min_length=1, max_length=100)
    file_size: int = Field(..., ge=0)


class CaseDocumentsCreate(BaseModel):
    """Request schema for attaching documents to a case."""

    is_public: bool | None = None
    attachment_kind: AttachmentKind = AttachmentKind.CASE
    documents: list[UploadedFileMetadata] = Field(..., min_length=1)


class DocumentRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    case_id: UUID | None = None
    beneficiary_id: UUID | None = None
    attachment_kind: str
    is_public: bool
    filename: str
    content_type: str
    file_size: int
    created_at: datetime | None = None


class LibraryDocumentRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    case_id: UUID | None = None
    beneficiary_id: UUID | None = None
    visibility: LibraryVisibility
    is_archived: bool
    title: str
    filename: str
    content_type: str
    file_size: int
    created_at: datetime | None = None
