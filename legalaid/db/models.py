"""SQLAlchemy ORM models."""

from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import Boolean, ForeignKey, Index, Integer, String, Text, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from legalaid.core.document_access import BinaryVisibility, TieredVisibility
from legalaid.db.base import Base
from legalaid.db.enums import (
    DEFAULT_CASE_STATUS,
    DEFAULT_LIBRARY_VISIBILITY,
    AttachmentKind,
    LibraryVisibility,
)


class User(Base):
    """
    Application user (staff member or beneficiary portal account).

    `user_type` and `role` overlap for beneficiaries; they are collapsed into
    a single principal by `legalaid.core.principal.resolve_principal`.
    """

    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    display_name: Mapped[str] = mapped_column(String(255), nullable=False)
    user_type: Mapped[str] = mapped_column(String(20), nullable=False)
    role: Mapped[str | None] = mapped_column(String(30), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(server_default=func.now(), nullable=False)


class Beneficiary(Base):
    """A legal-aid client. Optionally linked to a portal user."""

    __tablename__ = "beneficiaries"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, unique=True
    )
    full_name: Mapped[str] = mapped_column(String(255), nullable=False)
    created_at: Mapped[datetime] = mapped_column(server_default=func.now(), nullable=False)

    user: Mapped["User | None"] = relationship()


class Case(Base):
    """
    A legal matter owned by one beneficiary.

    `status` is stored as a plain string so legacy values written by older
    workflows remain readable; legality is decided by the status graph.
    """

    __tablename__ = "cases"
    __table_args__ = (
        Index("idx_cases_beneficiary", "beneficiary_id"),
        Index("idx_cases_assigned_lawyer", "assigned_lawyer_id"),
        Index("idx_cases_status", "status"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    beneficiary_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("beneficiaries.id", ondelete="CASCADE"), nullable=False
    )
    assigned_lawyer_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    created_by_user_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    case_type: Mapped[str | None] = mapped_column(String(50), nullable=True)
    status: Mapped[str] = mapped_column(
        String(40), default=DEFAULT_CASE_STATUS.value, nullable=False
    )
    internal_notes: Mapped[str | None] = mapped_column(Text, nullable=True)  # staff-only

    # Lifecycle timestamps
    accepted_by_user_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    accepted_at: Mapped[datetime | None] = mapped_column(nullable=True)
    completed_at: Mapped[datetime | None] = mapped_column(nullable=True)
    closed_at: Mapped[datetime | None] = mapped_column(nullable=True)

    created_at: Mapped[datetime] = mapped_column(server_default=func.now(), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        server_default=func.now(), onupdate=func.now(), nullable=False
    )

    beneficiary: Mapped["Beneficiary"] = relationship()
    assigned_lawyer: Mapped["User | None"] = relationship(foreign_keys=[assigned_lawyer_id])
    documents: Mapped[list["Document"]] = relationship(back_populates="case")


class CaseTimelineEvent(Base):
    """Lifecycle history row written on every successful case mutation."""

    __tablename__ = "case_timeline_events"
    __table_args__ = (Index("idx_case_timeline_case", "case_id", "created_at"),)

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    case_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("cases.id", ondelete="CASCADE"), nullable=False
    )
    event_type: Mapped[str] = mapped_column(String(40), nullable=False)
    from_status: Mapped[str | None] = mapped_column(String(40), nullable=True)
    to_status: Mapped[str | None] = mapped_column(String(40), nullable=True)
    note: Mapped[str | None] = mapped_column(Text, nullable=True)
    actor_user_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(server_default=func.now(), nullable=False)


class Document(Base):
    """
    File attachment with binary (public/private) visibility.

    Covers case documents, task attachments, judicial-service attachments,
    power-of-attorney attachments and portal uploads.
    """

    __tablename__ = "documents"
    __table_args__ = (
        Index("idx_documents_case", "case_id"),
        Index("idx_documents_beneficiary", "beneficiary_id"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    case_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("cases.id", ondelete="CASCADE"), nullable=True
    )
    beneficiary_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("beneficiaries.id", ondelete="CASCADE"), nullable=True
    )
    uploaded_by_user_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    attachment_kind: Mapped[str] = mapped_column(
        String(30), default=AttachmentKind.CASE.value, nullable=False
    )
    is_public: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    # File metadata
    filename: Mapped[str] = mapped_column(String(255), nullable=False)
    storage_key: Mapped[str] = mapped_column(String(512), nullable=False)
    content_type: Mapped[str] = mapped_column(String(100), nullable=False)
    file_size: Mapped[int] = mapped_column(Integer, nullable=False)

    created_at: Mapped[datetime] = mapped_column(server_default=func.now(), nullable=False)

    case: Mapped["Case | None"] = relationship(back_populates="documents")

    @property
    def visibility_model(self) -> BinaryVisibility:
        return BinaryVisibility(is_public=bool(self.is_public))


class LibraryDocument(Base):
    """Document-library entry with tiered visibility, not bound to one case."""

    __tablename__ = "library_documents"
    __table_args__ = (
        Index("idx_library_documents_visibility", "visibility"),
        Index("idx_library_documents_beneficiary", "beneficiary_id"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    case_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("cases.id", ondelete="SET NULL"), nullable=True
    )
    beneficiary_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("beneficiaries.id", ondelete="SET NULL"), nullable=True
    )
    uploaded_by_user_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    visibility: Mapped[str] = mapped_column(
        String(20), default=DEFAULT_LIBRARY_VISIBILITY.value, nullable=False
    )
    is_archived: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    filename: Mapped[str] = mapped_column(String(255), nullable=False)
    storage_key: Mapped[str] = mapped_column(String(512), nullable=False)
    content_type: Mapped[str] = mapped_column(String(100), nullable=False)
    file_size: Mapped[int] = mapped_column(Integer, nullable=False)

    created_at: Mapped[datetime] = mapped_column(server_default=func.now(), nullable=False)

    case: Mapped["Case | None"] = relationship()

    @property
    def visibility_model(self) -> TieredVisibility:
        # Unset or unknown tiers fall back to internal (staff only)
        try:
            tier = LibraryVisibility(self.visibility)
        except ValueError:
            tier = DEFAULT_LIBRARY_VISIBILITY
        return TieredVisibility(tier=tier)
