"""Pydantic schemas for cases."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from legalaid.core import roles, status_graph
from legalaid.core.principal import Principal


class CaseCreate(BaseModel):
    """Request schema for creating a case."""

    beneficiary_id: UUID
    title: str = Field(..., min_length=1, max_length=255)
    case_type: str | None = Field(None, max_length=50)
    internal_notes: str | None = None


class CaseStatusUpdate(BaseModel):
    """Request schema for a status change."""

    status: str = Field(..., min_length=1)
    note: str | None = Field(None, max_length=1000)

    @field_validator("status")
    @classmethod
    def validate_status(cls, v: str) -> str:
        """Only admin or operating statuses can be requested."""
        v = v.strip()
        if not (status_graph.is_admin_status(v) or status_graph.is_operating_status(v)):
            raise ValueError("Invalid status")
        return v

    @field_validator("note")
    @classmethod
    def strip_note(cls, v: str | None) -> str | None:
        if v is None or v.strip() == "":
            return None
        return v.strip()


class CaseReject(BaseModel):
    reject_reason: str | None = Field(None, max_length=1000)


class CaseAssignLawyer(BaseModel):
    lawyer_id: UUID


class BeneficiaryCaseRead(BaseModel):
    """Case as seen by its beneficiary (no staff-only fields)."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    beneficiary_id: UUID
    title: str
    case_type: str | None = None
    status: str
    assigned_lawyer_id: UUID | None = None
    completed_at: datetime | None = None
    closed_at: datetime | None = None
    created_at: datetime | None = None


class CaseRead(BeneficiaryCaseRead):
    """Full staff view of a case."""

    internal_notes: str | None = None
    created_by_user_id: UUID | None = None
    accepted_by_user_id: UUID | None = None
    accepted_at: datetime | None = None
    updated_at: datetime | None = None


class CaseTimelineEventRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    case_id: UUID
    event_type: str
    from_status: str | None = None
    to_status: str | None = None
    note: str | None = None
    actor_user_id: UUID | None = None
    created_at: datetime | None = None


def serialize_case_for(principal: Principal, case) -> BeneficiaryCaseRead:
    """Serialize a case for the principal; only staff get internal notes."""
    if roles.is_staff(principal):
        return CaseRead.model_validate(case)
    return BeneficiaryCaseRead.model_validate(case)
