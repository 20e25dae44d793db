"""
Document visibility policy tests.

Tests cover:
- Binary model (is_public) and tiered model (internal / case_team / beneficiary)
- Linkage through the document itself or its case
- Upload defaults and upload rights
"""

import uuid

import pytest

from legalaid.core.document_access import (
    BinaryVisibility,
    TieredVisibility,
    check_case_document_upload,
    check_document_view,
    default_is_public,
    is_document_visible,
)
from legalaid.core.errors import Denial
from legalaid.core.principal import ANONYMOUS, BeneficiaryPrincipal, StaffPrincipal
from legalaid.db.enums import AttachmentKind, LibraryVisibility, Role
from legalaid.db.models import Case, Document, LibraryDocument


@pytest.fixture
def owner() -> BeneficiaryPrincipal:
    return BeneficiaryPrincipal(user_id=uuid.uuid4(), beneficiary_id=uuid.uuid4())


@pytest.fixture
def stranger() -> BeneficiaryPrincipal:
    return BeneficiaryPrincipal(user_id=uuid.uuid4(), beneficiary_id=uuid.uuid4())


@pytest.fixture
def staff() -> StaffPrincipal:
    return StaffPrincipal(user_id=uuid.uuid4(), role=Role.VIEWER)


@pytest.fixture
def case(owner) -> Case:
    return Case(id=uuid.uuid4(), beneficiary_id=owner.beneficiary_id, title="c", status="assigned")


def _document(case=None, beneficiary_id=None, is_public=True) -> Document:
    return Document(
        id=uuid.uuid4(),
        case_id=case.id if case else None,
        beneficiary_id=beneficiary_id,
        is_public=is_public,
        filename="f.pdf",
        storage_key="k",
        content_type="application/pdf",
        file_size=1,
    )


def _library(visibility, case=None, beneficiary_id=None, is_archived=False) -> LibraryDocument:
    return LibraryDocument(
        id=uuid.uuid4(),
        case_id=case.id if case else None,
        beneficiary_id=beneficiary_id,
        visibility=visibility,
        is_archived=is_archived,
        title="t",
        filename="f.pdf",
        storage_key="k",
        content_type="application/pdf",
        file_size=1,
    )


# =============================================================================
# Visibility models
# =============================================================================


def test_visibility_model_tags():
    assert _document(is_public=False).visibility_model == BinaryVisibility(is_public=False)
    assert _library("beneficiary").visibility_model == TieredVisibility(LibraryVisibility.BENEFICIARY)


def test_unknown_tier_reads_as_internal():
    assert _library("everyone").visibility_model == TieredVisibility(LibraryVisibility.INTERNAL)


# =============================================================================
# Binary model
# =============================================================================


def test_staff_see_private_documents(staff, case):
    assert is_document_visible(staff, _document(case, is_public=False), case)


def test_owner_sees_public_case_document(owner, case):
    assert is_document_visible(owner, _document(case), case)


def test_owner_sees_directly_linked_document(owner):
    assert is_document_visible(owner, _document(beneficiary_id=owner.beneficiary_id))


def test_private_document_hidden_from_owner(owner, case):
    for doc in (_document(case, is_public=False), _document(beneficiary_id=owner.beneficiary_id, is_public=False)):
        assert not is_document_visible(owner, doc, case)


def test_public_document_hidden_from_stranger(stranger, case):
    assert not is_document_visible(stranger, _document(case), case)


def test_mismatched_case_snapshot_is_ignored(owner, case):
    other_case = Case(id=uuid.uuid4(), beneficiary_id=uuid.uuid4(), title="x", status="assigned")
    doc = _document(other_case)
    assert not is_document_visible(owner, doc, case)


def test_case_snapshot_does_not_link_caseless_document(owner, stranger, case):
    foreign = _document(beneficiary_id=stranger.beneficiary_id)
    assert not is_document_visible(owner, foreign, case)
    assert is_document_visible(stranger, foreign, case)

    foreign_entry = _library("beneficiary", beneficiary_id=stranger.beneficiary_id)
    assert not is_document_visible(owner, foreign_entry, case)


def test_anonymous_sees_nothing(case):
    assert not is_document_visible(ANONYMOUS, _document(case), case)
    assert not is_document_visible(ANONYMOUS, _library("beneficiary", case), case)


def test_check_document_view_denials(owner, staff, case):
    hidden = _document(case, is_public=False)
    assert check_document_view(staff, hidden, case)
    assert check_document_view(owner, hidden, case).denial == Denial.NOT_FOUND
    assert check_document_view(owner, None).denial == Denial.NOT_FOUND
    assert check_document_view(ANONYMOUS, hidden, case).denial == Denial.FORBIDDEN


# =============================================================================
# Tiered model
# =============================================================================


@pytest.mark.parametrize("tier", ["internal", "case_team", "beneficiary"])
def test_staff_see_every_tier(staff, case, tier):
    assert is_document_visible(staff, _library(tier, case), case)


@pytest.mark.parametrize("tier", ["internal", "case_team"])
def test_owner_never_sees_staff_tiers(owner, case, tier):
    doc = _library(tier, case, beneficiary_id=owner.beneficiary_id)
    assert not is_document_visible(owner, doc, case)


def test_owner_sees_beneficiary_tier(owner, case):
    assert is_document_visible(owner, _library("beneficiary", case), case)
    assert is_document_visible(owner, _library("beneficiary", beneficiary_id=owner.beneficiary_id))


def test_beneficiary_tier_hidden_from_stranger(stranger, case):
    assert not is_document_visible(stranger, _library("beneficiary", case), case)


def test_archived_entry_hidden_from_owner(owner, case):
    assert not is_document_visible(owner, _library("beneficiary", case, is_archived=True), case)


# =============================================================================
# Uploads
# =============================================================================


def test_beneficiary_uploads_are_public(owner):
    assert default_is_public(owner, AttachmentKind.CASE, requested=False) is True


@pytest.mark.parametrize(
    "kind,expected",
    [
        (AttachmentKind.CASE, False),
        (AttachmentKind.POWER_OF_ATTORNEY, False),
        (AttachmentKind.TASK, True),
        (AttachmentKind.JUDICIAL_SERVICE, True),
    ],
)
def test_staff_upload_defaults(staff, kind, expected):
    assert default_is_public(staff, kind) is expected


def test_staff_choice_overrides_default(staff):
    assert default_is_public(staff, "case", requested=True) is True
    assert default_is_public(staff, "task", requested=False) is False


def test_upload_rights(owner, stranger, case):
    admin = StaffPrincipal(user_id=uuid.uuid4(), role=Role.ADMIN)
    lawyer = StaffPrincipal(user_id=uuid.uuid4(), role=Role.LAWYER)
    viewer = StaffPrincipal(user_id=uuid.uuid4(), role=Role.VIEWER)

    assert check_case_document_upload(owner, case)
    assert check_case_document_upload(stranger, case).denial == Denial.NOT_FOUND
    assert check_case_document_upload(admin, case)
    assert check_case_document_upload(viewer, case).denial == Denial.FORBIDDEN
    assert check_case_document_upload(lawyer, case).denial == Denial.FORBIDDEN

    case.assigned_lawyer_id = lawyer.user_id
    assert check_case_document_upload(lawyer, case)
    assert check_case_document_upload(admin, None).denial == Denial.NOT_FOUND
