"""
Test configuration and fixtures.

Provides:
- In-memory SQLite session with a fresh schema per test
- Staff / beneficiary users, their principals and a pending case
- A recording audit sink
"""
import uuid
from typing import Generator

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from legalaid.core.principal import (
    BeneficiaryPrincipal,
    StaffPrincipal,
    principal_for_user,
)
from legalaid.db.base import Base
from legalaid.db.enums import Role, UserType
from legalaid.db.models import Beneficiary, Case, User


# =============================================================================
# Database Fixtures
# =============================================================================

@pytest.fixture(scope="function")
def db() -> Generator[Session, None, None]:
    """
    Creates a session on a private in-memory database.

    Every test gets its own engine, so app code can commit() freely.
    """
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSession()

    yield session

    session.close()
    Base.metadata.drop_all(engine)
    engine.dispose()


# =============================================================================
# User Fixtures
# =============================================================================

def _make_staff(db: Session, role: Role) -> User:
    user = User(
        id=uuid.uuid4(),
        email=f"{role.value}-{uuid.uuid4().hex[:8]}@test.com",
        display_name=f"Test {role.value}",
        user_type=UserType.STAFF.value,
        role=role.value,
    )
    db.add(user)
    db.commit()
    return user


def _make_beneficiary(db: Session, name: str) -> Beneficiary:
    user = User(
        id=uuid.uuid4(),
        email=f"{name}-{uuid.uuid4().hex[:8]}@test.com",
        display_name=name,
        user_type=UserType.BENEFICIARY.value,
        role=Role.BENEFICIARY.value,
    )
    db.add(user)
    db.flush()
    beneficiary = Beneficiary(id=uuid.uuid4(), user_id=user.id, full_name=name)
    db.add(beneficiary)
    db.commit()
    return beneficiary


@pytest.fixture
def admin_user(db: Session) -> User:
    return _make_staff(db, Role.ADMIN)


@pytest.fixture
def lawyer_user(db: Session) -> User:
    return _make_staff(db, Role.LAWYER)


@pytest.fixture
def other_lawyer_user(db: Session) -> User:
    return _make_staff(db, Role.LAWYER)


@pytest.fixture
def viewer_user(db: Session) -> User:
    return _make_staff(db, Role.VIEWER)


@pytest.fixture
def beneficiary_b1(db: Session) -> Beneficiary:
    return _make_beneficiary(db, "b1")


@pytest.fixture
def beneficiary_b2(db: Session) -> Beneficiary:
    return _make_beneficiary(db, "b2")


# =============================================================================
# Principal Fixtures
# =============================================================================

@pytest.fixture
def admin(admin_user: User) -> StaffPrincipal:
    return principal_for_user(admin_user)


@pytest.fixture
def lawyer(lawyer_user: User) -> StaffPrincipal:
    return principal_for_user(lawyer_user)


@pytest.fixture
def other_lawyer(other_lawyer_user: User) -> StaffPrincipal:
    return principal_for_user(other_lawyer_user)


@pytest.fixture
def viewer(viewer_user: User) -> StaffPrincipal:
    return principal_for_user(viewer_user)


@pytest.fixture
def b1(beneficiary_b1: Beneficiary) -> BeneficiaryPrincipal:
    return principal_for_user(beneficiary_b1.user, beneficiary_id=beneficiary_b1.id)


@pytest.fixture
def b2(beneficiary_b2: Beneficiary) -> BeneficiaryPrincipal:
    return principal_for_user(beneficiary_b2.user, beneficiary_id=beneficiary_b2.id)


# =============================================================================
# Case Fixtures
# =============================================================================

@pytest.fixture
def case_c1(db: Session, beneficiary_b1: Beneficiary, admin_user: User) -> Case:
    """Pending-review case owned by b1."""
    case = Case(
        id=uuid.uuid4(),
        beneficiary_id=beneficiary_b1.id,
        title="Tenancy dispute",
        status="pending_review",
        internal_notes="staff only",
        created_by_user_id=admin_user.id,
    )
    db.add(case)
    db.commit()
    return case


# =============================================================================
# Audit Fixtures
# =============================================================================

class RecordingSink:
    """Audit sink that keeps every event in memory."""

    def __init__(self):
        self.events = []

    def record(self, event) -> None:
        self.events.append(event)

    def of_type(self, event_type):
        return [e for e in self.events if e.event_type == event_type]


@pytest.fixture
def audit_sink() -> RecordingSink:
    return RecordingSink()
