"""Enum definitions for application constants."""

from enum import Enum


class UserType(str, Enum):
    """Coarse actor category stored on the user row."""

    STAFF = "staff"
    BENEFICIARY = "beneficiary"


class Role(str, Enum):
    """
    Principal roles.

    - SUPER_ADMIN / ADMIN: intake, acceptance, assignment, closure
    - LAWYER: in-flight casework on assigned cases
    - INTAKE_OFFICER: case creation from intake
    - VIEWER / EXPERT: read-only staff
    - BENEFICIARY: implicit role of portal users (never stored for staff)
    """

    SUPER_ADMIN = "super_admin"
    ADMIN = "admin"
    LAWYER = "lawyer"
    INTAKE_OFFICER = "intake_officer"
    VIEWER = "viewer"
    EXPERT = "expert"
    BENEFICIARY = "beneficiary"

    @classmethod
    def has_value(cls, value: str) -> bool:
        """Check if value is a valid role."""
        return value in cls._value2member_map_


class AdminStatus(str, Enum):
    """Case statuses governed by admins (intake, acceptance, closure)."""

    PENDING_REVIEW = "pending_review"
    REJECTED = "rejected"
    ACCEPTED_PENDING_ASSIGNMENT = "accepted_pending_assignment"
    ASSIGNED = "assigned"
    CLOSED_ADMIN = "closed_admin"


class OperatingStatus(str, Enum):
    """Case statuses governed by the assigned lawyer."""

    IN_PROGRESS = "in_progress"
    AWAITING_DOCUMENTS = "awaiting_documents"
    AWAITING_HEARING = "awaiting_hearing"
    AWAITING_JUDGMENT = "awaiting_judgment"
    COMPLETED = "completed"


class LegacyStatus(str, Enum):
    """
    Older workflow statuses.

    Existing rows may still carry these values, so they stay valid stored
    data, but no new transition targets them.
    """

    PENDING_ADMIN_REVIEW = "pending_admin_review"
    ACCEPTED = "accepted"
    ON_HOLD = "on_hold"
    CANCELLED = "cancelled"
    OPEN = "open"
    PENDING = "pending"
    CLOSED = "closed"
    URGENT = "urgent"


class LibraryVisibility(str, Enum):
    """Visibility tiers for document-library entries."""

    INTERNAL = "internal"
    CASE_TEAM = "case_team"
    BENEFICIARY = "beneficiary"


class AttachmentKind(str, Enum):
    """What a binary-visibility document is attached to."""

    CASE = "case"
    TASK = "task"
    JUDICIAL_SERVICE = "judicial_service"
    POWER_OF_ATTORNEY = "power_of_attorney"
    BENEFICIARY = "beneficiary"  # uploaded from the portal, not tied to a case


class TimelineEventType(str, Enum):
    """Types of events logged in case timeline."""

    CASE_CREATED = "case_created"
    APPROVED = "approved"
    REJECTED = "rejected"
    LAWYER_ASSIGNED = "lawyer_assigned"
    STATUS_CHANGED = "status_changed"


DEFAULT_CASE_STATUS = AdminStatus.PENDING_REVIEW
DEFAULT_LIBRARY_VISIBILITY = LibraryVisibility.INTERNAL


# =============================================================================
# Role permission helper sets
# =============================================================================

# Staff roles that resolve to a staff principal
STAFF_ROLES = frozenset(
    {
        Role.SUPER_ADMIN,
        Role.ADMIN,
        Role.LAWYER,
        Role.INTAKE_OFFICER,
        Role.VIEWER,
        Role.EXPERT,
    }
)

# Roles with administrative authority (status governance, assignment, users)
ROLES_ADMIN = frozenset({Role.SUPER_ADMIN, Role.ADMIN})

# Roles that can open a new case (beneficiaries submit intake requests instead)
ROLES_CAN_CREATE_CASE = frozenset(
    {Role.SUPER_ADMIN, Role.ADMIN, Role.LAWYER, Role.INTAKE_OFFICER}
)

# Roles that can assign a lawyer to a case
ROLES_CAN_ASSIGN_LAWYER = ROLES_ADMIN

# Roles that can delete cases (outside the status graph)
ROLES_CAN_DELETE_CASE = frozenset({Role.SUPER_ADMIN, Role.ADMIN, Role.LAWYER})

# Roles that can manage users / view reports
ROLES_CAN_MANAGE_USERS = ROLES_ADMIN
ROLES_CAN_VIEW_REPORTS = ROLES_ADMIN

# Staff roles that can upload documents to a case they can work on
ROLES_CAN_UPLOAD_CASE_DOCUMENTS = frozenset({Role.SUPER_ADMIN, Role.ADMIN, Role.LAWYER})
