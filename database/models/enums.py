from enum import Enum


class SampleStatus(str, Enum):
    """Product sample status flow: Draft -> Submitted -> Evaluated/Excluded -> Completed."""
    DRAFT = "Draft"
    SUBMITTED = "Submitted"
    EVALUATED = "Evaluated"
    EXCLUDED = "Excluded"
    COMPLETED = "Completed"


class CommissionStatus(str, Enum):
    ACTIVE = "Active"
    INACTIVE = "Inactive"
    CLOSED = "Closed"


class MemberRole(str, Enum):
    MAIN_MEMBER = "MainMember"  # may activate when no President is present
    PRESIDENT = "President"  # optional; sole activator when present
    MEMBER = "Member"
    TRAINEE = "Trainee"  # scores never count toward the final average


class SessionStatus(str, Enum):
    ACTIVE = "Active"
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"


class ProtocolStatus(str, Enum):
    DRAFT = "Draft"
    GENERATED = "Generated"
