from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Caller role used for authorization checks."""

    ADMIN = "admin"
    MANAGER = "manager"
    STAFF = "staff"


class LeaveType(str, Enum):
    ANNUAL = "ANNUAL"
    SICK = "SICK"
    PERSONAL = "PERSONAL"
    MATERNITY = "MATERNITY"
    PATERNITY = "PATERNITY"
    BEREAVEMENT = "BEREAVEMENT"
    STUDY = "STUDY"
    BUSINESS = "BUSINESS"
    COMPENSATORY = "COMPENSATORY"
    UNPAID = "UNPAID"
    MARRIAGE = "MARRIAGE"
    EMERGENCY = "EMERGENCY"


class LeaveStatus(str, Enum):
    """Leave request lifecycle. Everything except PENDING is terminal."""

    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    CANCELLED = "CANCELLED"

    @property
    def is_terminal(self) -> bool:
        return self is not LeaveStatus.PENDING


class ApprovalDecision(str, Enum):
    APPROVE = "APPROVE"
    REJECT = "REJECT"


class StepStatus(str, Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class AttendanceStatus(str, Enum):
    """Per-day attendance status stored in the database."""

    PRESENT = "PRESENT"
    LATE = "LATE"
    ABSENT = "ABSENT"
    ON_LEAVE = "ON_LEAVE"


class AttendanceEventType(str, Enum):
    CHECK_IN = "CHECK_IN"
    CHECK_OUT = "CHECK_OUT"
    BREAK_START = "BREAK_START"
    BREAK_END = "BREAK_END"
    CORRECTION = "CORRECTION"


class BreakAction(str, Enum):
    START = "START"
    END = "END"
