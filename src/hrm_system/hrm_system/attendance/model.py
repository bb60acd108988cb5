from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import AttendanceEventType, AttendanceStatus


@dataclass(frozen=True)
class CheckLocation:
    """Where and from which device an attendance event was captured."""

    latitude: Optional[float] = None
    longitude: Optional[float] = None
    address: Optional[str] = None
    device_id: Optional[str] = None
    device_type: Optional[str] = None


@dataclass(frozen=True)
class Attendance:
    """Domain entity: one employee's attendance for one work date.

    The minute fields are derived from the timestamps and the effective
    shift; ``status`` is PRESENT or LATE once checked in.
    """

    attendance_id: int
    employee_id: int
    work_date: date
    status: AttendanceStatus
    shift_id: Optional[int] = None
    check_in_time: Optional[datetime] = None
    check_out_time: Optional[datetime] = None
    break_start_time: Optional[datetime] = None
    break_end_time: Optional[datetime] = None
    check_in_location: CheckLocation = CheckLocation()
    check_out_location: CheckLocation = CheckLocation()
    total_working_minutes: int = 0
    break_minutes: int = 0
    late_minutes: int = 0
    early_leave_minutes: int = 0
    overtime_minutes: int = 0
    notes: Optional[str] = None
    manager_notes: Optional[str] = None
    approved_by: Optional[int] = None
    approved_at: Optional[datetime] = None

    @property
    def is_checked_out(self) -> bool:
        return self.check_out_time is not None

    @property
    def has_open_break(self) -> bool:
        return self.break_start_time is not None and self.break_end_time is None


@dataclass(frozen=True)
class AttendanceEvent:
    """Append-only raw event behind an attendance row."""

    event_id: int
    attendance_id: int
    event_type: AttendanceEventType
    event_time: datetime
    location: CheckLocation = CheckLocation()
    notes: Optional[str] = None
