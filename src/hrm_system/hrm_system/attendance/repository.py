from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import AttendanceEventType, AttendanceStatus
from .model import Attendance, AttendanceEvent, CheckLocation


class AttendanceRepository(Protocol):
    def get_by_id(self, attendance_id: int, *, for_update: bool = False) -> Optional[Attendance]:
        raise NotImplementedError

    def get_for_employee_and_date(
        self, employee_id: int, work_date: date, *, for_update: bool = False
    ) -> Optional[Attendance]:
        raise NotImplementedError

    def create_checkin(
        self,
        *,
        employee_id: int,
        work_date: date,
        shift_id: Optional[int],
        check_in_time: datetime,
        location: CheckLocation,
        late_minutes: int,
        status: AttendanceStatus,
        notes: Optional[str] = None,
    ) -> Optional[int]:
        """Insert the day's row; None when (employee, work_date) already exists."""

        raise NotImplementedError

    def update_checkout(
        self,
        *,
        attendance_id: int,
        check_out_time: datetime,
        location: CheckLocation,
        break_end_time: Optional[datetime],
        break_minutes: int,
        total_working_minutes: int,
        early_leave_minutes: int,
        overtime_minutes: int,
    ) -> bool:
        raise NotImplementedError

    def update_break(
        self,
        *,
        attendance_id: int,
        break_start_time: Optional[datetime],
        break_end_time: Optional[datetime],
        break_minutes: int,
    ) -> bool:
        raise NotImplementedError

    def apply_correction(
        self,
        *,
        attendance_id: int,
        check_in_time: datetime,
        check_out_time: Optional[datetime],
        status: AttendanceStatus,
        total_working_minutes: int,
        late_minutes: int,
        early_leave_minutes: int,
        overtime_minutes: int,
        manager_notes: Optional[str],
        approved_by: int,
        approved_at: datetime,
    ) -> bool:
        raise NotImplementedError

    def approve(
        self, *, attendance_ids: Sequence[int], approved_by: int, approved_at: datetime, manager_notes: Optional[str]
    ) -> int:
        raise NotImplementedError

    def list_range(self, *, start: date, end: date, employee_id: Optional[int] = None) -> Sequence[Attendance]:
        raise NotImplementedError

    def append_event(
        self,
        *,
        attendance_id: int,
        event_type: AttendanceEventType,
        event_time: datetime,
        location: Optional[CheckLocation] = None,
        notes: Optional[str] = None,
    ) -> int:
        raise NotImplementedError

    def list_events(self, attendance_id: int) -> Sequence[AttendanceEvent]:
        raise NotImplementedError
