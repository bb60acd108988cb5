from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from ...common.datetime_utils import minutes_between
from ...core.enums import AttendanceStatus
from ...shifts.model import WorkShift
from .base import AttendanceStrategy, CheckInDecision, CheckOutDecision


class OvertimeStrategy(AttendanceStrategy):
    """Check-out past the scheduled end plus the overtime grace.

    Capped at the shift's ``max_overtime_minutes`` when one is set.
    """

    def decide_checkin(self, *, check_in: datetime, work_date: date, shift: Optional[WorkShift]) -> CheckInDecision:
        return CheckInDecision(status=AttendanceStatus.PRESENT)

    def decide_checkout(self, *, check_out: datetime, work_date: date, shift: Optional[WorkShift]) -> CheckOutDecision:
        if not shift or not shift.allow_overtime:
            return CheckOutDecision()
        overtime = minutes_between(shift.scheduled_end(work_date), check_out) - int(shift.overtime_grace_minutes)
        overtime = max(0, overtime)
        if shift.max_overtime_minutes is not None:
            overtime = min(overtime, int(shift.max_overtime_minutes))
        return CheckOutDecision(overtime_minutes=overtime)
