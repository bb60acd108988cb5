from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from ...common.datetime_utils import minutes_between
from ...core.enums import AttendanceStatus
from ...shifts.model import WorkShift
from .base import AttendanceStrategy, CheckInDecision, CheckOutDecision


class EarlyLeaveStrategy(AttendanceStrategy):
    """Check-out before the scheduled end."""

    def decide_checkin(self, *, check_in: datetime, work_date: date, shift: Optional[WorkShift]) -> CheckInDecision:
        return CheckInDecision(status=AttendanceStatus.PRESENT)

    def decide_checkout(self, *, check_out: datetime, work_date: date, shift: Optional[WorkShift]) -> CheckOutDecision:
        if not shift:
            return CheckOutDecision()
        return CheckOutDecision(early_leave_minutes=max(0, minutes_between(check_out, shift.scheduled_end(work_date))))
