from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from ...common.datetime_utils import minutes_between
from ...core.enums import AttendanceStatus
from ...shifts.model import WorkShift
from .base import AttendanceStrategy, CheckInDecision, CheckOutDecision


class LateStrategy(AttendanceStrategy):
    """Check-in after the shift start plus its flexible minutes."""

    def decide_checkin(self, *, check_in: datetime, work_date: date, shift: Optional[WorkShift]) -> CheckInDecision:
        if not shift:
            return CheckInDecision(status=AttendanceStatus.PRESENT)
        late = minutes_between(shift.scheduled_start(work_date), check_in) - int(shift.flexible_minutes)
        if late <= 0:
            return CheckInDecision(status=AttendanceStatus.PRESENT)
        return CheckInDecision(status=AttendanceStatus.LATE, late_minutes=late)

    def decide_checkout(self, *, check_out: datetime, work_date: date, shift: Optional[WorkShift]) -> CheckOutDecision:
        return CheckOutDecision()
