from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from ...core.enums import AttendanceStatus
from ...shifts.model import WorkShift
from .base import AttendanceStrategy, CheckInDecision, CheckOutDecision


class NormalStrategy(AttendanceStrategy):
    """On-time check-in, check-out within the shift grace window."""

    def decide_checkin(self, *, check_in: datetime, work_date: date, shift: Optional[WorkShift]) -> CheckInDecision:
        return CheckInDecision(status=AttendanceStatus.PRESENT)

    def decide_checkout(self, *, check_out: datetime, work_date: date, shift: Optional[WorkShift]) -> CheckOutDecision:
        return CheckOutDecision()
