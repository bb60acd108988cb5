from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Optional

from ..shifts.model import WorkShift
from .strategies.base import AttendanceStrategy
from .strategies.early_strategy import EarlyLeaveStrategy
from .strategies.late_strategy import LateStrategy
from .strategies.normal_strategy import NormalStrategy
from .strategies.overtime_strategy import OvertimeStrategy


@dataclass
class AttendanceStrategyFactory:
    """Factory Pattern: choose the strategy for a check-in or check-out."""

    def for_checkin(self, *, check_in: datetime, work_date: date, shift: Optional[WorkShift]) -> AttendanceStrategy:
        if not shift:
            return NormalStrategy()

        allowed = shift.scheduled_start(work_date) + timedelta(minutes=int(shift.flexible_minutes))
        if check_in <= allowed:
            return NormalStrategy()
        return LateStrategy()

    def for_checkout(self, *, check_out: datetime, work_date: date, shift: Optional[WorkShift]) -> AttendanceStrategy:
        if not shift:
            return NormalStrategy()

        shift_end = shift.scheduled_end(work_date)
        if check_out < shift_end:
            return EarlyLeaveStrategy()
        if shift.allow_overtime and check_out > shift_end + timedelta(minutes=int(shift.overtime_grace_minutes)):
            return OvertimeStrategy()
        return NormalStrategy()
