from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ...core.enums import AttendanceStatus
from ...shifts.model import WorkShift


@dataclass(frozen=True)
class CheckInDecision:
    status: AttendanceStatus
    late_minutes: int = 0


@dataclass(frozen=True)
class CheckOutDecision:
    early_leave_minutes: int = 0
    overtime_minutes: int = 0


class AttendanceStrategy(ABC):
    """Strategy Pattern: how the derived minutes of a day are computed."""

    @abstractmethod
    def decide_checkin(self, *, check_in: datetime, work_date: date, shift: Optional[WorkShift]) -> CheckInDecision:
        raise NotImplementedError

    @abstractmethod
    def decide_checkout(self, *, check_out: datetime, work_date: date, shift: Optional[WorkShift]) -> CheckOutDecision:
        raise NotImplementedError
