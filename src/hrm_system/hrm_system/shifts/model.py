from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import date, datetime, time, timedelta
from typing import Optional

from ..core.constants import DEFAULT_WORKDAY_MINUTES


@dataclass(frozen=True)
class ShiftData:
    """Editable fields of a work shift (input for create/update)."""

    name: str
    start_time: time
    end_time: time
    break_start_time: Optional[time] = None
    break_end_time: Optional[time] = None
    flexible_minutes: int = 0
    overtime_grace_minutes: int = 0
    allow_overtime: bool = True
    max_overtime_minutes: Optional[int] = None
    applicable_days: int = 0b0011111

    def to_shift(self, shift_id: int, *, is_active: bool = True) -> "WorkShift":
        return WorkShift(shift_id=shift_id, is_active=is_active, **asdict(self))


@dataclass(frozen=True)
class WorkShift:
    """Domain entity: work-time template assignable to employees.

    ``applicable_days`` is a weekday bitmask (Monday = bit 0). A shift whose
    end is not after its start runs overnight into the next day.
    """

    shift_id: int
    name: str
    start_time: time
    end_time: time
    break_start_time: Optional[time] = None
    break_end_time: Optional[time] = None
    flexible_minutes: int = 0
    overtime_grace_minutes: int = 0
    allow_overtime: bool = True
    max_overtime_minutes: Optional[int] = None
    applicable_days: int = 0b0011111
    is_active: bool = True

    @property
    def is_night_shift(self) -> bool:
        return self.end_time <= self.start_time

    def applies_on(self, day: date) -> bool:
        return bool(self.applicable_days & (1 << day.weekday()))

    def scheduled_start(self, day: date) -> datetime:
        return datetime.combine(day, self.start_time)

    def scheduled_end(self, day: date) -> datetime:
        end = datetime.combine(day, self.end_time)
        if self.is_night_shift:
            end += timedelta(days=1)
        return end

    @property
    def break_window_minutes(self) -> int:
        if not self.break_start_time or not self.break_end_time:
            return 0
        start = datetime.combine(date.min, self.break_start_time)
        end = datetime.combine(date.min, self.break_end_time)
        return max(int((end - start).total_seconds() // 60), 0)

    @property
    def standard_minutes(self) -> int:
        day = date(2000, 1, 3)
        total = int((self.scheduled_end(day) - self.scheduled_start(day)).total_seconds() // 60)
        return max(total - self.break_window_minutes, 0) or DEFAULT_WORKDAY_MINUTES


@dataclass(frozen=True)
class ShiftAssignment:
    """Default shift for an employee over an effective date range."""

    assignment_id: int
    employee_id: int
    shift_id: int
    effective_from: date
    effective_to: Optional[date] = None
    is_default: bool = True

    def covers(self, day: date) -> bool:
        return self.effective_from <= day and (self.effective_to is None or day <= self.effective_to)

    def overlaps(self, start: date, end: Optional[date]) -> bool:
        """True when [start, end] (open-ended when ``end`` is None) meets this range."""
        if end is not None and end < self.effective_from:
            return False
        return self.effective_to is None or start <= self.effective_to
