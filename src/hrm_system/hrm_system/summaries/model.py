from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal


@dataclass(frozen=True)
class AttendanceSummary:
    """Monthly rollup for one employee; fully recomputable.

    Rates and hours are derived at read time and never stored.
    """

    employee_id: int
    year: int
    month: int
    total_working_days: int = 0
    actual_working_days: int = 0
    absent_days: int = 0
    late_days: int = 0
    early_leave_days: int = 0
    total_working_minutes: int = 0
    standard_working_minutes: int = 0
    overtime_minutes: int = 0
    late_minutes: int = 0
    early_leave_minutes: int = 0
    vacation_days: Decimal = Decimal("0")
    sick_leave_days: Decimal = Decimal("0")
    personal_leave_days: Decimal = Decimal("0")
    other_leave_days: Decimal = Decimal("0")

    @property
    def attendance_rate(self) -> Decimal:
        """Percentage of working days attended, two decimals."""
        if self.total_working_days <= 0:
            return Decimal("0.00")
        rate = Decimal(self.actual_working_days) * 100 / Decimal(self.total_working_days)
        return rate.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)

    @property
    def overtime_hours(self) -> Decimal:
        return (Decimal(self.overtime_minutes) / 60).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)

    @property
    def total_working_hours(self) -> Decimal:
        return (Decimal(self.total_working_minutes) / 60).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)

    @property
    def total_leave_days(self) -> Decimal:
        return self.vacation_days + self.sick_leave_days + self.personal_leave_days + self.other_leave_days
