from __future__ import annotations

import logging
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from ..attendance.repository import AttendanceRepository
from ..attendance.service import day_end
from ..common.datetime_utils import clip_range, iter_dates, month_bounds
from ..core.constants import DEFAULT_WORKDAY_MINUTES
from ..core.enums import AttendanceStatus, LeaveType
from ..core.exceptions import NotFoundError, ValidationError
from ..database.unit_of_work import UnitOfWork
from ..employees.model import Employee
from ..employees.service import EmployeeService
from ..holidays.service import BusinessDayCalculator
from ..leave.repository import LeaveRequestRepository
from ..policies.repository import PolicyRepository
from ..schedules.service import ScheduleService
from .model import AttendanceSummary
from .repository import SummaryRepository

logger = logging.getLogger(__name__)

_LEAVE_BUCKETS = {
    LeaveType.ANNUAL: "vacation_days",
    LeaveType.SICK: "sick_leave_days",
    LeaveType.PERSONAL: "personal_leave_days",
}


class AttendanceSummaryService:
    """Monthly attendance + approved leave rollup.

    ``summarize`` recomputes from the daily rows every time and upserts the
    result, so running it twice over the same data gives the same row.
    """

    def __init__(
        self,
        summaries: SummaryRepository,
        attendance: AttendanceRepository,
        leave_requests: LeaveRequestRepository,
        policies: PolicyRepository,
        employees: EmployeeService,
        schedules: ScheduleService,
        calendar: BusinessDayCalculator,
        uow: UnitOfWork,
        *,
        standard_workday_minutes: int = DEFAULT_WORKDAY_MINUTES,
    ):
        self._summaries = summaries
        self._attendance = attendance
        self._leave_requests = leave_requests
        self._policies = policies
        self._employees = employees
        self._schedules = schedules
        self._calendar = calendar
        self._uow = uow
        self._standard_minutes = int(standard_workday_minutes)

    def _leave_days(self, employee: Employee, first: date, last: date) -> tuple[dict[str, Decimal], set[date]]:
        buckets = {name: Decimal("0") for name in ("vacation_days", "sick_leave_days", "personal_leave_days", "other_leave_days")}
        covered: set[date] = set()

        approved = self._leave_requests.list_approved_in_range(start=first, end=last, employee_id=employee.employee_id)
        for req in approved:
            clipped = clip_range(req.start_date, req.end_date, first, last)
            if not clipped:
                continue
            covered.update(iter_dates(*clipped))

            policy = self._policies.get_by_id(req.policy_id)
            bucket = _LEAVE_BUCKETS.get(policy.leave_type, "other_leave_days") if policy else "other_leave_days"
            days = self._calendar.count(clipped[0], clipped[1], employee.department_id)
            buckets[bucket] += Decimal(days)
        return buckets, covered

    def summarize(self, employee_id: int, year: int, month: int, *, now: Optional[datetime] = None) -> AttendanceSummary:
        if not 1 <= int(month) <= 12:
            raise ValidationError("Month must be between 1 and 12", month=month)
        now = now or datetime.now()
        employee = self._employees.get_employee(employee_id)
        first, last = month_bounds(int(year), int(month))

        holidays = self._calendar.holiday_dates(first, last, employee.department_id)
        records = {r.work_date: r for r in self._attendance.list_range(start=first, end=last, employee_id=employee.employee_id)}
        leave_buckets, on_leave = self._leave_days(employee, first, last)

        working_days = absent_days = standard_minutes = 0
        for day in iter_dates(first, last):
            if day in holidays:
                continue
            shift = self._schedules.get_effective_shift(employee.employee_id, day)
            if shift:
                if not shift.applies_on(day):
                    continue
            elif self._calendar.is_weekend(day):
                continue

            working_days += 1
            standard_minutes += shift.standard_minutes if shift else self._standard_minutes

            record = records.get(day)
            attended = record is not None and record.check_in_time is not None
            if not attended and day not in on_leave and now >= day_end(day, shift):
                absent_days += 1

        # Approved leave overrides a stored check-in for the same day.
        attended_rows = [
            r
            for r in records.values()
            if r.work_date not in on_leave and r.status in (AttendanceStatus.PRESENT, AttendanceStatus.LATE)
        ]
        summary = AttendanceSummary(
            employee_id=employee.employee_id,
            year=int(year),
            month=int(month),
            total_working_days=working_days,
            actual_working_days=len(attended_rows),
            absent_days=absent_days,
            late_days=sum(1 for r in records.values() if r.late_minutes > 0),
            early_leave_days=sum(1 for r in records.values() if r.early_leave_minutes > 0),
            total_working_minutes=sum(r.total_working_minutes for r in records.values()),
            standard_working_minutes=standard_minutes,
            overtime_minutes=sum(r.overtime_minutes for r in records.values()),
            late_minutes=sum(r.late_minutes for r in records.values()),
            early_leave_minutes=sum(r.early_leave_minutes for r in records.values()),
            **leave_buckets,
        )

        with self._uow.transaction():
            self._summaries.upsert(summary)

        logger.info(
            "Attendance summary %s-%02d regenerated for employee %s (worked %s/%s days)",
            year, int(month), employee.employee_id, summary.actual_working_days, working_days,
        )
        return summary

    def summarize_all(
        self, year: int, month: int, *, department_id: Optional[int] = None, now: Optional[datetime] = None
    ) -> list[AttendanceSummary]:
        now = now or datetime.now()
        return [
            self.summarize(e.employee_id, year, month, now=now)
            for e in self._employees.list_active(department_id=department_id)
        ]

    def get_summary(self, employee_id: int, year: int, month: int) -> AttendanceSummary:
        summary = self._summaries.get(employee_id=int(employee_id), year=int(year), month=int(month))
        if not summary:
            raise NotFoundError(
                "Attendance summary not generated", employee_id=int(employee_id), year=int(year), month=int(month)
            )
        return summary

    def list_month(self, year: int, month: int) -> list[AttendanceSummary]:
        return list(self._summaries.list_for_month(year=int(year), month=int(month)))
