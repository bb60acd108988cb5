from __future__ import annotations

import logging
from datetime import date
from typing import Iterable, Optional

from ..common.datetime_utils import iter_dates
from ..core.enums import Role
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..database.unit_of_work import UnitOfWork
from ..employees.service import EmployeeService
from ..holidays.service import BusinessDayCalculator
from ..shifts.model import WorkShift
from ..shifts.repository import ShiftRepository
from .model import WorkSchedule
from .repository import ScheduleRepository

logger = logging.getLogger(__name__)

MAX_BULK_DAYS = 366


class ScheduleService:
    """Work shift schedule: per-day overrides on top of default assignments."""

    def __init__(
        self,
        schedules: ScheduleRepository,
        shifts: ShiftRepository,
        employees: EmployeeService,
        calendar: BusinessDayCalculator,
        uow: UnitOfWork,
    ):
        self._schedules = schedules
        self._shifts = shifts
        self._employees = employees
        self._calendar = calendar
        self._uow = uow

    def get_effective_shift(self, employee_id: int, work_date: date) -> Optional[WorkShift]:
        sc = self._schedules.get_for_employee_and_date(employee_id=int(employee_id), work_date=work_date)
        if sc:
            return self._shifts.get_by_id(sc.shift_id)

        assignment = self._shifts.get_default_assignment(employee_id=int(employee_id), on_date=work_date)
        if assignment:
            return self._shifts.get_by_id(assignment.shift_id)
        return None

    def list_schedules(self, *, start: date, end: date, employee_id: Optional[int] = None) -> list[WorkSchedule]:
        if end < start:
            raise ValidationError("End date must be on or after start date", start=start.isoformat(), end=end.isoformat())
        return sorted(
            self._schedules.list_range(start=start, end=end, employee_id=employee_id),
            key=lambda s: (s.work_date, s.employee_id),
        )

    def assign(
        self,
        *,
        current_role: Role,
        employee_id: int,
        work_date: date,
        shift_id: int,
        note: Optional[str] = None,
    ) -> int:
        if current_role not in {Role.ADMIN, Role.MANAGER}:
            raise AuthorizationError("Only managers can change schedules")

        if int(employee_id) <= 0:
            raise ValidationError("Employee is invalid", employee_id=employee_id)
        if not self._shifts.get_by_id(int(shift_id)):
            raise NotFoundError("Shift not found", shift_id=shift_id)

        note = note.strip() if note else None
        return self._schedules.upsert(employee_id=int(employee_id), work_date=work_date, shift_id=int(shift_id), note=note)

    def assign_range(
        self,
        *,
        current_role: Role,
        employee_ids: Iterable[int],
        shift_id: int,
        start: date,
        end: date,
        weekdays: Optional[Iterable[int]] = None,
        skip_holidays: bool = True,
        note: Optional[str] = None,
    ) -> list[WorkSchedule]:
        """Plan one shift for several employees over a date range.

        ``weekdays`` defaults to the shift's own applicable days. Days that
        already carry a schedule are left alone.
        """
        if current_role not in {Role.ADMIN, Role.MANAGER}:
            raise AuthorizationError("Only managers can change schedules")
        if end < start:
            raise ValidationError("End date must be on or after start date", start=start.isoformat(), end=end.isoformat())
        if (end - start).days >= MAX_BULK_DAYS:
            raise ValidationError(f"At most {MAX_BULK_DAYS} days can be planned at once", field="end")

        shift = self._shifts.get_by_id(int(shift_id))
        if not shift:
            raise NotFoundError("Shift not found", shift_id=int(shift_id))
        if not shift.is_active:
            raise ValidationError("Shift is not active", shift_id=shift.shift_id)

        days = set(weekdays) if weekdays is not None else {d for d in range(7) if shift.applicable_days & (1 << d)}
        if not days or not days <= set(range(7)):
            raise ValidationError("Weekdays must be between 0 (Monday) and 6 (Sunday)", field="weekdays")
        employees = [self._employees.get_employee(e) for e in sorted({int(e) for e in employee_ids})]
        if not employees:
            raise ValidationError("No employees selected", field="employee_ids")
        note = note.strip() if note else None

        created: list[WorkSchedule] = []
        with self._uow.transaction():
            for employee in employees:
                holidays = self._calendar.holiday_dates(start, end, employee.department_id) if skip_holidays else set()
                for day in iter_dates(start, end):
                    if day.weekday() not in days or day in holidays:
                        continue
                    if self._schedules.get_for_employee_and_date(employee_id=employee.employee_id, work_date=day):
                        continue
                    schedule_id = self._schedules.upsert(
                        employee_id=employee.employee_id, work_date=day, shift_id=shift.shift_id, note=note
                    )
                    created.append(WorkSchedule(schedule_id, employee.employee_id, day, shift.shift_id, note))

        logger.info(
            "Planned shift %s for %d employee(s) %s..%s (%d day(s))", shift.shift_id, len(employees), start, end, len(created)
        )
        return created

    def delete(self, *, current_role: Role, schedule_id: int) -> None:
        if current_role not in {Role.ADMIN, Role.MANAGER}:
            raise AuthorizationError("Only managers can change schedules")

        if not self._schedules.delete(schedule_id=int(schedule_id)):
            raise NotFoundError("Schedule not found", schedule_id=int(schedule_id))
