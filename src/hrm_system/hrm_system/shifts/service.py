from __future__ import annotations

import logging
from datetime import date, timedelta
from typing import Optional

from ..common.validators import require_non_empty, require_non_negative
from ..core.enums import Role
from ..core.exceptions import AuthorizationError, NotFoundError, OverlappingAssignment, ValidationError
from ..database.unit_of_work import UnitOfWork
from ..employees.service import EmployeeService
from .model import ShiftAssignment, ShiftData, WorkShift
from .repository import ShiftRepository

logger = logging.getLogger(__name__)

_ALL_WEEKDAYS = 0b1111111


def _require_manager(current_role: Role) -> None:
    if current_role not in {Role.ADMIN, Role.MANAGER}:
        raise AuthorizationError("Only managers can assign shifts")


class ShiftService:
    """Shift templates (HR admins) and default shift assignments (managers).

    Shifts are deactivated rather than deleted; attendance rows keep pointing
    at the shift they were recorded against.
    """

    def __init__(self, shifts: ShiftRepository, employees: EmployeeService, uow: UnitOfWork):
        self._shifts = shifts
        self._employees = employees
        self._uow = uow

    @staticmethod
    def _validate(data: ShiftData) -> ShiftData:
        require_non_empty(data.name, "Shift name")
        if data.start_time == data.end_time:
            raise ValidationError("Shift start and end must differ", field="end_time")
        if (data.break_start_time is None) != (data.break_end_time is None):
            raise ValidationError("Break needs both a start and an end", field="break_end_time")
        if data.break_start_time is not None and data.break_end_time <= data.break_start_time:
            raise ValidationError("Break end must be after break start", field="break_end_time")
        require_non_negative(data.flexible_minutes, "flexible_minutes")
        require_non_negative(data.overtime_grace_minutes, "overtime_grace_minutes")
        if data.max_overtime_minutes is not None:
            require_non_negative(data.max_overtime_minutes, "max_overtime_minutes")
        if not 0 < int(data.applicable_days) <= _ALL_WEEKDAYS:
            raise ValidationError("Shift must apply on at least one weekday", field="applicable_days")
        return data

    def _ensure_unique_name(self, name: str, *, shift_id: Optional[int] = None) -> None:
        wanted = name.strip().lower()
        for shift in self._shifts.list_all():
            if shift.name.strip().lower() == wanted and shift.shift_id != shift_id:
                raise ValidationError("A shift with that name already exists", field="name", shift_id=shift.shift_id)

    def list_shifts(self, *, include_inactive: bool = False) -> list[WorkShift]:
        return [s for s in self._shifts.list_all() if include_inactive or s.is_active]

    def get_shift(self, shift_id: int) -> WorkShift:
        shift = self._shifts.get_by_id(int(shift_id))
        if not shift:
            raise NotFoundError("Shift not found", shift_id=int(shift_id))
        return shift

    def create_shift(self, *, current_role: Role, data: ShiftData) -> WorkShift:
        if current_role != Role.ADMIN:
            raise AuthorizationError("Only HR admins can manage shifts")
        self._ensure_unique_name(self._validate(data).name)
        shift_id = self._shifts.create_shift(data)
        logger.info("Shift %s created (%s %s-%s)", shift_id, data.name, data.start_time, data.end_time)
        return self.get_shift(shift_id)

    def update_shift(self, *, current_role: Role, shift_id: int, data: ShiftData) -> WorkShift:
        if current_role != Role.ADMIN:
            raise AuthorizationError("Only HR admins can manage shifts")
        self.get_shift(shift_id)
        self._ensure_unique_name(self._validate(data).name, shift_id=int(shift_id))
        self._shifts.update_shift(int(shift_id), data)
        logger.info("Shift %s updated", shift_id)
        return self.get_shift(shift_id)

    def deactivate_shift(self, *, current_role: Role, shift_id: int) -> None:
        if current_role != Role.ADMIN:
            raise AuthorizationError("Only HR admins can manage shifts")
        self.get_shift(shift_id)
        self._shifts.set_active(int(shift_id), is_active=False)
        logger.info("Shift %s deactivated", shift_id)

    def get_assignment(self, assignment_id: int) -> ShiftAssignment:
        assignment = self._shifts.get_assignment(int(assignment_id))
        if not assignment:
            raise NotFoundError("Shift assignment not found", assignment_id=int(assignment_id))
        return assignment

    def list_assignments(self, *, employee_id: Optional[int] = None) -> list[ShiftAssignment]:
        return list(self._shifts.list_assignments(employee_id=employee_id))

    def _check_range(self, shift_id: int, effective_from: date, effective_to: Optional[date]) -> None:
        if effective_to is not None and effective_to < effective_from:
            raise ValidationError("Effective end must be on or after effective start", field="effective_to")
        if not self.get_shift(shift_id).is_active:
            raise ValidationError("Shift is not active", shift_id=int(shift_id))

    def assign_default(
        self,
        *,
        current_role: Role,
        employee_id: int,
        shift_id: int,
        effective_from: date,
        effective_to: Optional[date] = None,
    ) -> ShiftAssignment:
        """Give an employee a default shift from ``effective_from``.

        An assignment that started earlier and is still running is ended the
        day before; one that starts on or after ``effective_from`` and meets
        the new range is a conflict.
        """
        _require_manager(current_role)
        employee = self._employees.get_employee(employee_id)
        self._check_range(shift_id, effective_from, effective_to)

        with self._uow.transaction():
            self._employees.lock_employee(employee.employee_id)
            overlapping = [
                a
                for a in self._shifts.list_assignments(employee_id=employee.employee_id)
                if a.is_default and a.overlaps(effective_from, effective_to)
            ]
            clashes = [a for a in overlapping if a.effective_from >= effective_from]
            if clashes:
                raise OverlappingAssignment(
                    "Employee already has a default shift in that range",
                    employee_id=employee.employee_id,
                    conflicting_assignment_ids=[a.assignment_id for a in clashes],
                )
            for previous in overlapping:
                self._shifts.update_assignment(
                    previous.assignment_id,
                    shift_id=previous.shift_id,
                    effective_from=previous.effective_from,
                    effective_to=effective_from - timedelta(days=1),
                )
                logger.info("Shift assignment %s ended on %s", previous.assignment_id, effective_from - timedelta(days=1))

            assignment_id = self._shifts.create_assignment(
                employee_id=employee.employee_id,
                shift_id=int(shift_id),
                effective_from=effective_from,
                effective_to=effective_to,
            )

        logger.info(
            "Employee %s assigned shift %s from %s to %s", employee.employee_id, shift_id, effective_from, effective_to
        )
        return self.get_assignment(assignment_id)

    def update_assignment(
        self,
        *,
        current_role: Role,
        assignment_id: int,
        shift_id: int,
        effective_from: date,
        effective_to: Optional[date] = None,
    ) -> ShiftAssignment:
        _require_manager(current_role)
        self._check_range(shift_id, effective_from, effective_to)

        with self._uow.transaction():
            current = self._shifts.get_assignment(int(assignment_id), for_update=True)
            if not current:
                raise NotFoundError("Shift assignment not found", assignment_id=int(assignment_id))
            self._employees.lock_employee(current.employee_id)
            clashes = [
                a
                for a in self._shifts.list_assignments(employee_id=current.employee_id)
                if a.assignment_id != current.assignment_id and a.is_default and a.overlaps(effective_from, effective_to)
            ]
            if clashes:
                raise OverlappingAssignment(
                    "Employee already has a default shift in that range",
                    employee_id=current.employee_id,
                    conflicting_assignment_ids=[a.assignment_id for a in clashes],
                )
            self._shifts.update_assignment(
                current.assignment_id, shift_id=int(shift_id), effective_from=effective_from, effective_to=effective_to
            )

        logger.info("Shift assignment %s updated", assignment_id)
        return self.get_assignment(assignment_id)

    def delete_assignment(self, *, current_role: Role, assignment_id: int) -> None:
        _require_manager(current_role)
        if not self._shifts.delete_assignment(int(assignment_id)):
            raise NotFoundError("Shift assignment not found", assignment_id=int(assignment_id))
        logger.info("Shift assignment %s deleted", assignment_id)
