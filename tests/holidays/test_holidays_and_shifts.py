from __future__ import annotations

from dataclasses import replace
from datetime import date, time

import pytest

from hrm_system.core.enums import Role
from hrm_system.core.exceptions import AuthorizationError, NotFoundError, ValidationError
from hrm_system.employees.service import EmployeeService
from tests.fakes import OFFICE_SHIFT, InMemoryEmployees, World


def test_holiday_maintenance_is_admin_only():
    service = World().container.holiday_service
    with pytest.raises(AuthorizationError):
        service.add_holiday(current_role=Role.MANAGER, name="New Year", holiday_date=date(2026, 1, 1))
    with pytest.raises(ValidationError):
        service.add_holiday(current_role=Role.ADMIN, name=" ", holiday_date=date(2026, 1, 1))


def test_department_holidays_apply_only_to_that_department():
    world = World()
    service = world.container.holiday_service
    service.add_holiday(current_role=Role.ADMIN, name="New Year", holiday_date=date(2026, 1, 1))
    service.add_holiday(current_role=Role.ADMIN, name="Plant shutdown", holiday_date=date(2026, 1, 2), department_id=3)

    assert service.is_public_holiday(date(2026, 1, 1))
    assert service.is_public_holiday(date(2026, 1, 2), department_id=3)
    assert not service.is_public_holiday(date(2026, 1, 2), department_id=1)
    assert not service.is_public_holiday(date(2026, 1, 2))
    assert [h.name for h in service.list_holidays(start=date(2026, 1, 1), end=date(2026, 1, 31), department_id=3)] == [
        "New Year",
        "Plant shutdown",
    ]


def test_deactivated_holiday_is_a_business_day_again():
    world = World()
    service = world.container.holiday_service
    holiday_id = service.add_holiday(current_role=Role.ADMIN, name="Founders Day", holiday_date=date(2026, 3, 18))
    calendar = world.container.business_days
    assert calendar.count(date(2026, 3, 16), date(2026, 3, 22)) == 4

    service.deactivate_holiday(current_role=Role.ADMIN, holiday_id=holiday_id)

    assert calendar.count(date(2026, 3, 16), date(2026, 3, 22)) == 5
    with pytest.raises(NotFoundError):
        service.deactivate_holiday(current_role=Role.ADMIN, holiday_id=999)


def test_business_days_skip_weekends():
    calendar = World().container.business_days
    days = calendar.business_days(date(2026, 3, 6), date(2026, 3, 9))
    assert days == [date(2026, 3, 6), date(2026, 3, 9)]
    assert calendar.count(date(2026, 3, 9), date(2026, 3, 6)) == 0


def test_effective_shift_resolution():
    world = World()
    world.shifts.add_shift(OFFICE_SHIFT)
    world.shifts.add_shift(replace(OFFICE_SHIFT, shift_id=2, name="Early", start_time=time(6, 0), end_time=time(14, 0)))
    world.shifts.assign(10, 1, date(2026, 1, 1), date(2026, 6, 30))
    service = world.container.schedule_service

    assert service.get_effective_shift(10, date(2025, 12, 31)) is None
    assert service.get_effective_shift(10, date(2026, 3, 2)).shift_id == 1
    assert service.get_effective_shift(10, date(2026, 7, 1)) is None

    schedule_id = service.assign(current_role=Role.ADMIN, employee_id=10, work_date=date(2026, 3, 2), shift_id=2)
    assert service.get_effective_shift(10, date(2026, 3, 2)).shift_id == 2

    service.delete(current_role=Role.MANAGER, schedule_id=schedule_id)
    assert service.get_effective_shift(10, date(2026, 3, 2)).shift_id == 1


def test_schedule_changes_need_a_manager_and_a_real_shift():
    service = World().container.schedule_service
    with pytest.raises(AuthorizationError):
        service.assign(current_role=Role.STAFF, employee_id=10, work_date=date(2026, 3, 2), shift_id=1)
    with pytest.raises(NotFoundError):
        service.assign(current_role=Role.ADMIN, employee_id=10, work_date=date(2026, 3, 2), shift_id=1)
    with pytest.raises(NotFoundError):
        service.delete(current_role=Role.ADMIN, schedule_id=5)


def test_shift_geometry():
    night = replace(OFFICE_SHIFT, start_time=time(22, 0), end_time=time(6, 0), break_start_time=None, break_end_time=None)

    assert OFFICE_SHIFT.standard_minutes == 480
    assert OFFICE_SHIFT.applies_on(date(2026, 3, 6))
    assert not OFFICE_SHIFT.applies_on(date(2026, 3, 7))
    assert night.is_night_shift
    assert night.standard_minutes == 480
    assert night.scheduled_end(date(2026, 3, 2)).date() == date(2026, 3, 3)


def test_management_chain_stops_at_inactive_gap_and_depth():
    world = World()
    world.add_employee(40)
    world.add_employee(30, manager_id=40, is_active=False)
    world.add_employee(20, manager_id=30)
    world.add_employee(10, manager_id=20)

    assert world.container.employee_service.management_chain(10) == [20, 40]
    shallow = EmployeeService(world.employees, max_chain_depth=1)
    assert shallow.management_chain(10, levels=5) == [20]


def test_unknown_employee():
    with pytest.raises(NotFoundError):
        EmployeeService(InMemoryEmployees()).get_employee(1)
