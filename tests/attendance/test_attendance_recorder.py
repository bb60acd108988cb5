from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime, time

import pytest

from hrm_system.attendance.model import CheckLocation
from hrm_system.core.enums import AttendanceEventType, AttendanceStatus, BreakAction, LeaveStatus, Role
from hrm_system.core.exceptions import (
    AlreadyCheckedOut,
    AuthorizationError,
    BreakAlreadyOpen,
    DuplicateCheckIn,
    DuplicateCheckOut,
    NoCheckInFound,
    NoOpenBreak,
    NotFoundError,
    ValidationError,
)
from hrm_system.leave.model import NewLeaveRequest
from tests.fakes import ANNUAL, OFFICE_SHIFT, World, at

DAY = date(2026, 3, 2)  # Monday


@pytest.fixture()
def world():
    w = World()
    w.add_employee(10)
    w.shifts.add_shift(OFFICE_SHIFT)
    w.shifts.assign(10, OFFICE_SHIFT.shift_id, date(2026, 1, 1))
    return w


def check_in(world, hour, minute=0, employee_id=10, day=DAY, **kwargs):
    return world.container.attendance_service.check_in(employee_id, now=at(day, hour, minute), **kwargs)


def check_out(world, hour, minute=0, employee_id=10, day=DAY):
    return world.container.attendance_service.check_out(employee_id, now=at(day, hour, minute))


def take_break(world, action, hour, minute=0, day=DAY):
    return world.container.attendance_service.record_break(10, action, now=at(day, hour, minute))


def test_late_minutes_exclude_flexible_window(world):
    record = check_in(world, 9, 15)

    assert record.status == AttendanceStatus.LATE
    assert record.late_minutes == 5
    assert record.shift_id == OFFICE_SHIFT.shift_id


def test_check_in_inside_flexible_window_is_present(world):
    record = check_in(world, 9, 10)

    assert record.status == AttendanceStatus.PRESENT
    assert record.late_minutes == 0


def test_check_in_keeps_location_and_logs_event(world):
    location = CheckLocation(latitude=10.77, longitude=106.7, address="HQ", device_id="kiosk-1", device_type="KIOSK")
    record = check_in(world, 8, 55, location=location, notes="  ")

    assert record.check_in_location == location
    assert record.notes is None
    (event,) = world.container.attendance_service.list_events(record.attendance_id)
    assert event.event_type == AttendanceEventType.CHECK_IN
    assert event.location.device_id == "kiosk-1"


def test_second_check_in_same_day_is_refused(world):
    check_in(world, 9)
    with pytest.raises(DuplicateCheckIn):
        check_in(world, 9, 30)
    assert len(world.attendance.rows) == 1


def test_check_out_requires_check_in(world):
    with pytest.raises(NoCheckInFound):
        check_out(world, 18)


def test_early_check_out(world):
    check_in(world, 9)
    record = check_out(world, 17, 30)

    assert record.early_leave_minutes == 30
    assert record.overtime_minutes == 0
    assert record.total_working_minutes == 510


def test_check_out_inside_overtime_grace(world):
    check_in(world, 9)
    record = check_out(world, 18, 10)

    assert (record.early_leave_minutes, record.overtime_minutes) == (0, 0)


def test_overtime_is_counted_after_grace(world):
    check_in(world, 9)
    record = check_out(world, 19)

    assert record.overtime_minutes == 45
    assert record.total_working_minutes == 600


def test_overtime_is_capped(world):
    check_in(world, 9)
    record = check_out(world, 23, 59)

    assert record.overtime_minutes == OFFICE_SHIFT.max_overtime_minutes


def test_overtime_disabled_on_shift():
    world = World()
    world.add_employee(10)
    world.shifts.add_shift(replace(OFFICE_SHIFT, allow_overtime=False))
    world.shifts.assign(10, OFFICE_SHIFT.shift_id, date(2026, 1, 1))

    check_in(world, 9)
    assert check_out(world, 21).overtime_minutes == 0


def test_second_check_out_is_refused(world):
    check_in(world, 9)
    check_out(world, 18)
    with pytest.raises(DuplicateCheckOut):
        check_out(world, 18, 5)


def test_check_out_before_check_in(world):
    check_in(world, 9)
    with pytest.raises(ValidationError):
        world.container.attendance_service.check_out(10, now=at(DAY, 8, 0))


def test_break_accounting(world):
    check_in(world, 9)
    take_break(world, BreakAction.START, 12)
    with pytest.raises(BreakAlreadyOpen):
        take_break(world, BreakAction.START, 12, 5)

    after_break = take_break(world, BreakAction.END, 12, 45)
    assert after_break.break_minutes == 45
    with pytest.raises(NoOpenBreak):
        take_break(world, BreakAction.END, 12, 50)

    record = check_out(world, 18)
    assert record.total_working_minutes == 540 - 45
    kinds = [e.event_type for e in world.container.attendance_service.list_events(record.attendance_id)]
    assert kinds == [
        AttendanceEventType.CHECK_IN,
        AttendanceEventType.BREAK_START,
        AttendanceEventType.BREAK_END,
        AttendanceEventType.CHECK_OUT,
    ]


def test_multiple_breaks_accumulate(world):
    check_in(world, 9)
    take_break(world, BreakAction.START, 10)
    take_break(world, BreakAction.END, 10, 15)
    take_break(world, BreakAction.START, 12)
    record = take_break(world, BreakAction.END, 12, 30)

    assert record.break_minutes == 45


def test_break_restarted_at_the_minute_it_ended(world):
    check_in(world, 9)
    take_break(world, BreakAction.START, 12)
    take_break(world, BreakAction.END, 12)
    restarted = take_break(world, BreakAction.START, 12)

    assert restarted.has_open_break
    assert restarted.break_end_time is None

    record = take_break(world, BreakAction.END, 12, 30)
    assert record.break_minutes == 30
    assert not record.has_open_break

    take_break(world, BreakAction.START, 15)
    record = check_out(world, 15, 20)
    assert record.break_minutes == 50


def test_open_break_is_closed_by_check_out(world):
    check_in(world, 9)
    take_break(world, BreakAction.START, 12)

    record = check_out(world, 13)

    assert record.break_minutes == 60
    assert record.break_end_time == at(DAY, 13)
    assert record.total_working_minutes == 180


def test_break_needs_an_open_day(world):
    with pytest.raises(NoCheckInFound):
        take_break(world, BreakAction.START, 12)

    check_in(world, 9)
    check_out(world, 18)
    with pytest.raises(AlreadyCheckedOut):
        take_break(world, BreakAction.START, 18, 30)


def test_without_shift_no_minutes_are_derived():
    world = World()
    world.add_employee(10)

    record = check_in(world, 11)
    assert (record.status, record.late_minutes, record.shift_id) == (AttendanceStatus.PRESENT, 0, None)

    record = check_out(world, 23)
    assert (record.early_leave_minutes, record.overtime_minutes) == (0, 0)
    assert record.total_working_minutes == 720


def test_schedule_override_wins_over_default_assignment(world):
    late_shift = replace(OFFICE_SHIFT, shift_id=2, name="Late", start_time=time(13, 0), end_time=time(22, 0))
    world.shifts.add_shift(late_shift)
    world.container.schedule_service.assign(current_role=Role.MANAGER, employee_id=10, work_date=DAY, shift_id=2)

    record = check_in(world, 13, 5)

    assert record.shift_id == 2
    assert record.status == AttendanceStatus.PRESENT


def test_night_shift_check_out_next_morning():
    world = World()
    world.add_employee(10)
    night = replace(
        OFFICE_SHIFT,
        shift_id=3,
        name="Night",
        start_time=time(22, 0),
        end_time=time(6, 0),
        break_start_time=None,
        break_end_time=None,
        applicable_days=0b1111111,
    )
    world.shifts.add_shift(night)
    world.shifts.assign(10, 3, date(2026, 1, 1))

    check_in(world, 22, 5)
    record = check_out(world, 6, 30, day=date(2026, 3, 3))

    assert record.work_date == DAY
    assert record.overtime_minutes == 15
    assert record.total_working_minutes == 505


def test_manager_correction_recomputes_minutes(world):
    record = check_in(world, 9, 40)
    service = world.container.attendance_service

    with pytest.raises(AuthorizationError):
        service.manager_correct(
            current_role=Role.STAFF, manager_id=10, attendance_id=record.attendance_id, check_in_time=at(DAY, 9)
        )

    corrected = service.manager_correct(
        current_role=Role.MANAGER,
        manager_id=20,
        attendance_id=record.attendance_id,
        check_in_time=at(DAY, 9),
        check_out_time=at(DAY, 18),
        notes="Badge reader was down",
        now=at(DAY, 19),
    )

    assert corrected.status == AttendanceStatus.PRESENT
    assert corrected.late_minutes == 0
    assert corrected.total_working_minutes == 540
    assert (corrected.approved_by, corrected.manager_notes) == (20, "Badge reader was down")
    assert service.list_events(record.attendance_id)[-1].event_type == AttendanceEventType.CORRECTION


def test_correction_of_unknown_record(world):
    with pytest.raises(NotFoundError):
        world.container.attendance_service.manager_correct(
            current_role=Role.ADMIN, manager_id=1, attendance_id=42, check_in_time=at(DAY, 9)
        )


def test_approve_records(world):
    record = check_in(world, 9)
    service = world.container.attendance_service

    with pytest.raises(AuthorizationError):
        service.approve_records(current_role=Role.STAFF, manager_id=10, attendance_ids=[record.attendance_id])
    with pytest.raises(ValidationError):
        service.approve_records(current_role=Role.MANAGER, manager_id=20, attendance_ids=[])

    count = service.approve_records(
        current_role=Role.MANAGER, manager_id=20, attendance_ids=[record.attendance_id, 999], now=at(DAY, 20)
    )

    assert count == 1
    assert world.attendance.get_by_id(record.attendance_id).approved_by == 20


def _approved_leave(world, employee_id, start, end):
    policy = world.policies.add(ANNUAL)
    rid = world.leave_requests.create(
        NewLeaveRequest(
            employee_id=employee_id,
            policy_id=policy.policy_id,
            start_date=start,
            end_date=end,
            requested_days=1,
            reason="Leave",
            created_at=at(start, 8),
        )
    )
    world.leave_requests.update_status(request_id=rid, status=LeaveStatus.APPROVED, updated_at=at(start, 8))


def test_day_status(world):
    service = world.container.attendance_service
    world.add_employee(11)

    assert service.day_status(10, DAY, now=at(DAY, 12)) is None
    assert service.day_status(10, DAY, now=at(DAY, 18)) == AttendanceStatus.ABSENT

    check_in(world, 9, 30)
    assert service.day_status(10, DAY, now=at(DAY, 12)) == AttendanceStatus.LATE

    _approved_leave(world, 11, DAY, DAY)
    assert service.day_status(11, DAY, now=at(DAY, 8)) == AttendanceStatus.ON_LEAVE


def test_daily_report_counts(world):
    world.add_employee(11)
    world.add_employee(12)
    world.add_employee(13)
    world.add_employee(14, department_id=2)
    for employee_id in (12, 13):
        world.shifts.assign(employee_id, OFFICE_SHIFT.shift_id, date(2026, 1, 1))
    _approved_leave(world, 11, DAY, date(2026, 3, 4))

    check_in(world, 9, 20)
    check_in(world, 8, 50, employee_id=13)
    check_out(world, 17, employee_id=13)

    report = world.container.attendance_service.daily_report(DAY, department_id=1, now=at(DAY, 23))

    assert report.total_employees == 4
    assert (report.present_count, report.late_count, report.absent_count, report.on_leave_count) == (1, 1, 1, 1)
    assert report.early_leave_count == 1
    assert {r.employee_id: r.status for r in report.rows}[12] == AttendanceStatus.ABSENT
