from datetime import date, datetime, time

from hrm_system.attendance.factory import AttendanceStrategyFactory
from hrm_system.attendance.service import day_end, derive_status
from hrm_system.attendance.model import Attendance
from hrm_system.attendance.strategies.early_strategy import EarlyLeaveStrategy
from hrm_system.attendance.strategies.late_strategy import LateStrategy
from hrm_system.attendance.strategies.normal_strategy import NormalStrategy
from hrm_system.attendance.strategies.overtime_strategy import OvertimeStrategy
from hrm_system.core.enums import AttendanceStatus
from tests.fakes import OFFICE_SHIFT

DAY = date(2026, 3, 2)


def test_factory_checkin_within_flexible_minutes():
    strategy = AttendanceStrategyFactory().for_checkin(
        check_in=datetime(2026, 3, 2, 9, 10, 0), work_date=DAY, shift=OFFICE_SHIFT
    )
    assert isinstance(strategy, NormalStrategy)


def test_factory_checkin_late_after_flexible_minutes():
    strategy = AttendanceStrategyFactory().for_checkin(
        check_in=datetime(2026, 3, 2, 9, 10, 1), work_date=DAY, shift=OFFICE_SHIFT
    )
    assert isinstance(strategy, LateStrategy)


def test_factory_checkout_choices():
    factory = AttendanceStrategyFactory()

    def pick(hour, minute):
        return factory.for_checkout(check_out=datetime(2026, 3, 2, hour, minute), work_date=DAY, shift=OFFICE_SHIFT)

    assert isinstance(pick(17, 59), EarlyLeaveStrategy)
    assert isinstance(pick(18, 0), NormalStrategy)
    assert isinstance(pick(18, 15), NormalStrategy)
    assert isinstance(pick(18, 16), OvertimeStrategy)


def test_factory_without_shift_is_neutral():
    factory = AttendanceStrategyFactory()
    assert isinstance(factory.for_checkin(check_in=datetime(2026, 3, 2, 14, 0), work_date=DAY, shift=None), NormalStrategy)
    assert isinstance(factory.for_checkout(check_out=datetime(2026, 3, 2, 9, 0), work_date=DAY, shift=None), NormalStrategy)


def test_late_strategy_minutes():
    decision = LateStrategy().decide_checkin(check_in=datetime(2026, 3, 2, 9, 15), work_date=DAY, shift=OFFICE_SHIFT)
    assert (decision.status, decision.late_minutes) == (AttendanceStatus.LATE, 5)


def test_day_end():
    assert day_end(DAY, OFFICE_SHIFT) == datetime(2026, 3, 2, 18, 0)
    assert day_end(DAY, None) == datetime.combine(date(2026, 3, 3), time.min)


def test_derive_status_precedence():
    record = Attendance(
        attendance_id=1,
        employee_id=10,
        work_date=DAY,
        status=AttendanceStatus.LATE,
        check_in_time=datetime(2026, 3, 2, 9, 30),
        late_minutes=20,
    )
    noon = datetime(2026, 3, 2, 12, 0)

    assert derive_status(record, work_date=DAY, on_leave=True, now=noon) == AttendanceStatus.ON_LEAVE
    assert derive_status(record, work_date=DAY, on_leave=False, now=noon) == AttendanceStatus.LATE
    assert derive_status(None, work_date=DAY, on_leave=False, now=noon, shift=OFFICE_SHIFT) is None
    assert (
        derive_status(None, work_date=DAY, on_leave=False, now=datetime(2026, 3, 2, 18, 0), shift=OFFICE_SHIFT)
        == AttendanceStatus.ABSENT
    )
