from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Optional, Sequence

from ..common.datetime_utils import minutes_between
from ..core.enums import AttendanceEventType, AttendanceStatus, BreakAction, Role
from ..core.exceptions import (
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
from ..database.unit_of_work import UnitOfWork
from ..employees.service import EmployeeService
from ..leave.repository import LeaveRequestRepository
from ..schedules.service import ScheduleService
from ..shifts.model import WorkShift
from ..shifts.repository import ShiftRepository
from .factory import AttendanceStrategyFactory
from .model import Attendance, AttendanceEvent, CheckLocation
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


def day_end(work_date: date, shift: Optional[WorkShift]) -> datetime:
    """Moment after which a work day counts as elapsed."""
    if shift:
        return shift.scheduled_end(work_date)
    return datetime.combine(work_date + timedelta(days=1), time.min)


def derive_status(
    record: Optional[Attendance],
    *,
    work_date: date,
    on_leave: bool,
    now: datetime,
    shift: Optional[WorkShift] = None,
) -> Optional[AttendanceStatus]:
    """Status of a day as seen at ``now``; None while it is still undecided.

    Approved leave overrides everything else.
    """
    if on_leave:
        return AttendanceStatus.ON_LEAVE
    if record and record.check_in_time:
        return AttendanceStatus.LATE if record.late_minutes > 0 else AttendanceStatus.PRESENT
    if now >= day_end(work_date, shift):
        return AttendanceStatus.ABSENT
    return None


@dataclass(frozen=True)
class DailyAttendanceRow:
    employee_id: int
    full_name: str
    status: Optional[AttendanceStatus]
    check_in_time: Optional[datetime] = None
    check_out_time: Optional[datetime] = None
    late_minutes: int = 0
    early_leave_minutes: int = 0


@dataclass(frozen=True)
class DailyAttendanceReport:
    work_date: date
    rows: tuple[DailyAttendanceRow, ...]

    def _count(self, status: AttendanceStatus) -> int:
        return sum(1 for r in self.rows if r.status == status)

    @property
    def total_employees(self) -> int:
        return len(self.rows)

    @property
    def present_count(self) -> int:
        return self._count(AttendanceStatus.PRESENT)

    @property
    def late_count(self) -> int:
        return self._count(AttendanceStatus.LATE)

    @property
    def absent_count(self) -> int:
        return self._count(AttendanceStatus.ABSENT)

    @property
    def on_leave_count(self) -> int:
        return self._count(AttendanceStatus.ON_LEAVE)

    @property
    def early_leave_count(self) -> int:
        return sum(1 for r in self.rows if r.early_leave_minutes > 0)


class AttendanceService:
    def __init__(
        self,
        attendance: AttendanceRepository,
        employees: EmployeeService,
        schedules: ScheduleService,
        shifts: ShiftRepository,
        leave_requests: LeaveRequestRepository,
        uow: UnitOfWork,
        *,
        strategy_factory: AttendanceStrategyFactory | None = None,
    ):
        self._attendance = attendance
        self._employees = employees
        self._schedules = schedules
        self._shifts = shifts
        self._leave_requests = leave_requests
        self._uow = uow
        self._factory = strategy_factory or AttendanceStrategyFactory()

    def _record_shift(self, record: Attendance) -> Optional[WorkShift]:
        if record.shift_id:
            return self._shifts.get_by_id(int(record.shift_id))
        return self._schedules.get_effective_shift(record.employee_id, record.work_date)

    def _open_record(self, employee_id: int, now: datetime) -> Optional[Attendance]:
        """Today's row, or yesterday's still-open row of a night shift."""
        today = now.date()
        record = self._attendance.get_for_employee_and_date(employee_id, today, for_update=True)
        if record:
            return record

        previous = self._attendance.get_for_employee_and_date(employee_id, today - timedelta(days=1), for_update=True)
        if previous and previous.check_in_time and not previous.is_checked_out and previous.shift_id:
            shift = self._shifts.get_by_id(int(previous.shift_id))
            if shift and shift.is_night_shift:
                return previous
        return None

    def check_in(
        self,
        employee_id: int,
        *,
        now: datetime | None = None,
        location: CheckLocation | None = None,
        notes: str | None = None,
    ) -> Attendance:
        now = now or datetime.now()
        today = now.date()
        location = location or CheckLocation()
        employee = self._employees.get_employee(employee_id)

        with self._uow.transaction():
            existing = self._attendance.get_for_employee_and_date(employee.employee_id, today, for_update=True)
            if existing and existing.check_in_time:
                raise DuplicateCheckIn(
                    "Already checked in today",
                    employee_id=employee.employee_id,
                    work_date=today.isoformat(),
                    check_in_time=existing.check_in_time.isoformat(),
                )

            shift = self._schedules.get_effective_shift(employee.employee_id, today)
            strategy = self._factory.for_checkin(check_in=now, work_date=today, shift=shift)
            decision = strategy.decide_checkin(check_in=now, work_date=today, shift=shift)

            attendance_id = self._attendance.create_checkin(
                employee_id=employee.employee_id,
                work_date=today,
                shift_id=shift.shift_id if shift else None,
                check_in_time=now,
                location=location,
                late_minutes=decision.late_minutes,
                status=decision.status,
                notes=(notes or "").strip() or None,
            )
            if attendance_id is None:
                raise DuplicateCheckIn(
                    "Already checked in today", employee_id=employee.employee_id, work_date=today.isoformat()
                )
            self._attendance.append_event(
                attendance_id=attendance_id,
                event_type=AttendanceEventType.CHECK_IN,
                event_time=now,
                location=location,
                notes=notes,
            )

        logger.info(
            "Employee %s checked in at %s (%s, late=%s)", employee.employee_id, now, decision.status.value, decision.late_minutes
        )
        return self._attendance.get_by_id(attendance_id)

    def check_out(
        self,
        employee_id: int,
        *,
        now: datetime | None = None,
        location: CheckLocation | None = None,
        notes: str | None = None,
    ) -> Attendance:
        now = now or datetime.now()
        location = location or CheckLocation()

        with self._uow.transaction():
            record = self._open_record(int(employee_id), now)
            if not record or not record.check_in_time:
                raise NoCheckInFound("No check-in recorded today", employee_id=int(employee_id), work_date=now.date().isoformat())
            if record.is_checked_out:
                raise DuplicateCheckOut(
                    "Already checked out today",
                    employee_id=record.employee_id,
                    work_date=record.work_date.isoformat(),
                    check_out_time=record.check_out_time.isoformat(),
                )
            if now < record.check_in_time:
                raise ValidationError("Check-out cannot be before check-in", attendance_id=record.attendance_id)

            break_minutes = record.break_minutes
            break_end = record.break_end_time
            if record.has_open_break:
                # An unfinished break ends with the day.
                break_minutes += max(0, minutes_between(record.break_start_time, now))
                break_end = now

            shift = self._record_shift(record)
            strategy = self._factory.for_checkout(check_out=now, work_date=record.work_date, shift=shift)
            decision = strategy.decide_checkout(check_out=now, work_date=record.work_date, shift=shift)
            total = max(0, minutes_between(record.check_in_time, now) - break_minutes)

            self._attendance.update_checkout(
                attendance_id=record.attendance_id,
                check_out_time=now,
                location=location,
                break_end_time=break_end,
                break_minutes=break_minutes,
                total_working_minutes=total,
                early_leave_minutes=decision.early_leave_minutes,
                overtime_minutes=decision.overtime_minutes,
            )
            self._attendance.append_event(
                attendance_id=record.attendance_id,
                event_type=AttendanceEventType.CHECK_OUT,
                event_time=now,
                location=location,
                notes=notes,
            )

        logger.info(
            "Employee %s checked out at %s (worked=%s early=%s overtime=%s)",
            record.employee_id, now, total, decision.early_leave_minutes, decision.overtime_minutes,
        )
        return self._attendance.get_by_id(record.attendance_id)

    def record_break(
        self,
        employee_id: int,
        action: BreakAction,
        *,
        now: datetime | None = None,
        location: CheckLocation | None = None,
    ) -> Attendance:
        now = now or datetime.now()
        action = BreakAction(action)

        with self._uow.transaction():
            record = self._open_record(int(employee_id), now)
            if not record or not record.check_in_time:
                raise NoCheckInFound("No check-in recorded today", employee_id=int(employee_id), work_date=now.date().isoformat())
            if record.is_checked_out:
                raise AlreadyCheckedOut("Already checked out today", attendance_id=record.attendance_id)

            if action == BreakAction.START:
                if record.has_open_break:
                    raise BreakAlreadyOpen(
                        "A break is already in progress",
                        attendance_id=record.attendance_id,
                        break_start_time=record.break_start_time.isoformat(),
                    )
                self._attendance.update_break(
                    attendance_id=record.attendance_id,
                    break_start_time=now,
                    break_end_time=None,
                    break_minutes=record.break_minutes,
                )
                event_type = AttendanceEventType.BREAK_START
            else:
                if not record.has_open_break:
                    raise NoOpenBreak("No break in progress", attendance_id=record.attendance_id)
                if now < record.break_start_time:
                    raise ValidationError("Break end cannot be before break start", attendance_id=record.attendance_id)
                self._attendance.update_break(
                    attendance_id=record.attendance_id,
                    break_start_time=record.break_start_time,
                    break_end_time=now,
                    break_minutes=record.break_minutes + minutes_between(record.break_start_time, now),
                )
                event_type = AttendanceEventType.BREAK_END

            self._attendance.append_event(
                attendance_id=record.attendance_id, event_type=event_type, event_time=now, location=location
            )

        logger.info("Employee %s %s at %s", record.employee_id, event_type.value.lower(), now)
        return self._attendance.get_by_id(record.attendance_id)

    def get_today(self, employee_id: int, *, today: date | None = None) -> Optional[Attendance]:
        return self._attendance.get_for_employee_and_date(int(employee_id), today or date.today())

    def get_record(self, employee_id: int, work_date: date) -> Optional[Attendance]:
        return self._attendance.get_for_employee_and_date(int(employee_id), work_date)

    def list_events(self, attendance_id: int) -> list[AttendanceEvent]:
        if not self._attendance.get_by_id(int(attendance_id)):
            raise NotFoundError("Attendance record not found", attendance_id=int(attendance_id))
        return sorted(self._attendance.list_events(int(attendance_id)), key=lambda e: (e.event_time, e.event_id))

    def _on_leave(self, employee_id: int, work_date: date) -> bool:
        return bool(
            self._leave_requests.list_approved_in_range(start=work_date, end=work_date, employee_id=int(employee_id))
        )

    def day_status(self, employee_id: int, work_date: date, *, now: datetime | None = None) -> Optional[AttendanceStatus]:
        now = now or datetime.now()
        record = self._attendance.get_for_employee_and_date(int(employee_id), work_date)
        shift = self._record_shift(record) if record else self._schedules.get_effective_shift(int(employee_id), work_date)
        return derive_status(
            record, work_date=work_date, on_leave=self._on_leave(employee_id, work_date), now=now, shift=shift
        )

    def manager_correct(
        self,
        *,
        current_role: Role,
        manager_id: int,
        attendance_id: int,
        check_in_time: datetime,
        check_out_time: Optional[datetime] = None,
        notes: str = "",
        now: datetime | None = None,
    ) -> Attendance:
        """Overwrite the timestamps of a day and recompute its derived minutes."""
        if current_role not in {Role.ADMIN, Role.MANAGER}:
            raise AuthorizationError("Only managers can correct attendance")
        now = now or datetime.now()
        notes = (notes or "").strip() or None

        with self._uow.transaction():
            record = self._attendance.get_by_id(int(attendance_id), for_update=True)
            if not record:
                raise NotFoundError("Attendance record not found", attendance_id=int(attendance_id))
            if check_out_time and check_out_time < check_in_time:
                raise ValidationError("Check-out cannot be before check-in", attendance_id=record.attendance_id)

            shift = self._record_shift(record)
            checkin = self._factory.for_checkin(check_in=check_in_time, work_date=record.work_date, shift=shift)
            in_decision = checkin.decide_checkin(check_in=check_in_time, work_date=record.work_date, shift=shift)

            early = overtime = total = 0
            if check_out_time:
                checkout = self._factory.for_checkout(check_out=check_out_time, work_date=record.work_date, shift=shift)
                out_decision = checkout.decide_checkout(check_out=check_out_time, work_date=record.work_date, shift=shift)
                early, overtime = out_decision.early_leave_minutes, out_decision.overtime_minutes
                total = max(0, minutes_between(check_in_time, check_out_time) - record.break_minutes)

            self._attendance.apply_correction(
                attendance_id=record.attendance_id,
                check_in_time=check_in_time,
                check_out_time=check_out_time,
                status=in_decision.status,
                total_working_minutes=total,
                late_minutes=in_decision.late_minutes,
                early_leave_minutes=early,
                overtime_minutes=overtime,
                manager_notes=notes,
                approved_by=int(manager_id),
                approved_at=now,
            )
            self._attendance.append_event(
                attendance_id=record.attendance_id,
                event_type=AttendanceEventType.CORRECTION,
                event_time=now,
                notes=notes or f"Corrected by {manager_id}",
            )

        logger.info("Attendance %s corrected by manager %s", attendance_id, manager_id)
        return self._attendance.get_by_id(record.attendance_id)

    def approve_records(
        self,
        *,
        current_role: Role,
        manager_id: int,
        attendance_ids: Sequence[int],
        notes: str = "",
        now: datetime | None = None,
    ) -> int:
        if current_role not in {Role.ADMIN, Role.MANAGER}:
            raise AuthorizationError("Only managers can approve attendance")
        ids = sorted({int(i) for i in attendance_ids})
        if not ids:
            raise ValidationError("No attendance records selected")
        with self._uow.transaction():
            count = self._attendance.approve(
                attendance_ids=ids,
                approved_by=int(manager_id),
                approved_at=now or datetime.now(),
                manager_notes=(notes or "").strip() or None,
            )
        logger.info("Manager %s approved %s attendance record(s)", manager_id, count)
        return count

    def daily_report(
        self, work_date: date, *, department_id: int | None = None, now: datetime | None = None
    ) -> DailyAttendanceReport:
        now = now or datetime.now()
        records = {r.employee_id: r for r in self._attendance.list_range(start=work_date, end=work_date)}

        rows: list[DailyAttendanceRow] = []
        for employee in self._employees.list_active(department_id=department_id):
            record = records.get(employee.employee_id)
            shift = self._record_shift(record) if record else self._schedules.get_effective_shift(employee.employee_id, work_date)
            status = derive_status(
                record,
                work_date=work_date,
                on_leave=self._on_leave(employee.employee_id, work_date),
                now=now,
                shift=shift,
            )
            rows.append(
                DailyAttendanceRow(
                    employee_id=employee.employee_id,
                    full_name=employee.full_name,
                    status=status,
                    check_in_time=record.check_in_time if record else None,
                    check_out_time=record.check_out_time if record else None,
                    late_minutes=record.late_minutes if record else 0,
                    early_leave_minutes=record.early_leave_minutes if record else 0,
                )
            )
        return DailyAttendanceReport(work_date=work_date, rows=tuple(rows))
