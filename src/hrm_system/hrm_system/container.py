from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from .approvals.mysql_approval_repository import MySQLApprovalStepRepository
from .approvals.repository import ApprovalStepRepository
from .approvals.service import ApprovalWorkflowService
from .attendance.factory import AttendanceStrategyFactory
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceService
from .balances.mysql_balance_repository import MySQLBalanceRepository
from .balances.repository import BalanceRepository
from .balances.service import BalanceLedger
from .core.constants import (
    DEFAULT_APPROVAL_LEVELS,
    DEFAULT_MAX_CHAIN_DEPTH,
    DEFAULT_WEEKEND_DAYS,
    DEFAULT_WORKDAY_MINUTES,
)
from .database.connection import DBConfig, DatabaseConnection
from .database.unit_of_work import UnitOfWork
from .employees.mysql_employee_repository import MySQLEmployeeRepository
from .employees.repository import EmployeeDirectory
from .employees.service import EmployeeService
from .holidays.mysql_holiday_repository import MySQLHolidayRepository
from .holidays.repository import HolidayRepository
from .holidays.service import BusinessDayCalculator, HolidayService
from .leave.mysql_leave_repository import MySQLLeaveRequestRepository
from .leave.repository import LeaveRequestRepository
from .leave.service import LeaveRequestService
from .policies.mysql_policy_repository import MySQLPolicyRepository
from .policies.repository import PolicyRepository
from .policies.service import PolicyService
from .schedules.mysql_schedule_repository import MySQLScheduleRepository
from .schedules.repository import ScheduleRepository
from .schedules.service import ScheduleService
from .shifts.mysql_shift_repository import MySQLShiftRepository
from .shifts.repository import ShiftRepository
from .shifts.service import ShiftService
from .summaries.mysql_summary_repository import MySQLSummaryRepository
from .summaries.repository import SummaryRepository
from .summaries.service import AttendanceSummaryService


@dataclass(frozen=True)
class Repositories:
    employees: EmployeeDirectory
    holidays: HolidayRepository
    shifts: ShiftRepository
    schedules: ScheduleRepository
    policies: PolicyRepository
    balances: BalanceRepository
    leave_requests: LeaveRequestRepository
    approval_steps: ApprovalStepRepository
    attendance: AttendanceRepository
    summaries: SummaryRepository


@dataclass(frozen=True)
class Container:
    uow: UnitOfWork
    repos: Repositories

    employee_service: EmployeeService
    holiday_service: HolidayService
    business_days: BusinessDayCalculator
    schedule_service: ScheduleService
    shift_service: ShiftService
    policy_service: PolicyService
    balance_ledger: BalanceLedger
    leave_service: LeaveRequestService
    approval_service: ApprovalWorkflowService
    attendance_service: AttendanceService
    summary_service: AttendanceSummaryService


def wire_services(
    repos: Repositories,
    uow: UnitOfWork,
    *,
    approval_levels: int = DEFAULT_APPROVAL_LEVELS,
    max_chain_depth: int = DEFAULT_MAX_CHAIN_DEPTH,
    weekend_days: Iterable[int] = DEFAULT_WEEKEND_DAYS,
    standard_workday_minutes: int = DEFAULT_WORKDAY_MINUTES,
    strict_balance_release: bool = False,
) -> Container:
    """Build every service over the given repositories (MySQL or in-memory)."""
    employee_service = EmployeeService(repos.employees, max_chain_depth=max_chain_depth)
    holiday_service = HolidayService(repos.holidays)
    business_days = BusinessDayCalculator(repos.holidays, weekend_days=weekend_days)
    schedule_service = ScheduleService(repos.schedules, repos.shifts, employee_service, business_days, uow)
    shift_service = ShiftService(repos.shifts, employee_service, uow)
    policy_service = PolicyService(repos.policies, repos.employees)
    balance_ledger = BalanceLedger(
        repos.balances, repos.policies, repos.employees, uow, strict_release=strict_balance_release
    )
    leave_service = LeaveRequestService(
        repos.leave_requests,
        repos.approval_steps,
        policy_service,
        balance_ledger,
        employee_service,
        business_days,
        uow,
        approval_levels=approval_levels,
    )
    approval_service = ApprovalWorkflowService(repos.approval_steps, repos.leave_requests, leave_service, uow)
    attendance_service = AttendanceService(
        repos.attendance,
        employee_service,
        schedule_service,
        repos.shifts,
        repos.leave_requests,
        uow,
        strategy_factory=AttendanceStrategyFactory(),
    )
    summary_service = AttendanceSummaryService(
        repos.summaries,
        repos.attendance,
        repos.leave_requests,
        repos.policies,
        employee_service,
        schedule_service,
        business_days,
        uow,
        standard_workday_minutes=standard_workday_minutes,
    )

    return Container(
        uow=uow,
        repos=repos,
        employee_service=employee_service,
        holiday_service=holiday_service,
        business_days=business_days,
        schedule_service=schedule_service,
        shift_service=shift_service,
        policy_service=policy_service,
        balance_ledger=balance_ledger,
        leave_service=leave_service,
        approval_service=approval_service,
        attendance_service=attendance_service,
        summary_service=summary_service,
    )


def build_container(*, db_config: dict, **settings) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_settings(db_config))

    repos = Repositories(
        employees=MySQLEmployeeRepository(conn),
        holidays=MySQLHolidayRepository(conn),
        shifts=MySQLShiftRepository(conn),
        schedules=MySQLScheduleRepository(conn),
        policies=MySQLPolicyRepository(conn),
        balances=MySQLBalanceRepository(conn),
        leave_requests=MySQLLeaveRequestRepository(conn),
        approval_steps=MySQLApprovalStepRepository(conn),
        attendance=MySQLAttendanceRepository(conn),
        summaries=MySQLSummaryRepository(conn),
    )
    return wire_services(repos, conn, **settings)
