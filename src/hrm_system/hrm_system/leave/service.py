from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Optional, Sequence

from ..approvals.repository import ApprovalStepRepository
from ..balances.model import LeaveBalance
from ..balances.service import BalanceLedger
from ..common.datetime_utils import iter_dates
from ..common.validators import require_non_empty
from ..core.constants import DEFAULT_APPROVAL_LEVELS, DEFAULT_LIST_LIMIT
from ..core.enums import LeaveStatus
from ..core.exceptions import (
    AdvanceNoticeViolation,
    AuthorizationError,
    ConsecutiveLimitExceeded,
    EmptyApprovalChain,
    InsufficientBalance,
    NotFoundError,
    OverlappingRequest,
    RequestNotPending,
    ValidationError,
)
from ..database.unit_of_work import UnitOfWork
from ..employees.service import EmployeeService
from ..holidays.service import BusinessDayCalculator
from ..policies.service import PolicyService
from .model import LeaveRequest, NewLeaveRequest
from .repository import LeaveRequestRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LeaveHistory:
    employee_id: int
    year: int
    balances: tuple[LeaveBalance, ...]
    requests: tuple[LeaveRequest, ...]

    @property
    def total_days_taken(self) -> Decimal:
        return sum((r.requested_days for r in self.requests if r.status == LeaveStatus.APPROVED), Decimal("0"))


@dataclass(frozen=True)
class LeaveCalendarDay:
    day: date
    is_weekend: bool
    is_holiday: bool
    requests: tuple[LeaveRequest, ...] = ()


class LeaveRequestService:
    """Leave request engine.

    ``PENDING -> APPROVED | REJECTED | CANCELLED``; all three are terminal.
    Submission only checks the balance; days are reserved when the last
    approver signs off (see ``finalize_approval``).
    """

    def __init__(
        self,
        requests: LeaveRequestRepository,
        steps: ApprovalStepRepository,
        policies: PolicyService,
        ledger: BalanceLedger,
        employees: EmployeeService,
        calendar: BusinessDayCalculator,
        uow: UnitOfWork,
        *,
        approval_levels: int = DEFAULT_APPROVAL_LEVELS,
    ):
        self._requests = requests
        self._steps = steps
        self._policies = policies
        self._ledger = ledger
        self._employees = employees
        self._calendar = calendar
        self._uow = uow
        self._approval_levels = int(approval_levels)

    def _approval_chain(self, employee_id: int, approver_ids: Optional[Sequence[int]]) -> list[int]:
        if approver_ids is None:
            chain = self._employees.management_chain(employee_id, levels=self._approval_levels)
        else:
            chain = [int(a) for a in approver_ids]

        if not chain:
            raise EmptyApprovalChain("No approver available for this request", employee_id=employee_id)
        if len(set(chain)) != len(chain):
            raise ValidationError("Approval chain contains duplicate approvers", approvers=chain)
        if employee_id in chain:
            raise ValidationError("Employees cannot approve their own leave", approvers=chain)
        for approver_id in chain:
            self._employees.get_employee(approver_id)
        return chain

    def submit(
        self,
        *,
        employee_id: int,
        policy_id: int,
        start_date: date,
        end_date: date,
        reason: str,
        cover_employee_id: Optional[int] = None,
        cover_notes: Optional[str] = None,
        approver_ids: Optional[Sequence[int]] = None,
        now: Optional[datetime] = None,
    ) -> LeaveRequest:
        now = now or datetime.now()
        today = now.date()
        employee_id = int(employee_id)

        if end_date < start_date:
            raise ValidationError("End date must be on or after start date", start=start_date.isoformat(), end=end_date.isoformat())
        reason = require_non_empty(reason, "Reason")
        employee = self._employees.get_employee(employee_id)
        if cover_employee_id is not None:
            if int(cover_employee_id) == employee_id:
                raise ValidationError("Cover employee must be someone else", cover_employee_id=cover_employee_id)
            self._employees.get_employee(cover_employee_id)

        policy = self._policies.get_policy(policy_id)
        self._policies.ensure_applicable(policy, employee, start=start_date, end=end_date, today=today)

        days = Decimal(self._calendar.count(start_date, end_date, employee.department_id))
        if days == 0:
            raise ValidationError(
                "Requested range contains no business days",
                start=start_date.isoformat(),
                end=end_date.isoformat(),
            )

        notice = (start_date - today).days
        if not policy.waives_advance_notice and notice < policy.min_advance_notice_days:
            raise AdvanceNoticeViolation(
                f"Leave must be requested at least {policy.min_advance_notice_days} day(s) in advance",
                policy_id=policy.policy_id,
                required_days=policy.min_advance_notice_days,
                notice_days=notice,
            )

        if days > policy.max_consecutive_days:
            raise ConsecutiveLimitExceeded(
                f"At most {policy.max_consecutive_days} consecutive day(s) allowed",
                policy_id=policy.policy_id,
                max_consecutive_days=policy.max_consecutive_days,
                requested=str(days),
            )

        year = start_date.year
        remaining = self._ledger.get_remaining(employee_id, policy.policy_id, year)
        if remaining < days and not policy.allow_negative_balance:
            raise InsufficientBalance(
                "Insufficient leave balance",
                employee_id=employee_id,
                policy_id=policy.policy_id,
                year=year,
                remaining=str(remaining),
                requested=str(days),
            )

        with self._uow.transaction():
            self._employees.lock_employee(employee_id)
            clashes = self._requests.find_overlapping(employee_id=employee_id, start=start_date, end=end_date)
            if clashes:
                raise OverlappingRequest(
                    "Another leave request already covers these dates",
                    employee_id=employee_id,
                    conflicting_request_ids=[r.request_id for r in clashes],
                )

            chain = self._approval_chain(employee_id, approver_ids)
            request_id = self._requests.create(
                NewLeaveRequest(
                    employee_id=employee_id,
                    policy_id=policy.policy_id,
                    start_date=start_date,
                    end_date=end_date,
                    requested_days=days,
                    reason=reason,
                    created_at=now,
                    cover_employee_id=int(cover_employee_id) if cover_employee_id is not None else None,
                    cover_notes=(cover_notes or "").strip() or None,
                )
            )
            self._steps.create_steps(request_id=request_id, approver_ids=chain)

        logger.info(
            "Leave request %s submitted (employee=%s policy=%s %s..%s days=%s approvers=%s)",
            request_id, employee_id, policy.policy_id, start_date, end_date, days, chain,
        )
        return self.get_request(request_id)

    def cancel(self, *, request_id: int, employee_id: int, now: Optional[datetime] = None) -> LeaveRequest:
        now = now or datetime.now()
        with self._uow.transaction():
            req = self._requests.get_by_id(int(request_id), for_update=True)
            if not req:
                raise NotFoundError("Leave request not found", request_id=int(request_id))
            if req.employee_id != int(employee_id):
                raise AuthorizationError("Only the requester can cancel a leave request", request_id=req.request_id)
            if req.status != LeaveStatus.PENDING:
                raise RequestNotPending(
                    "Only pending requests can be cancelled", request_id=req.request_id, status=req.status.value
                )
            self._requests.update_status(request_id=req.request_id, status=LeaveStatus.CANCELLED, updated_at=now)

        logger.info("Leave request %s cancelled by employee %s", request_id, employee_id)
        return self.get_request(request_id)

    def finalize_approval(
        self, req: LeaveRequest, *, approver_id: int, comments: Optional[str], now: datetime
    ) -> LeaveRequest:
        """Reserve the days for a fully approved request.

        Must run inside the caller's transaction. When the balance no longer
        covers the request it ends up REJECTED instead of APPROVED.
        """
        try:
            self._ledger.reserve(req.employee_id, req.policy_id, req.balance_year, req.requested_days)
        except InsufficientBalance as exc:
            note = (
                "Automatically rejected: insufficient balance at final approval "
                f"(remaining {exc.context.get('remaining')}, requested {exc.context.get('requested')})"
            )
            self._requests.update_status(
                request_id=req.request_id,
                status=LeaveStatus.REJECTED,
                updated_at=now,
                manager_comments=note,
                approved_by=int(approver_id),
                approved_at=now,
            )
            logger.warning("Leave request %s rejected at finalization: %s", req.request_id, note)
            return self.get_request(req.request_id)

        self._requests.update_status(
            request_id=req.request_id,
            status=LeaveStatus.APPROVED,
            updated_at=now,
            manager_comments=comments,
            approved_by=int(approver_id),
            approved_at=now,
        )
        logger.info("Leave request %s approved (%s days reserved)", req.request_id, req.requested_days)
        return self.get_request(req.request_id)

    def finalize_rejection(
        self, req: LeaveRequest, *, approver_id: int, comments: Optional[str], now: datetime
    ) -> LeaveRequest:
        self._requests.update_status(
            request_id=req.request_id,
            status=LeaveStatus.REJECTED,
            updated_at=now,
            manager_comments=comments,
            approved_by=int(approver_id),
            approved_at=now,
        )
        logger.info("Leave request %s rejected by %s", req.request_id, approver_id)
        return self.get_request(req.request_id)

    def get_request(self, request_id: int) -> LeaveRequest:
        req = self._requests.get_by_id(int(request_id))
        if not req:
            raise NotFoundError("Leave request not found", request_id=int(request_id))
        return req

    def list_requests(
        self,
        *,
        employee_id: Optional[int] = None,
        status: Optional[LeaveStatus] = None,
        year: Optional[int] = None,
        limit: int = DEFAULT_LIST_LIMIT,
    ) -> list[LeaveRequest]:
        return list(self._requests.list_requests(employee_id=employee_id, status=status, year=year, limit=limit))

    def pending_for_approver(self, approver_id: int) -> list[LeaveRequest]:
        return [self.get_request(rid) for rid in self._steps.list_request_ids_awaiting(int(approver_id))]

    def leave_history(self, employee_id: int, year: int) -> LeaveHistory:
        self._employees.get_employee(employee_id)
        return LeaveHistory(
            employee_id=int(employee_id),
            year=int(year),
            balances=tuple(self._ledger.list_balances(employee_id, year)),
            requests=tuple(self._requests.list_requests(employee_id=int(employee_id), year=int(year))),
        )

    def leave_calendar(self, *, start: date, end: date, department_id: Optional[int] = None) -> list[LeaveCalendarDay]:
        if end < start:
            raise ValidationError("End date must be on or after start date")
        approved = self._requests.list_approved_in_range(start=start, end=end, department_id=department_id)
        holidays = self._calendar.holiday_dates(start, end, department_id)
        return [
            LeaveCalendarDay(
                day=day,
                is_weekend=self._calendar.is_weekend(day),
                is_holiday=day in holidays,
                requests=tuple(r for r in approved if r.covers(day)),
            )
            for day in iter_dates(start, end)
        ]
