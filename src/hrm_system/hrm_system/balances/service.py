from __future__ import annotations

import logging
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from ..common.validators import require_non_empty, to_decimal
from ..core.enums import Role
from ..core.exceptions import (
    AuthorizationError,
    BalanceInconsistency,
    InsufficientBalance,
    NotFoundError,
    ValidationError,
)
from ..database.unit_of_work import UnitOfWork
from ..employees.repository import EmployeeDirectory
from ..policies.model import LeavePolicy
from ..policies.repository import PolicyRepository
from .model import BalanceAdjustment, LeaveBalance
from .repository import BalanceRepository

logger = logging.getLogger(__name__)
alerts = logging.getLogger("hrm_system.alerts")


class BalanceLedger:
    """Per employee/policy/year leave entitlement.

    ``remaining = allocated + carried_forward + adjustment - used``. Requests
    never push ``remaining`` below zero; only admin adjustments may.
    """

    def __init__(
        self,
        balances: BalanceRepository,
        policies: PolicyRepository,
        employees: EmployeeDirectory,
        uow: UnitOfWork,
        *,
        strict_release: bool = False,
    ):
        self._balances = balances
        self._policies = policies
        self._employees = employees
        self._uow = uow
        self._strict_release = bool(strict_release)

    def _policy(self, policy_id: int) -> LeavePolicy:
        policy = self._policies.get_by_id(int(policy_id))
        if not policy:
            raise NotFoundError("Leave policy not found", policy_id=int(policy_id))
        return policy

    def _locked(self, employee_id: int, policy_id: int, year: int) -> LeaveBalance:
        balance = self._balances.get(employee_id=employee_id, policy_id=policy_id, year=year, for_update=True)
        if not balance:
            raise NotFoundError(
                "No leave balance allocated",
                employee_id=int(employee_id),
                policy_id=int(policy_id),
                year=int(year),
            )
        return balance

    @staticmethod
    def _positive_days(days) -> Decimal:
        days = to_decimal(days, "days")
        if days <= 0:
            raise ValidationError("Days must be greater than zero", field="days", days=str(days))
        return days

    def get_balance(self, employee_id: int, policy_id: int, year: int) -> LeaveBalance:
        balance = self._balances.get(employee_id=int(employee_id), policy_id=int(policy_id), year=int(year))
        if not balance:
            raise NotFoundError(
                "No leave balance allocated",
                employee_id=int(employee_id),
                policy_id=int(policy_id),
                year=int(year),
            )
        return balance

    def get_remaining(self, employee_id: int, policy_id: int, year: int) -> Decimal:
        return self.get_balance(employee_id, policy_id, year).remaining_days

    def list_balances(self, employee_id: int, year: int) -> list[LeaveBalance]:
        return list(self._balances.list_for_employee(employee_id=int(employee_id), year=int(year)))

    def list_adjustments(self, employee_id: int, policy_id: int, year: int) -> list[BalanceAdjustment]:
        balance = self.get_balance(employee_id, policy_id, year)
        return list(self._balances.list_adjustments(balance_id=balance.balance_id))

    def reserve(self, employee_id: int, policy_id: int, year: int, days) -> LeaveBalance:
        days = self._positive_days(days)
        with self._uow.transaction():
            balance = self._locked(int(employee_id), int(policy_id), int(year))
            policy = self._policy(policy_id)
            if balance.remaining_days - days < 0 and not policy.allow_negative_balance:
                raise InsufficientBalance(
                    "Insufficient leave balance",
                    employee_id=balance.employee_id,
                    policy_id=balance.policy_id,
                    year=balance.year,
                    remaining=str(balance.remaining_days),
                    requested=str(days),
                )
            used = balance.used_days + days
            self._balances.set_used(balance_id=balance.balance_id, used_days=used)

        logger.info(
            "Reserved %s days (employee=%s policy=%s year=%s used=%s)",
            days, employee_id, policy_id, year, used,
        )
        return self.get_balance(employee_id, policy_id, year)

    def release(self, employee_id: int, policy_id: int, year: int, days) -> LeaveBalance:
        days = self._positive_days(days)
        with self._uow.transaction():
            balance = self._locked(int(employee_id), int(policy_id), int(year))
            used = balance.used_days - days
            if used < 0:
                alerts.error(
                    "Balance release below zero (balance=%s employee=%s policy=%s year=%s used=%s release=%s)",
                    balance.balance_id, balance.employee_id, balance.policy_id, balance.year, balance.used_days, days,
                )
                if self._strict_release:
                    raise BalanceInconsistency(
                        "Release would drive used days below zero",
                        balance_id=balance.balance_id,
                        used=str(balance.used_days),
                        release=str(days),
                    )
                used = Decimal("0")
            self._balances.set_used(balance_id=balance.balance_id, used_days=used)

        logger.info(
            "Released %s days (employee=%s policy=%s year=%s used=%s)",
            days, employee_id, policy_id, year, used,
        )
        return self.get_balance(employee_id, policy_id, year)

    def adjust(
        self,
        *,
        current_role: Role,
        adjusted_by: int,
        employee_id: int,
        policy_id: int,
        year: int,
        delta_days,
        reason: str,
        now: Optional[datetime] = None,
    ) -> LeaveBalance:
        """Admin override. May leave ``remaining`` negative on purpose."""
        if current_role != Role.ADMIN:
            raise AuthorizationError("Only HR admins can adjust leave balances")
        reason = require_non_empty(reason, "Reason")
        delta = to_decimal(delta_days, "delta_days")
        if delta == 0:
            raise ValidationError("Adjustment must not be zero", field="delta_days")
        now = now or datetime.now()

        with self._uow.transaction():
            balance = self._locked(int(employee_id), int(policy_id), int(year))
            self._balances.add_adjustment(balance_id=balance.balance_id, delta_days=delta)
            self._balances.insert_adjustment_audit(
                balance_id=balance.balance_id,
                delta_days=delta,
                reason=reason,
                adjusted_by=int(adjusted_by),
                created_at=now,
            )

        logger.info(
            "Adjusted balance %s by %s days (by=%s reason=%r)", balance.balance_id, delta, adjusted_by, reason
        )
        return self.get_balance(employee_id, policy_id, year)

    def allocate(self, employee_id: int, policy_id: int, year: int) -> LeaveBalance:
        """First allocation for a year; returns the existing row when already allocated."""
        with self._uow.transaction():
            existing = self._balances.get(employee_id=int(employee_id), policy_id=int(policy_id), year=int(year))
            if existing:
                return existing
            if not self._employees.get_by_id(int(employee_id)):
                raise NotFoundError("Employee not found", employee_id=int(employee_id))
            policy = self._policy(policy_id)
            self._balances.create(
                employee_id=int(employee_id),
                policy_id=policy.policy_id,
                year=int(year),
                allocated_days=policy.annual_allowance_days,
                carried_forward_days=Decimal("0"),
            )
        logger.info("Allocated %s days (employee=%s policy=%s year=%s)", policy.annual_allowance_days, employee_id, policy_id, year)
        return self.get_balance(employee_id, policy_id, year)

    def rollover(self, employee_id: int, policy_id: int, from_year: int, to_year: int) -> LeaveBalance:
        """Create the ``to_year`` row carrying forward up to the policy cap.

        Calling it again for the same ``to_year`` returns the existing row.
        """
        if int(to_year) <= int(from_year):
            raise ValidationError("Target year must be after source year", from_year=from_year, to_year=to_year)

        with self._uow.transaction():
            existing = self._balances.get(employee_id=int(employee_id), policy_id=int(policy_id), year=int(to_year))
            if existing:
                return existing

            policy = self._policy(policy_id)
            previous = self._balances.get(employee_id=int(employee_id), policy_id=int(policy_id), year=int(from_year))
            carry = Decimal("0")
            if previous:
                carry = min(max(previous.remaining_days, Decimal("0")), policy.max_carry_forward_days)

            self._balances.create(
                employee_id=int(employee_id),
                policy_id=policy.policy_id,
                year=int(to_year),
                allocated_days=policy.annual_allowance_days,
                carried_forward_days=carry,
            )

        logger.info(
            "Rolled over balance (employee=%s policy=%s %s->%s carried=%s)",
            employee_id, policy_id, from_year, to_year, carry,
        )
        return self.get_balance(employee_id, policy_id, to_year)

    def initialize_year(self, year: int) -> int:
        """Roll every eligible employee/policy pair into ``year``; returns rows created."""
        year = int(year)
        jan_first = date(year, 1, 1)
        policies = [p for p in self._policies.list_active() if p.effective_in_year(year)]

        created = 0
        for employee in self._employees.list_active():
            for policy in policies:
                if policy.eligibility_problem(employee, jan_first) is not None:
                    continue
                if self._balances.get(employee_id=employee.employee_id, policy_id=policy.policy_id, year=year):
                    continue
                self.rollover(employee.employee_id, policy.policy_id, year - 1, year)
                created += 1

        logger.info("Initialized %s leave balances for %s", created, year)
        return created
