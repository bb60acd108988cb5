from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Optional

from ..common.datetime_utils import tenure_months
from ..core.enums import LeaveType
from ..employees.model import Employee


@dataclass(frozen=True)
class LeavePolicyData:
    """Editable fields of a leave policy (input for create/update)."""

    name: str
    leave_type: LeaveType
    annual_allowance_days: Decimal
    effective_from: date
    max_carry_forward_days: Decimal = Decimal("0")
    max_consecutive_days: int = 365
    min_advance_notice_days: int = 1
    requires_documentation: bool = False
    is_paid: bool = True
    allow_negative_balance: bool = False
    department_id: Optional[int] = None
    position_id: Optional[int] = None
    min_tenure_months: int = 0
    effective_to: Optional[date] = None
    description: Optional[str] = None


@dataclass(frozen=True)
class LeavePolicy(LeavePolicyData):
    """Domain entity: a named leave-entitlement rule set."""

    policy_id: int = 0
    is_active: bool = True

    @property
    def waives_advance_notice(self) -> bool:
        return self.leave_type == LeaveType.SICK

    def covers_range(self, start: date, end: date) -> bool:
        if start < self.effective_from:
            return False
        return self.effective_to is None or end <= self.effective_to

    def effective_in_year(self, year: int) -> bool:
        if self.effective_from > date(year, 12, 31):
            return False
        return self.effective_to is None or self.effective_to >= date(year, 1, 1)

    def eligibility_problem(self, employee: Employee, on: date) -> Optional[str]:
        """Why the employee is not eligible, or None when eligible."""
        if self.department_id is not None and self.department_id != employee.department_id:
            return "department"
        if self.position_id is not None and self.position_id != employee.position_id:
            return "position"
        if tenure_months(employee.hire_date, on) < self.min_tenure_months:
            return "tenure"
        return None
