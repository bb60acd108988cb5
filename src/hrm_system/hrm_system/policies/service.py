from __future__ import annotations

import logging
from datetime import date

from ..common.validators import require_non_empty
from ..core.enums import Role
from ..core.exceptions import AuthorizationError, NotFoundError, PolicyNotApplicable, ValidationError
from ..employees.model import Employee
from ..employees.repository import EmployeeDirectory
from .model import LeavePolicy, LeavePolicyData
from .repository import PolicyRepository

logger = logging.getLogger(__name__)


class PolicyService:
    """Policy catalog: HR maintenance and eligibility checks.

    Policies are never hard-deleted; retiring one deactivates it so existing
    balances keep their reference.
    """

    def __init__(self, policies: PolicyRepository, employees: EmployeeDirectory):
        self._policies = policies
        self._employees = employees

    @staticmethod
    def _validate(data: LeavePolicyData) -> LeavePolicyData:
        require_non_empty(data.name, "Policy name")
        if data.annual_allowance_days < 0:
            raise ValidationError("Annual allowance cannot be negative", field="annual_allowance_days")
        if data.max_carry_forward_days < 0:
            raise ValidationError("Carry-forward cap cannot be negative", field="max_carry_forward_days")
        if data.max_consecutive_days < 1:
            raise ValidationError("Max consecutive days must be at least 1", field="max_consecutive_days")
        if data.min_advance_notice_days < 0:
            raise ValidationError("Advance notice cannot be negative", field="min_advance_notice_days")
        if data.min_tenure_months < 0:
            raise ValidationError("Minimum tenure cannot be negative", field="min_tenure_months")
        if data.effective_to is not None and data.effective_to < data.effective_from:
            raise ValidationError("Effective end must be on or after effective start", field="effective_to")
        return data

    def create_policy(self, *, current_role: Role, data: LeavePolicyData) -> int:
        if current_role != Role.ADMIN:
            raise AuthorizationError("Only HR admins can manage leave policies")
        policy_id = self._policies.create(self._validate(data))
        logger.info("Leave policy %s created (%s, %s days)", policy_id, data.leave_type.value, data.annual_allowance_days)
        return policy_id

    def update_policy(self, *, current_role: Role, policy_id: int, data: LeavePolicyData) -> LeavePolicy:
        if current_role != Role.ADMIN:
            raise AuthorizationError("Only HR admins can manage leave policies")
        self.get_policy(policy_id)
        self._policies.update(int(policy_id), self._validate(data))
        logger.info("Leave policy %s updated", policy_id)
        return self.get_policy(policy_id)

    def deactivate_policy(self, *, current_role: Role, policy_id: int) -> None:
        if current_role != Role.ADMIN:
            raise AuthorizationError("Only HR admins can manage leave policies")
        self.get_policy(policy_id)
        self._policies.set_active(int(policy_id), is_active=False)
        logger.info("Leave policy %s deactivated", policy_id)

    def get_policy(self, policy_id: int) -> LeavePolicy:
        policy = self._policies.get_by_id(int(policy_id))
        if not policy:
            raise NotFoundError("Leave policy not found", policy_id=int(policy_id))
        return policy

    def list_active_policies(self) -> list[LeavePolicy]:
        return list(self._policies.list_active())

    def applicable_policies(self, employee_id: int, on_date: date) -> list[LeavePolicy]:
        employee = self._employees.get_by_id(int(employee_id))
        if not employee:
            raise NotFoundError("Employee not found", employee_id=int(employee_id))
        return [
            p
            for p in self._policies.list_active()
            if p.covers_range(on_date, on_date) and p.eligibility_problem(employee, on_date) is None
        ]

    @staticmethod
    def ensure_applicable(policy: LeavePolicy, employee: Employee, *, start: date, end: date, today: date) -> None:
        """Raise PolicyNotApplicable unless the policy can be used for [start, end]."""
        context = {"policy_id": policy.policy_id, "employee_id": employee.employee_id}
        if not policy.is_active:
            raise PolicyNotApplicable("Leave policy is not active", reason="inactive", **context)
        if not policy.covers_range(start, end):
            raise PolicyNotApplicable(
                "Requested dates are outside the policy's effective window",
                reason="effective_window",
                effective_from=policy.effective_from.isoformat(),
                effective_to=policy.effective_to.isoformat() if policy.effective_to else None,
                **context,
            )
        problem = policy.eligibility_problem(employee, today)
        if problem:
            raise PolicyNotApplicable(f"Employee is not eligible for this policy ({problem})", reason=problem, **context)
