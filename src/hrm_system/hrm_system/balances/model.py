from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal


@dataclass(frozen=True)
class LeaveBalance:
    """Per employee/policy/year ledger row."""

    balance_id: int
    employee_id: int
    policy_id: int
    year: int
    allocated_days: Decimal
    used_days: Decimal = Decimal("0")
    carried_forward_days: Decimal = Decimal("0")
    adjustment_days: Decimal = Decimal("0")

    @property
    def remaining_days(self) -> Decimal:
        return self.allocated_days + self.carried_forward_days + self.adjustment_days - self.used_days

    @property
    def entitled_days(self) -> Decimal:
        return self.allocated_days + self.carried_forward_days + self.adjustment_days


@dataclass(frozen=True)
class BalanceAdjustment:
    """Append-only audit entry for a manual balance adjustment."""

    adjustment_id: int
    balance_id: int
    delta_days: Decimal
    reason: str
    adjusted_by: int
    created_at: datetime
