from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional, Protocol, Sequence

from .model import BalanceAdjustment, LeaveBalance


class BalanceRepository(Protocol):
    def get(self, *, employee_id: int, policy_id: int, year: int, for_update: bool = False) -> Optional[LeaveBalance]:
        raise NotImplementedError

    def create(
        self,
        *,
        employee_id: int,
        policy_id: int,
        year: int,
        allocated_days: Decimal,
        carried_forward_days: Decimal,
    ) -> Optional[int]:
        """Insert a new row; None when (employee, policy, year) already exists."""

        raise NotImplementedError

    def set_used(self, *, balance_id: int, used_days: Decimal) -> bool:
        raise NotImplementedError

    def add_adjustment(self, *, balance_id: int, delta_days: Decimal) -> bool:
        raise NotImplementedError

    def insert_adjustment_audit(
        self,
        *,
        balance_id: int,
        delta_days: Decimal,
        reason: str,
        adjusted_by: int,
        created_at: datetime,
    ) -> int:
        raise NotImplementedError

    def list_adjustments(self, *, balance_id: int) -> Sequence[BalanceAdjustment]:
        raise NotImplementedError

    def list_for_employee(self, *, employee_id: int, year: int) -> Sequence[LeaveBalance]:
        raise NotImplementedError
