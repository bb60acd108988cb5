from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from ..core.enums import LeaveStatus


@dataclass(frozen=True)
class LeaveRequest:
    """Domain entity: an employee's request for leave under one policy.

    Dates, policy and employee never change after creation.
    """

    request_id: int
    employee_id: int
    policy_id: int
    start_date: date
    end_date: date
    requested_days: Decimal
    reason: str
    status: LeaveStatus
    created_at: datetime
    cover_employee_id: Optional[int] = None
    cover_notes: Optional[str] = None
    manager_comments: Optional[str] = None
    approved_by: Optional[int] = None
    approved_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def balance_year(self) -> int:
        return self.start_date.year

    def covers(self, day: date) -> bool:
        return self.start_date <= day <= self.end_date


@dataclass(frozen=True)
class NewLeaveRequest:
    employee_id: int
    policy_id: int
    start_date: date
    end_date: date
    requested_days: Decimal
    reason: str
    created_at: datetime
    cover_employee_id: Optional[int] = None
    cover_notes: Optional[str] = None
