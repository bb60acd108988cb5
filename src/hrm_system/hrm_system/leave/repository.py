from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import LeaveStatus
from .model import LeaveRequest, NewLeaveRequest


class LeaveRequestRepository(Protocol):
    def create(self, data: NewLeaveRequest) -> int:
        raise NotImplementedError

    def get_by_id(self, request_id: int, *, for_update: bool = False) -> Optional[LeaveRequest]:
        raise NotImplementedError

    def update_status(
        self,
        *,
        request_id: int,
        status: LeaveStatus,
        updated_at: datetime,
        manager_comments: Optional[str] = None,
        approved_by: Optional[int] = None,
        approved_at: Optional[datetime] = None,
    ) -> bool:
        raise NotImplementedError

    def find_overlapping(self, *, employee_id: int, start: date, end: date) -> Sequence[LeaveRequest]:
        """Pending or approved requests of the employee intersecting [start, end]."""

        raise NotImplementedError

    def list_requests(
        self,
        *,
        employee_id: Optional[int] = None,
        status: Optional[LeaveStatus] = None,
        year: Optional[int] = None,
        limit: int = 200,
    ) -> Sequence[LeaveRequest]:
        raise NotImplementedError

    def list_approved_in_range(
        self,
        *,
        start: date,
        end: date,
        employee_id: Optional[int] = None,
        department_id: Optional[int] = None,
    ) -> Sequence[LeaveRequest]:
        raise NotImplementedError
