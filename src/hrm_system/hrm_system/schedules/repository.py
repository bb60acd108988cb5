from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from .model import WorkSchedule


class ScheduleRepository(Protocol):
    def get_for_employee_and_date(self, *, employee_id: int, work_date: date) -> Optional[WorkSchedule]:
        raise NotImplementedError

    def upsert(self, *, employee_id: int, work_date: date, shift_id: int, note: Optional[str] = None) -> int:
        """Create or update a schedule assignment.

        Returns schedule_id.
        """

        raise NotImplementedError

    def delete(self, *, schedule_id: int) -> bool:
        raise NotImplementedError

    def list_range(self, *, start: date, end: date, employee_id: Optional[int] = None) -> Sequence[WorkSchedule]:
        raise NotImplementedError
