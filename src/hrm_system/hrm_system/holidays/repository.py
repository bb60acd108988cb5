from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from .model import PublicHoliday


class HolidayRepository(Protocol):
    def list_range(self, *, start: date, end: date, department_id: Optional[int] = None) -> Sequence[PublicHoliday]:
        """Active holidays in [start, end] that apply to the department (or company-wide)."""

        raise NotImplementedError

    def create(
        self,
        *,
        name: str,
        holiday_date: date,
        department_id: Optional[int] = None,
        is_paid: bool = True,
    ) -> int:
        raise NotImplementedError

    def set_active(self, *, holiday_id: int, is_active: bool) -> bool:
        raise NotImplementedError
