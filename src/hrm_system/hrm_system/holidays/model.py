from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional


@dataclass(frozen=True)
class PublicHoliday:
    """A non-working day; ``department_id`` None means company-wide."""

    holiday_id: int
    name: str
    holiday_date: date
    department_id: Optional[int] = None
    is_paid: bool = True
    is_active: bool = True

    def applies_to(self, department_id: Optional[int]) -> bool:
        return self.is_active and (self.department_id is None or self.department_id == department_id)
