from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional


@dataclass(frozen=True)
class Employee:
    """Domain entity: Employee as seen by the leave/attendance core.

    Note: Plain data object, no DB access. ``full_name`` is derived.
    """

    employee_id: int
    first_name: str
    last_name: str
    department_id: Optional[int]
    position_id: Optional[int]
    hire_date: date
    direct_manager_id: Optional[int] = None
    is_active: bool = True

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()
