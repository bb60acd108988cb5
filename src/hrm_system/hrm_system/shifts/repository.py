from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from .model import ShiftAssignment, ShiftData, WorkShift


class ShiftRepository(Protocol):
    def list_all(self) -> Sequence[WorkShift]:
        raise NotImplementedError

    def get_by_id(self, shift_id: int) -> Optional[WorkShift]:
        raise NotImplementedError

    def create_shift(self, data: ShiftData) -> int:
        raise NotImplementedError

    def update_shift(self, shift_id: int, data: ShiftData) -> bool:
        raise NotImplementedError

    def set_active(self, shift_id: int, *, is_active: bool) -> bool:
        raise NotImplementedError

    def get_default_assignment(self, *, employee_id: int, on_date: date) -> Optional[ShiftAssignment]:
        raise NotImplementedError

    def get_assignment(self, assignment_id: int, *, for_update: bool = False) -> Optional[ShiftAssignment]:
        raise NotImplementedError

    def list_assignments(self, *, employee_id: Optional[int] = None) -> Sequence[ShiftAssignment]:
        raise NotImplementedError

    def create_assignment(
        self, *, employee_id: int, shift_id: int, effective_from: date, effective_to: Optional[date]
    ) -> int:
        raise NotImplementedError

    def update_assignment(
        self, assignment_id: int, *, shift_id: int, effective_from: date, effective_to: Optional[date]
    ) -> bool:
        raise NotImplementedError

    def delete_assignment(self, assignment_id: int) -> bool:
        raise NotImplementedError
