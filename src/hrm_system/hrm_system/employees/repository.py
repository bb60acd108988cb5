from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Employee


class EmployeeDirectory(Protocol):
    """Employee lookup; the directory itself is maintained elsewhere.

    Note (DIP): services depend on this interface, not on a concrete DB.
    """

    def get_by_id(self, employee_id: int, *, for_update: bool = False) -> Optional[Employee]:
        raise NotImplementedError

    def list_active(self, *, department_id: Optional[int] = None) -> Sequence[Employee]:
        raise NotImplementedError
