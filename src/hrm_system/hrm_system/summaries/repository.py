from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import AttendanceSummary


class SummaryRepository(Protocol):
    def upsert(self, summary: AttendanceSummary) -> None:
        """Insert or overwrite the row keyed on (employee, year, month)."""

        raise NotImplementedError

    def get(self, *, employee_id: int, year: int, month: int) -> Optional[AttendanceSummary]:
        raise NotImplementedError

    def list_for_month(self, *, year: int, month: int) -> Sequence[AttendanceSummary]:
        raise NotImplementedError
