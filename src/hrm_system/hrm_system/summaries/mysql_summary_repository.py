from __future__ import annotations

from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_decimal, db_cursor, fetchall, fetchone
from .model import AttendanceSummary
from .repository import SummaryRepository

_FIELDS = (
    "total_working_days",
    "actual_working_days",
    "absent_days",
    "late_days",
    "early_leave_days",
    "total_working_minutes",
    "standard_working_minutes",
    "overtime_minutes",
    "late_minutes",
    "early_leave_minutes",
    "vacation_days",
    "sick_leave_days",
    "personal_leave_days",
    "other_leave_days",
)
_DECIMAL_FIELDS = {"vacation_days", "sick_leave_days", "personal_leave_days", "other_leave_days"}


def _to_summary(r: dict) -> AttendanceSummary:
    values = {
        f: as_decimal(r.get(f)) if f in _DECIMAL_FIELDS else int(r.get(f) or 0)
        for f in _FIELDS
    }
    return AttendanceSummary(employee_id=int(r["employee_id"]), year=int(r["year"]), month=int(r["month"]), **values)


class MySQLSummaryRepository(SummaryRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def upsert(self, summary: AttendanceSummary) -> None:
        columns = ", ".join(("employee_id", "year", "month") + _FIELDS)
        placeholders = ",".join(["%s"] * (3 + len(_FIELDS)))
        updates = ", ".join(f"{f}=VALUES({f})" for f in _FIELDS)
        params = (summary.employee_id, summary.year, summary.month) + tuple(getattr(summary, f) for f in _FIELDS)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                INSERT INTO attendance_summaries({columns})
                VALUES({placeholders})
                ON DUPLICATE KEY UPDATE {updates}
                """,
                params,
            )

    def get(self, *, employee_id: int, year: int, month: int) -> Optional[AttendanceSummary]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT employee_id, year, month, {", ".join(_FIELDS)}
                FROM attendance_summaries
                WHERE employee_id=%s AND year=%s AND month=%s
                """,
                (int(employee_id), int(year), int(month)),
            )
            r = fetchone(cur)
            return _to_summary(r) if r else None

    def list_for_month(self, *, year: int, month: int) -> Sequence[AttendanceSummary]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT employee_id, year, month, {", ".join(_FIELDS)}
                FROM attendance_summaries
                WHERE year=%s AND month=%s
                ORDER BY employee_id
                """,
                (int(year), int(month)),
            )
            return [_to_summary(r) for r in fetchall(cur)]
