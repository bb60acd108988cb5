from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import WorkSchedule
from .repository import ScheduleRepository


def _to_schedule(r: dict) -> WorkSchedule:
    return WorkSchedule(
        schedule_id=int(r["schedule_id"]),
        employee_id=int(r["employee_id"]),
        work_date=r["work_date"],
        shift_id=int(r["shift_id"]),
        note=r.get("note"),
    )


class MySQLScheduleRepository(ScheduleRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_for_employee_and_date(self, *, employee_id: int, work_date: date) -> Optional[WorkSchedule]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT schedule_id, employee_id, work_date, shift_id, note
                FROM work_schedules
                WHERE employee_id=%s AND work_date=%s
                """,
                (int(employee_id), work_date),
            )
            r = fetchone(cur)
            return _to_schedule(r) if r else None

    def upsert(self, *, employee_id: int, work_date: date, shift_id: int, note: Optional[str] = None) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO work_schedules(employee_id, work_date, shift_id, note)
                VALUES(%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE shift_id=VALUES(shift_id), note=VALUES(note)
                """,
                (int(employee_id), work_date, int(shift_id), note),
            )

            # If it was an update, lastrowid can be 0; fetch schedule_id.
            if cur.lastrowid:
                return int(cur.lastrowid)

            cur.execute(
                "SELECT schedule_id FROM work_schedules WHERE employee_id=%s AND work_date=%s",
                (int(employee_id), work_date),
            )
            r = fetchone(cur)
            return int(r["schedule_id"]) if r else 0

    def delete(self, *, schedule_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM work_schedules WHERE schedule_id=%s", (int(schedule_id),))
            return cur.rowcount > 0

    def list_range(self, *, start: date, end: date, employee_id: Optional[int] = None) -> Sequence[WorkSchedule]:
        clauses = ["work_date BETWEEN %s AND %s"]
        params: list[object] = [start, end]
        if employee_id is not None:
            clauses.append("employee_id=%s")
            params.append(int(employee_id))

        where = " AND ".join(clauses)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT schedule_id, employee_id, work_date, shift_id, note
                FROM work_schedules
                WHERE {where}
                ORDER BY work_date ASC, employee_id ASC
                """,
                tuple(params),
            )
            return [_to_schedule(r) for r in fetchall(cur)]
