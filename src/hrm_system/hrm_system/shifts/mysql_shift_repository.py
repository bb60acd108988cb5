from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_bool, db_cursor, fetchall, fetchone, lock_clause, normalize_mysql_time
from .model import ShiftAssignment, ShiftData, WorkShift
from .repository import ShiftRepository

_COLUMNS = """
    shift_id, name, start_time, end_time, break_start_time, break_end_time,
    flexible_minutes, overtime_grace_minutes, allow_overtime, max_overtime_minutes,
    applicable_days, is_active
"""

_ASSIGNMENT_COLUMNS = "assignment_id, employee_id, shift_id, effective_from, effective_to, is_default"


def _to_shift(r: dict) -> WorkShift:
    max_ot = r.get("max_overtime_minutes")
    return WorkShift(
        shift_id=int(r["shift_id"]),
        name=r["name"],
        start_time=normalize_mysql_time(r["start_time"]),
        end_time=normalize_mysql_time(r["end_time"]),
        break_start_time=normalize_mysql_time(r.get("break_start_time")),
        break_end_time=normalize_mysql_time(r.get("break_end_time")),
        flexible_minutes=int(r.get("flexible_minutes") or 0),
        overtime_grace_minutes=int(r.get("overtime_grace_minutes") or 0),
        allow_overtime=as_bool(r.get("allow_overtime", 1)),
        max_overtime_minutes=int(max_ot) if max_ot is not None else None,
        applicable_days=int(r.get("applicable_days") or 0),
        is_active=as_bool(r.get("is_active", 1)),
    )


def _to_assignment(r: dict) -> ShiftAssignment:
    return ShiftAssignment(
        assignment_id=int(r["assignment_id"]),
        employee_id=int(r["employee_id"]),
        shift_id=int(r["shift_id"]),
        effective_from=r["effective_from"],
        effective_to=r.get("effective_to"),
        is_default=as_bool(r.get("is_default", 1)),
    )


def _shift_params(data: ShiftData) -> tuple:
    return (
        data.name.strip(),
        data.start_time,
        data.end_time,
        data.break_start_time,
        data.break_end_time,
        int(data.flexible_minutes),
        int(data.overtime_grace_minutes),
        int(bool(data.allow_overtime)),
        data.max_overtime_minutes,
        int(data.applicable_days),
    )


class MySQLShiftRepository(ShiftRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_all(self) -> Sequence[WorkShift]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM work_shifts ORDER BY shift_id")
            return [_to_shift(r) for r in fetchall(cur)]

    def get_by_id(self, shift_id: int) -> Optional[WorkShift]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM work_shifts WHERE shift_id=%s", (int(shift_id),))
            r = fetchone(cur)
            return _to_shift(r) if r else None

    def create_shift(self, data: ShiftData) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO work_shifts(
                    name, start_time, end_time, break_start_time, break_end_time,
                    flexible_minutes, overtime_grace_minutes, allow_overtime, max_overtime_minutes,
                    applicable_days, is_active
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,1)
                """,
                _shift_params(data),
            )
            return int(cur.lastrowid)

    def update_shift(self, shift_id: int, data: ShiftData) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE work_shifts
                SET name=%s, start_time=%s, end_time=%s, break_start_time=%s, break_end_time=%s,
                    flexible_minutes=%s, overtime_grace_minutes=%s, allow_overtime=%s,
                    max_overtime_minutes=%s, applicable_days=%s
                WHERE shift_id=%s
                """,
                _shift_params(data) + (int(shift_id),),
            )
            return cur.rowcount > 0

    def set_active(self, shift_id: int, *, is_active: bool) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE work_shifts SET is_active=%s WHERE shift_id=%s", (int(bool(is_active)), int(shift_id))
            )
            return cur.rowcount > 0

    def get_default_assignment(self, *, employee_id: int, on_date: date) -> Optional[ShiftAssignment]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_ASSIGNMENT_COLUMNS}
                FROM shift_assignments
                WHERE employee_id=%s AND is_default=1
                  AND effective_from <= %s AND (effective_to IS NULL OR effective_to >= %s)
                ORDER BY effective_from DESC
                LIMIT 1
                """,
                (int(employee_id), on_date, on_date),
            )
            r = fetchone(cur)
            return _to_assignment(r) if r else None

    def get_assignment(self, assignment_id: int, *, for_update: bool = False) -> Optional[ShiftAssignment]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_ASSIGNMENT_COLUMNS} FROM shift_assignments WHERE assignment_id=%s{lock_clause(for_update)}",
                (int(assignment_id),),
            )
            r = fetchone(cur)
            return _to_assignment(r) if r else None

    def list_assignments(self, *, employee_id: Optional[int] = None) -> Sequence[ShiftAssignment]:
        where, params = "", ()
        if employee_id is not None:
            where, params = "WHERE employee_id=%s", (int(employee_id),)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_ASSIGNMENT_COLUMNS} FROM shift_assignments {where} ORDER BY employee_id, effective_from",
                params,
            )
            return [_to_assignment(r) for r in fetchall(cur)]

    def create_assignment(
        self, *, employee_id: int, shift_id: int, effective_from: date, effective_to: Optional[date]
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO shift_assignments(employee_id, shift_id, effective_from, effective_to, is_default)
                VALUES(%s,%s,%s,%s,1)
                """,
                (int(employee_id), int(shift_id), effective_from, effective_to),
            )
            return int(cur.lastrowid)

    def update_assignment(
        self, assignment_id: int, *, shift_id: int, effective_from: date, effective_to: Optional[date]
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE shift_assignments
                SET shift_id=%s, effective_from=%s, effective_to=%s
                WHERE assignment_id=%s
                """,
                (int(shift_id), effective_from, effective_to, int(assignment_id)),
            )
            return cur.rowcount > 0

    def delete_assignment(self, assignment_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM shift_assignments WHERE assignment_id=%s", (int(assignment_id),))
            return cur.rowcount > 0
