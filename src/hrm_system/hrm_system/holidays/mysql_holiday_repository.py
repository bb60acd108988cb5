from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_bool, db_cursor, fetchall
from .model import PublicHoliday
from .repository import HolidayRepository


class MySQLHolidayRepository(HolidayRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_range(self, *, start: date, end: date, department_id: Optional[int] = None) -> Sequence[PublicHoliday]:
        clauses = ["holiday_date BETWEEN %s AND %s", "is_active=1"]
        params: list[object] = [start, end]
        if department_id is None:
            clauses.append("department_id IS NULL")
        else:
            clauses.append("(department_id IS NULL OR department_id=%s)")
            params.append(int(department_id))

        where = " AND ".join(clauses)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT holiday_id, name, holiday_date, department_id, is_paid, is_active
                FROM public_holidays
                WHERE {where}
                ORDER BY holiday_date
                """,
                tuple(params),
            )
            return [
                PublicHoliday(
                    holiday_id=int(r["holiday_id"]),
                    name=r["name"],
                    holiday_date=r["holiday_date"],
                    department_id=r.get("department_id"),
                    is_paid=as_bool(r.get("is_paid")),
                    is_active=as_bool(r.get("is_active")),
                )
                for r in fetchall(cur)
            ]

    def create(
        self,
        *,
        name: str,
        holiday_date: date,
        department_id: Optional[int] = None,
        is_paid: bool = True,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO public_holidays(name, holiday_date, department_id, is_paid, is_active)
                VALUES(%s,%s,%s,%s,1)
                """,
                (name, holiday_date, department_id, int(bool(is_paid))),
            )
            return int(cur.lastrowid)

    def set_active(self, *, holiday_id: int, is_active: bool) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE public_holidays SET is_active=%s WHERE holiday_id=%s",
                (int(bool(is_active)), int(holiday_id)),
            )
            return cur.rowcount > 0
