from __future__ import annotations

from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_bool, db_cursor, fetchall, fetchone, lock_clause
from .model import Employee
from .repository import EmployeeDirectory

_COLUMNS = """
    employee_id, first_name, last_name, department_id, position_id,
    hire_date, direct_manager_id, is_active
"""


def _to_employee(r: dict) -> Employee:
    return Employee(
        employee_id=int(r["employee_id"]),
        first_name=r["first_name"],
        last_name=r["last_name"],
        department_id=r.get("department_id"),
        position_id=r.get("position_id"),
        hire_date=r["hire_date"],
        direct_manager_id=r.get("direct_manager_id"),
        is_active=as_bool(r.get("is_active", 1)),
    )


class MySQLEmployeeRepository(EmployeeDirectory):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, employee_id: int, *, for_update: bool = False) -> Optional[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM employees WHERE employee_id=%s{lock_clause(for_update)}", (int(employee_id),)
            )
            r = fetchone(cur)
            return _to_employee(r) if r else None

    def list_active(self, *, department_id: Optional[int] = None) -> Sequence[Employee]:
        clauses = ["is_active=1"]
        params: list[object] = []
        if department_id is not None:
            clauses.append("department_id=%s")
            params.append(int(department_id))

        where = " AND ".join(clauses)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM employees WHERE {where} ORDER BY employee_id", tuple(params))
            return [_to_employee(r) for r in fetchall(cur)]
