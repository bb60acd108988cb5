from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional, Sequence

from mysql.connector import Error as MySQLError

from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_decimal, db_cursor, fetchall, fetchone, is_duplicate_key, lock_clause
from .model import BalanceAdjustment, LeaveBalance
from .repository import BalanceRepository

_COLUMNS = """
    balance_id, employee_id, policy_id, year,
    allocated_days, used_days, carried_forward_days, adjustment_days
"""


def _to_balance(r: dict) -> LeaveBalance:
    return LeaveBalance(
        balance_id=int(r["balance_id"]),
        employee_id=int(r["employee_id"]),
        policy_id=int(r["policy_id"]),
        year=int(r["year"]),
        allocated_days=as_decimal(r["allocated_days"]),
        used_days=as_decimal(r["used_days"]),
        carried_forward_days=as_decimal(r["carried_forward_days"]),
        adjustment_days=as_decimal(r["adjustment_days"]),
    )


class MySQLBalanceRepository(BalanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get(self, *, employee_id: int, policy_id: int, year: int, for_update: bool = False) -> Optional[LeaveBalance]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM leave_balances
                WHERE employee_id=%s AND policy_id=%s AND year=%s
                {lock_clause(for_update)}
                """,
                (int(employee_id), int(policy_id), int(year)),
            )
            r = fetchone(cur)
            return _to_balance(r) if r else None

    def create(
        self,
        *,
        employee_id: int,
        policy_id: int,
        year: int,
        allocated_days: Decimal,
        carried_forward_days: Decimal,
    ) -> Optional[int]:
        with db_cursor(self._conn_factory) as (_, cur):
            try:
                cur.execute(
                    """
                    INSERT INTO leave_balances(
                        employee_id, policy_id, year, allocated_days, used_days,
                        carried_forward_days, adjustment_days
                    )
                    VALUES(%s,%s,%s,%s,0,%s,0)
                    """,
                    (int(employee_id), int(policy_id), int(year), allocated_days, carried_forward_days),
                )
            except MySQLError as exc:
                if is_duplicate_key(exc):
                    return None
                raise
            return int(cur.lastrowid)

    def set_used(self, *, balance_id: int, used_days: Decimal) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE leave_balances SET used_days=%s WHERE balance_id=%s",
                (used_days, int(balance_id)),
            )
            return cur.rowcount > 0

    def add_adjustment(self, *, balance_id: int, delta_days: Decimal) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE leave_balances SET adjustment_days=adjustment_days + %s WHERE balance_id=%s",
                (delta_days, int(balance_id)),
            )
            return cur.rowcount > 0

    def insert_adjustment_audit(
        self,
        *,
        balance_id: int,
        delta_days: Decimal,
        reason: str,
        adjusted_by: int,
        created_at: datetime,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO balance_adjustments(balance_id, delta_days, reason, adjusted_by, created_at)
                VALUES(%s,%s,%s,%s,%s)
                """,
                (int(balance_id), delta_days, reason, int(adjusted_by), created_at),
            )
            return int(cur.lastrowid)

    def list_adjustments(self, *, balance_id: int) -> Sequence[BalanceAdjustment]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT adjustment_id, balance_id, delta_days, reason, adjusted_by, created_at
                FROM balance_adjustments
                WHERE balance_id=%s
                ORDER BY created_at, adjustment_id
                """,
                (int(balance_id),),
            )
            return [
                BalanceAdjustment(
                    adjustment_id=int(r["adjustment_id"]),
                    balance_id=int(r["balance_id"]),
                    delta_days=as_decimal(r["delta_days"]),
                    reason=r["reason"],
                    adjusted_by=int(r["adjusted_by"]),
                    created_at=r["created_at"],
                )
                for r in fetchall(cur)
            ]

    def list_for_employee(self, *, employee_id: int, year: int) -> Sequence[LeaveBalance]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM leave_balances WHERE employee_id=%s AND year=%s ORDER BY policy_id",
                (int(employee_id), int(year)),
            )
            return [_to_balance(r) for r in fetchall(cur)]
