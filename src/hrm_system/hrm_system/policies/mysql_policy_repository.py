from __future__ import annotations

from typing import Optional, Sequence

from ..core.enums import LeaveType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_bool, as_decimal, db_cursor, fetchall, fetchone
from .model import LeavePolicy, LeavePolicyData
from .repository import PolicyRepository

_COLUMNS = """
    policy_id, name, description, leave_type, annual_allowance_days, max_carry_forward_days,
    max_consecutive_days, min_advance_notice_days, requires_documentation, is_paid,
    allow_negative_balance, department_id, position_id, min_tenure_months,
    is_active, effective_from, effective_to
"""


def _to_policy(r: dict) -> LeavePolicy:
    return LeavePolicy(
        policy_id=int(r["policy_id"]),
        name=r["name"],
        description=r.get("description"),
        leave_type=LeaveType(r["leave_type"]),
        annual_allowance_days=as_decimal(r["annual_allowance_days"]),
        max_carry_forward_days=as_decimal(r.get("max_carry_forward_days")),
        max_consecutive_days=int(r["max_consecutive_days"]),
        min_advance_notice_days=int(r["min_advance_notice_days"]),
        requires_documentation=as_bool(r.get("requires_documentation")),
        is_paid=as_bool(r.get("is_paid")),
        allow_negative_balance=as_bool(r.get("allow_negative_balance")),
        department_id=r.get("department_id"),
        position_id=r.get("position_id"),
        min_tenure_months=int(r.get("min_tenure_months") or 0),
        is_active=as_bool(r.get("is_active")),
        effective_from=r["effective_from"],
        effective_to=r.get("effective_to"),
    )


def _params(data: LeavePolicyData) -> tuple:
    return (
        data.name,
        data.description,
        data.leave_type.value,
        data.annual_allowance_days,
        data.max_carry_forward_days,
        int(data.max_consecutive_days),
        int(data.min_advance_notice_days),
        int(data.requires_documentation),
        int(data.is_paid),
        int(data.allow_negative_balance),
        data.department_id,
        data.position_id,
        int(data.min_tenure_months),
        data.effective_from,
        data.effective_to,
    )


class MySQLPolicyRepository(PolicyRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, policy_id: int) -> Optional[LeavePolicy]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM leave_policies WHERE policy_id=%s", (int(policy_id),))
            r = fetchone(cur)
            return _to_policy(r) if r else None

    def list_active(self) -> Sequence[LeavePolicy]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM leave_policies WHERE is_active=1 ORDER BY leave_type, name")
            return [_to_policy(r) for r in fetchall(cur)]

    def create(self, data: LeavePolicyData) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO leave_policies(
                    name, description, leave_type, annual_allowance_days, max_carry_forward_days,
                    max_consecutive_days, min_advance_notice_days, requires_documentation, is_paid,
                    allow_negative_balance, department_id, position_id, min_tenure_months,
                    effective_from, effective_to, is_active
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,1)
                """,
                _params(data),
            )
            return int(cur.lastrowid)

    def update(self, policy_id: int, data: LeavePolicyData) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE leave_policies
                SET name=%s, description=%s, leave_type=%s, annual_allowance_days=%s,
                    max_carry_forward_days=%s, max_consecutive_days=%s, min_advance_notice_days=%s,
                    requires_documentation=%s, is_paid=%s, allow_negative_balance=%s,
                    department_id=%s, position_id=%s, min_tenure_months=%s,
                    effective_from=%s, effective_to=%s
                WHERE policy_id=%s
                """,
                _params(data) + (int(policy_id),),
            )
            return cur.rowcount > 0

    def set_active(self, policy_id: int, *, is_active: bool) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE leave_policies SET is_active=%s WHERE policy_id=%s",
                (int(bool(is_active)), int(policy_id)),
            )
            return cur.rowcount > 0
