from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Sequence

from ..core.enums import LeaveStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_decimal, db_cursor, fetchall, fetchone, lock_clause
from .model import LeaveRequest, NewLeaveRequest
from .repository import LeaveRequestRepository

_COLUMNS = """
    lr.request_id, lr.employee_id, lr.policy_id, lr.start_date, lr.end_date, lr.requested_days,
    lr.reason, lr.cover_employee_id, lr.cover_notes, lr.status, lr.manager_comments,
    lr.approved_by, lr.approved_at, lr.created_at, lr.updated_at
"""


def _to_request(r: dict) -> LeaveRequest:
    return LeaveRequest(
        request_id=int(r["request_id"]),
        employee_id=int(r["employee_id"]),
        policy_id=int(r["policy_id"]),
        start_date=r["start_date"],
        end_date=r["end_date"],
        requested_days=as_decimal(r["requested_days"]),
        reason=r["reason"],
        status=LeaveStatus(r["status"]),
        created_at=r["created_at"],
        cover_employee_id=r.get("cover_employee_id"),
        cover_notes=r.get("cover_notes"),
        manager_comments=r.get("manager_comments"),
        approved_by=r.get("approved_by"),
        approved_at=r.get("approved_at"),
        updated_at=r.get("updated_at"),
    )


class MySQLLeaveRequestRepository(LeaveRequestRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create(self, data: NewLeaveRequest) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO leave_requests(
                    employee_id, policy_id, start_date, end_date, requested_days, reason,
                    cover_employee_id, cover_notes, status, created_at
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    int(data.employee_id),
                    int(data.policy_id),
                    data.start_date,
                    data.end_date,
                    data.requested_days,
                    data.reason,
                    data.cover_employee_id,
                    data.cover_notes,
                    LeaveStatus.PENDING.value,
                    data.created_at,
                ),
            )
            return int(cur.lastrowid)

    def get_by_id(self, request_id: int, *, for_update: bool = False) -> Optional[LeaveRequest]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM leave_requests lr WHERE lr.request_id=%s{lock_clause(for_update)}",
                (int(request_id),),
            )
            r = fetchone(cur)
            return _to_request(r) if r else None

    def update_status(
        self,
        *,
        request_id: int,
        status: LeaveStatus,
        updated_at: datetime,
        manager_comments: Optional[str] = None,
        approved_by: Optional[int] = None,
        approved_at: Optional[datetime] = None,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE leave_requests
                SET status=%s,
                    manager_comments=COALESCE(%s, manager_comments),
                    approved_by=COALESCE(%s, approved_by),
                    approved_at=COALESCE(%s, approved_at),
                    updated_at=%s
                WHERE request_id=%s
                """,
                (status.value, manager_comments, approved_by, approved_at, updated_at, int(request_id)),
            )
            return cur.rowcount > 0

    def find_overlapping(self, *, employee_id: int, start: date, end: date) -> Sequence[LeaveRequest]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM leave_requests lr
                WHERE lr.employee_id=%s
                  AND lr.status IN (%s, %s)
                  AND lr.start_date <= %s AND lr.end_date >= %s
                ORDER BY lr.start_date
                """,
                (int(employee_id), LeaveStatus.PENDING.value, LeaveStatus.APPROVED.value, end, start),
            )
            return [_to_request(r) for r in fetchall(cur)]

    def list_requests(
        self,
        *,
        employee_id: Optional[int] = None,
        status: Optional[LeaveStatus] = None,
        year: Optional[int] = None,
        limit: int = 200,
    ) -> Sequence[LeaveRequest]:
        clauses: list[str] = []
        params: list[object] = []
        if employee_id is not None:
            clauses.append("lr.employee_id=%s")
            params.append(int(employee_id))
        if status is not None:
            clauses.append("lr.status=%s")
            params.append(status.value)
        if year is not None:
            clauses.append("YEAR(lr.start_date)=%s")
            params.append(int(year))

        where = ("WHERE " + " AND ".join(clauses)) if clauses else ""
        params.append(int(limit))
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM leave_requests lr {where} ORDER BY lr.start_date DESC, lr.request_id DESC LIMIT %s",
                tuple(params),
            )
            return [_to_request(r) for r in fetchall(cur)]

    def list_approved_in_range(
        self,
        *,
        start: date,
        end: date,
        employee_id: Optional[int] = None,
        department_id: Optional[int] = None,
    ) -> Sequence[LeaveRequest]:
        clauses = ["lr.status=%s", "lr.start_date <= %s", "lr.end_date >= %s"]
        params: list[object] = [LeaveStatus.APPROVED.value, end, start]
        if employee_id is not None:
            clauses.append("lr.employee_id=%s")
            params.append(int(employee_id))
        if department_id is not None:
            clauses.append("e.department_id=%s")
            params.append(int(department_id))

        where = " AND ".join(clauses)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM leave_requests lr
                JOIN employees e ON e.employee_id = lr.employee_id
                WHERE {where}
                ORDER BY lr.start_date, lr.employee_id
                """,
                tuple(params),
            )
            return [_to_request(r) for r in fetchall(cur)]
