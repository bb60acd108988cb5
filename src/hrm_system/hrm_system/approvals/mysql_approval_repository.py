from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from ..core.enums import LeaveStatus, StepStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall
from .model import ApprovalStep
from .repository import ApprovalStepRepository


class MySQLApprovalStepRepository(ApprovalStepRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create_steps(self, *, request_id: int, approver_ids: Sequence[int]) -> list[int]:
        ids: list[int] = []
        with db_cursor(self._conn_factory) as (_, cur):
            for order, approver_id in enumerate(approver_ids, start=1):
                cur.execute(
                    """
                    INSERT INTO leave_approval_steps(request_id, approver_id, step_order, status)
                    VALUES(%s,%s,%s,%s)
                    """,
                    (int(request_id), int(approver_id), order, StepStatus.PENDING.value),
                )
                ids.append(int(cur.lastrowid))
        return ids

    def list_for_request(self, request_id: int) -> Sequence[ApprovalStep]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT step_id, request_id, approver_id, step_order, status, comments, processed_at
                FROM leave_approval_steps
                WHERE request_id=%s
                ORDER BY step_order
                """,
                (int(request_id),),
            )
            return [
                ApprovalStep(
                    step_id=int(r["step_id"]),
                    request_id=int(r["request_id"]),
                    approver_id=int(r["approver_id"]),
                    step_order=int(r["step_order"]),
                    status=StepStatus(r["status"]),
                    comments=r.get("comments"),
                    processed_at=r.get("processed_at"),
                )
                for r in fetchall(cur)
            ]

    def update_step(
        self,
        *,
        step_id: int,
        status: StepStatus,
        comments: Optional[str],
        processed_at: datetime,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE leave_approval_steps SET status=%s, comments=%s, processed_at=%s WHERE step_id=%s",
                (status.value, comments, processed_at, int(step_id)),
            )
            return cur.rowcount > 0

    def list_request_ids_awaiting(self, approver_id: int) -> Sequence[int]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT s.request_id
                FROM leave_approval_steps s
                JOIN leave_requests lr ON lr.request_id = s.request_id
                WHERE s.approver_id=%s
                  AND s.status=%s
                  AND lr.status=%s
                  AND s.step_order = (
                      SELECT MIN(s2.step_order)
                      FROM leave_approval_steps s2
                      WHERE s2.request_id = s.request_id AND s2.status=%s
                  )
                ORDER BY lr.created_at, lr.request_id
                """,
                (int(approver_id), StepStatus.PENDING.value, LeaveStatus.PENDING.value, StepStatus.PENDING.value),
            )
            return [int(r["request_id"]) for r in fetchall(cur)]
