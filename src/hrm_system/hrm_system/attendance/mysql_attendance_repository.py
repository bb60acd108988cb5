from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Sequence

from mysql.connector import Error as MySQLError

from ..core.enums import AttendanceEventType, AttendanceStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, is_duplicate_key, lock_clause
from .model import Attendance, AttendanceEvent, CheckLocation
from .repository import AttendanceRepository

_COLUMNS = """
    attendance_id, employee_id, work_date, shift_id,
    check_in_time, check_out_time, break_start_time, break_end_time,
    check_in_latitude, check_in_longitude, check_in_location,
    check_out_latitude, check_out_longitude, check_out_location,
    total_working_minutes, break_minutes, late_minutes, early_leave_minutes, overtime_minutes,
    status, notes, manager_notes, approved_by, approved_at
"""


def _to_attendance(r: dict) -> Attendance:
    return Attendance(
        attendance_id=int(r["attendance_id"]),
        employee_id=int(r["employee_id"]),
        work_date=r["work_date"],
        status=AttendanceStatus(r["status"]),
        shift_id=r.get("shift_id"),
        check_in_time=r.get("check_in_time"),
        check_out_time=r.get("check_out_time"),
        break_start_time=r.get("break_start_time"),
        break_end_time=r.get("break_end_time"),
        check_in_location=CheckLocation(
            latitude=r.get("check_in_latitude"),
            longitude=r.get("check_in_longitude"),
            address=r.get("check_in_location"),
        ),
        check_out_location=CheckLocation(
            latitude=r.get("check_out_latitude"),
            longitude=r.get("check_out_longitude"),
            address=r.get("check_out_location"),
        ),
        total_working_minutes=int(r.get("total_working_minutes") or 0),
        break_minutes=int(r.get("break_minutes") or 0),
        late_minutes=int(r.get("late_minutes") or 0),
        early_leave_minutes=int(r.get("early_leave_minutes") or 0),
        overtime_minutes=int(r.get("overtime_minutes") or 0),
        notes=r.get("notes"),
        manager_notes=r.get("manager_notes"),
        approved_by=r.get("approved_by"),
        approved_at=r.get("approved_at"),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, attendance_id: int, *, for_update: bool = False) -> Optional[Attendance]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM attendance_records WHERE attendance_id=%s{lock_clause(for_update)}",
                (int(attendance_id),),
            )
            r = fetchone(cur)
            return _to_attendance(r) if r else None

    def get_for_employee_and_date(
        self, employee_id: int, work_date: date, *, for_update: bool = False
    ) -> Optional[Attendance]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                WHERE employee_id=%s AND work_date=%s{lock_clause(for_update)}
                """,
                (int(employee_id), work_date),
            )
            r = fetchone(cur)
            return _to_attendance(r) if r else None

    def create_checkin(
        self,
        *,
        employee_id: int,
        work_date: date,
        shift_id: Optional[int],
        check_in_time: datetime,
        location: CheckLocation,
        late_minutes: int,
        status: AttendanceStatus,
        notes: Optional[str] = None,
    ) -> Optional[int]:
        with db_cursor(self._conn_factory) as (_, cur):
            try:
                cur.execute(
                    """
                    INSERT INTO attendance_records(
                        employee_id, work_date, shift_id, check_in_time,
                        check_in_latitude, check_in_longitude, check_in_location,
                        late_minutes, status, notes
                    )
                    VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                    """,
                    (
                        int(employee_id),
                        work_date,
                        shift_id,
                        check_in_time,
                        location.latitude,
                        location.longitude,
                        location.address,
                        int(late_minutes),
                        status.value,
                        notes,
                    ),
                )
            except MySQLError as exc:
                if is_duplicate_key(exc):
                    return None
                raise
            return int(cur.lastrowid)

    def update_checkout(
        self,
        *,
        attendance_id: int,
        check_out_time: datetime,
        location: CheckLocation,
        break_end_time: Optional[datetime],
        break_minutes: int,
        total_working_minutes: int,
        early_leave_minutes: int,
        overtime_minutes: int,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_records
                SET check_out_time=%s,
                    check_out_latitude=%s, check_out_longitude=%s, check_out_location=%s,
                    break_end_time=%s, break_minutes=%s, total_working_minutes=%s,
                    early_leave_minutes=%s, overtime_minutes=%s
                WHERE attendance_id=%s
                """,
                (
                    check_out_time,
                    location.latitude,
                    location.longitude,
                    location.address,
                    break_end_time,
                    int(break_minutes),
                    int(total_working_minutes),
                    int(early_leave_minutes),
                    int(overtime_minutes),
                    int(attendance_id),
                ),
            )
            return cur.rowcount > 0

    def update_break(
        self,
        *,
        attendance_id: int,
        break_start_time: Optional[datetime],
        break_end_time: Optional[datetime],
        break_minutes: int,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_records
                SET break_start_time=%s, break_end_time=%s, break_minutes=%s
                WHERE attendance_id=%s
                """,
                (break_start_time, break_end_time, int(break_minutes), int(attendance_id)),
            )
            return cur.rowcount > 0

    def apply_correction(
        self,
        *,
        attendance_id: int,
        check_in_time: datetime,
        check_out_time: Optional[datetime],
        status: AttendanceStatus,
        total_working_minutes: int,
        late_minutes: int,
        early_leave_minutes: int,
        overtime_minutes: int,
        manager_notes: Optional[str],
        approved_by: int,
        approved_at: datetime,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_records
                SET check_in_time=%s, check_out_time=%s, status=%s,
                    total_working_minutes=%s, late_minutes=%s,
                    early_leave_minutes=%s, overtime_minutes=%s,
                    manager_notes=%s, approved_by=%s, approved_at=%s
                WHERE attendance_id=%s
                """,
                (
                    check_in_time,
                    check_out_time,
                    status.value,
                    int(total_working_minutes),
                    int(late_minutes),
                    int(early_leave_minutes),
                    int(overtime_minutes),
                    manager_notes,
                    int(approved_by),
                    approved_at,
                    int(attendance_id),
                ),
            )
            return cur.rowcount > 0

    def approve(
        self, *, attendance_ids: Sequence[int], approved_by: int, approved_at: datetime, manager_notes: Optional[str]
    ) -> int:
        ids = [int(i) for i in attendance_ids]
        if not ids:
            return 0
        placeholders = ",".join(["%s"] * len(ids))
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                UPDATE attendance_records
                SET approved_by=%s, approved_at=%s, manager_notes=COALESCE(%s, manager_notes)
                WHERE attendance_id IN ({placeholders})
                """,
                (int(approved_by), approved_at, manager_notes, *ids),
            )
            return int(cur.rowcount)

    def list_range(self, *, start: date, end: date, employee_id: Optional[int] = None) -> Sequence[Attendance]:
        clauses = ["work_date BETWEEN %s AND %s"]
        params: list[object] = [start, end]
        if employee_id is not None:
            clauses.append("employee_id=%s")
            params.append(int(employee_id))

        where = " AND ".join(clauses)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM attendance_records WHERE {where} ORDER BY work_date, employee_id",
                tuple(params),
            )
            return [_to_attendance(r) for r in fetchall(cur)]

    def append_event(
        self,
        *,
        attendance_id: int,
        event_type: AttendanceEventType,
        event_time: datetime,
        location: Optional[CheckLocation] = None,
        notes: Optional[str] = None,
    ) -> int:
        location = location or CheckLocation()
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO attendance_events(
                    attendance_id, event_type, event_time, latitude, longitude, location,
                    device_id, device_type, notes
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    int(attendance_id),
                    event_type.value,
                    event_time,
                    location.latitude,
                    location.longitude,
                    location.address,
                    location.device_id,
                    location.device_type,
                    notes,
                ),
            )
            return int(cur.lastrowid)

    def list_events(self, attendance_id: int) -> Sequence[AttendanceEvent]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT event_id, attendance_id, event_type, event_time, latitude, longitude,
                       location, device_id, device_type, notes
                FROM attendance_events
                WHERE attendance_id=%s
                ORDER BY event_time, event_id
                """,
                (int(attendance_id),),
            )
            return [
                AttendanceEvent(
                    event_id=int(r["event_id"]),
                    attendance_id=int(r["attendance_id"]),
                    event_type=AttendanceEventType(r["event_type"]),
                    event_time=r["event_time"],
                    location=CheckLocation(
                        latitude=r.get("latitude"),
                        longitude=r.get("longitude"),
                        address=r.get("location"),
                        device_id=r.get("device_id"),
                        device_type=r.get("device_type"),
                    ),
                    notes=r.get("notes"),
                )
                for r in fetchall(cur)
            ]
