from __future__ import annotations

from datetime import date

from flask import Flask, g, jsonify, request

from ..common.http import (
    date_field,
    datetime_field,
    identified,
    int_arg,
    json_body,
    require_field,
    roles_required,
    target_employee_id,
    to_json,
)
from ..common.validators import require_positive_id
from ..container import Container
from ..core.enums import BreakAction, Role
from ..core.exceptions import ValidationError
from .model import CheckLocation


def _location(data: dict) -> CheckLocation:
    return CheckLocation(
        latitude=data.get("latitude"),
        longitude=data.get("longitude"),
        address=data.get("location"),
        device_id=data.get("device_id"),
        device_type=data.get("device_type"),
    )


def register(app: Flask, container: Container) -> None:
    attendance = container.attendance_service

    @app.post("/api/attendance/check-in")
    @identified
    def api_checkin():
        data = json_body()
        record = attendance.check_in(g.employee_id, location=_location(data), notes=data.get("notes"))
        return jsonify(to_json(record)), 201

    @app.post("/api/attendance/check-out")
    @identified
    def api_checkout():
        data = json_body()
        record = attendance.check_out(g.employee_id, location=_location(data), notes=data.get("notes"))
        return jsonify(to_json(record))

    @app.post("/api/attendance/break")
    @identified
    def api_break():
        data = json_body()
        raw = str(require_field(data, "action")).upper()
        try:
            action = BreakAction(raw)
        except ValueError:
            raise ValidationError("Action must be START or END", field="action")
        record = attendance.record_break(g.employee_id, action, location=_location(data))
        return jsonify(to_json(record))

    @app.get("/api/attendance/today")
    @identified
    def api_today():
        employee_id = target_employee_id()
        record = attendance.get_today(employee_id)
        today = date.today()
        return jsonify(
            {
                "work_date": today.isoformat(),
                "record": to_json(record) if record else None,
                "status": to_json(attendance.day_status(employee_id, today)),
            }
        )

    @app.get("/api/attendance/<int:attendance_id>/events")
    @identified
    def api_events(attendance_id: int):
        return jsonify(to_json(attendance.list_events(attendance_id)))

    @app.post("/api/attendance/<int:attendance_id>/correct")
    @roles_required(Role.ADMIN, Role.MANAGER)
    def api_correct(attendance_id: int):
        data = json_body()
        check_out = data.get("check_out_time")
        record = attendance.manager_correct(
            current_role=g.role,
            manager_id=g.employee_id,
            attendance_id=attendance_id,
            check_in_time=datetime_field(require_field(data, "check_in_time"), "check_in_time"),
            check_out_time=datetime_field(check_out, "check_out_time") if check_out else None,
            notes=data.get("notes") or "",
        )
        return jsonify(to_json(record))

    @app.post("/api/attendance/approve")
    @roles_required(Role.ADMIN, Role.MANAGER)
    def api_approve():
        data = json_body()
        ids = require_field(data, "attendance_ids")
        if not isinstance(ids, list):
            raise ValidationError("attendance_ids must be a list", field="attendance_ids")
        ids = [require_positive_id(i, "attendance_ids") for i in ids]
        count = attendance.approve_records(
            current_role=g.role, manager_id=g.employee_id, attendance_ids=ids, notes=data.get("notes") or ""
        )
        return jsonify({"approved": count})

    @app.get("/api/attendance/daily-report")
    @roles_required(Role.ADMIN, Role.MANAGER)
    def api_daily_report():
        raw = request.args.get("date")
        work_date = date_field(raw, "date") if raw else date.today()
        report = attendance.daily_report(work_date, department_id=int_arg("department_id"))
        return jsonify(
            {
                "work_date": work_date.isoformat(),
                "total_employees": report.total_employees,
                "present": report.present_count,
                "late": report.late_count,
                "absent": report.absent_count,
                "on_leave": report.on_leave_count,
                "early_leave": report.early_leave_count,
                "rows": to_json(report.rows),
            }
        )
