from __future__ import annotations

from flask import Flask, jsonify

from ..common.http import identified, int_arg, roles_required, target_employee_id, to_json
from ..container import Container
from ..core.enums import Role
from .model import AttendanceSummary


def summary_to_dict(summary: AttendanceSummary) -> dict:
    payload = to_json(summary)
    payload.update(
        attendance_rate=str(summary.attendance_rate),
        overtime_hours=str(summary.overtime_hours),
        total_working_hours=str(summary.total_working_hours),
        total_leave_days=str(summary.total_leave_days),
    )
    return payload


def register(app: Flask, container: Container) -> None:
    summaries = container.summary_service

    @app.get("/api/attendance/summary/<int:year>/<int:month>")
    @identified
    def api_summary(year: int, month: int):
        summary = summaries.summarize(target_employee_id(), year, month)
        return jsonify(summary_to_dict(summary))

    @app.post("/api/attendance/summary/<int:year>/<int:month>/all")
    @roles_required(Role.ADMIN)
    def api_summary_all(year: int, month: int):
        rows = summaries.summarize_all(year, month, department_id=int_arg("department_id"))
        return jsonify([summary_to_dict(s) for s in rows])
