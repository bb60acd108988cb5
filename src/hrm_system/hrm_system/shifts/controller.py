from __future__ import annotations

from datetime import date

from flask import Flask, g, jsonify, request

from ..common.http import (
    date_field,
    id_field,
    identified,
    int_arg,
    json_body,
    require_field,
    roles_required,
    target_employee_id,
    time_field,
    to_json,
)
from ..common.validators import require_positive_id
from ..container import Container
from ..core.enums import Role
from ..core.exceptions import ValidationError
from .model import ShiftData


def _optional_time(data: dict, name: str):
    value = data.get(name)
    return time_field(value, name) if value not in (None, "") else None


def _optional_date(data: dict, name: str):
    value = data.get(name)
    return date_field(value, name) if value not in (None, "") else None


def _optional_int(data: dict, name: str):
    value = data.get(name)
    if value is None:
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{name} must be a number", field=name)


def _shift_data(data: dict) -> ShiftData:
    applicable_days = _optional_int(data, "applicable_days")
    return ShiftData(
        name=str(require_field(data, "name")),
        start_time=time_field(require_field(data, "start_time"), "start_time"),
        end_time=time_field(require_field(data, "end_time"), "end_time"),
        break_start_time=_optional_time(data, "break_start_time"),
        break_end_time=_optional_time(data, "break_end_time"),
        flexible_minutes=_optional_int(data, "flexible_minutes") or 0,
        overtime_grace_minutes=_optional_int(data, "overtime_grace_minutes") or 0,
        allow_overtime=bool(data.get("allow_overtime", True)),
        max_overtime_minutes=_optional_int(data, "max_overtime_minutes"),
        applicable_days=0b0011111 if applicable_days is None else applicable_days,
    )


def register(app: Flask, container: Container) -> None:
    shifts = container.shift_service
    schedules = container.schedule_service

    @app.get("/api/shifts")
    @identified
    def api_shifts():
        include_inactive = request.args.get("include_inactive") in {"1", "true"}
        return jsonify(to_json(shifts.list_shifts(include_inactive=include_inactive)))

    @app.post("/api/shifts")
    @roles_required(Role.ADMIN)
    def api_shift_create():
        shift = shifts.create_shift(current_role=g.role, data=_shift_data(json_body()))
        return jsonify(to_json(shift)), 201

    @app.put("/api/shifts/<int:shift_id>")
    @roles_required(Role.ADMIN)
    def api_shift_update(shift_id: int):
        shift = shifts.update_shift(current_role=g.role, shift_id=shift_id, data=_shift_data(json_body()))
        return jsonify(to_json(shift))

    @app.post("/api/shifts/<int:shift_id>/deactivate")
    @roles_required(Role.ADMIN)
    def api_shift_deactivate(shift_id: int):
        shifts.deactivate_shift(current_role=g.role, shift_id=shift_id)
        return jsonify(to_json(shifts.get_shift(shift_id)))

    @app.get("/api/shifts/assignments")
    @roles_required(Role.ADMIN, Role.MANAGER)
    def api_assignments():
        return jsonify(to_json(shifts.list_assignments(employee_id=int_arg("employee_id"))))

    @app.post("/api/shifts/assignments")
    @roles_required(Role.ADMIN, Role.MANAGER)
    def api_assignment_create():
        data = json_body()
        assignment = shifts.assign_default(
            current_role=g.role,
            employee_id=id_field(data, "employee_id"),
            shift_id=id_field(data, "shift_id"),
            effective_from=date_field(require_field(data, "effective_from"), "effective_from"),
            effective_to=_optional_date(data, "effective_to"),
        )
        return jsonify(to_json(assignment)), 201

    @app.put("/api/shifts/assignments/<int:assignment_id>")
    @roles_required(Role.ADMIN, Role.MANAGER)
    def api_assignment_update(assignment_id: int):
        data = json_body()
        assignment = shifts.update_assignment(
            current_role=g.role,
            assignment_id=assignment_id,
            shift_id=id_field(data, "shift_id"),
            effective_from=date_field(require_field(data, "effective_from"), "effective_from"),
            effective_to=_optional_date(data, "effective_to"),
        )
        return jsonify(to_json(assignment))

    @app.delete("/api/shifts/assignments/<int:assignment_id>")
    @roles_required(Role.ADMIN, Role.MANAGER)
    def api_assignment_delete(assignment_id: int):
        shifts.delete_assignment(current_role=g.role, assignment_id=assignment_id)
        return "", 204

    @app.get("/api/schedules")
    @identified
    def api_schedules():
        start = date_field(request.args.get("start"), "start")
        end = date_field(request.args.get("end"), "end")
        if g.role in {Role.ADMIN, Role.MANAGER}:
            employee_id = int_arg("employee_id")
        else:
            employee_id = target_employee_id()
        return jsonify(to_json(schedules.list_schedules(start=start, end=end, employee_id=employee_id)))

    @app.get("/api/schedules/effective-shift")
    @identified
    def api_effective_shift():
        raw = request.args.get("date")
        work_date = date_field(raw, "date") if raw else date.today()
        shift = schedules.get_effective_shift(target_employee_id(), work_date)
        return jsonify({"date": work_date.isoformat(), "shift": to_json(shift)})

    @app.post("/api/schedules")
    @roles_required(Role.ADMIN, Role.MANAGER)
    def api_schedule_assign():
        data = json_body()
        schedule_id = schedules.assign(
            current_role=g.role,
            employee_id=id_field(data, "employee_id"),
            work_date=date_field(require_field(data, "work_date"), "work_date"),
            shift_id=id_field(data, "shift_id"),
            note=data.get("note"),
        )
        return jsonify({"schedule_id": schedule_id}), 201

    @app.post("/api/schedules/bulk")
    @roles_required(Role.ADMIN, Role.MANAGER)
    def api_schedule_bulk():
        data = json_body()
        employee_ids = require_field(data, "employee_ids")
        weekdays = data.get("weekdays")
        if not isinstance(employee_ids, list) or (weekdays is not None and not isinstance(weekdays, list)):
            raise ValidationError("employee_ids and weekdays must be lists", field="employee_ids")
        try:
            weekdays = [int(d) for d in weekdays] if weekdays is not None else None
        except (TypeError, ValueError):
            raise ValidationError("weekdays must be numbers", field="weekdays")
        created = schedules.assign_range(
            current_role=g.role,
            employee_ids=[require_positive_id(e, "employee_ids") for e in employee_ids],
            shift_id=id_field(data, "shift_id"),
            start=date_field(require_field(data, "start_date"), "start_date"),
            end=date_field(require_field(data, "end_date"), "end_date"),
            weekdays=weekdays,
            skip_holidays=bool(data.get("skip_holidays", True)),
            note=data.get("note"),
        )
        return jsonify(to_json(created)), 201

    @app.delete("/api/schedules/<int:schedule_id>")
    @roles_required(Role.ADMIN, Role.MANAGER)
    def api_schedule_delete(schedule_id: int):
        schedules.delete(current_role=g.role, schedule_id=schedule_id)
        return "", 204
