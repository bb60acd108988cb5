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
    to_json,
)
from ..common.validators import require_positive_id, to_decimal
from ..container import Container
from ..core.enums import ApprovalDecision, LeaveStatus, Role
from ..core.exceptions import ValidationError


def register(app: Flask, container: Container) -> None:
    leave = container.leave_service
    approvals = container.approval_service
    ledger = container.balance_ledger
    policies = container.policy_service

    def _request_detail(request_id: int) -> dict:
        payload = to_json(leave.get_request(request_id))
        payload["approval_steps"] = to_json(approvals.list_steps(request_id))
        return payload

    @app.post("/api/leave/requests")
    @identified
    def api_leave_submit():
        data = json_body()
        approver_ids = data.get("approver_ids")
        if approver_ids is not None:
            if not isinstance(approver_ids, list):
                raise ValidationError("approver_ids must be a list", field="approver_ids")
            approver_ids = [require_positive_id(a, "approver_ids") for a in approver_ids]
        cover_employee_id = data.get("cover_employee_id")
        if cover_employee_id is not None:
            cover_employee_id = require_positive_id(cover_employee_id, "cover_employee_id")
        req = leave.submit(
            employee_id=g.employee_id,
            policy_id=id_field(data, "policy_id"),
            start_date=date_field(require_field(data, "start_date"), "start_date"),
            end_date=date_field(require_field(data, "end_date"), "end_date"),
            reason=str(require_field(data, "reason")),
            cover_employee_id=cover_employee_id,
            cover_notes=data.get("cover_notes"),
            approver_ids=approver_ids,
        )
        return jsonify(_request_detail(req.request_id)), 201

    @app.get("/api/leave/requests")
    @identified
    def api_leave_list():
        status = request.args.get("status")
        try:
            status_filter = LeaveStatus(status.upper()) if status else None
        except ValueError:
            raise ValidationError("Unknown status", field="status", status=status)
        rows = leave.list_requests(employee_id=target_employee_id(), status=status_filter, year=int_arg("year"))
        return jsonify(to_json(rows))

    @app.get("/api/leave/requests/<int:request_id>")
    @identified
    def api_leave_get(request_id: int):
        return jsonify(_request_detail(request_id))

    @app.post("/api/leave/requests/<int:request_id>/cancel")
    @identified
    def api_leave_cancel(request_id: int):
        req = leave.cancel(request_id=request_id, employee_id=g.employee_id)
        return jsonify(to_json(req))

    @app.post("/api/leave/requests/<int:request_id>/decision")
    @identified
    def api_leave_decide(request_id: int):
        data = json_body()
        raw = str(require_field(data, "decision")).upper()
        try:
            decision = ApprovalDecision(raw)
        except ValueError:
            raise ValidationError("Decision must be APPROVE or REJECT", field="decision")
        approvals.process_step(
            request_id=request_id, approver_id=g.employee_id, decision=decision, comments=data.get("comments")
        )
        return jsonify(_request_detail(request_id))

    @app.get("/api/leave/approvals/pending")
    @identified
    def api_leave_pending():
        return jsonify(to_json(leave.pending_for_approver(g.employee_id)))

    @app.get("/api/leave/balances")
    @identified
    def api_leave_balances():
        year = int_arg("year", date.today().year)
        balances = ledger.list_balances(target_employee_id(), year)
        return jsonify([dict(to_json(b), remaining_days=str(b.remaining_days)) for b in balances])

    @app.get("/api/leave/history")
    @identified
    def api_leave_history():
        history = leave.leave_history(target_employee_id(), int_arg("year", date.today().year))
        payload = to_json(history)
        payload["total_days_taken"] = str(history.total_days_taken)
        return jsonify(payload)

    @app.get("/api/leave/calendar")
    @identified
    def api_leave_calendar():
        start = date_field(request.args.get("start"), "start")
        end = date_field(request.args.get("end"), "end")
        days = leave.leave_calendar(start=start, end=end, department_id=int_arg("department_id"))
        return jsonify(to_json(days))

    @app.get("/api/leave/policies")
    @identified
    def api_leave_policies():
        if request.args.get("applicable") in {"1", "true"}:
            rows = policies.applicable_policies(g.employee_id, date.today())
        else:
            rows = policies.list_active_policies()
        return jsonify(to_json(rows))

    @app.post("/api/leave/balances/adjust")
    @roles_required(Role.ADMIN)
    def api_leave_adjust():
        data = json_body()
        balance = ledger.adjust(
            current_role=g.role,
            adjusted_by=g.employee_id,
            employee_id=id_field(data, "employee_id"),
            policy_id=id_field(data, "policy_id"),
            year=id_field(data, "year"),
            delta_days=to_decimal(require_field(data, "delta_days"), "delta_days"),
            reason=str(require_field(data, "reason")),
        )
        return jsonify(dict(to_json(balance), remaining_days=str(balance.remaining_days)))

    @app.post("/api/leave/balances/rollover")
    @roles_required(Role.ADMIN)
    def api_leave_rollover():
        data = json_body()
        balance = ledger.rollover(
            id_field(data, "employee_id"),
            id_field(data, "policy_id"),
            id_field(data, "from_year"),
            id_field(data, "to_year"),
        )
        return jsonify(dict(to_json(balance), remaining_days=str(balance.remaining_days)))

    @app.post("/api/leave/balances/initialize")
    @roles_required(Role.ADMIN)
    def api_leave_initialize():
        year = id_field(json_body(), "year")
        return jsonify({"year": year, "created": ledger.initialize_year(year)})
