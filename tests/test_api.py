from __future__ import annotations

from datetime import date, datetime

import pytest

from hrm_system.main import create_app
from tests.fakes import ANNUAL, World


@pytest.fixture()
def world():
    w = World()
    w.add_employee(20)
    w.add_employee(10, manager_id=20)
    w.annual = w.policies.add(ANNUAL)
    w.container.balance_ledger.allocate(10, w.annual.policy_id, date.today().year)
    return w


@pytest.fixture()
def client(world, monkeypatch):
    monkeypatch.setenv("APP_ENV", "testing")
    app = create_app(world.container)
    return app.test_client()


def as_employee(employee_id, role="staff"):
    return {"X-Employee-Id": str(employee_id), "X-Role": role}


def test_missing_identity_is_401(client):
    resp = client.get("/api/leave/balances")
    assert resp.status_code == 401
    assert resp.get_json()["error"] == "AuthenticationError"


def test_balances_endpoint(client, world):
    resp = client.get("/api/leave/balances", headers=as_employee(10))

    assert resp.status_code == 200
    (row,) = resp.get_json()
    assert row["policy_id"] == world.annual.policy_id
    assert row["remaining_days"] == "12"


def test_staff_cannot_read_someone_elses_balance(client):
    resp = client.get("/api/leave/balances?employee_id=20", headers=as_employee(10))
    assert resp.status_code == 403


def test_validation_errors_map_to_422(client, world):
    resp = client.post(
        "/api/leave/requests",
        json={"policy_id": world.annual.policy_id, "start_date": "2030-13-01", "end_date": "2030-01-02", "reason": "x"},
        headers=as_employee(10),
    )
    assert resp.status_code == 422
    assert resp.get_json()["error"] == "ValidationError"


@pytest.mark.parametrize(
    "overrides",
    [{"policy_id": "abc"}, {"cover_employee_id": "abc"}, {"approver_ids": ["x"]}, {"approver_ids": 20}],
)
def test_non_numeric_ids_are_422(client, world, overrides):
    payload = {"policy_id": world.annual.policy_id, "start_date": "2030-03-04", "end_date": "2030-03-05", "reason": "x"}
    payload.update(overrides)

    resp = client.post("/api/leave/requests", json=payload, headers=as_employee(10))

    assert resp.status_code == 422
    assert resp.get_json()["error"] == "ValidationError"


def test_admin_year_fields_are_validated(client):
    resp = client.post("/api/leave/balances/initialize", json={"year": "next"}, headers=as_employee(1, "admin"))
    assert resp.status_code == 422

    resp = client.post(
        "/api/attendance/approve", json={"attendance_ids": ["one"]}, headers=as_employee(20, "manager")
    )
    assert resp.status_code == 422


def test_unknown_request_is_404(client):
    resp = client.get("/api/leave/requests/999", headers=as_employee(10))
    assert resp.status_code == 404
    assert resp.get_json()["error"] == "NotFound"


def test_decisions_over_http(client, world):
    world.container.balance_ledger.allocate(10, world.annual.policy_id, 2030)
    req = world.container.leave_service.submit(
        employee_id=10,
        policy_id=world.annual.policy_id,
        start_date=date(2030, 3, 18),
        end_date=date(2030, 3, 19),
        reason="Conference",
        now=datetime(2030, 3, 1, 9, 0),
    )
    url = f"/api/leave/requests/{req.request_id}/decision"

    resp = client.post(url, json={"decision": "approve"}, headers=as_employee(10))
    assert resp.status_code == 409
    assert resp.get_json()["error"] == "NotCurrentApprover"

    resp = client.post(url, json={"decision": "maybe"}, headers=as_employee(20, "manager"))
    assert resp.status_code == 422

    resp = client.post(url, json={"decision": "approve"}, headers=as_employee(20, "manager"))
    assert resp.status_code == 200
    body = resp.get_json()
    assert body["status"] == "APPROVED"
    assert body["requested_days"] == "2"
    assert [s["status"] for s in body["approval_steps"]] == ["APPROVED"]


def test_admin_only_endpoints(client):
    resp = client.post("/api/leave/balances/initialize", json={"year": 2030}, headers=as_employee(20, "manager"))
    assert resp.status_code == 403

    resp = client.post("/api/leave/balances/initialize", json={"year": 2030}, headers=as_employee(1, "admin"))
    assert resp.status_code == 200
    assert resp.get_json() == {"year": 2030, "created": 2}


def test_attendance_check_in_flow(client):
    resp = client.post("/api/attendance/check-in", json={"device_id": "web"}, headers=as_employee(10))
    assert resp.status_code == 201
    body = resp.get_json()
    assert body["status"] in {"PRESENT", "LATE"}
    assert body["check_in_location"]["device_id"] == "web"

    again = client.post("/api/attendance/check-in", json={}, headers=as_employee(10))
    assert again.status_code == 409
    assert again.get_json()["error"] == "DuplicateCheckIn"


def test_break_action_is_validated(client):
    resp = client.post("/api/attendance/break", json={"action": "nap"}, headers=as_employee(10))
    assert resp.status_code == 422


def test_unknown_route_is_json_404(client):
    resp = client.get("/api/nope", headers=as_employee(10))
    assert resp.status_code == 404
    assert resp.get_json()["error"] == "Not Found"


def test_shift_and_assignment_endpoints(client):
    shift = client.post(
        "/api/shifts",
        json={"name": "Early", "start_time": "07:00", "end_time": "15:00", "flexible_minutes": 5},
        headers=as_employee(1, "admin"),
    )
    assert shift.status_code == 201
    shift_id = shift.get_json()["shift_id"]
    assert shift.get_json()["start_time"] == "07:00:00"

    bad = client.post(
        "/api/shifts", json={"name": "Broken", "start_time": "7am", "end_time": "15:00"}, headers=as_employee(1, "admin")
    )
    assert bad.status_code == 422

    assign = {"employee_id": 10, "shift_id": shift_id, "effective_from": "2026-01-01"}
    created = client.post("/api/shifts/assignments", json=assign, headers=as_employee(20, "manager"))
    assert created.status_code == 201

    clash = client.post(
        "/api/shifts/assignments", json=dict(assign, effective_from="2025-06-01"), headers=as_employee(20, "manager")
    )
    assert clash.status_code == 409
    assert clash.get_json()["error"] == "OverlappingAssignment"

    effective = client.get("/api/schedules/effective-shift?date=2026-03-02", headers=as_employee(10))
    assert effective.get_json()["shift"]["name"] == "Early"

    forbidden = client.post("/api/shifts/assignments", json=assign, headers=as_employee(10))
    assert forbidden.status_code == 403


def test_bulk_schedule_endpoint(client):
    resp = client.post(
        "/api/schedules/bulk",
        json={"employee_ids": [10], "shift_id": 1, "start_date": "2026-03-02", "end_date": "2026-03-08"},
        headers=as_employee(20, "manager"),
    )
    assert resp.status_code == 404

    client.post(
        "/api/shifts",
        json={"name": "Office", "start_time": "09:00", "end_time": "18:00"},
        headers=as_employee(1, "admin"),
    )
    resp = client.post(
        "/api/schedules/bulk",
        json={"employee_ids": [10, 20], "shift_id": 1, "start_date": "2026-03-02", "end_date": "2026-03-08"},
        headers=as_employee(20, "manager"),
    )
    assert resp.status_code == 201
    assert len(resp.get_json()) == 10

    listed = client.get("/api/schedules?start=2026-03-01&end=2026-03-31", headers=as_employee(10))
    assert {row["employee_id"] for row in listed.get_json()} == {10}
