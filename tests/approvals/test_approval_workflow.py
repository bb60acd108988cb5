from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

import pytest

from hrm_system.core.enums import ApprovalDecision, LeaveStatus, StepStatus
from hrm_system.core.exceptions import NotCurrentApprover, NotFoundError, RequestNotPending
from tests.fakes import ANNUAL, World

NOW = datetime(2026, 3, 2, 9, 0)


@pytest.fixture()
def world():
    w = World()
    for employee_id in (40, 30, 20):
        w.add_employee(employee_id)
    w.add_employee(10, manager_id=20)
    w.annual = w.policies.add(ANNUAL)
    w.container.balance_ledger.allocate(10, w.annual.policy_id, 2026)
    w.request = w.container.leave_service.submit(
        employee_id=10,
        policy_id=w.annual.policy_id,
        start_date=date(2026, 3, 16),
        end_date=date(2026, 3, 18),
        reason="Wedding",
        approver_ids=[20, 30, 40],
        now=NOW,
    )
    return w


def process(world, approver_id, decision=ApprovalDecision.APPROVE, comments=None):
    return world.container.approval_service.process_step(
        request_id=world.request.request_id,
        approver_id=approver_id,
        decision=decision,
        comments=comments,
        now=NOW,
    )


def statuses(world):
    return [s.status for s in world.container.approval_service.list_steps(world.request.request_id)]


def test_steps_must_be_taken_in_order(world):
    with pytest.raises(NotCurrentApprover) as exc:
        process(world, 30)

    assert exc.value.context["current_approver_id"] == 20
    assert statuses(world) == [StepStatus.PENDING] * 3


def test_outsider_cannot_decide(world):
    with pytest.raises(NotCurrentApprover):
        process(world, 99)


def test_full_chain_approves_and_reserves(world):
    process(world, 20, comments=" looks fine ")
    process(world, 30)
    final = process(world, 40, comments="Enjoy")

    assert final.status == LeaveStatus.APPROVED
    assert final.manager_comments == "Enjoy"
    assert statuses(world) == [StepStatus.APPROVED] * 3
    steps = world.container.approval_service.list_steps(world.request.request_id)
    assert steps[0].comments == "looks fine"
    assert steps[0].processed_at == NOW
    assert world.container.balance_ledger.get_remaining(10, world.annual.policy_id, 2026) == Decimal("9")


def test_rejection_short_circuits_the_chain(world):
    process(world, 20)
    result = process(world, 30, ApprovalDecision.REJECT, comments="Peak season")

    assert result.status == LeaveStatus.REJECTED
    assert result.manager_comments == "Peak season"
    assert result.approved_by == 30
    assert statuses(world) == [StepStatus.APPROVED, StepStatus.REJECTED, StepStatus.PENDING]
    assert world.container.balance_ledger.get_remaining(10, world.annual.policy_id, 2026) == Decimal("12")


def test_decisions_after_termination(world):
    process(world, 20, ApprovalDecision.REJECT)

    # 30 now holds the lowest pending step but the request is closed
    with pytest.raises(RequestNotPending):
        process(world, 30)
    with pytest.raises(NotCurrentApprover):
        process(world, 20)


def test_cancelled_request_cannot_be_approved(world):
    world.container.leave_service.cancel(request_id=world.request.request_id, employee_id=10, now=NOW)
    with pytest.raises(RequestNotPending):
        process(world, 20)


def test_current_step_and_pending_queue(world):
    service = world.container.approval_service
    leave = world.container.leave_service

    assert service.current_step(world.request.request_id).approver_id == 20
    assert [r.request_id for r in leave.pending_for_approver(20)] == [world.request.request_id]
    assert leave.pending_for_approver(30) == []

    process(world, 20)

    assert service.current_step(world.request.request_id).approver_id == 30
    assert leave.pending_for_approver(20) == []
    assert [r.request_id for r in leave.pending_for_approver(30)] == [world.request.request_id]


def test_unknown_request(world):
    with pytest.raises(NotFoundError):
        world.container.approval_service.process_step(
            request_id=999, approver_id=20, decision=ApprovalDecision.APPROVE, now=NOW
        )
