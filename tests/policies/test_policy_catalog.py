from __future__ import annotations

from dataclasses import replace
from datetime import date
from decimal import Decimal

import pytest

from hrm_system.core.enums import Role
from hrm_system.core.exceptions import AuthorizationError, NotFoundError, PolicyNotApplicable, ValidationError
from hrm_system.policies.service import PolicyService
from tests.fakes import ANNUAL, SICK, World


def test_only_admin_can_create_policy():
    world = World()
    service = world.container.policy_service

    with pytest.raises(AuthorizationError):
        service.create_policy(current_role=Role.MANAGER, data=ANNUAL)

    policy_id = service.create_policy(current_role=Role.ADMIN, data=ANNUAL)
    assert service.get_policy(policy_id).annual_allowance_days == Decimal("12")


def test_create_policy_rejects_negative_allowance():
    service = World().container.policy_service
    with pytest.raises(ValidationError):
        service.create_policy(current_role=Role.ADMIN, data=replace(ANNUAL, annual_allowance_days=Decimal("-1")))


def test_create_policy_rejects_inverted_window():
    service = World().container.policy_service
    bad = replace(ANNUAL, effective_from=date(2026, 6, 1), effective_to=date(2026, 1, 1))
    with pytest.raises(ValidationError):
        service.create_policy(current_role=Role.ADMIN, data=bad)


def test_deactivated_policy_drops_out_of_active_list():
    world = World()
    service = world.container.policy_service
    annual = world.policies.add(ANNUAL)
    world.policies.add(SICK)

    service.deactivate_policy(current_role=Role.ADMIN, policy_id=annual.policy_id)

    assert [p.name for p in service.list_active_policies()] == ["Sick Leave"]
    # still readable for existing balances
    assert service.get_policy(annual.policy_id).is_active is False


def test_get_policy_unknown_id():
    with pytest.raises(NotFoundError):
        World().container.policy_service.get_policy(99)


def test_applicable_policies_filters_department_and_tenure():
    world = World()
    world.add_employee(10, department_id=1, hire_date=date(2026, 1, 6))
    world.policies.add(ANNUAL)
    world.policies.add(replace(SICK, department_id=2))
    world.policies.add(replace(ANNUAL, name="Senior Annual", min_tenure_months=6))

    names = [p.name for p in world.container.policy_service.applicable_policies(10, date(2026, 3, 2))]

    assert names == ["Annual Leave"]


@pytest.mark.parametrize(
    "change, reason",
    [
        ({"position_id": 7}, "position"),
        ({"department_id": 3}, "department"),
        ({"min_tenure_months": 120}, "tenure"),
        ({"effective_to": date(2026, 3, 31)}, "effective_window"),
    ],
)
def test_ensure_applicable_reasons(change, reason):
    world = World()
    employee = world.add_employee(10)
    policy = world.policies.add(replace(ANNUAL, **change))

    with pytest.raises(PolicyNotApplicable) as exc:
        PolicyService.ensure_applicable(
            policy, employee, start=date(2026, 3, 30), end=date(2026, 4, 3), today=date(2026, 3, 2)
        )
    assert exc.value.context["reason"] == reason


def test_ensure_applicable_inactive_policy():
    world = World()
    employee = world.add_employee(10)
    policy = world.policies.add(ANNUAL, is_active=False)

    with pytest.raises(PolicyNotApplicable) as exc:
        PolicyService.ensure_applicable(
            policy, employee, start=date(2026, 3, 16), end=date(2026, 3, 20), today=date(2026, 3, 2)
        )
    assert exc.value.context["reason"] == "inactive"
