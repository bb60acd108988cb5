from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date, datetime
from decimal import Decimal

import pytest

from hrm_system.core.enums import Role
from hrm_system.core.exceptions import (
    AuthorizationError,
    BalanceInconsistency,
    InsufficientBalance,
    NotFoundError,
    ValidationError,
)
from tests.fakes import ANNUAL, SICK, World


@pytest.fixture()
def world():
    w = World()
    w.add_employee(10)
    w.annual = w.policies.add(ANNUAL)
    return w


def test_allocate_uses_policy_allowance_and_is_idempotent(world):
    ledger = world.container.balance_ledger
    first = ledger.allocate(10, world.annual.policy_id, 2026)
    again = ledger.allocate(10, world.annual.policy_id, 2026)

    assert first.remaining_days == Decimal("12")
    assert again.balance_id == first.balance_id
    assert len(world.balances.rows) == 1


def test_reserve_and_release(world):
    ledger = world.container.balance_ledger
    ledger.allocate(10, world.annual.policy_id, 2026)

    assert ledger.reserve(10, world.annual.policy_id, 2026, 5).remaining_days == Decimal("7")
    assert ledger.release(10, world.annual.policy_id, 2026, Decimal("2")).remaining_days == Decimal("9")


def test_reserve_beyond_remaining_is_refused(world):
    ledger = world.container.balance_ledger
    ledger.allocate(10, world.annual.policy_id, 2026)
    ledger.reserve(10, world.annual.policy_id, 2026, 10)

    with pytest.raises(InsufficientBalance) as exc:
        ledger.reserve(10, world.annual.policy_id, 2026, 3)

    assert exc.value.context["remaining"] == "2"
    assert ledger.get_balance(10, world.annual.policy_id, 2026).used_days == Decimal("10")


def test_reserve_may_go_negative_when_policy_allows(world):
    ledger = world.container.balance_ledger
    lenient = world.policies.add(replace(SICK, allow_negative_balance=True))
    ledger.allocate(10, lenient.policy_id, 2026)

    balance = ledger.reserve(10, lenient.policy_id, 2026, 12)

    assert balance.remaining_days == Decimal("-2")


def test_reserve_rejects_non_positive_days(world):
    ledger = world.container.balance_ledger
    ledger.allocate(10, world.annual.policy_id, 2026)
    with pytest.raises(ValidationError):
        ledger.reserve(10, world.annual.policy_id, 2026, 0)


def test_reserve_without_balance_row(world):
    with pytest.raises(NotFoundError):
        world.container.balance_ledger.reserve(10, world.annual.policy_id, 2026, 1)


def test_release_below_zero_raises_in_strict_mode(world, caplog):
    ledger = world.container.balance_ledger
    ledger.allocate(10, world.annual.policy_id, 2026)
    ledger.reserve(10, world.annual.policy_id, 2026, 1)

    with caplog.at_level(logging.ERROR, logger="hrm_system.alerts"):
        with pytest.raises(BalanceInconsistency):
            ledger.release(10, world.annual.policy_id, 2026, 3)

    assert any(r.name == "hrm_system.alerts" for r in caplog.records)
    assert ledger.get_balance(10, world.annual.policy_id, 2026).used_days == Decimal("1")


def test_release_below_zero_clamps_when_lenient(caplog):
    world = World(strict_balance_release=False)
    world.add_employee(10)
    annual = world.policies.add(ANNUAL)
    ledger = world.container.balance_ledger
    ledger.allocate(10, annual.policy_id, 2026)
    ledger.reserve(10, annual.policy_id, 2026, 1)

    with caplog.at_level(logging.ERROR, logger="hrm_system.alerts"):
        balance = ledger.release(10, annual.policy_id, 2026, 3)

    assert balance.used_days == Decimal("0")
    assert any("below zero" in r.getMessage() for r in caplog.records)


def test_adjust_requires_admin(world):
    ledger = world.container.balance_ledger
    ledger.allocate(10, world.annual.policy_id, 2026)
    with pytest.raises(AuthorizationError):
        ledger.adjust(
            current_role=Role.MANAGER,
            adjusted_by=20,
            employee_id=10,
            policy_id=world.annual.policy_id,
            year=2026,
            delta_days=2,
            reason="bonus",
        )


def test_adjust_is_audited_and_may_go_negative(world):
    ledger = world.container.balance_ledger
    ledger.allocate(10, world.annual.policy_id, 2026)
    at = datetime(2026, 3, 2, 10, 0)

    balance = ledger.adjust(
        current_role=Role.ADMIN,
        adjusted_by=1,
        employee_id=10,
        policy_id=world.annual.policy_id,
        year=2026,
        delta_days=Decimal("-14"),
        reason="Recovered overpaid leave",
        now=at,
    )

    assert balance.adjustment_days == Decimal("-14")
    assert balance.remaining_days == Decimal("-2")
    (audit,) = ledger.list_adjustments(10, world.annual.policy_id, 2026)
    assert (audit.delta_days, audit.adjusted_by, audit.created_at) == (Decimal("-14"), 1, at)
    assert audit.reason == "Recovered overpaid leave"


def test_adjust_rejects_zero_and_blank_reason(world):
    ledger = world.container.balance_ledger
    ledger.allocate(10, world.annual.policy_id, 2026)
    common = dict(current_role=Role.ADMIN, adjusted_by=1, employee_id=10, policy_id=world.annual.policy_id, year=2026)

    with pytest.raises(ValidationError):
        ledger.adjust(delta_days=0, reason="noop", **common)
    with pytest.raises(ValidationError):
        ledger.adjust(delta_days=1, reason="  ", **common)


def test_rollover_caps_carry_forward_and_is_idempotent(world):
    ledger = world.container.balance_ledger
    ledger.allocate(10, world.annual.policy_id, 2025)
    ledger.reserve(10, world.annual.policy_id, 2025, 4)

    first = ledger.rollover(10, world.annual.policy_id, 2025, 2026)
    second = ledger.rollover(10, world.annual.policy_id, 2025, 2026)

    assert first.carried_forward_days == Decimal("5")
    assert first.remaining_days == Decimal("17")
    assert second == first
    assert len(world.balances.list_for_employee(employee_id=10, year=2026)) == 1


def test_rollover_without_prior_year_carries_nothing(world):
    balance = world.container.balance_ledger.rollover(10, world.annual.policy_id, 2025, 2026)
    assert balance.carried_forward_days == Decimal("0")
    assert balance.allocated_days == Decimal("12")


def test_rollover_never_carries_a_negative_remainder(world):
    ledger = world.container.balance_ledger
    ledger.allocate(10, world.annual.policy_id, 2025)
    ledger.adjust(
        current_role=Role.ADMIN,
        adjusted_by=1,
        employee_id=10,
        policy_id=world.annual.policy_id,
        year=2025,
        delta_days=-20,
        reason="correction",
    )

    assert ledger.rollover(10, world.annual.policy_id, 2025, 2026).carried_forward_days == Decimal("0")


def test_rollover_requires_later_year(world):
    with pytest.raises(ValidationError):
        world.container.balance_ledger.rollover(10, world.annual.policy_id, 2026, 2026)


def test_initialize_year_only_creates_eligible_missing_rows(world):
    world.add_employee(11, department_id=2)
    world.add_employee(12, is_active=False)
    world.policies.add(replace(SICK, department_id=1))
    ledger = world.container.balance_ledger

    created = ledger.initialize_year(2026)

    assert created == 3
    assert len(ledger.list_balances(10, 2026)) == 2
    assert len(ledger.list_balances(11, 2026)) == 1
    assert ledger.list_balances(12, 2026) == []
    assert ledger.initialize_year(2026) == 0


def test_get_remaining_reports_missing_row(world):
    with pytest.raises(NotFoundError):
        world.container.balance_ledger.get_remaining(10, world.annual.policy_id, 2030)


def test_balance_for_new_hire_respects_tenure():
    world = World()
    world.add_employee(10, hire_date=date(2025, 11, 3))
    world.policies.add(replace(ANNUAL, min_tenure_months=6))

    assert world.container.balance_ledger.initialize_year(2026) == 0
