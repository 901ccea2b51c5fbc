"""Tests for reducing balances to payment instructions."""

from __future__ import annotations

from decimal import Decimal

from balance_calculator import compute_balances
from data_models import AppState, Transaction
from debt_settlement import settle, settle_state


def D(value: str) -> Decimal:
    return Decimal(value)


def remaining_after(balances, transactions):
    remaining = dict(balances)
    for t in transactions:
        remaining[t.from_user_id] += t.amount
        remaining[t.to_user_id] -= t.amount
    return remaining


def test_scenario_a_single_transaction(scenario_a) -> None:
    assert settle_state(scenario_a) == [Transaction("bob", "alice", D("16.5"))]


def test_empty_balances_settle_to_nothing() -> None:
    assert settle({}) == []
    assert settle_state(AppState()) == []


def test_scenario_d_follows_user_order() -> None:
    balances = {"a": D("-10"), "b": D("-5"), "c": D("15")}
    assert settle(balances) == [
        Transaction("a", "c", D("10")),
        Transaction("b", "c", D("5")),
    ]


def test_encounter_order_is_kept_by_default() -> None:
    balances = {"a": D("-5"), "b": D("-10"), "c": D("15")}
    assert [t.from_user_id for t in settle(balances)] == ["a", "b"]


def test_sort_by_magnitude_pays_largest_first() -> None:
    balances = {"a": D("-5"), "b": D("-10"), "c": D("3"), "d": D("12")}
    transactions = settle(balances, sort_by_magnitude=True)
    assert transactions[0] == Transaction("b", "d", D("10"))
    assert all(abs(v) < D("0.01") for v in remaining_after(balances, transactions).values())


def test_one_debtor_many_creditors() -> None:
    balances = {"a": D("7"), "b": D("-12"), "c": D("5")}
    assert settle(balances) == [
        Transaction("b", "a", D("7")),
        Transaction("b", "c", D("5")),
    ]


def test_balances_below_epsilon_are_ignored() -> None:
    assert settle({"a": D("-0.004"), "b": D("0.004")}) == []
    assert settle({"a": D("-5"), "b": D("0.009"), "c": D("5")}) == [Transaction("a", "c", D("5"))]


def test_rounding_residue_does_not_produce_dust() -> None:
    third = D("10") / D("3")
    balances = {"a": -third, "b": -third, "c": -third, "d": D("10")}
    transactions = settle(balances)
    assert len(transactions) == 3
    assert all(t.amount > D("0.005") for t in transactions)
    assert all(abs(v) < D("0.01") for v in remaining_after(balances, transactions).values())


def test_settlement_reconciles_group_dinner(group_dinner) -> None:
    balances = compute_balances(group_dinner)
    transactions = settle(balances)

    assert transactions
    assert all(t.amount > D("0.005") for t in transactions)
    assert {t.from_user_id for t in transactions} <= {"b", "d"}
    assert {t.to_user_id for t in transactions} <= {"a", "c"}
    assert all(abs(v) < D("0.01") for v in remaining_after(balances, transactions).values())


def test_settle_is_deterministic(group_dinner) -> None:
    assert settle_state(group_dinner) == settle_state(group_dinner)
