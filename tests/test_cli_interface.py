"""Tests for the CLI session: export document and confirmation of assistant actions."""

from __future__ import annotations

import json

import pytest

from cli_interface import SplitSpreeCLI, build_export_data
from state_store import StateStore

PIZZA_REPLY = json.dumps({
    "response": "Give 'Item 1' to Alice only?",
    "actionToConfirm": {"type": "SET_ITEM_ASSIGNEES", "payload": {"itemId": "item_1", "userIds": ["alice"]}},
})


def answer(monkeypatch, *replies: str) -> None:
    replies_iter = iter(replies)
    monkeypatch.setattr("builtins.input", lambda prompt="": next(replies_iter))


def test_export_data_for_scenario_a(scenario_a) -> None:
    data = build_export_data(scenario_a)
    analysis = data["settlement_analysis"]

    assert data["users"] == [{"id": "alice", "name": "Alice"}, {"id": "bob", "name": "Bob"}]
    assert data["receipts"][0]["payer"] == "Alice"
    assert [item["price"] for item in data["receipts"][0]["items"]] == [10.0, 10.0]
    assert analysis["balances"] == {"alice": 16.5, "bob": -16.5}
    assert analysis["payment_instructions"] == [
        {"instruction": "Bob pays Alice 16.50", "from": "bob", "to": "alice", "amount": 16.5},
    ]
    assert analysis["detailed_breakdown"]["bob"]["tax_share"] == 1.5
    assert analysis["detailed_breakdown"]["alice"]["status"] == "creditor"
    assert analysis["summary"]["unassigned_items"] == 0
    assert data["consistency_problems"] == []
    json.dumps(data)


def test_confirmed_assistant_action_is_applied(scenario_a, monkeypatch, capsys) -> None:
    cli = SplitSpreeCLI(store=StateStore(scenario_a))
    answer(monkeypatch, "y")

    assert cli.apply_assistant_reply(PIZZA_REPLY) is True
    assert cli.state.items["item_1"].user_ids == ("alice",)
    assert "Give 'Item 1' to Alice only?" in capsys.readouterr().out


def test_declined_assistant_action_is_not_applied(scenario_a, monkeypatch) -> None:
    cli = SplitSpreeCLI(store=StateStore(scenario_a))
    answer(monkeypatch, "n")

    assert cli.apply_assistant_reply(PIZZA_REPLY) is False
    assert cli.state is scenario_a


def test_assistant_action_on_unknown_item_changes_nothing(scenario_a, monkeypatch, capsys) -> None:
    cli = SplitSpreeCLI(store=StateStore(scenario_a))
    answer(monkeypatch, "yes")
    reply = {"response": "Clear it?", "actionToConfirm": {"type": "CLEAR_ITEM_ASSIGNEES", "payload": {"itemId": "nope"}}}

    assert cli.apply_assistant_reply(reply) is False
    assert cli.state is scenario_a
    assert "Nothing changed" in capsys.readouterr().out


def test_garbled_assistant_reply_is_reported(scenario_a, capsys) -> None:
    cli = SplitSpreeCLI(store=StateStore(scenario_a))
    assert cli.apply_assistant_reply("<html>") is False
    assert "Could not understand" in capsys.readouterr().out


def test_menu_flow_adds_people_and_shows_settlement(scenario_a, monkeypatch, capsys) -> None:
    cli = SplitSpreeCLI(store=StateStore(scenario_a))
    answer(monkeypatch, "3", "1", "Carol", "3", "8", "0")

    cli.run()

    out = capsys.readouterr().out
    assert [user.name for user in cli.state.users] == ["Alice", "Bob", "Carol"]
    assert "Bob" in out and "16.50" in out
    assert "Thank you for using SplitSpree" in out


@pytest.mark.parametrize("price, expected", [("12,50", "12.50"), ("-3", "10.00"), ("free", "10.00")])
def test_edit_item_price(scenario_a, monkeypatch, price, expected) -> None:
    cli = SplitSpreeCLI(store=StateStore(scenario_a))
    answer(monkeypatch, "1", price)

    cli.edit_item_price()

    assert str(cli.state.items["item_1"].price) == expected
