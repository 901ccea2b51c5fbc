"""Tests for converting wire-format actions into commands."""

from __future__ import annotations

from decimal import Decimal

import pytest

from commands import (
    AddReceipt,
    AddUser,
    AssignAllItems,
    AssignItem,
    ClearItemAssignees,
    ResetAllSplits,
    SetItemAssignees,
    SetItemPrice,
    SetReceiptPayer,
    SplitItemAmount,
    SplitItemPercent,
    UnassignItem,
    UndoLastAction,
    command_from_dict,
)
from data_models import User


@pytest.mark.parametrize(
    "action, expected",
    [
        ({"type": "ADD_USER", "payload": {"id": "u1", "name": "Ann"}}, AddUser(User("u1", "Ann"))),
        ({"type": "ASSIGN_ITEM", "payload": {"itemId": "i1", "userId": "u1"}}, AssignItem("i1", "u1")),
        ({"type": "UNASSIGN_ITEM", "payload": {"itemId": "i1", "userId": "u1"}}, UnassignItem("i1", "u1")),
        (
            {"type": "SET_ITEM_ASSIGNEES", "payload": {"itemId": "i1", "userIds": ["u1", "u2"]}},
            SetItemAssignees("i1", ("u1", "u2")),
        ),
        ({"type": "SET_ITEM_PRICE", "payload": {"itemId": "i1", "price": 12.5}}, SetItemPrice("i1", Decimal("12.5"))),
        (
            {"type": "SET_RECEIPT_PAYER", "payload": {"receiptId": "r1", "payerId": "u2"}},
            SetReceiptPayer("r1", "u2"),
        ),
        ({"type": "ASSIGN_ALL_ITEMS", "payload": {"userIds": ["u1"]}}, AssignAllItems(("u1",))),
        ({"type": "CLEAR_ITEM_ASSIGNEES", "payload": {"itemId": "i1"}}, ClearItemAssignees(item_id="i1")),
        (
            {"type": "CLEAR_ITEM_ASSIGNEES", "payload": {"itemIds": ["i1", "i2"]}},
            ClearItemAssignees(item_ids=("i1", "i2")),
        ),
        (
            {
                "type": "SPLIT_ITEM_PERCENT",
                "payload": {"itemId": "i1", "percentages": [{"userId": "u1", "percentage": 60}, {"userId": "u2", "percentage": 40}]},
            },
            SplitItemPercent("i1", (("u1", Decimal("60")), ("u2", Decimal("40")))),
        ),
        (
            {"type": "SPLIT_ITEM_AMOUNT", "payload": {"itemId": "i1", "amounts": [{"userId": "u1", "amount": "4.20"}]}},
            SplitItemAmount("i1", (("u1", Decimal("4.20")),)),
        ),
        ({"type": "RESET_ALL_SPLITS", "payload": {}}, ResetAllSplits()),
        ({"type": "UNDO_LAST_ACTION"}, UndoLastAction()),
    ],
)
def test_known_actions(action, expected) -> None:
    assert command_from_dict(action) == expected


def test_add_receipt_action() -> None:
    command = command_from_dict({
        "type": "ADD_RECEIPT",
        "payload": {
            "payerId": "u1",
            "receiptData": {
                "storeName": "Cafe",
                "date": "2024-01-02",
                "items": [{"name": "Tea", "price": 3.2, "description": "Green tea"}],
                "subtotal": 3.2,
                "tax": 0.3,
                "tip": 0,
                "total": 3.5,
            },
        },
    })
    assert isinstance(command, AddReceipt)
    assert command.payer_id == "u1"
    assert command.extraction.store_name == "Cafe"
    assert command.extraction.items[0].price == Decimal("3.2")
    assert command.extraction.total == Decimal("3.5")


def test_float_prices_keep_their_written_value() -> None:
    command = command_from_dict({"type": "SET_ITEM_PRICE", "payload": {"itemId": "i1", "price": 0.1}})
    assert command.price == Decimal("0.1")


@pytest.mark.parametrize(
    "action",
    [
        None,
        "SET_ITEM_PRICE",
        {"type": "DELETE_ITEM", "payload": {"itemId": "i1"}},
        {"type": "SET_ITEM_PRICE", "payload": {"itemId": "i1"}},
        {"type": "SET_ITEM_PRICE", "payload": {"itemId": "i1", "price": "cheap"}},
        {"type": "SET_ITEM_ASSIGNEES", "payload": {"itemId": "i1", "userIds": "u1"}},
        {"type": "SET_ITEM_PRICE", "payload": {"itemId": "i1", "price": "NaN"}},
        {"type": "SET_ITEM_PRICE", "payload": {"itemId": "i1", "price": "Infinity"}},
        {"type": "SET_ITEM_PRICE", "payload": {"itemId": "i1", "price": float("nan")}},
        {"type": "SPLIT_ITEM_PERCENT", "payload": {"itemId": "i1", "percentages": ["u1"]}},
        {"type": "SPLIT_ITEM_AMOUNT", "payload": {"itemId": "i1", "amounts": [{"userId": "u1", "amount": "-inf"}]}},
        {"type": "ADD_RECEIPT", "payload": {"receiptData": {"items": [], "total": "NaN"}}},
        {"type": "ASSIGN_ITEM", "payload": ["i1", "u1"]},
        {"type": "ADD_RECEIPT", "payload": {"receiptData": {"storeName": "No items"}}},
    ],
)
def test_malformed_actions_give_none(action) -> None:
    assert command_from_dict(action) is None
