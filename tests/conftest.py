"""Shared pytest fixtures for SplitSpree tests."""

from __future__ import annotations

from collections import defaultdict
from decimal import Decimal

import pytest

from commands import AddReceipt, AddUser, SetItemAssignees
from data_models import AppState, ExtractedItem, ReceiptExtraction, User
from state_store import apply


def make_id_factory():
    """Predictable ids: receipt_1, item_1, item_2, ..."""
    counters: dict[str, int] = defaultdict(int)

    def make(prefix: str) -> str:
        counters[prefix] += 1
        return f"{prefix}_{counters[prefix]}"

    return make


def extraction(*prices: str, tax: str = "0", tip: str = "0", store: str = "Store") -> ReceiptExtraction:
    items = tuple(
        ExtractedItem(name=f"Item {i}", price=Decimal(price), description=f"Item {i}")
        for i, price in enumerate(prices, 1)
    )
    subtotal = sum((item.price for item in items), Decimal("0"))
    return ReceiptExtraction(
        store_name=store,
        date="2024-03-15",
        items=items,
        subtotal=subtotal,
        tax=Decimal(tax),
        tip=Decimal(tip),
        total=subtotal + Decimal(tax) + Decimal(tip),
    )


def with_users(*names: str) -> AppState:
    state = AppState()
    for name in names:
        state = apply(state, AddUser(User(id=name.lower(), name=name)))
    return state


@pytest.fixture
def id_factory():
    return make_id_factory()


@pytest.fixture
def scenario_a(id_factory) -> AppState:
    """Alice pays $22: two $10 items and $2 tax. Bob had item 1, both shared item 2."""
    state = with_users("Alice", "Bob")
    state = apply(state, AddReceipt(extraction("10.00", "10.00", tax="2.00"), payer_id="alice"), id_factory)
    state = apply(state, SetItemAssignees("item_1", ("bob",)), id_factory)
    state = apply(state, SetItemAssignees("item_2", ("alice", "bob")), id_factory)
    return state


@pytest.fixture
def group_dinner(id_factory) -> AppState:
    """Four people, two receipts with uneven splits, tax and tip; every item assigned."""
    state = with_users("A", "B", "C", "D")
    state = apply(state, AddReceipt(extraction("9.99", "15.00", "4.50", tax="2.36", tip="5.00"), payer_id="a"), id_factory)
    state = apply(state, AddReceipt(extraction("12.00", "7.25", tax="1.54"), payer_id="c"), id_factory)
    assignments = {
        "item_1": ("a", "b", "c"),
        "item_2": ("d",),
        "item_3": ("b", "d"),
        "item_4": ("a", "b", "c", "d"),
        "item_5": ("a",),
    }
    for item_id, user_ids in assignments.items():
        state = apply(state, SetItemAssignees(item_id, user_ids), id_factory)
    return state
