"""
State store for SplitSpree
Applies commands to an AppState and returns the next AppState
"""

import uuid
from dataclasses import replace
from typing import Callable, Dict, Iterable, Optional, Tuple

from commands import (
    AddReceipt,
    AddUser,
    AssignAllItems,
    AssignItem,
    ClearItemAssignees,
    Command,
    ResetAllSplits,
    SetItemAssignees,
    SetItemPrice,
    SetReceiptPayer,
    SplitItemAmount,
    SplitItemPercent,
    UnassignItem,
    UndoLastAction,
)
from data_models import AppState, Item, Receipt

IdFactory = Callable[[str], str]


def new_id(prefix: str) -> str:
    """Generate a unique id such as item_3f2a..."""
    return f"{prefix}_{uuid.uuid4().hex}"


def initial_state() -> AppState:
    return AppState()


def _unique(user_ids: Iterable[str]) -> Tuple[str, ...]:
    return tuple(dict.fromkeys(user_ids))


def _known_users(state: AppState, user_ids: Iterable[str]) -> bool:
    known = set(state.user_ids())
    return all(user_id in known for user_id in user_ids)


def _with_item(state: AppState, item: Item) -> AppState:
    items = dict(state.items)
    items[item.id] = item
    return replace(state, items=items)


def _with_assignees(state: AppState, item_id: str, user_ids: Iterable[str]) -> AppState:
    item = state.items.get(item_id)
    if item is None:
        return state
    user_ids = _unique(user_ids)
    if not _known_users(state, user_ids):
        return state
    return _with_item(state, replace(item, user_ids=user_ids))


def _add_user(state, command: AddUser, id_factory):
    if state.find_user(command.user.id) is not None:
        return state
    return replace(state, users=state.users + (command.user,))


def _add_receipt(state, command: AddReceipt, id_factory):
    extraction = command.extraction
    amounts = [extraction.subtotal, extraction.tax, extraction.tip, extraction.total]
    amounts.extend(line.price for line in extraction.items)
    if any(not amount.is_finite() or amount < 0 for amount in amounts):
        return state

    receipt_id = id_factory("receipt")
    new_items = {}
    for line in extraction.items:
        item_id = id_factory("item")
        new_items[item_id] = Item(
            id=item_id,
            receipt_id=receipt_id,
            name=line.name,
            price=line.price,
            description=line.description,
        )

    receipt = Receipt(
        id=receipt_id,
        store_name=extraction.store_name,
        date=extraction.date,
        item_ids=tuple(new_items),
        subtotal=extraction.subtotal,
        tax=extraction.tax,
        tip=extraction.tip,
        total=extraction.total,
        payer_id=command.payer_id,
    )

    receipts = dict(state.receipts)
    receipts[receipt_id] = receipt
    items = dict(state.items)
    items.update(new_items)
    return replace(state, receipts=receipts, items=items)


def _assign_item(state, command: AssignItem, id_factory):
    item = state.items.get(command.item_id)
    if item is None or command.user_id in item.user_ids:
        return state
    return _with_assignees(state, command.item_id, item.user_ids + (command.user_id,))


def _unassign_item(state, command: UnassignItem, id_factory):
    item = state.items.get(command.item_id)
    if item is None or command.user_id not in item.user_ids:
        return state
    remaining = tuple(user_id for user_id in item.user_ids if user_id != command.user_id)
    return _with_item(state, replace(item, user_ids=remaining))


def _set_item_assignees(state, command: SetItemAssignees, id_factory):
    return _with_assignees(state, command.item_id, command.user_ids)


def _set_item_price(state, command: SetItemPrice, id_factory):
    item = state.items.get(command.item_id)
    if item is None or not command.price.is_finite() or command.price < 0:
        return state
    return _with_item(state, replace(item, price=command.price))


def _set_receipt_payer(state, command: SetReceiptPayer, id_factory):
    receipt = state.receipts.get(command.receipt_id)
    if receipt is None:
        return state
    if command.payer_id is not None and state.find_user(command.payer_id) is None:
        return state
    receipts = dict(state.receipts)
    receipts[receipt.id] = replace(receipt, payer_id=command.payer_id)
    return replace(state, receipts=receipts)


def _assign_all_items(state, command: AssignAllItems, id_factory):
    user_ids = _unique(command.user_ids)
    if not _known_users(state, user_ids):
        return state
    items = {item_id: replace(item, user_ids=user_ids) for item_id, item in state.items.items()}
    return replace(state, items=items)


def _clear_item_assignees(state, command: ClearItemAssignees, id_factory):
    if command.item_id:
        return _with_assignees(state, command.item_id, ())
    if not command.item_ids:
        return state
    items = dict(state.items)
    for item_id in command.item_ids:
        if item_id in items:
            items[item_id] = replace(items[item_id], user_ids=())
    return replace(state, items=items)


def _split_item_percent(state, command: SplitItemPercent, id_factory):
    return _with_assignees(state, command.item_id, [user_id for user_id, _ in command.percentages])


def _split_item_amount(state, command: SplitItemAmount, id_factory):
    return _with_assignees(state, command.item_id, [user_id for user_id, _ in command.amounts])


def _reset_all_splits(state, command: ResetAllSplits, id_factory):
    items = {item_id: replace(item, user_ids=()) for item_id, item in state.items.items()}
    return replace(state, items=items)


def _undo_last_action(state, command: UndoLastAction, id_factory):
    # History is not tracked
    return state


_HANDLERS: Dict[type, Callable[[AppState, Command, IdFactory], AppState]] = {
    AddUser: _add_user,
    AddReceipt: _add_receipt,
    AssignItem: _assign_item,
    UnassignItem: _unassign_item,
    SetItemAssignees: _set_item_assignees,
    SetItemPrice: _set_item_price,
    SetReceiptPayer: _set_receipt_payer,
    AssignAllItems: _assign_all_items,
    ClearItemAssignees: _clear_item_assignees,
    SplitItemPercent: _split_item_percent,
    SplitItemAmount: _split_item_amount,
    ResetAllSplits: _reset_all_splits,
    UndoLastAction: _undo_last_action,
}


def apply(state: AppState, command: Command, id_factory: IdFactory = new_id) -> AppState:
    """Return the state that results from applying command to state.

    Never raises: unknown commands and commands that reference missing
    items, receipts or users return state unchanged.
    """
    handler = _HANDLERS.get(type(command))
    if handler is None:
        return state
    return handler(state, command, id_factory)


class StateStore:
    """Holds the current AppState of one session"""

    def __init__(self, state: Optional[AppState] = None, id_factory: IdFactory = new_id):
        self.state = state if state is not None else initial_state()
        self.id_factory = id_factory

    def dispatch(self, command: Command) -> AppState:
        self.state = apply(self.state, command, self.id_factory)
        return self.state
