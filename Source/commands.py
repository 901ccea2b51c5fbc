"""
Commands accepted by the state store, one dataclass per kind
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Mapping, Optional, Tuple, Union

from data_models import ReceiptExtraction, User, to_decimal


@dataclass(frozen=True)
class AddUser:
    user: User


@dataclass(frozen=True)
class AddReceipt:
    extraction: ReceiptExtraction
    payer_id: Optional[str] = None


@dataclass(frozen=True)
class AssignItem:
    item_id: str
    user_id: str


@dataclass(frozen=True)
class UnassignItem:
    item_id: str
    user_id: str


@dataclass(frozen=True)
class SetItemAssignees:
    item_id: str
    user_ids: Tuple[str, ...]


@dataclass(frozen=True)
class SetItemPrice:
    item_id: str
    price: Decimal


@dataclass(frozen=True)
class SetReceiptPayer:
    receipt_id: str
    payer_id: Optional[str]


@dataclass(frozen=True)
class AssignAllItems:
    user_ids: Tuple[str, ...]


@dataclass(frozen=True)
class ClearItemAssignees:
    """Clear one item (item_id) or several (item_ids); item_id wins when both are set"""
    item_id: Optional[str] = None
    item_ids: Tuple[str, ...] = ()


@dataclass(frozen=True)
class SplitItemPercent:
    """Split rationale by percentage; only the membership is kept on the item"""
    item_id: str
    percentages: Tuple[Tuple[str, Decimal], ...]


@dataclass(frozen=True)
class SplitItemAmount:
    """Split rationale by amount; only the membership is kept on the item"""
    item_id: str
    amounts: Tuple[Tuple[str, Decimal], ...]


@dataclass(frozen=True)
class ResetAllSplits:
    pass


@dataclass(frozen=True)
class UndoLastAction:
    pass


Command = Union[
    AddUser,
    AddReceipt,
    AssignItem,
    UnassignItem,
    SetItemAssignees,
    SetItemPrice,
    SetReceiptPayer,
    AssignAllItems,
    ClearItemAssignees,
    SplitItemPercent,
    SplitItemAmount,
    ResetAllSplits,
    UndoLastAction,
]

# Wire tags used by the chat assistant and the original action format
COMMAND_TYPES = {
    'ADD_USER': AddUser,
    'ADD_RECEIPT': AddReceipt,
    'ASSIGN_ITEM': AssignItem,
    'UNASSIGN_ITEM': UnassignItem,
    'SET_ITEM_ASSIGNEES': SetItemAssignees,
    'SET_ITEM_PRICE': SetItemPrice,
    'SET_RECEIPT_PAYER': SetReceiptPayer,
    'ASSIGN_ALL_ITEMS': AssignAllItems,
    'CLEAR_ITEM_ASSIGNEES': ClearItemAssignees,
    'SPLIT_ITEM_PERCENT': SplitItemPercent,
    'SPLIT_ITEM_AMOUNT': SplitItemAmount,
    'RESET_ALL_SPLITS': ResetAllSplits,
    'UNDO_LAST_ACTION': UndoLastAction,
}


def _str_tuple(values: Any) -> Tuple[str, ...]:
    if not isinstance(values, (list, tuple)):
        raise ValueError(f"Expected a list, got {values!r}")
    return tuple(str(v) for v in values)


def _pairs(entries: Any, key: str) -> Tuple[Tuple[str, Decimal], ...]:
    if not isinstance(entries, (list, tuple)):
        raise ValueError(f"Expected a list, got {entries!r}")
    return tuple((str(entry['userId']), to_decimal(entry[key])) for entry in entries)


def _build(kind: str, payload: Mapping[str, Any]) -> Command:
    if kind == 'ADD_USER':
        return AddUser(User(id=str(payload['id']), name=str(payload['name'])))
    if kind == 'ADD_RECEIPT':
        payer_id = payload.get('payerId')
        return AddReceipt(
            extraction=ReceiptExtraction.from_dict(payload['receiptData']),
            payer_id=str(payer_id) if payer_id else None,
        )
    if kind == 'ASSIGN_ITEM':
        return AssignItem(str(payload['itemId']), str(payload['userId']))
    if kind == 'UNASSIGN_ITEM':
        return UnassignItem(str(payload['itemId']), str(payload['userId']))
    if kind == 'SET_ITEM_ASSIGNEES':
        return SetItemAssignees(str(payload['itemId']), _str_tuple(payload['userIds']))
    if kind == 'SET_ITEM_PRICE':
        return SetItemPrice(str(payload['itemId']), to_decimal(payload['price']))
    if kind == 'SET_RECEIPT_PAYER':
        payer_id = payload.get('payerId')
        return SetReceiptPayer(str(payload['receiptId']), str(payer_id) if payer_id else None)
    if kind == 'ASSIGN_ALL_ITEMS':
        return AssignAllItems(_str_tuple(payload['userIds']))
    if kind == 'CLEAR_ITEM_ASSIGNEES':
        item_id = payload.get('itemId')
        return ClearItemAssignees(
            item_id=str(item_id) if item_id else None,
            item_ids=_str_tuple(payload.get('itemIds') or []),
        )
    if kind == 'SPLIT_ITEM_PERCENT':
        return SplitItemPercent(str(payload['itemId']), _pairs(payload['percentages'], 'percentage'))
    if kind == 'SPLIT_ITEM_AMOUNT':
        return SplitItemAmount(str(payload['itemId']), _pairs(payload['amounts'], 'amount'))
    if kind == 'RESET_ALL_SPLITS':
        return ResetAllSplits()
    return UndoLastAction()


def command_from_dict(data: Any) -> Optional[Command]:
    """Convert a {"type": ..., "payload": {...}} action into a command.

    Unknown types and malformed payloads give None.
    """
    if not isinstance(data, Mapping):
        return None
    kind = data.get('type')
    if kind not in COMMAND_TYPES:
        return None
    payload = data.get('payload') or {}
    if not isinstance(payload, Mapping):
        return None
    try:
        return _build(kind, payload)
    except (KeyError, TypeError, ValueError):
        return None
