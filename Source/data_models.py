"""
Data models for SplitSpree - users, receipts, items and settlements
"""

from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Mapping, Optional, Tuple

from constants import ZERO


def to_decimal(value: Any) -> Decimal:
    """Convert a number or numeric string to a finite Decimal, going through str for floats"""
    if isinstance(value, bool):
        raise ValueError(f"Not an amount: {value!r}")
    if isinstance(value, Decimal):
        result = value
    else:
        try:
            result = Decimal(str(value).strip())
        except (InvalidOperation, TypeError):
            raise ValueError(f"Not an amount: {value!r}")
    if not result.is_finite():
        raise ValueError(f"Not an amount: {value!r}")
    return result


@dataclass(frozen=True)
class User:
    """A member of the group"""
    id: str
    name: str


@dataclass(frozen=True)
class Item:
    """A single receipt line, optionally split among assignees"""
    id: str
    receipt_id: str
    name: str
    price: Decimal
    description: str = ""
    user_ids: Tuple[str, ...] = ()

    @property
    def is_assigned(self) -> bool:
        return bool(self.user_ids)


@dataclass(frozen=True)
class Receipt:
    """One uploaded bill, owning its items in line order"""
    id: str
    store_name: str
    date: str
    item_ids: Tuple[str, ...] = ()
    subtotal: Decimal = ZERO
    tax: Decimal = ZERO
    tip: Decimal = ZERO
    total: Decimal = ZERO
    payer_id: Optional[str] = None


@dataclass(frozen=True)
class AppState:
    """Aggregate root of a session. Never mutated, only replaced."""
    users: Tuple[User, ...] = ()
    receipts: Mapping[str, Receipt] = field(default_factory=dict)
    items: Mapping[str, Item] = field(default_factory=dict)

    def user_ids(self) -> List[str]:
        return [user.id for user in self.users]

    def find_user(self, user_id: str) -> Optional[User]:
        for user in self.users:
            if user.id == user_id:
                return user
        return None

    def receipt_items(self, receipt_id: str) -> List[Item]:
        """Items of a receipt in line order"""
        receipt = self.receipts.get(receipt_id)
        if receipt is None:
            return []
        return [self.items[item_id] for item_id in receipt.item_ids if item_id in self.items]


@dataclass(frozen=True)
class ExtractedItem:
    """One line item as returned by a receipt extraction source"""
    name: str
    price: Decimal
    description: str = ""


@dataclass(frozen=True)
class ReceiptExtraction:
    """Structured result of reading one receipt"""
    store_name: str
    date: str
    items: Tuple[ExtractedItem, ...] = ()
    subtotal: Decimal = ZERO
    tax: Decimal = ZERO
    tip: Decimal = ZERO
    total: Decimal = ZERO

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ReceiptExtraction":
        """Build from the camelCase JSON of the extraction service.

        Raises ValueError for a missing item list or a non-numeric amount.
        """
        raw_items = data.get("items")
        if not isinstance(raw_items, list):
            raise ValueError("Extraction result has no item list")

        items = []
        for raw in raw_items:
            if not isinstance(raw, Mapping) or "price" not in raw:
                raise ValueError(f"Malformed item: {raw!r}")
            name = str(raw.get("name", "")).strip()
            items.append(ExtractedItem(
                name=name,
                price=to_decimal(raw["price"]),
                description=str(raw.get("description") or name),
            ))

        return cls(
            store_name=str(data.get("storeName", data.get("store_name", ""))),
            date=str(data.get("date", "")),
            items=tuple(items),
            subtotal=to_decimal(data.get("subtotal", 0)),
            tax=to_decimal(data.get("tax", 0)),
            tip=to_decimal(data.get("tip", 0)),
            total=to_decimal(data.get("total", 0)),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "storeName": self.store_name,
            "date": self.date,
            "items": [
                {"name": item.name, "price": float(item.price), "description": item.description}
                for item in self.items
            ],
            "subtotal": float(self.subtotal),
            "tax": float(self.tax),
            "tip": float(self.tip),
            "total": float(self.total),
        }


@dataclass(frozen=True)
class Transaction:
    """A directed payment instruction"""
    from_user_id: str
    to_user_id: str
    amount: Decimal


@dataclass
class UserSummary:
    """Per-user breakdown of what was consumed and paid"""
    user: User
    subtotal: Decimal = ZERO
    tax: Decimal = ZERO
    tip: Decimal = ZERO
    owed: Decimal = ZERO
    paid: Decimal = ZERO
    balance: Decimal = ZERO

    @property
    def status(self) -> str:
        if self.balance > 0:
            return "creditor"
        if self.balance < 0:
            return "debtor"
        return "balanced"


@dataclass
class ProcessingMetrics:
    """Metrics for parallel OCR processing"""
    workers_used: int = 0
    processing_time: float = 0.0
    items_detected: int = 0
    regions_processed: int = 0


def validate_state(state: AppState) -> List[str]:
    """Return every invariant violation found in the state (empty when consistent)"""
    problems = []
    user_ids = set()

    for user in state.users:
        if user.id in user_ids:
            problems.append(f"duplicate user id {user.id}")
        user_ids.add(user.id)

    for receipt_id, receipt in state.receipts.items():
        if receipt.id != receipt_id:
            problems.append(f"receipt {receipt_id} stored under a different id ({receipt.id})")
        for amount_name in ("subtotal", "tax", "tip", "total"):
            if getattr(receipt, amount_name) < 0:
                problems.append(f"receipt {receipt_id} has a negative {amount_name}")
        for item_id in receipt.item_ids:
            item = state.items.get(item_id)
            if item is None:
                problems.append(f"receipt {receipt_id} lists missing item {item_id}")
            elif item.receipt_id != receipt_id:
                problems.append(f"item {item_id} is listed by receipt {receipt_id} but belongs to {item.receipt_id}")

    for item_id, item in state.items.items():
        if item.id != item_id:
            problems.append(f"item {item_id} stored under a different id ({item.id})")
        receipt = state.receipts.get(item.receipt_id)
        if receipt is None:
            problems.append(f"item {item_id} references missing receipt {item.receipt_id}")
        elif item_id not in receipt.item_ids:
            problems.append(f"item {item_id} is not listed by its receipt {item.receipt_id}")
        if item.price < 0:
            problems.append(f"item {item_id} has a negative price")
        if len(set(item.user_ids)) != len(item.user_ids):
            problems.append(f"item {item_id} has duplicate assignees")
        for user_id in item.user_ids:
            if user_id not in user_ids:
                problems.append(f"item {item_id} is assigned to unknown user {user_id}")

    return problems
