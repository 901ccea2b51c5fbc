"""
Balance calculation for SplitSpree
Works out what each user paid and owes, with tax and tip allocated per item
"""

from decimal import Decimal
from typing import Dict, List

from constants import ZERO
from data_models import AppState, Item, UserSummary


def live_subtotal(state: AppState, receipt_id: str) -> Decimal:
    """Sum of the current prices of a receipt's items"""
    return sum((item.price for item in state.receipt_items(receipt_id)), ZERO)


def amount_paid(state: AppState, user_id: str) -> Decimal:
    return sum((r.total for r in state.receipts.values() if r.payer_id == user_id), ZERO)


def item_share(state: AppState, item: Item) -> Decimal:
    """One assignee's share of an item: equal part of the price plus the
    same part of the item's tax and tip surcharge"""
    split_count = len(item.user_ids) or 1
    share = item.price / split_count

    receipt = state.receipts.get(item.receipt_id)
    if receipt is None:
        return share

    subtotal = live_subtotal(state, receipt.id)
    if subtotal > 0:
        tax_tip_ratio = (receipt.tax + receipt.tip) / subtotal
        share += (item.price * tax_tip_ratio) / split_count
    return share


def amount_owed(state: AppState, user_id: str) -> Decimal:
    return sum((item_share(state, item) for item in state.items.values() if user_id in item.user_ids), ZERO)


def compute_balances(state: AppState) -> Dict[str, Decimal]:
    """Net balance per user id, in user order.

    Positive means the user is owed money, negative means the user owes.
    """
    return {
        user.id: amount_paid(state, user.id) - amount_owed(state, user.id)
        for user in state.users
    }


def summarize_users(state: AppState) -> List[UserSummary]:
    """Per-user breakdown into item subtotal, tax and tip shares, owed, paid and balance"""
    summaries = []

    for user in state.users:
        summary = UserSummary(user=user)
        per_receipt: Dict[str, Decimal] = {}
        owed = ZERO

        for item in state.items.values():
            if user.id not in item.user_ids:
                continue
            base = item.price / len(item.user_ids)
            per_receipt[item.receipt_id] = per_receipt.get(item.receipt_id, ZERO) + base
            owed += item_share(state, item)

        for receipt_id, user_subtotal in per_receipt.items():
            summary.subtotal += user_subtotal
            receipt = state.receipts.get(receipt_id)
            if receipt is None:
                continue
            subtotal = live_subtotal(state, receipt_id)
            if subtotal > 0:
                portion = user_subtotal / subtotal
                summary.tax += receipt.tax * portion
                summary.tip += receipt.tip * portion

        summary.owed = owed
        summary.paid = amount_paid(state, user.id)
        summary.balance = summary.paid - owed
        summaries.append(summary)

    return summaries
