"""
Debt settlement for SplitSpree
Reduces net balances to a list of pairwise payments
"""

from decimal import Decimal
from typing import Dict, List, Mapping

from balance_calculator import compute_balances
from constants import MATERIALITY_THRESHOLD, SETTLEMENT_EPSILON
from data_models import AppState, Transaction


def settle(balances: Mapping[str, Decimal], sort_by_magnitude: bool = False) -> List[Transaction]:
    """Greedy settlement: the first remaining debtor pays the first remaining
    creditor until one of them is settled.

    Debtors and creditors keep the iteration order of balances unless
    sort_by_magnitude is set, in which case the largest amounts go first.
    """
    debtors: List[Dict] = []
    creditors: List[Dict] = []

    for user_id, balance in balances.items():
        if abs(balance) < SETTLEMENT_EPSILON:
            continue
        if balance < 0:
            debtors.append({'user_id': user_id, 'amount': -balance})
        else:
            creditors.append({'user_id': user_id, 'amount': balance})

    if sort_by_magnitude:
        debtors.sort(key=lambda x: x['amount'], reverse=True)
        creditors.sort(key=lambda x: x['amount'], reverse=True)

    settlements = []
    i, j = 0, 0

    while i < len(debtors) and j < len(creditors):
        debtor = debtors[i]
        creditor = creditors[j]

        amount = min(debtor['amount'], creditor['amount'])

        if amount > MATERIALITY_THRESHOLD:
            settlements.append(Transaction(
                from_user_id=debtor['user_id'],
                to_user_id=creditor['user_id'],
                amount=amount,
            ))

        debtor['amount'] -= amount
        creditor['amount'] -= amount

        if abs(debtor['amount']) < SETTLEMENT_EPSILON:
            i += 1
        if abs(creditor['amount']) < SETTLEMENT_EPSILON:
            j += 1

    return settlements


def settle_state(state: AppState, sort_by_magnitude: bool = False) -> List[Transaction]:
    return settle(compute_balances(state), sort_by_magnitude=sort_by_magnitude)
