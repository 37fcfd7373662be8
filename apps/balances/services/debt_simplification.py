"""
Debt simplification.

Turns a balance map into a short list of payments that settles every
member, using greedy creditor/debtor matching:

    1. creditors: balance > EPSILON, debtors: balance < -EPSILON
    2. sort both sides by magnitude, largest first
    3. pay the largest debtor's debt to the largest creditor, up to the
       smaller of the two amounts, and drop whoever reaches zero
    4. re-sort and repeat until one side is empty

Greedy matching is not always globally minimal (some 3+ party cycles can
be settled in fewer payments), but it never produces more than
``nonzero_members - 1`` transactions.

Ordering among members with equal amounts follows the input order and is
not guaranteed.
"""

import logging
import warnings
from decimal import Decimal
from typing import Dict, List, Mapping, Optional

from .domain import EPSILON, ZERO, MemberIdentity, SimplifiedTransaction, round2
from .exceptions import UnbalancedLedgerWarning
from .ledger_aggregation import balance_map, is_zero_sum

logger = logging.getLogger(__name__)


def _partition(balances: Dict[MemberIdentity, Decimal]):
    creditors = []
    debtors = []
    for member, balance in balances.items():
        if balance > EPSILON:
            creditors.append([member, balance])
        elif balance < -EPSILON:
            debtors.append([member, -balance])
    return creditors, debtors


def _by_magnitude(party):
    return -party[1]


def simplify(
    balances: Mapping[MemberIdentity, object],
    *,
    currency: Optional[str] = None,
) -> List[SimplifiedTransaction]:
    """
    Compute the payments that bring every balance to zero.

    Args:
        balances: ``{member: Decimal}`` or the aggregator's
            ``{member: BalanceEntry}``.
        currency: Tagged onto every transaction.

    Returns:
        list of SimplifiedTransaction, debtor -> creditor.

    An input that does not sum to zero leaves residue on one side once
    the other is exhausted. That is reported as an
    ``UnbalancedLedgerWarning``; the transactions found so far are still
    returned.
    """
    creditors, debtors = _partition(balance_map(balances))
    creditors.sort(key=_by_magnitude)
    debtors.sort(key=_by_magnitude)

    transactions = []
    while creditors and debtors:
        creditor, debtor = creditors[0], debtors[0]
        settle = min(creditor[1], debtor[1])

        if settle > EPSILON:
            transactions.append(SimplifiedTransaction(
                from_member=debtor[0],
                to_member=creditor[0],
                amount=round2(settle),
                currency=currency,
            ))

        creditor[1] -= settle
        debtor[1] -= settle

        creditors = [c for c in creditors if c[1] > EPSILON]
        debtors = [d for d in debtors if d[1] > EPSILON]
        creditors.sort(key=_by_magnitude)
        debtors.sort(key=_by_magnitude)

    leftover = creditors or debtors
    if leftover:
        residue = sum((party[1] for party in leftover), ZERO)
        logger.warning(
            "Simplification left %s unmatched across %d member(s)",
            residue, len(leftover),
        )
        warnings.warn(
            f"Unbalanced ledger: {residue} could not be matched",
            UnbalancedLedgerWarning,
            stacklevel=2,
        )

    logger.debug("Simplified %d balance(s) into %d transaction(s)", len(balances), len(transactions))
    return transactions


def _settlement_tips(transactions, creditor_count, debtor_count, is_balanced) -> List[str]:
    tips = []

    if not transactions:
        tips.append("All debts are settled. No transactions needed.")
    else:
        tips.append(f"You can settle all debts with just {len(transactions)} transaction(s).")

        if creditor_count == 1:
            tips.append("Only one person is owed money, so settling is simple.")
        if debtor_count == 1:
            tips.append("Only one person owes money to others.")

        largest = max(transactions, key=lambda t: t.amount)
        tips.append(
            f"Largest settlement: {largest.amount} from {largest.from_member} to {largest.to_member}."
        )

    if is_balanced:
        tips.append("All expenses are properly balanced.")
    else:
        tips.append("Warning: expenses may not be properly balanced. Please check for errors.")

    return tips


def suggest_settlements(
    balances: Mapping[MemberIdentity, object],
    *,
    currency: Optional[str] = None,
) -> dict:
    """
    Recommend settlement payments along with optimization statistics.

    ``original_possible_transactions`` is the number of payments needed
    if every debtor paid every creditor directly.

    Returns:
        dict: {
            'recommendations': [SimplifiedTransaction, ...],
            'optimization': {
                'original_possible_transactions': int,
                'optimized_transactions': int,
                'transactions_saved': int,
                'efficiency_improvement': str,   # e.g. '50.0%'
            },
            'creditor_count': int,
            'debtor_count': int,
            'is_balanced': bool,
            'tips': [str, ...],
        }
    """
    amounts = balance_map(balances)
    creditors, debtors = _partition(amounts)
    is_balanced = is_zero_sum(amounts)
    transactions = simplify(amounts, currency=currency)

    direct = len(creditors) * len(debtors)
    optimized = len(transactions)
    saved = max(0, direct - optimized)
    efficiency = f"{saved / direct * 100:.1f}%" if direct else '0%'

    return {
        'recommendations': transactions,
        'optimization': {
            'original_possible_transactions': direct,
            'optimized_transactions': optimized,
            'transactions_saved': saved,
            'efficiency_improvement': efficiency,
        },
        'creditor_count': len(creditors),
        'debtor_count': len(debtors),
        'is_balanced': is_balanced,
        'tips': _settlement_tips(transactions, len(creditors), len(debtors), is_balanced),
    }
