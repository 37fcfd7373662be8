"""
What-if simulation.

Projects balances after a set of hypothetical settlements. Works on a
copy of the snapshot it is given, applying the same rule the aggregator
uses for settlements (payer += amount, payee -= amount). Nothing is read
from or written to the database.
"""

import logging
from typing import Iterable, Mapping

from .domain import EPSILON, MemberIdentity, SettlementRecord, WhatIfResult, round2
from .exceptions import DataIntegrityError
from .ledger_aggregation import balance_map

logger = logging.getLogger(__name__)


def simulate(
    current_balances: Mapping[MemberIdentity, object],
    proposed_settlements: Iterable[SettlementRecord],
) -> WhatIfResult:
    """
    Apply proposed settlements to a copy of ``current_balances``.

    Args:
        current_balances: ``{member: Decimal}`` or ``{member: BalanceEntry}``.
        proposed_settlements: Payments to try out.

    Returns:
        WhatIfResult with the untouched ``current`` map, the ``projected``
        map and the number of members still holding a balance.

    Raises:
        DataIntegrityError: If a settlement names someone who is not in
            the snapshot.
    """
    current = balance_map(current_balances)
    projected = dict(current)
    proposed = tuple(proposed_settlements)

    for settlement in proposed:
        for member in (settlement.payer, settlement.payee):
            if member not in projected:
                raise DataIntegrityError(f"{member} is not part of this balance snapshot")
        projected[settlement.payer] += settlement.amount
        projected[settlement.payee] -= settlement.amount

    projected = {member: round2(balance) for member, balance in projected.items()}
    remaining = sum(1 for balance in projected.values() if abs(balance) > EPSILON)

    logger.debug(
        "Simulated %d settlement(s): %d member(s) still hold a balance",
        len(proposed), remaining,
    )
    return WhatIfResult(
        current=current,
        projected=projected,
        remaining_non_zero=remaining,
        settlements=proposed,
    )
