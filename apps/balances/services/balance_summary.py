"""
Balance summaries for a group.

Builds a snapshot, runs the aggregator and simplifier on it and packages
the result. Nothing is cached; every call recomputes from the full
history.
"""

import logging
from decimal import Decimal
from typing import List, Sequence
from uuid import UUID

from django.utils import timezone

from apps.accounts.models import User
from apps.groups.services import MemberNotFoundError, NotMemberError

from .debt_simplification import simplify, suggest_settlements
from .domain import (
    EPSILON,
    ZERO,
    BalanceSummary,
    MemberIdentity,
    SettlementRecord,
    WhatIfResult,
    identity_for,
    round2,
)
from .ledger_aggregation import aggregate, is_zero_sum
from .ledger_snapshot import LedgerSnapshot, load_group_snapshot
from .what_if_simulation import simulate

logger = logging.getLogger(__name__)


def summarize(snapshot: LedgerSnapshot) -> BalanceSummary:
    """Aggregate and simplify an already loaded snapshot."""
    entries = aggregate(
        members=snapshot.identities,
        expenses=snapshot.expense_records,
        settlements=snapshot.settlement_records,
    )
    transactions = simplify(entries, currency=snapshot.currency)
    balances = [entry.balance for entry in entries.values()]
    logger.debug(
        "Group %s: %d member balance(s), %d suggested payment(s)",
        snapshot.group.id, len(balances), len(transactions),
    )

    return BalanceSummary(
        per_member=tuple(entries.values()),
        simplified_transactions=tuple(transactions),
        total_expenses=round2(sum((e.amount for e in snapshot.expense_records), ZERO)),
        total_settlements=round2(sum((s.amount for s in snapshot.settlement_records), ZERO)),
        currency=snapshot.currency,
        expense_count=len(snapshot.expense_records),
        settlement_count=len(snapshot.settlement_records),
        total_owed=round2(sum((-b for b in balances if b < -EPSILON), ZERO)),
        total_credit=round2(sum((b for b in balances if b > EPSILON), ZERO)),
        is_balanced=is_zero_sum(entries),
        calculated_at=timezone.now(),
    )


def build_balance_summary(*, group_id: UUID) -> BalanceSummary:
    """
    Per-member balances and the payments that would settle them.

    Args:
        group_id: UUID of the group

    Raises:
        GroupNotFoundError: If group doesn't exist
        DataIntegrityError: If a stored record cannot be aggregated
    """
    snapshot = load_group_snapshot(group_id=group_id)
    return summarize(snapshot)


def get_settlement_suggestions(*, group_id: UUID) -> dict:
    """
    Suggested payments with optimization statistics and tips.

    Returns:
        dict: ``suggest_settlements`` output plus 'summary' (BalanceSummary)
    """
    snapshot = load_group_snapshot(group_id=group_id)
    summary = summarize(snapshot)
    balances = {entry.member: entry.balance for entry in summary.per_member}

    suggestions = suggest_settlements(balances, currency=summary.currency)
    suggestions['summary'] = summary
    return suggestions


def simulate_group_settlements(
    *,
    group_id: UUID,
    proposed: Sequence[dict] = (),
    apply_suggestions: bool = False,
) -> WhatIfResult:
    """
    Project the group's balances after hypothetical settlements.

    Args:
        group_id: UUID of the group
        proposed: ``{'payer_email', 'payee_email', 'amount'}`` dicts
        apply_suggestions: Also apply every suggested payment

    Raises:
        GroupNotFoundError: If group doesn't exist
        DataIntegrityError: If a proposed settlement names a non-member
    """
    snapshot = load_group_snapshot(group_id=group_id)
    summary = summarize(snapshot)
    balances = {entry.member: entry.balance for entry in summary.per_member}

    records = [
        SettlementRecord(
            amount=item['amount'],
            currency=summary.currency,
            payer=identity_for(item['payer_email']),
            payee=identity_for(item['payee_email']),
        )
        for item in proposed
    ]
    if apply_suggestions:
        records.extend(
            SettlementRecord(
                amount=t.amount,
                currency=summary.currency,
                payer=t.from_member,
                payee=t.to_member,
            )
            for t in summary.simplified_transactions
        )

    return simulate(balances, records)


def get_member_balance(*, group_id: UUID, member_id: UUID) -> dict:
    """
    One member's balance and the simplified payments involving them.

    Returns:
        dict: {'member', 'entry', 'transactions', 'currency'}

    Raises:
        GroupNotFoundError: If group doesn't exist
        MemberNotFoundError: If the member is not in the group
    """
    snapshot = load_group_snapshot(group_id=group_id)
    member = next((m for m in snapshot.members if str(m.id) == str(member_id)), None)
    if member is None:
        raise MemberNotFoundError("Member not found in this group")

    summary = summarize(snapshot)
    identity = member.identity()
    entry = next(e for e in summary.per_member if e.member == identity)

    return {
        'member': member,
        'entry': entry,
        'transactions': [t for t in summary.simplified_transactions if t.involves(identity)],
        'currency': summary.currency,
    }


def calculate_balance_between(
    snapshot: LedgerSnapshot,
    member: MemberIdentity,
    other: MemberIdentity,
) -> Decimal:
    """
    Net position of ``member`` towards ``other``.

    Positive means ``other`` owes ``member``. Only expenses one of them
    paid and the other shared in, and settlements between the two, are
    counted.
    """
    net = ZERO

    for expense in snapshot.expense_records:
        if expense.payer == member:
            net += sum((s.share for s in expense.splits if s.member == other), ZERO)
        elif expense.payer == other:
            net -= sum((s.share for s in expense.splits if s.member == member), ZERO)

    for settlement in snapshot.settlement_records:
        if settlement.payer == member and settlement.payee == other:
            net += settlement.amount
        elif settlement.payer == other and settlement.payee == member:
            net -= settlement.amount

    return round2(net)


def get_pairwise_balances(*, group_id: UUID, user: User) -> dict:
    """
    What the user owes, or is owed by, each other member.

    Members the user is square with are left out.

    Returns:
        dict: {
            'balances': [{'member': GroupMember, 'amount': Decimal}, ...],
            'total_net_balance': Decimal,
            'currency': str,
        }

    Raises:
        GroupNotFoundError: If group doesn't exist
        NotMemberError: If the user is not in the group
    """
    snapshot = load_group_snapshot(group_id=group_id)
    me = snapshot.group.get_member_for_user(user)
    if me is None:
        raise NotMemberError(f"You are not a member of {snapshot.group.name}")

    identity = me.identity()
    balances: List[dict] = []
    for other in snapshot.members:
        if other.email == me.email:
            continue
        amount = calculate_balance_between(snapshot, identity, other.identity())
        if abs(amount) > EPSILON:
            balances.append({'member': other, 'amount': amount})

    return {
        'balances': balances,
        'total_net_balance': round2(sum((b['amount'] for b in balances), ZERO)),
        'currency': snapshot.currency,
    }
