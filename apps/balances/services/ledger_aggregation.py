"""
Ledger aggregation.

Folds a group's expense and settlement history into one ``BalanceEntry``
per member. This is a pure function of its inputs: the full history is
recomputed on every call and nothing is cached.

Sign convention:
    positive balance -> the member is owed money
    negative balance -> the member owes money

Rules:
    expense     payer  += amount  (total_paid += amount)
                member -= share   (total_owed += share), for every split
    settlement  payer  += amount
                payee  -= amount

Example::

    entries = aggregate(
        members=[alice, bob, carol],
        expenses=[ExpenseRecord(Decimal('120.00'), 'USD', alice, splits)],
        settlements=[],
    )
    entries[alice].balance  # Decimal('80.00')
"""

import logging
import warnings
from decimal import Decimal
from typing import Dict, Iterable, Mapping

from .domain import (
    EPSILON,
    ZERO,
    BalanceEntry,
    ExpenseRecord,
    MemberIdentity,
    SettlementRecord,
    round2,
)
from .exceptions import DataIntegrityError, UnbalancedLedgerWarning

logger = logging.getLogger(__name__)


def balance_of(value) -> Decimal:
    """Accept either a BalanceEntry or a bare Decimal balance."""
    if isinstance(value, BalanceEntry):
        return value.balance
    return Decimal(value)


def balance_map(entries: Mapping[MemberIdentity, object]) -> Dict[MemberIdentity, Decimal]:
    """Reduce aggregator output to ``{member: balance}``."""
    return {member: balance_of(value) for member, value in entries.items()}


class _BalanceTable:
    """
    Running totals keyed by normalized email.

    Keying by email (not object identity) means a member recorded as
    invited in one record and as registered in another still lands on a
    single row.
    """

    def __init__(self, members: Iterable[MemberIdentity]):
        self._members = {}
        self._rows = {}
        for member in members:
            known = self._members.get(member.key)
            if known is None:
                self._members[member.key] = member
                self._rows[member.key] = [ZERO, ZERO, ZERO]
            elif member.is_registered and not known.is_registered:
                # Prefer the identity that carries an account id
                self._members[member.key] = member

    def __contains__(self, member: MemberIdentity) -> bool:
        return member.key in self._rows

    def credit(self, member, amount, paid=False):
        row = self._rows[member.key]
        row[0] += amount
        if paid:
            row[1] += amount

    def debit(self, member, amount, owed=False):
        row = self._rows[member.key]
        row[0] -= amount
        if owed:
            row[2] += amount

    def entries(self) -> Dict[MemberIdentity, BalanceEntry]:
        return {
            self._members[key]: BalanceEntry(
                member=self._members[key],
                balance=round2(balance),
                total_paid=round2(paid),
                total_owed=round2(owed),
            )
            for key, (balance, paid, owed) in self._rows.items()
        }


def check_expense(expense: ExpenseRecord, members) -> None:
    """
    Verify an expense can be folded into a group's ledger.

    Args:
        expense: The expense snapshot.
        members: Group members, as identities or anything supporting
            ``in`` for identities.

    Raises:
        DataIntegrityError: amount not positive, payer or a split member
            outside the group, duplicate split members, a non-positive
            share, or shares not summing to the amount within EPSILON.
    """
    label = expense.reference or expense.description or 'expense'

    if expense.amount <= ZERO:
        raise DataIntegrityError(f"{label}: amount must be greater than 0")
    if expense.payer not in members:
        raise DataIntegrityError(f"{label}: payer {expense.payer} is not a group member")
    if not expense.splits:
        raise DataIntegrityError(f"{label}: must be split among at least one member")

    seen = set()
    for split in expense.splits:
        if split.member not in members:
            raise DataIntegrityError(f"{label}: split member {split.member} is not a group member")
        if split.member.key in seen:
            raise DataIntegrityError(f"{label}: {split.member} appears more than once in splits")
        if split.share <= ZERO:
            raise DataIntegrityError(f"{label}: share for {split.member} must be greater than 0")
        seen.add(split.member.key)

    drift = expense.split_total - expense.amount
    if abs(drift) > EPSILON:
        raise DataIntegrityError(
            f"{label}: splits total {expense.split_total} does not match amount {expense.amount}"
        )


def check_settlement(settlement: SettlementRecord, members) -> None:
    """
    Verify a settlement can be folded into a group's ledger.

    Raises:
        DataIntegrityError: amount not positive, or payer / payee outside
            the group.
    """
    label = settlement.reference or 'settlement'

    if settlement.amount <= ZERO:
        raise DataIntegrityError(f"{label}: amount must be greater than 0")
    for role, member in (('payer', settlement.payer), ('payee', settlement.payee)):
        if member not in members:
            raise DataIntegrityError(f"{label}: {role} {member} is not a group member")


def is_zero_sum(balances: Mapping[MemberIdentity, object]) -> bool:
    """True when balances sum to zero within EPSILON. Reports nothing."""
    total = sum((balance_of(v) for v in balances.values()), ZERO)
    return abs(total) <= EPSILON


def check_zero_sum(balances: Mapping[MemberIdentity, object]) -> bool:
    """
    Return True when balances sum to zero within EPSILON.

    An unbalanced ledger is reported through the log and an
    ``UnbalancedLedgerWarning``; it is never an error.
    """
    if is_zero_sum(balances):
        return True

    total = sum((balance_of(v) for v in balances.values()), ZERO)
    logger.warning("Ledger balances sum to %s instead of 0", total)
    warnings.warn(
        f"Ledger balances sum to {total} instead of 0",
        UnbalancedLedgerWarning,
        stacklevel=2,
    )
    return False


def aggregate(
    *,
    members: Iterable[MemberIdentity],
    expenses: Iterable[ExpenseRecord] = (),
    settlements: Iterable[SettlementRecord] = (),
) -> Dict[MemberIdentity, BalanceEntry]:
    """
    Fold expenses and settlements into per-member balances.

    Every member starts at zero, so members with no activity are still
    reported (as settled). Values are rounded to two places once the
    whole history has been folded.

    Args:
        members: All identities of the group.
        expenses: Expense snapshots.
        settlements: Settlement snapshots.

    Returns:
        dict: ``{MemberIdentity: BalanceEntry}`` in member order.

    Raises:
        DataIntegrityError: If any record fails ``check_expense`` or
            ``check_settlement``.
    """
    table = _BalanceTable(members)
    expense_count = settlement_count = 0

    for expense in expenses:
        check_expense(expense, table)
        table.credit(expense.payer, expense.amount, paid=True)
        for split in expense.splits:
            table.debit(split.member, split.share, owed=True)
        expense_count += 1

    for settlement in settlements:
        check_settlement(settlement, table)
        table.credit(settlement.payer, settlement.amount)
        table.debit(settlement.payee, settlement.amount)
        settlement_count += 1

    entries = table.entries()
    logger.debug(
        "Aggregated %d expense(s) and %d settlement(s) for %d member(s)",
        expense_count, settlement_count, len(entries),
    )
    check_zero_sum(entries)
    return entries
