"""
Ledger domain types.

Plain, immutable value objects shared by the balance engine. Nothing in
this module touches the ORM: records are built from database rows by
``ledger_snapshot`` and everything downstream works on these types only.

Money is always ``Decimal``. Amounts are compared against ``EPSILON``
(one cent) and rounded with ``round2`` (two places, half-up) after each
computation.
"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, Optional, Tuple


# Tolerance for zero, reconciliation and status comparisons
EPSILON = Decimal('0.01')
# Quantization exponent for round2, the smallest stored money unit
CENT = Decimal('0.01')
ZERO = Decimal('0.00')


def round2(value) -> Decimal:
    """Round a money value to two places, half-up."""
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def normalize_email(email: str) -> str:
    return (email or '').strip().lower()


# =============================================================================
# Member identity
# =============================================================================

@dataclass(frozen=True, eq=False)
class MemberIdentity:
    """
    Stable key for a participant in a group.

    Two identities are equal when their normalized emails are equal,
    whichever variant they are. An account id is an optional enrichment
    and never part of equality, so the same person recorded before and
    after registering is still one member.
    """

    email: str

    @property
    def key(self) -> str:
        return normalize_email(self.email)

    @property
    def is_registered(self) -> bool:
        return False

    @property
    def account_id(self):
        return None

    def __eq__(self, other):
        if not isinstance(other, MemberIdentity):
            return NotImplemented
        return self.key == other.key

    def __hash__(self):
        return hash(self.key)

    def __str__(self):
        return self.key


@dataclass(frozen=True, eq=False)
class Registered(MemberIdentity):
    """Member with a linked account."""

    user_id: object = None

    @property
    def is_registered(self) -> bool:
        return True

    @property
    def account_id(self):
        return self.user_id


@dataclass(frozen=True, eq=False)
class Invited(MemberIdentity):
    """Member known only by email (no account yet)."""


def identity_for(email: str, account_id=None) -> MemberIdentity:
    """Build the right identity variant for an email and optional account id."""
    if account_id is not None:
        return Registered(email=normalize_email(email), user_id=account_id)
    return Invited(email=normalize_email(email))


# =============================================================================
# Ledger records (inputs)
# =============================================================================

@dataclass(frozen=True)
class SplitShare:
    member: MemberIdentity
    share: Decimal


@dataclass(frozen=True)
class ExpenseRecord:
    """Snapshot of one expense: who paid, and who owes which share."""

    amount: Decimal
    currency: str
    payer: MemberIdentity
    splits: Tuple[SplitShare, ...]
    reference: Optional[str] = None
    description: str = ''

    @property
    def split_total(self) -> Decimal:
        return sum((s.share for s in self.splits), ZERO)


@dataclass(frozen=True)
class SettlementRecord:
    """Snapshot of a payment from ``payer`` to ``payee``."""

    amount: Decimal
    currency: str
    payer: MemberIdentity
    payee: MemberIdentity
    timestamp: Optional[datetime] = None
    reference: Optional[str] = None


# =============================================================================
# Derived values (outputs)
# =============================================================================

class BalanceStatus:
    OWED = 'owed'
    OWES = 'owes'
    SETTLED = 'settled'


def classify(balance: Decimal) -> str:
    """Positive balances are owed money, negative ones owe money."""
    if balance > EPSILON:
        return BalanceStatus.OWED
    if balance < -EPSILON:
        return BalanceStatus.OWES
    return BalanceStatus.SETTLED


@dataclass(frozen=True)
class BalanceEntry:
    member: MemberIdentity
    balance: Decimal = ZERO
    total_paid: Decimal = ZERO
    total_owed: Decimal = ZERO

    @property
    def status(self) -> str:
        return classify(self.balance)


@dataclass(frozen=True)
class SimplifiedTransaction:
    from_member: MemberIdentity
    to_member: MemberIdentity
    amount: Decimal
    currency: Optional[str] = None

    def involves(self, member: MemberIdentity) -> bool:
        return member == self.from_member or member == self.to_member


@dataclass(frozen=True)
class BalanceSummary:
    """Everything the balances endpoint reports for one group."""

    per_member: Tuple[BalanceEntry, ...]
    simplified_transactions: Tuple[SimplifiedTransaction, ...]
    total_expenses: Decimal
    total_settlements: Decimal
    currency: str
    expense_count: int = 0
    settlement_count: int = 0
    total_owed: Decimal = ZERO
    total_credit: Decimal = ZERO
    is_balanced: bool = True
    calculated_at: Optional[datetime] = None

    @property
    def transaction_count(self) -> int:
        return len(self.simplified_transactions)


@dataclass(frozen=True)
class ValidationResult:
    """
    Outcome of checking a proposed settlement.

    Rejections are values, not exceptions, so callers can show the
    reason to the user.
    """

    ok: bool
    reason: str = ''
    code: str = ''

    @classmethod
    def accept(cls) -> 'ValidationResult':
        return cls(ok=True)

    @classmethod
    def reject(cls, reason: str, code: str) -> 'ValidationResult':
        return cls(ok=False, reason=reason, code=code)

    def __bool__(self):
        return self.ok


@dataclass(frozen=True)
class WhatIfResult:
    current: Dict[MemberIdentity, Decimal]
    projected: Dict[MemberIdentity, Decimal]
    remaining_non_zero: int
    settlements: Tuple[SettlementRecord, ...] = field(default_factory=tuple)
