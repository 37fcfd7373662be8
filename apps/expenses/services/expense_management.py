"""
Expense management service.

Creates expenses with either an equal split or explicit shares, and
toggles the ``settled`` flag. Every expense is checked with the balance
engine's own rules before it is stored, so anything saved here can be
aggregated.
"""

import logging
from datetime import date as date_type
from decimal import Decimal
from typing import List, Optional, Sequence, Tuple
from uuid import UUID

from django.db import transaction
from django.db.models import QuerySet
from django.utils import timezone

from apps.accounts.models import User
from apps.balances.services.domain import ExpenseRecord, SplitShare
from apps.balances.services.ledger_aggregation import check_expense
from apps.expenses.models import Expense, ExpenseSplit
from apps.groups.models import Group, GroupMember
from apps.groups.services import GroupNotFoundError, NotMemberError

from .exceptions import (
    CurrencyNotAcceptedError,
    ExpenseNotFoundError,
    UnknownParticipantError,
)
from .expense_splitting import check_reconciles, split_equally

logger = logging.getLogger(__name__)


def _members_by_email(group: Group, emails: Sequence[str]) -> List[GroupMember]:
    normalized = [User.objects.normalize_email(email) for email in emails]
    found = {
        m.email: m
        for m in GroupMember.objects.filter(group=group, email__in=normalized).select_related('user')
    }
    missing = [email for email in normalized if email not in found]
    if missing:
        raise UnknownParticipantError(
            f"Not members of {group.name}: {', '.join(sorted(set(missing)))}"
        )
    return [found[email] for email in normalized]


@transaction.atomic
def create_expense(
    *,
    group_id: UUID,
    created_by: User,
    description: str,
    amount: Decimal,
    currency: Optional[str] = None,
    paid_by_email: Optional[str] = None,
    split_among: Optional[Sequence[str]] = None,
    splits: Optional[Sequence[Tuple[str, Decimal]]] = None,
    date: Optional[date_type] = None,
    comments: str = '',
) -> Expense:
    """
    Record an expense and its splits.

    The group row is locked for the duration so expenses and settlements
    for one group are written one at a time.

    Args:
        group_id: UUID of the group
        created_by: User recording the expense (must be a member)
        description: What the money was spent on
        amount: Total paid
        currency: Defaults to the group currency
        paid_by_email: Payer; defaults to the creator's membership
        split_among: Emails to split equally between (default: everyone)
        splits: Explicit ``(email, share)`` pairs; overrides split_among
        date: Defaults to today
        comments: Free text

    Returns:
        Created Expense with splits

    Raises:
        GroupNotFoundError: If group doesn't exist
        NotMemberError: If created_by is not in the group
        CurrencyNotAcceptedError: If the group does not use ``currency``
        UnknownParticipantError: If an email is not a group member
        NoParticipantsError: If there is nobody to split between
        InvalidSplitError: If shares miss the amount by more than a cent
        DataIntegrityError: If the expense breaks any other ledger rule
    """
    try:
        group = Group.objects.select_for_update().get(id=group_id)
    except Group.DoesNotExist:
        raise GroupNotFoundError(f"Group with ID {group_id} not found")

    creator = group.get_member_for_user(created_by)
    if creator is None:
        raise NotMemberError(f"You are not a member of {group.name}")

    currency = (currency or group.currency).upper()
    if currency not in group.get_accepted_currencies():
        raise CurrencyNotAcceptedError(f"{currency} is not accepted by {group.name}")

    payer = _members_by_email(group, [paid_by_email])[0] if paid_by_email else creator

    if splits:
        members = _members_by_email(group, [email for email, _ in splits])
        shares = list(zip(members, [Decimal(share) for _, share in splits]))
    else:
        if split_among:
            participants = _members_by_email(group, split_among)
        else:
            participants = list(group.members.select_related('user'))
        shares = split_equally(amount, participants)

    check_reconciles(amount, [share for _, share in shares])

    record = ExpenseRecord(
        amount=amount,
        currency=currency,
        payer=payer.identity(),
        splits=tuple(SplitShare(member=m.identity(), share=s) for m, s in shares),
        description=description,
    )
    check_expense(record, [m.identity() for m in group.members.all()])

    expense = Expense.objects.create(
        group=group,
        description=description,
        amount=amount,
        currency=currency,
        paid_by=payer,
        date=date or timezone.localdate(),
        comments=comments,
        created_by=created_by,
    )
    ExpenseSplit.objects.bulk_create([
        ExpenseSplit(expense=expense, member=member, share=share)
        for member, share in shares
    ])

    logger.info(
        "Expense %s of %s %s recorded in group %s (%d split(s))",
        expense.id, amount, currency, group.id, len(shares),
    )
    return expense


@transaction.atomic
def set_expense_settled(*, expense_id: UUID, user: User, settled: bool = True) -> Expense:
    """
    Mark an expense settled (or unsettled).

    Settled expenses are left out of balances by default.

    Raises:
        ExpenseNotFoundError: If the expense doesn't exist
        NotMemberError: If user is not in the expense's group
    """
    try:
        expense = Expense.objects.select_for_update().select_related('group').get(id=expense_id)
    except Expense.DoesNotExist:
        raise ExpenseNotFoundError()

    if not expense.group.has_member(user):
        raise NotMemberError(f"You are not a member of {expense.group.name}")

    expense.settled = settled
    expense.save(update_fields=['settled', 'updated_at'])
    return expense


def get_group_expenses(*, group_id: UUID, include_settled: bool = True) -> QuerySet[Expense]:
    """Expenses of a group, newest first, with payer and splits loaded."""
    queryset = (
        Expense.objects
        .filter(group_id=group_id)
        .select_related('paid_by__user', 'created_by')
        .prefetch_related('splits__member__user')
    )
    if not include_settled:
        queryset = queryset.filter(settled=False)
    return queryset
