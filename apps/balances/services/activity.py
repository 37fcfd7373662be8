"""
Member activity.

Line-by-line view of what a member owes and is owed: one line per
expense share between them and another member, one line per settlement
they paid or received. Lines are newest first.
"""

from datetime import date, datetime
from typing import List, Optional
from uuid import UUID

from django.db.models import Q

from apps.accounts.models import User
from apps.balances.models import Settlement
from apps.expenses.models import Expense
from apps.groups.models import GroupMember


def _day(value):
    return value.date() if isinstance(value, datetime) else value


def get_member_activity(
    *,
    group_id: UUID,
    member: GroupMember,
    other_email: Optional[str] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
) -> List[dict]:
    """
    Expense shares and settlements involving ``member``.

    Args:
        group_id: UUID of the group
        member: The member whose activity to list
        other_email: Only lines with this other member
        start_date: Inclusive lower bound
        end_date: Inclusive upper bound

    Returns:
        list of dicts. Expense lines carry ``type='expense'`` and
        ``is_owing`` (member owes the other party); settlement lines carry
        ``type='settlement'`` and ``is_paying``.
    """
    other_email = User.objects.normalize_email(other_email) if other_email else None
    names = {
        m.email: m.get_display_name()
        for m in GroupMember.objects.filter(group_id=group_id).select_related('user')
    }

    expenses = (
        Expense.objects
        .filter(group_id=group_id)
        .filter(Q(paid_by=member) | Q(splits__member=member))
        .select_related('paid_by')
        .prefetch_related('splits__member')
        .distinct()
    )
    settlements = (
        Settlement.objects
        .filter(group_id=group_id)
        .filter(Q(payer=member) | Q(payee=member))
        .select_related('payer', 'payee')
    )
    if start_date:
        expenses = expenses.filter(date__gte=start_date)
        settlements = settlements.filter(date__date__gte=start_date)
    if end_date:
        expenses = expenses.filter(date__lte=end_date)
        settlements = settlements.filter(date__date__lte=end_date)

    lines = []

    for expense in expenses:
        payer_email = expense.paid_by.email
        for split in expense.splits.all():
            owed_by = split.member.email
            if owed_by == payer_email:
                continue
            if member.email not in (owed_by, payer_email):
                continue

            is_owing = owed_by == member.email
            counterpart = payer_email if is_owing else owed_by
            if other_email and counterpart != other_email:
                continue

            lines.append({
                'type': 'expense',
                'expense_id': expense.id,
                'description': expense.description,
                'date': expense.date,
                'amount': split.share,
                'currency': expense.currency,
                'paid_by_email': payer_email,
                'owed_by_email': owed_by,
                'other_party_email': counterpart,
                'other_party_name': names.get(counterpart, counterpart),
                'is_owing': is_owing,
                'settled': expense.settled,
            })

    for settlement in settlements:
        is_paying = settlement.payer_id == member.id
        counterpart = settlement.payee.email if is_paying else settlement.payer.email
        if other_email and counterpart != other_email:
            continue

        lines.append({
            'type': 'settlement',
            'settlement_id': settlement.id,
            'description': settlement.comments or f"Settlement - {settlement.get_payment_method_display()}",
            'date': _day(settlement.date),
            'amount': settlement.amount,
            'currency': settlement.currency,
            'from_email': settlement.payer.email,
            'to_email': settlement.payee.email,
            'other_party_email': counterpart,
            'other_party_name': names.get(counterpart, counterpart),
            'is_paying': is_paying,
            'status': settlement.status,
            'payment_method': settlement.payment_method,
        })

    lines.sort(key=lambda line: line['date'], reverse=True)
    return lines
