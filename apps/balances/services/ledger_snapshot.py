"""
Ledger snapshot.

Reads a group's members, expenses and settlements once and converts
them to the balance engine's value types. Everything computed for a
request works from the same snapshot.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple
from uuid import UUID

from django.db.models import Prefetch

from apps.expenses.models import Expense, ExpenseSplit
from apps.groups.models import Group, GroupMember
from apps.groups.services import GroupNotFoundError

from apps.balances.models import Settlement, SettlementStatus

from .domain import ExpenseRecord, MemberIdentity, SettlementRecord


@dataclass
class LedgerSnapshot:
    group: Group
    members: List[GroupMember]
    expenses: List[Expense] = field(default_factory=list)
    settlements: List[Settlement] = field(default_factory=list)
    expense_records: Tuple[ExpenseRecord, ...] = ()
    settlement_records: Tuple[SettlementRecord, ...] = ()

    @property
    def identities(self) -> List[MemberIdentity]:
        return [member.identity() for member in self.members]

    @property
    def currency(self) -> str:
        return self.group.currency

    def member_for(self, identity: MemberIdentity) -> Optional[GroupMember]:
        return self.members_by_key.get(identity.key)

    @property
    def members_by_key(self) -> Dict[str, GroupMember]:
        return {member.email: member for member in self.members}


def load_group_snapshot(
    *,
    group_id: UUID,
    lock: bool = False,
) -> LedgerSnapshot:
    """
    Load everything the balance engine needs for one group.

    Args:
        group_id: UUID of the group
        lock: Take a row lock on the group (caller must be in a transaction)

    Returns:
        LedgerSnapshot

    Raises:
        GroupNotFoundError: If group doesn't exist
    """
    groups = Group.objects.select_for_update() if lock else Group.objects
    try:
        group = groups.get(id=group_id)
    except Group.DoesNotExist:
        raise GroupNotFoundError(f"Group with ID {group_id} not found")

    members = list(
        GroupMember.objects
        .filter(group=group)
        .select_related('user')
        .order_by('invited_at', 'email')
    )

    # All expenses, settled or not. Settlements below cover both.
    expenses = list(
        Expense.objects
        .filter(group=group)
        .select_related('paid_by')
        .prefetch_related(
            Prefetch('splits', queryset=ExpenseSplit.objects.select_related('member'))
        )
        .order_by('date', 'created_at')
    )

    settlements = list(
        Settlement.objects
        .filter(group=group, status=SettlementStatus.COMPLETED)
        .select_related('payer', 'payee')
        .order_by('date', 'created_at')
    )

    return LedgerSnapshot(
        group=group,
        members=members,
        expenses=expenses,
        settlements=settlements,
        expense_records=tuple(expense.to_record() for expense in expenses),
        settlement_records=tuple(settlement.to_record() for settlement in settlements),
    )
