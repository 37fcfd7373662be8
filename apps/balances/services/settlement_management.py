"""
Settlement management service.

Recording a settlement is the one write that depends on computed
balances, so it runs as a single unit per group:

    lock group row -> load snapshot -> aggregate -> validate -> insert

Two requests for the same group queue on the row lock instead of both
validating against the same stale balances.
"""

import logging
from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

from django.db import transaction
from django.db.models import Q, QuerySet

from apps.accounts.models import User
from apps.balances.models import PaymentMethod, Settlement, SettlementStatus
from apps.groups.services import NotMemberError

from .domain import SettlementRecord, ValidationResult, identity_for
from .exceptions import SettlementRejectedError
from .ledger_aggregation import aggregate
from .ledger_snapshot import LedgerSnapshot, load_group_snapshot
from .settlement_validation import validate

logger = logging.getLogger(__name__)


def _proposal(
    snapshot: LedgerSnapshot,
    *,
    user: User,
    payee_email: str,
    amount: Decimal,
    currency: Optional[str],
    payer_email: Optional[str],
) -> SettlementRecord:
    caller = snapshot.group.get_member_for_user(user)
    if caller is None:
        raise NotMemberError(f"You are not a member of {snapshot.group.name}")

    payer = identity_for(payer_email) if payer_email else caller.identity()
    return SettlementRecord(
        amount=amount,
        currency=(currency or snapshot.currency).upper(),
        payer=payer,
        payee=identity_for(payee_email),
    )


def _validate(snapshot: LedgerSnapshot, proposal: SettlementRecord) -> ValidationResult:
    balances = aggregate(
        members=snapshot.identities,
        expenses=snapshot.expense_records,
        settlements=snapshot.settlement_records,
    )
    return validate(
        proposal,
        group_members=snapshot.identities,
        current_balances=balances,
        accepted_currencies=snapshot.group.get_accepted_currencies(),
    )


def check_settlement_proposal(
    *,
    group_id: UUID,
    user: User,
    payee_email: str,
    amount: Decimal,
    currency: Optional[str] = None,
    payer_email: Optional[str] = None,
) -> ValidationResult:
    """
    Validate a settlement without storing it.

    The payer defaults to the caller.

    Raises:
        GroupNotFoundError: If group doesn't exist
        NotMemberError: If the caller is not in the group
    """
    snapshot = load_group_snapshot(group_id=group_id)
    proposal = _proposal(
        snapshot,
        user=user,
        payee_email=payee_email,
        amount=amount,
        currency=currency,
        payer_email=payer_email,
    )
    return _validate(snapshot, proposal)


@transaction.atomic
def record_settlement(
    *,
    group_id: UUID,
    user: User,
    payee_email: str,
    amount: Decimal,
    currency: Optional[str] = None,
    payer_email: Optional[str] = None,
    date: Optional[datetime] = None,
    payment_method: str = PaymentMethod.CASH,
    comments: str = '',
    status: str = SettlementStatus.COMPLETED,
) -> Settlement:
    """
    Validate and store a settlement.

    Args:
        group_id: UUID of the group
        user: Caller (must be a member)
        payee_email: Member receiving the money
        amount: Amount paid
        currency: Defaults to the group currency
        payer_email: Member paying; defaults to the caller
        date: When the payment happened (default: now)
        payment_method: One of PaymentMethod
        comments: Free text
        status: ``completed`` settlements count towards balances at once

    Returns:
        Created Settlement

    Raises:
        GroupNotFoundError: If group doesn't exist
        NotMemberError: If the caller is not in the group
        SettlementRejectedError: If validation fails (carries the result)
    """
    snapshot = load_group_snapshot(group_id=group_id, lock=True)
    proposal = _proposal(
        snapshot,
        user=user,
        payee_email=payee_email,
        amount=amount,
        currency=currency,
        payer_email=payer_email,
    )

    result = _validate(snapshot, proposal)
    if not result:
        logger.info(
            "Settlement rejected in group %s (%s): %s",
            snapshot.group.id, result.code, result.reason,
        )
        raise SettlementRejectedError(result)

    payer = snapshot.member_for(proposal.payer)
    payee = snapshot.member_for(proposal.payee)

    fields = {}
    if date is not None:
        fields['date'] = date

    settlement = Settlement.objects.create(
        group=snapshot.group,
        payer=payer,
        payee=payee,
        amount=proposal.amount,
        currency=proposal.currency,
        payment_method=payment_method,
        comments=comments,
        status=status,
        created_by=user,
        **fields
    )

    logger.info(
        "Settlement %s recorded in group %s: %s -> %s %s %s",
        settlement.id, snapshot.group.id, payer.email, payee.email,
        settlement.amount, settlement.currency,
    )
    return settlement


def get_settlement_history(
    *,
    group_id: UUID,
    member_email: Optional[str] = None,
    status: Optional[str] = None,
) -> QuerySet[Settlement]:
    """
    Settlements of a group, newest first.

    Args:
        group_id: UUID of the group
        member_email: Only settlements this member paid or received
        status: Only settlements with this status
    """
    queryset = (
        Settlement.objects
        .filter(group_id=group_id)
        .select_related('payer__user', 'payee__user', 'created_by')
    )
    if member_email:
        email = User.objects.normalize_email(member_email)
        queryset = queryset.filter(Q(payer__email=email) | Q(payee__email=email))
    if status:
        queryset = queryset.filter(status=status)
    return queryset
