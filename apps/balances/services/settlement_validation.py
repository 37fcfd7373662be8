"""
Settlement validation.

Gates a proposed settlement before it is stored. Checks run in a fixed
order and the first failure wins:

    a. payer and payee both belong to the group
    b. payer and payee differ
    c. amount is greater than zero
    d. currency is one the group accepts

Failures come back as a rejected ``ValidationResult`` carrying a
human-readable reason and a stable ``code``; nothing here raises.
"""

import logging
from typing import Iterable, Mapping, Optional

from .domain import ZERO, MemberIdentity, SettlementRecord, ValidationResult

logger = logging.getLogger(__name__)


class RejectionCode:
    PAYER_NOT_MEMBER = 'payer_not_member'
    PAYEE_NOT_MEMBER = 'payee_not_member'
    SELF_PAYMENT = 'self_payment'
    NON_POSITIVE_AMOUNT = 'non_positive_amount'
    CURRENCY_NOT_ACCEPTED = 'currency_not_accepted'


def validate(
    settlement: SettlementRecord,
    *,
    group_members: Iterable[MemberIdentity],
    current_balances: Optional[Mapping[MemberIdentity, object]] = None,
    accepted_currencies: Iterable[str] = (),
) -> ValidationResult:
    """
    Check a proposed settlement against the group.

    ``current_balances`` is accepted but not consulted: settlements larger
    than the outstanding debt between the two members are allowed.

    Args:
        settlement: The proposed payment.
        group_members: Identities of the group's members.
        current_balances: Balance snapshot for the group.
        accepted_currencies: Currency codes the group takes. Compared
            case-insensitively.

    Returns:
        ValidationResult: ``ok`` or rejected with ``reason`` and ``code``.
    """
    members = {member.key for member in group_members}

    if settlement.payer.key not in members:
        return ValidationResult.reject(
            f"Payer {settlement.payer} is not a member of this group",
            RejectionCode.PAYER_NOT_MEMBER,
        )
    if settlement.payee.key not in members:
        return ValidationResult.reject(
            f"Payee {settlement.payee} is not a member of this group",
            RejectionCode.PAYEE_NOT_MEMBER,
        )

    if settlement.payer == settlement.payee:
        return ValidationResult.reject(
            "Cannot record a settlement with yourself",
            RejectionCode.SELF_PAYMENT,
        )

    if settlement.amount is None or settlement.amount <= ZERO:
        return ValidationResult.reject(
            "Settlement amount must be greater than 0",
            RejectionCode.NON_POSITIVE_AMOUNT,
        )

    accepted = {code.upper() for code in accepted_currencies}
    currency = (settlement.currency or '').upper()
    if currency not in accepted:
        return ValidationResult.reject(
            f"Currency {currency or '(none)'} is not accepted by this group",
            RejectionCode.CURRENCY_NOT_ACCEPTED,
        )

    return ValidationResult.accept()
