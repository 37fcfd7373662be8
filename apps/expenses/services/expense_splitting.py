"""
Expense splitting.

Equal splits give every participant ``round2(amount / N)``. There is no
remainder absorption: nobody is charged an extra cent to make the shares
add up. The leftover drift is checked with ``reconcile_splits`` and an
expense whose drift exceeds one cent is refused rather than corrected.

    $120.00 among 3 -> 40.00, 40.00, 40.00 (drift 0.00)
    $10.00 among 3  -> 3.33, 3.33, 3.33    (drift -0.01, accepted)
    $0.05 among 6   -> 0.01 x 6            (drift +0.01, accepted)
    $0.10 among 8   -> 0.01 x 8            (drift -0.02, refused)
"""

from decimal import Decimal
from typing import Iterable, List, Sequence, Tuple

from apps.balances.services.domain import EPSILON, ZERO, round2

from .exceptions import InvalidSplitError, NoParticipantsError


def split_equally(amount: Decimal, participants: Sequence) -> List[Tuple[object, Decimal]]:
    """
    Give every participant the same rounded share.

    Args:
        amount: Expense amount.
        participants: Anything; returned paired with its share, in order.

    Returns:
        list of (participant, share) tuples.

    Raises:
        NoParticipantsError: If ``participants`` is empty.
    """
    if not participants:
        raise NoParticipantsError("At least one participant required")

    share = round2(Decimal(amount) / len(participants))
    return [(participant, share) for participant in participants]


def reconcile_splits(amount: Decimal, shares: Iterable[Decimal]) -> Decimal:
    """Return ``sum(shares) - amount``. Zero means the split is exact."""
    return sum(shares, ZERO) - Decimal(amount)


def check_reconciles(amount: Decimal, shares: Iterable[Decimal]) -> Decimal:
    """
    Raises:
        InvalidSplitError: If shares miss the amount by more than EPSILON.
    """
    shares = list(shares)
    drift = reconcile_splits(amount, shares)
    if abs(drift) > EPSILON:
        raise InvalidSplitError(
            f"Split amounts total {sum(shares, ZERO)} but the expense is {amount}"
        )
    return drift
