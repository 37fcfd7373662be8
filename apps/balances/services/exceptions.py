"""
Domain exceptions for the balances app.

Exception Hierarchy:
    BalancesServiceError (base)
    ├── DataIntegrityError
    └── SettlementRejectedError

    UnbalancedLedgerWarning (UserWarning)

``DataIntegrityError`` means a record handed to the engine is unusable
(references a non-member, has duplicate or non-reconciling splits). The
record must be rejected before aggregation; views map it to HTTP 400.

``UnbalancedLedgerWarning`` is informational only. It is logged and
issued through :mod:`warnings`, and computation carries on with whatever
balances exist.

Settlement validation failures are normally returned as a
``ValidationResult``. ``SettlementRejectedError`` only wraps that result
when a caller asked to persist a settlement that failed validation.
"""


class BalancesServiceError(Exception):
    """Base exception for all balances service errors."""
    pass


class DataIntegrityError(BalancesServiceError):
    """Raised when an expense or settlement cannot be folded into the ledger."""
    pass


class SettlementRejectedError(BalancesServiceError):
    """
    Raised by record_settlement when validation rejects the settlement.

    Carries the ``ValidationResult`` so the view can return its reason
    and code.
    """

    def __init__(self, result):
        super().__init__(result.reason)
        self.result = result

    @property
    def code(self):
        return self.result.code


class UnbalancedLedgerWarning(UserWarning):
    """Balances do not sum to zero within tolerance."""
    pass
