"""
Domain exceptions for expenses app.

Service errors derive from ``ExpensesServiceError`` and are converted to
HTTP responses in views. ``InvalidSplitError`` is also a
``DataIntegrityError``: a split that does not reconcile can never be
folded into the ledger.
"""
from rest_framework.exceptions import APIException

from apps.balances.services.exceptions import DataIntegrityError


class ExpensesServiceError(Exception):
    """Base exception for expense service errors."""
    pass


class NoParticipantsError(ExpensesServiceError):
    """Raised when an expense has nobody to split between."""
    pass


class InvalidSplitError(ExpensesServiceError, DataIntegrityError):
    """Raised when shares do not add up to the expense amount."""
    pass


class UnknownParticipantError(ExpensesServiceError):
    """Raised when a payer or participant email is not in the group."""
    pass


class CurrencyNotAcceptedError(ExpensesServiceError):
    """Raised when the expense currency is not one the group uses."""
    pass


class ExpenseNotFoundError(APIException):
    """Expense not found."""
    status_code = 404
    default_detail = 'Expense not found.'
    default_code = 'expense_not_found'
