"""
Expenses app services layer.

Expense creation validates splits with the balance engine's rules before
anything is written.
"""

from .exceptions import (
    ExpensesServiceError,
    NoParticipantsError,
    InvalidSplitError,
    UnknownParticipantError,
    CurrencyNotAcceptedError,
    ExpenseNotFoundError,
)

from .expense_splitting import (
    split_equally,
    reconcile_splits,
    check_reconciles,
)

from .expense_management import (
    create_expense,
    set_expense_settled,
    get_group_expenses,
)


__all__ = [
    # Exceptions
    'ExpensesServiceError',
    'NoParticipantsError',
    'InvalidSplitError',
    'UnknownParticipantError',
    'CurrencyNotAcceptedError',
    'ExpenseNotFoundError',

    # Splitting
    'split_equally',
    'reconcile_splits',
    'check_reconciles',

    # Expense Management
    'create_expense',
    'set_expense_settled',
    'get_group_expenses',
]
