"""
Balances app services layer.

The balance engine (domain, ledger_aggregation, debt_simplification,
settlement_validation, what_if_simulation) is pure Python and never
touches the ORM. The remaining modules load snapshots from the database
and feed them to the engine.
"""

from .exceptions import (
    BalancesServiceError,
    DataIntegrityError,
    SettlementRejectedError,
    UnbalancedLedgerWarning,
)

from .domain import (
    EPSILON,
    round2,
    MemberIdentity,
    Registered,
    Invited,
    identity_for,
    SplitShare,
    ExpenseRecord,
    SettlementRecord,
    BalanceStatus,
    BalanceEntry,
    SimplifiedTransaction,
    BalanceSummary,
    ValidationResult,
    WhatIfResult,
)

from .ledger_aggregation import (
    aggregate,
    check_expense,
    check_settlement,
    check_zero_sum,
    is_zero_sum,
)

from .debt_simplification import (
    simplify,
    suggest_settlements,
)

from .settlement_validation import (
    RejectionCode,
    validate,
)

from .what_if_simulation import (
    simulate,
)

from .ledger_snapshot import (
    LedgerSnapshot,
    load_group_snapshot,
)

from .balance_summary import (
    summarize,
    build_balance_summary,
    get_settlement_suggestions,
    simulate_group_settlements,
    get_member_balance,
    calculate_balance_between,
    get_pairwise_balances,
)

from .settlement_management import (
    check_settlement_proposal,
    record_settlement,
    get_settlement_history,
)

from .activity import (
    get_member_activity,
)


__all__ = [
    # Exceptions
    'BalancesServiceError',
    'DataIntegrityError',
    'SettlementRejectedError',
    'UnbalancedLedgerWarning',

    # Domain
    'EPSILON',
    'round2',
    'MemberIdentity',
    'Registered',
    'Invited',
    'identity_for',
    'SplitShare',
    'ExpenseRecord',
    'SettlementRecord',
    'BalanceStatus',
    'BalanceEntry',
    'SimplifiedTransaction',
    'BalanceSummary',
    'ValidationResult',
    'WhatIfResult',

    # Engine
    'aggregate',
    'check_expense',
    'check_settlement',
    'check_zero_sum',
    'is_zero_sum',
    'simplify',
    'suggest_settlements',
    'RejectionCode',
    'validate',
    'simulate',

    # Snapshots and summaries
    'LedgerSnapshot',
    'load_group_snapshot',
    'summarize',
    'build_balance_summary',
    'get_settlement_suggestions',
    'simulate_group_settlements',
    'get_member_balance',
    'calculate_balance_between',
    'get_pairwise_balances',

    # Settlements
    'check_settlement_proposal',
    'record_settlement',
    'get_settlement_history',

    # Activity
    'get_member_activity',
]
