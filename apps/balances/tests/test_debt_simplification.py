"""
Debt simplification tests (no database).

Tests cover:
- Known scenarios
- Correctness: applying the payments zeroes every balance
- Transaction count bound
- Unbalanced input
- Settlement suggestions and statistics
"""

import pytest
from decimal import Decimal

from apps.balances.services import (
    aggregate,
    simplify,
    simulate,
    suggest_settlements,
    Invited,
    SettlementRecord,
    UnbalancedLedgerWarning,
)
from apps.balances.tests.factories import make_expense


def apply(balances, transactions):
    """Project balances after paying every transaction."""
    payments = [
        SettlementRecord(amount=t.amount, currency=t.currency, payer=t.from_member, payee=t.to_member)
        for t in transactions
    ]
    return simulate(balances, payments).projected


def as_tuples(transactions):
    return {(t.from_member.email, t.to_member.email, t.amount) for t in transactions}


# =============================================================================
# Scenarios
# =============================================================================

class TestSimplifyScenarios:

    def test_one_payer_two_debtors(self, trio, alice, bob, carol):
        """$120 by alice split three ways: bob and carol each pay alice 40."""
        expense = make_expense('120.00', alice, [(alice, '40.00'), (bob, '40.00'), (carol, '40.00')])
        entries = aggregate(members=trio, expenses=[expense])

        transactions = simplify(entries, currency='USD')

        assert len(transactions) == 2
        assert as_tuples(transactions) == {
            ('bob@example.com', 'alice@example.com', Decimal('40.00')),
            ('carol@example.com', 'alice@example.com', Decimal('40.00')),
        }
        assert all(t.currency == 'USD' for t in transactions)

    def test_two_unequal_expenses(self, trio, alice, bob, carol):
        """Largest debtor pays first."""
        expenses = [
            make_expense('150.50', bob, [(alice, '50.25'), (bob, '75.25'), (carol, '25.00')]),
            make_expense('45.00', alice, [(alice, '22.50'), (bob, '22.50')]),
        ]
        entries = aggregate(members=trio, expenses=expenses)

        transactions = simplify(entries)

        assert [(t.from_member, t.to_member, t.amount) for t in transactions] == [
            (alice, bob, Decimal('27.75')),
            (carol, bob, Decimal('25.00')),
        ]

    def test_settled_group_needs_no_payments(self, trio):
        entries = aggregate(members=trio)

        assert simplify(entries) == []

    def test_balances_within_tolerance_are_ignored(self, alice, bob):
        """One-cent residue is not worth a payment."""
        assert simplify({alice: Decimal('0.01'), bob: Decimal('-0.01')}) == []

    def test_accepts_plain_decimal_map(self, alice, bob):
        transactions = simplify({alice: Decimal('12.50'), bob: Decimal('-12.50')})

        assert len(transactions) == 1
        assert transactions[0].from_member == bob
        assert transactions[0].amount == Decimal('12.50')


# =============================================================================
# Properties
# =============================================================================

class TestSimplifyProperties:
    """Correctness and size bound on a larger group."""

    @pytest.fixture
    def balances(self):
        people = [Invited(email=f'p{i}@example.com') for i in range(6)]
        amounts = ['45.10', '-12.35', '30.00', '-50.00', '-20.75', '8.00']
        return dict(zip(people, (Decimal(a) for a in amounts)))

    def test_payments_zero_every_balance(self, balances):
        projected = apply(balances, simplify(balances))

        assert all(abs(b) <= Decimal('0.01') for b in projected.values())

    def test_transaction_count_bound(self, balances):
        non_zero = sum(1 for b in balances.values() if abs(b) > Decimal('0.01'))

        assert len(simplify(balances)) <= non_zero - 1

    def test_payments_go_from_debtors_to_creditors(self, balances):
        for t in simplify(balances):
            assert balances[t.from_member] < 0
            assert balances[t.to_member] > 0
            assert t.amount > Decimal('0.01')

    def test_input_is_not_modified(self, balances):
        original = dict(balances)

        simplify(balances)

        assert balances == original


class TestSimplifyUnbalanced:

    def test_residue_is_reported(self, alice, bob, carol):
        """Leftover credit warns and the matched payments are still returned."""
        balances = {alice: Decimal('50.00'), bob: Decimal('-30.00'), carol: Decimal('-10.00')}

        with pytest.warns(UnbalancedLedgerWarning):
            transactions = simplify(balances)

        assert sum((t.amount for t in transactions), Decimal('0')) == Decimal('40.00')


# =============================================================================
# Suggestions
# =============================================================================

class TestSuggestSettlements:

    def test_statistics(self, alice, bob, carol):
        """Two debtors and one creditor: nothing to save over direct payments."""
        balances = {alice: Decimal('80.00'), bob: Decimal('-40.00'), carol: Decimal('-40.00')}

        result = suggest_settlements(balances, currency='USD')

        assert len(result['recommendations']) == 2
        assert result['creditor_count'] == 1
        assert result['debtor_count'] == 2
        assert result['is_balanced'] is True
        assert result['optimization'] == {
            'original_possible_transactions': 2,
            'optimized_transactions': 2,
            'transactions_saved': 0,
            'efficiency_improvement': '0.0%',
        }
        assert any('2 transaction(s)' in tip for tip in result['tips'])

    def test_savings_on_a_larger_group(self):
        people = [Invited(email=f'p{i}@example.com') for i in range(4)]
        balances = dict(zip(people, [Decimal('30.00'), Decimal('10.00'), Decimal('-20.00'), Decimal('-20.00')]))

        result = suggest_settlements(balances)

        stats = result['optimization']
        assert stats['original_possible_transactions'] == 4
        assert stats['optimized_transactions'] == 3
        assert stats['transactions_saved'] == 1
        assert stats['efficiency_improvement'] == '25.0%'

    def test_settled_group(self, alice, bob):
        result = suggest_settlements({alice: Decimal('0.00'), bob: Decimal('0.00')})

        assert result['recommendations'] == []
        assert result['optimization']['efficiency_improvement'] == '0%'
        assert result['tips'][0] == "All debts are settled. No transactions needed."
