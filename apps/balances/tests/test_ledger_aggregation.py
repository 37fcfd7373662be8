"""
Ledger aggregation tests.

Pure engine tests, no database:
- Member identity equality
- Expense and settlement folding, zero-sum invariant
- Integrity checks on incoming records
"""

import pytest
from decimal import Decimal

from apps.balances.services import (
    aggregate,
    check_zero_sum,
    identity_for,
    BalanceStatus,
    DataIntegrityError,
    Invited,
    Registered,
    UnbalancedLedgerWarning,
)
from apps.balances.services.domain import round2, classify
from apps.balances.tests.factories import make_expense, make_settlement


def total(entries):
    return sum((e.balance for e in entries.values()), Decimal('0'))


# =============================================================================
# Identity
# =============================================================================

class TestMemberIdentity:
    """Equality is by normalized email, whatever the variant."""

    def test_registered_equals_invited_with_same_email(self):
        """A member keeps one identity before and after registering."""
        invited = Invited(email='Dana@Example.com ')
        registered = Registered(email='dana@example.com', user_id='u1')

        assert invited == registered
        assert hash(invited) == hash(registered)
        assert len({invited, registered}) == 1

    def test_different_emails_differ(self):
        assert Invited(email='a@example.com') != Invited(email='b@example.com')

    def test_identity_for_picks_variant(self):
        """Account id makes a Registered identity."""
        assert isinstance(identity_for('x@example.com'), Invited)

        registered = identity_for('X@Example.com', account_id='u9')
        assert isinstance(registered, Registered)
        assert registered.account_id == 'u9'
        assert registered.email == 'x@example.com'


class TestRounding:

    def test_round2_is_half_up(self):
        assert round2(Decimal('0.125')) == Decimal('0.13')
        assert round2(Decimal('-0.125')) == Decimal('-0.13')
        assert round2(Decimal('3.334')) == Decimal('3.33')

    def test_round2_stores_whole_cents(self):
        assert str(round2(5)) == '5.00'
        assert str(round2(Decimal('0.005'))) == '0.01'

    def test_classify_uses_strict_tolerance(self):
        """Exactly one cent is still settled."""
        assert classify(Decimal('0.01')) == BalanceStatus.SETTLED
        assert classify(Decimal('-0.01')) == BalanceStatus.SETTLED
        assert classify(Decimal('0.02')) == BalanceStatus.OWED
        assert classify(Decimal('-0.02')) == BalanceStatus.OWES


# =============================================================================
# Aggregation
# =============================================================================

class TestAggregate:
    """Tests for aggregate()."""

    def test_equal_split_scenario(self, trio, alice, bob, carol):
        """$120 paid by alice, split three ways."""
        expense = make_expense('120.00', alice, [(alice, '40.00'), (bob, '40.00'), (carol, '40.00')])

        entries = aggregate(members=trio, expenses=[expense])

        assert entries[alice].balance == Decimal('80.00')
        assert entries[bob].balance == Decimal('-40.00')
        assert entries[carol].balance == Decimal('-40.00')
        assert entries[alice].total_paid == Decimal('120.00')
        assert entries[alice].total_owed == Decimal('40.00')
        assert entries[alice].status == BalanceStatus.OWED
        assert entries[bob].status == BalanceStatus.OWES

    def test_two_unequal_expenses(self, trio, alice, bob, carol):
        """Unequal shares across two expenses still sum to zero."""
        expenses = [
            make_expense('150.50', bob, [(alice, '50.25'), (bob, '75.25'), (carol, '25.00')]),
            make_expense('45.00', alice, [(alice, '22.50'), (bob, '22.50')]),
        ]

        entries = aggregate(members=trio, expenses=expenses)

        assert entries[alice].balance == Decimal('-27.75')
        assert entries[bob].balance == Decimal('52.75')
        assert entries[carol].balance == Decimal('-25.00')
        assert abs(total(entries)) <= Decimal('0.01')

    def test_settlement_shifts_both_sides(self, trio, alice, bob):
        """A pays B x: A += x, B -= x."""
        before = aggregate(members=trio)
        after = aggregate(members=trio, settlements=[make_settlement('15.00', alice, bob)])

        assert after[alice].balance - before[alice].balance == Decimal('15.00')
        assert after[bob].balance - before[bob].balance == Decimal('-15.00')

    def test_settlement_cancels_debt(self, trio, alice, bob, carol):
        expense = make_expense('120.00', alice, [(alice, '40.00'), (bob, '40.00'), (carol, '40.00')])

        entries = aggregate(
            members=trio,
            expenses=[expense],
            settlements=[make_settlement('40.00', bob, alice)],
        )

        assert entries[bob].balance == Decimal('0.00')
        assert entries[bob].status == BalanceStatus.SETTLED
        assert entries[alice].balance == Decimal('40.00')

    def test_members_without_activity_are_settled(self, trio, carol):
        entries = aggregate(members=trio)

        assert len(entries) == 3
        assert entries[carol].balance == Decimal('0.00')
        assert entries[carol].status == BalanceStatus.SETTLED

    def test_invited_and_registered_share_one_row(self, alice, bob):
        """Records naming the invited identity land on the registered member."""
        dana_invited = Invited(email='dana@example.com')
        dana_registered = Registered(email='dana@example.com', user_id='u-dana')
        expense = make_expense('30.00', dana_invited, [(dana_invited, '10.00'), (alice, '10.00'), (bob, '10.00')])

        entries = aggregate(members=[alice, bob, dana_invited, dana_registered], expenses=[expense])

        assert len(entries) == 3
        dana_entry = entries[dana_registered]
        assert dana_entry.balance == Decimal('20.00')
        assert dana_entry.member.is_registered

    def test_within_tolerance_split_is_accepted(self, trio, alice, bob, carol):
        """$10 split as 3.33 x 3 drifts by one cent and is folded."""
        expense = make_expense('10.00', alice, [(alice, '3.33'), (bob, '3.33'), (carol, '3.33')])

        entries = aggregate(members=trio, expenses=[expense])

        assert entries[alice].balance == Decimal('6.67')
        assert abs(total(entries)) <= Decimal('0.01')

    def test_zero_sum_over_many_records(self, trio, alice, bob, carol):
        expenses = [
            make_expense('60.00', alice, [(alice, '20.00'), (bob, '20.00'), (carol, '20.00')]),
            make_expense('33.30', bob, [(bob, '11.10'), (carol, '22.20')]),
            make_expense('9.99', carol, [(alice, '9.99')]),
        ]
        settlements = [
            make_settlement('5.00', carol, alice),
            make_settlement('12.34', alice, bob),
        ]

        entries = aggregate(members=trio, expenses=expenses, settlements=settlements)

        assert abs(total(entries)) <= Decimal('0.01')


# =============================================================================
# Integrity checks
# =============================================================================

class TestAggregateIntegrity:
    """Records that cannot be folded raise DataIntegrityError."""

    def test_non_member_payer(self, trio, alice):
        stranger = Invited(email='stranger@example.com')
        expense = make_expense('10.00', stranger, [(alice, '10.00')])

        with pytest.raises(DataIntegrityError, match='payer'):
            aggregate(members=trio, expenses=[expense])

    def test_non_member_in_splits(self, trio, alice):
        stranger = Invited(email='stranger@example.com')
        expense = make_expense('10.00', alice, [(stranger, '10.00')])

        with pytest.raises(DataIntegrityError, match='not a group member'):
            aggregate(members=trio, expenses=[expense])

    def test_duplicate_split_member(self, trio, alice, bob):
        """Same email twice counts as a duplicate even across variants."""
        bob_invited = Invited(email=bob.email)
        expense = make_expense('20.00', alice, [(bob, '10.00'), (bob_invited, '10.00')])

        with pytest.raises(DataIntegrityError, match='more than once'):
            aggregate(members=trio, expenses=[expense])

    def test_splits_not_reconciling(self, trio, alice, bob):
        expense = make_expense('20.00', alice, [(alice, '10.00'), (bob, '9.98')])

        with pytest.raises(DataIntegrityError, match='does not match'):
            aggregate(members=trio, expenses=[expense])

    def test_empty_splits(self, trio, alice):
        expense = make_expense('20.00', alice, [])

        with pytest.raises(DataIntegrityError):
            aggregate(members=trio, expenses=[expense])

    def test_non_positive_amount(self, trio, alice):
        expense = make_expense('0.00', alice, [(alice, '0.00')])

        with pytest.raises(DataIntegrityError, match='greater than 0'):
            aggregate(members=trio, expenses=[expense])

    def test_settlement_with_non_member(self, trio, alice):
        stranger = Invited(email='stranger@example.com')

        with pytest.raises(DataIntegrityError, match='payee'):
            aggregate(members=trio, settlements=[make_settlement('5.00', alice, stranger)])


class TestZeroSumCheck:

    def test_balanced_map_passes(self, alice, bob):
        assert check_zero_sum({alice: Decimal('10.00'), bob: Decimal('-10.00')}) is True

    def test_unbalanced_map_warns(self, alice, bob):
        """Imbalance is reported, never raised."""
        with pytest.warns(UnbalancedLedgerWarning):
            result = check_zero_sum({alice: Decimal('10.00'), bob: Decimal('-9.00')})

        assert result is False
