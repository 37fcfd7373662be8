"""
Settlement validation and what-if simulation tests (no database).
"""

import pytest
from decimal import Decimal

from apps.balances.services import (
    simulate,
    validate,
    DataIntegrityError,
    Invited,
    RejectionCode,
)
from apps.balances.tests.factories import make_settlement


# =============================================================================
# Validator
# =============================================================================

class TestValidate:
    """Checks run in order; the first failure is reported."""

    def check(self, settlement, members, currencies=('USD',)):
        return validate(settlement, group_members=members, accepted_currencies=currencies)

    def test_valid_settlement(self, trio, alice, bob):
        result = self.check(make_settlement('25.00', alice, bob), trio)

        assert result.ok
        assert bool(result) is True
        assert result.code == ''

    def test_self_payment_rejected(self, trio, alice):
        result = self.check(make_settlement('25.00', alice, alice), trio)

        assert not result
        assert result.code == RejectionCode.SELF_PAYMENT
        assert result.reason

    def test_self_payment_across_identity_variants(self, trio, bob):
        """Paying your own invited identity is still paying yourself."""
        result = self.check(make_settlement('5.00', bob, Invited(email='BOB@example.com')), trio)

        assert result.code == RejectionCode.SELF_PAYMENT

    @pytest.mark.parametrize('amount', ['0.00', '-10.00'])
    def test_non_positive_amount_rejected(self, trio, alice, bob, amount):
        result = self.check(make_settlement(amount, alice, bob), trio)

        assert not result.ok
        assert result.code == RejectionCode.NON_POSITIVE_AMOUNT

    def test_payer_must_be_member(self, trio, alice):
        stranger = Invited(email='stranger@example.com')

        result = self.check(make_settlement('5.00', stranger, alice), trio)

        assert result.code == RejectionCode.PAYER_NOT_MEMBER

    def test_payee_must_be_member(self, trio, alice):
        stranger = Invited(email='stranger@example.com')

        result = self.check(make_settlement('5.00', alice, stranger), trio)

        assert result.code == RejectionCode.PAYEE_NOT_MEMBER

    def test_membership_checked_before_amount(self, trio, alice):
        stranger = Invited(email='stranger@example.com')

        result = self.check(make_settlement('-1.00', alice, stranger), trio)

        assert result.code == RejectionCode.PAYEE_NOT_MEMBER

    def test_currency_must_be_accepted(self, trio, alice, bob):
        result = self.check(make_settlement('5.00', alice, bob, currency='EUR'), trio)

        assert result.code == RejectionCode.CURRENCY_NOT_ACCEPTED

    def test_currency_is_case_insensitive(self, trio, alice, bob):
        result = self.check(make_settlement('5.00', alice, bob, currency='usd'), trio, currencies=('USD', 'eur'))

        assert result.ok

    def test_overpayment_is_allowed(self, trio, alice, bob):
        """Settlements are not capped at the outstanding debt."""
        result = validate(
            make_settlement('500.00', alice, bob),
            group_members=trio,
            current_balances={alice: Decimal('-10.00'), bob: Decimal('10.00')},
            accepted_currencies=['USD'],
        )

        assert result.ok


# =============================================================================
# What-if simulator
# =============================================================================

class TestSimulate:

    @pytest.fixture
    def balances(self, alice, bob, carol):
        return {alice: Decimal('80.00'), bob: Decimal('-40.00'), carol: Decimal('-40.00')}

    def test_projection(self, balances, alice, bob):
        result = simulate(balances, [make_settlement('40.00', bob, alice)])

        assert result.projected[bob] == Decimal('0.00')
        assert result.projected[alice] == Decimal('40.00')
        assert result.remaining_non_zero == 2

    def test_current_snapshot_is_untouched(self, balances, alice, bob):
        original = dict(balances)

        result = simulate(balances, [make_settlement('40.00', bob, alice)])

        assert balances == original
        assert result.current == original

    def test_full_settlement_clears_everyone(self, balances, alice, bob, carol):
        result = simulate(balances, [
            make_settlement('40.00', bob, alice),
            make_settlement('40.00', carol, alice),
        ])

        assert result.remaining_non_zero == 0
        assert len(result.settlements) == 2

    def test_no_proposals(self, balances):
        result = simulate(balances, [])

        assert result.projected == result.current
        assert result.remaining_non_zero == 3

    def test_unknown_member_rejected(self, balances, alice):
        stranger = Invited(email='stranger@example.com')

        with pytest.raises(DataIntegrityError):
            simulate(balances, [make_settlement('5.00', stranger, alice)])
