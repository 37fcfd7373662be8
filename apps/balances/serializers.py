"""
Serializers for balances app.

This module contains:
1. Input serializers - Request body and query parameter validation
2. Response serializers - Output formatting for the balance engine's
   value types and for stored settlements

The engine works with ``MemberIdentity`` values that only know an email.
Response serializers resolve them against the ``members`` context entry
(``{email: GroupMember}``) to add display names and member ids.
"""

from decimal import Decimal

from rest_framework import serializers

from apps.groups.serializers import GroupMemberSerializer

from .models import PaymentMethod, Settlement, SettlementStatus


def _money(**kwargs):
    return serializers.DecimalField(max_digits=14, decimal_places=2, **kwargs)


# =============================================================================
# Input Serializers
# =============================================================================

class ActivityQuerySerializer(serializers.Serializer):
    """
    Query parameters for the caller's debt activity.

    Query Parameters:
        other_email (str): Only lines with this member
        start_date (date): Start of date range
        end_date (date): End of date range
    """

    other_email = serializers.EmailField(required=False)
    start_date = serializers.DateField(required=False)
    end_date = serializers.DateField(required=False)

    def validate(self, attrs):
        start = attrs.get('start_date')
        end = attrs.get('end_date')
        if start and end and start > end:
            raise serializers.ValidationError({
                'start_date': 'Start date must be before end date'
            })
        return attrs


class SettlementQuerySerializer(serializers.Serializer):
    """Query parameters for settlement history."""

    member_email = serializers.EmailField(required=False)
    status = serializers.ChoiceField(choices=SettlementStatus.choices, required=False)


class SettlementProposalSerializer(serializers.Serializer):
    """
    A settlement to validate.

    ``amount`` is not range-checked here: zero and negative amounts reach
    the validator, which rejects them with a reason and code.
    """

    payee_email = serializers.EmailField()
    amount = serializers.DecimalField(max_digits=12, decimal_places=2)
    currency = serializers.CharField(required=False, min_length=3, max_length=3)
    payer_email = serializers.EmailField(required=False, help_text='Defaults to the caller')


class SettlementCreateSerializer(SettlementProposalSerializer):
    """A settlement to record."""

    date = serializers.DateTimeField(required=False)
    payment_method = serializers.ChoiceField(choices=PaymentMethod.choices, default=PaymentMethod.CASH)
    comments = serializers.CharField(required=False, allow_blank=True, default='')
    status = serializers.ChoiceField(choices=SettlementStatus.choices, default=SettlementStatus.COMPLETED)


class ProposedSettlementSerializer(serializers.Serializer):
    payer_email = serializers.EmailField()
    payee_email = serializers.EmailField()
    amount = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal('0.01'))


class WhatIfRequestSerializer(serializers.Serializer):
    """
    Hypothetical settlements to project.

    Either list the payments, or set ``apply_suggestions`` to try the
    suggested ones (or both).
    """

    settlements = ProposedSettlementSerializer(many=True, required=False, default=list)
    apply_suggestions = serializers.BooleanField(required=False, default=False)


# =============================================================================
# Response Serializers
# =============================================================================

def describe_identity(identity, members):
    member = members.get(identity.key)
    return {
        'email': identity.key,
        'member_id': str(member.id) if member else None,
        'display_name': member.get_display_name() if member else identity.key,
        'is_registered': identity.is_registered,
    }


class MemberIdentityField(serializers.Field):
    """Render a MemberIdentity with details from the ``members`` context."""

    def to_representation(self, identity):
        return describe_identity(identity, self.context.get('members', {}))


class BalanceEntrySerializer(serializers.Serializer):
    member = MemberIdentityField(read_only=True)
    balance = _money(read_only=True)
    total_paid = _money(read_only=True)
    total_owed = _money(read_only=True)
    status = serializers.CharField(read_only=True)


class SimplifiedTransactionSerializer(serializers.Serializer):
    from_member = MemberIdentityField(read_only=True)
    to_member = MemberIdentityField(read_only=True)
    amount = _money(read_only=True)
    currency = serializers.CharField(read_only=True, allow_null=True)


class BalanceSummarySerializer(serializers.Serializer):
    """Per-member balances and the payments that settle them."""

    balances = BalanceEntrySerializer(source='per_member', many=True, read_only=True)
    simplified_transactions = SimplifiedTransactionSerializer(many=True, read_only=True)
    total_expenses = _money(read_only=True)
    total_settlements = _money(read_only=True)
    total_owed = _money(read_only=True)
    total_credit = _money(read_only=True)
    currency = serializers.CharField(read_only=True)
    expense_count = serializers.IntegerField(read_only=True)
    settlement_count = serializers.IntegerField(read_only=True)
    transaction_count = serializers.IntegerField(read_only=True)
    is_balanced = serializers.BooleanField(read_only=True)
    calculated_at = serializers.DateTimeField(read_only=True)


class MemberBalanceSerializer(serializers.Serializer):
    """One member's balance and the suggested payments involving them."""

    member = GroupMemberSerializer(read_only=True)
    balance = _money(source='entry.balance', read_only=True)
    total_paid = _money(source='entry.total_paid', read_only=True)
    total_owed = _money(source='entry.total_owed', read_only=True)
    status = serializers.CharField(source='entry.status', read_only=True)
    transactions = SimplifiedTransactionSerializer(many=True, read_only=True)
    currency = serializers.CharField(read_only=True)


class PairwiseBalanceSerializer(serializers.Serializer):
    member = GroupMemberSerializer(read_only=True)
    amount = _money(read_only=True)
    direction = serializers.SerializerMethodField()

    def get_direction(self, obj) -> str:
        return 'owes_you' if obj['amount'] > 0 else 'you_owe'


class PairwiseBalancesSerializer(serializers.Serializer):
    """What the caller owes, or is owed by, every other member."""

    balances = PairwiseBalanceSerializer(many=True, read_only=True)
    total_net_balance = _money(read_only=True)
    currency = serializers.CharField(read_only=True)


class OptimizationSerializer(serializers.Serializer):
    original_possible_transactions = serializers.IntegerField()
    optimized_transactions = serializers.IntegerField()
    transactions_saved = serializers.IntegerField()
    efficiency_improvement = serializers.CharField()


class SettlementSuggestionsSerializer(serializers.Serializer):
    recommendations = SimplifiedTransactionSerializer(many=True, read_only=True)
    optimization = OptimizationSerializer(read_only=True)
    creditor_count = serializers.IntegerField(read_only=True)
    debtor_count = serializers.IntegerField(read_only=True)
    is_balanced = serializers.BooleanField(read_only=True)
    tips = serializers.ListField(child=serializers.CharField(), read_only=True)
    summary = BalanceSummarySerializer(read_only=True)


class ProjectedSettlementSerializer(serializers.Serializer):
    payer = MemberIdentityField(read_only=True)
    payee = MemberIdentityField(read_only=True)
    amount = _money(read_only=True)


class WhatIfResultSerializer(serializers.Serializer):
    """Balances before and after the hypothetical settlements."""

    balances = serializers.SerializerMethodField()
    remaining_non_zero = serializers.IntegerField(read_only=True)
    settlements = ProjectedSettlementSerializer(many=True, read_only=True)

    def get_balances(self, obj) -> list:
        members = self.context.get('members', {})
        return [
            {
                'member': describe_identity(member, members),
                'current': f"{balance:.2f}",
                'projected': f"{obj.projected[member]:.2f}",
            }
            for member, balance in obj.current.items()
        ]


class ValidationResultSerializer(serializers.Serializer):
    ok = serializers.BooleanField()
    reason = serializers.CharField(allow_blank=True)
    code = serializers.CharField(allow_blank=True)


class ActivityLineSerializer(serializers.Serializer):
    """One expense share or settlement involving the caller."""

    type = serializers.ChoiceField(choices=['expense', 'settlement'])
    expense_id = serializers.UUIDField(required=False)
    settlement_id = serializers.UUIDField(required=False)
    description = serializers.CharField()
    date = serializers.DateField()
    amount = _money()
    currency = serializers.CharField()
    paid_by_email = serializers.EmailField(required=False)
    owed_by_email = serializers.EmailField(required=False)
    from_email = serializers.EmailField(required=False)
    to_email = serializers.EmailField(required=False)
    other_party_email = serializers.EmailField()
    other_party_name = serializers.CharField()
    is_owing = serializers.BooleanField(required=False)
    is_paying = serializers.BooleanField(required=False)
    settled = serializers.BooleanField(required=False)
    status = serializers.CharField(required=False)
    payment_method = serializers.CharField(required=False)


class SettlementSerializer(serializers.ModelSerializer):
    """Stored settlement."""

    payer_email = serializers.EmailField(source='payer.email', read_only=True)
    payer_name = serializers.CharField(source='payer.get_display_name', read_only=True)
    payee_email = serializers.EmailField(source='payee.email', read_only=True)
    payee_name = serializers.CharField(source='payee.get_display_name', read_only=True)
    created_by_email = serializers.EmailField(source='created_by.email', read_only=True, allow_null=True)

    class Meta:
        model = Settlement
        fields = [
            'id',
            'group',
            'payer',
            'payer_email',
            'payer_name',
            'payee',
            'payee_email',
            'payee_name',
            'amount',
            'currency',
            'date',
            'payment_method',
            'comments',
            'status',
            'created_by_email',
            'created_at',
        ]
        read_only_fields = fields


class ErrorSerializer(serializers.Serializer):
    error = serializers.CharField()
    code = serializers.CharField(required=False)
