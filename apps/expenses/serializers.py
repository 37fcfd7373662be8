from decimal import Decimal

from rest_framework import serializers

from .models import Expense, ExpenseSplit


class ExpenseSplitSerializer(serializers.ModelSerializer):
    """One member's share of an expense."""

    member_id = serializers.UUIDField(source='member.id', read_only=True)
    email = serializers.EmailField(source='member.email', read_only=True)
    display_name = serializers.CharField(source='member.get_display_name', read_only=True)

    class Meta:
        model = ExpenseSplit
        fields = ['member_id', 'email', 'display_name', 'share']
        read_only_fields = fields


class ExpenseSerializer(serializers.ModelSerializer):
    """Expense with payer and splits."""

    paid_by_email = serializers.EmailField(source='paid_by.email', read_only=True)
    paid_by_name = serializers.CharField(source='paid_by.get_display_name', read_only=True)
    splits = ExpenseSplitSerializer(many=True, read_only=True)
    created_by_email = serializers.EmailField(source='created_by.email', read_only=True, allow_null=True)

    class Meta:
        model = Expense
        fields = [
            'id',
            'group',
            'description',
            'amount',
            'currency',
            'paid_by',
            'paid_by_email',
            'paid_by_name',
            'splits',
            'date',
            'comments',
            'settled',
            'created_by_email',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields


class SplitInputSerializer(serializers.Serializer):
    email = serializers.EmailField()
    share = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal('0.01'))


class ExpenseCreateSerializer(serializers.Serializer):
    """
    Input for creating an expense.

    Give ``splits`` for explicit shares, ``split_among`` for an equal
    split between some members, or neither for an equal split between
    everyone.
    """

    group = serializers.UUIDField()
    description = serializers.CharField(min_length=2, max_length=500)
    amount = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal('0.01'))
    currency = serializers.CharField(required=False, min_length=3, max_length=3)
    paid_by_email = serializers.EmailField(required=False)
    split_among = serializers.ListField(child=serializers.EmailField(), required=False, allow_empty=False)
    splits = SplitInputSerializer(many=True, required=False, allow_empty=False)
    date = serializers.DateField(required=False)
    comments = serializers.CharField(required=False, allow_blank=True, default='')

    def validate(self, attrs):
        if attrs.get('splits') and attrs.get('split_among'):
            raise serializers.ValidationError("Provide either splits or split_among, not both")
        if attrs.get('splits'):
            attrs['splits'] = [(s['email'], s['share']) for s in attrs['splits']]
        return attrs


class ExpenseQuerySerializer(serializers.Serializer):
    """Query parameters for listing expenses."""

    group = serializers.UUIDField(required=False)
    include_settled = serializers.BooleanField(required=False, default=True)


class ExpenseSettleSerializer(serializers.Serializer):
    settled = serializers.BooleanField(default=True)


class ErrorSerializer(serializers.Serializer):
    error = serializers.CharField()
