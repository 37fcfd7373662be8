from django.db import models
from django.core.validators import MinValueValidator
from django.utils import timezone
from decimal import Decimal
import uuid


class Expense(models.Model):
    """Cost paid by one member on behalf of some or all of the group."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    group = models.ForeignKey(
        'groups.Group',
        on_delete=models.CASCADE,
        related_name='expenses'
    )
    description = models.CharField(max_length=500)

    # Financial details
    amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.01'))]
    )
    currency = models.CharField(max_length=3)

    # Payer (a group member, registered or invited)
    paid_by = models.ForeignKey(
        'groups.GroupMember',
        on_delete=models.RESTRICT,
        related_name='paid_expenses'
    )

    date = models.DateField(default=timezone.localdate)
    comments = models.TextField(blank=True)

    # Settled expenses drop out of balances unless explicitly included
    settled = models.BooleanField(default=False)

    created_by = models.ForeignKey(
        'accounts.User',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='expenses_created'
    )

    # Timestamps
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'expenses'
        indexes = [
            models.Index(fields=['group', 'date'], name='expenses_group_date_idx'),
            models.Index(fields=['group', 'settled'], name='expenses_group_settled_idx'),
            models.Index(fields=['paid_by', 'date'], name='expenses_paid_by_date_idx'),
        ]
        ordering = ['-date', '-created_at']

    def __str__(self):
        return f"{self.description} - {self.amount} {self.currency}"

    def to_record(self):
        """Snapshot for the balance engine. Splits must be prefetched or loadable."""
        from apps.balances.services.domain import ExpenseRecord, SplitShare

        return ExpenseRecord(
            amount=self.amount,
            currency=self.currency,
            payer=self.paid_by.identity(),
            splits=tuple(
                SplitShare(member=split.member.identity(), share=split.share)
                for split in self.splits.all()
            ),
            reference=str(self.id),
            description=self.description,
        )


class ExpenseSplit(models.Model):
    """One member's share of an expense."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    expense = models.ForeignKey(
        Expense,
        on_delete=models.CASCADE,
        related_name='splits'
    )
    member = models.ForeignKey(
        'groups.GroupMember',
        on_delete=models.RESTRICT,
        related_name='expense_splits'
    )
    share = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.01'))]
    )

    class Meta:
        db_table = 'expense_splits'
        unique_together = [['expense', 'member']]
        indexes = [
            models.Index(fields=['member'], name='expense_splits_member_idx'),
        ]

    def __str__(self):
        return f"{self.member.email}: {self.share}"
