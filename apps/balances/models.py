from django.db import models
from django.core.validators import MinValueValidator
from django.utils import timezone
from decimal import Decimal
import uuid


class SettlementStatus(models.TextChoices):
    PENDING = 'pending', 'Pending'
    COMPLETED = 'completed', 'Completed'


class PaymentMethod(models.TextChoices):
    CASH = 'cash', 'Cash'
    BANK_TRANSFER = 'bank_transfer', 'Bank transfer'
    UPI = 'upi', 'UPI'
    CARD = 'card', 'Card'
    OTHER = 'other', 'Other'


class Settlement(models.Model):
    """Payment from one member to another that cancels debt between them."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    group = models.ForeignKey(
        'groups.Group',
        on_delete=models.CASCADE,
        related_name='settlements'
    )
    payer = models.ForeignKey(
        'groups.GroupMember',
        on_delete=models.RESTRICT,
        related_name='settlements_paid'
    )
    payee = models.ForeignKey(
        'groups.GroupMember',
        on_delete=models.RESTRICT,
        related_name='settlements_received'
    )

    amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.01'))]
    )
    currency = models.CharField(max_length=3)

    date = models.DateTimeField(default=timezone.now)
    payment_method = models.CharField(
        max_length=20,
        choices=PaymentMethod.choices,
        default=PaymentMethod.CASH
    )
    comments = models.TextField(blank=True)

    # Only completed settlements count towards balances
    status = models.CharField(
        max_length=20,
        choices=SettlementStatus.choices,
        default=SettlementStatus.COMPLETED
    )

    created_by = models.ForeignKey(
        'accounts.User',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='settlements_recorded'
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'settlements'
        indexes = [
            models.Index(fields=['group', 'status'], name='settlements_group_status_idx'),
            models.Index(fields=['group', 'date'], name='settlements_group_date_idx'),
            models.Index(fields=['payer', 'payee'], name='settlements_payer_payee_idx'),
        ]
        ordering = ['-date', '-created_at']

    def __str__(self):
        return f"{self.payer.email} -> {self.payee.email}: {self.amount} {self.currency}"

    def to_record(self):
        """Snapshot for the balance engine."""
        from .services.domain import SettlementRecord

        return SettlementRecord(
            amount=self.amount,
            currency=self.currency,
            payer=self.payer.identity(),
            payee=self.payee.identity(),
            timestamp=self.date,
            reference=str(self.id),
        )
