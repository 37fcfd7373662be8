from django.contrib import admin
from apps.balances.models import Settlement


@admin.register(Settlement)
class SettlementAdmin(admin.ModelAdmin):
    """Admin interface for Settlements."""

    list_display = ['group', 'payer', 'payee', 'amount', 'currency', 'payment_method', 'status', 'date']
    list_filter = ['status', 'payment_method', 'currency', 'date']
    search_fields = ['group__name', 'payer__email', 'payee__email', 'comments']
    readonly_fields = ['created_by', 'created_at', 'updated_at']
    date_hierarchy = 'date'
    ordering = ['-date']

    def get_queryset(self, request):
        """Optimize query."""
        qs = super().get_queryset(request)
        return qs.select_related('group', 'payer', 'payee')
