# transactions/admin.py

"""
Ledger admin is read-only: transactions are created by the posting engine
only, so stock and balances always move together with a ledger entry.
"""

from django.contrib import admin

from transactions.models import Transaction, TransactionItem


class TransactionItemInline(admin.TabularInline):
    model = TransactionItem
    extra = 0
    can_delete = False
    fields = ("product", "product_name", "quantity", "price", "total")
    readonly_fields = fields

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Transaction)
class TransactionAdmin(admin.ModelAdmin):
    list_display = (
        "invoice_number",
        "type",
        "business",
        "counterparty_name",
        "total_amount",
        "payment_method",
        "status",
        "date",
    )
    list_filter = ("type", "status", "payment_method", "business")
    search_fields = ("invoice_number", "counterparty_name")
    ordering = ("-date",)
    inlines = [TransactionItemInline]

    readonly_fields = (
        "business",
        "type",
        "customer",
        "vendor",
        "counterparty_name",
        "total_amount",
        "date",
        "status",
        "payment_method",
        "notes",
        "invoice_number",
        "created_by",
        "created_at",
        "updated_at",
    )

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
