from django.contrib import admin

from .models import Transaction


@admin.register(Transaction)
class TransactionAdmin(admin.ModelAdmin):
    list_display = ("id", "type", "inventory", "quantity", "total_cost", "project", "user", "transaction_date")
    list_filter = ("type",)
    search_fields = ("inventory__item_code", "inventory__name", "reference_number")
    date_hierarchy = "transaction_date"

    # The ledger is append-only and written by StockMutator.
    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
