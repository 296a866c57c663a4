from django.conf import settings
from django.db import models
from django.utils import timezone

from core.exceptions import InvalidState


class Transaction(models.Model):
    """
    One stock-affecting event. Rows are append-only: they are created by
    `inventory.services.StockMutator` and never updated or deleted through
    the application.
    """

    class Type(models.TextChoices):
        IN = "in", "Stock In"
        OUT = "out", "Stock Out"
        TRANSFER = "transfer", "Transfer"
        ADJUSTMENT = "adjustment", "Adjustment"

    type = models.CharField(max_length=20, choices=Type.choices)
    inventory = models.ForeignKey("catalog.InventoryItem", on_delete=models.CASCADE, related_name="transactions")
    quantity = models.PositiveIntegerField()  # magnitude; direction comes from `type`
    unit_cost = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    total_cost = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    reference_number = models.CharField(max_length=100, blank=True)
    notes = models.TextField(blank=True)
    # References never null out an existing row; see ProjectService.delete_project.
    project = models.ForeignKey(
        "projects.Project", on_delete=models.PROTECT, null=True, blank=True, related_name="transactions"
    )
    allocation = models.OneToOneField(
        "projects.ProjectAllocation", on_delete=models.RESTRICT, null=True, blank=True, related_name="transaction"
    )
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="inventory_transactions",
    )
    transaction_date = models.DateTimeField(default=timezone.now, editable=False)

    class Meta:
        ordering = ["-transaction_date", "-id"]
        indexes = [
            models.Index(fields=["type"], name="inventory_txn_type_idx"),
            models.Index(fields=["transaction_date"], name="inventory_txn_date_idx"),
        ]

    def __str__(self):
        return f"{self.type} {self.quantity} x {self.inventory_id}"

    @property
    def stock_delta(self) -> int:
        return STOCK_DIRECTION[self.type] * self.quantity

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise InvalidState("Transactions are append-only and cannot be modified")
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise InvalidState("Transactions are append-only and cannot be deleted")


# Sign applied to `quantity` when a transaction of each type hits current_stock.
# Transfers are logged without moving stock.
STOCK_DIRECTION = {
    Transaction.Type.IN: 1,
    Transaction.Type.OUT: -1,
    Transaction.Type.ADJUSTMENT: 1,
    Transaction.Type.TRANSFER: 0,
}
