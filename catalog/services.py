from django.db.models import F
from django.utils import timezone

from core.exceptions import InvalidState, NotFound
from .models import InventoryItem


class ItemStore:
    """Read and stock-adjust access to inventory items, as used by the ledger."""

    @staticmethod
    def get_item(item_id, for_update=False) -> InventoryItem:
        queryset = InventoryItem.objects.all()
        if for_update:
            queryset = queryset.select_for_update()
        item = queryset.filter(pk=item_id).first()
        if not item:
            raise NotFound("Inventory item not found")
        return item

    @staticmethod
    def adjust_stock(item_id, delta: int) -> int:
        """
        Apply a signed delta to `current_stock` and return the new value.

        The update is conditional on the counter staying non-negative, so the
        check and the write happen in one statement.
        """
        if delta == 0:
            return ItemStore.get_item(item_id).current_stock

        updated = InventoryItem.objects.filter(pk=item_id, current_stock__gte=-delta).update(
            current_stock=F("current_stock") + delta,
            updated_at=timezone.now(),
        )
        if not updated:
            item = ItemStore.get_item(item_id)
            raise InvalidState(
                f"Stock of item {item.item_code} cannot go below zero "
                f"(current {item.current_stock}, change {delta})"
            )
        return InventoryItem.objects.values_list("current_stock", flat=True).get(pk=item_id)
