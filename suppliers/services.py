import logging

from django.db import transaction

from catalog.models import InventoryItem
from core.exceptions import HasDependents, NotFound
from .models import Supplier

logger = logging.getLogger(__name__)


class SupplierService:

    @staticmethod
    @transaction.atomic
    def delete_supplier(supplier_id: int) -> None:
        supplier = Supplier.objects.select_for_update().filter(pk=supplier_id).first()
        if not supplier:
            raise NotFound("Supplier not found")

        item_count = InventoryItem.objects.filter(supplier=supplier).count()
        if item_count > 0:
            logger.warning("Refused to delete supplier=%s: %s inventory item(s) reference it", supplier.id, item_count)
            raise HasDependents(
                "Cannot delete supplier with associated inventory items",
                dependents=item_count,
            )

        supplier.delete()
        logger.info("Deleted supplier=%s", supplier_id)
