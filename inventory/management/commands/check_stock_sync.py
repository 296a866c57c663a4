"""
Compare each item's stored current_stock with the stock implied by its
transaction log and report the drift left by administrative overrides.
"""
import logging

from django.core.management.base import BaseCommand, CommandError
from django.db import transaction

from catalog.models import InventoryItem
from inventory.services import TransactionLog

logger = logging.getLogger(__name__)


class Command(BaseCommand):
    help = 'Check current_stock of inventory items against their transaction log'

    def add_arguments(self, parser):
        parser.add_argument(
            '--item-id',
            type=int,
            help='Check a specific inventory item only',
        )
        parser.add_argument(
            '--fix',
            action='store_true',
            help='Reset drifted counters to the value derived from the log',
        )

    def handle(self, *args, **options):
        item_id = options.get('item_id')
        fix = options.get('fix', False)

        items = InventoryItem.objects.all().order_by('id')
        if item_id:
            items = items.filter(id=item_id)
            if not items.exists():
                raise CommandError(f"Inventory item {item_id} does not exist")

        checked = 0
        drifted = 0
        for item in items.iterator():
            checked += 1
            expected = TransactionLog.expected_stock(item.id)
            if expected == item.current_stock:
                continue

            drifted += 1
            self.stdout.write(self.style.WARNING(
                f"{item.item_code} (ID: {item.id}): stored {item.current_stock}, "
                f"log says {expected} ({item.current_stock - expected:+d})"
            ))
            if fix:
                if expected < 0:
                    self.stdout.write(self.style.ERROR(
                        "  Skipped: log-derived stock is negative"
                    ))
                    continue
                with transaction.atomic():
                    InventoryItem.objects.select_for_update().filter(pk=item.id).update(current_stock=expected)
                logger.warning("Reset stock of item=%s from %s to %s", item.id, item.current_stock, expected)
                self.stdout.write(f"  Reset to {expected}")

        if drifted:
            self.stdout.write(self.style.WARNING(f"{drifted} of {checked} item(s) out of sync"))
        else:
            self.stdout.write(self.style.SUCCESS(f"All {checked} item(s) in sync"))
