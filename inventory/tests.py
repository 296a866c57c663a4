from datetime import timedelta
from decimal import Decimal
from io import StringIO
from unittest import mock

from django.core.management import call_command
from django.db import DatabaseError
from django.test import TestCase
from django.utils import timezone
from rest_framework.test import APIClient

from account.models import User
from catalog.models import InventoryItem
from core.exceptions import InsufficientStock, InvalidInput, InvalidState, NotFound
from inventory.models import Transaction
from inventory.services import StockMutator, TransactionDraft, TransactionLog
from projects.models import Project


def make_item(**kwargs):
    """Create an item and book its opening stock through the ledger."""
    stock = kwargs.pop("current_stock", 0)
    defaults = {"item_code": "CEM-01", "name": "Portland Cement", "unit": "bags", "unit_cost": Decimal("10.00")}
    defaults.update(kwargs)
    item = InventoryItem.objects.create(**defaults)
    if stock:
        StockMutator.record_transaction(type=Transaction.Type.ADJUSTMENT, inventory_id=item.id, quantity=stock)
        item.refresh_from_db()
    return item


class TransactionDraftTests(TestCase):
    def test_total_cost_is_quantized_product(self):
        draft = TransactionDraft(type="in", inventory_id=1, quantity=3, unit_cost=Decimal("2.335"))

        self.assertEqual(draft.total_cost, Decimal("7.00"))

    def test_total_cost_of_zero_unit_cost(self):
        draft = TransactionDraft(type="in", inventory_id=1, quantity=3, unit_cost=Decimal("0"))

        self.assertEqual(draft.total_cost, Decimal("0.00"))

    def test_total_cost_absent_without_unit_cost(self):
        self.assertIsNone(TransactionDraft(type="in", inventory_id=1, quantity=3).total_cost)

    def test_validate_rejects_bad_input(self):
        for draft in (
            TransactionDraft(type="gift", inventory_id=1, quantity=1),
            TransactionDraft(type="in", inventory_id=1, quantity=0),
            TransactionDraft(type="in", inventory_id=1, quantity=-4),
            TransactionDraft(type="in", inventory_id=1, quantity=True),
            TransactionDraft(type="in", inventory_id=1, quantity=1, unit_cost=Decimal("-1")),
        ):
            with self.subTest(draft=draft):
                with self.assertRaises(InvalidInput):
                    draft.validate()


class StockMutatorTests(TestCase):
    def setUp(self):
        self.user = User.objects.create_user(email="worker@example.com", password="Pass123!")
        self.item = make_item(current_stock=100)

    def test_out_then_oversized_out(self):
        record = StockMutator.record_transaction(
            type=Transaction.Type.OUT,
            inventory_id=self.item.id,
            quantity=30,
            unit_cost=Decimal("10.00"),
            user_id=self.user.id,
        )

        self.item.refresh_from_db()
        self.assertEqual(self.item.current_stock, 70)
        self.assertEqual(record.total_cost, Decimal("300.00"))
        self.assertEqual(record.stock_delta, -30)
        rows_before = Transaction.objects.count()

        with self.assertRaises(InsufficientStock) as ctx:
            StockMutator.record_transaction(type=Transaction.Type.OUT, inventory_id=self.item.id, quantity=1000)

        self.assertEqual(ctx.exception.available, 70)
        self.assertEqual(ctx.exception.requested, 1000)
        self.item.refresh_from_db()
        self.assertEqual(self.item.current_stock, 70)
        self.assertEqual(Transaction.objects.count(), rows_before)

    def test_in_and_adjustment_increase_stock(self):
        StockMutator.record_transaction(type=Transaction.Type.IN, inventory_id=self.item.id, quantity=15)
        StockMutator.record_transaction(type=Transaction.Type.ADJUSTMENT, inventory_id=self.item.id, quantity=5)

        self.item.refresh_from_db()
        self.assertEqual(self.item.current_stock, 120)

    def test_transfer_is_logged_without_moving_stock(self):
        # Transfers carry no location model yet, so they are recorded with a zero delta.
        record = StockMutator.record_transaction(type=Transaction.Type.TRANSFER, inventory_id=self.item.id, quantity=40)

        self.item.refresh_from_db()
        self.assertEqual(self.item.current_stock, 100)
        self.assertEqual(record.stock_delta, 0)
        self.assertTrue(Transaction.objects.filter(pk=record.id).exists())

    def test_out_of_entire_stock_reaches_zero(self):
        StockMutator.record_transaction(type=Transaction.Type.OUT, inventory_id=self.item.id, quantity=100)

        self.item.refresh_from_db()
        self.assertEqual(self.item.current_stock, 0)

    def test_counter_matches_replayed_log(self):
        StockMutator.record_transaction(type=Transaction.Type.OUT, inventory_id=self.item.id, quantity=30)
        StockMutator.record_transaction(type=Transaction.Type.IN, inventory_id=self.item.id, quantity=12)
        StockMutator.record_transaction(type=Transaction.Type.TRANSFER, inventory_id=self.item.id, quantity=7)
        with self.assertRaises(InsufficientStock):
            StockMutator.record_transaction(type=Transaction.Type.OUT, inventory_id=self.item.id, quantity=500)

        self.item.refresh_from_db()
        self.assertEqual(self.item.current_stock, 82)
        self.assertEqual(TransactionLog.expected_stock(self.item.id), self.item.current_stock)

    def test_missing_item_writes_nothing(self):
        with self.assertRaises(NotFound):
            StockMutator.record_transaction(type=Transaction.Type.IN, inventory_id=999999, quantity=1)

        self.assertEqual(Transaction.objects.count(), 1)

    def test_missing_project_writes_nothing(self):
        with self.assertRaisesMessage(NotFound, "Project not found"):
            StockMutator.record_transaction(
                type=Transaction.Type.OUT, inventory_id=self.item.id, quantity=1, project_id=999999
            )

        self.item.refresh_from_db()
        self.assertEqual(self.item.current_stock, 100)

    def test_rows_are_append_only(self):
        record = StockMutator.record_transaction(type=Transaction.Type.IN, inventory_id=self.item.id, quantity=1)

        record.notes = "edited"
        with self.assertRaises(InvalidState):
            record.save()
        with self.assertRaises(InvalidState):
            record.delete()
        self.assertEqual(Transaction.objects.get(pk=record.id).notes, "")


class TransactionLogTests(TestCase):
    def setUp(self):
        self.item = make_item(current_stock=50)
        self.other = make_item(item_code="SND-01", name="River Sand", unit="m3", current_stock=20)
        self.project = Project.objects.create(name="Bole Tower")
        StockMutator.record_transaction(
            type=Transaction.Type.IN, inventory_id=self.item.id, quantity=10, unit_cost=Decimal("9.50")
        )
        StockMutator.record_transaction(
            type=Transaction.Type.OUT,
            inventory_id=self.item.id,
            quantity=4,
            unit_cost=Decimal("10.00"),
            project_id=self.project.id,
        )

    def test_filters_combine(self):
        rows = TransactionLog.query(type=Transaction.Type.OUT, project_id=self.project.id)

        self.assertEqual(len(rows), 1)
        self.assertEqual(rows[0].quantity, 4)

    def test_newest_first_with_offset_and_limit(self):
        rows = TransactionLog.query(offset=0, limit=2, inventory_id=self.item.id)

        self.assertEqual([row.type for row in rows], ["out", "in"])
        self.assertEqual(len(TransactionLog.query(offset=2, inventory_id=self.item.id)), 1)

    def test_date_filters_are_inclusive(self):
        today = timezone.localdate()

        self.assertEqual(len(TransactionLog.query(start_date=today, end_date=today)), 4)
        self.assertEqual(len(TransactionLog.query(start_date=today + timedelta(days=1))), 0)

    def test_summary(self):
        summary = TransactionLog.summary()

        self.assertEqual(summary["total_transactions"], 4)
        self.assertEqual(summary["total_in"], 10)
        self.assertEqual(summary["total_out"], 4)
        self.assertEqual(summary["total_cost_in"], Decimal("95.00"))
        self.assertEqual(summary["total_cost_out"], Decimal("40.00"))


class TransactionApiTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.user = User.objects.create_user(email="worker@example.com", password="Pass123!")
        self.item = make_item(current_stock=100)

    def test_requires_authentication(self):
        response = self.client.post(
            "/api/transactions/", {"type": "out", "inventory_id": self.item.id, "quantity": 1}, format="json"
        )

        self.assertEqual(response.status_code, 401)

    def test_create_out_transaction(self):
        self.client.force_authenticate(self.user)

        response = self.client.post(
            "/api/transactions/",
            {"type": "out", "inventory_id": self.item.id, "quantity": 30, "unit_cost": "10.00"},
            format="json",
        )

        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.data["message"], "Transaction created successfully")
        self.assertEqual(response.data["transaction"]["total_cost"], "300.00")
        self.assertEqual(response.data["transaction"]["username"], "worker")
        self.item.refresh_from_db()
        self.assertEqual(self.item.current_stock, 70)

    def test_insufficient_stock_response(self):
        self.client.force_authenticate(self.user)

        response = self.client.post(
            "/api/transactions/",
            {"type": "out", "inventory_id": self.item.id, "quantity": 1000},
            format="json",
        )

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data["detail"], "Insufficient stock available")
        self.assertEqual(response.data["available"], 100)
        self.assertEqual(response.data["requested"], 1000)

    def test_storage_failure_response_leaves_stock_untouched(self):
        self.client.force_authenticate(self.user)
        before = Transaction.objects.count()

        with mock.patch.object(TransactionLog, "append", side_effect=DatabaseError("disk I/O error")):
            with self.assertLogs("core.exceptions", level="ERROR"):
                response = self.client.post(
                    "/api/transactions/",
                    {"type": "out", "inventory_id": self.item.id, "quantity": 30},
                    format="json",
                )

        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.data["code"], "storage_failure")
        self.assertEqual(Transaction.objects.count(), before)
        self.item.refresh_from_db()
        self.assertEqual(self.item.current_stock, 100)

    def test_invalid_payloads(self):
        self.client.force_authenticate(self.user)

        for payload in (
            {"type": "gift", "inventory_id": self.item.id, "quantity": 1},
            {"type": "in", "inventory_id": self.item.id, "quantity": 0},
            {"type": "in", "quantity": 1},
            {"type": "in", "inventory_id": self.item.id, "quantity": 1, "unit_cost": "-1"},
        ):
            with self.subTest(payload=payload):
                response = self.client.post("/api/transactions/", payload, format="json")
                self.assertEqual(response.status_code, 400)

    def test_unknown_item_is_404(self):
        self.client.force_authenticate(self.user)

        response = self.client.post(
            "/api/transactions/", {"type": "in", "inventory_id": 999999, "quantity": 1}, format="json"
        )

        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.data["code"], "not_found")

    def test_list_is_paginated_and_filtered(self):
        for _ in range(3):
            StockMutator.record_transaction(type=Transaction.Type.IN, inventory_id=self.item.id, quantity=1)
        self.client.force_authenticate(self.user)

        response = self.client.get("/api/transactions/", {"type": "in", "limit": 2, "page": 2})

        self.assertEqual(response.status_code, 200)
        self.assertEqual(len(response.data["transactions"]), 1)
        self.assertEqual(response.data["pagination"], {"page": 2, "limit": 2, "total": 3, "pages": 2})

    def test_list_rejects_bad_filters(self):
        self.client.force_authenticate(self.user)

        self.assertEqual(self.client.get("/api/transactions/", {"type": "gift"}).status_code, 400)
        self.assertEqual(self.client.get("/api/transactions/", {"start_date": "yesterday"}).status_code, 400)
        self.assertEqual(self.client.get("/api/transactions/", {"inventory_id": "x"}).status_code, 400)

    def test_detail_summary_and_by_type(self):
        record = StockMutator.record_transaction(
            type=Transaction.Type.IN, inventory_id=self.item.id, quantity=5, unit_cost=Decimal("4.00")
        )
        self.client.force_authenticate(self.user)

        detail = self.client.get(f"/api/transactions/{record.id}/")
        summary = self.client.get("/api/transactions/summary/overview/")
        by_type = self.client.get("/api/transactions/type/adjustment/")
        bad_type = self.client.get("/api/transactions/type/gift/")

        self.assertEqual(detail.data["item_code"], "CEM-01")
        self.assertEqual(summary.data["total_in"], 5)
        self.assertEqual(summary.data["total_cost_in"], "20.00")
        self.assertEqual(by_type.data["pagination"]["total"], 1)
        self.assertEqual(bad_type.status_code, 400)
        self.assertEqual(self.client.get("/api/transactions/999999/").status_code, 404)

    def test_transactions_cannot_be_edited_over_http(self):
        record = Transaction.objects.latest("id")
        self.client.force_authenticate(self.user)

        self.assertEqual(self.client.delete(f"/api/transactions/{record.id}/").status_code, 405)
        self.assertEqual(
            self.client.patch(f"/api/transactions/{record.id}/", {"quantity": 1}, format="json").status_code, 405
        )


class CheckStockSyncCommandTests(TestCase):
    def setUp(self):
        self.item = make_item(current_stock=40)

    def test_reports_and_fixes_drift(self):
        InventoryItem.objects.filter(pk=self.item.id).update(current_stock=55)
        out = StringIO()

        call_command("check_stock_sync", stdout=out)

        self.assertIn("1 of 1 item(s) out of sync", out.getvalue())
        self.item.refresh_from_db()
        self.assertEqual(self.item.current_stock, 55)

        call_command("check_stock_sync", "--fix", stdout=StringIO())

        self.item.refresh_from_db()
        self.assertEqual(self.item.current_stock, 40)
        self.assertEqual(Transaction.objects.count(), 1)

    def test_in_sync(self):
        out = StringIO()

        call_command("check_stock_sync", "--item-id", str(self.item.id), stdout=out)

        self.assertIn("All 1 item(s) in sync", out.getvalue())
