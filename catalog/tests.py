from decimal import Decimal

from django.test import TestCase
from rest_framework.test import APIClient

from account.models import User
from catalog.models import Category, InventoryItem
from catalog.services import ItemStore
from core.exceptions import InvalidState, NotFound
from inventory.models import Transaction
from inventory.services import TransactionLog
from suppliers.models import Supplier


class ItemStoreTests(TestCase):
    def setUp(self):
        self.item = InventoryItem.objects.create(item_code="REB-12", name="Rebar 12mm", unit="pieces", current_stock=10)

    def test_adjust_stock_applies_delta(self):
        self.assertEqual(ItemStore.adjust_stock(self.item.id, 5), 15)
        self.assertEqual(ItemStore.adjust_stock(self.item.id, -15), 0)

        self.item.refresh_from_db()
        self.assertEqual(self.item.current_stock, 0)

    def test_adjust_stock_refuses_negative_result(self):
        with self.assertRaises(InvalidState):
            ItemStore.adjust_stock(self.item.id, -11)

        self.item.refresh_from_db()
        self.assertEqual(self.item.current_stock, 10)

    def test_zero_delta_is_a_no_op(self):
        self.assertEqual(ItemStore.adjust_stock(self.item.id, 0), 10)

    def test_get_missing_item(self):
        with self.assertRaisesMessage(NotFound, "Inventory item not found"):
            ItemStore.get_item(999999)


class DefaultCategoryTests(TestCase):
    def test_construction_categories_are_seeded(self):
        names = set(Category.objects.values_list("name", flat=True))

        self.assertTrue({"Building Materials", "Tools & Equipment", "Flooring Materials"} <= names)


class InventoryItemApiTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.admin = User.objects.create_user(email="admin@example.com", password="Pass123!", role=User.Role.ADMIN)
        self.manager = User.objects.create_user(
            email="manager@example.com", password="Pass123!", role=User.Role.MANAGER
        )
        self.worker = User.objects.create_user(email="worker@example.com", password="Pass123!")
        self.category = Category.objects.get(name="Building Materials")
        self.supplier = Supplier.objects.create(name="Addis Cement")

    def _create_payload(self, **overrides):
        payload = {
            "item_code": "CEM-01",
            "name": "Portland Cement",
            "unit": "bags",
            "category_id": self.category.id,
            "supplier_id": self.supplier.id,
            "current_stock": 100,
            "min_stock_level": 20,
            "max_stock_level": 500,
            "unit_cost": "10.00",
            "barcode": "",
        }
        payload.update(overrides)
        return payload

    def test_create_records_opening_balance(self):
        self.client.force_authenticate(self.manager)

        response = self.client.post("/api/inventory/", self._create_payload(), format="json")

        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.data["current_stock"], 100)
        self.assertEqual(response.data["category_name"], "Building Materials")
        self.assertEqual(response.data["supplier_name"], "Addis Cement")
        self.assertIsNone(response.data["barcode"])
        item = InventoryItem.objects.get(item_code="CEM-01")
        opening = Transaction.objects.get(inventory=item)
        self.assertEqual(opening.type, Transaction.Type.ADJUSTMENT)
        self.assertEqual(opening.quantity, 100)
        self.assertEqual(opening.user_id, self.manager.id)
        self.assertEqual(TransactionLog.expected_stock(item.id), item.current_stock)

    def test_create_without_stock_records_nothing(self):
        self.client.force_authenticate(self.manager)

        response = self.client.post("/api/inventory/", self._create_payload(current_stock=0), format="json")

        self.assertEqual(response.status_code, 201)
        self.assertEqual(Transaction.objects.count(), 0)

    def test_plain_user_cannot_create_item(self):
        self.client.force_authenticate(self.worker)

        response = self.client.post("/api/inventory/", self._create_payload(), format="json")

        self.assertEqual(response.status_code, 403)

    def test_duplicate_item_code_is_rejected(self):
        InventoryItem.objects.create(item_code="CEM-01", name="Cement", unit="bags")
        self.client.force_authenticate(self.manager)

        response = self.client.post("/api/inventory/", self._create_payload(), format="json")

        self.assertEqual(response.status_code, 400)
        self.assertIn("item_code", response.data)

    def test_negative_values_are_rejected(self):
        self.client.force_authenticate(self.manager)

        response = self.client.post(
            "/api/inventory/",
            self._create_payload(current_stock=-1, unit_cost="-2.00"),
            format="json",
        )

        self.assertEqual(response.status_code, 400)
        self.assertIn("current_stock", response.data)
        self.assertIn("unit_cost", response.data)

    def test_max_below_min_is_rejected(self):
        self.client.force_authenticate(self.manager)

        response = self.client.post(
            "/api/inventory/",
            self._create_payload(min_stock_level=50, max_stock_level=10),
            format="json",
        )

        self.assertEqual(response.status_code, 400)
        self.assertIn("max_stock_level", response.data)

    def test_list_filters(self):
        InventoryItem.objects.create(
            item_code="CEM-01", name="Portland Cement", unit="bags", category=self.category,
            current_stock=5, min_stock_level=10,
        )
        InventoryItem.objects.create(
            item_code="SND-01", name="River Sand", unit="m3", current_stock=50, min_stock_level=10,
        )
        self.client.force_authenticate(self.worker)

        by_search = self.client.get("/api/inventory/", {"search": "sand"})
        by_category = self.client.get("/api/inventory/", {"category": self.category.id})
        low_stock = self.client.get("/api/inventory/", {"low_stock": "true"})

        self.assertEqual([row["item_code"] for row in by_search.data["items"]], ["SND-01"])
        self.assertEqual([row["item_code"] for row in by_category.data["items"]], ["CEM-01"])
        self.assertEqual([row["item_code"] for row in low_stock.data["items"]], ["CEM-01"])
        self.assertTrue(low_stock.data["items"][0]["is_low_stock"])
        self.assertEqual(by_search.data["pagination"]["total"], 1)

    def test_list_rejects_bad_category(self):
        self.client.force_authenticate(self.worker)

        response = self.client.get("/api/inventory/", {"category": "abc"})

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data["code"], "invalid_input")

    def test_admin_override_rewrites_stock(self):
        item = InventoryItem.objects.create(item_code="CEM-01", name="Cement", unit="bags", current_stock=10)
        self.client.force_authenticate(self.admin)

        with self.assertLogs("catalog.views", level="WARNING"):
            response = self.client.patch(f"/api/inventory/{item.id}/", {"current_stock": 25}, format="json")

        self.assertEqual(response.status_code, 200)
        item.refresh_from_db()
        self.assertEqual(item.current_stock, 25)
        self.assertEqual(Transaction.objects.count(), 0)

    def test_item_code_is_immutable(self):
        item = InventoryItem.objects.create(item_code="CEM-01", name="Cement", unit="bags")
        self.client.force_authenticate(self.admin)

        response = self.client.patch(f"/api/inventory/{item.id}/", {"item_code": "CEM-99"}, format="json")

        self.assertEqual(response.status_code, 400)

    def test_delete_requires_admin(self):
        item = InventoryItem.objects.create(item_code="CEM-01", name="Cement", unit="bags")
        self.client.force_authenticate(self.manager)

        self.assertEqual(self.client.delete(f"/api/inventory/{item.id}/").status_code, 403)

        self.client.force_authenticate(self.admin)
        response = self.client.delete(f"/api/inventory/{item.id}/")

        self.assertEqual(response.status_code, 200)
        self.assertFalse(InventoryItem.objects.filter(pk=item.id).exists())

    def test_low_stock_alerts_ordered_by_shortfall(self):
        InventoryItem.objects.create(item_code="A", name="Nails", unit="kg", current_stock=8, min_stock_level=10)
        InventoryItem.objects.create(item_code="B", name="Bolts", unit="kg", current_stock=0, min_stock_level=30)
        InventoryItem.objects.create(item_code="C", name="Paint", unit="l", current_stock=40, min_stock_level=10)
        self.client.force_authenticate(self.worker)

        response = self.client.get("/api/inventory/alerts/low-stock/")

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["count"], 2)
        self.assertEqual([row["item_code"] for row in response.data["items"]], ["B", "A"])

    def test_barcode_lookup(self):
        InventoryItem.objects.create(item_code="CEM-01", name="Cement", unit="bags", barcode="5901234123457")
        self.client.force_authenticate(self.worker)

        found = self.client.get("/api/inventory/barcode/5901234123457/")
        missing = self.client.get("/api/inventory/barcode/0000/")

        self.assertEqual(found.status_code, 200)
        self.assertEqual(found.data["item_code"], "CEM-01")
        self.assertEqual(missing.status_code, 404)

    def test_total_value_uses_two_decimals(self):
        item = InventoryItem.objects.create(
            item_code="CEM-01", name="Cement", unit="bags", current_stock=3, unit_cost=Decimal("10.50")
        )
        self.client.force_authenticate(self.worker)

        response = self.client.get(f"/api/inventory/{item.id}/")

        self.assertEqual(response.data["total_value"], "31.50")

    def test_categories_endpoint(self):
        self.client.force_authenticate(self.manager)

        created = self.client.post("/api/inventory/categories/", {"name": "Formwork"}, format="json")
        listed = self.client.get("/api/inventory/categories/")

        self.assertEqual(created.status_code, 201)
        self.assertIn("Formwork", [row["name"] for row in listed.data])
