from decimal import Decimal

from django.test import TestCase
from django.utils import timezone
from rest_framework.test import APIClient

from account.models import User
from catalog.models import Category, InventoryItem
from inventory.models import Transaction
from inventory.services import StockMutator
from projects.models import Project
from projects.services import AllocationService
from suppliers.models import Supplier


class ReportApiTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.user = User.objects.create_user(email="viewer@example.com", password="Pass123!")
        self.client.force_authenticate(self.user)

        self.category = Category.objects.get(name="Building Materials")
        self.supplier = Supplier.objects.create(name="Addis Cement")
        self.cement = self._item("CEM-01", "Portland Cement", stock=100, unit_cost="10.00", min_level=5)
        self.sand = self._item("SND-01", "River Sand", stock=2, unit_cost="25.50", min_level=10)
        self.project = Project.objects.create(name="Bole Tower")
        Project.objects.create(name="Old Bridge", status=Project.Status.COMPLETED)

        StockMutator.record_transaction(
            type=Transaction.Type.IN, inventory_id=self.cement.id, quantity=20, unit_cost=Decimal("10.00")
        )
        AllocationService.allocate(project_id=self.project.id, inventory_id=self.cement.id, allocated_quantity=30)

    def _item(self, code, name, stock, unit_cost, min_level):
        item = InventoryItem.objects.create(
            item_code=code,
            name=name,
            unit="bags",
            category=self.category,
            supplier=self.supplier,
            unit_cost=Decimal(unit_cost),
            min_stock_level=min_level,
        )
        StockMutator.record_transaction(type=Transaction.Type.ADJUSTMENT, inventory_id=item.id, quantity=stock)
        return item

    def test_requires_authentication(self):
        self.client.force_authenticate(None)

        self.assertEqual(self.client.get("/api/reports/dashboard/").status_code, 401)

    def test_dashboard(self):
        response = self.client.get("/api/reports/dashboard/")

        self.assertEqual(response.status_code, 200)
        overview = response.data["overview"]
        self.assertEqual(overview["total_items"], 2)
        self.assertEqual(overview["low_stock_items"], 1)
        self.assertEqual(overview["total_suppliers"], 1)
        self.assertEqual(overview["active_projects"], 1)
        # cement 90 x 10.00 + sand 2 x 25.50
        self.assertEqual(overview["total_value"], "951.00")
        self.assertEqual(len(response.data["recent_transactions"]), 4)
        self.assertEqual(response.data["recent_transactions"][0]["type"], "out")

    def test_inventory_value(self):
        response = self.client.get("/api/reports/inventory-value/")

        self.assertEqual(response.data["item_count"], 2)
        self.assertEqual(response.data["total_value"], "951.00")
        self.assertEqual([row["item_code"] for row in response.data["items"]], ["CEM-01", "SND-01"])

    def test_inventory_value_by_category(self):
        other = Category.objects.get(name="Safety Equipment")

        response = self.client.get("/api/reports/inventory-value/", {"category_id": other.id})

        self.assertEqual(response.data["item_count"], 0)
        self.assertEqual(response.data["total_value"], "0.00")

    def test_stock_movement(self):
        response = self.client.get("/api/reports/stock-movement/", {"inventory_id": self.cement.id})

        self.assertEqual(response.status_code, 200)
        self.assertEqual(len(response.data), 3)
        self.assertEqual(response.data[0]["project_name"], "Bole Tower")

    def test_category_wise(self):
        response = self.client.get("/api/reports/category-wise/")

        first = response.data[0]
        self.assertEqual(first["category_name"], "Building Materials")
        self.assertEqual(first["item_count"], 2)
        self.assertEqual(first["total_stock"], 92)
        self.assertEqual(first["total_value"], "951.00")
        self.assertEqual(first["avg_unit_cost"], "17.75")
        empty = [row for row in response.data if row["category_name"] == "Paints & Coatings"][0]
        self.assertEqual(empty["item_count"], 0)
        self.assertEqual(empty["total_value"], "0.00")

    def test_supplier_performance(self):
        response = self.client.get("/api/reports/supplier-performance/")

        self.assertEqual(len(response.data), 1)
        self.assertEqual(response.data[0]["supplier_name"], "Addis Cement")
        self.assertEqual(response.data[0]["item_count"], 2)
        self.assertEqual(response.data[0]["total_value"], "951.00")

    def test_project_allocations(self):
        response = self.client.get("/api/reports/project-allocations/", {"project_id": self.project.id})

        self.assertEqual(response.data["allocation_count"], 1)
        self.assertEqual(response.data["total_allocated_value"], "300.00")
        row = response.data["allocations"][0]
        self.assertEqual(row["project_name"], "Bole Tower")
        self.assertEqual(row["allocated_value"], "300.00")

    def test_monthly_summary(self):
        year = timezone.now().year

        response = self.client.get("/api/reports/monthly-summary/", {"year": year})

        self.assertEqual(response.data["year"], year)
        rows = {row["type"]: row for row in response.data["summary"]}
        self.assertEqual(rows["adjustment"]["transaction_count"], 2)
        self.assertEqual(rows["in"]["total_quantity"], 20)
        self.assertEqual(rows["in"]["total_cost"], "200.00")
        self.assertEqual(rows["out"]["total_quantity"], 30)

    def test_monthly_summary_rejects_bad_year(self):
        response = self.client.get("/api/reports/monthly-summary/", {"year": "soon"})

        self.assertEqual(response.status_code, 400)
