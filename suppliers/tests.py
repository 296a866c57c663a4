from django.test import TestCase
from rest_framework.test import APIClient

from account.models import User
from catalog.models import InventoryItem
from core.exceptions import HasDependents, NotFound
from suppliers.models import Supplier
from suppliers.services import SupplierService


class SupplierServiceTests(TestCase):
    def setUp(self):
        self.supplier = Supplier.objects.create(name="Addis Cement", contact_person="Hana")

    def test_delete_supplier_without_items(self):
        SupplierService.delete_supplier(self.supplier.id)

        self.assertFalse(Supplier.objects.filter(pk=self.supplier.id).exists())

    def test_delete_supplier_with_items_is_refused(self):
        InventoryItem.objects.create(item_code="CEM-01", name="Cement", unit="bags", supplier=self.supplier)
        InventoryItem.objects.create(item_code="CEM-02", name="White Cement", unit="bags", supplier=self.supplier)

        with self.assertRaises(HasDependents) as ctx:
            SupplierService.delete_supplier(self.supplier.id)

        self.assertEqual(ctx.exception.dependents, 2)
        self.assertTrue(Supplier.objects.filter(pk=self.supplier.id).exists())

    def test_delete_missing_supplier(self):
        with self.assertRaises(NotFound):
            SupplierService.delete_supplier(999999)


class SupplierApiTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.admin = User.objects.create_user(email="admin@example.com", password="Pass123!", role=User.Role.ADMIN)
        self.manager = User.objects.create_user(
            email="manager@example.com", password="Pass123!", role=User.Role.MANAGER
        )
        self.worker = User.objects.create_user(email="worker@example.com", password="Pass123!")

    def test_list_is_paginated_and_searchable(self):
        Supplier.objects.create(name="Addis Cement", email="sales@addis.example")
        Supplier.objects.create(name="Blue Nile Steel")
        Supplier.objects.create(name="Cement Partners")
        self.client.force_authenticate(self.worker)

        response = self.client.get("/api/suppliers/", {"search": "cement", "limit": 1})

        self.assertEqual(response.status_code, 200)
        self.assertEqual(len(response.data["suppliers"]), 1)
        self.assertEqual(response.data["suppliers"][0]["name"], "Addis Cement")
        self.assertEqual(
            response.data["pagination"],
            {"page": 1, "limit": 1, "total": 2, "pages": 2},
        )

    def test_plain_user_cannot_create_supplier(self):
        self.client.force_authenticate(self.worker)

        response = self.client.post("/api/suppliers/", {"name": "Addis Cement"}, format="json")

        self.assertEqual(response.status_code, 403)

    def test_manager_creates_supplier(self):
        self.client.force_authenticate(self.manager)

        response = self.client.post(
            "/api/suppliers/",
            {"name": "  Addis Cement ", "email": "sales@addis.example", "phone": "0911223344"},
            format="json",
        )

        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.data["name"], "Addis Cement")

    def test_invalid_email_is_rejected(self):
        self.client.force_authenticate(self.manager)

        response = self.client.post("/api/suppliers/", {"name": "Addis", "email": "not-an-email"}, format="json")

        self.assertEqual(response.status_code, 400)
        self.assertIn("email", response.data)

    def test_manager_cannot_delete(self):
        supplier = Supplier.objects.create(name="Addis Cement")
        self.client.force_authenticate(self.manager)

        response = self.client.delete(f"/api/suppliers/{supplier.id}/")

        self.assertEqual(response.status_code, 403)

    def test_admin_delete_blocked_by_items(self):
        supplier = Supplier.objects.create(name="Addis Cement")
        InventoryItem.objects.create(item_code="CEM-01", name="Cement", unit="bags", supplier=supplier)
        self.client.force_authenticate(self.admin)

        response = self.client.delete(f"/api/suppliers/{supplier.id}/")

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data["code"], "has_dependents")
        self.assertEqual(response.data["dependents"], 1)

    def test_admin_deletes_supplier(self):
        supplier = Supplier.objects.create(name="Addis Cement")
        self.client.force_authenticate(self.admin)

        response = self.client.delete(f"/api/suppliers/{supplier.id}/")

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["message"], "Supplier deleted successfully")
        self.assertFalse(Supplier.objects.filter(pk=supplier.id).exists())

    def test_admin_delete_missing_supplier(self):
        self.client.force_authenticate(self.admin)

        response = self.client.delete("/api/suppliers/999999/")

        self.assertEqual(response.status_code, 404)
