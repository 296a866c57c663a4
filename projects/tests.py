from decimal import Decimal
from unittest import mock

from django.db import DatabaseError
from django.db.models import ProtectedError
from django.test import TestCase
from rest_framework.test import APIClient

from account.models import User
from catalog.models import InventoryItem
from core.exceptions import HasDependents, InsufficientStock, InvalidInput, NotFound
from inventory.models import Transaction
from inventory.services import StockMutator, TransactionLog
from projects.models import Project, ProjectAllocation
from projects.services import AllocationService, ProjectService


def make_item(stock, **kwargs):
    defaults = {"item_code": "CEM-01", "name": "Portland Cement", "unit": "bags", "unit_cost": Decimal("10.00")}
    defaults.update(kwargs)
    item = InventoryItem.objects.create(**defaults)
    StockMutator.record_transaction(type=Transaction.Type.ADJUSTMENT, inventory_id=item.id, quantity=stock)
    item.refresh_from_db()
    return item


class AllocationServiceTests(TestCase):
    def setUp(self):
        self.manager = User.objects.create_user(
            email="manager@example.com", password="Pass123!", role=User.Role.MANAGER
        )
        self.project = Project.objects.create(name="Bole Tower")
        self.item = make_item(70)

    def test_allocate_debits_stock_and_links_transaction(self):
        allocation = AllocationService.allocate(
            project_id=self.project.id,
            inventory_id=self.item.id,
            allocated_quantity=10,
            notes="Ground floor slab",
            user_id=self.manager.id,
        )

        self.item.refresh_from_db()
        self.assertEqual(self.item.current_stock, 60)
        self.assertEqual(allocation.status, ProjectAllocation.Status.ALLOCATED)
        self.assertEqual(allocation.allocated_by_id, self.manager.id)
        record = allocation.transaction
        self.assertEqual(record.type, Transaction.Type.OUT)
        self.assertEqual(record.quantity, 10)
        self.assertEqual(record.project_id, self.project.id)
        self.assertEqual(record.notes, "Project allocation: Ground floor slab")
        self.assertEqual(TransactionLog.expected_stock(self.item.id), 60)

    def test_insufficient_stock_writes_nothing(self):
        with self.assertRaises(InsufficientStock) as ctx:
            AllocationService.allocate(
                project_id=self.project.id, inventory_id=self.item.id, allocated_quantity=71
            )

        self.assertEqual(ctx.exception.available, 70)
        self.assertEqual(ProjectAllocation.objects.count(), 0)
        self.assertEqual(Transaction.objects.filter(type=Transaction.Type.OUT).count(), 0)
        self.item.refresh_from_db()
        self.assertEqual(self.item.current_stock, 70)

    def test_unknown_project_or_item(self):
        with self.assertRaisesMessage(NotFound, "Project not found"):
            AllocationService.allocate(project_id=999999, inventory_id=self.item.id, allocated_quantity=1)
        with self.assertRaisesMessage(NotFound, "Inventory item not found"):
            AllocationService.allocate(project_id=self.project.id, inventory_id=999999, allocated_quantity=1)

        self.assertEqual(ProjectAllocation.objects.count(), 0)

    def test_storage_failure_rolls_back_allocation(self):
        with mock.patch.object(TransactionLog, "append", side_effect=DatabaseError("disk I/O error")):
            with self.assertRaises(DatabaseError):
                AllocationService.allocate(
                    project_id=self.project.id, inventory_id=self.item.id, allocated_quantity=10
                )

        self.assertEqual(ProjectAllocation.objects.count(), 0)
        self.assertEqual(Transaction.objects.filter(type=Transaction.Type.OUT).count(), 0)
        self.item.refresh_from_db()
        self.assertEqual(self.item.current_stock, 70)

    def test_non_positive_quantity(self):
        with self.assertRaises(InvalidInput):
            AllocationService.allocate(project_id=self.project.id, inventory_id=self.item.id, allocated_quantity=0)


class ProjectServiceTests(TestCase):
    def test_delete_blocked_by_allocations(self):
        project = Project.objects.create(name="Bole Tower")
        item = make_item(5)
        AllocationService.allocate(project_id=project.id, inventory_id=item.id, allocated_quantity=2)

        with self.assertRaises(HasDependents) as ctx:
            ProjectService.delete_project(project.id)

        self.assertEqual(ctx.exception.dependents, 1)
        self.assertTrue(Project.objects.filter(pk=project.id).exists())

    def test_delete_blocked_by_transactions(self):
        project = Project.objects.create(name="Bole Tower")
        item = make_item(5)
        record = StockMutator.record_transaction(
            type=Transaction.Type.IN, inventory_id=item.id, quantity=3, project_id=project.id
        )

        with self.assertRaises(HasDependents) as ctx:
            ProjectService.delete_project(project.id)

        self.assertEqual(ctx.exception.dependents, 1)
        self.assertTrue(Project.objects.filter(pk=project.id).exists())
        self.assertEqual(Transaction.objects.get(pk=record.id).project_id, project.id)

    def test_transactions_keep_project_and_user_references(self):
        project = Project.objects.create(name="Bole Tower")
        user = User.objects.create_user(email="worker@example.com", password="Pass123!")
        item = make_item(5)
        record = StockMutator.record_transaction(
            type=Transaction.Type.IN, inventory_id=item.id, quantity=3, project_id=project.id, user_id=user.id
        )

        with self.assertRaises(ProtectedError):
            project.delete()
        with self.assertRaises(ProtectedError):
            user.delete()

        record = Transaction.objects.get(pk=record.id)
        self.assertEqual(record.project_id, project.id)
        self.assertEqual(record.user_id, user.id)

    def test_item_delete_still_removes_its_allocations_and_transactions(self):
        project = Project.objects.create(name="Bole Tower")
        item = make_item(5)
        AllocationService.allocate(project_id=project.id, inventory_id=item.id, allocated_quantity=2)

        item.delete()

        self.assertEqual(ProjectAllocation.objects.count(), 0)
        self.assertEqual(Transaction.objects.count(), 0)

    def test_delete_empty_project(self):
        project = Project.objects.create(name="Bole Tower")

        ProjectService.delete_project(project.id)

        self.assertFalse(Project.objects.filter(pk=project.id).exists())


class ProjectApiTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.admin = User.objects.create_user(email="admin@example.com", password="Pass123!", role=User.Role.ADMIN)
        self.manager = User.objects.create_user(
            email="manager@example.com", password="Pass123!", role=User.Role.MANAGER
        )
        self.worker = User.objects.create_user(email="worker@example.com", password="Pass123!")
        self.project = Project.objects.create(name="Bole Tower", description="Mixed use")
        self.item = make_item(70)

    def test_create_validates_dates_and_budget(self):
        self.client.force_authenticate(self.manager)

        response = self.client.post(
            "/api/projects/",
            {"name": "Road Works", "start_date": "2026-05-01", "end_date": "2026-04-01", "budget": "-5"},
            format="json",
        )

        self.assertEqual(response.status_code, 400)
        self.assertIn("budget", response.data)

        response = self.client.post(
            "/api/projects/",
            {"name": "Road Works", "start_date": "2026-05-01", "end_date": "2026-04-01"},
            format="json",
        )

        self.assertEqual(response.status_code, 400)
        self.assertIn("end_date", response.data)

    def test_create_defaults_to_active(self):
        self.client.force_authenticate(self.manager)

        response = self.client.post("/api/projects/", {"name": "Road Works", "budget": "1500.00"}, format="json")

        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.data["status"], "active")

    def test_plain_user_cannot_create_or_allocate(self):
        self.client.force_authenticate(self.worker)

        self.assertEqual(self.client.post("/api/projects/", {"name": "X"}, format="json").status_code, 403)
        response = self.client.post(
            f"/api/projects/{self.project.id}/allocate/",
            {"inventory_id": self.item.id, "allocated_quantity": 1},
            format="json",
        )
        self.assertEqual(response.status_code, 403)

    def test_list_filters_by_status(self):
        Project.objects.create(name="Old Bridge", status=Project.Status.COMPLETED)
        self.client.force_authenticate(self.worker)

        response = self.client.get("/api/projects/", {"status": "completed"})
        bad = self.client.get("/api/projects/", {"status": "paused"})

        self.assertEqual([row["name"] for row in response.data["projects"]], ["Old Bridge"])
        self.assertEqual(bad.status_code, 400)

    def test_allocate_and_list_allocations(self):
        self.client.force_authenticate(self.manager)

        response = self.client.post(
            f"/api/projects/{self.project.id}/allocate/",
            {"inventory_id": self.item.id, "allocated_quantity": 10, "notes": "Slab"},
            format="json",
        )

        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.data["message"], "Inventory allocated successfully")
        self.assertIsNotNone(response.data["allocation"]["transaction_id"])
        self.item.refresh_from_db()
        self.assertEqual(self.item.current_stock, 60)

        listed = self.client.get(f"/api/projects/{self.project.id}/allocations/")

        self.assertEqual(listed.status_code, 200)
        self.assertEqual(len(listed.data), 1)
        self.assertEqual(listed.data[0]["item_code"], "CEM-01")
        self.assertEqual(listed.data[0]["unit"], "bags")

    def test_allocate_errors(self):
        self.client.force_authenticate(self.manager)

        too_much = self.client.post(
            f"/api/projects/{self.project.id}/allocate/",
            {"inventory_id": self.item.id, "allocated_quantity": 1000},
            format="json",
        )
        zero = self.client.post(
            f"/api/projects/{self.project.id}/allocate/",
            {"inventory_id": self.item.id, "allocated_quantity": 0},
            format="json",
        )
        no_project = self.client.post(
            "/api/projects/999999/allocate/",
            {"inventory_id": self.item.id, "allocated_quantity": 1},
            format="json",
        )

        self.assertEqual(too_much.status_code, 400)
        self.assertEqual(too_much.data["code"], "insufficient_stock")
        self.assertEqual(too_much.data["available"], 70)
        self.assertEqual(zero.status_code, 400)
        self.assertEqual(no_project.status_code, 404)
        self.assertEqual(ProjectAllocation.objects.count(), 0)

    def test_allocations_of_missing_project(self):
        self.client.force_authenticate(self.worker)

        self.assertEqual(self.client.get("/api/projects/999999/allocations/").status_code, 404)

    def test_delete_project_with_allocations(self):
        AllocationService.allocate(project_id=self.project.id, inventory_id=self.item.id, allocated_quantity=1)
        self.client.force_authenticate(self.admin)

        response = self.client.delete(f"/api/projects/{self.project.id}/")

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data["detail"], "Cannot delete project with inventory allocations")
