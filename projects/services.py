import logging
from typing import Optional

from django.db import transaction

from catalog.services import ItemStore
from core.exceptions import HasDependents, InsufficientStock, InvalidInput, NotFound
from inventory.models import Transaction
from inventory.services import StockMutator
from .models import Project, ProjectAllocation

logger = logging.getLogger(__name__)


class AllocationService:

    @staticmethod
    @transaction.atomic
    def allocate(
        project_id: int,
        inventory_id: int,
        allocated_quantity: int,
        notes: Optional[str] = None,
        user_id: Optional[int] = None,
    ) -> ProjectAllocation:
        """
        Move stock from the general pool into a project.

        Creates the allocation row and its linked `out` transaction in the same
        database transaction; if recording the transaction fails, the
        allocation is rolled back with it.
        """
        if isinstance(allocated_quantity, bool) or not isinstance(allocated_quantity, int) or allocated_quantity <= 0:
            raise InvalidInput("Allocated quantity must be positive")

        # 1. Validate project and item
        project = Project.objects.filter(pk=project_id).first()
        if not project:
            raise NotFound("Project not found")
        item = ItemStore.get_item(inventory_id, for_update=True)

        # 2. Check stock
        if item.current_stock < allocated_quantity:
            logger.warning(
                "Rejected allocation to project=%s for item=%s: available=%s requested=%s",
                project.id,
                item.id,
                item.current_stock,
                allocated_quantity,
            )
            raise InsufficientStock(available=item.current_stock, requested=allocated_quantity)

        # 3. Create allocation
        allocation = ProjectAllocation.objects.create(
            project=project,
            inventory=item,
            allocated_quantity=allocated_quantity,
            notes=notes or "",
            allocated_by_id=user_id,
        )

        # 4. Debit stock through the ledger
        StockMutator.record_transaction(
            type=Transaction.Type.OUT,
            inventory_id=item.id,
            quantity=allocated_quantity,
            project_id=project.id,
            notes=f"Project allocation: {notes or ''}",
            user_id=user_id,
            allocation_id=allocation.id,
        )

        logger.info(
            "Allocated %s x item=%s to project=%s allocation=%s",
            allocated_quantity,
            item.id,
            project.id,
            allocation.id,
        )
        return allocation


class ProjectService:

    @staticmethod
    @transaction.atomic
    def delete_project(project_id: int) -> None:
        project = Project.objects.select_for_update().filter(pk=project_id).first()
        if not project:
            raise NotFound("Project not found")

        allocation_count = ProjectAllocation.objects.filter(project=project).count()
        if allocation_count > 0:
            logger.warning("Refused to delete project=%s: %s allocation(s) reference it", project.id, allocation_count)
            raise HasDependents(
                "Cannot delete project with inventory allocations",
                dependents=allocation_count,
            )

        transaction_count = Transaction.objects.filter(project=project).count()
        if transaction_count > 0:
            logger.warning("Refused to delete project=%s: %s transaction(s) reference it", project.id, transaction_count)
            raise HasDependents(
                "Cannot delete project with recorded transactions",
                dependents=transaction_count,
            )

        project.delete()
        logger.info("Deleted project=%s", project_id)
