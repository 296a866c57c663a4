from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import List, Optional

from django.db import models, transaction
from django.db.models import Case, Count, IntegerField, Q, Sum, Value, When

from catalog.services import ItemStore
from core.exceptions import InsufficientStock, InvalidInput, InvalidState, NotFound
from projects.models import Project
from .models import STOCK_DIRECTION, Transaction

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TransactionDraft:
    """A validated request to record one transaction."""

    type: str
    inventory_id: int
    quantity: int
    unit_cost: Optional[Decimal] = None
    reference_number: str = ""
    notes: str = ""
    project_id: Optional[int] = None
    user_id: Optional[int] = None
    allocation_id: Optional[int] = None

    @property
    def stock_delta(self) -> int:
        return STOCK_DIRECTION[self.type] * self.quantity

    @property
    def total_cost(self) -> Optional[Decimal]:
        if self.unit_cost is None:
            return None
        return (Decimal(self.unit_cost) * self.quantity).quantize(Decimal("0.01"))

    def validate(self) -> None:
        if self.type not in Transaction.Type.values:
            raise InvalidInput(f"Valid transaction type required, got {self.type!r}")
        if isinstance(self.quantity, bool) or not isinstance(self.quantity, int) or self.quantity <= 0:
            raise InvalidInput("Quantity must be a positive integer")
        if self.unit_cost is not None and Decimal(self.unit_cost) < 0:
            raise InvalidInput("Unit cost must be non-negative")


class TransactionLog:
    """Append-only store of transactions plus its read side."""

    @staticmethod
    def append(draft: TransactionDraft) -> Transaction:
        return Transaction.objects.create(
            type=draft.type,
            inventory_id=draft.inventory_id,
            quantity=draft.quantity,
            unit_cost=draft.unit_cost,
            total_cost=draft.total_cost,
            reference_number=draft.reference_number or "",
            notes=draft.notes or "",
            project_id=draft.project_id,
            user_id=draft.user_id,
            allocation_id=draft.allocation_id,
        )

    @staticmethod
    def filtered(
        type: Optional[str] = None,
        inventory_id: Optional[int] = None,
        project_id: Optional[int] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> models.QuerySet:
        """All filters are optional and combine with AND; newest first."""
        queryset = Transaction.objects.select_related("inventory", "project", "user")
        if type:
            queryset = queryset.filter(type=type)
        if inventory_id:
            queryset = queryset.filter(inventory_id=inventory_id)
        if project_id:
            queryset = queryset.filter(project_id=project_id)
        if start_date:
            queryset = queryset.filter(transaction_date__date__gte=start_date)
        if end_date:
            queryset = queryset.filter(transaction_date__date__lte=end_date)
        return queryset.order_by("-transaction_date", "-id")

    @staticmethod
    def query(offset: int = 0, limit: Optional[int] = None, **filters) -> List[Transaction]:
        queryset = TransactionLog.filtered(**filters)
        if limit is None:
            return list(queryset[offset:])
        return list(queryset[offset:offset + limit])

    @staticmethod
    def signed_quantity():
        return Case(
            When(type__in=[Transaction.Type.IN, Transaction.Type.ADJUSTMENT], then="quantity"),
            When(type=Transaction.Type.OUT, then=-models.F("quantity")),
            default=Value(0),
            output_field=IntegerField(),
        )

    @staticmethod
    def expected_stock(item_id) -> int:
        """Stock implied by replaying every logged delta of the item."""
        total = Transaction.objects.filter(inventory_id=item_id).aggregate(
            total=Sum(TransactionLog.signed_quantity())
        )["total"]
        return total or 0

    @staticmethod
    def summary(start_date: Optional[date] = None, end_date: Optional[date] = None) -> dict:
        queryset = Transaction.objects.all()
        if start_date:
            queryset = queryset.filter(transaction_date__date__gte=start_date)
        if end_date:
            queryset = queryset.filter(transaction_date__date__lte=end_date)
        totals = queryset.aggregate(
            total_transactions=Count("id"),
            total_in=Sum("quantity", filter=Q(type=Transaction.Type.IN)),
            total_out=Sum("quantity", filter=Q(type=Transaction.Type.OUT)),
            total_cost_in=Sum("total_cost", filter=Q(type=Transaction.Type.IN)),
            total_cost_out=Sum("total_cost", filter=Q(type=Transaction.Type.OUT)),
        )
        return {
            "total_transactions": totals["total_transactions"],
            "total_in": totals["total_in"] or 0,
            "total_out": totals["total_out"] or 0,
            "total_cost_in": (totals["total_cost_in"] or Decimal("0.00")).quantize(Decimal("0.01")),
            "total_cost_out": (totals["total_cost_out"] or Decimal("0.00")).quantize(Decimal("0.01")),
        }


class StockMutator:

    @staticmethod
    @transaction.atomic
    def apply(draft: TransactionDraft) -> Transaction:
        """
        Validate a draft, move the item's stock by its delta and append the
        transaction row, all in one database transaction.

        Raises InvalidInput, NotFound or InsufficientStock before anything is
        written. Any later failure rolls back both writes.
        """
        draft.validate()
        item = ItemStore.get_item(draft.inventory_id, for_update=True)
        if draft.project_id and not Project.objects.filter(pk=draft.project_id).exists():
            raise NotFound("Project not found")

        if draft.type == Transaction.Type.OUT and item.current_stock < draft.quantity:
            logger.warning(
                "Rejected out transaction for item=%s: available=%s requested=%s",
                item.id,
                item.current_stock,
                draft.quantity,
            )
            raise InsufficientStock(available=item.current_stock, requested=draft.quantity)

        try:
            new_stock = ItemStore.adjust_stock(item.id, draft.stock_delta)
        except InvalidState:
            # Lost a race with another writer between the check and the update.
            current = ItemStore.get_item(item.id).current_stock
            raise InsufficientStock(available=current, requested=draft.quantity)

        record = TransactionLog.append(draft)
        logger.info(
            "Recorded %s transaction=%s item=%s quantity=%s delta=%s stock=%s",
            record.type,
            record.id,
            item.id,
            record.quantity,
            draft.stock_delta,
            new_stock,
        )
        return record

    @staticmethod
    def record_transaction(
        type: str,
        inventory_id: int,
        quantity: int,
        unit_cost: Optional[Decimal] = None,
        reference_number: Optional[str] = None,
        notes: Optional[str] = None,
        project_id: Optional[int] = None,
        user_id: Optional[int] = None,
        allocation_id: Optional[int] = None,
    ) -> Transaction:
        draft = TransactionDraft(
            type=type,
            inventory_id=inventory_id,
            quantity=quantity,
            unit_cost=unit_cost,
            reference_number=reference_number or "",
            notes=notes or "",
            project_id=project_id,
            user_id=user_id,
            allocation_id=allocation_id,
        )
        return StockMutator.apply(draft)
