from decimal import Decimal

from django.db.models import Avg, Count, DecimalField, ExpressionWrapper, F, Sum
from django.db.models.functions import ExtractMonth

from catalog.models import Category, InventoryItem
from inventory.models import Transaction
from projects.models import Project, ProjectAllocation
from suppliers.models import Supplier

ZERO = Decimal("0.00")


def money(value) -> Decimal:
    if value is None:
        return ZERO
    return Decimal(value).quantize(Decimal("0.01"))


def stock_value(prefix=""):
    """current_stock * unit_cost, optionally across a relation."""
    return ExpressionWrapper(
        F(f"{prefix}current_stock") * F(f"{prefix}unit_cost"),
        output_field=DecimalField(max_digits=14, decimal_places=2),
    )


class ReportService:

    @staticmethod
    def dashboard() -> dict:
        total_value = InventoryItem.objects.aggregate(total=Sum(stock_value()))["total"]
        recent = Transaction.objects.select_related("inventory", "project", "user").order_by(
            "-transaction_date", "-id"
        )[:10]
        return {
            "overview": {
                "total_items": InventoryItem.objects.count(),
                "low_stock_items": InventoryItem.objects.filter(current_stock__lte=F("min_stock_level")).count(),
                "total_suppliers": Supplier.objects.count(),
                "active_projects": Project.objects.filter(status=Project.Status.ACTIVE).count(),
                "total_value": money(total_value),
            },
            "recent_transactions": list(recent),
        }

    @staticmethod
    def inventory_value(category_id=None) -> dict:
        items = InventoryItem.objects.select_related("category", "supplier").annotate(value=stock_value())
        if category_id:
            items = items.filter(category_id=category_id)
        items = list(items.order_by("-value", "name"))
        return {
            "items": items,
            "total_value": money(sum((item.value or ZERO for item in items), ZERO)),
            "item_count": len(items),
        }

    @staticmethod
    def category_wise() -> list:
        rows = Category.objects.annotate(
            item_count=Count("inventory_items"),
            total_stock=Sum("inventory_items__current_stock"),
            total_value=Sum(stock_value("inventory_items__")),
            avg_unit_cost=Avg("inventory_items__unit_cost"),
        ).order_by(F("total_value").desc(nulls_last=True), "name")
        return [
            {
                "category_id": row.id,
                "category_name": row.name,
                "item_count": row.item_count,
                "total_stock": row.total_stock or 0,
                "total_value": money(row.total_value),
                "avg_unit_cost": money(row.avg_unit_cost),
            }
            for row in rows
        ]

    @staticmethod
    def supplier_performance() -> list:
        rows = Supplier.objects.annotate(
            item_count=Count("inventory_items"),
            total_value=Sum(stock_value("inventory_items__")),
            avg_unit_cost=Avg("inventory_items__unit_cost"),
        ).order_by(F("total_value").desc(nulls_last=True), "name")
        return [
            {
                "supplier_id": row.id,
                "supplier_name": row.name,
                "contact_person": row.contact_person,
                "email": row.email,
                "phone": row.phone,
                "item_count": row.item_count,
                "total_value": money(row.total_value),
                "avg_unit_cost": money(row.avg_unit_cost),
            }
            for row in rows
        ]

    @staticmethod
    def project_allocations(project_id=None) -> dict:
        allocations = ProjectAllocation.objects.select_related("project", "inventory")
        if project_id:
            allocations = allocations.filter(project_id=project_id)

        rows = []
        total = ZERO
        for allocation in allocations.order_by("-allocated_date", "-id"):
            value = money(allocation.allocated_value)
            total += value
            rows.append(
                {
                    "id": allocation.id,
                    "project_id": allocation.project_id,
                    "project_name": allocation.project.name,
                    "project_status": allocation.project.status,
                    "allocated_quantity": allocation.allocated_quantity,
                    "allocated_date": allocation.allocated_date,
                    "allocation_status": allocation.status,
                    "item_name": allocation.inventory.name,
                    "item_code": allocation.inventory.item_code,
                    "unit": allocation.inventory.unit,
                    "unit_cost": money(allocation.inventory.unit_cost),
                    "allocated_value": value,
                }
            )
        return {
            "allocations": rows,
            "total_allocated_value": total,
            "allocation_count": len(rows),
        }

    @staticmethod
    def monthly_summary(year: int) -> list:
        rows = (
            Transaction.objects.filter(transaction_date__year=year)
            .annotate(month=ExtractMonth("transaction_date"))
            .values("month", "type")
            .annotate(
                transaction_count=Count("id"),
                total_quantity=Sum("quantity"),
                total_cost=Sum("total_cost"),
            )
            .order_by("month", "type")
        )
        return [
            {
                "month": row["month"],
                "type": row["type"],
                "transaction_count": row["transaction_count"],
                "total_quantity": row["total_quantity"] or 0,
                "total_cost": money(row["total_cost"]),
            }
            for row in rows
        ]
