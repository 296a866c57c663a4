from rest_framework import serializers

from catalog.serializers import InventoryItemSerializer
from inventory.serializers import TransactionSerializer


def money_field():
    return serializers.DecimalField(max_digits=14, decimal_places=2)


class OverviewSerializer(serializers.Serializer):
    total_items = serializers.IntegerField()
    low_stock_items = serializers.IntegerField()
    total_suppliers = serializers.IntegerField()
    active_projects = serializers.IntegerField()
    total_value = money_field()


class DashboardSerializer(serializers.Serializer):
    overview = OverviewSerializer()
    recent_transactions = TransactionSerializer(many=True)


class InventoryValueSerializer(serializers.Serializer):
    items = InventoryItemSerializer(many=True)
    total_value = money_field()
    item_count = serializers.IntegerField()


class CategoryReportSerializer(serializers.Serializer):
    category_id = serializers.IntegerField()
    category_name = serializers.CharField()
    item_count = serializers.IntegerField()
    total_stock = serializers.IntegerField()
    total_value = money_field()
    avg_unit_cost = money_field()


class SupplierReportSerializer(serializers.Serializer):
    supplier_id = serializers.IntegerField()
    supplier_name = serializers.CharField()
    contact_person = serializers.CharField(allow_blank=True)
    email = serializers.CharField(allow_blank=True)
    phone = serializers.CharField(allow_blank=True)
    item_count = serializers.IntegerField()
    total_value = money_field()
    avg_unit_cost = money_field()


class AllocationReportRowSerializer(serializers.Serializer):
    id = serializers.IntegerField()
    project_id = serializers.IntegerField()
    project_name = serializers.CharField()
    project_status = serializers.CharField()
    allocated_quantity = serializers.IntegerField()
    allocated_date = serializers.DateField()
    allocation_status = serializers.CharField()
    item_name = serializers.CharField()
    item_code = serializers.CharField()
    unit = serializers.CharField()
    unit_cost = money_field()
    allocated_value = money_field()


class ProjectAllocationReportSerializer(serializers.Serializer):
    allocations = AllocationReportRowSerializer(many=True)
    total_allocated_value = money_field()
    allocation_count = serializers.IntegerField()


class MonthlySummarySerializer(serializers.Serializer):
    month = serializers.IntegerField()
    type = serializers.CharField()
    transaction_count = serializers.IntegerField()
    total_quantity = serializers.IntegerField()
    total_cost = money_field()
