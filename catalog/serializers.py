from decimal import Decimal

from django.db import transaction
from rest_framework import serializers

from inventory.models import Transaction
from inventory.services import StockMutator
from suppliers.models import Supplier
from .models import Category, InventoryItem


class CategorySerializer(serializers.ModelSerializer):
    item_count = serializers.IntegerField(read_only=True, required=False)

    class Meta:
        model = Category
        fields = ["id", "name", "description", "item_count", "created_at"]
        read_only_fields = ["id", "created_at"]


class InventoryItemSerializer(serializers.ModelSerializer):
    category_id = serializers.PrimaryKeyRelatedField(
        queryset=Category.objects.all(),
        source="category",
        required=False,
        allow_null=True,
    )
    supplier_id = serializers.PrimaryKeyRelatedField(
        queryset=Supplier.objects.all(),
        source="supplier",
        required=False,
        allow_null=True,
    )
    category_name = serializers.SerializerMethodField()
    supplier_name = serializers.SerializerMethodField()
    is_low_stock = serializers.BooleanField(read_only=True)
    total_value = serializers.DecimalField(max_digits=14, decimal_places=2, read_only=True)

    class Meta:
        model = InventoryItem
        fields = [
            "id",
            "item_code",
            "name",
            "description",
            "category_id",
            "category_name",
            "supplier_id",
            "supplier_name",
            "unit",
            "current_stock",
            "min_stock_level",
            "max_stock_level",
            "unit_cost",
            "total_value",
            "location",
            "barcode",
            "is_low_stock",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["id", "created_at", "updated_at"]

    def get_category_name(self, obj):
        return obj.category.name if obj.category_id else None

    def get_supplier_name(self, obj):
        return obj.supplier.name if obj.supplier_id else None

    def validate_item_code(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError("Item code required")
        if self.instance is not None and value != self.instance.item_code:
            raise serializers.ValidationError("Item code cannot be changed.")
        return value

    def validate_barcode(self, value):
        # Blank barcodes are stored as NULL so the unique index ignores them.
        value = (value or "").strip()
        return value or None

    def validate_unit_cost(self, value):
        if value is not None and value < Decimal("0"):
            raise serializers.ValidationError("unit_cost must be >= 0.")
        return value

    def validate(self, attrs):
        min_level = attrs.get("min_stock_level", getattr(self.instance, "min_stock_level", 0))
        max_level = attrs.get("max_stock_level", getattr(self.instance, "max_stock_level", 0))
        if max_level and max_level < min_level:
            raise serializers.ValidationError({"max_stock_level": "max_stock_level cannot be below min_stock_level."})
        return attrs

    @transaction.atomic
    def create(self, validated_data):
        opening_stock = validated_data.pop("current_stock", 0)
        item = InventoryItem.objects.create(current_stock=0, **validated_data)
        if opening_stock:
            # Opening balance goes through the ledger so the counter can be replayed from the log.
            request = self.context.get("request")
            StockMutator.record_transaction(
                type=Transaction.Type.ADJUSTMENT,
                inventory_id=item.id,
                quantity=opening_stock,
                unit_cost=item.unit_cost,
                reference_number="OPENING",
                notes="Opening balance",
                user_id=request.user.id if request else None,
            )
            item.refresh_from_db()
        return item
