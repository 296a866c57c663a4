from decimal import Decimal

from rest_framework import serializers

from .models import Project, ProjectAllocation


class ProjectSerializer(serializers.ModelSerializer):
    allocation_count = serializers.IntegerField(read_only=True, required=False)

    class Meta:
        model = Project
        fields = [
            "id",
            "name",
            "description",
            "start_date",
            "end_date",
            "status",
            "budget",
            "allocation_count",
            "created_at",
        ]
        read_only_fields = ["id", "created_at"]

    def validate_name(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError("Project name required")
        return value

    def validate_budget(self, value):
        if value is not None and value < Decimal("0"):
            raise serializers.ValidationError("budget must be >= 0.")
        return value

    def validate(self, attrs):
        start_date = attrs.get("start_date", getattr(self.instance, "start_date", None))
        end_date = attrs.get("end_date", getattr(self.instance, "end_date", None))
        if start_date and end_date and end_date < start_date:
            raise serializers.ValidationError({"end_date": "end_date cannot be before start_date."})
        return attrs


class ProjectAllocationSerializer(serializers.ModelSerializer):
    item_name = serializers.CharField(source="inventory.name", read_only=True)
    item_code = serializers.CharField(source="inventory.item_code", read_only=True)
    unit = serializers.CharField(source="inventory.unit", read_only=True)
    transaction_id = serializers.SerializerMethodField()

    class Meta:
        model = ProjectAllocation
        fields = [
            "id",
            "project_id",
            "inventory_id",
            "item_name",
            "item_code",
            "unit",
            "allocated_quantity",
            "allocated_date",
            "status",
            "notes",
            "transaction_id",
            "created_at",
        ]
        read_only_fields = fields

    def get_transaction_id(self, obj):
        transaction = getattr(obj, "transaction", None)
        return transaction.id if transaction else None


class AllocateSerializer(serializers.Serializer):
    inventory_id = serializers.IntegerField(min_value=1)
    allocated_quantity = serializers.IntegerField(
        min_value=1, error_messages={"min_value": "Allocated quantity must be positive"}
    )
    notes = serializers.CharField(required=False, allow_blank=True, allow_null=True)
