from decimal import Decimal

from rest_framework import serializers

from .models import Transaction
from .services import TransactionDraft


class RecordTransactionSerializer(serializers.Serializer):
    type = serializers.ChoiceField(choices=Transaction.Type.choices)
    inventory_id = serializers.IntegerField(min_value=1)
    quantity = serializers.IntegerField(min_value=1)
    unit_cost = serializers.DecimalField(
        max_digits=10, decimal_places=2, min_value=Decimal("0.00"), required=False, allow_null=True
    )
    reference_number = serializers.CharField(max_length=100, required=False, allow_blank=True, allow_null=True)
    notes = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    project_id = serializers.IntegerField(min_value=1, required=False, allow_null=True)

    def to_draft(self, user_id=None) -> TransactionDraft:
        data = self.validated_data
        return TransactionDraft(
            type=data["type"],
            inventory_id=data["inventory_id"],
            quantity=data["quantity"],
            unit_cost=data.get("unit_cost"),
            reference_number=data.get("reference_number") or "",
            notes=data.get("notes") or "",
            project_id=data.get("project_id"),
            user_id=user_id,
        )


class TransactionSerializer(serializers.ModelSerializer):
    item_name = serializers.CharField(source="inventory.name", read_only=True)
    item_code = serializers.CharField(source="inventory.item_code", read_only=True)
    project_name = serializers.SerializerMethodField()
    username = serializers.SerializerMethodField()
    stock_delta = serializers.IntegerField(read_only=True)

    class Meta:
        model = Transaction
        fields = [
            "id",
            "type",
            "inventory_id",
            "item_name",
            "item_code",
            "quantity",
            "stock_delta",
            "unit_cost",
            "total_cost",
            "reference_number",
            "notes",
            "project_id",
            "project_name",
            "allocation_id",
            "user_id",
            "username",
            "transaction_date",
        ]
        read_only_fields = fields

    def get_project_name(self, obj):
        return obj.project.name if obj.project_id else None

    def get_username(self, obj):
        return obj.user.username if obj.user_id else None


class TransactionSummarySerializer(serializers.Serializer):
    total_transactions = serializers.IntegerField()
    total_in = serializers.IntegerField()
    total_out = serializers.IntegerField()
    total_cost_in = serializers.DecimalField(max_digits=14, decimal_places=2)
    total_cost_out = serializers.DecimalField(max_digits=14, decimal_places=2)
