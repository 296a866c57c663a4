from rest_framework import permissions, status
from rest_framework.generics import ListAPIView, ListCreateAPIView, RetrieveAPIView
from rest_framework.response import Response
from rest_framework.views import APIView

from account.permissions import CanRecordTransactions, RolePermissionMixin
from core.exceptions import InvalidInput, InventoryError
from core.pagination import StandardPagination
from core.params import date_param, int_param

from .models import Transaction
from .serializers import RecordTransactionSerializer, TransactionSerializer, TransactionSummarySerializer
from .services import StockMutator, TransactionLog


class TransactionPagination(StandardPagination):
    results_key = "transactions"


def transaction_filters(params):
    """Read the optional ledger filters from query params."""
    transaction_type = params.get("type") or None
    if transaction_type and transaction_type not in Transaction.Type.values:
        raise InvalidInput("type must be one of: " + ", ".join(Transaction.Type.values))
    return {
        "type": transaction_type,
        "inventory_id": int_param(params, "inventory_id"),
        "project_id": int_param(params, "project_id"),
        "start_date": date_param(params, "start_date"),
        "end_date": date_param(params, "end_date"),
    }


class TransactionListCreateView(RolePermissionMixin, ListCreateAPIView):
    serializer_class = TransactionSerializer
    pagination_class = TransactionPagination
    write_permission_classes = [permissions.IsAuthenticated, CanRecordTransactions]

    def get_queryset(self):
        return TransactionLog.filtered(**transaction_filters(self.request.query_params))

    def create(self, request, *args, **kwargs):
        serializer = RecordTransactionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            record = StockMutator.apply(serializer.to_draft(user_id=request.user.id))
        except InventoryError as e:
            return e.as_response()

        return Response(
            {
                "message": "Transaction created successfully",
                "id": record.id,
                "transaction": TransactionSerializer(record).data,
            },
            status=status.HTTP_201_CREATED,
        )


class TransactionDetailView(RetrieveAPIView):
    permission_classes = [permissions.IsAuthenticated]
    serializer_class = TransactionSerializer
    queryset = Transaction.objects.select_related("inventory", "project", "user")


class TransactionSummaryView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request):
        start_date = date_param(request.query_params, "start_date")
        end_date = date_param(request.query_params, "end_date")
        summary = TransactionLog.summary(start_date=start_date, end_date=end_date)
        return Response(TransactionSummarySerializer(summary).data)


class TransactionsByTypeView(ListAPIView):
    permission_classes = [permissions.IsAuthenticated]
    serializer_class = TransactionSerializer
    pagination_class = TransactionPagination

    def get_queryset(self):
        transaction_type = self.kwargs["type"]
        if transaction_type not in Transaction.Type.values:
            raise InvalidInput("type must be one of: " + ", ".join(Transaction.Type.values))
        return TransactionLog.filtered(type=transaction_type)
