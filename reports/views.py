from django.utils import timezone
from rest_framework import permissions
from rest_framework.response import Response
from rest_framework.views import APIView

from core.exceptions import InvalidInput
from core.params import int_param
from inventory.serializers import TransactionSerializer
from inventory.services import TransactionLog
from inventory.views import transaction_filters

from .serializers import (
    CategoryReportSerializer,
    DashboardSerializer,
    InventoryValueSerializer,
    MonthlySummarySerializer,
    ProjectAllocationReportSerializer,
    SupplierReportSerializer,
)
from .services import ReportService


class DashboardView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request):
        return Response(DashboardSerializer(ReportService.dashboard()).data)


class InventoryValueView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request):
        report = ReportService.inventory_value(category_id=int_param(request.query_params, "category_id"))
        return Response(InventoryValueSerializer(report).data)


class StockMovementView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request):
        transactions = TransactionLog.filtered(**transaction_filters(request.query_params))
        return Response(TransactionSerializer(transactions, many=True).data)


class CategoryWiseView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request):
        return Response(CategoryReportSerializer(ReportService.category_wise(), many=True).data)


class SupplierPerformanceView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request):
        return Response(SupplierReportSerializer(ReportService.supplier_performance(), many=True).data)


class ProjectAllocationReportView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request):
        report = ReportService.project_allocations(project_id=int_param(request.query_params, "project_id"))
        return Response(ProjectAllocationReportSerializer(report).data)


class MonthlySummaryView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request):
        year = int_param(request.query_params, "year") or timezone.localdate().year
        if year > 9999:
            raise InvalidInput("year must be a four digit year.")
        summary = ReportService.monthly_summary(year)
        return Response({"year": year, "summary": MonthlySummarySerializer(summary, many=True).data})
