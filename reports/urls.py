from django.urls import path

from .views import (
    CategoryWiseView,
    DashboardView,
    InventoryValueView,
    MonthlySummaryView,
    ProjectAllocationReportView,
    StockMovementView,
    SupplierPerformanceView,
)

urlpatterns = [
    path("dashboard/", DashboardView.as_view(), name="report-dashboard"),
    path("inventory-value/", InventoryValueView.as_view(), name="report-inventory-value"),
    path("stock-movement/", StockMovementView.as_view(), name="report-stock-movement"),
    path("category-wise/", CategoryWiseView.as_view(), name="report-category-wise"),
    path("supplier-performance/", SupplierPerformanceView.as_view(), name="report-supplier-performance"),
    path("project-allocations/", ProjectAllocationReportView.as_view(), name="report-project-allocations"),
    path("monthly-summary/", MonthlySummaryView.as_view(), name="report-monthly-summary"),
]
