from django.urls import path

from .views import (
    BarcodeLookupView,
    CategoryListCreateView,
    InventoryItemDetailView,
    InventoryItemListCreateView,
    LowStockAlertView,
)

urlpatterns = [
    path('', InventoryItemListCreateView.as_view(), name='inventory-list'),
    path('<int:pk>/', InventoryItemDetailView.as_view(), name='inventory-detail'),
    path('alerts/low-stock/', LowStockAlertView.as_view(), name='inventory-low-stock'),
    path('barcode/<str:barcode>/', BarcodeLookupView.as_view(), name='inventory-barcode'),
    path('categories/', CategoryListCreateView.as_view(), name='category-list'),
]
