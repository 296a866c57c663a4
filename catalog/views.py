import logging

from django.db.models import Count, F, Q
from rest_framework import permissions, status
from rest_framework.generics import ListCreateAPIView, RetrieveUpdateDestroyAPIView
from rest_framework.response import Response
from rest_framework.views import APIView

from account.permissions import RolePermissionMixin
from core.exceptions import NotFound
from core.pagination import StandardPagination
from core.params import int_param

from .models import Category, InventoryItem
from .serializers import CategorySerializer, InventoryItemSerializer

logger = logging.getLogger(__name__)


class InventoryItemPagination(StandardPagination):
    results_key = "items"


class InventoryItemListCreateView(RolePermissionMixin, ListCreateAPIView):
    serializer_class = InventoryItemSerializer
    pagination_class = InventoryItemPagination

    def get_queryset(self):
        params = self.request.query_params
        queryset = InventoryItem.objects.select_related("category", "supplier").order_by("name")

        search = (params.get("search") or "").strip()
        if search:
            queryset = queryset.filter(
                Q(name__icontains=search) | Q(item_code__icontains=search) | Q(description__icontains=search)
            )

        category_id = int_param(params, "category")
        if category_id:
            queryset = queryset.filter(category_id=category_id)

        if (params.get("low_stock") or params.get("lowStock") or "").lower() == "true":
            queryset = queryset.filter(current_stock__lte=F("min_stock_level"))
        return queryset


class InventoryItemDetailView(RolePermissionMixin, RetrieveUpdateDestroyAPIView):
    serializer_class = InventoryItemSerializer
    queryset = InventoryItem.objects.select_related("category", "supplier")

    def perform_update(self, serializer):
        previous_stock = serializer.instance.current_stock
        item = serializer.save()
        if item.current_stock != previous_stock:
            # Administrative override: bypasses the transaction ledger.
            logger.warning(
                "Stock of item=%s overwritten outside the ledger by user=%s: %s -> %s",
                item.id,
                self.request.user.id,
                previous_stock,
                item.current_stock,
            )

    def destroy(self, request, *args, **kwargs):
        item = self.get_object()
        item_id = item.id
        item.delete()
        logger.info("Deleted inventory item=%s by user=%s", item_id, request.user.id)
        return Response({"message": "Item deleted successfully"}, status=status.HTTP_200_OK)


class LowStockAlertView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request):
        items = (
            InventoryItem.objects.select_related("category", "supplier")
            .filter(current_stock__lte=F("min_stock_level"))
            .annotate(shortfall=F("current_stock") - F("min_stock_level"))
            .order_by("shortfall", "name")
        )
        data = InventoryItemSerializer(items, many=True).data
        return Response({"count": len(data), "items": data})


class BarcodeLookupView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request, barcode):
        item = InventoryItem.objects.select_related("category", "supplier").filter(barcode=barcode).first()
        if not item:
            return NotFound("No inventory item with this barcode").as_response()
        return Response(InventoryItemSerializer(item).data)


class CategoryListCreateView(RolePermissionMixin, ListCreateAPIView):
    serializer_class = CategorySerializer
    pagination_class = None

    def get_queryset(self):
        return Category.objects.annotate(item_count=Count("inventory_items")).order_by("name")
