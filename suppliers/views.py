from django.db.models import Count, Q
from rest_framework import status
from rest_framework.generics import ListCreateAPIView, RetrieveUpdateDestroyAPIView
from rest_framework.response import Response

from account.permissions import RolePermissionMixin
from core.exceptions import InventoryError
from core.pagination import StandardPagination

from .models import Supplier
from .serializers import SupplierSerializer
from .services import SupplierService


class SupplierPagination(StandardPagination):
    results_key = "suppliers"


class SupplierListCreateView(RolePermissionMixin, ListCreateAPIView):
    serializer_class = SupplierSerializer
    pagination_class = SupplierPagination

    def get_queryset(self):
        queryset = Supplier.objects.annotate(item_count=Count("inventory_items")).order_by("name")
        search = (self.request.query_params.get("search") or "").strip()
        if search:
            queryset = queryset.filter(
                Q(name__icontains=search) | Q(contact_person__icontains=search) | Q(email__icontains=search)
            )
        return queryset


class SupplierDetailView(RolePermissionMixin, RetrieveUpdateDestroyAPIView):
    serializer_class = SupplierSerializer
    queryset = Supplier.objects.annotate(item_count=Count("inventory_items"))

    def destroy(self, request, *args, **kwargs):
        try:
            SupplierService.delete_supplier(kwargs["pk"])
        except InventoryError as e:
            return e.as_response()
        return Response({"message": "Supplier deleted successfully"}, status=status.HTTP_200_OK)
