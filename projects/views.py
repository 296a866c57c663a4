from django.db.models import Count, Q
from rest_framework import permissions, status
from rest_framework.generics import ListCreateAPIView, RetrieveUpdateDestroyAPIView
from rest_framework.response import Response
from rest_framework.views import APIView

from account.permissions import IsManagerOrAdmin, RolePermissionMixin
from core.exceptions import InventoryError, InvalidInput, NotFound
from core.pagination import StandardPagination

from .models import Project, ProjectAllocation
from .serializers import AllocateSerializer, ProjectAllocationSerializer, ProjectSerializer
from .services import AllocationService, ProjectService


class ProjectPagination(StandardPagination):
    results_key = "projects"


class ProjectListCreateView(RolePermissionMixin, ListCreateAPIView):
    serializer_class = ProjectSerializer
    pagination_class = ProjectPagination

    def get_queryset(self):
        queryset = Project.objects.annotate(allocation_count=Count("allocations")).order_by("-created_at", "-id")
        search = (self.request.query_params.get("search") or "").strip()
        if search:
            queryset = queryset.filter(Q(name__icontains=search) | Q(description__icontains=search))
        project_status = self.request.query_params.get("status")
        if project_status:
            if project_status not in Project.Status.values:
                raise InvalidInput("status must be one of: " + ", ".join(Project.Status.values))
            queryset = queryset.filter(status=project_status)
        return queryset


class ProjectDetailView(RolePermissionMixin, RetrieveUpdateDestroyAPIView):
    serializer_class = ProjectSerializer
    queryset = Project.objects.annotate(allocation_count=Count("allocations"))

    def destroy(self, request, *args, **kwargs):
        try:
            ProjectService.delete_project(kwargs["pk"])
        except InventoryError as e:
            return e.as_response()
        return Response({"message": "Project deleted successfully"}, status=status.HTTP_200_OK)


class ProjectAllocationListView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request, pk):
        if not Project.objects.filter(pk=pk).exists():
            return NotFound("Project not found").as_response()
        allocations = (
            ProjectAllocation.objects.filter(project_id=pk)
            .select_related("inventory", "transaction")
            .order_by("-allocated_date", "-id")
        )
        return Response(ProjectAllocationSerializer(allocations, many=True).data)


class ProjectAllocateView(APIView):
    permission_classes = [permissions.IsAuthenticated, IsManagerOrAdmin]

    def post(self, request, pk):
        serializer = AllocateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            allocation = AllocationService.allocate(
                project_id=pk,
                user_id=request.user.id,
                **serializer.validated_data,
            )
        except InventoryError as e:
            return e.as_response()

        return Response(
            {
                "message": "Inventory allocated successfully",
                "id": allocation.id,
                "allocation": ProjectAllocationSerializer(allocation).data,
            },
            status=status.HTTP_201_CREATED,
        )
