from django.urls import path

from .views import (
    ProjectAllocateView,
    ProjectAllocationListView,
    ProjectDetailView,
    ProjectListCreateView,
)

urlpatterns = [
    path("", ProjectListCreateView.as_view(), name="project-list"),
    path("<int:pk>/", ProjectDetailView.as_view(), name="project-detail"),
    path("<int:pk>/allocations/", ProjectAllocationListView.as_view(), name="project-allocations"),
    path("<int:pk>/allocate/", ProjectAllocateView.as_view(), name="project-allocate"),
]
