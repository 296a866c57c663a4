from django.contrib import admin

from .models import Project, ProjectAllocation


@admin.register(Project)
class ProjectAdmin(admin.ModelAdmin):
    list_display = ("name", "status", "start_date", "end_date", "budget", "created_at")
    list_filter = ("status",)
    search_fields = ("name", "description")


@admin.register(ProjectAllocation)
class ProjectAllocationAdmin(admin.ModelAdmin):
    list_display = ("id", "project", "inventory", "allocated_quantity", "allocated_date", "allocated_by")
    list_filter = ("status", "project")
    search_fields = ("project__name", "inventory__item_code", "inventory__name")
    readonly_fields = ("project", "inventory", "allocated_quantity", "allocated_by", "created_at")
