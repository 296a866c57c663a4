from django.conf import settings
from django.db import models
from django.utils import timezone


class Project(models.Model):
    class Status(models.TextChoices):
        ACTIVE = "active", "Active"
        ON_HOLD = "on_hold", "On Hold"
        COMPLETED = "completed", "Completed"
        CANCELLED = "cancelled", "Cancelled"

    name = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    start_date = models.DateField(null=True, blank=True)
    end_date = models.DateField(null=True, blank=True)
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.ACTIVE)
    budget = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at", "-id"]

    def __str__(self):
        return self.name


class ProjectAllocation(models.Model):
    """Stock committed to a project; paired with one `out` transaction."""

    class Status(models.TextChoices):
        ALLOCATED = "allocated", "Allocated"

    project = models.ForeignKey(Project, on_delete=models.PROTECT, related_name="allocations")
    inventory = models.ForeignKey("catalog.InventoryItem", on_delete=models.CASCADE, related_name="allocations")
    allocated_quantity = models.PositiveIntegerField()
    allocated_date = models.DateField(default=timezone.localdate)
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.ALLOCATED)
    notes = models.TextField(blank=True)
    allocated_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="project_allocations",
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-allocated_date", "-id"]

    def __str__(self):
        return f"{self.project} <- {self.allocated_quantity} x {self.inventory_id}"

    @property
    def allocated_value(self):
        return self.inventory.unit_cost * self.allocated_quantity
