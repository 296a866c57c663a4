from django.contrib import admin

from .models import Category, InventoryItem


@admin.register(Category)
class CategoryAdmin(admin.ModelAdmin):
    list_display = ("name", "created_at")
    search_fields = ("name",)


@admin.register(InventoryItem)
class InventoryItemAdmin(admin.ModelAdmin):
    list_display = ("item_code", "name", "category", "supplier", "current_stock", "min_stock_level", "unit_cost")
    list_filter = ("category", "supplier")
    search_fields = ("item_code", "name", "barcode")
