# products/admin.py

from django.contrib import admin

from products.models import Product


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = (
        "name",
        "sku",
        "business",
        "category",
        "price",
        "stock",
        "min_stock_level",
        "is_low_stock",
        "is_active",
    )
    list_filter = ("is_active", "business", "category")
    search_fields = ("name", "sku", "description")
    ordering = ("business", "name")
    readonly_fields = ("created_at", "updated_at")

    @admin.display(boolean=True, description="Low stock")
    def is_low_stock(self, obj):
        return obj.is_low_stock
