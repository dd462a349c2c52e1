# products/serializers/product.py

"""
PRODUCT SERIALIZERS

- ProductSerializer: catalog CRUD. `business` is never client-writable; the
  view stamps it from the authenticated user.
- StockAdjustmentSerializer: input for PATCH /products/<id>/stock/.
"""

from rest_framework import serializers

from products.models import Product
from products.services.stock_adjustments import OPERATION_SET, OPERATIONS


class ProductSerializer(serializers.ModelSerializer):
    """
    GUARANTEES:
    - price >= 0, stock >= 0, min_stock_level >= 0
    - sku is normalised (trimmed, upper-cased) and unique per business
    - low/out-of-stock flags are derived, never written
    """

    is_low_stock = serializers.BooleanField(read_only=True)
    is_out_of_stock = serializers.BooleanField(read_only=True)

    class Meta:
        model = Product
        fields = [
            "id",
            "name",
            "description",
            "sku",
            "category",
            "price",
            "stock",
            "min_stock_level",
            "is_low_stock",
            "is_out_of_stock",
            "is_active",
            "created_at",
            "updated_at",
        ]
        read_only_fields = [
            "id",
            "is_low_stock",
            "is_out_of_stock",
            "is_active",
            "created_at",
            "updated_at",
        ]

    def validate_name(self, value):
        value = (value or "").strip()
        if not value:
            raise serializers.ValidationError("Product name is required")
        return value

    def validate_category(self, value):
        value = (value or "").strip()
        if not value:
            raise serializers.ValidationError("Category is required")
        return value

    def validate_price(self, value):
        if value is None or value < 0:
            raise serializers.ValidationError("Price cannot be negative")
        return value

    def validate_sku(self, value):
        value = (value or "").strip().upper()
        if not value:
            return None

        request = self.context.get("request")
        business = getattr(getattr(request, "user", None), "business", None)
        if business is not None:
            qs = Product.objects.filter(business=business, sku=value)
            if self.instance is not None:
                qs = qs.exclude(pk=self.instance.pk)
            if qs.exists():
                raise serializers.ValidationError("A product with this SKU already exists")

        return value


class StockAdjustmentSerializer(serializers.Serializer):
    quantity = serializers.IntegerField(min_value=0)
    operation = serializers.ChoiceField(
        choices=OPERATIONS,
        required=False,
        default=OPERATION_SET,
    )
