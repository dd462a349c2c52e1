# products/views/product.py

"""
PRODUCT VIEWSET

Purpose:
- Catalog CRUD scoped to the caller's business
- Low stock list and category breakdown
- Manual stock adjustment (set / add / subtract, floored at zero)

Rules:
- DELETE is a soft delete (is_active=False); historical transactions keep
  pointing at the product.
- Listing shows active products only.
"""

import logging

from django.db.models import Count, DecimalField, ExpressionWrapper, F, Sum
from django_filters.rest_framework import DjangoFilterBackend
from drf_spectacular.utils import OpenApiResponse, extend_schema
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated

from backend.mixins import BusinessScopedMixin, EnvelopeResponseMixin
from backend.pagination import paginator_for
from backend.responses import fail, ok
from permissions.roles import (
    CAP_INVENTORY_ADJUST,
    CAP_INVENTORY_EDIT,
    CAP_INVENTORY_VIEW,
    HasCapability,
    IsBusinessMember,
)
from products.filters import ProductFilter
from products.models import Product
from products.serializers import ProductSerializer, StockAdjustmentSerializer
from products.services.stock_adjustments import (
    ProductNotFoundError,
    StockAdjustmentError,
    adjust_product_stock,
)

logger = logging.getLogger(__name__)


class ProductViewSet(BusinessScopedMixin, EnvelopeResponseMixin, viewsets.ModelViewSet):
    serializer_class = ProductSerializer
    permission_classes = [IsAuthenticated, IsBusinessMember, HasCapability]
    pagination_class = paginator_for("products")
    filter_backends = [DjangoFilterBackend]
    filterset_class = ProductFilter
    lookup_value_regex = "[0-9a-fA-F-]{36}"

    required_capability = CAP_INVENTORY_VIEW
    action_capabilities = {
        "create": CAP_INVENTORY_EDIT,
        "update": CAP_INVENTORY_EDIT,
        "partial_update": CAP_INVENTORY_EDIT,
        "destroy": CAP_INVENTORY_EDIT,
        "stock": CAP_INVENTORY_ADJUST,
    }

    item_key = "product"
    created_message = "Product created successfully"
    updated_message = "Product updated successfully"
    deleted_message = "Product deleted successfully"

    def get_queryset(self):
        return self.scope_queryset(Product.objects.active()).order_by("name")

    def perform_destroy(self, instance):
        instance.is_active = False
        instance.save(update_fields=["is_active", "updated_at"])
        logger.info(
            "Product deactivated",
            extra={"business_id": str(instance.business_id), "product_id": str(instance.pk)},
        )

    # -----------------------------
    # Low stock
    # -----------------------------
    @extend_schema(
        responses={200: ProductSerializer(many=True)},
        description="Active products whose stock is at or below their minimum level.",
    )
    @action(detail=False, methods=["get"], url_path="low-stock")
    def low_stock(self, request):
        qs = self.get_queryset().low_stock().order_by("stock", "name")
        data = self.get_serializer(qs, many=True).data
        return ok({"products": data, "count": len(data)})

    # -----------------------------
    # Categories
    # -----------------------------
    @extend_schema(description="Distinct categories with product count and stock totals.")
    @action(detail=False, methods=["get"], url_path="categories")
    def categories(self, request):
        rows = (
            self.get_queryset()
            .order_by()
            .values("category")
            .annotate(
                product_count=Count("id"),
                total_stock=Sum("stock"),
                total_value=Sum(
                    ExpressionWrapper(
                        F("stock") * F("price"),
                        output_field=DecimalField(max_digits=14, decimal_places=2),
                    )
                ),
            )
            .order_by("category")
        )

        categories = [
            {
                "category": r["category"],
                "product_count": r["product_count"],
                "total_stock": int(r["total_stock"] or 0),
                "total_value": str(r["total_value"] or "0.00"),
            }
            for r in rows
        ]
        return ok({"categories": categories})

    # -----------------------------
    # Stock adjustment
    # -----------------------------
    @extend_schema(
        request=StockAdjustmentSerializer,
        responses={
            200: OpenApiResponse(description="Stock updated"),
            400: OpenApiResponse(description="Invalid quantity or operation"),
            404: OpenApiResponse(description="Product not found"),
        },
        description="Manual stock correction. subtract never goes below zero.",
    )
    @action(detail=True, methods=["patch"], url_path="stock")
    def stock(self, request, pk=None):
        serializer = StockAdjustmentSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            result = adjust_product_stock(
                business=self.get_business(),
                product_id=pk,
                quantity=serializer.validated_data["quantity"],
                operation=serializer.validated_data["operation"],
            )
        except ProductNotFoundError as exc:
            return fail(str(exc), status=status.HTTP_404_NOT_FOUND)
        except StockAdjustmentError as exc:
            return fail(str(exc))

        return ok(
            {
                "product": ProductSerializer(result.product, context={"request": request}).data,
                "operation": result.operation,
                "previous_stock": result.previous_stock,
                "new_stock": result.new_stock,
            },
            "Product stock updated successfully",
        )
