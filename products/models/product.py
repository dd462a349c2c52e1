# products/models/product.py

import uuid
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models
from django.db.models import F, Q

from businesses.models import Business

# PositiveIntegerField upper bound on every supported backend
MAX_STOCK = 2147483647


class ProductQuerySet(models.QuerySet):
    def for_business(self, business):
        return self.filter(business=business)

    def active(self):
        return self.filter(is_active=True)

    def low_stock(self):
        return self.filter(stock__lte=F("min_stock_level"))

    def out_of_stock(self):
        return self.filter(stock=0)


class Product(models.Model):
    """
    Represents a sellable / purchasable product of one business.

    STOCK MODEL (IMPORTANT):
    - stock is a plain non-negative counter on the product row
    - it is mutated by direct edits, by the stock adjustment service,
      and by the posting engine (sale: -qty, purchase: +qty)
    - products are never hard-deleted; deactivate with is_active=False
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    business = models.ForeignKey(
        Business,
        on_delete=models.CASCADE,
        related_name="products",
    )

    name = models.CharField(max_length=100, db_index=True)
    description = models.TextField(max_length=500, blank=True, default="")

    sku = models.CharField(
        max_length=50,
        null=True,
        blank=True,
        help_text="Optional stock keeping unit, unique per business when set.",
    )

    category = models.CharField(max_length=50)

    # Current/default selling price
    price = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.00"))],
    )

    stock = models.PositiveIntegerField(default=0)

    min_stock_level = models.PositiveIntegerField(
        default=0,
        help_text="Product is low on stock when stock <= min_stock_level.",
    )

    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = ProductQuerySet.as_manager()

    class Meta:
        ordering = ["name"]
        indexes = [
            models.Index(fields=["business", "name"], name="product_biz_name_idx"),
            models.Index(fields=["business", "category"], name="product_biz_category_idx"),
            models.Index(fields=["business", "stock"], name="product_biz_stock_idx"),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["business", "sku"],
                condition=Q(sku__isnull=False) & ~Q(sku=""),
                name="uniq_product_sku_per_business",
            ),
        ]

    def __str__(self):
        if self.sku:
            return f"{self.name} ({self.sku})"
        return self.name

    def clean(self):
        if self.price is None or Decimal(self.price) < Decimal("0.00"):
            raise ValidationError("Price cannot be negative")

        if self.stock is None or int(self.stock) < 0:
            raise ValidationError("Stock cannot be negative")

        if self.min_stock_level is None or int(self.min_stock_level) < 0:
            raise ValidationError("Minimum stock level cannot be negative")

    @property
    def is_low_stock(self) -> bool:
        return int(self.stock or 0) <= int(self.min_stock_level or 0)

    @property
    def is_out_of_stock(self) -> bool:
        return int(self.stock or 0) == 0
