import uuid
from decimal import Decimal

import django.core.validators
import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        ("businesses", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Product",
            fields=[
                (
                    "id",
                    models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False),
                ),
                ("name", models.CharField(db_index=True, max_length=100)),
                ("description", models.TextField(blank=True, default="", max_length=500)),
                (
                    "sku",
                    models.CharField(
                        blank=True,
                        help_text="Optional stock keeping unit, unique per business when set.",
                        max_length=50,
                        null=True,
                    ),
                ),
                ("category", models.CharField(max_length=50)),
                (
                    "price",
                    models.DecimalField(
                        decimal_places=2,
                        max_digits=12,
                        validators=[django.core.validators.MinValueValidator(Decimal("0.00"))],
                    ),
                ),
                ("stock", models.PositiveIntegerField(default=0)),
                (
                    "min_stock_level",
                    models.PositiveIntegerField(
                        default=0,
                        help_text="Product is low on stock when stock <= min_stock_level.",
                    ),
                ),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "business",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="products",
                        to="businesses.business",
                    ),
                ),
            ],
            options={
                "ordering": ["name"],
                "indexes": [
                    models.Index(fields=["business", "name"], name="product_biz_name_idx"),
                    models.Index(fields=["business", "category"], name="product_biz_category_idx"),
                    models.Index(fields=["business", "stock"], name="product_biz_stock_idx"),
                ],
            },
        ),
        migrations.AddConstraint(
            model_name="product",
            constraint=models.UniqueConstraint(
                condition=models.Q(("sku__isnull", False), models.Q(("sku", ""), _negated=True)),
                fields=("business", "sku"),
                name="uniq_product_sku_per_business",
            ),
        ),
    ]
