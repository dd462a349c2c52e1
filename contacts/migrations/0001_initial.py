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
            name="Contact",
            fields=[
                (
                    "id",
                    models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False),
                ),
                ("name", models.CharField(db_index=True, max_length=100)),
                (
                    "phone",
                    models.CharField(
                        max_length=30,
                        validators=[
                            django.core.validators.RegexValidator(
                                message="Please enter a valid phone number",
                                regex="^\\+?[\\d\\s\\-\\(\\)]{10,}$",
                            )
                        ],
                    ),
                ),
                ("email", models.EmailField(blank=True, default="", max_length=254)),
                ("address_street", models.CharField(blank=True, default="", max_length=200)),
                ("address_city", models.CharField(blank=True, default="", max_length=100)),
                ("address_state", models.CharField(blank=True, default="", max_length=100)),
                ("address_zip_code", models.CharField(blank=True, default="", max_length=20)),
                ("address_country", models.CharField(blank=True, default="", max_length=100)),
                (
                    "type",
                    models.CharField(
                        choices=[("customer", "Customer"), ("vendor", "Vendor")],
                        max_length=10,
                    ),
                ),
                ("notes", models.TextField(blank=True, default="", max_length=500)),
                (
                    "credit_limit",
                    models.DecimalField(
                        decimal_places=2,
                        default=Decimal("0.00"),
                        max_digits=12,
                        validators=[django.core.validators.MinValueValidator(Decimal("0.00"))],
                    ),
                ),
                (
                    "current_balance",
                    models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=12),
                ),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "business",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="contacts",
                        to="businesses.business",
                    ),
                ),
            ],
            options={
                "ordering": ["name"],
                "indexes": [
                    models.Index(fields=["business", "type"], name="contact_biz_type_idx"),
                    models.Index(fields=["business", "name"], name="contact_biz_name_idx"),
                ],
            },
        ),
        migrations.AddConstraint(
            model_name="contact",
            constraint=models.UniqueConstraint(
                fields=("business", "phone"),
                name="uniq_contact_phone_per_business",
            ),
        ),
    ]
