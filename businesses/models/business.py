# businesses/models/business.py

import uuid

from django.db import models
from django.db.models import Q


class Business(models.Model):
    """
    A tenant.

    Every product, contact and transaction is scoped to exactly one business
    and is never visible to another one.

    - code is optional, but if provided it must be unique
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    name = models.CharField(max_length=255)

    code = models.CharField(
        max_length=50,
        null=True,
        blank=True,
        help_text="Short business identifier chosen at registration (optional, unique if set).",
        db_index=True,
    )

    address = models.TextField(blank=True)
    phone = models.CharField(max_length=50, blank=True)

    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]
        verbose_name_plural = "businesses"
        constraints = [
            models.UniqueConstraint(
                fields=["code"],
                condition=Q(code__isnull=False) & ~Q(code=""),
                name="uniq_business_code_when_present",
            ),
        ]

    def __str__(self):
        return self.name
