# products/services/catalog.py

"""
CATALOG READ SERVICE

Tenant-scoped product lookups used by the posting engine and by views.

Rules:
- A product is visible only to its own business.
- Inactive (soft-deleted) products are invisible to posting.
- Malformed ids resolve to None rather than raising, so callers can report
  "not found" with the offending identifier.
"""

from __future__ import annotations

import uuid

from products.models import Product


def _as_uuid(value):
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except (TypeError, ValueError, AttributeError):
        return None


def find_active_product(business, product_id, *, for_update: bool = False):
    """
    Return the active product `product_id` of `business`, or None.

    for_update=True takes a row lock (SELECT ... FOR UPDATE) and must be
    called inside transaction.atomic().
    """
    pk = _as_uuid(product_id)
    if pk is None or business is None:
        return None

    qs = Product.objects.filter(pk=pk, business=business, is_active=True)
    if for_update:
        qs = qs.select_for_update()

    return qs.first()
