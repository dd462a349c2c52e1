# products/services/stock_adjustments.py

"""
STOCK ADJUSTMENTS SERVICE

Purpose:
- Manual stock corrections on a product outside of transaction posting
  (stock count corrections, breakage, opening stock).

Operations:
- set       stock = quantity
- add       stock = stock + quantity
- subtract  stock = max(0, stock - quantity)

Rules:
- quantity must be a non-negative integer
- subtract FLOORS at zero. This is deliberately different from posting, where
  a sale that would drive stock negative is rejected outright.
- the product row is locked for the read-modify-write
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from django.db import transaction

from products.models import Product
from products.services.catalog import find_active_product

logger = logging.getLogger(__name__)

OPERATION_SET = "set"
OPERATION_ADD = "add"
OPERATION_SUBTRACT = "subtract"

OPERATIONS = (OPERATION_SET, OPERATION_ADD, OPERATION_SUBTRACT)


class StockAdjustmentError(Exception):
    """Domain error for adjustment failures."""


class ProductNotFoundError(StockAdjustmentError):
    pass


@dataclass(frozen=True)
class StockAdjustmentResult:
    product: Product
    operation: str
    quantity: int
    previous_stock: Optional[int]
    new_stock: int


def _to_int_quantity(value) -> int:
    if value is None or value == "":
        raise StockAdjustmentError("quantity is required")

    if isinstance(value, bool):
        # guardrail: bool is an int subclass in Python
        raise StockAdjustmentError("quantity must be an integer")

    try:
        qty = int(value)
    except (TypeError, ValueError):
        raise StockAdjustmentError("quantity must be an integer")

    if str(value).strip() != str(qty) and not isinstance(value, int):
        raise StockAdjustmentError("quantity must be a whole number")

    if qty < 0:
        raise StockAdjustmentError("quantity must be a non-negative integer")

    return qty


def compute_adjusted_stock(current: int, quantity: int, operation: str) -> int:
    if operation == OPERATION_ADD:
        return current + quantity
    if operation == OPERATION_SUBTRACT:
        return max(0, current - quantity)
    if operation == OPERATION_SET:
        return quantity
    raise StockAdjustmentError(
        f"Operation must be one of: {', '.join(OPERATIONS)}"
    )


@transaction.atomic
def adjust_product_stock(
    *,
    business,
    product_id,
    quantity,
    operation: str = OPERATION_SET,
) -> StockAdjustmentResult:
    op = (operation or OPERATION_SET).strip().lower()
    if op not in OPERATIONS:
        raise StockAdjustmentError(
            f"Operation must be one of: {', '.join(OPERATIONS)}"
        )

    qty = _to_int_quantity(quantity)

    product = find_active_product(business, product_id, for_update=True)
    if product is None:
        raise ProductNotFoundError("Product not found")

    current = int(product.stock or 0)
    new_stock = compute_adjusted_stock(current, qty, op)

    product.stock = new_stock
    product.save(update_fields=["stock", "updated_at"])

    logger.info(
        "Product stock adjusted",
        extra={
            "business_id": str(product.business_id),
            "product_id": str(product.pk),
            "operation": op,
            "quantity": qty,
            "previous_stock": current,
            "new_stock": new_stock,
        },
    )

    return StockAdjustmentResult(
        product=product,
        operation=op,
        quantity=qty,
        previous_stock=None if op == OPERATION_SET else current,
        new_stock=new_stock,
    )
