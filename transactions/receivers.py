# transactions/receivers.py

import logging

from django.dispatch import receiver

from products.models import Product
from transactions.models import Transaction
from transactions.signals import transaction_posted

logger = logging.getLogger(__name__)


@receiver(transaction_posted, dispatch_uid="transactions.log_low_stock_after_sale")
def log_low_stock_after_sale(sender, transaction, **kwargs):
    """Warn about products a sale pushed to or below their minimum level."""
    if transaction.type != Transaction.TYPE_SALE:
        return []

    product_ids = {item.product_id for item in transaction.items.all()}
    low = list(
        Product.objects.filter(pk__in=product_ids, business_id=transaction.business_id)
        .low_stock()
        .order_by("name")
    )

    for product in low:
        logger.warning(
            "Low stock alert",
            extra={
                "business_id": str(product.business_id),
                "product_id": str(product.pk),
                "product_name": product.name,
                "stock": product.stock,
                "min_stock_level": product.min_stock_level,
                "transaction_id": str(transaction.pk),
            },
        )

    return [p.pk for p in low]
