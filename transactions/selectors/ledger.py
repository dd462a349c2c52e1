# transactions/selectors/ledger.py

"""
LEDGER READ SIDE

Range queries over committed transactions. Never mutates; never involves
the posting engine. Used by the transaction list/summary endpoints and by
reports.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

from django.db.models import Avg, Count, Q, Sum

from transactions.models import Transaction

ZERO = Decimal("0.00")


def _money(value) -> Decimal:
    return Decimal(str(value or "0")).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


def ledger_queryset(
    business,
    *,
    type=None,
    start=None,
    end=None,
    counterparty_id=None,
    status=None,
):
    """
    Transactions of `business`, newest first.

    start / end are inclusive datetimes; counterparty_id matches either the
    customer or the vendor reference.
    """
    qs = Transaction.objects.for_business(business).with_details()

    if type:
        qs = qs.filter(type=type)
    if start is not None:
        qs = qs.filter(date__gte=start)
    if end is not None:
        qs = qs.filter(date__lte=end)
    if counterparty_id:
        qs = qs.filter(Q(customer_id=counterparty_id) | Q(vendor_id=counterparty_id))
    if status:
        qs = qs.filter(status=status)

    return qs.order_by("-date", "-created_at")


def ledger_summary(business, *, start=None, end=None, status=None) -> dict:
    """
    Per-type totals plus profit/loss (sales - purchases).

    {
        "sale":     {"total_amount", "transaction_count", "average_amount"},
        "purchase": {...},
        "profit_loss": Decimal,
    }
    """
    qs = Transaction.objects.for_business(business)
    if start is not None:
        qs = qs.filter(date__gte=start)
    if end is not None:
        qs = qs.filter(date__lte=end)
    if status:
        qs = qs.filter(status=status)

    rows = (
        qs.order_by()
        .values("type")
        .annotate(
            total_amount=Sum("total_amount"),
            transaction_count=Count("id"),
            average_amount=Avg("total_amount"),
        )
    )

    summary = {
        Transaction.TYPE_SALE: {"total_amount": ZERO, "transaction_count": 0, "average_amount": ZERO},
        Transaction.TYPE_PURCHASE: {"total_amount": ZERO, "transaction_count": 0, "average_amount": ZERO},
    }
    for row in rows:
        summary[row["type"]] = {
            "total_amount": _money(row["total_amount"]),
            "transaction_count": int(row["transaction_count"] or 0),
            "average_amount": _money(row["average_amount"]),
        }

    summary["profit_loss"] = (
        summary[Transaction.TYPE_SALE]["total_amount"]
        - summary[Transaction.TYPE_PURCHASE]["total_amount"]
    )
    return summary


def _completed_total(business, txn_type, start=None, end=None) -> Decimal:
    qs = Transaction.objects.for_business(business).completed().filter(type=txn_type)
    if start is not None:
        qs = qs.filter(date__gte=start)
    if end is not None:
        qs = qs.filter(date__lte=end)
    return _money(qs.aggregate(total=Sum("total_amount"))["total"])


def revenue(business, start=None, end=None) -> Decimal:
    """Sum of completed sales in [start, end]."""
    return _completed_total(business, Transaction.TYPE_SALE, start, end)


def expenses(business, start=None, end=None) -> Decimal:
    """Sum of completed purchases in [start, end]."""
    return _completed_total(business, Transaction.TYPE_PURCHASE, start, end)
