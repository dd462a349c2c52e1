# reports/services/reports.py

"""
PATH: reports/services/reports.py

READ-ONLY REPORTS

Every report reads committed rows only (ledger, catalog, directory) and
never writes. Money values are returned as 2dp strings so views can hand
the dicts straight to Response().

Reports:
- dashboard_summary     counts, month/year-to-date revenue and expenses,
                        low stock, recent transactions
- inventory_report      stock value, low / out-of-stock lists, categories
- transaction_report    ledger grouped by day | week | month
- counterparty_report   one customer's or vendor's totals and history
"""

from __future__ import annotations

import logging
from collections import OrderedDict
from decimal import Decimal

from django.db.models import Count, DecimalField, ExpressionWrapper, F, Sum
from django.db.models.functions import TruncDay, TruncMonth, TruncWeek
from django.utils import timezone

from contacts.models import Contact
from contacts.services.directory import find_active_contact
from products.models import Product
from transactions.models import Transaction, TransactionItem
from transactions.selectors.ledger import expenses, ledger_queryset, revenue

logger = logging.getLogger(__name__)

GROUP_BY_CHOICES = ("day", "week", "month")

INVENTORY_SORT_FIELDS = {"name", "price", "stock", "category", "created_at"}

RECENT_TRANSACTIONS = 5
LOW_STOCK_PREVIEW = 10
TOP_PRODUCTS = 10

_TRUNC = {
    "day": TruncDay,
    "week": TruncWeek,
    "month": TruncMonth,
}


class ReportNotFound(Exception):
    pass


def _money(x) -> str:
    if x is None:
        return "0.00"
    if isinstance(x, Decimal):
        return f"{x:.2f}"
    return f"{Decimal(str(x)):.2f}"


def _stock_value():
    return ExpressionWrapper(
        F("stock") * F("price"),
        output_field=DecimalField(max_digits=14, decimal_places=2),
    )


def _period_label(value, group_by: str) -> str:
    if value is None:
        return ""
    if hasattr(value, "tzinfo") and timezone.is_aware(value):
        value = timezone.localtime(value)
    if group_by == "month":
        return value.strftime("%Y-%m")
    if group_by == "week":
        year, week, _ = value.isocalendar()
        return f"{year}-W{week:02d}"
    return value.strftime("%Y-%m-%d")


def _product_row(p: Product) -> dict:
    return {
        "id": str(p.pk),
        "name": p.name,
        "sku": p.sku,
        "category": p.category,
        "price": _money(p.price),
        "stock": p.stock,
        "min_stock_level": p.min_stock_level,
    }


def _transaction_row(t: Transaction) -> dict:
    return {
        "id": str(t.pk),
        "invoice_number": t.invoice_number,
        "type": t.type,
        "counterparty_name": t.counterparty_name,
        "total_amount": _money(t.total_amount),
        "payment_method": t.payment_method,
        "status": t.status,
        "date": t.date.isoformat(),
    }


# =====================================================
# DASHBOARD
# =====================================================


def dashboard_summary(business) -> dict:
    now = timezone.localtime()
    start_of_month = now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
    start_of_year = start_of_month.replace(month=1)

    products = Product.objects.for_business(business).active()
    contacts = Contact.objects.for_business(business).active()
    low_stock = products.low_stock().order_by("stock", "name")

    def _window(start):
        sales = revenue(business, start)
        purchases = expenses(business, start)
        count = (
            Transaction.objects.for_business(business)
            .completed()
            .filter(date__gte=start)
            .count()
        )
        return {
            "sales": _money(sales),
            "purchases": _money(purchases),
            "profit": _money(sales - purchases),
            "transaction_count": count,
        }

    recent = ledger_queryset(business)[:RECENT_TRANSACTIONS]

    return {
        "overview": {
            "total_products": products.count(),
            "total_customers": contacts.customers().count(),
            "total_vendors": contacts.vendors().count(),
            "low_stock_products_count": low_stock.count(),
        },
        "monthly": _window(start_of_month),
        "yearly": _window(start_of_year),
        "low_stock_products": [_product_row(p) for p in low_stock[:LOW_STOCK_PREVIEW]],
        "recent_transactions": [_transaction_row(t) for t in recent],
    }


# =====================================================
# INVENTORY
# =====================================================


def inventory_report(
    business,
    *,
    category: str | None = None,
    low_stock_only: bool = False,
    sort_by: str = "name",
    sort_order: str = "asc",
) -> dict:
    qs = Product.objects.for_business(business).active()

    if category:
        qs = qs.filter(category__icontains=category)
    if low_stock_only:
        qs = qs.low_stock()

    if sort_by not in INVENTORY_SORT_FIELDS:
        sort_by = "name"
    ordering = f"-{sort_by}" if sort_order == "desc" else sort_by
    qs = qs.order_by(ordering, "pk")

    totals = qs.aggregate(total_value=Sum(_stock_value()), total_stock=Sum("stock"))

    categories = OrderedDict()
    for row in (
        qs.order_by()
        .values("category")
        .annotate(count=Count("id"), total_stock=Sum("stock"), total_value=Sum(_stock_value()))
        .order_by("category")
    ):
        categories[row["category"]] = {
            "count": row["count"],
            "total_stock": int(row["total_stock"] or 0),
            "total_value": _money(row["total_value"]),
        }

    products = list(qs)
    low = [p for p in products if p.is_low_stock]
    out = [p for p in products if p.is_out_of_stock]

    return {
        "products": [_product_row(p) for p in products],
        "statistics": {
            "total_products": len(products),
            "total_stock": int(totals["total_stock"] or 0),
            "total_value": _money(totals["total_value"]),
            "low_stock_count": len(low),
            "out_of_stock_count": len(out),
            "categories": len(categories),
        },
        "low_stock_products": [_product_row(p) for p in low],
        "out_of_stock_products": [_product_row(p) for p in out],
        "category_breakdown": categories,
    }


# =====================================================
# TRANSACTIONS (GROUPED)
# =====================================================


def transaction_report(
    business,
    *,
    start=None,
    end=None,
    type: str | None = None,
    counterparty_id=None,
    group_by: str = "day",
) -> dict:
    if group_by not in GROUP_BY_CHOICES:
        raise ValueError(f"group_by must be one of: {', '.join(GROUP_BY_CHOICES)}")

    qs = ledger_queryset(
        business, type=type, start=start, end=end, counterparty_id=counterparty_id
    )

    flat = qs.order_by().prefetch_related(None)

    rows = (
        flat.annotate(period=_TRUNC[group_by]("date"))
        .values("period", "type")
        .annotate(count=Count("id"), amount=Sum("total_amount"))
        .order_by("period")
    )

    grouped = OrderedDict()
    for row in rows:
        label = _period_label(row["period"], group_by)
        bucket = grouped.setdefault(
            label,
            {
                "period": label,
                "sales": {"count": 0, "amount": Decimal("0.00")},
                "purchases": {"count": 0, "amount": Decimal("0.00")},
            },
        )
        key = "sales" if row["type"] == Transaction.TYPE_SALE else "purchases"
        bucket[key]["count"] += row["count"]
        bucket[key]["amount"] += row["amount"] or Decimal("0.00")

    for bucket in grouped.values():
        for key in ("sales", "purchases"):
            bucket[key]["amount"] = _money(bucket[key]["amount"])

    by_type = {
        r["type"]: r
        for r in flat.values("type").annotate(count=Count("id"), amount=Sum("total_amount"))
    }
    sales = by_type.get(Transaction.TYPE_SALE, {})
    purchases = by_type.get(Transaction.TYPE_PURCHASE, {})

    total_sales = sales.get("amount") or Decimal("0.00")
    total_purchases = purchases.get("amount") or Decimal("0.00")
    sales_count = sales.get("count", 0)
    purchases_count = purchases.get("count", 0)

    return {
        "group_by": group_by,
        "grouped_data": list(grouped.values()),
        "summary": {
            "total_sales": _money(total_sales),
            "total_purchases": _money(total_purchases),
            "profit": _money(total_sales - total_purchases),
            "sales_count": sales_count,
            "purchases_count": purchases_count,
            "total_transactions": sales_count + purchases_count,
            "average_sale_amount": _money(total_sales / sales_count if sales_count else 0),
            "average_purchase_amount": _money(
                total_purchases / purchases_count if purchases_count else 0
            ),
        },
    }


# =====================================================
# COUNTERPARTY (CUSTOMER / VENDOR)
# =====================================================


def counterparty_report(business, contact_id, contact_type: str, *, start=None, end=None) -> dict:
    contact = find_active_contact(business, contact_id, contact_type)
    if contact is None:
        label = "Customer" if contact_type == Contact.TYPE_CUSTOMER else "Vendor"
        raise ReportNotFound(f"{label} not found")

    txn_type = (
        Transaction.TYPE_SALE if contact_type == Contact.TYPE_CUSTOMER else Transaction.TYPE_PURCHASE
    )
    qs = ledger_queryset(business, type=txn_type, start=start, end=end, counterparty_id=contact.pk)

    flat = qs.order_by().prefetch_related(None)
    totals = flat.aggregate(total=Sum("total_amount"), count=Count("id"))
    total_amount = totals["total"] or Decimal("0.00")
    count = totals["count"] or 0

    top_products = [
        {
            "product_id": str(r["product_id"]),
            "product_name": r["product__name"],
            "total_quantity": int(r["total_quantity"] or 0),
            "total_amount": _money(r["total_amount"]),
            "transaction_count": r["transaction_count"],
        }
        for r in (
            TransactionItem.objects.filter(transaction__in=flat.values("pk"))
            .values("product_id", "product__name")
            .annotate(
                total_quantity=Sum("quantity"),
                total_amount=Sum("total"),
                transaction_count=Count("transaction", distinct=True),
            )
            .order_by("-total_amount", "product__name")[:TOP_PRODUCTS]
        )
    ]

    monthly = [
        {
            "month": _period_label(r["month"], "month"),
            "count": r["count"],
            "amount": _money(r["amount"]),
        }
        for r in (
            flat.annotate(month=TruncMonth("date"))
            .values("month")
            .annotate(count=Count("id"), amount=Sum("total_amount"))
            .order_by("month")
        )
    ]

    statistics = {
        "total_amount": _money(total_amount),
        "total_transactions": count,
        "average_amount": _money(total_amount / count if count else 0),
        "current_balance": _money(contact.current_balance),
    }
    if contact_type == Contact.TYPE_CUSTOMER:
        statistics["credit_limit"] = _money(contact.credit_limit)

    logger.debug(
        "Counterparty report built",
        extra={"business_id": str(business.pk), "contact_id": str(contact.pk), "rows": count},
    )

    return {
        "contact": {
            "id": str(contact.pk),
            "name": contact.name,
            "type": contact.type,
            "phone": contact.phone,
            "email": contact.email,
        },
        "transactions": [_transaction_row(t) for t in qs],
        "statistics": statistics,
        "top_products": top_products,
        "monthly_breakdown": monthly,
    }
