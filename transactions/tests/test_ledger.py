# transactions/tests/test_ledger.py

from datetime import timedelta
from decimal import Decimal

from django.test import TestCase
from django.utils import timezone

from businesses.models import Business
from transactions.models import Transaction
from transactions.selectors.ledger import (
    expenses,
    ledger_queryset,
    ledger_summary,
    revenue,
)
from transactions.services.posting_engine import post_transaction
from transactions.tests.fixtures import LedgerFixturesMixin


class LedgerSelectorTests(LedgerFixturesMixin, TestCase):
    def setUp(self):
        super().setUp()

        self.sale_1 = post_transaction(
            business=self.business,
            request=self.sale_request([(self.product_a, 2, "5")]),
        )
        self.sale_2 = post_transaction(
            business=self.business,
            request=self.sale_request([(self.product_a, 1, "30")]),
        )
        self.purchase = post_transaction(
            business=self.business,
            request=self.purchase_request([(self.product_c, 10, "1.50")]),
        )

        # an old sale, outside the recent window
        self.old_sale = post_transaction(
            business=self.business,
            request=self.sale_request(
                [(self.product_c, 1, "100")],
                date=(timezone.now() - timedelta(days=40)).isoformat(),
            ),
        )

    def test_filters_by_type_and_counterparty(self):
        sales = list(ledger_queryset(self.business, type="sale"))
        self.assertEqual(len(sales), 3)

        by_vendor = list(ledger_queryset(self.business, counterparty_id=self.vendor.id))
        self.assertEqual(by_vendor, [self.purchase])

    def test_filters_by_date_range(self):
        start = timezone.now() - timedelta(days=7)
        recent = list(ledger_queryset(self.business, start=start))
        self.assertNotIn(self.old_sale, recent)
        self.assertEqual(len(recent), 3)

    def test_summary_per_type_and_profit_loss(self):
        summary = ledger_summary(self.business)

        self.assertEqual(summary["sale"]["transaction_count"], 3)
        self.assertEqual(summary["sale"]["total_amount"], Decimal("140.00"))
        self.assertEqual(summary["purchase"]["total_amount"], Decimal("15.00"))
        self.assertEqual(summary["profit_loss"], Decimal("125.00"))

    def test_revenue_counts_completed_sales_only(self):
        Transaction.objects.filter(pk=self.sale_2.pk).update(status=Transaction.STATUS_CANCELLED)

        start = timezone.now() - timedelta(days=7)
        self.assertEqual(revenue(self.business, start), Decimal("10.00"))
        self.assertEqual(expenses(self.business, start), Decimal("15.00"))

    def test_empty_business_summary(self):
        empty = Business.objects.create(name="Empty")
        summary = ledger_summary(empty)
        self.assertEqual(summary["sale"]["transaction_count"], 0)
        self.assertEqual(summary["profit_loss"], Decimal("0.00"))
