# reports/tests/test_reports.py

from django.contrib.auth import get_user_model
from django.test import TestCase
from django.utils import timezone
from rest_framework.test import APIClient

from reports.services import ReportNotFound, counterparty_report, inventory_report, transaction_report
from transactions.services.posting_engine import post_transaction
from transactions.tests.fixtures import LedgerFixturesMixin

User = get_user_model()

URL = "/api/reports/"


class ReportFixturesMixin(LedgerFixturesMixin):
    """
    After setUp:
    - A: stock 8, B: stock 2, C: stock 15, D: stock 0 (min 1)
    - sales 17.50 (two), purchases 15.00 (one)
    """

    def setUp(self):
        super().setUp()
        self.product_d = self.make_product("Product D", stock=0, min_stock_level=1, price="4.00")

        post_transaction(business=self.business, request=self.sale_request([(self.product_a, 2, "5")]))
        post_transaction(business=self.business, request=self.sale_request([(self.product_b, 1, "7.50")]))
        post_transaction(business=self.business, request=self.purchase_request([(self.product_c, 10, "1.50")]))


class ReportServiceTests(ReportFixturesMixin, TestCase):
    def test_inventory_statistics(self):
        report = inventory_report(self.business)
        stats = report["statistics"]

        self.assertEqual(stats["total_products"], 4)
        self.assertEqual(stats["total_value"], "85.00")
        self.assertEqual(stats["low_stock_count"], 1)
        self.assertEqual(stats["out_of_stock_count"], 1)
        self.assertEqual(stats["categories"], 1)
        self.assertEqual(report["category_breakdown"]["General"]["count"], 4)
        self.assertEqual([p["name"] for p in report["out_of_stock_products"]], ["Product D"])

    def test_inventory_sorting(self):
        report = inventory_report(self.business, sort_by="stock", sort_order="desc")
        self.assertEqual(report["products"][0]["name"], "Product C")

        # unknown sort field falls back to name
        report = inventory_report(self.business, sort_by="password")
        self.assertEqual(report["products"][0]["name"], "Product A")

    def test_transaction_report_summary(self):
        report = transaction_report(self.business, group_by="month")
        summary = report["summary"]

        self.assertEqual(summary["total_sales"], "17.50")
        self.assertEqual(summary["total_purchases"], "15.00")
        self.assertEqual(summary["profit"], "2.50")
        self.assertEqual(summary["sales_count"], 2)
        self.assertEqual(summary["average_sale_amount"], "8.75")

        self.assertEqual(len(report["grouped_data"]), 1)
        bucket = report["grouped_data"][0]
        self.assertEqual(bucket["period"], timezone.localtime().strftime("%Y-%m"))
        self.assertEqual(bucket["sales"], {"count": 2, "amount": "17.50"})
        self.assertEqual(bucket["purchases"], {"count": 1, "amount": "15.00"})

    def test_transaction_report_week_label(self):
        report = transaction_report(self.business, group_by="week")
        year, week, _ = timezone.localtime().isocalendar()
        self.assertEqual(report["grouped_data"][0]["period"], f"{year}-W{week:02d}")

    def test_transaction_report_rejects_unknown_grouping(self):
        with self.assertRaises(ValueError):
            transaction_report(self.business, group_by="hour")

    def test_customer_report(self):
        report = counterparty_report(self.business, self.customer.id, "customer")

        self.assertEqual(report["contact"]["name"], "Ada Lovelace")
        self.assertEqual(report["statistics"]["total_amount"], "17.50")
        self.assertEqual(report["statistics"]["total_transactions"], 2)
        self.assertEqual(report["statistics"]["average_amount"], "8.75")
        self.assertIn("credit_limit", report["statistics"])
        self.assertEqual(
            [p["product_name"] for p in report["top_products"]],
            ["Product A", "Product B"],
        )
        self.assertEqual(len(report["monthly_breakdown"]), 1)

    def test_vendor_report_with_customer_id_is_not_found(self):
        with self.assertRaisesMessage(ReportNotFound, "Vendor not found"):
            counterparty_report(self.business, self.customer.id, "vendor")


class ReportApiTests(ReportFixturesMixin, TestCase):
    def setUp(self):
        super().setUp()
        self.client = APIClient()
        self.client.force_authenticate(user=self.user)

    def test_dashboard(self):
        res = self.client.get(URL + "dashboard/")
        self.assertEqual(res.status_code, 200)

        data = res.data["data"]
        self.assertEqual(
            data["overview"],
            {
                "total_products": 4,
                "total_customers": 1,
                "total_vendors": 1,
                "low_stock_products_count": 1,
            },
        )
        self.assertEqual(data["monthly"]["sales"], "17.50")
        self.assertEqual(data["monthly"]["profit"], "2.50")
        self.assertEqual(data["monthly"]["transaction_count"], 3)
        self.assertEqual(len(data["recent_transactions"]), 3)

    def test_inventory_low_stock_filter(self):
        res = self.client.get(URL + "inventory/", {"low_stock": "true"})
        self.assertEqual(res.status_code, 200)
        self.assertEqual([p["name"] for p in res.data["data"]["products"]], ["Product D"])

    def test_transactions_report_validation(self):
        res = self.client.get(URL + "transactions/", {"group_by": "hour"})
        self.assertEqual(res.status_code, 400)
        self.assertFalse(res.data["success"])

        res = self.client.get(URL + "transactions/", {"start_date": "2026-02-10", "end_date": "2026-02-01"})
        self.assertEqual(res.status_code, 400)

    def test_transactions_report_by_type(self):
        res = self.client.get(URL + "transactions/", {"type": "purchase"})
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data["data"]["summary"]["total_sales"], "0.00")
        self.assertEqual(res.data["data"]["summary"]["purchases_count"], 1)

    def test_vendor_report(self):
        res = self.client.get(f"{URL}vendors/{self.vendor.id}/")
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data["data"]["statistics"]["total_amount"], "15.00")

    def test_customer_report_of_vendor_is_404(self):
        res = self.client.get(f"{URL}customers/{self.vendor.id}/")
        self.assertEqual(res.status_code, 404)
        self.assertEqual(res.data["message"], "Customer not found")

    def test_user_without_business_is_forbidden(self):
        loner = User.objects.create_user(email="loner@example.com", password="password123")
        self.client.force_authenticate(user=loner)

        res = self.client.get(URL + "dashboard/")
        self.assertEqual(res.status_code, 403)
