# transactions/tests/test_api.py

from decimal import Decimal
from unittest import mock

from django.contrib.auth import get_user_model
from django.test import TestCase
from rest_framework.test import APIClient

from businesses.models import Business
from transactions.models import Transaction
from transactions.services.exceptions import ConcurrentModification
from transactions.tests.fixtures import LedgerFixturesMixin

User = get_user_model()

URL = "/api/transactions/"


class TransactionPostApiTests(LedgerFixturesMixin, TestCase):
    """
    POST /api/transactions/

    GUARANTEES:
    - success body is {success, message, data: {transaction}}
    - posting errors map to 400 / 404 / 409 with {success: false, message}
    """

    def setUp(self):
        super().setUp()
        self.client = APIClient()
        self.client.force_authenticate(user=self.user)

    def test_post_sale(self):
        res = self.client.post(
            URL,
            self.sale_payload([(self.product_a, 10, "5")], totalAmount="1.00"),
            format="json",
        )
        self.assertEqual(res.status_code, 201, res.data)
        self.assertTrue(res.data["success"])
        self.assertEqual(res.data["message"], "Sale recorded successfully")

        txn = res.data["data"]["transaction"]
        self.assertEqual(Decimal(txn["total_amount"]), Decimal("50.00"))
        self.assertEqual(txn["status"], "completed")
        self.assertEqual(txn["customer"]["name"], "Ada Lovelace")
        self.assertEqual(txn["items"][0]["product_name"], "Product A")
        self.assertEqual(txn["summary"]["total_quantity"], 10)

        self.product_a.refresh_from_db()
        self.assertEqual(self.product_a.stock, 0)

    def test_post_purchase_snake_case(self):
        res = self.client.post(
            URL,
            {
                "type": "purchase",
                "vendor_id": str(self.vendor.id),
                "payment_method": "bank_transfer",
                "products": [
                    {"product_id": str(self.product_c.id), "quantity": 20, "price": "2"}
                ],
            },
            format="json",
        )
        self.assertEqual(res.status_code, 201, res.data)
        self.assertEqual(res.data["message"], "Purchase recorded successfully")
        self.assertEqual(res.data["data"]["transaction"]["payment_method"], "bank_transfer")

        self.product_c.refresh_from_db()
        self.assertEqual(self.product_c.stock, 25)

    def test_insufficient_stock_is_400(self):
        res = self.client.post(URL, self.sale_payload([(self.product_b, 5, "1")]), format="json")

        self.assertEqual(res.status_code, 400)
        self.assertFalse(res.data["success"])
        self.assertEqual(
            res.data["message"],
            "Insufficient stock for product Product B. Available: 3, Requested: 5",
        )

    def test_missing_customer_is_400(self):
        payload = self.sale_payload([(self.product_a, 1, "5")])
        del payload["customerId"]

        res = self.client.post(URL, payload, format="json")
        self.assertEqual(res.status_code, 400)
        self.assertEqual(res.data["message"], "Customer ID is required for sales")

    def test_sale_with_vendor_is_400(self):
        payload = self.sale_payload([(self.product_a, 1, "5")])
        del payload["customerId"]
        payload["vendorId"] = str(self.vendor.id)

        res = self.client.post(URL, payload, format="json")
        self.assertEqual(res.status_code, 400)
        self.assertFalse(res.data["success"])

    def test_unknown_customer_is_404(self):
        payload = self.sale_payload(
            [(self.product_a, 1, "5")],
            customerId="00000000-0000-0000-0000-000000000000",
        )
        res = self.client.post(URL, payload, format="json")

        self.assertEqual(res.status_code, 404)
        self.assertEqual(res.data["message"], "Customer not found")

    def test_unknown_product_is_404(self):
        payload = self.sale_payload([(self.product_a, 1, "5")])
        payload["products"][0]["productId"] = "00000000-0000-0000-0000-000000000000"

        res = self.client.post(URL, payload, format="json")
        self.assertEqual(res.status_code, 404)
        self.assertEqual(
            res.data["message"],
            "Product with ID 00000000-0000-0000-0000-000000000000 not found",
        )

    def test_empty_lines_is_400(self):
        res = self.client.post(URL, self.sale_payload([]), format="json")
        self.assertEqual(res.status_code, 400)
        self.assertEqual(res.data["message"], "At least one product is required")

    def test_zero_quantity_is_400(self):
        res = self.client.post(URL, self.sale_payload([(self.product_a, 0, "5")]), format="json")
        self.assertEqual(res.status_code, 400)
        self.assertFalse(Transaction.objects.exists())

    def test_unknown_payment_method_is_400(self):
        res = self.client.post(
            URL,
            self.sale_payload([(self.product_a, 1, "5")], paymentMethod="barter"),
            format="json",
        )
        self.assertEqual(res.status_code, 400)

    def test_notes_over_500_chars_is_400(self):
        res = self.client.post(
            URL,
            self.sale_payload([(self.product_a, 1, "5")], notes="x" * 501),
            format="json",
        )
        self.assertEqual(res.status_code, 400)

    def test_sale_with_vendor_names_the_field(self):
        payload = self.sale_payload([(self.product_a, 1, "5")])
        del payload["customerId"]
        payload["vendorId"] = str(self.vendor.id)

        res = self.client.post(URL, payload, format="json")
        self.assertEqual(res.data["message"], "Sales must reference a customer, not a vendor")
        self.assertIn("vendor_id", res.data["errors"])

    def test_line_aliases_and_date_only(self):
        res = self.client.post(
            URL,
            {
                "type": "SALE",
                "customer": str(self.customer.id),
                "lines": [{"product": str(self.product_a.id), "quantity": 2, "unitPrice": "4.50"}],
                "paymentMethod": "Credit",
                "date": "2026-03-09",
            },
            format="json",
        )
        self.assertEqual(res.status_code, 201, res.data)

        txn = res.data["data"]["transaction"]
        self.assertEqual(txn["type"], "sale")
        self.assertEqual(txn["payment_method"], "credit")
        self.assertEqual(Decimal(txn["total_amount"]), Decimal("9.00"))
        self.assertTrue(txn["date"].startswith("2026-03-09"))

    def test_fractional_quantity_is_400(self):
        res = self.client.post(URL, self.sale_payload([(self.product_a, 1.5, "5")]), format="json")
        self.assertEqual(res.status_code, 400)
        self.assertEqual(res.data["message"], "Quantity must be a whole number")

    def test_price_with_three_decimals_is_400(self):
        res = self.client.post(URL, self.sale_payload([(self.product_a, 1, "4.999")]), format="json")
        self.assertEqual(res.status_code, 400)
        self.assertFalse(Transaction.objects.exists())

    def test_unknown_type_is_400(self):
        payload = self.sale_payload([(self.product_a, 1, "5")], type="refund")

        res = self.client.post(URL, payload, format="json")
        self.assertEqual(res.status_code, 400)
        self.assertEqual(res.data["message"], "Type must be either sale or purchase")

    def test_concurrent_modification_is_409(self):
        with mock.patch(
            "transactions.views.transaction.post_transaction",
            side_effect=ConcurrentModification("The transaction conflicted with concurrent updates. Please retry."),
        ):
            res = self.client.post(URL, self.sale_payload([(self.product_a, 1, "5")]), format="json")

        self.assertEqual(res.status_code, 409)
        self.assertFalse(res.data["success"])

    def test_unexpected_error_uses_envelope(self):
        with mock.patch(
            "transactions.views.transaction.post_transaction",
            side_effect=RuntimeError("connection reset"),
        ):
            with self.assertLogs("backend.exceptions", level="ERROR"):
                res = self.client.post(
                    URL, self.sale_payload([(self.product_a, 1, "5")]), format="json"
                )

        self.assertEqual(res.status_code, 500)
        self.assertEqual(res.data, {"success": False, "message": "Internal server error"})

    def test_plain_user_can_post(self):
        clerk = User.objects.create_user(
            email="clerk@example.com",
            password="password123",
            business=self.business,
            role="user",
        )
        self.client.force_authenticate(user=clerk)

        res = self.client.post(URL, self.sale_payload([(self.product_a, 1, "5")]), format="json")
        self.assertEqual(res.status_code, 201, res.data)
        self.assertEqual(Transaction.objects.get().created_by, clerk)


class TransactionReadApiTests(LedgerFixturesMixin, TestCase):
    def setUp(self):
        super().setUp()
        self.client = APIClient()
        self.client.force_authenticate(user=self.user)

        self.client.post(URL, self.sale_payload([(self.product_a, 2, "5")]), format="json")
        self.client.post(URL, self.sale_payload([(self.product_a, 1, "7")]), format="json")
        self.client.post(URL, self.purchase_payload([(self.product_c, 4, "2")]), format="json")

    def test_list_is_paginated(self):
        res = self.client.get(URL, {"limit": 2})
        self.assertEqual(res.status_code, 200)

        data = res.data["data"]
        self.assertEqual(len(data["transactions"]), 2)
        self.assertEqual(data["pagination"], {"current": 1, "pages": 2, "total": 3, "limit": 2})

    def test_list_filters(self):
        res = self.client.get(URL, {"type": "purchase"})
        self.assertEqual(len(res.data["data"]["transactions"]), 1)

        res = self.client.get(URL, {"contact_id": str(self.customer.id)})
        self.assertEqual(len(res.data["data"]["transactions"]), 2)

    def test_invalid_date_filter_is_400(self):
        res = self.client.get(URL, {"start_date": "31/01/2026"})
        self.assertEqual(res.status_code, 400)

    def test_sales_and_purchases_lists(self):
        res = self.client.get(URL + "sales/")
        self.assertEqual(
            {t["type"] for t in res.data["data"]["transactions"]},
            {"sale"},
        )

        res = self.client.get(URL + "purchases/")
        self.assertEqual(res.data["data"]["pagination"]["total"], 1)

    def test_detail(self):
        txn = Transaction.objects.filter(type="purchase").get()

        res = self.client.get(f"{URL}{txn.id}/")
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data["data"]["transaction"]["vendor"]["name"], "Babbage Supplies")

    def test_detail_of_other_business_is_404(self):
        other = Business.objects.create(name="Rival")
        outsider = User.objects.create_user(
            email="outsider@example.com",
            password="password123",
            business=other,
            role="admin",
        )
        txn = Transaction.objects.first()

        self.client.force_authenticate(user=outsider)
        res = self.client.get(f"{URL}{txn.id}/")
        self.assertEqual(res.status_code, 404)

    def test_summary(self):
        res = self.client.get(URL + "summary/")
        self.assertEqual(res.status_code, 200)

        summary = res.data["data"]["summary"]
        self.assertEqual(summary["sales"]["transaction_count"], 2)
        self.assertEqual(summary["sales"]["total_amount"], "17.00")
        self.assertEqual(summary["purchases"]["total_amount"], "8.00")
        self.assertEqual(summary["profit_loss"], "9.00")

    def test_status_change(self):
        txn = Transaction.objects.filter(type="purchase").get()

        res = self.client.patch(f"{URL}{txn.id}/status/", {"status": "cancelled"}, format="json")
        self.assertEqual(res.status_code, 200, res.data)
        self.assertEqual(res.data["data"]["transaction"]["status"], "cancelled")

        # stock from the purchase stays applied
        self.product_c.refresh_from_db()
        self.assertEqual(self.product_c.stock, 9)

        res = self.client.patch(f"{URL}{txn.id}/status/", {"status": "completed"}, format="json")
        self.assertEqual(res.status_code, 400)
        self.assertFalse(res.data["success"])

    def test_plain_user_cannot_change_status(self):
        clerk = User.objects.create_user(
            email="clerk@example.com",
            password="password123",
            business=self.business,
            role="user",
        )
        self.client.force_authenticate(user=clerk)
        txn = Transaction.objects.first()

        res = self.client.patch(f"{URL}{txn.id}/status/", {"status": "cancelled"}, format="json")
        self.assertEqual(res.status_code, 403)


class OversizeInputApiTests(LedgerFixturesMixin, TestCase):
    """
    GUARANTEES:
    - amounts and quantities that cannot be stored are a 400 envelope
    - nothing is committed for them
    """

    def setUp(self):
        super().setUp()
        self.client = APIClient()
        self.client.force_authenticate(user=self.user)

    def _assert_rejected(self, res):
        self.assertEqual(res.status_code, 400, res.data)
        self.assertFalse(res.data["success"])
        self.assertTrue(res.data["message"])

        self.product_c.refresh_from_db()
        self.assertEqual(self.product_c.stock, 5)
        self.assertFalse(Transaction.objects.exists())

    def test_price_beyond_amount_column(self):
        res = self.client.post(
            URL,
            self.purchase_payload([(self.product_c, 1000, "99999999999.99")]),
            format="json",
        )
        self._assert_rejected(res)
        self.assertEqual(res.data["message"], "Price is out of range")

    def test_exponent_price(self):
        res = self.client.post(
            URL, self.purchase_payload([(self.product_c, 1, "1e30")]), format="json"
        )
        self._assert_rejected(res)

    def test_quantity_beyond_stock_column(self):
        res = self.client.post(
            URL, self.purchase_payload([(self.product_c, 10**25, "1")]), format="json"
        )
        self._assert_rejected(res)
        self.assertIn("products", res.data["errors"])

    def test_line_total_beyond_amount_column(self):
        res = self.client.post(
            URL,
            self.purchase_payload([(self.product_c, 1000, "9999999999.99")]),
            format="json",
        )
        self._assert_rejected(res)
        self.assertEqual(res.data["message"], "Line 1: total exceeds the maximum amount")
