# transactions/tests/fixtures.py

from decimal import Decimal

from django.contrib.auth import get_user_model

from businesses.models import Business
from contacts.models import Contact
from products.models import Product
from transactions.services.posting_engine import PostingRequest

User = get_user_model()


class LedgerFixturesMixin:
    """One business with a customer, a vendor and three products."""

    def setUp(self):
        super().setUp()

        self.business = Business.objects.create(name="Corner Shop")
        self.user = User.objects.create_user(
            email="manager@example.com",
            password="password123",
            business=self.business,
            role="manager",
        )

        self.customer = Contact.objects.create(
            business=self.business,
            name="Ada Lovelace",
            phone="+1 555 010 0001",
            type=Contact.TYPE_CUSTOMER,
        )
        self.vendor = Contact.objects.create(
            business=self.business,
            name="Babbage Supplies",
            phone="+1 555 010 0002",
            type=Contact.TYPE_VENDOR,
        )

        self.product_a = self.make_product("Product A", stock=10, min_stock_level=2, price="5.00")
        self.product_b = self.make_product("Product B", stock=3, price="7.50")
        self.product_c = self.make_product("Product C", stock=5, price="2.00")

    def make_product(self, name, *, stock, price="1.00", min_stock_level=0, business=None):
        return Product.objects.create(
            business=business or self.business,
            name=name,
            category="General",
            price=Decimal(price),
            stock=stock,
            min_stock_level=min_stock_level,
        )

    def sale_payload(self, lines, **extra):
        payload = {
            "type": "sale",
            "customerId": str(self.customer.id),
            "products": [
                {"productId": str(p.id), "quantity": qty, "price": price}
                for p, qty, price in lines
            ],
        }
        payload.update(extra)
        return payload

    def purchase_payload(self, lines, **extra):
        payload = {
            "type": "purchase",
            "vendorId": str(self.vendor.id),
            "products": [
                {"productId": str(p.id), "quantity": qty, "price": price}
                for p, qty, price in lines
            ],
        }
        payload.update(extra)
        return payload

    def sale_request(self, lines, **extra):
        return PostingRequest.from_payload(self.sale_payload(lines, **extra))

    def purchase_request(self, lines, **extra):
        return PostingRequest.from_payload(self.purchase_payload(lines, **extra))
