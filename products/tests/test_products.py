# products/tests/test_products.py

from decimal import Decimal

from django.contrib.auth import get_user_model
from django.test import TestCase
from rest_framework.test import APIClient

from businesses.models import Business
from products.models import Product

User = get_user_model()


class ProductApiTests(TestCase):
    """
    Catalog API tests.

    GUARANTEES:
    - Products are scoped to the caller's business
    - DELETE deactivates instead of removing the row
    - Low stock and category views reflect current stock
    """

    def setUp(self):
        self.client = APIClient()

        self.business = Business.objects.create(name="Corner Shop")
        self.other_business = Business.objects.create(name="Rival Shop")

        self.user = User.objects.create_user(
            email="owner@example.com",
            password="password123",
            business=self.business,
            role="admin",
        )
        self.client.force_authenticate(user=self.user)

        self.rice = Product.objects.create(
            business=self.business,
            name="Rice 5kg",
            category="Grocery",
            price=Decimal("12.50"),
            stock=40,
            min_stock_level=5,
        )
        self.soap = Product.objects.create(
            business=self.business,
            name="Soap",
            category="Household",
            price=Decimal("1.20"),
            stock=2,
            min_stock_level=10,
        )
        self.foreign = Product.objects.create(
            business=self.other_business,
            name="Foreign Rice",
            category="Grocery",
            price=Decimal("9.00"),
            stock=100,
        )

    # =====================================================
    # LIST / DETAIL
    # =====================================================
    def test_list_only_returns_own_business_products(self):
        res = self.client.get("/api/products/")
        self.assertEqual(res.status_code, 200)

        names = [p["name"] for p in res.data["data"]["products"]]
        self.assertEqual(names, ["Rice 5kg", "Soap"])
        self.assertEqual(res.data["data"]["pagination"]["total"], 2)

    def test_list_filters_by_search_and_category(self):
        res = self.client.get("/api/products/", {"search": "ric"})
        names = [p["name"] for p in res.data["data"]["products"]]
        self.assertEqual(names, ["Rice 5kg"])

        res = self.client.get("/api/products/", {"category": "household"})
        names = [p["name"] for p in res.data["data"]["products"]]
        self.assertEqual(names, ["Soap"])

    def test_other_business_product_is_not_found(self):
        res = self.client.get(f"/api/products/{self.foreign.id}/")
        self.assertEqual(res.status_code, 404)
        self.assertFalse(res.data["success"])

    def test_detail_includes_stock_flags(self):
        res = self.client.get(f"/api/products/{self.soap.id}/")
        self.assertEqual(res.status_code, 200)

        product = res.data["data"]["product"]
        self.assertTrue(product["is_low_stock"])
        self.assertFalse(product["is_out_of_stock"])

    # =====================================================
    # CREATE / UPDATE / DELETE
    # =====================================================
    def test_create_product_is_stamped_with_business(self):
        res = self.client.post(
            "/api/products/",
            {
                "name": "Sugar 1kg",
                "category": "Grocery",
                "price": "3.40",
                "stock": 15,
                "min_stock_level": 3,
                "sku": " sug-1 ",
            },
            format="json",
        )
        self.assertEqual(res.status_code, 201, res.data)
        self.assertTrue(res.data["success"])

        product = Product.objects.get(id=res.data["data"]["product"]["id"])
        self.assertEqual(product.business, self.business)
        self.assertEqual(product.sku, "SUG-1")

    def test_negative_price_is_rejected(self):
        res = self.client.post(
            "/api/products/",
            {"name": "Bad", "category": "Grocery", "price": "-1.00"},
            format="json",
        )
        self.assertEqual(res.status_code, 400)
        self.assertFalse(res.data["success"])
        self.assertIn("price", res.data["errors"])

    def test_duplicate_sku_in_same_business_is_rejected(self):
        self.rice.sku = "RICE-5"
        self.rice.save()

        res = self.client.post(
            "/api/products/",
            {"name": "Rice again", "category": "Grocery", "price": "1.00", "sku": "rice-5"},
            format="json",
        )
        self.assertEqual(res.status_code, 400)
        self.assertIn("sku", res.data["errors"])

    def test_delete_soft_deactivates(self):
        res = self.client.delete(f"/api/products/{self.rice.id}/")
        self.assertEqual(res.status_code, 200)

        self.rice.refresh_from_db()
        self.assertFalse(self.rice.is_active)

        res = self.client.get("/api/products/")
        names = [p["name"] for p in res.data["data"]["products"]]
        self.assertNotIn("Rice 5kg", names)

    # =====================================================
    # LOW STOCK / CATEGORIES
    # =====================================================
    def test_low_stock_lists_products_at_or_below_minimum(self):
        res = self.client.get("/api/products/low-stock/")
        self.assertEqual(res.status_code, 200)

        names = [p["name"] for p in res.data["data"]["products"]]
        self.assertEqual(names, ["Soap"])

    def test_categories_breakdown(self):
        res = self.client.get("/api/products/categories/")
        self.assertEqual(res.status_code, 200)

        by_name = {c["category"]: c for c in res.data["data"]["categories"]}
        self.assertEqual(set(by_name), {"Grocery", "Household"})
        self.assertEqual(by_name["Grocery"]["product_count"], 1)
        self.assertEqual(by_name["Grocery"]["total_stock"], 40)
        self.assertEqual(Decimal(by_name["Grocery"]["total_value"]), Decimal("500.00"))


class ProductPermissionTests(TestCase):
    """
    GUARANTEES:
    - Anonymous callers are rejected
    - Users without a business cannot reach the catalog
    - Plain users cannot make manual stock corrections
    """

    def setUp(self):
        self.client = APIClient()
        self.business = Business.objects.create(name="Corner Shop")
        self.product = Product.objects.create(
            business=self.business,
            name="Milk",
            category="Dairy",
            price=Decimal("0.99"),
            stock=10,
        )

    def test_anonymous_is_rejected(self):
        res = self.client.get("/api/products/")
        self.assertEqual(res.status_code, 401)
        self.assertFalse(res.data["success"])

    def test_user_without_business_is_forbidden(self):
        loner = User.objects.create_user(email="loner@example.com", password="password123")
        self.client.force_authenticate(user=loner)

        res = self.client.get("/api/products/")
        self.assertEqual(res.status_code, 403)

    def test_plain_user_cannot_adjust_stock(self):
        clerk = User.objects.create_user(
            email="clerk@example.com",
            password="password123",
            business=self.business,
            role="user",
        )
        self.client.force_authenticate(user=clerk)

        res = self.client.patch(
            f"/api/products/{self.product.id}/stock/",
            {"quantity": 0, "operation": "set"},
            format="json",
        )
        self.assertEqual(res.status_code, 403)

        self.product.refresh_from_db()
        self.assertEqual(self.product.stock, 10)
