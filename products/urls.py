# products/urls.py

"""
PRODUCTS URLS

Mounted at /api/products/:
    /                    list, create
    /low-stock/          low stock products
    /categories/         category breakdown
    /<id>/               retrieve, update, soft delete
    /<id>/stock/         manual stock adjustment
"""

from django.urls import include, path
from rest_framework.routers import SimpleRouter

from products.views import ProductViewSet

router = SimpleRouter()
router.register(r"", ProductViewSet, basename="products")

urlpatterns = [
    path("", include(router.urls)),
]
