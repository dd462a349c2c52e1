# products/filters.py

import django_filters
from django.db.models import F, Q

from products.models import Product


class ProductFilter(django_filters.FilterSet):
    """
    Query params for GET /api/products/:
        ?search=<text>  name / description / sku
        ?category=<name>  exact, case-insensitive
        ?min_price=&max_price=
        ?low_stock=true
    """

    search = django_filters.CharFilter(method="filter_search")
    category = django_filters.CharFilter(field_name="category", lookup_expr="iexact")
    min_price = django_filters.NumberFilter(field_name="price", lookup_expr="gte")
    max_price = django_filters.NumberFilter(field_name="price", lookup_expr="lte")
    low_stock = django_filters.BooleanFilter(method="filter_low_stock")

    class Meta:
        model = Product
        fields = ["search", "category", "min_price", "max_price", "low_stock"]

    def filter_search(self, queryset, name, value):
        value = (value or "").strip()
        if not value:
            return queryset
        return queryset.filter(
            Q(name__icontains=value)
            | Q(description__icontains=value)
            | Q(sku__icontains=value)
        )

    def filter_low_stock(self, queryset, name, value):
        if value:
            return queryset.filter(stock__lte=F("min_stock_level"))
        return queryset
