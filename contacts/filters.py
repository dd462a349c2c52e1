# contacts/filters.py

import django_filters
from django.db.models import Q

from contacts.models import Contact


class ContactFilter(django_filters.FilterSet):
    """
    Query params for GET /api/contacts/:
        ?type=customer|vendor
        ?search=<text>  name / phone / email
    """

    type = django_filters.ChoiceFilter(choices=Contact.TYPE_CHOICES)
    search = django_filters.CharFilter(method="filter_search")

    class Meta:
        model = Contact
        fields = ["type", "search"]

    def filter_search(self, queryset, name, value):
        value = (value or "").strip()
        if not value:
            return queryset
        return queryset.filter(
            Q(name__icontains=value) | Q(phone__icontains=value) | Q(email__icontains=value)
        )
