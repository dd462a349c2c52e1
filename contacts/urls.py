# contacts/urls.py

"""
CONTACTS URLS

Mounted at /api/contacts/:
    /                  list, create
    /customers/        customers only
    /vendors/          vendors only
    /search/?q=        quick search
    /<id>/             retrieve, update, soft delete
    /<id>/balance/     manual balance adjustment
"""

from django.urls import include, path
from rest_framework.routers import SimpleRouter

from contacts.views import ContactViewSet

router = SimpleRouter()
router.register(r"", ContactViewSet, basename="contacts")

urlpatterns = [
    path("", include(router.urls)),
]
