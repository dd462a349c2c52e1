# backend/mixins.py

"""
ViewSet mixins shared by the tenant-scoped CRUD apps (products, contacts).
"""

from rest_framework import status

from backend.responses import created, ok
from permissions.roles import get_request_business


class BusinessScopedMixin:
    """
    Restrict a viewset's queryset to the caller's business and stamp the
    business on create. Objects of other tenants resolve to 404.
    """

    def get_business(self):
        return get_request_business(self.request)

    def scope_queryset(self, qs):
        return qs.filter(business=self.get_business())

    def perform_create(self, serializer):
        serializer.save(business=self.get_business())


class EnvelopeResponseMixin:
    """
    Wrap ModelViewSet responses in {"success", "message", "data"}.

    `item_key` names the object inside `data` for detail responses.
    List responses are already wrapped by backend.pagination.EnvelopePagination.
    """

    item_key = "item"
    created_message = "Created successfully"
    updated_message = "Updated successfully"
    deleted_message = "Deleted successfully"

    def list(self, request, *args, **kwargs):
        response = super().list(request, *args, **kwargs)
        if isinstance(response.data, dict) and "success" in response.data:
            return response
        return ok({self.pagination_class.results_key: response.data})

    def retrieve(self, request, *args, **kwargs):
        response = super().retrieve(request, *args, **kwargs)
        return ok({self.item_key: response.data})

    def create(self, request, *args, **kwargs):
        response = super().create(request, *args, **kwargs)
        return created({self.item_key: response.data}, self.created_message)

    def update(self, request, *args, **kwargs):
        response = super().update(request, *args, **kwargs)
        return ok({self.item_key: response.data}, self.updated_message)

    def destroy(self, request, *args, **kwargs):
        response = super().destroy(request, *args, **kwargs)
        if response.status_code == status.HTTP_204_NO_CONTENT:
            return ok(message=self.deleted_message)
        return response
