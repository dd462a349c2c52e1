# contacts/views/contact.py

"""
CONTACT VIEWSET

Purpose:
- Customer / vendor directory scoped to the caller's business
- Typed lists, quick search, manual balance correction

Rules:
- DELETE deactivates (is_active=False). Transactions keep their counterparty
  snapshot and reference.
- The balance endpoint is the only HTTP path that writes current_balance
  directly; posting a credit sale is the other writer.
"""

import logging

from django.db.models import Q
from django_filters.rest_framework import DjangoFilterBackend
from drf_spectacular.utils import OpenApiParameter, OpenApiResponse, extend_schema
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated

from backend.mixins import BusinessScopedMixin, EnvelopeResponseMixin
from backend.pagination import paginator_for
from backend.responses import fail, ok
from contacts.filters import ContactFilter
from contacts.models import Contact
from contacts.serializers import BalanceAdjustmentSerializer, ContactSerializer
from contacts.services.balance_adjustments import (
    BalanceAdjustmentError,
    ContactNotFoundError,
    adjust_contact_balance,
)
from permissions.roles import (
    CAP_CONTACTS_BALANCE,
    CAP_CONTACTS_EDIT,
    CAP_CONTACTS_VIEW,
    HasCapability,
    IsBusinessMember,
)

logger = logging.getLogger(__name__)

SEARCH_LIMIT = 10


class ContactViewSet(BusinessScopedMixin, EnvelopeResponseMixin, viewsets.ModelViewSet):
    serializer_class = ContactSerializer
    permission_classes = [IsAuthenticated, IsBusinessMember, HasCapability]
    pagination_class = paginator_for("contacts")
    filter_backends = [DjangoFilterBackend]
    filterset_class = ContactFilter
    lookup_value_regex = "[0-9a-fA-F-]{36}"

    required_capability = CAP_CONTACTS_VIEW
    action_capabilities = {
        "create": CAP_CONTACTS_EDIT,
        "update": CAP_CONTACTS_EDIT,
        "partial_update": CAP_CONTACTS_EDIT,
        "destroy": CAP_CONTACTS_EDIT,
        "balance": CAP_CONTACTS_BALANCE,
    }

    item_key = "contact"
    created_message = "Contact created successfully"
    updated_message = "Contact updated successfully"
    deleted_message = "Contact deleted successfully"

    def get_queryset(self):
        return self.scope_queryset(Contact.objects.active()).order_by("name")

    def perform_destroy(self, instance):
        instance.is_active = False
        instance.save(update_fields=["is_active", "updated_at"])
        logger.info(
            "Contact deactivated",
            extra={"business_id": str(instance.business_id), "contact_id": str(instance.pk)},
        )

    def _typed_list(self, contact_type):
        qs = self.get_queryset().filter(type=contact_type)
        page = self.paginate_queryset(qs)
        data = self.get_serializer(page, many=True).data
        return self.get_paginated_response(data)

    @extend_schema(responses={200: ContactSerializer(many=True)})
    @action(detail=False, methods=["get"], url_path="customers")
    def customers(self, request):
        return self._typed_list(Contact.TYPE_CUSTOMER)

    @extend_schema(responses={200: ContactSerializer(many=True)})
    @action(detail=False, methods=["get"], url_path="vendors")
    def vendors(self, request):
        return self._typed_list(Contact.TYPE_VENDOR)

    @extend_schema(
        parameters=[
            OpenApiParameter(name="q", type=str, location=OpenApiParameter.QUERY, required=True),
            OpenApiParameter(name="type", type=str, location=OpenApiParameter.QUERY, required=False),
        ],
        responses={200: ContactSerializer(many=True)},
        description="Quick search by name, phone or email (first 10 matches).",
    )
    @action(detail=False, methods=["get"], url_path="search")
    def search(self, request):
        q = (request.query_params.get("q") or "").strip()
        if not q:
            return fail("Search query is required")

        qs = self.get_queryset().filter(
            Q(name__icontains=q) | Q(phone__icontains=q) | Q(email__icontains=q)
        )

        contact_type = (request.query_params.get("type") or "").strip().lower()
        if contact_type in (Contact.TYPE_CUSTOMER, Contact.TYPE_VENDOR):
            qs = qs.filter(type=contact_type)

        data = self.get_serializer(qs[:SEARCH_LIMIT], many=True).data
        return ok({"contacts": data})

    @extend_schema(
        request=BalanceAdjustmentSerializer,
        responses={
            200: OpenApiResponse(description="Balance updated"),
            400: OpenApiResponse(description="Invalid amount or operation"),
            404: OpenApiResponse(description="Contact not found"),
        },
        description="Manual balance correction (set / add / subtract). No floor is applied.",
    )
    @action(detail=True, methods=["patch"], url_path="balance")
    def balance(self, request, pk=None):
        serializer = BalanceAdjustmentSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            result = adjust_contact_balance(
                business=self.get_business(),
                contact_id=pk,
                amount=serializer.validated_data["amount"],
                operation=serializer.validated_data["operation"],
            )
        except ContactNotFoundError as exc:
            return fail(str(exc), status=status.HTTP_404_NOT_FOUND)
        except BalanceAdjustmentError as exc:
            return fail(str(exc))

        return ok(
            {
                "contact": ContactSerializer(result.contact, context={"request": request}).data,
                "operation": result.operation,
                "previous_balance": str(result.previous_balance),
                "new_balance": str(result.new_balance),
            },
            "Contact balance updated successfully",
        )
