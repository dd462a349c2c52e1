# reports/views/reports.py

"""
REPORTS API (read-only)

- GET /api/reports/dashboard/
- GET /api/reports/inventory/?category=&low_stock=true&sort_by=&sort_order=
- GET /api/reports/transactions/?start_date=&end_date=&type=&group_by=&contact_id=
- GET /api/reports/customers/<id>/?start_date=&end_date=
- GET /api/reports/vendors/<id>/?start_date=&end_date=

All endpoints require reports.view and are scoped to request.user.business.
"""

from __future__ import annotations

import uuid

from drf_spectacular.utils import OpenApiParameter, OpenApiResponse, extend_schema
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.views import APIView

from backend.dates import DateParamError, range_from_params
from backend.responses import fail, ok
from contacts.models import Contact
from permissions.roles import (
    CAP_REPORTS_VIEW,
    HasCapability,
    IsBusinessMember,
    get_request_business,
)
from reports.services import (
    GROUP_BY_CHOICES,
    ReportNotFound,
    counterparty_report,
    dashboard_summary,
    inventory_report,
    transaction_report,
)
from transactions.models import Transaction

DATE_PARAMETERS = [
    OpenApiParameter(name="start_date", type=str, location=OpenApiParameter.QUERY, required=False),
    OpenApiParameter(name="end_date", type=str, location=OpenApiParameter.QUERY, required=False),
]


def _truthy(value) -> bool:
    return str(value or "").strip().lower() in {"1", "true", "yes", "on"}


class ReportView(APIView):
    permission_classes = [IsAuthenticated, IsBusinessMember, HasCapability]
    required_capability = CAP_REPORTS_VIEW


class DashboardReportView(ReportView):
    @extend_schema(description="Overview counts, month/year-to-date totals, low stock, recent activity.")
    def get(self, request):
        return ok(dashboard_summary(get_request_business(request)))


class InventoryReportView(ReportView):
    @extend_schema(
        parameters=[
            OpenApiParameter(name="category", type=str, location=OpenApiParameter.QUERY, required=False),
            OpenApiParameter(name="low_stock", type=bool, location=OpenApiParameter.QUERY, required=False),
            OpenApiParameter(name="sort_by", type=str, location=OpenApiParameter.QUERY, required=False),
            OpenApiParameter(name="sort_order", type=str, location=OpenApiParameter.QUERY, required=False),
        ],
    )
    def get(self, request):
        params = request.query_params
        report = inventory_report(
            get_request_business(request),
            category=(params.get("category") or "").strip() or None,
            low_stock_only=_truthy(params.get("low_stock") or params.get("lowStock")),
            sort_by=(params.get("sort_by") or params.get("sortBy") or "name").strip(),
            sort_order=(params.get("sort_order") or params.get("sortOrder") or "asc").strip().lower(),
        )
        return ok(report)


class TransactionReportView(ReportView):
    @extend_schema(
        parameters=DATE_PARAMETERS
        + [
            OpenApiParameter(name="type", type=str, location=OpenApiParameter.QUERY, required=False),
            OpenApiParameter(
                name="group_by",
                type=str,
                location=OpenApiParameter.QUERY,
                required=False,
                enum=list(GROUP_BY_CHOICES),
            ),
            OpenApiParameter(name="contact_id", type=str, location=OpenApiParameter.QUERY, required=False),
        ],
    )
    def get(self, request):
        params = request.query_params

        try:
            start, end = range_from_params(params)
        except DateParamError as exc:
            return fail(str(exc))

        txn_type = (params.get("type") or "").strip().lower() or None
        if txn_type and txn_type not in (Transaction.TYPE_SALE, Transaction.TYPE_PURCHASE):
            return fail("type must be sale or purchase")

        group_by = (params.get("group_by") or params.get("groupBy") or "day").strip().lower()
        if group_by not in GROUP_BY_CHOICES:
            return fail(f"group_by must be one of: {', '.join(GROUP_BY_CHOICES)}")

        contact_id = (params.get("contact_id") or params.get("contactId") or "").strip() or None
        if contact_id:
            try:
                contact_id = uuid.UUID(contact_id)
            except ValueError:
                return fail("contact_id must be a valid identifier")

        report = transaction_report(
            get_request_business(request),
            start=start,
            end=end,
            type=txn_type,
            counterparty_id=contact_id,
            group_by=group_by,
        )
        return ok(report)


class CounterpartyReportView(ReportView):
    contact_type: str = Contact.TYPE_CUSTOMER

    @extend_schema(
        parameters=DATE_PARAMETERS,
        responses={200: OpenApiResponse(description="Counterparty report"), 404: OpenApiResponse(description="Not found")},
    )
    def get(self, request, contact_id):
        try:
            start, end = range_from_params(request.query_params)
        except DateParamError as exc:
            return fail(str(exc))

        try:
            report = counterparty_report(
                get_request_business(request),
                contact_id,
                self.contact_type,
                start=start,
                end=end,
            )
        except ReportNotFound as exc:
            return fail(str(exc), status=status.HTTP_404_NOT_FOUND)

        return ok(report)


class CustomerReportView(CounterpartyReportView):
    contact_type = Contact.TYPE_CUSTOMER


class VendorReportView(CounterpartyReportView):
    contact_type = Contact.TYPE_VENDOR
