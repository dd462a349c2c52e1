# transactions/views/transaction.py

"""
TRANSACTION API

- GET   /api/transactions/                 ledger list (filters + pagination)
- POST  /api/transactions/                 post a sale or purchase
- GET   /api/transactions/<id>/            detail
- PATCH /api/transactions/<id>/status/     status change (metadata only)
- GET   /api/transactions/summary/         per-type totals + profit/loss
- GET   /api/transactions/sales/           sales only
- GET   /api/transactions/purchases/       purchases only

All endpoints are scoped to request.user.business.
"""

from __future__ import annotations

import uuid

from drf_spectacular.utils import OpenApiParameter, OpenApiResponse, extend_schema
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.views import APIView

from backend.dates import DateParamError, range_from_params
from backend.pagination import paginator_for
from backend.responses import created, fail, ok
from permissions.roles import (
    CAP_TRANSACTIONS_POST,
    CAP_TRANSACTIONS_STATUS,
    CAP_TRANSACTIONS_VIEW,
    HasCapability,
    IsBusinessMember,
    get_request_business,
)
from transactions.models import Transaction
from transactions.selectors.ledger import ledger_queryset, ledger_summary
from transactions.serializers import (
    TransactionCreateSerializer,
    TransactionSerializer,
    TransactionStatusSerializer,
)
from transactions.services.exceptions import (
    ConcurrentModification,
    CounterpartyNotFound,
    InsufficientStock,
    InvalidStatusTransition,
    PostingError,
    ProductNotFound,
    StorageFailure,
    TransactionNotFound,
    TypeMismatch,
    ValidationError,
)
from transactions.services.posting_engine import PostingRequest, post_transaction
from transactions.services.transaction_lifecycle import change_transaction_status

# =====================================================
# ERROR MAPPING
# =====================================================

ERROR_STATUS = (
    (ValidationError, status.HTTP_400_BAD_REQUEST),
    (TypeMismatch, status.HTTP_400_BAD_REQUEST),
    (InsufficientStock, status.HTTP_400_BAD_REQUEST),
    (InvalidStatusTransition, status.HTTP_400_BAD_REQUEST),
    (CounterpartyNotFound, status.HTTP_404_NOT_FOUND),
    (ProductNotFound, status.HTTP_404_NOT_FOUND),
    (TransactionNotFound, status.HTTP_404_NOT_FOUND),
    (ConcurrentModification, status.HTTP_409_CONFLICT),
    (StorageFailure, status.HTTP_500_INTERNAL_SERVER_ERROR),
)

SUCCESS_MESSAGES = {
    Transaction.TYPE_SALE: "Sale recorded successfully",
    Transaction.TYPE_PURCHASE: "Purchase recorded successfully",
}

FILTER_PARAMETERS = [
    OpenApiParameter(name="type", type=str, location=OpenApiParameter.QUERY, required=False),
    OpenApiParameter(name="start_date", type=str, location=OpenApiParameter.QUERY, required=False),
    OpenApiParameter(name="end_date", type=str, location=OpenApiParameter.QUERY, required=False),
    OpenApiParameter(name="contact_id", type=str, location=OpenApiParameter.QUERY, required=False),
    OpenApiParameter(name="status", type=str, location=OpenApiParameter.QUERY, required=False),
    OpenApiParameter(name="page", type=int, location=OpenApiParameter.QUERY, required=False),
    OpenApiParameter(name="limit", type=int, location=OpenApiParameter.QUERY, required=False),
]


def posting_error_response(exc: PostingError):
    for exc_type, code in ERROR_STATUS:
        if isinstance(exc, exc_type):
            break
    else:
        code = status.HTTP_500_INTERNAL_SERVER_ERROR

    errors = getattr(exc, "errors", None)
    return fail(exc.message, status=code, errors=errors)


class TransactionListMixin:
    """Filtered, paginated ledger list shared by the list endpoints."""

    pagination_class = paginator_for("transactions")

    # fixed type for /sales/ and /purchases/
    fixed_type: str | None = None

    def list_transactions(self, request):
        business = get_request_business(request)
        params = request.query_params

        try:
            start, end = range_from_params(params)
        except DateParamError as exc:
            return fail(str(exc))

        txn_type = self.fixed_type or (params.get("type") or "").strip().lower() or None
        if txn_type and txn_type not in (Transaction.TYPE_SALE, Transaction.TYPE_PURCHASE):
            return fail("type must be sale or purchase")

        txn_status = (params.get("status") or "").strip().lower() or None
        if txn_status and txn_status not in {s for s, _ in Transaction.STATUS_CHOICES}:
            return fail("status must be pending, completed or cancelled")

        contact_id = (params.get("contact_id") or params.get("contactId") or "").strip() or None
        if contact_id:
            try:
                contact_id = uuid.UUID(contact_id)
            except ValueError:
                return fail("contact_id must be a valid identifier")

        qs = ledger_queryset(
            business,
            type=txn_type,
            start=start,
            end=end,
            counterparty_id=contact_id,
            status=txn_status,
        )

        paginator = self.pagination_class()
        page = paginator.paginate_queryset(qs, request, view=self)
        data = TransactionSerializer(page, many=True, context={"request": request}).data
        return paginator.get_paginated_response(data)


# =====================================================
# LIST + POST
# =====================================================


class TransactionListCreateView(TransactionListMixin, APIView):
    permission_classes = [IsAuthenticated, IsBusinessMember, HasCapability]
    action_capabilities = {
        "get": CAP_TRANSACTIONS_VIEW,
        "post": CAP_TRANSACTIONS_POST,
    }

    @extend_schema(
        parameters=FILTER_PARAMETERS,
        responses={200: TransactionSerializer(many=True)},
        description="Ledger list, newest first.",
    )
    def get(self, request):
        return self.list_transactions(request)

    @extend_schema(
        request=TransactionCreateSerializer,
        responses={
            201: TransactionSerializer,
            400: OpenApiResponse(description="Validation, type mismatch or insufficient stock"),
            404: OpenApiResponse(description="Counterparty or product not found"),
            409: OpenApiResponse(description="Concurrent modification; retry"),
            500: OpenApiResponse(description="Storage failure"),
        },
        description=(
            "Post a sale or purchase atomically. Stock, counterparty balance "
            "(credit sales) and the ledger entry change together or not at all. "
            "Totals are computed server-side."
        ),
    )
    def post(self, request):
        serializer = TransactionCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        posting = PostingRequest.from_validated(serializer.validated_data)

        try:
            txn = post_transaction(
                business=get_request_business(request),
                request=posting,
                user=request.user,
            )
        except PostingError as exc:
            return posting_error_response(exc)

        return created(
            {"transaction": TransactionSerializer(txn, context={"request": request}).data},
            SUCCESS_MESSAGES[txn.type],
        )


class SalesListView(TransactionListMixin, APIView):
    permission_classes = [IsAuthenticated, IsBusinessMember, HasCapability]
    required_capability = CAP_TRANSACTIONS_VIEW
    fixed_type = Transaction.TYPE_SALE

    @extend_schema(parameters=FILTER_PARAMETERS, responses={200: TransactionSerializer(many=True)})
    def get(self, request):
        return self.list_transactions(request)


class PurchasesListView(TransactionListMixin, APIView):
    permission_classes = [IsAuthenticated, IsBusinessMember, HasCapability]
    required_capability = CAP_TRANSACTIONS_VIEW
    fixed_type = Transaction.TYPE_PURCHASE

    @extend_schema(parameters=FILTER_PARAMETERS, responses={200: TransactionSerializer(many=True)})
    def get(self, request):
        return self.list_transactions(request)


# =====================================================
# DETAIL / STATUS
# =====================================================


class TransactionDetailView(APIView):
    permission_classes = [IsAuthenticated, IsBusinessMember, HasCapability]
    required_capability = CAP_TRANSACTIONS_VIEW

    @extend_schema(responses={200: TransactionSerializer})
    def get(self, request, transaction_id):
        txn = (
            Transaction.objects.for_business(get_request_business(request))
            .with_details()
            .filter(pk=transaction_id)
            .first()
        )
        if txn is None:
            return fail("Transaction not found", status=status.HTTP_404_NOT_FOUND)

        return ok({"transaction": TransactionSerializer(txn, context={"request": request}).data})


class TransactionStatusView(APIView):
    permission_classes = [IsAuthenticated, IsBusinessMember, HasCapability]
    required_capability = CAP_TRANSACTIONS_STATUS

    @extend_schema(
        request=TransactionStatusSerializer,
        responses={
            200: TransactionSerializer,
            400: OpenApiResponse(description="Invalid status or transition"),
            404: OpenApiResponse(description="Transaction not found"),
        },
        description=(
            "Change status (pending -> completed | cancelled, completed -> cancelled). "
            "Does not reverse stock or balance effects."
        ),
    )
    def patch(self, request, transaction_id):
        serializer = TransactionStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            change_transaction_status(
                business=get_request_business(request),
                transaction_id=transaction_id,
                status=serializer.validated_data["status"],
            )
        except PostingError as exc:
            return posting_error_response(exc)

        txn = Transaction.objects.with_details().get(pk=transaction_id)
        return ok(
            {"transaction": TransactionSerializer(txn, context={"request": request}).data},
            "Transaction status updated successfully",
        )


# =====================================================
# SUMMARY
# =====================================================


class TransactionSummaryView(APIView):
    permission_classes = [IsAuthenticated, IsBusinessMember, HasCapability]
    required_capability = CAP_TRANSACTIONS_VIEW

    @extend_schema(
        parameters=[
            OpenApiParameter(name="start_date", type=str, location=OpenApiParameter.QUERY, required=False),
            OpenApiParameter(name="end_date", type=str, location=OpenApiParameter.QUERY, required=False),
        ],
        description="Totals, counts and averages per type, plus profit/loss.",
    )
    def get(self, request):
        try:
            start, end = range_from_params(request.query_params)
        except DateParamError as exc:
            return fail(str(exc))

        summary = ledger_summary(get_request_business(request), start=start, end=end)

        def _row(row):
            return {
                "total_amount": str(row["total_amount"]),
                "transaction_count": row["transaction_count"],
                "average_amount": str(row["average_amount"]),
            }

        return ok(
            {
                "summary": {
                    "sales": _row(summary[Transaction.TYPE_SALE]),
                    "purchases": _row(summary[Transaction.TYPE_PURCHASE]),
                    "profit_loss": str(summary["profit_loss"]),
                }
            }
        )
