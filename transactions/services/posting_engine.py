# transactions/services/posting_engine.py

"""
======================================================
PATH: transactions/services/posting_engine.py
======================================================
TRANSACTION POSTING ENGINE

Posts a sale or purchase as ONE atomic unit of work:

1) Lock and resolve the counterparty (customer for sale, vendor for purchase)
2) Lock and resolve every product (primary-key order)
3) Validate stock for ALL sale lines before touching any row
4) Check that line totals, the grand total, resulting stock and resulting
   balance fit their columns
5) Apply stock deltas (sale: -qty, purchase: +qty)
6) Insert the Transaction and its item snapshots
7) Credit sale: add the total to the customer's current_balance
8) Read the posted record back (items, counterparty) inside the unit
9) After commit: send transaction_posted (best effort)

GUARANTEES:
- Any failure aborts the whole unit: no stock, balance or ledger change
  survives a failed post
- Client-supplied totals are ignored
- Stock never goes negative through posting (sale is rejected, not floored)
- Nothing runs against storage after commit except the notification
- Storage conflicts (deadlock, serialization failure, locked database) are
  retried up to POSTING_MAX_RETRIES attempts, then ConcurrentModification
"""

from __future__ import annotations

import logging
import time
import uuid
from collections import OrderedDict
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Optional

from asgiref.sync import sync_to_async
from django.conf import settings
from django.db import DatabaseError, IntegrityError, OperationalError, transaction
from django.db.models import F
from django.utils import timezone
from rest_framework import serializers

from backend.responses import first_error_message
from contacts.models import Contact
from contacts.models.contact import MAX_BALANCE
from contacts.services.directory import find_active_contact
from products.models import Product
from products.models.product import MAX_STOCK
from transactions.models import Transaction, TransactionItem
from transactions.models.transaction import MAX_AMOUNT
from transactions.serializers import TYPE_MISMATCH, TransactionCreateSerializer
from transactions.services.exceptions import (
    ConcurrentModification,
    CounterpartyNotFound,
    InsufficientStock,
    PostingError,
    ProductNotFound,
    StorageFailure,
    TypeMismatch,
    ValidationError,
)
from transactions.signals import notify_transaction_posted

logger = logging.getLogger(__name__)

COUNTERPARTY_TYPE_FOR = {
    Transaction.TYPE_SALE: Contact.TYPE_CUSTOMER,
    Transaction.TYPE_PURCHASE: Contact.TYPE_VENDOR,
}


# ============================================================
# HELPERS
# ============================================================


def _money(value: Any) -> Decimal:
    try:
        return Decimal(str(value)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    except (InvalidOperation, ValueError, TypeError) as exc:
        raise ValidationError("Amount is out of range", value=str(value)) from exc


def _error_codes(codes):
    if isinstance(codes, dict):
        for value in codes.values():
            yield from _error_codes(value)
    elif isinstance(codes, (list, tuple)):
        for value in codes:
            yield from _error_codes(value)
    else:
        yield codes


# ============================================================
# REQUEST
# ============================================================


@dataclass(frozen=True)
class PostingLine:
    product_id: uuid.UUID
    quantity: int
    price: Decimal

    @property
    def total(self) -> Decimal:
        return _money(Decimal(self.quantity) * self.price)


@dataclass(frozen=True)
class PostingRequest:
    type: str
    lines: tuple[PostingLine, ...]
    customer_id: Optional[uuid.UUID] = None
    vendor_id: Optional[uuid.UUID] = None
    payment_method: str = Transaction.PAYMENT_CASH
    notes: str = ""
    invoice_number: str = ""
    date: Optional[Any] = field(default=None)

    @property
    def counterparty_id(self) -> Optional[uuid.UUID]:
        return self.customer_id if self.type == Transaction.TYPE_SALE else self.vendor_id

    @property
    def counterparty_type(self) -> str:
        return COUNTERPARTY_TYPE_FOR[self.type]

    @property
    def total_amount(self) -> Decimal:
        return _money(sum((line.total for line in self.lines), Decimal("0.00")))

    @classmethod
    def from_validated(cls, data: dict) -> "PostingRequest":
        """Build from TransactionCreateSerializer.validated_data."""
        return cls(
            type=data["type"],
            lines=tuple(
                PostingLine(
                    product_id=line["product_id"],
                    quantity=line["quantity"],
                    price=line["price"],
                )
                for line in data["products"]
            ),
            customer_id=data.get("customer_id"),
            vendor_id=data.get("vendor_id"),
            payment_method=data.get("payment_method") or Transaction.PAYMENT_CASH,
            notes=data.get("notes") or "",
            invoice_number=data.get("invoice_number") or "",
            date=data.get("date"),
        )

    @classmethod
    def from_payload(cls, data) -> "PostingRequest":
        """
        Validate a raw body and build the request, for callers outside the
        HTTP layer. Naming the wrong kind of counterparty raises
        TypeMismatch; any other invalid body raises ValidationError.
        """
        serializer = TransactionCreateSerializer(data=data)
        try:
            serializer.is_valid(raise_exception=True)
        except serializers.ValidationError as exc:
            errors = serializer.errors
            message = first_error_message(errors)
            if TYPE_MISMATCH in set(_error_codes(exc.get_codes())):
                raise TypeMismatch(message) from exc
            raise ValidationError(message, errors=errors) from exc

        return cls.from_validated(serializer.validated_data)


# ============================================================
# UNIT OF WORK
# ============================================================


def _resolve_counterparty(business, request: PostingRequest) -> Contact:
    contact = find_active_contact(business, request.counterparty_id, for_update=True)

    label = "Customer" if request.type == Transaction.TYPE_SALE else "Vendor"
    if contact is None:
        raise CounterpartyNotFound(
            f"{label} not found",
            counterparty_id=request.counterparty_id,
        )

    if contact.type != request.counterparty_type:
        raise TypeMismatch(
            f"Contact {contact.name} is a {contact.type}; "
            f"a {request.type} requires a {request.counterparty_type}",
            counterparty_id=contact.pk,
        )

    return contact


def _lock_products(business, request: PostingRequest) -> dict:
    ids = sorted({line.product_id for line in request.lines})

    # consistent lock order across concurrent posts
    rows = (
        Product.objects.select_for_update()
        .filter(business=business, is_active=True, pk__in=ids)
        .order_by("pk")
    )
    products = {p.pk: p for p in rows}

    for line in request.lines:
        if line.product_id not in products:
            raise ProductNotFound(
                f"Product with ID {line.product_id} not found",
                product_id=line.product_id,
            )

    return products


def _stock_deltas(request: PostingRequest) -> "OrderedDict[uuid.UUID, int]":
    deltas: OrderedDict = OrderedDict()
    for line in request.lines:
        deltas[line.product_id] = deltas.get(line.product_id, 0) + line.quantity
    return deltas


def _check_stock(products: dict, deltas: dict) -> None:
    for product_id, requested in deltas.items():
        product = products[product_id]
        available = int(product.stock or 0)
        if requested > available:
            raise InsufficientStock(
                product_id=product.pk,
                product_name=product.name,
                available=available,
                requested=requested,
            )


def _check_bounds(request: PostingRequest, products: dict, deltas: dict, contact) -> Decimal:
    """
    Every amount and counter the unit is about to write must fit its
    column. Returns the grand total.
    """
    for index, line in enumerate(request.lines, start=1):
        if line.price > MAX_AMOUNT or line.total > MAX_AMOUNT:
            raise ValidationError(
                f"Line {index}: total exceeds the maximum amount",
                product_id=line.product_id,
            )

    total_amount = request.total_amount
    if total_amount > MAX_AMOUNT:
        raise ValidationError("Transaction total exceeds the maximum amount")

    if request.type == Transaction.TYPE_PURCHASE:
        for product_id, added in deltas.items():
            product = products[product_id]
            if int(product.stock or 0) + added > MAX_STOCK:
                raise ValidationError(
                    f"Stock for product {product.name} would exceed {MAX_STOCK}",
                    product_id=product.pk,
                )

    if _is_credit_sale(request) and contact.current_balance + total_amount > MAX_BALANCE:
        raise ValidationError(
            "Customer balance would exceed the maximum amount",
            counterparty_id=contact.pk,
        )

    return total_amount


def _is_credit_sale(request: PostingRequest) -> bool:
    return (
        request.type == Transaction.TYPE_SALE
        and request.payment_method == Transaction.PAYMENT_CREDIT
    )


def _insert_transaction(business, txn: Transaction, request: PostingRequest) -> None:
    try:
        # savepoint: the unit stays usable after a constraint violation
        with transaction.atomic():
            txn.save()
    except IntegrityError as exc:
        if request.invoice_number and Transaction.objects.filter(
            business=business, invoice_number=request.invoice_number
        ).exists():
            raise ValidationError("Invoice number already exists", field="invoiceNumber") from exc
        raise


def _charge_customer(contact: Contact, amount: Decimal, now) -> None:
    Contact.objects.filter(pk=contact.pk).update(
        current_balance=F("current_balance") + amount,
        updated_at=now,
    )


def _post_once(*, business, request: PostingRequest, user=None) -> Transaction:
    with transaction.atomic():
        contact = _resolve_counterparty(business, request)
        products = _lock_products(business, request)
        deltas = _stock_deltas(request)

        if request.type == Transaction.TYPE_SALE:
            # every line is validated before any product row changes
            _check_stock(products, deltas)

        total_amount = _check_bounds(request, products, deltas, contact)

        now = timezone.now()
        sign = -1 if request.type == Transaction.TYPE_SALE else 1
        for product_id in sorted(deltas):
            Product.objects.filter(pk=product_id).update(
                stock=F("stock") + sign * deltas[product_id],
                updated_at=now,
            )

        txn = Transaction(
            business=business,
            type=request.type,
            customer=contact if request.type == Transaction.TYPE_SALE else None,
            vendor=contact if request.type == Transaction.TYPE_PURCHASE else None,
            counterparty_name=contact.name,
            total_amount=total_amount,
            status=Transaction.STATUS_COMPLETED,
            payment_method=request.payment_method,
            notes=request.notes,
            invoice_number=request.invoice_number,
            created_by=user if getattr(user, "is_authenticated", False) else None,
        )
        if request.date is not None:
            txn.date = request.date
        _insert_transaction(business, txn, request)

        TransactionItem.objects.bulk_create(
            [
                TransactionItem(
                    transaction=txn,
                    product=products[line.product_id],
                    product_name=products[line.product_id].name,
                    quantity=line.quantity,
                    price=line.price,
                    total=line.total,
                    position=position,
                )
                for position, line in enumerate(request.lines)
            ]
        )

        if _is_credit_sale(request):
            _charge_customer(contact, total_amount, now)

        posted = Transaction.objects.with_details().get(pk=txn.pk)

        txn_id = txn.pk
        transaction.on_commit(lambda: notify_transaction_posted(txn_id))

    return posted


# ============================================================
# ENTRY POINTS
# ============================================================


def post_transaction(*, business, request: PostingRequest, user=None) -> Transaction:
    """
    Post `request` for `business` and return the persisted Transaction
    (with counterparty and items loaded).

    Raises a PostingError subclass on failure; nothing is persisted then.
    """
    if business is None:
        raise ValidationError("Business is required")

    max_attempts = max(1, int(getattr(settings, "POSTING_MAX_RETRIES", 3)))
    backoff_ms = max(0, int(getattr(settings, "POSTING_RETRY_BACKOFF_MS", 25)))

    log_extra = {
        "business_id": str(business.pk),
        "type": request.type,
        "counterparty_id": str(request.counterparty_id),
        "line_count": len(request.lines),
    }

    attempt = 0
    while True:
        attempt += 1
        try:
            txn = _post_once(business=business, request=request, user=user)
        except PostingError as exc:
            logger.info(
                "Transaction rejected",
                extra={**log_extra, "error": exc.__class__.__name__, "reason": exc.message},
            )
            raise
        except OperationalError as exc:
            if attempt >= max_attempts:
                logger.error(
                    "Transaction posting gave up after storage conflicts",
                    extra={**log_extra, "attempts": attempt},
                )
                raise ConcurrentModification(
                    "The transaction conflicted with concurrent updates. Please retry.",
                    attempts=attempt,
                ) from exc

            logger.warning(
                "Transaction posting conflict, retrying",
                extra={**log_extra, "attempt": attempt, "error": str(exc)},
            )
            if backoff_ms:
                time.sleep(backoff_ms * attempt / 1000.0)
            continue
        except (DatabaseError, OverflowError) as exc:
            logger.exception("Transaction posting storage failure", extra=log_extra)
            raise StorageFailure("Failed to record transaction") from exc

        logger.info(
            "Transaction posted",
            extra={
                **log_extra,
                "transaction_id": str(txn.pk),
                "invoice_number": txn.invoice_number,
                "total_amount": str(txn.total_amount),
                "attempts": attempt,
            },
        )
        return txn


apost_transaction = sync_to_async(post_transaction, thread_sensitive=True)
