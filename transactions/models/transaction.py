# transactions/models/transaction.py

import uuid
from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import Q
from django.utils import timezone

from businesses.models import Business
from contacts.models import Contact

User = settings.AUTH_USER_MODEL

# largest value a DecimalField(max_digits=12, decimal_places=2) column holds
MAX_AMOUNT = Decimal("9999999999.99")


class TransactionQuerySet(models.QuerySet):
    def for_business(self, business):
        return self.filter(business=business)

    def sales(self):
        return self.filter(type=Transaction.TYPE_SALE)

    def purchases(self):
        return self.filter(type=Transaction.TYPE_PURCHASE)

    def completed(self):
        return self.filter(status=Transaction.STATUS_COMPLETED)

    def with_details(self):
        return self.select_related("customer", "vendor", "created_by").prefetch_related(
            "items__product"
        )


class Transaction(models.Model):
    """
    A posted sale or purchase: one entry of the ledger.

    GUARANTEES:
    - Written once by the posting engine, together with its stock and
      balance effects
    - total_amount == sum(item.total) (computed server-side)
    - Exactly one counterparty: customer for a sale, vendor for a purchase
    - counterparty_name and item product names are snapshots taken at
      posting time and never follow later renames
    - Financial fields are immutable; only status and notes may change

    Status changes are metadata only. Cancelling does NOT reverse stock or
    balance effects.
    """

    TYPE_SALE = "sale"
    TYPE_PURCHASE = "purchase"

    TYPE_CHOICES = [
        (TYPE_SALE, "Sale"),
        (TYPE_PURCHASE, "Purchase"),
    ]

    STATUS_PENDING = "pending"
    STATUS_COMPLETED = "completed"
    STATUS_CANCELLED = "cancelled"

    STATUS_CHOICES = [
        (STATUS_PENDING, "Pending"),
        (STATUS_COMPLETED, "Completed"),
        (STATUS_CANCELLED, "Cancelled"),
    ]

    PAYMENT_CASH = "cash"
    PAYMENT_CARD = "card"
    PAYMENT_BANK_TRANSFER = "bank_transfer"
    PAYMENT_CREDIT = "credit"
    PAYMENT_OTHER = "other"

    PAYMENT_METHOD_CHOICES = [
        (PAYMENT_CASH, "Cash"),
        (PAYMENT_CARD, "Card"),
        (PAYMENT_BANK_TRANSFER, "Bank transfer"),
        (PAYMENT_CREDIT, "Credit"),
        (PAYMENT_OTHER, "Other"),
    ]

    INVOICE_PREFIXES = {
        TYPE_SALE: "SAL",
        TYPE_PURCHASE: "PUR",
    }

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    business = models.ForeignKey(
        Business,
        on_delete=models.CASCADE,
        related_name="transactions",
    )

    type = models.CharField(max_length=10, choices=TYPE_CHOICES)

    customer = models.ForeignKey(
        Contact,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="sales",
    )
    vendor = models.ForeignKey(
        Contact,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="purchases",
    )

    counterparty_name = models.CharField(
        max_length=100,
        help_text="Counterparty name at posting time (snapshot).",
    )

    total_amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal("0.00"),
    )

    date = models.DateTimeField(default=timezone.now, db_index=True)

    status = models.CharField(
        max_length=10,
        choices=STATUS_CHOICES,
        default=STATUS_COMPLETED,
    )

    payment_method = models.CharField(
        max_length=20,
        choices=PAYMENT_METHOD_CHOICES,
        default=PAYMENT_CASH,
    )

    notes = models.TextField(max_length=500, blank=True, default="")

    invoice_number = models.CharField(
        max_length=64,
        blank=True,
        help_text="Client-supplied or system-generated invoice number.",
    )

    created_by = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="posted_transactions",
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = TransactionQuerySet.as_manager()

    class Meta:
        ordering = ["-date", "-created_at"]
        indexes = [
            models.Index(fields=["business", "date"], name="txn_biz_date_idx"),
            models.Index(fields=["business", "type", "date"], name="txn_biz_type_date_idx"),
            models.Index(fields=["business", "customer"], name="txn_biz_customer_idx"),
            models.Index(fields=["business", "vendor"], name="txn_biz_vendor_idx"),
            models.Index(fields=["business", "status"], name="txn_biz_status_idx"),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["business", "invoice_number"],
                condition=~Q(invoice_number=""),
                name="uniq_txn_invoice_per_business",
            ),
        ]

    _IMMUTABLE_FIELDS_AFTER_POST = (
        "business_id",
        "type",
        "customer_id",
        "vendor_id",
        "counterparty_name",
        "total_amount",
        "date",
        "payment_method",
        "invoice_number",
        "created_by_id",
    )

    def __str__(self):
        return f"{self.invoice_number} | {self.type} | {self.total_amount}"

    @property
    def counterparty(self):
        return self.customer if self.type == self.TYPE_SALE else self.vendor

    @property
    def counterparty_id(self):
        return self.customer_id if self.type == self.TYPE_SALE else self.vendor_id

    @classmethod
    def generate_invoice_number(cls, txn_type: str, when=None) -> str:
        prefix = cls.INVOICE_PREFIXES.get(txn_type, "TXN")
        stamp = timezone.localtime(when or timezone.now()).strftime("%Y%m%d")
        return f"{prefix}-{stamp}-{uuid.uuid4().hex[:8].upper()}"

    def clean(self):
        if self.type == self.TYPE_SALE and (not self.customer_id or self.vendor_id):
            raise ValidationError("A sale must reference exactly one customer")
        if self.type == self.TYPE_PURCHASE and (not self.vendor_id or self.customer_id):
            raise ValidationError("A purchase must reference exactly one vendor")

    def _validate_immutable(self, previous: "Transaction"):
        for field in self._IMMUTABLE_FIELDS_AFTER_POST:
            if getattr(self, field) != getattr(previous, field):
                raise ValidationError(
                    f"Transaction is immutable once posted. Field '{field}' cannot be changed."
                )

    def save(self, *args, **kwargs):
        if self.pk and not self._state.adding:
            previous = Transaction.objects.filter(pk=self.pk).first()
            if previous is not None:
                self._validate_immutable(previous)

        if not self.invoice_number:
            self.invoice_number = self.generate_invoice_number(self.type, self.date)

        super().save(*args, **kwargs)
