# transactions/serializers/transaction.py

"""
TRANSACTION SERIALIZERS

Read side:
- TransactionSerializer: full record with counterparty and per-line product
  display fields

Write side:
- TransactionCreateSerializer validates the posting body. Keys are
  snake_case; the camelCase spellings (customerId, paymentMethod,
  products[].productId, ...) are accepted as aliases.
- TransactionStatusSerializer validates PATCH /transactions/<id>/status/

Input bounds follow the storage columns: prices fit DecimalField(12, 2),
quantities fit a PositiveIntegerField.
"""

from collections.abc import Mapping
from decimal import Decimal

from rest_framework import ISO_8601, serializers

from contacts.serializers import ContactSummarySerializer
from products.models.product import MAX_STOCK
from transactions.models import Transaction, TransactionItem

# error code the engine maps to TypeMismatch
TYPE_MISMATCH = "type_mismatch"

BODY_ALIASES = {
    "customerId": "customer_id",
    "customer": "customer_id",
    "vendorId": "vendor_id",
    "vendor": "vendor_id",
    "lines": "products",
    "items": "products",
    "paymentMethod": "payment_method",
    "invoiceNumber": "invoice_number",
}

LINE_ALIASES = {
    "productId": "product_id",
    "product": "product_id",
    "unitPrice": "price",
    "unit_price": "price",
}

PAYMENT_METHODS = sorted(value for value, _ in Transaction.PAYMENT_METHOD_CHOICES)


def _with_aliases(data, aliases):
    """
    Fold alias keys onto their field name. The field name wins when it
    carries a value; null or blank values count as missing.
    """
    if not isinstance(data, Mapping):
        return data

    out = dict(data.items())
    for alias, name in aliases.items():
        value = out.pop(alias, None)
        if out.get(name) in (None, "") and value not in (None, ""):
            out[name] = value

    for name in set(aliases.values()):
        if out.get(name, "missing") in (None, ""):
            del out[name]

    return out


def _lowered(data, *keys):
    for key in keys:
        if isinstance(data.get(key), str):
            data[key] = data[key].strip().lower()
    return data


class TransactionItemSerializer(serializers.ModelSerializer):
    product_id = serializers.UUIDField(read_only=True)
    product_sku = serializers.CharField(source="product.sku", read_only=True, allow_null=True)
    product_category = serializers.CharField(source="product.category", read_only=True)

    class Meta:
        model = TransactionItem
        fields = [
            "id",
            "product_id",
            "product_name",
            "product_sku",
            "product_category",
            "quantity",
            "price",
            "total",
        ]
        read_only_fields = fields


class TransactionSerializer(serializers.ModelSerializer):
    customer = ContactSummarySerializer(read_only=True)
    vendor = ContactSummarySerializer(read_only=True)
    items = TransactionItemSerializer(many=True, read_only=True)
    created_by = serializers.EmailField(source="created_by.email", read_only=True, allow_null=True)
    summary = serializers.SerializerMethodField()

    class Meta:
        model = Transaction
        fields = [
            "id",
            "invoice_number",
            "type",
            "customer",
            "vendor",
            "counterparty_name",
            "items",
            "total_amount",
            "date",
            "status",
            "payment_method",
            "notes",
            "created_by",
            "created_at",
            "updated_at",
            "summary",
        ]
        read_only_fields = fields

    def get_summary(self, obj) -> dict:
        items = list(obj.items.all())
        return {
            "counterparty": obj.counterparty_name,
            "item_count": len(items),
            "total_quantity": sum(int(i.quantity) for i in items),
            "total_amount": str(obj.total_amount),
            "date": obj.date,
        }


# =====================================================
# POSTING INPUT
# =====================================================


class PostingLineInputSerializer(serializers.Serializer):
    product_id = serializers.UUIDField(
        error_messages={
            "required": "productId is required",
            "invalid": "productId must be a valid identifier",
        },
    )
    quantity = serializers.IntegerField(
        min_value=1,
        max_value=MAX_STOCK,
        error_messages={
            "required": "Quantity is required",
            "invalid": "Quantity must be a whole number",
            "min_value": "Quantity must be at least 1",
            "max_value": f"Quantity cannot exceed {MAX_STOCK}",
        },
    )
    price = serializers.DecimalField(
        max_digits=12,
        decimal_places=2,
        min_value=Decimal("0"),
        error_messages={
            "required": "Price is required",
            "invalid": "Price must be a number",
            "min_value": "Price cannot be negative",
            "max_digits": "Price is out of range",
            "max_whole_digits": "Price is out of range",
            "max_decimal_places": "Price cannot have more than 2 decimal places",
        },
    )

    def to_internal_value(self, data):
        return super().to_internal_value(_with_aliases(data, LINE_ALIASES))


class TransactionCreateSerializer(serializers.Serializer):
    """
    POST /api/transactions/ body.

    RULES:
    - a sale names a customer and no vendor; a purchase names a vendor
      and no customer
    - at least one line
    - totalAmount / total / line totals are not fields: they are dropped
      and recomputed by the engine
    """

    type = serializers.ChoiceField(
        choices=Transaction.TYPE_CHOICES,
        error_messages={
            "required": "Type must be either sale or purchase",
            "null": "Type must be either sale or purchase",
            "invalid_choice": "Type must be either sale or purchase",
        },
    )
    customer_id = serializers.UUIDField(
        required=False,
        help_text="Required for sales (alias: customerId)",
        error_messages={"invalid": "Customer ID must be a valid identifier"},
    )
    vendor_id = serializers.UUIDField(
        required=False,
        help_text="Required for purchases (alias: vendorId)",
        error_messages={"invalid": "Vendor ID must be a valid identifier"},
    )
    products = PostingLineInputSerializer(many=True, required=False)
    payment_method = serializers.ChoiceField(
        choices=Transaction.PAYMENT_METHOD_CHOICES,
        required=False,
        default=Transaction.PAYMENT_CASH,
        error_messages={
            "invalid_choice": f"Payment method must be one of: {', '.join(PAYMENT_METHODS)}",
        },
    )
    notes = serializers.CharField(
        required=False,
        allow_blank=True,
        allow_null=True,
        default="",
        max_length=500,
        error_messages={"max_length": "Notes cannot exceed 500 characters"},
    )
    invoice_number = serializers.CharField(
        required=False,
        allow_blank=True,
        default="",
        max_length=64,
        error_messages={"max_length": "Invoice number is too long"},
    )
    date = serializers.DateTimeField(
        required=False,
        allow_null=True,
        input_formats=[ISO_8601, "%Y-%m-%d"],
        error_messages={"invalid": "date must be an ISO 8601 date or datetime"},
    )

    def to_internal_value(self, data):
        data = _with_aliases(data, BODY_ALIASES)
        if isinstance(data, Mapping):
            data = _lowered(data, "type", "payment_method")
        return super().to_internal_value(data)

    def validate(self, attrs):
        customer_id = attrs.get("customer_id")
        vendor_id = attrs.get("vendor_id")

        if attrs["type"] == Transaction.TYPE_SALE:
            if customer_id is None:
                if vendor_id is not None:
                    raise serializers.ValidationError(
                        {"vendor_id": "Sales must reference a customer, not a vendor"},
                        code=TYPE_MISMATCH,
                    )
                raise serializers.ValidationError(
                    {"customer_id": "Customer ID is required for sales"}
                )
            if vendor_id is not None:
                raise serializers.ValidationError({"vendor_id": "A sale must not reference a vendor"})
        else:
            if vendor_id is None:
                if customer_id is not None:
                    raise serializers.ValidationError(
                        {"customer_id": "Purchases must reference a vendor, not a customer"},
                        code=TYPE_MISMATCH,
                    )
                raise serializers.ValidationError(
                    {"vendor_id": "Vendor ID is required for purchases"}
                )
            if customer_id is not None:
                raise serializers.ValidationError(
                    {"customer_id": "A purchase must not reference a customer"}
                )

        if not attrs.get("products"):
            raise serializers.ValidationError({"products": "At least one product is required"})

        return attrs


class TransactionStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=Transaction.STATUS_CHOICES)
