# contacts/serializers/contact.py

from rest_framework import serializers

from contacts.models import Contact
from contacts.services.balance_adjustments import OPERATION_SET, OPERATIONS


class AddressSerializer(serializers.Serializer):
    """Groups the flat address_* columns under one `address` object."""

    street = serializers.CharField(source="address_street", required=False, allow_blank=True, max_length=200)
    city = serializers.CharField(source="address_city", required=False, allow_blank=True, max_length=100)
    state = serializers.CharField(source="address_state", required=False, allow_blank=True, max_length=100)
    zip_code = serializers.CharField(source="address_zip_code", required=False, allow_blank=True, max_length=20)
    country = serializers.CharField(source="address_country", required=False, allow_blank=True, max_length=100)


class ContactSerializer(serializers.ModelSerializer):
    """
    GUARANTEES:
    - phone is unique within the business
    - type cannot change once the contact exists
    - current_balance is read-only here (use the balance endpoint)
    """

    address = AddressSerializer(source="*", required=False)

    class Meta:
        model = Contact
        fields = [
            "id",
            "name",
            "phone",
            "email",
            "address",
            "type",
            "notes",
            "credit_limit",
            "current_balance",
            "is_active",
            "created_at",
            "updated_at",
        ]
        read_only_fields = [
            "id",
            "current_balance",
            "is_active",
            "created_at",
            "updated_at",
        ]

    def validate_name(self, value):
        value = (value or "").strip()
        if not value:
            raise serializers.ValidationError("Contact name is required")
        return value

    def validate_phone(self, value):
        value = (value or "").strip()

        request = self.context.get("request")
        business = getattr(getattr(request, "user", None), "business", None)
        if business is not None:
            qs = Contact.objects.filter(business=business, phone=value)
            if self.instance is not None:
                qs = qs.exclude(pk=self.instance.pk)
            if qs.exists():
                raise serializers.ValidationError("A contact with this phone number already exists")

        return value

    def validate_type(self, value):
        if self.instance is not None and value != self.instance.type:
            raise serializers.ValidationError("Contact type cannot be changed after creation")
        return value


class ContactSummarySerializer(serializers.ModelSerializer):
    """Compact projection used inside transaction and report payloads."""

    class Meta:
        model = Contact
        fields = ["id", "name", "phone", "email", "type"]
        read_only_fields = fields


class BalanceAdjustmentSerializer(serializers.Serializer):
    amount = serializers.DecimalField(max_digits=12, decimal_places=2)
    operation = serializers.ChoiceField(
        choices=OPERATIONS,
        required=False,
        default=OPERATION_SET,
    )
