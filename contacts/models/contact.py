# contacts/models/contact.py

import uuid
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator, RegexValidator
from django.db import models

from businesses.models import Business

# current_balance is DecimalField(max_digits=12, decimal_places=2)
MAX_BALANCE = Decimal("9999999999.99")


phone_validator = RegexValidator(
    regex=r"^\+?[\d\s\-\(\)]{10,}$",
    message="Please enter a valid phone number",
)


class ContactQuerySet(models.QuerySet):
    def for_business(self, business):
        return self.filter(business=business)

    def active(self):
        return self.filter(is_active=True)

    def customers(self):
        return self.filter(type=Contact.TYPE_CUSTOMER)

    def vendors(self):
        return self.filter(type=Contact.TYPE_VENDOR)


class Contact(models.Model):
    """
    A customer or vendor of one business.

    BALANCE MODEL:
    - current_balance is signed: positive means the contact owes the business,
      negative means the business owes the contact (credit in their favour)
    - posting a credit sale adds the sale total to the customer's balance
    - manual corrections go through contacts.services.balance_adjustments

    type is fixed at creation; it decides which transactions may reference
    the contact (sale -> customer, purchase -> vendor).
    """

    TYPE_CUSTOMER = "customer"
    TYPE_VENDOR = "vendor"

    TYPE_CHOICES = [
        (TYPE_CUSTOMER, "Customer"),
        (TYPE_VENDOR, "Vendor"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    business = models.ForeignKey(
        Business,
        on_delete=models.CASCADE,
        related_name="contacts",
    )

    name = models.CharField(max_length=100, db_index=True)
    phone = models.CharField(max_length=30, validators=[phone_validator])
    email = models.EmailField(blank=True, default="")

    address_street = models.CharField(max_length=200, blank=True, default="")
    address_city = models.CharField(max_length=100, blank=True, default="")
    address_state = models.CharField(max_length=100, blank=True, default="")
    address_zip_code = models.CharField(max_length=20, blank=True, default="")
    address_country = models.CharField(max_length=100, blank=True, default="")

    type = models.CharField(max_length=10, choices=TYPE_CHOICES)

    notes = models.TextField(max_length=500, blank=True, default="")

    credit_limit = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal("0.00"),
        validators=[MinValueValidator(Decimal("0.00"))],
    )
    current_balance = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal("0.00"),
    )

    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = ContactQuerySet.as_manager()

    class Meta:
        ordering = ["name"]
        indexes = [
            models.Index(fields=["business", "type"], name="contact_biz_type_idx"),
            models.Index(fields=["business", "name"], name="contact_biz_name_idx"),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["business", "phone"],
                name="uniq_contact_phone_per_business",
            ),
        ]

    def __str__(self):
        return f"{self.name} ({self.type})"

    def clean(self):
        if self.credit_limit is not None and Decimal(self.credit_limit) < Decimal("0.00"):
            raise ValidationError("Credit limit cannot be negative")

    def save(self, *args, **kwargs):
        if not self._state.adding and self.pk:
            original_type = (
                Contact.objects.filter(pk=self.pk).values_list("type", flat=True).first()
            )
            if original_type is not None and original_type != self.type:
                raise ValidationError("Contact type cannot be changed after creation")
        super().save(*args, **kwargs)

    @property
    def is_customer(self) -> bool:
        return self.type == self.TYPE_CUSTOMER

    @property
    def is_vendor(self) -> bool:
        return self.type == self.TYPE_VENDOR
