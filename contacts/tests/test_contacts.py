# contacts/tests/test_contacts.py

from decimal import Decimal

from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError
from django.test import TestCase
from rest_framework.test import APIClient

from businesses.models import Business
from contacts.models import Contact
from contacts.services import find_active_contact

User = get_user_model()


class ContactModelTests(TestCase):
    """
    GUARANTEES:
    - type is immutable after creation
    - lookups are tenant- and activity-scoped
    """

    def setUp(self):
        self.business = Business.objects.create(name="Corner Shop")
        self.customer = Contact.objects.create(
            business=self.business,
            name="Ada",
            phone="+1 555 010 0001",
            type=Contact.TYPE_CUSTOMER,
        )

    def test_type_cannot_change(self):
        self.customer.type = Contact.TYPE_VENDOR
        with self.assertRaises(ValidationError):
            self.customer.save()

        self.customer.refresh_from_db()
        self.assertEqual(self.customer.type, Contact.TYPE_CUSTOMER)

    def test_find_active_contact_respects_expected_type(self):
        self.assertEqual(
            find_active_contact(self.business, self.customer.id, Contact.TYPE_CUSTOMER),
            self.customer,
        )
        self.assertIsNone(
            find_active_contact(self.business, self.customer.id, Contact.TYPE_VENDOR)
        )

    def test_find_active_contact_hides_inactive_and_foreign(self):
        other = Business.objects.create(name="Rival")
        self.assertIsNone(find_active_contact(other, self.customer.id))

        self.customer.is_active = False
        self.customer.save()
        self.assertIsNone(find_active_contact(self.business, self.customer.id))

    def test_find_active_contact_tolerates_malformed_id(self):
        self.assertIsNone(find_active_contact(self.business, "not-a-uuid"))


class ContactApiTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.business = Business.objects.create(name="Corner Shop")
        self.user = User.objects.create_user(
            email="clerk@example.com",
            password="password123",
            business=self.business,
            role="user",
        )
        self.client.force_authenticate(user=self.user)

        self.customer = Contact.objects.create(
            business=self.business,
            name="Ada Lovelace",
            phone="+1 555 010 0001",
            email="ada@example.com",
            type=Contact.TYPE_CUSTOMER,
        )
        self.vendor = Contact.objects.create(
            business=self.business,
            name="Babbage Supplies",
            phone="+1 555 010 0002",
            type=Contact.TYPE_VENDOR,
        )

    def test_create_contact_with_address(self):
        res = self.client.post(
            "/api/contacts/",
            {
                "name": "Grace Hopper",
                "phone": "+1 555 010 0003",
                "type": "customer",
                "address": {"city": "Arlington", "country": "US"},
            },
            format="json",
        )
        self.assertEqual(res.status_code, 201, res.data)

        contact = Contact.objects.get(id=res.data["data"]["contact"]["id"])
        self.assertEqual(contact.business, self.business)
        self.assertEqual(contact.address_city, "Arlington")
        self.assertEqual(res.data["data"]["contact"]["address"]["country"], "US")

    def test_duplicate_phone_is_rejected(self):
        res = self.client.post(
            "/api/contacts/",
            {"name": "Copy", "phone": "+1 555 010 0001", "type": "vendor"},
            format="json",
        )
        self.assertEqual(res.status_code, 400)
        self.assertIn("phone", res.data["errors"])

    def test_invalid_phone_is_rejected(self):
        res = self.client.post(
            "/api/contacts/",
            {"name": "Short", "phone": "123", "type": "vendor"},
            format="json",
        )
        self.assertEqual(res.status_code, 400)
        self.assertIn("phone", res.data["errors"])

    def test_type_change_via_api_is_rejected(self):
        res = self.client.patch(
            f"/api/contacts/{self.customer.id}/",
            {"type": "vendor"},
            format="json",
        )
        self.assertEqual(res.status_code, 400)
        self.assertIn("type", res.data["errors"])

    def test_customers_and_vendors_lists(self):
        res = self.client.get("/api/contacts/customers/")
        self.assertEqual([c["name"] for c in res.data["data"]["contacts"]], ["Ada Lovelace"])

        res = self.client.get("/api/contacts/vendors/")
        self.assertEqual([c["name"] for c in res.data["data"]["contacts"]], ["Babbage Supplies"])

    def test_search_requires_query(self):
        res = self.client.get("/api/contacts/search/")
        self.assertEqual(res.status_code, 400)
        self.assertEqual(res.data["message"], "Search query is required")

    def test_search_matches_email(self):
        res = self.client.get("/api/contacts/search/", {"q": "ada@"})
        self.assertEqual(res.status_code, 200)
        self.assertEqual([c["name"] for c in res.data["data"]["contacts"]], ["Ada Lovelace"])

    def test_delete_soft_deactivates(self):
        res = self.client.delete(f"/api/contacts/{self.vendor.id}/")
        self.assertEqual(res.status_code, 200)

        self.vendor.refresh_from_db()
        self.assertFalse(self.vendor.is_active)

    def test_plain_user_cannot_adjust_balance(self):
        res = self.client.patch(
            f"/api/contacts/{self.customer.id}/balance/",
            {"amount": "10.00", "operation": "add"},
            format="json",
        )
        self.assertEqual(res.status_code, 403)
