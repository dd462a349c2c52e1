# permissions/tests/test_roles.py

from types import SimpleNamespace

from django.contrib.auth import get_user_model
from django.contrib.auth.models import AnonymousUser
from django.test import TestCase

from businesses.models import Business
from permissions.roles import (
    ALL_CAPABILITIES,
    CAP_CONTACTS_BALANCE,
    CAP_INVENTORY_ADJUST,
    CAP_REPORTS_VIEW,
    CAP_TRANSACTIONS_POST,
    CAP_TRANSACTIONS_STATUS,
    CAP_TRANSACTIONS_VIEW,
    HasCapability,
    IsBusinessMember,
    effective_capabilities_for,
    get_request_business,
)

User = get_user_model()


def _request(user, method="GET"):
    return SimpleNamespace(user=user, method=method)


class CapabilityMapTests(TestCase):
    def setUp(self):
        self.business = Business.objects.create(name="Corner Shop")

    def _user(self, role, **extra):
        return User.objects.create_user(
            email=f"{role}@example.com",
            password="password123",
            business=self.business,
            role=role,
            **extra,
        )

    def test_admin_and_manager_have_everything(self):
        for role in ("admin", "manager"):
            user = self._user(role)
            self.assertEqual(effective_capabilities_for(_request(user), user), ALL_CAPABILITIES)

    def test_plain_user_cannot_correct_ledger_side_effects(self):
        user = self._user("user")
        caps = effective_capabilities_for(_request(user), user)

        self.assertIn(CAP_TRANSACTIONS_POST, caps)
        self.assertIn(CAP_REPORTS_VIEW, caps)
        self.assertNotIn(CAP_TRANSACTIONS_STATUS, caps)
        self.assertNotIn(CAP_INVENTORY_ADJUST, caps)
        self.assertNotIn(CAP_CONTACTS_BALANCE, caps)

    def test_superuser_has_everything(self):
        root = User.objects.create_superuser(email="root@example.com", password="password123")
        self.assertEqual(effective_capabilities_for(_request(root), root), ALL_CAPABILITIES)


class PermissionClassTests(TestCase):
    def setUp(self):
        self.business = Business.objects.create(name="Corner Shop")
        self.clerk = User.objects.create_user(
            email="clerk@example.com",
            password="password123",
            business=self.business,
            role="user",
        )

    def test_business_member(self):
        perm = IsBusinessMember()
        self.assertTrue(perm.has_permission(_request(self.clerk), None))
        self.assertFalse(perm.has_permission(_request(AnonymousUser()), None))

    def test_inactive_business_is_not_a_tenant(self):
        self.business.is_active = False
        self.business.save()
        self.clerk.refresh_from_db()

        self.assertIsNone(get_request_business(_request(self.clerk)))
        self.assertFalse(IsBusinessMember().has_permission(_request(self.clerk), None))

    def test_method_mapping_on_api_views(self):
        view = SimpleNamespace(
            action_capabilities={"get": CAP_TRANSACTIONS_VIEW, "patch": CAP_TRANSACTIONS_STATUS},
        )
        perm = HasCapability()

        self.assertTrue(perm.has_permission(_request(self.clerk, "GET"), view))
        self.assertFalse(perm.has_permission(_request(self.clerk, "PATCH"), view))

    def test_action_mapping_falls_back_to_required_capability(self):
        view = SimpleNamespace(
            action="stock",
            action_capabilities={"stock": CAP_INVENTORY_ADJUST},
            required_capability=CAP_TRANSACTIONS_VIEW,
        )
        perm = HasCapability()
        self.assertFalse(perm.has_permission(_request(self.clerk, "PATCH"), view))

        view.action = "list"
        self.assertTrue(perm.has_permission(_request(self.clerk), view))

    def test_missing_capability_declaration_denies(self):
        self.assertFalse(HasCapability().has_permission(_request(self.clerk), SimpleNamespace()))
