# permissions/roles.py

from __future__ import annotations

from typing import Optional

from rest_framework.permissions import BasePermission


# =========================================================
# ROLE CONSTANTS
# =========================================================
# Mirror users.User.ROLE_*; kept here so permission code does not import models.
ROLE_ADMIN = "admin"
ROLE_MANAGER = "manager"
ROLE_USER = "user"

BUSINESS_ROLES = {
    ROLE_ADMIN,
    ROLE_MANAGER,
    ROLE_USER,
}


# =========================================================
# CAPABILITIES (THE REAL PERMISSION LANGUAGE)
# =========================================================
# Views protect capabilities, not raw roles.
CAP_TRANSACTIONS_VIEW = "transactions.view"
CAP_TRANSACTIONS_POST = "transactions.post"
CAP_TRANSACTIONS_STATUS = "transactions.status"

CAP_INVENTORY_VIEW = "inventory.view"
CAP_INVENTORY_EDIT = "inventory.edit"
CAP_INVENTORY_ADJUST = "inventory.adjust"     # manual stock corrections outside posting

CAP_CONTACTS_VIEW = "contacts.view"
CAP_CONTACTS_EDIT = "contacts.edit"
CAP_CONTACTS_BALANCE = "contacts.balance"     # manual balance corrections outside posting

CAP_REPORTS_VIEW = "reports.view"

ALL_CAPABILITIES = {
    CAP_TRANSACTIONS_VIEW,
    CAP_TRANSACTIONS_POST,
    CAP_TRANSACTIONS_STATUS,
    CAP_INVENTORY_VIEW,
    CAP_INVENTORY_EDIT,
    CAP_INVENTORY_ADJUST,
    CAP_CONTACTS_VIEW,
    CAP_CONTACTS_EDIT,
    CAP_CONTACTS_BALANCE,
    CAP_REPORTS_VIEW,
}


# =========================================================
# ROLE → CAPABILITY MAP
# =========================================================
ROLE_CAPABILITIES: dict[str, set[str]] = {
    ROLE_ADMIN: {
        *ALL_CAPABILITIES,
    },
    ROLE_MANAGER: {
        *ALL_CAPABILITIES,
    },
    ROLE_USER: {
        CAP_TRANSACTIONS_VIEW,
        CAP_TRANSACTIONS_POST,
        CAP_INVENTORY_VIEW,
        CAP_INVENTORY_EDIT,
        CAP_CONTACTS_VIEW,
        CAP_CONTACTS_EDIT,
        CAP_REPORTS_VIEW,
    },
}


# =========================================================
# Helpers
# =========================================================
def get_user_role(user) -> Optional[str]:
    return getattr(user, "role", None)


def get_request_business(request):
    """
    Tenant of the current request: the authenticated user's active business.
    Returns None for anonymous users, users without a business, or a
    deactivated business.
    """
    user = getattr(request, "user", None)
    if not user or not user.is_authenticated:
        return None

    business = getattr(user, "business", None)
    if business is None or not getattr(business, "is_active", False):
        return None

    return business


def effective_capabilities_for(request, user) -> set[str]:
    if getattr(user, "is_superuser", False):
        return set(ALL_CAPABILITIES)
    return set(ROLE_CAPABILITIES.get(get_user_role(user), set()))


# =========================================================
# Tenant Permission
# =========================================================
class IsBusinessMember(BasePermission):
    """
    Authenticated user attached to an active business.

    Every tenant-scoped endpoint requires this; views then read
    request.user.business for scoping.
    """

    message = "User is not attached to an active business."

    def has_permission(self, request, view):
        return get_request_business(request) is not None


# =========================================================
# Capability Permissions
# =========================================================
class HasCapability(BasePermission):
    """
    Require a specific capability.

    Usage:
        permission_classes = [IsAuthenticated, IsBusinessMember, HasCapability]
        view.required_capability = CAP_INVENTORY_ADJUST

    Viewsets can map actions to capabilities with
        view.action_capabilities = {"create": CAP_..., "stock": CAP_...}
    and plain APIViews can map HTTP methods the same way
        view.action_capabilities = {"get": CAP_..., "post": CAP_...}
    Either takes precedence over required_capability.
    """

    def _required_for(self, request, view) -> Optional[str]:
        per_action = getattr(view, "action_capabilities", None) or {}
        key = getattr(view, "action", None) or (request.method or "").lower()
        if key and key in per_action:
            return per_action[key]
        return getattr(view, "required_capability", None)

    def has_permission(self, request, view):
        user = request.user
        if not user or not user.is_authenticated:
            return False

        required = self._required_for(request, view)
        if not required:
            # If not set, deny-by-default to avoid accidental open endpoints
            return False

        return required in effective_capabilities_for(request, user)

