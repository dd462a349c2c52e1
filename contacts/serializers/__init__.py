# contacts/serializers/__init__.py

from .contact import (
    AddressSerializer,
    BalanceAdjustmentSerializer,
    ContactSerializer,
    ContactSummarySerializer,
)

__all__ = [
    "AddressSerializer",
    "BalanceAdjustmentSerializer",
    "ContactSerializer",
    "ContactSummarySerializer",
]
