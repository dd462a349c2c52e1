from .balance_adjustments import (
    BalanceAdjustmentError,
    BalanceAdjustmentResult,
    ContactNotFoundError,
    adjust_contact_balance,
)
from .directory import find_active_contact

__all__ = [
    "find_active_contact",
    "adjust_contact_balance",
    "BalanceAdjustmentError",
    "BalanceAdjustmentResult",
    "ContactNotFoundError",
]
