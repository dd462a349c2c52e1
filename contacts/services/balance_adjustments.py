# contacts/services/balance_adjustments.py

"""
BALANCE ADJUSTMENTS SERVICE

Manual corrections of a contact's running balance (payments received,
opening balances, write-offs) outside of transaction posting.

Operations:
- set       balance = amount
- add       balance = balance + amount
- subtract  balance = balance - amount

No floor is applied: a negative balance is a legitimate credit in the
contact's favour.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from django.db import transaction

from contacts.models import Contact
from contacts.models.contact import MAX_BALANCE
from contacts.services.directory import find_active_contact

logger = logging.getLogger(__name__)

OPERATION_SET = "set"
OPERATION_ADD = "add"
OPERATION_SUBTRACT = "subtract"

OPERATIONS = (OPERATION_SET, OPERATION_ADD, OPERATION_SUBTRACT)


class BalanceAdjustmentError(Exception):
    pass


class ContactNotFoundError(BalanceAdjustmentError):
    pass


@dataclass(frozen=True)
class BalanceAdjustmentResult:
    contact: Contact
    operation: str
    amount: Decimal
    previous_balance: Decimal
    new_balance: Decimal


def _money(value) -> Decimal:
    if value is None or value == "":
        raise BalanceAdjustmentError("amount is required")
    if isinstance(value, bool):
        raise BalanceAdjustmentError("amount must be a number")
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError):
        raise BalanceAdjustmentError("amount must be a number")
    if not amount.is_finite():
        raise BalanceAdjustmentError("amount must be a number")
    if abs(amount) > MAX_BALANCE:
        raise BalanceAdjustmentError("amount is out of range")
    return amount.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


def compute_adjusted_balance(current: Decimal, amount: Decimal, operation: str) -> Decimal:
    if operation == OPERATION_ADD:
        return current + amount
    if operation == OPERATION_SUBTRACT:
        return current - amount
    if operation == OPERATION_SET:
        return amount
    raise BalanceAdjustmentError(f"Operation must be one of: {', '.join(OPERATIONS)}")


@transaction.atomic
def adjust_contact_balance(
    *,
    business,
    contact_id,
    amount,
    operation: str = OPERATION_SET,
) -> BalanceAdjustmentResult:
    op = (operation or OPERATION_SET).strip().lower()
    if op not in OPERATIONS:
        raise BalanceAdjustmentError(f"Operation must be one of: {', '.join(OPERATIONS)}")

    value = _money(amount)

    contact = find_active_contact(business, contact_id, for_update=True)
    if contact is None:
        raise ContactNotFoundError("Contact not found")

    previous = Decimal(contact.current_balance if contact.current_balance is not None else 0)
    new_balance = compute_adjusted_balance(previous, value, op)
    if abs(new_balance) > MAX_BALANCE:
        raise BalanceAdjustmentError("resulting balance is out of range")

    contact.current_balance = new_balance
    contact.save(update_fields=["current_balance", "updated_at"])

    logger.info(
        "Contact balance adjusted",
        extra={
            "business_id": str(contact.business_id),
            "contact_id": str(contact.pk),
            "operation": op,
            "amount": str(value),
            "previous_balance": str(previous),
            "new_balance": str(new_balance),
        },
    )

    return BalanceAdjustmentResult(
        contact=contact,
        operation=op,
        amount=value,
        previous_balance=previous,
        new_balance=new_balance,
    )
