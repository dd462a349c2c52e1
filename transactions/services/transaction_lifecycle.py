"""
TRANSACTION LIFECYCLE DOMAIN RULES

Allowed status transitions for posted transactions.

DESIGN PRINCIPLES:
- Status is metadata: no stock mutation, no balance mutation
- Single source of truth for transitions
"""

import logging
import uuid

from django.db import transaction

from transactions.models import Transaction
from transactions.services.exceptions import (
    InvalidStatusTransition,
    TransactionNotFound,
    ValidationError,
)

logger = logging.getLogger(__name__)

# ============================================================
# STATE DEFINITIONS
# ============================================================

TERMINAL_STATES = {
    Transaction.STATUS_CANCELLED,
}

ALLOWED_TRANSITIONS = {
    Transaction.STATUS_PENDING: {
        Transaction.STATUS_COMPLETED,
        Transaction.STATUS_CANCELLED,
    },
    Transaction.STATUS_COMPLETED: {
        Transaction.STATUS_CANCELLED,
    },
}

VALID_STATUSES = {value for value, _ in Transaction.STATUS_CHOICES}


# ============================================================
# DOMAIN RULES
# ============================================================


def can_transition(*, from_status: str, to_status: str) -> bool:
    if from_status in TERMINAL_STATES:
        return False

    return to_status in ALLOWED_TRANSITIONS.get(from_status, set())


def validate_transition(*, txn: Transaction, target_status: str):
    if target_status not in VALID_STATUSES:
        raise ValidationError(
            f"Status must be one of: {', '.join(sorted(VALID_STATUSES))}"
        )

    if not can_transition(from_status=txn.status, to_status=target_status):
        raise InvalidStatusTransition(
            f"Transaction {txn.invoice_number} cannot transition from "
            f"'{txn.status}' to '{target_status}'",
            transaction_id=txn.pk,
        )


# ============================================================
# SERVICE
# ============================================================


@transaction.atomic
def change_transaction_status(*, business, transaction_id, status: str) -> Transaction:
    """
    Move a transaction to `status`.

    Only the status column is written. Stock and balances keep the effects
    applied at posting time, including on cancellation.
    """
    target = (status or "").strip().lower()

    try:
        pk = uuid.UUID(str(transaction_id))
    except (TypeError, ValueError, AttributeError):
        raise TransactionNotFound("Transaction not found", transaction_id=transaction_id)

    txn = (
        Transaction.objects.select_for_update()
        .filter(pk=pk, business=business)
        .first()
    )
    if txn is None:
        raise TransactionNotFound("Transaction not found", transaction_id=transaction_id)

    validate_transition(txn=txn, target_status=target)

    previous = txn.status
    txn.status = target
    txn.save(update_fields=["status", "updated_at"])

    logger.info(
        "Transaction status changed",
        extra={
            "business_id": str(txn.business_id),
            "transaction_id": str(txn.pk),
            "from_status": previous,
            "to_status": target,
        },
    )
    return txn
