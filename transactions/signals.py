# transactions/signals.py

"""
POST-COMMIT NOTIFICATION

transaction_posted is sent once per successfully committed posting, after
the database commit. Receivers get:
    sender=Transaction, transaction=<Transaction>

Receivers run through send_robust: an exception in one receiver is logged
and never reaches the caller of the posting engine.
"""

import logging

from django.dispatch import Signal

from transactions.models import Transaction

logger = logging.getLogger(__name__)

transaction_posted = Signal()


def notify_transaction_posted(transaction_id):
    txn = Transaction.objects.with_details().filter(pk=transaction_id).first()
    if txn is None:
        return []

    results = transaction_posted.send_robust(sender=Transaction, transaction=txn)

    for receiver, response in results:
        if isinstance(response, Exception):
            logger.error(
                "transaction_posted receiver failed",
                exc_info=(type(response), response, response.__traceback__),
                extra={
                    "receiver": getattr(receiver, "__qualname__", repr(receiver)),
                    "transaction_id": str(transaction_id),
                },
            )

    return results
