"""
PATH: transactions/models/__init__.py

Ledger models export surface.
"""

from .transaction import Transaction
from .transaction_item import TransactionItem

__all__ = [
    "Transaction",
    "TransactionItem",
]
