# transactions/views/__init__.py

from .transaction import (
    PurchasesListView,
    SalesListView,
    TransactionDetailView,
    TransactionListCreateView,
    TransactionStatusView,
    TransactionSummaryView,
)

__all__ = [
    "TransactionListCreateView",
    "TransactionDetailView",
    "TransactionStatusView",
    "TransactionSummaryView",
    "SalesListView",
    "PurchasesListView",
]
