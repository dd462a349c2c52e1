# transactions/serializers/__init__.py

from .transaction import (
    TYPE_MISMATCH,
    PostingLineInputSerializer,
    TransactionCreateSerializer,
    TransactionItemSerializer,
    TransactionSerializer,
    TransactionStatusSerializer,
)

__all__ = [
    "TYPE_MISMATCH",
    "PostingLineInputSerializer",
    "TransactionCreateSerializer",
    "TransactionItemSerializer",
    "TransactionSerializer",
    "TransactionStatusSerializer",
]
