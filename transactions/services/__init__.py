from .exceptions import (
    ConcurrentModification,
    CounterpartyNotFound,
    InsufficientStock,
    InvalidStatusTransition,
    PostingError,
    ProductNotFound,
    StorageFailure,
    TransactionNotFound,
    TypeMismatch,
    ValidationError,
)
from .posting_engine import (
    PostingLine,
    PostingRequest,
    apost_transaction,
    post_transaction,
)
from .transaction_lifecycle import change_transaction_status

__all__ = [
    "PostingLine",
    "PostingRequest",
    "post_transaction",
    "apost_transaction",
    "change_transaction_status",
    "PostingError",
    "ValidationError",
    "CounterpartyNotFound",
    "ProductNotFound",
    "TypeMismatch",
    "InsufficientStock",
    "ConcurrentModification",
    "StorageFailure",
    "TransactionNotFound",
    "InvalidStatusTransition",
]
