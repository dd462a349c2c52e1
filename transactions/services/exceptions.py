# transactions/services/exceptions.py

"""
POSTING DOMAIN ERRORS

Every failure of the posting engine is a PostingError subclass. All of them
abort the whole unit of work; none leave partial stock or balance changes.
The HTTP layer maps them to status codes (see transactions.views).
"""


class PostingError(Exception):
    def __init__(self, message: str, **context):
        super().__init__(message)
        self.message = message
        self.context = context


class ValidationError(PostingError):
    """Malformed or incomplete posting request."""

    def __init__(self, message: str, errors=None, **context):
        super().__init__(message, **context)
        self.errors = errors


class CounterpartyNotFound(PostingError):
    pass


class ProductNotFound(PostingError):
    pass


class TypeMismatch(PostingError):
    """Counterparty type does not match the transaction type."""


class InsufficientStock(PostingError):
    def __init__(self, *, product_id, product_name: str, available: int, requested: int):
        super().__init__(
            f"Insufficient stock for product {product_name}. "
            f"Available: {available}, Requested: {requested}",
            product_id=product_id,
            available=available,
            requested=requested,
        )
        self.product_id = product_id
        self.product_name = product_name
        self.available = available
        self.requested = requested


class ConcurrentModification(PostingError):
    """Retry budget exhausted on storage-level conflicts; retry the whole request."""


class StorageFailure(PostingError):
    pass


# ============================================================
# LIFECYCLE ERRORS
# ============================================================


class TransactionNotFound(PostingError):
    pass


class InvalidStatusTransition(PostingError):
    pass
