"""Exception hierarchy for the storefront core.

Every error raised on purpose by the catalogue, ordering and store layers
derives from ``StorefrontError`` so the HTTP binding can translate them in one
place.
"""


class StorefrontError(Exception):
    """Base exception for all storefront errors."""


class NotInitializedError(StorefrontError):
    """Raised when a cart operation runs before the cart is ready."""


class InvalidProductError(StorefrontError):
    """Raised when a cart operation receives an unusable product id."""


class InvalidFilterError(StorefrontError, ValueError):
    """Raised when a filter value cannot be normalized."""


class TraceReentryError(StorefrontError):
    """Raised when the trace log is mutated from inside its own dispatch."""


class StoreError(StorefrontError):
    """Base exception for backing store failures."""


class StoreUnavailableError(StoreError):
    """Raised when the backing store fails to execute an operation."""


class DuplicateKeyError(StoreError):
    """Raised when an insert violates a unique constraint."""

    def __init__(self, collection: str, columns: tuple[str, ...]) -> None:
        self.collection = collection
        self.columns = columns
        super().__init__(f"Duplicate key in {collection} on ({', '.join(columns)})")


class UnknownCollectionError(StoreError):
    """Raised when a store operation names a collection that does not exist."""
