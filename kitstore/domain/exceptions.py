# kitstore/domain/exceptions.py


class KitStoreError(Exception):
    """Base for errors raised by the store and its use cases."""


class ValidationError(KitStoreError):
    """Malformed, missing or mistyped input."""


class NotFoundError(KitStoreError):
    """Reference to a product, cart or cart line that does not exist."""


class StoreError(KitStoreError):
    """The database rejected or failed an operation."""
