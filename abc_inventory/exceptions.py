"""Error taxonomy for the inventory store. Every error is recoverable by the caller."""

from typing import Optional


class InventoryError(Exception):
    """Base class for all inventory errors."""


class ValidationError(InventoryError, ValueError):
    """A single field was rejected at construction or update time."""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


class IntegrityError(InventoryError):
    """The collection failed revalidation after a mutation (the mutation is rolled back)."""


class DuplicateCodeError(InventoryError):
    def __init__(self, code: str):
        super().__init__(f"An item with code '{code}' already exists")
        self.code = code


class NotFoundError(InventoryError, LookupError):
    def __init__(self, code: str):
        super().__init__(f"No item with code '{code}'")
        self.code = code


class PersistenceError(InventoryError):
    """Writing the collection to storage failed (the mutation is rolled back)."""
