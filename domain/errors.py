# warung/domain/errors.py

from typing import Optional


class EmptyOrder(Exception):
    """Raised when an order with no lines is submitted."""

    def __init__(self, message: str = "Pesanan masih kosong"):
        super().__init__(message)


class PersistenceError(Exception):
    """
    The store rejected a read, write or delete.
    `cause` keeps the underlying error message from Supabase.
    """

    def __init__(self, message: str, cause: Optional[str] = None):
        super().__init__(message if not cause else f"{message}: {cause}")
        self.cause = cause


class MalformedTransaction(PersistenceError):
    """A stored transaction row that cannot be read back safely."""


class ObfuscationError(Exception):
    """Customer name could not be encrypted or decrypted."""
