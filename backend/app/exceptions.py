"""
Exception hierarchy for the record stores, the validator and the service.

Stores raise ``StoreError`` subclasses, the validator raises
``ValidationError`` and the service re-raises all of them as a single
``ServiceError`` carrying an ``ErrorKind``. "Not found" is never an
exception: lookups return ``None``, ``False`` or an empty list.
"""

from enum import Enum


class StoreError(Exception):
    """Base class for errors raised by a record store."""
    pass


class InvalidArgumentError(StoreError):
    """Malformed or missing input (non-positive id, empty search term)."""
    pass


class DuplicateKeyError(StoreError):
    """Email collision on create or update."""

    def __init__(self, email: str, message: str = None):
        self.email = email
        super().__init__(message or f"Student with email '{email}' already exists")


class StorageError(StoreError):
    """The underlying persistence layer failed."""
    pass


class ValidationError(Exception):
    """A field failed a business rule."""

    def __init__(self, field: str, message: str):
        self.field = field
        self.message = message
        super().__init__(message)


class ErrorKind(str, Enum):
    INVALID_ARGUMENT = "INVALID_ARGUMENT"
    VALIDATION = "VALIDATION"
    DUPLICATE_KEY = "DUPLICATE_KEY"
    STORAGE = "STORAGE"


class ServiceError(Exception):
    """The one error type that leaves the service layer."""

    def __init__(self, kind: ErrorKind, message: str, field: str = None):
        self.kind = kind
        self.message = message
        self.field = field
        super().__init__(message)

    def __repr__(self):
        return f"<ServiceError(kind={self.kind.value}, message='{self.message}')>"
