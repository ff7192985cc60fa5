"""
Error kinds raised by the catalog and authentication layers.
"""

from enum import Enum


class ErrorKind(str, Enum):
    """Closed set of failure kinds surfaced to the HTTP adapter."""
    NOT_FOUND = "not_found"
    INVALID_INPUT = "invalid_input"
    UNAUTHORIZED = "unauthorized"
    CONFLICT = "conflict"


class CatalogError(Exception):
    """Base class for all domain failures. Callers dispatch on ``kind``."""

    kind: ErrorKind

    def __init__(self, message: str = ""):
        super().__init__(message or self.kind.value.replace("_", " "))
        self.message = str(self)


class NotFoundError(CatalogError):
    """Referenced book id does not exist in the store."""
    kind = ErrorKind.NOT_FOUND


class InvalidInputError(CatalogError):
    """A required field is missing or empty."""
    kind = ErrorKind.INVALID_INPUT


class UnauthorizedError(CatalogError):
    """Credential or token check failed."""
    kind = ErrorKind.UNAUTHORIZED


class ConflictError(CatalogError):
    """Reserved for duplicate id detection; nothing raises it yet."""
    kind = ErrorKind.CONFLICT
