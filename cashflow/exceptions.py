"""Custom exception hierarchy for cashflow."""


class CashflowError(Exception):
    """Base exception for all cashflow errors.

    Parameters
    ----------
    message : str
        Short, human-readable reason.
    detail : str | None
        Longer description (failing fields, offending id), when available.
    """

    def __init__(self, message: str, detail: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.detail = detail


class ValidationError(CashflowError):
    """Raised when input is malformed, before any mutation is attempted."""


class EntityNotFoundError(CashflowError):
    """Raised when a referenced entity does not exist."""


class ReferentialIntegrityError(EntityNotFoundError):
    """Raised when a foreign key reference is violated."""


class DuplicateEntityError(CashflowError):
    """Raised when a unique field (CPF) is already registered."""


class InvalidEntityStateError(CashflowError):
    """Raised when an entity is in an invalid state for the operation."""


class ConfigurationError(CashflowError):
    """Raised when configuration is invalid or missing."""


class StoreError(CashflowError):
    """Raised when the in-memory record store rejects an operation."""
