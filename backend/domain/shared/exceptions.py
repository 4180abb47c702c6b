"""
Domain Exceptions.

Custom exceptions for domain-level errors.
These exceptions represent caller errors, hierarchy rule violations
and failures of the backing document store.
"""

from typing import Optional, Any, Dict


class DomainException(Exception):
    """Base exception for all domain errors."""

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message)
        self.message = message
        self.code = code or "DOMAIN_ERROR"
        self.details = details or {}


class EntityNotFoundException(DomainException):
    """Raised when a referenced entity is not found."""

    def __init__(self, entity_type: str, entity_id: Any):
        super().__init__(
            message=f"{entity_type} with id '{entity_id}' not found",
            code="ENTITY_NOT_FOUND",
            details={"entity_type": entity_type, "entity_id": str(entity_id)}
        )


class ValidationException(DomainException):
    """Raised when validation fails."""

    def __init__(self, message: str, field: Optional[str] = None, value: Any = None):
        super().__init__(
            message=message,
            code="VALIDATION_ERROR",
            details={"field": field, "value": str(value) if value is not None else None}
        )


class InvalidFilterCombinationException(DomainException):
    """Raised when two mutually exclusive query flags are requested together."""

    def __init__(self, first: str, second: str):
        super().__init__(
            message=f"Please specify true for only one of {first} or {second}.",
            code="INVALID_FILTER_COMBINATION",
            details={"filters": [first, second]}
        )


class InvalidPathException(DomainException):
    """Raised when a dot-notation path cannot address a document field."""

    def __init__(self, path: str, reason: str):
        super().__init__(
            message=f"Invalid path '{path}': {reason}",
            code="INVALID_PATH",
            details={"path": path, "reason": reason}
        )


class CircularReferenceException(DomainException):
    """Raised when a circular reference is detected in the assembly hierarchy."""

    def __init__(self, item_ids: list):
        super().__init__(
            message="Circular reference detected in assembly hierarchy",
            code="CIRCULAR_REFERENCE",
            details={"item_ids": [str(id) for id in item_ids]}
        )


# =============================================================================
# STORE
# =============================================================================

class StoreException(DomainException):
    """Base exception for document store failures."""


class StoreUnavailableException(StoreException):
    """Raised when the document store cannot be reached."""

    def __init__(self, reason: str):
        super().__init__(
            message=f"Document store unavailable: {reason}",
            code="STORE_UNAVAILABLE",
            details={"reason": reason}
        )


class StoreTimeoutException(StoreException):
    """Raised when a document store call does not complete in time."""

    def __init__(self, reason: str):
        super().__init__(
            message=f"Document store timed out: {reason}",
            code="STORE_TIMEOUT",
            details={"reason": reason}
        )
