"""
Domain: error taxonomy.

Every failure a core operation reports is one of these. None of them is retried
by the core; retry policy belongs to the caller.
"""

from __future__ import annotations


class CrmError(Exception):
    """Base class for all errors reported by core operations."""


class ValidationError(CrmError):
    """Missing or malformed required input."""


class InvalidTransitionError(ValidationError):
    """A status change outside the pipeline order (e.g. reverting a sold customer)."""


class NotFoundError(CrmError):
    """A referenced entity id does not exist."""

    def __init__(self, entity: str, entity_id: object) -> None:
        super().__init__(f"{entity} not found: {entity_id}")
        self.entity = entity
        self.entity_id = entity_id


class InvalidAmountError(CrmError):
    """Non-positive or non-finite monetary input."""


class PermissionDeniedError(CrmError):
    """The acting principal's role does not allow the operation."""


class PersistenceError(CrmError):
    """The external store rejected or failed an operation."""


class ConcurrencyConflictError(PersistenceError):
    """A write's expected field values no longer match the stored record."""


__all__ = [
    "CrmError",
    "ValidationError",
    "InvalidTransitionError",
    "NotFoundError",
    "InvalidAmountError",
    "PermissionDeniedError",
    "PersistenceError",
    "ConcurrencyConflictError",
]
