"""Shared domain error messages and error types."""

from typing import Optional


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""


class NotFoundError(DomainError):
    """Requested domain entity or reference does not exist."""


class ConflictError(DomainError):
    """Domain conflict, such as immutable field changes or stale writes."""


class StateTransitionError(DomainError):
    """Requested status change is not allowed from the current status."""

    def __init__(self, message: str, from_status: Optional[str] = None, to_status: Optional[str] = None):
        super().__init__(message)
        self.from_status = from_status
        self.to_status = to_status


class StoreError(DomainError):
    """Underlying persistence failure."""


def transaction_not_found(reference: int | str) -> str:
    """Return message for missing transaction."""
    return f"Equipment transaction {reference} not found"


def equipment_not_found(equipment_id: int) -> str:
    """Return message for missing equipment."""
    return f"Equipment not found for ID: {equipment_id}"


def school_not_found(school_id: int, role: str = "School") -> str:
    """Return message for missing school."""
    return f"{role} school {school_id} not found"


def govern_body_not_found(govern_body_id: int) -> str:
    """Return message for missing governing body."""
    return f"Governing body {govern_body_id} not found"


def missing_fields(fields: list[str]) -> str:
    """Return message listing missing required fields."""
    return f"Missing required fields: {', '.join(fields)}"


def invalid_transition(from_status: str, to_status: str) -> str:
    """Return message for a status change outside the transition table."""
    return f"Cannot change status from '{from_status}' to '{to_status}'"


def immutable_field(field: str) -> str:
    """Return message for an attempted change to a write-once field."""
    return f"Cannot change {field} after transaction creation"


def only_pending_deletable(reference: int | str, status: str) -> str:
    """Return message when deleting a transaction that has progressed."""
    return f"Only pending transactions can be deleted (transaction {reference} is '{status}')"


def only_pending_editable(field: str, status: str) -> str:
    """Return message when correcting details of a transaction that has progressed."""
    return f"Cannot change {field} of a transaction that is '{status}'; only pending transactions can be corrected"


def concurrent_modification(reference: int | str) -> str:
    """Return message when a conditional write lost a race."""
    return f"Equipment transaction {reference} was modified concurrently; reload and try again"
