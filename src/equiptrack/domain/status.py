"""Transaction status, kinds and the allowed-transition table."""

from enum import Enum
from typing import Optional

from equiptrack.domain.errors import StateTransitionError, ValidationError, invalid_transition


class TransactionStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    RETURNED = "returned"


class TransactionKind(str, Enum):
    RENTAL = "rental"
    PERMANENT = "permanent"


class ProviderKind(str, Enum):
    SCHOOL = "school"
    GOVERNING_BODY = "governing-body"


class ItemCondition(str, Enum):
    NEW = "new"
    EXCELLENT = "excellent"
    GOOD = "good"
    FAIR = "fair"
    POOR = "poor"


ALLOWED_TRANSITIONS: dict[TransactionStatus, frozenset[TransactionStatus]] = {
    TransactionStatus.PENDING: frozenset(
        {TransactionStatus.APPROVED, TransactionStatus.REJECTED, TransactionStatus.CANCELLED}
    ),
    TransactionStatus.APPROVED: frozenset(
        {TransactionStatus.COMPLETED, TransactionStatus.CANCELLED, TransactionStatus.RETURNED}
    ),
    TransactionStatus.REJECTED: frozenset(),
    TransactionStatus.COMPLETED: frozenset(),
    TransactionStatus.CANCELLED: frozenset(),
    TransactionStatus.RETURNED: frozenset(),
}

# Transitions that are only valid for some transaction kinds.
KIND_RESTRICTED_TRANSITIONS: dict[tuple[TransactionStatus, TransactionStatus], TransactionKind] = {
    (TransactionStatus.APPROVED, TransactionStatus.RETURNED): TransactionKind.RENTAL,
}

TERMINAL_STATUSES = frozenset(status for status, targets in ALLOWED_TRANSITIONS.items() if not targets)


def _coerce(enum_cls, value, field: str):
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(member.value for member in enum_cls)
        raise ValidationError(f"Invalid {field} '{value}'. Must be one of: {allowed}")


def parse_status(value: str | TransactionStatus) -> TransactionStatus:
    """Parse a status value, raising ValidationError if unknown."""
    return _coerce(TransactionStatus, value, "status")


def parse_transaction_kind(value: str | TransactionKind) -> TransactionKind:
    """Parse a transaction kind value, raising ValidationError if unknown."""
    return _coerce(TransactionKind, value, "transaction kind")


def parse_provider_kind(value: str | ProviderKind) -> ProviderKind:
    """Parse a provider kind value.

    Accepts the legacy ``governBody``/``GovernBody`` spellings for governing
    bodies.
    """
    if isinstance(value, str) and value.replace("_", "").replace("-", "").lower() == "governbody":
        return ProviderKind.GOVERNING_BODY
    return _coerce(ProviderKind, value, "provider kind")


def parse_condition(value: str | ItemCondition) -> ItemCondition:
    """Parse an item condition label, raising ValidationError if unknown."""
    if isinstance(value, str):
        value = value.strip().lower()
    return _coerce(ItemCondition, value, "condition")


def is_transition_allowed(
    from_status: TransactionStatus,
    to_status: TransactionStatus,
    transaction_kind: Optional[TransactionKind] = None,
) -> bool:
    """Check a from -> to pair against the transition table."""
    if to_status not in ALLOWED_TRANSITIONS[from_status]:
        return False
    required_kind = KIND_RESTRICTED_TRANSITIONS.get((from_status, to_status))
    if required_kind is not None and transaction_kind != required_kind:
        return False
    return True


def ensure_transition_allowed(
    from_status: TransactionStatus,
    to_status: TransactionStatus,
    transaction_kind: Optional[TransactionKind] = None,
) -> None:
    """Raise StateTransitionError if the from -> to pair is not allowed."""
    if is_transition_allowed(from_status, to_status, transaction_kind):
        return

    message = invalid_transition(from_status.value, to_status.value)
    required_kind = KIND_RESTRICTED_TRANSITIONS.get((from_status, to_status))
    if required_kind is not None:
        message += f" ('{to_status.value}' only applies to {required_kind.value} transactions)"
    raise StateTransitionError(message, from_status=from_status.value, to_status=to_status.value)
