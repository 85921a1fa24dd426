"""Human-readable identifier generation."""

from abc import ABC, abstractmethod

from equiptrack.database.base import Database
from equiptrack.domain.status import ProviderKind, TransactionKind

# (sequence name, rental prefix, permanent prefix) per provider kind
TRANSACTION_SEQUENCES: dict[ProviderKind, tuple[str, str, str]] = {
    ProviderKind.SCHOOL: ("equipment_transaction", "RNT", "TRF"),
    ProviderKind.GOVERNING_BODY: ("govern_equipment_transaction", "GRT", "GTF"),
}


def format_code(prefix: str, value: int, width: int = 6) -> str:
    """Format a sequence value as a prefixed, zero-padded code (e.g. EQP000042)."""
    return f"{prefix}{value:0{width}d}"


class IdGenerator(ABC):
    """Allocates transaction identifiers; each value is handed out at most once."""

    @abstractmethod
    def next_transaction_id(self, provider_kind: ProviderKind, transaction_kind: TransactionKind) -> str:
        pass


class SequenceIdGenerator(IdGenerator):
    """Identifier generator backed by the database's atomic counters."""

    def __init__(self, db: Database):
        self.db = db

    def next_transaction_id(self, provider_kind: ProviderKind, transaction_kind: TransactionKind) -> str:
        sequence, rental_prefix, permanent_prefix = TRANSACTION_SEQUENCES[provider_kind]
        prefix = rental_prefix if transaction_kind == TransactionKind.RENTAL else permanent_prefix
        return format_code(prefix, self.db.next_sequence_value(sequence))
