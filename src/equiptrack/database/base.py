"""Abstract database interface."""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Optional

# Import entities directly to avoid circular import through domain/__init__.py
from equiptrack.domain.entities import (
    Equipment,
    EquipmentTransaction,
    GovernBody,
    RentalDetails,
    School,
    StatusChange,
    TransactionItem,
)
from equiptrack.domain.requests import TransactionFilter
from equiptrack.domain.status import (
    ProviderKind,
    TransactionKind,
    TransactionStatus,
)

# Fields update_transaction accepts in its ``changes`` mapping
UPDATABLE_FIELDS = frozenset(
    {
        "status",
        "approved_by",
        "approved_at",
        "rental_details",
        "additional_notes",
        "terms_and_conditions",
        "request_reference",
    }
)


class Database(ABC):
    """Abstract database interface for equiptrack."""

    @abstractmethod
    def connect(self) -> None:
        """Connect to the database."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the database."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Initialize database schema (create tables)."""
        pass

    @abstractmethod
    def next_sequence_value(self, name: str) -> int:
        """Atomically increment the named counter and return its new value.

        The first call for a name returns 1.
        """
        pass

    # Equipment operations
    @abstractmethod
    def create_equipment(
        self,
        name: str,
        sport: Optional[str] = None,
        description: Optional[str] = None,
        quantity: Optional[int] = None,
    ) -> int:
        """Create an equipment entry. Returns equipment ID."""
        pass

    @abstractmethod
    def get_equipment(self, equipment_id: int) -> Optional[Equipment]:
        """Get equipment by ID."""
        pass

    @abstractmethod
    def list_equipment(self) -> list[Equipment]:
        """List all equipment."""
        pass

    # Party operations
    @abstractmethod
    def create_school(self, name: str, district: Optional[str] = None, province: Optional[str] = None) -> int:
        """Create a school. Returns school ID."""
        pass

    @abstractmethod
    def get_school(self, school_id: int) -> Optional[School]:
        """Get school by ID."""
        pass

    @abstractmethod
    def list_schools(self) -> list[School]:
        """List all schools."""
        pass

    @abstractmethod
    def create_govern_body(self, name: str, abbreviation: Optional[str] = None) -> int:
        """Create a governing body. Returns governing body ID."""
        pass

    @abstractmethod
    def get_govern_body(self, govern_body_id: int) -> Optional[GovernBody]:
        """Get governing body by ID."""
        pass

    @abstractmethod
    def list_govern_bodies(self) -> list[GovernBody]:
        """List all governing bodies."""
        pass

    # Transaction operations
    @abstractmethod
    def create_transaction(
        self,
        transaction_id: str,
        provider_kind: ProviderKind,
        provider_id: int,
        recipient_id: int,
        transaction_kind: TransactionKind,
        items: list[TransactionItem],
        created_at: datetime,
        history_entry: StatusChange,
        status: TransactionStatus = TransactionStatus.PENDING,
        rental_details: Optional[RentalDetails] = None,
        additional_notes: Optional[str] = None,
        terms_and_conditions: Optional[str] = None,
        request_reference: Optional[str] = None,
    ) -> int:
        """Create a transaction with its items and first history entry in one write.

        Returns transaction primary key.
        """
        pass

    @abstractmethod
    def get_transaction(self, transaction_pk: int) -> Optional[EquipmentTransaction]:
        """Get transaction by primary key."""
        pass

    @abstractmethod
    def get_transaction_by_code(self, transaction_id: str) -> Optional[EquipmentTransaction]:
        """Get transaction by its human-readable transaction ID."""
        pass

    @abstractmethod
    def update_transaction(
        self,
        transaction_pk: int,
        expected_version: int,
        expected_status: TransactionStatus,
        updated_at: datetime,
        changes: dict[str, Any],
        items: Optional[list[TransactionItem]] = None,
        history_entry: Optional[StatusChange] = None,
    ) -> bool:
        """Conditionally update a transaction in one write.

        The update applies only if the stored row still has
        ``expected_version`` and ``expected_status``; the version is then
        incremented. ``changes`` keys must be in UPDATABLE_FIELDS. When
        ``items`` is given it replaces the stored items. ``history_entry`` is
        appended in the same write.

        Returns:
            True if the update was applied, False if the row was missing or
            had been modified since it was read
        """
        pass

    @abstractmethod
    def delete_transaction(self, transaction_pk: int, expected_status: TransactionStatus) -> bool:
        """Delete a transaction if it still has ``expected_status``.

        Returns:
            True if a row was deleted
        """
        pass

    @abstractmethod
    def list_transactions(self, filters: TransactionFilter) -> tuple[list[EquipmentTransaction], int]:
        """List one page of transactions matching filters.

        Returns:
            Tuple of (transactions on the requested page, total matching count),
            newest first
        """
        pass
