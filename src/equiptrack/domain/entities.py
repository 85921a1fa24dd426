"""Domain model entities for equiptrack.

These are pure data classes representing business concepts, independent of
database schema. Collaborator entities (equipment, schools, governing bodies)
carry only the fields the transaction engine reads.
"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Optional, Union

from equiptrack.domain.status import (
    ItemCondition,
    ProviderKind,
    TransactionKind,
    TransactionStatus,
)


@dataclass(frozen=True)
class Equipment:
    """Equipment registry entry."""

    id: int
    equipment_code: str
    name: str
    sport: Optional[str]
    description: Optional[str]
    quantity: Optional[int]
    created_at: datetime


@dataclass(frozen=True)
class School:
    """School party entity."""

    id: int
    school_code: str
    name: str
    district: Optional[str]
    province: Optional[str]
    created_at: datetime


@dataclass(frozen=True)
class GovernBody:
    """Governing body party entity."""

    id: int
    govern_body_code: str
    name: str
    abbreviation: Optional[str]
    created_at: datetime


Party = Union[School, GovernBody]


@dataclass(frozen=True)
class TransactionItem:
    """A single line of equipment moved by a transaction."""

    equipment_id: int
    quantity: int
    condition: ItemCondition
    serial_numbers: tuple[str, ...] = ()
    notes: Optional[str] = None


@dataclass(frozen=True)
class RentalDetails:
    """Rental window attached to rental transactions."""

    start_date: datetime
    return_due_date: datetime
    returned_date: Optional[datetime] = None
    rental_fee: Optional[Decimal] = None


@dataclass(frozen=True)
class StatusChange:
    """One entry of a transaction's status history."""

    from_status: Optional[TransactionStatus]
    to_status: TransactionStatus
    changed_at: datetime
    changed_by: Optional[str] = None
    note: Optional[str] = None


@dataclass(frozen=True)
class EquipmentTransaction:
    """Equipment transaction domain entity."""

    id: int
    transaction_id: str
    provider_kind: ProviderKind
    provider_id: int
    recipient_id: int
    transaction_kind: TransactionKind
    items: tuple[TransactionItem, ...]
    status: TransactionStatus
    created_at: datetime
    updated_at: datetime
    version: int
    rental_details: Optional[RentalDetails] = None
    approved_by: Optional[str] = None
    approved_at: Optional[datetime] = None
    additional_notes: Optional[str] = None
    terms_and_conditions: Optional[str] = None
    request_reference: Optional[str] = None
    history: tuple[StatusChange, ...] = field(default=(), compare=False)

    @property
    def is_rental(self) -> bool:
        return self.transaction_kind == TransactionKind.RENTAL


@dataclass(frozen=True)
class TransactionPage:
    """A page of transactions with pagination metadata."""

    transactions: list[EquipmentTransaction]
    total: int
    page: int
    limit: int

    @property
    def pages(self) -> int:
        return -(-self.total // self.limit) if self.limit else 0


@dataclass(frozen=True)
class ResolvedTransaction:
    """A transaction together with the parties and equipment it references."""

    transaction: EquipmentTransaction
    provider: Party
    recipient: School
    equipment: dict[int, Equipment]
