"""Equipment Registry and Party Directory collaborators.

The transaction engine only reads equipment, schools and governing bodies. It
reaches them through these interfaces so the lookups stay explicit and can be
replaced (another service, a cache, a test double) without touching the
engine.
"""

from abc import ABC, abstractmethod
from typing import Optional

from equiptrack.database.base import Database
from equiptrack.domain.entities import Equipment, GovernBody, Party, School
from equiptrack.domain.errors import (
    NotFoundError,
    ValidationError,
    equipment_not_found,
    govern_body_not_found,
    school_not_found,
)
from equiptrack.domain.status import ProviderKind


class EquipmentRegistry(ABC):
    """Lookup of equipment items by identity."""

    @abstractmethod
    def resolve(self, equipment_id: int) -> Equipment:
        """Return the equipment or raise NotFoundError."""
        pass


class PartyDirectory(ABC):
    """Lookup of schools and governing bodies by identity."""

    @abstractmethod
    def resolve_school(self, school_id: int, role: str = "School") -> School:
        """Return the school or raise NotFoundError."""
        pass

    @abstractmethod
    def resolve_govern_body(self, govern_body_id: int) -> GovernBody:
        """Return the governing body or raise NotFoundError."""
        pass

    def resolve_provider(self, provider_kind: ProviderKind, provider_id: int) -> Party:
        """Resolve a provider in the directory matching its kind."""
        if provider_kind == ProviderKind.SCHOOL:
            return self.resolve_school(provider_id, role="Provider")
        return self.resolve_govern_body(provider_id)


class DatabaseEquipmentRegistry(EquipmentRegistry):
    """Equipment registry backed by the equiptrack database."""

    def __init__(self, db: Database):
        self.db = db

    def resolve(self, equipment_id: int) -> Equipment:
        equipment = self.db.get_equipment(equipment_id)
        if equipment is None:
            raise NotFoundError(equipment_not_found(equipment_id))
        return equipment


class DatabasePartyDirectory(PartyDirectory):
    """Party directory backed by the equiptrack database."""

    def __init__(self, db: Database):
        self.db = db

    def resolve_school(self, school_id: int, role: str = "School") -> School:
        school = self.db.get_school(school_id)
        if school is None:
            raise NotFoundError(school_not_found(school_id, role=role))
        return school

    def resolve_govern_body(self, govern_body_id: int) -> GovernBody:
        govern_body = self.db.get_govern_body(govern_body_id)
        if govern_body is None:
            raise NotFoundError(govern_body_not_found(govern_body_id))
        return govern_body


class DirectoryService:
    """Service for seeding and listing equipment and parties."""

    def __init__(self, db: Database):
        """Initialize directory service.

        Args:
            db: Database instance
        """
        self.db = db

    @staticmethod
    def _require_name(name: str, what: str) -> str:
        name = (name or "").strip()
        if not name:
            raise ValidationError(f"{what} name cannot be empty")
        return name

    def add_equipment(
        self,
        name: str,
        sport: Optional[str] = None,
        description: Optional[str] = None,
        quantity: Optional[int] = None,
    ) -> Equipment:
        """Register an equipment item.

        Raises:
            ValidationError: If name is empty or quantity is negative
        """
        name = self._require_name(name, "Equipment")
        if quantity is not None and quantity < 0:
            raise ValidationError("Equipment quantity cannot be negative")
        equipment_id = self.db.create_equipment(name=name, sport=sport, description=description, quantity=quantity)
        return self.db.get_equipment(equipment_id)

    def list_equipment(self) -> list[Equipment]:
        return self.db.list_equipment()

    def add_school(self, name: str, district: Optional[str] = None, province: Optional[str] = None) -> School:
        """Register a school.

        Raises:
            ValidationError: If name is empty
        """
        school_id = self.db.create_school(name=self._require_name(name, "School"), district=district, province=province)
        return self.db.get_school(school_id)

    def list_schools(self) -> list[School]:
        return self.db.list_schools()

    def add_govern_body(self, name: str, abbreviation: Optional[str] = None) -> GovernBody:
        """Register a governing body.

        Raises:
            ValidationError: If name is empty
        """
        govern_body_id = self.db.create_govern_body(
            name=self._require_name(name, "Governing body"), abbreviation=abbreviation
        )
        return self.db.get_govern_body(govern_body_id)

    def list_govern_bodies(self) -> list[GovernBody]:
        return self.db.list_govern_bodies()
