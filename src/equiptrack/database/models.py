"""SQLAlchemy models for equiptrack database."""

from sqlalchemy import (
    JSON,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    create_engine,
    event,
)
from sqlalchemy.orm import Session, declarative_base, relationship, sessionmaker

from equiptrack.utils.date_parser import utcnow

Base = declarative_base()


class Counter(Base):
    """Named monotonically increasing sequence."""

    __tablename__ = "counters"

    name = Column(String, primary_key=True)
    value = Column(Integer, nullable=False, default=0)


# Sequences created with the schema, so allocation never has to insert a row
SEEDED_COUNTERS = (
    "equipment",
    "school",
    "govern_body",
    "equipment_transaction",
    "govern_equipment_transaction",
)


@event.listens_for(Counter.__table__, "after_create")
def _seed_counters(target, connection, **kw):
    connection.execute(target.insert(), [{"name": name, "value": 0} for name in SEEDED_COUNTERS])


class Equipment(Base):
    """Equipment registry model."""

    __tablename__ = "equipment"

    id = Column(Integer, primary_key=True)
    equipment_code = Column(String, unique=True, nullable=False)
    name = Column(String, nullable=False, index=True)
    sport = Column(String, nullable=True, index=True)
    description = Column(String, nullable=True)
    quantity = Column(Integer, nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)


class School(Base):
    """School model."""

    __tablename__ = "schools"

    id = Column(Integer, primary_key=True)
    school_code = Column(String, unique=True, nullable=False)
    name = Column(String, nullable=False, index=True)
    district = Column(String, nullable=True)
    province = Column(String, nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)


class GovernBody(Base):
    """Governing body model."""

    __tablename__ = "govern_bodies"

    id = Column(Integer, primary_key=True)
    govern_body_code = Column(String, unique=True, nullable=False)
    name = Column(String, nullable=False, index=True)
    abbreviation = Column(String, nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)


class EquipmentTransaction(Base):
    """Equipment transaction model.

    provider_id points into schools or govern_bodies depending on
    provider_kind, so it carries no foreign key.
    """

    __tablename__ = "equipment_transactions"

    id = Column(Integer, primary_key=True)
    transaction_id = Column(String, unique=True, nullable=False)
    provider_kind = Column(String, nullable=False)
    provider_id = Column(Integer, nullable=False)
    recipient_id = Column(Integer, ForeignKey("schools.id"), nullable=False, index=True)
    transaction_kind = Column(String, nullable=False, index=True)
    status = Column(String, nullable=False, default="pending", index=True)

    rental_start_date = Column(DateTime, nullable=True, index=True)
    rental_return_due_date = Column(DateTime, nullable=True, index=True)
    rental_returned_date = Column(DateTime, nullable=True)
    rental_fee = Column(Numeric(10, 2), nullable=True)

    approved_by = Column(String, nullable=True)
    approved_at = Column(DateTime, nullable=True)
    additional_notes = Column(String, nullable=True)
    terms_and_conditions = Column(String, nullable=True)
    request_reference = Column(String, nullable=True, index=True)

    created_at = Column(DateTime, default=utcnow, nullable=False, index=True)
    updated_at = Column(DateTime, default=utcnow, nullable=False)
    version = Column(Integer, nullable=False, default=1)

    __table_args__ = (Index("ix_equipment_transactions_provider", "provider_id", "provider_kind"),)

    # Relationships
    recipient = relationship("School")
    items = relationship(
        "TransactionItem",
        back_populates="transaction",
        cascade="all, delete-orphan",
        order_by="TransactionItem.position",
    )
    history = relationship(
        "TransactionStatusChange",
        back_populates="transaction",
        cascade="all, delete-orphan",
        order_by="TransactionStatusChange.id",
    )


class TransactionItem(Base):
    """Equipment line of a transaction."""

    __tablename__ = "transaction_items"

    id = Column(Integer, primary_key=True)
    transaction_pk = Column(Integer, ForeignKey("equipment_transactions.id"), nullable=False, index=True)
    position = Column(Integer, nullable=False)
    equipment_id = Column(Integer, ForeignKey("equipment.id"), nullable=False, index=True)
    quantity = Column(Integer, nullable=False)
    condition = Column(String, nullable=False)
    serial_numbers = Column(JSON, nullable=False, default=list)
    notes = Column(String, nullable=True)

    # Relationships
    transaction = relationship("EquipmentTransaction", back_populates="items")


class TransactionStatusChange(Base):
    """Status history entry of a transaction."""

    __tablename__ = "transaction_status_changes"

    id = Column(Integer, primary_key=True)
    transaction_pk = Column(Integer, ForeignKey("equipment_transactions.id"), nullable=False, index=True)
    from_status = Column(String, nullable=True)
    to_status = Column(String, nullable=False)
    changed_at = Column(DateTime, default=utcnow, nullable=False)
    changed_by = Column(String, nullable=True)
    note = Column(String, nullable=True)

    # Relationships
    transaction = relationship("EquipmentTransaction", back_populates="history")


def create_session_factory(database_url: str) -> sessionmaker[Session]:
    """Create a SQLAlchemy session factory."""
    engine = create_engine(database_url, echo=False)
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine)
