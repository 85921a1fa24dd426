"""Mapper functions to convert between domain models and SQLAlchemy models.

This layer isolates the conversion logic: the store keeps rental details as
flat columns and enumerations as plain strings, the domain uses nested value
objects and enums.
"""

from equiptrack.domain import entities as domain
from equiptrack.domain.status import (
    ItemCondition,
    ProviderKind,
    TransactionKind,
    TransactionStatus,
)
from equiptrack.database.models import (
    Equipment as ORMEquipment,
    EquipmentTransaction as ORMEquipmentTransaction,
    GovernBody as ORMGovernBody,
    School as ORMSchool,
    TransactionItem as ORMTransactionItem,
    TransactionStatusChange as ORMTransactionStatusChange,
)


def equipment_to_domain(orm_equipment: ORMEquipment) -> domain.Equipment:
    """Convert SQLAlchemy Equipment model to domain Equipment entity."""
    return domain.Equipment(
        id=orm_equipment.id,
        equipment_code=orm_equipment.equipment_code,
        name=orm_equipment.name,
        sport=orm_equipment.sport,
        description=orm_equipment.description,
        quantity=orm_equipment.quantity,
        created_at=orm_equipment.created_at,
    )


def school_to_domain(orm_school: ORMSchool) -> domain.School:
    """Convert SQLAlchemy School model to domain School entity."""
    return domain.School(
        id=orm_school.id,
        school_code=orm_school.school_code,
        name=orm_school.name,
        district=orm_school.district,
        province=orm_school.province,
        created_at=orm_school.created_at,
    )


def govern_body_to_domain(orm_govern_body: ORMGovernBody) -> domain.GovernBody:
    """Convert SQLAlchemy GovernBody model to domain GovernBody entity."""
    return domain.GovernBody(
        id=orm_govern_body.id,
        govern_body_code=orm_govern_body.govern_body_code,
        name=orm_govern_body.name,
        abbreviation=orm_govern_body.abbreviation,
        created_at=orm_govern_body.created_at,
    )


def item_to_domain(orm_item: ORMTransactionItem) -> domain.TransactionItem:
    """Convert SQLAlchemy TransactionItem model to domain TransactionItem."""
    return domain.TransactionItem(
        equipment_id=orm_item.equipment_id,
        quantity=orm_item.quantity,
        condition=ItemCondition(orm_item.condition),
        serial_numbers=tuple(orm_item.serial_numbers or ()),
        notes=orm_item.notes,
    )


def item_to_orm(item: domain.TransactionItem, position: int) -> ORMTransactionItem:
    """Convert domain TransactionItem to a new SQLAlchemy TransactionItem row."""
    return ORMTransactionItem(
        position=position,
        equipment_id=item.equipment_id,
        quantity=item.quantity,
        condition=item.condition.value,
        serial_numbers=list(item.serial_numbers),
        notes=item.notes,
    )


def status_change_to_domain(orm_change: ORMTransactionStatusChange) -> domain.StatusChange:
    """Convert SQLAlchemy TransactionStatusChange model to domain StatusChange."""
    return domain.StatusChange(
        from_status=TransactionStatus(orm_change.from_status) if orm_change.from_status else None,
        to_status=TransactionStatus(orm_change.to_status),
        changed_at=orm_change.changed_at,
        changed_by=orm_change.changed_by,
        note=orm_change.note,
    )


def status_change_to_orm(change: domain.StatusChange) -> ORMTransactionStatusChange:
    """Convert domain StatusChange to a new SQLAlchemy row."""
    return ORMTransactionStatusChange(
        from_status=change.from_status.value if change.from_status else None,
        to_status=change.to_status.value,
        changed_at=change.changed_at,
        changed_by=change.changed_by,
        note=change.note,
    )


def rental_details_to_columns(details: domain.RentalDetails | None) -> dict:
    """Flatten rental details into EquipmentTransaction column values."""
    if details is None:
        return {
            "rental_start_date": None,
            "rental_return_due_date": None,
            "rental_returned_date": None,
            "rental_fee": None,
        }
    return {
        "rental_start_date": details.start_date,
        "rental_return_due_date": details.return_due_date,
        "rental_returned_date": details.returned_date,
        "rental_fee": details.rental_fee,
    }


def transaction_to_domain(orm_transaction: ORMEquipmentTransaction) -> domain.EquipmentTransaction:
    """Convert SQLAlchemy EquipmentTransaction model to domain entity."""
    rental_details = None
    if orm_transaction.rental_start_date is not None and orm_transaction.rental_return_due_date is not None:
        rental_details = domain.RentalDetails(
            start_date=orm_transaction.rental_start_date,
            return_due_date=orm_transaction.rental_return_due_date,
            returned_date=orm_transaction.rental_returned_date,
            rental_fee=orm_transaction.rental_fee,
        )

    return domain.EquipmentTransaction(
        id=orm_transaction.id,
        transaction_id=orm_transaction.transaction_id,
        provider_kind=ProviderKind(orm_transaction.provider_kind),
        provider_id=orm_transaction.provider_id,
        recipient_id=orm_transaction.recipient_id,
        transaction_kind=TransactionKind(orm_transaction.transaction_kind),
        items=tuple(item_to_domain(item) for item in orm_transaction.items),
        status=TransactionStatus(orm_transaction.status),
        created_at=orm_transaction.created_at,
        updated_at=orm_transaction.updated_at,
        version=orm_transaction.version,
        rental_details=rental_details,
        approved_by=orm_transaction.approved_by,
        approved_at=orm_transaction.approved_at,
        additional_notes=orm_transaction.additional_notes,
        terms_and_conditions=orm_transaction.terms_and_conditions,
        request_reference=orm_transaction.request_reference,
        history=tuple(status_change_to_domain(change) for change in orm_transaction.history),
    )
