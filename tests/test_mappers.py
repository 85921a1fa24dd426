"""Tests for database mappers."""

from datetime import datetime
from decimal import Decimal

from equiptrack.database.mappers import (
    item_to_domain,
    item_to_orm,
    rental_details_to_columns,
    status_change_to_domain,
    status_change_to_orm,
    transaction_to_domain,
)
from equiptrack.database.models import (
    EquipmentTransaction as ORMEquipmentTransaction,
    TransactionItem as ORMTransactionItem,
    TransactionStatusChange as ORMTransactionStatusChange,
)
from equiptrack.domain.entities import RentalDetails, StatusChange, TransactionItem
from equiptrack.domain.status import ItemCondition, ProviderKind, TransactionKind, TransactionStatus

NOW = datetime(2025, 1, 1, 12, 0)


def _orm_transaction(**overrides) -> ORMEquipmentTransaction:
    values = dict(
        id=1,
        transaction_id="RNT000001",
        provider_kind="school",
        provider_id=1,
        recipient_id=2,
        transaction_kind="rental",
        status="approved",
        rental_start_date=datetime(2025, 1, 1),
        rental_return_due_date=datetime(2025, 1, 10),
        rental_returned_date=None,
        rental_fee=Decimal("15.00"),
        approved_by="U1",
        approved_at=NOW,
        created_at=NOW,
        updated_at=NOW,
        version=2,
    )
    values.update(overrides)
    return ORMEquipmentTransaction(**values)


class TestItemMapper:
    """Tests for TransactionItem mappers."""

    def test_item_to_domain(self):
        orm_item = ORMTransactionItem(
            id=1,
            transaction_pk=1,
            position=0,
            equipment_id=3,
            quantity=2,
            condition="good",
            serial_numbers=["S1", "S2"],
            notes="Scuffed",
        )

        item = item_to_domain(orm_item)

        assert item == TransactionItem(
            equipment_id=3, quantity=2, condition=ItemCondition.GOOD, serial_numbers=("S1", "S2"), notes="Scuffed"
        )

    def test_item_to_orm(self):
        row = item_to_orm(TransactionItem(equipment_id=3, quantity=1, condition=ItemCondition.NEW), position=4)

        assert row.position == 4
        assert row.condition == "new"
        assert row.serial_numbers == []
        assert row.notes is None


class TestStatusChangeMapper:
    """Tests for status history mappers."""

    def test_initial_entry_has_no_from_status(self):
        orm_change = ORMTransactionStatusChange(id=1, from_status=None, to_status="pending", changed_at=NOW)

        change = status_change_to_domain(orm_change)

        assert change.from_status is None
        assert change.to_status == TransactionStatus.PENDING
        assert change.changed_at == NOW

    def test_status_change_to_orm(self):
        row = status_change_to_orm(
            StatusChange(
                from_status=TransactionStatus.PENDING,
                to_status=TransactionStatus.APPROVED,
                changed_at=NOW,
                changed_by="U1",
                note="ok",
            )
        )

        assert row.from_status == "pending"
        assert row.to_status == "approved"
        assert row.changed_by == "U1"
        assert row.note == "ok"


class TestTransactionMapper:
    """Tests for EquipmentTransaction mappers."""

    def test_transaction_to_domain(self):
        orm_txn = _orm_transaction()
        orm_txn.items = [
            ORMTransactionItem(position=0, equipment_id=3, quantity=2, condition="fair", serial_numbers=[])
        ]
        orm_txn.history = [ORMTransactionStatusChange(from_status=None, to_status="pending", changed_at=NOW)]

        txn = transaction_to_domain(orm_txn)

        assert txn.provider_kind == ProviderKind.SCHOOL
        assert txn.transaction_kind == TransactionKind.RENTAL
        assert txn.status == TransactionStatus.APPROVED
        assert txn.is_rental
        assert txn.rental_details == RentalDetails(
            start_date=datetime(2025, 1, 1), return_due_date=datetime(2025, 1, 10), rental_fee=Decimal("15.00")
        )
        assert txn.items[0].condition == ItemCondition.FAIR
        assert txn.history[0].to_status == TransactionStatus.PENDING

    def test_permanent_transaction_has_no_rental_details(self):
        orm_txn = _orm_transaction(
            transaction_id="GTF000001",
            provider_kind="governing-body",
            transaction_kind="permanent",
            rental_start_date=None,
            rental_return_due_date=None,
            rental_fee=None,
        )

        txn = transaction_to_domain(orm_txn)

        assert txn.provider_kind == ProviderKind.GOVERNING_BODY
        assert txn.rental_details is None
        assert txn.items == ()

    def test_rental_details_to_columns(self):
        columns = rental_details_to_columns(
            RentalDetails(
                start_date=datetime(2025, 1, 1),
                return_due_date=datetime(2025, 1, 10),
                returned_date=datetime(2025, 1, 9),
            )
        )
        assert columns == {
            "rental_start_date": datetime(2025, 1, 1),
            "rental_return_due_date": datetime(2025, 1, 10),
            "rental_returned_date": datetime(2025, 1, 9),
            "rental_fee": None,
        }

    def test_rental_details_to_columns_clears(self):
        assert set(rental_details_to_columns(None).values()) == {None}
