"""Shared pytest fixtures for equiptrack tests."""

import json
import os
import tempfile
from datetime import datetime

import pytest

from equiptrack.database.factories import create_sqlite_database
from equiptrack.domain.directory import DirectoryService
from equiptrack.domain.requests import CreateTransactionRequest, ItemInput, RentalDetailsInput
from equiptrack.domain.status import ItemCondition, ProviderKind, TransactionKind
from equiptrack.domain.transaction import EquipmentTransactionService


@pytest.fixture
def temp_db():
    """Create a temporary database for testing."""
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    db = create_sqlite_database(database_path=db_path)
    # Store the path for CLI tests
    db.database_path = db_path
    db.connect()
    db.initialize_schema()

    yield db

    db.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def directory_service(temp_db):
    """Create a DirectoryService with a temporary database."""
    return DirectoryService(temp_db)


@pytest.fixture
def transaction_service(temp_db):
    """Create an EquipmentTransactionService with a temporary database."""
    return EquipmentTransactionService(temp_db)


@pytest.fixture
def sample_schools(directory_service):
    """Create two schools: a provider and a recipient."""
    provider = directory_service.add_school("Royal College", district="Colombo", province="Western")
    recipient = directory_service.add_school("Trinity College", district="Kandy", province="Central")
    return provider, recipient


@pytest.fixture
def sample_govern_body(directory_service):
    """Create a governing body."""
    return directory_service.add_govern_body("Sri Lanka Cricket", abbreviation="SLC")


@pytest.fixture
def sample_equipment(directory_service):
    """Create two equipment items."""
    bat = directory_service.add_equipment("Cricket Bat", sport="Cricket", quantity=20)
    ball = directory_service.add_equipment("Football", sport="Football", quantity=50)
    return bat, ball


@pytest.fixture
def rental_request(sample_schools, sample_equipment):
    """Build a valid school-to-school rental request."""
    provider, recipient = sample_schools
    bat, _ = sample_equipment
    return CreateTransactionRequest(
        provider_kind=ProviderKind.SCHOOL,
        provider_id=provider.id,
        recipient_id=recipient.id,
        transaction_kind=TransactionKind.RENTAL,
        items=[ItemInput(equipment_id=bat.id, quantity=5, condition=ItemCondition.GOOD)],
        rental_details=RentalDetailsInput(
            start_date=datetime(2025, 1, 1),
            return_due_date=datetime(2025, 2, 1),
        ),
    )


@pytest.fixture
def permanent_request(sample_schools, sample_govern_body, sample_equipment):
    """Build a valid governing-body-to-school permanent transfer request."""
    _, recipient = sample_schools
    _, ball = sample_equipment
    return CreateTransactionRequest(
        provider_kind=ProviderKind.GOVERNING_BODY,
        provider_id=sample_govern_body.id,
        recipient_id=recipient.id,
        transaction_kind=TransactionKind.PERMANENT,
        items=[ItemInput(equipment_id=ball.id, quantity=10, condition=ItemCondition.NEW)],
    )


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()


@pytest.fixture
def write_payload(tmp_path):
    """Write a JSON payload file and return its path."""

    def _write(payload, name="payload.json"):
        path = tmp_path / name
        path.write_text(json.dumps(payload), encoding="utf-8")
        return str(path)

    return _write
