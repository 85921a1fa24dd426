"""Tests for the directory service and collaborator lookups."""

import pytest

from equiptrack.domain.directory import DatabaseEquipmentRegistry, DatabasePartyDirectory
from equiptrack.domain.errors import NotFoundError, ValidationError
from equiptrack.domain.status import ProviderKind


def test_add_and_list_equipment(directory_service):
    bat = directory_service.add_equipment("  Cricket Bat ", sport="Cricket", quantity=10)
    directory_service.add_equipment("Basketball", sport="Basketball")

    assert bat.name == "Cricket Bat"
    assert bat.quantity == 10
    assert [e.name for e in directory_service.list_equipment()] == ["Basketball", "Cricket Bat"]


def test_equipment_validation(directory_service):
    with pytest.raises(ValidationError, match="Equipment name cannot be empty"):
        directory_service.add_equipment("   ")
    with pytest.raises(ValidationError, match="cannot be negative"):
        directory_service.add_equipment("Net", quantity=-1)


def test_add_schools_and_govern_bodies(directory_service):
    school = directory_service.add_school("Royal College", district="Colombo")
    body = directory_service.add_govern_body("Sri Lanka Rugby", abbreviation="SLR")

    assert school.school_code == "SCH00001"
    assert body.abbreviation == "SLR"
    assert directory_service.list_schools() == [school]
    assert directory_service.list_govern_bodies() == [body]

    with pytest.raises(ValidationError, match="School name cannot be empty"):
        directory_service.add_school("")


def test_registry_resolves_equipment(temp_db, sample_equipment):
    bat, _ = sample_equipment
    registry = DatabaseEquipmentRegistry(temp_db)

    assert registry.resolve(bat.id) == bat
    with pytest.raises(NotFoundError, match="Equipment not found for ID: 99"):
        registry.resolve(99)


def test_party_directory_resolves_by_kind(temp_db, sample_schools, sample_govern_body):
    provider, _ = sample_schools
    directory = DatabasePartyDirectory(temp_db)

    assert directory.resolve_provider(ProviderKind.SCHOOL, provider.id) == provider
    assert directory.resolve_provider(ProviderKind.GOVERNING_BODY, sample_govern_body.id) == sample_govern_body

    with pytest.raises(NotFoundError, match="Provider school 99 not found"):
        directory.resolve_provider(ProviderKind.SCHOOL, 99)
    with pytest.raises(NotFoundError, match="Governing body 99 not found"):
        directory.resolve_provider(ProviderKind.GOVERNING_BODY, 99)
    with pytest.raises(NotFoundError, match="Recipient school 99 not found"):
        directory.resolve_school(99, role="Recipient")
