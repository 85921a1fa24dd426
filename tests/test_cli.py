"""Tests for the equiptrack command line interface."""

import pytest

from equiptrack.cli.main import cli


@pytest.fixture
def seeded(sample_schools, sample_govern_body, sample_equipment):
    """Seed the directory: schools 1 and 2, governing body 1, equipment 1 and 2."""
    return sample_schools, sample_govern_body, sample_equipment


def invoke(cli_runner, temp_db, *args, **kwargs):
    return cli_runner.invoke(cli, ["--db-path", temp_db.database_path, *args], **kwargs)


def create_rental(cli_runner, temp_db):
    return invoke(
        cli_runner,
        temp_db,
        "transaction",
        "create",
        "--provider",
        "1",
        "--recipient",
        "2",
        "--kind",
        "rental",
        "--item",
        "1:2:good",
        "--item",
        "2:1:fair:Slightly worn",
        "--start-date",
        "2025-01-01",
        "--return-due-date",
        "2025-01-10",
        "--rental-fee",
        "20",
    )


def test_help_does_not_need_database(cli_runner):
    result = cli_runner.invoke(cli, ["--help"])
    assert result.exit_code == 0
    assert "transaction" in result.output
    assert "govern-body" in result.output


def test_directory_commands(cli_runner, temp_db):
    result = invoke(cli_runner, temp_db, "equipment", "add", "Cricket Bat", "--sport", "Cricket", "--quantity", "5")
    assert result.exit_code == 0
    assert "Added equipment 'Cricket Bat'" in result.output
    assert "EQP000001" in result.output

    result = invoke(cli_runner, temp_db, "school", "add", "Royal College", "--district", "Colombo")
    assert result.exit_code == 0
    assert "SCH00001" in result.output

    result = invoke(cli_runner, temp_db, "govern-body", "add", "Sri Lanka Cricket", "--abbreviation", "SLC")
    assert result.exit_code == 0
    assert "GOV000001" in result.output

    result = invoke(cli_runner, temp_db, "equipment", "list")
    assert "Cricket Bat" in result.output
    result = invoke(cli_runner, temp_db, "school", "list")
    assert "Royal College" in result.output
    result = invoke(cli_runner, temp_db, "govern-body", "list")
    assert "Sri Lanka Cricket (SLC)" in result.output


def test_empty_lists(cli_runner, temp_db):
    assert "No equipment found." in invoke(cli_runner, temp_db, "equipment", "list").output
    assert "No transactions found." in invoke(cli_runner, temp_db, "transaction", "list").output


def test_add_school_empty_name(cli_runner, temp_db):
    result = invoke(cli_runner, temp_db, "school", "add", " ")
    assert result.exit_code == 1
    assert "Error: School name cannot be empty" in result.output


def test_rental_lifecycle(cli_runner, temp_db, seeded):
    result = create_rental(cli_runner, temp_db)
    assert result.exit_code == 0, result.output
    assert "Created rental transaction RNT000001" in result.output

    result = invoke(cli_runner, temp_db, "transaction", "show", "RNT000001")
    assert result.exit_code == 0
    assert "Status: pending" in result.output
    assert "Royal College" in result.output
    assert "Trinity College" in result.output
    assert "2 x Cricket Bat" in result.output
    assert "Slightly worn" in result.output
    assert "Return due: 2025-01-10" in result.output

    result = invoke(cli_runner, temp_db, "transaction", "status", "RNT000001", "approved", "--approved-by", "U1")
    assert result.exit_code == 0
    assert "is now approved" in result.output

    result = invoke(cli_runner, temp_db, "transaction", "status", "RNT000001", "pending")
    assert result.exit_code == 1
    assert "Error: Cannot change status from 'approved' to 'pending'" in result.output

    result = invoke(
        cli_runner, temp_db, "transaction", "status", "RNT000001", "returned", "--returned-date", "2025-01-09"
    )
    assert result.exit_code == 0
    assert "is now returned" in result.output

    result = invoke(cli_runner, temp_db, "transaction", "show", "1")
    assert "Returned: 2025-01-09" in result.output
    assert "Start date: 2025-01-01" in result.output

    result = invoke(cli_runner, temp_db, "transaction", "history", "RNT000001")
    assert result.exit_code == 0
    lines = [line for line in result.output.splitlines() if "->" in line]
    assert len(lines) == 3
    assert "(new) -> pending" in lines[0]
    assert "pending -> approved | by U1" in lines[1]
    assert "approved -> returned" in lines[2]


def test_approve_without_approver(cli_runner, temp_db, seeded):
    create_rental(cli_runner, temp_db)
    result = invoke(cli_runner, temp_db, "transaction", "status", "RNT000001", "approved")
    assert result.exit_code == 1
    assert "approvedBy is required" in result.output


def test_create_rental_without_dates(cli_runner, temp_db, seeded):
    result = invoke(
        cli_runner, temp_db, "transaction", "create", "--provider", "1", "--recipient", "2", "--kind", "rental",
        "--item", "1:1:new",
    )
    assert result.exit_code == 1
    assert "Error: Rental transactions require startDate and returnDueDate" in result.output


def test_create_same_school(cli_runner, temp_db, seeded):
    result = invoke(
        cli_runner, temp_db, "transaction", "create", "--provider", "1", "--recipient", "1", "--kind", "permanent",
        "--item", "1:1:new",
    )
    assert result.exit_code == 1
    assert "cannot be the same school" in result.output


def test_create_malformed_item(cli_runner, temp_db, seeded):
    result = invoke(
        cli_runner, temp_db, "transaction", "create", "--provider", "1", "--recipient", "2", "--kind", "permanent",
        "--item", "1:2",
    )
    assert result.exit_code == 1
    assert "Error: Item 1: expected EQUIPMENT:QUANTITY:CONDITION" in result.output


def test_create_from_payload_with_alternate_names(cli_runner, temp_db, seeded, write_payload):
    path = write_payload(
        {
            "governBody": 1,
            "school": 2,
            "transactionType": "permanent",
            "items": [{"equipmentId": 2, "quantity": 10, "condition": "new"}],
            "requestId": "REQ-7",
        }
    )

    result = invoke(cli_runner, temp_db, "transaction", "create", "--payload", path)
    assert result.exit_code == 0, result.output
    assert "Created permanent transaction GTF000001" in result.output

    result = invoke(cli_runner, temp_db, "transaction", "show", "GTF000001")
    assert "Sri Lanka Cricket" in result.output
    assert "Terms: Standard terms apply" in result.output
    assert "Request reference: REQ-7" in result.output


def test_create_from_invalid_payload_file(cli_runner, temp_db, tmp_path):
    path = tmp_path / "broken.json"
    path.write_text("{not json", encoding="utf-8")
    result = invoke(cli_runner, temp_db, "transaction", "create", "--payload", str(path))
    assert result.exit_code == 1
    assert "Could not read payload" in result.output


def test_list_with_filters(cli_runner, temp_db, seeded, write_payload):
    create_rental(cli_runner, temp_db)
    path = write_payload(
        {
            "provider": 1,
            "providerKind": "governing-body",
            "recipient": 2,
            "transactionKind": "permanent",
            "items": [{"equipment": 2, "quantity": 3, "condition": "good"}],
        }
    )
    invoke(cli_runner, temp_db, "transaction", "create", "--payload", path)

    result = invoke(cli_runner, temp_db, "transaction", "list")
    assert result.exit_code == 0
    assert "Found 2 transaction(s)" in result.output

    result = invoke(cli_runner, temp_db, "transaction", "list", "--kind", "rental")
    assert "RNT000001" in result.output
    assert "GTF000001" not in result.output

    result = invoke(cli_runner, temp_db, "transaction", "list", "--provider-kind", "governing-body", "--verbose")
    assert "Transaction GTF000001" in result.output
    assert "RNT000001" not in result.output

    result = invoke(cli_runner, temp_db, "transaction", "list", "--limit", "1", "--page", "2")
    assert "page 2 of 2" in result.output
    assert "RNT000001" in result.output

    result = invoke(cli_runner, temp_db, "transaction", "list", "--page", "0")
    assert result.exit_code == 1
    assert "page must be at least 1" in result.output


def test_update_from_payload(cli_runner, temp_db, seeded, write_payload):
    create_rental(cli_runner, temp_db)

    path = write_payload({"rentalDetails": {"returnDueDate": "2025-01-20"}, "notes": "Extended"})
    result = invoke(cli_runner, temp_db, "transaction", "update", "RNT000001", "--payload", path)
    assert result.exit_code == 0, result.output
    assert "version 2" in result.output

    result = invoke(cli_runner, temp_db, "transaction", "show", "RNT000001")
    assert "Return due: 2025-01-20" in result.output
    assert "Notes: Extended" in result.output


def test_update_provider_rejected(cli_runner, temp_db, seeded, write_payload):
    create_rental(cli_runner, temp_db)

    path = write_payload({"provider": 2})
    result = invoke(cli_runner, temp_db, "transaction", "update", "RNT000001", "--payload", path)
    assert result.exit_code == 1
    assert "Error: Cannot change provider after transaction creation" in result.output


def test_delete_pending(cli_runner, temp_db, seeded):
    create_rental(cli_runner, temp_db)

    result = invoke(cli_runner, temp_db, "transaction", "delete", "RNT000001", input="n\n")
    assert result.exit_code == 1
    assert "Aborted" in result.output

    result = invoke(cli_runner, temp_db, "transaction", "delete", "RNT000001", "--yes")
    assert result.exit_code == 0
    assert "Deleted transaction RNT000001" in result.output

    result = invoke(cli_runner, temp_db, "transaction", "show", "RNT000001")
    assert result.exit_code == 1
    assert "Equipment transaction RNT000001 not found" in result.output


def test_delete_approved_rejected(cli_runner, temp_db, seeded):
    create_rental(cli_runner, temp_db)
    invoke(cli_runner, temp_db, "transaction", "status", "RNT000001", "approved", "--approved-by", "U1")

    result = invoke(cli_runner, temp_db, "transaction", "delete", "RNT000001", "--yes")
    assert result.exit_code == 1
    assert "Only pending transactions can be deleted" in result.output

    result = invoke(cli_runner, temp_db, "transaction", "show", "RNT000001")
    assert result.exit_code == 0
