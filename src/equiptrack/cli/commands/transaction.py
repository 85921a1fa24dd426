"""Equipment transaction commands."""

from typing import Any

import click

from equiptrack.cli.error_handling import handle_domain_error, load_payload_or_exit
from equiptrack.domain.entities import EquipmentTransaction, ResolvedTransaction
from equiptrack.domain.errors import DomainError, ValidationError
from equiptrack.domain.requests import normalize_create_payload, normalize_filter, normalize_update_payload
from equiptrack.domain.status import ItemCondition, ProviderKind, TransactionKind, TransactionStatus
from equiptrack.domain.transaction import EquipmentTransactionService
from equiptrack.utils.date_parser import parse_datetime

DATE_HELP = "YYYY-MM-DD, ISO timestamp or relative like 'today', 'next week'"


def _parse_item_option(value: str, index: int) -> dict[str, Any]:
    """Parse an ``EQUIPMENT:QUANTITY:CONDITION[:NOTES]`` item option."""
    parts = value.split(":", 3)
    if len(parts) < 3:
        raise ValidationError(f"Item {index}: expected EQUIPMENT:QUANTITY:CONDITION[:NOTES], got '{value}'")
    item = {"equipment": parts[0].strip(), "quantity": parts[1].strip(), "condition": parts[2].strip()}
    if len(parts) == 4:
        item["notes"] = parts[3]
    return item


def _format_date(value) -> str:
    return value.strftime("%Y-%m-%d") if value else "-"


def _echo_transaction_line(txn: EquipmentTransaction) -> None:
    due = _format_date(txn.rental_details.return_due_date) if txn.rental_details else "-"
    click.echo(
        f"{txn.transaction_id} | {txn.transaction_kind.value:9s} | {txn.status.value:9s} | "
        f"{txn.provider_kind.value} {txn.provider_id} -> school {txn.recipient_id} | "
        f"{len(txn.items)} item(s) | due {due}"
    )


def _echo_transaction_details(resolved: ResolvedTransaction) -> None:
    txn = resolved.transaction
    click.echo(f"\nTransaction {txn.transaction_id} (ID: {txn.id})")
    click.echo("=" * 70)
    click.echo(f"  Kind: {txn.transaction_kind.value}")
    click.echo(f"  Status: {txn.status.value}")
    click.echo(f"  Provider: {resolved.provider.name} ({txn.provider_kind.value} {txn.provider_id})")
    click.echo(f"  Recipient: {resolved.recipient.name} (school {txn.recipient_id})")
    click.echo(f"  Created: {txn.created_at.isoformat(timespec='seconds')}")
    click.echo(f"  Updated: {txn.updated_at.isoformat(timespec='seconds')} (version {txn.version})")

    if txn.rental_details:
        rental = txn.rental_details
        click.echo(f"  Start date: {_format_date(rental.start_date)}")
        click.echo(f"  Return due: {_format_date(rental.return_due_date)}")
        if rental.returned_date:
            click.echo(f"  Returned: {_format_date(rental.returned_date)}")
        if rental.rental_fee is not None:
            click.echo(f"  Rental fee: {rental.rental_fee:,.2f}")

    if txn.approved_by:
        approved_at = txn.approved_at.isoformat(timespec="seconds") if txn.approved_at else "-"
        click.echo(f"  Approved by: {txn.approved_by} at {approved_at}")
    if txn.request_reference:
        click.echo(f"  Request reference: {txn.request_reference}")
    if txn.terms_and_conditions:
        click.echo(f"  Terms: {txn.terms_and_conditions}")
    if txn.additional_notes:
        click.echo(f"  Notes: {txn.additional_notes}")

    click.echo("  Items:")
    for item in txn.items:
        equipment = resolved.equipment[item.equipment_id]
        line = f"    - {item.quantity} x {equipment.name} [{equipment.equipment_code}] ({item.condition.value})"
        if item.serial_numbers:
            line += f" serials: {', '.join(item.serial_numbers)}"
        if item.notes:
            line += f" - {item.notes}"
        click.echo(line)


@click.group()
def transaction_group():
    """Manage equipment transactions."""
    pass


@transaction_group.command("create")
@click.option("--provider", type=int, help="Provider ID (school or governing body)")
@click.option(
    "--provider-kind",
    type=click.Choice([kind.value for kind in ProviderKind]),
    default=ProviderKind.SCHOOL.value,
    show_default=True,
    help="Kind of provider",
)
@click.option("--recipient", type=int, help="Recipient school ID")
@click.option("--kind", type=click.Choice([kind.value for kind in TransactionKind]), help="Transaction kind")
@click.option(
    "--item",
    "items",
    multiple=True,
    help="Item as EQUIPMENT:QUANTITY:CONDITION[:NOTES] (repeatable). Conditions: "
    + ", ".join(condition.value for condition in ItemCondition),
)
@click.option("--start-date", help=f"Rental start date ({DATE_HELP})")
@click.option("--return-due-date", help=f"Rental return due date ({DATE_HELP})")
@click.option("--rental-fee", help="Rental fee")
@click.option("--notes", help="Additional notes")
@click.option("--terms", help="Terms and conditions")
@click.option("--request-reference", help="Reference of the originating equipment request")
@click.option("--payload", type=click.Path(exists=True, dir_okay=False), help="JSON file with the transaction body")
@click.pass_context
def create_transaction(
    ctx,
    provider: int | None,
    provider_kind: str,
    recipient: int | None,
    kind: str | None,
    items: tuple[str, ...],
    start_date: str | None,
    return_due_date: str | None,
    rental_fee: str | None,
    notes: str | None,
    terms: str | None,
    request_reference: str | None,
    payload: str | None,
) -> None:
    """Create an equipment transaction.

    New transactions start as pending. Rentals need --start-date and
    --return-due-date.

    Examples:
        equiptrack transaction create --provider 1 --recipient 2 --kind rental \\
            --item 1:5:good --start-date 2025-01-01 --return-due-date 2025-02-01
        equiptrack transaction create --provider 1 --provider-kind governing-body \\
            --recipient 2 --kind permanent --item 3:10:new
        equiptrack transaction create --payload request.json
    """
    service = EquipmentTransactionService(ctx.obj["db"])

    try:
        if payload:
            body = load_payload_or_exit(ctx, payload)
        else:
            body = {
                "provider": provider,
                "providerKind": provider_kind,
                "recipient": recipient,
                "transactionKind": kind,
                "items": [_parse_item_option(value, index) for index, value in enumerate(items, start=1)],
                "additionalNotes": notes,
                "termsAndConditions": terms,
                "requestReference": request_reference,
            }
            if start_date or return_due_date or rental_fee:
                body["rentalDetails"] = {
                    "startDate": start_date,
                    "returnDueDate": return_due_date,
                    "rentalFee": rental_fee,
                }
        txn = service.create_transaction(normalize_create_payload(body))
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Created {txn.transaction_kind.value} transaction {txn.transaction_id} (ID: {txn.id}), status pending")


@transaction_group.command("show")
@click.argument("reference")
@click.pass_context
def show_transaction(ctx, reference: str) -> None:
    """Show a transaction by ID or transaction code (e.g. RNT000001)."""
    service = EquipmentTransactionService(ctx.obj["db"])
    try:
        resolved = service.describe_transaction(reference)
    except DomainError as e:
        handle_domain_error(ctx, e)
    _echo_transaction_details(resolved)


@transaction_group.command("list")
@click.option("--provider", type=int, help="Provider ID")
@click.option("--provider-kind", type=click.Choice([kind.value for kind in ProviderKind]), help="Provider kind")
@click.option("--recipient", type=int, help="Recipient school ID")
@click.option("--status", type=click.Choice([status.value for status in TransactionStatus]), help="Status")
@click.option("--kind", type=click.Choice([kind.value for kind in TransactionKind]), help="Transaction kind")
@click.option("--equipment", type=int, help="Only transactions containing this equipment ID")
@click.option("--request-reference", help="Originating request reference")
@click.option("--start-from", help=f"Rental start date on or after ({DATE_HELP})")
@click.option("--start-to", help=f"Rental start date on or before ({DATE_HELP})")
@click.option("--due-from", help=f"Return due date on or after ({DATE_HELP})")
@click.option("--due-to", help=f"Return due date on or before ({DATE_HELP})")
@click.option("--page", type=int, default=1, show_default=True, help="Page number")
@click.option("--limit", type=int, default=10, show_default=True, help="Transactions per page")
@click.option("--verbose", "-v", is_flag=True, help="Show full details of each transaction")
@click.pass_context
def list_transactions(
    ctx,
    provider: int | None,
    provider_kind: str | None,
    recipient: int | None,
    status: str | None,
    kind: str | None,
    equipment: int | None,
    request_reference: str | None,
    start_from: str | None,
    start_to: str | None,
    due_from: str | None,
    due_to: str | None,
    page: int,
    limit: int,
    verbose: bool,
) -> None:
    """List transactions, newest first."""
    service = EquipmentTransactionService(ctx.obj["db"])
    params = {
        "provider": provider,
        "providerKind": provider_kind,
        "recipient": recipient,
        "status": status,
        "transactionKind": kind,
        "equipment": equipment,
        "requestReference": request_reference,
        "startDateFrom": start_from,
        "startDateTo": start_to,
        "returnDueDateFrom": due_from,
        "returnDueDateTo": due_to,
        "page": page,
        "limit": limit,
    }
    try:
        result = service.list_transactions(normalize_filter(params))
    except DomainError as e:
        handle_domain_error(ctx, e)

    if not result.transactions:
        click.echo("No transactions found.")
        return

    click.echo(f"\nFound {result.total} transaction(s) (page {result.page} of {result.pages}):")
    click.echo("-" * 100)
    for txn in result.transactions:
        if verbose:
            try:
                _echo_transaction_details(service.describe_transaction(txn.id))
            except DomainError as e:
                handle_domain_error(ctx, e)
        else:
            _echo_transaction_line(txn)


@transaction_group.command("history")
@click.argument("reference")
@click.pass_context
def show_history(ctx, reference: str) -> None:
    """Show the status history of a transaction."""
    service = EquipmentTransactionService(ctx.obj["db"])
    try:
        history = service.get_history(reference)
    except DomainError as e:
        handle_domain_error(ctx, e)

    for entry in history:
        from_status = entry.from_status.value if entry.from_status else "(new)"
        line = f"{entry.changed_at.isoformat(timespec='seconds')} | {from_status} -> {entry.to_status.value}"
        if entry.changed_by:
            line += f" | by {entry.changed_by}"
        if entry.note:
            line += f" | {entry.note}"
        click.echo(line)


@transaction_group.command("status")
@click.argument("reference")
@click.argument("status", type=click.Choice([status.value for status in TransactionStatus]))
@click.option("--approved-by", help="Approver reference (required when approving)")
@click.option("--returned-date", help=f"Date the rental came back ({DATE_HELP}); defaults to now")
@click.option("--note", help="Note stored in the status history")
@click.pass_context
def change_status(
    ctx, reference: str, status: str, approved_by: str | None, returned_date: str | None, note: str | None
) -> None:
    """Move a transaction to a new status.

    Examples:
        equiptrack transaction status RNT000001 approved --approved-by officer-7
        equiptrack transaction status RNT000001 returned --returned-date today
    """
    service = EquipmentTransactionService(ctx.obj["db"])

    returned = None
    if returned_date:
        try:
            returned = parse_datetime(returned_date)
        except ValueError as e:
            click.echo(f"Error: Invalid returned date: {e}", err=True)
            ctx.exit(1)

    try:
        txn = service.transition_status(reference, status, approved_by=approved_by, returned_date=returned, note=note)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Transaction {txn.transaction_id} is now {txn.status.value}")


@transaction_group.command("update")
@click.argument("reference")
@click.option(
    "--payload",
    type=click.Path(exists=True, dir_okay=False),
    required=True,
    help="JSON file with the fields to change",
)
@click.pass_context
def update_transaction(ctx, reference: str, payload: str) -> None:
    """Apply a partial update from a JSON file.

    The body may include a status change, corrected items or rental dates
    (pending transactions only), notes, terms and the request reference.
    """
    service = EquipmentTransactionService(ctx.obj["db"])
    body = load_payload_or_exit(ctx, payload)
    try:
        txn = service.update_transaction(reference, normalize_update_payload(body))
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Updated transaction {txn.transaction_id} (status {txn.status.value}, version {txn.version})")


@transaction_group.command("delete")
@click.argument("reference")
@click.option("--yes", is_flag=True, help="Skip confirmation prompt")
@click.pass_context
def delete_transaction(ctx, reference: str, yes: bool) -> None:
    """Delete a pending transaction."""
    service = EquipmentTransactionService(ctx.obj["db"])
    try:
        txn = service.require_transaction(reference)
    except DomainError as e:
        handle_domain_error(ctx, e)

    if not yes:
        click.confirm(f"Delete transaction {txn.transaction_id}?", abort=True)

    try:
        service.delete_transaction(txn.id)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Deleted transaction {txn.transaction_id}")


def register_commands(cli: click.Group) -> None:
    """Register transaction commands with main CLI."""
    cli.add_command(transaction_group, name="transaction")
