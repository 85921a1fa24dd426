"""Equipment, school and governing body commands."""

import click

from equiptrack.cli.error_handling import handle_domain_error
from equiptrack.domain.directory import DirectoryService
from equiptrack.domain.errors import DomainError


@click.group()
def equipment_group():
    """Manage the equipment registry."""
    pass


@equipment_group.command("add")
@click.argument("name")
@click.option("--sport", help="Sport the equipment is used for")
@click.option("--description", help="Equipment description")
@click.option("--quantity", type=int, help="Units available")
@click.pass_context
def add_equipment(ctx, name: str, sport: str | None, description: str | None, quantity: int | None):
    """Register an equipment item.

    Examples:
        equiptrack equipment add "Cricket Bat" --sport Cricket --quantity 20
    """
    service = DirectoryService(ctx.obj["db"])
    try:
        equipment = service.add_equipment(name=name, sport=sport, description=description, quantity=quantity)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Added equipment '{equipment.name}' (ID: {equipment.id}, code: {equipment.equipment_code})")


@equipment_group.command("list")
@click.pass_context
def list_equipment(ctx):
    """List registered equipment."""
    service = DirectoryService(ctx.obj["db"])
    equipment = service.list_equipment()
    if not equipment:
        click.echo("No equipment found.")
        return

    click.echo("\nEquipment:")
    click.echo("-" * 70)
    for item in equipment:
        quantity = "-" if item.quantity is None else str(item.quantity)
        click.echo(
            f"ID: {item.id:3d} | {item.equipment_code} | {item.name:25s} | "
            f"Sport: {item.sport or '-':12s} | Qty: {quantity}"
        )


@click.group()
def school_group():
    """Manage schools."""
    pass


@school_group.command("add")
@click.argument("name")
@click.option("--district", help="District")
@click.option("--province", help="Province")
@click.pass_context
def add_school(ctx, name: str, district: str | None, province: str | None):
    """Register a school."""
    service = DirectoryService(ctx.obj["db"])
    try:
        school = service.add_school(name=name, district=district, province=province)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Added school '{school.name}' (ID: {school.id}, code: {school.school_code})")


@school_group.command("list")
@click.pass_context
def list_schools(ctx):
    """List registered schools."""
    service = DirectoryService(ctx.obj["db"])
    schools = service.list_schools()
    if not schools:
        click.echo("No schools found.")
        return

    click.echo("\nSchools:")
    click.echo("-" * 70)
    for school in schools:
        location = ", ".join(part for part in (school.district, school.province) if part)
        click.echo(f"ID: {school.id:3d} | {school.school_code} | {school.name:30s} | {location}")


@click.group()
def govern_body_group():
    """Manage governing bodies."""
    pass


@govern_body_group.command("add")
@click.argument("name")
@click.option("--abbreviation", help="Short name (e.g. 'SLC')")
@click.pass_context
def add_govern_body(ctx, name: str, abbreviation: str | None):
    """Register a governing body."""
    service = DirectoryService(ctx.obj["db"])
    try:
        govern_body = service.add_govern_body(name=name, abbreviation=abbreviation)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(
        f"Added governing body '{govern_body.name}' (ID: {govern_body.id}, code: {govern_body.govern_body_code})"
    )


@govern_body_group.command("list")
@click.pass_context
def list_govern_bodies(ctx):
    """List registered governing bodies."""
    service = DirectoryService(ctx.obj["db"])
    govern_bodies = service.list_govern_bodies()
    if not govern_bodies:
        click.echo("No governing bodies found.")
        return

    click.echo("\nGoverning bodies:")
    click.echo("-" * 70)
    for body in govern_bodies:
        abbreviation = f" ({body.abbreviation})" if body.abbreviation else ""
        click.echo(f"ID: {body.id:3d} | {body.govern_body_code} | {body.name}{abbreviation}")


def register_commands(cli: click.Group) -> None:
    """Register directory commands with main CLI."""
    cli.add_command(equipment_group, name="equipment")
    cli.add_command(school_group, name="school")
    cli.add_command(govern_body_group, name="govern-body")
