"""Main CLI entry point."""

import logging

import click

from equiptrack.database.factories import DB_PATH_ENV_VAR, create_sqlite_database

# Import and register all commands at module level
from equiptrack.cli.commands import directory, transaction

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR"]


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help=f"Path to database file (overrides {DB_PATH_ENV_VAR} environment variable)",
    envvar=DB_PATH_ENV_VAR,
)
@click.option(
    "--log-level",
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    default="WARNING",
    show_default=True,
    envvar="EQUIPTRACK_LOG_LEVEL",
    help="Logging verbosity (log output goes to stderr)",
)
@click.pass_context
def cli(ctx, db_path: str | None, log_level: str):
    """Equiptrack - Equipment transactions between schools and governing bodies.

    Record rentals and permanent transfers of sports equipment, move them
    through approval, and track rentals until they are returned.
    """
    ctx.ensure_object(dict)
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    # Initialize database connection only when actually running a command
    # (not when showing help)
    if ctx.invoked_subcommand is not None:
        db = create_sqlite_database(database_path=db_path)
        db.connect()
        db.initialize_schema()
        ctx.obj["db"] = db
        ctx.call_on_close(db.disconnect)


# Register all commands
directory.register_commands(cli)
transaction.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
