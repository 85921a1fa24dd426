"""CLI error handling helpers."""

import json
from pathlib import Path
from typing import Any

import click

from equiptrack.domain.errors import DomainError


def handle_domain_error(ctx: click.Context, error: DomainError | ValueError) -> None:
    """Render a domain error and exit with failure."""
    click.echo(f"Error: {error}", err=True)
    ctx.exit(1)


def load_payload_or_exit(ctx: click.Context, path: str) -> dict[str, Any]:
    """Read a JSON object from a file, or exit with a CLI error."""
    try:
        payload = json.loads(Path(path).read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        click.echo(f"Error: Could not read payload from '{path}': {exc}", err=True)
        ctx.exit(1)
    if not isinstance(payload, dict):
        click.echo(f"Error: Payload in '{path}' must be a JSON object", err=True)
        ctx.exit(1)
    return payload
