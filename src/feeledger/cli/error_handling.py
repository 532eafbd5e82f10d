"""CLI error handling helpers."""

import click

from feeledger.domain.errors import ConnectivityError, DomainError


def handle_domain_error(ctx: click.Context, error: DomainError | ValueError) -> None:
    """Print ``Error: <message>`` on stderr and exit 1.

    Storage failures get a hint, since the command did not write anything.
    """
    click.echo(f"Error: {error}", err=True)
    if isinstance(error, ConnectivityError):
        click.echo("Nothing was saved. Check --db-path / FEELEDGER_DB_PATH and retry.", err=True)
    ctx.exit(1)
