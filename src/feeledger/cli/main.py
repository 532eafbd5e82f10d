"""Main CLI entry point."""

from decimal import Decimal

import click
from feeledger.database.factories import create_sqlite_database
from feeledger.domain.defaults import DEFAULT_EXCHANGE_RATE, DEFAULT_SCHOOL_YEAR
from feeledger.domain.errors import ConnectivityError
from feeledger.logging_config import setup_logging

# Import and register all commands at module level
from feeledger.cli.commands import (
    payer,
    pay,
    verify,
    ledger,
    config,
)


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to database file (overrides FEELEDGER_DB_PATH environment variable)",
    envvar="FEELEDGER_DB_PATH",
)
@click.option(
    "--school-year",
    default=DEFAULT_SCHOOL_YEAR,
    show_default=True,
    envvar="FEELEDGER_SCHOOL_YEAR",
    help="School year used in new account codes",
)
@click.option(
    "--fallback-rate",
    type=click.FloatRange(min=0, min_open=True),
    default=float(DEFAULT_EXCHANGE_RATE),
    show_default=True,
    envvar="FEELEDGER_FALLBACK_RATE",
    help="Exchange rate used when the configured rate cannot be read",
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    envvar="LOG_LEVEL",
    help="Log level for diagnostic output on stderr",
)
@click.pass_context
def cli(ctx, db_path: str | None, school_year: str, fallback_rate: float, log_level: str | None):
    """Feeledger - School tuition billing ledger.

    Track what each family owes, record payments in USD or local currency,
    verify electronic payments, and report on collections and solvency.
    """
    ctx.ensure_object(dict)

    if log_level:
        setup_logging(log_level)

    ctx.obj["school_year"] = school_year
    ctx.obj["fallback_rate"] = Decimal(str(fallback_rate))

    # Initialize database connection only when actually running a command
    # (not when showing help)
    if ctx.invoked_subcommand is not None:
        try:
            db = create_sqlite_database(database_path=db_path)
        except ConnectivityError as e:
            click.echo(f"Error: {e}", err=True)
            ctx.exit(1)
        db.connect()
        db.initialize_schema()
        ctx.obj["db"] = db
        ctx.call_on_close(db.disconnect)


# Register all commands
payer.register_commands(cli)
pay.register_commands(cli)
verify.register_commands(cli)
ledger.register_commands(cli)
config.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
