"""Ledger, solvency and dashboard commands."""

import click
from feeledger.cli.date_filters import period_options, resolve_cli_date_range
from feeledger.cli.formatting import echo_transaction_table, format_local, format_usd
from feeledger.domain.entities import PaymentStatus, SolvencyEntry
from feeledger.domain.ledger import LedgerQuery, LedgerService


_STATUS_CHOICES = {
    "verified": PaymentStatus.VERIFIED,
    "pending": PaymentStatus.PENDING_VERIFICATION,
    "rejected": PaymentStatus.REJECTED,
}


def _echo_solvency_table(entries: tuple[SolvencyEntry, ...]) -> None:
    click.echo("-" * 104)
    click.echo(
        f"{'Payer':<12} {'Name':<28} {'Students':>8} {'Expected':>12} "
        f"{'Paid':>12} {'Balance':>12} {'Status':<12}"
    )
    click.echo("-" * 104)
    for entry in entries:
        status = "DELINQUENT" if entry.is_delinquent else "current"
        click.echo(
            f"{entry.payer_id:<12} {entry.payer_name[:28]:<28} {entry.student_count:>8} "
            f"{format_usd(entry.expected_due):>12} {format_usd(entry.total_paid):>12} "
            f"{format_usd(entry.balance):>12} {status:<12}"
        )


@click.command("ledger")
@period_options
@click.option("--payer", "payer_id", help="Only transactions of this payer (national ID)")
@click.option(
    "--status",
    "statuses",
    multiple=True,
    type=click.Choice(list(_STATUS_CHOICES), case_sensitive=False),
    help="Statuses to include (repeatable, default: verified)",
)
@click.option("--search", help="Filter by reference, payer ID or payer name")
@click.pass_context
def ledger(
    ctx,
    start_date,
    end_date,
    billing_month,
    this_month,
    last_month,
    this_year,
    last_year,
    payer_id,
    statuses,
    search,
):
    """Show the payment ledger with totals per method.

    Examples:
        feeledger ledger --this-month
        feeledger ledger --month 2025-09 --payer V12345678
        feeledger ledger --status pending --status rejected
    """
    start, end = resolve_cli_date_range(
        ctx,
        start_date=start_date,
        end_date=end_date,
        billing_month=billing_month,
        period_flags={
            "this_month": this_month,
            "last_month": last_month,
            "this_year": this_year,
            "last_year": last_year,
        },
    )

    query = LedgerQuery(
        start_date=start,
        end_date=end,
        payer_id=payer_id,
        statuses=frozenset(_STATUS_CHOICES[s.lower()] for s in statuses)
        or frozenset({PaymentStatus.VERIFIED}),
        search=search,
    )
    report = LedgerService(ctx.obj["db"]).ledger_report(query)

    period = f"{report.start_date or 'beginning'} to {report.end_date or 'today'}"
    status_names = ", ".join(s.value for s in report.statuses)
    click.echo(f"\nLedger ({period}; {status_names})")

    if not report.transactions:
        click.echo("No transactions found.")
    else:
        echo_transaction_table(list(report.transactions))
        click.echo("-" * 118)
        click.echo(
            f"Total: {format_usd(report.total_usd)}  |  {format_local(report.total_local)}  "
            f"({len(report.transactions)} transaction(s))"
        )

        click.echo("\nBy method:")
        for total in report.method_totals:
            click.echo(
                f"  {total.method.value:<14} {total.count:>4}  "
                f"{format_usd(total.amount_usd):>12}  {format_local(total.amount_local):>16}"
            )

    if payer_id and report.solvency:
        entry = report.solvency[0]
        click.echo(f"\nCurrent balance for {entry.payer_name}: {format_usd(entry.balance)}")


@click.command("solvency")
@click.option("--delinquent-only", is_flag=True, help="Only list payers with outstanding debt")
@click.pass_context
def solvency(ctx, delinquent_only: bool):
    """Classify payers as delinquent or current, as of now."""
    entries = LedgerService(ctx.obj["db"]).solvency_report(delinquent_only=delinquent_only)
    if not entries:
        click.echo("No delinquent payers." if delinquent_only else "No payers found.")
        return

    click.echo("\nSolvency:")
    _echo_solvency_table(entries)
    delinquent = [entry for entry in entries if entry.is_delinquent]
    owed = sum((entry.pending_balance for entry in delinquent), 0)
    click.echo("-" * 104)
    click.echo(f"{len(delinquent)} delinquent payer(s) owing {format_usd(owed)}")


@click.command("dashboard")
@click.pass_context
def dashboard(ctx):
    """Show headline figures for the school."""
    stats = LedgerService(ctx.obj["db"]).dashboard()

    click.echo("\nDashboard")
    click.echo("=" * 40)
    click.echo(f"Payers:                {stats.payer_count}")
    click.echo(f"Students:              {stats.student_count}")
    click.echo(f"Collected (verified):  {format_usd(stats.total_collected_usd)}")
    click.echo(f"Awaiting verification: {stats.pending_verification_count}")
    click.echo(f"Delinquent payers:     {stats.delinquent_count}")
    click.echo(f"Outstanding debt:      {format_usd(stats.total_pending_balance)}")


def register_commands(cli):
    """Register ledger commands with main CLI."""
    cli.add_command(ledger)
    cli.add_command(solvency)
    cli.add_command(dashboard)
