"""CLI helpers for date range resolution."""

from datetime import date

import click

from feeledger.utils.date_parser import get_date_range, month_range, parse_date


def period_options(func):
    """Attach the shared --start-date/--end-date/--month/period flags to a command."""
    options = [
        click.option("--start-date", help="Start date (YYYY-MM-DD or 'last month', 'this year')"),
        click.option("--end-date", help="End date (YYYY-MM-DD or 'today')"),
        click.option("--month", "billing_month", help="Whole calendar month (YYYY-MM)"),
        click.option("--this-month", is_flag=True, help="Filter to current month"),
        click.option("--last-month", is_flag=True, help="Filter to previous month"),
        click.option("--this-year", is_flag=True, help="Filter to current year"),
        click.option("--last-year", is_flag=True, help="Filter to previous year"),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def resolve_cli_date_range(
    ctx,
    *,
    start_date: str | None,
    end_date: str | None,
    billing_month: str | None = None,
    period_flags: dict[str, bool],
) -> tuple[date | None, date | None]:
    """Resolve CLI date range from period flags, a month, or explicit dates."""
    period_count = sum(1 for is_set in period_flags.values() if is_set)
    if billing_month:
        period_count += 1

    if period_count > 1:
        click.echo(
            "Error: Only one of --month, --this-month, --last-month, --this-year, --last-year can be specified at a time.",
            err=True,
        )
        ctx.exit(1)

    if period_count > 0 and (start_date or end_date):
        click.echo(
            "Error: Period options cannot be combined with --start-date or --end-date.",
            err=True,
        )
        ctx.exit(1)

    if billing_month:
        try:
            year_str, month_str = billing_month.split("-")
            return month_range(int(year_str), int(month_str))
        except ValueError:
            click.echo(f"Error: Invalid month '{billing_month}', expected YYYY-MM", err=True)
            ctx.exit(1)

    for period, is_set in period_flags.items():
        if is_set:
            return get_date_range(period.replace("_", "-"))

    return _parse_bound(ctx, start_date, "start"), _parse_bound(ctx, end_date, "end")


def _parse_bound(ctx, value: str | None, label: str) -> date | None:
    if not value:
        return None
    try:
        return parse_date(value)
    except ValueError as e:
        click.echo(f"Error: Invalid {label} date: {e}", err=True)
        ctx.exit(1)
