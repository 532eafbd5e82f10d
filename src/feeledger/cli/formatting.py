"""CLI helpers for rendering money and transactions."""

from decimal import Decimal

import click

from feeledger.domain.entities import PaymentTransaction


def format_usd(amount) -> str:
    """Format a USD amount, e.g. $1,234.50 or -$20.00."""
    sign = "-" if amount < 0 else ""
    return f"{sign}${abs(amount):,.2f}"


def format_local(amount) -> str:
    """Format a local-currency amount, or '-' when absent."""
    if amount is None:
        return "-"
    return f"Bs {amount:,.2f}"


def format_rate(rate) -> str:
    """Format an exchange rate without trailing zeros, e.g. 36.5 or 60."""
    if rate is None:
        return "-"
    return f"{Decimal(rate).normalize():f}"


def echo_transaction_table(transactions: list[PaymentTransaction]) -> None:
    """Print transactions as a compact table."""
    click.echo("-" * 118)
    click.echo(
        f"{'ID':<10} {'Paid':<11} {'Payer':<12} {'Method':<14} {'Reference':<14} "
        f"{'USD':>12} {'Local':>16} {'Status':<22}"
    )
    click.echo("-" * 118)
    for txn in transactions:
        click.echo(
            f"{txn.id[:8]:<10} {str(txn.paid_date):<11} {txn.payer_id:<12} "
            f"{txn.method.value:<14} {txn.reference[:14]:<14} "
            f"{format_usd(txn.amount_usd):>12} {format_local(txn.amount_local):>16} "
            f"{txn.status.value:<22}"
        )


def echo_transaction_detail(txn: PaymentTransaction) -> None:
    """Print every field of one transaction."""
    click.echo(f"Transaction ID: {txn.id}")
    click.echo(f"  Payer: {txn.payer_name} ({txn.payer_id})")
    if txn.account_code:
        click.echo(f"  Account code: {txn.account_code}")
    click.echo(f"  Paid: {txn.paid_date}  Registered: {txn.registered_date}")
    if txn.month and txn.year:
        click.echo(f"  Billing month: {txn.year}-{txn.month:02d}")
    if txn.student_id:
        click.echo(f"  Student: {txn.student_id}")
    click.echo(f"  Method: {txn.method.value}")
    click.echo(f"  Reference: {txn.reference}")
    click.echo(f"  Amount: {format_usd(txn.amount_usd)}")
    if txn.amount_local is not None:
        click.echo(f"  Local amount: {format_local(txn.amount_local)} at rate {format_rate(txn.rate_applied)}")
    click.echo(f"  Status: {txn.status.value}")
    if txn.notes:
        click.echo(f"  Notes: {txn.notes}")
