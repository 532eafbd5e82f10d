"""Record payment command."""

import click
from feeledger.cli.error_handling import handle_domain_error
from feeledger.cli.formatting import format_local, format_rate, format_usd
from feeledger.domain.balance import BalanceService
from feeledger.domain.currency import PaymentDraft
from feeledger.domain.entities import PaymentMethod, PaymentStatus, PaymentType
from feeledger.domain.errors import DomainError
from feeledger.domain.payment import PaymentService
from feeledger.domain.pricing import PricingService
from feeledger.utils.amount_parser import parse_amount
from feeledger.utils.date_parser import parse_date


@click.command("pay")
@click.argument("national_id", metavar="NATIONAL_ID")
@click.option(
    "--method",
    required=True,
    help="Payment method: " + ", ".join(m.value for m in PaymentMethod),
)
@click.option("--amount", help="Amount in USD (e.g., 110 or 110.50)")
@click.option("--amount-local", help="Amount in local currency; USD is derived at the current rate")
@click.option("--total", is_flag=True, help="Pay the payer's whole outstanding debt")
@click.option("--reference", required=True, help="Bank reference or receipt number")
@click.option("--student", help="Student ID the payment is for, or ALL")
@click.option("--month", type=click.IntRange(1, 12), help="Billed month (1-12)")
@click.option("--year", type=int, help="Billed year")
@click.option("--date", "paid_on", help="Date paid (YYYY-MM-DD or 'today', 'yesterday')")
@click.option("--notes", default="", help="Notes")
@click.pass_context
def record_payment(
    ctx,
    national_id: str,
    method: str,
    amount: str | None,
    amount_local: str | None,
    total: bool,
    reference: str,
    student: str | None,
    month: int | None,
    year: int | None,
    paid_on: str | None,
    notes: str,
):
    """Record a payment from a payer.

    Cash and card payments count immediately; mobile payments, bank
    transfers and Zelle wait for verification.

    Examples:
        feeledger pay V12345678 --method CashUSD --amount 110 --reference R-001
        feeledger pay V12345678 --method MobilePayment --amount-local 6600 --reference 00123456
        feeledger pay V12345678 --method Zelle --total --reference ZL-77
    """
    db = ctx.obj["db"]
    pricing = PricingService(db, fallback_rate=ctx.obj["fallback_rate"])
    service = PaymentService(db, pricing)

    if sum(1 for given in (amount, amount_local, total) if given) != 1:
        click.echo("Error: Give exactly one of --amount, --amount-local or --total.", err=True)
        ctx.exit(1)

    try:
        payment_method = PaymentMethod.parse(method)
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(1)

    if amount_local and not payment_method.uses_local_currency:
        click.echo(f"Error: {payment_method.value} payments are not made in local currency.", err=True)
        ctx.exit(1)

    paid_date = None
    if paid_on:
        try:
            paid_date = parse_date(paid_on)
        except ValueError as e:
            click.echo(f"Error: Invalid date format: {e}", err=True)
            ctx.exit(1)

    draft = PaymentDraft(method=payment_method, rate=pricing.get_exchange_rate().rate)
    try:
        if total:
            draft.fill_total(BalanceService(db).get_balance(national_id))
        elif amount_local:
            draft.set_amount_local(parse_amount(amount_local))
        else:
            draft.set_amount_usd(parse_amount(amount))
    except DomainError as e:
        handle_domain_error(ctx, e)
    except ValueError as e:
        click.echo(f"Error: Invalid amount format: {e}", err=True)
        ctx.exit(1)

    if draft.amount_usd is None or draft.amount_usd <= 0:
        click.echo("Error: Nothing to pay: amount must be greater than 0.", err=True)
        ctx.exit(1)
    draft.reconcile()

    try:
        recorded = service.record_payment(
            payer_id=national_id,
            method=payment_method,
            amount_usd=draft.amount_usd,
            amount_local=draft.amount_local,
            reference=reference,
            student_id=student,
            month=month,
            year=year,
            notes=notes,
            paid_date=paid_date,
            payment_type=PaymentType.FULL if total else PaymentType.PARTIAL,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    txn = recorded.transaction
    click.echo(f"Recorded payment {txn.id}")
    click.echo(f"  Payer: {txn.payer_name} ({txn.payer_id})")
    click.echo(f"  Amount: {format_usd(txn.amount_usd)}")
    if txn.amount_local is not None:
        click.echo(f"  Local amount: {format_local(txn.amount_local)} at rate {format_rate(txn.rate_applied)}")
    click.echo(f"  Method: {txn.method.value}")
    if txn.status == PaymentStatus.PENDING_VERIFICATION:
        click.echo("  Status: pending verification")
    else:
        click.echo("  Status: verified")
    for warning in recorded.warnings:
        click.echo(f"Warning: {warning}", err=True)


def register_commands(cli):
    """Register pay command with main CLI."""
    cli.add_command(record_payment)
