"""Payer enrollment and account commands."""

import click
from feeledger.cli.error_handling import handle_domain_error
from feeledger.cli.formatting import echo_transaction_table, format_usd
from feeledger.domain.balance import compute_balance, pending_balance
from feeledger.domain.enrollment import EnrollmentService
from feeledger.domain.entities import EducationLevel
from feeledger.domain.errors import DomainError
from feeledger.domain.ledger import solvency_entry
from feeledger.domain.payment import PaymentService
from feeledger.domain.pricing import PricingService


def _parse_student(value: str) -> dict:
    """Parse 'First|Last|Level[|Section]' into a student dict."""
    parts = [part.strip() for part in value.split("|")]
    if len(parts) not in (3, 4):
        raise click.BadParameter(
            f"'{value}' must look like 'First|Last|Level' or 'First|Last|Level|Section'"
        )
    student = {"first_name": parts[0], "last_name": parts[1], "level": parts[2]}
    if len(parts) == 4:
        student["section"] = parts[3]
    return student


@click.group()
def payer_group():
    """Manage payers and their students."""
    pass


@payer_group.command("enroll")
@click.argument("national_id", metavar="NATIONAL_ID")
@click.option("--first-name", required=True, help="Payer first name")
@click.option("--last-name", default="", help="Payer last name")
@click.option("--phone", required=True, help="Contact phone")
@click.option("--email", default="", help="Contact email")
@click.option("--address", default="", help="Home address")
@click.option(
    "--student",
    "students",
    multiple=True,
    required=True,
    help="Student as 'First|Last|Level[|Section]' (repeatable)",
)
@click.pass_context
def enroll_payer(ctx, national_id, first_name, last_name, phone, email, address, students):
    """Enroll a payer with one or more students.

    Examples:
        feeledger payer enroll V12345678 --first-name Ana --last-name Pérez \\
            --phone 0414-555-0000 --student "Luis|Pérez|Primaria 1er Grado|B"
    """
    db = ctx.obj["db"]
    service = EnrollmentService(db, school_year=ctx.obj["school_year"])

    try:
        parsed = [_parse_student(value) for value in students]
        payer = service.enroll_payer(
            national_id=national_id,
            first_name=first_name,
            last_name=last_name,
            phone=phone,
            email=email,
            address=address,
            students=parsed,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    click.echo(f"Enrolled {payer.full_name} ({payer.national_id})")
    click.echo(f"  Account code: {payer.account_code}")
    for student in payer.students:
        click.echo(f"  {student.id}: {student.full_name} - {student.level} ({format_usd(student.monthly_fee)})")


@payer_group.command("add-student")
@click.argument("national_id", metavar="NATIONAL_ID")
@click.option("--first-name", required=True, help="Student first name")
@click.option("--last-name", required=True, help="Student last name")
@click.option("--level", required=True, help="Education level, e.g. 'Primaria 1er Grado'")
@click.option("--section", default="A", show_default=True, help="Section")
@click.pass_context
def add_student(ctx, national_id, first_name, last_name, level, section):
    """Add a student to an enrolled payer."""
    db = ctx.obj["db"]
    service = EnrollmentService(db, school_year=ctx.obj["school_year"])

    try:
        payer = service.add_student(
            national_id, first_name=first_name, last_name=last_name, level=level, section=section
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    student = payer.students[-1]
    click.echo(f"Added {student.full_name} ({student.id}) to {payer.full_name}")
    if level not in {lvl.value for lvl in EducationLevel}:
        click.echo(f"Warning: '{level}' is not a standard level; set its price with 'config price set'.")


@payer_group.command("list")
@click.pass_context
def list_payers(ctx):
    """List all payers."""
    db = ctx.obj["db"]
    service = EnrollmentService(db, school_year=ctx.obj["school_year"])

    payers = service.list_payers()
    if not payers:
        click.echo("No payers found.")
        return

    click.echo("\nPayers:")
    click.echo("-" * 80)
    for payer in payers:
        click.echo(
            f"{payer.national_id:<12} | {payer.full_name:<30} | {payer.account_code:<24} | "
            f"{len(payer.students)} student(s)"
        )


@payer_group.command("show")
@click.argument("national_id", metavar="NATIONAL_ID")
@click.pass_context
def show_payer(ctx, national_id):
    """Show a payer with students, balance and payment history."""
    db = ctx.obj["db"]
    service = EnrollmentService(db, school_year=ctx.obj["school_year"])
    pricing = PricingService(db, fallback_rate=ctx.obj["fallback_rate"])

    try:
        payer = service.require_payer(national_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    catalog = pricing.get_price_catalog()
    transactions = PaymentService(db, pricing).list_transactions(payer_id=payer.national_id)
    entry = solvency_entry(payer, catalog, transactions)
    balance = compute_balance(payer, catalog, transactions)
    rate = pricing.get_exchange_rate().rate

    click.echo(f"\n{payer.full_name} ({payer.national_id})")
    click.echo(f"  Account code: {payer.account_code}")
    click.echo(f"  Phone: {payer.phone}")
    if payer.email:
        click.echo(f"  Email: {payer.email}")
    click.echo("\nStudents:")
    for student in payer.students:
        click.echo(f"  {student.id}: {student.full_name} - {student.level} / Sec {student.section}")

    click.echo(f"\nExpected due: {format_usd(entry.expected_due)}")
    click.echo(f"Verified paid: {format_usd(entry.total_paid)}")
    click.echo(f"Balance: {format_usd(balance)}")
    debt = pending_balance(balance)
    click.echo(f"Pending debt: {format_usd(debt)} (~ Bs {debt * rate:,.2f})")
    if entry.credit > 0:
        click.echo(f"Credit: {format_usd(entry.credit)}")

    if transactions:
        click.echo("\nPayments:")
        echo_transaction_table(transactions)


def register_commands(cli):
    """Register payer commands with main CLI."""
    cli.add_command(payer_group, name="payer")
