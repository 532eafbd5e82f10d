"""Payment verification commands."""

import click
from feeledger.cli.error_handling import handle_domain_error
from feeledger.cli.formatting import echo_transaction_detail, echo_transaction_table, format_usd
from feeledger.domain.errors import DomainError
from feeledger.domain.verification import VerificationAction, VerificationService


_CONFIRM_MESSAGES = {
    VerificationAction.APPROVE: "APPROVE this payment? It will count toward the payer's balance",
    VerificationAction.REJECT: "REJECT this payment? It will move to the rejected history",
    VerificationAction.RECOVER: "RECOVER and approve this rejected payment?",
}


@click.group()
def verify_group():
    """Review electronic payments awaiting verification."""
    pass


@verify_group.command("queue")
@click.option("--search", help="Filter by reference or payer national ID")
@click.pass_context
def pending_queue(ctx, search: str | None):
    """List payments awaiting verification, oldest first."""
    service = VerificationService(ctx.obj["db"])
    transactions = service.pending_queue(search=search)
    if not transactions:
        click.echo("No payments awaiting verification.")
        return

    click.echo(f"\n{len(transactions)} payment(s) awaiting verification:")
    echo_transaction_table(transactions)


@verify_group.command("rejected")
@click.option("--search", help="Filter by reference or payer national ID")
@click.pass_context
def rejected_history(ctx, search: str | None):
    """List rejected payments, newest first."""
    service = VerificationService(ctx.obj["db"])
    transactions = service.rejected_history(search=search)
    if not transactions:
        click.echo("No rejected payments.")
        return

    click.echo(f"\n{len(transactions)} rejected payment(s):")
    echo_transaction_table(transactions)


def _make_action_command(action: VerificationAction):
    @click.command(action.value.lower())
    @click.option("--id", "transaction_id", help="Transaction ID")
    @click.option("--reference", help="Payment reference (used with --payer when no ID is given)")
    @click.option("--payer", "payer_id", help="Payer national ID (used with --reference)")
    @click.option("--yes", is_flag=True, help="Skip the confirmation prompt")
    @click.pass_context
    def command(ctx, transaction_id, reference, payer_id, yes):
        service = VerificationService(ctx.obj["db"])

        try:
            txn = service.locate(transaction_id=transaction_id, reference=reference, payer_id=payer_id)
        except DomainError as e:
            handle_domain_error(ctx, e)
            return

        echo_transaction_detail(txn)
        if not yes and not click.confirm(_CONFIRM_MESSAGES[action]):
            click.echo("Cancelled.")
            return

        try:
            updated = service.apply(action, transaction_id=txn.id)
        except DomainError as e:
            handle_domain_error(ctx, e)
            return

        click.echo(
            f"Transaction {updated.id} is now {updated.status.value} "
            f"({format_usd(updated.amount_usd)} from {updated.payer_id})"
        )

    command.__doc__ = {
        VerificationAction.APPROVE: "Approve a payment awaiting verification.",
        VerificationAction.REJECT: "Reject a payment awaiting verification.",
        VerificationAction.RECOVER: "Approve a payment that was rejected by mistake.",
    }[action]
    command.help = command.__doc__
    return command


for _action in VerificationAction:
    verify_group.add_command(_make_action_command(_action))


def register_commands(cli):
    """Register verification commands with main CLI."""
    cli.add_command(verify_group, name="verify")
