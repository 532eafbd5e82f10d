"""Exchange rate and price catalog configuration commands."""

import click
from feeledger.cli.error_handling import handle_domain_error
from feeledger.cli.formatting import format_rate, format_usd
from feeledger.domain.defaults import DEFAULT_LEVEL_FEES
from feeledger.domain.errors import DomainError
from feeledger.domain.pricing import PricingService
from feeledger.utils.amount_parser import parse_amount


@click.group()
def config_group():
    """Configure the exchange rate and monthly fees."""
    pass


@config_group.group("rate")
def rate_group():
    """Show or set the exchange rate (local currency per USD)."""
    pass


@rate_group.command("show")
@click.pass_context
def show_rate(ctx):
    """Show the current exchange rate."""
    pricing = PricingService(ctx.obj["db"], fallback_rate=ctx.obj["fallback_rate"])
    rate = pricing.get_exchange_rate()
    click.echo(f"Exchange rate: {format_rate(rate.rate)} Bs per USD")
    click.echo(f"  Effective since: {rate.effective_at:%Y-%m-%d %H:%M}")


@rate_group.command("set")
@click.argument("rate")
@click.pass_context
def set_rate(ctx, rate: str):
    """Set the exchange rate used for new payments.

    Payments already recorded keep the rate captured when they were saved.
    """
    pricing = PricingService(ctx.obj["db"], fallback_rate=ctx.obj["fallback_rate"])
    try:
        value = parse_amount(rate)
        saved = pricing.set_exchange_rate(value)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return
    except ValueError as e:
        click.echo(f"Error: Invalid rate: {e}", err=True)
        ctx.exit(1)

    click.echo(f"Exchange rate set to {format_rate(saved.rate)} Bs per USD")


@config_group.group("price")
def price_group():
    """List or set monthly fees per education level."""
    pass


@price_group.command("list")
@click.pass_context
def list_prices(ctx):
    """List monthly fees, marking levels that use the built-in default."""
    pricing = PricingService(ctx.obj["db"], fallback_rate=ctx.obj["fallback_rate"])
    catalog = pricing.get_price_catalog()

    levels = list(DEFAULT_LEVEL_FEES)
    levels.extend(sorted(level for level in catalog.prices if level not in DEFAULT_LEVEL_FEES))

    click.echo("\nMonthly fees:")
    click.echo("-" * 50)
    for level in levels:
        price = catalog.price_for(level)
        source = ""
        if price is None:
            price = DEFAULT_LEVEL_FEES[level]
            source = "(default)"
        click.echo(f"{level:<26} {format_usd(price):>10}  {source}")


@price_group.command("set")
@click.argument("level")
@click.argument("price")
@click.pass_context
def set_price(ctx, level: str, price: str):
    """Set the monthly fee in USD for LEVEL.

    Example:
        feeledger config price set "Primaria 1er Grado" 115
    """
    pricing = PricingService(ctx.obj["db"], fallback_rate=ctx.obj["fallback_rate"])
    try:
        value = parse_amount(price)
        pricing.set_level_price(level, value)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return
    except ValueError as e:
        click.echo(f"Error: Invalid price: {e}", err=True)
        ctx.exit(1)

    click.echo(f"Monthly fee for '{level.strip()}' set to {format_usd(value)}")


def register_commands(cli):
    """Register configuration commands with main CLI."""
    cli.add_command(config_group, name="config")
