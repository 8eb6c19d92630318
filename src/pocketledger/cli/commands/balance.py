"""Bank balance commands."""

import click

from pocketledger.cli.error_handling import get_context, handle_domain_error
from pocketledger.domain.entities import BankBalance
from pocketledger.domain.errors import DomainError
from pocketledger.domain.patches import BankBalancePatch
from pocketledger.utils.amount_parser import parse_amount


def format_balance(balance: BankBalance) -> str:
    return (
        f"{balance.year}-{balance.month:02d}  opening {balance.opening_balance:>12}  "
        f"closing {balance.closing_balance:>12}"
    )


@click.group()
def balance_group():
    """Manage monthly bank balances."""
    pass


@balance_group.command("show")
@click.argument("year", type=int)
@click.argument("month", type=int)
@click.pass_context
def show_balance(ctx, year: int, month: int):
    """Show one month's balances."""
    service = get_context(ctx).bank_balances
    try:
        balance = service.get_bank_balance(year, month)
    except DomainError as e:
        handle_domain_error(ctx, e)
    if balance is None:
        click.echo(f"No balance recorded for {year}-{month:02d}.")
        return
    click.echo(format_balance(balance))


@balance_group.command("year")
@click.argument("year", type=int)
@click.pass_context
def year_balances(ctx, year: int):
    """List every recorded month of a year."""
    balances = get_context(ctx).bank_balances.get_bank_balances_by_year(year)
    if not balances:
        click.echo(f"No balances recorded for {year}.")
        return
    for balance in balances:
        click.echo(format_balance(balance))


@balance_group.command("init")
@click.argument("year", type=int)
@click.option("--month", type=int, help="Month to initialize (default: current month, or January)")
@click.pass_context
def init_balance(ctx, year: int, month: int | None):
    """Create a month's record, carrying over the previous closing balance."""
    service = get_context(ctx).bank_balances
    try:
        balance = service.initialize_year(year, month)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(format_balance(balance))


@balance_group.command("set")
@click.argument("year", type=int)
@click.argument("month", type=int)
@click.option("--opening", help="New opening balance")
@click.option("--closing", help="New closing balance")
@click.pass_context
def set_balance(ctx, year: int, month: int, opening: str | None, closing: str | None):
    """Update a month's balances; omitted values are kept."""
    if opening is None and closing is None:
        click.echo("Error: pass --opening and/or --closing", err=True)
        ctx.exit(1)
    service = get_context(ctx).bank_balances
    try:
        patch = BankBalancePatch(
            opening_balance=parse_amount(opening) if opening is not None else None,
            closing_balance=parse_amount(closing) if closing is not None else None,
        )
        balance = service.update_bank_balance(year, month, patch)
    except ValueError as e:
        handle_domain_error(ctx, e)
    click.echo(format_balance(balance))


def register_commands(cli):
    """Register bank balance commands with main CLI."""
    cli.add_command(balance_group, name="balance")
