"""Transaction management commands."""

import click

from pocketledger.cli.error_handling import get_context, handle_domain_error
from pocketledger.domain.entities import Transaction
from pocketledger.domain.errors import DomainError
from pocketledger.utils.amount_parser import parse_amount
from pocketledger.utils.date_parser import parse_date

TYPE_CHOICE = click.Choice(["income", "expense"], case_sensitive=False)


def format_transaction(txn: Transaction, category_name: str | None = None) -> str:
    """One line per transaction: id, date, signed amount, category, description."""
    sign = "+" if txn.type.value == "income" else "-"
    category = category_name or f"#{txn.category_id}"
    description = f"  {txn.description}" if txn.description else ""
    return f"{txn.id:>5}  {txn.date.isoformat()}  {sign}{txn.amount:>10}  {category}{description}"


def _print_transactions(ctx, transactions: list[Transaction]) -> None:
    if not transactions:
        click.echo("No transactions found.")
        return
    names = {c.id: c.name for c in get_context(ctx).categories.get_categories()}
    for txn in transactions:
        click.echo(format_transaction(txn, names.get(txn.category_id)))


@click.group()
def transaction_group():
    """Manage transactions."""
    pass


@transaction_group.command("add")
@click.option("--amount", required=True, help="Positive amount (e.g., 12.50)")
@click.option("--type", "txn_type", type=TYPE_CHOICE, default="expense", help="Transaction type (default: expense)")
@click.option("--category", "category_id", type=int, required=True, help="Category ID")
@click.option("--date", "txn_date", default="today", help="Date (YYYY-MM-DD or relative like 'today', 'yesterday')")
@click.option("--description", help="Description")
@click.option("--budget", "budget_id", type=int, help="Budget ID")
@click.option("--account", "account_id", type=int, help="Account ID")
@click.pass_context
def add_transaction(ctx, amount, txn_type, category_id, txn_date, description, budget_id, account_id):
    """Record an income or expense."""
    service = get_context(ctx).transactions
    try:
        txn = service.create_transaction(
            amount=parse_amount(amount),
            type=txn_type,
            category_id=category_id,
            date=parse_date(txn_date),
            description=description,
            budget_id=budget_id,
            account_id=account_id,
        )
    except ValueError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Created transaction {txn.id}")


@transaction_group.command("list")
@click.option("--start-date", help="Start date (YYYY-MM-DD or relative like 'last month')")
@click.option("--end-date", help="End date (YYYY-MM-DD or relative like 'today')")
@click.option("--category", "category_id", type=int, help="Only this category ID")
@click.option("--limit", type=int, help="Show only the most recent N transactions")
@click.pass_context
def list_transactions(ctx, start_date, end_date, category_id, limit):
    """List transactions, newest first."""
    service = get_context(ctx).transactions
    try:
        if start_date or end_date:
            start = parse_date(start_date) if start_date else parse_date("1970-01-01")
            end = parse_date(end_date) if end_date else parse_date("today")
            transactions = service.get_transactions_by_date_range(start, end)
        elif category_id is not None:
            transactions = service.get_transactions_by_category_id(category_id)
        elif limit:
            transactions = service.get_recent_transactions(limit)
        else:
            transactions = service.get_transactions()
    except ValueError as e:
        handle_domain_error(ctx, e)

    if category_id is not None:
        transactions = [t for t in transactions if t.category_id == category_id]
    if limit:
        transactions = transactions[:limit]
    _print_transactions(ctx, transactions)


@transaction_group.command("month")
@click.argument("year", type=int)
@click.argument("month", type=int)
@click.pass_context
def month_transactions(ctx, year: int, month: int):
    """List transactions of one month."""
    service = get_context(ctx).transactions
    try:
        transactions = service.get_transactions_by_month(year, month)
    except DomainError as e:
        handle_domain_error(ctx, e)
    _print_transactions(ctx, transactions)


@transaction_group.command("delete")
@click.argument("transaction_id", type=int)
@click.pass_context
def delete_transaction(ctx, transaction_id: int):
    """Delete a transaction."""
    service = get_context(ctx).transactions
    try:
        service.delete_transaction(transaction_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Deleted transaction {transaction_id}")


def register_commands(cli):
    """Register transaction commands with main CLI."""
    cli.add_command(transaction_group, name="transaction")
