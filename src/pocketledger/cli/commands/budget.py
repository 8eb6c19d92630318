"""Budget management commands."""

import click

from pocketledger.cli.error_handling import get_context, handle_domain_error
from pocketledger.domain.entities import BudgetStatus
from pocketledger.domain.errors import DomainError
from pocketledger.utils.amount_parser import parse_amount
from pocketledger.utils.date_parser import parse_date

PERIOD_CHOICE = click.Choice(["daily", "weekly", "monthly", "yearly"], case_sensitive=False)


def format_status(status: BudgetStatus) -> str:
    budget = status.budget
    marker = " OVER" if status.is_exceeded else ""
    return (
        f"{budget.id:>4}  {budget.name}: spent {status.spent} of {budget.amount} "
        f"({status.percentage:.1f}%), remaining {status.remaining}{marker}"
    )


@click.group()
def budget_group():
    """Manage budgets."""
    pass


@budget_group.command("create")
@click.argument("name")
@click.option("--category", "category_id", type=int, required=True, help="Category ID")
@click.option("--amount", required=True, help="Budget limit")
@click.option("--start", "start_date", required=True, help="First day (YYYY-MM-DD or 'this month')")
@click.option("--end", "end_date", required=True, help="Last day (YYYY-MM-DD)")
@click.option("--period", type=PERIOD_CHOICE, default="monthly", help="Budget period (default: monthly)")
@click.option("--description", help="Description")
@click.pass_context
def create_budget(ctx, name, category_id, amount, start_date, end_date, period, description):
    """Create a budget for a category."""
    service = get_context(ctx).budgets
    try:
        budget = service.create_budget(
            name=name,
            category_id=category_id,
            amount=parse_amount(amount),
            start_date=parse_date(start_date),
            end_date=parse_date(end_date),
            period=period,
            description=description,
        )
    except ValueError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Created budget '{budget.name}' (ID: {budget.id})")


@budget_group.command("list")
@click.option("--month", "month_key", help="Only budgets of a month (YYYY-MM)")
@click.pass_context
def list_budgets(ctx, month_key: str | None):
    """List budgets with their category and spent amount."""
    service = get_context(ctx).budgets
    if month_key:
        try:
            year, month = (int(part) for part in month_key.split("-", 1))
            budgets = service.get_budgets_by_month_with_category(year, month)
        except ValueError as e:
            handle_domain_error(ctx, e)
    else:
        budgets = service.get_budgets_with_category()

    if not budgets:
        click.echo("No budgets found.")
        return
    for budget in budgets:
        click.echo(
            f"{budget.id:>4}  {budget.month}  {budget.name} [{budget.category_name}] "
            f"{budget.spent} / {budget.amount}  {budget.start_date} - {budget.end_date}"
        )


@budget_group.command("status")
@click.argument("budget_id", type=int)
@click.pass_context
def budget_status(ctx, budget_id: int):
    """Show how much of a budget is spent."""
    service = get_context(ctx).budgets
    try:
        status = service.get_budget_status(budget_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(format_status(status))


@budget_group.command("alerts")
@click.option("--date", "on_date", help="Reference date (default: today)")
@click.pass_context
def budget_alerts(ctx, on_date: str | None):
    """List active budgets at or above the alert threshold."""
    service = get_context(ctx).budgets
    try:
        alerts = service.get_budget_alerts(parse_date(on_date) if on_date else None)
    except ValueError as e:
        handle_domain_error(ctx, e)
    if not alerts:
        click.echo("No budget alerts.")
        return
    for status in alerts:
        click.echo(format_status(status))


@budget_group.command("delete")
@click.argument("budget_id", type=int)
@click.pass_context
def delete_budget(ctx, budget_id: int):
    """Delete a budget; its transactions are kept."""
    service = get_context(ctx).budgets
    try:
        service.delete_budget(budget_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Deleted budget {budget_id}")


def register_commands(cli):
    """Register budget commands with main CLI."""
    cli.add_command(budget_group, name="budget")
