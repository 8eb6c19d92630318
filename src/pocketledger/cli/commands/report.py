"""Report commands."""

import click

from pocketledger.cli.error_handling import get_context, handle_domain_error
from pocketledger.utils.date_parser import get_date_range, parse_date

INTERVAL_CHOICE = click.Choice(["daily", "weekly", "monthly", "yearly"], case_sensitive=False)


def _resolve_range(ctx, period, start_date, end_date):
    try:
        if period:
            return get_date_range(period)
        if not (start_date and end_date):
            raise ValueError("Pass --period or both --start-date and --end-date")
        return parse_date(start_date), parse_date(end_date)
    except ValueError as e:
        handle_domain_error(ctx, e)


@click.group()
def report_group():
    """Income and expense reports."""
    pass


@report_group.command("period")
@click.option("--period", help="Named period: this-month, last-month, this-year, ...")
@click.option("--start-date", help="Start date (YYYY-MM-DD)")
@click.option("--end-date", help="End date (YYYY-MM-DD)")
@click.pass_context
def period_report(ctx, period, start_date, end_date):
    """Totals and per-category breakdown for a date range."""
    start, end = _resolve_range(ctx, period, start_date, end_date)
    try:
        report = get_context(ctx).reports.generate_period_report(start, end)
    except ValueError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Report {report.start_date} to {report.end_date}")
    click.echo(f"  Income:  {report.total_income}")
    click.echo(f"  Expense: {report.total_expense}")
    click.echo(f"  Net:     {report.net_change}")
    for title, rows in (("Income", report.income_by_category), ("Expense", report.expense_by_category)):
        if rows:
            click.echo(f"\n{title} by category:")
            for row in rows:
                click.echo(
                    f"  {row.category_name:<20} {row.total_amount:>10}  "
                    f"{row.percentage:5.1f}%  ({row.transactions})"
                )
    if report.account_reports:
        click.echo("\nAccounts:")
        for account in report.account_reports:
            click.echo(
                f"  {account.account_name:<20} balance {account.balance}  "
                f"net {account.net_change}"
            )


@report_group.command("trend")
@click.option("--period", help="Named period: this-month, last-month, this-year, ...")
@click.option("--start-date", help="Start date (YYYY-MM-DD)")
@click.option("--end-date", help="End date (YYYY-MM-DD)")
@click.option("--interval", type=INTERVAL_CHOICE, default="monthly", help="Bucket size (default: monthly)")
@click.pass_context
def trend_report(ctx, period, start_date, end_date, interval):
    """Income and expense per day, week, month or year."""
    start, end = _resolve_range(ctx, period, start_date, end_date)
    try:
        trend = get_context(ctx).reports.generate_trend_report(start, end, interval)
    except ValueError as e:
        handle_domain_error(ctx, e)

    if not trend.dates:
        click.echo("No transactions in range.")
        return
    for key, income, expense in zip(trend.dates, trend.income, trend.expense):
        click.echo(f"{key:<10}  income {income:>10}  expense {expense:>10}")


def register_commands(cli):
    """Register report commands with main CLI."""
    cli.add_command(report_group, name="report")
