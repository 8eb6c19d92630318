"""Database lifecycle commands."""

import click

from pocketledger.cli.error_handling import get_context
from pocketledger.domain.errors import ConcurrentOperationError


@click.command("init")
@click.pass_context
def init_database(ctx):
    """Create missing tables and seed default categories."""
    result = get_context(ctx).initialize()
    if result.cleared_tables:
        click.echo(f"Cleared tables: {', '.join(result.cleared_tables)}")
    if result.created_tables:
        click.echo(f"Created tables: {', '.join(result.created_tables)}")
    else:
        click.echo("All tables already exist")
    click.echo(f"Seeded {result.seeded_categories} default categories")


@click.command("reset")
@click.option("--yes", is_flag=True, help="Confirm dropping all data")
@click.pass_context
def reset_database(ctx, yes: bool):
    """Drop all data and recreate the database with default categories."""
    if not yes:
        click.echo("Error: reset deletes all data; pass --yes to confirm", err=True)
        ctx.exit(1)
    try:
        result = get_context(ctx).reset()
    except ConcurrentOperationError as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(1)
    click.echo(f"Database reset: {len(result.created_tables)} tables recreated, "
               f"{result.seeded_categories} default categories seeded")


def register_commands(cli):
    """Register database commands with main CLI."""
    cli.add_command(init_database)
    cli.add_command(reset_database)
