"""Main CLI entry point."""

import click

from pocketledger.cli.commands import balance, budget, category, database, report, transaction
from pocketledger.config import DATA_CLEAR_ENV, DB_PATH_ENV, load_settings
from pocketledger.context import create_app_context
from pocketledger.logging_setup import configure_logging


@click.group()
@click.option(
    "--db-path",
    type=click.Path(dir_okay=False),
    help=f"Path to database file (overrides {DB_PATH_ENV} environment variable)",
    envvar=DB_PATH_ENV,
)
@click.option(
    "--data-clear",
    is_flag=True,
    default=False,
    envvar=DATA_CLEAR_ENV,
    help="Drop all tables before initializing (development only)",
)
@click.pass_context
def cli(ctx, db_path: str | None, data_clear: bool):
    """pocketledger - budgets, transactions and bank balances.

    Records income and expenses against categories, tracks budget
    consumption and keeps monthly bank balances on a local SQLite database.
    """
    ctx.ensure_object(dict)

    # Open the database only when actually running a command (not for --help)
    if ctx.invoked_subcommand is not None:
        settings = load_settings(database_path=db_path, data_clear=data_clear)
        configure_logging(settings.log_level)
        app = create_app_context(settings=settings)
        ctx.obj["app"] = app
        ctx.call_on_close(app.close)


database.register_commands(cli)
category.register_commands(cli)
transaction.register_commands(cli)
budget.register_commands(cli)
balance.register_commands(cli)
report.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
