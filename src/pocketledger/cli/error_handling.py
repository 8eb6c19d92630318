"""CLI error handling helpers."""

import click

from pocketledger.domain.errors import DomainError


def handle_domain_error(ctx: click.Context, error: DomainError | ValueError) -> None:
    """Render a domain error and exit with failure."""
    click.echo(f"Error: {error}", err=True)
    ctx.exit(1)


def get_context(ctx: click.Context):
    """Return the AppContext the CLI group stored on the click context."""
    return ctx.obj["app"]
