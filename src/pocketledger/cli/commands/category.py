"""Category management commands."""

import click

from pocketledger.cli.error_handling import get_context, handle_domain_error
from pocketledger.domain.errors import DomainError
from pocketledger.domain.patches import CategoryPatch

TYPE_CHOICE = click.Choice(["income", "expense"], case_sensitive=False)


@click.group()
def category_group():
    """Manage categories."""
    pass


@category_group.command("list")
@click.option("--type", "category_type", type=TYPE_CHOICE, help="Only list one type")
@click.option("--active", is_flag=True, help="Only list active categories")
@click.pass_context
def list_categories(ctx, category_type: str | None, active: bool):
    """List categories."""
    service = get_context(ctx).categories
    if category_type:
        categories = service.get_categories_by_type(category_type)
    elif active:
        categories = service.get_active_categories()
    else:
        categories = service.get_categories()

    if active and category_type:
        categories = [c for c in categories if c.is_active]

    if not categories:
        click.echo("No categories found.")
        return

    for cat in categories:
        flags = "" if cat.is_active else " [inactive]"
        click.echo(f"{cat.id:>4}  {cat.type.value:<8} {cat.name}{flags}")


@category_group.command("create")
@click.argument("name")
@click.option("--type", "category_type", type=TYPE_CHOICE, default="expense", help="Category type (default: expense)")
@click.option("--icon", default="ellipsis-horizontal-outline", help="Icon name")
@click.option("--color", default="#9E9E9E", help="Display color")
@click.option("--description", help="Description")
@click.pass_context
def create_category(ctx, name: str, category_type: str, icon: str, color: str, description: str | None):
    """Create a new category."""
    service = get_context(ctx).categories
    try:
        category = service.create_category(
            name=name, type=category_type, icon=icon, color=color, description=description
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Created category '{category.name}' (ID: {category.id})")


@category_group.command("update")
@click.argument("category_id", type=int)
@click.option("--name", help="New name")
@click.option("--type", "category_type", type=TYPE_CHOICE, help="New type")
@click.option("--icon", help="New icon")
@click.option("--color", help="New color")
@click.option("--active/--inactive", default=None, help="Activate or deactivate")
@click.pass_context
def update_category(ctx, category_id: int, name, category_type, icon, color, active):
    """Update a category."""
    service = get_context(ctx).categories
    try:
        patch = CategoryPatch(name=name, type=category_type, icon=icon, color=color, is_active=active)
        service.update_category(category_id, patch)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Updated category {category_id}")


@category_group.command("delete")
@click.argument("category_id", type=int)
@click.pass_context
def delete_category(ctx, category_id: int):
    """Delete a category that has no transactions or budgets."""
    service = get_context(ctx).categories
    try:
        service.delete_category(category_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Deleted category {category_id}")


def register_commands(cli):
    """Register category commands with main CLI."""
    cli.add_command(category_group, name="category")
