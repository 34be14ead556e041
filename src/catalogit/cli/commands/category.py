"""Category management commands."""

import click
from catalogit.cli.error_handling import handle_domain_error
from catalogit.cli.input_parsing import parse_amount_option
from catalogit.domain.category import CategoryService
from catalogit.domain.errors import DomainError


def format_tax(applicable, percentage) -> str:
    """Render a tax setting for display."""
    if applicable is None:
        return "inherited"
    if not applicable:
        return "no tax"
    return f"{percentage}%"


@click.group()
def category_group():
    """Manage categories."""
    pass


@category_group.command("create")
@click.argument("name")
@click.option("--description", help="Category description")
@click.option("--tax-percentage", help="Tax percentage (0-100); a positive value makes the category taxable")
@click.option("--tax/--no-tax", "tax_applicable", default=None, help="Whether tax applies")
@click.option("--inactive", is_flag=True, help="Create the category inactive")
@click.pass_context
def create_category(ctx, name: str, description: str | None, tax_percentage: str | None, tax_applicable: bool | None, inactive: bool):
    """Create a new category.

    Examples:
        catalogit category create "Pizza" --tax-percentage 18
        catalogit category create "Merch" --no-tax
    """
    db = ctx.obj["db"]
    service = CategoryService(db)
    percentage = parse_amount_option(ctx, tax_percentage, "tax percentage")

    try:
        category_id = service.create_category(
            name=name,
            description=description,
            tax_applicable=tax_applicable,
            tax_percentage=percentage,
            is_active=not inactive,
        )
        click.echo(f"Created category '{name}' (ID: {category_id})")
    except DomainError as e:
        handle_domain_error(ctx, e)


@category_group.command("list")
@click.option("--active-only", is_flag=True, help="Only show active categories")
@click.pass_context
def list_categories(ctx, active_only: bool):
    """List all categories."""
    db = ctx.obj["db"]
    service = CategoryService(db)

    categories = service.list_categories(active_only=active_only)
    if not categories:
        click.echo("No categories found. Run 'init-catalog' to create a sample catalog.")
        return

    click.echo("\nCategories:")
    click.echo("-" * 60)
    for cat in categories:
        status = "" if cat.is_active else " [inactive]"
        click.echo(
            f"ID: {cat.id:3d} | {cat.name:20s} | Tax: {format_tax(cat.tax_applicable, cat.tax_percentage)}{status}"
        )


@category_group.command("show")
@click.argument("category_id", type=int)
@click.pass_context
def show_category(ctx, category_id: int):
    """Show a category with its subcategories and direct items."""
    db = ctx.obj["db"]
    service = CategoryService(db)

    try:
        detail = service.get_category_detail(category_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    cat = detail.category
    click.echo(f"{cat.name} (ID: {cat.id})")
    if cat.description:
        click.echo(f"  {cat.description}")
    click.echo(f"  Tax: {format_tax(cat.tax_applicable, cat.tax_percentage)}")
    click.echo(f"  Active: {'yes' if cat.is_active else 'no'}")

    click.echo("\nSubcategories:")
    if not detail.subcategories:
        click.echo("  (none)")
    for sub in detail.subcategories:
        status = "" if sub.is_active else " [inactive]"
        click.echo(f"  {sub.name} (ID: {sub.id}){status}")

    click.echo("\nItems:")
    if not detail.items:
        click.echo("  (none)")
    for it in detail.items:
        status = "" if it.is_active else " [inactive]"
        click.echo(f"  {it.name} (ID: {it.id}) {it.pricing_type.value} {it.base_price}{status}")


@category_group.command("update")
@click.argument("category_id", type=int)
@click.option("--name", help="New name")
@click.option("--description", help="New description")
@click.option("--tax-percentage", help="New tax percentage (0-100)")
@click.option("--tax/--no-tax", "tax_applicable", default=None, help="Whether tax applies")
@click.option("--activate", is_flag=True, help="Mark the category active again")
@click.pass_context
def update_category(ctx, category_id: int, name: str | None, description: str | None, tax_percentage: str | None, tax_applicable: bool | None, activate: bool):
    """Update a category.

    Changing tax resets the stored tax of every inheriting subcategory and
    item below it, so they pick up the new setting.

    Examples:
        catalogit category update 1 --tax-percentage 12
        catalogit category update 1 --no-tax
    """
    db = ctx.obj["db"]
    service = CategoryService(db)
    percentage = parse_amount_option(ctx, tax_percentage, "tax percentage")

    try:
        service.update_category(
            category_id,
            name=name,
            description=description,
            tax_applicable=tax_applicable,
            tax_percentage=percentage,
            is_active=True if activate else None,
        )
        click.echo(f"Updated category {category_id}")
    except DomainError as e:
        handle_domain_error(ctx, e)


@category_group.command("deactivate")
@click.argument("category_id", type=int)
@click.pass_context
def deactivate_category(ctx, category_id: int):
    """Deactivate a category with all its subcategories and items."""
    db = ctx.obj["db"]
    service = CategoryService(db)

    try:
        counts = service.deactivate_category(category_id)
        click.echo(
            f"Deactivated category {category_id} "
            f"({counts['subcategories']} subcategories, {counts['items']} items)"
        )
    except DomainError as e:
        handle_domain_error(ctx, e)


def register_commands(cli):
    """Register category commands with main CLI."""
    cli.add_command(category_group, name="category")
