"""Subcategory management commands."""

import click
from catalogit.cli.commands.category import format_tax
from catalogit.cli.error_handling import handle_domain_error
from catalogit.cli.input_parsing import parse_amount_option
from catalogit.domain.errors import DomainError
from catalogit.domain.subcategory import SubcategoryService


@click.group()
def subcategory_group():
    """Manage subcategories."""
    pass


@subcategory_group.command("create")
@click.argument("category_id", type=int)
@click.argument("name")
@click.option("--description", help="Subcategory description")
@click.option("--tax-percentage", help="Own tax percentage (omit both tax options to inherit)")
@click.option("--tax/--no-tax", "tax_applicable", default=None, help="Own tax flag")
@click.pass_context
def create_subcategory(ctx, category_id: int, name: str, description: str | None, tax_percentage: str | None, tax_applicable: bool | None):
    """Create a subcategory under CATEGORY_ID.

    Without --tax/--no-tax or --tax-percentage the subcategory inherits tax
    from its category.

    Examples:
        catalogit subcategory create 1 "Vegetarian"
        catalogit subcategory create 1 "Imported" --tax-percentage 28
    """
    db = ctx.obj["db"]
    service = SubcategoryService(db)
    percentage = parse_amount_option(ctx, tax_percentage, "tax percentage")

    try:
        subcategory_id = service.create_subcategory(
            category_id=category_id,
            name=name,
            description=description,
            tax_applicable=tax_applicable,
            tax_percentage=percentage,
        )
        click.echo(f"Created subcategory '{name}' (ID: {subcategory_id})")
    except DomainError as e:
        handle_domain_error(ctx, e)


@subcategory_group.command("list")
@click.option("--category", "category_id", type=int, help="Only subcategories of this category ID")
@click.option("--active-only", is_flag=True, help="Only show active subcategories")
@click.pass_context
def list_subcategories(ctx, category_id: int | None, active_only: bool):
    """List subcategories with their effective tax."""
    db = ctx.obj["db"]
    service = SubcategoryService(db)

    subcategories = service.list_subcategories(category_id=category_id, active_only=active_only)
    if not subcategories:
        click.echo("No subcategories found.")
        return

    click.echo("\nSubcategories:")
    click.echo("-" * 70)
    for sub in subcategories:
        tax = service.get_resolved_tax(sub.id)
        source = " (inherited)" if sub.is_tax_inherit else ""
        status = "" if sub.is_active else " [inactive]"
        click.echo(
            f"ID: {sub.id:3d} | {sub.name:20s} | Category: {sub.category_id:3d} | "
            f"Tax: {format_tax(tax.applicable, tax.percentage)}{source}{status}"
        )


@subcategory_group.command("update")
@click.argument("subcategory_id", type=int)
@click.option("--name", help="New name")
@click.option("--description", help="New description")
@click.option("--category", "category_id", type=int, help="Move under this category ID")
@click.option("--tax-percentage", help="Own tax percentage")
@click.option("--tax/--no-tax", "tax_applicable", default=None, help="Own tax flag")
@click.option("--inherit-tax", is_flag=True, help="Go back to inheriting tax from the category")
@click.option("--activate", is_flag=True, help="Mark the subcategory active again")
@click.pass_context
def update_subcategory(ctx, subcategory_id: int, name: str | None, description: str | None, category_id: int | None, tax_percentage: str | None, tax_applicable: bool | None, inherit_tax: bool, activate: bool):
    """Update a subcategory."""
    db = ctx.obj["db"]
    service = SubcategoryService(db)
    percentage = parse_amount_option(ctx, tax_percentage, "tax percentage")

    try:
        service.update_subcategory(
            subcategory_id,
            name=name,
            description=description,
            category_id=category_id,
            tax_applicable=tax_applicable,
            tax_percentage=percentage,
            inherit_tax=inherit_tax,
            is_active=True if activate else None,
        )
        click.echo(f"Updated subcategory {subcategory_id}")
    except DomainError as e:
        handle_domain_error(ctx, e)


@subcategory_group.command("deactivate")
@click.argument("subcategory_id", type=int)
@click.pass_context
def deactivate_subcategory(ctx, subcategory_id: int):
    """Deactivate a subcategory and its items."""
    db = ctx.obj["db"]
    service = SubcategoryService(db)

    try:
        count = service.deactivate_subcategory(subcategory_id)
        click.echo(f"Deactivated subcategory {subcategory_id} ({count} items)")
    except DomainError as e:
        handle_domain_error(ctx, e)


def register_commands(cli):
    """Register subcategory commands with main CLI."""
    cli.add_command(subcategory_group, name="subcategory")
