"""Addon management commands."""

import click
from catalogit.cli.error_handling import handle_domain_error
from catalogit.cli.input_parsing import parse_amount_option
from catalogit.domain.addon import AddonService
from catalogit.domain.errors import DomainError


@click.group()
def addon_group():
    """Manage item addons."""
    pass


@addon_group.command("create")
@click.argument("item_id", type=int)
@click.argument("name")
@click.argument("price")
@click.option("--mandatory", is_flag=True, help="Always charge this addon with the item")
@click.option("--inactive", is_flag=True, help="Create the addon inactive")
@click.pass_context
def create_addon(ctx, item_id: int, name: str, price: str, mandatory: bool, inactive: bool):
    """Create an addon for ITEM_ID.

    Examples:
        catalogit addon create 4 "Extra Cheese" 40
        catalogit addon create 7 "Racket Rental" 100 --mandatory
    """
    db = ctx.obj["db"]
    service = AddonService(db)
    amount = parse_amount_option(ctx, price, "price")

    try:
        addon_id = service.create_addon(
            item_id=item_id,
            name=name,
            price=amount,
            is_mandatory=mandatory,
            is_active=not inactive,
        )
        click.echo(f"Created addon '{name}' (ID: {addon_id})")
    except DomainError as e:
        handle_domain_error(ctx, e)


@addon_group.command("list")
@click.argument("item_id", type=int)
@click.option("--all", "show_all", is_flag=True, help="Include inactive addons")
@click.pass_context
def list_addons(ctx, item_id: int, show_all: bool):
    """List addons of ITEM_ID."""
    db = ctx.obj["db"]
    service = AddonService(db)

    try:
        addons = service.list_addons(item_id, active_only=not show_all)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    if not addons:
        click.echo("No addons found.")
        return

    click.echo("\nAddons:")
    click.echo("-" * 60)
    for addon in addons:
        flags = []
        if addon.is_mandatory:
            flags.append("mandatory")
        if not addon.is_active:
            flags.append("inactive")
        suffix = f" [{', '.join(flags)}]" if flags else ""
        click.echo(f"ID: {addon.id:3d} | {addon.name:20s} | {str(addon.price):>8s}{suffix}")


@addon_group.command("deactivate")
@click.argument("addon_id", type=int)
@click.pass_context
def deactivate_addon(ctx, addon_id: int):
    """Deactivate an addon."""
    db = ctx.obj["db"]
    service = AddonService(db)

    try:
        service.deactivate_addon(addon_id)
        click.echo(f"Deactivated addon {addon_id}")
    except DomainError as e:
        handle_domain_error(ctx, e)


def register_commands(cli):
    """Register addon commands with main CLI."""
    cli.add_command(addon_group, name="addon")
