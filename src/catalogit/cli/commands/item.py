"""Item management and pricing commands."""

import json

import click
from catalogit.cli.commands.category import format_tax
from catalogit.cli.error_handling import handle_domain_error
from catalogit.cli.input_parsing import (
    parse_amount_option,
    parse_csv_list,
    parse_datetime_option,
    parse_id_list,
    parse_json_option,
    parse_time_windows,
)
from catalogit.domain.errors import DomainError
from catalogit.domain.item import ItemService
from catalogit.domain.price_config import config_to_payload

PRICING_TYPE_HELP = "Pricing type: STATIC, TIERED, COMPLIMENTARY, DISCOUNTED, DYNAMIC (or A-E)"
CONFIG_HELP = (
    'Pricing config as JSON, e.g. \'{"tiers": [{"upto": 1, "price": 300}, {"upto": null, "price": 500}]}\''
)


@click.group()
def item_group():
    """Manage items and quote prices."""
    pass


@item_group.command("create")
@click.argument("name")
@click.option("--category", "category_id", type=int, help="Parent category ID")
@click.option("--subcategory", "subcategory_id", type=int, help="Parent subcategory ID")
@click.option("--description", help="Item description")
@click.option("--base-price", default="0", show_default=True, help="Base price")
@click.option("--pricing-type", default="STATIC", show_default=True, help=PRICING_TYPE_HELP)
@click.option("--config", "config_json", help=CONFIG_HELP)
@click.option("--tax-percentage", help="Own tax percentage (omit both tax options to inherit)")
@click.option("--tax/--no-tax", "tax_applicable", default=None, help="Own tax flag")
@click.option("--bookable", is_flag=True, help="Item can be booked")
@click.option("--days", help="Available weekdays, e.g. 'mon,tue,wed'")
@click.option("--times", help="Availability windows, e.g. '09:00-12:00,14:00-18:00'")
@click.option("--inactive", is_flag=True, help="Create the item inactive")
@click.pass_context
def create_item(
    ctx,
    name: str,
    category_id: int | None,
    subcategory_id: int | None,
    description: str | None,
    base_price: str,
    pricing_type: str,
    config_json: str | None,
    tax_percentage: str | None,
    tax_applicable: bool | None,
    bookable: bool,
    days: str | None,
    times: str | None,
    inactive: bool,
):
    """Create a new item under a category or a subcategory.

    Examples:
        catalogit item create "Margherita" --category 1 --base-price 250
        catalogit item create "Court" --category 3 --pricing-type TIERED \\
            --config '{"tiers": [{"upto": 1, "price": 300}, {"upto": null, "price": 500}]}'
        catalogit item create "Happy Hour Beer" --category 2 --base-price 200 \\
            --pricing-type DYNAMIC --config '{"windows": [{"start": "17:00", "end": "19:00", "price": 150}]}'
    """
    db = ctx.obj["db"]
    service = ItemService(db)

    price = parse_amount_option(ctx, base_price, "base price")
    percentage = parse_amount_option(ctx, tax_percentage, "tax percentage")
    payload = parse_json_option(ctx, config_json, "--config")

    try:
        item_id = service.create_item(
            name=name,
            category_id=category_id,
            subcategory_id=subcategory_id,
            description=description,
            base_price=price,
            pricing_type=pricing_type,
            pricing_config=payload,
            tax_applicable=tax_applicable,
            tax_percentage=percentage,
            is_bookable=bookable,
            avl_days=parse_csv_list(days),
            avl_times=parse_time_windows(times),
            is_active=not inactive,
        )
        click.echo(f"Created item '{name}' (ID: {item_id})")
    except DomainError as e:
        handle_domain_error(ctx, e)


@item_group.command("list")
@click.option("--category", "category_id", type=int, help="Items directly under this category ID")
@click.option("--subcategory", "subcategory_id", type=int, help="Items under this subcategory ID")
@click.option("--active-only", is_flag=True, help="Only show active items")
@click.option("--search", help="Case-insensitive name search")
@click.option("--taxable/--untaxed", "tax_applicable", default=None, help="Filter by effective tax")
@click.pass_context
def list_items(ctx, category_id: int | None, subcategory_id: int | None, active_only: bool, search: str | None, tax_applicable: bool | None):
    """List items."""
    db = ctx.obj["db"]
    service = ItemService(db)

    items = service.list_items(
        category_id=category_id,
        subcategory_id=subcategory_id,
        active_only=active_only,
        search=search,
        tax_applicable=tax_applicable,
    )
    if not items:
        click.echo("No items found.")
        return

    click.echo("\nItems:")
    click.echo("-" * 80)
    for it in items:
        tax = service.resolve_item_tax(it)
        status = "" if service.is_item_active(it) else " [inactive]"
        click.echo(
            f"ID: {it.id:3d} | {it.name:24s} | {it.pricing_type.value:13s} | "
            f"{str(it.base_price):>10s} | Tax: {format_tax(tax.applicable, tax.percentage)}{status}"
        )


@item_group.command("show")
@click.argument("item_id", type=int)
@click.pass_context
def show_item(ctx, item_id: int):
    """Show an item's details."""
    db = ctx.obj["db"]
    service = ItemService(db)

    try:
        it = service.require_item(item_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    tax = service.resolve_item_tax(it)
    parent = (
        f"subcategory {it.subcategory_id}"
        if it.subcategory_id is not None
        else f"category {it.category_id}" if it.category_id is not None else "none"
    )
    click.echo(f"{it.name} (ID: {it.id})")
    if it.description:
        click.echo(f"  {it.description}")
    click.echo(f"  Parent: {parent}")
    click.echo(f"  Base price: {it.base_price}")
    click.echo(f"  Pricing: {it.pricing_type.value}")
    payload = config_to_payload(it.pricing_config) if it.pricing_config is not None else {}
    if payload:
        click.echo(f"  Config: {json.dumps(payload)}")
    inherited = " (inherited)" if it.is_tax_inherit else ""
    click.echo(f"  Tax: {format_tax(tax.applicable, tax.percentage)}{inherited}")
    click.echo(f"  Bookable: {'yes' if it.is_bookable else 'no'}")
    if it.avl_days:
        click.echo(f"  Days: {', '.join(it.avl_days)}")
    if it.avl_times:
        click.echo(f"  Times: {', '.join(f'{w.start}-{w.end}' for w in it.avl_times)}")
    click.echo(f"  Active: {'yes' if service.is_item_active(it) else 'no'}")


@item_group.command("update")
@click.argument("item_id", type=int)
@click.option("--name", help="New name")
@click.option("--description", help="New description")
@click.option("--category", "category_id", type=int, help="Move under this category ID")
@click.option("--subcategory", "subcategory_id", type=int, help="Move under this subcategory ID")
@click.option("--base-price", help="New base price")
@click.option("--pricing-type", help=PRICING_TYPE_HELP)
@click.option("--config", "config_json", help=CONFIG_HELP)
@click.option("--tax-percentage", help="Own tax percentage")
@click.option("--tax/--no-tax", "tax_applicable", default=None, help="Own tax flag")
@click.option("--inherit-tax", is_flag=True, help="Go back to inheriting tax")
@click.option("--bookable/--not-bookable", default=None, help="Whether the item can be booked")
@click.option("--days", help="Available weekdays, e.g. 'mon,tue,wed'")
@click.option("--times", help="Availability windows, e.g. '09:00-12:00'")
@click.option("--activate", is_flag=True, help="Mark the item active again")
@click.pass_context
def update_item(
    ctx,
    item_id: int,
    name: str | None,
    description: str | None,
    category_id: int | None,
    subcategory_id: int | None,
    base_price: str | None,
    pricing_type: str | None,
    config_json: str | None,
    tax_percentage: str | None,
    tax_applicable: bool | None,
    inherit_tax: bool,
    bookable: bool | None,
    days: str | None,
    times: str | None,
    activate: bool,
):
    """Update an item. Only the given fields change."""
    db = ctx.obj["db"]
    service = ItemService(db)

    price = parse_amount_option(ctx, base_price, "base price")
    percentage = parse_amount_option(ctx, tax_percentage, "tax percentage")
    payload = parse_json_option(ctx, config_json, "--config")

    try:
        service.update_item(
            item_id,
            name=name,
            description=description,
            category_id=category_id,
            subcategory_id=subcategory_id,
            base_price=price,
            pricing_type=pricing_type,
            pricing_config=payload,
            tax_applicable=tax_applicable,
            tax_percentage=percentage,
            inherit_tax=inherit_tax,
            is_bookable=bookable,
            avl_days=parse_csv_list(days),
            avl_times=parse_time_windows(times),
            is_active=True if activate else None,
        )
        click.echo(f"Updated item {item_id}")
    except DomainError as e:
        handle_domain_error(ctx, e)


@item_group.command("deactivate")
@click.argument("item_id", type=int)
@click.pass_context
def deactivate_item(ctx, item_id: int):
    """Deactivate an item."""
    db = ctx.obj["db"]
    service = ItemService(db)

    try:
        service.deactivate_item(item_id)
        click.echo(f"Deactivated item {item_id}")
    except DomainError as e:
        handle_domain_error(ctx, e)


@item_group.command("price")
@click.argument("item_id", type=int)
@click.option("--at", "at_time", help="Evaluate at this ISO 8601 time, UTC unless it has an offset (default: now)")
@click.option("--usage-hours", help="Usage hours for TIERED pricing")
@click.option("--addons", help="Selected addon IDs, '1,2' or '[1,2]'")
@click.option("--json", "as_json", is_flag=True, help="Print the quote as JSON")
@click.pass_context
def price_item(ctx, item_id: int, at_time: str | None, usage_hours: str | None, addons: str | None, as_json: bool):
    """Quote the price of an item.

    Examples:
        catalogit item price 4
        catalogit item price 7 --usage-hours 2.5
        catalogit item price 9 --at 2024-06-01T17:30:00 --addons 1,2 --json
    """
    db = ctx.obj["db"]
    service = ItemService(db)

    current_time = parse_datetime_option(ctx, at_time, "--at time")
    hours = parse_amount_option(ctx, usage_hours, "usage hours")

    try:
        quote = service.get_price_quote(
            item_id,
            current_time=current_time,
            usage_hours=hours,
            addon_ids=parse_id_list(addons),
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    data = quote.to_dict()
    if as_json:
        click.echo(json.dumps(data, indent=2))
        return

    for key, value in data.items():
        if isinstance(value, list):
            value = ", ".join(value) if value else "-"
        click.echo(f"{key:20s} {value}")


@item_group.command("bulk-config")
@click.argument("pricing_type")
@click.option("--config", "config_json", help=CONFIG_HELP)
@click.option("--category", "category_id", type=int, help="Apply to this category and its subcategories")
@click.option("--subcategory", "subcategory_id", type=int, help="Apply to this subcategory")
@click.option("--only-types", help="Only items currently using these types, e.g. 'STATIC,DISCOUNTED'")
@click.pass_context
def bulk_config(ctx, pricing_type: str, config_json: str | None, category_id: int | None, subcategory_id: int | None, only_types: str | None):
    """Apply one pricing config to all items in a category or subcategory.

    Nothing changes unless every item in scope accepts the config.

    Examples:
        catalogit item bulk-config DISCOUNTED --category 1 --config '{"val": 10, "is_perc": true}'
    """
    db = ctx.obj["db"]
    service = ItemService(db)
    payload = parse_json_option(ctx, config_json, "--config")

    try:
        count = service.bulk_update_price_config(
            pricing_type,
            payload,
            category_id=category_id,
            subcategory_id=subcategory_id,
            item_types=parse_csv_list(only_types),
        )
        click.echo(f"Updated pricing of {count} item{'s' if count != 1 else ''}")
    except DomainError as e:
        handle_domain_error(ctx, e)


def register_commands(cli):
    """Register item commands with main CLI."""
    cli.add_command(item_group, name="item")
