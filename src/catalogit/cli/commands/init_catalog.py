"""Initialize a sample catalog."""

import click
from catalogit.domain.addon import AddonService
from catalogit.domain.category import CategoryService
from catalogit.domain.errors import DomainError
from catalogit.domain.item import ItemService
from catalogit.domain.subcategory import SubcategoryService

ALL_DAYS = ["mon", "tue", "wed", "thu", "fri", "sat", "sun"]
WEEKDAYS = ["mon", "tue", "wed", "thu", "fri"]

# (name, description, tax percentage)
INITIAL_CATEGORIES = [
    ("Pizza", "Delicious Italian pizzas", 18),
    ("Beverages", "Refreshing drinks", 5),
    ("Services", "Bookable services", 18),
]

# (category, name, description); subcategories inherit tax
INITIAL_SUBCATEGORIES = [
    ("Pizza", "Vegetarian Pizzas", "Fresh veggie pizzas"),
    ("Pizza", "Non-Vegetarian Pizzas", "Meat lover pizzas"),
]

# Each item names exactly one parent: "category" or "subcategory"
INITIAL_ITEMS = [
    {
        "name": "Margherita Pizza",
        "description": "Classic cheese pizza with tomato and basil",
        "subcategory": "Vegetarian Pizzas",
        "base_price": 300,
        "pricing_type": "STATIC",
        "avl_days": ALL_DAYS,
        "avl_times": [{"start": "11:00", "end": "23:00"}],
    },
    {
        "name": "Burger Combo",
        "description": "Delicious burger with fries",
        "category": "Beverages",
        "base_price": 250,
        "pricing_type": "TIERED",
        "pricing_config": {
            "tiers": [
                {"upto": 5, "price": 250},
                {"upto": 10, "price": 240},
                {"upto": None, "price": 220},
            ]
        },
        "avl_days": WEEKDAYS,
        "avl_times": [{"start": "12:00", "end": "22:00"}],
    },
    {
        "name": "Happy Hour Deal",
        "description": "30% off on selected items",
        "category": "Beverages",
        "base_price": 500,
        "pricing_type": "DISCOUNTED",
        "pricing_config": {"val": 30, "is_perc": True},
        "avl_days": WEEKDAYS,
        "avl_times": [{"start": "17:00", "end": "20:00"}],
    },
    {
        "name": "Complimentary Water",
        "description": "Free water glass",
        "category": "Beverages",
        "pricing_type": "COMPLIMENTARY",
        "pricing_config": {},
        "avl_days": ALL_DAYS,
    },
    {
        "name": "Coffee",
        "description": "Hot & Cold Coffee",
        "category": "Beverages",
        "pricing_type": "DYNAMIC",
        "pricing_config": {
            "windows": [
                {"start": "06:00", "end": "10:00", "price": 150},
                {"start": "10:00", "end": "17:00", "price": 120},
                {"start": "17:00", "end": "23:00", "price": 100},
            ]
        },
        "avl_days": ALL_DAYS,
    },
    {
        "name": "Yoga Class",
        "description": "1-hour yoga session",
        "category": "Services",
        "base_price": 500,
        "pricing_type": "STATIC",
        "is_bookable": True,
        "avl_days": ["mon", "tue", "wed", "thu", "fri", "sat"],
        "avl_times": [{"start": "06:00", "end": "08:00"}, {"start": "18:00", "end": "19:30"}],
    },
]

# (item, name, price, mandatory)
INITIAL_ADDONS = [
    ("Margherita Pizza", "Extra Cheese", 50, False),
    ("Burger Combo", "Bacon", 75, False),
    ("Burger Combo", "Special Sauce", 25, True),
    ("Yoga Class", "Yoga Mat Rental", 100, False),
]


def seed_catalog(db) -> dict[str, int]:
    """Create the sample catalog.

    Args:
        db: Database instance

    Returns:
        Mapping of created names to IDs. Categories, subcategories and items
        are keyed by name; addons by "item > addon".

    Raises:
        DomainError: If any entry cannot be created
    """
    categories = CategoryService(db)
    subcategories = SubcategoryService(db)
    items = ItemService(db)
    addons = AddonService(db)

    ids: dict[str, int] = {}
    for name, description, tax_percentage in INITIAL_CATEGORIES:
        ids[name] = categories.create_category(
            name=name, description=description, tax_percentage=tax_percentage
        )

    for category_name, name, description in INITIAL_SUBCATEGORIES:
        ids[name] = subcategories.create_subcategory(
            category_id=ids[category_name], name=name, description=description
        )

    for entry in INITIAL_ITEMS:
        fields = dict(entry)
        category_name = fields.pop("category", None)
        subcategory_name = fields.pop("subcategory", None)
        ids[fields["name"]] = items.create_item(
            category_id=ids[category_name] if category_name else None,
            subcategory_id=ids[subcategory_name] if subcategory_name else None,
            **fields,
        )

    for item_name, name, price, mandatory in INITIAL_ADDONS:
        ids[f"{item_name} > {name}"] = addons.create_addon(
            item_id=ids[item_name], name=name, price=price, is_mandatory=mandatory
        )

    return ids


@click.command("init-catalog")
@click.pass_context
def init_catalog(ctx):
    """Initialize database with a sample catalog."""
    db = ctx.obj["db"]
    service = CategoryService(db)

    # Check if categories already exist
    existing = service.list_categories()
    if existing:
        click.echo("Categories already exist. The sample catalog is only seeded into an empty database.")
        return

    click.echo("Creating sample catalog...")

    try:
        ids = seed_catalog(db)
    except DomainError as e:
        click.echo(f"Error: Could not seed catalog: {e}", err=True)
        ctx.exit(1)
        return

    click.echo(
        f"Successfully created {len(INITIAL_CATEGORIES)} categories, "
        f"{len(INITIAL_SUBCATEGORIES)} subcategories, {len(INITIAL_ITEMS)} items "
        f"and {len(INITIAL_ADDONS)} addons."
    )
    click.echo(f"Try: catalogit item price {ids['Happy Hour Deal']}")


def register_commands(cli):
    """Register init-catalog command with main CLI."""
    cli.add_command(init_catalog)
