"""Main CLI entry point."""

import logging

import click
from catalogit.database.factories import create_sqlite_database

# Import and register all commands at module level
from catalogit.cli.commands import (
    addon,
    booking,
    category,
    init_catalog,
    item,
    subcategory,
)


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to database file (overrides CATALOGIT_DB_PATH environment variable)",
    envvar="CATALOGIT_DB_PATH",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx, db_path: str | None, verbose: bool):
    """Catalogit - Catalog and pricing management.

    Manage a category > subcategory > item catalog with configurable pricing,
    tax inheritance, add-ons and bookings.
    """
    ctx.ensure_object(dict)
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    # Initialize database connection only when actually running a command
    # (not when showing help)
    if ctx.invoked_subcommand is not None:
        db = create_sqlite_database(database_path=db_path)
        db.connect()
        db.initialize_schema()
        ctx.obj["db"] = db
        ctx.call_on_close(db.disconnect)


# Register all commands
category.register_commands(cli)
subcategory.register_commands(cli)
item.register_commands(cli)
addon.register_commands(cli)
booking.register_commands(cli)
init_catalog.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
