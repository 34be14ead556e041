"""Booking commands."""

import click
from catalogit.cli.error_handling import handle_domain_error
from catalogit.cli.input_parsing import parse_datetime_option
from catalogit.domain.booking import BookingService
from catalogit.domain.errors import DomainError
from catalogit.utils.date_parser import parse_date


@click.group()
def booking_group():
    """Book bookable items."""
    pass


@booking_group.command("create")
@click.argument("item_id", type=int)
@click.argument("start")
@click.argument("end")
@click.pass_context
def create_booking(ctx, item_id: int, start: str, end: str):
    """Book ITEM_ID from START to END (ISO 8601, UTC when no offset is given).

    Examples:
        catalogit booking create 7 2030-06-03T10:00:00Z 2030-06-03T11:30:00Z
    """
    db = ctx.obj["db"]
    service = BookingService(db)

    start_time = parse_datetime_option(ctx, start, "start time")
    end_time = parse_datetime_option(ctx, end, "end time")

    try:
        booking_id = service.create_booking(item_id, start_time, end_time)
        click.echo(f"Created booking {booking_id} for item {item_id}")
    except DomainError as e:
        handle_domain_error(ctx, e)


@booking_group.command("list")
@click.argument("item_id", type=int)
@click.option("--include-cancelled", is_flag=True, help="Also show cancelled bookings")
@click.pass_context
def list_bookings(ctx, item_id: int, include_cancelled: bool):
    """List bookings of ITEM_ID."""
    db = ctx.obj["db"]
    service = BookingService(db)

    try:
        bookings = service.list_bookings(item_id, include_cancelled=include_cancelled)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    if not bookings:
        click.echo("No bookings found.")
        return

    click.echo("\nBookings (UTC):")
    click.echo("-" * 70)
    for b in bookings:
        click.echo(
            f"ID: {b.id:3d} | {b.start_time:%Y-%m-%d %H:%M} - {b.end_time:%Y-%m-%d %H:%M} | {b.status.value}"
        )


@booking_group.command("slots")
@click.argument("item_id", type=int)
@click.argument("day", default="today")
@click.pass_context
def show_slots(ctx, item_id: int, day: str):
    """Show free slots of ITEM_ID on DAY (YYYY-MM-DD, 'today' or 'tomorrow')."""
    db = ctx.obj["db"]
    service = BookingService(db)

    try:
        target = parse_date(day)
    except ValueError as e:
        click.echo(f"Error: Invalid date: {e}", err=True)
        ctx.exit(1)
        return

    try:
        availability = service.get_available_slots(item_id, target)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    click.echo(f"{availability.day.isoformat()} ({availability.weekday})")
    if availability.message:
        click.echo(availability.message)
        if availability.available_days:
            click.echo(f"Available days: {', '.join(availability.available_days)}")
        return
    if not availability.slots:
        click.echo("Fully booked.")
        return
    for slot in availability.slots:
        click.echo(f"  {slot.start:%H:%M} - {slot.end:%H:%M}")


@booking_group.command("cancel")
@click.argument("booking_id", type=int)
@click.pass_context
def cancel_booking(ctx, booking_id: int):
    """Cancel a booking."""
    db = ctx.obj["db"]
    service = BookingService(db)

    try:
        service.cancel_booking(booking_id)
        click.echo(f"Cancelled booking {booking_id}")
    except DomainError as e:
        handle_domain_error(ctx, e)


@booking_group.command("complete")
@click.argument("booking_id", type=int)
@click.pass_context
def complete_booking(ctx, booking_id: int):
    """Mark a booking as completed."""
    db = ctx.obj["db"]
    service = BookingService(db)

    try:
        service.complete_booking(booking_id)
        click.echo(f"Completed booking {booking_id}")
    except DomainError as e:
        handle_domain_error(ctx, e)


def register_commands(cli):
    """Register booking commands with main CLI."""
    cli.add_command(booking_group, name="booking")
