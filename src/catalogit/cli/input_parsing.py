"""CLI helpers for turning option strings into domain values."""

import json
from datetime import datetime
from decimal import Decimal
from typing import Any, Optional

import click

from catalogit.domain.errors import ValidationError
from catalogit.utils.date_parser import parse_datetime
from catalogit.utils.money import parse_money


def parse_amount_option(ctx, value: Optional[str], label: str) -> Optional[Decimal]:
    """Parse a money option, exiting with an error message on bad input."""
    if value is None:
        return None
    try:
        return parse_money(value)
    except ValueError as e:
        click.echo(f"Error: Invalid {label}: {e}", err=True)
        ctx.exit(1)


def parse_datetime_option(ctx, value: Optional[str], label: str) -> Optional[datetime]:
    """Parse an ISO 8601 (or "now") option, exiting on bad input."""
    if value is None:
        return None
    try:
        return parse_datetime(value)
    except ValueError as e:
        click.echo(f"Error: Invalid {label}: {e}", err=True)
        ctx.exit(1)


def parse_json_option(ctx, value: Optional[str], label: str) -> Any:
    """Parse a JSON option, exiting on bad input."""
    if value is None:
        return None
    try:
        return json.loads(value)
    except json.JSONDecodeError as e:
        click.echo(f"Error: {label} is not valid JSON: {e}", err=True)
        ctx.exit(1)


def parse_csv_list(value: Optional[str]) -> Optional[list[str]]:
    """Split "a,b , c" into ["a", "b", "c"]; None stays None."""
    if value is None:
        return None
    return [part.strip() for part in value.split(",") if part.strip()]


def parse_time_windows(value: Optional[str]) -> Optional[list[dict]]:
    """Parse "09:00-12:00,14:00-18:00" into [{"start", "end"}] dicts.

    Raises:
        ValidationError: If a part is not START-END
    """
    parts = parse_csv_list(value)
    if parts is None:
        return None
    windows = []
    for part in parts:
        start, sep, end = part.partition("-")
        if not sep:
            raise ValidationError(f"Time window '{part}' must look like HH:MM-HH:MM")
        windows.append({"start": start.strip(), "end": end.strip()})
    return windows


def parse_id_list(value: Optional[str]) -> Optional[list[int]]:
    """Parse addon IDs given as "1,2" or as a JSON array "[1, 2]".

    Raises:
        ValidationError: If any entry is not an integer
    """
    if value is None:
        return None
    text = value.strip()
    if text.startswith("["):
        try:
            raw = json.loads(text)
        except json.JSONDecodeError as e:
            raise ValidationError(f"Invalid ID list '{value}': {e}")
        if not isinstance(raw, list):
            raise ValidationError(f"Invalid ID list '{value}'")
    else:
        raw = parse_csv_list(text)

    ids = []
    for entry in raw:
        if isinstance(entry, bool) or (isinstance(entry, float) and not entry.is_integer()):
            raise ValidationError(f"Invalid ID {entry!r}")
        try:
            ids.append(int(entry))
        except (TypeError, ValueError):
            raise ValidationError(f"Invalid ID {entry!r}")
    return ids
