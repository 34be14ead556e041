"""Mapper functions to convert between domain models and SQLAlchemy models.

This layer isolates the conversion logic, including the JSON columns that
hold pricing configs and availability, so the schema can change without
touching the domain.
"""

from decimal import Decimal
from typing import Optional

from catalogit.domain import entities as domain
from catalogit.domain.price_config import config_from_storage
from catalogit.database.models import (
    Addon as ORMAddon,
    Booking as ORMBooking,
    Category as ORMCategory,
    Item as ORMItem,
    Subcategory as ORMSubcategory,
)


def _decimal(value) -> Optional[Decimal]:
    if value is None:
        return None
    return value if isinstance(value, Decimal) else Decimal(str(value))


def category_to_domain(orm_category: ORMCategory) -> domain.Category:
    """Convert SQLAlchemy Category model to domain Category entity."""
    return domain.Category(
        id=orm_category.id,
        name=orm_category.name,
        description=orm_category.description,
        tax_applicable=bool(orm_category.tax_applicable),
        tax_percentage=_decimal(orm_category.tax_percentage) or Decimal("0.00"),
        is_active=bool(orm_category.is_active),
        created_at=orm_category.created_at,
    )


def subcategory_to_domain(orm_subcategory: ORMSubcategory) -> domain.Subcategory:
    """Convert SQLAlchemy Subcategory model to domain Subcategory entity."""
    return domain.Subcategory(
        id=orm_subcategory.id,
        category_id=orm_subcategory.category_id,
        name=orm_subcategory.name,
        description=orm_subcategory.description,
        is_tax_inherit=bool(orm_subcategory.is_tax_inherit),
        tax_applicable=orm_subcategory.tax_applicable,
        tax_percentage=_decimal(orm_subcategory.tax_percentage),
        is_active=bool(orm_subcategory.is_active),
        created_at=orm_subcategory.created_at,
    )


def time_windows_to_domain(raw: Optional[list]) -> tuple[domain.TimeWindow, ...]:
    """Convert stored ``[{"start", "end"}]`` JSON to TimeWindow entities."""
    return tuple(domain.TimeWindow(start=w["start"], end=w["end"]) for w in raw or [])


def time_windows_to_storage(windows) -> Optional[list]:
    """Convert TimeWindow entities to JSON for storage (None when empty)."""
    if not windows:
        return None
    return [{"start": w.start, "end": w.end} for w in windows]


def item_to_domain(orm_item: ORMItem) -> domain.Item:
    """Convert SQLAlchemy Item model to domain Item entity."""
    return domain.Item(
        id=orm_item.id,
        name=orm_item.name,
        category_id=orm_item.category_id,
        subcategory_id=orm_item.subcategory_id,
        description=orm_item.description,
        base_price=_decimal(orm_item.base_price) or Decimal("0.00"),
        pricing_type=domain.PricingType(orm_item.pricing_type),
        pricing_config=config_from_storage(orm_item.pricing_config),
        is_tax_inherit=bool(orm_item.is_tax_inherit),
        tax_applicable=orm_item.tax_applicable,
        tax_percentage=_decimal(orm_item.tax_percentage),
        is_bookable=bool(orm_item.is_bookable),
        is_active=bool(orm_item.is_active),
        created_at=orm_item.created_at,
        avl_days=tuple(orm_item.avl_days or ()),
        avl_times=time_windows_to_domain(orm_item.avl_times),
    )


def addon_to_domain(orm_addon: ORMAddon) -> domain.Addon:
    """Convert SQLAlchemy Addon model to domain Addon entity."""
    return domain.Addon(
        id=orm_addon.id,
        item_id=orm_addon.item_id,
        name=orm_addon.name,
        price=_decimal(orm_addon.price),
        is_mandatory=bool(orm_addon.is_mandatory),
        is_active=bool(orm_addon.is_active),
        created_at=orm_addon.created_at,
    )


def booking_to_domain(orm_booking: ORMBooking) -> domain.Booking:
    """Convert SQLAlchemy Booking model to domain Booking entity."""
    return domain.Booking(
        id=orm_booking.id,
        item_id=orm_booking.item_id,
        start_time=orm_booking.start_time,
        end_time=orm_booking.end_time,
        status=domain.BookingStatus(orm_booking.status),
        created_at=orm_booking.created_at,
    )
