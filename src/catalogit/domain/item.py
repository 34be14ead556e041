"""Item domain service.

Items hang off either a category or a subcategory (or nothing at all),
carry one pricing strategy, and optionally an availability schedule used
for bookings and for bounding Dynamic price windows.
"""

import logging
from datetime import datetime
from decimal import Decimal
from typing import Any, Iterable, Optional

from catalogit.database.base import Database
from catalogit.domain.booking import BookingService
from catalogit.domain.entities import (
    Category,
    DynamicConfig,
    Item,
    PriceQuote,
    PricingConfig,
    PricingType,
    Subcategory,
    TaxSetting,
    TimeWindow,
)
from catalogit.domain.errors import (
    ConflictError,
    InvalidConfigError,
    NotFoundError,
    ValidationError,
    category_not_found,
    duplicate_item_name,
    item_has_two_parents,
    item_not_found,
    subcategory_not_found,
)
from catalogit.domain.price_config import normalize_config, parse_pricing_type
from catalogit.domain.price_engine import PriceContext, resolve_price
from catalogit.domain.tax import (
    require_inheritance_parent,
    resolve_category_tax,
    resolve_subcategory_tax,
    resolve_tax,
    validate_tax_setting,
)
from catalogit.domain.visibility import is_effectively_active
from catalogit.utils.date_parser import to_naive_utc, utc_now
from catalogit.utils.money import ZERO, round2
from catalogit.utils.time_windows import (
    MatchMode,
    find_containing_window,
    is_hhmm,
    normalize_weekday,
)

logger = logging.getLogger(__name__)

_SECONDS_PER_HOUR = Decimal("3600")


def normalize_avl_days(days: Optional[Iterable[str]]) -> tuple[str, ...]:
    """Normalize weekday names to unique three-letter codes, keeping order.

    Raises:
        ValidationError: If a value is not a weekday
    """
    codes: list[str] = []
    for day in days or ():
        try:
            code = normalize_weekday(day)
        except (ValueError, AttributeError) as e:
            raise ValidationError(f"Invalid avl_days entry {day!r}: {e}")
        if code not in codes:
            codes.append(code)
    return tuple(codes)


def normalize_avl_times(windows: Optional[Iterable[Any]]) -> tuple[TimeWindow, ...]:
    """Validate availability windows given as TimeWindow or {"start", "end"} dicts.

    Raises:
        ValidationError: If a window is malformed or has start >= end
    """
    result: list[TimeWindow] = []
    for raw in windows or ():
        if isinstance(raw, TimeWindow):
            start, end = raw.start, raw.end
        elif isinstance(raw, dict) and "start" in raw and "end" in raw:
            start, end = raw["start"], raw["end"]
        else:
            raise ValidationError("Each avl_times entry requires 'start' and 'end'")
        start = start.strip() if isinstance(start, str) else start
        end = end.strip() if isinstance(end, str) else end
        if not is_hhmm(start) or not is_hhmm(end):
            raise ValidationError(f"avl_times must use HH:MM (24-hour), got {start!r}-{end!r}")
        if start >= end:
            raise ValidationError(f"avl_times window start must be before end ({start} >= {end})")
        result.append(TimeWindow(start=start, end=end))
    return tuple(sorted(result, key=lambda w: w.start))


def check_dynamic_within_availability(
    config: Optional[PricingConfig], avl_times: tuple[TimeWindow, ...]
) -> None:
    """Require every Dynamic price window to fit inside an availability window.

    Items without availability windows are not constrained.

    Raises:
        InvalidConfigError: If a price window falls outside availability
    """
    if not isinstance(config, DynamicConfig) or not avl_times:
        return
    for window in config.windows:
        if find_containing_window(avl_times, (window.start, window.end), MatchMode.RANGE) is None:
            raise InvalidConfigError(
                f"Dynamic window {window.start}-{window.end} is outside the item's availability"
            )


class ItemService:
    """Service for managing catalog items and quoting their prices."""

    def __init__(self, db: Database):
        """Initialize item service.

        Args:
            db: Database instance
        """
        self.db = db

    # Lookups

    def get_item(self, item_id: int) -> Optional[Item]:
        """Get item by ID.

        Args:
            item_id: Item ID

        Returns:
            Item entity or None if not found
        """
        return self.db.get_item(item_id)

    def require_item(self, item_id: int) -> Item:
        """Get item by ID, raising NotFoundError if it does not exist."""
        item = self.db.get_item(item_id)
        if item is None:
            raise NotFoundError(item_not_found(item_id))
        return item

    def _load_parents(self, item: Item) -> tuple[Optional[Subcategory], Optional[Category]]:
        """Return the item's subcategory and the category at the top of its chain."""
        if item.subcategory_id is not None:
            subcategory = self.db.get_subcategory(item.subcategory_id)
            category = self.db.get_category(subcategory.category_id) if subcategory else None
            return subcategory, category
        if item.category_id is not None:
            return None, self.db.get_category(item.category_id)
        return None, None

    def _require_parent(
        self, category_id: Optional[int], subcategory_id: Optional[int]
    ) -> tuple[Optional[Subcategory], Optional[Category]]:
        if category_id is not None and subcategory_id is not None:
            raise ValidationError(item_has_two_parents())
        if subcategory_id is not None:
            subcategory = self.db.get_subcategory(subcategory_id)
            if subcategory is None:
                raise NotFoundError(subcategory_not_found(subcategory_id))
            return subcategory, self.db.get_category(subcategory.category_id)
        if category_id is not None:
            category = self.db.get_category(category_id)
            if category is None:
                raise NotFoundError(category_not_found(category_id))
            return None, category
        return None, None

    def resolve_item_tax(self, item: Item) -> TaxSetting:
        """Effective tax of an item, following inheritance."""
        subcategory, category = self._load_parents(item)
        return resolve_tax(item, subcategory, category)

    def is_item_active(self, item: Item) -> bool:
        """Effective active status: the item and its directly attached parent."""
        subcategory, category = self._load_parents(item)
        if subcategory is not None:
            return is_effectively_active(item, subcategory=subcategory)
        return is_effectively_active(item, category=category)

    # Validation helpers

    def _check_unique_name(
        self,
        name: str,
        category_id: Optional[int],
        subcategory_id: Optional[int],
        exclude_id: Optional[int] = None,
    ) -> None:
        existing = self.db.find_item_by_name(name, category_id, subcategory_id)
        if existing is not None and existing.id != exclude_id:
            raise ConflictError(duplicate_item_name(name))

    @staticmethod
    def _own_tax(
        tax_applicable: Optional[bool],
        tax_percentage: Optional[Decimal],
        subcategory: Optional[Subcategory],
        category: Optional[Category],
    ) -> TaxSetting:
        """Validate explicit item tax input against its parent."""
        if tax_applicable is None and tax_percentage is not None:
            tax_applicable = round2(tax_percentage) > 0

        if tax_applicable is True and (tax_percentage is None or round2(tax_percentage) <= 0):
            # Taxable without a rate takes the parent's effective rate
            if subcategory is not None:
                parent_tax = resolve_subcategory_tax(subcategory, category)
            elif category is not None:
                parent_tax = resolve_category_tax(category)
            else:
                parent_tax = TaxSetting.none()
            if not parent_tax.applicable or parent_tax.percentage <= 0:
                raise ValidationError("tax_percentage must be greater than 0 when tax_applicable is true")
            tax_percentage = parent_tax.percentage

        if tax_applicable is False and tax_percentage is None:
            tax_percentage = ZERO

        return validate_tax_setting(tax_applicable, tax_percentage)

    @staticmethod
    def _build_config(pricing_type: PricingType, payload: Optional[dict], base_price) -> PricingConfig:
        # An absent payload normalizes as {}, which only STATIC and COMPLIMENTARY accept
        return normalize_config(pricing_type, payload, base_price=base_price)

    @staticmethod
    def _check_base_price(base_price) -> Decimal:
        amount = round2(base_price)
        if amount < 0:
            raise ValidationError("base_price must be >= 0")
        return amount

    # Writes

    def create_item(
        self,
        name: str,
        category_id: Optional[int] = None,
        subcategory_id: Optional[int] = None,
        description: Optional[str] = None,
        base_price: Decimal = Decimal("0"),
        pricing_type: Any = PricingType.STATIC,
        pricing_config: Optional[dict] = None,
        tax_applicable: Optional[bool] = None,
        tax_percentage: Optional[Decimal] = None,
        is_bookable: bool = False,
        avl_days: Optional[Iterable[str]] = None,
        avl_times: Optional[Iterable[Any]] = None,
        is_active: bool = True,
    ) -> int:
        """Create an item.

        Args:
            name: Item name, unique under its parent
            category_id: Optional parent category
            subcategory_id: Optional parent subcategory (not both)
            description: Optional description
            base_price: Non-negative base price
            pricing_type: PricingType, its name, or a legacy key (A-E)
            pricing_config: Raw pricing payload; None is validated as an empty one
            tax_applicable: Optional explicit tax flag
            tax_percentage: Optional explicit tax percentage
            is_bookable: Whether the item can be booked
            avl_days: Weekdays the item is available ("mon", "Monday", ...)
            avl_times: Availability windows, {"start": "HH:MM", "end": "HH:MM"}
            is_active: Initial active flag

        Returns:
            Item ID

        Raises:
            ValidationError: On invalid input, including both parents given
            NotFoundError: If the parent does not exist
            ConflictError: If the name is taken under the same parent
            InvalidConfigError: If the pricing payload is invalid
            MissingParentForInheritanceError: If the item would inherit tax
                without a parent
        """
        name = (name or "").strip()
        if not name:
            raise ValidationError("Item name is required")

        subcategory, category = self._require_parent(category_id, subcategory_id)
        self._check_unique_name(name, category_id, subcategory_id)

        price = self._check_base_price(base_price)
        days = normalize_avl_days(avl_days)
        times = normalize_avl_times(avl_times)

        ptype = parse_pricing_type(pricing_type)
        config = self._build_config(ptype, pricing_config, price)
        check_dynamic_within_availability(config, times)

        explicit_tax = tax_applicable is not None or tax_percentage is not None
        if explicit_tax:
            tax = self._own_tax(tax_applicable, tax_percentage, subcategory, category)
            own_applicable, own_percentage = tax.applicable, tax.percentage
        else:
            require_inheritance_parent("Item", category_id, subcategory_id)
            own_applicable, own_percentage = None, None

        item_id = self.db.create_item(
            name=name,
            category_id=category_id,
            subcategory_id=subcategory_id,
            description=description,
            base_price=price,
            pricing_type=ptype,
            pricing_config=config,
            is_tax_inherit=not explicit_tax,
            tax_applicable=own_applicable,
            tax_percentage=own_percentage,
            is_bookable=is_bookable,
            avl_days=days,
            avl_times=times,
            is_active=is_active,
        )
        logger.info("Created item %s '%s' (%s pricing)", item_id, name, ptype.value)
        return item_id

    def update_item(
        self,
        item_id: int,
        name: Optional[str] = None,
        description: Optional[str] = None,
        category_id: Optional[int] = None,
        subcategory_id: Optional[int] = None,
        base_price: Optional[Decimal] = None,
        pricing_type: Any = None,
        pricing_config: Optional[dict] = None,
        tax_applicable: Optional[bool] = None,
        tax_percentage: Optional[Decimal] = None,
        inherit_tax: bool = False,
        is_bookable: Optional[bool] = None,
        avl_days: Optional[Iterable[str]] = None,
        avl_times: Optional[Iterable[Any]] = None,
        is_active: Optional[bool] = None,
    ) -> None:
        """Partially update an item, applying the same rules as create.

        Giving ``category_id`` moves the item under that category and
        ``subcategory_id`` moves it under that subcategory. Changing only
        ``pricing_type`` replaces the stored config with an empty one, which
        TIERED, DISCOUNTED and DYNAMIC reject; changing only
        ``pricing_config`` validates it against the current type.

        Raises:
            The same errors as ``create_item``; NotFoundError if the item
            does not exist.
        """
        item = self.require_item(item_id)
        changes: dict = {}

        if category_id is not None and subcategory_id is not None:
            raise ValidationError(item_has_two_parents())

        target_category, target_subcategory = item.category_id, item.subcategory_id
        if category_id is not None:
            target_category, target_subcategory = category_id, None
        elif subcategory_id is not None:
            target_category, target_subcategory = None, subcategory_id
        subcategory, category = self._require_parent(target_category, target_subcategory)
        if (target_category, target_subcategory) != (item.category_id, item.subcategory_id):
            changes["category_id"] = target_category
            changes["subcategory_id"] = target_subcategory

        target_name = item.name
        if name is not None:
            target_name = name.strip()
            if not target_name:
                raise ValidationError("Item name is required")
            changes["name"] = target_name
        if "name" in changes or "category_id" in changes:
            self._check_unique_name(target_name, target_category, target_subcategory, exclude_id=item_id)

        if description is not None:
            changes["description"] = description

        price = item.base_price
        if base_price is not None:
            price = self._check_base_price(base_price)
            changes["base_price"] = price

        if is_bookable is not None:
            changes["is_bookable"] = is_bookable
        if avl_days is not None:
            changes["avl_days"] = normalize_avl_days(avl_days)
        times = item.avl_times
        if avl_times is not None:
            times = normalize_avl_times(avl_times)
            changes["avl_times"] = times

        config = item.pricing_config
        if pricing_type is not None or pricing_config is not None:
            ptype = parse_pricing_type(pricing_type) if pricing_type is not None else item.pricing_type
            if pricing_config is not None or ptype is not item.pricing_type:
                config = self._build_config(ptype, pricing_config, price)
                changes["pricing_type"] = ptype
                changes["pricing_config"] = config
        check_dynamic_within_availability(config, times)

        explicit_tax = tax_applicable is not None or tax_percentage is not None
        if inherit_tax and explicit_tax:
            raise ValidationError("Cannot both inherit tax and set tax_applicable/tax_percentage")
        if inherit_tax:
            require_inheritance_parent("Item", target_category, target_subcategory)
            changes.update(is_tax_inherit=True, tax_applicable=None, tax_percentage=None)
        elif explicit_tax:
            if tax_percentage is None and tax_applicable is True and not item.is_tax_inherit:
                tax_percentage = item.tax_percentage
            tax = self._own_tax(tax_applicable, tax_percentage, subcategory, category)
            changes.update(is_tax_inherit=False, tax_applicable=tax.applicable, tax_percentage=tax.percentage)
        elif item.is_tax_inherit:
            require_inheritance_parent("Item", target_category, target_subcategory)

        if is_active is not None:
            changes["is_active"] = is_active

        if changes:
            self.db.update_item(item_id, **changes)
            logger.info("Updated item %s: %s", item_id, ", ".join(sorted(changes)))

    def deactivate_item(self, item_id: int) -> None:
        """Deactivate an item.

        Raises:
            NotFoundError: If the item does not exist
        """
        self.require_item(item_id)
        self.db.update_item(item_id, is_active=False)
        logger.info("Deactivated item %s", item_id)

    def bulk_update_price_config(
        self,
        pricing_type: Any,
        payload: Optional[dict],
        category_id: Optional[int] = None,
        subcategory_id: Optional[int] = None,
        item_types: Optional[Iterable[Any]] = None,
    ) -> int:
        """Apply one pricing config to every item in a category or subcategory.

        A category scope covers its direct items and the items of its
        subcategories. Nothing is written unless every item in scope accepts
        the config.

        Args:
            pricing_type: Target pricing type
            payload: Raw pricing payload
            category_id: Category scope
            subcategory_id: Subcategory scope (exactly one scope is required)
            item_types: Only update items currently using one of these types

        Returns:
            Number of items updated

        Raises:
            ValidationError: If the scope is missing or ambiguous
            NotFoundError: If the scope does not exist
            InvalidConfigError: If the payload is invalid for any item in scope
        """
        if (category_id is None) == (subcategory_id is None):
            raise ValidationError("Provide exactly one of category_id or subcategory_id")
        self._require_parent(category_id, subcategory_id)

        ptype = parse_pricing_type(pricing_type)
        config = normalize_config(ptype, payload if payload is not None else {})

        if category_id is not None:
            items = self.db.list_items(category_id=category_id, include_subcategory_items=True)
        else:
            items = self.db.list_items(subcategory_id=subcategory_id)

        if item_types is not None:
            wanted = {parse_pricing_type(t) for t in item_types}
            items = [item for item in items if item.pricing_type in wanted]

        failures = []
        for item in items:
            try:
                check_dynamic_within_availability(config, item.avl_times)
            except InvalidConfigError as e:
                failures.append(f"item {item.id}: {e}")
        if failures:
            raise InvalidConfigError("Bulk update rejected; " + "; ".join(failures))

        count = self.db.update_items_pricing([(item.id, ptype, config) for item in items])
        logger.info("Bulk-updated pricing of %d items to %s", count, ptype.value)
        return count

    # Reads

    def list_items(
        self,
        category_id: Optional[int] = None,
        subcategory_id: Optional[int] = None,
        active_only: bool = False,
        search: Optional[str] = None,
        tax_applicable: Optional[bool] = None,
    ) -> list[Item]:
        """List items.

        Args:
            category_id: Only items directly under this category
            subcategory_id: Only items under this subcategory
            active_only: Only items whose own flag is active
            search: Case-insensitive substring of the name
            tax_applicable: Filter on the resolved (inherited) tax flag

        Returns:
            List of item entities
        """
        items = self.db.list_items(
            category_id=category_id,
            subcategory_id=subcategory_id,
            active_only=active_only,
            search=search,
        )
        if tax_applicable is not None:
            items = [item for item in items if self.resolve_item_tax(item).applicable == tax_applicable]
        return items

    def get_price_quote(
        self,
        item_id: int,
        current_time: Optional[datetime] = None,
        usage_hours: Optional[Decimal] = None,
        addon_ids: Optional[Iterable[int]] = None,
    ) -> PriceQuote:
        """Quote an item's price including tax and addons.

        Mandatory active addons are always included; selected addons must
        belong to the item and be active. Addons are not taxed. For bookable
        Tiered items without explicit usage, usage is the hours elapsed since
        the start of the confirmed booking covering ``current_time``.

        Args:
            item_id: Item ID
            current_time: Evaluation instant, naive values read as UTC (defaults to now)
            usage_hours: Usage for Tiered pricing
            addon_ids: Optional addon IDs selected by the customer

        Returns:
            PriceQuote

        Raises:
            NotFoundError: If the item does not exist
            ValidationError: If a selected addon is not an active addon of the item
        """
        item = self.require_item(item_id)
        subcategory, category = self._load_parents(item)

        tax = resolve_tax(item, subcategory, category)
        if subcategory is not None:
            active = is_effectively_active(item, subcategory=subcategory)
        else:
            active = is_effectively_active(item, category=category)

        current_time = to_naive_utc(current_time) if current_time is not None else utc_now()
        if usage_hours is None and item.is_bookable and item.pricing_type is PricingType.TIERED:
            usage_hours = self._booking_usage_hours(item, current_time)

        result = resolve_price(item, tax, PriceContext(current_time=current_time, usage_hours=usage_hours))

        addons = self._quote_addons(item, addon_ids)
        addons_total = round2(sum((addon.price for addon in addons), ZERO))

        return PriceQuote(
            item_id=item.id,
            applied_pricing_rule=result.applied_pricing_rule,
            base_price=result.base_price,
            addons_total=addons_total,
            addon_names=tuple(addon.name for addon in addons),
            discount=result.discount,
            tax_percentage=result.tax_percentage,
            tax_amount=result.tax_amount,
            grand_total=round2(result.grand_total + addons_total),
            is_available=result.is_available and active,
            is_active=active,
        )

    def _booking_usage_hours(self, item: Item, current_time: datetime) -> Optional[Decimal]:
        booking = BookingService(self.db).find_active_booking(item.id, current_time)
        if booking is None:
            return None
        seconds = Decimal(int((current_time - booking.start_time).total_seconds()))
        hours = seconds / _SECONDS_PER_HOUR
        logger.debug("Item %s usage from booking %s: %s hours", item.id, booking.id, hours)
        return hours

    def _quote_addons(self, item: Item, addon_ids: Optional[Iterable[int]]):
        active = self.db.list_addons(item.id, active_only=True)
        by_id = {addon.id: addon for addon in active}
        chosen = [addon for addon in active if addon.is_mandatory]

        for addon_id in addon_ids or ():
            addon = by_id.get(addon_id)
            if addon is None:
                raise ValidationError(f"Addon {addon_id} is not an active addon of item {item.id}")
            if addon not in chosen:
                chosen.append(addon)
        return chosen

