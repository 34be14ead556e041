"""Domain model entities for catalogit.

These are pure data classes representing business concepts, independent of
database schema. Services and the pricing engine work only with these, so
the persistence layer can change without touching business rules.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import ClassVar, Optional, Union


class PricingType(Enum):
    """The five mutually exclusive pricing strategies."""

    STATIC = "STATIC"
    TIERED = "TIERED"
    COMPLIMENTARY = "COMPLIMENTARY"
    DISCOUNTED = "DISCOUNTED"
    DYNAMIC = "DYNAMIC"


# Single-letter keys used by older clients (A=Static ... E=Dynamic)
LEGACY_PRICING_KEYS = {
    "A": PricingType.STATIC,
    "B": PricingType.TIERED,
    "C": PricingType.COMPLIMENTARY,
    "D": PricingType.DISCOUNTED,
    "E": PricingType.DYNAMIC,
}


class BookingStatus(Enum):
    """Booking lifecycle states."""

    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    COMPLETED = "completed"


@dataclass(frozen=True)
class TaxSetting:
    """Effective tax for an entity."""

    applicable: bool
    percentage: Decimal

    @classmethod
    def none(cls) -> "TaxSetting":
        return cls(applicable=False, percentage=Decimal("0"))


@dataclass(frozen=True)
class TimeWindow:
    """Time-of-day window on a 24-hour HH:MM clock, start < end."""

    start: str
    end: str


@dataclass(frozen=True)
class PriceWindow(TimeWindow):
    """Time-of-day window with the price charged inside it."""

    price: Decimal = Decimal("0.00")


@dataclass(frozen=True)
class Tier:
    """Usage tier in hours; ``upto`` of None means unbounded."""

    upto: Optional[Union[int, Decimal]]
    price: Decimal


@dataclass(frozen=True)
class StaticConfig:
    """Static pricing. Item.base_price is authoritative; amount is ignored."""

    pricing_type: ClassVar[PricingType] = PricingType.STATIC
    amount: Optional[Decimal] = None


@dataclass(frozen=True)
class TieredConfig:
    """Tiered pricing by usage hours. Tiers are sorted, unbounded last."""

    pricing_type: ClassVar[PricingType] = PricingType.TIERED
    tiers: tuple[Tier, ...] = ()


@dataclass(frozen=True)
class ComplimentaryConfig:
    """Complimentary pricing; always free."""

    pricing_type: ClassVar[PricingType] = PricingType.COMPLIMENTARY


@dataclass(frozen=True)
class DiscountedConfig:
    """Discount applied against Item.base_price."""

    pricing_type: ClassVar[PricingType] = PricingType.DISCOUNTED
    val: Decimal = Decimal("0.00")
    is_perc: bool = False


@dataclass(frozen=True)
class DynamicConfig:
    """Time-of-day pricing. Windows are sorted by start and never overlap."""

    pricing_type: ClassVar[PricingType] = PricingType.DYNAMIC
    windows: tuple[PriceWindow, ...] = ()


PricingConfig = Union[StaticConfig, TieredConfig, ComplimentaryConfig, DiscountedConfig, DynamicConfig]


@dataclass(frozen=True)
class Category:
    """Root catalog node. Categories always own their tax setting."""

    id: int
    name: str
    description: Optional[str]
    tax_applicable: bool
    tax_percentage: Decimal
    is_active: bool
    created_at: datetime


@dataclass(frozen=True)
class Subcategory:
    """Subcategory domain entity; tax fields are None while inheriting."""

    id: int
    category_id: int
    name: str
    description: Optional[str]
    is_tax_inherit: bool
    tax_applicable: Optional[bool]
    tax_percentage: Optional[Decimal]
    is_active: bool
    created_at: datetime


@dataclass(frozen=True)
class Item:
    """Catalog item domain entity."""

    id: int
    name: str
    category_id: Optional[int]
    subcategory_id: Optional[int]
    description: Optional[str]
    base_price: Decimal
    pricing_type: PricingType
    pricing_config: Optional[PricingConfig]
    is_tax_inherit: bool
    tax_applicable: Optional[bool]
    tax_percentage: Optional[Decimal]
    is_bookable: bool
    is_active: bool
    created_at: datetime
    avl_days: tuple[str, ...] = ()
    avl_times: tuple[TimeWindow, ...] = ()


@dataclass(frozen=True)
class Addon:
    """Optional or mandatory extra sold with an item. Addons are not taxed."""

    id: int
    item_id: int
    name: str
    price: Decimal
    is_mandatory: bool
    is_active: bool
    created_at: datetime


@dataclass(frozen=True)
class Booking:
    """Reservation of a bookable item. Times are naive UTC."""

    id: int
    item_id: int
    start_time: datetime
    end_time: datetime
    status: BookingStatus
    created_at: datetime


@dataclass(frozen=True)
class AppliedPricingRule:
    """Which pricing rule produced a base price."""

    pricing_type: PricingType
    detail: Optional[str] = None

    def describe(self) -> str:
        if self.detail:
            return f"{self.pricing_type.value} ({self.detail})"
        return self.pricing_type.value


@dataclass(frozen=True)
class PriceResult:
    """Output of the price resolution engine. Money fields are rounded."""

    base_price: Decimal
    discount: Decimal
    is_available: bool
    applied_pricing_rule: AppliedPricingRule
    tax_percentage: Decimal
    tax_amount: Decimal
    grand_total: Decimal


@dataclass(frozen=True)
class PriceQuote:
    """Client-facing price of an item including addons and active status."""

    item_id: int
    applied_pricing_rule: AppliedPricingRule
    base_price: Decimal
    addons_total: Decimal
    addon_names: tuple[str, ...]
    discount: Decimal
    tax_percentage: Decimal
    tax_amount: Decimal
    grand_total: Decimal
    is_available: bool
    is_active: bool

    def to_dict(self) -> dict:
        """Render with the field names the API layer exposes."""
        return {
            "appliedPricingRule": self.applied_pricing_rule.describe(),
            "basePrice": str(self.base_price),
            "addonsTotal": str(self.addons_total),
            "addonsName": list(self.addon_names),
            "discount": str(self.discount),
            "taxPercentage": str(self.tax_percentage),
            "taxAmount": str(self.tax_amount),
            "grandTotal": str(self.grand_total),
            "isAvailable": self.is_available,
            "is_active": self.is_active,
        }


@dataclass(frozen=True)
class TimeSlot:
    """A free booking slot on a specific day."""

    start: datetime
    end: datetime


@dataclass(frozen=True)
class SlotAvailability:
    """Free slots for an item on one day."""

    item_id: int
    day: date
    weekday: str
    slots: tuple[TimeSlot, ...] = ()
    message: Optional[str] = None
    available_days: tuple[str, ...] = field(default_factory=tuple)
