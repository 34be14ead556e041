"""Abstract database interface."""

from abc import ABC, abstractmethod
from typing import Any, Optional
from datetime import datetime
from decimal import Decimal

# Import entities directly to avoid circular import through domain services
from catalogit.domain.entities import (
    Addon,
    Booking,
    BookingStatus,
    Category,
    Item,
    PricingConfig,
    PricingType,
    Subcategory,
    TimeWindow,
)


class Database(ABC):
    """Abstract database interface for catalogit."""

    @abstractmethod
    def connect(self) -> None:
        """Connect to the database."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the database."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Initialize database schema (create tables)."""
        pass

    # Category operations
    @abstractmethod
    def create_category(
        self,
        name: str,
        description: Optional[str] = None,
        tax_applicable: bool = False,
        tax_percentage: Decimal = Decimal("0"),
        is_active: bool = True,
    ) -> int:
        """Create a category. Returns category ID."""
        pass

    @abstractmethod
    def get_category(self, category_id: int) -> Optional[Category]:
        """Get category by ID."""
        pass

    @abstractmethod
    def get_category_by_name(self, name: str) -> Optional[Category]:
        """Get category by exact name."""
        pass

    @abstractmethod
    def list_categories(self, active_only: bool = False) -> list[Category]:
        """List categories ordered by name."""
        pass

    @abstractmethod
    def update_category(self, category_id: int, reset_inherited: bool = False, **changes: Any) -> int:
        """Update category columns (name, description, tax_*, is_active).

        With ``reset_inherited`` the tax columns of inheriting descendants
        are nulled in the same commit. Returns the number of rows reset.
        """
        pass

    # Subcategory operations
    @abstractmethod
    def create_subcategory(
        self,
        category_id: int,
        name: str,
        description: Optional[str] = None,
        is_tax_inherit: bool = True,
        tax_applicable: Optional[bool] = None,
        tax_percentage: Optional[Decimal] = None,
        is_active: bool = True,
    ) -> int:
        """Create a subcategory. Returns subcategory ID."""
        pass

    @abstractmethod
    def get_subcategory(self, subcategory_id: int) -> Optional[Subcategory]:
        """Get subcategory by ID."""
        pass

    @abstractmethod
    def get_subcategory_by_name(self, category_id: int, name: str) -> Optional[Subcategory]:
        """Get subcategory by name within a category."""
        pass

    @abstractmethod
    def list_subcategories(
        self, category_id: Optional[int] = None, active_only: bool = False
    ) -> list[Subcategory]:
        """List subcategories, optionally filtered by category."""
        pass

    @abstractmethod
    def update_subcategory(self, subcategory_id: int, reset_inherited: bool = False, **changes: Any) -> int:
        """Update subcategory columns.

        With ``reset_inherited`` the tax columns of its inheriting items are
        nulled in the same commit. Returns the number of rows reset.
        """
        pass

    # Item operations
    @abstractmethod
    def create_item(
        self,
        name: str,
        category_id: Optional[int] = None,
        subcategory_id: Optional[int] = None,
        description: Optional[str] = None,
        base_price: Decimal = Decimal("0"),
        pricing_type: PricingType = PricingType.STATIC,
        pricing_config: Optional[PricingConfig] = None,
        is_tax_inherit: bool = True,
        tax_applicable: Optional[bool] = None,
        tax_percentage: Optional[Decimal] = None,
        is_bookable: bool = False,
        avl_days: tuple[str, ...] = (),
        avl_times: tuple[TimeWindow, ...] = (),
        is_active: bool = True,
    ) -> int:
        """Create an item. Returns item ID."""
        pass

    @abstractmethod
    def get_item(self, item_id: int) -> Optional[Item]:
        """Get item by ID."""
        pass

    @abstractmethod
    def find_item_by_name(
        self, name: str, category_id: Optional[int], subcategory_id: Optional[int]
    ) -> Optional[Item]:
        """Find an item by name under exactly the given parent."""
        pass

    @abstractmethod
    def list_items(
        self,
        category_id: Optional[int] = None,
        subcategory_id: Optional[int] = None,
        active_only: bool = False,
        search: Optional[str] = None,
        include_subcategory_items: bool = False,
    ) -> list[Item]:
        """List items with optional filters.

        Args:
            category_id: Items directly under this category
            subcategory_id: Items under this subcategory
            active_only: Only items whose own is_active flag is set
            search: Case-insensitive substring of the item name
            include_subcategory_items: With category_id, also include items
                of the category's subcategories
        """
        pass

    @abstractmethod
    def update_item(self, item_id: int, **changes: Any) -> None:
        """Update item columns. pricing_config and avl_times take domain values."""
        pass

    @abstractmethod
    def update_items_pricing(
        self, updates: list[tuple[int, PricingType, PricingConfig]]
    ) -> int:
        """Set pricing type and config for several items in one commit."""
        pass

    # Cascades
    @abstractmethod
    def deactivate_category_tree(self, category_id: int) -> dict[str, int]:
        """Deactivate a category, its subcategories and all their items.

        Returns counts keyed by "subcategories" and "items".
        """
        pass

    @abstractmethod
    def deactivate_subcategory_tree(self, subcategory_id: int) -> int:
        """Deactivate a subcategory and its items. Returns item count."""
        pass

    @abstractmethod
    def reset_inherited_tax(
        self, category_id: Optional[int] = None, subcategory_id: Optional[int] = None
    ) -> int:
        """Null the tax columns of inheriting descendants. Returns rows touched."""
        pass

    # Addon operations
    @abstractmethod
    def create_addon(
        self,
        item_id: int,
        name: str,
        price: Decimal,
        is_mandatory: bool = False,
        is_active: bool = True,
    ) -> int:
        """Create an addon. Returns addon ID."""
        pass

    @abstractmethod
    def get_addon(self, addon_id: int) -> Optional[Addon]:
        """Get addon by ID."""
        pass

    @abstractmethod
    def list_addons(self, item_id: int, active_only: bool = False) -> list[Addon]:
        """List addons of an item."""
        pass

    @abstractmethod
    def update_addon(self, addon_id: int, **changes: Any) -> None:
        """Update addon columns."""
        pass

    # Booking operations
    @abstractmethod
    def create_booking(
        self,
        item_id: int,
        start_time: datetime,
        end_time: datetime,
        status: BookingStatus = BookingStatus.CONFIRMED,
    ) -> int:
        """Create a booking. Returns booking ID."""
        pass

    @abstractmethod
    def get_booking(self, booking_id: int) -> Optional[Booking]:
        """Get booking by ID."""
        pass

    @abstractmethod
    def list_bookings(
        self,
        item_id: int,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        include_cancelled: bool = False,
    ) -> list[Booking]:
        """List bookings of an item overlapping [start, end), ordered by start."""
        pass

    @abstractmethod
    def update_booking_status(self, booking_id: int, status: BookingStatus) -> None:
        """Change a booking's status."""
        pass
