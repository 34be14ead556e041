"""Addon domain service."""

import logging
from decimal import Decimal
from typing import Optional

from catalogit.database.base import Database
from catalogit.domain.entities import Addon
from catalogit.domain.errors import (
    NotFoundError,
    ValidationError,
    addon_not_found,
    item_not_found,
)
from catalogit.utils.money import round2

logger = logging.getLogger(__name__)


class AddonService:
    """Service for managing item addons."""

    def __init__(self, db: Database):
        """Initialize addon service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_addon(
        self,
        item_id: int,
        name: str,
        price: Decimal,
        is_mandatory: bool = False,
        is_active: bool = True,
    ) -> int:
        """Create an addon for an item.

        Args:
            item_id: Item the addon is sold with
            name: Addon name
            price: Non-negative price, rounded to cents
            is_mandatory: Whether every quote of the item includes it
            is_active: Initial active flag

        Returns:
            Addon ID

        Raises:
            NotFoundError: If the item does not exist
            ValidationError: If the name is empty or the price is negative
        """
        name = (name or "").strip()
        if not name:
            raise ValidationError("Addon name is required")

        amount = round2(price)
        if amount < 0:
            raise ValidationError("Addon price must be >= 0")

        if self.db.get_item(item_id) is None:
            raise NotFoundError(item_not_found(item_id))

        addon_id = self.db.create_addon(
            item_id=item_id,
            name=name,
            price=amount,
            is_mandatory=is_mandatory,
            is_active=is_active,
        )
        logger.info("Created addon %s '%s' for item %s", addon_id, name, item_id)
        return addon_id

    def get_addon(self, addon_id: int) -> Optional[Addon]:
        """Get addon by ID."""
        return self.db.get_addon(addon_id)

    def list_addons(self, item_id: int, active_only: bool = True) -> list[Addon]:
        """List addons of an item.

        Raises:
            NotFoundError: If the item does not exist
        """
        if self.db.get_item(item_id) is None:
            raise NotFoundError(item_not_found(item_id))
        return self.db.list_addons(item_id, active_only=active_only)

    def deactivate_addon(self, addon_id: int) -> None:
        """Deactivate an addon so it is no longer offered or charged.

        Raises:
            NotFoundError: If the addon does not exist
        """
        if self.db.get_addon(addon_id) is None:
            raise NotFoundError(addon_not_found(addon_id))
        self.db.update_addon(addon_id, is_active=False)
