"""Subcategory domain service."""

import logging
from decimal import Decimal
from typing import Optional

from catalogit.database.base import Database
from catalogit.domain.entities import Subcategory, TaxSetting
from catalogit.domain.errors import (
    ConflictError,
    NotFoundError,
    ValidationError,
    category_not_found,
    duplicate_subcategory_name,
    subcategory_not_found,
)
from catalogit.domain.tax import resolve_subcategory_tax, validate_tax_setting

logger = logging.getLogger(__name__)


class SubcategoryService:
    """Service for managing subcategories."""

    def __init__(self, db: Database):
        """Initialize subcategory service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_subcategory(
        self,
        category_id: int,
        name: str,
        description: Optional[str] = None,
        tax_applicable: Optional[bool] = None,
        tax_percentage: Optional[Decimal] = None,
        is_active: bool = True,
    ) -> int:
        """Create a subcategory.

        Giving either tax field makes the subcategory own its tax. Otherwise
        it inherits from its category and stores no tax of its own.

        Args:
            category_id: Parent category ID
            name: Subcategory name, unique within the category
            description: Optional description
            tax_applicable: Optional explicit tax flag
            tax_percentage: Optional explicit tax percentage
            is_active: Initial active flag

        Returns:
            Subcategory ID

        Raises:
            NotFoundError: If the category does not exist
            ConflictError: If the name is already used in the category
            ValidationError: If the explicit tax setting is inconsistent
        """
        name = (name or "").strip()
        if not name:
            raise ValidationError("Name must not be empty")

        if self.db.get_category(category_id) is None:
            raise NotFoundError(category_not_found(category_id))

        if self.db.get_subcategory_by_name(category_id, name) is not None:
            raise ConflictError(duplicate_subcategory_name(name, category_id))

        explicit = tax_applicable is not None or tax_percentage is not None
        if explicit:
            if tax_applicable is False and tax_percentage is None:
                tax_percentage = Decimal("0")
            tax = validate_tax_setting(tax_applicable, tax_percentage)
            own_applicable, own_percentage = tax.applicable, tax.percentage
        else:
            own_applicable, own_percentage = None, None

        subcategory_id = self.db.create_subcategory(
            category_id=category_id,
            name=name,
            description=description,
            is_tax_inherit=not explicit,
            tax_applicable=own_applicable,
            tax_percentage=own_percentage,
            is_active=is_active,
        )
        logger.info(
            "Created subcategory %s '%s' in category %s (inherits tax: %s)",
            subcategory_id,
            name,
            category_id,
            not explicit,
        )
        return subcategory_id

    def get_subcategory(self, subcategory_id: int) -> Optional[Subcategory]:
        """Get subcategory by ID.

        Args:
            subcategory_id: Subcategory ID

        Returns:
            Subcategory entity or None if not found
        """
        return self.db.get_subcategory(subcategory_id)

    def require_subcategory(self, subcategory_id: int) -> Subcategory:
        """Get subcategory by ID, raising NotFoundError if it does not exist."""
        subcategory = self.db.get_subcategory(subcategory_id)
        if subcategory is None:
            raise NotFoundError(subcategory_not_found(subcategory_id))
        return subcategory

    def list_subcategories(
        self, category_id: Optional[int] = None, active_only: bool = False
    ) -> list[Subcategory]:
        """List subcategories.

        Args:
            category_id: Optional category ID to filter by
            active_only: Only return active subcategories

        Returns:
            List of subcategory entities
        """
        return self.db.list_subcategories(category_id=category_id, active_only=active_only)

    def get_resolved_tax(self, subcategory_id: int) -> TaxSetting:
        """Effective tax of a subcategory, following inheritance.

        Raises:
            NotFoundError: If the subcategory does not exist
        """
        subcategory = self.require_subcategory(subcategory_id)
        category = self.db.get_category(subcategory.category_id)
        return resolve_subcategory_tax(subcategory, category)

    def update_subcategory(
        self,
        subcategory_id: int,
        name: Optional[str] = None,
        description: Optional[str] = None,
        category_id: Optional[int] = None,
        tax_applicable: Optional[bool] = None,
        tax_percentage: Optional[Decimal] = None,
        inherit_tax: bool = False,
        is_active: Optional[bool] = None,
    ) -> None:
        """Update subcategory fields.

        Args:
            subcategory_id: Subcategory ID to update
            name: Optional new name
            description: Optional new description
            category_id: Optional new parent category
            tax_applicable: Optional explicit tax flag
            tax_percentage: Optional explicit tax percentage
            inherit_tax: Switch back to inheriting tax from the category
            is_active: Optional new active flag; False deactivates its items too

        Raises:
            NotFoundError: If the subcategory or new category does not exist
            ConflictError: If the name is already used in the target category
            ValidationError: If tax arguments conflict or are inconsistent
        """
        subcategory = self.require_subcategory(subcategory_id)
        changes: dict = {}

        target_category = subcategory.category_id
        if category_id is not None and category_id != subcategory.category_id:
            if self.db.get_category(category_id) is None:
                raise NotFoundError(category_not_found(category_id))
            target_category = category_id
            changes["category_id"] = category_id

        target_name = subcategory.name
        if name is not None:
            target_name = name.strip()
            if not target_name:
                raise ValidationError("Name must not be empty")
            changes["name"] = target_name

        if "name" in changes or "category_id" in changes:
            clash = self.db.get_subcategory_by_name(target_category, target_name)
            if clash is not None and clash.id != subcategory_id:
                raise ConflictError(duplicate_subcategory_name(target_name, target_category))

        if description is not None:
            changes["description"] = description

        explicit = tax_applicable is not None or tax_percentage is not None
        if inherit_tax and explicit:
            raise ValidationError("Cannot both inherit tax and set tax_applicable/tax_percentage")

        if inherit_tax:
            changes.update(is_tax_inherit=True, tax_applicable=None, tax_percentage=None)
        elif explicit:
            if tax_percentage is None:
                if tax_applicable is False:
                    tax_percentage = Decimal("0")
                elif subcategory.tax_percentage is not None:
                    tax_percentage = subcategory.tax_percentage
            tax = validate_tax_setting(tax_applicable, tax_percentage)
            changes.update(
                is_tax_inherit=False,
                tax_applicable=tax.applicable,
                tax_percentage=tax.percentage,
            )

        if is_active is True:
            changes["is_active"] = True

        tax_changed = inherit_tax or explicit or "category_id" in changes
        if changes:
            reset = self.db.update_subcategory(subcategory_id, reset_inherited=tax_changed, **changes)
            if tax_changed:
                logger.info("Subcategory %s tax changed; reset %d inheriting items", subcategory_id, reset)

        if is_active is False:
            self.deactivate_subcategory(subcategory_id)

    def deactivate_subcategory(self, subcategory_id: int) -> int:
        """Deactivate a subcategory and its items.

        Returns:
            Number of items deactivated

        Raises:
            NotFoundError: If the subcategory does not exist
        """
        self.require_subcategory(subcategory_id)
        count = self.db.deactivate_subcategory_tree(subcategory_id)
        logger.info("Deactivated subcategory %s and %d items", subcategory_id, count)
        return count
