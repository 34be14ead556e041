"""Category domain service."""

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from catalogit.database.base import Database
from catalogit.domain.entities import Category, Item, Subcategory
from catalogit.domain.errors import ConflictError, NotFoundError, ValidationError, category_not_found
from catalogit.domain.tax import validate_tax_setting

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CategoryDetail:
    """A category together with its subcategories and direct items."""

    category: Category
    subcategories: tuple[Subcategory, ...]
    items: tuple[Item, ...]


class CategoryService:
    """Service for managing categories."""

    def __init__(self, db: Database):
        """Initialize category service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_category(
        self,
        name: str,
        description: Optional[str] = None,
        tax_applicable: Optional[bool] = None,
        tax_percentage: Optional[Decimal] = None,
        is_active: bool = True,
    ) -> int:
        """Create a category.

        Categories are the root of the tree, so they always own their tax
        setting. With neither tax field given the category is untaxed.

        Args:
            name: Category name
            description: Optional description
            tax_applicable: Whether tax applies (inferred from percentage if None)
            tax_percentage: Tax percentage between 0 and 100
            is_active: Initial active flag

        Returns:
            Category ID

        Raises:
            ValidationError: If the name is empty or the tax setting is inconsistent
            ConflictError: If a category with the same name exists
        """
        name = _clean_name(name)
        if self.db.get_category_by_name(name) is not None:
            raise ConflictError(f"Category '{name}' already exists")

        if tax_applicable is None and tax_percentage is None:
            tax_applicable = False
        tax = validate_tax_setting(tax_applicable, tax_percentage)

        category_id = self.db.create_category(
            name=name,
            description=description,
            tax_applicable=tax.applicable,
            tax_percentage=tax.percentage,
            is_active=is_active,
        )
        logger.info("Created category %s '%s'", category_id, name)
        return category_id

    def get_category(self, category_id: int) -> Optional[Category]:
        """Get category by ID.

        Args:
            category_id: Category ID

        Returns:
            Category entity or None if not found
        """
        return self.db.get_category(category_id)

    def require_category(self, category_id: int) -> Category:
        """Get category by ID, raising NotFoundError if it does not exist."""
        category = self.db.get_category(category_id)
        if category is None:
            raise NotFoundError(category_not_found(category_id))
        return category

    def get_category_by_name(self, name: str) -> Optional[Category]:
        """Get category by exact name."""
        return self.db.get_category_by_name(name)

    def list_categories(self, active_only: bool = False) -> list[Category]:
        """List categories.

        Args:
            active_only: Only return active categories

        Returns:
            List of category entities ordered by name
        """
        return self.db.list_categories(active_only=active_only)

    def get_category_detail(self, category_id: int) -> CategoryDetail:
        """Get a category with its subcategories and direct items.

        Raises:
            NotFoundError: If the category does not exist
        """
        category = self.require_category(category_id)
        return CategoryDetail(
            category=category,
            subcategories=tuple(self.db.list_subcategories(category_id=category_id)),
            items=tuple(self.db.list_items(category_id=category_id)),
        )

    def update_category(
        self,
        category_id: int,
        name: Optional[str] = None,
        description: Optional[str] = None,
        tax_applicable: Optional[bool] = None,
        tax_percentage: Optional[Decimal] = None,
        is_active: Optional[bool] = None,
    ) -> None:
        """Update category fields.

        A tax change resets the stored tax of every inheriting subcategory
        and item below this category. Setting ``is_active=False`` deactivates
        the whole subtree.

        Args:
            category_id: Category ID to update
            name: Optional new name
            description: Optional new description
            tax_applicable: Optional new tax flag
            tax_percentage: Optional new tax percentage
            is_active: Optional new active flag

        Raises:
            NotFoundError: If the category does not exist
            ConflictError: If the new name is taken
            ValidationError: If the resulting tax setting is inconsistent
        """
        category = self.require_category(category_id)
        changes: dict = {}

        if name is not None:
            name = _clean_name(name)
            existing = self.db.get_category_by_name(name)
            if existing is not None and existing.id != category_id:
                raise ConflictError(f"Category '{name}' already exists")
            changes["name"] = name

        if description is not None:
            changes["description"] = description

        tax_changed = tax_applicable is not None or tax_percentage is not None
        if tax_changed:
            if tax_percentage is None:
                # Turning tax off implies 0; turning it on keeps the current rate
                tax_percentage = Decimal("0") if tax_applicable is False else category.tax_percentage
            tax = validate_tax_setting(tax_applicable, tax_percentage)
            changes["tax_applicable"] = tax.applicable
            changes["tax_percentage"] = tax.percentage

        if is_active is True:
            changes["is_active"] = True

        if changes:
            # The category row and its inheriting descendants change in one commit
            reset = self.db.update_category(category_id, reset_inherited=tax_changed, **changes)
            if tax_changed:
                logger.info("Category %s tax changed; reset %d inheriting rows", category_id, reset)

        if is_active is False:
            self.deactivate_category(category_id)

    def deactivate_category(self, category_id: int) -> dict[str, int]:
        """Deactivate a category and everything beneath it.

        Returns:
            Counts of deactivated subcategories and items

        Raises:
            NotFoundError: If the category does not exist
        """
        self.require_category(category_id)
        counts = self.db.deactivate_category_tree(category_id)
        logger.info(
            "Deactivated category %s with %d subcategories and %d items",
            category_id,
            counts["subcategories"],
            counts["items"],
        )
        return counts


def _clean_name(name: Optional[str]) -> str:
    cleaned = (name or "").strip()
    if not cleaned:
        raise ValidationError("Name must not be empty")
    return cleaned
