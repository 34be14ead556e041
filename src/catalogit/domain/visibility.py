"""Effective active status of catalog items."""

from typing import Optional

from catalogit.domain.entities import Category, Item, Subcategory


def is_effectively_active(
    item: Item,
    subcategory: Optional[Subcategory] = None,
    category: Optional[Category] = None,
) -> bool:
    """Return True if the item and its directly attached parent are active.

    Only the parents passed in are checked. For an item under a subcategory,
    the subcategory's own category is not consulted; deactivating a category
    already cascades to its subcategories.
    """
    if not item.is_active:
        return False
    if subcategory is not None and not subcategory.is_active:
        return False
    if category is not None and not category.is_active:
        return False
    return True
