"""Tax validation and inheritance resolution.

Inheriting entities store no tax of their own; the effective setting is
resolved from the parent chain at read time, so a parent change is visible
to every inheriting descendant immediately.
"""

from decimal import Decimal
from typing import Optional

from catalogit.domain.entities import Category, Item, Subcategory, TaxSetting
from catalogit.domain.errors import MissingParentForInheritanceError, ValidationError, missing_tax_parent
from catalogit.utils.money import HUNDRED, round2, to_money

_ZERO = Decimal("0")


def _own_setting(entity) -> TaxSetting:
    """Read an entity's own tax fields, treating None as 'no tax'."""
    if not entity.tax_applicable or entity.tax_percentage is None:
        return TaxSetting(applicable=False, percentage=round2(_ZERO))
    return TaxSetting(applicable=True, percentage=round2(entity.tax_percentage))


def resolve_tax(
    item: Item,
    subcategory: Optional[Subcategory] = None,
    category: Optional[Category] = None,
) -> TaxSetting:
    """Resolve the effective tax for an item.

    Args:
        item: The item being priced
        subcategory: The item's subcategory, if it belongs to one
        category: The category at the top of the chain: the item's own
            category, or its subcategory's category

    Returns:
        Effective TaxSetting. Precedence is item-own, subcategory-own,
        subcategory's category, item's direct category, then no tax.
    """
    if not item.is_tax_inherit:
        return _own_setting(item)

    if subcategory is not None:
        if not subcategory.is_tax_inherit:
            return _own_setting(subcategory)
        if category is not None:
            return _own_setting(category)

    if category is not None:
        return _own_setting(category)

    return TaxSetting.none()


def resolve_category_tax(category: Category) -> TaxSetting:
    """Effective tax of a category. Categories always own their setting."""
    return _own_setting(category)


def resolve_subcategory_tax(subcategory: Subcategory, category: Optional[Category]) -> TaxSetting:
    """Resolve the effective tax for a subcategory."""
    if not subcategory.is_tax_inherit:
        return _own_setting(subcategory)
    if category is not None:
        return _own_setting(category)
    return TaxSetting.none()


def validate_tax_setting(applicable: Optional[bool], percentage) -> TaxSetting:
    """Validate explicit tax input and return a consistent TaxSetting.

    Args:
        applicable: Whether tax applies, or None to infer it from percentage
        percentage: Tax percentage, or None

    Returns:
        TaxSetting satisfying ``percentage > 0 => applicable`` and
        ``not applicable => percentage == 0``

    Raises:
        ValidationError: If the combination is inconsistent or out of range
    """
    pct = round2(percentage) if percentage is not None else None

    if pct is not None and (pct < 0 or pct > HUNDRED):
        raise ValidationError("tax_percentage must be between 0 and 100")

    if applicable is None:
        if pct is None:
            raise ValidationError("tax_applicable or tax_percentage is required")
        applicable = pct > 0

    if applicable:
        if pct is None or pct <= 0:
            raise ValidationError("tax_percentage must be greater than 0 when tax_applicable is true")
        return TaxSetting(applicable=True, percentage=pct)

    if pct is not None and pct > 0:
        raise ValidationError("If tax_applicable is false, tax_percentage must be 0")
    return TaxSetting(applicable=False, percentage=round2(_ZERO))


def require_inheritance_parent(entity: str, *parents) -> None:
    """Block a write that would leave an inheriting entity without a parent.

    Raises:
        MissingParentForInheritanceError: If every given parent is None
    """
    if all(parent is None for parent in parents):
        raise MissingParentForInheritanceError(missing_tax_parent(entity))


def tax_amount(base, tax: TaxSetting) -> Decimal:
    """Unrounded tax on a base amount; zero when tax does not apply."""
    if not tax.applicable:
        return _ZERO
    return to_money(base) * tax.percentage / HUNDRED
