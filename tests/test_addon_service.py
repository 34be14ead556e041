"""Tests for AddonService."""

import pytest
from decimal import Decimal

from catalogit.domain.errors import InvalidNumericInputError, NotFoundError, ValidationError


@pytest.fixture
def item_id(item_service, taxed_category):
    """An item to attach addons to."""
    return item_service.create_item(name="Margherita", category_id=taxed_category.id, base_price=Decimal("300"))


def test_create_addon(addon_service, item_id):
    addon_id = addon_service.create_addon(item_id, "Extra Cheese", Decimal("49.995"))

    addon = addon_service.get_addon(addon_id)
    assert addon.item_id == item_id
    assert addon.name == "Extra Cheese"
    assert addon.price == Decimal("50.00")
    assert addon.is_mandatory is False
    assert addon.is_active is True


def test_create_mandatory_addon(addon_service, item_id):
    addon_id = addon_service.create_addon(item_id, "Packaging", 10, is_mandatory=True)
    assert addon_service.get_addon(addon_id).is_mandatory is True


def test_create_addon_validation(addon_service, item_id):
    with pytest.raises(ValidationError, match="name is required"):
        addon_service.create_addon(item_id, "  ", 10)
    with pytest.raises(ValidationError, match=">= 0"):
        addon_service.create_addon(item_id, "Refund", -5)
    with pytest.raises(InvalidNumericInputError):
        addon_service.create_addon(item_id, "Cheese", "lots")


def test_create_addon_missing_item(addon_service):
    with pytest.raises(NotFoundError, match="Item 404 not found"):
        addon_service.create_addon(404, "Cheese", 10)


def test_list_and_deactivate(addon_service, item_id):
    cheese = addon_service.create_addon(item_id, "Extra Cheese", 50)
    olives = addon_service.create_addon(item_id, "Olives", 30)

    addon_service.deactivate_addon(olives)

    assert [a.id for a in addon_service.list_addons(item_id)] == [cheese]
    assert [a.id for a in addon_service.list_addons(item_id, active_only=False)] == [cheese, olives]


def test_list_addons_missing_item(addon_service):
    with pytest.raises(NotFoundError):
        addon_service.list_addons(404)


def test_deactivate_missing_addon(addon_service):
    with pytest.raises(NotFoundError, match="Addon 9 not found"):
        addon_service.deactivate_addon(9)
